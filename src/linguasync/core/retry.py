"""Bounded retry with exponential backoff for async provider calls."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from rich.markup import escape
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from linguasync.core.config import RetryPolicy
from linguasync.utils.console import console

T = TypeVar("T")

DEFAULT_POLICY = RetryPolicy()

# Substrings that mark a server-side failure worth retrying.
_RETRYABLE_TOKENS = ("500", "503")


def is_retryable_error(error: BaseException) -> bool:
    """Return True if the error message indicates a server-side condition."""
    message = str(error)
    if "internal error" in message.lower():
        return True
    return any(token in message for token in _RETRYABLE_TOKENS)


def _warn_retry(max_attempts: int) -> Callable[[RetryCallState], None]:
    def before_sleep(state: RetryCallState) -> None:
        error = state.outcome.exception() if state.outcome else None
        delay = state.next_action.sleep if state.next_action else 0.0
        console.print(
            f"[yellow]Provider call failed (attempt {state.attempt_number}/{max_attempts}), "
            f"retrying in {delay:g}s:[/yellow] {escape(str(error))}"
        )

    return before_sleep


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy = DEFAULT_POLICY,
    is_retryable: Callable[[BaseException], bool] = is_retryable_error,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Run an async operation, retrying classified failures with backoff.

    Non-retryable failures propagate on first occurrence. Retryable ones
    propagate once ``policy.max_attempts`` attempts have been made. The
    wait before attempt ``i + 1`` is
    ``initial_delay * backoff_multiplier ** (i - 1)``.

    Args:
        operation: Zero-argument factory returning a fresh awaitable per attempt.
        policy: Attempt count and backoff settings.
        is_retryable: Classifier deciding whether a failure may be retried.
        sleep: Awaitable delay function, injectable for tests.

    Returns:
        The operation's result from the first successful attempt.
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=wait_exponential(
            multiplier=policy.initial_delay, exp_base=policy.backoff_multiplier
        ),
        retry=retry_if_exception(is_retryable),
        before_sleep=_warn_retry(policy.max_attempts),
        sleep=sleep,
        reraise=True,
    )
    return await retrying(operation)
