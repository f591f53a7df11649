"""Unified async provider client via LiteLLM.

Every remote call (Gemini or DeepSeek) goes through ``acomplete``, which
translates transport failures into TransientProviderError or
PermanentProviderError with the HTTP status embedded in the message.
"""

from __future__ import annotations

import litellm

from linguasync.core.errors import PermanentProviderError, ProviderError, TransientProviderError
from linguasync.core.retry import is_retryable_error

_TRANSIENT_STATUS = {500, 503}


def _wrap_error(error: Exception, model: str) -> ProviderError:
    """Classify a transport exception into the provider error taxonomy."""
    status = getattr(error, "status_code", None)
    if not isinstance(status, int):
        status = None
    prefix = f"{model} request failed" + (f" [{status}]" if status else "")
    message = f"{prefix}: {error}"
    if status in _TRANSIENT_STATUS or is_retryable_error(error):
        return TransientProviderError(message, status_code=status)
    return PermanentProviderError(message, status_code=status)


async def acomplete(
    messages: list[dict],
    model: str,
    api_key: str,
    timeout: float | None = None,
    **kwargs: object,
):
    """Send one chat completion request via LiteLLM.

    Args:
        messages: Chat messages in OpenAI format. Content may be a string or
            a list of parts (text / file).
        model: LiteLLM model string (e.g. "gemini/gemini-2.5-flash").
        api_key: Provider API key.
        timeout: Request timeout in seconds, or None for the transport default.
        **kwargs: Additional kwargs passed to litellm.acompletion
            (response_format, modalities, audio, max_tokens...).

    Returns:
        The LiteLLM response object.

    Raises:
        TransientProviderError: On 500/503 or "internal error" failures.
        PermanentProviderError: On any other transport failure.
    """
    try:
        return await litellm.acompletion(
            model=model,
            messages=messages,
            api_key=api_key,
            timeout=timeout,
            **kwargs,
        )
    except Exception as e:
        raise _wrap_error(e, model) from e


def _get(obj, key: str, default=None):
    """Get a value from a dict or object attribute."""
    if obj is None:
        return default
    if isinstance(obj, dict):
        return obj.get(key, default)
    return getattr(obj, key, default)


def _first_message(response):
    choices = _get(response, "choices") or []
    if not choices:
        return None
    return _get(choices[0], "message")


def response_text(response) -> str | None:
    """Text content of the first choice, or None if absent/empty."""
    content = _get(_first_message(response), "content")
    if isinstance(content, str) and content.strip():
        return content
    return None


def response_audio(response) -> str | None:
    """Base64 audio payload of the first choice, or None if absent."""
    audio = _get(_first_message(response), "audio")
    data = _get(audio, "data")
    return data or None
