"""Shared test fixtures."""

import pytest

from linguasync.core.config import Credentials
from linguasync.core.models import AudioInput
from linguasync.llm.router import ProviderRouter

from helpers import FAST_POLICY


@pytest.fixture
def audio() -> AudioInput:
    return AudioInput(data=b"\x00\x01fake-audio", mime_type="", filename="clip.m4a")


@pytest.fixture
def router() -> ProviderRouter:
    return ProviderRouter(Credentials(primary_key="gemini-key"), policy=FAST_POLICY)


@pytest.fixture
def router_with_fallback() -> ProviderRouter:
    return ProviderRouter(
        Credentials(primary_key="gemini-key", fallback_key="deepseek-key"),
        policy=FAST_POLICY,
    )
