"""Exceptions for LinguaSync and user-facing error classification."""

from __future__ import annotations

from enum import Enum


class LinguaSyncError(Exception):
    """Base exception for all LinguaSync errors."""


class MissingCredential(LinguaSyncError):
    """Raised when a required provider API key is not configured."""


class ProviderError(LinguaSyncError):
    """Raised when a remote provider call fails.

    Attributes:
        status_code: HTTP status reported by the transport, if any.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class TransientProviderError(ProviderError):
    """Server-side failure (500 / 503 / "internal error"); safe to retry."""


class PermanentProviderError(ProviderError):
    """Any other provider failure (auth, quota, bad request); never retried."""


class MalformedResponse(LinguaSyncError):
    """Raised when provider text does not parse into the expected structure.

    The offending text is kept on ``raw_text`` for diagnostics.
    """

    def __init__(self, message: str, raw_text: str) -> None:
        super().__init__(message)
        self.raw_text = raw_text


class EmptyResponse(LinguaSyncError):
    """Raised when the provider returned no textual payload."""


class NoAudioData(LinguaSyncError):
    """Raised when a speech synthesis response carries no audio payload."""


class ErrorCategory(str, Enum):
    AUTHENTICATION = "authentication"
    SERVICE_UNAVAILABLE = "service_unavailable"
    NETWORK = "network"
    UNKNOWN = "unknown"


_AUTH_MARKERS = ("api key is missing", "401", "unauthenticated", "invalid authentication")
_UNAVAILABLE_MARKERS = ("internal error", "500", "503", "overloaded")
_NETWORK_MARKERS = ("fetch failed", "network", "connection")

CATEGORY_MESSAGES = {
    ErrorCategory.AUTHENTICATION: (
        "The API request was rejected. Check that GEMINI_API_KEY is set and valid."
    ),
    ErrorCategory.SERVICE_UNAVAILABLE: (
        "The AI service is currently overloaded. Please try again in a few moments."
    ),
    ErrorCategory.NETWORK: "Could not reach the AI service. Check your internet connection.",
}


def classify_error(error: BaseException) -> ErrorCategory:
    """Map a final error to a coarse category for display.

    Matching is done on the lower-cased message, in priority order:
    authentication, service availability, network.
    """
    message = str(error).lower()
    if isinstance(error, MissingCredential) or any(m in message for m in _AUTH_MARKERS):
        return ErrorCategory.AUTHENTICATION
    if any(m in message for m in _UNAVAILABLE_MARKERS):
        return ErrorCategory.SERVICE_UNAVAILABLE
    if any(m in message for m in _NETWORK_MARKERS):
        return ErrorCategory.NETWORK
    return ErrorCategory.UNKNOWN
