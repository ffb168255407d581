"""Errors raised by the reasoning-engine and text-generation clients.

Only LLMRateLimitError is treated as transient by the research loop;
everything else ends the session.
"""

from __future__ import annotations

from sleuth.exceptions import SleuthError


class LLMClientError(SleuthError):
    """Base for all LLM client errors."""


class LLMConfigError(LLMClientError):
    """Credentials or endpoint configuration are missing."""


class LLMRateLimitError(LLMClientError):
    """The provider answered 429.

    Attributes:
        retry_after: Seconds suggested by the Retry-After header, or None.
    """

    def __init__(self, message: str = "Rate limited", retry_after: float | None = None) -> None:
        self.retry_after = retry_after
        if retry_after is not None:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message)


class LLMAuthError(LLMClientError):
    """The provider rejected the credentials.

    Attributes:
        status_code: HTTP status returned (401 or 403).
    """

    def __init__(self, message: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(message)


class LLMResponseError(LLMClientError):
    """The provider returned a body the client cannot interpret."""
