"""
Error taxonomy for fantasy provider integrations.

Read operations on a provider client degrade gracefully on
ExternalAPIError (empty result, None or a fallback), with one exception:
AuthenticationError always propagates so the caller can send the user
through re-authentication instead of retrying with the same credential.
"""

from __future__ import annotations


class ProviderError(Exception):
    """Base exception for provider errors."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.message = message
        self.provider = provider


class UnsupportedOperationError(ProviderError):
    """Raised when a provider does not support the requested operation."""
    pass


class ExternalAPIError(ProviderError):
    """HTTP, network, timeout or malformed-response failure."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, provider)
        self.status_code = status_code


class AuthenticationError(ExternalAPIError):
    """Raised on HTTP 401 or when a required credential is missing."""

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message, provider, status_code=401)


class RateLimitError(ExternalAPIError):
    """Raised when the provider keeps answering 429 after retries."""

    def __init__(self, message: str, provider: str | None = None, retry_after: int = 60):
        super().__init__(message, provider, status_code=429)
        self.retry_after = retry_after


class PayloadValidationError(ExternalAPIError):
    """Raised when a provider payload does not match its expected shape."""
    pass


class TokenExchangeError(ProviderError):
    """Raised when an OAuth token endpoint rejects or garbles an exchange."""

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        status_code: int | None = None,
    ):
        super().__init__(message, provider)
        self.status_code = status_code


class SyncCancelledError(Exception):
    """Raised when a sync is aborted through its cancellation token."""
    pass
