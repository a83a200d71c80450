"""prmetrics exception classes."""

from datetime import datetime


class PRMetricsError(Exception):
    """Base exception for all prmetrics errors."""

    def __init__(
        self,
        message: str,
        status: int | None = None,
        request_id: str | None = None,
    ) -> None:
        self.message = message
        self.status = status
        self.request_id = request_id
        super().__init__(message)


class ConfigurationError(PRMetricsError):
    """Raised when client configuration is invalid or missing."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ValidationError(PRMetricsError):
    """Raised when a search query fails validation.

    Raised before any network call is made, and never retried.
    """

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


class AuthenticationError(PRMetricsError):
    """Raised when the credential is rejected."""

    pass


class RateLimitError(PRMetricsError):
    """Raised when the upstream rate limit is exhausted."""

    def __init__(
        self,
        message: str,
        reset_at: datetime,
        status: int | None = None,
        request_id: str | None = None,
    ) -> None:
        super().__init__(message, status, request_id)
        self.reset_at = reset_at


class UpstreamRejectedQueryError(PRMetricsError):
    """Raised when the search API rejects an already sanitized query."""

    pass


class UpstreamError(PRMetricsError):
    """Raised on any other upstream failure."""

    pass


class SuggestionLookupFailure(PRMetricsError):
    """Raised by autocomplete lookups; always downgraded inside the engine."""

    pass
