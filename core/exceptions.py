"""Custom exception hierarchy for the HLS relay."""


class ProxyError(Exception):
    """Base exception for all relay errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class MissingParameter(ProxyError):
    """Raised when a required query parameter is absent."""

    def __init__(self, name: str) -> None:
        super().__init__(f"{name.upper()} parameter is required")
        self.name = name


class InvalidTargetUrl(ProxyError):
    """Raised when the target URL cannot be decoded into an absolute URI."""


class HeaderDecodeError(ProxyError):
    """Raised when the ``headers`` query parameter is not a JSON object."""


class UpstreamError(ProxyError):
    """Raised when an upstream server returns an error.

    Attributes:
        message: Error message
        status_code: HTTP status code from upstream (optional)
        reason: HTTP reason phrase from upstream (optional)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason

    @classmethod
    def from_status(cls, status_code: int, reason: str) -> "UpstreamError":
        return cls(f"HTTP {status_code}: {reason}", status_code=status_code, reason=reason)


class UpstreamTimeoutError(UpstreamError):
    """Raised when an upstream request times out."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=None)


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to connect to an upstream server."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=None)
