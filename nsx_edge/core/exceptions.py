"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
The CLI catches ApplicationError, prints its message and exits non-zero.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class ConfigurationError(ApplicationError):
    """Raised when settings are missing or invalid."""

    def __init__(self, message: str = "Invalid configuration") -> None:
        super().__init__(message, code="CFG_INVALID")


class NSXError(ApplicationError):
    """Raised when a call to the NSX Policy API fails."""

    def __init__(self, message: str = "NSX API error", code: str = "NSX_ERROR") -> None:
        super().__init__(message, code=code)


class NSXConnectionError(NSXError):
    """Raised when the NSX Manager cannot be reached."""

    def __init__(self, message: str = "Cannot connect to NSX Manager") -> None:
        super().__init__(message, code="NSX_CONNECTION_ERROR")


class NSXHTTPError(NSXError):
    """Raised when the NSX Manager answers with an error status."""

    def __init__(self, method: str, url: str, status_code: int, detail: str | None = None) -> None:
        self.method = method
        self.url = url
        self.status_code = status_code
        self.detail = detail
        message = f"{method} {url} failed with HTTP {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, code="NSX_HTTP_ERROR")


class ResponseFormatError(NSXError):
    """Raised when a response body is not the JSON document expected."""

    def __init__(self, message: str = "Malformed NSX API response") -> None:
        super().__init__(message, code="NSX_BAD_RESPONSE")


class LocaleServiceNotFoundError(ApplicationError):
    """Raised when a Tier-1 gateway has no Locale Service to update."""

    def __init__(self, tier1_id: str) -> None:
        self.tier1_id = tier1_id
        super().__init__(
            f"No Locale Services found for Tier-1 '{tier1_id}'.",
            code="RES_NOT_FOUND",
        )
