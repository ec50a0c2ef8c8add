"""
Custom Exceptions.

SDK-specific exception classes for consistent error handling.

"Not found" is not an error: lookups return None for missing objects.
"""

from typing import Any


class CloudLinkError(Exception):
    """Base exception for all SDK errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class InvalidArgumentError(CloudLinkError, ValueError):
    """Raised before any I/O when a required argument is None or empty."""

    def __init__(self, message: str = "Invalid argument") -> None:
        super().__init__(message, code="VAL_INVALID_ARGUMENT")


class NotificationValidationError(CloudLinkError, ValueError):
    """Raised when a push notification fails its field constraints."""

    def __init__(
        self,
        message: str = "Validation failed",
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.details = details or []
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class CloudLinkClientError(CloudLinkError):
    """Raised when CloudLink answers with a non-successful HTTP status."""

    def __init__(self, status_code: int, body: str = "", reason: str = "") -> None:
        self.status_code = status_code
        self.body = body
        self.reason = reason
        message = f"CloudLink responded with HTTP {status_code}"
        if reason:
            message = f"{message} {reason}"
        if body:
            message = f"{message}: {body}"
        super().__init__(message, code="SYS_EXTERNAL_SERVICE_ERROR")


class ConfigurationError(CloudLinkError):
    """Raised when configuration files or secrets are missing or invalid."""

    def __init__(self, message: str = "Invalid configuration") -> None:
        super().__init__(message, code="SYS_CONFIGURATION_ERROR")


def require(value: Any, name: str) -> None:
    """
    Reject None and empty strings for a required argument.

    Args:
        value: The argument value
        name: Argument name used in the error message

    Raises:
        InvalidArgumentError: If value is None or an empty string
    """
    if value is None:
        raise InvalidArgumentError(f"{name} may not be None")
    if isinstance(value, str) and not value:
        raise InvalidArgumentError(f"{name} may not be empty")


def require_not_none(value: Any, name: str) -> None:
    """
    Reject None for a required argument. Empty values are accepted.

    Raises:
        InvalidArgumentError: If value is None
    """
    if value is None:
        raise InvalidArgumentError(f"{name} may not be None")
