"""Exception hierarchy for the file storage facade.

Every driver translates backend-specific failures into these classes so that
callers (HTTP handlers, CLI) can map them to responses without knowing which
driver is active.
"""

from __future__ import annotations

from typing import Any


class StorageError(Exception):
    """Base class for all storage errors.

    Args:
        message: Technical description of the failure
        error_code: Stable machine-readable code
        details: Extra context (key, driver, backend code...)
        user_message: Message safe to show to end users
    """

    default_code = "STORAGE_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
        user_message: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.details = details or {}
        self.user_message = user_message or message

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a serializable dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details,
        }


class ConfigurationError(StorageError):
    """Raised when a storage configuration is missing required fields."""

    default_code = "CONFIGURATION_ERROR"

    def __init__(self, message: str, field: str | None = None, driver: str | None = None, **kwargs):
        details = kwargs.pop("details", None) or {}
        if field:
            details["field"] = field
        if driver:
            details["driver"] = driver
        super().__init__(message, details=details, **kwargs)


class NotConfiguredError(StorageError):
    """Raised when the facade is used before ``configure`` was called."""

    default_code = "NOT_CONFIGURED"

    def __init__(self, operation: str | None = None):
        message = "Storage is not configured; call configure() at startup"
        if operation:
            message = f"Cannot {operation}: {message}"
        super().__init__(
            message,
            details={"operation": operation} if operation else None,
            user_message="File storage is not available.",
        )


class AlreadyConfiguredError(StorageError):
    """Raised when ``configure`` is called on an already configured facade."""

    default_code = "ALREADY_CONFIGURED"

    def __init__(self, active_driver: str | None = None):
        super().__init__(
            "Storage is already configured and cannot be reconfigured",
            details={"active_driver": active_driver} if active_driver else None,
        )


class InvalidKeyError(StorageError):
    """Raised for malformed keys, including path traversal attempts."""

    default_code = "INVALID_KEY"

    def __init__(self, key: Any, reason: str):
        super().__init__(
            f"Invalid storage key {key!r}: {reason}",
            details={"key": key if isinstance(key, str) else repr(key), "reason": reason},
            user_message="The requested file name is not valid.",
        )
        self.key = key
        self.reason = reason


class NotFoundError(StorageError):
    """Raised when reading an object that does not exist."""

    default_code = "NOT_FOUND"

    def __init__(self, key: str, details: dict[str, Any] | None = None):
        merged = {"key": key}
        if details:
            merged.update(details)
        super().__init__(
            f"Object not found: {key}",
            details=merged,
            user_message=f"The file '{key}' does not exist.",
        )
        self.key = key


class AuthError(StorageError):
    """Raised when the backend rejects credentials or permissions."""

    default_code = "AUTH_ERROR"


class QuotaError(StorageError):
    """Raised when space or provider limits are exceeded."""

    default_code = "QUOTA_EXCEEDED"


class StorageIOError(StorageError):
    """Raised for transient or connectivity failures of the backend."""

    default_code = "STORAGE_IO_ERROR"


class StorageTimeoutError(StorageIOError):
    """Raised when an operation exceeds the caller-supplied timeout."""

    default_code = "STORAGE_TIMEOUT"

    def __init__(self, operation: str, timeout: float):
        super().__init__(
            f"Storage operation '{operation}' timed out after {timeout}s",
            details={"operation": operation, "timeout": timeout},
        )


__all__ = [
    "StorageError",
    "ConfigurationError",
    "NotConfiguredError",
    "AlreadyConfiguredError",
    "InvalidKeyError",
    "NotFoundError",
    "AuthError",
    "QuotaError",
    "StorageIOError",
    "StorageTimeoutError",
]
