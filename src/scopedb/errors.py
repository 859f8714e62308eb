"""Structured error codes and error handling for scopedb.

Error codes follow the pattern: E{category}{number}
- E1xx: Input validation errors
- E4xx: Storage errors
- E8xx: Configuration errors
- E9xx: Dispatch errors

Missing or invalid stored data is never an error: the initializer repairs
it. Errors here describe failures of the store itself, bad configuration,
and malformed operation requests.

Example:
    >>> from scopedb.errors import ErrorCode, ScopeDBError
    >>> raise ScopeDBError(ErrorCode.E401_STORE_IO, "disk full")
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """Standardized error codes for scopedb."""

    # E1xx: Input validation errors
    E100_VALIDATION_ERROR = "E100"
    E101_INVALID_OPTIONS = "E101"

    # E4xx: Storage errors
    E400_STORE_ERROR = "E400"
    E401_STORE_IO = "E401"
    E402_STORE_CORRUPTED = "E402"

    # E8xx: Configuration errors
    E800_CONFIG_ERROR = "E800"
    E801_INVALID_CONFIG_FILE = "E801"
    E803_CONFIG_VALIDATION_FAILED = "E803"

    # E9xx: Dispatch errors
    E900_DISPATCH_ERROR = "E900"
    E901_OPERATION_NOT_FOUND = "E901"


ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.E100_VALIDATION_ERROR: "Input validation failed",
    ErrorCode.E101_INVALID_OPTIONS: "Invalid operation options",
    ErrorCode.E400_STORE_ERROR: "Store error",
    ErrorCode.E401_STORE_IO: "Store I/O failed",
    ErrorCode.E402_STORE_CORRUPTED: "Stored document is corrupted",
    ErrorCode.E800_CONFIG_ERROR: "Configuration error",
    ErrorCode.E801_INVALID_CONFIG_FILE: "Invalid configuration file format",
    ErrorCode.E803_CONFIG_VALIDATION_FAILED: "Configuration validation failed",
    ErrorCode.E900_DISPATCH_ERROR: "Dispatch error",
    ErrorCode.E901_OPERATION_NOT_FOUND: "Operation not found",
}


@dataclass
class ErrorDetails:
    """Structured error details for logging and CLI output.

    Attributes:
        code: Error code enum value
        message: Human-readable error message
        details: Additional error details
        recoverable: Whether retrying may succeed
    """

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    recoverable: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "error_code": self.code.value,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        result["recoverable"] = self.recoverable
        return result

    def to_log_dict(self) -> dict[str, Any]:
        """Flattened form suitable for ``extra=`` in structured logging."""
        log_dict: dict[str, Any] = {
            "error_code": self.code.value,
            "error_message": self.message,
            "recoverable": self.recoverable,
        }
        for key, value in self.details.items():
            log_dict[f"detail_{key}"] = value
        return log_dict


class ScopeDBError(Exception):
    """Base exception class for scopedb errors with structured error codes."""

    def __init__(
        self,
        code: ErrorCode,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        recoverable: bool = False,
    ) -> None:
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, "Unknown error")
        self.error_details = ErrorDetails(
            code=code,
            message=self.message,
            details=details or {},
            recoverable=recoverable,
        )
        super().__init__(self.message)

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def log(self, level: int = logging.ERROR) -> None:
        """Log the error with structured details."""
        logger.log(level, str(self), extra=self.error_details.to_log_dict())


# ---------------------------------------------------------------------------
# Specific exception classes
# ---------------------------------------------------------------------------


class ValidationError(ScopeDBError):
    """Input validation error."""

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(ErrorCode.E100_VALIDATION_ERROR, message, details, **kwargs)


class StoreIOError(ScopeDBError):
    """The backing store could not be read or written."""

    def __init__(
        self,
        message: str | None = None,
        path: str | None = None,
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = kwargs.pop("details", {})
        if path is not None:
            details["path"] = path
        kwargs.setdefault("recoverable", True)
        super().__init__(ErrorCode.E401_STORE_IO, message, details=details, **kwargs)


class StoreCorruptionError(ScopeDBError):
    """The persisted document could not be decoded."""

    def __init__(
        self,
        message: str | None = None,
        filepath: str | None = None,
        **kwargs: Any,
    ) -> None:
        details: dict[str, Any] = kwargs.pop("details", {})
        if filepath is not None:
            details["filepath"] = filepath
        super().__init__(ErrorCode.E402_STORE_CORRUPTED, message, details=details, **kwargs)


class ConfigurationError(ScopeDBError):
    """Configuration error."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.E800_CONFIG_ERROR,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(code, message, **kwargs)


class OperationNotFoundError(ScopeDBError):
    """No operation is registered under the requested name."""

    def __init__(self, name: str, **kwargs: Any) -> None:
        super().__init__(
            ErrorCode.E901_OPERATION_NOT_FOUND,
            f"Unknown operation: {name!r}",
            details={"operation": name},
            **kwargs,
        )


def create_error_response(
    error: ScopeDBError | Exception,
    include_details: bool = True,
) -> dict[str, Any]:
    """Create a structured error payload for CLI or API output."""
    if isinstance(error, ScopeDBError):
        response = error.error_details.to_dict()
        if not include_details:
            response.pop("details", None)
        return {"error": response}
    return {
        "error": {
            "error_code": ErrorCode.E400_STORE_ERROR.value,
            "message": str(error) if include_details else "An unexpected error occurred",
            "recoverable": False,
        }
    }
