"""Error taxonomy for the triage core.

Nothing in the core is fatal. Validation problems come back as a
``ValidationResult``, storage problems are swallowed at the store boundary and
surfaced as diagnostics, and invariant violations are silent no-ops.
"""

import json
from enum import Enum
from typing import Literal

from pydantic import BaseModel


class ErrorCategory(Enum):
    """Categories of errors that can occur in the triage core."""

    STORAGE_UNAVAILABLE = "storage_unavailable"
    STORAGE_QUOTA_EXCEEDED = "storage_quota_exceeded"
    STORAGE_PERMISSION_DENIED = "storage_permission_denied"
    CORRUPT_STATE = "corrupt_state"
    VALIDATION_FAILED = "validation_failed"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for specific error conditions."""

    # Storage errors
    ERR_STORAGE_UNAVAILABLE = "ERR_STORAGE_UNAVAILABLE"
    ERR_STORAGE_QUOTA_EXCEEDED = "ERR_STORAGE_QUOTA_EXCEEDED"
    ERR_STORAGE_PERMISSION_DENIED = "ERR_STORAGE_PERMISSION_DENIED"
    ERR_CORRUPT_STATE = "ERR_CORRUPT_STATE"

    # Validation errors
    ERR_VALIDATION_FAILED = "ERR_VALIDATION_FAILED"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    category: ErrorCategory
    message: str
    suggestion: str
    severity: ErrorSeverity


class ValidationResult(BaseModel):
    """Outcome of validating user input. Returned, never raised."""

    valid: bool
    message: str | None = None


class StorageError(Exception):
    """Raised by a blob storage device when a read or write fails."""


class UnknownPathError(KeyError):
    """Raised when setting a path that is not part of the state schema."""


_ERROR_PATTERNS: dict[
    Literal["quota", "permission", "unavailable", "corrupt"],
    dict[str, list[str] | set[str]],
] = {
    "quota": {
        "phrases": [
            "quota exceeded",
            "no space left",
            "disk full",
            "disk quota",
        ],
        "exception_types": set(),
    },
    "permission": {
        "phrases": [
            "permission denied",
            "read-only file system",
            "operation not permitted",
        ],
        "exception_types": {"PermissionError"},
    },
    "unavailable": {
        "phrases": [
            "no such file or directory",
            "device unavailable",
            "not available",
            "is a directory",
        ],
        "exception_types": {"FileNotFoundError", "IsADirectoryError", "NotADirectoryError"},
    },
    "corrupt": {
        "phrases": [
            "expecting value",
            "invalid json",
            "codec can't decode",
        ],
        "exception_types": {"JSONDecodeError", "UnicodeDecodeError"},
    },
}


def _match_error_pattern(
    *,
    error_str: str,
    exception_type: str,
    pattern_type: Literal["quota", "permission", "unavailable", "corrupt"],
) -> bool:
    """Return True if the error matches the configured pattern type."""
    patterns = _ERROR_PATTERNS[pattern_type]
    return any(phrase in error_str for phrase in patterns["phrases"]) or exception_type in patterns["exception_types"]


def _exception_chain(exception: BaseException) -> list[BaseException]:
    chain = [exception]
    cause = exception.__cause__
    while cause is not None and cause not in chain:
        chain.append(cause)
        cause = cause.__cause__
    return chain


def classify_storage_error(exception: BaseException) -> ErrorResponse:
    """Classify a persistence failure and return a structured response.

    ``StorageError`` wrappers are looked through so that the underlying OS or
    decode error decides the category.

    Args:
        exception: The exception raised while reading or writing state

    Returns:
        ErrorResponse with code, category, message, suggestion, and severity
    """
    chain = _exception_chain(exception)
    error_str = " ".join(str(exc).lower() for exc in chain)
    exception_types = {type(exc).__name__ for exc in chain}

    def matches(pattern_type: Literal["quota", "permission", "unavailable", "corrupt"]) -> bool:
        return any(
            _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type=pattern_type)
            for exception_type in exception_types
        )

    if "ValidationError" in exception_types:
        return ErrorResponse(
            code=ErrorCode.ERR_VALIDATION_FAILED,
            category=ErrorCategory.VALIDATION_FAILED,
            message="Part of your saved data did not match the expected format.",
            suggestion="That part was reset to its defaults; everything else was restored.",
            severity=ErrorSeverity.MEDIUM,
        )

    if isinstance(exception, json.JSONDecodeError) or matches("corrupt"):
        return ErrorResponse(
            code=ErrorCode.ERR_CORRUPT_STATE,
            category=ErrorCategory.CORRUPT_STATE,
            message="Your saved data could not be read.",
            suggestion="Starting from a fresh state. Your previous data file was left untouched.",
            severity=ErrorSeverity.HIGH,
        )

    if matches("quota"):
        return ErrorResponse(
            code=ErrorCode.ERR_STORAGE_QUOTA_EXCEEDED,
            category=ErrorCategory.STORAGE_QUOTA_EXCEEDED,
            message="There is no room left to save your progress.",
            suggestion="Free up some disk space; changes are kept in memory until then.",
            severity=ErrorSeverity.HIGH,
        )

    if matches("permission"):
        return ErrorResponse(
            code=ErrorCode.ERR_STORAGE_PERMISSION_DENIED,
            category=ErrorCategory.STORAGE_PERMISSION_DENIED,
            message="Saving is not permitted at the configured location.",
            suggestion="Check permissions on the data directory or point S2N_DATA_DIR elsewhere.",
            severity=ErrorSeverity.HIGH,
        )

    if matches("unavailable"):
        return ErrorResponse(
            code=ErrorCode.ERR_STORAGE_UNAVAILABLE,
            category=ErrorCategory.STORAGE_UNAVAILABLE,
            message="Storage is unavailable.",
            suggestion="Your session keeps working, but progress will not survive a restart.",
            severity=ErrorSeverity.MEDIUM,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        category=ErrorCategory.UNKNOWN,
        message="An unexpected storage error occurred.",
        suggestion="Your session keeps working, but progress may not be saved.",
        severity=ErrorSeverity.MEDIUM,
    )
