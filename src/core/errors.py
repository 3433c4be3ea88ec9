"""Error types and remote error classification for work-item operations."""

from enum import Enum
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel


if TYPE_CHECKING:
    from src.models.service_models import BatchSummary


class WorkItemError(Exception):
    """Base class for errors raised by the matching and bulk update engine."""


class ValidationError(WorkItemError, ValueError):
    """Caller supplied invalid input (empty search pattern, unknown merge mode, empty update)."""


class NotFoundError(WorkItemError, LookupError):
    """No work item matched after thresholding and substring fallback."""


class RemoteError(WorkItemError):
    """Failure returned by the remote mutate collaborator for a single target.

    The string form is the collaborator's error text, unchanged.
    """

    def __init__(self, target_id: str, cause: BaseException) -> None:
        super().__init__(str(cause))
        self.target_id = target_id
        self.cause = cause


class PartialBatchFailure(WorkItemError):
    """A completed batch in which at least one target failed."""

    def __init__(self, summary: "BatchSummary") -> None:
        super().__init__(f"{summary.failure_count} of {summary.total} work items failed to update")
        self.summary = summary


class ErrorSeverity(Enum):
    """Severity levels for errors."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCode:
    """Error codes for remote failure conditions."""

    ERR_NOT_FOUND = "ERR_NOT_FOUND"
    ERR_PERMISSION_DENIED = "ERR_PERMISSION_DENIED"
    ERR_AUTHENTICATION_FAILED = "ERR_AUTHENTICATION_FAILED"
    ERR_RATE_LIMIT_EXCEEDED = "ERR_RATE_LIMIT_EXCEEDED"
    ERR_INVALID_PAYLOAD = "ERR_INVALID_PAYLOAD"
    ERR_NETWORK_ERROR = "ERR_NETWORK_ERROR"
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error response with user-friendly messaging."""

    code: str
    message: str
    suggestion: str
    severity: ErrorSeverity


_PatternType = Literal["not_found", "permission", "auth", "rate_limit", "validation", "network"]

_ERROR_PATTERNS: dict[_PatternType, dict[str, list[str] | set[str]]] = {
    "not_found": {
        "phrases": ["not found", "404", "does not exist"],
        "exception_types": {"KeyError", "NotFoundError"},
    },
    "permission": {
        "phrases": ["permission denied", "forbidden", "403", "not allowed"],
        "exception_types": {"PermissionError"},
    },
    "auth": {
        "phrases": ["authentication failed", "unauthorized", "invalid api key", "invalid token", "401"],
        "exception_types": {"AuthenticationError"},
    },
    "rate_limit": {
        "phrases": ["rate limit", "too many requests", "429", "throttled"],
        "exception_types": set(),
    },
    "validation": {
        "phrases": ["invalid", "400", "bad request", "validation"],
        "exception_types": {"ValueError", "ValidationError"},
    },
    "network": {
        "phrases": ["connection", "timeout", "timed out", "network", "502", "503", "504", "unreachable"],
        "exception_types": {"ConnectionError", "TimeoutError"},
    },
}


def _match_error_pattern(*, error_str: str, exception_type: str, pattern_type: _PatternType) -> bool:
    """Return True if the error matches the configured pattern type."""
    patterns = _ERROR_PATTERNS[pattern_type]
    return any(phrase in error_str for phrase in patterns["phrases"]) or exception_type in patterns["exception_types"]


def classify_remote_error(exception: BaseException) -> ErrorResponse:  # noqa: PLR0911
    """Classify a remote mutation failure and return a structured response with recovery suggestions.

    A wrapped RemoteError is classified by its cause. Authentication and rate limiting are
    checked before the broader "not found" and "invalid" phrases.

    Args:
        exception: The exception returned by the mutate collaborator

    Returns:
        ErrorResponse with code, message, suggestion, and severity
    """
    if isinstance(exception, RemoteError):
        exception = exception.cause

    error_str = str(exception).lower()
    exception_type = type(exception).__name__

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="auth"):
        return ErrorResponse(
            code=ErrorCode.ERR_AUTHENTICATION_FAILED,
            message="Authentication with the work-tracking service failed.",
            suggestion="Check the configured API token.",
            severity=ErrorSeverity.CRITICAL,
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="rate_limit"):
        return ErrorResponse(
            code=ErrorCode.ERR_RATE_LIMIT_EXCEEDED,
            message="Too many requests.",
            suggestion="Wait a moment and retry the failed work items.",
            severity=ErrorSeverity.MEDIUM,
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="permission"):
        return ErrorResponse(
            code=ErrorCode.ERR_PERMISSION_DENIED,
            message="You don't have permission to update this work item.",
            suggestion="Ask a project admin for member access.",
            severity=ErrorSeverity.HIGH,
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="not_found"):
        return ErrorResponse(
            code=ErrorCode.ERR_NOT_FOUND,
            message="The work item no longer exists.",
            suggestion="Refresh the work item list and try again.",
            severity=ErrorSeverity.LOW,
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="network"):
        return ErrorResponse(
            code=ErrorCode.ERR_NETWORK_ERROR,
            message="Network error occurred.",
            suggestion="Check your connection and retry the failed work items.",
            severity=ErrorSeverity.MEDIUM,
        )

    if _match_error_pattern(error_str=error_str, exception_type=exception_type, pattern_type="validation"):
        return ErrorResponse(
            code=ErrorCode.ERR_INVALID_PAYLOAD,
            message="The service rejected the update.",
            suggestion="Check that state, label, module and assignee IDs belong to the project.",
            severity=ErrorSeverity.LOW,
        )

    return ErrorResponse(
        code=ErrorCode.ERR_UNKNOWN,
        message="An unexpected error occurred.",
        suggestion="Retry the failed work items. If the problem persists, check the service logs.",
        severity=ErrorSeverity.MEDIUM,
    )
