"""
Exception hierarchy for the Guardian moderation engine.

Provides structured error handling with specific error types for lifecycle
transitions, collaborator failures and the undo window.
"""

from typing import Any, Dict, Optional


class ModerationError(Exception):
    """Base exception for all moderation-related errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        component: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.component = component

    def __str__(self) -> str:
        """String representation of the error."""
        base_msg = f"[{self.component or 'Moderation'}] {self.message}"
        if self.error_code:
            base_msg = f"[{self.error_code}] {base_msg}"
        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "component": self.component,
            "details": self.details,
        }


class ConfigurationError(ModerationError):
    """Exception raised when configuration is invalid or missing."""

    pass


class StoreError(ModerationError):
    """Exception raised when a Request Store or Catalog Provider call fails."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("error_code", "STORE_ERROR")
        super().__init__(message, **kwargs)


# Specific error types for common failure modes


class InvalidTransitionError(ModerationError):
    """Exception raised when a lifecycle operation is not valid from the current status."""

    def __init__(
        self, operation: str, current_status: Any, reason: str = "", **kwargs: Any
    ) -> None:
        status_value = getattr(current_status, "value", current_status)
        message = f"Cannot {operation} a request in status '{status_value}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message,
            error_code="INVALID_TRANSITION",
            details={
                "operation": operation,
                "current_status": status_value,
                "reason": reason,
            },
            **kwargs,
        )
        self.operation = operation
        self.current_status = current_status


class RequestNotFoundError(StoreError):
    """Exception raised when a request id is unknown to the store."""

    def __init__(self, request_id: str, **kwargs: Any) -> None:
        super().__init__(
            f"Request not found: {request_id}",
            error_code="REQUEST_NOT_FOUND",
            details={"request_id": request_id},
            **kwargs,
        )


class ConcurrentModificationError(StoreError):
    """Exception raised when a record changed status underneath a transition."""

    def __init__(
        self, request_id: str, expected_status: Any, actual_status: Any, **kwargs: Any
    ) -> None:
        expected = getattr(expected_status, "value", expected_status)
        actual = getattr(actual_status, "value", actual_status)
        super().__init__(
            f"Request {request_id} is '{actual}', expected '{expected}'",
            error_code="CONCURRENT_MODIFICATION",
            details={
                "request_id": request_id,
                "expected_status": expected,
                "actual_status": actual,
            },
            **kwargs,
        )


class CatalogError(StoreError):
    """Exception raised when the catalog provider cannot list tracks."""

    def __init__(self, content_ref: str, reason: str, **kwargs: Any) -> None:
        super().__init__(
            f"Failed to list tracks for {content_ref}: {reason}",
            error_code="CATALOG_ERROR",
            details={"content_ref": content_ref, "reason": reason},
            **kwargs,
        )


class UndoExpiredError(ModerationError):
    """Exception raised when undo is requested with no eligible record."""

    def __init__(
        self,
        elapsed_s: Optional[float] = None,
        window_s: Optional[float] = None,
        **kwargs: Any,
    ) -> None:
        if elapsed_s is None:
            message = "Nothing to undo"
        else:
            message = f"Undo expired ({elapsed_s:.1f}s elapsed, limit {window_s:g}s)"
        super().__init__(
            message,
            error_code="UNDO_EXPIRED",
            details={"elapsed_s": elapsed_s, "window_s": window_s},
            **kwargs,
        )


class ValidationError(ModerationError):
    """Exception raised when input validation fails."""

    def __init__(self, field: str, value: Any, reason: str, **kwargs: Any) -> None:
        super().__init__(
            f"Validation failed for field '{field}': {reason}",
            error_code="VALIDATION_ERROR",
            details={
                "field": field,
                "value": str(value),
                "reason": reason,
            },
            **kwargs,
        )
