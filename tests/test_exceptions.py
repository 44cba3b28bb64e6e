"""
Tests for custom exceptions.
"""

from guardian_moderation.core.exceptions import (
    CatalogError,
    ConcurrentModificationError,
    ConfigurationError,
    InvalidTransitionError,
    ModerationError,
    RequestNotFoundError,
    StoreError,
    UndoExpiredError,
    ValidationError,
)
from guardian_moderation.features.moderation import RequestStatus


class TestExceptions:
    """Test custom exception classes."""

    def test_moderation_error(self) -> None:
        error = ModerationError("Moderation failed")
        assert str(error) == "[Moderation] Moderation failed"

    def test_moderation_error_with_component(self) -> None:
        error = ModerationError("Test error", component="TestComponent")
        assert str(error) == "[TestComponent] Test error"

    def test_moderation_error_with_error_code(self) -> None:
        error = ModerationError("Test error", error_code="ERR001")
        assert str(error) == "[ERR001] [Moderation] Test error"

    def test_moderation_error_to_dict(self) -> None:
        error = ModerationError(
            "Test error", error_code="ERR001", component="TestComponent"
        )
        error_dict = error.to_dict()

        assert error_dict["error_type"] == "ModerationError"
        assert error_dict["message"] == "Test error"
        assert error_dict["error_code"] == "ERR001"
        assert error_dict["component"] == "TestComponent"

    def test_invalid_transition_error(self) -> None:
        error = InvalidTransitionError("approve", RequestStatus.APPROVED)
        assert error.error_code == "INVALID_TRANSITION"
        assert error.operation == "approve"
        assert error.current_status == RequestStatus.APPROVED
        assert "Cannot approve a request in status 'approved'" in str(error)

    def test_store_errors(self) -> None:
        assert StoreError("down").error_code == "STORE_ERROR"
        assert RequestNotFoundError("r1").details["request_id"] == "r1"
        assert CatalogError("album-1", "timeout").error_code == "CATALOG_ERROR"

        error = ConcurrentModificationError(
            "r1", RequestStatus.PENDING, RequestStatus.DENIED
        )
        assert error.details == {
            "request_id": "r1",
            "expected_status": "pending",
            "actual_status": "denied",
        }

    def test_undo_expired_error(self) -> None:
        assert "Nothing to undo" in str(UndoExpiredError())
        error = UndoExpiredError(40.0, 30.0)
        assert error.error_code == "UNDO_EXPIRED"
        assert "40.0s elapsed" in str(error)

    def test_validation_error(self) -> None:
        error = ValidationError("test_field", "test_value", "invalid_format")
        assert "Validation failed" in str(error)
        assert error.details["value"] == "test_value"
        assert error.details["reason"] == "invalid_format"
        assert error.details["field"] == "test_field"

    def test_exception_inheritance(self) -> None:
        assert issubclass(ConfigurationError, ModerationError)
        assert issubclass(InvalidTransitionError, ModerationError)
        assert issubclass(UndoExpiredError, ModerationError)
        assert issubclass(ValidationError, ModerationError)
        for error_type in (RequestNotFoundError, ConcurrentModificationError, CatalogError):
            assert issubclass(error_type, StoreError)
