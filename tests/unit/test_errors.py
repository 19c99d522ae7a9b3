"""Unit tests for record error translation and classification."""

import pytest

from src.core.errors import (
    DatabaseError,
    DomainError,
    ErrorCode,
    ErrorSeverity,
    RecordNotFoundError,
    SchemaConstructionError,
    ValidationError,
    classify_record_error,
)


def _raised(func, *args, **kwargs) -> Exception:
    try:
        func(*args, **kwargs)
    except Exception as e:  # noqa: BLE001
        return e
    raise AssertionError("expected an exception")


@pytest.mark.unit
class TestTranslation:
    """Tests for the error kinds raised by record construction."""

    def test_errors_are_chained_to_pydantic(self, registry, task_data):
        """Test the original pydantic error is kept as the cause."""
        task_data["difficultyLevel"] = "extreme"

        error = _raised(registry.task.build, task_data)

        assert isinstance(error, DomainError)
        assert type(error.__cause__).__name__ == "ValidationError"
        assert error.entity == "Task"

    def test_several_missing_fields_are_listed(self, registry):
        """Test every missing field is named in the message."""
        error = _raised(registry.task.build, {})

        assert isinstance(error, SchemaConstructionError)
        assert str(error) == "Task is missing required field(s): title, coinReward, difficultyLevel"
        assert error.field == "title"

    def test_nested_missing_key_is_a_validation_error(self, registry, goal_data, image_data):
        """Test an incomplete optional image is a bad value, not a missing field."""
        del image_data["filename"]
        goal_data["image"] = image_data

        error = _raised(registry.goal.build, goal_data)

        assert type(error) is ValidationError
        assert error.field == "image.filename"
        assert classify_record_error(error).code == ErrorCode.ERR_FIELD_VALIDATION

    def test_value_error_prefix_is_stripped(self, registry, goal_data):
        """Test custom validator messages surface without pydantic's prefix."""
        goal_data["title"] = "x"

        error = _raised(registry.goal.build, goal_data)

        assert isinstance(error, ValidationError)
        assert not isinstance(error, DomainError)
        assert not str(error).startswith("Value error")


@pytest.mark.unit
class TestClassifyRecordError:
    """Tests for structured error responses."""

    def test_missing_field(self, registry):
        """Test a missing field maps to ERR_REQUIRED_FIELD_MISSING."""
        response = classify_record_error(_raised(registry.collection.build, {}))

        assert response.code == ErrorCode.ERR_REQUIRED_FIELD_MISSING
        assert response.field == "name"
        assert response.severity == ErrorSeverity.LOW
        assert "'name'" in response.suggestion

    def test_schema_definition(self):
        """Test a declaration defect is critical."""
        response = classify_record_error(SchemaConstructionError("Widget: duplicate field 'label'", entity="Widget"))

        assert response.code == ErrorCode.ERR_SCHEMA_DEFINITION
        assert response.severity == ErrorSeverity.CRITICAL

    def test_out_of_domain(self, registry, goal_data):
        """Test an enum violation lists the allowed values."""
        goal_data["type"] = "STREAK"

        response = classify_record_error(_raised(registry.goal.build, goal_data))

        assert response.code == ErrorCode.ERR_VALUE_OUT_OF_DOMAIN
        assert response.suggestion == "Use one of: TASK, COIN."
        assert response.field == "type"

    def test_field_validation(self, registry, goal_data):
        """Test a rule violation keeps its message."""
        goal_data["title"] = ""

        response = classify_record_error(_raised(registry.goal.build, goal_data))

        assert response.code == ErrorCode.ERR_FIELD_VALIDATION
        assert response.message == "Title cannot be empty"

    def test_not_found(self):
        """Test a missing record maps to ERR_RECORD_NOT_FOUND."""
        response = classify_record_error(RecordNotFoundError("Record not found in Goals: 123"))

        assert response.code == ErrorCode.ERR_RECORD_NOT_FOUND
        assert "Goals" in response.message

    def test_database(self):
        """Test storage failures do not leak driver messages."""
        response = classify_record_error(DatabaseError("disk I/O error"))

        assert response.code == ErrorCode.ERR_DATABASE
        assert "disk" not in response.message
        assert response.severity == ErrorSeverity.HIGH

    def test_unknown(self):
        """Test anything else maps to ERR_UNKNOWN."""
        response = classify_record_error(RuntimeError("boom"))

        assert response.code == ErrorCode.ERR_UNKNOWN
        assert response.severity == ErrorSeverity.MEDIUM
