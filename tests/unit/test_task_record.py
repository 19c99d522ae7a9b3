"""Unit tests for Task record construction and validation."""

from datetime import UTC, datetime
from uuid import uuid4

import pytest

from src.core.errors import DomainError, SchemaConstructionError, ValidationError
from src.domain.task import DifficultyLevel, RecurringFrequency, Task, TaskStatus


@pytest.mark.unit
class TestTaskDefaults:
    """Tests for values applied when optional fields are omitted."""

    def test_minimal_task_gets_defaults(self, registry, task_data):
        """Test status, isRecurring and optional fields default correctly."""
        task = registry.task.build(task_data)

        assert isinstance(task, Task)
        assert task.status == TaskStatus.ASSIGNED
        assert task.is_recurring is False
        assert task.description is None
        assert task.recurring_frequency is None
        assert task.completed_at is None

    def test_storage_names_are_camel_case(self, registry, task_data):
        """Test the record dumps with the declared column names."""
        stored = registry.task.build(task_data).to_storage()

        assert stored["coinReward"] == 10
        assert stored["difficultyLevel"] == "easy"
        assert stored["status"] == "assigned"
        assert stored["isRecurring"] is False

    def test_attribute_names_are_accepted(self, registry):
        """Test snake_case input works the same as column names."""
        task = registry.task.build(title="Feed the cat", coin_reward=5, difficulty_level="medium")

        assert task.coin_reward == 5
        assert task.difficulty_level == DifficultyLevel.MEDIUM

    def test_full_task(self, registry, task_data):
        """Test every optional field can be supplied."""
        parent_id = uuid4()
        due = datetime(2026, 11, 1, 17, 0, tzinfo=UTC)
        task = registry.task.build(
            task_data,
            description="Put the toys away",
            status="completed",
            statusReason="Done early",
            dueDate=due,
            dueTime="17:30",
            duration=30,
            isRecurring=True,
            recurringFrequency="weekly",
            parentTaskId=parent_id,
            completedAt=due,
        )

        assert task.status == TaskStatus.COMPLETED
        assert task.status_reason == "Done early"
        assert task.due_date == due
        assert task.due_time == "17:30"
        assert task.duration == 30
        assert task.recurring_frequency == RecurringFrequency.WEEKLY
        assert task.parent_task_id == parent_id


@pytest.mark.unit
class TestTaskRequiredFields:
    """Tests for required field enforcement."""

    @pytest.mark.parametrize("missing", ["title", "coinReward", "difficultyLevel"])
    def test_omitting_required_field_fails(self, registry, task_data, missing):
        """Test each required field is enforced."""
        del task_data[missing]

        with pytest.raises(SchemaConstructionError) as exc_info:
            registry.task.build(task_data)

        assert exc_info.value.field == missing
        assert missing in str(exc_info.value)

    def test_null_required_field_counts_as_missing(self, registry, task_data):
        """Test an explicit None is treated as an omitted value."""
        task_data["coinReward"] = None

        with pytest.raises(SchemaConstructionError, match="coinReward"):
            registry.task.build(task_data)

    def test_zero_coin_reward_is_valid(self, registry, task_data):
        """Test zero is a value, not an absence."""
        task_data["coinReward"] = 0

        task = registry.task.build(task_data)

        assert task.coin_reward == 0

    def test_missing_wins_over_bad_enum(self, registry):
        """Test a missing field is reported before an out-of-domain value."""
        with pytest.raises(SchemaConstructionError):
            registry.task.build(title="Tidy", difficultyLevel="extreme")


@pytest.mark.unit
class TestTaskEnumerations:
    """Tests for closed value sets."""

    def test_unknown_difficulty_fails_with_domain_error(self, registry, task_data):
        """Test 'extreme' is not a difficulty level."""
        task_data["difficultyLevel"] = "extreme"

        with pytest.raises(DomainError) as exc_info:
            registry.task.build(task_data)

        error = exc_info.value
        assert error.field == "difficultyLevel"
        assert error.value == "extreme"
        assert error.allowed == ("easy", "medium", "hard")
        assert "easy, medium, hard" in str(error)

    def test_domain_error_is_a_validation_error(self, registry, task_data):
        """Test callers catching ValidationError also catch DomainError."""
        task_data["status"] = "archived"

        with pytest.raises(ValidationError):
            registry.task.build(task_data)

    def test_enum_values_are_case_sensitive(self, registry, task_data):
        """Test 'EASY' is not the same literal as 'easy'."""
        task_data["difficultyLevel"] = "EASY"

        with pytest.raises(DomainError):
            registry.task.build(task_data)

    def test_unknown_recurring_frequency_fails(self, registry, task_data):
        """Test recurringFrequency only accepts daily/weekly/monthly."""
        with pytest.raises(DomainError, match="recurringFrequency"):
            registry.task.build(task_data, isRecurring=True, recurringFrequency="yearly")

    def test_frequency_without_recurring_flag_is_not_rejected(self, registry, task_data):
        """Test the frequency/flag relation is not enforced."""
        task = registry.task.build(task_data, recurringFrequency="daily")

        assert task.is_recurring is False
        assert task.recurring_frequency == RecurringFrequency.DAILY


@pytest.mark.unit
class TestTaskFieldRules:
    """Tests for dueTime and duration rules."""

    @pytest.mark.parametrize("due_time", ["00:00", "7:05", "09:30", "23:59"])
    def test_valid_due_times(self, registry, task_data, due_time):
        """Test 24-hour HH:MM times are accepted."""
        assert registry.task.build(task_data, dueTime=due_time).due_time == due_time

    @pytest.mark.parametrize("due_time", ["24:00", "12:60", "noon", "12:5", ""])
    def test_invalid_due_times(self, registry, task_data, due_time):
        """Test malformed times are rejected."""
        with pytest.raises(ValidationError, match="HH:MM"):
            registry.task.build(task_data, dueTime=due_time)

    @pytest.mark.parametrize("duration", [5, 15, 30, 60, 120])
    def test_supported_durations(self, registry, task_data, duration):
        """Test each supported slot length is accepted."""
        assert registry.task.build(task_data, duration=duration).duration == duration

    def test_unsupported_duration(self, registry, task_data):
        """Test an arbitrary number of minutes is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            registry.task.build(task_data, duration=45)

        assert exc_info.value.field == "duration"
        assert "Duration must be one of 5, 15, 30, 60, 120 minutes" in str(exc_info.value)

    def test_non_integer_coin_reward(self, registry, task_data):
        """Test coinReward must be an integer."""
        task_data["coinReward"] = "lots"

        with pytest.raises(ValidationError) as exc_info:
            registry.task.build(task_data)

        assert exc_info.value.field == "coinReward"
