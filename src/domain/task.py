"""Task domain models and enums."""

import re
from datetime import datetime
from enum import StrEnum
from uuid import UUID

from pydantic import Field, field_validator

from src.core.config import constants
from src.domain.record import Record


class DifficultyLevel(StrEnum):
    """How hard a task is."""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TaskStatus(StrEnum):
    """Task lifecycle state (assigned -> completed -> approved/rejected)."""

    ASSIGNED = "assigned"
    COMPLETED = "completed"
    APPROVED = "approved"
    REJECTED = "rejected"


class RecurringFrequency(StrEnum):
    """How often a recurring task repeats."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Task(Record):
    """Task record assigned to a child, rewarded in coins."""

    title: str = Field(..., description="Task title (e.g., 'Tidy your room')")
    description: str | None = Field(default=None, description="Detailed task description")
    coin_reward: int = Field(..., description="Coins awarded when the task is approved")
    difficulty_level: DifficultyLevel = Field(..., description="Task difficulty")
    status: TaskStatus = Field(default=TaskStatus.ASSIGNED, description="Current lifecycle state")
    status_reason: str | None = Field(default=None, description="Reason given for the current status")
    due_date: datetime | None = Field(default=None, description="Date the task is due")
    due_time: str | None = Field(default=None, description="Time of day the task is due ('HH:MM')")
    duration: int | None = Field(default=None, description="Expected duration in minutes")
    is_recurring: bool = Field(default=False, description="Whether the task repeats")
    recurring_frequency: RecurringFrequency | None = Field(
        default=None,
        description="Repeat frequency, only meaningful when is_recurring is set",
    )
    parent_task_id: UUID | None = Field(
        default=None,
        description="Task this recurring instance was spawned from",
    )
    completed_at: datetime | None = Field(default=None, description="When the task was marked completed")

    @field_validator("due_time")
    @classmethod
    def validate_due_time(cls, v: str | None) -> str | None:
        """Validate due time is a 24-hour 'HH:MM' string."""
        if v is not None and not re.match(constants.TASK_DUE_TIME_PATTERN, v):
            raise ValueError("Due time must be in HH:MM format")
        return v

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v: int | None) -> int | None:
        """Validate duration is one of the supported slot lengths."""
        if v is not None and v not in constants.TASK_DURATION_CHOICES:
            choices = ", ".join(str(c) for c in constants.TASK_DURATION_CHOICES)
            raise ValueError(f"Duration must be one of {choices} minutes")
        return v
