"""Goal domain models and enums."""

from datetime import datetime
from enum import StrEnum

from pydantic import Field, field_validator

from src.core.config import constants
from src.domain.record import ImageAsset, Record


class GoalType(StrEnum):
    """What a goal is measured in."""

    TASK = "TASK"
    COIN = "COIN"


class GoalStatus(StrEnum):
    """Goal review state."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Goal(Record):
    """Goal record.

    The review timestamps and rejection_reason are independent optional fields;
    no relation to status is enforced.
    """

    title: str = Field(..., description="Goal title")
    description: str | None = Field(default=None, description="Detailed goal description")
    image: ImageAsset | None = Field(default=None, description="Goal image metadata")
    type: GoalType = Field(..., description="TASK or COIN")
    status: GoalStatus = Field(default=GoalStatus.PENDING, description="Current review state")
    completed_at: datetime | None = Field(default=None, description="When the goal was completed")
    approved_at: datetime | None = Field(default=None, description="When the goal was approved")
    rejected_at: datetime | None = Field(default=None, description="When the goal was rejected")
    rejection_reason: str | None = Field(default=None, description="Why the goal was rejected")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Validate title is not blank and within length bounds."""
        if not v.strip():
            raise ValueError("Title cannot be empty")

        if not constants.GOAL_TITLE_MIN_LENGTH <= len(v) <= constants.GOAL_TITLE_MAX_LENGTH:
            raise ValueError(
                f"Title must be between {constants.GOAL_TITLE_MIN_LENGTH} "
                f"and {constants.GOAL_TITLE_MAX_LENGTH} characters"
            )

        return v
