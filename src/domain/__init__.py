"""Domain record models and enums."""

from src.domain.collection import Collection
from src.domain.goal import Goal, GoalStatus, GoalType
from src.domain.record import ImageAsset, Record
from src.domain.task import DifficultyLevel, RecurringFrequency, Task, TaskStatus


__all__ = [
    "Collection",
    "DifficultyLevel",
    "Goal",
    "GoalStatus",
    "GoalType",
    "ImageAsset",
    "Record",
    "RecurringFrequency",
    "Task",
    "TaskStatus",
]
