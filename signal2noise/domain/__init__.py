"""Domain models and DTOs."""

from signal2noise.domain.analytics import Analytics, StreakData
from signal2noise.domain.north_star import NorthStarGoal
from signal2noise.domain.state import AppSettings, AppState
from signal2noise.domain.task import Recurrence, RecurrenceType, Task, TaskPriority


__all__ = [
    "Analytics",
    "AppSettings",
    "AppState",
    "NorthStarGoal",
    "Recurrence",
    "RecurrenceType",
    "StreakData",
    "Task",
    "TaskPriority",
]
