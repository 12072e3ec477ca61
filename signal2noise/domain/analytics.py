"""Streak and analytics domain models. These survive day resets."""

from pydantic import Field

from signal2noise.domain.base import StateModel


class StreakData(StateModel):
    """Consecutive days on which every signal task was completed."""

    count: int = Field(default=0, ge=0)
    last_completed_date: str | None = Field(default=None, description="ISO date (YYYY-MM-DD) of the last counted day")


class Analytics(StateModel):
    """Running counters across all days."""

    total_tasks_created: int = Field(default=0, ge=0)
    signal_tasks_completed: int = Field(default=0, ge=0)
    streak_record: int = Field(default=0, ge=0, description="Longest streak ever observed")
    average_signal_tasks: float = Field(default=0.0, ge=0)
    total_days: int = Field(default=0, ge=0, description="Days contributing to average_signal_tasks")
