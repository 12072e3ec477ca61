"""Root of the persisted state tree."""

from pydantic import Field

from signal2noise.domain.analytics import Analytics, StreakData
from signal2noise.domain.base import StateModel
from signal2noise.domain.north_star import NorthStarGoal
from signal2noise.domain.task import Task


class AppSettings(StateModel):
    """User preferences stored alongside the state."""

    theme: str = Field(default="light")
    notifications: bool = Field(default=True)
    auto_save: bool = Field(default=True, description="Persist after every store write")


class AppState(StateModel):
    """Everything the store owns.

    ``tasks``, ``signal_tasks``, ``noise_tasks``, ``current_task_index`` and
    ``is_locked`` make up the day session and are cleared on reset;
    ``streak_data`` and ``analytics`` span sessions.
    """

    north_star: NorthStarGoal = Field(default_factory=NorthStarGoal)
    tasks: list[Task] = Field(default_factory=list)
    signal_tasks: list[Task] = Field(default_factory=list)
    noise_tasks: list[Task] = Field(default_factory=list)
    current_task_index: int = Field(default=0, ge=0)
    is_locked: bool = Field(default=False)
    streak_data: StreakData = Field(default_factory=StreakData)
    settings: AppSettings = Field(default_factory=AppSettings)
    analytics: Analytics = Field(default_factory=Analytics)


DAY_SESSION_FIELDS: tuple[str, ...] = ("current_task_index", "tasks", "signal_tasks", "noise_tasks", "is_locked")
