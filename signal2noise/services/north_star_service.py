"""North Star service: the weekly goal that guides categorization."""

import logging
import re

from signal2noise.core.config import Constants
from signal2noise.core.errors import ValidationResult
from signal2noise.core.logging import span
from signal2noise.core.state_store import StateStore
from signal2noise.domain.north_star import NorthStarGoal
from signal2noise.domain.task import Task
from signal2noise.models.service_models import NorthStarProgress
from signal2noise.services.analytics_service import percentage


logger = logging.getLogger(__name__)

_TIME_FRAME_PATTERN = re.compile(r"\b(by|before|within|until)\b")
_NUMBER_PATTERN = re.compile(r"\d+")


def set_north_star(*, store: StateStore, header: str, goal: str) -> NorthStarGoal:
    """Store the goal and its header and leave edit mode."""
    with span("north_star_service.set_north_star"):
        store.set("northStar.header", header)
        store.set("northStar.goal", goal)
        store.set("northStar.isEditing", False)
        logger.info("North Star goal set")
        return store.get("northStar")


def save_north_star(*, store: StateStore, header: str, goal: str) -> ValidationResult:
    """Validate and store the goal. Invalid goals leave the state untouched."""
    result = validate_north_star(goal)
    if result.valid:
        set_north_star(store=store, header=header, goal=goal)
    return result


def edit_north_star(*, store: StateStore) -> None:
    store.set("northStar.isEditing", True)


def toggle_north_star_lock(*, store: StateStore) -> bool:
    """Flip the lock flag and return the new value."""
    is_locked = not store.get("northStar.isLocked")
    store.set("northStar.isLocked", is_locked)
    return is_locked


def get_north_star(*, store: StateStore) -> NorthStarGoal:
    return store.get("northStar")


def is_north_star_set(*, store: StateStore) -> bool:
    goal = store.get("northStar.goal") or ""
    return goal.strip() != ""


def validate_north_star(goal: str | None) -> ValidationResult:
    """Check the goal's length. Never raises and never touches state."""
    if not goal or len(goal.strip()) < Constants.NORTH_STAR_MIN_LENGTH:
        return ValidationResult(
            valid=False,
            message=f"North Star goal should be at least {Constants.NORTH_STAR_MIN_LENGTH} characters long.",
        )

    if len(goal) > Constants.NORTH_STAR_MAX_LENGTH:
        return ValidationResult(
            valid=False,
            message=f"North Star goal should be less than {Constants.NORTH_STAR_MAX_LENGTH} characters.",
        )

    return ValidationResult(valid=True)


def suggest_north_star_improvements(goal: str) -> list[str]:
    """Suggest ways to make the goal sharper: a metric, a deadline, more detail."""
    suggestions: list[str] = []
    lowered = goal.lower()

    if "measurable" not in lowered and not _NUMBER_PATTERN.search(goal):
        suggestions.append("Consider adding measurable metrics to your goal.")

    if not _TIME_FRAME_PATTERN.search(lowered):
        suggestions.append("Consider adding a time frame to your goal.")

    if len(goal.split()) < Constants.NORTH_STAR_MIN_WORDS:
        suggestions.append("Your goal might benefit from more specific details.")

    return suggestions


def get_progress_towards_north_star(*, store: StateStore) -> NorthStarProgress:
    signal_tasks: list[Task] = store.get("signalTasks") or []
    completed = sum(1 for task in signal_tasks if task.completed)
    return NorthStarProgress(
        total_signal_tasks=len(signal_tasks),
        completed_signal_tasks=completed,
        progress_percentage=percentage(completed, len(signal_tasks)),
    )
