"""Day workflow: task intake, the categorization wizard, signal locking and recap.

Phases run ``INTAKE -> CATEGORIZING -> (ZERO_SIGNAL_RETHINK | SORTED) ->
LOCKED -> RECAP -> INTAKE``. The workflow is the only writer of the day
session paths in the store. Screen changes are requested through an injected
navigator callable, so the presentation layer decides what a screen is.
"""

import logging
from collections.abc import Callable, Iterable
from enum import StrEnum

from signal2noise.core.clock import Clock, SystemClock
from signal2noise.core.config import Constants
from signal2noise.core.logging import log_with_context, span
from signal2noise.core.state_store import StateStore
from signal2noise.domain.task import Task
from signal2noise.models.service_models import RecapSummary, WizardProgress
from signal2noise.services import analytics_service, north_star_service, task_service


logger = logging.getLogger(__name__)


class WorkflowPhase(StrEnum):
    """Where the user is in their day."""

    INTAKE = "intake"
    CATEGORIZING = "categorizing"
    ZERO_SIGNAL_RETHINK = "zero_signal_rethink"
    SORTED = "sorted"
    LOCKED = "locked"
    RECAP = "recap"


class Screen(StrEnum):
    """Screens the presentation layer is asked to show."""

    NORTH_STAR = "north_star"
    TASK_INPUT = "task_input"
    WIZARD = "wizard"
    ZERO_SIGNAL_PROMPT = "zero_signal_prompt"
    SORTED = "sorted"
    RECAP = "recap"


Navigator = Callable[[Screen], None]

CHECKLIST_QUESTIONS: tuple[str, ...] = (
    "Does this move you toward your #1 goal?",
    "Would today still be a win if this was all you finished?",
    "Does this require your brain, creativity, or leadership?",
    "Will there be a real cost if this isn't done today?",
)

# Allowed phase transitions
PHASE_TRANSITIONS: dict[WorkflowPhase, set[WorkflowPhase]] = {
    WorkflowPhase.INTAKE: {WorkflowPhase.CATEGORIZING},
    WorkflowPhase.CATEGORIZING: {
        WorkflowPhase.CATEGORIZING,
        WorkflowPhase.ZERO_SIGNAL_RETHINK,
        WorkflowPhase.SORTED,
    },
    WorkflowPhase.ZERO_SIGNAL_RETHINK: {WorkflowPhase.CATEGORIZING},
    WorkflowPhase.SORTED: {WorkflowPhase.LOCKED, WorkflowPhase.RECAP},
    WorkflowPhase.LOCKED: {WorkflowPhase.RECAP},
    WorkflowPhase.RECAP: {WorkflowPhase.RECAP, WorkflowPhase.INTAKE},
}

PHASE_SCREENS: dict[WorkflowPhase, Screen] = {
    WorkflowPhase.INTAKE: Screen.TASK_INPUT,
    WorkflowPhase.CATEGORIZING: Screen.WIZARD,
    WorkflowPhase.ZERO_SIGNAL_RETHINK: Screen.ZERO_SIGNAL_PROMPT,
    WorkflowPhase.SORTED: Screen.SORTED,
    WorkflowPhase.LOCKED: Screen.SORTED,
    WorkflowPhase.RECAP: Screen.RECAP,
}


def is_signal(checked_count: int) -> bool:
    """True when enough checklist answers were affirmative."""
    return checked_count >= Constants.SIGNAL_CHECKLIST_THRESHOLD


def _ignore_screen(screen: Screen) -> None:
    pass


class TaskWorkflow:
    """State machine driving one day of triage over a ``StateStore``."""

    checklist_questions: tuple[str, ...] = CHECKLIST_QUESTIONS

    def __init__(self, store: StateStore, *, clock: Clock | None = None, navigator: Navigator | None = None) -> None:
        """Initialize the workflow in the intake phase.

        Args:
            store: State store holding the day session
            clock: Source of "now" and "today"; defaults to the system clock
            navigator: Called with the screen to show after each transition
        """
        self.store = store
        self.clock: Clock = clock or SystemClock()
        self._navigate: Navigator = navigator or _ignore_screen
        self.phase = WorkflowPhase.INTAKE

    # Transitions

    def _can_transition(self, target: WorkflowPhase) -> bool:
        return target in PHASE_TRANSITIONS[self.phase]

    def _transition(self, target: WorkflowPhase) -> None:
        if not self._can_transition(target):
            msg = f"Cannot move from {self.phase} to {target}"
            raise ValueError(msg)
        if target != self.phase:
            logger.info("Workflow %s -> %s", self.phase, target)
        self.phase = target
        self._navigate(PHASE_SCREENS[target])

    def _ignored(self, operation: str) -> None:
        log_with_context(logger, "debug", "Ignoring operation in current phase", operation=operation, phase=self.phase)

    # Intake

    def sort_my_day(self, descriptions: Iterable[str]) -> list[Task]:
        """Turn the non-empty descriptions into tasks and start the wizard.

        Returns:
            The created tasks; empty (and nothing changes) when there are none
            or the workflow is not taking new tasks
        """
        with span("workflow.sort_my_day"):
            if not self._can_transition(WorkflowPhase.CATEGORIZING) or self.phase == WorkflowPhase.CATEGORIZING:
                self._ignored("sort_my_day")
                return []

            texts = [text.strip() for text in descriptions if text and text.strip()]
            if not texts:
                logger.debug("sort_my_day called with no task descriptions")
                return []

            tasks = [task_service.build_task(text, clock=self.clock) for text in texts]

            self.store.set("currentTaskIndex", 0)
            self.store.set("signalTasks", [])
            self.store.set("noiseTasks", [])
            self.store.set("tasks", tasks)
            total_created = self.store.get("analytics.totalTasksCreated") or 0
            self.store.set("analytics.totalTasksCreated", total_created + len(tasks))

            log_with_context(logger, "info", "Day sorted into wizard", task_count=len(tasks))
            self._transition(WorkflowPhase.CATEGORIZING)
            return tasks

    # Categorizing

    def current_task(self) -> Task | None:
        """The task the wizard is asking about, or None when there is none."""
        tasks: list[Task] = self.store.get("tasks") or []
        index = self.store.get("currentTaskIndex") or 0
        if 0 <= index < len(tasks):
            return tasks[index]
        return None

    def categorize_current_task(self, checked_count: int) -> Task | None:
        """File the current task as signal (``checked_count >= 3``) or noise.

        Returns:
            The categorized task, or None if there is no current task

        Raises:
            ValueError: If ``checked_count`` is not between 0 and the number of questions
        """
        if not 0 <= checked_count <= Constants.CHECKLIST_QUESTION_COUNT:
            msg = f"checked_count must be between 0 and {Constants.CHECKLIST_QUESTION_COUNT}, got {checked_count}"
            raise ValueError(msg)

        with span("workflow.categorize_current_task"):
            bucket = "signalTasks" if is_signal(checked_count) else "noiseTasks"
            return self._file_current_task(bucket, operation="categorize_current_task")

    def skip_current_task(self) -> Task | None:
        """File the current task as noise without answering the checklist."""
        with span("workflow.skip_current_task"):
            return self._file_current_task("noiseTasks", operation="skip_current_task")

    def _file_current_task(self, bucket: str, *, operation: str) -> Task | None:
        task = self.current_task() if self.phase == WorkflowPhase.CATEGORIZING else None
        if task is None:
            self._ignored(operation)
            return None

        filed: list[Task] = self.store.get(bucket) or []
        filed.append(task)
        self.store.set(bucket, filed)
        self.store.set("currentTaskIndex", (self.store.get("currentTaskIndex") or 0) + 1)

        log_with_context(logger, "debug", "Task categorized", task_id=task.id, bucket=bucket)
        self._advance()
        return task

    def _advance(self) -> None:
        tasks: list[Task] = self.store.get("tasks") or []
        if (self.store.get("currentTaskIndex") or 0) < len(tasks):
            self._transition(WorkflowPhase.CATEGORIZING)
            return

        signal_tasks: list[Task] = self.store.get("signalTasks") or []
        noise_tasks: list[Task] = self.store.get("noiseTasks") or []
        if not signal_tasks and noise_tasks:
            logger.info("Every task landed in noise; offering a rethink")
            self._transition(WorkflowPhase.ZERO_SIGNAL_RETHINK)
        else:
            self._transition(WorkflowPhase.SORTED)

    def rethink_tasks(self) -> bool:
        """Start categorization over with the same tasks after an all-noise pass."""
        with span("workflow.rethink_tasks"):
            if self.phase != WorkflowPhase.ZERO_SIGNAL_RETHINK:
                self._ignored("rethink_tasks")
                return False

            self.store.set("currentTaskIndex", 0)
            self.store.set("signalTasks", [])
            self.store.set("noiseTasks", [])
            self._transition(WorkflowPhase.CATEGORIZING)
            return True

    def get_wizard_progress(self) -> WizardProgress:
        total = len(self.store.get("tasks") or [])
        current = min((self.store.get("currentTaskIndex") or 0) + 1, total)
        return WizardProgress(
            current=current,
            total=total,
            percentage=analytics_service.percentage(current, total),
        )

    # Sorted and locked

    def toggle_signal_task(self, task_id: str, completed: bool | None = None) -> Task | None:
        """Set (or flip) completion of a signal task, mirrored onto ``tasks``.

        Returns:
            The updated task, or None if no signal task has that id
        """
        with span("workflow.toggle_signal_task"):
            signal_task = task_service.find_task(store=self.store, task_id=task_id, path="signalTasks")
            if signal_task is None:
                self._ignored("toggle_signal_task")
                return None

            target = (not signal_task.completed) if completed is None else completed
            return task_service.set_task_completion(
                store=self.store, clock=self.clock, task_id=task_id, completed=target
            )

    def lock_signal_tasks(self) -> bool:
        """Commit to the day's signal set."""
        with span("workflow.lock_signal_tasks"):
            if self.phase == WorkflowPhase.LOCKED:
                return True
            if self.phase != WorkflowPhase.SORTED:
                self._ignored("lock_signal_tasks")
                return False

            self.store.set("isLocked", True)
            self._transition(WorkflowPhase.LOCKED)
            return True

    # Recap

    def show_recap(self) -> RecapSummary | None:
        """Finalize the streak for today and return the recap figures.

        Safe to call repeatedly on the same day; the streak counts once.
        """
        with span("workflow.show_recap"):
            if not self._can_transition(WorkflowPhase.RECAP):
                self._ignored("show_recap")
                return None

            streak = analytics_service.update_streak_data(store=self.store, clock=self.clock)
            signal_tasks: list[Task] = self.store.get("signalTasks") or []
            noise_tasks: list[Task] = self.store.get("noiseTasks") or []
            completed = sum(1 for task in signal_tasks if task.completed)

            self._transition(WorkflowPhase.RECAP)
            return RecapSummary(
                streak_count=streak.count,
                streak_record=self.store.get("analytics.streakRecord") or 0,
                signal_completed=completed,
                signal_total=len(signal_tasks),
                noise_total=len(noise_tasks),
                completion_rate=analytics_service.percentage(completed, len(signal_tasks)),
            )

    def start_new_day(self) -> bool:
        """Close the day and clear the session. Streak and analytics carry over."""
        with span("workflow.start_new_day"):
            if self.phase != WorkflowPhase.RECAP:
                self._ignored("start_new_day")
                return False

            analytics_service.update_average_signal_tasks(store=self.store)
            self.store.reset_day()
            self._transition(WorkflowPhase.INTAKE)
            return True

    # Startup

    def resume(self) -> WorkflowPhase:
        """Work out the phase from (restored) store contents and show its screen.

        Without a North Star goal the North Star screen is shown first.
        """
        with span("workflow.resume"):
            tasks: list[Task] = self.store.get("tasks") or []
            index = self.store.get("currentTaskIndex") or 0
            if index > len(tasks):
                logger.warning("currentTaskIndex %d beyond %d tasks; clamping", index, len(tasks))
                index = len(tasks)
                self.store.set("currentTaskIndex", index)

            signal_tasks: list[Task] = self.store.get("signalTasks") or []
            noise_tasks: list[Task] = self.store.get("noiseTasks") or []

            if not tasks:
                self.phase = WorkflowPhase.INTAKE
            elif index < len(tasks):
                self.phase = WorkflowPhase.CATEGORIZING
            elif not signal_tasks and noise_tasks:
                self.phase = WorkflowPhase.ZERO_SIGNAL_RETHINK
            elif self.store.get("isLocked"):
                self.phase = WorkflowPhase.LOCKED
            else:
                self.phase = WorkflowPhase.SORTED

            logger.info("Workflow resumed in %s", self.phase)
            if not north_star_service.is_north_star_set(store=self.store):
                self._navigate(Screen.NORTH_STAR)
            else:
                self._navigate(PHASE_SCREENS[self.phase])
            return self.phase
