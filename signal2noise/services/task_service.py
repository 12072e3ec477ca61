"""Task service for creating, updating, filtering and recurring day tasks.

A task can appear in ``tasks`` and in one of ``signalTasks``/``noiseTasks``.
The store hands out copies, so every change to a task is written back to each
list that holds it (matched by id).
"""

import json
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any

from signal2noise.core.clock import Clock
from signal2noise.core.config import Constants
from signal2noise.core.logging import span
from signal2noise.core.state_store import StateStore
from signal2noise.domain.task import Recurrence, RecurrenceType, Task, TaskPriority, new_task_id
from signal2noise.models.service_models import TaskStats


logger = logging.getLogger(__name__)

TASK_LIST_PATHS: tuple[str, ...] = ("tasks", "signalTasks", "noiseTasks")

_RECURRENCE_INTERVAL_DAYS: dict[RecurrenceType, int] = {
    RecurrenceType.DAILY: Constants.RECURRENCE_DAILY_DAYS,
    RecurrenceType.WEEKLY: Constants.RECURRENCE_WEEKLY_DAYS,
    RecurrenceType.MONTHLY: Constants.RECURRENCE_MONTHLY_DAYS,
}


@dataclass
class TaskFilter:
    """Criteria for ``get_tasks_by_filter``. Unset criteria match everything."""

    completed: bool | None = None
    due_today: bool = False
    overdue: bool = False
    project: str | None = None
    priority: TaskPriority | None = None
    search: str | None = None


def _local_naive(moment: datetime) -> datetime:
    return moment.astimezone().replace(tzinfo=None) if moment.tzinfo else moment


def _is_due_today(task: Task, *, clock: Clock) -> bool:
    return task.due_date is not None and _local_naive(task.due_date).date() == clock.today()


def _is_overdue(task: Task, *, clock: Clock) -> bool:
    return task.due_date is not None and not task.completed and _local_naive(task.due_date) < _local_naive(clock.now())


def build_task(
    text: str,
    *,
    clock: Clock,
    priority: TaskPriority | None = None,
    duration: int | None = None,
    due_date: datetime | None = None,
    tags: list[str] | None = None,
    project: str | None = None,
    recurring: Recurrence | dict[str, Any] | None = None,
    notes: str = "",
    estimated_time: int | None = None,
) -> Task:
    """Construct a new task without storing it.

    Raises:
        pydantic.ValidationError: If ``text`` is blank or an option is invalid
    """
    return Task(
        text=text,
        created_at=clock.now(),
        priority=priority or TaskPriority(Constants.DEFAULT_TASK_PRIORITY),
        duration=duration if duration is not None else Constants.DEFAULT_TASK_DURATION_MINUTES,
        due_date=due_date,
        tags=tags or [],
        project=project,
        recurring=recurring,
        notes=notes,
        estimated_time=estimated_time,
    )


def create_task(*, store: StateStore, clock: Clock, text: str, **options: Any) -> Task:
    """Append a new task to ``tasks`` and count it in analytics."""
    with span("task_service.create_task"):
        task = build_task(text, clock=clock, **options)

        tasks: list[Task] = store.get("tasks") or []
        tasks.append(task)
        store.set("tasks", tasks)

        total_created = store.get("analytics.totalTasksCreated") or 0
        store.set("analytics.totalTasksCreated", total_created + 1)

        logger.info("Created task %s", task.id)
        return task


def find_task(*, store: StateStore, task_id: str, path: str = "tasks") -> Task | None:
    tasks: list[Task] = store.get(path) or []
    return next((task for task in tasks if task.id == task_id), None)


def _rewrite_task(*, store: StateStore, task_id: str, updates: dict[str, Any]) -> Task | None:
    """Apply ``updates`` to every stored copy of the task. Returns the updated task."""
    updated: Task | None = None
    for path in TASK_LIST_PATHS:
        tasks: list[Task] = store.get(path) or []
        index = next((i for i, task in enumerate(tasks) if task.id == task_id), None)
        if index is None:
            continue
        tasks[index] = Task.model_validate({**tasks[index].model_dump(), **updates})
        store.set(path, tasks)
        if updated is None or path == "tasks":
            updated = tasks[index]
    return updated


def update_task(*, store: StateStore, task_id: str, **updates: Any) -> Task | None:
    """Update fields of a task wherever it is stored.

    Returns:
        The updated task, or None if no task has that id
    """
    with span("task_service.update_task"):
        if "id" in updates:
            msg = "Task id cannot be changed"
            raise ValueError(msg)
        updated = _rewrite_task(store=store, task_id=task_id, updates=updates)
        if updated is None:
            logger.debug("update_task: no task with id %s", task_id)
        return updated


def delete_task(*, store: StateStore, task_id: str) -> bool:
    """Remove a task from every list. Returns False if it did not exist."""
    with span("task_service.delete_task"):
        removed = False
        for path in TASK_LIST_PATHS:
            tasks: list[Task] = store.get(path) or []
            remaining = [task for task in tasks if task.id != task_id]
            if len(remaining) != len(tasks):
                store.set(path, remaining)
                removed = True
        if removed:
            logger.info("Deleted task %s", task_id)
        return removed


def set_task_completion(*, store: StateStore, clock: Clock, task_id: str, completed: bool) -> Task | None:
    """Mark a task done or not done wherever it is stored.

    ``analytics.signalTasksCompleted`` follows signal tasks as they are
    completed and un-completed.

    Returns:
        The updated task, or None if no task has that id
    """
    with span("task_service.set_task_completion"):
        signal_task = find_task(store=store, task_id=task_id, path="signalTasks")
        current = signal_task or find_task(store=store, task_id=task_id)
        if current is None:
            return None

        updates: dict[str, Any] = {
            "completed": completed,
            "completed_at": clock.now() if completed else None,
        }
        updated = _rewrite_task(store=store, task_id=task_id, updates=updates)

        if signal_task is not None and signal_task.completed != completed:
            signal_completed = store.get("analytics.signalTasksCompleted") or 0
            delta = 1 if completed else -1
            store.set("analytics.signalTasksCompleted", max(0, signal_completed + delta))

        logger.info("Task %s marked %s", task_id, "completed" if completed else "not completed")
        return updated


def complete_task(*, store: StateStore, clock: Clock, task_id: str) -> Task | None:
    return set_task_completion(store=store, clock=clock, task_id=task_id, completed=True)


def get_tasks_by_filter(*, store: StateStore, clock: Clock, task_filter: TaskFilter) -> list[Task]:
    """Return the day's tasks matching every set criterion."""
    tasks: list[Task] = store.get("tasks") or []
    search = task_filter.search.lower() if task_filter.search else None

    def matches(task: Task) -> bool:
        if task_filter.completed is not None and task.completed != task_filter.completed:
            return False
        if task_filter.due_today and not _is_due_today(task, clock=clock):
            return False
        if task_filter.overdue and not _is_overdue(task, clock=clock):
            return False
        if task_filter.project and task.project != task_filter.project:
            return False
        if task_filter.priority and task.priority != task_filter.priority:
            return False
        if search:
            return (
                search in task.text.lower()
                or search in task.notes.lower()
                or any(search in tag.lower() for tag in task.tags)
            )
        return True

    return [task for task in tasks if matches(task)]


def get_task_stats(*, store: StateStore, clock: Clock) -> TaskStats:
    tasks: list[Task] = store.get("tasks") or []
    signal_tasks: list[Task] = store.get("signalTasks") or []
    noise_tasks: list[Task] = store.get("noiseTasks") or []

    return TaskStats(
        total=len(tasks),
        completed=sum(1 for task in tasks if task.completed),
        signal=len(signal_tasks),
        noise=len(noise_tasks),
        signal_completed=sum(1 for task in signal_tasks if task.completed),
        overdue=sum(1 for task in tasks if _is_overdue(task, clock=clock)),
        due_today=sum(1 for task in tasks if _is_due_today(task, clock=clock) and not task.completed),
    )


def should_create_recurring_task(*, recurrence: Recurrence, last_completed: date, today: date) -> bool:
    """True once enough whole days have passed since the last completion."""
    days_since_completed = (today - last_completed).days
    return days_since_completed >= _RECURRENCE_INTERVAL_DAYS[recurrence.type]


def calculate_next_due_date(*, recurrence: Recurrence, current_due_date: datetime | None) -> datetime | None:
    if current_due_date is None:
        return None
    return current_due_date + timedelta(days=_RECURRENCE_INTERVAL_DAYS[recurrence.type])


def create_recurring_tasks(*, store: StateStore, clock: Clock) -> list[Task]:
    """Spawn fresh copies of completed recurring tasks that are due to come back.

    Returns:
        The newly created tasks
    """
    with span("task_service.create_recurring_tasks"):
        tasks: list[Task] = store.get("tasks") or []
        today = clock.today()
        spawned: list[Task] = []

        # A recurring task already waiting to be done is not spawned again
        pending = {(task.text, task.recurring.type) for task in tasks if task.recurring and not task.completed}

        for task in tasks:
            if task.recurring is None or not task.completed or task.completed_at is None:
                continue
            if (task.text, task.recurring.type) in pending:
                continue
            last_completed = _local_naive(task.completed_at).date()
            if not should_create_recurring_task(recurrence=task.recurring, last_completed=last_completed, today=today):
                continue
            spawned.append(
                task.model_copy(
                    update={
                        "id": new_task_id(),
                        "completed": False,
                        "created_at": clock.now(),
                        "completed_at": None,
                        "due_date": calculate_next_due_date(recurrence=task.recurring, current_due_date=task.due_date),
                    },
                    deep=True,
                )
            )
            pending.add((task.text, task.recurring.type))

        if spawned:
            store.set("tasks", tasks + spawned)
            logger.info("Created %d recurring task(s)", len(spawned))
        return spawned


def export_tasks_json(*, store: StateStore) -> str:
    """Serialize the day's tasks as a pretty-printed JSON array (camelCase keys)."""
    tasks: list[Task] = store.get("tasks") or []
    return json.dumps([task.model_dump(mode="json", by_alias=True) for task in tasks], indent=2)
