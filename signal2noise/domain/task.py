"""Task domain models and enums."""

import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import Field, field_validator

from signal2noise.domain.base import StateModel


def new_task_id() -> str:
    """Generate an opaque unique task identifier."""
    return uuid.uuid4().hex


class TaskPriority(StrEnum):
    """How urgent a task is."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RecurrenceType(StrEnum):
    """How often a recurring task comes back."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Recurrence(StateModel):
    """Recurrence rule attached to a task."""

    type: RecurrenceType


class Task(StateModel):
    """A unit of intended work for the day. Identity is ``id``."""

    id: str = Field(default_factory=new_task_id, description="Unique opaque task identifier")
    text: str = Field(..., min_length=1, description="What the task is")
    completed: bool = Field(default=False, description="Whether the task is done")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")
    completed_at: datetime | None = Field(default=None, description="Completion timestamp")
    due_date: datetime | None = Field(default=None, description="Optional due timestamp")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    duration: int = Field(default=30, ge=0, description="Planned duration in minutes")
    tags: list[str] = Field(default_factory=list, description="Distinct tags, in insertion order")
    project: str | None = Field(default=None, description="Optional project name")
    recurring: Recurrence | None = Field(default=None, description="Optional recurrence rule")
    notes: str = Field(default="", description="Free-form notes")
    subtasks: list[Any] = Field(default_factory=list, description="Preserved, not interpreted")
    time_tracked: int = Field(default=0, ge=0, description="Tracked time in minutes")
    estimated_time: int | None = Field(default=None, ge=0, description="Optional estimate in minutes")

    @field_validator("text")
    @classmethod
    def _strip_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Task text must not be blank")
        return stripped

    @field_validator("tags")
    @classmethod
    def _dedupe_tags(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))
