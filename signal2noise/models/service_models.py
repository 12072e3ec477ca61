"""Pydantic models for service layer return types.

These are the snapshots the presentation layer renders from; they carry no
behavior and are never written back into the store.
"""

from datetime import datetime

from pydantic import BaseModel


class ProductivityStats(BaseModel):
    """Projection of the current session and the running analytics."""

    total_tasks_created: int
    signal_tasks_completed: int
    current_streak: int
    streak_record: int
    signal_to_noise_ratio: int  # integer percentage
    average_signal_tasks: float
    completion_rate: int  # integer percentage


class WeeklyReport(BaseModel):
    """Summary of the week so far, with advisory insights."""

    weekly_signal_tasks: int
    weekly_completion_rate: int
    weekly_streak: int
    weekly_focus: int
    insights: list[str]


class AnalyticsExport(BaseModel):
    """Everything analytics knows, stamped with the export time."""

    stats: ProductivityStats
    weekly_report: WeeklyReport
    export_date: datetime


class TaskStats(BaseModel):
    """Counts over the current day's tasks."""

    total: int
    completed: int
    signal: int
    noise: int
    signal_completed: int
    overdue: int
    due_today: int


class WizardProgress(BaseModel):
    """Position within the categorization wizard (1-based ``current``)."""

    current: int
    total: int
    percentage: int


class NorthStarProgress(BaseModel):
    """Signal-task completion measured against the North Star goal."""

    total_signal_tasks: int
    completed_signal_tasks: int
    progress_percentage: int


class RecapSummary(BaseModel):
    """End-of-day figures shown on the recap screen."""

    streak_count: int
    streak_record: int
    signal_completed: int
    signal_total: int
    noise_total: int
    completion_rate: int
