"""Analytics service: day-completion streaks, running averages and productivity ratios.

This module provides functions for:
- Updating the streak when a day is recapped with every signal task done
- Folding a finished day into the running average of signal tasks per day
- Projecting productivity stats and advisory insights from the store

Key Concepts:
- Streak: consecutive calendar days on which all signal tasks were completed
  by recap time. A day counts at most once, however often it is recapped.
- Ratios are integer percentages rounded half-up.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from signal2noise.core.clock import Clock, day_key, yesterday_of
from signal2noise.core.config import Constants
from signal2noise.core.logging import log_with_context, span
from signal2noise.core.state_store import StateStore
from signal2noise.domain.analytics import Analytics, StreakData
from signal2noise.domain.task import Task
from signal2noise.models.service_models import AnalyticsExport, ProductivityStats, WeeklyReport


logger = logging.getLogger(__name__)


def round_half_up(value: Decimal | float | int, places: int = 0) -> Decimal:
    """Round to ``places`` decimals, with halves going up."""
    quantum = Decimal(1).scaleb(-places)
    return Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)


def percentage(part: int, whole: int) -> int:
    """Integer percentage of ``part`` in ``whole``; 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return int(round_half_up(Decimal(100 * part) / Decimal(whole)))


def _signal_tasks(store: StateStore) -> list[Task]:
    return store.get("signalTasks") or []


def update_streak_data(*, store: StateStore, clock: Clock) -> StreakData:
    """Count today toward the streak if every signal task is complete.

    Consecutive days extend the streak; a gap restarts it at 1. Calling this
    again on a day that was already counted changes nothing.

    Args:
        store: State store to read and update
        clock: Source of today's date

    Returns:
        The streak data after the update
    """
    with span("analytics_service.update_streak_data"):
        today = clock.today()
        today_key = day_key(today)
        signal_tasks = _signal_tasks(store)
        streak: StreakData = store.get("streakData")

        all_signal_completed = len(signal_tasks) > 0 and all(task.completed for task in signal_tasks)
        if not all_signal_completed or streak.last_completed_date == today_key:
            logger.debug(
                "Streak unchanged (all_signal_completed=%s, last_completed_date=%s)",
                all_signal_completed,
                streak.last_completed_date,
            )
            return streak

        if streak.last_completed_date == day_key(yesterday_of(today)):
            streak.count += 1
        else:
            streak.count = 1
        streak.last_completed_date = today_key

        current_record = store.get("analytics.streakRecord") or 0
        if streak.count > current_record:
            store.set("analytics.streakRecord", streak.count)

        store.set("streakData", streak)
        log_with_context(logger, "info", "Streak updated", streak_count=streak.count, day=today_key)
        return streak


def update_average_signal_tasks(*, store: StateStore) -> Analytics:
    """Fold today's signal-task count into the running per-day average.

    The average is rounded to one decimal place and ``totalDays`` grows by
    one on every call.

    Returns:
        The analytics after the update
    """
    with span("analytics_service.update_average_signal_tasks"):
        signal_count = len(_signal_tasks(store))
        current_average = store.get("analytics.averageSignalTasks") or 0
        total_days = store.get("analytics.totalDays") or 0

        if total_days > 0:
            new_average = (Decimal(str(current_average)) * total_days + signal_count) / (total_days + 1)
        else:
            new_average = Decimal(signal_count)

        store.set("analytics.averageSignalTasks", float(round_half_up(new_average, places=1)))
        store.set("analytics.totalDays", total_days + 1)
        return store.get("analytics")


def get_productivity_stats(*, store: StateStore) -> ProductivityStats:
    """Project the current session and running analytics into stats."""
    analytics: Analytics = store.get("analytics")
    streak: StreakData = store.get("streakData")
    signal_tasks = _signal_tasks(store)
    noise_tasks: list[Task] = store.get("noiseTasks") or []
    completed_signal = sum(1 for task in signal_tasks if task.completed)

    signal_to_noise_ratio = (
        percentage(len(signal_tasks), len(signal_tasks) + len(noise_tasks)) if signal_tasks else 0
    )

    return ProductivityStats(
        total_tasks_created=analytics.total_tasks_created,
        signal_tasks_completed=analytics.signal_tasks_completed,
        current_streak=streak.count,
        streak_record=analytics.streak_record,
        signal_to_noise_ratio=signal_to_noise_ratio,
        average_signal_tasks=analytics.average_signal_tasks,
        completion_rate=percentage(completed_signal, len(signal_tasks)),
    )


def generate_insights(stats: ProductivityStats) -> list[str]:
    """Evaluate every advisory rule against the stats.

    Rules are independent; all that match are returned, in a fixed order.
    """
    insights: list[str] = []

    if stats.signal_to_noise_ratio < Constants.INSIGHT_LOW_FOCUS_RATIO:
        insights.append("Consider being more selective with your tasks. Focus on what truly matters.")

    if stats.completion_rate < Constants.INSIGHT_LOW_COMPLETION_RATE:
        insights.append("Try reducing the number of signal tasks to improve completion rate.")

    if stats.current_streak == 0:
        insights.append("Start building momentum by completing all your signal tasks today.")
    elif stats.current_streak >= Constants.INSIGHT_STREAK_MILESTONE:
        insights.append("Amazing streak! You're building excellent productivity habits.")

    if stats.average_signal_tasks > Constants.INSIGHT_OVERCOMMIT_AVERAGE:
        insights.append("You might be overcommitting. Consider limiting signal tasks to 5 or fewer.")

    return insights


def get_weekly_report(*, store: StateStore) -> WeeklyReport:
    """Summarize the week from the current session data."""
    stats = get_productivity_stats(store=store)
    return WeeklyReport(
        weekly_signal_tasks=stats.signal_tasks_completed,
        weekly_completion_rate=stats.completion_rate,
        weekly_streak=stats.current_streak,
        weekly_focus=stats.signal_to_noise_ratio,
        insights=generate_insights(stats),
    )


def export_analytics(*, store: StateStore, clock: Clock) -> AnalyticsExport:
    with span("analytics_service.export_analytics"):
        return AnalyticsExport(
            stats=get_productivity_stats(store=store),
            weekly_report=get_weekly_report(store=store),
            export_date=clock.now(),
        )
