"""Day scoring and streak evaluation for Questboard."""
from __future__ import annotations

from dataclasses import replace
import logging
import math
from typing import Any

from .const import HABIT_BINARY, QUEST_DAILY
from .date_utils import day_bounds, in_range, parse_timestamp, weekday_name
from .models import DaySummary, Habit, HabitLog, Meta, StorageModel, Task

_LOGGER = logging.getLogger(__name__)


def task_points(task: Task) -> int:
    """Points a completed task is worth; overdue completions earn nothing."""
    if task.due_date:
        completed = parse_timestamp(task.completed_at)
        due = parse_timestamp(task.due_date)
        if completed is not None and due is not None and completed > due:
            return 0
    return task.points or 0


def habit_points(habit: Habit, count: int) -> int:
    """Points for a habit log count, with floored partial credit for counters."""
    points = habit.points or 0
    if habit.habit_type == HABIT_BINARY:
        return points if (count or 0) >= 1 else 0
    target = habit.effective_target()
    done = max(0, min(count or 0, target))
    return done * points // target


def habit_log_complete(habit: Habit, log: HabitLog | None) -> bool:
    if log is None:
        return False
    if habit.habit_type == HABIT_BINARY:
        return (log.count or 0) >= 1
    return (log.count or 0) >= habit.effective_target()


def quest_points(base_points: int, multiplier: float) -> int:
    return math.floor((base_points or 0) * (multiplier or 1))


def _completed_within(timestamp: str | None, start, end) -> bool:
    parsed = parse_timestamp(timestamp)
    return parsed is not None and in_range(parsed, start, end)


def compute_day_totals(model: StorageModel, date: str) -> DaySummary:
    """Compute the point total for one day from the current model.

    Pure: reads the model only, so it can be called any number of times.
    """
    start, end = day_bounds(date)
    weekday = weekday_name(date)
    total = 0

    for task in model.tasks.values():
        if _completed_within(task.completed_at, start, end):
            total += task_points(task)

    for log in model.habit_logs.values():
        if log.date != date:
            continue
        habit = model.habits.get(log.habit_id)
        if habit is None:
            _LOGGER.debug("Skipping log %s: habit %s no longer exists", log.id, log.habit_id)
            continue
        if not habit.is_scheduled(weekday):
            continue
        total += habit_points(habit, log.count)

    for event in model.events.values():
        if event.points_enabled and _completed_within(event.completed_at, start, end):
            total += event.points or 0

    for assigned in model.assigned_quests.values():
        if not _completed_within(assigned.completed_at, start, end):
            continue
        entry = model.quest_library.get(assigned.library_id)
        if entry is None:
            _LOGGER.debug("Skipping quest %s: library entry %s no longer exists", assigned.id, assigned.library_id)
            continue
        total += quest_points(entry.base_points, assigned.multiplier)

    goal = model.settings.daily_goal or 0
    return DaySummary(date=date, total_points=int(total), goal_met=total >= goal)


def all_scheduled_habits_complete(model: StorageModel, date: str) -> bool:
    """Check that every habit scheduled on the day reached its threshold.

    Days without scheduled habits pass, so the streak then depends on the
    point goal alone.
    """
    weekday = weekday_name(date)
    scheduled = [h for h in model.habits.values() if h.is_scheduled(weekday)]
    for habit in scheduled:
        log = model.habit_logs.get(HabitLog.make_id(habit.id, date))
        if not habit_log_complete(habit, log):
            return False
    return True


def apply_streak(meta: Meta, summary: DaySummary, habits_complete: bool) -> Meta:
    """Return the lifecycle record updated for one finalized day."""
    if summary.goal_met and habits_complete:
        streak = (meta.streak or 0) + 1
        return replace(meta, streak=streak, best_streak=max(meta.best_streak or 0, streak))
    return replace(meta, streak=0)


def day_completions(model: StorageModel, date: str) -> list[dict[str, Any]]:
    """List everything completed on a day with the points it earned."""
    start, end = day_bounds(date)
    weekday = weekday_name(date)
    items: list[dict[str, Any]] = []

    for task in model.tasks.values():
        if _completed_within(task.completed_at, start, end):
            items.append({"type": "task", "id": task.id, "title": task.title, "points": task_points(task)})

    for log in model.habit_logs.values():
        habit = model.habits.get(log.habit_id)
        if log.date != date or habit is None or not habit.is_scheduled(weekday):
            continue
        points = habit_points(habit, log.count)
        if points:
            items.append({"type": "habit", "id": habit.id, "title": habit.name, "points": points})

    for event in model.events.values():
        if event.points_enabled and _completed_within(event.completed_at, start, end):
            items.append({"type": "event", "id": event.id, "title": event.title, "points": event.points or 0})

    for assigned in model.assigned_quests.values():
        entry = model.quest_library.get(assigned.library_id)
        if entry is None or not _completed_within(assigned.completed_at, start, end):
            continue
        items.append({
            "type": "daily_quest" if assigned.quest_type == QUEST_DAILY else "weekly_quest",
            "id": assigned.id,
            "title": entry.title,
            "points": quest_points(entry.base_points, assigned.multiplier),
        })

    return items
