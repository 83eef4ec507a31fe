"""Diagnostics support for Questboard integration."""
from __future__ import annotations

from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import DOMAIN, QUEST_DAILY, QUEST_WEEKLY, STORAGE_KEY, STORAGE_VERSION
from .coordinator import QuestboardCoordinator


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    coordinator: QuestboardCoordinator = hass.data[DOMAIN][entry.entry_id]

    if not coordinator.model:
        return {"error": "Coordinator model not initialized"}

    model = coordinator.model
    today = coordinator.today()

    habits_by_type: dict[str, int] = {}
    for habit in model.habits.values():
        habits_by_type[habit.habit_type] = habits_by_type.get(habit.habit_type, 0) + 1

    # Titles are left out, they are user content
    recent_days = [
        {"date": date, "points": points, "goal_met": coordinator.get_day_summary(date).goal_met}
        for date, points in coordinator.history(7)
    ]

    return {
        "config_data": dict(entry.data),
        "options": dict(entry.options),
        "settings": dict(vars(model.settings)),
        "meta": dict(vars(model.meta)),
        "today": today,
        "statistics": {
            "tasks": len(model.tasks),
            "open_tasks": sum(1 for task in model.tasks.values() if not task.completed_at),
            "habits": len(model.habits),
            "habits_by_type": habits_by_type,
            "habit_logs": len(model.habit_logs),
            "events": len(model.events),
            "quest_library": len(model.quest_library),
            "active_quests": sum(1 for entry_ in model.quest_library.values() if entry_.active),
            "assigned_quests": len(model.assigned_quests),
            "today_daily_quests": len(coordinator.get_today_quests(QUEST_DAILY)),
            "current_weekly_quests": len(coordinator.get_today_quests(QUEST_WEEKLY)),
            "day_summaries": len(model.day_summaries),
        },
        "recent_days": recent_days,
        "storage_status": {
            "model_loaded": True,
            "storage_version": STORAGE_VERSION,
            "storage_key": STORAGE_KEY,
        },
    }
