"""Sensor entities for Questboard integration."""
from __future__ import annotations

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN, HISTORY_DAYS
from .coordinator import QuestboardCoordinator


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, add_entities: AddEntitiesCallback):
    coordinator: QuestboardCoordinator = hass.data[DOMAIN][entry.entry_id]
    entities = [
        QuestboardTodayPointsSensor(coordinator),
        QuestboardStreakSensor(coordinator),
        QuestboardWeekPointsSensor(coordinator),
        QuestboardMonthPointsSensor(coordinator),
    ]
    add_entities(entities, True)

class QuestboardSensor(SensorEntity):
    """Sensor that re-renders whenever the coordinator changes."""

    _attr_should_poll = False

    def __init__(self, coord: QuestboardCoordinator, key: str, name: str):
        self._coord = coord
        self._attr_unique_id = f"{DOMAIN}_{key}"
        self._attr_name = f"Questboard {name}"

    async def async_added_to_hass(self) -> None:
        self.async_on_remove(self._coord.async_add_listener(self.async_write_ha_state))

    @property
    def available(self) -> bool:
        """Check if coordinator is ready."""
        return self._coord.model is not None

class QuestboardTodayPointsSensor(QuestboardSensor):
    _attr_icon = "mdi:star-circle"
    _attr_native_unit_of_measurement = "points"
    _attr_state_class = SensorStateClass.TOTAL

    def __init__(self, coord: QuestboardCoordinator):
        super().__init__(coord, "points_today", "Points Today")

    @property
    def native_value(self):
        if not self._coord.model:
            return 0
        return self._coord.compute_day_totals(self._coord.today()).total_points

    @property
    def extra_state_attributes(self):
        if not self._coord.model:
            return {}
        summary = self._coord.compute_day_totals(self._coord.today())
        goal = self._coord.model.settings.daily_goal
        progress = min(100, int(summary.total_points / goal * 100)) if goal else 100
        return {
            "goal": goal,
            "goal_met": summary.goal_met,
            "progress_percentage": progress,
            "completions": self._coord.day_completions(),
        }

class QuestboardStreakSensor(QuestboardSensor):
    _attr_icon = "mdi:fire"
    _attr_native_unit_of_measurement = "days"

    def __init__(self, coord: QuestboardCoordinator):
        super().__init__(coord, "streak", "Streak")

    @property
    def native_value(self):
        if not self._coord.model:
            return 0
        return self._coord.model.meta.streak

    @property
    def extra_state_attributes(self):
        if not self._coord.model:
            return {}
        meta = self._coord.model.meta
        return {
            "best_streak": meta.best_streak,
            "last_rollover": meta.last_assignment_run,
            "last_week_start": meta.last_week_start,
        }

class QuestboardWeekPointsSensor(QuestboardSensor):
    """Points over the last seven days, with a longer daily history attached."""

    _attr_icon = "mdi:calendar-week"
    _attr_native_unit_of_measurement = "points"

    def __init__(self, coord: QuestboardCoordinator):
        super().__init__(coord, "points_week", "Points (Last 7 Days)")

    @property
    def native_value(self):
        if not self._coord.model:
            return 0
        return self._coord.sum_points(7)

    @property
    def extra_state_attributes(self):
        if not self._coord.model:
            return {}
        return {
            "history": [
                {"date": date, "points": points} for date, points in self._coord.history(HISTORY_DAYS)
            ]
        }

class QuestboardMonthPointsSensor(QuestboardSensor):
    _attr_icon = "mdi:calendar-month"
    _attr_native_unit_of_measurement = "points"

    def __init__(self, coord: QuestboardCoordinator):
        super().__init__(coord, "points_month", "Points (This Month)")

    @property
    def native_value(self):
        if not self._coord.model:
            return 0
        return self._coord.sum_month()
