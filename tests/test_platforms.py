"""Unit tests for Questboard platform entities."""
from __future__ import annotations

from datetime import date
from unittest.mock import Mock

from homeassistant.components.todo import TodoItem, TodoItemStatus
from homeassistant.exceptions import HomeAssistantError
import pytest

from custom_components.questboard.button import QuestboardRolloverButton, async_setup_entry as button_setup
from custom_components.questboard.const import DOMAIN
from custom_components.questboard.diagnostics import async_get_config_entry_diagnostics
from custom_components.questboard.number import QuestboardSettingNumber, async_setup_entry as number_setup
from custom_components.questboard.sensor import (
    QuestboardMonthPointsSensor,
    QuestboardStreakSensor,
    QuestboardTodayPointsSensor,
    QuestboardWeekPointsSensor,
    async_setup_entry as sensor_setup,
)
from custom_components.questboard.todo import (
    QuestboardQuestList,
    QuestboardTaskList,
    async_setup_entry as todo_setup,
    parse_summary,
)


@pytest.fixture
def entry():
    entry = Mock()
    entry.entry_id = "test_entry"
    entry.data = {"daily_goal": 100}
    entry.options = {}
    return entry


def _register(mock_hass, entry, coordinator):
    mock_hass.data = {DOMAIN: {entry.entry_id: coordinator}}


class TestPlatformSetup:
    """Test entities created per platform."""

    @pytest.mark.asyncio
    async def test_entity_counts(self, mock_hass, entry, booted):
        _register(mock_hass, entry, booted)
        for setup, expected in ((sensor_setup, 4), (todo_setup, 2), (number_setup, 3), (button_setup, 1)):
            add_entities = Mock()
            await setup(mock_hass, entry, add_entities)
            assert len(add_entities.call_args[0][0]) == expected


class TestSensors:
    """Test sensor values."""

    @pytest.mark.asyncio
    async def test_today_points(self, booted):
        await booted.async_update_settings(daily_goal=40)
        task = await booted.async_create_task("Dishes", 10)
        await booted.async_toggle_task(task.id)

        sensor = QuestboardTodayPointsSensor(booted)
        assert sensor.native_value == 10
        attributes = sensor.extra_state_attributes
        assert attributes["goal"] == 40
        assert attributes["goal_met"] is False
        assert attributes["progress_percentage"] == 25
        assert attributes["completions"] == [{"type": "task", "id": task.id, "title": "Dishes", "points": 10}]

    @pytest.mark.asyncio
    async def test_progress_capped(self, booted):
        await booted.async_update_settings(daily_goal=5)
        task = await booted.async_create_task("Dishes", 10)
        await booted.async_toggle_task(task.id)
        assert QuestboardTodayPointsSensor(booted).extra_state_attributes["progress_percentage"] == 100

    @pytest.mark.asyncio
    async def test_streak(self, booted, clock):
        await booted.async_update_settings(daily_goal=0)
        clock.set(2024, 3, 5)
        await booted.async_ensure_rollover()

        sensor = QuestboardStreakSensor(booted)
        assert sensor.native_value == 1
        assert sensor.extra_state_attributes == {
            "best_streak": 1,
            "last_rollover": "2024-03-05",
            "last_week_start": "2024-03-04",
        }

    @pytest.mark.asyncio
    async def test_week_and_month(self, booted):
        task = await booted.async_create_task("Dishes", 10)
        await booted.async_toggle_task(task.id)

        week = QuestboardWeekPointsSensor(booted)
        assert week.native_value == 10
        history = week.extra_state_attributes["history"]
        assert len(history) == 35
        assert history[-1] == {"date": "2024-03-04", "points": 10}
        assert QuestboardMonthPointsSensor(booted).native_value == 10

    def test_unavailable_before_boot(self, coordinator):
        sensor = QuestboardTodayPointsSensor(coordinator)
        assert sensor.available is False
        assert sensor.native_value == 0
        assert sensor.extra_state_attributes == {}

    def test_unique_ids(self, coordinator):
        assert QuestboardStreakSensor(coordinator).unique_id == f"{DOMAIN}_streak"
        assert QuestboardMonthPointsSensor(coordinator).unique_id == f"{DOMAIN}_points_month"


class TestTodoLists:
    """Test the task and quest todo lists."""

    def test_parse_summary(self):
        assert parse_summary("Dishes (+15)") == ("Dishes", 15)
        assert parse_summary("  Dishes  ") == ("Dishes", None)
        assert parse_summary("Buy (+) stuff") == ("Buy (+) stuff", None)
        assert parse_summary(None) == ("", None)

    @pytest.mark.asyncio
    async def test_create_from_summary(self, booted):
        todo = QuestboardTaskList(booted)
        await todo.async_create_todo_item(TodoItem(summary="Dishes (+15)", status=TodoItemStatus.NEEDS_ACTION))

        task = next(iter(booted.model.tasks.values()))
        assert (task.title, task.points) == ("Dishes", 15)
        assert todo.todo_items[0].summary == "Dishes (+15)"
        assert todo.todo_items[0].uid == task.id

    @pytest.mark.asyncio
    async def test_create_default_points_and_due_date(self, booted):
        todo = QuestboardTaskList(booted)
        await todo.async_create_todo_item(TodoItem(summary="Laundry", due=date(2024, 3, 6)))

        task = next(iter(booted.model.tasks.values()))
        assert task.points == 10
        assert task.due_date == "2024-03-06T23:59:59.999+00:00"

    @pytest.mark.asyncio
    async def test_create_empty_title(self, booted):
        with pytest.raises(HomeAssistantError):
            await QuestboardTaskList(booted).async_create_todo_item(TodoItem(summary=" (+5)"))

    @pytest.mark.asyncio
    async def test_complete_and_rename(self, booted):
        task = await booted.async_create_task("Dishes", 15)
        todo = QuestboardTaskList(booted)

        await todo.async_update_todo_item(
            TodoItem(summary="Pots (+20)", uid=task.id, status=TodoItemStatus.COMPLETED)
        )

        task = booted.get_task(task.id)
        assert (task.title, task.points) == ("Pots", 20)
        assert task.completed_at is not None
        assert todo.todo_items[0].status == TodoItemStatus.COMPLETED
        assert booted.model.day_summaries["2024-03-04"].total_points == 20

    @pytest.mark.asyncio
    async def test_update_unknown(self, booted):
        with pytest.raises(HomeAssistantError):
            await QuestboardTaskList(booted).async_update_todo_item(TodoItem(summary="x", uid="missing"))

    @pytest.mark.asyncio
    async def test_delete(self, booted):
        task = await booted.async_create_task("Dishes", 15)
        await QuestboardTaskList(booted).async_delete_todo_items([task.id, "missing"])
        assert booted.model.tasks == {}

    @pytest.mark.asyncio
    async def test_quest_list(self, coordinator, backend):
        backend.seed("quest_library", {"q0": {"id": "q0", "title": "Walk", "base_points": 10, "active": True}})
        await coordinator.async_boot()

        todo = QuestboardQuestList(coordinator)
        summaries = sorted(item.summary for item in todo.todo_items)
        assert summaries == ["Walk (+10)", "Weekly: Walk (+15)"]

        daily = coordinator.get_today_quests("daily")[0]
        await todo.async_update_todo_item(
            TodoItem(summary="Walk (+10)", uid=daily.id, status=TodoItemStatus.COMPLETED)
        )
        assert coordinator.get_assigned_quest(daily.id).completed_at is not None
        assert coordinator.model.day_summaries["2024-03-04"].total_points == 10

    @pytest.mark.asyncio
    async def test_quest_list_unknown(self, booted):
        with pytest.raises(HomeAssistantError):
            await QuestboardQuestList(booted).async_update_todo_item(TodoItem(summary="x", uid="missing"))


class TestNumbers:
    """Test settings number entities."""

    @pytest.mark.asyncio
    async def test_daily_goal(self, booted):
        number = QuestboardSettingNumber(booted, "daily_goal", "Daily Goal", 0, 100000, 1, "mdi:flag-checkered")
        number.async_write_ha_state = Mock()
        assert number.native_value == 100.0

        await number.async_set_native_value(75.0)
        assert booted.model.settings.daily_goal == 75
        assert isinstance(booted.model.settings.daily_goal, int)
        number.async_write_ha_state.assert_called_once()

    @pytest.mark.asyncio
    async def test_weekly_factor_rounded(self, booted):
        number = QuestboardSettingNumber(booted, "weekly_factor", "Weekly Quest Factor", 1.0, 3.0, 0.1, "mdi:x")
        number.async_write_ha_state = Mock()
        await number.async_set_native_value(2.3000000001)
        assert booted.model.settings.weekly_factor == 2.3

    def test_unavailable_before_boot(self, coordinator):
        number = QuestboardSettingNumber(coordinator, "daily_goal", "Daily Goal", 0, 100000, 1, "mdi:x")
        assert number.available is False
        assert number.native_value is None


class TestButton:
    """Test the rollover button."""

    @pytest.mark.asyncio
    async def test_press_runs_rollover(self, booted, clock):
        clock.set(2024, 3, 5)
        await QuestboardRolloverButton(booted).async_press()
        assert booted.model.meta.last_assignment_run == "2024-03-05"


class TestDiagnostics:
    """Test diagnostics output."""

    @pytest.mark.asyncio
    async def test_diagnostics(self, mock_hass, entry, booted):
        _register(mock_hass, entry, booted)
        await booted.async_create_habit("Read", "counter", target=2)
        await booted.async_create_task("Dishes")

        result = await async_get_config_entry_diagnostics(mock_hass, entry)
        assert result["today"] == "2024-03-04"
        assert result["settings"]["daily_goal"] == 100
        assert result["statistics"]["tasks"] == 1
        assert result["statistics"]["open_tasks"] == 1
        assert result["statistics"]["habits_by_type"] == {"counter": 1}
        assert len(result["recent_days"]) == 7

    @pytest.mark.asyncio
    async def test_diagnostics_before_boot(self, mock_hass, entry, coordinator):
        _register(mock_hass, entry, coordinator)
        result = await async_get_config_entry_diagnostics(mock_hass, entry)
        assert result == {"error": "Coordinator model not initialized"}
