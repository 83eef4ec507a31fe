"""Todo entities for Questboard integration."""
from __future__ import annotations

from datetime import date, datetime
import logging
import re

from homeassistant.components.todo import TodoItem, TodoItemStatus, TodoListEntity, TodoListEntityFeature
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DEFAULT_TASK_POINTS, DOMAIN, QUEST_DAILY, QUEST_WEEKLY
from .coordinator import QuestboardCoordinator
from .date_utils import day_bounds, parse_timestamp
from .scoring import quest_points

_LOGGER = logging.getLogger(__name__)

_POINTS_SUFFIX = re.compile(r"^(?P<title>.*?)\s*\(\+(?P<points>\d+)\)\s*$")


def parse_summary(summary: str | None) -> tuple[str, int | None]:
    """Split ``"Title (+N)"`` into the title and its points, if present."""
    summary = (summary or "").strip()
    match = _POINTS_SUFFIX.match(summary)
    if not match:
        return summary, None
    return match.group("title").strip(), int(match.group("points"))


def _due_timestamp(due: date | datetime | None) -> datetime | None:
    # A plain date means "by the end of that day"
    if due is None or isinstance(due, datetime):
        return due
    return day_bounds(due.isoformat())[1]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, add_entities: AddEntitiesCallback):
    coordinator: QuestboardCoordinator = hass.data[DOMAIN][entry.entry_id]
    add_entities([QuestboardTaskList(coordinator), QuestboardQuestList(coordinator)], True)

class QuestboardTodoList(TodoListEntity):
    _attr_should_poll = False

    def __init__(self, coord: QuestboardCoordinator, key: str, name: str):
        self._coord = coord
        self._attr_name = f"Questboard {name}"
        self._attr_unique_id = f"{DOMAIN}_todo_{key}"

    async def async_added_to_hass(self):
        """Called when entity is added to Home Assistant."""
        await super().async_added_to_hass()
        self.async_on_remove(self._coord.async_add_listener(self.async_write_ha_state))

    @property
    def available(self) -> bool:
        return self._coord.model is not None

class QuestboardTaskList(QuestboardTodoList):
    """One-off tasks; the summary carries the points as ``"Title (+N)"``."""

    def __init__(self, coord: QuestboardCoordinator):
        super().__init__(coord, "tasks", "Tasks")
        self._attr_supported_features = (
            TodoListEntityFeature.CREATE_TODO_ITEM
            | TodoListEntityFeature.UPDATE_TODO_ITEM
            | TodoListEntityFeature.DELETE_TODO_ITEM
            | TodoListEntityFeature.SET_DUE_DATETIME_ON_ITEM
        )

    @property
    def todo_items(self) -> list[TodoItem]:
        if not self._coord.model:
            return []
        items = []
        for task in self._coord.model.tasks.values():
            items.append(TodoItem(
                summary=f"{task.title} (+{task.points})",
                uid=task.id,
                status=TodoItemStatus.COMPLETED if task.completed_at else TodoItemStatus.NEEDS_ACTION,
                due=parse_timestamp(task.due_date),
            ))
        return items

    async def async_create_todo_item(self, item: TodoItem) -> None:
        title, points = parse_summary(item.summary)
        if not title:
            raise HomeAssistantError("Task title can't be empty")
        task = await self._coord.async_create_task(
            title, DEFAULT_TASK_POINTS if points is None else points, _due_timestamp(item.due)
        )
        _LOGGER.debug("Questboard: created task %s from todo list", task.id)
        if item.status == TodoItemStatus.COMPLETED:
            await self._coord.async_toggle_task(task.id)

    async def async_update_todo_item(self, item: TodoItem) -> None:
        task = self._coord.get_task(item.uid)
        if task is None:
            raise HomeAssistantError(f"Task not found: {item.uid}")

        title, points = parse_summary(item.summary)
        changes = {}
        if title and title != task.title:
            changes["title"] = title
        if points is not None and points != task.points:
            changes["points"] = points
        due = _due_timestamp(item.due)
        if due != parse_timestamp(task.due_date):
            changes["due_date"] = due
        if changes:
            await self._coord.async_update_task(task.id, **changes)

        completed = item.status == TodoItemStatus.COMPLETED
        if completed != bool(task.completed_at):
            await self._coord.async_toggle_task(task.id)

    async def async_delete_todo_items(self, uids: list[str]) -> None:
        for uid in uids:
            if not await self._coord.async_delete_task(uid):
                _LOGGER.warning("Questboard: task %s already deleted", uid)

class QuestboardQuestList(QuestboardTodoList):
    """Today's daily quests followed by this week's weekly quests."""

    def __init__(self, coord: QuestboardCoordinator):
        super().__init__(coord, "quests", "Quests")
        self._attr_supported_features = TodoListEntityFeature.UPDATE_TODO_ITEM

    @property
    def todo_items(self) -> list[TodoItem]:
        if not self._coord.model:
            return []
        items = []
        for quest_type in (QUEST_DAILY, QUEST_WEEKLY):
            for assigned in self._coord.get_today_quests(quest_type):
                entry = self._coord.get_quest(assigned.library_id)
                if entry is None:
                    continue
                prefix = "Weekly: " if quest_type == QUEST_WEEKLY else ""
                points = quest_points(entry.base_points, assigned.multiplier)
                items.append(TodoItem(
                    summary=f"{prefix}{entry.title} (+{points})",
                    uid=assigned.id,
                    status=TodoItemStatus.COMPLETED if assigned.completed_at else TodoItemStatus.NEEDS_ACTION,
                ))
        return items

    async def async_update_todo_item(self, item: TodoItem) -> None:
        assigned = self._coord.get_assigned_quest(item.uid)
        if assigned is None:
            raise HomeAssistantError(f"Assigned quest not found: {item.uid}")
        completed = item.status == TodoItemStatus.COMPLETED
        if completed != bool(assigned.completed_at):
            await self._coord.async_toggle_assigned_quest(assigned.id)
