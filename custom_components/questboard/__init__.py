"""The Questboard integration."""
from __future__ import annotations

import asyncio
from datetime import timedelta
import logging
from typing import Any, Awaitable, Callable

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import ConfigEntryNotReady, HomeAssistantError
import homeassistant.helpers.config_validation as cv
from homeassistant.helpers.event import async_track_time_interval
from homeassistant.helpers.start import async_at_started
from homeassistant.helpers.typing import ConfigType
import voluptuous as vol

_LOGGER = logging.getLogger(__name__)

from .const import (
    CONF_DAILY_GOAL,
    CONF_DAILY_QUEST_COUNT,
    CONF_WEEK_START,
    CONF_WEEKLY_FACTOR,
    CONF_WEEKLY_QUEST_COUNT,
    CONF_WEEKLY_QUEST_MAX,
    CONF_WEEKLY_QUEST_MIN,
    CONF_WEEKLY_QUEST_MODE,
    DEFAULT_EVENT_COLOR,
    DEFAULT_TASK_POINTS,
    DOMAIN,
    HABIT_BINARY,
    HABIT_TYPES,
    MAX_DAILY_GOAL,
    MAX_QUEST_COUNT,
    MAX_WEEKLY_FACTOR,
    MIN_WEEKLY_FACTOR,
    PLATFORMS,
    ROLLOVER_CHECK_INTERVAL_SECONDS,
    ROLLOVER_DAY_CHANGED,
    SERVICE_CHECK_ROLLOVER,
    SERVICE_COMPLETE_HABIT,
    SERVICE_CREATE_EVENT,
    SERVICE_CREATE_HABIT,
    SERVICE_CREATE_QUEST,
    SERVICE_CREATE_TASK,
    SERVICE_DELETE_EVENT,
    SERVICE_DELETE_HABIT,
    SERVICE_DELETE_QUEST,
    SERVICE_DELETE_TASK,
    SERVICE_STEP_HABIT,
    SERVICE_TOGGLE_EVENT,
    SERVICE_TOGGLE_HABIT,
    SERVICE_TOGGLE_QUEST,
    SERVICE_TOGGLE_TASK,
    SERVICE_UPDATE_EVENT,
    SERVICE_UPDATE_HABIT,
    SERVICE_UPDATE_QUEST,
    SERVICE_UPDATE_SETTINGS,
    SERVICE_UPDATE_TASK,
    WEEK_STARTS,
    WEEKDAYS,
    WEEKLY_MODES,
)
from .coordinator import QuestboardCoordinator
from .storage import StorageError

SETTINGS_KEYS = [
    CONF_DAILY_GOAL,
    CONF_DAILY_QUEST_COUNT,
    CONF_WEEK_START,
    CONF_WEEKLY_QUEST_MODE,
    CONF_WEEKLY_QUEST_COUNT,
    CONF_WEEKLY_QUEST_MIN,
    CONF_WEEKLY_QUEST_MAX,
    CONF_WEEKLY_FACTOR,
]

SERVICE_NAMES = [
    SERVICE_CREATE_TASK,
    SERVICE_UPDATE_TASK,
    SERVICE_DELETE_TASK,
    SERVICE_TOGGLE_TASK,
    SERVICE_CREATE_HABIT,
    SERVICE_UPDATE_HABIT,
    SERVICE_DELETE_HABIT,
    SERVICE_TOGGLE_HABIT,
    SERVICE_STEP_HABIT,
    SERVICE_COMPLETE_HABIT,
    SERVICE_CREATE_EVENT,
    SERVICE_UPDATE_EVENT,
    SERVICE_DELETE_EVENT,
    SERVICE_TOGGLE_EVENT,
    SERVICE_CREATE_QUEST,
    SERVICE_UPDATE_QUEST,
    SERVICE_DELETE_QUEST,
    SERVICE_TOGGLE_QUEST,
    SERVICE_UPDATE_SETTINGS,
    SERVICE_CHECK_ROLLOVER,
]

_POINTS = vol.All(vol.Coerce(int), vol.Range(min=0))
_QUEST_COUNT = vol.All(vol.Coerce(int), vol.Range(min=0, max=MAX_QUEST_COUNT))
_SCHEDULE = vol.All(cv.ensure_list, [vol.In(WEEKDAYS)], vol.Length(min=1))

CREATE_TASK_SCHEMA = vol.Schema({
    vol.Required("title"): cv.string,
    vol.Optional("points", default=DEFAULT_TASK_POINTS): _POINTS,
    vol.Optional("due_date"): cv.datetime,
})

UPDATE_TASK_SCHEMA = vol.Schema({
    vol.Required("task_id"): cv.string,
    vol.Optional("title"): cv.string,
    vol.Optional("points"): _POINTS,
    vol.Optional("due_date"): vol.Any(None, cv.datetime),
})

TASK_ID_SCHEMA = vol.Schema({vol.Required("task_id"): cv.string})

CREATE_HABIT_SCHEMA = vol.Schema({
    vol.Required("name"): cv.string,
    vol.Optional("habit_type", default=HABIT_BINARY): vol.In(HABIT_TYPES),
    vol.Optional("target", default=1): cv.positive_int,
    vol.Optional("points", default=10): _POINTS,
    vol.Optional("schedule", default=list(WEEKDAYS)): _SCHEDULE,
})

UPDATE_HABIT_SCHEMA = vol.Schema({
    vol.Required("habit_id"): cv.string,
    vol.Optional("name"): cv.string,
    vol.Optional("habit_type"): vol.In(HABIT_TYPES),
    vol.Optional("target"): cv.positive_int,
    vol.Optional("points"): _POINTS,
    vol.Optional("schedule"): _SCHEDULE,
})

HABIT_ID_SCHEMA = vol.Schema({vol.Required("habit_id"): cv.string})

STEP_HABIT_SCHEMA = vol.Schema({
    vol.Required("habit_id"): cv.string,
    vol.Optional("delta", default=1): vol.Coerce(int),
})

CREATE_EVENT_SCHEMA = vol.Schema({
    vol.Required("title"): cv.string,
    vol.Optional("start"): cv.datetime,
    vol.Optional("end"): cv.datetime,
    vol.Optional("all_day", default=False): cv.boolean,
    vol.Optional("color", default=DEFAULT_EVENT_COLOR): cv.string,
    vol.Optional("points_enabled", default=False): cv.boolean,
    vol.Optional("points", default=0): _POINTS,
})

UPDATE_EVENT_SCHEMA = vol.Schema({
    vol.Required("event_id"): cv.string,
    vol.Optional("title"): cv.string,
    vol.Optional("start"): cv.datetime,
    vol.Optional("end"): vol.Any(None, cv.datetime),
    vol.Optional("all_day"): cv.boolean,
    vol.Optional("color"): cv.string,
    vol.Optional("points_enabled"): cv.boolean,
    vol.Optional("points"): _POINTS,
})

EVENT_ID_SCHEMA = vol.Schema({vol.Required("event_id"): cv.string})

CREATE_QUEST_SCHEMA = vol.Schema({
    vol.Required("title"): cv.string,
    vol.Optional("base_points", default=10): _POINTS,
    vol.Optional("active", default=True): cv.boolean,
})

UPDATE_QUEST_SCHEMA = vol.Schema({
    vol.Required("quest_id"): cv.string,
    vol.Optional("title"): cv.string,
    vol.Optional("base_points"): _POINTS,
    vol.Optional("active"): cv.boolean,
})

QUEST_ID_SCHEMA = vol.Schema({vol.Required("quest_id"): cv.string})

TOGGLE_QUEST_SCHEMA = vol.Schema({vol.Required("assigned_id"): cv.string})

UPDATE_SETTINGS_SCHEMA = vol.Schema({
    vol.Optional(CONF_DAILY_GOAL): vol.All(vol.Coerce(int), vol.Range(min=0, max=MAX_DAILY_GOAL)),
    vol.Optional(CONF_DAILY_QUEST_COUNT): _QUEST_COUNT,
    vol.Optional(CONF_WEEK_START): vol.In(WEEK_STARTS),
    vol.Optional(CONF_WEEKLY_QUEST_MODE): vol.In(WEEKLY_MODES),
    vol.Optional(CONF_WEEKLY_QUEST_COUNT): _QUEST_COUNT,
    vol.Optional(CONF_WEEKLY_QUEST_MIN): _QUEST_COUNT,
    vol.Optional(CONF_WEEKLY_QUEST_MAX): _QUEST_COUNT,
    vol.Optional(CONF_WEEKLY_FACTOR): vol.All(
        vol.Coerce(float), vol.Range(min=MIN_WEEKLY_FACTOR, max=MAX_WEEKLY_FACTOR)
    ),
})

CHECK_ROLLOVER_SCHEMA = vol.Schema({})


def _settings_from(data: dict[str, Any]) -> dict[str, Any]:
    return {key: data[key] for key in SETTINGS_KEYS if key in data}


def _require(result: Any, kind: str, item_id: str) -> Any:
    if result is None or result is False:
        raise HomeAssistantError(f"{kind} not found: {item_id}")
    return result


def _service_handler(
    name: str, action: Callable[[dict[str, Any]], Awaitable[None]]
) -> Callable[[ServiceCall], Awaitable[None]]:
    """Wrap a service action with the shared error reporting."""

    async def _handler(call: ServiceCall) -> None:
        try:
            _LOGGER.debug("Questboard: %s service called", name)
            await action(dict(call.data))
        except StorageError as ex:
            _LOGGER.error("Storage failure in %s service: %s", name, ex)
            raise
        except HomeAssistantError:
            raise
        except KeyError as ex:
            _LOGGER.error("Missing required parameter in %s service: %s", name, ex)
            raise HomeAssistantError(f"Missing required parameter: {ex}") from ex
        except (ValueError, TypeError) as ex:
            _LOGGER.error("Invalid parameter value in %s service: %s", name, ex)
            raise HomeAssistantError(f"Invalid parameter: {ex}") from ex
        except Exception as ex:
            _LOGGER.exception("Unexpected error in %s service", name)
            raise HomeAssistantError(f"Service failed: {ex}") from ex

    return _handler


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up the Questboard component."""
    return True

async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Questboard from a config entry."""
    try:
        coordinator = QuestboardCoordinator(hass)
        state = await coordinator.async_boot(_settings_from(entry.data))
    except (StorageError, asyncio.TimeoutError, OSError) as ex:
        raise ConfigEntryNotReady(f"Failed to initialize Questboard coordinator: {ex}") from ex
    except Exception as ex:
        _LOGGER.exception("Unexpected error setting up Questboard")
        raise ConfigEntryNotReady(f"Setup failed: {ex}") from ex
    _LOGGER.info("Questboard loaded (%s)", state)

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = coordinator

    try:
        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    except Exception as ex:
        _LOGGER.exception("Failed to set up platforms")
        raise ConfigEntryNotReady(f"Failed to set up platforms: {ex}") from ex

    # ---- Day change trigger ----
    async def _async_check_rollover(*_args: Any) -> None:
        """Run the rollover; a failed write is retried on the next tick."""
        try:
            state = await coordinator.async_ensure_rollover()
        except StorageError as ex:
            _LOGGER.error("Rollover check failed, retrying on next tick: %s", ex)
            return
        if state == ROLLOVER_DAY_CHANGED:
            _LOGGER.info("New day started, quests assigned for %s", coordinator.today())

    entry.async_on_unload(
        async_track_time_interval(
            hass, _async_check_rollover, timedelta(seconds=ROLLOVER_CHECK_INTERVAL_SECONDS)
        )
    )
    entry.async_on_unload(async_at_started(hass, _async_check_rollover))
    entry.async_on_unload(entry.add_update_listener(_async_update_options))

    # ---- Services ----
    async def _create_task(data: dict[str, Any]) -> None:
        task = await coordinator.async_create_task(data["title"], data["points"], data.get("due_date"))
        _LOGGER.info("Created task %s: %s (%d points)", task.id, task.title, task.points)

    async def _update_task(data: dict[str, Any]) -> None:
        task_id = data.pop("task_id")
        _require(await coordinator.async_update_task(task_id, **data), "Task", task_id)

    async def _delete_task(data: dict[str, Any]) -> None:
        _require(await coordinator.async_delete_task(data["task_id"]), "Task", data["task_id"])

    async def _toggle_task(data: dict[str, Any]) -> None:
        task = _require(await coordinator.async_toggle_task(data["task_id"]), "Task", data["task_id"])
        _LOGGER.info("Task %s %s", task.title, "completed" if task.completed_at else "uncompleted")

    async def _create_habit(data: dict[str, Any]) -> None:
        habit = await coordinator.async_create_habit(
            data["name"], data["habit_type"], data["target"], data["points"], data["schedule"]
        )
        _LOGGER.info("Created habit %s: %s", habit.id, habit.name)

    async def _update_habit(data: dict[str, Any]) -> None:
        habit_id = data.pop("habit_id")
        _require(await coordinator.async_update_habit(habit_id, **data), "Habit", habit_id)

    async def _delete_habit(data: dict[str, Any]) -> None:
        _require(await coordinator.async_delete_habit(data["habit_id"]), "Habit", data["habit_id"])

    async def _toggle_habit(data: dict[str, Any]) -> None:
        _require(await coordinator.async_toggle_habit(data["habit_id"]), "Binary habit", data["habit_id"])

    async def _step_habit(data: dict[str, Any]) -> None:
        _require(
            await coordinator.async_step_habit(data["habit_id"], data["delta"]), "Counter habit", data["habit_id"]
        )

    async def _complete_habit(data: dict[str, Any]) -> None:
        _require(await coordinator.async_complete_habit(data["habit_id"]), "Counter habit", data["habit_id"])

    async def _create_event(data: dict[str, Any]) -> None:
        event = await coordinator.async_create_event(**data)
        _LOGGER.info("Created event %s: %s", event.id, event.title)

    async def _update_event(data: dict[str, Any]) -> None:
        event_id = data.pop("event_id")
        _require(await coordinator.async_update_event(event_id, **data), "Event", event_id)

    async def _delete_event(data: dict[str, Any]) -> None:
        _require(await coordinator.async_delete_event(data["event_id"]), "Event", data["event_id"])

    async def _toggle_event(data: dict[str, Any]) -> None:
        event_id = data["event_id"]
        if coordinator.get_event(event_id) is None:
            raise HomeAssistantError(f"Event not found: {event_id}")
        if await coordinator.async_toggle_event(event_id) is None:
            raise HomeAssistantError(f"Event {event_id} has no points enabled and can't be completed")

    async def _create_quest(data: dict[str, Any]) -> None:
        entry_ = await coordinator.async_create_quest(data["title"], data["base_points"], data["active"])
        _LOGGER.info("Created library quest %s: %s", entry_.id, entry_.title)

    async def _update_quest(data: dict[str, Any]) -> None:
        quest_id = data.pop("quest_id")
        _require(await coordinator.async_update_quest(quest_id, **data), "Quest", quest_id)

    async def _delete_quest(data: dict[str, Any]) -> None:
        _require(await coordinator.async_delete_quest(data["quest_id"]), "Quest", data["quest_id"])

    async def _toggle_quest(data: dict[str, Any]) -> None:
        _require(
            await coordinator.async_toggle_assigned_quest(data["assigned_id"]), "Assigned quest", data["assigned_id"]
        )

    async def _update_settings(data: dict[str, Any]) -> None:
        settings = await coordinator.async_update_settings(**data)
        _LOGGER.info("Settings updated: daily goal %d, %d daily quests", settings.daily_goal, settings.daily_quest_count)

    async def _check_rollover(data: dict[str, Any]) -> None:
        state = await coordinator.async_ensure_rollover()
        _LOGGER.info("Rollover check finished: %s", state)

    services = {
        SERVICE_CREATE_TASK: (_create_task, CREATE_TASK_SCHEMA),
        SERVICE_UPDATE_TASK: (_update_task, UPDATE_TASK_SCHEMA),
        SERVICE_DELETE_TASK: (_delete_task, TASK_ID_SCHEMA),
        SERVICE_TOGGLE_TASK: (_toggle_task, TASK_ID_SCHEMA),
        SERVICE_CREATE_HABIT: (_create_habit, CREATE_HABIT_SCHEMA),
        SERVICE_UPDATE_HABIT: (_update_habit, UPDATE_HABIT_SCHEMA),
        SERVICE_DELETE_HABIT: (_delete_habit, HABIT_ID_SCHEMA),
        SERVICE_TOGGLE_HABIT: (_toggle_habit, HABIT_ID_SCHEMA),
        SERVICE_STEP_HABIT: (_step_habit, STEP_HABIT_SCHEMA),
        SERVICE_COMPLETE_HABIT: (_complete_habit, HABIT_ID_SCHEMA),
        SERVICE_CREATE_EVENT: (_create_event, CREATE_EVENT_SCHEMA),
        SERVICE_UPDATE_EVENT: (_update_event, UPDATE_EVENT_SCHEMA),
        SERVICE_DELETE_EVENT: (_delete_event, EVENT_ID_SCHEMA),
        SERVICE_TOGGLE_EVENT: (_toggle_event, EVENT_ID_SCHEMA),
        SERVICE_CREATE_QUEST: (_create_quest, CREATE_QUEST_SCHEMA),
        SERVICE_UPDATE_QUEST: (_update_quest, UPDATE_QUEST_SCHEMA),
        SERVICE_DELETE_QUEST: (_delete_quest, QUEST_ID_SCHEMA),
        SERVICE_TOGGLE_QUEST: (_toggle_quest, TOGGLE_QUEST_SCHEMA),
        SERVICE_UPDATE_SETTINGS: (_update_settings, UPDATE_SETTINGS_SCHEMA),
        SERVICE_CHECK_ROLLOVER: (_check_rollover, CHECK_ROLLOVER_SCHEMA),
    }
    for name, (action, schema) in services.items():
        hass.services.async_register(DOMAIN, name, _service_handler(name, action), schema=schema)

    return True

async def _async_update_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Apply changed options to the stored settings."""
    coordinator: QuestboardCoordinator = hass.data[DOMAIN][entry.entry_id]
    await coordinator.async_update_settings(**_settings_from(entry.options))

async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        hass.data[DOMAIN].pop(entry.entry_id, None)
        # Unregister services if this is the last instance
        if not hass.data[DOMAIN]:
            for name in SERVICE_NAMES:
                hass.services.async_remove(DOMAIN, name)
    return unload_ok
