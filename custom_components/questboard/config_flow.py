"""Config flow for Questboard integration."""
from __future__ import annotations

from typing import Any

from homeassistant import config_entries
from homeassistant.core import callback
import voluptuous as vol

from .const import (
    CONF_DAILY_GOAL,
    CONF_DAILY_QUEST_COUNT,
    CONF_WEEK_START,
    CONF_WEEKLY_FACTOR,
    CONF_WEEKLY_QUEST_COUNT,
    CONF_WEEKLY_QUEST_MAX,
    CONF_WEEKLY_QUEST_MIN,
    CONF_WEEKLY_QUEST_MODE,
    DEFAULT_DAILY_GOAL,
    DEFAULT_DAILY_QUEST_COUNT,
    DEFAULT_WEEK_START,
    DEFAULT_WEEKLY_FACTOR,
    DEFAULT_WEEKLY_QUEST_COUNT,
    DEFAULT_WEEKLY_QUEST_MAX,
    DEFAULT_WEEKLY_QUEST_MIN,
    DOMAIN,
    MAX_DAILY_GOAL,
    MAX_QUEST_COUNT,
    MAX_WEEKLY_FACTOR,
    MIN_WEEKLY_FACTOR,
    WEEK_STARTS,
    WEEKLY_MODE_FIXED,
    WEEKLY_MODES,
)

_COUNT = vol.All(vol.Coerce(int), vol.Range(min=0, max=MAX_QUEST_COUNT))


class QuestboardConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    VERSION = 1

    async def async_step_user(self, user_input: dict[str, Any] | None = None):
        # Check for existing instance
        if self._async_current_entries():
            return self.async_abort(reason="single_instance_allowed")

        errors = {}
        if user_input is not None:
            return self.async_create_entry(title="Questboard", data=user_input)

        data_schema = vol.Schema({
            vol.Required(CONF_DAILY_GOAL, default=DEFAULT_DAILY_GOAL): vol.All(
                vol.Coerce(int), vol.Range(min=0, max=MAX_DAILY_GOAL)
            ),
            vol.Required(CONF_DAILY_QUEST_COUNT, default=DEFAULT_DAILY_QUEST_COUNT): _COUNT,
            vol.Required(CONF_WEEK_START, default=DEFAULT_WEEK_START): vol.In(WEEK_STARTS),
        })
        return self.async_show_form(step_id="user", data_schema=data_schema, errors=errors)

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        return QuestboardOptionsFlow(config_entry)

class QuestboardOptionsFlow(config_entries.OptionsFlow):
    def __init__(self, entry):
        self.entry = entry

    def _default(self, key: str, fallback: Any) -> Any:
        return self.entry.options.get(key, self.entry.data.get(key, fallback))

    async def async_step_init(self, user_input=None):
        if user_input is not None:
            return self.async_create_entry(title="", data=user_input)

        data_schema = vol.Schema({
            vol.Optional(CONF_WEEK_START, default=self._default(CONF_WEEK_START, DEFAULT_WEEK_START)): vol.In(WEEK_STARTS),
            vol.Optional(
                CONF_WEEKLY_QUEST_MODE, default=self._default(CONF_WEEKLY_QUEST_MODE, WEEKLY_MODE_FIXED)
            ): vol.In(WEEKLY_MODES),
            vol.Optional(
                CONF_WEEKLY_QUEST_COUNT, default=self._default(CONF_WEEKLY_QUEST_COUNT, DEFAULT_WEEKLY_QUEST_COUNT)
            ): _COUNT,
            vol.Optional(
                CONF_WEEKLY_QUEST_MIN, default=self._default(CONF_WEEKLY_QUEST_MIN, DEFAULT_WEEKLY_QUEST_MIN)
            ): _COUNT,
            vol.Optional(
                CONF_WEEKLY_QUEST_MAX, default=self._default(CONF_WEEKLY_QUEST_MAX, DEFAULT_WEEKLY_QUEST_MAX)
            ): _COUNT,
            vol.Optional(
                CONF_WEEKLY_FACTOR, default=self._default(CONF_WEEKLY_FACTOR, DEFAULT_WEEKLY_FACTOR)
            ): vol.All(vol.Coerce(float), vol.Range(min=MIN_WEEKLY_FACTOR, max=MAX_WEEKLY_FACTOR)),
        })
        return self.async_show_form(step_id="init", data_schema=data_schema)
