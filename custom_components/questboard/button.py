"""Button entities for Questboard integration."""
from __future__ import annotations

import logging

from homeassistant.components.button import ButtonEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback

from .const import DOMAIN
from .coordinator import QuestboardCoordinator

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, add_entities: AddEntitiesCallback):
    coordinator: QuestboardCoordinator = hass.data[DOMAIN][entry.entry_id]
    add_entities([QuestboardRolloverButton(coordinator)], True)

class QuestboardRolloverButton(ButtonEntity):
    """Run the day rollover now instead of waiting for the next check."""

    _attr_icon = "mdi:calendar-refresh"

    def __init__(self, coord: QuestboardCoordinator):
        self._coord = coord
        self._attr_unique_id = f"{DOMAIN}_check_rollover_button"
        self._attr_name = "Questboard Check Day Rollover"

    @property
    def available(self) -> bool:
        return self._coord.model is not None

    async def async_press(self) -> None:
        _LOGGER.info("Questboard: rollover button pressed")
        state = await self._coord.async_ensure_rollover()
        _LOGGER.info("Questboard: rollover check finished with %s", state)
