"""Number entities for Questboard integration."""
from __future__ import annotations
from homeassistant.components.number import NumberEntity, NumberMode
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from .const import (
    CONF_DAILY_GOAL,
    CONF_DAILY_QUEST_COUNT,
    CONF_WEEKLY_FACTOR,
    DOMAIN,
    MAX_DAILY_GOAL,
    MAX_QUEST_COUNT,
    MAX_WEEKLY_FACTOR,
    MIN_WEEKLY_FACTOR,
)
from .coordinator import QuestboardCoordinator

async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry, add_entities: AddEntitiesCallback):
    coordinator: QuestboardCoordinator = hass.data[DOMAIN][entry.entry_id]
    entities = [
        QuestboardSettingNumber(coordinator, CONF_DAILY_GOAL, "Daily Goal", 0, MAX_DAILY_GOAL, 1, "mdi:flag-checkered"),
        QuestboardSettingNumber(
            coordinator, CONF_DAILY_QUEST_COUNT, "Daily Quest Count", 0, MAX_QUEST_COUNT, 1, "mdi:sword"
        ),
        QuestboardSettingNumber(
            coordinator, CONF_WEEKLY_FACTOR, "Weekly Quest Factor", MIN_WEEKLY_FACTOR, MAX_WEEKLY_FACTOR, 0.1,
            "mdi:multiplication",
        ),
    ]
    add_entities(entities, True)

class QuestboardSettingNumber(NumberEntity):
    """A single numeric setting, written straight through to storage."""

    _attr_should_poll = False
    _attr_mode = NumberMode.BOX

    def __init__(
        self,
        coord: QuestboardCoordinator,
        key: str,
        name: str,
        minimum: float,
        maximum: float,
        step: float,
        icon: str,
    ):
        self._coord = coord
        self._key = key
        self._attr_unique_id = f"{DOMAIN}_{key}"
        self._attr_name = f"Questboard {name}"
        self._attr_native_min_value = minimum
        self._attr_native_max_value = maximum
        self._attr_native_step = step
        self._attr_icon = icon

    async def async_added_to_hass(self) -> None:
        self.async_on_remove(self._coord.async_add_listener(self.async_write_ha_state))

    @property
    def available(self) -> bool:
        return self._coord.model is not None

    @property
    def native_value(self) -> float | None:
        if not self._coord.model:
            return None
        return float(getattr(self._coord.model.settings, self._key))

    async def async_set_native_value(self, value: float) -> None:
        if self._key == CONF_WEEKLY_FACTOR:
            new_value = round(float(value), 1)
        else:
            new_value = int(value)
        await self._coord.async_update_settings(**{self._key: new_value})
        self.async_write_ha_state()
