"""Storage utilities for Questboard integration."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store

from .const import COLLECTIONS, KEY_FIELDS, STORAGE_KEY, STORAGE_VERSION

_LOGGER = logging.getLogger(__name__)


class StorageError(HomeAssistantError):
    """A record could not be read from or written to storage."""


class QuestboardStore:
    """Key-value record store with one Home Assistant Store per collection.

    Every write replaces the whole collection document, and the cached copy
    only changes once the save has returned.
    """

    def __init__(self, hass: HomeAssistant):
        self._stores: dict[str, Store[dict]] = {
            name: Store(hass, STORAGE_VERSION, f"{STORAGE_KEY}.{name}") for name in COLLECTIONS
        }
        self._locks = {name: asyncio.Lock() for name in COLLECTIONS}
        self._records: dict[str, dict[str, dict[str, Any]]] = {}

    @staticmethod
    def key_field(collection: str) -> str:
        return KEY_FIELDS.get(collection, "id")

    def _store(self, collection: str) -> Store[dict]:
        if collection not in self._stores:
            raise ValueError(f"Unknown collection: {collection}")
        return self._stores[collection]

    async def _async_records(self, collection: str) -> dict[str, dict[str, Any]]:
        if collection not in self._records:
            try:
                data = await self._store(collection).async_load() or {}
            except (OSError, HomeAssistantError) as err:
                _LOGGER.error("Failed to load %s: %s", collection, err)
                raise StorageError(f"Failed to load {collection}: {err}") from err
            self._records[collection] = dict(data.get("records", {}))
            _LOGGER.debug("Loaded %d records from %s", len(self._records[collection]), collection)
        return self._records[collection]

    async def _async_write(self, collection: str, records: dict[str, dict[str, Any]]) -> None:
        try:
            await self._store(collection).async_save({"records": records})
        except (OSError, HomeAssistantError) as err:
            _LOGGER.error("Failed to save %s: %s", collection, err)
            raise StorageError(f"Failed to save {collection}: {err}") from err
        self._records[collection] = records

    async def async_get(self, collection: str, key: str) -> dict[str, Any] | None:
        records = await self._async_records(collection)
        record = records.get(key)
        return dict(record) if record is not None else None

    async def async_all(self, collection: str) -> list[dict[str, Any]]:
        records = await self._async_records(collection)
        return [dict(record) for record in records.values()]

    async def async_set(self, collection: str, record: dict[str, Any]) -> None:
        await self.async_bulk_set(collection, [record])

    async def async_bulk_set(self, collection: str, records: Iterable[dict[str, Any]]) -> None:
        key_field = self.key_field(collection)
        async with self._locks[collection]:
            updated = dict(await self._async_records(collection))
            for record in records:
                updated[record[key_field]] = dict(record)
            await self._async_write(collection, updated)

    async def async_delete(self, collection: str, key: str) -> None:
        await self.async_bulk_delete(collection, [key])

    async def async_bulk_delete(self, collection: str, keys: Iterable[str]) -> None:
        async with self._locks[collection]:
            updated = dict(await self._async_records(collection))
            for key in keys:
                updated.pop(key, None)
            await self._async_write(collection, updated)
