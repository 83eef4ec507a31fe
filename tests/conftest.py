"""Pytest configuration for Questboard tests."""
from __future__ import annotations

import copy
from datetime import datetime
import random
from unittest.mock import AsyncMock, Mock, patch

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.util import dt as dt_util
import pytest
import pytest_asyncio

from custom_components.questboard.coordinator import QuestboardCoordinator

# 2024-03-04 is a Monday
START = datetime(2024, 3, 4, 9, 0, tzinfo=dt_util.UTC)


class FakeClock:
    """Settable clock handed to the coordinator."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, year: int, month: int, day: int, hour: int = 9, minute: int = 0) -> None:
        self.now = datetime(year, month, day, hour, minute, tzinfo=dt_util.UTC)


class FakeBackend:
    """Shared in-memory documents behind every FakeStore of a test."""

    def __init__(self):
        self.documents: dict[str, dict] = {}
        self.fail_saves: set[str] = set()
        self.fail_loads: set[str] = set()
        self.saves: list[str] = []

    def records(self, collection: str) -> dict:
        return self.documents.get(f"questboard.{collection}", {}).get("records", {})

    def seed(self, collection: str, records: dict) -> None:
        self.documents[f"questboard.{collection}"] = {"records": copy.deepcopy(records)}


class FakeStore:
    """Stand-in for homeassistant.helpers.storage.Store."""

    def __init__(self, backend: FakeBackend, key: str, version: int):
        self._backend = backend
        self.key = key
        self.version = version

    async def async_load(self):
        if self.key in self._backend.fail_loads:
            raise HomeAssistantError(f"cannot read {self.key}")
        data = self._backend.documents.get(self.key)
        return copy.deepcopy(data) if data is not None else None

    async def async_save(self, data):
        if self.key in self._backend.fail_saves:
            raise HomeAssistantError(f"cannot write {self.key}")
        self._backend.documents[self.key] = copy.deepcopy(data)
        self._backend.saves.append(self.key)


@pytest.fixture
def backend():
    """Return the in-memory storage backend."""
    return FakeBackend()


@pytest.fixture
def patched_store(backend):
    """Patch the Home Assistant Store used by QuestboardStore."""

    def factory(hass, version, key):
        return FakeStore(backend, key, version)

    with patch("custom_components.questboard.storage.Store", side_effect=factory) as store_class:
        yield store_class


@pytest.fixture
def clock():
    return FakeClock(START)


@pytest.fixture
def mock_hass():
    """Return a mock Home Assistant instance."""
    hass = Mock(spec=HomeAssistant)
    hass.data = {}
    hass.bus = Mock()
    hass.bus.async_fire = Mock()
    hass.config_entries = Mock()
    hass.services = Mock()
    hass.states = Mock()

    # Mock async methods
    hass.config_entries.async_forward_entry_setups = AsyncMock(return_value=True)
    hass.config_entries.async_unload_platforms = AsyncMock(return_value=True)
    hass.services.async_register = Mock()
    hass.services.async_remove = Mock()
    hass.services.async_call = AsyncMock()

    return hass


@pytest.fixture
def coordinator(mock_hass, patched_store, clock):
    """Return a coordinator on in-memory storage that has not booted yet."""
    return QuestboardCoordinator(mock_hass, rng=random.Random(1234), clock=clock)


@pytest_asyncio.fixture
async def booted(coordinator):
    """Return a coordinator after its first boot on empty storage."""
    await coordinator.async_boot()
    return coordinator
