"""Random quest assignment for Questboard."""
from __future__ import annotations

import logging
import random
from typing import Iterable, Sequence, TypeVar
import uuid

from .const import MIN_WEEKLY_FACTOR, QUEST_DAILY, QUEST_WEEKLY, WEEKLY_MODE_RANGE
from .models import AssignedQuest, QuestLibraryEntry, Settings

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def random_sample(items: Sequence[T], count: int, rng: random.Random) -> list[T]:
    """Pick ``count`` distinct items uniformly at random.

    Fisher-Yates shuffle of a copy, then take the first ``count``. The count is
    clamped to ``[0, len(items)]`` so an item is never picked twice.
    """
    pool = list(items)
    for i in range(len(pool) - 1, 0, -1):
        j = rng.randint(0, i)
        pool[i], pool[j] = pool[j], pool[i]
    count = max(0, min(count, len(pool)))
    return pool[:count]


def active_pool(library: Iterable[QuestLibraryEntry]) -> list[QuestLibraryEntry]:
    return [entry for entry in library if entry.active]


def weekly_quest_count(settings: Settings, rng: random.Random) -> int:
    """Number of weekly quests to assign, before clamping to the pool."""
    if settings.weekly_quest_mode != WEEKLY_MODE_RANGE:
        return max(0, settings.weekly_quest_count or 0)
    low = max(0, settings.weekly_quest_min or 0)
    high = max(0, settings.weekly_quest_max or 0)
    if low > high:
        _LOGGER.warning("Weekly quest range min %d > max %d, swapping", low, high)
        low, high = high, low
    return rng.randint(low, high)


def build_daily_assignments(
    library: Iterable[QuestLibraryEntry], settings: Settings, date: str, rng: random.Random
) -> list[AssignedQuest]:
    pool = active_pool(library)
    chosen = random_sample(pool, settings.daily_quest_count or 0, rng)
    return [
        AssignedQuest(
            id=new_id("aq"),
            library_id=entry.id,
            quest_type=QUEST_DAILY,
            date=date,
            multiplier=1.0,
        )
        for entry in chosen
    ]


def build_weekly_assignments(
    library: Iterable[QuestLibraryEntry], settings: Settings, week_start: str, rng: random.Random
) -> list[AssignedQuest]:
    pool = active_pool(library)
    chosen = random_sample(pool, weekly_quest_count(settings, rng), rng)
    multiplier = max(MIN_WEEKLY_FACTOR, float(settings.weekly_factor or MIN_WEEKLY_FACTOR))
    return [
        AssignedQuest(
            id=new_id("aq"),
            library_id=entry.id,
            quest_type=QUEST_WEEKLY,
            week_of=week_start,
            multiplier=multiplier,
        )
        for entry in chosen
    ]
