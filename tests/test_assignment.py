"""Unit tests for Questboard quest assignment."""
from __future__ import annotations

import random

import pytest

from custom_components.questboard.assignment import (
    active_pool,
    build_daily_assignments,
    build_weekly_assignments,
    random_sample,
    weekly_quest_count,
)
from custom_components.questboard.models import QuestLibraryEntry, Settings


def _library(size: int, inactive: set[int] = frozenset()) -> list[QuestLibraryEntry]:
    return [
        QuestLibraryEntry(id=f"q{i}", title=f"Quest {i}", base_points=10, active=i not in inactive)
        for i in range(size)
    ]


class TestRandomSample:
    """Test uniform sampling without replacement."""

    def test_distinct_items(self):
        rng = random.Random(7)
        for _ in range(50):
            picked = random_sample(list(range(10)), 4, rng)
            assert len(picked) == 4
            assert len(set(picked)) == 4

    def test_count_clamped_to_pool(self):
        assert sorted(random_sample([1, 2, 3], 10, random.Random(1))) == [1, 2, 3]
        assert random_sample([1, 2, 3], -1, random.Random(1)) == []
        assert random_sample([], 3, random.Random(1)) == []

    def test_input_not_mutated(self):
        items = [1, 2, 3, 4, 5]
        random_sample(items, 2, random.Random(3))
        assert items == [1, 2, 3, 4, 5]

    def test_seeded_rng_is_reproducible(self):
        assert random_sample(list(range(20)), 5, random.Random(42)) == random_sample(
            list(range(20)), 5, random.Random(42)
        )

    def test_every_item_can_be_picked(self):
        rng = random.Random(11)
        seen = set()
        for _ in range(200):
            seen.update(random_sample(list(range(6)), 1, rng))
        assert seen == set(range(6))


class TestWeeklyCount:
    """Test how many weekly quests get assigned."""

    def test_fixed_mode(self):
        assert weekly_quest_count(Settings(weekly_quest_count=5), random.Random(1)) == 5

    def test_range_mode_stays_in_bounds(self):
        settings = Settings(weekly_quest_mode="range", weekly_quest_min=2, weekly_quest_max=4)
        rng = random.Random(5)
        counts = {weekly_quest_count(settings, rng) for _ in range(200)}
        assert counts <= {2, 3, 4}
        assert counts == {2, 3, 4}

    def test_range_mode_swaps_inverted_bounds(self):
        settings = Settings(weekly_quest_mode="range", weekly_quest_min=4, weekly_quest_max=2)
        rng = random.Random(5)
        assert all(2 <= weekly_quest_count(settings, rng) <= 4 for _ in range(50))


class TestBuildAssignments:
    """Test daily and weekly assignment records."""

    def test_daily_only_active_quests(self):
        library = _library(5, inactive={0, 1, 2})
        created = build_daily_assignments(library, Settings(daily_quest_count=3), "2024-03-04", random.Random(1))
        assert {a.library_id for a in created} == {"q3", "q4"}
        assert all(a.quest_type == "daily" and a.date == "2024-03-04" for a in created)
        assert all(a.multiplier == 1.0 and a.completed_at is None for a in created)

    def test_daily_count_zero(self):
        assert build_daily_assignments(_library(5), Settings(daily_quest_count=0), "2024-03-04", random.Random(1)) == []

    def test_daily_unique_ids(self):
        created = build_daily_assignments(_library(10), Settings(daily_quest_count=5), "2024-03-04", random.Random(1))
        assert len({a.id for a in created}) == 5
        assert len({a.library_id for a in created}) == 5

    @pytest.mark.parametrize("seed", range(10))
    def test_weekly_range_with_pool_of_ten(self, seed):
        settings = Settings(weekly_quest_mode="range", weekly_quest_min=2, weekly_quest_max=4, weekly_factor=1.5)
        created = build_weekly_assignments(_library(10), settings, "2024-03-04", random.Random(seed))
        assert 2 <= len(created) <= 4
        assert len({a.library_id for a in created}) == len(created)
        assert all(a.quest_type == "weekly" and a.week_of == "2024-03-04" for a in created)
        assert all(a.multiplier == 1.5 for a in created)

    def test_weekly_capped_by_pool(self):
        created = build_weekly_assignments(_library(2), Settings(weekly_quest_count=5), "2024-03-04", random.Random(1))
        assert len(created) == 2

    def test_active_pool(self):
        assert [e.id for e in active_pool(_library(3, inactive={1}))] == ["q0", "q2"]
