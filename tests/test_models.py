"""Unit tests for Questboard models."""
from __future__ import annotations

from custom_components.questboard.const import MAX_DAILY_GOAL, MAX_QUEST_COUNT
from custom_components.questboard.models import (
    AssignedQuest,
    Habit,
    HabitLog,
    Meta,
    Settings,
    StorageModel,
    Task,
    from_record,
)


class TestFromRecord:
    """Test building models from stored records."""

    def test_unknown_keys_ignored(self):
        task = from_record(Task, {"id": "t1", "title": "Dishes", "points": 5, "legacy_field": 1})
        assert task == Task(id="t1", title="Dishes", points=5)

    def test_missing_optional_fields_use_defaults(self):
        assigned = from_record(AssignedQuest, {"id": "a1", "library_id": "q1"})
        assert assigned.quest_type == "daily"
        assert assigned.multiplier == 1.0
        assert assigned.completed_at is None

    def test_record_round_trip_through_vars(self):
        habit = Habit(id="h1", name="Read", habit_type="counter", target=3, points=9, schedule=["Mon"])
        assert from_record(Habit, dict(vars(habit))) == habit


class TestHabit:
    """Test Habit model."""

    def test_effective_target_floor(self):
        assert Habit(id="h", name="x", target=0).effective_target() == 1
        assert Habit(id="h", name="x", target=-4).effective_target() == 1
        assert Habit(id="h", name="x", target=4).effective_target() == 4

    def test_is_scheduled(self):
        habit = Habit(id="h", name="x", schedule=["Mon", "Wed"])
        assert habit.is_scheduled("Mon")
        assert not habit.is_scheduled("Tue")

    def test_log_id(self):
        assert HabitLog.make_id("h1", "2024-03-04") == "h1|2024-03-04"


class TestSettings:
    """Test Settings normalization."""

    def test_defaults_untouched(self):
        settings = Settings()
        assert settings.normalized() == settings

    def test_values_clamped(self):
        settings = Settings(
            daily_goal=MAX_DAILY_GOAL + 10,
            daily_quest_count=-2,
            weekly_quest_count=99,
            weekly_quest_min=-1,
            weekly_quest_max=MAX_QUEST_COUNT + 1,
            weekly_factor=7.5,
        ).normalized()
        assert settings.daily_goal == MAX_DAILY_GOAL
        assert settings.daily_quest_count == 0
        assert settings.weekly_quest_count == MAX_QUEST_COUNT
        assert settings.weekly_quest_min == 0
        assert settings.weekly_quest_max == MAX_QUEST_COUNT
        assert settings.weekly_factor == 3.0

    def test_factor_below_one_clamped(self):
        assert Settings(weekly_factor=0.2).normalized().weekly_factor == 1.0

    def test_unknown_enums_fall_back(self):
        settings = Settings(week_start="Wed", weekly_quest_mode="sometimes").normalized()
        assert settings.week_start == "Mon"
        assert settings.weekly_quest_mode == "fixed"

    def test_sunday_week_start_kept(self):
        assert Settings(week_start="Sun").normalized().week_start == "Sun"


class TestStorageModel:
    """Test StorageModel defaults."""

    def test_empty_model(self):
        model = StorageModel()
        assert model.settings == Settings()
        assert model.meta == Meta()
        assert model.tasks == {}
        assert model.day_summaries == {}

    def test_meta_defaults(self):
        meta = Meta()
        assert meta.id == "meta"
        assert meta.streak == 0
        assert meta.best_streak == 0
        assert meta.last_assignment_run is None
        assert meta.last_week_start is None
