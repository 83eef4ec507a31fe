"""Data models for Questboard integration."""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
import logging
from typing import Any

from .const import (
    DEFAULT_DAILY_GOAL,
    DEFAULT_DAILY_QUEST_COUNT,
    DEFAULT_EVENT_COLOR,
    DEFAULT_WEEK_START,
    DEFAULT_WEEKLY_FACTOR,
    DEFAULT_WEEKLY_QUEST_COUNT,
    DEFAULT_WEEKLY_QUEST_MAX,
    DEFAULT_WEEKLY_QUEST_MIN,
    HABIT_BINARY,
    MAX_DAILY_GOAL,
    MAX_QUEST_COUNT,
    MAX_WEEKLY_FACTOR,
    META_ID,
    MIN_WEEKLY_FACTOR,
    QUEST_DAILY,
    SETTINGS_ID,
    WEEK_STARTS,
    WEEKLY_MODE_FIXED,
    WEEKLY_MODES,
)

_LOGGER = logging.getLogger(__name__)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def from_record(cls, data: dict[str, Any]):
    """Build a dataclass from a stored record, ignoring unknown keys."""
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class Task:
    id: str
    title: str
    points: int = 0
    due_date: str | None = None  # ISO timestamp
    completed_at: str | None = None  # ISO timestamp
    created_at: str | None = None


@dataclass
class Habit:
    id: str
    name: str
    habit_type: str = HABIT_BINARY  # "binary" | "counter"
    target: int = 1  # counter only
    points: int = 0
    schedule: list[str] = field(default_factory=list)  # weekday names, e.g. ["Mon", "Wed"]

    def effective_target(self) -> int:
        """Target used for scoring; anything below 1 counts as 1."""
        return self.target if self.target and self.target > 0 else 1

    def is_scheduled(self, weekday: str) -> bool:
        return weekday in self.schedule


@dataclass
class HabitLog:
    id: str  # f"{habit_id}|{date}"
    habit_id: str
    date: str  # YYYY-MM-DD
    count: int = 0
    completed_at: str | None = None

    @staticmethod
    def make_id(habit_id: str, date: str) -> str:
        return f"{habit_id}|{date}"


@dataclass
class Event:
    id: str
    title: str
    start: str
    end: str | None = None
    all_day: bool = False
    color: str = DEFAULT_EVENT_COLOR
    points_enabled: bool = False
    points: int = 0
    completed_at: str | None = None


@dataclass
class QuestLibraryEntry:
    """Quest template; only its assignments are ever scored."""
    id: str
    title: str
    base_points: int = 0
    active: bool = True


@dataclass
class AssignedQuest:
    id: str
    library_id: str
    quest_type: str = QUEST_DAILY  # "daily" | "weekly"
    date: str | None = None  # daily quests
    week_of: str | None = None  # weekly quests, week-start date
    multiplier: float = 1.0
    completed_at: str | None = None


@dataclass
class DaySummary:
    date: str
    total_points: int = 0
    goal_met: bool = False


@dataclass
class Meta:
    """Lifecycle record driving the rollover state machine."""
    id: str = META_ID
    streak: int = 0
    best_streak: int = 0
    last_assignment_run: str | None = None  # YYYY-MM-DD of the last processed day
    last_week_start: str | None = None  # YYYY-MM-DD of the last week assigned


@dataclass
class Settings:
    id: str = SETTINGS_ID
    daily_goal: int = DEFAULT_DAILY_GOAL
    daily_quest_count: int = DEFAULT_DAILY_QUEST_COUNT
    week_start: str = DEFAULT_WEEK_START  # "Mon" | "Sun"
    weekly_quest_mode: str = WEEKLY_MODE_FIXED  # "fixed" | "range"
    weekly_quest_count: int = DEFAULT_WEEKLY_QUEST_COUNT
    weekly_quest_min: int = DEFAULT_WEEKLY_QUEST_MIN
    weekly_quest_max: int = DEFAULT_WEEKLY_QUEST_MAX
    weekly_factor: float = DEFAULT_WEEKLY_FACTOR

    def normalized(self) -> Settings:
        """Return a copy with every user-editable value pulled into range.

        Settings are user configuration, so bad values are clamped instead of
        rejected.
        """
        week_start = self.week_start
        if week_start not in WEEK_STARTS:
            _LOGGER.warning("Unknown week start %r, using %s", week_start, DEFAULT_WEEK_START)
            week_start = DEFAULT_WEEK_START
        mode = self.weekly_quest_mode
        if mode not in WEEKLY_MODES:
            _LOGGER.warning("Unknown weekly quest mode %r, using %s", mode, WEEKLY_MODE_FIXED)
            mode = WEEKLY_MODE_FIXED
        return replace(
            self,
            daily_goal=int(_clamp(int(self.daily_goal or 0), 0, MAX_DAILY_GOAL)),
            daily_quest_count=int(_clamp(int(self.daily_quest_count or 0), 0, MAX_QUEST_COUNT)),
            week_start=week_start,
            weekly_quest_mode=mode,
            weekly_quest_count=int(_clamp(int(self.weekly_quest_count or 0), 0, MAX_QUEST_COUNT)),
            weekly_quest_min=int(_clamp(int(self.weekly_quest_min or 0), 0, MAX_QUEST_COUNT)),
            weekly_quest_max=int(_clamp(int(self.weekly_quest_max or 0), 0, MAX_QUEST_COUNT)),
            weekly_factor=float(
                _clamp(float(self.weekly_factor or MIN_WEEKLY_FACTOR), MIN_WEEKLY_FACTOR, MAX_WEEKLY_FACTOR)
            ),
        )


@dataclass
class StorageModel:
    settings: Settings = field(default_factory=Settings)
    meta: Meta = field(default_factory=Meta)
    tasks: dict[str, Task] = field(default_factory=dict)
    habits: dict[str, Habit] = field(default_factory=dict)
    habit_logs: dict[str, HabitLog] = field(default_factory=dict)  # key: f"{habit_id}|{date}"
    events: dict[str, Event] = field(default_factory=dict)
    quest_library: dict[str, QuestLibraryEntry] = field(default_factory=dict)
    assigned_quests: dict[str, AssignedQuest] = field(default_factory=dict)
    day_summaries: dict[str, DaySummary] = field(default_factory=dict)  # key: date
