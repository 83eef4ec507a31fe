"""Data coordinator for Questboard integration."""
from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import datetime
import logging
import random
from typing import Any, Callable, Iterable

from homeassistant.core import HomeAssistant, callback
from homeassistant.util import dt as dt_util

from .assignment import build_daily_assignments, build_weekly_assignments, new_id
from .const import (
    COLLECTION_ASSIGNED_QUESTS,
    COLLECTION_DAY_SUMMARIES,
    COLLECTION_EVENTS,
    COLLECTION_HABIT_LOGS,
    COLLECTION_HABITS,
    COLLECTION_META,
    COLLECTION_QUEST_LIBRARY,
    COLLECTION_SETTINGS,
    COLLECTION_TASKS,
    DEFAULT_EVENT_COLOR,
    DEFAULT_TASK_POINTS,
    EVENT_DAY_ROLLOVER,
    HABIT_BINARY,
    HABIT_COUNTER,
    HABIT_TYPES,
    META_ID,
    QUEST_DAILY,
    QUEST_WEEKLY,
    ROLLOVER_DAY_CHANGED,
    ROLLOVER_FIRST_RUN,
    ROLLOVER_SAME_DAY,
    SETTINGS_ID,
    WEEKDAYS,
)
from .date_utils import day_str, format_timestamp, month_days, parse_timestamp, shift_day, week_start
from .models import (
    AssignedQuest,
    DaySummary,
    Event,
    Habit,
    HabitLog,
    Meta,
    QuestLibraryEntry,
    Settings,
    StorageModel,
    Task,
    from_record,
)
from .scoring import all_scheduled_habits_complete, apply_streak, compute_day_totals, day_completions
from .storage import QuestboardStore

_LOGGER = logging.getLogger(__name__)

_LOADED_COLLECTIONS = {
    COLLECTION_TASKS: Task,
    COLLECTION_HABITS: Habit,
    COLLECTION_HABIT_LOGS: HabitLog,
    COLLECTION_EVENTS: Event,
    COLLECTION_QUEST_LIBRARY: QuestLibraryEntry,
    COLLECTION_ASSIGNED_QUESTS: AssignedQuest,
    COLLECTION_DAY_SUMMARIES: DaySummary,
}


class QuestboardCoordinator:
    """Owns the application state and every operation that changes it.

    The in-memory model is a cache of what is in storage: each mutation writes
    its record first and only touches the model once the write succeeded.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the coordinator."""
        self.hass = hass
        self.store = QuestboardStore(hass)
        self.model: StorageModel | None = None
        self.rng = rng or random.Random()
        self._clock = clock or dt_util.now
        self._lock = asyncio.Lock()
        self._listeners: list[Callable[[], None]] = []

    # ---- helpers ----
    def _require_model(self) -> StorageModel:
        if self.model is None:
            raise RuntimeError("Model not initialized")
        return self.model

    def today(self) -> str:
        return day_str(self._clock())

    def now_timestamp(self) -> str:
        return format_timestamp(self._clock())

    @staticmethod
    def _normalize_timestamp(value: str | datetime | None) -> str | None:
        parsed = parse_timestamp(value)
        return format_timestamp(parsed) if parsed is not None else None

    @staticmethod
    def _completion_day(timestamp: str | None) -> str | None:
        parsed = parse_timestamp(timestamp)
        return day_str(parsed) if parsed is not None else None

    @callback
    def async_add_listener(self, update_callback: Callable[[], None]) -> Callable[[], None]:
        """Register a callback run after every mutation or rollover."""
        self._listeners.append(update_callback)

        @callback
        def remove_listener() -> None:
            if update_callback in self._listeners:
                self._listeners.remove(update_callback)

        return remove_listener

    @callback
    def async_update_listeners(self) -> None:
        for update_callback in list(self._listeners):
            update_callback()

    # ---- boot ----
    async def _async_load(self, collection: str, cls) -> dict[str, Any]:
        key_field = self.store.key_field(collection)
        records = await self.store.async_all(collection)
        return {record[key_field]: from_record(cls, record) for record in records}

    async def async_boot(self, initial_settings: dict[str, Any] | None = None) -> str:
        """Load (or create) every record, then run the rollover once."""
        stored_settings = await self.store.async_get(COLLECTION_SETTINGS, SETTINGS_ID)
        if stored_settings is None:
            settings = from_record(Settings, {**(initial_settings or {}), "id": SETTINGS_ID}).normalized()
            await self.store.async_set(COLLECTION_SETTINGS, vars(settings))
        else:
            settings = from_record(Settings, stored_settings).normalized()

        stored_meta = await self.store.async_get(COLLECTION_META, META_ID)
        if stored_meta is None:
            meta = Meta()
            await self.store.async_set(COLLECTION_META, vars(meta))
        else:
            meta = from_record(Meta, stored_meta)

        loaded = await asyncio.gather(
            *(self._async_load(collection, cls) for collection, cls in _LOADED_COLLECTIONS.items())
        )
        self.model = StorageModel(settings=settings, meta=meta, **dict(zip(_LOADED_COLLECTIONS, loaded)))
        _LOGGER.debug(
            "Loaded %d tasks, %d habits, %d events, %d library quests",
            len(self.model.tasks), len(self.model.habits), len(self.model.events), len(self.model.quest_library),
        )
        return await self.async_ensure_rollover()

    # ---- summaries ----
    def compute_day_totals(self, date: str) -> DaySummary:
        return compute_day_totals(self._require_model(), date)

    async def async_upsert_day_summary(self, date: str) -> DaySummary:
        """Recompute one day's summary and overwrite the stored record."""
        summaries = await self.async_upsert_day_summaries([date])
        return summaries[0]

    async def async_upsert_day_summaries(self, dates: Iterable[str]) -> list[DaySummary]:
        model = self._require_model()
        summaries = [compute_day_totals(model, date) for date in dict.fromkeys(dates)]
        if summaries:
            await self.store.async_bulk_set(COLLECTION_DAY_SUMMARIES, [vars(s) for s in summaries])
            for summary in summaries:
                model.day_summaries[summary.date] = summary
        return summaries

    def get_day_summary(self, date: str) -> DaySummary:
        """Cached summary for a day, or a live computation when none is stored."""
        model = self._require_model()
        return model.day_summaries.get(date) or compute_day_totals(model, date)

    def sum_points(self, days: int, end: str | None = None) -> int:
        """Total points over the ``days`` days ending at ``end`` (default today)."""
        end = end or self.today()
        return sum(self.get_day_summary(shift_day(end, -offset)).total_points for offset in range(days))

    def sum_month(self, date: str | None = None) -> int:
        return sum(self.get_day_summary(day).total_points for day in month_days(date or self.today()))

    def history(self, days: int, end: str | None = None) -> list[tuple[str, int]]:
        """Daily totals for the last ``days`` days, oldest first."""
        end = end or self.today()
        dates = [shift_day(end, -offset) for offset in range(days - 1, -1, -1)]
        return [(date, self.get_day_summary(date).total_points) for date in dates]

    def day_completions(self, date: str | None = None) -> list[dict[str, Any]]:
        return day_completions(self._require_model(), date or self.today())

    async def _async_refresh(self, *dates: str | None) -> None:
        """Recompute today's summary plus any other affected day, then notify entities."""
        await self.async_upsert_day_summaries([self.today(), *(d for d in dates if d)])
        self.async_update_listeners()

    # ---- assignment ----
    def _has_assignments(self, quest_type: str, period: str) -> bool:
        for assigned in self._require_model().assigned_quests.values():
            if assigned.quest_type != quest_type:
                continue
            if (assigned.date if quest_type == QUEST_DAILY else assigned.week_of) == period:
                return True
        return False

    async def async_assign_daily_quests(self, date: str) -> list[AssignedQuest]:
        """Assign the daily quests for ``date`` unless a batch already exists."""
        model = self._require_model()
        if self._has_assignments(QUEST_DAILY, date):
            _LOGGER.debug("Daily quests for %s already assigned", date)
            return []
        created = build_daily_assignments(model.quest_library.values(), model.settings, date, self.rng)
        return await self._async_add_assignments(created)

    async def async_assign_weekly_quests(self, week_start_date: str) -> list[AssignedQuest]:
        model = self._require_model()
        if self._has_assignments(QUEST_WEEKLY, week_start_date):
            _LOGGER.debug("Weekly quests for week of %s already assigned", week_start_date)
            return []
        created = build_weekly_assignments(model.quest_library.values(), model.settings, week_start_date, self.rng)
        return await self._async_add_assignments(created)

    async def _async_add_assignments(self, created: list[AssignedQuest]) -> list[AssignedQuest]:
        if created:
            await self.store.async_bulk_set(COLLECTION_ASSIGNED_QUESTS, [vars(a) for a in created])
            for assigned in created:
                self.model.assigned_quests[assigned.id] = assigned
            _LOGGER.debug("Assigned %d %s quests", len(created), created[0].quest_type)
        return created

    # ---- rollover ----
    async def _async_save_meta(self, meta: Meta) -> None:
        await self.store.async_set(COLLECTION_META, vars(meta))
        self.model.meta = meta

    async def async_ensure_rollover(self) -> str:
        """Run the day/week rollover if the date moved since the last run.

        Safe to call any number of times: once today's rollover is recorded in
        the lifecycle record every further call only refreshes today's summary.
        """
        async with self._lock:
            state = await self._async_rollover()
        self.async_update_listeners()
        return state

    async def _async_rollover(self) -> str:
        model = self._require_model()
        today = self.today()
        meta = model.meta
        settings = model.settings
        current_week = week_start(today, settings.week_start)

        if not meta.last_assignment_run:
            _LOGGER.info("First run: assigning quests for %s (week of %s)", today, current_week)
            await self.async_assign_daily_quests(today)
            await self.async_assign_weekly_quests(current_week)
            await self._async_save_meta(replace(meta, last_assignment_run=today, last_week_start=current_week))
            await self.async_upsert_day_summary(today)
            return ROLLOVER_FIRST_RUN

        if meta.last_assignment_run == today:
            await self.async_upsert_day_summary(today)
            return ROLLOVER_SAME_DAY

        previous = meta.last_assignment_run
        if shift_day(previous, 1) != today:
            # Only the last processed day is finalized; skipped days get no summary.
            _LOGGER.info("Rolling over from %s to %s, intermediate days are not finalized", previous, today)

        summary = await self.async_upsert_day_summary(previous)
        updated = apply_streak(meta, summary, all_scheduled_habits_complete(model, previous))

        await self.async_assign_daily_quests(today)
        await self.async_upsert_day_summary(today)

        last_week = meta.last_week_start or week_start(previous, settings.week_start)
        if current_week != last_week:
            await self.async_assign_weekly_quests(current_week)
            updated = replace(updated, last_week_start=current_week)

        updated = replace(updated, last_assignment_run=today)
        await self._async_save_meta(updated)

        _LOGGER.info(
            "Day rollover %s -> %s: %d points, goal met %s, streak %d (best %d)",
            previous, today, summary.total_points, summary.goal_met, updated.streak, updated.best_streak,
        )
        self.hass.bus.async_fire(
            EVENT_DAY_ROLLOVER,
            {
                "date": today,
                "previous_date": previous,
                "streak": updated.streak,
                "best_streak": updated.best_streak,
            },
        )
        return ROLLOVER_DAY_CHANGED

    # ---- settings ----
    async def async_update_settings(self, **changes: Any) -> Settings:
        async with self._lock:
            model = self._require_model()
            known = {k: v for k, v in changes.items() if v is not None and k in vars(model.settings) and k != "id"}
            previous = model.settings
            settings = replace(previous, **known).normalized()
            await self.store.async_set(COLLECTION_SETTINGS, vars(settings))
            model.settings = settings
            if settings.week_start != previous.week_start and model.meta.last_week_start:
                await self._async_move_week(previous.week_start, settings.week_start)
            await self._async_refresh()
        return settings

    async def _async_move_week(self, old_convention: str, new_convention: str) -> None:
        """Re-date the current week to a new week-start convention.

        This week's weekly quests and the lifecycle record follow the new start
        date, so the next rollover does not see a new week mid-week.
        """
        model = self._require_model()
        today = self.today()
        old_week = week_start(today, old_convention)
        new_week = week_start(today, new_convention)
        if old_week == new_week:
            return
        moved = [
            replace(a, week_of=new_week)
            for a in model.assigned_quests.values()
            if a.quest_type == QUEST_WEEKLY and a.week_of == old_week
        ]
        if moved:
            await self.store.async_bulk_set(COLLECTION_ASSIGNED_QUESTS, [vars(a) for a in moved])
            for assigned in moved:
                model.assigned_quests[assigned.id] = assigned
        if model.meta.last_week_start == old_week:
            await self._async_save_meta(replace(model.meta, last_week_start=new_week))
        _LOGGER.info("Week start changed to %s, current week is now %s", new_convention, new_week)

    # ---- tasks ----
    def get_task(self, task_id: str) -> Task | None:
        if not self.model:
            return None
        return self.model.tasks.get(task_id)

    async def async_create_task(
        self, title: str, points: int = DEFAULT_TASK_POINTS, due_date: str | datetime | None = None
    ) -> Task:
        task = Task(
            id=new_id("t"),
            title=title.strip(),
            points=int(points),
            due_date=self._normalize_timestamp(due_date),
            created_at=self.now_timestamp(),
        )
        async with self._lock:
            model = self._require_model()
            await self.store.async_set(COLLECTION_TASKS, vars(task))
            model.tasks[task.id] = task
            await self._async_refresh()
        return task

    async def async_update_task(self, task_id: str, **changes: Any) -> Task | None:
        """Edit title, points or due date; completion state is kept."""
        async with self._lock:
            model = self._require_model()
            task = model.tasks.get(task_id)
            if task is None:
                return None
            if changes.get("title") is not None:
                task = replace(task, title=changes["title"].strip())
            if changes.get("points") is not None:
                task = replace(task, points=int(changes["points"]))
            if "due_date" in changes:
                task = replace(task, due_date=self._normalize_timestamp(changes["due_date"]))
            await self.store.async_set(COLLECTION_TASKS, vars(task))
            model.tasks[task_id] = task
            await self._async_refresh(self._completion_day(task.completed_at))
        return task

    async def async_delete_task(self, task_id: str) -> bool:
        async with self._lock:
            model = self._require_model()
            task = model.tasks.get(task_id)
            if task is None:
                return False
            await self.store.async_delete(COLLECTION_TASKS, task_id)
            del model.tasks[task_id]
            await self._async_refresh(self._completion_day(task.completed_at))
        return True

    async def async_toggle_task(self, task_id: str) -> Task | None:
        """Complete a task now, or clear its completion if it was done."""
        async with self._lock:
            model = self._require_model()
            task = model.tasks.get(task_id)
            if task is None:
                return None
            previous_day = self._completion_day(task.completed_at)
            task = replace(task, completed_at=None if task.completed_at else self.now_timestamp())
            await self.store.async_set(COLLECTION_TASKS, vars(task))
            model.tasks[task_id] = task
            await self._async_refresh(previous_day)
        _LOGGER.debug("Task %s %s", task.title, "completed" if task.completed_at else "uncompleted")
        return task

    # ---- habits ----
    @staticmethod
    def _normalize_schedule(schedule: Iterable[str]) -> list[str]:
        wanted = {day[:3].capitalize() for day in schedule}
        days = [day for day in WEEKDAYS if day in wanted]
        if not days:
            raise ValueError("Habit schedule must include at least one weekday")
        return days

    def get_habit(self, habit_id: str) -> Habit | None:
        if not self.model:
            return None
        return self.model.habits.get(habit_id)

    def get_habit_log(self, habit_id: str, date: str | None = None) -> HabitLog | None:
        if not self.model:
            return None
        return self.model.habit_logs.get(HabitLog.make_id(habit_id, date or self.today()))

    def _habit_log_days(self, habit_id: str) -> list[str]:
        return [log.date for log in self.model.habit_logs.values() if log.habit_id == habit_id]

    async def async_create_habit(
        self,
        name: str,
        habit_type: str = HABIT_BINARY,
        target: int = 1,
        points: int = 10,
        schedule: Iterable[str] = WEEKDAYS,
    ) -> Habit:
        if habit_type not in HABIT_TYPES:
            raise ValueError(f"Unknown habit type: {habit_type}")
        habit = Habit(
            id=new_id("h"),
            name=name.strip(),
            habit_type=habit_type,
            target=max(1, int(target or 1)),
            points=int(points),
            schedule=self._normalize_schedule(schedule),
        )
        async with self._lock:
            model = self._require_model()
            await self.store.async_set(COLLECTION_HABITS, vars(habit))
            model.habits[habit.id] = habit
            await self._async_refresh()
        return habit

    async def async_update_habit(self, habit_id: str, **changes: Any) -> Habit | None:
        """Edit a habit and rescore every day it has a log for."""
        if changes.get("habit_type") is not None and changes["habit_type"] not in HABIT_TYPES:
            raise ValueError(f"Unknown habit type: {changes['habit_type']}")
        schedule = changes.get("schedule")
        if schedule is not None:
            schedule = self._normalize_schedule(schedule)
        async with self._lock:
            model = self._require_model()
            habit = model.habits.get(habit_id)
            if habit is None:
                return None
            if changes.get("name") is not None:
                habit = replace(habit, name=changes["name"].strip())
            if changes.get("habit_type") is not None:
                habit = replace(habit, habit_type=changes["habit_type"])
            if changes.get("target") is not None:
                habit = replace(habit, target=max(1, int(changes["target"])))
            if changes.get("points") is not None:
                habit = replace(habit, points=int(changes["points"]))
            if schedule is not None:
                habit = replace(habit, schedule=schedule)
            await self.store.async_set(COLLECTION_HABITS, vars(habit))
            model.habits[habit_id] = habit
            await self._async_refresh(*self._habit_log_days(habit_id))
        return habit

    async def async_delete_habit(self, habit_id: str) -> bool:
        """Delete a habit together with all of its daily logs."""
        async with self._lock:
            model = self._require_model()
            if habit_id not in model.habits:
                return False
            logs = [log for log in model.habit_logs.values() if log.habit_id == habit_id]
            await self.store.async_delete(COLLECTION_HABITS, habit_id)
            del model.habits[habit_id]
            if logs:
                await self.store.async_bulk_delete(COLLECTION_HABIT_LOGS, [log.id for log in logs])
                for log in logs:
                    model.habit_logs.pop(log.id, None)
            await self._async_refresh(*(log.date for log in logs))
        return True

    async def _async_get_or_create_log(self, habit: Habit, date: str) -> HabitLog:
        log = self.model.habit_logs.get(HabitLog.make_id(habit.id, date))
        if log is None:
            log = HabitLog(id=HabitLog.make_id(habit.id, date), habit_id=habit.id, date=date)
            await self.store.async_set(COLLECTION_HABIT_LOGS, vars(log))
            self.model.habit_logs[log.id] = log
        return log

    async def _async_save_log(self, habit: Habit, log: HabitLog, count: int) -> HabitLog:
        """Store a new count for a log, stamping completion when the threshold is reached."""
        threshold = 1 if habit.habit_type == HABIT_BINARY else habit.effective_target()
        log = replace(log, count=count, completed_at=self.now_timestamp() if count >= threshold else None)
        await self.store.async_set(COLLECTION_HABIT_LOGS, vars(log))
        self.model.habit_logs[log.id] = log
        await self._async_refresh()
        return log

    def _habit_of_type(self, habit_id: str, habit_type: str) -> Habit | None:
        habit = self._require_model().habits.get(habit_id)
        if habit is None or habit.habit_type != habit_type:
            _LOGGER.debug("Ignoring %s action for habit %s", habit_type, habit_id)
            return None
        return habit

    async def async_toggle_habit(self, habit_id: str) -> HabitLog | None:
        """Flip today's log of a binary habit between 0 and 1."""
        async with self._lock:
            habit = self._habit_of_type(habit_id, HABIT_BINARY)
            if habit is None:
                return None
            log = await self._async_get_or_create_log(habit, self.today())
            return await self._async_save_log(habit, log, 0 if (log.count or 0) >= 1 else 1)

    async def async_step_habit(self, habit_id: str, delta: int) -> HabitLog | None:
        """Move today's count of a counter habit by ``delta`` within [0, target]."""
        async with self._lock:
            habit = self._habit_of_type(habit_id, HABIT_COUNTER)
            if habit is None:
                return None
            log = await self._async_get_or_create_log(habit, self.today())
            count = max(0, min(habit.effective_target(), (log.count or 0) + int(delta)))
            return await self._async_save_log(habit, log, count)

    async def async_complete_habit(self, habit_id: str) -> HabitLog | None:
        async with self._lock:
            habit = self._habit_of_type(habit_id, HABIT_COUNTER)
            if habit is None:
                return None
            log = await self._async_get_or_create_log(habit, self.today())
            return await self._async_save_log(habit, log, habit.effective_target())

    # ---- events ----
    def get_event(self, event_id: str) -> Event | None:
        if not self.model:
            return None
        return self.model.events.get(event_id)

    async def async_create_event(
        self,
        title: str,
        start: str | datetime | None = None,
        end: str | datetime | None = None,
        all_day: bool = False,
        color: str = DEFAULT_EVENT_COLOR,
        points_enabled: bool = False,
        points: int = 0,
    ) -> Event:
        event = Event(
            id=new_id("e"),
            title=title.strip(),
            start=self._normalize_timestamp(start) or self.now_timestamp(),
            end=self._normalize_timestamp(end),
            all_day=bool(all_day),
            color=color or DEFAULT_EVENT_COLOR,
            points_enabled=bool(points_enabled),
            points=int(points),
        )
        async with self._lock:
            model = self._require_model()
            await self.store.async_set(COLLECTION_EVENTS, vars(event))
            model.events[event.id] = event
            await self._async_refresh()
        return event

    async def async_update_event(self, event_id: str, **changes: Any) -> Event | None:
        async with self._lock:
            model = self._require_model()
            event = model.events.get(event_id)
            if event is None:
                return None
            if changes.get("title") is not None:
                event = replace(event, title=changes["title"].strip())
            if changes.get("start") is not None:
                event = replace(event, start=self._normalize_timestamp(changes["start"]) or event.start)
            if "end" in changes:
                event = replace(event, end=self._normalize_timestamp(changes["end"]))
            if changes.get("all_day") is not None:
                event = replace(event, all_day=bool(changes["all_day"]))
            if changes.get("points_enabled") is not None:
                event = replace(event, points_enabled=bool(changes["points_enabled"]))
            if changes.get("color"):
                event = replace(event, color=changes["color"])
            if changes.get("points") is not None:
                event = replace(event, points=int(changes["points"]))
            await self.store.async_set(COLLECTION_EVENTS, vars(event))
            model.events[event_id] = event
            await self._async_refresh(self._completion_day(event.completed_at))
        return event

    async def async_delete_event(self, event_id: str) -> bool:
        async with self._lock:
            model = self._require_model()
            event = model.events.get(event_id)
            if event is None:
                return False
            await self.store.async_delete(COLLECTION_EVENTS, event_id)
            del model.events[event_id]
            await self._async_refresh(self._completion_day(event.completed_at))
        return True

    async def async_toggle_event(self, event_id: str) -> Event | None:
        """Toggle completion of an event; events without points can't be completed."""
        async with self._lock:
            model = self._require_model()
            event = model.events.get(event_id)
            if event is None or not event.points_enabled:
                return None
            previous_day = self._completion_day(event.completed_at)
            event = replace(event, completed_at=None if event.completed_at else self.now_timestamp())
            await self.store.async_set(COLLECTION_EVENTS, vars(event))
            model.events[event_id] = event
            await self._async_refresh(previous_day)
        return event

    # ---- quest library ----
    def get_quest(self, quest_id: str) -> QuestLibraryEntry | None:
        if not self.model:
            return None
        return self.model.quest_library.get(quest_id)

    def _assignment_days(self, quest_id: str) -> list[str]:
        days = []
        for assigned in self.model.assigned_quests.values():
            if assigned.library_id != quest_id:
                continue
            day = self._completion_day(assigned.completed_at)
            if day:
                days.append(day)
        return days

    async def async_create_quest(self, title: str, base_points: int = 10, active: bool = True) -> QuestLibraryEntry:
        entry = QuestLibraryEntry(id=new_id("q"), title=title.strip(), base_points=int(base_points), active=bool(active))
        async with self._lock:
            model = self._require_model()
            await self.store.async_set(COLLECTION_QUEST_LIBRARY, vars(entry))
            model.quest_library[entry.id] = entry
            await self._async_refresh()
        return entry

    async def async_update_quest(self, quest_id: str, **changes: Any) -> QuestLibraryEntry | None:
        async with self._lock:
            model = self._require_model()
            entry = model.quest_library.get(quest_id)
            if entry is None:
                return None
            if changes.get("title") is not None:
                entry = replace(entry, title=changes["title"].strip())
            if changes.get("base_points") is not None:
                entry = replace(entry, base_points=int(changes["base_points"]))
            if changes.get("active") is not None:
                entry = replace(entry, active=bool(changes["active"]))
            await self.store.async_set(COLLECTION_QUEST_LIBRARY, vars(entry))
            model.quest_library[quest_id] = entry
            await self._async_refresh(*self._assignment_days(quest_id))
        return entry

    async def async_delete_quest(self, quest_id: str) -> bool:
        """Delete a library quest and every assignment made from it."""
        async with self._lock:
            model = self._require_model()
            if quest_id not in model.quest_library:
                return False
            affected_days = self._assignment_days(quest_id)
            assigned_ids = [a.id for a in model.assigned_quests.values() if a.library_id == quest_id]
            await self.store.async_delete(COLLECTION_QUEST_LIBRARY, quest_id)
            del model.quest_library[quest_id]
            if assigned_ids:
                await self.store.async_bulk_delete(COLLECTION_ASSIGNED_QUESTS, assigned_ids)
                for assigned_id in assigned_ids:
                    model.assigned_quests.pop(assigned_id, None)
            await self._async_refresh(*affected_days)
        return True

    # ---- assigned quests ----
    def get_assigned_quest(self, assigned_id: str) -> AssignedQuest | None:
        if not self.model:
            return None
        return self.model.assigned_quests.get(assigned_id)

    def get_today_quests(self, quest_type: str = QUEST_DAILY) -> list[AssignedQuest]:
        """Today's daily quests, or this week's weekly quests."""
        if not self.model:
            return []
        today = self.today()
        if quest_type == QUEST_WEEKLY:
            current_week = week_start(today, self.model.settings.week_start)
            return [
                a for a in self.model.assigned_quests.values()
                if a.quest_type == QUEST_WEEKLY and a.week_of == current_week
            ]
        return [
            a for a in self.model.assigned_quests.values()
            if a.quest_type == QUEST_DAILY and a.date == today
        ]

    async def async_toggle_assigned_quest(self, assigned_id: str) -> AssignedQuest | None:
        async with self._lock:
            model = self._require_model()
            assigned = model.assigned_quests.get(assigned_id)
            if assigned is None:
                return None
            previous_day = self._completion_day(assigned.completed_at)
            assigned = replace(assigned, completed_at=None if assigned.completed_at else self.now_timestamp())
            await self.store.async_set(COLLECTION_ASSIGNED_QUESTS, vars(assigned))
            model.assigned_quests[assigned_id] = assigned
            await self._async_refresh(previous_day)
        return assigned
