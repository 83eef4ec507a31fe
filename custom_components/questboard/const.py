"""Constants for the Questboard integration."""
DOMAIN = "questboard"
PLATFORMS = ["sensor", "todo", "number", "button"]

CONF_DAILY_GOAL = "daily_goal"
CONF_DAILY_QUEST_COUNT = "daily_quest_count"
CONF_WEEK_START = "week_start"
CONF_WEEKLY_QUEST_MODE = "weekly_quest_mode"
CONF_WEEKLY_QUEST_COUNT = "weekly_quest_count"
CONF_WEEKLY_QUEST_MIN = "weekly_quest_min"
CONF_WEEKLY_QUEST_MAX = "weekly_quest_max"
CONF_WEEKLY_FACTOR = "weekly_factor"

STORAGE_VERSION = 1
STORAGE_KEY = DOMAIN

# Collections (one Store document each)
COLLECTION_SETTINGS = "settings"
COLLECTION_META = "meta"
COLLECTION_TASKS = "tasks"
COLLECTION_HABITS = "habits"
COLLECTION_HABIT_LOGS = "habit_logs"
COLLECTION_EVENTS = "events"
COLLECTION_QUEST_LIBRARY = "quest_library"
COLLECTION_ASSIGNED_QUESTS = "assigned_quests"
COLLECTION_DAY_SUMMARIES = "day_summaries"

COLLECTIONS = [
    COLLECTION_SETTINGS,
    COLLECTION_META,
    COLLECTION_TASKS,
    COLLECTION_HABITS,
    COLLECTION_HABIT_LOGS,
    COLLECTION_EVENTS,
    COLLECTION_QUEST_LIBRARY,
    COLLECTION_ASSIGNED_QUESTS,
    COLLECTION_DAY_SUMMARIES,
]

# Record key field per collection, "id" when not listed
KEY_FIELDS = {COLLECTION_DAY_SUMMARIES: "date"}

SETTINGS_ID = "settings"
META_ID = "meta"

WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
WEEK_STARTS = ["Mon", "Sun"]

HABIT_BINARY = "binary"
HABIT_COUNTER = "counter"
HABIT_TYPES = [HABIT_BINARY, HABIT_COUNTER]

QUEST_DAILY = "daily"
QUEST_WEEKLY = "weekly"

WEEKLY_MODE_FIXED = "fixed"
WEEKLY_MODE_RANGE = "range"
WEEKLY_MODES = [WEEKLY_MODE_FIXED, WEEKLY_MODE_RANGE]

# Settings defaults and bounds
DEFAULT_DAILY_GOAL = 100
DEFAULT_DAILY_QUEST_COUNT = 3
DEFAULT_WEEK_START = "Mon"
DEFAULT_WEEKLY_QUEST_COUNT = 3
DEFAULT_WEEKLY_QUEST_MIN = 2
DEFAULT_WEEKLY_QUEST_MAX = 4
DEFAULT_WEEKLY_FACTOR = 1.5

MAX_DAILY_GOAL = 100000
MAX_QUEST_COUNT = 20
MIN_WEEKLY_FACTOR = 1.0
MAX_WEEKLY_FACTOR = 3.0

DEFAULT_TASK_POINTS = 10
DEFAULT_EVENT_COLOR = "#4b83ff"

# Rollover states
ROLLOVER_FIRST_RUN = "first_run"
ROLLOVER_SAME_DAY = "same_day"
ROLLOVER_DAY_CHANGED = "day_changed"

ROLLOVER_CHECK_INTERVAL_SECONDS = 60
EVENT_DAY_ROLLOVER = f"{DOMAIN}_day_rollover"

HISTORY_DAYS = 35

# Services
SERVICE_CREATE_TASK = "create_task"
SERVICE_UPDATE_TASK = "update_task"
SERVICE_DELETE_TASK = "delete_task"
SERVICE_TOGGLE_TASK = "toggle_task"
SERVICE_CREATE_HABIT = "create_habit"
SERVICE_UPDATE_HABIT = "update_habit"
SERVICE_DELETE_HABIT = "delete_habit"
SERVICE_TOGGLE_HABIT = "toggle_habit"
SERVICE_STEP_HABIT = "step_habit"
SERVICE_COMPLETE_HABIT = "complete_habit"
SERVICE_CREATE_EVENT = "create_event"
SERVICE_UPDATE_EVENT = "update_event"
SERVICE_DELETE_EVENT = "delete_event"
SERVICE_TOGGLE_EVENT = "toggle_event"
SERVICE_CREATE_QUEST = "create_quest"
SERVICE_UPDATE_QUEST = "update_quest"
SERVICE_DELETE_QUEST = "delete_quest"
SERVICE_TOGGLE_QUEST = "toggle_quest"
SERVICE_UPDATE_SETTINGS = "update_settings"
SERVICE_CHECK_ROLLOVER = "check_rollover"
