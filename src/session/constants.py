"""State, action, and reason constants used by the session engine."""

from __future__ import annotations

DEFAULT_BREAK_SECONDS = 5 * 60
DEFAULT_STUDY_SECONDS = 25 * 60
DEFAULT_SHORT_BREAK_SECONDS = 5 * 60
DEFAULT_LONG_BREAK_SECONDS = 15 * 60
DEFAULT_POMODORO_CYCLES = 4
DEFAULT_LONG_BREAK_INTERVAL = 4
DEFAULT_TICK_INTERVAL_SECONDS = 1.0

MODE_IDLE = "idle"
MODE_STUDYING = "studying"
MODE_ON_BREAK = "on_break"
MODE_POMODORO = "pomodoro"

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_RESUME = "resume"
ACTION_ADD_TIME = "add_time"
ACTION_START_BREAK = "start_break"
ACTION_END_BREAK = "end_break"
ACTION_START_POMODORO = "start_pomodoro"
ACTION_ADVANCE_POMODORO = "advance_pomodoro"
ACTION_END = "end"
ACTION_EXIT = "exit"
ACTION_RECOVER = "recover"
ACTION_SELECT_TOPIC = "select_topic"
ACTION_SET_POMODORO_SETTINGS = "set_pomodoro_settings"
ACTION_STATUS = "status"

ACTION_SYNC = "sync"
ACTION_TICK = "tick"
ACTION_COMPLETED = "completed"

FINISHED_SESSION = "session"
FINISHED_BREAK = "break"
FINISHED_POMODORO_PHASE = "pomodoro_phase"
FINISHED_POMODORO = "pomodoro"

REASON_STARTED = "started"
REASON_PAUSED = "paused"
REASON_RESUMED = "resumed"
REASON_TIME_ADDED = "time_added"
REASON_BREAK_STARTED = "break_started"
REASON_BREAK_ENDED = "break_ended"
REASON_POMODORO_STARTED = "pomodoro_started"
REASON_POMODORO_ADVANCED = "pomodoro_advanced"
REASON_COMPLETED = "completed"
REASON_INTERRUPTED = "interrupted"
REASON_RECOVERED = "recovered"
REASON_NOTHING_TO_RECOVER = "nothing_to_recover"
REASON_TOPIC_SELECTED = "topic_selected"
REASON_SETTINGS_UPDATED = "settings_updated"
REASON_TICK = "tick"
REASON_STARTUP = "startup"

REASON_NOT_ACTIVE = "not_active"
REASON_NOT_RUNNING = "not_running"
REASON_NOT_PAUSED = "not_paused"
REASON_NOT_ON_BREAK = "not_on_break"
REASON_NOT_POMODORO = "not_pomodoro"
REASON_BREAK_ACTIVE = "break_active"
REASON_POMODORO_ACTIVE = "pomodoro_active"
REASON_STORE_UNAVAILABLE = "store_unavailable"
REASON_INVALID_ARGUMENT = "invalid_argument"
REASON_UNSUPPORTED_ACTION = "unsupported_action"
