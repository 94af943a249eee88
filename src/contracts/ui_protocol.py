"""Web UI websocket event, command, and state constants."""

from __future__ import annotations

# Websocket event types
EVENT_HELLO = "hello"
EVENT_STATE_UPDATE = "state_update"
EVENT_SESSION = "session"
EVENT_NOTICE = "notice"
EVENT_ERROR = "error"

# Websocket message types sent by the UI
MESSAGE_COMMAND = "command"

# UI runtime states
STATE_IDLE = "idle"
STATE_STUDYING = "studying"
STATE_ON_BREAK = "on_break"
STATE_POMODORO = "pomodoro"
STATE_PAUSED = "paused"
STATE_ERROR = "error"

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_STATE_UPDATE,
        EVENT_SESSION,
        EVENT_NOTICE,
        EVENT_ERROR,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_SESSION,
    EVENT_NOTICE,
    EVENT_ERROR,
    EVENT_STATE_UPDATE,
)
