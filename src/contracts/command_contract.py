"""Canonical UI command names and their engine actions."""

from __future__ import annotations

from session.constants import (
    ACTION_ADD_TIME,
    ACTION_END_BREAK,
    ACTION_EXIT,
    ACTION_PAUSE,
    ACTION_RESUME,
    ACTION_SELECT_TOPIC,
    ACTION_SET_POMODORO_SETTINGS,
    ACTION_START,
    ACTION_START_BREAK,
    ACTION_START_POMODORO,
    ACTION_STATUS,
)

COMMAND_START = "start"
COMMAND_PAUSE = "pause"
COMMAND_RESUME = "resume"
COMMAND_ADD_TIME = "add_time"
COMMAND_START_BREAK = "start_break"
COMMAND_END_BREAK = "end_break"
COMMAND_START_POMODORO = "start_pomodoro"
COMMAND_EXIT = "exit"
COMMAND_SELECT_TOPIC = "select_topic"
COMMAND_SET_POMODORO_SETTINGS = "set_pomodoro_settings"
COMMAND_STATUS = "status"

COMMAND_NAME_ORDER: tuple[str, ...] = (
    COMMAND_START,
    COMMAND_PAUSE,
    COMMAND_RESUME,
    COMMAND_ADD_TIME,
    COMMAND_START_BREAK,
    COMMAND_END_BREAK,
    COMMAND_START_POMODORO,
    COMMAND_EXIT,
    COMMAND_SELECT_TOPIC,
    COMMAND_SET_POMODORO_SETTINGS,
    COMMAND_STATUS,
)

COMMAND_NAMES: frozenset[str] = frozenset(COMMAND_NAME_ORDER)

COMMANDS_WITHOUT_ARGUMENTS: frozenset[str] = frozenset(
    {
        COMMAND_PAUSE,
        COMMAND_RESUME,
        COMMAND_START_BREAK,
        COMMAND_END_BREAK,
        COMMAND_EXIT,
        COMMAND_STATUS,
    }
)

COMMAND_TO_RUNTIME_ACTION: dict[str, str] = {
    COMMAND_START: ACTION_START,
    COMMAND_PAUSE: ACTION_PAUSE,
    COMMAND_RESUME: ACTION_RESUME,
    COMMAND_ADD_TIME: ACTION_ADD_TIME,
    COMMAND_START_BREAK: ACTION_START_BREAK,
    COMMAND_END_BREAK: ACTION_END_BREAK,
    COMMAND_START_POMODORO: ACTION_START_POMODORO,
    COMMAND_EXIT: ACTION_EXIT,
    COMMAND_SELECT_TOPIC: ACTION_SELECT_TOPIC,
    COMMAND_SET_POMODORO_SETTINGS: ACTION_SET_POMODORO_SETTINGS,
    COMMAND_STATUS: ACTION_STATUS,
}
