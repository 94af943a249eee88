"""English status and response text builders for session flows."""

from __future__ import annotations

from session import SessionSnapshot
from session.constants import (
    ACTION_ADD_TIME,
    ACTION_ADVANCE_POMODORO,
    ACTION_END_BREAK,
    ACTION_EXIT,
    ACTION_PAUSE,
    ACTION_RECOVER,
    ACTION_RESUME,
    ACTION_SELECT_TOPIC,
    ACTION_SET_POMODORO_SETTINGS,
    ACTION_START,
    ACTION_START_BREAK,
    ACTION_START_POMODORO,
    FINISHED_BREAK,
    FINISHED_POMODORO,
    FINISHED_POMODORO_PHASE,
    MODE_ON_BREAK,
    MODE_POMODORO,
    MODE_STUDYING,
    REASON_BREAK_ACTIVE,
    REASON_INVALID_ARGUMENT,
    REASON_NOT_ACTIVE,
    REASON_NOT_ON_BREAK,
    REASON_NOT_PAUSED,
    REASON_NOT_POMODORO,
    REASON_NOT_RUNNING,
    REASON_NOTHING_TO_RECOVER,
    REASON_POMODORO_ACTIVE,
    REASON_STORE_UNAVAILABLE,
    REASON_UNSUPPORTED_ACTION,
)
from session.pomodoro import pomodoro_status


def format_clock(seconds: int) -> str:
    """Format a duration in seconds as `H:MM:SS`."""
    hours, remainder = divmod(max(0, int(seconds)), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def _topic_label(snapshot: SessionSnapshot) -> str:
    topic = snapshot.selected_topic
    if topic is None:
        return ""
    return topic.name or topic.id


def _pomodoro_label(snapshot: SessionSnapshot) -> str:
    status = pomodoro_status(snapshot.pomodoro_cycle, snapshot.pomodoro_settings)
    if status.is_study:
        phase = "focus"
    elif status.is_long_break:
        phase = "long break"
    else:
        phase = "short break"
    return f"Pomodoro {status.cycle}/{status.total_cycles} {phase}"


def session_status_message(snapshot: SessionSnapshot) -> str:
    """Build status text for the current session snapshot."""
    clock = format_clock(snapshot.remaining_seconds)
    suffix = "remaining" if snapshot.is_running else "remaining, paused"

    if snapshot.mode == MODE_STUDYING:
        topic = _topic_label(snapshot)
        label = f"Studying {topic}" if topic else "Studying"
        return f"{label} ({clock} {suffix})"
    if snapshot.mode == MODE_ON_BREAK:
        return f"On break ({clock} {suffix})"
    if snapshot.mode == MODE_POMODORO:
        return f"{_pomodoro_label(snapshot)} ({clock} {suffix})"
    return "Ready"


def default_session_text(action: str, snapshot: SessionSnapshot) -> str:
    """Return default text for accepted session actions."""
    if action == ACTION_START:
        if snapshot.is_break:
            return f"Break started for {format_clock(snapshot.initial_seconds)}."
        return f"Study session started for {format_clock(snapshot.initial_seconds)}."
    if action == ACTION_PAUSE:
        return "Session paused."
    if action == ACTION_RESUME:
        return "Session resumed."
    if action == ACTION_ADD_TIME:
        return f"Time added. {format_clock(snapshot.remaining_seconds)} left."
    if action == ACTION_START_BREAK:
        return f"Take a break. Back in {format_clock(snapshot.remaining_seconds)}."
    if action == ACTION_END_BREAK:
        if snapshot.is_active:
            return "Break over. Back to studying."
        return "Break over."
    if action == ACTION_START_POMODORO:
        return "Pomodoro started. Time to focus."
    if action == ACTION_ADVANCE_POMODORO:
        if snapshot.is_active:
            return f"{_pomodoro_label(snapshot)} started."
        return "Pomodoro finished. Great work!"
    if action == ACTION_EXIT:
        return "Session stopped."
    if action == ACTION_RECOVER:
        return f"Resumed your previous session. {session_status_message(snapshot)}"
    if action == ACTION_SELECT_TOPIC:
        topic = _topic_label(snapshot)
        return f"Topic set to {topic}." if topic else "Topic cleared."
    if action == ACTION_SET_POMODORO_SETTINGS:
        return "Pomodoro settings saved for the next run."
    return session_status_message(snapshot)


def completion_text(finished: str | None, snapshot: SessionSnapshot) -> str:
    """Return text announcing that a countdown reached zero."""
    if finished == FINISHED_BREAK:
        if snapshot.is_active:
            return "Break is over. Back to studying."
        return "Break is over."
    if finished == FINISHED_POMODORO_PHASE:
        return f"{_pomodoro_label(snapshot)} started."
    if finished == FINISHED_POMODORO:
        return "Pomodoro finished. Great work!"
    return "Study session complete. Well done!"


def rejection_text(action: str, reason: str) -> str:
    """Return text explaining why an action was not applied."""
    if reason == REASON_STORE_UNAVAILABLE:
        return "Could not reach the session store. Please try again."
    if reason == REASON_INVALID_ARGUMENT:
        return "The command arguments are invalid."
    if reason == REASON_UNSUPPORTED_ACTION:
        return "This command is not supported."
    if reason == REASON_BREAK_ACTIVE:
        return "A break is already running."
    if reason == REASON_POMODORO_ACTIVE:
        return "A Pomodoro run is active. Stop it first."
    if reason == REASON_NOT_RUNNING and action == ACTION_PAUSE:
        return "The session is not running."
    if reason == REASON_NOT_RUNNING:
        return "Resume the session first."
    if reason == REASON_NOT_PAUSED:
        return "The session is not paused."
    if reason == REASON_NOT_ON_BREAK:
        return "There is no break to end."
    if reason == REASON_NOT_POMODORO:
        return "No Pomodoro run is active."
    if reason == REASON_NOTHING_TO_RECOVER:
        return "No previous session found."
    if reason == REASON_NOT_ACTIVE:
        return "There is no active session."
    return "This action is not possible right now."
