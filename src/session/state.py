"""Tagged session states, countdown fields, and immutable snapshots."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Optional, Union

from .constants import (
    DEFAULT_LONG_BREAK_INTERVAL,
    DEFAULT_LONG_BREAK_SECONDS,
    DEFAULT_POMODORO_CYCLES,
    DEFAULT_SHORT_BREAK_SECONDS,
    DEFAULT_STUDY_SECONDS,
    MODE_IDLE,
    MODE_ON_BREAK,
    MODE_POMODORO,
    MODE_STUDYING,
)
from .errors import SessionValidationError


@dataclass(frozen=True)
class PomodoroSettings:
    """Durations (seconds) and cycle count for one Pomodoro run."""
    study_seconds: int = DEFAULT_STUDY_SECONDS
    short_break_seconds: int = DEFAULT_SHORT_BREAK_SECONDS
    long_break_seconds: int = DEFAULT_LONG_BREAK_SECONDS
    cycles: int = DEFAULT_POMODORO_CYCLES
    long_break_interval: int = DEFAULT_LONG_BREAK_INTERVAL

    def __post_init__(self) -> None:
        for name in (
            "study_seconds",
            "short_break_seconds",
            "long_break_seconds",
            "cycles",
            "long_break_interval",
        ):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise SessionValidationError(
                    f"{name} must be a positive integer, got: {value!r}"
                )


@dataclass(frozen=True)
class Topic:
    """Topic reference attached to persisted session records."""
    id: str
    name: str = ""
    field: str = ""


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Studying:
    pass


@dataclass(frozen=True)
class OnBreak:
    resume_to: Optional[int] = None


@dataclass(frozen=True)
class PomodoroRunning:
    cycle_index: int
    settings: PomodoroSettings


SessionMode = Union[Idle, Studying, OnBreak, PomodoroRunning]


def mode_name(mode: SessionMode) -> str:
    if isinstance(mode, Studying):
        return MODE_STUDYING
    if isinstance(mode, OnBreak):
        return MODE_ON_BREAK
    if isinstance(mode, PomodoroRunning):
        return MODE_POMODORO
    return MODE_IDLE


@dataclass
class Countdown:
    """Mutable clock fields of the live session, owned by the engine."""
    remaining_seconds: int
    initial_seconds: int
    is_running: bool
    session_started_at: dt.datetime
    run_started_at: dt.datetime
    break_seconds: int = 0
    active_session_id: Optional[str] = None


@dataclass(frozen=True)
class PomodoroStatus:
    cycle: int
    total_cycles: int
    is_study: bool
    is_long_break: bool


@dataclass(frozen=True)
class SessionSnapshot:
    """Immutable session view exposed to the runtime and UI publishers."""
    mode: str
    remaining_seconds: int
    initial_seconds: int
    accumulated_seconds: int
    is_running: bool
    session_started_at: Optional[dt.datetime]
    is_break: bool
    stored_study_time: Optional[int]
    is_pomodoro: bool
    pomodoro_cycle: int
    pomodoro_settings: PomodoroSettings
    selected_topic: Optional[Topic]
    active_session_id: Optional[str]

    @property
    def is_active(self) -> bool:
        return self.mode != MODE_IDLE


@dataclass(frozen=True)
class SessionActionResult:
    """Result envelope returned after applying an engine operation."""
    action: str
    accepted: bool
    reason: str
    snapshot: SessionSnapshot


@dataclass(frozen=True)
class SessionTick:
    """Tick payload emitted after every countdown decrement."""
    snapshot: SessionSnapshot
    completed: bool = False
    finished: Optional[str] = None
