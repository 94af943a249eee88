from .contracts import (
    ActiveSessionRecord,
    CompletedSessionRecord,
    SessionStoreLike,
    StreakRecord,
    StreakTrackerLike,
)
from .engine import SessionEngine, is_valid_topic_id
from .errors import SessionValidationError, StoreError
from .pomodoro import phase_sequence, pomodoro_status
from .state import (
    PomodoroSettings,
    PomodoroStatus,
    SessionActionResult,
    SessionSnapshot,
    SessionTick,
    Topic,
)
from .streaks import advance_streak, update_streak
from .ticker import RepeatingTicker, repeating_ticker_factory

__all__ = [
    "ActiveSessionRecord",
    "CompletedSessionRecord",
    "PomodoroSettings",
    "PomodoroStatus",
    "RepeatingTicker",
    "SessionActionResult",
    "SessionEngine",
    "SessionSnapshot",
    "SessionStoreLike",
    "SessionTick",
    "SessionValidationError",
    "StoreError",
    "StreakRecord",
    "StreakTrackerLike",
    "Topic",
    "advance_streak",
    "is_valid_topic_id",
    "phase_sequence",
    "pomodoro_status",
    "repeating_ticker_factory",
    "update_streak",
]
