"""Session timer engine: countdown, breaks, Pomodoro cycles, and recovery."""

from __future__ import annotations

import datetime as dt
import logging
import threading
import uuid
from dataclasses import replace
from typing import Any, Callable, Optional

from .constants import (
    ACTION_ADD_TIME,
    ACTION_ADVANCE_POMODORO,
    ACTION_END,
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
    DEFAULT_BREAK_SECONDS,
    FINISHED_BREAK,
    FINISHED_POMODORO,
    FINISHED_POMODORO_PHASE,
    FINISHED_SESSION,
    REASON_BREAK_ACTIVE,
    REASON_BREAK_ENDED,
    REASON_BREAK_STARTED,
    REASON_COMPLETED,
    REASON_INTERRUPTED,
    REASON_NOT_ACTIVE,
    REASON_NOT_ON_BREAK,
    REASON_NOT_PAUSED,
    REASON_NOT_POMODORO,
    REASON_NOT_RUNNING,
    REASON_NOTHING_TO_RECOVER,
    REASON_PAUSED,
    REASON_POMODORO_ACTIVE,
    REASON_POMODORO_ADVANCED,
    REASON_POMODORO_STARTED,
    REASON_RECOVERED,
    REASON_RESUMED,
    REASON_SETTINGS_UPDATED,
    REASON_STARTED,
    REASON_STORE_UNAVAILABLE,
    REASON_TIME_ADDED,
    REASON_TOPIC_SELECTED,
)
from .contracts import (
    ActiveSessionRecord,
    CompletedSessionRecord,
    SessionStoreLike,
    StreakTrackerLike,
    format_timestamp,
)
from .errors import SessionValidationError, StoreError
from .pomodoro import is_study_phase, phase_duration, pomodoro_status, total_phases
from .state import (
    Countdown,
    Idle,
    OnBreak,
    PomodoroRunning,
    PomodoroSettings,
    PomodoroStatus,
    SessionActionResult,
    SessionMode,
    SessionSnapshot,
    SessionTick,
    Studying,
    Topic,
    mode_name,
)
from .streaks import update_streak
from .ticker import TickerFactory, TickerLike, repeating_ticker_factory


def is_valid_topic_id(value: Any) -> bool:
    """Topic ids are UUID strings issued by the backend."""
    try:
        uuid.UUID(str(value))
    except (TypeError, ValueError):
        return False
    return True


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _require_positive_seconds(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise SessionValidationError(f"{field} must be a positive integer, got: {value!r}")
    return value


class SessionEngine:
    """Single-user study session state machine mirrored to a remote store.

    Every public operation runs under one re-entrant lock, so ticks and user
    actions are applied strictly one after another. Remote failures never
    propagate out of an operation: the engine logs them and degrades as
    documented per operation.
    """

    def __init__(
        self,
        user_id: str,
        session_store: SessionStoreLike,
        streak_tracker: StreakTrackerLike,
        *,
        break_seconds: int = DEFAULT_BREAK_SECONDS,
        pomodoro_settings: Optional[PomodoroSettings] = None,
        clock: Optional[Callable[[], dt.datetime]] = None,
        today: Optional[Callable[[], dt.date]] = None,
        ticker_factory: Optional[TickerFactory] = None,
        on_tick: Optional[Callable[[SessionTick], None]] = None,
        topic_id_validator: Optional[Callable[[Any], bool]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if not isinstance(user_id, str) or not user_id.strip():
            raise SessionValidationError("user_id is required")

        self._user_id = user_id.strip()
        self._store = session_store
        self._streaks = streak_tracker
        self._break_seconds = _require_positive_seconds(break_seconds, "break_seconds")
        self._pomodoro_settings = pomodoro_settings or PomodoroSettings()
        self._clock = clock or _utcnow
        self._today = today or dt.date.today
        self._logger = logger or logging.getLogger("session")
        self._ticker_factory = ticker_factory or repeating_ticker_factory(logger=self._logger)
        self._on_tick = on_tick
        self._topic_id_validator = topic_id_validator or is_valid_topic_id
        self._lock = threading.RLock()

        self._mode: SessionMode = Idle()
        self._countdown: Optional[Countdown] = None
        self._selected_topic: Optional[Topic] = None
        self._ticker: Optional[TickerLike] = None
        self._tick_generation = 0

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def pomodoro_settings(self) -> PomodoroSettings:
        return self._pomodoro_settings

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def select_topic(self, topic: Optional[Topic]) -> SessionActionResult:
        with self._lock:
            self._selected_topic = topic
            countdown = self._countdown
            if countdown is not None and countdown.active_session_id is not None:
                topic_id = self._topic_id_locked(strict=False)
                self._mirror_locked({"topic_id": topic_id})
            return self._result_locked(ACTION_SELECT_TOPIC, True, REASON_TOPIC_SELECTED)

    def set_pomodoro_settings(self, settings: PomodoroSettings) -> SessionActionResult:
        """Replace the defaults for the next Pomodoro run; a running run keeps its own."""
        with self._lock:
            self._pomodoro_settings = settings
            self._logger.info(
                "Pomodoro settings updated: cycles=%s study=%ss short=%ss long=%ss",
                settings.cycles,
                settings.study_seconds,
                settings.short_break_seconds,
                settings.long_break_seconds,
            )
            return self._result_locked(
                ACTION_SET_POMODORO_SETTINGS,
                True,
                REASON_SETTINGS_UPDATED,
            )

    def set_tick_listener(self, on_tick: Optional[Callable[[SessionTick], None]]) -> None:
        with self._lock:
            self._on_tick = on_tick

    # Timer core

    def start_timer(self, initial_seconds: int, is_break: bool = False) -> SessionActionResult:
        """Start a fresh countdown, replacing any session that is live."""
        seconds = _require_positive_seconds(initial_seconds, "initial_seconds")
        with self._lock:
            topic_id = self._topic_id_locked(strict=True)
            mode: SessionMode = OnBreak(resume_to=None) if is_break else Studying()
            if not self._begin_countdown_locked(seconds, mode, topic_id=topic_id, carry=None):
                return self._result_locked(ACTION_START, False, REASON_STORE_UNAVAILABLE)

            self._logger.info(
                "Session started: mode=%s duration=%ss topic=%s",
                mode_name(mode),
                seconds,
                topic_id,
            )
            return self._result_locked(ACTION_START, True, REASON_STARTED)

    def pause_timer(self) -> SessionActionResult:
        with self._lock:
            countdown = self._countdown
            if countdown is None or countdown.active_session_id is None:
                return self._result_locked(ACTION_PAUSE, False, REASON_NOT_ACTIVE)
            if not countdown.is_running:
                return self._result_locked(ACTION_PAUSE, False, REASON_NOT_RUNNING)

            self._pause_locked()
            self._logger.info("Session paused: remaining=%ss", countdown.remaining_seconds)
            return self._result_locked(ACTION_PAUSE, True, REASON_PAUSED)

    def resume_timer(self) -> SessionActionResult:
        with self._lock:
            countdown = self._countdown
            if countdown is None or countdown.active_session_id is None:
                return self._result_locked(ACTION_RESUME, False, REASON_NOT_ACTIVE)
            if countdown.is_running:
                return self._result_locked(ACTION_RESUME, False, REASON_NOT_PAUSED)

            countdown.is_running = True
            self._mirror_locked({"is_running": True})
            self._arm_ticker_locked()
            self._logger.info("Session resumed: remaining=%ss", countdown.remaining_seconds)
            return self._result_locked(ACTION_RESUME, True, REASON_RESUMED)

    def tick(self) -> Optional[SessionTick]:
        """Advance the countdown by one second; no-op unless running."""
        with self._lock:
            return self._tick_locked()

    def add_time(self, seconds: int) -> SessionActionResult:
        """Extend the study countdown by restarting it with the larger total."""
        extra = _require_positive_seconds(seconds, "seconds")
        with self._lock:
            mode = self._mode
            if isinstance(mode, OnBreak):
                return self._result_locked(ACTION_ADD_TIME, False, REASON_BREAK_ACTIVE)
            if isinstance(mode, PomodoroRunning):
                return self._result_locked(ACTION_ADD_TIME, False, REASON_POMODORO_ACTIVE)

            topic_id = self._topic_id_locked(strict=True)
            countdown = self._countdown
            carry: Optional[Countdown] = None
            new_total = extra
            if isinstance(mode, Studying) and countdown is not None:
                if countdown.is_running:
                    self._pause_locked()
                new_total = countdown.remaining_seconds + extra
                carry = countdown

            if not self._begin_countdown_locked(
                new_total,
                Studying(),
                topic_id=topic_id,
                carry=carry,
            ):
                return self._result_locked(ACTION_ADD_TIME, False, REASON_STORE_UNAVAILABLE)

            self._logger.info("Time added: +%ss total=%ss", extra, new_total)
            return self._result_locked(ACTION_ADD_TIME, True, REASON_TIME_ADDED)

    # Session end and recovery

    def end_session(self, interrupted: bool = False) -> SessionActionResult:
        with self._lock:
            return self._end_session_locked(bool(interrupted), ACTION_END)

    def exit_session(self) -> SessionActionResult:
        """Cancel whatever is running and persist it as interrupted."""
        with self._lock:
            return self._end_session_locked(True, ACTION_EXIT)

    def recover(self) -> SessionActionResult:
        """Rehydrate the live session from the store after a reload."""
        with self._lock:
            try:
                records = self._store.list_active(self._user_id)
            except StoreError as error:
                self._logger.error("Error loading active session: %s", error)
                try:
                    self._store.delete_all_active(self._user_id)
                except StoreError as cleanup_error:
                    self._logger.error("Error cleaning up sessions: %s", cleanup_error)
                self._reset_locked()
                return self._result_locked(ACTION_RECOVER, False, REASON_STORE_UNAVAILABLE)

            if not records:
                return self._result_locked(ACTION_RECOVER, False, REASON_NOTHING_TO_RECOVER)

            ordered = sorted(records, key=lambda record: record.last_updated, reverse=True)
            latest, stale = ordered[0], ordered[1:]
            for record in stale:
                if record.id is None:
                    continue
                try:
                    self._store.delete_active(record.id)
                except StoreError as error:
                    self._logger.error(
                        "Error deleting duplicate active session %s: %s",
                        record.id,
                        error,
                    )
            if stale:
                self._logger.warning(
                    "Discarded %d duplicate active session(s) for user=%s",
                    len(stale),
                    self._user_id,
                )

            self._disarm_ticker_locked()
            self._mode = self._mode_from_record(latest)
            self._countdown = Countdown(
                remaining_seconds=latest.current_time,
                initial_seconds=latest.initial_time or latest.current_time,
                is_running=latest.is_running,
                session_started_at=latest.start_time,
                run_started_at=latest.run_started_at,
                # Without a run start the stored break time predates `start_time`.
                break_seconds=latest.break_time if latest.run_start_time is not None else 0,
                active_session_id=latest.id,
            )
            if latest.topic_id and self._selected_topic is None:
                self._selected_topic = Topic(id=latest.topic_id)
            if latest.is_running:
                self._arm_ticker_locked()

            self._logger.info(
                "Recovered active session %s: mode=%s remaining=%ss running=%s",
                latest.id,
                mode_name(self._mode),
                latest.current_time,
                latest.is_running,
            )
            return self._result_locked(ACTION_RECOVER, True, REASON_RECOVERED)

    # Breaks

    def start_break(self) -> SessionActionResult:
        with self._lock:
            mode = self._mode
            countdown = self._countdown
            if isinstance(mode, OnBreak):
                return self._result_locked(ACTION_START_BREAK, False, REASON_BREAK_ACTIVE)
            if isinstance(mode, PomodoroRunning):
                return self._result_locked(ACTION_START_BREAK, False, REASON_POMODORO_ACTIVE)
            if not isinstance(mode, Studying) or countdown is None:
                return self._result_locked(ACTION_START_BREAK, False, REASON_NOT_ACTIVE)
            if not countdown.is_running:
                return self._result_locked(ACTION_START_BREAK, False, REASON_NOT_RUNNING)

            stored_study_time = countdown.remaining_seconds
            self._pause_locked()
            if not self._begin_countdown_locked(
                self._break_seconds,
                OnBreak(resume_to=stored_study_time),
                topic_id=self._topic_id_locked(strict=False),
                carry=countdown,
            ):
                return self._result_locked(ACTION_START_BREAK, False, REASON_STORE_UNAVAILABLE)

            self._logger.info(
                "Break started: duration=%ss stored_study_time=%ss",
                self._break_seconds,
                stored_study_time,
            )
            return self._result_locked(ACTION_START_BREAK, True, REASON_BREAK_STARTED)

    def end_break(self) -> SessionActionResult:
        with self._lock:
            if not isinstance(self._mode, OnBreak):
                return self._result_locked(ACTION_END_BREAK, False, REASON_NOT_ON_BREAK)
            return self._end_break_locked()

    # Pomodoro

    def start_pomodoro(self, settings: Optional[PomodoroSettings] = None) -> SessionActionResult:
        with self._lock:
            if settings is not None:
                self._pomodoro_settings = settings
            active_settings = self._pomodoro_settings
            topic_id = self._topic_id_locked(strict=True)
            if topic_id is None:
                self._logger.info("Pomodoro started without a topic")

            mode = PomodoroRunning(cycle_index=0, settings=active_settings)
            if not self._begin_countdown_locked(
                phase_duration(0, active_settings),
                mode,
                topic_id=topic_id,
                carry=None,
            ):
                return self._result_locked(
                    ACTION_START_POMODORO,
                    False,
                    REASON_STORE_UNAVAILABLE,
                )

            self._logger.info(
                "Pomodoro started: cycles=%s study=%ss short=%ss long=%ss",
                active_settings.cycles,
                active_settings.study_seconds,
                active_settings.short_break_seconds,
                active_settings.long_break_seconds,
            )
            return self._result_locked(ACTION_START_POMODORO, True, REASON_POMODORO_STARTED)

    def advance_pomodoro(self) -> SessionActionResult:
        """Finish the current Pomodoro phase and move to the next one."""
        with self._lock:
            if not isinstance(self._mode, PomodoroRunning) or self._countdown is None:
                return self._result_locked(ACTION_ADVANCE_POMODORO, False, REASON_NOT_POMODORO)
            return self._advance_pomodoro_locked()

    def get_pomodoro_status(self) -> Optional[PomodoroStatus]:
        with self._lock:
            mode = self._mode
            if not isinstance(mode, PomodoroRunning):
                return None
            return pomodoro_status(mode.cycle_index, mode.settings)

    def close(self) -> None:
        with self._lock:
            self._disarm_ticker_locked()

    # Internals

    def _ticker_fired(self, generation: int) -> None:
        with self._lock:
            if generation != self._tick_generation:
                return
            self._tick_locked()

    def _tick_locked(self) -> Optional[SessionTick]:
        countdown = self._countdown
        if countdown is None or not countdown.is_running or countdown.active_session_id is None:
            return None

        countdown.remaining_seconds = max(0, countdown.remaining_seconds - 1)
        self._mirror_locked({"current_time": countdown.remaining_seconds}, level=logging.DEBUG)

        if countdown.remaining_seconds > 0:
            tick = SessionTick(snapshot=self._snapshot_locked())
        else:
            self._disarm_ticker_locked()
            finished = self._dispatch_terminal_locked()
            tick = SessionTick(
                snapshot=self._snapshot_locked(),
                completed=True,
                finished=finished,
            )

        if self._on_tick is not None:
            self._on_tick(tick)
        return tick

    def _dispatch_terminal_locked(self) -> str:
        mode = self._mode
        if isinstance(mode, OnBreak):
            self._end_break_locked()
            return FINISHED_BREAK
        if isinstance(mode, PomodoroRunning):
            result = self._advance_pomodoro_locked()
            if result.reason == REASON_COMPLETED:
                return FINISHED_POMODORO
            return FINISHED_POMODORO_PHASE
        self._end_session_locked(False, ACTION_END)
        return FINISHED_SESSION

    def _end_session_locked(self, interrupted: bool, action: str) -> SessionActionResult:
        countdown = self._countdown
        if countdown is None:
            return self._result_locked(action, False, REASON_NOT_ACTIVE)

        now = self._clock()
        break_seconds = countdown.break_seconds + self._current_break_elapsed_locked(now)
        record = self._write_completed_locked(countdown, now, break_seconds, interrupted)

        if countdown.active_session_id is not None:
            try:
                self._store.delete_active(countdown.active_session_id)
            except StoreError as error:
                self._logger.error("Error deleting active session: %s", error)

        self._reset_locked()
        self._logger.info(
            "Session ended: total=%ss break=%ss interrupted=%s",
            record.total_seconds,
            record.break_seconds,
            interrupted,
        )

        reason = REASON_INTERRUPTED if interrupted else REASON_COMPLETED
        return self._result_locked(action, True, reason)

    def _write_completed_locked(
        self,
        countdown: Countdown,
        now: dt.datetime,
        break_seconds: int,
        interrupted: bool,
    ) -> CompletedSessionRecord:
        elapsed = max(0, int((now - countdown.run_started_at).total_seconds()))
        record = CompletedSessionRecord(
            user_id=self._user_id,
            start_time=countdown.run_started_at,
            end_time=now,
            total_seconds=max(0, elapsed - break_seconds),
            break_seconds=break_seconds,
            interrupted=interrupted,
            topic_id=self._topic_id_locked(strict=False),
        )
        try:
            self._store.create_completed(record)
        except StoreError as error:
            self._logger.error("Error saving completed session: %s", error)
            return record

        update_streak(self._streaks, self._user_id, self._today(), logger=self._logger)
        return record

    def _keep_unfinished_run_locked(self, carry: Countdown) -> None:
        """Record the run so far when its next segment could not be created."""
        record = self._write_completed_locked(
            carry,
            self._clock(),
            carry.break_seconds,
            False,
        )
        self._logger.warning(
            "Run stopped early: total=%ss break=%ss",
            record.total_seconds,
            record.break_seconds,
        )

    def _end_break_locked(self) -> SessionActionResult:
        mode = self._mode
        countdown = self._countdown
        if not isinstance(mode, OnBreak) or countdown is None:
            return self._result_locked(ACTION_END_BREAK, False, REASON_NOT_ON_BREAK)

        now = self._clock()
        break_total = countdown.break_seconds + self._current_break_elapsed_locked(now)
        record_id = countdown.active_session_id
        if record_id is not None:
            try:
                self._store.update_active(
                    record_id,
                    {"break_time": break_total, "last_updated": format_timestamp(now)},
                )
            except StoreError as error:
                self._logger.error("Error saving break time: %s", error)
            try:
                self._store.delete_active(record_id)
            except StoreError as error:
                self._logger.error("Error deleting break session: %s", error)

        carry = replace(countdown, break_seconds=break_total, active_session_id=None)
        self._countdown = carry

        if mode.resume_to is None or mode.resume_to <= 0:
            self._reset_locked()
            self._logger.info("Break ended: break_time=%ss", break_total)
            return self._result_locked(ACTION_END_BREAK, True, REASON_BREAK_ENDED)

        if not self._begin_countdown_locked(
            mode.resume_to,
            Studying(),
            topic_id=self._topic_id_locked(strict=False),
            carry=carry,
        ):
            self._keep_unfinished_run_locked(carry)
            return self._result_locked(ACTION_END_BREAK, False, REASON_STORE_UNAVAILABLE)

        self._logger.info(
            "Break ended: break_time=%ss resumed_study=%ss",
            break_total,
            mode.resume_to,
        )
        return self._result_locked(ACTION_END_BREAK, True, REASON_BREAK_ENDED)

    def _advance_pomodoro_locked(self) -> SessionActionResult:
        mode = self._mode
        countdown = self._countdown
        if not isinstance(mode, PomodoroRunning) or countdown is None:
            return self._result_locked(ACTION_ADVANCE_POMODORO, False, REASON_NOT_POMODORO)

        countdown.break_seconds += self._current_break_elapsed_locked(self._clock())
        next_index = mode.cycle_index + 1
        if next_index >= total_phases(mode.settings):
            self._logger.info("Pomodoro run finished after %d phases", next_index)
            # The run ends as a plain study session; break time is already counted.
            self._mode = Studying()
            return self._end_session_locked(False, ACTION_ADVANCE_POMODORO)

        next_mode = PomodoroRunning(cycle_index=next_index, settings=mode.settings)
        if not self._begin_countdown_locked(
            phase_duration(next_index, mode.settings),
            next_mode,
            topic_id=self._topic_id_locked(strict=False),
            carry=countdown,
        ):
            self._keep_unfinished_run_locked(countdown)
            return self._result_locked(
                ACTION_ADVANCE_POMODORO,
                False,
                REASON_STORE_UNAVAILABLE,
            )

        self._logger.info(
            "Pomodoro phase %d/%d started: %s",
            next_index + 1,
            total_phases(mode.settings),
            "study" if is_study_phase(next_index) else "break",
        )
        return self._result_locked(ACTION_ADVANCE_POMODORO, True, REASON_POMODORO_ADVANCED)

    def _begin_countdown_locked(
        self,
        seconds: int,
        mode: SessionMode,
        *,
        topic_id: Optional[str],
        carry: Optional[Countdown],
    ) -> bool:
        self._disarm_ticker_locked()
        try:
            self._store.delete_all_active(self._user_id)
        except StoreError as error:
            self._logger.error("Error deleting previous active sessions: %s", error)

        now = self._clock()
        countdown = Countdown(
            remaining_seconds=seconds,
            initial_seconds=seconds,
            is_running=True,
            session_started_at=now,
            run_started_at=carry.run_started_at if carry is not None else now,
            break_seconds=carry.break_seconds if carry is not None else 0,
        )
        self._mode = mode
        self._countdown = countdown

        snapshot = self._snapshot_locked()
        record = ActiveSessionRecord(
            user_id=self._user_id,
            start_time=now,
            initial_time=seconds,
            current_time=seconds,
            is_running=True,
            last_updated=now,
            is_break=snapshot.is_break,
            is_pomodoro=snapshot.is_pomodoro,
            pomodoro_cycle=snapshot.pomodoro_cycle,
            stored_study_time=snapshot.stored_study_time,
            topic_id=topic_id,
            break_time=countdown.break_seconds,
            run_start_time=countdown.run_started_at,
        )
        try:
            created = self._store.create_active(record)
        except StoreError as error:
            self._logger.error("Error starting timer: %s", error)
            self._reset_locked()
            return False

        countdown.active_session_id = created.id
        self._arm_ticker_locked()
        return True

    def _pause_locked(self) -> None:
        countdown = self._countdown
        if countdown is None:
            return
        countdown.is_running = False
        self._disarm_ticker_locked()
        self._mirror_locked({"is_running": False})

    def _mirror_locked(self, fields: dict[str, Any], *, level: int = logging.WARNING) -> None:
        countdown = self._countdown
        if countdown is None or countdown.active_session_id is None:
            return
        payload = {**fields, "last_updated": format_timestamp(self._clock())}
        try:
            self._store.update_active(countdown.active_session_id, payload)
        except StoreError as error:
            self._logger.log(level, "Error updating active session: %s", error)

    def _reset_locked(self) -> None:
        self._disarm_ticker_locked()
        self._mode = Idle()
        self._countdown = None

    def _arm_ticker_locked(self) -> None:
        self._disarm_ticker_locked()
        countdown = self._countdown
        if countdown is None or not countdown.is_running or countdown.active_session_id is None:
            return
        generation = self._tick_generation
        self._ticker = self._ticker_factory(lambda: self._ticker_fired(generation))
        self._ticker.start()

    def _disarm_ticker_locked(self) -> None:
        self._tick_generation += 1
        ticker = self._ticker
        self._ticker = None
        if ticker is not None:
            ticker.stop()

    def _current_break_elapsed_locked(self, now: dt.datetime) -> int:
        countdown = self._countdown
        mode = self._mode
        if countdown is None:
            return 0
        on_break = isinstance(mode, OnBreak) or (
            isinstance(mode, PomodoroRunning) and not is_study_phase(mode.cycle_index)
        )
        if not on_break:
            return 0
        return max(0, int((now - countdown.session_started_at).total_seconds()))

    def _topic_id_locked(self, *, strict: bool) -> Optional[str]:
        topic = self._selected_topic
        if topic is None:
            return None
        if self._topic_id_validator(topic.id):
            return str(topic.id)
        if strict:
            raise SessionValidationError(f"Invalid topic id: {topic.id!r}")
        self._logger.warning("Dropping invalid topic id from session record: %r", topic.id)
        return None

    def _mode_from_record(self, record: ActiveSessionRecord) -> SessionMode:
        if record.is_pomodoro:
            settings = self._pomodoro_settings
            last_index = total_phases(settings) - 1
            cycle_index = min(max(0, record.pomodoro_cycle), last_index)
            return PomodoroRunning(cycle_index=cycle_index, settings=settings)
        if record.is_break:
            return OnBreak(resume_to=record.stored_study_time)
        return Studying()

    def _result_locked(self, action: str, accepted: bool, reason: str) -> SessionActionResult:
        return SessionActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self._snapshot_locked(),
        )

    def _snapshot_locked(self) -> SessionSnapshot:
        mode = self._mode
        countdown = self._countdown
        is_pomodoro = isinstance(mode, PomodoroRunning)
        accumulated = 0
        if countdown is not None:
            elapsed = self._clock() - countdown.session_started_at
            accumulated = max(0, int(elapsed.total_seconds()))

        return SessionSnapshot(
            mode=mode_name(mode),
            remaining_seconds=countdown.remaining_seconds if countdown else 0,
            initial_seconds=countdown.initial_seconds if countdown else 0,
            accumulated_seconds=accumulated,
            is_running=countdown.is_running if countdown else False,
            session_started_at=countdown.session_started_at if countdown else None,
            is_break=isinstance(mode, OnBreak)
            or (is_pomodoro and not is_study_phase(mode.cycle_index)),
            stored_study_time=mode.resume_to if isinstance(mode, OnBreak) else None,
            is_pomodoro=is_pomodoro,
            pomodoro_cycle=mode.cycle_index if is_pomodoro else 0,
            pomodoro_settings=mode.settings if is_pomodoro else self._pomodoro_settings,
            selected_topic=self._selected_topic,
            active_session_id=countdown.active_session_id if countdown else None,
        )
