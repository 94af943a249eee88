"""Dispatcher that executes decoded UI commands against the session engine."""

from __future__ import annotations

import logging
import math
import re
from dataclasses import replace
from typing import Any, Optional

from contracts.command_contract import (
    COMMAND_ADD_TIME,
    COMMAND_END_BREAK,
    COMMAND_EXIT,
    COMMAND_PAUSE,
    COMMAND_RESUME,
    COMMAND_SELECT_TOPIC,
    COMMAND_SET_POMODORO_SETTINGS,
    COMMAND_START,
    COMMAND_START_BREAK,
    COMMAND_START_POMODORO,
    COMMAND_STATUS,
    COMMAND_NAMES,
    COMMAND_TO_RUNTIME_ACTION,
    COMMANDS_WITHOUT_ARGUMENTS,
)
from session import (
    PomodoroSettings,
    SessionActionResult,
    SessionEngine,
    SessionValidationError,
    Topic,
)
from session.constants import (
    ACTION_STATUS,
    REASON_INVALID_ARGUMENT,
    REASON_UNSUPPORTED_ACTION,
)

from .messages import default_session_text, rejection_text, session_status_message
from .ui import RuntimeUIPublisher

_DURATION_PATTERN = re.compile(
    r"^(\d{1,5})\s*(s|sec|secs|second|seconds|m|min|mins|minute|minutes|h|hr|hour|hours)?$"
)

_POMODORO_MINUTE_FIELDS = {
    "study_minutes": "study_seconds",
    "short_break_minutes": "short_break_seconds",
    "long_break_minutes": "long_break_seconds",
}
_POMODORO_COUNT_FIELDS = ("cycles", "long_break_interval")


def parse_duration_seconds(value: Any) -> int:
    """Parse `90`, `"90"`, `"25m"`, `"1h"` or `"45 seconds"` into seconds.

    Bare numbers are minutes.
    """
    if isinstance(value, bool):
        raise SessionValidationError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value <= 0:
            raise SessionValidationError(f"Duration must be positive: {value!r}")
        return max(1, int(round(value * 60)))
    if isinstance(value, str):
        match = _DURATION_PATTERN.match(value.strip().lower())
        if match:
            amount = int(match.group(1))
            unit = match.group(2) or "m"
            if amount > 0:
                if unit.startswith("s"):
                    return amount
                if unit.startswith("h"):
                    return amount * 3600
                return amount * 60
    raise SessionValidationError(f"Invalid duration: {value!r}")


def duration_from_arguments(arguments: dict[str, Any]) -> int:
    if "seconds" in arguments:
        seconds = arguments["seconds"]
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds <= 0:
            raise SessionValidationError(f"seconds must be a positive integer, got: {seconds!r}")
        return seconds
    if "minutes" in arguments:
        return parse_duration_seconds(arguments["minutes"])
    if "duration" in arguments:
        return parse_duration_seconds(arguments["duration"])
    raise SessionValidationError("A duration is required (seconds, minutes or duration)")


def topic_from_arguments(arguments: dict[str, Any]) -> Optional[Topic]:
    raw = arguments.get("topic")
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = {"id": raw}
    if not isinstance(raw, dict):
        raise SessionValidationError("topic must be an object or an id string")

    topic_id = raw.get("id")
    if not isinstance(topic_id, str) or not topic_id.strip():
        raise SessionValidationError("topic.id is required")
    return Topic(
        id=topic_id.strip(),
        name=str(raw.get("name") or ""),
        field=str(raw.get("field") or ""),
    )


def pomodoro_settings_from_arguments(
    arguments: dict[str, Any],
    base: PomodoroSettings,
) -> Optional[PomodoroSettings]:
    """Overlay minute and count overrides onto `base`; None when none are given."""
    overrides: dict[str, int] = {}
    for argument, field in _POMODORO_MINUTE_FIELDS.items():
        if argument in arguments:
            overrides[field] = parse_duration_seconds(arguments[argument])
    for field in _POMODORO_COUNT_FIELDS:
        if field in arguments:
            overrides[field] = arguments[field]
    if not overrides:
        return None
    # PomodoroSettings validates the merged values.
    return replace(base, **overrides)


class RuntimeCommandDispatcher:
    """Routes UI commands to session engine operations and publishes results."""
    def __init__(
        self,
        *,
        logger: logging.Logger,
        engine: SessionEngine,
        ui: RuntimeUIPublisher,
    ):
        self._logger = logger
        self._engine = engine
        self._ui = ui

    def active_runtime_message(self) -> str:
        return session_status_message(self._engine.snapshot())

    def handle_command(self, command: dict[str, Any]) -> Optional[SessionActionResult]:
        raw_name = command.get("name")
        if not isinstance(raw_name, str):
            return None
        raw_arguments = command.get("arguments")
        arguments = raw_arguments if isinstance(raw_arguments, dict) else {}

        if raw_name not in COMMAND_NAMES:
            self._logger.warning("Unsupported command: %s", raw_name)
            self._publish_rejection(raw_name, raw_name, REASON_UNSUPPORTED_ACTION)
            return None
        action = COMMAND_TO_RUNTIME_ACTION[raw_name]
        if raw_name in COMMANDS_WITHOUT_ARGUMENTS and arguments:
            self._logger.debug("Ignoring arguments for %s: %s", raw_name, sorted(arguments))
            arguments = {}

        if raw_name == COMMAND_STATUS:
            snapshot = self._engine.snapshot()
            self._ui.publish_session_update(
                snapshot,
                action=ACTION_STATUS,
                accepted=True,
                command=raw_name,
                message=session_status_message(snapshot),
            )
            return None

        try:
            result = self._apply(raw_name, arguments)
        except SessionValidationError as error:
            self._logger.warning("Rejected command %s: %s", raw_name, error)
            self._publish_rejection(
                raw_name,
                action,
                REASON_INVALID_ARGUMENT,
                message=f"{rejection_text(action, REASON_INVALID_ARGUMENT)} {error}",
            )
            return None

        if result.accepted:
            message = default_session_text(result.action, result.snapshot)
        else:
            message = rejection_text(result.action, result.reason)
        self._ui.publish_session_update(
            result.snapshot,
            action=result.action,
            accepted=result.accepted,
            reason=result.reason,
            command=raw_name,
            message=message,
        )
        return result

    def _apply(self, name: str, arguments: dict[str, Any]) -> SessionActionResult:
        engine = self._engine
        if name == COMMAND_START:
            return engine.start_timer(
                duration_from_arguments(arguments),
                is_break=bool(arguments.get("is_break", False)),
            )
        if name == COMMAND_PAUSE:
            return engine.pause_timer()
        if name == COMMAND_RESUME:
            return engine.resume_timer()
        if name == COMMAND_ADD_TIME:
            return engine.add_time(duration_from_arguments(arguments))
        if name == COMMAND_START_BREAK:
            return engine.start_break()
        if name == COMMAND_END_BREAK:
            return engine.end_break()
        if name == COMMAND_START_POMODORO:
            settings = pomodoro_settings_from_arguments(arguments, engine.pomodoro_settings)
            return engine.start_pomodoro(settings)
        if name == COMMAND_EXIT:
            return engine.exit_session()
        if name == COMMAND_SELECT_TOPIC:
            return engine.select_topic(topic_from_arguments(arguments))
        if name == COMMAND_SET_POMODORO_SETTINGS:
            settings = pomodoro_settings_from_arguments(arguments, engine.pomodoro_settings)
            if settings is None:
                raise SessionValidationError("No Pomodoro settings given")
            return engine.set_pomodoro_settings(settings)
        raise SessionValidationError(f"Unhandled command: {name}")

    def _publish_rejection(
        self,
        command: str,
        action: str,
        reason: str,
        *,
        message: Optional[str] = None,
    ) -> None:
        self._ui.publish_session_update(
            self._engine.snapshot(),
            action=action,
            accepted=False,
            reason=reason,
            command=command,
            message=message or rejection_text(action, reason),
        )
