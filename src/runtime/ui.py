from __future__ import annotations

from typing import Any, Optional, Protocol

from contracts.ui_protocol import (
    EVENT_SESSION,
    STATE_IDLE,
    STATE_ON_BREAK,
    STATE_PAUSED,
    STATE_POMODORO,
    STATE_STUDYING,
)
from session import SessionSnapshot
from session.constants import MODE_ON_BREAK, MODE_POMODORO, MODE_STUDYING


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        ...


def ui_state_for(snapshot: SessionSnapshot) -> str:
    """Map a session snapshot to the coarse UI state shown in the header."""
    if snapshot.is_active and not snapshot.is_running:
        return STATE_PAUSED
    if snapshot.mode == MODE_STUDYING:
        return STATE_STUDYING
    if snapshot.mode == MODE_ON_BREAK:
        return STATE_ON_BREAK
    if snapshot.mode == MODE_POMODORO:
        return STATE_POMODORO
    return STATE_IDLE


def snapshot_payload(snapshot: SessionSnapshot) -> dict[str, Any]:
    topic = snapshot.selected_topic
    settings = snapshot.pomodoro_settings
    return {
        "mode": snapshot.mode,
        "remaining_seconds": snapshot.remaining_seconds,
        "initial_seconds": snapshot.initial_seconds,
        "accumulated_seconds": snapshot.accumulated_seconds,
        "is_running": snapshot.is_running,
        "is_break": snapshot.is_break,
        "stored_study_time": snapshot.stored_study_time,
        "is_pomodoro": snapshot.is_pomodoro,
        "pomodoro_cycle": snapshot.pomodoro_cycle,
        "pomodoro_settings": {
            "study_seconds": settings.study_seconds,
            "short_break_seconds": settings.short_break_seconds,
            "long_break_seconds": settings.long_break_seconds,
            "cycles": settings.cycles,
            "long_break_interval": settings.long_break_interval,
        },
        "session_started_at": (
            snapshot.session_started_at.isoformat()
            if snapshot.session_started_at is not None
            else None
        ),
        "topic": (
            {"id": topic.id, "name": topic.name, "field": topic.field}
            if topic is not None
            else None
        ),
        "active_session_id": snapshot.active_session_id,
    }


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        if self._ui_server:
            self._ui_server.publish_state(state, message=message, **payload)

    def publish_session_update(
        self,
        snapshot: SessionSnapshot,
        *,
        action: str,
        accepted: Optional[bool] = None,
        reason: str = "",
        command: Optional[str] = None,
        message: Optional[str] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "action": action,
            **snapshot_payload(snapshot),
        }
        if accepted is not None:
            payload["accepted"] = accepted
        if reason:
            payload["reason"] = reason
        if command:
            payload["command"] = command
        if message:
            payload["message"] = message
        self.publish(EVENT_SESSION, **payload)
