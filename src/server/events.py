"""Utilities for serializing UI events, decoding commands, and sticky state."""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from contracts.ui_protocol import MESSAGE_COMMAND, STICKY_EVENT_ORDER, STICKY_EVENT_TYPES


class CommandDecodeError(ValueError):
    """Raised when an incoming websocket message is not a valid command."""


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> str:
    """Serialize an event payload with type and timestamp for websocket delivery."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return json.dumps(
        {
            "type": event_type,
            "timestamp": now.isoformat(),
            **payload,
        },
        default=str,
    )


def decode_command(raw: str | bytes) -> dict[str, Any]:
    """Decode a `{"type": "command", "name": ..., "arguments": {...}}` message."""
    try:
        message = json.loads(raw)
    except (TypeError, ValueError) as error:
        raise CommandDecodeError(f"Invalid JSON message: {error}") from error

    if not isinstance(message, dict):
        raise CommandDecodeError("Command message must be a JSON object")
    if message.get("type") != MESSAGE_COMMAND:
        raise CommandDecodeError(f"Unsupported message type: {message.get('type')!r}")

    name = message.get("name")
    if not isinstance(name, str) or not name.strip():
        raise CommandDecodeError("Command name is required")

    arguments: Optional[Any] = message.get("arguments")
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise CommandDecodeError("Command arguments must be a JSON object")

    return {"name": name.strip(), "arguments": arguments}


class StickyEventStore:
    """Thread-safe cache of sticky events replayed to new websocket clients."""
    def __init__(self):
        self._events: dict[str, str] = {}
        self._lock = threading.Lock()

    def remember(self, event_type: str, message: str) -> None:
        if event_type not in STICKY_EVENT_TYPES:
            return
        with self._lock:
            self._events[event_type] = message

    def snapshot(self) -> list[str]:
        with self._lock:
            return [self._events[key] for key in STICKY_EVENT_ORDER if key in self._events]

    def latest(self, event_type: str) -> Optional[str]:
        with self._lock:
            return self._events.get(event_type)
