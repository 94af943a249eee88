"""Thread-safe in-memory session store and streak tracker."""

from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from typing import Any, Mapping, Optional

from session.contracts import (
    ActiveSessionRecord,
    CompletedSessionRecord,
    StreakRecord,
    parse_timestamp,
)
from session.errors import StoreError

_TIMESTAMP_FIELDS = frozenset({"start_time", "last_updated"})
_UPDATABLE_FIELDS = frozenset(
    {
        "current_time",
        "is_running",
        "is_break",
        "is_pomodoro",
        "pomodoro_cycle",
        "stored_study_time",
        "topic_id",
        "break_time",
        "start_time",
        "last_updated",
    }
)


class InMemorySessionStore:
    """Session store kept in process memory; contents vanish on exit."""

    def __init__(self):
        self._lock = threading.Lock()
        self._active: dict[str, ActiveSessionRecord] = {}
        self._completed: list[CompletedSessionRecord] = []

    def list_active(self, user_id: str) -> list[ActiveSessionRecord]:
        with self._lock:
            records = [r for r in self._active.values() if r.user_id == user_id]
        return sorted(records, key=lambda record: record.last_updated, reverse=True)

    def create_active(self, record: ActiveSessionRecord) -> ActiveSessionRecord:
        created = record.with_id(record.id or str(uuid.uuid4()))
        with self._lock:
            self._active[created.id] = created  # type: ignore[index]
        return created

    def update_active(self, record_id: str, fields: Mapping[str, Any]) -> None:
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise StoreError(f"Unknown active session fields: {', '.join(sorted(unknown))}")

        changes = {
            key: parse_timestamp(value) if key in _TIMESTAMP_FIELDS else value
            for key, value in fields.items()
        }
        with self._lock:
            existing = self._active.get(record_id)
            if existing is None:
                raise StoreError(f"Active session not found: {record_id}", status_code=404)
            self._active[record_id] = replace(existing, **changes)

    def delete_active(self, record_id: str) -> None:
        with self._lock:
            self._active.pop(record_id, None)

    def delete_all_active(self, user_id: str) -> None:
        with self._lock:
            for record_id in [k for k, r in self._active.items() if r.user_id == user_id]:
                del self._active[record_id]

    def create_completed(self, record: CompletedSessionRecord) -> CompletedSessionRecord:
        created = replace(record, id=record.id or str(uuid.uuid4()))
        with self._lock:
            self._completed.append(created)
        return created

    def completed_sessions(self, user_id: Optional[str] = None) -> list[CompletedSessionRecord]:
        with self._lock:
            return [r for r in self._completed if user_id is None or r.user_id == user_id]


class InMemoryStreakTracker:
    def __init__(self):
        self._lock = threading.Lock()
        self._records: dict[str, StreakRecord] = {}

    def get(self, user_id: str) -> Optional[StreakRecord]:
        with self._lock:
            return self._records.get(user_id)

    def create(self, record: StreakRecord) -> StreakRecord:
        with self._lock:
            if record.user_id in self._records:
                raise StoreError(f"Streak already exists for user {record.user_id}", status_code=409)
            self._records[record.user_id] = record
        return record

    def update(self, record: StreakRecord) -> StreakRecord:
        with self._lock:
            if record.user_id not in self._records:
                raise StoreError(f"Streak not found for user {record.user_id}", status_code=404)
            self._records[record.user_id] = record
        return record
