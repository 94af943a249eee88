"""Records and protocols for the remote session store and streak tracker."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional, Protocol


def format_timestamp(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc).isoformat(timespec="seconds")


def parse_timestamp(raw: Any) -> dt.datetime:
    if isinstance(raw, dt.datetime):
        value = raw
    elif isinstance(raw, str) and raw.strip():
        value = dt.datetime.fromisoformat(raw.strip())
    else:
        raise ValueError(f"Invalid timestamp: {raw!r}")
    # Rows written without an offset are UTC.
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value


def _optional_int(raw: Any) -> Optional[int]:
    if raw is None:
        return None
    return int(raw)


def _optional_str(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    text = str(raw).strip()
    return text or None


@dataclass(frozen=True)
class ActiveSessionRecord:
    """Row of the `active_sessions` table mirroring the live session."""
    user_id: str
    start_time: dt.datetime
    initial_time: int
    current_time: int
    is_running: bool
    last_updated: dt.datetime
    is_break: bool = False
    is_pomodoro: bool = False
    pomodoro_cycle: int = 0
    stored_study_time: Optional[int] = None
    topic_id: Optional[str] = None
    break_time: int = 0
    run_start_time: Optional[dt.datetime] = None
    id: Optional[str] = None

    def with_id(self, record_id: str) -> "ActiveSessionRecord":
        return replace(self, id=record_id)

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "user_id": self.user_id,
            "start_time": format_timestamp(self.start_time),
            "initial_time": self.initial_time,
            "current_time": self.current_time,
            "is_running": self.is_running,
            "is_break": self.is_break,
            "is_pomodoro": self.is_pomodoro,
            "pomodoro_cycle": self.pomodoro_cycle,
            "stored_study_time": self.stored_study_time,
            "topic_id": self.topic_id,
            "break_time": self.break_time,
            "run_start_time": format_timestamp(self.run_started_at),
            "last_updated": format_timestamp(self.last_updated),
        }
        if self.id is not None:
            row["id"] = self.id
        return row

    @property
    def run_started_at(self) -> dt.datetime:
        """Start of the whole run; rows without `run_start_time` fall back to `start_time`."""
        return self.run_start_time or self.start_time

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ActiveSessionRecord":
        return cls(
            id=_optional_str(row.get("id")),
            user_id=str(row["user_id"]),
            start_time=parse_timestamp(row["start_time"]),
            initial_time=int(row.get("initial_time") or 0),
            current_time=max(0, int(row.get("current_time") or 0)),
            is_running=bool(row.get("is_running", False)),
            last_updated=parse_timestamp(row.get("last_updated") or row["start_time"]),
            is_break=bool(row.get("is_break", False)),
            is_pomodoro=bool(row.get("is_pomodoro", False)),
            pomodoro_cycle=int(row.get("pomodoro_cycle") or 0),
            stored_study_time=_optional_int(row.get("stored_study_time")),
            topic_id=_optional_str(row.get("topic_id")),
            break_time=int(row.get("break_time") or 0),
            run_start_time=(
                parse_timestamp(row["run_start_time"]) if row.get("run_start_time") else None
            ),
        )


@dataclass(frozen=True)
class CompletedSessionRecord:
    """Write-once row of the `study_sessions` table."""
    user_id: str
    start_time: dt.datetime
    end_time: dt.datetime
    total_seconds: int
    break_seconds: int
    interrupted: bool
    topic_id: Optional[str] = None
    id: Optional[str] = None

    def to_row(self) -> dict[str, Any]:
        row: dict[str, Any] = {
            "user_id": self.user_id,
            "start_time": format_timestamp(self.start_time),
            "end_time": format_timestamp(self.end_time),
            "total_seconds": self.total_seconds,
            "break_time": self.break_seconds,
            "interrupted": self.interrupted,
            "topic_id": self.topic_id,
        }
        if self.id is not None:
            row["id"] = self.id
        return row

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "CompletedSessionRecord":
        return cls(
            id=_optional_str(row.get("id")),
            user_id=str(row["user_id"]),
            start_time=parse_timestamp(row["start_time"]),
            end_time=parse_timestamp(row["end_time"]),
            total_seconds=int(row.get("total_seconds") or 0),
            break_seconds=int(row.get("break_time") or 0),
            interrupted=bool(row.get("interrupted", False)),
            topic_id=_optional_str(row.get("topic_id")),
        )


@dataclass(frozen=True)
class StreakRecord:
    """Row of the `user_streaks` table."""
    user_id: str
    current_streak: int
    longest_streak: int
    last_study_date: dt.date

    def to_row(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "last_study_date": self.last_study_date.isoformat(),
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "StreakRecord":
        raw_date = row["last_study_date"]
        if isinstance(raw_date, dt.date):
            last_date = raw_date
        else:
            # Accept both plain dates and full timestamps.
            last_date = dt.date.fromisoformat(str(raw_date)[:10])
        return cls(
            user_id=str(row["user_id"]),
            current_streak=int(row.get("current_streak") or 0),
            longest_streak=int(row.get("longest_streak") or 0),
            last_study_date=last_date,
        )


class SessionStoreLike(Protocol):
    """Remote store for the active session mirror and completed sessions."""
    def list_active(self, user_id: str) -> list[ActiveSessionRecord]:
        ...

    def create_active(self, record: ActiveSessionRecord) -> ActiveSessionRecord:
        ...

    def update_active(self, record_id: str, fields: Mapping[str, Any]) -> None:
        ...

    def delete_active(self, record_id: str) -> None:
        ...

    def delete_all_active(self, user_id: str) -> None:
        ...

    def create_completed(self, record: CompletedSessionRecord) -> CompletedSessionRecord:
        ...


class StreakTrackerLike(Protocol):
    """Remote per-user streak record."""
    def get(self, user_id: str) -> Optional[StreakRecord]:
        ...

    def create(self, record: StreakRecord) -> StreakRecord:
        ...

    def update(self, record: StreakRecord) -> StreakRecord:
        ...
