"""Consecutive-day streak bookkeeping for completed study sessions."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import replace
from typing import Optional

from .contracts import StreakRecord, StreakTrackerLike
from .errors import StoreError


def advance_streak(record: StreakRecord, today: dt.date) -> Optional[StreakRecord]:
    """Apply one study day to `record`; return None when nothing changes."""
    if record.last_study_date == today:
        return None

    if record.last_study_date == today - dt.timedelta(days=1):
        current = record.current_streak + 1
        return replace(
            record,
            current_streak=current,
            longest_streak=max(record.longest_streak, current),
            last_study_date=today,
        )

    return replace(record, current_streak=1, last_study_date=today)


def update_streak(
    tracker: StreakTrackerLike,
    user_id: str,
    today: dt.date,
    *,
    logger: Optional[logging.Logger] = None,
) -> Optional[StreakRecord]:
    """Record a study day for `user_id`; tracker failures are logged, not raised."""
    log = logger or logging.getLogger("session")
    try:
        existing = tracker.get(user_id)
        if existing is None:
            created = tracker.create(
                StreakRecord(
                    user_id=user_id,
                    current_streak=1,
                    longest_streak=1,
                    last_study_date=today,
                )
            )
            log.info("Streak created: user=%s", user_id)
            return created

        updated = advance_streak(existing, today)
        if updated is None:
            return existing

        saved = tracker.update(updated)
        log.info(
            "Streak updated: user=%s current=%s longest=%s",
            user_id,
            saved.current_streak,
            saved.longest_streak,
        )
        return saved
    except StoreError as error:
        log.error("Error updating streak: %s", error)
        return None
