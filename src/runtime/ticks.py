"""Tick handlers that publish countdown updates and completion notices."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from contracts.ui_protocol import EVENT_NOTICE
from session import SessionTick
from session.constants import (
    ACTION_COMPLETED,
    ACTION_TICK,
    REASON_COMPLETED,
    REASON_TICK,
)

from .messages import completion_text
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class TickDependencies:
    """Dependencies required for processing session tick events."""
    logger: logging.Logger
    ui: RuntimeUIPublisher
    publish_current_state: Callable[[], None]


class TickProcessor:
    """Handles tick side effects such as UI updates and completion notices."""
    def __init__(self, dependencies: TickDependencies):
        self._dependencies = dependencies

    def handle_session_tick(self, tick: SessionTick) -> None:
        deps = self._dependencies
        if tick.completed:
            completion_message = completion_text(tick.finished, tick.snapshot)
            deps.logger.info("Countdown finished: %s", tick.finished)
            deps.ui.publish_session_update(
                tick.snapshot,
                action=ACTION_COMPLETED,
                accepted=True,
                reason=REASON_COMPLETED,
                message=completion_message,
            )
            deps.ui.publish(EVENT_NOTICE, finished=tick.finished, text=completion_message)
            deps.publish_current_state()
            return

        deps.ui.publish_session_update(
            tick.snapshot,
            action=ACTION_TICK,
            accepted=True,
            reason=REASON_TICK,
        )
