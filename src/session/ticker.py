"""Cancellable repeating timer that drives the once-per-second tick."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

from .constants import DEFAULT_TICK_INTERVAL_SECONDS


class TickerLike(Protocol):
    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...


TickerFactory = Callable[[Callable[[], None]], TickerLike]


class RepeatingTicker:
    """Calls `callback` every `interval_seconds` on one daemon thread.

    Callbacks run serially and never overlap. `stop()` only signals the
    thread, so it is safe to call from inside the callback.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        *,
        interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS,
        name: str = "session-ticker",
        logger: Optional[logging.Logger] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")

        self._callback = callback
        self._interval_seconds = float(interval_seconds)
        self._name = name
        self._logger = logger or logging.getLogger("session")
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    @property
    def is_running(self) -> bool:
        return (
            self._thread is not None
            and self._thread.is_alive()
            and self._stop_event is not None
            and not self._stop_event.is_set()
        )

    def start(self) -> None:
        if self.is_running:
            return

        stop_event = threading.Event()
        self._stop_event = stop_event
        self._thread = threading.Thread(
            target=self._run,
            args=(stop_event,),
            daemon=True,
            name=self._name,
        )
        self._thread.start()

    def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
        self._stop_event = None
        self._thread = None

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self._interval_seconds):
            try:
                self._callback()
            except Exception as error:
                self._logger.error("Tick callback failed: %s", error, exc_info=True)


def repeating_ticker_factory(
    interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS,
    *,
    logger: Optional[logging.Logger] = None,
) -> TickerFactory:
    def factory(callback: Callable[[], None]) -> TickerLike:
        return RepeatingTicker(callback, interval_seconds=interval_seconds, logger=logger)

    return factory
