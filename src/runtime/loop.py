"""Runtime orchestration loop for UI commands and session ticks."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from queue import Empty, Queue
from typing import Any, Callable, Optional

from app_config import AppConfig
from contracts.ui_protocol import EVENT_ERROR, STATE_ERROR
from server import UIServer
from session import SessionEngine, SessionTick
from session.constants import ACTION_RECOVER, ACTION_SYNC, REASON_STARTUP

from .commands import RuntimeCommandDispatcher
from .messages import default_session_text, session_status_message
from .ticks import TickDependencies, TickProcessor
from .ui import RuntimeUIPublisher, ui_state_for


@dataclass(frozen=True)
class RuntimeHooks:
    """Injectable lifecycle hooks used by runtime startup and shutdown flow."""
    setup_signal_handlers: Callable[[Callable[[], None]], None]


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    engine: SessionEngine
    ui_server: Optional[UIServer]
    hooks: RuntimeHooks
    poll_interval_seconds: float = 0.25


@dataclass
class RuntimeResources:
    """Mutable runtime resources created for the event loop lifecycle."""
    event_queue: Queue[Any]
    shutdown_requested: threading.Event = field(default_factory=threading.Event)


class RuntimeEngine:
    """Main runtime loop that serializes UI commands and tick publishing."""
    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        self._engine = bootstrap.engine

        self._ui = RuntimeUIPublisher(bootstrap.ui_server)
        self._dispatcher = RuntimeCommandDispatcher(
            logger=self._logger,
            engine=self._engine,
            ui=self._ui,
        )
        self._tick_processor = TickProcessor(
            TickDependencies(
                logger=self._logger,
                ui=self._ui,
                publish_current_state=self._publish_current_state,
            )
        )
        self._resources = RuntimeResources(event_queue=Queue())

        self._engine.set_tick_listener(self.enqueue_tick)
        if bootstrap.ui_server is not None:
            bootstrap.ui_server.set_command_handler(self.enqueue_command)

    @property
    def dispatcher(self) -> RuntimeCommandDispatcher:
        return self._dispatcher

    def enqueue_command(self, command: dict[str, Any]) -> None:
        self._resources.event_queue.put(command)

    def enqueue_tick(self, tick: SessionTick) -> None:
        self._resources.event_queue.put(tick)

    def request_shutdown(self) -> None:
        self._resources.shutdown_requested.set()

    def run(self) -> int:
        self._bootstrap.hooks.setup_signal_handlers(self.request_shutdown)

        try:
            self._recover_session()
            self._publish_startup_sync()
            self._logger.info("Ready! Waiting for commands ...")

            while not self._resources.shutdown_requested.is_set():
                event, loop_exit = self._poll_event()
                if loop_exit is not None:
                    return loop_exit
                if event is None:
                    continue
                self._handle_event(event)

            self._logger.info("Shutdown requested.")
            return 0
        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def _recover_session(self) -> None:
        result = self._engine.recover()
        if not result.accepted:
            self._logger.info("No session recovered: %s", result.reason)
            return
        self._ui.publish_session_update(
            result.snapshot,
            action=ACTION_RECOVER,
            accepted=True,
            reason=result.reason,
            message=default_session_text(ACTION_RECOVER, result.snapshot),
        )

    def _publish_current_state(self) -> None:
        snapshot = self._engine.snapshot()
        self._ui.publish_state(
            ui_state_for(snapshot),
            message=session_status_message(snapshot),
        )

    def _publish_startup_sync(self) -> None:
        self._ui.publish_session_update(
            self._engine.snapshot(),
            action=ACTION_SYNC,
            accepted=True,
            reason=REASON_STARTUP,
        )
        self._publish_current_state()

    def _poll_event(self) -> tuple[Optional[Any], Optional[int]]:
        try:
            return (
                self._resources.event_queue.get(
                    timeout=self._bootstrap.poll_interval_seconds
                ),
                None,
            )
        except Empty:
            ui_server = self._bootstrap.ui_server
            if ui_server is not None and not ui_server.is_running:
                self._logger.error("UI server stopped unexpectedly")
                return None, 1
            return None, None

    def _handle_event(self, event: Any) -> None:
        if isinstance(event, SessionTick):
            self._tick_processor.handle_session_tick(event)
            return

        if isinstance(event, dict):
            try:
                result = self._dispatcher.handle_command(event)
            except Exception as error:
                self._logger.error("Command failed: %s", error, exc_info=True)
                self._ui.publish(
                    EVENT_ERROR,
                    state=STATE_ERROR,
                    message=f"Command failed: {error}",
                )
                return
            if result is not None:
                self._publish_current_state()
            return

        self._logger.warning("Ignoring unknown event type: %s", type(event).__name__)

    def _shutdown(self) -> None:
        self._engine.set_tick_listener(None)
        self._logger.info("Stopping session ticker...")
        self._engine.close()

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            ui_server.set_command_handler(None)
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
