import datetime as dt
import logging
import threading
import unittest

from app_config import AppConfig, PomodoroDefaults, StoreSettings, TimerSettings, UIServerSettings
from runtime import RuntimeBootstrap, RuntimeEngine, RuntimeHooks
from session import ActiveSessionRecord, SessionEngine
from store import InMemorySessionStore, InMemoryStreakTracker

START = dt.datetime(2026, 3, 2, 9, 0, tzinfo=dt.timezone.utc)


class _Ticker:
    def start(self) -> None:
        pass

    def stop(self) -> None:
        pass


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []
        self.states: list[str] = []
        self.command_handler = None
        self.running = True
        self.stopped = False
        self.session_events = threading.Condition()

    @property
    def is_running(self) -> bool:
        return self.running

    def set_command_handler(self, handler) -> None:
        self.command_handler = handler

    def publish(self, event_type: str, **payload):
        with self.session_events:
            self.events.append((event_type, payload))
            self.session_events.notify_all()

    def publish_state(self, state: str, *, message=None, **payload):
        self.states.append(state)

    def stop(self, timeout_seconds: float = 5.0) -> None:
        self.stopped = True

    def wait_for(self, predicate, timeout: float = 2.0) -> bool:
        with self.session_events:
            return self.session_events.wait_for(lambda: predicate(self.events), timeout)


def _app_config() -> AppConfig:
    return AppConfig(
        timer=TimerSettings(),
        pomodoro=PomodoroDefaults(),
        store=StoreSettings(backend="memory"),
        ui_server=UIServerSettings(enabled=False),
        source_file="config.toml",
    )


class RuntimeEngineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemorySessionStore()
        self.engine = SessionEngine(
            "user-1",
            self.store,
            InMemoryStreakTracker(),
            clock=lambda: START,
            today=lambda: START.date(),
            ticker_factory=lambda callback: _Ticker(),
        )
        self.ui = _UIServerStub()
        self.shutdown_hooks = []
        self.runtime = RuntimeEngine(
            RuntimeBootstrap(
                logger=logging.getLogger("test"),
                app_config=_app_config(),
                engine=self.engine,
                ui_server=self.ui,
                hooks=RuntimeHooks(setup_signal_handlers=self.shutdown_hooks.append),
                poll_interval_seconds=0.01,
            )
        )
        self.exit_codes: list[int] = []
        self.thread = threading.Thread(target=lambda: self.exit_codes.append(self.runtime.run()))

    def _stop(self) -> int:
        self.runtime.request_shutdown()
        self.thread.join(timeout=2.0)
        self.assertFalse(self.thread.is_alive())
        return self.exit_codes[0]

    def test_registers_command_handler_and_signal_hook(self) -> None:
        self.assertEqual(self.runtime.enqueue_command, self.ui.command_handler)

        self.thread.start()
        self.assertTrue(self.ui.wait_for(lambda events: len(events) >= 1))

        self.assertEqual([self.runtime.request_shutdown], self.shutdown_hooks)
        self.assertEqual(0, self._stop())
        self.assertTrue(self.ui.stopped)
        self.assertIsNone(self.ui.command_handler)

    def test_publishes_startup_sync_and_processes_commands(self) -> None:
        self.thread.start()
        self.ui.command_handler({"name": "start", "arguments": {"minutes": 5}})

        self.assertTrue(
            self.ui.wait_for(
                lambda events: any(payload.get("command") == "start" for _, payload in events)
            )
        )
        self.assertEqual(0, self._stop())

        first_type, first_payload = self.ui.events[0]
        self.assertEqual("session", first_type)
        self.assertEqual("sync", first_payload["action"])
        self.assertEqual("startup", first_payload["reason"])
        self.assertIn("studying", self.ui.states)
        self.assertEqual(300, self.engine.snapshot().remaining_seconds)

    def test_recovers_existing_session_on_startup(self) -> None:
        self.store.create_active(
            ActiveSessionRecord(
                user_id="user-1",
                start_time=START,
                initial_time=600,
                current_time=321,
                is_running=False,
                last_updated=START,
            )
        )

        self.thread.start()
        self.assertTrue(
            self.ui.wait_for(
                lambda events: any(payload.get("action") == "sync" for _, payload in events)
            )
        )
        self.assertEqual(0, self._stop())

        actions = [payload["action"] for _, payload in self.ui.events]
        self.assertEqual(["recover", "sync"], actions[:2])
        self.assertEqual(321, self.ui.events[0][1]["remaining_seconds"])
        self.assertIn("paused", self.ui.states)

    def test_engine_ticks_are_published_from_the_loop(self) -> None:
        self.engine.start_timer(3)
        self.thread.start()

        self.engine.tick()

        self.assertTrue(
            self.ui.wait_for(
                lambda events: any(payload.get("action") == "tick" for _, payload in events)
            )
        )
        self.assertEqual(0, self._stop())

    def test_ui_server_failure_stops_runtime_with_error(self) -> None:
        self.ui.running = False

        self.thread.start()
        self.thread.join(timeout=2.0)

        self.assertEqual([1], self.exit_codes)


if __name__ == "__main__":
    unittest.main()
