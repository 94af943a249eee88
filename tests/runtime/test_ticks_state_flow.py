import logging
import unittest

from runtime.ticks import TickDependencies, TickProcessor
from runtime.ui import RuntimeUIPublisher
from session import PomodoroSettings, SessionSnapshot, SessionTick


def _snapshot(mode: str = "studying", remaining: int = 10, **overrides) -> SessionSnapshot:
    fields = dict(
        mode=mode,
        remaining_seconds=remaining,
        initial_seconds=60,
        accumulated_seconds=50,
        is_running=mode != "idle",
        session_started_at=None,
        is_break=False,
        stored_study_time=None,
        is_pomodoro=False,
        pomodoro_cycle=0,
        pomodoro_settings=PomodoroSettings(),
        selected_topic=None,
        active_session_id="row-1" if mode != "idle" else None,
    )
    fields.update(overrides)
    return SessionSnapshot(**fields)


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []
        self.trace: list[tuple[str, str]] = []

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))
        self.trace.append(("event", event_type))

    def publish_state(self, state: str, *, message=None, **payload):
        self.trace.append(("state", state))


class TickStateFlowTests(unittest.TestCase):
    def setUp(self) -> None:
        self.ui = _UIServerStub()
        self.state_calls: list[str] = []
        self.processor = TickProcessor(
            TickDependencies(
                logger=logging.getLogger("test"),
                ui=RuntimeUIPublisher(self.ui),
                publish_current_state=lambda: self.state_calls.append("state"),
            )
        )

    def test_running_tick_publishes_session_update_only(self) -> None:
        self.processor.handle_session_tick(SessionTick(snapshot=_snapshot(remaining=9)))

        self.assertEqual([("event", "session")], self.ui.trace)
        payload = self.ui.events[0][1]
        self.assertEqual("tick", payload["action"])
        self.assertEqual(9, payload["remaining_seconds"])
        self.assertNotIn("message", payload)
        self.assertEqual([], self.state_calls)

    def test_session_completion_publishes_notice_then_state(self) -> None:
        tick = SessionTick(snapshot=_snapshot("idle", 0), completed=True, finished="session")

        self.processor.handle_session_tick(tick)

        self.assertEqual([("event", "session"), ("event", "notice")], self.ui.trace)
        self.assertEqual("completed", self.ui.events[0][1]["action"])
        self.assertEqual("Study session complete. Well done!", self.ui.events[1][1]["text"])
        self.assertEqual("session", self.ui.events[1][1]["finished"])
        self.assertEqual(["state"], self.state_calls)

    def test_break_completion_announces_return_to_study(self) -> None:
        tick = SessionTick(snapshot=_snapshot("studying", 590), completed=True, finished="break")

        self.processor.handle_session_tick(tick)

        self.assertEqual("Break is over. Back to studying.", self.ui.events[1][1]["text"])

    def test_pomodoro_phase_completion_names_next_phase(self) -> None:
        snapshot = _snapshot(
            "pomodoro",
            300,
            is_pomodoro=True,
            is_break=True,
            pomodoro_cycle=1,
        )
        tick = SessionTick(snapshot=snapshot, completed=True, finished="pomodoro_phase")

        self.processor.handle_session_tick(tick)

        self.assertEqual("Pomodoro 1/4 short break started.", self.ui.events[1][1]["text"])


if __name__ == "__main__":
    unittest.main()
