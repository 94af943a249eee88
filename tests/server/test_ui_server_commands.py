import asyncio
import json
import tempfile
import unittest
from pathlib import Path

from websockets.datastructures import Headers
from websockets.http11 import Request

from server import UIServer, UIServerConfig


class _WebSocketStub:
    def __init__(self):
        self.sent: list[str] = []

    async def send(self, message: str) -> None:
        self.sent.append(message)


class UIServerCommandTests(unittest.TestCase):
    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        index = Path(self._temp_dir.name) / "index.html"
        index.write_text("<html></html>", encoding="utf-8")
        self.commands: list[dict] = []
        self.server = UIServer(
            UIServerConfig(enabled=True, index_file=str(index)),
            command_handler=self.commands.append,
        )

    def tearDown(self) -> None:
        self._temp_dir.cleanup()

    def test_valid_command_is_forwarded_to_handler(self) -> None:
        websocket = _WebSocketStub()

        asyncio.run(
            self.server._handle_message(
                websocket,
                '{"type": "command", "name": "start", "arguments": {"minutes": 5}}',
            )
        )

        self.assertEqual([{"name": "start", "arguments": {"minutes": 5}}], self.commands)
        self.assertEqual([], websocket.sent)

    def test_invalid_json_is_answered_with_error_event(self) -> None:
        websocket = _WebSocketStub()

        asyncio.run(self.server._handle_message(websocket, "{oops"))

        self.assertEqual([], self.commands)
        self.assertEqual(1, len(websocket.sent))
        self.assertEqual("error", json.loads(websocket.sent[0])["type"])

    def test_missing_handler_reports_error(self) -> None:
        self.server.set_command_handler(None)
        websocket = _WebSocketStub()

        asyncio.run(
            self.server._handle_message(websocket, '{"type": "command", "name": "pause"}')
        )

        self.assertIn("No command handler", json.loads(websocket.sent[0])["message"])

    def test_publish_before_start_is_remembered_for_replay(self) -> None:
        self.server.publish("session", mode="idle")
        self.server.publish("hello", state="idle")

        replay = [json.loads(item) for item in self.server._sticky_events.snapshot()]

        self.assertEqual(["session"], [event["type"] for event in replay])
        self.assertFalse(self.server.is_running)

    def test_hello_reports_last_published_state(self) -> None:
        self.assertEqual("idle", json.loads(self.server._hello_event())["state"])

        self.server.publish_state("paused", message="Studying (0:05:00 remaining, paused)")

        self.assertEqual("paused", json.loads(self.server._hello_event())["state"])


class UIServerRouteTests(unittest.TestCase):
    def setUp(self) -> None:
        self._temp_dir = tempfile.TemporaryDirectory()
        index = Path(self._temp_dir.name) / "index.html"
        index.write_text("<html>timer</html>", encoding="utf-8")
        self.server = UIServer(UIServerConfig(enabled=True, index_file=str(index)))

    def tearDown(self) -> None:
        self._temp_dir.cleanup()

    def _get(self, path: str):
        return asyncio.run(self.server._process_request(None, Request(path, Headers())))

    def test_serves_control_page_and_health(self) -> None:
        for path in ("/", "/index.html"):
            with self.subTest(path=path):
                response = self._get(path)
                self.assertEqual(200, response.status_code)
                self.assertEqual(b"<html>timer</html>", response.body)

        health = json.loads(self._get("/healthz").body)
        self.assertEqual({"status": "ok", "clients": 0}, health)

    def test_websocket_path_is_left_to_handshake(self) -> None:
        self.assertIsNone(self._get("/ws"))

    def test_session_endpoint_returns_latest_session_event(self) -> None:
        self.assertEqual(404, self._get("/api/session").status_code)

        self.server.publish("session", mode="studying", remaining_seconds=90)
        response = self._get("/api/session?fresh=1")

        self.assertEqual(200, response.status_code)
        self.assertEqual(90, json.loads(response.body)["remaining_seconds"])

    def test_unknown_path_is_not_found(self) -> None:
        self.assertEqual(404, self._get("/static/app.js").status_code)


if __name__ == "__main__":
    unittest.main()
