from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

import websockets
from websockets.asyncio.server import ServerConnection
from websockets.datastructures import Headers
from websockets.http11 import Request, Response

from contracts.ui_protocol import (
    EVENT_ERROR,
    EVENT_HELLO,
    EVENT_SESSION,
    EVENT_STATE_UPDATE,
    STATE_IDLE,
)

from .config import HEALTHZ_PATH, PAGE_PATHS, SESSION_PATH, UIServerConfig
from .events import CommandDecodeError, StickyEventStore, decode_command, make_event

CommandHandler = Callable[[dict[str, Any]], None]

_HTML = "text/html; charset=utf-8"
_JSON = "application/json"
_TEXT = "text/plain; charset=utf-8"


def _http_response(status: int, reason: str, body: bytes, content_type: str) -> Response:
    headers = Headers()
    headers["Content-Type"] = content_type
    headers["Content-Length"] = str(len(body))
    headers["Cache-Control"] = "no-store"
    return Response(status, reason, headers, body)


class UIServer:
    """Serves the control page and streams session events over a websocket.

    The asyncio loop runs on its own daemon thread. `publish()` is safe to call
    from any thread, including before `start()`: sticky events are cached and
    replayed to every client that connects later. Commands received from
    clients are decoded and handed to the command handler on a worker thread.
    """

    def __init__(
        self,
        config: UIServerConfig,
        logger: Optional[logging.Logger] = None,
        *,
        command_handler: Optional[CommandHandler] = None,
    ):
        self._config = config
        self._logger = logger or logging.getLogger("ui_server")
        self._command_handler = command_handler
        self._page = Path(config.index_file).read_bytes()
        self._sticky_events = StickyEventStore()
        self._clients: set[ServerConnection] = set()

        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._shutdown: Optional[asyncio.Event] = None
        self._ready = threading.Event()
        self._failure: Optional[Exception] = None

    @property
    def host(self) -> str:
        return self._config.host

    @property
    def port(self) -> int:
        return self._config.port

    @property
    def client_count(self) -> int:
        return len(self._clients)

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive() and self._failure is None

    def set_command_handler(self, handler: Optional[CommandHandler]) -> None:
        self._command_handler = handler

    def start(self, timeout_seconds: float = 5.0) -> None:
        if self.is_running:
            self._logger.warning("UI server is already running")
            return

        self._failure = None
        self._ready.clear()
        self._thread = threading.Thread(target=self._thread_main, name="ui-server", daemon=True)
        self._thread.start()

        if not self._ready.wait(timeout_seconds):
            raise RuntimeError(f"UI server did not start within {timeout_seconds:.1f}s")
        if self._failure is not None:
            raise RuntimeError(f"UI server startup failed: {self._failure}")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        thread = self._thread
        if thread is None:
            return

        loop, shutdown = self._loop, self._shutdown
        if loop is not None and shutdown is not None:
            with contextlib.suppress(RuntimeError):
                loop.call_soon_threadsafe(shutdown.set)

        thread.join(timeout=timeout_seconds)
        if thread.is_alive():
            self._logger.error("UI server thread did not stop within %.1fs", timeout_seconds)

        self._thread = None
        self._loop = None
        self._shutdown = None

    def publish_state(self, state: str, *, message: Optional[str] = None, **payload) -> None:
        if message:
            payload["message"] = message
        self.publish(EVENT_STATE_UPDATE, state=state, **payload)

    def publish(self, event_type: str, **payload) -> None:
        encoded = make_event(event_type, **payload)
        self._sticky_events.remember(event_type, encoded)

        loop = self._loop
        if loop is None or not self.is_running:
            return
        try:
            future = asyncio.run_coroutine_threadsafe(self._broadcast(encoded), loop)
        except RuntimeError:
            self._logger.debug("Dropped %s event: event loop is closing", event_type)
            return
        future.add_done_callback(self._report_broadcast_failure)

    def _report_broadcast_failure(self, future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self._logger.warning("Broadcast failed: %s", error)

    # Event loop thread

    def _thread_main(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._shutdown = asyncio.Event()
        try:
            loop.run_until_complete(self._serve())
        except Exception as error:
            self._failure = error
            self._logger.error("UI server failed: %s", error, exc_info=True)
            self._ready.set()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.close()

    async def _serve(self) -> None:
        async with websockets.serve(
            self._handler,
            host=self._config.host,
            port=self._config.port,
            process_request=self._process_request,
            logger=self._logger,
        ):
            self._logger.info(
                "UI server listening on %s (websocket: %s)",
                self._config.base_url,
                self._config.websocket_path,
            )
            self._ready.set()
            await self._shutdown.wait()
            await self._disconnect_all()

    async def _handler(self, websocket: ServerConnection) -> None:
        request = websocket.request
        path = urlsplit(request.path).path if request is not None else ""
        if path != self._config.websocket_path:
            await websocket.close(code=1008, reason="Invalid websocket path")
            return

        self._clients.add(websocket)
        self._logger.info("Client connected: %s", websocket.remote_address)
        try:
            await websocket.send(self._hello_event())
            for cached in self._sticky_events.snapshot():
                await websocket.send(cached)
            async for message in websocket:
                await self._handle_message(websocket, message)
        except websockets.exceptions.ConnectionClosed:
            self._logger.info("Client disconnected: %s", websocket.remote_address)
        finally:
            self._clients.discard(websocket)

    def _hello_event(self) -> str:
        state = STATE_IDLE
        cached_state = self._sticky_events.latest(EVENT_STATE_UPDATE)
        if cached_state is not None:
            state = json.loads(cached_state).get("state", STATE_IDLE)
        return make_event(EVENT_HELLO, state=state, message="Connected to study timer")

    async def _handle_message(self, websocket: ServerConnection, message: str | bytes) -> None:
        self._logger.debug("Received from UI: %s", message)
        try:
            command = decode_command(message)
        except CommandDecodeError as error:
            self._logger.warning("Rejected UI message: %s", error)
            await websocket.send(make_event(EVENT_ERROR, message=str(error)))
            return

        handler = self._command_handler
        if handler is None:
            await websocket.send(
                make_event(EVENT_ERROR, message="No command handler registered")
            )
            return

        # Handlers may block on remote store calls.
        await asyncio.to_thread(handler, command)

    async def _process_request(
        self,
        connection: ServerConnection,
        request: Request,
    ) -> Response | None:
        del connection
        path = urlsplit(request.path).path
        if path == self._config.websocket_path:
            return None
        if path in PAGE_PATHS:
            return _http_response(200, "OK", self._page, _HTML)
        if path == HEALTHZ_PATH:
            body = json.dumps({"status": "ok", "clients": self.client_count})
            return _http_response(200, "OK", body.encode("utf-8"), _JSON)
        if path == SESSION_PATH:
            return self._session_response()
        return _http_response(404, "Not Found", b"not found\n", _TEXT)

    def _session_response(self) -> Response:
        latest = self._sticky_events.latest(EVENT_SESSION)
        if latest is None:
            return _http_response(404, "Not Found", b"no session published yet\n", _TEXT)
        return _http_response(200, "OK", latest.encode("utf-8"), _JSON)

    async def _disconnect_all(self) -> None:
        clients = tuple(self._clients)
        self._clients.clear()
        if clients:
            await asyncio.gather(
                *(client.close(code=1001, reason="Server shutting down") for client in clients),
                return_exceptions=True,
            )

    async def _broadcast(self, encoded: str) -> None:
        clients = tuple(self._clients)
        if not clients:
            return
        results = await asyncio.gather(
            *(client.send(encoded) for client in clients),
            return_exceptions=True,
        )
        for client, result in zip(clients, results):
            if isinstance(result, Exception):
                self._logger.warning("Dropping client %s: %s", client.remote_address, result)
                self._clients.discard(client)
