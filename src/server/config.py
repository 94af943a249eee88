"""Validated settings for the study timer control page and websocket."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path

from app_config_schema import UIServerSettings


class ServerConfigurationError(Exception):
    """Raised when UI server configuration is invalid."""


WEBSOCKET_PATH = "/ws"
PAGE_PATHS: tuple[str, ...] = ("/", "/index.html")
HEALTHZ_PATH = "/healthz"
SESSION_PATH = "/api/session"
BUNDLED_INDEX_FILE = Path("web_ui") / "index.html"


def bundled_index_file() -> Path:
    """Return the control page shipped next to `src/` (or inside a frozen bundle)."""
    root = getattr(sys, "_MEIPASS", None)
    base_dir = Path(root) if root else Path(__file__).resolve().parents[2]
    return base_dir / BUNDLED_INDEX_FILE


def _check_index_file(index_file: str) -> None:
    if not index_file:
        raise ServerConfigurationError("ui_server.index_file cannot be empty")
    path = Path(index_file)
    if not path.is_file():
        reason = "is not a file" if path.exists() else "not found"
        raise ServerConfigurationError(f"UI index file {reason}: {path}")


@dataclass(frozen=True)
class UIServerConfig:
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServerConfigurationError("ui_server.host cannot be empty")
        if not 1 <= self.port <= 65535:
            raise ServerConfigurationError(
                f"ui_server.port must be in [1, 65535], got: {self.port}"
            )
        # A disabled server never reads the page.
        if self.enabled:
            _check_index_file(self.index_file)

    @property
    def websocket_path(self) -> str:
        return WEBSOCKET_PATH

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    @classmethod
    def from_settings(cls, settings: UIServerSettings) -> "UIServerConfig":
        index_file = (settings.index_file or "").strip() or str(bundled_index_file())
        return cls(
            enabled=bool(settings.enabled),
            host=settings.host,
            port=settings.port,
            index_file=index_file,
        )
