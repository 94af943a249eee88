"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

DEFAULT_CONFIG_FILE = "config.toml"

STORE_BACKEND_REST = "rest"
STORE_BACKEND_MEMORY = "memory"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class TimerSettings:
    """Countdown and manual break settings from `[timer]`."""
    break_minutes: int = 5
    tick_interval_seconds: float = 1.0


@dataclass(frozen=True)
class PomodoroDefaults:
    """Default Pomodoro run settings from `[pomodoro]`."""
    study_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    cycles: int = 4
    long_break_interval: int = 4


@dataclass(frozen=True)
class StoreSettings:
    """Remote persistence backend settings from `[store]`."""
    backend: str = STORE_BACKEND_REST
    base_url: str = ""
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class UIServerSettings:
    """Built-in UI server settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765
    index_file: str = ""


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    timer: TimerSettings
    pomodoro: PomodoroDefaults
    store: StoreSettings
    ui_server: UIServerSettings
    source_file: str


@dataclass(frozen=True)
class SecretConfig:
    """Environment-provided identity and credentials kept out of `config.toml`."""
    user_id: str
    api_key: Optional[str]
    access_token: Optional[str]
