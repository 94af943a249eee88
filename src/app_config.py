from __future__ import annotations

import os
import sys
import tomllib
from pathlib import Path
from typing import Mapping

from app_config_parser import parse_app_config
from app_config_schema import (
    DEFAULT_CONFIG_FILE,
    STORE_BACKEND_REST,
    AppConfig,
    AppConfigurationError,
    PomodoroDefaults,
    SecretConfig,
    StoreSettings,
    TimerSettings,
    UIServerSettings,
)

__all__ = [
    "AppConfig",
    "AppConfigurationError",
    "PomodoroDefaults",
    "SecretConfig",
    "StoreSettings",
    "TimerSettings",
    "UIServerSettings",
    "load_app_config",
    "load_secret_config",
    "resolve_config_path",
]


def resolve_config_path(config_path: str | None = None) -> Path:
    env_path = os.getenv("APP_CONFIG_FILE")
    raw = config_path or env_path or DEFAULT_CONFIG_FILE
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    if path.exists():
        return path

    # Frozen builds ship config.toml next to the executable.
    if config_path is None and env_path is None and getattr(sys, "frozen", False):
        executable_path = Path(sys.executable).resolve().parent / DEFAULT_CONFIG_FILE
        if executable_path.exists():
            return executable_path

    return path


def load_app_config(config_path: str | None = None) -> AppConfig:
    path = resolve_config_path(config_path)
    if not path.exists():
        raise AppConfigurationError(f"Config file not found: {path}")
    if not path.is_file():
        raise AppConfigurationError(f"Config path is not a file: {path}")

    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error

    if not isinstance(raw, Mapping):
        raise AppConfigurationError("Root config TOML object must be a table.")

    return parse_app_config(raw, base_dir=path.parent, source_file=str(path))


def load_secret_config(
    *,
    store_backend: str = STORE_BACKEND_REST,
    environ: Mapping[str, str] | None = None,
) -> SecretConfig:
    env = environ if environ is not None else os.environ
    user_id = env.get("STUDY_USER_ID", "").strip()
    if not user_id:
        raise AppConfigurationError("STUDY_USER_ID must be set as an environment secret.")

    api_key = env.get("STUDY_API_KEY", "").strip() or None
    if store_backend == STORE_BACKEND_REST and api_key is None:
        raise AppConfigurationError(
            "STUDY_API_KEY must be set as an environment secret for the rest backend."
        )

    access_token = env.get("STUDY_ACCESS_TOKEN", "").strip() or None
    return SecretConfig(
        user_id=user_id,
        api_key=api_key,
        access_token=access_token,
    )
