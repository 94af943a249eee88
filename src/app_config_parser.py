"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    STORE_BACKEND_MEMORY,
    STORE_BACKEND_REST,
    AppConfig,
    AppConfigurationError,
    PomodoroDefaults,
    StoreSettings,
    TimerSettings,
    UIServerSettings,
)

_ALLOWED_STORE_BACKENDS = {STORE_BACKEND_REST, STORE_BACKEND_MEMORY}
_SECRET_FIELDS = ("user_id", "api_key", "access_token")


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    timer = _parse_timer_settings(_section(raw, "timer"))
    pomodoro = _parse_pomodoro_defaults(_section(raw, "pomodoro"))
    store = _parse_store_settings(_section(raw, "store"))
    ui_server = _parse_ui_server_settings(_section(raw, "ui_server"), base_dir=base_dir)

    return AppConfig(
        timer=timer,
        pomodoro=pomodoro,
        store=store,
        ui_server=ui_server,
        source_file=source_file,
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    return TimerSettings(
        break_minutes=_as_positive_int(section.get("break_minutes", 5), "timer.break_minutes"),
        tick_interval_seconds=_as_positive_float(
            section.get("tick_interval_seconds", 1.0),
            "timer.tick_interval_seconds",
        ),
    )


def _parse_pomodoro_defaults(section: Mapping[str, Any]) -> PomodoroDefaults:
    return PomodoroDefaults(
        study_minutes=_as_positive_int(
            section.get("study_minutes", 25),
            "pomodoro.study_minutes",
        ),
        short_break_minutes=_as_positive_int(
            section.get("short_break_minutes", 5),
            "pomodoro.short_break_minutes",
        ),
        long_break_minutes=_as_positive_int(
            section.get("long_break_minutes", 15),
            "pomodoro.long_break_minutes",
        ),
        cycles=_as_positive_int(section.get("cycles", 4), "pomodoro.cycles"),
        long_break_interval=_as_positive_int(
            section.get("long_break_interval", 4),
            "pomodoro.long_break_interval",
        ),
    )


def _parse_store_settings(section: Mapping[str, Any]) -> StoreSettings:
    _forbid_secret_fields(section, "store", _SECRET_FIELDS)
    backend = _as_str(section.get("backend", STORE_BACKEND_REST), "store.backend").lower()
    if backend not in _ALLOWED_STORE_BACKENDS:
        allowed = ", ".join(sorted(_ALLOWED_STORE_BACKENDS))
        raise AppConfigurationError(f"store.backend must be one of: {allowed}.")

    base_url = _as_str(section.get("base_url", ""), "store.base_url")
    if backend == STORE_BACKEND_REST and not base_url:
        raise AppConfigurationError("store.base_url is required for the rest backend.")

    return StoreSettings(
        backend=backend,
        base_url=base_url,
        timeout_seconds=_as_positive_float(
            section.get("timeout_seconds", 10.0),
            "store.timeout_seconds",
        ),
    )


def _parse_ui_server_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> UIServerSettings:
    index_file = _as_str(section.get("index_file", ""), "ui_server.index_file")
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
        index_file=_resolve_path(base_dir, index_file),
    )


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_number(value: Any, field: str, kind: type) -> Any:
    label = "an integer" if kind is int else "a number"
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise AppConfigurationError(f"{field} must be {label}.")
    if isinstance(value, float) and kind is int:
        raise AppConfigurationError(f"{field} must be {label}.")
    try:
        return kind(value.strip() if isinstance(value, str) else value)
    except ValueError as error:
        raise AppConfigurationError(f"{field} must be {label}.") from error


def _as_int(value: Any, field: str) -> int:
    return _as_number(value, field, int)


def _as_positive_int(value: Any, field: str) -> int:
    return _require_positive(_as_number(value, field, int), field)


def _as_positive_float(value: Any, field: str) -> float:
    return _require_positive(_as_number(value, field, float), field)


def _require_positive(number, field: str):
    if number <= 0:
        raise AppConfigurationError(f"{field} must be greater than zero.")
    return number


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)


def _forbid_secret_fields(
    section: Mapping[str, Any],
    section_name: str,
    fields: tuple[str, ...],
) -> None:
    present = [field for field in fields if field in section]
    if present:
        joined = ", ".join(f"{section_name}.{field}" for field in present)
        raise AppConfigurationError(
            f"Secret values must not be stored in config.toml: {joined}. "
            "Move them to environment variables."
        )
