"""HTTP session store and streak tracker for a PostgREST-style backend.

Tables follow the study tracker schema:

- `active_sessions`: one row per in-progress session (at most one per user)
- `study_sessions`: completed session summaries
- `user_streaks`: one row per user
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import requests

from session.contracts import (
    ActiveSessionRecord,
    CompletedSessionRecord,
    StreakRecord,
)
from session.errors import StoreError

ACTIVE_SESSIONS_TABLE = "active_sessions"
STUDY_SESSIONS_TABLE = "study_sessions"
USER_STREAKS_TABLE = "user_streaks"

DEFAULT_TIMEOUT_SECONDS = 10.0


class RestClient:
    """Thin `requests` wrapper speaking PostgREST filter conventions."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        access_token: Optional[str] = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if not base_url.strip():
            raise ValueError("base_url cannot be empty")
        if not api_key.strip():
            raise ValueError("api_key cannot be empty")

        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._logger = logger or logging.getLogger("session_store")
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "apikey": api_key,
                "Authorization": f"Bearer {access_token or api_key}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            }
        )

    def select(
        self,
        table: str,
        *,
        filters: Mapping[str, str],
        order: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        params = {**_eq_filters(filters), "select": "*"}
        if order:
            params["order"] = order
        data = self._request("GET", table, params=params)
        if not isinstance(data, list):
            raise StoreError(f"Unexpected response for {table}: expected a list")
        return data

    def insert(self, table: str, row: Mapping[str, Any]) -> dict[str, Any]:
        data = self._request(
            "POST",
            table,
            json=dict(row),
            headers={"Prefer": "return=representation"},
        )
        if isinstance(data, list) and data:
            return data[0]
        if isinstance(data, dict):
            return data
        raise StoreError(f"Insert into {table} returned no row")

    def update(
        self,
        table: str,
        *,
        filters: Mapping[str, str],
        fields: Mapping[str, Any],
    ) -> None:
        self._request("PATCH", table, params=_eq_filters(filters), json=dict(fields))

    def delete(self, table: str, *, filters: Mapping[str, str]) -> None:
        self._request("DELETE", table, params=_eq_filters(filters))

    def _request(
        self,
        method: str,
        table: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        json: Any = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> Any:
        url = f"{self._base_url}/rest/v1/{table}"
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as error:
            raise StoreError(f"{method} {table} failed: {error}") from error

        if not response.ok:
            message = _error_message(response)
            self._logger.debug(
                "HTTP error %s on %s %s: %s",
                response.status_code,
                method,
                table,
                message,
            )
            raise StoreError(
                f"{method} {table} failed with HTTP {response.status_code}: {message}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as error:
            raise StoreError(f"{method} {table} returned invalid JSON") from error


class RestSessionStore:
    def __init__(self, client: RestClient):
        self._client = client

    def list_active(self, user_id: str) -> list[ActiveSessionRecord]:
        rows = self._client.select(
            ACTIVE_SESSIONS_TABLE,
            filters={"user_id": user_id},
            order="last_updated.desc",
        )
        return [_parse_row(ActiveSessionRecord.from_row, row) for row in rows]

    def create_active(self, record: ActiveSessionRecord) -> ActiveSessionRecord:
        row = self._client.insert(ACTIVE_SESSIONS_TABLE, record.to_row())
        return _parse_row(ActiveSessionRecord.from_row, row)

    def update_active(self, record_id: str, fields: Mapping[str, Any]) -> None:
        self._client.update(ACTIVE_SESSIONS_TABLE, filters={"id": record_id}, fields=fields)

    def delete_active(self, record_id: str) -> None:
        self._client.delete(ACTIVE_SESSIONS_TABLE, filters={"id": record_id})

    def delete_all_active(self, user_id: str) -> None:
        self._client.delete(ACTIVE_SESSIONS_TABLE, filters={"user_id": user_id})

    def create_completed(self, record: CompletedSessionRecord) -> CompletedSessionRecord:
        row = self._client.insert(STUDY_SESSIONS_TABLE, record.to_row())
        return _parse_row(CompletedSessionRecord.from_row, row)


class RestStreakTracker:
    def __init__(self, client: RestClient):
        self._client = client

    def get(self, user_id: str) -> Optional[StreakRecord]:
        rows = self._client.select(USER_STREAKS_TABLE, filters={"user_id": user_id})
        if not rows:
            return None
        return _parse_row(StreakRecord.from_row, rows[0])

    def create(self, record: StreakRecord) -> StreakRecord:
        row = self._client.insert(USER_STREAKS_TABLE, record.to_row())
        return _parse_row(StreakRecord.from_row, row)

    def update(self, record: StreakRecord) -> StreakRecord:
        fields = record.to_row()
        del fields["user_id"]
        self._client.update(
            USER_STREAKS_TABLE,
            filters={"user_id": record.user_id},
            fields=fields,
        )
        return record


def _eq_filters(filters: Mapping[str, str]) -> dict[str, str]:
    return {column: f"eq.{value}" for column, value in filters.items()}


def _parse_row(parser, row: Mapping[str, Any]):
    try:
        return parser(row)
    except (KeyError, TypeError, ValueError) as error:
        raise StoreError(f"Malformed row from store: {error}") from error


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text.strip() or response.reason or "unknown error"
    if isinstance(payload, dict):
        for key in ("message", "detail", "error"):
            if payload.get(key):
                return str(payload[key])
    return str(payload)
