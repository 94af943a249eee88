import datetime as dt
import unittest
from unittest.mock import Mock

import requests

from session import ActiveSessionRecord, CompletedSessionRecord, StoreError, StreakRecord
from store import RestClient, RestSessionStore, RestStreakTracker

START = dt.datetime(2026, 3, 2, 9, 0, tzinfo=dt.timezone.utc)
BASE_URL = "https://db.example.test"

_ACTIVE_ROW = {
    "id": "row-1",
    "user_id": "user-1",
    "start_time": "2026-03-02T09:00:00+00:00",
    "initial_time": 600,
    "current_time": 580,
    "is_running": True,
    "last_updated": "2026-03-02T09:00:20+00:00",
    "is_break": False,
    "is_pomodoro": False,
    "pomodoro_cycle": 0,
    "stored_study_time": None,
    "topic_id": None,
    "break_time": 0,
}


def _response(status_code: int = 200, payload=None, *, text: str = "") -> Mock:
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = "Error" if status_code >= 400 else "OK"
    response.text = text
    if payload is None and not text:
        response.content = b""
        response.json.side_effect = ValueError("no content")
    elif payload is None:
        response.content = text.encode("utf-8")
        response.json.side_effect = ValueError("not json")
    else:
        response.content = b"json"
        response.json.return_value = payload
    return response


class RestClientTests(unittest.TestCase):
    def setUp(self) -> None:
        self.http = Mock(spec=requests.Session)
        self.http.headers = {}
        self.client = RestClient(
            BASE_URL + "/",
            "anon-key",
            access_token="user-token",
            timeout_seconds=3.0,
            session=self.http,
        )

    def test_sets_auth_headers(self) -> None:
        self.assertEqual("anon-key", self.http.headers["apikey"])
        self.assertEqual("Bearer user-token", self.http.headers["Authorization"])

    def test_select_builds_eq_filters(self) -> None:
        self.http.request.return_value = _response(payload=[_ACTIVE_ROW])

        rows = self.client.select(
            "active_sessions",
            filters={"user_id": "user-1"},
            order="last_updated.desc",
        )

        self.assertEqual([_ACTIVE_ROW], rows)
        self.http.request.assert_called_once_with(
            "GET",
            f"{BASE_URL}/rest/v1/active_sessions",
            params={"user_id": "eq.user-1", "select": "*", "order": "last_updated.desc"},
            json=None,
            headers=None,
            timeout=3.0,
        )

    def test_http_error_raises_store_error_with_status(self) -> None:
        self.http.request.return_value = _response(
            409,
            {"message": "duplicate key value"},
        )

        with self.assertRaises(StoreError) as context:
            self.client.insert("user_streaks", {"user_id": "user-1"})

        self.assertEqual(409, context.exception.status_code)
        self.assertIn("duplicate key value", str(context.exception))

    def test_transport_error_raises_store_error(self) -> None:
        self.http.request.side_effect = requests.ConnectionError("refused")

        with self.assertRaises(StoreError) as context:
            self.client.delete("active_sessions", filters={"id": "row-1"})

        self.assertIsNone(context.exception.status_code)

    def test_invalid_json_raises_store_error(self) -> None:
        self.http.request.return_value = _response(text="<html>")

        with self.assertRaises(StoreError):
            self.client.select("active_sessions", filters={"user_id": "user-1"})

    def test_rejects_missing_credentials(self) -> None:
        with self.assertRaises(ValueError):
            RestClient(BASE_URL, " ", session=self.http)


class RestSessionStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.http = Mock(spec=requests.Session)
        self.http.headers = {}
        client = RestClient(BASE_URL, "anon-key", session=self.http)
        self.store = RestSessionStore(client)
        self.streaks = RestStreakTracker(client)

    def test_list_active_parses_rows(self) -> None:
        self.http.request.return_value = _response(payload=[_ACTIVE_ROW])

        records = self.store.list_active("user-1")

        self.assertEqual(1, len(records))
        self.assertEqual("row-1", records[0].id)
        self.assertEqual(580, records[0].current_time)
        self.assertEqual(START, records[0].start_time)

    def test_create_active_requests_representation(self) -> None:
        self.http.request.return_value = _response(201, [_ACTIVE_ROW])
        record = ActiveSessionRecord(
            user_id="user-1",
            start_time=START,
            initial_time=600,
            current_time=600,
            is_running=True,
            last_updated=START,
        )

        created = self.store.create_active(record)

        self.assertEqual("row-1", created.id)
        _, kwargs = self.http.request.call_args
        self.assertEqual({"Prefer": "return=representation"}, kwargs["headers"])
        self.assertEqual(600, kwargs["json"]["initial_time"])

    def test_update_and_delete_filter_by_id(self) -> None:
        self.http.request.return_value = _response(204)

        self.store.update_active("row-1", {"is_running": False})
        self.store.delete_active("row-1")
        self.store.delete_all_active("user-1")

        calls = self.http.request.call_args_list
        self.assertEqual("PATCH", calls[0].args[0])
        self.assertEqual({"id": "eq.row-1"}, calls[0].kwargs["params"])
        self.assertEqual({"is_running": False}, calls[0].kwargs["json"])
        self.assertEqual("DELETE", calls[1].args[0])
        self.assertEqual({"user_id": "eq.user-1"}, calls[2].kwargs["params"])

    def test_create_completed_posts_to_study_sessions(self) -> None:
        record = CompletedSessionRecord(
            user_id="user-1",
            start_time=START,
            end_time=START + dt.timedelta(minutes=25),
            total_seconds=1500,
            break_seconds=0,
            interrupted=False,
        )
        self.http.request.return_value = _response(201, [{**record.to_row(), "id": "done-1"}])

        created = self.store.create_completed(record)

        self.assertEqual("done-1", created.id)
        self.assertTrue(self.http.request.call_args.args[1].endswith("/rest/v1/study_sessions"))

    def test_malformed_row_raises_store_error(self) -> None:
        self.http.request.return_value = _response(payload=[{"id": "row-1"}])

        with self.assertRaises(StoreError):
            self.store.list_active("user-1")

    def test_streak_get_returns_none_without_rows(self) -> None:
        self.http.request.return_value = _response(payload=[])
        self.assertIsNone(self.streaks.get("user-1"))

    def test_streak_update_patches_by_user(self) -> None:
        self.http.request.return_value = _response(204)
        record = StreakRecord("user-1", 2, 4, dt.date(2026, 3, 2))

        self.assertEqual(record, self.streaks.update(record))

        kwargs = self.http.request.call_args.kwargs
        self.assertEqual({"user_id": "eq.user-1"}, kwargs["params"])
        self.assertNotIn("user_id", kwargs["json"])
        self.assertEqual("2026-03-02", kwargs["json"]["last_study_date"])


if __name__ == "__main__":
    unittest.main()
