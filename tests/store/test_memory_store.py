import datetime as dt
import unittest

from session import ActiveSessionRecord, CompletedSessionRecord, StoreError, StreakRecord
from store import InMemorySessionStore, InMemoryStreakTracker

START = dt.datetime(2026, 3, 2, 9, 0, tzinfo=dt.timezone.utc)


def _active(user_id: str = "user-1", **fields) -> ActiveSessionRecord:
    return ActiveSessionRecord(
        user_id=user_id,
        start_time=START,
        initial_time=600,
        current_time=600,
        is_running=True,
        last_updated=fields.pop("last_updated", START),
        **fields,
    )


class InMemorySessionStoreTests(unittest.TestCase):
    def test_create_assigns_id_and_lists_by_user(self) -> None:
        store = InMemorySessionStore()

        created = store.create_active(_active())
        store.create_active(_active(user_id="user-2"))

        self.assertIsNotNone(created.id)
        self.assertEqual([created], store.list_active("user-1"))

    def test_list_orders_newest_first(self) -> None:
        store = InMemorySessionStore()
        older = store.create_active(_active())
        newer = store.create_active(_active(last_updated=START + dt.timedelta(seconds=5)))

        self.assertEqual([newer.id, older.id], [r.id for r in store.list_active("user-1")])

    def test_update_parses_timestamps_and_applies_fields(self) -> None:
        store = InMemorySessionStore()
        created = store.create_active(_active())

        store.update_active(
            created.id,
            {"current_time": 42, "last_updated": "2026-03-02T09:05:00+00:00"},
        )

        updated = store.list_active("user-1")[0]
        self.assertEqual(42, updated.current_time)
        self.assertEqual(START + dt.timedelta(minutes=5), updated.last_updated)

    def test_update_rejects_unknown_fields_and_missing_rows(self) -> None:
        store = InMemorySessionStore()
        created = store.create_active(_active())

        with self.assertRaises(StoreError):
            store.update_active(created.id, {"user_id": "someone-else"})
        with self.assertRaises(StoreError) as context:
            store.update_active("missing", {"current_time": 1})
        self.assertEqual(404, context.exception.status_code)

    def test_delete_all_only_touches_one_user(self) -> None:
        store = InMemorySessionStore()
        store.create_active(_active())
        store.create_active(_active())
        other = store.create_active(_active(user_id="user-2"))

        store.delete_all_active("user-1")

        self.assertEqual([], store.list_active("user-1"))
        self.assertEqual([other], store.list_active("user-2"))

    def test_completed_sessions_filter_by_user(self) -> None:
        store = InMemorySessionStore()
        record = CompletedSessionRecord(
            user_id="user-1",
            start_time=START,
            end_time=START,
            total_seconds=0,
            break_seconds=0,
            interrupted=False,
        )

        created = store.create_completed(record)

        self.assertIsNotNone(created.id)
        self.assertEqual([created], store.completed_sessions("user-1"))
        self.assertEqual([], store.completed_sessions("user-2"))


class InMemoryStreakTrackerTests(unittest.TestCase):
    def test_create_then_update(self) -> None:
        tracker = InMemoryStreakTracker()
        record = StreakRecord("user-1", 1, 1, dt.date(2026, 3, 1))

        tracker.create(record)
        tracker.update(StreakRecord("user-1", 2, 2, dt.date(2026, 3, 2)))

        self.assertEqual(2, tracker.get("user-1").current_streak)

    def test_duplicate_create_and_missing_update_raise(self) -> None:
        tracker = InMemoryStreakTracker()
        record = StreakRecord("user-1", 1, 1, dt.date(2026, 3, 1))
        tracker.create(record)

        with self.assertRaises(StoreError):
            tracker.create(record)
        with self.assertRaises(StoreError):
            tracker.update(StreakRecord("user-2", 1, 1, dt.date(2026, 3, 1)))


if __name__ == "__main__":
    unittest.main()
