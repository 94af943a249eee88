import datetime as dt
import unittest

from session import ActiveSessionRecord, CompletedSessionRecord, StreakRecord
from session.contracts import format_timestamp, parse_timestamp

START = dt.datetime(2026, 3, 2, 9, 0, tzinfo=dt.timezone.utc)


class TimestampTests(unittest.TestCase):
    def test_format_uses_utc_offset(self) -> None:
        local = dt.datetime(2026, 3, 2, 10, 0, tzinfo=dt.timezone(dt.timedelta(hours=1)))
        self.assertEqual("2026-03-02T09:00:00+00:00", format_timestamp(local))

    def test_parse_treats_naive_values_as_utc(self) -> None:
        self.assertEqual(START, parse_timestamp("2026-03-02T09:00:00"))

    def test_parse_rejects_empty_values(self) -> None:
        with self.assertRaises(ValueError):
            parse_timestamp("")
        with self.assertRaises(ValueError):
            parse_timestamp(None)


class RecordRowTests(unittest.TestCase):
    def test_active_row_uses_store_column_names(self) -> None:
        record = ActiveSessionRecord(
            user_id="user-1",
            start_time=START,
            initial_time=600,
            current_time=590,
            is_running=True,
            last_updated=START,
            is_break=True,
            stored_study_time=1200,
            break_time=30,
        )

        row = record.to_row()

        self.assertNotIn("id", row)
        self.assertEqual("2026-03-02T09:00:00+00:00", row["start_time"])
        self.assertEqual(590, row["current_time"])
        self.assertEqual(1200, row["stored_study_time"])
        self.assertEqual(30, row["break_time"])

    def test_active_row_carries_run_start(self) -> None:
        run_start = START - dt.timedelta(minutes=20)
        record = ActiveSessionRecord(
            user_id="user-1",
            start_time=START,
            initial_time=600,
            current_time=600,
            is_running=True,
            last_updated=START,
            break_time=300,
            run_start_time=run_start,
        )

        row = record.to_row()

        self.assertEqual("2026-03-02T08:40:00+00:00", row["run_start_time"])
        self.assertEqual(run_start, ActiveSessionRecord.from_row(row).run_started_at)

    def test_active_row_without_run_start_falls_back_to_start_time(self) -> None:
        record = ActiveSessionRecord.from_row(
            {"user_id": "user-1", "start_time": "2026-03-02T09:00:00+00:00"}
        )

        self.assertIsNone(record.run_start_time)
        self.assertEqual(START, record.run_started_at)
        self.assertEqual("2026-03-02T09:00:00+00:00", record.to_row()["run_start_time"])

    def test_active_from_row_fills_defaults(self) -> None:
        record = ActiveSessionRecord.from_row(
            {
                "id": 42,
                "user_id": "user-1",
                "start_time": "2026-03-02T09:00:00+00:00",
                "current_time": -3,
                "is_running": True,
                "topic_id": "",
            }
        )

        self.assertEqual("42", record.id)
        self.assertEqual(0, record.current_time)
        self.assertEqual(START, record.last_updated)
        self.assertIsNone(record.topic_id)
        self.assertIsNone(record.stored_study_time)
        self.assertFalse(record.is_pomodoro)

    def test_completed_row_stores_break_seconds_as_break_time(self) -> None:
        record = CompletedSessionRecord(
            user_id="user-1",
            start_time=START,
            end_time=START + dt.timedelta(minutes=30),
            total_seconds=1500,
            break_seconds=300,
            interrupted=True,
        )

        row = record.to_row()

        self.assertEqual(300, row["break_time"])
        self.assertTrue(row["interrupted"])
        self.assertEqual(300, CompletedSessionRecord.from_row(row).break_seconds)

    def test_streak_from_row_accepts_timestamps(self) -> None:
        record = StreakRecord.from_row(
            {
                "user_id": "user-1",
                "current_streak": 3,
                "longest_streak": 8,
                "last_study_date": "2026-03-01T23:10:00+00:00",
            }
        )

        self.assertEqual(dt.date(2026, 3, 1), record.last_study_date)
        self.assertEqual("2026-03-01", record.to_row()["last_study_date"])


if __name__ == "__main__":
    unittest.main()
