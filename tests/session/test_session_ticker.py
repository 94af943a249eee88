import threading
import unittest

from session import RepeatingTicker, repeating_ticker_factory


class RepeatingTickerTests(unittest.TestCase):
    def test_invokes_callback_until_stopped(self) -> None:
        calls: list[int] = []
        reached = threading.Event()

        def callback() -> None:
            calls.append(1)
            if len(calls) >= 3:
                reached.set()

        ticker = RepeatingTicker(callback, interval_seconds=0.01)
        ticker.start()
        self.assertTrue(reached.wait(2.0))
        ticker.stop()

        self.assertFalse(ticker.is_running)
        self.assertGreaterEqual(len(calls), 3)

    def test_stop_from_inside_callback_does_not_deadlock(self) -> None:
        done = threading.Event()
        holder: dict[str, RepeatingTicker] = {}

        def callback() -> None:
            holder["ticker"].stop()
            done.set()

        holder["ticker"] = RepeatingTicker(callback, interval_seconds=0.01)
        holder["ticker"].start()

        self.assertTrue(done.wait(2.0))
        self.assertFalse(holder["ticker"].is_running)

    def test_callback_errors_are_logged_and_ticking_continues(self) -> None:
        calls: list[int] = []
        reached = threading.Event()

        def callback() -> None:
            calls.append(1)
            if len(calls) >= 2:
                reached.set()
            raise RuntimeError("boom")

        with self.assertLogs("session", level="ERROR"):
            ticker = RepeatingTicker(callback, interval_seconds=0.01)
            ticker.start()
            self.assertTrue(reached.wait(2.0))
            ticker.stop()

    def test_rejects_non_positive_interval(self) -> None:
        with self.assertRaises(ValueError):
            RepeatingTicker(lambda: None, interval_seconds=0)

    def test_factory_builds_unstarted_tickers(self) -> None:
        factory = repeating_ticker_factory(0.5)
        ticker = factory(lambda: None)

        self.assertIsInstance(ticker, RepeatingTicker)
        self.assertFalse(ticker.is_running)


if __name__ == "__main__":
    unittest.main()
