from __future__ import annotations

import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from useridle.idle_watcher import IdleWatcher


class _Recorder:
    def __init__(self) -> None:
        self.calls = 0

    def __call__(self) -> None:
        self.calls += 1


class IdleWatcherTest(unittest.TestCase):
    def test_new_watcher_is_armed(self) -> None:
        watcher = IdleWatcher(_Recorder(), 300, created_at=1_000)
        self.assertTrue(watcher.armed)
        self.assertEqual(watcher.creation_time, 1_000)
        self.assertEqual(watcher.last_fire_time, 1_000)

    def test_does_not_fire_below_threshold(self) -> None:
        handler = _Recorder()
        watcher = IdleWatcher(handler, 300, created_at=0)
        self.assertFalse(watcher.receive_idle_tick(299, 299))
        self.assertEqual(handler.calls, 0)
        self.assertTrue(watcher.armed)

    def test_threshold_is_inclusive(self) -> None:
        handler = _Recorder()
        watcher = IdleWatcher(handler, 300, created_at=0)
        self.assertTrue(watcher.receive_idle_tick(300, 300))
        self.assertEqual(handler.calls, 1)
        self.assertEqual(watcher.last_fire_time, 300)

    def test_one_shot_disarms_after_firing(self) -> None:
        handler = _Recorder()
        watcher = IdleWatcher(handler, 100, is_tick=False, created_at=0)
        watcher.receive_idle_tick(100, 100)
        self.assertFalse(watcher.armed)
        for now in (200, 300, 10_000):
            self.assertFalse(watcher.receive_idle_tick(now, now))
        self.assertEqual(handler.calls, 1)

    def test_repeating_stays_armed_and_measures_from_last_fire(self) -> None:
        handler = _Recorder()
        watcher = IdleWatcher(handler, 100, is_tick=True, created_at=0)
        watcher.receive_idle_tick(150, 150)
        self.assertTrue(watcher.armed)
        self.assertFalse(watcher.receive_idle_tick(200, 200))
        self.assertTrue(watcher.receive_idle_tick(250, 250))
        self.assertEqual(handler.calls, 2)

    def test_activity_rearms_and_restarts_countdown(self) -> None:
        handler = _Recorder()
        watcher = IdleWatcher(handler, 100, created_at=0)
        watcher.receive_idle_tick(100, 100)
        watcher.notify_activity(500)
        self.assertTrue(watcher.armed)
        self.assertEqual(watcher.last_fire_time, 500)
        self.assertFalse(watcher.receive_idle_tick(50, 550))
        self.assertTrue(watcher.receive_idle_tick(100, 600))
        self.assertEqual(handler.calls, 2)

    def test_on_active_only_after_first_firing(self) -> None:
        on_active = _Recorder()
        watcher = IdleWatcher(_Recorder(), 100, on_active=on_active, created_at=0)
        watcher.notify_activity(0)
        self.assertEqual(on_active.calls, 0)

        watcher.receive_idle_tick(100, 100)
        watcher.notify_activity(150)
        self.assertEqual(on_active.calls, 1)

    def test_on_active_keeps_firing_once_last_fire_time_moved(self) -> None:
        on_active = _Recorder()
        watcher = IdleWatcher(_Recorder(), 1_000, on_active=on_active, created_at=0)
        watcher.notify_activity(10)
        self.assertEqual(on_active.calls, 0)
        # Threshold never reached, but last_fire_time no longer equals creation time.
        watcher.notify_activity(20)
        watcher.notify_activity(30)
        self.assertEqual(on_active.calls, 2)

    def test_handler_exception_propagates_without_state_change(self) -> None:
        def _boom() -> None:
            raise ValueError("boom")

        watcher = IdleWatcher(_boom, 100, created_at=0)
        with self.assertRaises(ValueError):
            watcher.receive_idle_tick(100, 100)
        self.assertTrue(watcher.armed)
        self.assertEqual(watcher.last_fire_time, 0)


if __name__ == "__main__":
    unittest.main()
