from __future__ import annotations

import os
import sys
import unittest
from pathlib import Path

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QCoreApplication
from PySide6.QtWidgets import QApplication

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT / "src") not in sys.path:
    sys.path.insert(0, str(ROOT / "src"))

from useridle.activity_source import ActivityKind, ManualActivitySource
from useridle.app import register_watcher_presets
from useridle.clock import ManualClock
from useridle.config_manager import WatcherPreset
from useridle.status_window import IdleStatusWindow, format_idle_time
from useridle.user_idle_monitor import UserIdleMonitor


def _get_or_create_app() -> QApplication | None:
    current = QCoreApplication.instance()
    if current is not None:
        if isinstance(current, QApplication):
            return current
        return None
    return QApplication(sys.argv)


class FormatIdleTimeTest(unittest.TestCase):
    def test_formats(self) -> None:
        self.assertEqual(format_idle_time(0), "0.0s")
        self.assertEqual(format_idle_time(4_250), "4.2s")
        self.assertEqual(format_idle_time(125_000), "2m 05s")
        self.assertEqual(format_idle_time(3_780_000), "1h 03m")
        self.assertEqual(format_idle_time(-5), "0.0s")


class RegisterWatcherPresetsTest(unittest.TestCase):
    def setUp(self) -> None:
        self._app = _get_or_create_app()
        if self._app is None:
            self.skipTest("QCoreApplication already exists; app tests require QApplication.")
        self.clock = ManualClock(0)
        self.source = ManualActivitySource()
        self.monitor = UserIdleMonitor(100, activity_source=self.source, clock=self.clock)
        self.events: list[str] = []

    def tearDown(self) -> None:
        self.monitor.shutdown()
        self.monitor.deleteLater()

    def _idle_until(self, until: int) -> None:
        while self.clock.now < until:
            self.clock.advance(100)
            self.monitor.poll()

    def test_presets_fire_and_report_return(self) -> None:
        handles = register_watcher_presets(
            self.monitor,
            [
                WatcherPreset(name="away", time_count_ms=300),
                WatcherPreset(name="nag", time_count_ms=200, is_tick=True, notify_on_active=False),
            ],
            on_event=self.events.append,
        )
        self.assertEqual(sorted(handles), ["away", "nag"])
        self.assertEqual(self.monitor.watchers, (handles["away"], handles["nag"]))

        self._idle_until(400)
        self.assertEqual(
            self.events,
            ["nag: idle for 0.2s", "away: idle for 0.3s", "nag: idle for 0.4s"],
        )

        self.source.emit(ActivityKind.KEY_DOWN)
        self.assertEqual(self.events[-1], "away: user is back")
        self.assertEqual(len(self.events), 4)

    def test_duplicate_names_keep_latest(self) -> None:
        handles = register_watcher_presets(
            self.monitor,
            [
                WatcherPreset(name="away", time_count_ms=300),
                WatcherPreset(name="away", time_count_ms=900),
            ],
        )
        self.assertEqual(len(self.monitor.watchers), 1)
        self.assertEqual(handles["away"].time_count, 900)

    def test_status_window_follows_monitor_signals(self) -> None:
        window = IdleStatusWindow()
        self.monitor.idle_time_updated.connect(window.update_idle_time)
        self.monitor.activity_detected.connect(window.show_activity)

        self._idle_until(1_500)
        self.assertEqual(window.idle_text, "Idle: 1.5s")

        self.source.emit(ActivityKind.POINTER_DOWN)
        self.assertEqual(window.idle_text, "Idle: 0.0s")
        self.assertEqual(window.activity_text, "Last activity: pointer_down")

        window.show_event("away: user is back")
        self.assertEqual(window.event_text, "away: user is back")
        window.deleteLater()


if __name__ == "__main__":
    unittest.main()
