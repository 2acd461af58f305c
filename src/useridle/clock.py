from __future__ import annotations

from typing import Callable

from PySide6.QtCore import QDateTime


Clock = Callable[[], int]


def system_clock() -> int:
    """Wall-clock milliseconds since the epoch."""
    return int(QDateTime.currentMSecsSinceEpoch())


class ManualClock:
    """
    Clock that only moves when told to.

    Useful wherever deterministic timestamps are needed, e.g. driving
    ``UserIdleMonitor.poll()`` by hand.
    """

    def __init__(self, start: int = 0):
        self._now = int(start)

    def __call__(self) -> int:
        return self._now

    @property
    def now(self) -> int:
        return self._now

    def advance(self, ms: int) -> int:
        self._now += int(ms)
        return self._now

    def set(self, ms: int) -> None:
        self._now = int(ms)
