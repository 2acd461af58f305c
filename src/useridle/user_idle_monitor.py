from __future__ import annotations

import logging
import numbers
from typing import Callable, Iterator

from PySide6.QtCore import QObject, QTimer, Signal, Slot

try:
    from useridle.activity_source import ActivityKind, ActivitySource, QtActivitySource
    from useridle.clock import Clock, system_clock
    from useridle.idle_watcher import IdleWatcher
except ModuleNotFoundError:
    from .activity_source import ActivityKind, ActivitySource, QtActivitySource
    from .clock import Clock, system_clock
    from .idle_watcher import IdleWatcher


LOGGER = logging.getLogger("UserIdle")


class UserIdleMonitor(QObject):
    """
    Tracks how long the user has been idle and drives registered watchers.

    Activity from the source resets the idle clock and notifies every watcher;
    a repeating timer recomputes the idle time and hands it to every watcher,
    each of which decides on its own whether to fire. Both fan-outs run in
    registration order over a snapshot of the registry. A watcher cleared by
    an earlier callback in the same pass is skipped; one added during a pass
    joins from the next pass.

    Signals:
    - idle_time_updated(int): idle time in ms, after each poll
    - activity_detected(object): the ``ActivityKind`` that reset the idle time
    """

    idle_time_updated = Signal(object)
    activity_detected = Signal(object)

    DEFAULT_POLL_INTERVAL_MS: int = 500

    def __init__(
        self,
        poll_interval: int = DEFAULT_POLL_INTERVAL_MS,
        *,
        activity_source: ActivitySource | None = None,
        clock: Clock | None = None,
        parent: QObject | None = None,
    ):
        super().__init__(parent)
        self._poll_interval = max(1, int(poll_interval))
        self._clock: Clock = clock or system_clock
        self._watchers: list[IdleWatcher] = []
        self._idle_time_count = 0
        self._idle_start_time = self._clock()
        self._removals = 0

        # A source built here is detached again by shutdown().
        self._owned_source: QtActivitySource | None = None
        if activity_source is None:
            activity_source = self._owned_source = QtActivitySource()
        self._activity_source: ActivitySource = activity_source
        self._activity_source.subscribe(self.reset_idle_time)

        self._timer = QTimer(self)
        self._timer.setInterval(self._poll_interval)
        self._timer.timeout.connect(self.poll)
        self._timer.start()
        LOGGER.info("[UserIdle] Monitor started (poll_interval=%dms)", self._poll_interval)

    @property
    def poll_interval(self) -> int:
        return self._poll_interval

    @property
    def idle_start_time(self) -> int:
        return self._idle_start_time

    @property
    def idle_time_count(self) -> int:
        """Idle time in ms as of the last poll (0 right after activity)."""
        return self._idle_time_count

    @property
    def watchers(self) -> tuple[IdleWatcher, ...]:
        return tuple(self._watchers)

    @property
    def activity_source(self) -> ActivitySource:
        return self._activity_source

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    @Slot()
    def poll(self) -> None:
        now = self._clock()
        self._idle_time_count = now - self._idle_start_time
        for watcher in self._dispatch_order():
            watcher.receive_idle_tick(self._idle_time_count, now)
        self.idle_time_updated.emit(self._idle_time_count)

    def reset_idle_time(self, kind: ActivityKind | None = None) -> None:
        now = self._clock()
        self._idle_time_count = 0
        self._idle_start_time = now
        for watcher in self._dispatch_order():
            watcher.notify_activity(now)
        self.activity_detected.emit(kind)

    def set_idle(
        self,
        handler: Callable[[], object],
        time_count: float,
        *,
        is_tick: bool = False,
        on_active: Callable[[], object] | None = None,
    ) -> IdleWatcher | None:
        """
        Register a watcher and return it as the handle for ``clear_idle``.

        Returns None, registering nothing, when ``handler`` is not callable,
        ``time_count`` is not a number or ``on_active`` is given but not
        callable.
        """
        if not callable(handler) or not _is_number(time_count):
            LOGGER.warning(
                "[UserIdle] set_idle rejected: handler=%r time_count=%r",
                handler,
                time_count,
            )
            return None
        if on_active is not None and not callable(on_active):
            LOGGER.warning("[UserIdle] set_idle rejected: on_active=%r is not callable", on_active)
            return None

        watcher = IdleWatcher(
            handler,
            time_count,
            is_tick=is_tick,
            on_active=on_active,
            created_at=self._clock(),
        )
        self._watchers.append(watcher)
        LOGGER.debug(
            "[UserIdle] Watcher registered (time_count=%s, is_tick=%s) total=%d",
            time_count,
            bool(is_tick),
            len(self._watchers),
        )
        return watcher

    def clear_idle(self, handle: object) -> bool:
        for index, watcher in enumerate(self._watchers):
            if watcher is handle:
                del self._watchers[index]
                self._removals += 1
                LOGGER.debug("[UserIdle] Watcher cleared, total=%d", len(self._watchers))
                return True
        return False

    def shutdown(self) -> None:
        """Stop polling and stop listening for activity."""
        self._timer.stop()
        self._activity_source.unsubscribe(self.reset_idle_time)
        if self._owned_source is not None:
            self._owned_source.detach()
        LOGGER.info("[UserIdle] Monitor stopped.")

    def _dispatch_order(self) -> Iterator[IdleWatcher]:
        """
        Yield the watchers registered when the pass started, skipping any that
        an earlier callback in the same pass cleared.
        """
        removals = self._removals
        live_ids: set[int] | None = None
        for watcher in tuple(self._watchers):
            if self._removals != removals:
                removals = self._removals
                live_ids = {id(item) for item in self._watchers}
            if live_ids is not None and id(watcher) not in live_ids:
                continue
            yield watcher


def _is_number(value: object) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)
