from __future__ import annotations

import logging
from typing import Callable


LOGGER = logging.getLogger("UserIdle")


class IdleWatcher:
    """
    One idle-timeout rule.

    States are armed/disarmed. A one-shot watcher (``is_tick=False``) disarms
    after firing and is re-armed only by ``notify_activity``; a repeating
    watcher stays armed and fires again every ``time_count`` ms of idleness.
    """

    def __init__(
        self,
        handler: Callable[[], object],
        time_count: float,
        is_tick: bool = False,
        on_active: Callable[[], object] | None = None,
        *,
        created_at: int,
    ):
        self.handler = handler
        self.time_count = time_count
        self.is_tick = bool(is_tick)
        self.on_active = on_active
        self._creation_time = created_at
        self._last_fire_time = created_at
        self._armed = True

    @property
    def creation_time(self) -> int:
        return self._creation_time

    @property
    def last_fire_time(self) -> int:
        return self._last_fire_time

    @property
    def armed(self) -> bool:
        return self._armed

    def receive_idle_tick(self, idle_elapsed: int, now: int) -> bool:
        """
        Fire ``handler`` if ``time_count`` ms have passed since the last firing
        (or since creation/last activity). The threshold is inclusive.

        Exceptions raised by ``handler`` propagate to the caller; the state is
        left untouched in that case.
        """
        if not self._armed:
            return False
        if now - self._last_fire_time < self.time_count:
            return False

        self.handler()
        self._last_fire_time = now
        self._armed = self.is_tick
        LOGGER.debug(
            "[IdleWatcher] fired after %dms idle (time_count=%s, is_tick=%s)",
            idle_elapsed,
            self.time_count,
            self.is_tick,
        )
        return True

    def notify_activity(self, now: int) -> None:
        # Compares against creation time, not against the idle period that just
        # ended: once last_fire_time has moved (by a firing or by an earlier
        # reset), every later activity reaches on_active.
        has_fired_before = self._last_fire_time != self._creation_time

        self._last_fire_time = now
        self._armed = True

        if self.on_active is not None and has_fired_before:
            self.on_active()

    def __repr__(self) -> str:
        return (
            f"IdleWatcher(time_count={self.time_count!r}, is_tick={self.is_tick!r}, "
            f"armed={self._armed!r}, last_fire_time={self._last_fire_time!r})"
        )
