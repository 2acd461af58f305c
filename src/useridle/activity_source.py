from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Iterable

from PySide6.QtCore import QCoreApplication, QEvent, QObject
from PySide6.QtGui import QGuiApplication


LOGGER = logging.getLogger("UserIdle")


class ActivityKind(Enum):
    """Input signals that count as user activity."""

    KEY_DOWN = "key_down"
    KEY_PRESS = "key_press"
    POINTER_MOVE = "pointer_move"
    POINTER_DOWN = "pointer_down"
    WHEEL = "wheel"
    RESIZE = "resize"
    TOUCH_START = "touch_start"
    TOUCH_MOVE = "touch_move"

    @classmethod
    def parse(cls, value: object) -> ActivityKind | None:
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower().replace("-", "_")
        for kind in cls:
            if kind.value == text:
                return kind
        return None


ALL_ACTIVITY_KINDS: tuple[ActivityKind, ...] = tuple(ActivityKind)

ActivityCallback = Callable[[ActivityKind], object]


class ActivitySource:
    """
    A source of discrete activity events.

    Subscribers are called synchronously, in subscription order, with the
    ``ActivityKind`` that was observed.
    """

    def __init__(self):
        self._listeners: list[ActivityCallback] = []

    def subscribe(self, callback: ActivityCallback) -> None:
        self._listeners.append(callback)

    def unsubscribe(self, callback: ActivityCallback) -> bool:
        for index, listener in enumerate(self._listeners):
            if listener == callback:
                del self._listeners[index]
                return True
        return False

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def emit(self, kind: ActivityKind) -> None:
        for listener in list(self._listeners):
            listener(kind)


class ManualActivitySource(ActivitySource):
    """Synthetic activity source for tests and hosts without a Qt event loop."""

    def __init__(self):
        super().__init__()
        self.emitted: list[ActivityKind] = []

    def emit(self, kind: ActivityKind = ActivityKind.KEY_DOWN) -> None:
        self.emitted.append(kind)
        super().emit(kind)


# Qt event types observed for each activity kind.
QT_EVENT_TYPES: dict[ActivityKind, tuple[QEvent.Type, ...]] = {
    ActivityKind.KEY_DOWN: (QEvent.Type.KeyPress,),
    ActivityKind.KEY_PRESS: (QEvent.Type.ShortcutOverride,),
    ActivityKind.POINTER_MOVE: (QEvent.Type.MouseMove,),
    ActivityKind.POINTER_DOWN: (QEvent.Type.MouseButtonPress,),
    ActivityKind.WHEEL: (QEvent.Type.Wheel,),
    ActivityKind.RESIZE: (QEvent.Type.Resize,),
    ActivityKind.TOUCH_START: (QEvent.Type.TouchBegin,),
    ActivityKind.TOUCH_MOVE: (QEvent.Type.TouchUpdate,),
}

# ShortcutOverride starts at the focus object and climbs the parent chain
# while ignored; only the delivery to the focus object counts.
_FOCUS_RECEIVER_TYPES = frozenset({QEvent.Type.ShortcutOverride})


class _ActivityEventFilter(QObject):
    def __init__(self, owner: QtActivitySource, parent: QObject | None = None):
        super().__init__(parent)
        self._owner = owner

    def eventFilter(self, watched: QObject, event: QEvent) -> bool:
        self._owner._on_event(watched, event)
        return False


class QtActivitySource(ActivitySource):
    """
    Application-wide input listener.

    Installs an event filter on the ``QCoreApplication`` instance, which sees
    every event before its receiver does. With ``window_events_only`` only
    events addressed to window objects count, so a single mouse move that Qt
    forwards from the window to nested widgets is reported once.
    """

    def __init__(
        self,
        kinds: Iterable[ActivityKind] = ALL_ACTIVITY_KINDS,
        *,
        app: QCoreApplication | None = None,
        window_events_only: bool = True,
    ):
        super().__init__()
        self._app = app or QCoreApplication.instance()
        if self._app is None:
            raise RuntimeError("QtActivitySource requires a QCoreApplication instance.")

        self._kinds = tuple(dict.fromkeys(kinds))
        self._window_events_only = bool(window_events_only)
        self._event_map: dict[QEvent.Type, ActivityKind] = {}
        for kind in self._kinds:
            for event_type in QT_EVENT_TYPES[kind]:
                self._event_map[event_type] = kind

        self._filter = _ActivityEventFilter(self)
        self._app.installEventFilter(self._filter)
        self._attached = True
        LOGGER.info(
            "[Activity] Listening for %s (window_events_only=%s)",
            ", ".join(kind.value for kind in self._kinds),
            self._window_events_only,
        )

    @property
    def kinds(self) -> tuple[ActivityKind, ...]:
        return self._kinds

    @property
    def attached(self) -> bool:
        return self._attached

    def detach(self) -> None:
        if not self._attached:
            return
        self._app.removeEventFilter(self._filter)
        self._attached = False
        LOGGER.info("[Activity] Event filter removed.")

    def _on_event(self, watched: QObject, event: QEvent) -> None:
        event_type = event.type()
        kind = self._event_map.get(event_type)
        if kind is None:
            return
        if self._window_events_only:
            if event_type in _FOCUS_RECEIVER_TYPES:
                if watched is not QGuiApplication.focusObject():
                    return
            elif not watched.isWindowType():
                return
        self.emit(kind)
