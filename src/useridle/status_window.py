from __future__ import annotations

from PySide6.QtCore import Qt, Slot
from PySide6.QtWidgets import QLabel, QVBoxLayout, QWidget


def format_idle_time(idle_ms: int) -> str:
    """Format idle milliseconds as e.g. ``4.2s``, ``2m 05s`` or ``1h 03m``."""
    seconds = max(0, int(idle_ms)) / 1000.0
    if seconds < 60:
        return f"{seconds:.1f}s"
    whole = int(seconds)
    if whole < 3600:
        return f"{whole // 60}m {whole % 60:02d}s"
    return f"{whole // 3600}h {(whole % 3600) // 60:02d}m"


class IdleStatusWindow(QWidget):
    """Small window showing the live idle time and the last activity seen."""

    def __init__(self, parent: QWidget | None = None):
        super().__init__(parent)
        self.setWindowTitle("User Idle")
        self._idle_label = QLabel(self)
        self._idle_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._activity_label = QLabel(self)
        self._activity_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._event_label = QLabel(self)
        self._event_label.setAlignment(Qt.AlignmentFlag.AlignCenter)

        layout = QVBoxLayout(self)
        layout.addWidget(self._idle_label)
        layout.addWidget(self._activity_label)
        layout.addWidget(self._event_label)

        self.update_idle_time(0)
        self._activity_label.setText("Last activity: -")
        self._event_label.setText("")
        self.resize(260, 110)

    @property
    def idle_text(self) -> str:
        return self._idle_label.text()

    @property
    def activity_text(self) -> str:
        return self._activity_label.text()

    @property
    def event_text(self) -> str:
        return self._event_label.text()

    @Slot(object)
    def update_idle_time(self, idle_ms: int) -> None:
        self._idle_label.setText(f"Idle: {format_idle_time(idle_ms)}")

    @Slot(object)
    def show_activity(self, kind: object) -> None:
        name = getattr(kind, "value", None) or "manual"
        self._activity_label.setText(f"Last activity: {name}")
        self.update_idle_time(0)

    def show_event(self, text: str) -> None:
        self._event_label.setText(text)
