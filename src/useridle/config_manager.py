from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from PySide6.QtCore import QIODevice, QSaveFile

try:
    from useridle.activity_source import ALL_ACTIVITY_KINDS, ActivityKind
except ModuleNotFoundError:
    from .activity_source import ALL_ACTIVITY_KINDS, ActivityKind


MIN_POLL_INTERVAL_MS = 10
MAX_POLL_INTERVAL_MS = 60_000


@dataclass(slots=True)
class MonitorConfig:
    poll_interval_ms: int = 500
    activity_kinds: tuple[ActivityKind, ...] = ALL_ACTIVITY_KINDS
    window_events_only: bool = True


@dataclass(slots=True)
class LoggingConfig:
    debug_mode: bool = False


@dataclass(slots=True)
class WatcherPreset:
    name: str
    time_count_ms: int
    is_tick: bool = False
    notify_on_active: bool = True


def _default_watchers() -> tuple[WatcherPreset, ...]:
    return (WatcherPreset(name="away", time_count_ms=60_000),)


@dataclass(slots=True)
class AppConfig:
    version: str = "1.0.0"
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    watchers: tuple[WatcherPreset, ...] = field(default_factory=_default_watchers)


class ConfigManager:
    """Load monitor configuration from JSON with safe defaults."""

    def __init__(self, config_path: Path):
        self._config_path = config_path

    @property
    def config_path(self) -> Path:
        return self._config_path

    def load(self) -> AppConfig:
        if not self._config_path.exists():
            return AppConfig()
        try:
            raw = json.loads(self._config_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            return AppConfig()
        if not isinstance(raw, dict):
            return AppConfig()

        return AppConfig(
            version=str(raw.get("version", "1.0.0")),
            monitor=self._build_monitor(raw.get("monitor")),
            logging=self._build_logging(raw.get("logging")),
            watchers=self._build_watchers(raw.get("watchers")),
        )

    def save(self, config: AppConfig) -> bool:
        payload = self.to_dict(config)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(payload, ensure_ascii=False, indent=2) + "\n"
        try:
            saver = QSaveFile(str(self._config_path))
            if not saver.open(QIODevice.OpenModeFlag.WriteOnly | QIODevice.OpenModeFlag.Truncate):
                return False
            raw = content.encode("utf-8")
            written = saver.write(raw)
            if written != len(raw):
                saver.cancelWriting()
                return False
            if not saver.commit():
                return False
        except Exception:
            return False
        return True

    @staticmethod
    def to_dict(config: AppConfig) -> dict[str, Any]:
        return {
            "version": str(config.version),
            "monitor": {
                "poll_interval_ms": int(config.monitor.poll_interval_ms),
                "activity_kinds": [kind.value for kind in config.monitor.activity_kinds],
                "window_events_only": bool(config.monitor.window_events_only),
            },
            "logging": {
                "debug_mode": bool(config.logging.debug_mode),
            },
            "watchers": [
                {
                    "name": str(preset.name),
                    "time_count_ms": int(preset.time_count_ms),
                    "is_tick": bool(preset.is_tick),
                    "notify_on_active": bool(preset.notify_on_active),
                }
                for preset in config.watchers
            ],
        }

    @staticmethod
    def _build_monitor(payload: Any) -> MonitorConfig:
        if not isinstance(payload, dict):
            return MonitorConfig()
        try:
            poll_interval_ms = int(payload.get("poll_interval_ms", 500))
        except (TypeError, ValueError):
            poll_interval_ms = 500
        poll_interval_ms = min(max(poll_interval_ms, MIN_POLL_INTERVAL_MS), MAX_POLL_INTERVAL_MS)

        raw_kinds = payload.get("activity_kinds", None)
        kinds: list[ActivityKind] = []
        if isinstance(raw_kinds, list):
            for item in raw_kinds:
                kind = ActivityKind.parse(item)
                if kind is not None and kind not in kinds:
                    kinds.append(kind)
        if not kinds:
            kinds = list(ALL_ACTIVITY_KINDS)

        return MonitorConfig(
            poll_interval_ms=poll_interval_ms,
            activity_kinds=tuple(kinds),
            window_events_only=_as_bool(payload.get("window_events_only"), True),
        )

    @staticmethod
    def _build_logging(payload: Any) -> LoggingConfig:
        if not isinstance(payload, dict):
            return LoggingConfig()
        return LoggingConfig(debug_mode=_as_bool(payload.get("debug_mode"), False))

    @staticmethod
    def _build_watchers(payload: Any) -> tuple[WatcherPreset, ...]:
        if not isinstance(payload, list):
            return _default_watchers()
        presets: list[WatcherPreset] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            name = str(item.get("name", "") or "").strip()
            try:
                time_count_ms = int(item.get("time_count_ms", 0))
            except (TypeError, ValueError):
                continue
            if not name or time_count_ms <= 0:
                continue
            presets.append(
                WatcherPreset(
                    name=name,
                    time_count_ms=time_count_ms,
                    is_tick=_as_bool(item.get("is_tick"), False),
                    notify_on_active=_as_bool(item.get("notify_on_active"), True),
                )
            )
        return tuple(presets)


def _as_bool(value: Any, default: bool) -> bool:
    # JSON strings such as "false" are not booleans.
    if isinstance(value, bool):
        return value
    return default
