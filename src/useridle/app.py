from __future__ import annotations

import logging
import sys
from typing import Callable, Iterable

from PySide6.QtWidgets import QApplication

try:
    from useridle.activity_source import QtActivitySource
    from useridle.config_manager import ConfigManager, WatcherPreset
    from useridle.idle_watcher import IdleWatcher
    from useridle.logger import LOGGER_NAME, setup_logger
    from useridle.paths import APP_NAME, get_base_dir, get_log_dir, resolve_config_path
    from useridle.status_window import IdleStatusWindow, format_idle_time
    from useridle.user_idle_monitor import UserIdleMonitor
except ModuleNotFoundError:
    from .activity_source import QtActivitySource
    from .config_manager import ConfigManager, WatcherPreset
    from .idle_watcher import IdleWatcher
    from .logger import LOGGER_NAME, setup_logger
    from .paths import APP_NAME, get_base_dir, get_log_dir, resolve_config_path
    from .status_window import IdleStatusWindow, format_idle_time
    from .user_idle_monitor import UserIdleMonitor


LOGGER = logging.getLogger(LOGGER_NAME)


def register_watcher_presets(
    monitor: UserIdleMonitor,
    presets: Iterable[WatcherPreset],
    *,
    on_event: Callable[[str], None] | None = None,
) -> dict[str, IdleWatcher]:
    """
    Register one watcher per preset and return the handles keyed by name.

    Each handler logs the idle event (and forwards the text to ``on_event``);
    presets with ``notify_on_active`` also log the user's return.
    """
    handles: dict[str, IdleWatcher] = {}
    for preset in presets:
        handler = _make_idle_handler(monitor, preset, on_event)
        on_active = _make_active_handler(preset, on_event) if preset.notify_on_active else None
        handle = monitor.set_idle(
            handler,
            preset.time_count_ms,
            is_tick=preset.is_tick,
            on_active=on_active,
        )
        if handle is None:
            LOGGER.warning("[App] Watcher preset rejected: %s", preset.name)
            continue
        if preset.name in handles:
            LOGGER.warning("[App] Duplicate watcher preset name replaced: %s", preset.name)
            monitor.clear_idle(handles[preset.name])
        handles[preset.name] = handle
        LOGGER.info(
            "[App] Watcher '%s' registered: time_count=%dms is_tick=%s",
            preset.name,
            preset.time_count_ms,
            preset.is_tick,
        )
    return handles


def _make_idle_handler(
    monitor: UserIdleMonitor,
    preset: WatcherPreset,
    on_event: Callable[[str], None] | None,
) -> Callable[[], None]:
    def _handler() -> None:
        text = f"{preset.name}: idle for {format_idle_time(monitor.idle_time_count)}"
        LOGGER.info("[App] %s", text)
        if on_event is not None:
            on_event(text)

    return _handler


def _make_active_handler(
    preset: WatcherPreset,
    on_event: Callable[[str], None] | None,
) -> Callable[[], None]:
    def _on_active() -> None:
        text = f"{preset.name}: user is back"
        LOGGER.info("[App] %s", text)
        if on_event is not None:
            on_event(text)

    return _on_active


def main() -> int:
    app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    base_dir = get_base_dir()
    config_path = resolve_config_path()
    config = ConfigManager(config_path).load()
    logger = setup_logger(get_log_dir(), debug=config.logging.debug_mode)
    logger.info("Application starting. base_dir=%s config=%s", base_dir, config_path)

    source = QtActivitySource(
        config.monitor.activity_kinds,
        app=app,
        window_events_only=config.monitor.window_events_only,
    )
    monitor = UserIdleMonitor(config.monitor.poll_interval_ms, activity_source=source)

    window = IdleStatusWindow()
    monitor.idle_time_updated.connect(window.update_idle_time)
    monitor.activity_detected.connect(window.show_activity)
    register_watcher_presets(monitor, config.watchers, on_event=window.show_event)
    window.show()

    def _shutdown() -> None:
        logger.info("Application shutting down.")
        monitor.shutdown()
        source.detach()

    app.aboutToQuit.connect(_shutdown)
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
