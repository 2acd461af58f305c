from __future__ import annotations

import logging
import shutil
from pathlib import Path

from PySide6.QtCore import QStandardPaths


APP_NAME = "UserIdle"
PROJECT_ROOT = Path(__file__).resolve().parents[2]
BUNDLED_CONFIG = PROJECT_ROOT / "config" / "config.json"

LOGGER = logging.getLogger("UserIdle")


def get_base_dir() -> Path:
    """Read-only project directory holding the bundled ``config/``."""
    return PROJECT_ROOT


def get_user_data_dir() -> Path:
    location = QStandardPaths.writableLocation(QStandardPaths.StandardLocation.AppDataLocation)
    base = Path(location) if location else Path.home() / ".local" / "share"
    # Without application metadata Qt hands back a location shared by all apps.
    target = base if base.name.lower() == APP_NAME.lower() else base / APP_NAME
    target.mkdir(parents=True, exist_ok=True)
    return target


def get_log_dir() -> Path:
    target = get_user_data_dir() / "logs"
    target.mkdir(parents=True, exist_ok=True)
    return target


def resolve_config_path() -> Path:
    """
    Return the writable ``config.json`` in the user data directory, seeding it
    from the bundled ``config/config.json`` on first run.
    """
    user_cfg = get_user_data_dir() / "config.json"
    if user_cfg.exists() or not BUNDLED_CONFIG.exists():
        return user_cfg
    try:
        shutil.copyfile(BUNDLED_CONFIG, user_cfg)
    except OSError as exc:
        LOGGER.warning("[Paths] Could not seed %s from bundled config: %s", user_cfg, exc)
    return user_cfg
