"""Persistent JSON config helpers.

Stores the session commands, the ignore-file name, and the log level.
All access is defensive: malformed or missing config falls back to defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

from platformdirs import user_config_dir

from .gitignore import DEFAULT_IGNORE_FILENAME
from .session.runtime import DEFAULT_INSTALL_COMMAND, DEFAULT_START_COMMAND

logger = logging.getLogger(__name__)

APP_NAME = "devstudio"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class WorkspaceSettings:
    """Effective settings after config and CLI overrides are merged."""

    install_command: tuple[str, ...] = DEFAULT_INSTALL_COMMAND
    start_command: tuple[str, ...] = DEFAULT_START_COMMAND
    ignore_filename: str = DEFAULT_IGNORE_FILENAME
    log_level: str = DEFAULT_LOG_LEVEL


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", CONFIG_PATH, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object]) -> bool:
    """Persist config data as pretty-printed JSON; ``False`` if it cannot be written."""
    try:
        CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
        CONFIG_PATH.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Failed to save config %s: %s", CONFIG_PATH, exc)
        return False
    return True


def _coerce_command(value: object) -> tuple[str, ...] | None:
    """Accept a non-empty list of non-empty strings; anything else is invalid."""
    if not isinstance(value, list) or not value:
        return None
    if not all(isinstance(part, str) and part for part in value):
        return None
    return tuple(value)


def _coerce_name(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    if not stripped or "/" in stripped:
        return None
    return stripped


def _coerce_log_level(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    upper = value.strip().upper()
    return upper if upper in LOG_LEVELS else None


def load_settings() -> WorkspaceSettings:
    """Build settings from config, keeping defaults for invalid entries."""
    data = load_config()
    defaults = WorkspaceSettings()
    return WorkspaceSettings(
        install_command=_coerce_command(data.get("install_command")) or defaults.install_command,
        start_command=_coerce_command(data.get("start_command")) or defaults.start_command,
        ignore_filename=_coerce_name(data.get("ignore_filename")) or defaults.ignore_filename,
        log_level=_coerce_log_level(data.get("log_level")) or defaults.log_level,
    )


def save_settings(settings: WorkspaceSettings) -> bool:
    config = load_config()
    config["install_command"] = list(settings.install_command)
    config["start_command"] = list(settings.start_command)
    config["ignore_filename"] = settings.ignore_filename
    config["log_level"] = settings.log_level
    return save_config(config)


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "DEFAULT_LOG_LEVEL",
    "LOG_LEVELS",
    "WorkspaceSettings",
    "load_config",
    "load_settings",
    "save_config",
    "save_settings",
]
