"""Persistent user preferences for secretserver-toolkit.

Preferences live in a small JSON document under the XDG config directory:
~/.config/secretserver-toolkit/preferences.json

The only preference the toolkit reads itself is ``config_path``, which points
at a config file outside the default location.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

APP_DIR_NAME = "secretserver-toolkit"
PREFERENCES_DIR = Path.home() / ".config" / APP_DIR_NAME
PREFERENCES_FILE = PREFERENCES_DIR / "preferences.json"

CONFIG_PATH_KEY = "config_path"


def default_config_path() -> Path:
    """Default config file location, evaluated against the current home directory."""
    return Path.home() / ".config" / APP_DIR_NAME / "config.yml"


def _read() -> Dict[str, Any]:
    if not PREFERENCES_FILE.exists():
        return {}

    try:
        data = json.loads(PREFERENCES_FILE.read_text())
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Ignoring unreadable preferences file {PREFERENCES_FILE}: {e}")
        return {}

    if not isinstance(data, dict):
        logger.error(f"Ignoring preferences file {PREFERENCES_FILE}: not a JSON object")
        return {}
    return data


def _write(preferences: Dict[str, Any]) -> None:
    PREFERENCES_DIR.mkdir(parents=True, exist_ok=True)
    PREFERENCES_FILE.write_text(json.dumps(preferences, indent=2))


def get_preference(key: str) -> Optional[str]:
    """Return the stored value for key, or None."""
    return _read().get(key)


def set_preference(key: str, value: str) -> None:
    """Store value under key, creating the preferences file if needed."""
    preferences = _read()
    preferences[key] = value
    _write(preferences)
    logger.info(f"Preference '{key}' set to: {value}")


def clear_preference(key: str) -> None:
    """Remove key if present. Missing keys are not an error."""
    preferences = _read()
    if preferences.pop(key, None) is None:
        logger.debug(f"Preference '{key}' not found, nothing to clear")
        return
    _write(preferences)
    logger.info(f"Preference '{key}' cleared")


def get_all_preferences() -> Dict[str, Any]:
    return _read()
