"""JSON-based settings persistence for the date picker demo."""

import json
import logging
import os
from datetime import date

_SETTINGS_PATH = os.path.join(os.path.expanduser("~"), ".mini-datepicker-settings.json")

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_DEFAULTS = {
    "locale": "fr",
    "date_format": None,
    "min_date": None,
    "max_date": None,
    "log_level": "INFO",
}

logger = logging.getLogger(__name__)


def parse_iso_date(text):
    """Return a date for an ISO ``YYYY-MM-DD`` string, or None."""
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except (TypeError, ValueError):
        return None


def load_settings() -> dict:
    """Load settings from disk, returning defaults for missing keys."""
    settings = dict(_DEFAULTS)
    try:
        with open(_SETTINGS_PATH, "r", encoding="utf-8") as f:
            stored = json.load(f)
        if not isinstance(stored, dict):
            return settings
        if isinstance(stored.get("locale"), str) and stored["locale"]:
            settings["locale"] = stored["locale"]
        if isinstance(stored.get("date_format"), str) and stored["date_format"]:
            settings["date_format"] = stored["date_format"]
        for key in ("min_date", "max_date"):
            if parse_iso_date(stored.get(key)) is not None:
                settings[key] = stored[key]
        level = stored.get("log_level")
        if isinstance(level, str) and level.upper() in _LOG_LEVELS:
            settings["log_level"] = level.upper()
    except (FileNotFoundError, json.JSONDecodeError, OSError) as exc:
        logger.debug("Using default settings (%s)", exc)
    return settings


def save_settings(settings: dict) -> None:
    """Persist settings to disk."""
    with open(_SETTINGS_PATH, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2)
