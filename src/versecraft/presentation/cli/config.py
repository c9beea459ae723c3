"""CLI configuration helpers for options persistence."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict

_DEFAULT_TEXT_MODE = "instant"
_DEFAULT_LOG_LEVEL = "WARNING"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    override = os.environ.get("VERSECRAFT_HOME")
    if override:
        return Path(override)
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "VerseCraft"
        return Path.home() / "VerseCraft"
    return Path.home() / ".config" / "versecraft"


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "config.json"


def get_save_path() -> Path:
    """Return the file backing the save key-value store."""
    return get_user_data_dir() / "saves" / "saves.json"


def _normalize_text_mode(value: object) -> str:
    return "step" if value == "step" else _DEFAULT_TEXT_MODE


def _normalize_log_level(value: object) -> str:
    if isinstance(value, str) and value.upper() in _LOG_LEVELS:
        return value.upper()
    return _DEFAULT_LOG_LEVEL


def _normalize_stories_dir(value: object) -> str:
    return value if isinstance(value, str) else ""


def _defaults() -> Dict[str, str]:
    return {"text_display_mode": _DEFAULT_TEXT_MODE, "log_level": _DEFAULT_LOG_LEVEL, "stories_dir": ""}


def load_config(path: Path | None = None) -> Dict[str, str]:
    """Load config from disk or return defaults."""
    config_path = path or get_default_config_path()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return _defaults()
    except (OSError, ValueError) as exc:
        logging.getLogger(__name__).warning("Ignoring unreadable config %s: %s", config_path, exc)
        return _defaults()
    if not isinstance(raw, dict):
        return _defaults()
    return {
        "text_display_mode": _normalize_text_mode(raw.get("text_display_mode")),
        "log_level": _normalize_log_level(raw.get("log_level")),
        "stories_dir": _normalize_stories_dir(raw.get("stories_dir")),
    }


def save_config(config: Dict[str, str], path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "text_display_mode": _normalize_text_mode(config.get("text_display_mode")),
        "log_level": _normalize_log_level(config.get("log_level")),
        "stories_dir": _normalize_stories_dir(config.get("stories_dir")),
    }
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
