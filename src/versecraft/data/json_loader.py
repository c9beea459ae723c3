"""Low-level JSON helpers for the story source."""
from __future__ import annotations

import json
from pathlib import Path

from .errors import TransportError


def load_json(path: Path) -> object:
    """Load JSON from disk and raise TransportError on failure."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise TransportError(f"Story file not found: {path}") from exc
    except OSError as exc:
        raise TransportError(f"Unable to read story file: {path}") from exc

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise TransportError(f"Invalid JSON in {path}: {exc}") from exc
