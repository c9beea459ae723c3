"""Key-value persistence collaborator and two concrete stores."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Protocol

from versecraft.data.errors import StorageError

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Flat string store used for saves."""

    def get(self, key: str) -> str | None:
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    """In-process store; contents vanish with the process."""

    def __init__(self, initial: Dict[str, str] | None = None) -> None:
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._values)


class JsonFileKeyValueStore:
    """Persists every key in a single JSON object on disk.

    The file is re-read on each access so several stores pointed at the same
    path observe each other's writes.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    def get(self, key: str) -> str | None:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._read()
        values[key] = value
        self._write(values)

    def delete(self, key: str) -> None:
        values = self._read()
        if values.pop(key, None) is not None:
            self._write(values)

    def _read(self) -> Dict[str, str]:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as exc:
            raise StorageError(f"Save store {self._path} is unreadable: {exc}") from exc
        if not isinstance(raw, dict):
            raise StorageError(f"Save store {self._path} does not hold a JSON object.")
        return {str(key): value for key, value in raw.items() if isinstance(value, str)}

    def _write(self, values: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(values, indent=2, sort_keys=True), encoding="utf-8")
            tmp_path.replace(self._path)
            logger.debug("Wrote %d keys to %s", len(values), self._path)
        except OSError as exc:
            raise StorageError(f"Unable to write save store {self._path}: {exc}") from exc
