"""Data layer: story loading, story sources and key-value persistence."""

from .errors import DataError, SchemaError, StorageError, TransportError
from .paths import get_repo_root, get_stories_path

__all__ = [
    "DataError",
    "SchemaError",
    "StorageError",
    "TransportError",
    "get_repo_root",
    "get_stories_path",
]
