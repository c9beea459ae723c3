"""Story source collaborator: manifest and story document reads."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Mapping, Protocol

from versecraft.data import paths
from versecraft.data.errors import SchemaError, TransportError
from versecraft.data.json_loader import load_json
from versecraft.domain.defs import StoryManifest, StoryManifestEntry

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "stories.json"


class StorySource(Protocol):
    """Provides the story list and raw story documents."""

    def fetch_story_manifest(self) -> StoryManifest:
        ...

    def fetch_story_document(self, file: str) -> object:
        ...


def parse_manifest(raw: object) -> StoryManifest:
    """Convert raw manifest JSON into a StoryManifest, skipping unusable entries."""
    if not isinstance(raw, Mapping):
        raise SchemaError("Story manifest must be an object.")
    raw_stories = raw.get("stories", [])
    if not isinstance(raw_stories, list):
        raise SchemaError("Story manifest 'stories' must be a list.")
    entries: List[StoryManifestEntry] = []
    for index, entry in enumerate(raw_stories):
        if not isinstance(entry, Mapping) or not entry.get("id") or not entry.get("file"):
            logger.warning("Skipping manifest entry %d: id and file are required.", index)
            continue
        entries.append(
            StoryManifestEntry(
                id=str(entry["id"]),
                file=str(entry["file"]),
                title=str(entry.get("title") or ""),
                subtitle=_optional_str(entry.get("subtitle")),
                estimate=_optional_str(entry.get("estimate")),
                thumb=_optional_str(entry.get("thumb")),
            )
        )
    default_id = _optional_str(raw.get("defaultStoryId"))
    return StoryManifest(default_story_id=default_id, stories=entries)


def _optional_str(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


class FileStorySource:
    """Reads the manifest and story files from a directory on disk."""

    def __init__(self, base_path: Path | str | None = None) -> None:
        self._base_dir = paths.get_stories_path(base_path)

    def fetch_story_manifest(self) -> StoryManifest:
        raw = load_json(self._base_dir / MANIFEST_FILENAME)
        return parse_manifest(raw)

    def fetch_story_document(self, file: str) -> object:
        path = (self._base_dir / file).resolve()
        if self._base_dir.resolve() not in path.parents:
            raise TransportError(f"Story file escapes the story directory: {file}")
        logger.debug("Reading story document %s", path)
        return load_json(path)
