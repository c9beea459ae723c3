"""Story manifest structures."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True, slots=True)
class StoryManifestEntry:
    """One playable story listed by the story source."""

    id: str
    file: str
    title: str = ""
    subtitle: str | None = None
    estimate: str | None = None
    thumb: str | None = None

    @property
    def display_title(self) -> str:
        return self.title or self.id


@dataclass(frozen=True, slots=True)
class StoryManifest:
    default_story_id: str | None = None
    stories: List[StoryManifestEntry] = field(default_factory=list)

    def find(self, story_id: str | None) -> StoryManifestEntry | None:
        for entry in self.stories:
            if entry.id == story_id:
                return entry
        return None

    def default_entry(self) -> StoryManifestEntry | None:
        entry = self.find(self.default_story_id)
        if entry is None and self.stories:
            return self.stories[0]
        return entry
