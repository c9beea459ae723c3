"""Session lifecycle: new runs, resuming saves, and switching stories."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

from versecraft.core.types import LoadMode
from versecraft.data.story_loader import load_story
from versecraft.data.story_source import StorySource
from versecraft.domain.defs import StoryDocument, StoryManifest, StoryManifestEntry
from versecraft.domain.resources import Progression
from versecraft.domain.state import SessionState
from versecraft.services.errors import SaveMismatchError
from versecraft.services.factories import create_player_for_story
from versecraft.services.navigation_service import ChoiceResult, NavigationService
from versecraft.services.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ActiveGame:
    """A loaded story together with the session being played in it."""

    story: StoryDocument
    session: SessionState
    navigation: NavigationService
    entry: StoryManifestEntry | None = None

    @property
    def title(self) -> str:
        if self.entry is not None and self.entry.title:
            return self.entry.title
        return self.story.title or self.story.id


class GameService:
    """Application service that owns story loading and session lifecycle.

    Nothing here keeps a current session; every operation takes or returns
    an ActiveGame. Only the global progression track lives on the service.
    """

    def __init__(self, story_source: StorySource, session_store: SessionStore) -> None:
        self._story_source = story_source
        self._session_store = session_store
        self._manifest: StoryManifest | None = None
        self._documents: Dict[str, StoryDocument] = {}
        self._progression: Progression | None = None

    @property
    def session_store(self) -> SessionStore:
        return self._session_store

    @property
    def progression(self) -> Progression:
        """Global progression, bootstrapped the first time it is needed."""
        if self._progression is None:
            stored = self._session_store.load_progression()
            if stored is None:
                stored = Progression()
                self._session_store.save_progression(stored)
                logger.info("Bootstrapped global progression")
            self._progression = stored
        return self._progression

    def manifest(self) -> StoryManifest:
        if self._manifest is None:
            self._manifest = self._story_source.fetch_story_manifest()
        return self._manifest

    def load_story(self, story_id: str) -> tuple[StoryDocument, StoryManifestEntry]:
        """Fetch and parse a story listed in the manifest.

        Raises KeyError for unlisted stories; TransportError and SchemaError
        propagate from the source and the loader.
        """
        entry = self.manifest().find(story_id)
        if entry is None:
            raise KeyError(story_id)
        document = self._documents.get(story_id)
        if document is None:
            raw = self._story_source.fetch_story_document(entry.file)
            document = load_story(raw, story_id=entry.id)
            self._documents[story_id] = document
        return document, entry

    # ---------------------------------------------------------------- Runs
    def start_new_run(self, story_id: str | None = None) -> ActiveGame:
        """Begin a story at its start section with a freshly seeded player."""
        if story_id is None:
            default = self.manifest().default_entry()
            if default is None:
                raise KeyError("No stories are listed in the manifest.")
            story_id = default.id
        story, entry = self.load_story(story_id)
        player = create_player_for_story(story, self.progression)
        session = SessionState(story_id=story.id, section_id=story.start_section_id, player=player)
        logger.info("Started new run of %s", story.id)
        return ActiveGame(story=story, session=session, navigation=NavigationService(story), entry=entry)

    def choose(self, game: ActiveGame, choice_index: int) -> ChoiceResult:
        result = game.navigation.choose(game.session, choice_index)
        self._progression = game.session.player.progression
        if result.outcome.experience_delta or result.outcome.levels_gained:
            self._session_store.save_progression(self._progression)
        return result

    def return_to_menu(self, game: ActiveGame) -> None:
        """Leave the narrative session; the caller drops the ActiveGame."""
        self._progression = game.session.player.progression
        self._session_store.save_progression(self._progression)
        logger.info("Left story %s for the main menu", game.story.id)

    # ------------------------------------------------------------ Save/load
    def save_game(self, game: ActiveGame, slot: int) -> None:
        self._session_store.save(game.session, slot)

    def load_game(
        self,
        story_id: str,
        slot: int,
        *,
        mode: LoadMode,
        active: ActiveGame | None = None,
    ) -> ActiveGame:
        """Resume a save.

        ``strict`` refuses saves from any story other than the active one.
        ``permissive`` switches to the saved story.
        """
        if mode == "strict":
            if active is None:
                raise ValueError("A strict load needs an active game.")
            try:
                session = self._session_store.load(story_id, slot, expected_story_id=active.story.id)
            except SaveMismatchError as exc:
                saved_entry = self.manifest().find(exc.saved_story_id)
                raise SaveMismatchError(
                    active_story_id=exc.active_story_id,
                    saved_story_id=exc.saved_story_id,
                    active_title=active.title,
                    saved_title=saved_entry.display_title if saved_entry else None,
                ) from exc
        else:
            session = self._session_store.load(story_id, slot)

        story, entry = self.load_story(session.story_id)
        session.player.progression = self.progression
        if story.get_section(session.section_id) is None and session.section_id != story.failure_section_id:
            logger.warning(
                "Saved section %s no longer exists in %s; resuming at %s",
                session.section_id,
                story.id,
                story.start_section_id,
            )
            session.section_id = story.start_section_id
        return ActiveGame(story=story, session=session, navigation=NavigationService(story), entry=entry)

    def continue_game(self) -> ActiveGame | None:
        """Resume the last played save, switching stories as needed.

        Returns None when nothing has been saved yet. A save whose story is no
        longer listed starts the default story instead.
        """
        last = self._session_store.last_played()
        if last is None:
            return None
        if self.manifest().find(last.story_id) is None:
            logger.warning("Last played story %s is no longer listed; starting the default story", last.story_id)
            return self.start_new_run()
        return self.load_game(last.story_id, last.slot, mode="permissive")
