"""Slot-based session persistence over a key-value store."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List

from versecraft.data.kv_store import KeyValueStore
from versecraft.domain.resources import Progression
from versecraft.domain.state import SessionState
from versecraft.services.errors import NotFoundError, SaveLoadError, SaveMismatchError
from versecraft.services.save_service import SaveService

logger = logging.getLogger(__name__)

DEFAULT_SLOT_COUNT = 3
LAST_PLAYED_KEY = "save::last"
PROGRESSION_KEY = "progress::global"


def slot_key(story_id: str, slot: int) -> str:
    return f"save::{story_id}::slot{slot}"


@dataclass(frozen=True, slots=True)
class LastPlayed:
    story_id: str
    slot: int


@dataclass(slots=True)
class SlotMetadata:
    """Describes the contents of a save slot for menu display."""

    slot: int
    exists: bool
    section_id: str | None = None
    saved_at: str | None = None
    resource: str | None = None
    is_corrupt: bool = False


class SessionStore:
    """Saves and restores sessions keyed by (story id, slot).

    The store never chooses between refusing and switching stories on a
    mismatched load; callers pass ``expected_story_id`` when they want the
    strict behaviour.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        slot_count: int = DEFAULT_SLOT_COUNT,
        save_service: SaveService | None = None,
    ) -> None:
        self._store = store
        self._slot_count = slot_count
        self._save_service = save_service or SaveService()

    @property
    def slot_count(self) -> int:
        return self._slot_count

    def save(self, session: SessionState, slot: int) -> None:
        """Persist the session in the slot and point the last-played key at it."""
        self._validate_slot(slot)
        saved_at = datetime.now(timezone.utc).isoformat()
        payload = self._save_service.serialize(session)
        payload["savedAt"] = saved_at
        self._store.set(slot_key(session.story_id, slot), json.dumps(payload, sort_keys=True))
        session.saved_at = saved_at
        self._store.set(LAST_PLAYED_KEY, json.dumps({"storyId": session.story_id, "slot": slot}))
        self.save_progression(session.player.progression)
        logger.info("Saved story %s to slot %d", session.story_id, slot)

    def load(self, story_id: str, slot: int, *, expected_story_id: str | None = None) -> SessionState:
        """Read a saved session.

        With ``expected_story_id`` set, a save for any other story raises
        SaveMismatchError before anything is read.
        """
        self._validate_slot(slot)
        if expected_story_id is not None and expected_story_id != story_id:
            raise SaveMismatchError(active_story_id=expected_story_id, saved_story_id=story_id)
        payload = self._read_payload(story_id, slot)
        session = self._save_service.deserialize(payload)
        if session.story_id != story_id:
            raise SaveMismatchError(active_story_id=story_id, saved_story_id=session.story_id)
        logger.info("Loaded story %s from slot %d", story_id, slot)
        return session

    def delete(self, story_id: str, slot: int) -> None:
        self._validate_slot(slot)
        self._store.delete(slot_key(story_id, slot))
        last = self.last_played()
        if last is not None and last == LastPlayed(story_id=story_id, slot=slot):
            self._store.delete(LAST_PLAYED_KEY)

    def last_played(self) -> LastPlayed | None:
        """Return the most recently saved (story, slot), if it still exists."""
        raw = self._store.get(LAST_PLAYED_KEY)
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
            pointer = LastPlayed(story_id=str(payload["storyId"]), slot=int(payload["slot"]))
        except (ValueError, KeyError, TypeError):
            logger.warning("Ignoring unreadable last-played pointer: %r", raw)
            return None
        if self._store.get(slot_key(pointer.story_id, pointer.slot)) is None:
            return None
        return pointer

    def list_slots(self, story_id: str) -> List[SlotMetadata]:
        """Return metadata for each configured slot of one story."""
        slots: List[SlotMetadata] = []
        for slot_index in range(1, self._slot_count + 1):
            raw = self._store.get(slot_key(story_id, slot_index))
            if raw is None:
                slots.append(SlotMetadata(slot=slot_index, exists=False))
                continue
            try:
                session = self._save_service.deserialize(json.loads(raw))
            except (ValueError, SaveLoadError):
                slots.append(SlotMetadata(slot=slot_index, exists=True, is_corrupt=True))
                continue
            resource = session.player.resource
            slots.append(
                SlotMetadata(
                    slot=slot_index,
                    exists=True,
                    section_id=session.section_id,
                    saved_at=session.saved_at,
                    resource=f"{resource.name} {resource.cur}/{resource.max}",
                )
            )
        return slots

    # ----------------------------------------------------------- Progression
    def load_progression(self) -> Progression | None:
        """Return the global progression, or None before the first bootstrap."""
        raw = self._store.get(PROGRESSION_KEY)
        if raw is None:
            return None
        try:
            return self._save_service.deserialize_progression(json.loads(raw))
        except (ValueError, SaveLoadError) as exc:
            raise SaveLoadError(f"Global progression record is corrupt: {exc}") from exc

    def save_progression(self, progression: Progression) -> None:
        payload = self._save_service.serialize_progression(progression)
        self._store.set(PROGRESSION_KEY, json.dumps(payload, sort_keys=True))

    # -------------------------------------------------------------- Internal
    def _read_payload(self, story_id: str, slot: int) -> Dict[str, Any]:
        raw = self._store.get(slot_key(story_id, slot))
        if raw is None:
            raise NotFoundError(story_id, slot)
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise SaveLoadError(f"Save for '{story_id}' slot {slot} is not valid JSON.") from exc
        if not isinstance(payload, dict):
            raise SaveLoadError(f"Save for '{story_id}' slot {slot} must be a JSON object.")
        return payload

    def _validate_slot(self, slot: int) -> None:
        if not 1 <= slot <= self._slot_count:
            raise ValueError(f"Slot index must be between 1 and {self._slot_count}.")
