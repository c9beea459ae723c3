import json

import pytest

from versecraft.data.errors import StorageError
from versecraft.data.kv_store import MemoryKeyValueStore
from versecraft.domain.defs import EffectDef, ItemSpec
from versecraft.domain.resources import Progression
from versecraft.domain.state import SessionState
from versecraft.services.effect_engine import apply_effect
from versecraft.services.errors import NotFoundError, SaveLoadError, SaveMismatchError
from versecraft.services.session_store import LAST_PLAYED_KEY, PROGRESSION_KEY, LastPlayed, SessionStore, slot_key
from tests.helpers.story_builders import make_player


def _make_session(story_id: str = "story_a", section_id: str = "start") -> SessionState:
    return SessionState(story_id=story_id, section_id=section_id, player=make_player(cur=6, flags=["metGuard"]))


def test_save_writes_slot_pointer_and_progression() -> None:
    kv = MemoryKeyValueStore()
    store = SessionStore(kv)

    store.save(_make_session(), 2)

    assert kv.keys() == sorted([slot_key("story_a", 2), LAST_PLAYED_KEY, PROGRESSION_KEY])
    assert slot_key("story_a", 2) == "save::story_a::slot2"
    assert json.loads(kv.get(LAST_PLAYED_KEY)) == {"storyId": "story_a", "slot": 2}
    assert store.last_played() == LastPlayed(story_id="story_a", slot=2)


def test_save_then_load_round_trip() -> None:
    store = SessionStore(MemoryKeyValueStore())
    session = _make_session(section_id="guard")
    session.player.inventory.add(ItemSpec(id="dagger", name="Dagger", category="weapon"))
    session.player.inventory.equip("weapon", "weapon", "dagger")

    store.save(session, 1)
    restored = store.load("story_a", 1)

    assert restored.section_id == "guard"
    assert session.saved_at is not None
    assert restored.saved_at == session.saved_at
    assert restored.player == session.player


def test_load_missing_slot_raises_not_found() -> None:
    with pytest.raises(NotFoundError):
        SessionStore(MemoryKeyValueStore()).load("story_a", 1)


def test_strict_load_for_other_story_raises_mismatch() -> None:
    store = SessionStore(MemoryKeyValueStore())
    store.save(_make_session("story_a"), 1)

    with pytest.raises(SaveMismatchError) as excinfo:
        store.load("story_a", 1, expected_story_id="story_b")

    assert excinfo.value.saved_story_id == "story_a"
    assert excinfo.value.active_story_id == "story_b"


def test_payload_for_another_story_under_key_is_refused() -> None:
    kv = MemoryKeyValueStore()
    store = SessionStore(kv)
    store.save(_make_session("story_a"), 1)
    kv.set(slot_key("story_b", 1), kv.get(slot_key("story_a", 1)))

    with pytest.raises(SaveMismatchError):
        store.load("story_b", 1)


def test_corrupt_save_raises_save_load_error() -> None:
    kv = MemoryKeyValueStore({slot_key("story_a", 1): "{not json"})

    with pytest.raises(SaveLoadError):
        SessionStore(kv).load("story_a", 1)


@pytest.mark.parametrize("slot", [0, 4])
def test_slot_bounds(slot: int) -> None:
    with pytest.raises(ValueError):
        SessionStore(MemoryKeyValueStore()).save(_make_session(), slot)


def test_delete_clears_pointer_for_that_slot() -> None:
    store = SessionStore(MemoryKeyValueStore())
    store.save(_make_session(), 1)

    store.delete("story_a", 1)

    assert store.last_played() is None


def test_last_played_ignores_garbage_pointer() -> None:
    kv = MemoryKeyValueStore({LAST_PLAYED_KEY: "[]"})

    assert SessionStore(kv).last_played() is None


def test_list_slots_reports_empty_corrupt_and_saved() -> None:
    kv = MemoryKeyValueStore({slot_key("story_a", 3): "{}"})
    store = SessionStore(kv)
    store.save(_make_session(section_id="gate"), 1)

    slots = store.list_slots("story_a")

    assert [meta.exists for meta in slots] == [True, False, True]
    assert slots[0].section_id == "gate" and slots[0].resource == "HP 6/10"
    assert slots[2].is_corrupt


def test_progression_record() -> None:
    store = SessionStore(MemoryKeyValueStore())

    assert store.load_progression() is None
    store.save_progression(Progression(xp=30, xp_max=100, level=3))
    assert store.load_progression() == Progression(xp=30, xp_max=100, level=3)


def test_granting_an_equipped_item_still_round_trips() -> None:
    store = SessionStore(MemoryKeyValueStore())
    session = _make_session()
    dagger = ItemSpec(id="dagger", name="Dagger", category="weapon")
    session.player.inventory.add(dagger)
    session.player.inventory.equip("weapon", "weapon", "dagger")
    apply_effect(EffectDef(add_item=dagger), session.player)

    store.save(session, 1)
    restored = store.load("story_a", 1)

    assert restored.player.inventory.items("weapon") == []
    assert restored.player.inventory.equipped("weapon").qty == 2
    assert restored.player == session.player


class _RejectingStore(MemoryKeyValueStore):
    def set(self, key: str, value: str) -> None:
        raise StorageError("disk full")


def test_failed_save_leaves_session_timestamp_unset() -> None:
    session = _make_session()

    with pytest.raises(StorageError):
        SessionStore(_RejectingStore()).save(session, 1)

    assert session.saved_at is None
