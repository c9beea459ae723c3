import pytest

from versecraft.data.kv_store import MemoryKeyValueStore
from versecraft.services import GameService, SaveMismatchError, SessionStore
from versecraft.services.session_store import LAST_PLAYED_KEY, PROGRESSION_KEY
from tests.helpers.story_builders import (
    InMemoryStorySource,
    story_a_document,
    story_b_document,
    two_story_manifest,
)


def _make_service(kv: MemoryKeyValueStore | None = None) -> tuple[GameService, InMemoryStorySource, MemoryKeyValueStore]:
    kv = kv if kv is not None else MemoryKeyValueStore()
    source = InMemoryStorySource(
        two_story_manifest(),
        {"story_a.json": story_a_document(), "story_b.json": story_b_document()},
    )
    return GameService(source, SessionStore(kv)), source, kv


def test_new_run_defaults_to_manifest_default_story() -> None:
    service, _, kv = _make_service()

    game = service.start_new_run()

    assert game.story.id == "story_a"
    assert game.title == "Story A"
    assert game.session.section_id == "start"
    assert game.session.player.resource.cur == 8
    assert kv.get(PROGRESSION_KEY) is not None


def test_story_documents_are_cached() -> None:
    service, source, _ = _make_service()

    service.start_new_run("story_a")
    service.start_new_run("story_a")

    assert source.document_reads == 1


def test_unlisted_story_raises_key_error() -> None:
    service, _, _ = _make_service()

    with pytest.raises(KeyError):
        service.start_new_run("story_z")


def test_cross_story_strict_load_is_refused() -> None:
    service, _, _ = _make_service()
    game_a = service.start_new_run("story_a")
    service.save_game(game_a, 1)
    game_b = service.start_new_run("story_b")

    with pytest.raises(SaveMismatchError) as excinfo:
        service.load_game("story_a", 1, mode="strict", active=game_b)

    assert excinfo.value.active_title == "Story B"
    assert excinfo.value.saved_title == "Story A"
    assert "Story A" in str(excinfo.value)
    assert game_b.session.story_id == "story_b"
    assert game_b.session.section_id == "start"


def test_strict_load_requires_active_game() -> None:
    service, _, _ = _make_service()

    with pytest.raises(ValueError):
        service.load_game("story_a", 1, mode="strict")


def test_permissive_load_switches_story() -> None:
    service, _, _ = _make_service()
    game_a = service.start_new_run("story_a")
    service.choose(game_a, 0)
    service.save_game(game_a, 1)
    service.start_new_run("story_b")

    resumed = service.load_game("story_a", 1, mode="permissive")

    assert resumed.story.id == "story_a"
    assert resumed.session.section_id == "middle"
    assert "left" in resumed.session.player.flags


def test_progression_is_global_across_stories() -> None:
    service, _, kv = _make_service()
    game_a = service.start_new_run("story_a")
    service.choose(game_a, 0)

    game_b = service.start_new_run("story_b")

    assert game_b.session.player.progression.xp == 10
    assert game_b.session.player.resource.name == "Nerve"
    assert '"xp": 10' in kv.get(PROGRESSION_KEY)


def test_progression_survives_a_new_service() -> None:
    service, _, kv = _make_service()
    service.choose(service.start_new_run("story_a"), 0)

    fresh, _, _ = _make_service(kv)

    assert fresh.progression.xp == 10


def test_continue_game_uses_last_played_pointer() -> None:
    service, _, _ = _make_service()
    assert service.continue_game() is None

    game_b = service.start_new_run("story_b")
    service.save_game(game_b, 2)
    service.start_new_run("story_a")

    resumed = service.continue_game()

    assert resumed is not None
    assert resumed.story.id == "story_b"


def test_continue_with_unlisted_story_starts_default() -> None:
    kv = MemoryKeyValueStore()
    service, _, _ = _make_service(kv)
    service.save_game(service.start_new_run("story_a"), 1)
    kv.set("save::retired::slot1", kv.get("save::story_a::slot1").replace('"story_a"', '"retired"'))
    kv.set(LAST_PLAYED_KEY, '{"storyId": "retired", "slot": 1}')

    resumed = service.continue_game()

    assert resumed is not None
    assert resumed.story.id == "story_a"
    assert resumed.session.section_id == "start"


def test_load_with_unknown_section_falls_back_to_start() -> None:
    kv = MemoryKeyValueStore()
    service, _, _ = _make_service(kv)
    game = service.start_new_run("story_a")
    game.session.section_id = "removed_section"
    service.save_game(game, 1)

    resumed = service.load_game("story_a", 1, mode="permissive")

    assert resumed.session.section_id == "start"


def test_menu_choice_reports_return_to_menu() -> None:
    service, _, _ = _make_service()
    game = service.start_new_run("story_a")

    result = service.choose(game, 1)

    assert result.returned_to_menu
