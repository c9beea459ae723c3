"""Console-driven UI loops for VerseCraft."""
from __future__ import annotations

import logging
from typing import Dict, List, Literal

from versecraft.data.errors import DataError
from versecraft.data.kv_store import JsonFileKeyValueStore
from versecraft.data.story_source import FileStorySource
from versecraft.presentation.cli import config, render
from versecraft.services import (
    ActiveGame,
    ChoiceResult,
    GameService,
    InventoryService,
    MissingSectionError,
    NotFoundError,
    SaveLoadError,
    SaveMismatchError,
    SessionStore,
)
from versecraft.services.effect_engine import EffectOutcome
from versecraft.services.inventory_service import (
    InventoryActionIgnoredEvent,
    InventoryEvent,
    ItemEquippedEvent,
    ItemUnequippedEvent,
    ItemUsedEvent,
)

StoryExit = Literal["menu", "quit"]

logger = logging.getLogger(__name__)

_STORY_COMMANDS = "[number] choose  i inventory  c character  s save  l load  m menu  q quit"
_ACTION_COMMANDS = {"inventory": "i", "character": "c", "save": "s", "load": "l"}


def main() -> None:
    """Start the interactive CLI session."""
    settings = config.load_config()
    _configure_logging(settings["log_level"])
    game_service = _build_game_service(settings)
    inventory_service = InventoryService()
    print("=== VerseCraft ===")
    print("Choose Your Paths. Live Your Story.")
    running = True
    while running:
        game = _main_menu_loop(game_service)
        if game is None:
            running = False
            continue
        outcome = _run_story_loop(game_service, inventory_service, game, settings)
        if outcome == "quit":
            running = False
    print("Goodbye!")


def _configure_logging(level_name: str) -> None:
    level = logging.DEBUG if render.debug_enabled() else getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")
    logger.debug("Logging configured at %s", logging.getLevelName(level))


def _build_game_service(settings: Dict[str, str]) -> GameService:
    """Construct the GameService with the file-backed collaborators."""
    story_source = FileStorySource(settings.get("stories_dir") or None)
    session_store = SessionStore(JsonFileKeyValueStore(config.get_save_path()))
    return GameService(story_source, session_store)


# ---------------------------------------------------------------- Main menu
def _main_menu_loop(game_service: GameService) -> ActiveGame | None:
    while True:
        try:
            manifest = game_service.manifest()
        except DataError as exc:
            print(f"Could not read the story list: {exc}")
            return None
        options = [entry.display_title for entry in manifest.stories]
        render.render_menu("Main Menu", options + ["Continue Story", "Quit"])
        raw = input("Select an option: ").strip()
        try:
            index = int(raw) - 1
        except ValueError:
            print("Please enter a number.")
            continue
        if 0 <= index < len(options):
            game = _start_story(game_service, manifest.stories[index].id)
        elif index == len(options):
            game = _continue_story(game_service)
        elif index == len(options) + 1:
            return None
        else:
            print(f"Please enter a value between 1 and {len(options) + 2}.")
            continue
        if game is not None:
            return game


def _start_story(game_service: GameService, story_id: str) -> ActiveGame | None:
    try:
        return game_service.start_new_run(story_id)
    except (DataError, SaveLoadError, KeyError) as exc:
        print(f"Story load failed: {exc}")
        return None


def _continue_story(game_service: GameService) -> ActiveGame | None:
    try:
        game = game_service.continue_game()
    except (DataError, SaveLoadError) as exc:
        print(f"Could not load save: {exc}")
        return None
    if game is None:
        print("No saved game found yet.")
    return game


# --------------------------------------------------------------- Story loop
def _run_story_loop(
    game_service: GameService,
    inventory_service: InventoryService,
    game: ActiveGame,
    settings: Dict[str, str],
) -> StoryExit:
    while True:
        view = game.navigation.get_current_view(game.session)
        render.render_hud(game.title, view.player)
        if settings.get("text_display_mode") == "step":
            _render_stepwise(view.text)
            render.render_choices(view.choices)
        else:
            render.render_section(view)
        print(f"\n{_STORY_COMMANDS}")
        command = input("> ").strip().lower()
        if command == "q":
            game_service.return_to_menu(game)
            return "quit"
        if command == "m":
            game_service.return_to_menu(game)
            return "menu"
        if command in ("i", "c", "s", "l"):
            game = _handle_action(game_service, inventory_service, game, command)
            continue
        try:
            index = int(command) - 1
        except ValueError:
            print("Unknown command.")
            continue
        if not 0 <= index < len(view.choices):
            print(f"Please enter a value between 1 and {len(view.choices)}.")
            continue
        try:
            result = game_service.choose(game, index)
        except MissingSectionError as exc:
            print(f"Missing section: {exc.section_id}")
            continue
        if result.returned_to_menu:
            game_service.return_to_menu(game)
            return "menu"
        _render_choice_result(result)
        if result.action:
            game = _handle_action(game_service, inventory_service, game, _ACTION_COMMANDS[result.action])


def _render_stepwise(text: str) -> None:
    paragraphs = text.split("\n\n")
    for index, paragraph in enumerate(paragraphs):
        for line in render.wrap_paragraphs(paragraph):
            print(line)
        if index < len(paragraphs) - 1:
            input("")


def _render_choice_result(result: ChoiceResult) -> None:
    lines = _describe_outcome(result.outcome)
    lines.extend(warning.message for warning in result.warnings)
    if result.exhausted:
        lines.append("You have nothing left to give.")
    if lines:
        render.render_heading("Events")
        render.render_bullet_lines(lines)


def _describe_outcome(outcome: EffectOutcome) -> List[str]:
    lines: List[str] = []
    if outcome.resource_delta:
        lines.append(f"Resource {outcome.resource_delta:+d}")
    if outcome.experience_delta:
        lines.append(f"XP {outcome.experience_delta:+d}")
    if outcome.levels_gained:
        lines.append("Level up!")
    if outcome.currency_delta:
        lines.append(f"Currency {outcome.currency_delta:+d}")
    lines.extend(f"Gained {name}" for name in outcome.items_added)
    lines.extend(f"Lost {name}" for name in outcome.items_removed)
    return lines


def _handle_action(
    game_service: GameService,
    inventory_service: InventoryService,
    game: ActiveGame,
    command: str,
) -> ActiveGame:
    if command == "i":
        _inventory_loop(inventory_service, game)
    elif command == "c":
        _render_character(inventory_service, game)
    elif command == "s":
        slot = _prompt_slot(game_service, game)
        if slot is not None:
            try:
                game_service.save_game(game, slot)
            except DataError as exc:
                print(f"Could not save: {exc}")
            else:
                print("Saved.")
    elif command == "l":
        slot = _prompt_slot(game_service, game)
        if slot is not None:
            try:
                return game_service.load_game(game.story.id, slot, mode="strict", active=game)
            except NotFoundError:
                print("No saved game in that slot.")
            except SaveMismatchError as exc:
                print(str(exc))
            except (DataError, SaveLoadError) as exc:
                print(f"Could not load save: {exc}")
    return game


def _prompt_slot(game_service: GameService, game: ActiveGame) -> int | None:
    slots = game_service.session_store.list_slots(game.story.id)
    labels = []
    for meta in slots:
        if not meta.exists:
            labels.append(f"Slot {meta.slot}: empty")
        elif meta.is_corrupt:
            labels.append(f"Slot {meta.slot}: unreadable")
        else:
            labels.append(f"Slot {meta.slot}: {meta.section_id} ({meta.resource}) {meta.saved_at or ''}".rstrip())
    render.render_menu("Save Slots", labels)
    raw = input("Slot (blank to cancel): ").strip()
    if not raw:
        return None
    try:
        slot = int(raw)
    except ValueError:
        print("Please enter a number.")
        return None
    if not 1 <= slot <= len(slots):
        print(f"Please enter a value between 1 and {len(slots)}.")
        return None
    return slot


def _render_character(inventory_service: InventoryService, game: ActiveGame) -> None:
    player = game.session.player
    summary = inventory_service.build_inventory_summary(player)
    render.render_heading("Character")
    print(render.format_bar(player.resource.name, player.resource.cur, player.resource.max))
    print(f"Level {player.progression.level} ({player.progression.xp}/{player.progression.xp_max} XP)")
    print(f"{player.wallet.name}: {player.wallet.amount}")
    render.render_heading("Loadout")
    render.render_bullet_lines(f"{slot.slot.title()}: {slot.item_name or '-'}" for slot in summary.loadout)


def _inventory_loop(inventory_service: InventoryService, game: ActiveGame) -> None:
    player = game.session.player
    while True:
        summary = inventory_service.build_inventory_summary(player)
        rows = [(category, row) for category, entries in summary.categories.items() for row in entries]
        render.render_heading("Inventory")
        if not rows:
            print("Nothing here yet.")
        for idx, (category, row) in enumerate(rows, start=1):
            print(f"{idx}. {row.name} x{row.qty} [{category}]")
        render.render_bullet_lines(f"{slot.slot.title()}: {slot.item_name or '-'}" for slot in summary.loadout)
        raw = input("u<n> use  e<n> equip  x<slot> unequip  (blank to close): ").strip().lower()
        if not raw:
            return
        events: List[InventoryEvent]
        if raw.startswith("x"):
            events = inventory_service.unequip(player, raw[1:].strip())
        elif raw[0] in ("u", "e"):
            try:
                category, row = rows[int(raw[1:]) - 1]
            except (ValueError, IndexError):
                print("Unknown item.")
                continue
            if raw[0] == "u":
                events = inventory_service.use_item(player, category, row.item_id)
            else:
                events = inventory_service.equip(player, category, row.item_id)
        else:
            print("Unknown command.")
            continue
        _render_inventory_events(events)


def _render_inventory_events(events: List[InventoryEvent]) -> None:
    for event in events:
        if isinstance(event, ItemUsedEvent):
            detail = f" ({event.resource_delta:+d})" if event.resource_delta else ""
            print(f"- Used {event.item_name}{detail}")
        elif isinstance(event, ItemEquippedEvent):
            swapped = f", stowing {event.replaced_item_name}" if event.replaced_item_name else ""
            print(f"- Equipped {event.item_name} as {event.slot}{swapped}")
        elif isinstance(event, ItemUnequippedEvent):
            print(f"- Unequipped {event.item_name}")
        elif isinstance(event, InventoryActionIgnoredEvent):
            print(f"- {event.message}")
