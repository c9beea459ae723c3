from versecraft.data.story_loader import load_story
from versecraft.domain.resources import Progression
from versecraft.services.factories import create_player_for_story


def _story():
    return load_story(
        {
            "id": "s",
            "module": {
                "primaryResource": {"name": "Will", "min": -5, "max": 5},
                "currency": {"name": "Shells", "startAt": 7},
                "loadout": {"weapon": {"id": "dagger"}, "armor": None},
                "startingItems": [{"id": "tonic", "category": "consumable", "qty": 2}],
            },
            "sections": [{"id": "start"}],
        }
    )


def test_player_seeded_from_module() -> None:
    progression = Progression(xp=20, level=2)

    player = create_player_for_story(_story(), progression)

    assert (player.resource.name, player.resource.cur) == ("Will", 0)
    assert (player.wallet.name, player.wallet.amount) == ("Shells", 7)
    assert player.inventory.equipped_name("weapon") == "Dagger"
    assert player.inventory.find("weapon", "dagger") is None
    assert player.inventory.find("consumable", "tonic").qty == 2
    assert player.flags == set()
    assert player.progression is progression


def test_starting_copy_of_loadout_item_stacks_onto_slot() -> None:
    story = load_story(
        {
            "id": "s",
            "module": {
                "loadout": {"weapon": {"id": "dagger"}},
                "startingItems": [{"id": "dagger", "category": "weapon"}],
            },
            "sections": [{"id": "start"}],
        }
    )

    player = create_player_for_story(story, Progression())

    assert player.inventory.items("weapon") == []
    assert player.inventory.equipped("weapon").qty == 2
