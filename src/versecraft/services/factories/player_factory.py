"""Factory for seeding a fresh player state from a story's module config."""
from __future__ import annotations

from versecraft.domain.defs import StoryDocument
from versecraft.domain.inventory import Inventory, InventoryItem
from versecraft.domain.resources import Progression, ResourcePool, Wallet
from versecraft.domain.state import PlayerState


def create_player_for_story(story: StoryDocument, progression: Progression) -> PlayerState:
    """Build the starting kit for a new run of the given story.

    The progression object is shared, not copied, so experience earned in the
    run lands on the global track.
    """
    module = story.module
    inventory = Inventory()
    for slot, spec in module.loadout.items():
        inventory.set_equipped(slot, InventoryItem.from_spec(spec))
    for spec in module.starting_items:
        inventory.add(spec)
    return PlayerState(
        resource=ResourcePool.seed(module.primary_resource),
        progression=progression,
        wallet=Wallet.seed(module.currency),
        flags=set(),
        inventory=inventory,
    )
