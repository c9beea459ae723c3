"""Choice visibility rules."""
from __future__ import annotations

from typing import List

from versecraft.domain.defs import ChoiceDef, RequirementDef, SectionDef
from versecraft.domain.state import PlayerState


def requirement_met(requires: RequirementDef | None, player: PlayerState) -> bool:
    """Return True when every present clause holds."""
    if requires is None:
        return True
    if requires.unsatisfiable:
        return False
    if requires.flag is not None and requires.flag not in player.flags:
        return False
    if requires.not_flag is not None and requires.not_flag in player.flags:
        return False
    if requires.has_item is not None:
        if not player.inventory.has(requires.has_item.category, requires.has_item.id):
            return False
    if requires.resource_at_least is not None and player.resource.cur < requires.resource_at_least:
        return False
    if requires.currency_at_least is not None and player.wallet.amount < requires.currency_at_least:
        return False
    return True


def is_visible(choice: ChoiceDef, player: PlayerState) -> bool:
    return requirement_met(choice.requires, player)


def visible_choices(section: SectionDef, player: PlayerState) -> List[tuple[int, ChoiceDef]]:
    """Return (declared index, choice) pairs for the choices the player may see."""
    return [(index, choice) for index, choice in enumerate(section.choices) if is_visible(choice, player)]
