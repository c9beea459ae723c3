"""Apply declarative choice effects to a player state."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from versecraft.domain.defs import EffectDef
from versecraft.domain.state import PlayerState


@dataclass(slots=True)
class EffectOutcome:
    """Realised changes, after clamping, from one or more effects."""

    resource_delta: int = 0
    experience_delta: int = 0
    currency_delta: int = 0
    levels_gained: int = 0
    flags_set: List[str] = field(default_factory=list)
    flags_cleared: List[str] = field(default_factory=list)
    items_added: List[str] = field(default_factory=list)
    items_removed: List[str] = field(default_factory=list)

    @property
    def had_effect(self) -> bool:
        return any(
            (
                self.resource_delta,
                self.experience_delta,
                self.currency_delta,
                self.levels_gained,
                self.flags_set,
                self.flags_cleared,
                self.items_added,
                self.items_removed,
            )
        )

    def merge(self, other: "EffectOutcome") -> None:
        self.resource_delta += other.resource_delta
        self.experience_delta += other.experience_delta
        self.currency_delta += other.currency_delta
        self.levels_gained += other.levels_gained
        self.flags_set.extend(other.flags_set)
        self.flags_cleared.extend(other.flags_cleared)
        self.items_added.extend(other.items_added)
        self.items_removed.extend(other.items_removed)


def apply_effect(effect: EffectDef, player: PlayerState) -> EffectOutcome:
    """Apply every field of one effect.

    Fields are independent. They run in a fixed order: resource, experience,
    currency, flags set, flags cleared, item added, item removed.
    """
    outcome = EffectOutcome()

    if effect.resource_delta:
        before = player.resource.cur
        player.resource.apply_delta(effect.resource_delta)
        outcome.resource_delta = player.resource.cur - before

    if effect.experience_delta:
        before_xp = player.progression.xp
        before_level = player.progression.level
        outcome.levels_gained = player.progression.apply_delta(effect.experience_delta)
        if player.progression.level == before_level:
            outcome.experience_delta = player.progression.xp - before_xp
        else:
            # xp is credited up to a full bar; the excess is discarded
            outcome.experience_delta = player.progression.xp_max - before_xp

    if effect.currency_delta:
        before = player.wallet.amount
        player.wallet.apply_delta(effect.currency_delta)
        outcome.currency_delta = player.wallet.amount - before

    for flag in effect.set_flags:
        if flag not in player.flags:
            player.flags.add(flag)
            outcome.flags_set.append(flag)

    for flag in effect.clear_flags:
        if flag in player.flags:
            player.flags.discard(flag)
            outcome.flags_cleared.append(flag)

    if effect.add_item is not None:
        if player.inventory.add(effect.add_item).applied:
            outcome.items_added.append(effect.add_item.name)

    if effect.remove_item is not None:
        ref = effect.remove_item
        row = player.inventory.find(ref.category, ref.id)
        name = row.name if row else ref.id
        if player.inventory.remove(ref.category, ref.id, ref.qty).applied:
            outcome.items_removed.append(name)

    return outcome


def apply_effects(effects: Iterable[EffectDef], player: PlayerState) -> EffectOutcome:
    """Apply effects in declaration order and combine their outcomes."""
    total = EffectOutcome()
    for effect in effects:
        total.merge(apply_effect(effect, player))
    return total
