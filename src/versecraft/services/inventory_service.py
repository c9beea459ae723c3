"""Inventory and equipment orchestration services."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List

from versecraft.core.types import EQUIP_SLOTS, ITEM_CATEGORIES, USABLE_CATEGORIES
from versecraft.domain.inventory import InventoryResult, default_slot_for
from versecraft.domain.state import PlayerState

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class InventoryRowView:
    item_id: str
    name: str
    qty: int
    value: int
    usable: bool
    equippable: bool


@dataclass(slots=True)
class LoadoutSlotView:
    slot: str
    item_id: str | None
    item_name: str | None


@dataclass(slots=True)
class InventorySummary:
    categories: Dict[str, List[InventoryRowView]]
    loadout: List[LoadoutSlotView]


@dataclass(slots=True)
class InventoryEvent:
    """Base class for inventory/equipment events."""


@dataclass(slots=True)
class ItemUsedEvent(InventoryEvent):
    item_id: str
    item_name: str
    resource_delta: int = 0
    flag_set: str | None = None


@dataclass(slots=True)
class ItemEquippedEvent(InventoryEvent):
    item_id: str
    item_name: str
    slot: str
    replaced_item_name: str | None = None


@dataclass(slots=True)
class ItemUnequippedEvent(InventoryEvent):
    item_id: str
    item_name: str
    slot: str


@dataclass(slots=True)
class InventoryActionIgnoredEvent(InventoryEvent):
    """A best-effort action that changed nothing."""

    reason: str
    message: str


class InventoryService:
    """Use, equip and unequip items on a player state.

    Every operation is a no-op rather than an error when the item is missing,
    and reports what happened as events.
    """

    # ------------------------------------------------------------------ Views
    def build_inventory_summary(self, player: PlayerState) -> InventorySummary:
        categories: Dict[str, List[InventoryRowView]] = {}
        for category in ITEM_CATEGORIES:
            categories[category] = [
                InventoryRowView(
                    item_id=row.id,
                    name=row.name,
                    qty=row.qty,
                    value=row.value,
                    usable=category in USABLE_CATEGORIES and row.use is not None,
                    equippable=self._slot_for(row.category, row.equip_slot) is not None,
                )
                for row in player.inventory.items(category)
            ]
        loadout = [
            LoadoutSlotView(
                slot=slot,
                item_id=player.inventory.equipped_id(slot),
                item_name=player.inventory.equipped_name(slot) or None,
            )
            for slot in EQUIP_SLOTS
        ]
        return InventorySummary(categories=categories, loadout=loadout)

    # ---------------------------------------------------------------- Actions
    def use_item(self, player: PlayerState, category: str, item_id: str) -> List[InventoryEvent]:
        """Consume one unit of a consumable-like item and apply its use."""
        if category not in USABLE_CATEGORIES:
            return [self._ignored("not_usable", f"Items in '{category}' cannot be used.")]
        row = player.inventory.find(category, item_id)
        if row is None or row.qty <= 0:
            return [self._ignored("not_in_inventory", "You do not have that item.")]
        if row.use is None:
            return [self._ignored("no_use", f"{row.name} has no use.")]

        event = ItemUsedEvent(item_id=row.id, item_name=row.name)
        if row.use.kind == "heal":
            before = player.resource.cur
            player.resource.apply_delta(row.use.amount)
            event.resource_delta = player.resource.cur - before
        elif row.use.kind == "story" and row.use.tag:
            player.flags.add(row.use.tag)
            event.flag_set = row.use.tag
        player.inventory.remove(category, item_id, 1)
        logger.debug("Used %s (%s)", item_id, category)
        return [event]

    def equip(
        self,
        player: PlayerState,
        category: str,
        item_id: str,
        slot: str | None = None,
    ) -> List[InventoryEvent]:
        row = player.inventory.find(category, item_id)
        if row is None:
            return [self._ignored("not_in_inventory", "You do not have that item.")]
        target_slot = slot or self._slot_for(row.category, row.equip_slot)
        if target_slot is None:
            return [self._ignored("not_equippable", f"{row.name} cannot be equipped.")]
        previous = player.inventory.equipped(target_slot)
        replaced_name = previous.name if previous is not None and previous.id != item_id else None
        result = player.inventory.equip(target_slot, category, item_id)
        if not result.applied:
            return [self._from_result(result)]
        return [
            ItemEquippedEvent(
                item_id=item_id,
                item_name=player.inventory.equipped_name(target_slot),
                slot=target_slot,
                replaced_item_name=replaced_name,
            )
        ]

    def unequip(self, player: PlayerState, slot: str) -> List[InventoryEvent]:
        current = player.inventory.equipped(slot)
        result = player.inventory.unequip(slot)
        if not result.applied or current is None:
            return [self._from_result(result)]
        return [ItemUnequippedEvent(item_id=current.id, item_name=current.name, slot=slot)]

    # --------------------------------------------------------------- Internal
    @staticmethod
    def _slot_for(category: str, equip_slot: str | None) -> str | None:
        return equip_slot or default_slot_for(category)

    @staticmethod
    def _ignored(reason: str, message: str) -> InventoryActionIgnoredEvent:
        logger.debug("Inventory action ignored: %s", reason)
        return InventoryActionIgnoredEvent(reason=reason, message=message)

    def _from_result(self, result: InventoryResult) -> InventoryActionIgnoredEvent:
        messages = {
            "invalid_slot": "That is not an equipment slot.",
            "slot_empty": "Nothing is equipped there.",
            "not_in_inventory": "You do not have that item.",
        }
        return self._ignored(result.reason, messages.get(result.reason, "Nothing happens."))
