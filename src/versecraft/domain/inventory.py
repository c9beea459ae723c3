"""Category-partitioned inventory and the equip map."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List

from versecraft.core.types import EQUIP_SLOTS, ITEM_CATEGORIES, EquipSlot, ItemCategory
from versecraft.domain.defs import MAX_ITEM_QTY, ItemSpec, UseDef

_CATEGORY_SLOTS: Dict[str, EquipSlot] = {"weapon": "weapon", "armor": "armor", "special": "special"}


def default_slot_for(category: str) -> EquipSlot | None:
    """Return the equip slot an item of this category goes to by default."""
    return _CATEGORY_SLOTS.get(category)


@dataclass(slots=True)
class InventoryItem:
    """Mutable inventory row; identity is (category, id)."""

    id: str
    name: str
    category: ItemCategory
    qty: int = 1
    value: int = 0
    use: UseDef | None = None
    equip_slot: EquipSlot | None = None

    @classmethod
    def from_spec(cls, spec: ItemSpec, qty: int | None = None) -> "InventoryItem":
        return cls(
            id=spec.id,
            name=spec.name,
            category=spec.category,
            qty=spec.qty if qty is None else qty,
            value=spec.value,
            use=spec.use,
            equip_slot=spec.equip_slot,
        )


@dataclass(frozen=True, slots=True)
class InventoryResult:
    """Outcome of a best-effort inventory operation; never raised."""

    applied: bool
    reason: str = ""

    @classmethod
    def ok(cls) -> "InventoryResult":
        return cls(applied=True)

    @classmethod
    def ignored(cls, reason: str) -> "InventoryResult":
        return cls(applied=False, reason=reason)


def _empty_categories() -> Dict[str, List[InventoryItem]]:
    return {category: [] for category in ITEM_CATEGORIES}


def _empty_equip() -> Dict[str, InventoryItem | None]:
    return {slot: None for slot in EQUIP_SLOTS}


@dataclass(slots=True)
class Inventory:
    """Item lists per category plus one equipped item per slot.

    An equipped item is held by its slot record only; it is never listed in
    the category it was taken from at the same time.
    """

    categories: Dict[str, List[InventoryItem]] = field(default_factory=_empty_categories)
    equipment: Dict[str, InventoryItem | None] = field(default_factory=_empty_equip)

    # ------------------------------------------------------------------ Queries
    def items(self, category: str) -> List[InventoryItem]:
        return list(self.categories.get(category, []))

    def iter_rows(self) -> Iterator[InventoryItem]:
        for category in ITEM_CATEGORIES:
            yield from self.categories.get(category, [])

    def find(self, category: str, item_id: str) -> InventoryItem | None:
        for row in self.categories.get(category, []):
            if row.id == item_id:
                return row
        return None

    def has(self, category: str, item_id: str) -> bool:
        row = self.find(category, item_id)
        return row is not None and row.qty > 0

    def equipped(self, slot: str) -> InventoryItem | None:
        return self.equipment.get(slot)

    def equipped_id(self, slot: str) -> str | None:
        item = self.equipment.get(slot)
        return item.id if item else None

    def equipped_name(self, slot: str) -> str:
        item = self.equipment.get(slot)
        return item.name if item else ""

    # ---------------------------------------------------------------- Mutations
    def add(self, spec: ItemSpec | InventoryItem, qty: int | None = None) -> InventoryResult:
        """Insert a row or merge quantity into the existing row with the same id.

        An item that is currently equipped stacks onto its slot record instead
        of reappearing in its category list.
        """
        if not spec.id or spec.category not in ITEM_CATEGORIES:
            return InventoryResult.ignored("malformed_item")
        amount = spec.qty if qty is None else qty
        if amount <= 0:
            return InventoryResult.ignored("non_positive_qty")
        equipped = self._equipped_match(spec.category, spec.id)
        if equipped is not None:
            equipped.qty = min(MAX_ITEM_QTY, equipped.qty + amount)
            return InventoryResult.ok()
        row = self.find(spec.category, spec.id)
        if row is not None:
            row.qty = min(MAX_ITEM_QTY, row.qty + amount)
            return InventoryResult.ok()
        if isinstance(spec, InventoryItem):
            new_row = replace(spec, qty=min(MAX_ITEM_QTY, amount))
        else:
            new_row = InventoryItem.from_spec(spec, qty=min(MAX_ITEM_QTY, amount))
        self.categories.setdefault(spec.category, []).append(new_row)
        return InventoryResult.ok()

    def remove(self, category: str, item_id: str, qty: int = 1) -> InventoryResult:
        """Decrement a row, deleting it at zero. Absent items are ignored."""
        row = self.find(category, item_id)
        if row is None:
            return InventoryResult.ignored("absent")
        if qty <= 0:
            return InventoryResult.ignored("non_positive_qty")
        row.qty -= qty
        if row.qty <= 0:
            self.categories[category].remove(row)
        return InventoryResult.ok()

    def equip(self, slot: str, category: str, item_id: str) -> InventoryResult:
        """Move a row into an equip slot, returning any previous occupant.

        The whole row moves into the slot so the equipped id never stays
        listed in its category. The previous occupant goes back to the list it
        came from, merging with a row of the same id if one exists.
        """
        if slot not in EQUIP_SLOTS:
            return InventoryResult.ignored("invalid_slot")
        target = self.find(category, item_id)
        if target is None or target.qty <= 0:
            return InventoryResult.ignored("not_in_inventory")

        previous = self.equipment.get(slot)
        incoming = replace(target)
        if previous is not None and previous.category == category and previous.id == item_id:
            incoming.qty = min(MAX_ITEM_QTY, previous.qty + target.qty)
            previous = None

        self.categories[category].remove(target)
        if previous is not None:
            self._return_to_category(previous)
        self.equipment[slot] = incoming
        return InventoryResult.ok()

    def unequip(self, slot: str) -> InventoryResult:
        """Clear a slot and put its item back into the origin category."""
        if slot not in EQUIP_SLOTS:
            return InventoryResult.ignored("invalid_slot")
        current = self.equipment.get(slot)
        if current is None:
            return InventoryResult.ignored("slot_empty")
        self.equipment[slot] = None
        self._return_to_category(current)
        return InventoryResult.ok()

    def set_equipped(self, slot: EquipSlot, item: InventoryItem | None) -> None:
        """Place an item directly in a slot without touching category lists."""
        self.equipment[slot] = item

    def _equipped_match(self, category: str, item_id: str) -> InventoryItem | None:
        for item in self.equipment.values():
            if item is not None and item.category == category and item.id == item_id:
                return item
        return None

    def _return_to_category(self, item: InventoryItem) -> None:
        row = self.find(item.category, item.id)
        if row is not None:
            row.qty = min(MAX_ITEM_QTY, row.qty + item.qty)
        else:
            self.categories.setdefault(item.category, []).append(replace(item))
