"""Item definition structures."""
from __future__ import annotations

from dataclasses import dataclass

from versecraft.core.types import EquipSlot, ItemCategory, UseKind

MAX_ITEM_QTY = 9999


@dataclass(frozen=True, slots=True)
class UseDef:
    """What happens when a consumable-like item is used."""

    kind: UseKind
    amount: int = 0
    tag: str | None = None


@dataclass(frozen=True, slots=True)
class ItemSpec:
    """Authored description of an item, as found in loadouts and effects."""

    id: str
    name: str
    category: ItemCategory
    qty: int = 1
    value: int = 0
    use: UseDef | None = None
    equip_slot: EquipSlot | None = None


@dataclass(frozen=True, slots=True)
class ItemRef:
    """Reference to an inventory row by identity."""

    category: ItemCategory
    id: str
    qty: int = 1
