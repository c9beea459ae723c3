"""Shared type aliases for the core and domain layers."""
from typing import Literal

ItemCategory = Literal["consumable", "item", "weapon", "armor", "special"]
EquipSlot = Literal["weapon", "armor", "special"]
UseKind = Literal["heal", "story"]
ChoiceAction = Literal["inventory", "character", "save", "load"]
LoadMode = Literal["strict", "permissive"]

ITEM_CATEGORIES: tuple[ItemCategory, ...] = ("consumable", "item", "weapon", "armor", "special")
EQUIP_SLOTS: tuple[EquipSlot, ...] = ("weapon", "armor", "special")
USABLE_CATEGORIES: tuple[ItemCategory, ...] = ("consumable", "item")

__all__ = [
    "ItemCategory",
    "EquipSlot",
    "UseKind",
    "ChoiceAction",
    "LoadMode",
    "ITEM_CATEGORIES",
    "EQUIP_SLOTS",
    "USABLE_CATEGORIES",
]
