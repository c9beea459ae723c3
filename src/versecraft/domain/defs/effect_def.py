"""Effect and requirement definition primitives."""
from __future__ import annotations

from dataclasses import dataclass

from .item_def import ItemRef, ItemSpec


@dataclass(frozen=True, slots=True)
class EffectDef:
    """Declarative state change attached to a choice."""

    resource_delta: int = 0
    experience_delta: int = 0
    currency_delta: int = 0
    set_flags: tuple[str, ...] = ()
    clear_flags: tuple[str, ...] = ()
    add_item: ItemSpec | None = None
    remove_item: ItemRef | None = None


@dataclass(frozen=True, slots=True)
class RequirementDef:
    """Conditions that must all hold for a choice to be shown."""

    flag: str | None = None
    not_flag: str | None = None
    has_item: ItemRef | None = None
    resource_at_least: int | None = None
    currency_at_least: int | None = None
    unsatisfiable: bool = False
