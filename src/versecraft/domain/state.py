"""Session-scoped player state."""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Set

from versecraft.domain.inventory import Inventory
from versecraft.domain.resources import Progression, ResourcePool, Wallet


@dataclass(slots=True)
class PlayerState:
    """Everything a run mutates, plus a reference to the global progression."""

    resource: ResourcePool
    progression: Progression = field(default_factory=Progression)
    wallet: Wallet = field(default_factory=lambda: Wallet(name="Gold"))
    flags: Set[str] = field(default_factory=set)
    inventory: Inventory = field(default_factory=Inventory)

    def clone(self) -> "PlayerState":
        return copy.deepcopy(self)


@dataclass(slots=True)
class SessionState:
    """Active run: which story, which section, and the player state."""

    story_id: str
    section_id: str
    player: PlayerState
    saved_at: str | None = None
