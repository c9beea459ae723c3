"""Story definition structures used by the runtime."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Mapping

from versecraft.core.types import ChoiceAction, EquipSlot

from .effect_def import EffectDef, RequirementDef
from .item_def import ItemSpec

DEFAULT_RESOURCE_NAME = "HP"
DEFAULT_RESOURCE_MIN = 0
DEFAULT_RESOURCE_MAX = 15
DEFAULT_FAILURE_SECTION_ID = "DEATH"
DEFAULT_CURRENCY_NAME = "Gold"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """Non-fatal problem found while loading a story."""

    code: str
    message: str
    path: str


@dataclass(frozen=True, slots=True)
class PrimaryResourceDef:
    """Bounds and starting value for the story's survival meter."""

    name: str = DEFAULT_RESOURCE_NAME
    min: int = DEFAULT_RESOURCE_MIN
    max: int = DEFAULT_RESOURCE_MAX
    start_at: int | None = None
    failure_section_id: str = DEFAULT_FAILURE_SECTION_ID


@dataclass(frozen=True, slots=True)
class CurrencyDef:
    name: str = DEFAULT_CURRENCY_NAME
    start_at: int = 0


@dataclass(frozen=True, slots=True)
class ModuleConfig:
    """Per-story rules: resource bounds and the starting kit."""

    primary_resource: PrimaryResourceDef = field(default_factory=PrimaryResourceDef)
    loadout: Dict[EquipSlot, ItemSpec] = field(default_factory=dict)
    currency: CurrencyDef = field(default_factory=CurrencyDef)
    starting_items: tuple[ItemSpec, ...] = ()


@dataclass(frozen=True, slots=True)
class ChoiceDef:
    """Represents a selectable choice on a story section."""

    label: str
    destination: str | None = None
    effects: tuple[EffectDef, ...] = ()
    requires: RequirementDef | None = None
    to_menu: bool = False
    action: ChoiceAction | None = None


@dataclass(frozen=True, slots=True)
class SectionDef:
    """Fully parsed story section."""

    id: str
    text: str
    choices: tuple[ChoiceDef, ...] = ()
    system_note: str | None = None

    @property
    def is_terminal(self) -> bool:
        return not self.choices


@dataclass(frozen=True, slots=True)
class StoryDocument:
    """Immutable, normalized story."""

    id: str
    start_section_id: str
    sections: Mapping[str, SectionDef]
    module: ModuleConfig = field(default_factory=ModuleConfig)
    title: str = ""
    subtitle: str = ""
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def failure_section_id(self) -> str:
        return self.module.primary_resource.failure_section_id

    def get_section(self, section_id: str) -> SectionDef | None:
        return self.sections.get(section_id)
