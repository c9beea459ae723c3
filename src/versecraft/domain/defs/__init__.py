"""Domain definition exports."""

from .effect_def import EffectDef, RequirementDef
from .item_def import MAX_ITEM_QTY, ItemRef, ItemSpec, UseDef
from .manifest_def import StoryManifest, StoryManifestEntry
from .story_def import (
    ChoiceDef,
    CurrencyDef,
    Diagnostic,
    ModuleConfig,
    PrimaryResourceDef,
    SectionDef,
    StoryDocument,
)

__all__ = [
    "ChoiceDef",
    "CurrencyDef",
    "Diagnostic",
    "EffectDef",
    "ItemRef",
    "ItemSpec",
    "MAX_ITEM_QTY",
    "ModuleConfig",
    "PrimaryResourceDef",
    "RequirementDef",
    "SectionDef",
    "StoryDocument",
    "StoryManifest",
    "StoryManifestEntry",
    "UseDef",
]
