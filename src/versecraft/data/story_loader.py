"""Parse raw story data into an immutable StoryDocument.

Hand-authored stories are loaded leniently: anything that can be defaulted is
defaulted and reported as a Diagnostic. Only a document with no usable
sections raises SchemaError.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Mapping

from versecraft.core.types import EQUIP_SLOTS, ITEM_CATEGORIES
from versecraft.data.errors import SchemaError
from versecraft.domain.defs import (
    MAX_ITEM_QTY,
    ChoiceDef,
    CurrencyDef,
    Diagnostic,
    EffectDef,
    ItemRef,
    ItemSpec,
    ModuleConfig,
    PrimaryResourceDef,
    RequirementDef,
    SectionDef,
    StoryDocument,
    UseDef,
)
from versecraft.domain.defs.story_def import (
    DEFAULT_FAILURE_SECTION_ID,
    DEFAULT_RESOURCE_MAX,
    DEFAULT_RESOURCE_MIN,
    DEFAULT_RESOURCE_NAME,
)

logger = logging.getLogger(__name__)

DESTINATION_KEYS: tuple[str, ...] = (
    "destination",
    "to",
    "next",
    "goto",
    "target",
    "nextSection",
    "nextSectionId",
    "sectionId",
)
_MENU_TARGETS = {"MENU", "MAIN_MENU"}
_ACTION_TARGETS = {"INVENTORY": "inventory", "CHARACTER": "character", "SAVE": "save", "LOAD": "load"}
_USE_KINDS = {"heal", "story"}


def load_story(raw: object, story_id: str | None = None) -> StoryDocument:
    """Build a StoryDocument from raw JSON-like data."""
    return StoryLoader().load(raw, story_id)


def humanize_id(item_id: str) -> str:
    """Turn 'rusty_dagger' into 'Rusty Dagger'."""
    return " ".join(part.capitalize() for part in item_id.replace("-", "_").split("_") if part)


class StoryLoader:
    """Single-use parser that accumulates diagnostics while it normalizes."""

    def __init__(self) -> None:
        self._diagnostics: List[Diagnostic] = []

    def load(self, raw: object, story_id: str | None = None) -> StoryDocument:
        if not isinstance(raw, Mapping):
            raise SchemaError("Story document must be an object.")
        doc_id = story_id or raw.get("id") or raw.get("storyId")
        if not isinstance(doc_id, str) or not doc_id:
            raise SchemaError("Story document has no id.")

        sections = self._parse_sections(raw.get("sections"))
        if not sections:
            raise SchemaError(f"Story '{doc_id}' has no usable sections.")
        start_section_id = self._resolve_start(raw.get("startSectionId"), sections)
        module = self._parse_module(raw.get("module"))

        document = StoryDocument(
            id=doc_id,
            start_section_id=start_section_id,
            sections=sections,
            module=module,
            title=self._optional_str(raw.get("title")) or "",
            subtitle=self._optional_str(raw.get("subtitle")) or "",
            diagnostics=tuple(self._diagnostics),
        )
        for diagnostic in document.diagnostics:
            logger.warning("story %s: [%s] %s (%s)", doc_id, diagnostic.code, diagnostic.message, diagnostic.path)
        return document

    # ------------------------------------------------------------------ Sections
    def _parse_sections(self, raw_sections: object) -> Dict[str, SectionDef]:
        entries: List[tuple[str | None, object, str]] = []
        if isinstance(raw_sections, list):
            entries = [(None, entry, f"sections[{index}]") for index, entry in enumerate(raw_sections)]
        elif isinstance(raw_sections, Mapping):
            entries = [(str(key), entry, f"sections.{key}") for key, entry in raw_sections.items()]
        elif raw_sections is not None:
            self._report("SECTIONS_SHAPE", "sections must be a list or an object.", "sections")

        sections: Dict[str, SectionDef] = {}
        for key, entry, path in entries:
            section = self._parse_section(entry, key, path)
            if section is None:
                continue
            if section.id in sections:
                self._report("DUPLICATE_SECTION", f"Duplicate section id '{section.id}'; keeping the first.", path)
                continue
            sections[section.id] = section
        return sections

    def _parse_section(self, raw: object, key: str | None, path: str) -> SectionDef | None:
        if not isinstance(raw, Mapping):
            self._report("SECTION_SHAPE", "Section must be an object.", path)
            return None
        raw_id = raw.get("id", key)
        if raw_id is None or str(raw_id) == "":
            self._report("SECTION_ID", "Section has no id.", path)
            return None
        section_id = str(raw_id)
        choices: List[ChoiceDef] = []
        raw_choices = raw.get("choices")
        if raw_choices is not None and not isinstance(raw_choices, list):
            self._report("CHOICES_SHAPE", "choices must be a list.", f"{path}.choices")
            raw_choices = None
        for index, entry in enumerate(raw_choices or []):
            choice = self._parse_choice(entry, f"{path}.choices[{index}]")
            if choice is not None:
                choices.append(choice)
        return SectionDef(
            id=section_id,
            text=self._parse_text(raw.get("text")),
            choices=tuple(choices),
            system_note=self._optional_str(raw.get("systemNote") or raw.get("system")),
        )

    @staticmethod
    def _parse_text(raw: object) -> str:
        if raw is None:
            return ""
        if isinstance(raw, list):
            return "\n\n".join(str(line) for line in raw)
        return str(raw)

    def _resolve_start(self, raw_start: object, sections: Mapping[str, SectionDef]) -> str:
        if raw_start is not None:
            start = str(raw_start)
            if start in sections:
                return start
            self._report("START_SECTION", f"startSectionId '{start}' does not exist.", "startSectionId")
        if "start" in sections:
            return "start"
        return next(iter(sections))

    # ------------------------------------------------------------------- Choices
    def _parse_choice(self, raw: object, path: str) -> ChoiceDef | None:
        if not isinstance(raw, Mapping):
            self._report("CHOICE_SHAPE", "Choice must be an object.", path)
            return None
        label = self._optional_str(raw.get("label")) or self._optional_str(raw.get("text")) or "Continue"
        destination = None
        for key in DESTINATION_KEYS:
            value = raw.get(key)
            if value is not None and str(value).strip():
                destination = str(value).strip()
                break

        to_menu = raw.get("toMenu") is True
        action = None
        if destination is not None:
            reserved = destination.upper()
            if reserved in _MENU_TARGETS:
                to_menu = True
                destination = None
            elif reserved in _ACTION_TARGETS:
                action = _ACTION_TARGETS[reserved]
                destination = None

        raw_effects = raw.get("effects")
        if isinstance(raw_effects, Mapping):
            raw_effects = [raw_effects]
        effects: List[EffectDef] = []
        if raw_effects is not None and not isinstance(raw_effects, list):
            self._report("EFFECTS_SHAPE", "effects must be an object or a list.", f"{path}.effects")
            raw_effects = None
        for index, entry in enumerate(raw_effects or []):
            effect = self._parse_effect(entry, f"{path}.effects[{index}]")
            if effect is not None:
                effects.append(effect)

        requires = None
        if raw.get("requires") is not None:
            requires = self._parse_requirement(raw.get("requires"), f"{path}.requires")

        return ChoiceDef(
            label=label,
            destination=destination,
            effects=tuple(effects),
            requires=requires,
            to_menu=to_menu,
            action=action,
        )

    def _parse_effect(self, raw: object, path: str) -> EffectDef | None:
        if not isinstance(raw, Mapping):
            self._report("EFFECT_SHAPE", "Effect must be an object.", path)
            return None
        add_item = None
        if raw.get("addItem") is not None:
            add_item = self._parse_item_spec(raw.get("addItem"), f"{path}.addItem")
        remove_item = None
        if raw.get("removeItem") is not None:
            remove_item = self._parse_item_ref(raw.get("removeItem"), f"{path}.removeItem")
        return EffectDef(
            resource_delta=self._int_field(raw, ("resourceDelta", "hpDelta"), path),
            experience_delta=self._int_field(raw, ("experienceDelta", "xpDelta"), path),
            currency_delta=self._int_field(raw, ("currencyDelta",), path),
            set_flags=self._flag_list(raw.get("setFlag"), f"{path}.setFlag"),
            clear_flags=self._flag_list(raw.get("clearFlag"), f"{path}.clearFlag"),
            add_item=add_item,
            remove_item=remove_item,
        )

    def _parse_requirement(self, raw: object, path: str) -> RequirementDef:
        """Parse a requires clause; a clause that cannot be read keeps the choice hidden."""
        if not isinstance(raw, Mapping):
            self._report("REQUIREMENT_SHAPE", "requires must be an object; the choice stays hidden.", path)
            return RequirementDef(unsatisfiable=True)
        reported = len(self._diagnostics)
        has_item = None
        if raw.get("hasItem") is not None:
            has_item = self._parse_item_ref(raw.get("hasItem"), f"{path}.hasItem")
        resource_at_least = None
        currency_at_least = None
        threshold = raw.get("resourceAtLeast")
        if isinstance(threshold, Mapping):
            resource_at_least = self._optional_int(threshold.get("primary"), f"{path}.resourceAtLeast.primary")
            currency_at_least = self._optional_int(threshold.get("currency"), f"{path}.resourceAtLeast.currency")
        elif threshold is not None:
            resource_at_least = self._optional_int(threshold, f"{path}.resourceAtLeast")
        return RequirementDef(
            flag=self._optional_str(raw.get("flag")),
            not_flag=self._optional_str(raw.get("notFlag")),
            has_item=has_item,
            resource_at_least=resource_at_least,
            currency_at_least=currency_at_least,
            unsatisfiable=len(self._diagnostics) > reported,
        )

    # --------------------------------------------------------------------- Items
    def _parse_item_spec(self, raw: object, path: str, default_category: str | None = None) -> ItemSpec | None:
        if not isinstance(raw, Mapping):
            self._report("ITEM_SHAPE", "Item must be an object.", path)
            return None
        item_id = self._optional_str(raw.get("id"))
        if not item_id:
            self._report("ITEM_ID", "Item has no id.", path)
            return None
        category = raw.get("category", default_category)
        if category not in ITEM_CATEGORIES:
            if default_category is None:
                self._report("ITEM_CATEGORY", f"Unknown item category '{category}'.", path)
                return None
            self._report("ITEM_CATEGORY", f"Unknown item category '{category}'; using '{default_category}'.", path)
            category = default_category
        qty = self._optional_int(raw.get("qty"), f"{path}.qty")
        if qty is None:
            qty = 1
        elif qty < 1:
            self._report("ITEM_QTY", "qty must be positive; using 1.", f"{path}.qty")
            qty = 1
        equip_slot = raw.get("equipSlot")
        if equip_slot is not None and equip_slot not in EQUIP_SLOTS:
            self._report("ITEM_SLOT", f"Unknown equip slot '{equip_slot}'.", f"{path}.equipSlot")
            equip_slot = None
        return ItemSpec(
            id=item_id,
            name=self._optional_str(raw.get("name")) or self._optional_str(raw.get("title")) or humanize_id(item_id),
            category=category,
            qty=min(qty, MAX_ITEM_QTY),
            value=self._optional_int(raw.get("value"), f"{path}.value") or 0,
            use=self._parse_use(raw.get("use"), f"{path}.use"),
            equip_slot=equip_slot,
        )

    def _parse_use(self, raw: object, path: str) -> UseDef | None:
        if raw is None:
            return None
        if not isinstance(raw, Mapping) or raw.get("kind") not in _USE_KINDS:
            self._report("ITEM_USE", "use must be an object with kind 'heal' or 'story'.", path)
            return None
        return UseDef(
            kind=raw["kind"],
            amount=self._optional_int(raw.get("amount"), f"{path}.amount") or 0,
            tag=self._optional_str(raw.get("tag")),
        )

    def _parse_item_ref(self, raw: object, path: str) -> ItemRef | None:
        if not isinstance(raw, Mapping):
            self._report("ITEM_REF", "Item reference must be an object.", path)
            return None
        item_id = self._optional_str(raw.get("id"))
        category = raw.get("category")
        if not item_id or category not in ITEM_CATEGORIES:
            self._report("ITEM_REF", "Item reference needs an id and a known category.", path)
            return None
        qty = self._optional_int(raw.get("qty"), f"{path}.qty")
        return ItemRef(category=category, id=item_id, qty=1 if qty is None else qty)

    # -------------------------------------------------------------------- Module
    def _parse_module(self, raw: object) -> ModuleConfig:
        if raw is None:
            return ModuleConfig()
        if not isinstance(raw, Mapping):
            self._report("MODULE_SHAPE", "module must be an object; using defaults.", "module")
            return ModuleConfig()
        loadout = {}
        raw_loadout = raw.get("loadout")
        if isinstance(raw_loadout, Mapping):
            for slot, entry in raw_loadout.items():
                if entry is None:
                    continue
                if slot not in EQUIP_SLOTS:
                    self._report("LOADOUT_SLOT", f"Unknown loadout slot '{slot}'.", f"module.loadout.{slot}")
                    continue
                spec = self._parse_item_spec(entry, f"module.loadout.{slot}", default_category=slot)
                if spec is not None:
                    loadout[slot] = spec
        elif raw_loadout is not None:
            self._report("LOADOUT_SHAPE", "loadout must be an object.", "module.loadout")

        starting_items: List[ItemSpec] = []
        raw_items = raw.get("startingItems")
        if isinstance(raw_items, list):
            for index, entry in enumerate(raw_items):
                spec = self._parse_item_spec(entry, f"module.startingItems[{index}]")
                if spec is not None:
                    starting_items.append(spec)
        elif raw_items is not None:
            self._report("STARTING_ITEMS_SHAPE", "startingItems must be a list.", "module.startingItems")

        return ModuleConfig(
            primary_resource=self._parse_primary_resource(raw.get("primaryResource")),
            loadout=loadout,
            currency=self._parse_currency(raw.get("currency")),
            starting_items=tuple(starting_items),
        )

    def _parse_primary_resource(self, raw: object) -> PrimaryResourceDef:
        path = "module.primaryResource"
        if raw is None:
            return PrimaryResourceDef()
        if not isinstance(raw, Mapping):
            self._report("RESOURCE_SHAPE", "primaryResource must be an object; using defaults.", path)
            return PrimaryResourceDef()
        low = self._optional_int(raw.get("min"), f"{path}.min")
        high = self._optional_int(raw.get("max"), f"{path}.max")
        low = DEFAULT_RESOURCE_MIN if low is None else low
        high = DEFAULT_RESOURCE_MAX if high is None else high
        if high <= low:
            self._report(
                "RESOURCE_BOUNDS",
                f"max ({high}) must exceed min ({low}); using {DEFAULT_RESOURCE_MIN}..{DEFAULT_RESOURCE_MAX}.",
                path,
            )
            low, high = DEFAULT_RESOURCE_MIN, DEFAULT_RESOURCE_MAX
        failure_id = raw.get("failureSectionId", DEFAULT_FAILURE_SECTION_ID)
        if not isinstance(failure_id, str) or not failure_id.strip():
            self._report(
                "FAILURE_SECTION",
                f"failureSectionId must be a non-empty string; using '{DEFAULT_FAILURE_SECTION_ID}'.",
                f"{path}.failureSectionId",
            )
            failure_id = DEFAULT_FAILURE_SECTION_ID
        return PrimaryResourceDef(
            name=self._optional_str(raw.get("name")) or DEFAULT_RESOURCE_NAME,
            min=low,
            max=high,
            start_at=self._optional_int(raw.get("startAt"), f"{path}.startAt"),
            failure_section_id=failure_id.strip(),
        )

    def _parse_currency(self, raw: object) -> CurrencyDef:
        if raw is None:
            return CurrencyDef()
        if not isinstance(raw, Mapping):
            self._report("CURRENCY_SHAPE", "currency must be an object; using defaults.", "module.currency")
            return CurrencyDef()
        default = CurrencyDef()
        start_at = self._optional_int(raw.get("startAt"), "module.currency.startAt")
        return CurrencyDef(
            name=self._optional_str(raw.get("name")) or default.name,
            start_at=default.start_at if start_at is None else start_at,
        )

    # ------------------------------------------------------------------- Helpers
    def _report(self, code: str, message: str, path: str) -> None:
        self._diagnostics.append(Diagnostic(code=code, message=message, path=path))

    def _int_field(self, raw: Mapping[str, object], keys: tuple[str, ...], path: str) -> int:
        for key in keys:
            if key in raw:
                return self._optional_int(raw[key], f"{path}.{key}") or 0
        return 0

    def _optional_int(self, value: object, path: str) -> int | None:
        if value is None:
            return None
        if isinstance(value, bool):
            self._report("NOT_A_NUMBER", "Expected a number, got a boolean.", path)
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        self._report("NOT_A_NUMBER", f"Expected an integer, got {value!r}.", path)
        return None

    def _flag_list(self, value: object, path: str) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,) if value else ()
        if isinstance(value, list) and all(isinstance(entry, str) for entry in value):
            return tuple(entry for entry in value if entry)
        self._report("FLAG_SHAPE", "Flags must be a string or a list of strings.", path)
        return ()

    @staticmethod
    def _optional_str(value: object) -> str | None:
        if value is None:
            return None
        if isinstance(value, str):
            return value
        return str(value)
