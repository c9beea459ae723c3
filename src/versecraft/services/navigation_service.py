"""Story progression: choice transitions and the failure section."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List

from versecraft.core.types import EQUIP_SLOTS
from versecraft.domain.defs import ChoiceDef, SectionDef, StoryDocument
from versecraft.domain.state import PlayerState, SessionState
from versecraft.services.choice_gate import visible_choices
from versecraft.services.effect_engine import EffectOutcome, apply_effects
from versecraft.services.errors import MissingSectionError

logger = logging.getLogger(__name__)

RETURN_TO_MENU_LABEL = "Return to the main menu"


@dataclass(frozen=True, slots=True)
class PlayerSnapshot:
    """Read-only copy of the numbers a front end needs to draw a HUD."""

    resource_name: str
    resource: int
    resource_min: int
    resource_max: int
    xp: int
    xp_max: int
    level: int
    currency_name: str
    currency: int
    flags: FrozenSet[str]
    loadout: Dict[str, str]

    @classmethod
    def of(cls, player: PlayerState) -> "PlayerSnapshot":
        return cls(
            resource_name=player.resource.name,
            resource=player.resource.cur,
            resource_min=player.resource.min,
            resource_max=player.resource.max,
            xp=player.progression.xp,
            xp_max=player.progression.xp_max,
            level=player.progression.level,
            currency_name=player.wallet.name,
            currency=player.wallet.amount,
            flags=frozenset(player.flags),
            loadout={slot: player.inventory.equipped_name(slot) for slot in EQUIP_SLOTS},
        )


@dataclass(slots=True)
class SectionView:
    """Data returned to the presentation layer for rendering."""

    section_id: str
    text: str
    choices: List[str]
    player: PlayerSnapshot
    system_note: str | None = None

    @property
    def is_terminal(self) -> bool:
        return not self.choices


@dataclass(frozen=True, slots=True)
class NavigationWarning:
    code: str
    message: str


@dataclass(slots=True)
class ChoiceResult:
    """Result returned after applying a choice."""

    outcome: EffectOutcome = field(default_factory=EffectOutcome)
    node_view: SectionView | None = None
    returned_to_menu: bool = False
    action: str | None = None
    exhausted: bool = False
    warnings: List[NavigationWarning] = field(default_factory=list)


class NavigationService:
    """Drives a session through one story's section graph."""

    def __init__(self, story: StoryDocument) -> None:
        self._story = story
        self._failure_section = self._build_failure_section(story)

    @property
    def story(self) -> StoryDocument:
        return self._story

    def resolve_section(self, section_id: str) -> SectionDef | None:
        """Look a section up, falling back to the synthetic failure section."""
        section = self._story.get_section(section_id)
        if section is None and section_id == self._story.failure_section_id:
            return self._failure_section
        return section

    def current_section(self, session: SessionState) -> SectionDef:
        section = self.resolve_section(session.section_id)
        if section is None:
            raise MissingSectionError(self._story.id, session.section_id)
        return section

    def get_current_view(self, session: SessionState) -> SectionView:
        """Return the view model for the currently active section."""
        section = self.current_section(session)
        return SectionView(
            section_id=section.id,
            text=section.text,
            choices=[choice.label for _, choice in visible_choices(section, session.player)],
            player=PlayerSnapshot.of(session.player),
            system_note=section.system_note,
        )

    def choose(self, session: SessionState, choice_index: int) -> ChoiceResult:
        """Apply the selected visible choice and advance the session.

        The player state is only replaced once the destination is known to
        exist, so a MissingSectionError leaves the session exactly as it was.
        """
        section = self.current_section(session)
        visible = visible_choices(section, session.player)
        if not visible:
            raise ValueError(f"Section '{section.id}' has no choices to select.")
        if not 0 <= choice_index < len(visible):
            raise IndexError(f"Choice index {choice_index} is invalid for section '{section.id}'.")
        _, choice = visible[choice_index]

        if choice.to_menu:
            return ChoiceResult(returned_to_menu=True)

        working = session.player.clone()
        outcome = apply_effects(choice.effects, working)
        result = ChoiceResult(outcome=outcome, action=choice.action)
        destination = self._resolve_destination(section, choice, working, result)

        if self.resolve_section(destination) is None:
            raise MissingSectionError(self._story.id, destination)

        session.player = working
        session.section_id = destination
        result.node_view = self.get_current_view(session)
        return result

    def _resolve_destination(
        self,
        section: SectionDef,
        choice: ChoiceDef,
        player: PlayerState,
        result: ChoiceResult,
    ) -> str:
        if player.resource.is_exhausted():
            result.exhausted = True
            logger.info("%s exhausted in story %s; moving to failure section", player.resource.name, self._story.id)
            return self._story.failure_section_id
        if choice.action is not None:
            return section.id
        if choice.destination is not None:
            return choice.destination
        warning = NavigationWarning(
            code="NO_DESTINATION",
            message=f"Choice '{choice.label}' in section '{section.id}' has no destination.",
        )
        logger.warning(warning.message)
        result.warnings.append(warning)
        return section.id

    @staticmethod
    def _build_failure_section(story: StoryDocument) -> SectionDef:
        resource_name = story.module.primary_resource.name
        return SectionDef(
            id=story.failure_section_id,
            text=f"Your {resource_name} is spent. Darkness closes in, and this path ends here.",
            choices=(ChoiceDef(label=RETURN_TO_MENU_LABEL, to_menu=True),),
        )
