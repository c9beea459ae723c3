from versecraft.domain.defs import ChoiceDef, EffectDef, ItemRef, ItemSpec, RequirementDef, SectionDef
from versecraft.domain.state import SessionState
from versecraft.services.choice_gate import is_visible, requirement_met, visible_choices
from versecraft.services.effect_engine import apply_effect
from versecraft.services.navigation_service import NavigationService
from tests.helpers.story_builders import make_player, make_story


def test_gated_choice_becomes_visible_after_flag_set() -> None:
    player = make_player()
    choice = ChoiceDef(label="Token", destination="bridge", requires=RequirementDef(flag="metGuard"))

    assert not is_visible(choice, player)

    apply_effect(EffectDef(set_flags=("metGuard",)), player)

    assert is_visible(choice, player)


def test_no_requirement_is_always_visible() -> None:
    assert requirement_met(None, make_player())


def test_not_flag_hides_choice() -> None:
    assert not requirement_met(RequirementDef(not_flag="angry"), make_player(flags=["angry"]))


def test_has_item_needs_positive_row() -> None:
    player = make_player()
    requires = RequirementDef(has_item=ItemRef(category="weapon", id="sword"))

    assert not requirement_met(requires, player)
    player.inventory.add(ItemSpec(id="sword", name="Sword", category="weapon"))
    assert requirement_met(requires, player)


def test_resource_and_currency_thresholds() -> None:
    player = make_player(cur=4)
    player.wallet.amount = 2

    assert requirement_met(RequirementDef(resource_at_least=4), player)
    assert not requirement_met(RequirementDef(resource_at_least=5), player)
    assert not requirement_met(RequirementDef(currency_at_least=3), player)


def test_clauses_combine_with_and() -> None:
    player = make_player(cur=8, flags=["a"])

    assert not requirement_met(RequirementDef(flag="a", resource_at_least=9), player)
    assert requirement_met(RequirementDef(flag="a", resource_at_least=8), player)


def test_visible_choices_keep_declared_index() -> None:
    section = SectionDef(
        id="s",
        text="",
        choices=(
            ChoiceDef(label="Hidden", requires=RequirementDef(flag="never")),
            ChoiceDef(label="Shown"),
        ),
    )

    assert [(index, choice.label) for index, choice in visible_choices(section, make_player())] == [(1, "Shown")]


def test_unsatisfiable_requirement_hides_choice() -> None:
    player = make_player(flags=["metGuard"])

    assert not requirement_met(RequirementDef(flag="metGuard", unsatisfiable=True), player)


def test_choice_with_malformed_item_requirement_is_hidden() -> None:
    story = make_story(
        [
            {
                "id": "start",
                "choices": [
                    {"label": "Unlock vault", "to": "vault", "requires": {"hasItem": {"id": "vault_key"}}},
                    {"label": "Leave", "to": "vault"},
                ],
            },
            {"id": "vault"},
        ]
    )
    player = make_player()
    player.inventory.add(ItemSpec(id="vault_key", name="Vault Key", category="special"))
    session = SessionState(story_id=story.id, section_id="start", player=player)

    assert NavigationService(story).get_current_view(session).choices == ["Leave"]
