import pytest

from versecraft.data.errors import SchemaError
from versecraft.data.story_loader import humanize_id, load_story


def _codes(document) -> set[str]:
    return {diagnostic.code for diagnostic in document.diagnostics}


def test_list_and_map_sections_normalize_to_the_same_shape() -> None:
    as_list = load_story({"id": "s", "sections": [{"id": "start", "text": "Hi", "choices": [{"to": "end"}]}, {"id": "end"}]})
    as_map = load_story({"id": "s", "sections": {"start": {"text": "Hi", "choices": [{"next": "end"}]}, "end": {}}})

    assert list(as_list.sections) == list(as_map.sections) == ["start", "end"]
    assert as_list.sections["start"].choices[0].destination == "end"
    assert as_map.sections["start"].choices[0].destination == "end"
    assert as_list.sections["start"].choices[0].label == "Continue"


@pytest.mark.parametrize("key", ["destination", "to", "next", "goto", "target", "nextSection", "nextSectionId", "sectionId"])
def test_destination_aliases(key: str) -> None:
    story = load_story({"id": "s", "sections": [{"id": "start", "choices": [{"label": "Go", key: "end"}]}, {"id": "end"}]})

    assert story.sections["start"].choices[0].destination == "end"


def test_reserved_targets_become_menu_or_action_choices() -> None:
    story = load_story(
        {
            "id": "s",
            "sections": [
                {
                    "id": "start",
                    "choices": [
                        {"label": "Menu", "to": "MAIN_MENU"},
                        {"label": "Bag", "to": "inventory"},
                        {"label": "Save", "to": "SAVE"},
                    ],
                }
            ],
        }
    )
    menu, bag, save = story.sections["start"].choices

    assert menu.to_menu and menu.destination is None
    assert bag.action == "inventory" and bag.destination is None
    assert save.action == "save"


def test_text_lines_are_joined_into_paragraphs() -> None:
    story = load_story({"id": "s", "sections": [{"id": "start", "text": ["One.", "Two."], "system": "Note"}]})

    assert story.sections["start"].text == "One.\n\nTwo."
    assert story.sections["start"].system_note == "Note"


def test_start_section_falls_back_to_start_then_first() -> None:
    explicit = load_story({"id": "s", "startSectionId": "b", "sections": [{"id": "a"}, {"id": "b"}]})
    named = load_story({"id": "s", "sections": [{"id": "a"}, {"id": "start"}]})
    first = load_story({"id": "s", "startSectionId": "zzz", "sections": [{"id": "a"}, {"id": "b"}]})

    assert explicit.start_section_id == "b"
    assert named.start_section_id == "start"
    assert first.start_section_id == "a"
    assert "START_SECTION" in _codes(first)


def test_invalid_resource_bounds_degrade_to_defaults_with_diagnostic() -> None:
    story = load_story(
        {
            "id": "s",
            "module": {"primaryResource": {"min": 5, "max": 5, "failureSectionId": ""}},
            "sections": [{"id": "start"}],
        }
    )
    resource = story.module.primary_resource

    assert (resource.min, resource.max) == (0, 15)
    assert resource.failure_section_id == "DEATH"
    assert {"RESOURCE_BOUNDS", "FAILURE_SECTION"} <= _codes(story)


def test_loadout_with_bad_category_defaults_to_slot_category() -> None:
    story = load_story(
        {
            "id": "s",
            "module": {"loadout": {"weapon": {"id": "rusty_dagger", "category": "potion"}, "hat": {"id": "cap"}}},
            "sections": [{"id": "start"}],
        }
    )
    spec = story.module.loadout["weapon"]

    assert spec.category == "weapon"
    assert spec.name == "Rusty Dagger"
    assert "hat" not in story.module.loadout
    assert {"ITEM_CATEGORY", "LOADOUT_SLOT"} <= _codes(story)


def test_effect_fields_and_aliases() -> None:
    story = load_story(
        {
            "id": "s",
            "sections": [
                {
                    "id": "start",
                    "choices": [
                        {
                            "to": "start",
                            "effects": {
                                "hpDelta": "-2",
                                "xpDelta": 5.0,
                                "currencyDelta": 3,
                                "setFlag": ["a", "b"],
                                "clearFlag": "c",
                                "addItem": {"id": "tonic", "category": "consumable", "use": {"kind": "heal", "amount": 4}},
                                "removeItem": {"id": "key", "category": "item"},
                            },
                        }
                    ],
                }
            ],
        }
    )
    effect = story.sections["start"].choices[0].effects[0]

    assert effect.resource_delta == -2
    assert effect.experience_delta == 5
    assert effect.currency_delta == 3
    assert effect.set_flags == ("a", "b")
    assert effect.clear_flags == ("c",)
    assert effect.add_item is not None and effect.add_item.use is not None
    assert effect.add_item.use.amount == 4
    assert effect.remove_item is not None and effect.remove_item.qty == 1


def test_requirement_resource_threshold_shapes() -> None:
    story = load_story(
        {
            "id": "s",
            "sections": [
                {
                    "id": "start",
                    "choices": [
                        {"to": "start", "requires": {"resourceAtLeast": 4}},
                        {"to": "start", "requires": {"resourceAtLeast": {"currency": 7}, "notFlag": "x"}},
                    ],
                }
            ],
        }
    )
    first, second = story.sections["start"].choices

    assert first.requires is not None and first.requires.resource_at_least == 4
    assert second.requires is not None and second.requires.currency_at_least == 7
    assert second.requires.not_flag == "x"


def test_duplicate_sections_keep_the_first() -> None:
    story = load_story({"id": "s", "sections": [{"id": "start", "text": "first"}, {"id": "start", "text": "second"}]})

    assert story.sections["start"].text == "first"
    assert "DUPLICATE_SECTION" in _codes(story)


def test_boolean_numbers_are_rejected() -> None:
    story = load_story({"id": "s", "sections": [{"id": "start", "choices": [{"to": "start", "effects": {"hpDelta": True}}]}]})

    assert story.sections["start"].choices[0].effects[0].resource_delta == 0
    assert "NOT_A_NUMBER" in _codes(story)


def test_diagnostics_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING", logger="versecraft.data.story_loader"):
        load_story({"id": "s", "sections": [{"id": "start", "choices": "nope"}]})

    assert "CHOICES_SHAPE" in caplog.text


@pytest.mark.parametrize(
    "raw",
    [
        ["not", "a", "mapping"],
        {"sections": [{"id": "start"}]},
        {"id": "s", "sections": []},
        {"id": "s", "sections": [{"text": "no id"}]},
    ],
)
def test_fatal_documents_raise_schema_error(raw: object) -> None:
    with pytest.raises(SchemaError):
        load_story(raw)


def test_story_id_argument_overrides_document_id() -> None:
    story = load_story({"id": "inner", "sections": [{"id": "start"}]}, story_id="listed")

    assert story.id == "listed"


def test_humanize_id() -> None:
    assert humanize_id("old-iron_key") == "Old Iron Key"


@pytest.mark.parametrize(
    ("requires", "code"),
    [
        ({"hasItem": {"id": "vault_key"}}, "ITEM_REF"),
        ({"flag": "metGuard", "hasItem": "vault_key"}, "ITEM_REF"),
        ("metGuard", "REQUIREMENT_SHAPE"),
    ],
)
def test_unreadable_requirement_is_never_satisfied(requires, code: str) -> None:
    story = load_story({"id": "s", "sections": [{"id": "start", "choices": [{"label": "Unlock vault", "to": "end", "requires": requires}]}, {"id": "end"}]})

    assert story.sections["start"].choices[0].requires.unsatisfiable
    assert code in _codes(story)


def test_readable_requirement_stays_satisfiable() -> None:
    story = load_story({"id": "s", "sections": [{"id": "start", "choices": [{"to": "end", "requires": {"hasItem": {"id": "vault_key", "category": "special"}}}]}, {"id": "end"}]})

    requires = story.sections["start"].choices[0].requires
    assert not requires.unsatisfiable
    assert requires.has_item.id == "vault_key"
