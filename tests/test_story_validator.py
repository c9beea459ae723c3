from versecraft.data.story_loader import load_story
from versecraft.data.story_source import FileStorySource
from versecraft.services.story_validator import format_issue, validate_story
from tests.helpers.story_builders import make_story


def _codes(issues) -> list[str]:
    return [issue.code for issue in issues]


def test_missing_reference_is_an_error() -> None:
    story = make_story([{"id": "start", "choices": [{"to": "ghost"}]}])

    issues = validate_story(story)
    error = next(issue for issue in issues if issue.code == "MISSING_SECTION_REF")

    assert error.severity == "ERROR"
    assert format_issue(error) == "[ERROR] MISSING_SECTION_REF: Choice points at missing section 'ghost'. (section_id=start choice=0)"


def test_no_destination_and_unreachable_sections_warn() -> None:
    story = make_story([{"id": "start", "choices": [{"label": "Stay"}]}, {"id": "island"}])

    codes = _codes(validate_story(story))

    assert "NO_DESTINATION" in codes
    assert "UNREACHABLE_SECTION" in codes


def test_failure_section_reached_through_damage() -> None:
    story = make_story(
        [
            {"id": "start", "choices": [{"to": "start", "effects": {"hpDelta": -1}}]},
            {"id": "DEATH", "choices": [{"to": "epilogue"}]},
            {"id": "epilogue"},
        ]
    )

    codes = _codes(validate_story(story))

    assert "UNREACHABLE_SECTION" not in codes
    assert "SYNTHETIC_FAILURE_SECTION" not in codes


def test_synthetic_failure_section_is_info() -> None:
    issues = validate_story(make_story([{"id": "start"}]))

    assert [(issue.severity, issue.code) for issue in issues] == [("INFO", "SYNTHETIC_FAILURE_SECTION")]


def test_load_diagnostics_are_included() -> None:
    story = make_story([{"id": "start", "choices": [{"to": "start", "effects": {"hpDelta": "lots"}}]}])

    issues = validate_story(story)

    assert any(issue.code == "NOT_A_NUMBER" and issue.severity == "WARN" for issue in issues)


def test_bundled_stories_have_no_errors() -> None:
    source = FileStorySource()
    for entry in source.fetch_story_manifest().stories:
        story = load_story(source.fetch_story_document(entry.file), story_id=entry.id)
        issues = validate_story(story)
        assert not story.diagnostics, entry.id
        assert [format_issue(issue) for issue in issues if issue.severity != "INFO"] == []
