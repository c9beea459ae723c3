"""Static story graph validation utilities."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Set

from versecraft.domain.defs import StoryDocument

Severity = str


@dataclass(frozen=True, slots=True)
class Issue:
    severity: Severity
    code: str
    message: str
    context: dict[str, str]


def format_issue(issue: Issue) -> str:
    context = " ".join(f"{key}={value}" for key, value in issue.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{issue.severity}] {issue.code}: {issue.message}{suffix}"


def validate_story(story: StoryDocument) -> list[Issue]:
    """Report authoring problems that loading alone does not catch.

    Load diagnostics are included as WARN issues so one report covers both.
    """
    issues: list[Issue] = [
        Issue(
            severity="WARN",
            code=diagnostic.code,
            message=diagnostic.message,
            context={"path": diagnostic.path},
        )
        for diagnostic in story.diagnostics
    ]
    known_ids = set(story.sections) | {story.failure_section_id}
    edges: Dict[str, List[str]] = {}
    for section_id, section in story.sections.items():
        targets: List[str] = []
        for index, choice in enumerate(section.choices):
            context = {"section_id": section_id, "choice": str(index)}
            if choice.destination is not None:
                targets.append(choice.destination)
                if choice.destination not in known_ids:
                    issues.append(
                        Issue(
                            severity="ERROR",
                            code="MISSING_SECTION_REF",
                            message=f"Choice points at missing section '{choice.destination}'.",
                            context=context,
                        )
                    )
            elif not choice.to_menu and choice.action is None:
                issues.append(
                    Issue(
                        severity="WARN",
                        code="NO_DESTINATION",
                        message="Choice has no destination and will leave the player in place.",
                        context=context,
                    )
                )
            if any(effect.resource_delta < 0 for effect in choice.effects):
                targets.append(story.failure_section_id)
        edges[section_id] = targets

    if story.failure_section_id not in story.sections:
        issues.append(
            Issue(
                severity="INFO",
                code="SYNTHETIC_FAILURE_SECTION",
                message="No failure section authored; a default one will be used.",
                context={"section_id": story.failure_section_id},
            )
        )

    reachable = _reachable_from(story.start_section_id, edges)
    for section_id in story.sections:
        if section_id not in reachable and section_id != story.failure_section_id:
            issues.append(
                Issue(
                    severity="WARN",
                    code="UNREACHABLE_SECTION",
                    message="Section cannot be reached from the start section.",
                    context={"section_id": section_id},
                )
            )
    return issues


def _reachable_from(start: str, edges: Dict[str, List[str]]) -> Set[str]:
    seen: Set[str] = set()
    stack = [start]
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        stack.extend(target for target in edges.get(current, []) if target not in seen)
    return seen
