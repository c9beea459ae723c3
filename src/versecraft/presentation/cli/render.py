"""Shared CLI rendering helpers."""
from __future__ import annotations

import os
import textwrap
from typing import Iterable, Sequence

from versecraft.services.navigation_service import PlayerSnapshot, SectionView

_TEXT_WIDTH = 72


def debug_enabled() -> bool:
    """Return True only when VERSECRAFT_DEBUG is explicitly set to '1'."""
    return os.getenv("VERSECRAFT_DEBUG") == "1"


def wrap_paragraphs(text: str, width: int = _TEXT_WIDTH) -> list[str]:
    """Wrap each paragraph on word boundaries, keeping blank lines between them."""
    lines: list[str] = []
    for index, paragraph in enumerate(text.split("\n\n")):
        if index:
            lines.append("")
        lines.extend(
            textwrap.wrap(paragraph, width=width, break_long_words=False, break_on_hyphens=False) or [""]
        )
    return lines


def format_bar(label: str, current: int, maximum: int, width: int = 20) -> str:
    filled = 0 if maximum <= 0 else round(width * max(0, current) / maximum)
    filled = max(0, min(width, filled))
    return f"{label:<6}[{'#' * filled}{'.' * (width - filled)}] {current} / {maximum}"


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def render_hud(title: str, player: PlayerSnapshot) -> None:
    render_heading(title)
    print(format_bar(player.resource_name, player.resource, player.resource_max))
    print(format_bar("XP", player.xp, player.xp_max))
    print(f"LVL {player.level}   {player.currency_name} {player.currency}")


def render_section(view: SectionView) -> None:
    """Render section text, the optional system note and the visible choices."""
    if debug_enabled():
        print(f"[{view.section_id}]")
    for line in wrap_paragraphs(view.text):
        print(line)
    if view.system_note:
        print()
        print(f"({view.system_note})")
    render_choices(view.choices)


def render_choices(choices: Sequence[str]) -> None:
    """Display numbered story choices."""
    if not choices:
        return
    render_heading("Choices")
    for idx, label in enumerate(choices, start=1):
        print(f"{idx}. {label}")


def render_menu(title: str, options: Sequence[str]) -> None:
    """Display a menu section with numbered options."""
    render_heading(title)
    for idx, label in enumerate(options, start=1):
        print(f"{idx}. {label}")


def render_bullet_lines(lines: Iterable[str]) -> None:
    """Print bullet-prefixed lines."""
    for line in lines:
        print(f"- {line}")
