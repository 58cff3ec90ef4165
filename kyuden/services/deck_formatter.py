"""
Deck list formatter.

Renders a Deck in the plain-text deck list format read by
``kyuden.services.deck_importer``:

    # Stronghold
    1 Midday Shadow Court

    # Dynasty
    # Personalities (3)
    3 Shosuro Kameyoi

    # Fate
    # Strategies (2)
    2 Ambush

Sections with no cards are left out.
"""

from __future__ import annotations

from kyuden.models.deck import Deck, DeckEntry
from kyuden.services.deck_service import group_by_category


def export_deck(deck: Deck) -> str:
    """
    Format a deck as deck list text.

    Args:
        deck: Deck to export

    Returns:
        Deck list text ending in a newline, or "" for an empty deck
    """
    sections = group_by_category(deck)
    blocks: list[list[str]] = []

    if sections.stronghold:
        blocks.append(["# Stronghold", *(_format_card_line(e) for e in sections.stronghold)])

    if sections.sensei:
        blocks.append(["# Sensei", *(_format_card_line(e) for e in sections.sensei)])

    for heading, groups in (("Dynasty", sections.dynasty), ("Fate", sections.fate)):
        lines: list[str] = []
        for label, entries in groups.items():
            if not entries:
                continue
            lines.append(f"# {label} ({sum(e.quantity for e in entries)})")
            lines.extend(_format_card_line(e) for e in entries)
        if lines:
            blocks.append([f"# {heading}", *lines])

    if not blocks:
        return ""

    return "\n\n".join("\n".join(block) for block in blocks) + "\n"


def _format_card_line(entry: DeckEntry) -> str:
    """Format a single card line."""
    return f"{entry.quantity} {entry.card.name}"
