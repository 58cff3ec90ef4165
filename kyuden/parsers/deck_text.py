"""
Parser for plain-text deck lists.

Deck list format:
    # <section or comment>
    <quantity> <card name>

Example:
    # Stronghold
    1 Midday Shadow Court

    # Dynasty
    # Personalities (3)
    3 Shosuro Kameyoi

This module extracts structure only. Card names are NOT resolved here.
Lines that do not look like "<quantity> <card name>" are collected, not
raised; nothing in this module fails on user-authored content.
"""

import re
from dataclasses import dataclass, field

from kyuden.models.failure import DeckTextError

# Pattern: "3 Shosuro Kameyoi"
# Groups: (quantity, card_name)
CARD_LINE_PATTERN = re.compile(r"^(\d+)\s+(.+)$")

# Pattern: "# Personalities (3)" -> "Personalities"
_SECTION_PATTERN = re.compile(r"^#+\s*(.*?)\s*(?:\(\d+\))?\s*$")


@dataclass(frozen=True, slots=True)
class ParsedCardLine:
    """A "<quantity> <card name>" line. The name is not yet resolved."""

    quantity: int
    name: str
    line_number: int
    section: str | None = None  # Last "#" heading above this line


@dataclass
class ParsedDeckText:
    """Everything extracted from a deck list."""

    lines: list[ParsedCardLine] = field(default_factory=list)
    unparseable_lines: list[tuple[int, str]] = field(default_factory=list)


def ensure_text(raw_input: object) -> str:
    """
    Coerce deck list input to str.

    Raises:
        DeckTextError: If the input is neither str nor UTF-8 bytes
    """
    if isinstance(raw_input, str):
        return raw_input
    if isinstance(raw_input, (bytes, bytearray)):
        try:
            return bytes(raw_input).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DeckTextError(f"Input is not valid UTF-8: {e}") from e
    raise DeckTextError(f"Expected text, got {type(raw_input).__name__}")


def parse_deck_text(raw_input: object) -> ParsedDeckText:
    """
    Parse a deck list into card lines.

    Blank lines and "#" lines are skipped ("#" lines only set the current
    section). Lines that do not match "<quantity> <card name>", or that have
    a quantity of zero, are recorded in ``unparseable_lines``.

    Args:
        raw_input: Deck list text (str, or UTF-8 bytes)

    Returns:
        ParsedDeckText with one ParsedCardLine per card line, in input order

    Raises:
        DeckTextError: If the input cannot be read as text at all
    """
    text = ensure_text(raw_input).lstrip("\ufeff")

    parsed = ParsedDeckText()
    section: str | None = None

    for line_number, line in enumerate(text.splitlines(), 1):
        stripped = line.strip()

        # Skip empty lines
        if not stripped:
            continue

        # Section headers and comments
        if stripped.startswith("#"):
            heading = _SECTION_PATTERN.match(stripped)
            if heading and heading.group(1):
                section = heading.group(1)
            continue

        match = CARD_LINE_PATTERN.match(stripped)
        if match is None:
            parsed.unparseable_lines.append((line_number, stripped))
            continue

        quantity = int(match.group(1))
        if quantity == 0:
            parsed.unparseable_lines.append((line_number, stripped))
            continue

        parsed.lines.append(
            ParsedCardLine(
                quantity=quantity,
                name=match.group(2).strip(),
                line_number=line_number,
                section=section,
            )
        )

    return parsed
