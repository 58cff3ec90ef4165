from kyuden.parsers.card_xml import parse_card_xml
from kyuden.parsers.deck_text import (
    CARD_LINE_PATTERN,
    ParsedCardLine,
    ParsedDeckText,
    ensure_text,
    parse_deck_text,
)

__all__ = [
    "CARD_LINE_PATTERN",
    "ParsedCardLine",
    "ParsedDeckText",
    "ensure_text",
    "parse_card_xml",
    "parse_deck_text",
]
