"""
Deck list importer.

Resolves a parsed deck list against the card catalog.

Import is lenient:
- Malformed lines are skipped
- Names that do not resolve are collected in ``missing_cards``
- Banned cards are collected in ``banned_cards`` AND added to the deck

The only hard failure is input that is not text at all (DeckTextError).
"""

import logging

from kyuden.config import settings
from kyuden.models.card import Card
from kyuden.models.deck import BannedCard, Deck, DeckEntry, ImportResult, MissingCard
from kyuden.models.failure import CardNotFoundError
from kyuden.parsers.deck_text import parse_deck_text
from kyuden.services.card_catalog import Catalog

logger = logging.getLogger(__name__)


def import_deck(raw_input: object, catalog: Catalog) -> ImportResult:
    """
    Build a deck from deck list text.

    A card named on several lines accumulates quantity. Quantities are taken
    as written; copy limits are reported by ``validate_deck``, not enforced here.

    Args:
        raw_input: Deck list text
        catalog: Catalog to resolve names against

    Returns:
        ImportResult with the deck plus missing and banned card reports

    Raises:
        DeckTextError: If the input cannot be read as text
    """
    parsed = parse_deck_text(raw_input)

    cards: dict[str, Card] = {}
    quantities: dict[str, int] = {}
    missing: list[MissingCard] = []
    banned: list[BannedCard] = []

    for line in parsed.lines:
        try:
            card = catalog.resolve_name(line.name)
        except CardNotFoundError:
            missing.append(MissingCard(name=line.name, quantity=line.quantity))
            continue

        if card.banned:
            banned.append(
                BannedCard(
                    name=line.name,
                    quantity=line.quantity,
                    reason=card.banned_reason or settings.default_ban_reason,
                )
            )

        cards.setdefault(card.card_id, card)
        quantities[card.card_id] = quantities.get(card.card_id, 0) + line.quantity

    if parsed.unparseable_lines:
        logger.debug("Skipped %d unparseable deck lines", len(parsed.unparseable_lines))
    if missing or banned:
        logger.info(
            "Deck import: %d cards resolved, %d missing, %d banned",
            len(cards),
            len(missing),
            len(banned),
        )

    deck = Deck(
        entries=tuple(
            DeckEntry(card=card, quantity=quantities[card_id]) for card_id, card in cards.items()
        )
    )

    return ImportResult(deck=deck, missing_cards=tuple(missing), banned_cards=tuple(banned))
