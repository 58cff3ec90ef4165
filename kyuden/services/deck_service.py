"""
Deck operations.

Every function here is pure: decks are immutable and each mutation returns
a new Deck. Composition rules never block a mutation; ``validate_deck``
reports them.

Rules (defaults from settings):
- A non-unique card may appear at most ``max_copies`` times
- A Unique card may appear at most once
- Exactly one Stronghold, at most one Sensei
- At least ``min_dynasty`` Dynasty cards and ``min_fate`` Fate cards
"""

from __future__ import annotations

from kyuden.config import DeckRules
from kyuden.models.card import DYNASTY_CATEGORIES, FATE_CATEGORIES, Card, CardCategory
from kyuden.models.deck import (
    DYNASTY_LABELS,
    FATE_LABELS,
    Deck,
    DeckEntry,
    DeckSections,
    DeckValidation,
)


def _rules(rules: DeckRules | None) -> DeckRules:
    return rules if rules is not None else DeckRules.from_settings()


# =============================================================================
# MUTATIONS
# =============================================================================


def add_card(deck: Deck, card: Card, rules: DeckRules | None = None) -> Deck:
    """
    Add one copy of a card.

    No-op if the card is Unique and already present, or already at max copies.

    Returns:
        New Deck (or the input deck unchanged for a no-op)
    """
    existing = deck.get_entry(card.card_id)

    if existing is None:
        return Deck(entries=(*deck.entries, DeckEntry(card=card, quantity=1)))

    if card.is_unique:
        return deck

    if existing.quantity >= _rules(rules).max_copies:
        return deck

    return Deck(
        entries=tuple(
            DeckEntry(card=entry.card, quantity=entry.quantity + 1)
            if entry.card_id == card.card_id
            else entry
            for entry in deck.entries
        )
    )


def remove_card(deck: Deck, card_id: str) -> Deck:
    """
    Remove one copy of a card.

    The entry disappears when its quantity reaches zero. No-op if absent.
    """
    existing = deck.get_entry(card_id)

    if existing is None:
        return deck

    if existing.quantity > 1:
        return Deck(
            entries=tuple(
                DeckEntry(card=entry.card, quantity=entry.quantity - 1)
                if entry.card_id == card_id
                else entry
                for entry in deck.entries
            )
        )

    return Deck(entries=tuple(entry for entry in deck.entries if entry.card_id != card_id))


def clear_deck() -> Deck:
    """Return an empty deck."""
    return Deck()


# =============================================================================
# QUERIES
# =============================================================================


def count_of(deck: Deck, card_id: str) -> int:
    """Quantity of a card in the deck (0 if absent)."""
    entry = deck.get_entry(card_id)
    return entry.quantity if entry else 0


def total_count(deck: Deck) -> int:
    return sum(entry.quantity for entry in deck.entries)


def dynasty_count(deck: Deck) -> int:
    return sum(entry.quantity for entry in deck.entries if entry.card.category in DYNASTY_CATEGORIES)


def fate_count(deck: Deck) -> int:
    return sum(entry.quantity for entry in deck.entries if entry.card.category in FATE_CATEGORIES)


def unique_entry_count(deck: Deck) -> int:
    """Number of distinct cards in the deck."""
    return len(deck.entries)


def _category_count(deck: Deck, category: CardCategory) -> int:
    return sum(entry.quantity for entry in deck.entries if entry.card.category == category)


def group_by_category(deck: Deck) -> DeckSections:
    """
    Partition the deck into Stronghold, Sensei, Dynasty and Fate sections.

    Entries sharing a card name are merged (quantities summed). Within each
    section, entries keep the order in which they first appear in the deck.
    """
    merged: dict[str, DeckEntry] = {}
    for entry in deck.entries:
        previous = merged.get(entry.card.name)
        if previous is None:
            merged[entry.card.name] = entry
        else:
            merged[entry.card.name] = DeckEntry(
                card=previous.card, quantity=previous.quantity + entry.quantity
            )

    sections = DeckSections()
    for entry in merged.values():
        category = entry.card.category
        if category == CardCategory.STRONGHOLD:
            sections.stronghold.append(entry)
        elif category == CardCategory.SENSEI:
            sections.sensei.append(entry)
        elif category.value in DYNASTY_LABELS:
            sections.dynasty[DYNASTY_LABELS[category.value]].append(entry)
        elif category.value in FATE_LABELS:
            sections.fate[FATE_LABELS[category.value]].append(entry)

    return sections


# =============================================================================
# VALIDATION
# =============================================================================


def validate_deck(deck: Deck, rules: DeckRules | None = None) -> DeckValidation:
    """
    Check a deck against the construction rules.

    Pure query: never mutates the deck, same answer every call.

    Errors:
        - fewer Dynasty / Fate cards than the minimum
        - no Stronghold, or more than one
        - more than one Sensei
        - a non-unique card above max copies
        - a Unique card with more than one copy

    Warnings:
        - banned cards present (banning is advisory)
    """
    rules = _rules(rules)
    dynasty = dynasty_count(deck)
    fate = fate_count(deck)
    strongholds = _category_count(deck, CardCategory.STRONGHOLD)
    senseis = _category_count(deck, CardCategory.SENSEI)

    errors: list[str] = []
    warnings: list[str] = []

    if dynasty < rules.min_dynasty:
        errors.append(
            f"Dynasty deck needs at least {rules.min_dynasty} cards (currently {dynasty})"
        )

    if fate < rules.min_fate:
        errors.append(f"Fate deck needs at least {rules.min_fate} cards (currently {fate})")

    if strongholds == 0:
        errors.append("Deck must contain exactly 1 Stronghold")
    elif strongholds > 1:
        errors.append("Deck can only contain 1 Stronghold")

    if senseis > 1:
        errors.append("Deck can only contain 1 Sensei")

    for entry in deck.entries:
        card = entry.card
        if card.is_unique:
            if entry.quantity > 1:
                errors.append(f"{card.name} is Unique and can only have 1 copy ({entry.quantity})")
        elif entry.quantity > rules.max_copies:
            errors.append(
                f"{card.name} has too many copies ({entry.quantity}/{rules.max_copies})"
            )

        if card.banned:
            reason = f": {card.banned_reason}" if card.banned_reason else ""
            warnings.append(f"{card.name} is banned{reason}")

    return DeckValidation(
        valid=not errors,
        errors=tuple(errors),
        warnings=tuple(warnings),
        dynasty_count=dynasty,
        fate_count=fate,
        unique_count=unique_entry_count(deck),
        stronghold_count=strongholds,
        sensei_count=senseis,
    )
