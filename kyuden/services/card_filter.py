"""
Card search filters.

Filters narrow a list of cards for the card browser. Every filter is a pure
function returning a new list; ``filter_cards`` composes them from a
``FilterCriteria``.

Composition:
- Different filters are ANDed
- Selected keywords are ORed (a card needs at least one of them)
- An unset or empty input leaves the list unchanged

Examples:
    # Crab personalities with force 3 or more
    >>> filter_cards(catalog, {"category": "personality", "faction": "Crab", "forceMin": 3})

    # Anything mentioning "Battle" that is a Samurai or a Cavalry
    >>> filter_cards(catalog, {"searchTerm": "battle", "keywords": ["Samurai", "Cavalry"]})
"""

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from kyuden.models.card import NUMERIC_ATTRIBUTES, Card

# Dropdown value meaning "no constraint"
ANY_VALUE = "all"


class FilterCriteria(BaseModel):
    """
    Search inputs from the card browser.

    Field names are accepted in snake_case or camelCase ("searchTerm",
    "costMin", "personalHonorMax"). Every field is optional.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    search_term: str | None = None
    category: str | None = None
    faction: str | None = None
    legality: str | None = None
    keywords: list[str] = Field(default_factory=list)

    cost_min: int | None = None
    cost_max: int | None = None
    force_min: int | None = None
    force_max: int | None = None
    chi_min: int | None = None
    chi_max: int | None = None
    focus_min: int | None = None
    focus_max: int | None = None
    personal_honor_min: int | None = None
    personal_honor_max: int | None = None
    honor_requirement_min: int | None = None
    honor_requirement_max: int | None = None
    gold_production_min: int | None = None
    gold_production_max: int | None = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_unset(cls, value: Any) -> Any:
        # Form inputs send "" for untouched fields
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords_list(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return value

    def range_for(self, attribute: str) -> tuple[int | None, int | None]:
        """(min, max) bounds for a numeric attribute."""
        return getattr(self, f"{attribute}_min"), getattr(self, f"{attribute}_max")


def filter_by_text(cards: Sequence[Card], search_term: str | None) -> list[Card]:
    """Case-insensitive substring match against name, text, or any keyword."""
    if not search_term or not search_term.strip():
        return list(cards)

    term = search_term.strip().lower()
    return [
        card
        for card in cards
        if term in card.name.lower()
        or term in card.text.lower()
        or any(term in keyword.lower() for keyword in card.keywords)
    ]


def filter_by_category(cards: Sequence[Card], category: str | None) -> list[Card]:
    """Exact (case-insensitive) card type match."""
    if not category or category.lower() == ANY_VALUE:
        return list(cards)

    wanted = category.strip().lower()
    return [card for card in cards if card.category.value == wanted]


def filter_by_faction(cards: Sequence[Card], faction: str | None) -> list[Card]:
    """
    Match the card's faction, or a keyword naming it.

    "Crab" matches faction "Crab" and keyword "Crab Clan".
    """
    if not faction or faction.lower() == ANY_VALUE:
        return list(cards)

    wanted = faction.strip().lower()
    return [
        card
        for card in cards
        if (card.faction is not None and card.faction.lower() == wanted)
        or any(wanted in keyword.lower() for keyword in card.keywords)
    ]


def filter_by_keywords(cards: Sequence[Card], keywords: Iterable[str] | None) -> list[Card]:
    """Card must have at least one of the selected keywords."""
    selected = {keyword for keyword in keywords or () if keyword}
    if not selected:
        return list(cards)

    return [card for card in cards if selected.intersection(card.keywords)]


def filter_by_legality(cards: Sequence[Card], legality: str | None) -> list[Card]:
    """Card must carry the legality tag (case-insensitive)."""
    if not legality or legality.lower() == ANY_VALUE:
        return list(cards)

    wanted = legality.strip().lower()
    return [card for card in cards if any(tag.lower() == wanted for tag in card.legality)]


def filter_by_range(
    cards: Sequence[Card],
    attribute: str,
    minimum: int | None = None,
    maximum: int | None = None,
) -> list[Card]:
    """
    Inclusive numeric range filter.

    With either bound set, cards missing the attribute are excluded.
    min > max gives an empty list.

    Raises:
        ValueError: If the attribute is not numeric
    """
    if attribute not in NUMERIC_ATTRIBUTES:
        raise ValueError(f"Unknown numeric attribute: {attribute}")

    if minimum is None and maximum is None:
        return list(cards)

    results: list[Card] = []
    for card in cards:
        value = card.numeric(attribute)
        if value is None:
            continue
        if minimum is not None and value < minimum:
            continue
        if maximum is not None and value > maximum:
            continue
        results.append(card)
    return results


def filter_cards(
    cards: Iterable[Card],
    criteria: FilterCriteria | Mapping[str, Any] | None = None,
) -> list[Card]:
    """
    Apply every active filter in ``criteria``.

    Args:
        cards: Cards to filter (a Catalog works)
        criteria: FilterCriteria, or a mapping accepted by it

    Returns:
        Matching cards in their original order. Empty criteria returns all cards.

    Raises:
        pydantic.ValidationError: If a mapping has values of the wrong type
    """
    if criteria is None:
        criteria = FilterCriteria()
    elif not isinstance(criteria, FilterCriteria):
        criteria = FilterCriteria.model_validate(dict(criteria))

    results = list(cards)
    results = filter_by_text(results, criteria.search_term)
    results = filter_by_category(results, criteria.category)
    results = filter_by_faction(results, criteria.faction)
    results = filter_by_legality(results, criteria.legality)
    results = filter_by_keywords(results, criteria.keywords)

    for attribute in NUMERIC_ATTRIBUTES:
        minimum, maximum = criteria.range_for(attribute)
        results = filter_by_range(results, attribute, minimum, maximum)

    return results
