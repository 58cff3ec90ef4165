from collections.abc import Iterator
from dataclasses import dataclass, field

from kyuden.models.card import Card

# Sub-headings used for display and export, in order
DYNASTY_LABELS: dict[str, str] = {
    "personality": "Personalities",
    "holding": "Holdings",
    "celestial": "Celestials",
    "region": "Regions",
    "event": "Events",
}

FATE_LABELS: dict[str, str] = {
    "strategy": "Strategies",
    "spell": "Spells",
    "item": "Items",
    "follower": "Followers",
    "ring": "Rings",
}


@dataclass(frozen=True, slots=True)
class DeckEntry:
    """A card and how many copies of it the deck holds (always >= 1)."""

    card: Card
    quantity: int

    @property
    def card_id(self) -> str:
        return self.card.card_id


@dataclass(frozen=True)
class Deck:
    """
    An immutable, ordered collection of deck entries.

    Entries keep the order in which each card was first added. Every
    mutation in ``kyuden.services.deck_service`` returns a new Deck.
    """

    entries: tuple[DeckEntry, ...] = ()

    def __iter__(self) -> Iterator[DeckEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        """Number of distinct cards in the deck."""
        return len(self.entries)

    def __contains__(self, card_id: object) -> bool:
        return any(entry.card_id == card_id for entry in self.entries)

    def get_entry(self, card_id: str) -> DeckEntry | None:
        for entry in self.entries:
            if entry.card_id == card_id:
                return entry
        return None

    def quantities(self) -> dict[str, int]:
        """Deck as {card_id: quantity}."""
        return {entry.card_id: entry.quantity for entry in self.entries}


@dataclass
class DeckSections:
    """
    Deck partitioned for display and export.

    ``dynasty`` and ``fate`` map sub-heading labels ("Personalities",
    "Strategies", ...) to entries; every label is present, possibly empty.
    """

    stronghold: list[DeckEntry] = field(default_factory=list)
    sensei: list[DeckEntry] = field(default_factory=list)
    dynasty: dict[str, list[DeckEntry]] = field(
        default_factory=lambda: {label: [] for label in DYNASTY_LABELS.values()}
    )
    fate: dict[str, list[DeckEntry]] = field(
        default_factory=lambda: {label: [] for label in FATE_LABELS.values()}
    )


@dataclass(frozen=True)
class DeckValidation:
    """
    Result of checking a deck against the construction rules.

    Attributes:
        valid: True when there are no errors (warnings do not count)
        errors: Rule violations
        warnings: Advisory notes (e.g., banned cards present)
    """

    valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    dynasty_count: int = 0
    fate_count: int = 0
    unique_count: int = 0
    stronghold_count: int = 0
    sensei_count: int = 0


@dataclass(frozen=True, slots=True)
class MissingCard:
    """A deck list line whose name did not resolve."""

    name: str
    quantity: int


@dataclass(frozen=True, slots=True)
class BannedCard:
    """A banned card found while importing (still added to the deck)."""

    name: str
    quantity: int
    reason: str


@dataclass(frozen=True)
class ImportResult:
    """Outcome of importing a deck list."""

    deck: Deck
    missing_cards: tuple[MissingCard, ...] = ()
    banned_cards: tuple[BannedCard, ...] = ()
