import re
from dataclasses import dataclass, field
from enum import Enum


class CardCategory(str, Enum):
    """Printed card type."""

    PERSONALITY = "personality"
    HOLDING = "holding"
    CELESTIAL = "celestial"
    REGION = "region"
    EVENT = "event"
    STRONGHOLD = "stronghold"
    SENSEI = "sensei"
    STRATEGY = "strategy"
    SPELL = "spell"
    ITEM = "item"
    FOLLOWER = "follower"
    RING = "ring"

    @classmethod
    def parse(cls, value: str | None) -> "CardCategory | None":
        """Case-insensitive lookup. Returns None for unknown types."""
        if not value:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


DYNASTY_CATEGORIES: tuple[CardCategory, ...] = (
    CardCategory.PERSONALITY,
    CardCategory.HOLDING,
    CardCategory.CELESTIAL,
    CardCategory.REGION,
    CardCategory.EVENT,
)

FATE_CATEGORIES: tuple[CardCategory, ...] = (
    CardCategory.STRATEGY,
    CardCategory.SPELL,
    CardCategory.ITEM,
    CardCategory.FOLLOWER,
    CardCategory.RING,
)

# Attributes usable in numeric range filters, in display order
NUMERIC_ATTRIBUTES: tuple[str, ...] = (
    "cost",
    "force",
    "chi",
    "focus",
    "personal_honor",
    "honor_requirement",
    "gold_production",
)

UNIQUE_KEYWORD = "Unique"

# "Moto Chen - exp", "Moto Chen - exp2", "Moto Chen - Experienced 2"
_EXPERIENCED_SUFFIX = re.compile(r"\s*-\s*(?:exp|Experienced)\s*(\d*)\s*$", re.IGNORECASE)


def base_name(name: str) -> str:
    """Strip any experienced suffix from a card name."""
    return _EXPERIENCED_SUFFIX.sub("", name).strip()


def experience_level(name: str) -> int:
    """
    Experience level encoded in a card name.

    Returns:
        0 for base cards, 1 for "- exp"/"- Experienced", N for "- expN"/"- Experienced N"
    """
    match = _EXPERIENCED_SUFFIX.search(name)
    if match is None:
        return 0
    return int(match.group(1)) if match.group(1) else 1


def experienced_display_name(name: str) -> str:
    """
    Normalize the experienced suffix to its display form.

    "Moto Chen - exp2" -> "Moto Chen - Experienced 2". Base names are returned unchanged.
    """
    level = experience_level(name)
    if level == 0:
        return name
    suffix = " - Experienced" if level == 1 else f" - Experienced {level}"
    return base_name(name) + suffix


@dataclass(frozen=True, slots=True)
class CardFace:
    """Back face of a dual-sided card."""

    image_path: str | None = None
    text: str = ""
    set_name: str | None = None
    keywords: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Card:
    """
    A card record from the catalog.

    Numeric attributes are None when the card does not print them; which ones
    are meaningful depends on the category (gold production only on holdings
    and strongholds, chi only on personalities, ...).

    Attributes:
        card_id: Catalog identifier, unique within the catalog
        name: Display name
        category: Printed card type
        faction: Owning clan, if any
        text: Rules text with keyword preamble and markup removed
        keywords: Mechanical keywords (e.g., "Unique", "Samurai")
        legality: Legality tags (eras/arcs the card may be played in)
        banned: Whether the card is on the ban list
        banned_reason: Why, if banned
        image_path: Artwork reference for the front face
        image_hash: Alternate artwork reference used by older data files
        backside: Second face for physical dual-sided cards
        alternate_names: Other spellings found in the data (raw title, formatted title)
    """

    card_id: str
    name: str
    category: CardCategory
    faction: str | None = None
    cost: int | None = None
    force: int | None = None
    chi: int | None = None
    focus: int | None = None
    personal_honor: int | None = None
    honor_requirement: int | None = None
    gold_production: int | None = None
    text: str = ""
    keywords: tuple[str, ...] = ()
    legality: tuple[str, ...] = ()
    banned: bool = False
    banned_reason: str | None = None
    image_path: str | None = None
    image_hash: str | None = None
    backside: CardFace | None = None
    rarity: str | None = None
    set_name: str | None = None
    artist: str | None = None
    alternate_names: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_unique(self) -> bool:
        """Unique cards may appear at most once in a deck."""
        return UNIQUE_KEYWORD in self.keywords

    @property
    def deck_side(self) -> str | None:
        """"Dynasty", "Fate", or None for strongholds and senseis."""
        if self.category in DYNASTY_CATEGORIES:
            return "Dynasty"
        if self.category in FATE_CATEGORIES:
            return "Fate"
        return None

    @property
    def experience_level(self) -> int:
        return experience_level(self.name)

    @property
    def name_candidates(self) -> tuple[str, ...]:
        """
        Names a deck list may use for this card, most preferred first.

        Used only when resolving deck list lines.
        """
        candidates: list[str] = []
        for candidate in (self.name, *self.alternate_names, experienced_display_name(self.name)):
            if candidate and candidate not in candidates:
                candidates.append(candidate)
        return tuple(candidates)

    def numeric(self, attribute: str) -> int | None:
        """Look up a numeric attribute by name."""
        if attribute not in NUMERIC_ATTRIBUTES:
            raise ValueError(f"Unknown numeric attribute: {attribute}")
        value: int | None = getattr(self, attribute)
        return value
