"""
Card catalog service.

Loads the card data file once and answers lookups over it.

The data file is a JSON array of card records. Two record shapes are read:
the flat snapshot written by ``kyuden.jobs.build_catalog`` and the older
list-wrapped export (``"title": ["Moto Chen"]``, ``"type": ["personality"]``).
Missing optional fields are tolerated; records without a name or with an
unknown card type are skipped with a warning.
"""

import json
import math
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from kyuden.config import settings
from kyuden.models.card import NUMERIC_ATTRIBUTES, Card, CardCategory, CardFace
from kyuden.models.failure import CardNotFoundError, DataUnavailableError
from kyuden.services.text_normalizer import clean_keywords, normalize_card_text, plain_text

logger = logging.getLogger(__name__)

# Fields accepted by Catalog.unique_values
LIST_FIELDS = frozenset({"keywords", "legality"})
SCALAR_FIELDS = frozenset({"category", "faction", "rarity", "set_name", "artist"})


class Catalog:
    """
    In-memory card collection with id and name indexes.

    Card ids are unique. Name lookup is exact against each card's name
    candidates; when two cards share a candidate the first one loaded wins.
    """

    def __init__(self, cards: Iterable[Card] = ()) -> None:
        self._cards: list[Card] = []
        self._by_id: dict[str, Card] = {}
        self._by_name: dict[str, Card] = {}
        for card in cards:
            if card.card_id in self._by_id:
                raise ValueError(f"Duplicate card id: {card.card_id}")
            self._cards.append(card)
            self._by_id[card.card_id] = card
            for candidate in card.name_candidates:
                self._by_name.setdefault(candidate, card)

    @classmethod
    def empty(cls) -> "Catalog":
        return cls()

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._by_id

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    def find_by_id(self, card_id: str) -> Card | None:
        return self._by_id.get(card_id)

    def get(self, card_id: str) -> Card:
        """
        Look up a card by id.

        Raises:
            CardNotFoundError: If no card has this id
        """
        card = self._by_id.get(card_id)
        if card is None:
            raise CardNotFoundError(card_id)
        return card

    def find_by_name(self, name: str) -> Card | None:
        """Exact lookup against every card's name candidates."""
        return self._by_name.get(name)

    def resolve_name(self, name: str) -> Card:
        """
        Resolve a deck list name to a card.

        Raises:
            CardNotFoundError: If the name matches no card
        """
        card = self._by_name.get(name)
        if card is None:
            raise CardNotFoundError(name)
        return card

    def unique_values(self, field: str) -> list[Any]:
        """
        Sorted distinct values observed for a field.

        List fields (keywords, legality) are flattened. Empty values are skipped.

        Args:
            field: "category", "faction", "rarity", "set_name", "artist",
                "keywords", "legality" or a numeric attribute name

        Raises:
            ValueError: If the field is not supported
        """
        if field not in LIST_FIELDS | SCALAR_FIELDS and field not in NUMERIC_ATTRIBUTES:
            raise ValueError(f"Unsupported field: {field}")

        values: set[Any] = set()
        for card in self._cards:
            value = getattr(card, field)
            if field in LIST_FIELDS:
                values.update(v for v in value if v)
            elif isinstance(value, CardCategory):
                values.add(value.value)
            elif value is not None and value != "":
                values.add(value)
        return sorted(values)

    def unique_keywords(self) -> list[str]:
        return self.unique_values("keywords")


# =============================================================================
# RECORD PARSING
# =============================================================================


def _first(value: Any) -> Any:
    """Unwrap single-element lists used by the older export format."""
    if isinstance(value, list):
        return value[0] if value else None
    return value


def _pick(record: dict[str, Any], *keys: str) -> Any:
    """First non-empty value among several spellings of a field."""
    for key in keys:
        value = _first(record.get(key))
        if value is not None and value != "":
            return value
    return None


def parse_number(value: Any) -> int | None:
    """Parse a printed number ("3", "+2", "-1"). Non-numeric or non-finite values give None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _to_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def card_from_record(record: dict[str, Any], default_ban_reason: str | None = None) -> Card | None:
    """
    Build a Card from a data file record.

    Args:
        record: One element of the data file array
        default_ban_reason: Reason to use for banned cards that give none

    Returns:
        The Card, or None if the record has no name or an unknown card type
    """
    name = _to_str(_pick(record, "name", "title", "puretexttitle"))
    if name is None:
        return None

    category = CardCategory.parse(_to_str(_pick(record, "category", "type")))
    if category is None:
        return None

    card_id = _to_str(_pick(record, "id", "cardid")) or name

    raw_text = _pick(record, "text")
    keywords = clean_keywords(_as_list(record.get("keywords")))
    if keywords:
        text = plain_text(raw_text)
    else:
        # No explicit keywords: the text still carries its keyword line
        normalized = normalize_card_text(raw_text)
        keywords, text = normalized.keywords, normalized.text

    alternate_names = tuple(
        candidate
        for candidate in (
            _to_str(_first(record.get("title"))),
            _to_str(record.get("formatted_name")),
            _to_str(record.get("formattedtitle")),
            _to_str(record.get("puretexttitle")),
        )
        if candidate and candidate != name
    )

    banned = bool(record.get("banned", False))
    banned_reason = _to_str(record.get("banned_reason") or record.get("bannedReason"))
    if banned and banned_reason is None:
        banned_reason = default_ban_reason

    return Card(
        card_id=card_id,
        name=name,
        category=category,
        faction=_to_str(_pick(record, "faction", "clan")),
        cost=parse_number(_pick(record, "cost")),
        force=parse_number(_pick(record, "force")),
        chi=parse_number(_pick(record, "chi")),
        focus=parse_number(_pick(record, "focus")),
        personal_honor=parse_number(_pick(record, "personal_honor", "personalHonor", "ph")),
        honor_requirement=parse_number(
            _pick(record, "honor_requirement", "honorRequirement", "honor")
        ),
        gold_production=parse_number(_pick(record, "gold_production", "goldProduction")),
        text=text,
        keywords=keywords,
        legality=tuple(
            str(tag).strip() for tag in _as_list(record.get("legality")) if str(tag).strip()
        ),
        banned=banned,
        banned_reason=banned_reason if banned else None,
        image_path=_to_str(record.get("image_path") or record.get("imagePath")),
        image_hash=_to_str(record.get("image_hash") or record.get("imagehash")),
        backside=_backside_from_record(record),
        rarity=_to_str(_pick(record, "rarity")),
        set_name=_to_str(_pick(record, "set_name", "set")),
        artist=_to_str(_pick(record, "artist")),
        alternate_names=tuple(dict.fromkeys(alternate_names)),
    )


def _backside_from_record(record: dict[str, Any]) -> CardFace | None:
    backside = record.get("backside")
    if isinstance(backside, dict):
        return CardFace(
            image_path=_to_str(backside.get("image_path")),
            text=plain_text(backside.get("text")),
            set_name=_to_str(backside.get("set_name")),
            keywords=clean_keywords(_as_list(backside.get("keywords"))),
        )
    if record.get("hasBackside"):
        return CardFace(
            image_path=_to_str(record.get("backsideImagePath")),
            text=plain_text(record.get("backsideText")),
            set_name=_to_str(record.get("backsideSet")),
            keywords=clean_keywords(_as_list(record.get("backsideKeywords"))),
        )
    return None


def catalog_from_records(
    records: Iterable[Any], default_ban_reason: str | None = None
) -> Catalog:
    """
    Build a Catalog from raw records, skipping the ones that cannot be used.

    Later records with an id already seen are skipped.
    """
    cards: list[Card] = []
    seen_ids: set[str] = set()
    skipped = 0

    for index, record in enumerate(records):
        if not isinstance(record, dict):
            logger.warning("Skipping card record %d: not an object", index)
            skipped += 1
            continue
        card = card_from_record(record, default_ban_reason)
        if card is None:
            logger.warning("Skipping card record %d: missing name or unknown type", index)
            skipped += 1
            continue
        if card.card_id in seen_ids:
            logger.warning("Skipping card record %d: duplicate id %s", index, card.card_id)
            skipped += 1
            continue
        seen_ids.add(card.card_id)
        cards.append(card)

    if skipped:
        logger.warning("Skipped %d unusable card records", skipped)

    return Catalog(cards)


def load_catalog(path: Path | None = None) -> Catalog:
    """
    Load the card catalog from a JSON data file.

    Args:
        path: Path to JSON file. Defaults to settings.card_data_path

    Returns:
        Catalog of every usable record

    Raises:
        DataUnavailableError: If the file is missing, unreadable, or not a JSON array
    """
    if path is None:
        path = settings.card_data_path

    if not path.exists():
        raise DataUnavailableError(str(path), detail="File not found")

    try:
        with open(path, encoding="utf-8") as f:
            records = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DataUnavailableError(str(path), detail=f"Card data is corrupted: {e}") from e

    if not isinstance(records, list):
        raise DataUnavailableError(str(path), detail="Expected a JSON array of cards")

    catalog = catalog_from_records(records, settings.default_ban_reason)
    logger.info("Loaded %d cards from %s", len(catalog), path)
    return catalog


def load_catalog_or_empty(path: Path | None = None) -> tuple[Catalog, DataUnavailableError | None]:
    """
    Load the catalog, degrading to an empty one on failure.

    Returns:
        (catalog, error) where error is None on success
    """
    try:
        return load_catalog(path), None
    except DataUnavailableError as e:
        logger.error("Card catalog unavailable: %s (%s)", e.message, e.detail)
        return Catalog.empty(), e

