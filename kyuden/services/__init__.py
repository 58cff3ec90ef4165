"""
Kyuden services.

Business logic for the card browser and deck builder.
"""

from kyuden.services.card_catalog import (
    Catalog,
    card_from_record,
    catalog_from_records,
    load_catalog,
    load_catalog_or_empty,
)
from kyuden.services.card_filter import (
    FilterCriteria,
    filter_by_category,
    filter_by_faction,
    filter_by_keywords,
    filter_by_legality,
    filter_by_range,
    filter_by_text,
    filter_cards,
)
from kyuden.services.deck_formatter import export_deck
from kyuden.services.deck_importer import import_deck
from kyuden.services.deck_service import (
    add_card,
    clear_deck,
    count_of,
    dynasty_count,
    fate_count,
    group_by_category,
    remove_card,
    total_count,
    unique_entry_count,
    validate_deck,
)
from kyuden.services.image_cache import ImagePathCache, image_path_for
from kyuden.services.text_normalizer import (
    KEYWORD_VOCABULARY,
    KeywordMatcher,
    NormalizedText,
    normalize_card_text,
)

__all__ = [
    "Catalog",
    "FilterCriteria",
    "ImagePathCache",
    "KEYWORD_VOCABULARY",
    "KeywordMatcher",
    "NormalizedText",
    "add_card",
    "card_from_record",
    "catalog_from_records",
    "clear_deck",
    "count_of",
    "dynasty_count",
    "export_deck",
    "fate_count",
    "filter_by_category",
    "filter_by_faction",
    "filter_by_keywords",
    "filter_by_legality",
    "filter_by_range",
    "filter_by_text",
    "filter_cards",
    "group_by_category",
    "image_path_for",
    "import_deck",
    "load_catalog",
    "load_catalog_or_empty",
    "normalize_card_text",
    "remove_card",
    "total_count",
    "unique_entry_count",
    "validate_deck",
]
