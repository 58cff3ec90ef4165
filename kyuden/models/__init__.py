from kyuden.models.card import (
    DYNASTY_CATEGORIES,
    FATE_CATEGORIES,
    NUMERIC_ATTRIBUTES,
    Card,
    CardCategory,
    CardFace,
    base_name,
    experience_level,
    experienced_display_name,
)
from kyuden.models.deck import (
    BannedCard,
    Deck,
    DeckEntry,
    DeckSections,
    DeckValidation,
    ImportResult,
    MissingCard,
)
from kyuden.models.failure import (
    ApiResponse,
    CardNotFoundError,
    DataUnavailableError,
    DeckTextError,
    FailureDetail,
    FailureKind,
    KnownError,
    OutcomeType,
    create_known_failure,
    create_unknown_failure,
    finalize_response,
    is_finalized,
)

__all__ = [
    "ApiResponse",
    "BannedCard",
    "Card",
    "CardCategory",
    "CardFace",
    "CardNotFoundError",
    "DYNASTY_CATEGORIES",
    "DataUnavailableError",
    "Deck",
    "DeckEntry",
    "DeckSections",
    "DeckTextError",
    "DeckValidation",
    "FATE_CATEGORIES",
    "FailureDetail",
    "FailureKind",
    "ImportResult",
    "KnownError",
    "MissingCard",
    "NUMERIC_ATTRIBUTES",
    "OutcomeType",
    "base_name",
    "create_known_failure",
    "create_unknown_failure",
    "experience_level",
    "experienced_display_name",
    "finalize_response",
    "is_finalized",
]
