"""
Deck builder API endpoints.

Decks are never stored server-side. The client sends its current deck with
every request and gets the updated deck, its statistics and its validation
back.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from kyuden.api.state import get_catalog
from kyuden.models.deck import Deck, DeckEntry, ImportResult
from kyuden.models.failure import FailureKind
from kyuden.services.card_catalog import Catalog
from kyuden.services.deck_formatter import export_deck
from kyuden.services.deck_importer import import_deck
from kyuden.services.deck_service import (
    add_card,
    remove_card,
    total_count,
    validate_deck,
)

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckEntryPayload(BaseModel):
    """One deck entry as sent by the client."""

    card_id: str
    quantity: int = Field(ge=1)


class DeckPayload(BaseModel):
    """The client's current deck."""

    entries: list[DeckEntryPayload] = Field(default_factory=list)


class DeckChangeRequest(DeckPayload):
    """Current deck plus the card to add or remove."""

    card_id: str


class ImportRequest(BaseModel):
    """Request body for importing a deck list."""

    text: str


class DeckEntryResponse(BaseModel):
    card_id: str
    name: str
    category: str
    quantity: int


class ValidationResponse(BaseModel):
    """Deck validation result."""

    valid: bool
    kind: FailureKind | None = None
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    stronghold_count: int = 0
    sensei_count: int = 0


class DeckResponse(BaseModel):
    """A deck with its statistics and validation."""

    entries: list[DeckEntryResponse]
    total_cards: int
    dynasty_count: int
    fate_count: int
    unique_count: int
    validation: ValidationResponse


class ExportResponse(BaseModel):
    text: str


class MissingCardResponse(BaseModel):
    name: str
    quantity: int


class BannedCardResponse(BaseModel):
    name: str
    quantity: int
    reason: str


class ImportResponse(BaseModel):
    """Response model for a deck import."""

    deck: DeckResponse
    missing_cards: list[MissingCardResponse] = Field(default_factory=list)
    banned_cards: list[BannedCardResponse] = Field(default_factory=list)


def deck_from_payload(payload: DeckPayload, catalog: Catalog) -> Deck:
    """
    Rebuild a Deck from client entries.

    Repeated card ids are merged. Quantities are taken as sent; rule
    violations are reported by validation, not rejected here.

    Raises:
        CardNotFoundError: If an entry names a card not in the catalog
    """
    quantities: dict[str, int] = {}
    for entry in payload.entries:
        quantities[entry.card_id] = quantities.get(entry.card_id, 0) + entry.quantity

    return Deck(
        entries=tuple(
            DeckEntry(card=catalog.get(card_id), quantity=quantity)
            for card_id, quantity in quantities.items()
        )
    )


def deck_to_response(deck: Deck) -> DeckResponse:
    validation = validate_deck(deck)
    return DeckResponse(
        entries=[
            DeckEntryResponse(
                card_id=entry.card_id,
                name=entry.card.name,
                category=entry.card.category.value,
                quantity=entry.quantity,
            )
            for entry in deck
        ],
        total_cards=total_count(deck),
        dynasty_count=validation.dynasty_count,
        fate_count=validation.fate_count,
        unique_count=validation.unique_count,
        validation=ValidationResponse(
            valid=validation.valid,
            kind=None if validation.valid else FailureKind.VALIDATION_FAILED,
            errors=list(validation.errors),
            warnings=list(validation.warnings),
            stronghold_count=validation.stronghold_count,
            sensei_count=validation.sensei_count,
        ),
    )


def import_to_response(result: ImportResult) -> ImportResponse:
    return ImportResponse(
        deck=deck_to_response(result.deck),
        missing_cards=[
            MissingCardResponse(name=missing.name, quantity=missing.quantity)
            for missing in result.missing_cards
        ],
        banned_cards=[
            BannedCardResponse(name=banned.name, quantity=banned.quantity, reason=banned.reason)
            for banned in result.banned_cards
        ],
    )


@router.post("/add", response_model=DeckResponse)
async def add_to_deck(
    request: DeckChangeRequest,
    catalog: Annotated[Catalog, Depends(get_catalog)],
) -> DeckResponse:
    """
    Add one copy of a card.

    Adding a Unique card already in the deck, or a card already at the copy
    limit, returns the deck unchanged.
    """
    deck = deck_from_payload(request, catalog)
    return deck_to_response(add_card(deck, catalog.get(request.card_id)))


@router.post("/remove", response_model=DeckResponse)
async def remove_from_deck(
    request: DeckChangeRequest,
    catalog: Annotated[Catalog, Depends(get_catalog)],
) -> DeckResponse:
    """Remove one copy of a card. Removing a card not in the deck is a no-op."""
    deck = deck_from_payload(request, catalog)
    return deck_to_response(remove_card(deck, request.card_id))


@router.post("/validate", response_model=DeckResponse)
async def validate(
    request: DeckPayload,
    catalog: Annotated[Catalog, Depends(get_catalog)],
) -> DeckResponse:
    """Validate a deck against the construction rules."""
    return deck_to_response(deck_from_payload(request, catalog))


@router.post("/export", response_model=ExportResponse)
async def export(
    request: DeckPayload,
    catalog: Annotated[Catalog, Depends(get_catalog)],
) -> ExportResponse:
    """Export a deck as a sectioned plain-text list."""
    return ExportResponse(text=export_deck(deck_from_payload(request, catalog)))


@router.post("/import", response_model=ImportResponse)
async def import_text(
    request: ImportRequest,
    catalog: Annotated[Catalog, Depends(get_catalog)],
) -> ImportResponse:
    """
    Import a plain-text deck list.

    Lines that cannot be parsed are skipped. Names not in the catalog are
    reported as missing; banned cards are reported and still imported.
    """
    return import_to_response(import_deck(request.text, catalog))
