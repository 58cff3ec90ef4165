"""
Card browser API endpoints.

Search the catalog, list filter dropdown values, and fetch a single card.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from kyuden.api.state import CatalogState, get_catalog, get_catalog_state
from kyuden.config import settings
from kyuden.models.card import Card
from kyuden.services.card_catalog import Catalog
from kyuden.services.card_filter import FilterCriteria, filter_cards
from kyuden.services.image_cache import ImagePathCache, join_url

router = APIRouter(prefix="/cards", tags=["cards"])


class CardFaceResponse(BaseModel):
    """Back face of a dual-sided card."""

    image_url: str | None = None
    text: str = ""
    set_name: str | None = None
    keywords: list[str] = Field(default_factory=list)


class CardResponse(BaseModel):
    """Response model for a single card."""

    id: str
    name: str
    category: str
    deck_side: str | None = None
    faction: str | None = None
    cost: int | None = None
    force: int | None = None
    chi: int | None = None
    focus: int | None = None
    personal_honor: int | None = None
    honor_requirement: int | None = None
    gold_production: int | None = None
    text: str = ""
    keywords: list[str] = Field(default_factory=list)
    legality: list[str] = Field(default_factory=list)
    unique: bool = False
    banned: bool = False
    banned_reason: str | None = None
    rarity: str | None = None
    set_name: str | None = None
    artist: str | None = None
    image_url: str | None = None
    backside: CardFaceResponse | None = None


class CardSearchResponse(BaseModel):
    """Response model for a card search."""

    total: int
    count: int
    offset: int
    cards: list[CardResponse]


class FilterValuesResponse(BaseModel):
    """Distinct values for the card browser dropdowns."""

    categories: list[str]
    factions: list[str]
    keywords: list[str]
    legality: list[str]
    sets: list[str]


def card_to_response(card: Card, images: ImagePathCache) -> CardResponse:
    """Convert a catalog card to its API shape, resolving artwork."""
    backside = None
    if card.backside is not None:
        face = card.backside
        backside = CardFaceResponse(
            image_url=_image_url(face.image_path),
            text=face.text,
            set_name=face.set_name,
            keywords=list(face.keywords),
        )

    return CardResponse(
        id=card.card_id,
        name=card.name,
        category=card.category.value,
        deck_side=card.deck_side,
        faction=card.faction,
        cost=card.cost,
        force=card.force,
        chi=card.chi,
        focus=card.focus,
        personal_honor=card.personal_honor,
        honor_requirement=card.honor_requirement,
        gold_production=card.gold_production,
        text=card.text,
        keywords=list(card.keywords),
        legality=list(card.legality),
        unique=card.is_unique,
        banned=card.banned,
        banned_reason=card.banned_reason,
        rarity=card.rarity,
        set_name=card.set_name,
        artist=card.artist,
        image_url=images.resolve(card, settings.image_base_url),
        backside=backside,
    )


def _image_url(path: str | None) -> str | None:
    return join_url(settings.image_base_url, path) if path else None


@router.post("/search", response_model=CardSearchResponse)
async def search_cards(
    state: Annotated[CatalogState, Depends(get_catalog_state)],
    criteria: FilterCriteria | None = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
    offset: Annotated[int, Query(ge=0)] = 0,
) -> CardSearchResponse:
    """
    Search the catalog.

    The body is a set of filter criteria (camelCase or snake_case keys).
    An empty or missing body returns every card. Results keep catalog order.
    """
    matches = filter_cards(state.catalog, criteria)
    page = matches[offset : offset + limit]

    return CardSearchResponse(
        total=len(matches),
        count=len(page),
        offset=offset,
        cards=[card_to_response(card, state.images) for card in page],
    )


@router.get("/values", response_model=FilterValuesResponse)
async def filter_values(
    catalog: Annotated[Catalog, Depends(get_catalog)],
) -> FilterValuesResponse:
    """Distinct categories, factions, keywords, legality tags and sets."""
    return FilterValuesResponse(
        categories=catalog.unique_values("category"),
        factions=catalog.unique_values("faction"),
        keywords=catalog.unique_keywords(),
        legality=catalog.unique_values("legality"),
        sets=catalog.unique_values("set_name"),
    )


@router.get("/{card_id}", response_model=CardResponse)
async def get_card(
    card_id: str,
    state: Annotated[CatalogState, Depends(get_catalog_state)],
) -> CardResponse:
    """
    Get a single card by id.

    Returns 404 if the card is not in the catalog.
    """
    return card_to_response(state.catalog.get(card_id), state.images)
