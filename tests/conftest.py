from collections.abc import Callable
from typing import Any

import pytest

from kyuden.models import failure as failure_module
from kyuden.models.card import Card, CardCategory
from kyuden.services.card_catalog import Catalog


@pytest.fixture(autouse=True)
def clear_finalized_responses():
    """Clear the finalized responses set between tests.

    This prevents test isolation issues where Python reuses memory
    addresses for new objects, causing id() collisions with previously
    finalized responses.
    """
    failure_module._finalized_responses.clear()
    yield
    failure_module._finalized_responses.clear()


def make_card(card_id: str, name: str, category: str | CardCategory, **fields: Any) -> Card:
    """Build a Card with only the fields a test cares about."""
    if isinstance(category, str):
        category = CardCategory(category)
    return Card(card_id=card_id, name=name, category=category, **fields)


@pytest.fixture
def card_factory() -> Callable[..., Card]:
    return make_card


@pytest.fixture
def stronghold() -> Card:
    return make_card(
        "sh1",
        "Midday Shadow Court",
        "stronghold",
        faction="Scorpion",
        gold_production=5,
        keywords=("Scorpion Clan",),
        legality=("samurai",),
    )


@pytest.fixture
def sensei() -> Card:
    return make_card("se1", "Bayushi Kachiko Sensei", "sensei", faction="Scorpion")


@pytest.fixture
def personality() -> Card:
    return make_card(
        "p1",
        "Shosuro Kameyoi",
        "personality",
        faction="Scorpion",
        cost=6,
        force=3,
        chi=3,
        honor_requirement=2,
        personal_honor=1,
        keywords=("Samurai", "Courtier"),
        legality=("samurai", "emperor"),
        text="Battle: Bow target Follower.",
    )


@pytest.fixture
def unique_personality() -> Card:
    return make_card(
        "p2",
        "Bayushi Kachiko",
        "personality",
        faction="Scorpion",
        cost=10,
        force=2,
        chi=5,
        keywords=("Unique", "Courtier"),
        legality=("samurai",),
    )


@pytest.fixture
def experienced_personality() -> Card:
    return make_card(
        "p3",
        "Moto Chen - Experienced 2",
        "personality",
        faction="Unicorn",
        cost=9,
        force=5,
        chi=3,
        keywords=("Unique", "Samurai", "Cavalry"),
        legality=("ivory",),
        alternate_names=("Moto Chen - exp2",),
    )


@pytest.fixture
def holding() -> Card:
    return make_card(
        "h1",
        "Copper Mine",
        "holding",
        cost=3,
        gold_production=3,
        keywords=("Mine",),
        legality=("samurai",),
    )


@pytest.fixture
def strategy() -> Card:
    return make_card(
        "s1",
        "Ambush",
        "strategy",
        focus=2,
        text="Battle: Move a Personality into this battle.",
        legality=("samurai",),
    )


@pytest.fixture
def banned_item() -> Card:
    return make_card(
        "i1",
        "Ancestral Sword of the Crab",
        "item",
        cost=4,
        force=2,
        keywords=("Weapon", "Sword"),
        banned=True,
        banned_reason="Too strong",
    )


@pytest.fixture
def catalog(
    stronghold: Card,
    sensei: Card,
    personality: Card,
    unique_personality: Card,
    experienced_personality: Card,
    holding: Card,
    strategy: Card,
    banned_item: Card,
) -> Catalog:
    return Catalog(
        [
            stronghold,
            sensei,
            personality,
            unique_personality,
            experienced_personality,
            holding,
            strategy,
            banned_item,
        ]
    )
