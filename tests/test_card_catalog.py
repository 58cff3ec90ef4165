"""Tests for the card catalog service."""

import json
from pathlib import Path
from typing import Any

import pytest

from kyuden.config import settings
from kyuden.models.card import Card, CardCategory, CardFace
from kyuden.models.failure import CardNotFoundError, DataUnavailableError
from kyuden.services.card_catalog import (
    Catalog,
    card_from_record,
    catalog_from_records,
    load_catalog,
    load_catalog_or_empty,
    parse_number,
)


@pytest.fixture
def snapshot_record() -> dict[str, Any]:
    return {
        "id": "1",
        "name": "Moto Chen - Experienced 2",
        "formatted_name": "Moto Chen - exp2",
        "category": "personality",
        "faction": "Unicorn",
        "cost": 9,
        "force": 5,
        "chi": 3,
        "keywords": ["Unique", "Samurai"],
        "text": "<b>Battle:</b> Bow target Follower.",
        "legality": ["ivory"],
        "banned": False,
        "banned_reason": None,
        "image_path": "images/cards/moto-chen-exp2.jpg",
    }


@pytest.fixture
def legacy_record() -> dict[str, Any]:
    """Older export format: every value wrapped in a list."""
    return {
        "cardid": ["42"],
        "title": ["Copper Mine"],
        "type": ["holding"],
        "cost": ["3"],
        "gold_production": ["3"],
        "text": ["Mine<br>Produces 3 gold."],
        "legality": ["samurai", "celestial"],
        "imagehash": "abc123",
    }


def write_cards(path: Path, records: Any) -> Path:
    path.write_text(json.dumps(records), encoding="utf-8")
    return path


class TestParseNumber:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [("3", 3), ("+2", 2), ("-1", -1), (4, 4), (2.0, 2), ("", None), ("X", None), (None, None)],
    )
    def test_values(self, value: Any, expected: int | None) -> None:
        assert parse_number(value) == expected

    def test_bool_is_not_a_number(self) -> None:
        assert parse_number(True) is None

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_float_is_none(self, value: float) -> None:
        assert parse_number(value) is None


class TestCardFromRecord:
    def test_snapshot_record(self, snapshot_record: dict[str, Any]) -> None:
        card = card_from_record(snapshot_record)

        assert card is not None
        assert card.card_id == "1"
        assert card.category == CardCategory.PERSONALITY
        assert card.force == 5
        assert card.focus is None
        assert card.keywords == ("Unique", "Samurai")
        assert card.text == "Battle: Bow target Follower."
        assert card.legality == ("ivory",)
        assert card.alternate_names == ("Moto Chen - exp2",)
        assert card.is_unique

    def test_legacy_record(self, legacy_record: dict[str, Any]) -> None:
        """Keywords come from the text when the record has no keyword list."""
        card = card_from_record(legacy_record)

        assert card is not None
        assert card.card_id == "42"
        assert card.name == "Copper Mine"
        assert card.category == CardCategory.HOLDING
        assert card.cost == 3
        assert card.gold_production == 3
        assert card.keywords == ("Mine",)
        assert card.text == "Produces 3 gold."
        assert card.image_hash == "abc123"

    def test_empty_keyword_list_falls_back_to_text(self) -> None:
        """An empty explicit list still lets the keyword line be read."""
        card = card_from_record(
            {
                "id": "7",
                "name": "Bayushi Aramoro",
                "category": "personality",
                "keywords": [],
                "text": "<b>Unique</b> &#8226; Samurai<br><b>Battle:</b> Bow target.",
            }
        )

        assert card is not None
        assert card.keywords == ("Unique", "Samurai")
        assert card.text == "Battle: Bow target."
        assert card.is_unique

    def test_missing_optional_fields(self) -> None:
        card = card_from_record({"name": "Ambush", "type": "Strategy"})

        assert card is not None
        assert card.card_id == "Ambush"
        assert card.category == CardCategory.STRATEGY
        assert card.keywords == ()
        assert card.text == ""
        assert card.faction is None

    def test_missing_name(self) -> None:
        assert card_from_record({"id": "1", "type": "strategy"}) is None

    def test_unknown_type(self) -> None:
        assert card_from_record({"id": "1", "name": "X", "type": "wind"}) is None

    def test_banned_without_reason_gets_default(self) -> None:
        card = card_from_record(
            {"name": "Bad Card", "type": "spell", "banned": True}, "Banned here"
        )

        assert card is not None
        assert card.banned
        assert card.banned_reason == "Banned here"

    def test_reason_ignored_when_not_banned(self) -> None:
        card = card_from_record(
            {"name": "Fine Card", "type": "spell", "banned": False, "banned_reason": "old"}
        )

        assert card is not None
        assert card.banned_reason is None

    def test_backside_object(self) -> None:
        card = card_from_record(
            {
                "name": "Two Faced",
                "type": "region",
                "backside": {"image_path": "b.jpg", "text": "<b>Back</b> text", "keywords": []},
            }
        )

        assert card is not None
        assert card.backside == CardFace(image_path="b.jpg", text="Back text")

    def test_backside_flat_fields(self) -> None:
        card = card_from_record(
            {
                "name": "Two Faced",
                "type": "region",
                "hasBackside": True,
                "backsideImagePath": "b.jpg",
                "backsideSet": "Ivory Edition",
            }
        )

        assert card is not None
        assert card.backside is not None
        assert card.backside.image_path == "b.jpg"
        assert card.backside.set_name == "Ivory Edition"


class TestCatalogFromRecords:
    def test_skips_unusable_records(self, snapshot_record: dict[str, Any]) -> None:
        catalog = catalog_from_records(
            [snapshot_record, "not a record", {"id": "2", "type": "spell"}, dict(snapshot_record)]
        )

        assert len(catalog) == 1
        assert "1" in catalog

    def test_keeps_record_order(
        self, snapshot_record: dict[str, Any], legacy_record: dict[str, Any]
    ) -> None:
        catalog = catalog_from_records([legacy_record, snapshot_record])

        assert [card.card_id for card in catalog] == ["42", "1"]


class TestCatalog:
    def test_duplicate_ids_rejected(self, personality: Card) -> None:
        with pytest.raises(ValueError, match="Duplicate card id"):
            Catalog([personality, personality])

    def test_empty(self) -> None:
        catalog = Catalog.empty()

        assert len(catalog) == 0
        assert catalog.unique_keywords() == []

    def test_get(self, catalog: Catalog, personality: Card) -> None:
        assert catalog.get("p1") == personality
        assert catalog.find_by_id("nope") is None

    def test_get_missing_raises(self, catalog: Catalog) -> None:
        with pytest.raises(CardNotFoundError) as exc_info:
            catalog.get("nope")

        assert exc_info.value.reference == "nope"

    def test_find_by_name_uses_every_candidate(
        self, catalog: Catalog, experienced_personality: Card
    ) -> None:
        assert catalog.find_by_name("Moto Chen - Experienced 2") == experienced_personality
        assert catalog.find_by_name("Moto Chen - exp2") == experienced_personality
        assert catalog.find_by_name("Moto Chen") is None

    def test_name_lookup_is_exact(self, catalog: Catalog) -> None:
        assert catalog.find_by_name("shosuro kameyoi") is None

    def test_resolve_name_missing_raises(self, catalog: Catalog) -> None:
        with pytest.raises(CardNotFoundError):
            catalog.resolve_name("Nonexistent Card Name")

    def test_first_card_wins_shared_name(self, card_factory) -> None:
        first = card_factory("a", "Copper Mine", "holding")
        second = card_factory("b", "Copper Mine", "holding")

        assert Catalog([first, second]).find_by_name("Copper Mine") == first

    def test_unique_values_sorted(self, catalog: Catalog) -> None:
        assert catalog.unique_values("category") == [
            "holding",
            "item",
            "personality",
            "sensei",
            "strategy",
            "stronghold",
        ]
        assert catalog.unique_values("faction") == ["Scorpion", "Unicorn"]
        assert catalog.unique_values("force") == [2, 3, 5]
        assert catalog.unique_values("legality") == ["emperor", "ivory", "samurai"]

    def test_unique_keywords(self, catalog: Catalog) -> None:
        assert catalog.unique_keywords() == [
            "Cavalry",
            "Courtier",
            "Mine",
            "Samurai",
            "Scorpion Clan",
            "Sword",
            "Unique",
            "Weapon",
        ]

    def test_unique_values_is_stable(self, catalog: Catalog) -> None:
        assert catalog.unique_values("keywords") == catalog.unique_values("keywords")

    def test_unique_values_unknown_field(self, catalog: Catalog) -> None:
        with pytest.raises(ValueError, match="Unsupported field"):
            catalog.unique_values("text")


class TestLoadCatalog:
    def test_load(self, tmp_path: Path, snapshot_record: dict[str, Any]) -> None:
        path = write_cards(tmp_path / "cards.json", [snapshot_record])

        catalog = load_catalog(path)

        assert len(catalog) == 1
        assert catalog.get("1").name == "Moto Chen - Experienced 2"

    def test_default_path_from_settings(
        self, tmp_path: Path, snapshot_record: dict[str, Any], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = write_cards(tmp_path / "cards.json", [snapshot_record])
        monkeypatch.setattr(settings, "card_data_path", path)

        assert len(load_catalog()) == 1

    def test_banned_cards_get_configured_reason(self, tmp_path: Path) -> None:
        path = write_cards(tmp_path / "cards.json", [{"name": "X", "type": "spell", "banned": True}])

        card = load_catalog(path).get("X")

        assert card.banned_reason == settings.default_ban_reason

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(DataUnavailableError) as exc_info:
            load_catalog(tmp_path / "missing.json")

        assert exc_info.value.detail == "File not found"
        assert exc_info.value.status_code == 503

    def test_corrupted_file(self, tmp_path: Path) -> None:
        path = tmp_path / "cards.json"
        path.write_text("[{not json", encoding="utf-8")

        with pytest.raises(DataUnavailableError) as exc_info:
            load_catalog(path)

        assert (exc_info.value.detail or "").startswith("Card data is corrupted")

    def test_not_an_array(self, tmp_path: Path) -> None:
        path = write_cards(tmp_path / "cards.json", {"cards": []})

        with pytest.raises(DataUnavailableError, match="unavailable"):
            load_catalog(path)

    def test_or_empty_degrades(self, tmp_path: Path) -> None:
        """A failed load gives an empty catalog plus the error, never a crash."""
        catalog, error = load_catalog_or_empty(tmp_path / "missing.json")

        assert len(catalog) == 0
        assert isinstance(error, DataUnavailableError)

    def test_or_empty_success(self, tmp_path: Path, snapshot_record: dict[str, Any]) -> None:
        catalog, error = load_catalog_or_empty(write_cards(tmp_path / "c.json", [snapshot_record]))

        assert len(catalog) == 1
        assert error is None

    def test_or_empty_loads_non_finite_numbers(self, tmp_path: Path) -> None:
        """NaN and Infinity are valid to the JSON reader and load as missing values."""
        path = tmp_path / "c.json"
        path.write_text(
            '[{"id": "1", "name": "A", "category": "personality", "cost": NaN, "force": Infinity}]',
            encoding="utf-8",
        )

        catalog, error = load_catalog_or_empty(path)

        assert error is None
        card = catalog.get("1")
        assert card.cost is None
        assert card.force is None
