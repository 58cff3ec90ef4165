"""Tests for deck list export and import."""

import pytest

from kyuden.models.card import Card
from kyuden.models.deck import BannedCard, Deck, DeckEntry, MissingCard
from kyuden.models.failure import DeckTextError
from kyuden.services.card_catalog import Catalog
from kyuden.services.deck_formatter import export_deck
from kyuden.services.deck_importer import import_deck
from kyuden.services.deck_service import add_card, group_by_category, validate_deck


@pytest.fixture
def full_deck(
    stronghold: Card, sensei: Card, personality: Card, holding: Card, strategy: Card
) -> Deck:
    return Deck(
        entries=(
            DeckEntry(stronghold, 1),
            DeckEntry(sensei, 1),
            DeckEntry(personality, 3),
            DeckEntry(holding, 2),
            DeckEntry(strategy, 2),
        )
    )


class TestExportDeck:
    def test_export_sections(self, full_deck: Deck) -> None:
        assert export_deck(full_deck) == (
            "# Stronghold\n"
            "1 Midday Shadow Court\n"
            "\n"
            "# Sensei\n"
            "1 Bayushi Kachiko Sensei\n"
            "\n"
            "# Dynasty\n"
            "# Personalities (3)\n"
            "3 Shosuro Kameyoi\n"
            "# Holdings (2)\n"
            "2 Copper Mine\n"
            "\n"
            "# Fate\n"
            "# Strategies (2)\n"
            "2 Ambush\n"
        )

    def test_empty_sections_omitted(self, personality: Card) -> None:
        text = export_deck(add_card(Deck(), personality))

        assert text == "# Dynasty\n# Personalities (1)\n1 Shosuro Kameyoi\n"
        assert "# Fate" not in text
        assert "# Stronghold" not in text

    def test_empty_deck(self) -> None:
        assert export_deck(Deck()) == ""


class TestImportDeck:
    def test_import_resolves_names(self, catalog: Catalog) -> None:
        result = import_deck("1 Midday Shadow Court\n3 Shosuro Kameyoi", catalog)

        assert result.deck.quantities() == {"sh1": 1, "p1": 3}
        assert result.missing_cards == ()
        assert result.banned_cards == ()

    def test_missing_card_reported(self, catalog: Catalog) -> None:
        result = import_deck("3 Nonexistent Card Name", catalog)

        assert len(result.deck) == 0
        assert result.missing_cards == (MissingCard(name="Nonexistent Card Name", quantity=3),)

    def test_malformed_line_silently_skipped(self, catalog: Catalog) -> None:
        result = import_deck("abc Some Card", catalog)

        assert len(result.deck) == 0
        assert result.missing_cards == ()
        assert result.banned_cards == ()

    def test_banned_card_reported_and_added(self, catalog: Catalog) -> None:
        """Banning is advisory: the card still goes into the deck."""
        result = import_deck("2 Ancestral Sword of the Crab", catalog)

        assert result.deck.quantities() == {"i1": 2}
        assert result.banned_cards == (
            BannedCard(name="Ancestral Sword of the Crab", quantity=2, reason="Too strong"),
        )

    def test_quantities_accumulate(self, catalog: Catalog) -> None:
        result = import_deck("1 Ambush\n# Fate\n2 Ambush", catalog)

        assert result.deck.quantities() == {"s1": 3}

    def test_quantities_taken_as_written(self, catalog: Catalog) -> None:
        """Copy limits are for validation to report."""
        result = import_deck("5 Ambush\n2 Bayushi Kachiko", catalog)

        assert result.deck.quantities() == {"s1": 5, "p2": 2}

    def test_alternate_name_resolves(self, catalog: Catalog) -> None:
        result = import_deck("1 Moto Chen - exp2", catalog)

        assert result.deck.quantities() == {"p3": 1}

    def test_first_seen_order(self, catalog: Catalog) -> None:
        result = import_deck("2 Ambush\n1 Copper Mine\n1 Ambush", catalog)

        assert [entry.card_id for entry in result.deck] == ["s1", "h1"]

    def test_not_text_raises(self, catalog: Catalog) -> None:
        with pytest.raises(DeckTextError):
            import_deck(None, catalog)

    def test_empty_catalog_reports_everything_missing(self) -> None:
        result = import_deck("1 Ambush\n2 Copper Mine", Catalog.empty())

        assert [missing.name for missing in result.missing_cards] == ["Ambush", "Copper Mine"]


class TestRoundTrip:
    def test_import_export_round_trip(self, full_deck: Deck, catalog: Catalog) -> None:
        result = import_deck(export_deck(full_deck), catalog)

        assert result.deck.quantities() == full_deck.quantities()
        assert group_by_category(result.deck) == group_by_category(full_deck)
        assert result.missing_cards == ()

    def test_export_is_stable(self, full_deck: Deck, catalog: Catalog) -> None:
        text = export_deck(full_deck)

        assert export_deck(import_deck(text, catalog).deck) == text


class TestStrongholdScenario:
    def test_stronghold_and_dynasty_import(self, catalog: Catalog) -> None:
        text = "# Stronghold\n1 Midday Shadow Court\n\n# Dynasty\n3 Shosuro Kameyoi"

        result = import_deck(text, catalog)
        sections = group_by_category(result.deck)

        assert [(e.card.name, e.quantity) for e in sections.stronghold] == [
            ("Midday Shadow Court", 1)
        ]
        assert [(e.card.name, e.quantity) for e in sections.dynasty["Personalities"]] == [
            ("Shosuro Kameyoi", 3)
        ]

        validation = validate_deck(result.deck)
        assert not validation.valid
        assert "Dynasty deck needs at least 40 cards (currently 3)" in validation.errors
        assert "Deck must contain exactly 1 Stronghold" not in validation.errors
