"""Tests for settings and deck rules."""

import pytest

from kyuden.config import SAMURAI_EXTENDED_LEGALITY, DeckRules, Settings


class TestSettings:
    def test_defaults(self) -> None:
        source = Settings(_env_file=None)

        assert source.max_copies == 3
        assert source.min_dynasty == 40
        assert source.min_fate == 40
        assert source.card_data_path.name == "cards.json"

    def test_environment_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("KYUDEN_MAX_COPIES", "2")
        monkeypatch.setenv("KYUDEN_IMAGE_BASE_URL", "https://cdn.test")

        source = Settings(_env_file=None)

        assert source.max_copies == 2
        assert source.image_base_url == "https://cdn.test"


class TestDeckRules:
    def test_from_settings(self) -> None:
        rules = DeckRules.from_settings(Settings(_env_file=None, min_fate=30))

        assert rules == DeckRules(max_copies=3, min_dynasty=40, min_fate=30)

    def test_samurai_extended_tags_are_lowercase(self) -> None:
        assert all(tag == tag.lower() for tag in SAMURAI_EXTENDED_LEGALITY)
