from dataclasses import dataclass
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR = Path(__file__).parent.parent / "data"


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="KYUDEN_")

    app_name: str = "Kyuden"
    debug: bool = False

    card_data_path: Path = DATA_DIR / "cards.json"

    # Presentation layer only; the deck and catalog logic never read these
    image_base_url: str = ""
    image_cache_path: Path | None = None

    max_copies: int = 3
    min_dynasty: int = 40
    min_fate: int = 40

    default_ban_reason: str = "This card is banned in Samurai Extended format"


settings = Settings()


@dataclass(frozen=True, slots=True)
class DeckRules:
    """
    Deck composition limits.

    Attributes:
        max_copies: Maximum copies of any non-unique card
        min_dynasty: Minimum number of Dynasty cards
        min_fate: Minimum number of Fate cards
    """

    max_copies: int = 3
    min_dynasty: int = 40
    min_fate: int = 40

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "DeckRules":
        source = source or settings
        return cls(
            max_copies=source.max_copies,
            min_dynasty=source.min_dynasty,
            min_fate=source.min_fate,
        )


# Legality tags that make a card playable in Samurai Extended
SAMURAI_EXTENDED_LEGALITY = frozenset({"celestial", "emperor", "samurai", "ivory", "20f"})
