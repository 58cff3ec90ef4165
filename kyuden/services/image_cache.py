"""
Card artwork lookup for the presentation layer.

Maps card names to resolved image paths. The cache is an explicit object
owned by whoever renders cards (the HTTP layer); catalog and deck code never
touch it.
"""

import json
import logging
from pathlib import Path

from kyuden.models.card import Card

logger = logging.getLogger(__name__)


class ImagePathCache:
    """
    Name -> image path cache with optional JSON persistence.

    Usage:
        cache = ImagePathCache.load(path)
        url = cache.resolve(card, base_url="https://cdn.example.com")
        cache.save(path)
    """

    def __init__(self, paths: dict[str, str] | None = None) -> None:
        self._paths: dict[str, str] = dict(paths or {})

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, card_name: object) -> bool:
        return card_name in self._paths

    def get(self, card_name: str) -> str | None:
        return self._paths.get(card_name)

    def put(self, card_name: str, image_path: str) -> None:
        self._paths[card_name] = image_path

    def invalidate(self, card_name: str) -> None:
        """Forget one card's path. No-op if it is not cached."""
        self._paths.pop(card_name, None)

    def clear(self) -> None:
        self._paths.clear()

    def resolve(self, card: Card, base_url: str = "") -> str | None:
        """
        Image URL for a card's front face, caching the result.

        Cached paths win, then the card's own image path, then the
        ``images/cards/<hash>.jpg`` convention. None if nothing is known.
        """
        path = self._paths.get(card.name)
        if path is None:
            path = image_path_for(card)
            if path is None:
                return None
            self._paths[card.name] = path
        return join_url(base_url, path)

    @classmethod
    def load(cls, path: Path | None) -> "ImagePathCache":
        """
        Load a persisted cache. A missing or unreadable file gives an empty cache.
        """
        if path is None or not path.exists():
            return cls()
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable image cache %s: %s", path, e)
            return cls()
        if not isinstance(data, dict):
            logger.warning("Ignoring image cache %s: expected an object", path)
            return cls()
        return cls({str(k): str(v) for k, v in data.items() if v})

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self._paths, f, indent=2, sort_keys=True)


def image_path_for(card: Card) -> str | None:
    """Image path from the card record alone."""
    if card.image_path:
        return card.image_path
    if card.image_hash:
        return f"images/cards/{card.image_hash}.jpg"
    return None


def join_url(base_url: str, path: str) -> str:
    if not base_url or path.startswith(("http://", "https://")):
        return path
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"
