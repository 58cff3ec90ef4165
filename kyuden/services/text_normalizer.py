"""
Card text normalizer.

Turns raw rules text from the card database into keywords plus readable text.

Raw text looks like:

    <b>Unique</b> &#8226; Samurai &#8226; Cavalry<br><b>Battle:</b> Bow target Follower.

The first line (up to the first line break) is the keyword line. Keywords are
only ever recognised from ``KEYWORD_VOCABULARY``. Bold text ending in a colon
is a trigger label ("Battle:", "Reaction:") and stays in the body as plain
text. Other bold text that is exactly a keyword is removed from the body.

Matching rules for a keyword-line token:
1. Exact, case-insensitive match against the vocabulary.
2. Otherwise, for a short capitalised token without sentence punctuation,
   the LONGEST vocabulary entry contained in it as a whole phrase
   ("Experienced 2 Moto Chen" -> "Experienced 2", not "Experienced").

A first line in which no token matches is prose and stays in the body.
"""

from __future__ import annotations

import html
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

BULLET = "•"

KEYWORD_VOCABULARY: tuple[str, ...] = (
    # Deck construction
    "Unique",
    "Singular",
    "Limited",
    "Kharmic",
    "Loyal",
    "Proud",
    "Resilient",
    "Fear",
    "Ranged",
    "Experienced",
    "Experienced 2",
    "Experienced 3",
    "Experienced 4",
    "Experienced 5",
    # Roles
    "Samurai",
    "Courtier",
    "Shugenja",
    "Monk",
    "Ninja",
    "Ronin",
    "Duelist",
    "Tactician",
    "Conqueror",
    "Destroyer",
    "Magistrate",
    "Emerald Magistrate",
    "Jade Magistrate",
    "Scout",
    "Berserker",
    "Cavalry",
    "Tattooed",
    "Kolat",
    "Imperial",
    "Thunder",
    "Ancestor",
    "Kiho",
    "Kata",
    "Spirit",
    "Nonhuman",
    "Naga",
    "Nezumi",
    "Shadowlands",
    "Lost",
    "Oni",
    "Undead",
    "Goblin",
    "Ogre",
    "Troll",
    "Elemental",
    "Dragon",
    # Elements
    "Air",
    "Earth",
    "Fire",
    "Water",
    "Void",
    "Maho",
    # Holdings and items
    "Farm",
    "Mine",
    "Temple",
    "Castle",
    "Dojo",
    "Artisan",
    "Gaijin",
    "Weapon",
    "Armor",
    "Sword",
    "Bow",
    "Spear",
    "Polearm",
    "Staff",
    "Relic",
    "Vehicle",
    "Ship",
    "Horde",
    "Unaligned",
    # Clans
    "Crab Clan",
    "Crane Clan",
    "Dragon Clan",
    "Lion Clan",
    "Mantis Clan",
    "Phoenix Clan",
    "Scorpion Clan",
    "Spider Clan",
    "Unicorn Clan",
    "Brotherhood of Shinsei",
    "Toturi's Army",
)

_BULLET_ENTITIES = re.compile(r"&#0*8226;|&#0*149;|&bull;|&middot;|&#0*183;|[\u0095·]", re.I)
_LINE_BREAK = re.compile(r"<br\s*/?>|\r?\n", re.I)
_BOLD = re.compile(r"<(b|strong)>(.*?)</\1>", re.I | re.S)
_ITALIC = re.compile(r"<(i|em)>(.*?)</\1>", re.I | re.S)
_TAG = re.compile(r"<[^>]*>")
_SPACES = re.compile(r"[ \t\u00a0]+")
# Keyword-line tokens never carry sentence punctuation
_SENTENCE_PUNCTUATION = re.compile(r"[.,;:!?+()\"]")
_LOWERCASE_JOINERS = frozenset({"of", "the"})


@dataclass(frozen=True)
class NormalizedText:
    """Keywords found in a card's text plus its readable body."""

    keywords: tuple[str, ...] = ()
    text: str = ""


@dataclass
class KeywordMatcher:
    """
    Matches raw tokens against a closed keyword vocabulary.

    Lookups return the vocabulary's own spelling.
    """

    vocabulary: Sequence[str] = KEYWORD_VOCABULARY
    _by_lower: dict[str, str] = field(init=False, repr=False)
    _patterns: list[tuple[str, re.Pattern[str]]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._by_lower = {keyword.lower(): keyword for keyword in self.vocabulary}
        # Longest first so the first containment hit is the longest match
        ordered = sorted(self.vocabulary, key=len, reverse=True)
        self._patterns = [
            (keyword, re.compile(rf"(?<!\w){re.escape(keyword)}(?!\w)", re.I))
            for keyword in ordered
        ]

    def exact(self, token: str) -> str | None:
        """Exact (case-insensitive) vocabulary lookup."""
        return self._by_lower.get(token.strip().lower())

    def match(self, token: str) -> str | None:
        """
        Exact match, falling back to the longest contained vocabulary entry.

        The fallback only applies to tokens shaped like a keyword phrase, so
        rules prose ("Target Unique Personality gains +2F.") never matches.
        """
        found = self.exact(token)
        if found is not None:
            return found
        if not _looks_like_keyword(token):
            return None
        for keyword, pattern in self._patterns:
            if pattern.search(token):
                return keyword
        return None


_default_matcher = KeywordMatcher()


def normalize_bullets(text: str) -> str:
    """Replace every bullet encoding with a single bullet character."""
    return _BULLET_ENTITIES.sub(BULLET, text)


def strip_markup(text: str) -> str:
    """Remove every markup tag, keeping the content."""
    return _TAG.sub("", text)


def clean_keywords(raw_keywords: Iterable[object]) -> tuple[str, ...]:
    """Strip tags from an explicit keyword list, dropping blanks and duplicates."""
    keywords: list[str] = []
    for raw in raw_keywords:
        if not isinstance(raw, str):
            continue
        keyword = strip_markup(html.unescape(raw)).strip()
        if keyword and keyword not in keywords:
            keywords.append(keyword)
    return tuple(keywords)


def normalize_card_text(raw: object, matcher: KeywordMatcher | None = None) -> NormalizedText:
    """
    Split raw rules text into keywords and readable text.

    Absent or non-string input gives an empty result rather than an error.

    Args:
        raw: Raw rules text with inline markup
        matcher: Keyword matcher; defaults to the built-in vocabulary

    Returns:
        NormalizedText with recognised keywords (in order of appearance)
        and the body text with markup removed
    """
    if not isinstance(raw, str) or not raw.strip():
        return NormalizedText()

    matcher = matcher or _default_matcher
    text = normalize_bullets(html.unescape(raw))

    keywords: list[str] = []

    def add(keyword: str | None) -> None:
        if keyword is not None and keyword not in keywords:
            keywords.append(keyword)

    body = text
    parts = _LINE_BREAK.split(text, maxsplit=1)
    if len(parts) == 2 and not _has_trigger_label(parts[0]):
        tokens = [t for t in strip_markup(parts[0]).split(BULLET) if t.strip()]
        line_keywords = [k for k in (matcher.match(t) for t in tokens) if k is not None]
        # A first line with no recognisable keyword is rules text
        if line_keywords:
            body = parts[1]
            for keyword in line_keywords:
                add(keyword)

    def replace_bold(match: re.Match[str]) -> str:
        content = strip_markup(match.group(2)).strip()
        if content.endswith(":"):
            return content
        keyword = matcher.exact(content)
        if keyword is not None:
            add(keyword)
            return ""
        return f"**{content}**" if content else ""

    body = _BOLD.sub(replace_bold, body)
    body = _ITALIC.sub(lambda m: f"*{strip_markup(m.group(2)).strip()}*", body)
    body = _LINE_BREAK.sub("\n", body)
    body = strip_markup(body)

    return NormalizedText(keywords=tuple(keywords), text=_tidy(body))


def plain_text(raw: object) -> str:
    """
    Strip markup from text that has no keyword preamble.

    Used for text that was already separated from its keywords upstream.
    """
    if not isinstance(raw, str):
        return ""
    text = normalize_bullets(html.unescape(raw))
    text = _LINE_BREAK.sub("\n", text)
    return _tidy(strip_markup(text))


def _has_trigger_label(segment: str) -> bool:
    """True if a segment contains a bold trigger label such as "Battle:"."""
    return any(strip_markup(m.group(2)).strip().endswith(":") for m in _BOLD.finditer(segment))


def _looks_like_keyword(token: str) -> bool:
    """Short, unpunctuated, capitalised phrase such as "Light Cavalry Unit"."""
    words = token.split()
    if not words or len(words) > 5 or _SENTENCE_PUNCTUATION.search(token):
        return False
    return all(w[0].isupper() or w[0].isdigit() or w in _LOWERCASE_JOINERS for w in words)


def _tidy(text: str) -> str:
    """Collapse runs of spaces, drop stray bullets and blank edges."""
    lines: list[str] = []
    for line in text.split("\n"):
        line = _SPACES.sub(" ", line).strip()
        line = line.strip(BULLET).strip()
        if line:
            lines.append(line)
    return "\n".join(lines)
