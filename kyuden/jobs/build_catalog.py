"""
Build the card data file from the XML card database.

One deterministic pipeline replaces the pile of one-off repair scripts:

    download (optional) -> parse XML -> normalize -> legality filter
        -> validate -> apply ban list -> diff against previous snapshot -> write

Running it twice on the same inputs writes the same file and reports an
empty diff.

Usage:
    python -m kyuden.jobs.build_catalog --xml data/cards.xml
    python -m kyuden.jobs.build_catalog --url https://example.com/cards.xml --banned data/banned.json
"""

import argparse
import asyncio
import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from kyuden.config import DATA_DIR, SAMURAI_EXTENDED_LEGALITY, settings
from kyuden.models.card import CardCategory, experienced_display_name
from kyuden.parsers.card_xml import XmlCard, parse_card_xml
from kyuden.services.card_catalog import parse_number
from kyuden.services.text_normalizer import normalize_card_text

logger = logging.getLogger(__name__)


class DownloadError(Exception):
    """Raised when the XML card database cannot be downloaded."""

    pass


@dataclass
class SnapshotDiff:
    """Card ids added, removed, and changed relative to the previous snapshot."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    changed: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.changed)


@dataclass
class BuildReport:
    """What a pipeline run did."""

    output_path: Path
    written: int
    skipped_illegal: int = 0
    rejected: list[str] = field(default_factory=list)
    diff: SnapshotDiff = field(default_factory=SnapshotDiff)


# =============================================================================
# DOWNLOAD
# =============================================================================


async def download_card_xml(url: str, output_path: Path) -> Path:
    """
    Download the XML card database.

    Raises:
        DownloadError: If the download fails
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        async with (
            httpx.AsyncClient(timeout=300.0, follow_redirects=True) as client,
            client.stream("GET", url) as response,
        ):
            response.raise_for_status()
            with open(output_path, "wb") as f:
                async for chunk in response.aiter_bytes(8192):
                    f.write(chunk)
    except httpx.HTTPStatusError as e:
        raise DownloadError(f"Failed to download {url}: HTTP {e.response.status_code}") from e
    except httpx.RequestError as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e

    return output_path


# =============================================================================
# NORMALIZE / FILTER / VALIDATE
# =============================================================================


def is_format_legal(legal: Iterable[str], allowed: frozenset[str] = SAMURAI_EXTENDED_LEGALITY) -> bool:
    """True if any legality tag is in the allowed set (case-insensitive)."""
    return any(tag.lower() in allowed for tag in legal)


def normalize_xml_card(xml_card: XmlCard) -> dict[str, Any]:
    """
    Turn an XML card into a snapshot record.

    Experienced names get their display form ("- exp2" -> "- Experienced 2");
    the name as written is kept as ``formatted_name``.
    """
    raw_name = xml_card.name or ""
    name = experienced_display_name(raw_name)
    normalized = normalize_card_text(xml_card.text)
    category = CardCategory.parse(xml_card.card_type)

    return {
        "id": xml_card.card_id,
        "name": name,
        "formatted_name": raw_name if raw_name != name else None,
        "category": category.value if category else xml_card.card_type,
        "faction": xml_card.clans[0] if xml_card.clans else None,
        "cost": parse_number(xml_card.cost),
        "force": parse_number(xml_card.force),
        "chi": parse_number(xml_card.chi),
        "focus": parse_number(xml_card.focus),
        "personal_honor": parse_number(xml_card.personal_honor),
        "honor_requirement": parse_number(xml_card.honor_requirement),
        "gold_production": parse_number(xml_card.gold_production),
        "text": normalized.text,
        "keywords": list(normalized.keywords),
        "legality": list(xml_card.legal),
        "banned": False,
        "banned_reason": None,
        "image_path": xml_card.image,
        "rarity": xml_card.rarity,
        "set_name": xml_card.editions[0] if xml_card.editions else None,
        "artist": xml_card.artist,
    }


def validate_record(record: dict[str, Any]) -> str | None:
    """Reason a record cannot be used, or None if it is fine."""
    if not record.get("id"):
        return f"{record.get('name') or '<unnamed>'}: missing id"
    if not record.get("name"):
        return f"{record['id']}: missing name"
    if CardCategory.parse(record.get("category")) is None:
        return f"{record['id']} ({record['name']}): unknown type {record.get('category')!r}"
    return None


def apply_ban_list(
    records: list[dict[str, Any]], banned: dict[str, str | None], default_reason: str
) -> int:
    """
    Mark banned cards in place. Matches on name or formatted name.

    Returns:
        Number of records marked banned
    """
    marked = 0
    for record in records:
        for name in (record["name"], record.get("formatted_name")):
            if name and name in banned:
                record["banned"] = True
                record["banned_reason"] = banned[name] or default_reason
                marked += 1
                break
    return marked


def build_records(
    xml_cards: Iterable[XmlCard],
    *,
    allowed_legality: frozenset[str] | None = SAMURAI_EXTENDED_LEGALITY,
    banned: dict[str, str | None] | None = None,
) -> tuple[list[dict[str, Any]], int, list[str]]:
    """
    Normalize, filter and validate XML cards.

    Args:
        xml_cards: Parsed XML cards
        allowed_legality: Keep only cards with one of these tags; None keeps all
        banned: Ban list {card name: reason or None}

    Returns:
        (records sorted by id, number skipped as not legal, rejection reasons)
    """
    records: dict[str, dict[str, Any]] = {}
    skipped_illegal = 0
    rejected: list[str] = []

    for xml_card in xml_cards:
        if allowed_legality is not None and not is_format_legal(xml_card.legal, allowed_legality):
            skipped_illegal += 1
            continue

        record = normalize_xml_card(xml_card)
        problem = validate_record(record)
        if problem is None and record["id"] in records:
            problem = f"{record['id']} ({record['name']}): duplicate id"
        if problem is not None:
            rejected.append(problem)
            continue

        records[record["id"]] = record

    ordered = [records[card_id] for card_id in sorted(records, key=_id_sort_key)]
    if banned:
        apply_ban_list(ordered, banned, settings.default_ban_reason)

    return ordered, skipped_illegal, rejected


def _id_sort_key(card_id: str) -> tuple[int, int | str]:
    """Numeric ids first in numeric order, then the rest alphabetically."""
    return (0, int(card_id)) if card_id.isdigit() else (1, card_id)


# =============================================================================
# SNAPSHOTS
# =============================================================================


def diff_snapshots(previous: list[dict[str, Any]], current: list[dict[str, Any]]) -> SnapshotDiff:
    """Compare two snapshots by card id."""
    before = {str(r.get("id")): r for r in previous if isinstance(r, dict)}
    after = {str(r.get("id")): r for r in current}

    return SnapshotDiff(
        added=sorted(after.keys() - before.keys(), key=_id_sort_key),
        removed=sorted(before.keys() - after.keys(), key=_id_sort_key),
        changed=sorted(
            (card_id for card_id in after.keys() & before.keys() if after[card_id] != before[card_id]),
            key=_id_sort_key,
        ),
    )


def read_snapshot(path: Path) -> list[dict[str, Any]]:
    """Previous snapshot, or [] if there is none or it is unreadable."""
    if not path.exists():
        return []
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Previous snapshot %s unreadable, treating as empty: %s", path, e)
        return []
    return data if isinstance(data, list) else []


def write_snapshot(records: list[dict[str, Any]], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(records, f, indent=2, ensure_ascii=False, sort_keys=True)
        f.write("\n")


def read_ban_list(path: Path) -> dict[str, str | None]:
    """
    Ban list file: {"Card Name": "reason"} (reason may be null).

    Raises:
        ValueError: If the file is not a JSON object
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Ban list {path} must be a JSON object of name -> reason")
    return {str(name): (str(reason) if reason else None) for name, reason in data.items()}


# =============================================================================
# PIPELINE
# =============================================================================


def run_build(
    xml_path: Path,
    output_path: Path,
    *,
    banned_path: Path | None = None,
    all_formats: bool = False,
) -> BuildReport:
    """
    Run the pipeline on a local XML file.

    Raises:
        CardXmlError: If the XML cannot be parsed
        FileNotFoundError: If an input file is missing
    """
    xml_cards = parse_card_xml(xml_path.read_bytes())
    logger.info("Parsed %d cards from %s", len(xml_cards), xml_path)

    banned = read_ban_list(banned_path) if banned_path else None
    records, skipped_illegal, rejected = build_records(
        xml_cards,
        allowed_legality=None if all_formats else SAMURAI_EXTENDED_LEGALITY,
        banned=banned,
    )
    for reason in rejected:
        logger.warning("Rejected card %s", reason)

    diff = diff_snapshots(read_snapshot(output_path), records)
    write_snapshot(records, output_path)

    logger.info(
        "Wrote %d cards to %s (%d added, %d removed, %d changed, %d not legal, %d rejected)",
        len(records),
        output_path,
        len(diff.added),
        len(diff.removed),
        len(diff.changed),
        skipped_illegal,
        len(rejected),
    )

    return BuildReport(
        output_path=output_path,
        written=len(records),
        skipped_illegal=skipped_illegal,
        rejected=rejected,
        diff=diff,
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Build the card data file from the XML database")
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--xml", type=Path, help="Local XML card database")
    source.add_argument("--url", help="Download the XML card database from this URL first")
    parser.add_argument(
        "--output",
        type=Path,
        default=settings.card_data_path,
        help=f"Card data file to write (default: {settings.card_data_path})",
    )
    parser.add_argument("--banned", type=Path, help="Ban list JSON {name: reason}")
    parser.add_argument(
        "--all-formats",
        action="store_true",
        help="Keep every card instead of only Samurai Extended legal ones",
    )

    args = parser.parse_args(argv)

    xml_path = args.xml
    if args.url:
        xml_path = asyncio.run(download_card_xml(args.url, DATA_DIR / "cards.xml"))

    report = run_build(
        xml_path,
        args.output,
        banned_path=args.banned,
        all_formats=args.all_formats,
    )

    print(f"Wrote {report.written} cards to {report.output_path}")
    if report.diff.is_empty:
        print("No changes since the previous snapshot")
    else:
        print(
            f"  {len(report.diff.added)} added, {len(report.diff.removed)} removed, "
            f"{len(report.diff.changed)} changed"
        )
    if report.rejected:
        print(f"Rejected {len(report.rejected)} cards:")
        for reason in report.rejected:
            print(f"  {reason}")


if __name__ == "__main__":
    main()
