"""
Parser for the XML card database.

Format:
    <cards>
      <card id="1234" type="personality">
        <name>Moto Chen - exp2</name>
        <clan>Unicorn</clan>
        <force>4</force>
        <chi>3</chi>
        <text><b>Unique</b> &#8226; Samurai &#8226; Cavalry<br/><b>Battle:</b> ...</text>
        <legal>samurai</legal>
        <edition>Samurai Edition</edition>
      </card>
    </cards>

Rules text may carry its markup either escaped or as child elements; both
come back as a markup string for the text normalizer.
"""

from dataclasses import dataclass
from xml.etree import ElementTree


class CardXmlError(Exception):
    """Raised when the XML card database cannot be parsed at all."""

    pass


@dataclass(frozen=True)
class XmlCard:
    """
    One <card> element, values as written. NOT YET NORMALIZED.

    Attributes:
        card_id: "id" attribute
        card_type: "type" attribute (e.g., "personality")
        name: Name as written, experienced suffix included ("Moto Chen - exp2")
        text: Rules text with inline markup
        legal: Legality tags
    """

    card_id: str | None
    card_type: str | None
    name: str | None
    clans: tuple[str, ...] = ()
    cost: str | None = None
    force: str | None = None
    chi: str | None = None
    focus: str | None = None
    personal_honor: str | None = None
    honor_requirement: str | None = None
    gold_production: str | None = None
    text: str = ""
    legal: tuple[str, ...] = ()
    editions: tuple[str, ...] = ()
    rarity: str | None = None
    artist: str | None = None
    image: str | None = None


def parse_card_xml(source: str | bytes) -> list[XmlCard]:
    """
    Parse the XML card database.

    Args:
        source: XML document

    Returns:
        One XmlCard per <card> element, in document order

    Raises:
        CardXmlError: If the document is not well-formed XML
    """
    try:
        root = ElementTree.fromstring(source)
    except ElementTree.ParseError as e:
        raise CardXmlError(f"Invalid card XML: {e}") from e

    elements = [root] if root.tag == "card" else root.iter("card")
    return [_parse_card(element) for element in elements]


def _parse_card(element: ElementTree.Element) -> XmlCard:
    text_element = element.find("text")
    return XmlCard(
        card_id=element.get("id"),
        card_type=element.get("type") or _child_text(element, "type"),
        name=_child_text(element, "name"),
        clans=_all_text(element, "clan"),
        cost=_child_text(element, "cost"),
        force=_child_text(element, "force"),
        chi=_child_text(element, "chi"),
        focus=_child_text(element, "focus"),
        personal_honor=_child_text(element, "personal_honor"),
        honor_requirement=_child_text(element, "honor_req"),
        gold_production=_child_text(element, "gold_production") or _child_text(element, "gold"),
        text=_inner_markup(text_element) if text_element is not None else "",
        legal=_all_text(element, "legal"),
        editions=_all_text(element, "edition"),
        rarity=_child_text(element, "rarity"),
        artist=_child_text(element, "artist"),
        image=_child_text(element, "image"),
    )


def _child_text(element: ElementTree.Element, tag: str) -> str | None:
    child = element.find(tag)
    if child is None or child.text is None:
        return None
    value = child.text.strip()
    return value or None


def _all_text(element: ElementTree.Element, tag: str) -> tuple[str, ...]:
    return tuple(
        child.text.strip() for child in element.findall(tag) if child.text and child.text.strip()
    )


def _inner_markup(element: ElementTree.Element) -> str:
    """Element content with child elements serialized back to markup."""
    parts = [element.text or ""]
    for child in element:
        parts.append(ElementTree.tostring(child, encoding="unicode"))
    return "".join(parts).strip()
