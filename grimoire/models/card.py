from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class CardMetadata:
    """
    Catalog metadata for a single card printing.

    Attributes:
        card_id: Scryfall card id (UUID string)
        name: Card name as printed in English
        mana_value: Converted mana cost (may be fractional for un-cards)
        type_line: Full type line, e.g. "Legendary Creature — Elf Druid"
        set_code: Set code as returned by the catalog (usually lowercase)
        collector_number: Collector number within the set
        image_url: Small image URL for display, if any
    """

    card_id: str
    name: str
    mana_value: float
    type_line: str
    set_code: str
    collector_number: str
    image_url: str | None = None

    @property
    def is_land(self) -> bool:
        return "land" in self.type_line.lower()


@dataclass(frozen=True, slots=True)
class LocalizedPrinting:
    """
    A single printing as shown on a card detail page.

    Text fields fall back to the English oracle text when the printing
    has no localized text.
    """

    card: CardMetadata
    lang: str
    printed_name: str
    text: str
    flavor_text: str | None = None
    large_image_url: str | None = None


def card_from_scryfall(payload: dict[str, Any]) -> CardMetadata:
    """
    Translate a Scryfall card object into CardMetadata.

    Multi-faced cards carry type line and images on their faces; the
    first face is used when the top-level field is missing.
    """
    faces = payload.get("card_faces") or []
    first_face: dict[str, Any] = faces[0] if faces else {}

    type_line = payload.get("type_line") or first_face.get("type_line") or ""

    image_uris = payload.get("image_uris") or first_face.get("image_uris") or {}

    return CardMetadata(
        card_id=str(payload["id"]),
        name=str(payload.get("name", "")),
        mana_value=float(payload.get("cmc", 0) or 0),
        type_line=str(type_line),
        set_code=str(payload.get("set", "")),
        collector_number=str(payload.get("collector_number", "")),
        image_url=image_uris.get("small"),
    )


def printing_from_scryfall(payload: dict[str, Any]) -> LocalizedPrinting:
    """Translate a Scryfall card object into a LocalizedPrinting."""
    faces = payload.get("card_faces") or []
    first_face: dict[str, Any] = faces[0] if faces else {}
    image_uris = payload.get("image_uris") or first_face.get("image_uris") or {}

    return LocalizedPrinting(
        card=card_from_scryfall(payload),
        lang=str(payload.get("lang", "en")),
        printed_name=str(payload.get("printed_name") or payload.get("name", "")),
        text=str(payload.get("printed_text") or payload.get("oracle_text") or ""),
        flavor_text=payload.get("flavor_text"),
        large_image_url=image_uris.get("large"),
    )
