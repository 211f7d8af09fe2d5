"""
Deck list export.

Renders a deck as the plain-text list that Arena and similar clients
import:

    Deck
    4 Lightning Bolt (LEB) 163

    Sideboard
    2 Abrade (VOW) 139

Export is a snapshot over the metadata resolved so far. Slots whose card
has no metadata yet are left out instead of failing the export.
"""

from collections.abc import Iterable, Mapping

from grimoire.models.card import CardMetadata
from grimoire.models.deck import Board, DeckSlot


def format_export(slots: Iterable[DeckSlot], metadata: Mapping[str, CardMetadata]) -> str:
    """
    Format a deck as import text.

    Args:
        slots: Deck slots on both boards, in display order
        metadata: Resolved metadata keyed by card id

    Returns:
        Deck list text. The sideboard section is present only when the
        deck has sideboard slots.
    """
    mainboard: list[DeckSlot] = []
    sideboard: list[DeckSlot] = []
    for slot in slots:
        if slot.board == Board.SIDEBOARD:
            sideboard.append(slot)
        else:
            mainboard.append(slot)

    lines: list[str] = ["Deck"]
    lines.extend(_format_section(mainboard, metadata))

    if sideboard:
        lines.append("")
        lines.append("Sideboard")
        lines.extend(_format_section(sideboard, metadata))

    return "\n".join(lines)


def _format_section(slots: list[DeckSlot], metadata: Mapping[str, CardMetadata]) -> list[str]:
    lines: list[str] = []
    for slot in slots:
        card = metadata.get(slot.card_id)
        if card is None:
            continue
        lines.append(_format_card_line(slot.quantity, card))
    return lines


def _format_card_line(quantity: int, card: CardMetadata) -> str:
    """Format a single card line in Arena format."""
    return f"{quantity} {card.name} ({card.set_code.upper()}) {card.collector_number}"
