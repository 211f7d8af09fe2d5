"""
Deck statistics.

Pure aggregations over a deck's slots and whatever card metadata has been
resolved so far. Nothing here reads or writes storage, so results can be
recomputed on every request.

Metadata is fetched from the catalog asynchronously and may lag behind
the deck. Slots whose card is not in the metadata mapping are skipped:
they count towards neither the mana curve nor the type distribution.
"""

import math
from collections.abc import Iterable, Mapping

from grimoire.config import MANA_CURVE_TOP_BUCKET
from grimoire.models.card import CardMetadata
from grimoire.models.deck import Board, DeckSlot, DeckSummary

TOP_BUCKET_LABEL = f"{MANA_CURVE_TOP_BUCKET}+"

# Order matters - first match wins
PRIMARY_TYPES: tuple[str, ...] = (
    "Creature",
    "Land",
    "Sorcery",
    "Instant",
    "Artifact",
    "Enchantment",
    "Planeswalker",
)

OTHER_TYPE = "Other"


def classify_primary_type(type_line: str) -> str:
    """Return the first primary type found in a type line, or "Other"."""
    for card_type in PRIMARY_TYPES:
        if card_type in type_line:
            return card_type
    return OTHER_TYPE


def mana_curve_label(mana_value: float) -> str:
    """Curve bucket for a mana value: "0".."6", or "7+"."""
    bucket = math.floor(mana_value)
    if bucket >= MANA_CURVE_TOP_BUCKET:
        return TOP_BUCKET_LABEL
    return str(max(bucket, 0))


def _mainboard(slots: Iterable[DeckSlot]) -> list[DeckSlot]:
    return [slot for slot in slots if slot.board == Board.MAINBOARD]


def compute_mana_curve(
    slots: Iterable[DeckSlot], metadata: Mapping[str, CardMetadata]
) -> list[tuple[str, int]]:
    """
    Count mainboard non-land cards by mana value.

    Args:
        slots: Deck slots on either board; only mainboard slots count
        metadata: Resolved metadata keyed by card id

    Returns:
        (label, count) pairs for "0" through "6" followed by "7+".
        Every bucket is present even when empty.
    """
    labels = [str(value) for value in range(MANA_CURVE_TOP_BUCKET)] + [TOP_BUCKET_LABEL]
    curve = dict.fromkeys(labels, 0)

    for slot in _mainboard(slots):
        card = metadata.get(slot.card_id)
        if card is None or card.is_land:
            continue
        curve[mana_curve_label(card.mana_value)] += slot.quantity

    return list(curve.items())


def compute_type_distribution(
    slots: Iterable[DeckSlot], metadata: Mapping[str, CardMetadata]
) -> dict[str, int]:
    """
    Count mainboard cards by primary type.

    Only types with at least one resolved card appear in the result.
    """
    distribution: dict[str, int] = {}

    for slot in _mainboard(slots):
        card = metadata.get(slot.card_id)
        if card is None or not card.type_line:
            continue
        primary_type = classify_primary_type(card.type_line)
        distribution[primary_type] = distribution.get(primary_type, 0) + slot.quantity

    return distribution


def summarize_deck(slots: Iterable[DeckSlot]) -> DeckSummary:
    """Card counts per board. Needs no metadata."""
    mainboard = 0
    sideboard = 0
    unique: set[str] = set()

    for slot in slots:
        if slot.board == Board.SIDEBOARD:
            sideboard += slot.quantity
        else:
            mainboard += slot.quantity
        unique.add(slot.card_id)

    return DeckSummary(
        total_cards=mainboard + sideboard,
        mainboard_cards=mainboard,
        sideboard_cards=sideboard,
        unique_cards=len(unique),
    )
