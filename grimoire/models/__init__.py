from grimoire.models.card import CardMetadata, card_from_scryfall
from grimoire.models.collection import Collection, CollectionCardView, InventoryEntry
from grimoire.models.deck import Board, Deck, DeckSlot, DeckSummary, SlotChange
from grimoire.models.failure import (
    CapacityExceededError,
    DeckNotFoundError,
    FailureDetail,
    FailureKind,
    KnownError,
    SideboardFullError,
    SlotConflictError,
    invalid_input,
)

__all__ = [
    "Board",
    "CapacityExceededError",
    "CardMetadata",
    "Collection",
    "CollectionCardView",
    "Deck",
    "DeckNotFoundError",
    "DeckSlot",
    "DeckSummary",
    "FailureDetail",
    "FailureKind",
    "InventoryEntry",
    "KnownError",
    "SideboardFullError",
    "SlotChange",
    "SlotConflictError",
    "card_from_scryfall",
    "invalid_input",
]
