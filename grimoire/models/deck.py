from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Board(str, Enum):
    """The two card pools composing a deck."""

    MAINBOARD = "mainboard"
    SIDEBOARD = "sideboard"


@dataclass(frozen=True, slots=True)
class DeckSlot:
    """
    Copies of one card placed on one board of a deck.

    A slot always holds at least one copy; an empty slot is deleted.
    """

    deck_id: int
    card_id: str
    board: Board
    quantity: int


@dataclass
class Deck:
    """
    A user's deck.

    Attributes:
        deck_id: Database identifier
        owner_id: User who owns the deck
        name: Display name (never empty)
        is_public: Whether non-owners may read and clone the deck
        slots: Current card placements on both boards
    """

    deck_id: int
    owner_id: str
    name: str
    is_public: bool = False
    created_at: datetime | None = None
    slots: list[DeckSlot] = field(default_factory=list)

    def board(self, board: Board) -> list[DeckSlot]:
        """Slots placed on one board."""
        return [slot for slot in self.slots if slot.board == board]

    def quantity_of(self, card_id: str, board: Board | None = None) -> int:
        """Copies of a card in the deck, on one board or across both."""
        return sum(
            slot.quantity
            for slot in self.slots
            if slot.card_id == card_id and (board is None or slot.board == board)
        )


@dataclass(frozen=True, slots=True)
class SlotChange:
    """
    Outcome of a successful slot mutation.

    Carries the previous state so a caller that applied the change
    optimistically can revert it.

    Attributes:
        card_id: Card whose slot changed
        board: Board the slot lives on
        previous_quantity: Board quantity before the change (0 if absent)
        new_quantity: Board quantity after the change (0 if removed)
        previous_total: Copies across both boards before the change
        new_total: Copies across both boards after the change
    """

    deck_id: int
    card_id: str
    board: Board
    previous_quantity: int
    new_quantity: int
    previous_total: int
    new_total: int

    @property
    def removed(self) -> bool:
        """True if the slot no longer exists after the change."""
        return self.previous_quantity > 0 and self.new_quantity == 0

    @property
    def created(self) -> bool:
        return self.previous_quantity == 0 and self.new_quantity > 0

    @property
    def changed(self) -> bool:
        """False for no-op changes (decreasing an absent slot)."""
        return self.previous_quantity != self.new_quantity


@dataclass(frozen=True, slots=True)
class DeckSummary:
    """Card counts for a deck, independent of catalog metadata."""

    total_cards: int
    mainboard_cards: int
    sideboard_cards: int
    unique_cards: int
