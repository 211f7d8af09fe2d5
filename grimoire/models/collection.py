from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class InventoryEntry:
    """
    Copies of one card a user owns.

    Entries with zero copies are never stored; absence means zero.
    """

    user_id: str
    card_id: str
    quantity: int
    card_name: str = ""


@dataclass
class Collection:
    """
    A user's card inventory.

    Cards are stored by catalog id with quantity owned.
    """

    user_id: str
    entries: dict[str, InventoryEntry] = field(default_factory=dict)

    def get_quantity(self, card_id: str) -> int:
        """Get quantity owned of a specific card."""
        entry = self.entries.get(card_id)
        return entry.quantity if entry else 0

    def total_cards(self) -> int:
        """Total number of cards in collection."""
        return sum(entry.quantity for entry in self.entries.values())

    def unique_cards(self) -> int:
        """Number of unique cards in collection."""
        return len(self.entries)

    def sorted_entries(self) -> list[InventoryEntry]:
        """Entries ordered by card name, then id."""
        return sorted(self.entries.values(), key=lambda e: (e.card_name.lower(), e.card_id))


@dataclass(frozen=True, slots=True)
class CollectionCardView:
    """
    An inventory entry as seen from a deck being built.

    Attributes:
        in_deck: Copies of the card already placed on either board
        can_add: Whether one more copy fits within the owned quantity
    """

    entry: InventoryEntry
    in_deck: int

    @property
    def can_add(self) -> bool:
        return self.in_deck < self.entry.quantity

    @property
    def available(self) -> int:
        return max(self.entry.quantity - self.in_deck, 0)
