"""
Deck composition rules.

Keeps deck placements consistent with the owner's inventory:

- Copies of a card across mainboard and sideboard never exceed the copies
  owned, checked on every increase.
- The sideboard never holds more than SIDEBOARD_MAX_SIZE cards.
- A slot never stores zero copies; reaching zero deletes it.
- Decreasing a slot that does not exist is a no-op, not an error.

Every mutation reads the current totals and writes the new slot under a
keyed lock, then commits before the lock is released. The slot write is
itself a compare-and-swap, so a writer in another process that raced us
fails with SlotConflictError instead of overshooting.

Inventory and decks are not reconciled with each other. Lowering an owned
quantity leaves existing placements alone; only new increases are
checked against it. find_overcommitted_cards() reports such cards.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from grimoire.config import SIDEBOARD_MAX_SIZE
from grimoire.db.operations import compare_and_set_slot, get_quantity, load_deck
from grimoire.models.collection import Collection, CollectionCardView
from grimoire.models.deck import Board, Deck, SlotChange
from grimoire.models.failure import (
    CapacityExceededError,
    KnownError,
    SideboardFullError,
    SlotConflictError,
    invalid_input,
)
from grimoire.services.deck_library import get_owned_deck

logger = logging.getLogger(__name__)


class KeyedLocks:
    """
    asyncio locks created on demand per key and dropped when unused.

    hold() acquires several keys in sorted order so two callers asking
    for overlapping keys cannot deadlock.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._holders: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, *keys: str) -> AsyncIterator[None]:
        async with AsyncExitStack() as stack:
            for key in sorted(set(keys)):
                await stack.enter_async_context(self._acquire(key))
            yield

    @asynccontextmanager
    async def _acquire(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._holders[key] = self._holders.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._holders[key] -= 1
            if self._holders[key] == 0:
                del self._holders[key]
                del self._locks[key]


# Shared by every request in this process
_slot_locks = KeyedLocks()


def _card_key(deck_id: int, card_id: str) -> str:
    return f"deck:{deck_id}:card:{card_id}"


def _sideboard_key(deck_id: int) -> str:
    return f"deck:{deck_id}:sideboard"


def check_quantity_change(
    deck: Deck, owned: int, card_id: str, board: Board, delta: int
) -> SlotChange:
    """
    Decide whether changing a slot by `delta` copies is legal.

    Pure: evaluates a snapshot of the deck and the owned quantity without
    touching storage, so callers can predict an outcome before committing.

    Args:
        deck: Current deck with its slots on both boards
        owned: Copies of the card the deck owner has in inventory
        card_id: Card to change
        board: Board holding the slot
        delta: Non-zero change in copies

    Returns:
        The change that would be applied. Decreases that find no slot
        return an unchanged record.

    Raises:
        KnownError: If delta is zero
        SideboardFullError: If a sideboard increase would pass the cap
        CapacityExceededError: If the increase would exceed owned copies
    """
    if delta == 0:
        raise invalid_input("Quantity change cannot be zero")

    previous = deck.quantity_of(card_id, board)
    previous_total = deck.quantity_of(card_id)

    if delta < 0:
        new_quantity = max(previous + delta, 0)
        return SlotChange(
            deck_id=deck.deck_id,
            card_id=card_id,
            board=board,
            previous_quantity=previous,
            new_quantity=new_quantity,
            previous_total=previous_total,
            new_total=previous_total - (previous - new_quantity),
        )

    if board == Board.SIDEBOARD:
        sideboard_size = sum(slot.quantity for slot in deck.board(Board.SIDEBOARD))
        if sideboard_size + delta > SIDEBOARD_MAX_SIZE:
            raise SideboardFullError(sideboard_size, delta, SIDEBOARD_MAX_SIZE)

    proposed_total = previous_total + delta
    if proposed_total > owned:
        raise CapacityExceededError(card_id, proposed_total, owned)

    return SlotChange(
        deck_id=deck.deck_id,
        card_id=card_id,
        board=board,
        previous_quantity=previous,
        new_quantity=previous + delta,
        previous_total=previous_total,
        new_total=proposed_total,
    )


def find_overcommitted_cards(deck: Deck, collection: Collection) -> dict[str, tuple[int, int]]:
    """
    Cards the deck holds more copies of than the collection owns.

    Read-only report; nothing is changed.

    Returns:
        Dict mapping card id to (copies in deck, copies owned)
    """
    report: dict[str, tuple[int, int]] = {}
    for card_id in {slot.card_id for slot in deck.slots}:
        in_deck = deck.quantity_of(card_id)
        owned = collection.get_quantity(card_id)
        if in_deck > owned:
            report[card_id] = (in_deck, owned)
    return report


def build_collection_view(collection: Collection, deck: Deck) -> list[CollectionCardView]:
    """Inventory entries, by name, annotated with copies already in the deck."""
    return [
        CollectionCardView(entry=entry, in_deck=deck.quantity_of(entry.card_id))
        for entry in collection.sorted_entries()
    ]


class DeckComposer:
    """
    Applies slot changes to decks owned by a user.

    Args:
        session: Database session; committed after each successful change
        locks: Lock registry, shared process-wide by default
    """

    def __init__(self, session: AsyncSession, locks: KeyedLocks | None = None) -> None:
        self.session = session
        self.locks = locks if locks is not None else _slot_locks

    async def propose_quantity_change(
        self, user_id: str, deck_id: int, card_id: str, board: Board, delta: int
    ) -> SlotChange:
        """
        Change a slot by `delta` copies.

        Raises:
            DeckNotFoundError: If the user does not own the deck
            CapacityExceededError: If an increase exceeds owned copies
            SideboardFullError: If a sideboard increase passes the cap
            SlotConflictError: If another writer changed the slot first
        """
        return await self._apply(user_id, deck_id, card_id, board, delta)

    async def place_card(
        self, user_id: str, deck_id: int, card_id: str, board: Board
    ) -> SlotChange:
        """
        Put one copy of a card from the inventory onto a board.

        Creates the slot with one copy; if the card is already on that
        board, adds one copy to it.
        """
        return await self._apply(user_id, deck_id, card_id, board, 1)

    async def preview_quantity_change(
        self, user_id: str, deck_id: int, card_id: str, board: Board, delta: int
    ) -> SlotChange:
        """Evaluate a change against current state without writing it."""
        deck_row = await get_owned_deck(self.session, deck_id, user_id)
        deck = await load_deck(self.session, deck_row)
        owned = await get_quantity(self.session, user_id, card_id)
        return check_quantity_change(deck, owned, card_id, board, delta)

    async def _apply(
        self, user_id: str, deck_id: int, card_id: str, board: Board, delta: int
    ) -> SlotChange:
        deck_row = await get_owned_deck(self.session, deck_id, user_id)

        keys = [_card_key(deck_id, card_id)]
        if board == Board.SIDEBOARD and delta > 0:
            keys.append(_sideboard_key(deck_id))

        async with self.locks.hold(*keys):
            deck = await load_deck(self.session, deck_row)
            owned = await get_quantity(self.session, user_id, card_id)

            try:
                change = check_quantity_change(deck, owned, card_id, board, delta)
            except KnownError as e:
                logger.info(
                    "Refused %+d of %s on %s of deck %d: %s",
                    delta,
                    card_id,
                    board.value,
                    deck_id,
                    e.kind.value,
                )
                raise

            if not change.changed:
                return change

            try:
                await compare_and_set_slot(
                    self.session,
                    deck_id,
                    card_id,
                    board,
                    expected=change.previous_quantity,
                    quantity=change.new_quantity,
                )
            except SlotConflictError:
                await self.session.rollback()
                logger.warning(
                    "Slot %s on %s of deck %d changed concurrently", card_id, board.value, deck_id
                )
                raise

            await self.session.commit()

        logger.debug(
            "Deck %d %s %s: %d -> %d",
            deck_id,
            card_id,
            board.value,
            change.previous_quantity,
            change.new_quantity,
        )
        return change
