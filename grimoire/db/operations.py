"""
Database CRUD operations.

Provides async functions for reading and writing inventories, decks and
deck slots. Functions flush but never commit; the caller owns the
transaction.
"""

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from grimoire.models.collection import Collection, InventoryEntry
from grimoire.models.db import DeckDB, DeckSlotDB, InventoryEntryDB
from grimoire.models.deck import Board, Deck, DeckSlot
from grimoire.models.failure import SlotConflictError, invalid_input

# --- Inventory Operations ---


async def get_inventory_entry(
    session: AsyncSession, user_id: str, card_id: str
) -> InventoryEntryDB | None:
    """Get one inventory row, or None if the user owns no copies."""
    result = await session.execute(
        select(InventoryEntryDB)
        .where(
            InventoryEntryDB.user_id == user_id,
            InventoryEntryDB.card_id == card_id,
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_quantity(session: AsyncSession, user_id: str, card_id: str) -> int:
    """Copies of a card the user owns (0 when absent)."""
    entry = await get_inventory_entry(session, user_id, card_id)
    return entry.quantity if entry else 0


async def set_quantity(
    session: AsyncSession,
    user_id: str,
    card_id: str,
    quantity: int,
    card_name: str | None = None,
) -> InventoryEntryDB | None:
    """
    Set the owned quantity of a card.

    A quantity of zero deletes the row. Returns the row, or None if it
    was deleted or never existed.

    Raises:
        KnownError: If quantity is negative
    """
    if quantity < 0:
        raise invalid_input(
            f"Quantity for card '{card_id}' cannot be negative", detail=f"quantity={quantity}"
        )

    entry = await get_inventory_entry(session, user_id, card_id)

    if quantity == 0:
        if entry is not None:
            await session.delete(entry)
            await session.flush()
        return None

    if entry is None:
        entry = InventoryEntryDB(
            user_id=user_id,
            card_id=card_id,
            card_name=card_name or "",
            quantity=quantity,
        )
        session.add(entry)
    else:
        entry.quantity = quantity
        if card_name:
            entry.card_name = card_name

    await session.flush()
    return entry


async def adjust_quantity(
    session: AsyncSession,
    user_id: str,
    card_id: str,
    delta: int,
    card_name: str | None = None,
) -> int:
    """
    Add or remove owned copies of a card.

    The result never drops below zero; reaching zero deletes the row.
    Returns the new quantity.
    """
    current = await get_quantity(session, user_id, card_id)
    new_quantity = max(current + delta, 0)
    await set_quantity(session, user_id, card_id, new_quantity, card_name)
    return new_quantity


async def list_inventory(
    session: AsyncSession, user_id: str, search: str | None = None
) -> list[InventoryEntryDB]:
    """
    List a user's inventory ordered by card name.

    If search is given, only cards whose name contains it
    (case-insensitive) are returned.
    """
    query = select(InventoryEntryDB).where(InventoryEntryDB.user_id == user_id)
    if search:
        query = query.where(
            func.lower(InventoryEntryDB.card_name).contains(search.lower(), autoescape=True)
        )
    query = query.order_by(InventoryEntryDB.card_name, InventoryEntryDB.card_id)

    result = await session.execute(query.execution_options(populate_existing=True))
    return list(result.scalars().all())


def inventory_entry_to_model(entry: InventoryEntryDB) -> InventoryEntry:
    """Convert a database inventory row to a domain model."""
    return InventoryEntry(
        user_id=entry.user_id,
        card_id=entry.card_id,
        quantity=entry.quantity,
        card_name=entry.card_name,
    )


def collection_to_model(user_id: str, entries: list[InventoryEntryDB]) -> Collection:
    """Convert a user's inventory rows to a domain model."""
    return Collection(
        user_id=user_id,
        entries={entry.card_id: inventory_entry_to_model(entry) for entry in entries},
    )


# --- Deck Operations ---


async def create_deck(
    session: AsyncSession, owner_id: str, name: str, is_public: bool = False
) -> DeckDB:
    """Create an empty deck."""
    deck = DeckDB(owner_id=owner_id, name=name, is_public=is_public)
    session.add(deck)
    await session.flush()
    await session.refresh(deck)
    return deck


async def get_deck(session: AsyncSession, deck_id: int) -> DeckDB | None:
    """
    Get a deck by id.

    Returns None if no deck exists with this id.
    """
    result = await session.execute(
        select(DeckDB).where(DeckDB.id == deck_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def list_decks(session: AsyncSession, owner_id: str) -> list[DeckDB]:
    """Get all decks owned by a user, newest first."""
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.owner_id == owner_id)
        .order_by(DeckDB.created_at.desc(), DeckDB.id.desc())
    )
    return list(result.scalars().all())


async def delete_deck(session: AsyncSession, deck: DeckDB) -> None:
    """Delete a deck and all of its slots."""
    await session.execute(delete(DeckSlotDB).where(DeckSlotDB.deck_id == deck.id))
    await session.execute(delete(DeckDB).where(DeckDB.id == deck.id))


def deck_to_model(deck: DeckDB, slots: list[DeckSlotDB] | None = None) -> Deck:
    """Convert a database deck and its slot rows to a domain model."""
    return Deck(
        deck_id=deck.id,
        owner_id=deck.owner_id,
        name=deck.name,
        is_public=deck.is_public,
        created_at=deck.created_at,
        slots=[slot_to_model(slot) for slot in slots or []],
    )


async def load_deck(session: AsyncSession, deck: DeckDB) -> Deck:
    """Read a deck's current slots and return the full domain model."""
    return deck_to_model(deck, await list_slots(session, deck.id))


# --- Deck Slot Operations ---


async def list_slots(session: AsyncSession, deck_id: int) -> list[DeckSlotDB]:
    """Get all slots of a deck, both boards, in placement order."""
    result = await session.execute(
        select(DeckSlotDB)
        .where(DeckSlotDB.deck_id == deck_id)
        .order_by(DeckSlotDB.id)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def get_slot(
    session: AsyncSession, deck_id: int, card_id: str, board: Board
) -> DeckSlotDB | None:
    """Get the slot for a card on one board, or None if absent."""
    result = await session.execute(
        select(DeckSlotDB)
        .where(
            DeckSlotDB.deck_id == deck_id,
            DeckSlotDB.card_id == card_id,
            DeckSlotDB.board == board.value,
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def compare_and_set_slot(
    session: AsyncSession,
    deck_id: int,
    card_id: str,
    board: Board,
    expected: int,
    quantity: int,
) -> None:
    """
    Move a slot from `expected` to `quantity` copies in one statement.

    expected == 0 inserts a new slot, quantity == 0 deletes it, anything
    else updates it. The write only applies if the stored quantity still
    equals `expected`.

    Raises:
        SlotConflictError: If the slot changed since it was read
        ValueError: If either quantity is negative
    """
    if expected < 0 or quantity < 0:
        msg = f"Slot quantities cannot be negative (expected={expected}, quantity={quantity})"
        raise ValueError(msg)

    if expected == quantity:
        return

    if expected == 0:
        session.add(
            DeckSlotDB(deck_id=deck_id, card_id=card_id, board=board.value, quantity=quantity)
        )
        try:
            await session.flush()
        except IntegrityError as e:
            raise SlotConflictError(deck_id, card_id, board.value) from e
        return

    match_slot = (
        DeckSlotDB.deck_id == deck_id,
        DeckSlotDB.card_id == card_id,
        DeckSlotDB.board == board.value,
        DeckSlotDB.quantity == expected,
    )
    if quantity == 0:
        result = await session.execute(delete(DeckSlotDB).where(*match_slot))
    else:
        result = await session.execute(
            update(DeckSlotDB).where(*match_slot).values(quantity=quantity)
        )

    # rowcount is available on UPDATE/DELETE results; type stubs incomplete for async
    if int(result.rowcount) != 1:  # type: ignore[attr-defined]
        raise SlotConflictError(deck_id, card_id, board.value)


async def copy_slots(session: AsyncSession, source_deck_id: int, target_deck_id: int) -> int:
    """
    Copy every slot of one deck into another (empty) deck.

    Returns the number of slots copied.
    """
    slots = await list_slots(session, source_deck_id)
    for slot in slots:
        session.add(
            DeckSlotDB(
                deck_id=target_deck_id,
                card_id=slot.card_id,
                board=slot.board,
                quantity=slot.quantity,
            )
        )
    await session.flush()
    return len(slots)


def slot_to_model(slot: DeckSlotDB) -> DeckSlot:
    """Convert a database slot to a domain model."""
    return DeckSlot(
        deck_id=slot.deck_id,
        card_id=slot.card_id,
        board=Board(slot.board),
        quantity=slot.quantity,
    )
