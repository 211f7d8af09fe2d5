"""Tests for database CRUD operations."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from grimoire.db.operations import (
    adjust_quantity,
    collection_to_model,
    compare_and_set_slot,
    copy_slots,
    create_deck,
    delete_deck,
    get_deck,
    get_inventory_entry,
    get_quantity,
    get_slot,
    list_decks,
    list_inventory,
    list_slots,
    load_deck,
    set_quantity,
)
from grimoire.models.deck import Board
from grimoire.models.failure import FailureKind, KnownError, SlotConflictError


class TestInventoryOperations:
    async def test_set_quantity_creates_entry(self, session: AsyncSession) -> None:
        entry = await set_quantity(session, "user-123", "bolt-id", 4, "Lightning Bolt")

        assert entry is not None
        assert entry.quantity == 4
        assert entry.card_name == "Lightning Bolt"

    async def test_set_quantity_updates_entry(self, session: AsyncSession) -> None:
        await set_quantity(session, "user-123", "bolt-id", 4, "Lightning Bolt")
        await session.commit()

        await set_quantity(session, "user-123", "bolt-id", 2)
        await session.commit()

        entry = await get_inventory_entry(session, "user-123", "bolt-id")
        assert entry is not None
        assert entry.quantity == 2
        assert entry.card_name == "Lightning Bolt"

    async def test_set_quantity_zero_deletes(self, session: AsyncSession) -> None:
        await set_quantity(session, "user-123", "bolt-id", 4)
        await session.commit()

        result = await set_quantity(session, "user-123", "bolt-id", 0)
        await session.commit()

        assert result is None
        assert await get_inventory_entry(session, "user-123", "bolt-id") is None

    async def test_set_quantity_zero_on_absent_card(self, session: AsyncSession) -> None:
        assert await set_quantity(session, "user-123", "bolt-id", 0) is None

    async def test_set_quantity_rejects_negative(self, session: AsyncSession) -> None:
        with pytest.raises(KnownError) as exc_info:
            await set_quantity(session, "user-123", "bolt-id", -1)

        assert exc_info.value.kind == FailureKind.INVALID_INPUT

    async def test_get_quantity_of_unowned_card(self, session: AsyncSession) -> None:
        assert await get_quantity(session, "user-123", "nothing") == 0

    async def test_inventories_are_per_user(self, session: AsyncSession) -> None:
        await set_quantity(session, "alice", "bolt-id", 4)
        await set_quantity(session, "bob", "bolt-id", 1)
        await session.commit()

        assert await get_quantity(session, "alice", "bolt-id") == 4
        assert await get_quantity(session, "bob", "bolt-id") == 1

    async def test_adjust_quantity(self, session: AsyncSession) -> None:
        await set_quantity(session, "user-123", "bolt-id", 2)

        assert await adjust_quantity(session, "user-123", "bolt-id", 3) == 5
        assert await adjust_quantity(session, "user-123", "bolt-id", -1) == 4
        assert await get_quantity(session, "user-123", "bolt-id") == 4

    async def test_adjust_quantity_clamps_at_zero(self, session: AsyncSession) -> None:
        await set_quantity(session, "user-123", "bolt-id", 2)

        assert await adjust_quantity(session, "user-123", "bolt-id", -5) == 0
        assert await get_inventory_entry(session, "user-123", "bolt-id") is None

    async def test_list_inventory_ordered_by_name(self, session: AsyncSession) -> None:
        await set_quantity(session, "user-123", "m", 20, "Mountain")
        await set_quantity(session, "user-123", "b", 4, "Lightning Bolt")
        await set_quantity(session, "user-123", "g", 1, "Hill Giant")
        await session.commit()

        entries = await list_inventory(session, "user-123")

        assert [e.card_name for e in entries] == ["Hill Giant", "Lightning Bolt", "Mountain"]

    async def test_list_inventory_search(self, session: AsyncSession) -> None:
        await set_quantity(session, "user-123", "b", 4, "Lightning Bolt")
        await set_quantity(session, "user-123", "h", 2, "Lightning Helix")
        await set_quantity(session, "user-123", "m", 20, "Mountain")
        await session.commit()

        entries = await list_inventory(session, "user-123", search="LIGHTNING")

        assert {e.card_id for e in entries} == {"b", "h"}

    async def test_list_inventory_search_escapes_wildcards(self, session: AsyncSession) -> None:
        await set_quantity(session, "user-123", "b", 4, "Lightning Bolt")
        await session.commit()

        assert await list_inventory(session, "user-123", search="%") == []

    async def test_collection_to_model(self, session: AsyncSession) -> None:
        await set_quantity(session, "user-123", "b", 4, "Lightning Bolt")
        await set_quantity(session, "user-123", "m", 20, "Mountain")
        await session.commit()

        model = collection_to_model("user-123", await list_inventory(session, "user-123"))

        assert model.get_quantity("b") == 4
        assert model.total_cards() == 24
        assert model.unique_cards() == 2


class TestDeckOperations:
    async def test_create_deck(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "user-123", "Burn")

        assert deck.id is not None
        assert deck.owner_id == "user-123"
        assert deck.is_public is False
        assert deck.created_at is not None

    async def test_get_missing_deck(self, session: AsyncSession) -> None:
        assert await get_deck(session, 404) is None

    async def test_list_decks_newest_first(self, session: AsyncSession) -> None:
        first = await create_deck(session, "user-123", "First")
        second = await create_deck(session, "user-123", "Second")
        await create_deck(session, "someone-else", "Other")
        await session.commit()

        decks = await list_decks(session, "user-123")

        assert [d.id for d in decks] == [second.id, first.id]

    async def test_delete_deck_removes_slots(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "user-123", "Burn")
        await compare_and_set_slot(session, deck.id, "b", Board.MAINBOARD, 0, 4)
        await session.commit()
        deck_id = deck.id

        await delete_deck(session, deck)
        await session.commit()

        assert await get_deck(session, deck_id) is None
        assert await list_slots(session, deck_id) == []

    async def test_load_deck(self, session: AsyncSession) -> None:
        deck = await create_deck(session, "user-123", "Burn")
        await compare_and_set_slot(session, deck.id, "b", Board.MAINBOARD, 0, 4)
        await compare_and_set_slot(session, deck.id, "b", Board.SIDEBOARD, 0, 1)
        await session.commit()

        model = await load_deck(session, deck)

        assert model.name == "Burn"
        assert model.quantity_of("b") == 5
        assert model.quantity_of("b", Board.SIDEBOARD) == 1


class TestSlotOperations:
    @pytest.fixture
    async def deck_id(self, session: AsyncSession) -> int:
        deck = await create_deck(session, "user-123", "Burn")
        await session.commit()
        return deck.id

    async def test_insert_update_delete(self, session: AsyncSession, deck_id: int) -> None:
        await compare_and_set_slot(session, deck_id, "b", Board.MAINBOARD, 0, 1)
        await compare_and_set_slot(session, deck_id, "b", Board.MAINBOARD, 1, 3)

        slot = await get_slot(session, deck_id, "b", Board.MAINBOARD)
        assert slot is not None
        assert slot.quantity == 3

        await compare_and_set_slot(session, deck_id, "b", Board.MAINBOARD, 3, 0)

        assert await get_slot(session, deck_id, "b", Board.MAINBOARD) is None

    async def test_boards_are_separate_slots(self, session: AsyncSession, deck_id: int) -> None:
        await compare_and_set_slot(session, deck_id, "b", Board.MAINBOARD, 0, 2)
        await compare_and_set_slot(session, deck_id, "b", Board.SIDEBOARD, 0, 1)

        slots = await list_slots(session, deck_id)

        assert [(s.board, s.quantity) for s in slots] == [("mainboard", 2), ("sideboard", 1)]

    async def test_stale_update_conflicts(self, session: AsyncSession, deck_id: int) -> None:
        await compare_and_set_slot(session, deck_id, "b", Board.MAINBOARD, 0, 2)

        with pytest.raises(SlotConflictError):
            await compare_and_set_slot(session, deck_id, "b", Board.MAINBOARD, 1, 2)

        slot = await get_slot(session, deck_id, "b", Board.MAINBOARD)
        assert slot is not None
        assert slot.quantity == 2

    async def test_stale_delete_conflicts(self, session: AsyncSession, deck_id: int) -> None:
        with pytest.raises(SlotConflictError):
            await compare_and_set_slot(session, deck_id, "b", Board.MAINBOARD, 1, 0)

    async def test_duplicate_insert_conflicts(self, session: AsyncSession, deck_id: int) -> None:
        await compare_and_set_slot(session, deck_id, "b", Board.MAINBOARD, 0, 1)
        await session.commit()

        with pytest.raises(SlotConflictError):
            await compare_and_set_slot(session, deck_id, "b", Board.MAINBOARD, 0, 1)

    async def test_negative_quantities_rejected(
        self, session: AsyncSession, deck_id: int
    ) -> None:
        with pytest.raises(ValueError):
            await compare_and_set_slot(session, deck_id, "b", Board.MAINBOARD, 0, -1)

    async def test_copy_slots(self, session: AsyncSession, deck_id: int) -> None:
        await compare_and_set_slot(session, deck_id, "b", Board.MAINBOARD, 0, 4)
        await compare_and_set_slot(session, deck_id, "g", Board.SIDEBOARD, 0, 2)
        target = await create_deck(session, "user-456", "Copy")

        copied = await copy_slots(session, deck_id, target.id)

        assert copied == 2
        slots = await list_slots(session, target.id)
        assert [(s.card_id, s.board, s.quantity) for s in slots] == [
            ("b", "mainboard", 4),
            ("g", "sideboard", 2),
        ]
