"""
Deck lifecycle and visibility.

Owners create, rename, publish and delete their decks. Other users may
read and clone a deck only while it is public; a private deck looks
exactly like a missing one to them.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from grimoire.db.operations import (
    copy_slots,
    create_deck,
    delete_deck,
    get_deck,
    list_decks,
)
from grimoire.models.db import DeckDB
from grimoire.models.failure import DeckNotFoundError, invalid_input

logger = logging.getLogger(__name__)


def normalize_deck_name(name: str) -> str:
    """
    Trim a deck name.

    Raises:
        KnownError: If the name is empty after trimming
    """
    cleaned = name.strip()
    if not cleaned:
        raise invalid_input("Deck name cannot be empty")
    return cleaned


async def get_owned_deck(session: AsyncSession, deck_id: int, user_id: str) -> DeckDB:
    """
    Load a deck the user owns.

    Raises:
        DeckNotFoundError: If the deck is missing or owned by someone else
    """
    deck = await get_deck(session, deck_id)
    if deck is None or deck.owner_id != user_id:
        raise DeckNotFoundError(deck_id)
    return deck


async def get_visible_deck(session: AsyncSession, deck_id: int, viewer_id: str | None) -> DeckDB:
    """
    Load a deck the viewer may read: their own, or anyone's public deck.

    Raises:
        DeckNotFoundError: If the deck is missing or private to someone else
    """
    deck = await get_deck(session, deck_id)
    if deck is None:
        raise DeckNotFoundError(deck_id)
    if deck.owner_id != viewer_id and not deck.is_public:
        raise DeckNotFoundError(deck_id)
    return deck


async def create_user_deck(session: AsyncSession, owner_id: str, name: str) -> DeckDB:
    """Create an empty private deck."""
    deck = await create_deck(session, owner_id, normalize_deck_name(name))
    logger.info("Created deck %d for %s", deck.id, owner_id)
    return deck


async def list_user_decks(session: AsyncSession, owner_id: str) -> list[DeckDB]:
    """A user's decks, newest first."""
    return await list_decks(session, owner_id)


async def rename_deck(session: AsyncSession, deck_id: int, user_id: str, name: str) -> DeckDB:
    deck = await get_owned_deck(session, deck_id, user_id)
    deck.name = normalize_deck_name(name)
    await session.flush()
    return deck


async def set_deck_visibility(
    session: AsyncSession, deck_id: int, user_id: str, is_public: bool
) -> DeckDB:
    """Publish or unpublish a deck."""
    deck = await get_owned_deck(session, deck_id, user_id)
    deck.is_public = is_public
    await session.flush()
    logger.info("Deck %d is now %s", deck_id, "public" if is_public else "private")
    return deck


async def remove_deck(session: AsyncSession, deck_id: int, user_id: str) -> None:
    """Delete a deck and its slots."""
    deck = await get_owned_deck(session, deck_id, user_id)
    await delete_deck(session, deck)
    logger.info("Deleted deck %d", deck_id)


async def clone_deck(session: AsyncSession, deck_id: int, user_id: str) -> DeckDB:
    """
    Copy someone else's public deck into a new private deck.

    Slots are copied as they are. They are not checked against the
    cloner's inventory; placement checks apply to later changes only.

    Raises:
        DeckNotFoundError: If the deck is missing or not visible
        KnownError: If the user already owns the deck
    """
    source = await get_visible_deck(session, deck_id, user_id)
    if source.owner_id == user_id:
        raise invalid_input("You already own this deck", detail=f"deck={deck_id}")

    clone = await create_deck(session, user_id, source.name)
    copied = await copy_slots(session, source.id, clone.id)
    logger.info("Cloned deck %d into %d for %s (%d slots)", deck_id, clone.id, user_id, copied)
    return clone
