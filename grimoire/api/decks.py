"""
Deck API endpoints.

Provides deck lifecycle, card placement, statistics and export. The acting
user is named in the path; other users' decks are readable only while
public.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from grimoire.db import collection_to_model, list_inventory, load_deck
from grimoire.db.database import get_session
from grimoire.models.db import DeckDB
from grimoire.models.deck import Board, DeckSummary, SlotChange
from grimoire.models.failure import invalid_input
from grimoire.services.card_catalog import MetadataCache, get_metadata_cache
from grimoire.services.deck_composer import (
    DeckComposer,
    build_collection_view,
    find_overcommitted_cards,
)
from grimoire.services.deck_exporter import format_export
from grimoire.services.deck_library import (
    clone_deck,
    create_user_deck,
    get_owned_deck,
    get_visible_deck,
    list_user_decks,
    remove_deck,
    rename_deck,
    set_deck_visibility,
)
from grimoire.services.deck_stats import (
    compute_mana_curve,
    compute_type_distribution,
    summarize_deck,
)

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckResponse(BaseModel):
    """Response model for a deck without its cards."""

    deck_id: int
    owner_id: str
    name: str
    is_public: bool = False
    created_at: datetime | None = None


class DeckListResponse(BaseModel):
    """Response model for a list of decks."""

    owner_id: str
    decks: list[DeckResponse]
    count: int


class SlotResponse(BaseModel):
    card_id: str
    board: Board
    quantity: int


class SummaryResponse(BaseModel):
    total_cards: int = 0
    mainboard_cards: int = 0
    sideboard_cards: int = 0
    unique_cards: int = 0


class DeckDetailResponse(DeckResponse):
    """Response model for a deck with its slots."""

    slots: list[SlotResponse] = Field(default_factory=list)
    summary: SummaryResponse = Field(default_factory=SummaryResponse)


class CreateDeckRequest(BaseModel):
    name: str = Field(..., examples=["Mono-Red Aggro"])


class UpdateDeckRequest(BaseModel):
    """Rename and/or publish a deck. Omitted fields are left alone."""

    name: str | None = None
    is_public: bool | None = None


class PlaceCardRequest(BaseModel):
    card_id: str
    board: Board = Board.MAINBOARD


class QuantityChangeRequest(BaseModel):
    board: Board = Board.MAINBOARD
    delta: int = Field(..., description="Copies to add or remove", examples=[1, -1])
    dry_run: bool = Field(
        default=False,
        description="Only check whether the change would succeed",
    )


class SlotChangeResponse(BaseModel):
    """
    Result of a slot change.

    Previous values let a client that applied the change optimistically
    roll it back.
    """

    deck_id: int
    card_id: str
    board: Board
    previous_quantity: int
    new_quantity: int
    previous_total: int
    new_total: int
    created: bool
    removed: bool
    applied: bool


class CurveBucket(BaseModel):
    label: str
    count: int


class TypeCount(BaseModel):
    type: str
    count: int


class DeckStatsResponse(BaseModel):
    deck_id: int
    summary: SummaryResponse
    mana_curve: list[CurveBucket]
    type_distribution: list[TypeCount] = Field(
        default_factory=list,
        description="Primary types by descending count",
    )
    unresolved_cards: int = Field(
        default=0,
        description="Slots left out because their card metadata is unknown",
    )


class CollectionCardResponse(BaseModel):
    card_id: str
    card_name: str
    owned: int
    in_deck: int
    available: int
    can_add: bool


class DeckCollectionResponse(BaseModel):
    deck_id: int
    cards: list[CollectionCardResponse]
    overcommitted: dict[str, int] = Field(
        default_factory=dict,
        description="Cards the deck holds more copies of than owned, with the excess",
    )


class DeleteResponse(BaseModel):
    deck_id: int
    deleted: bool


def _deck_response(deck: DeckDB) -> DeckResponse:
    return DeckResponse(
        deck_id=deck.id,
        owner_id=deck.owner_id,
        name=deck.name,
        is_public=deck.is_public,
        created_at=deck.created_at,
    )


def _summary_response(summary: DeckSummary) -> SummaryResponse:
    return SummaryResponse(
        total_cards=summary.total_cards,
        mainboard_cards=summary.mainboard_cards,
        sideboard_cards=summary.sideboard_cards,
        unique_cards=summary.unique_cards,
    )


def _change_response(change: SlotChange, applied: bool) -> SlotChangeResponse:
    return SlotChangeResponse(
        deck_id=change.deck_id,
        card_id=change.card_id,
        board=change.board,
        previous_quantity=change.previous_quantity,
        new_quantity=change.new_quantity,
        previous_total=change.previous_total,
        new_total=change.new_total,
        created=change.created and applied,
        removed=change.removed and applied,
        applied=applied and change.changed,
    )


@router.post("/{user_id}", response_model=DeckResponse, status_code=status.HTTP_201_CREATED)
async def create_deck(
    user_id: str,
    request: CreateDeckRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Create an empty private deck."""
    deck = await create_user_deck(session, user_id, request.name)
    return _deck_response(deck)


@router.get("/{user_id}", response_model=DeckListResponse)
async def get_user_decks(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckListResponse:
    """List a user's decks, newest first."""
    decks = [_deck_response(d) for d in await list_user_decks(session, user_id)]
    return DeckListResponse(owner_id=user_id, decks=decks, count=len(decks))


@router.get("/{user_id}/{deck_id}", response_model=DeckDetailResponse)
async def get_deck_detail(
    user_id: str,
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckDetailResponse:
    """
    Get a deck with its slots.

    Returns 404 if the deck is missing, or private and not owned by the user.
    """
    deck = await load_deck(session, await get_visible_deck(session, deck_id, user_id))
    summary = summarize_deck(deck.slots)

    return DeckDetailResponse(
        deck_id=deck.deck_id,
        owner_id=deck.owner_id,
        name=deck.name,
        is_public=deck.is_public,
        created_at=deck.created_at,
        slots=[
            SlotResponse(card_id=s.card_id, board=s.board, quantity=s.quantity)
            for s in deck.slots
        ],
        summary=_summary_response(summary),
    )


@router.patch("/{user_id}/{deck_id}", response_model=DeckResponse)
async def update_deck(
    user_id: str,
    deck_id: int,
    request: UpdateDeckRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Rename a deck or change its visibility. Owner only."""
    if request.name is None and request.is_public is None:
        raise invalid_input("Nothing to update", detail="Provide name or is_public")

    deck = await get_owned_deck(session, deck_id, user_id)
    if request.name is not None:
        deck = await rename_deck(session, deck_id, user_id, request.name)
    if request.is_public is not None:
        deck = await set_deck_visibility(session, deck_id, user_id, request.is_public)

    return _deck_response(deck)


@router.delete("/{user_id}/{deck_id}", response_model=DeleteResponse)
async def delete_deck(
    user_id: str,
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteResponse:
    """Delete a deck and its cards. Owner only."""
    await remove_deck(session, deck_id, user_id)
    return DeleteResponse(deck_id=deck_id, deleted=True)


@router.post(
    "/{user_id}/{deck_id}/clone",
    response_model=DeckResponse,
    status_code=status.HTTP_201_CREATED,
)
async def clone_public_deck(
    user_id: str,
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Copy another user's public deck into a new private deck."""
    clone = await clone_deck(session, deck_id, user_id)
    return _deck_response(clone)


@router.post("/{user_id}/{deck_id}/cards", response_model=SlotChangeResponse)
async def place_card(
    user_id: str,
    deck_id: int,
    request: PlaceCardRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SlotChangeResponse:
    """
    Put one copy of a card from the collection onto a board.

    Returns 409 if the user owns no spare copy or the sideboard is full.
    """
    change = await DeckComposer(session).place_card(user_id, deck_id, request.card_id, request.board)
    return _change_response(change, applied=True)


@router.patch("/{user_id}/{deck_id}/cards/{card_id}", response_model=SlotChangeResponse)
async def change_card_quantity(
    user_id: str,
    deck_id: int,
    card_id: str,
    request: QuantityChangeRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SlotChangeResponse:
    """
    Add or remove copies of a card on one board.

    Removing the last copy deletes the slot; removing from a missing slot
    succeeds without changes. A zero delta is rejected with 400. With
    dry_run the change is only checked.
    """
    composer = DeckComposer(session)
    if request.dry_run:
        change = await composer.preview_quantity_change(
            user_id, deck_id, card_id, request.board, request.delta
        )
        return _change_response(change, applied=False)

    change = await composer.propose_quantity_change(
        user_id, deck_id, card_id, request.board, request.delta
    )
    return _change_response(change, applied=True)


@router.get("/{user_id}/{deck_id}/stats", response_model=DeckStatsResponse)
async def get_deck_stats(
    user_id: str,
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    cache: Annotated[MetadataCache, Depends(get_metadata_cache)],
) -> DeckStatsResponse:
    """
    Mana curve and type breakdown of the mainboard.

    Cards whose metadata the catalog cannot provide are left out and
    counted in unresolved_cards.
    """
    deck = await load_deck(session, await get_visible_deck(session, deck_id, user_id))
    metadata = await cache.resolve(slot.card_id for slot in deck.slots)

    distribution = compute_type_distribution(deck.slots, metadata)
    ordered_types = sorted(distribution.items(), key=lambda item: (-item[1], item[0]))

    return DeckStatsResponse(
        deck_id=deck.deck_id,
        summary=_summary_response(summarize_deck(deck.slots)),
        mana_curve=[
            CurveBucket(label=label, count=count)
            for label, count in compute_mana_curve(deck.slots, metadata)
        ],
        type_distribution=[TypeCount(type=t, count=c) for t, c in ordered_types],
        unresolved_cards=sum(1 for slot in deck.slots if slot.card_id not in metadata),
    )


@router.get("/{user_id}/{deck_id}/export", response_class=PlainTextResponse)
async def export_deck(
    user_id: str,
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    cache: Annotated[MetadataCache, Depends(get_metadata_cache)],
) -> PlainTextResponse:
    """Deck list in Arena import format."""
    deck = await load_deck(session, await get_visible_deck(session, deck_id, user_id))
    metadata = await cache.resolve(slot.card_id for slot in deck.slots)
    return PlainTextResponse(format_export(deck.slots, metadata))


@router.get("/{user_id}/{deck_id}/collection", response_model=DeckCollectionResponse)
async def get_deck_collection(
    user_id: str,
    deck_id: int,
    session: Annotated[AsyncSession, Depends(get_session)],
    search: Annotated[str | None, Query(max_length=200)] = None,
) -> DeckCollectionResponse:
    """
    The user's collection as seen while building one of their decks.

    Each card shows how many copies the deck already uses and whether
    another can be added.
    """
    deck = await load_deck(session, await get_owned_deck(session, deck_id, user_id))
    collection = collection_to_model(user_id, await list_inventory(session, user_id, search))
    full_collection = (
        collection
        if search is None
        else collection_to_model(user_id, await list_inventory(session, user_id))
    )

    overcommitted = find_overcommitted_cards(deck, full_collection)

    return DeckCollectionResponse(
        deck_id=deck_id,
        cards=[
            CollectionCardResponse(
                card_id=view.entry.card_id,
                card_name=view.entry.card_name,
                owned=view.entry.quantity,
                in_deck=view.in_deck,
                available=view.available,
                can_add=view.can_add,
            )
            for view in build_collection_view(collection, deck)
        ],
        overcommitted={
            card_id: in_deck - owned for card_id, (in_deck, owned) in overcommitted.items()
        },
    )

