"""
Collection API endpoints.

Provides reads and quantity changes for a user's card inventory.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from grimoire.db import (
    adjust_quantity,
    collection_to_model,
    get_inventory_entry,
    list_inventory,
    set_quantity,
)
from grimoire.db.database import get_session
from grimoire.models.failure import invalid_input

router = APIRouter(prefix="/collection", tags=["collection"])


class InventoryEntryResponse(BaseModel):
    """One owned card."""

    card_id: str
    card_name: str = ""
    quantity: int = 0


class CollectionResponse(BaseModel):
    """Response model for collection data."""

    user_id: str
    cards: list[InventoryEntryResponse] = Field(default_factory=list)
    total_cards: int = 0
    unique_cards: int = 0


class SetQuantityRequest(BaseModel):
    """Request model for setting an owned quantity."""

    quantity: int = Field(
        ...,
        description="Copies owned. Zero removes the card from the collection.",
        examples=[4],
    )
    card_name: str | None = Field(
        default=None,
        description="Display name, recorded for sorting and search",
        examples=["Lightning Bolt"],
    )


class AdjustQuantityRequest(BaseModel):
    """Request model for adding or removing owned copies."""

    delta: int = Field(
        ...,
        description="Copies to add (positive) or remove (negative)",
        examples=[1, -1],
    )
    card_name: str | None = None


@router.get("/{user_id}", response_model=CollectionResponse)
async def get_user_collection(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    search: Annotated[str | None, Query(max_length=200)] = None,
) -> CollectionResponse:
    """
    Get a user's card collection ordered by card name.

    With `search`, only cards whose name contains it are returned.
    Totals always describe the returned cards.
    """
    entries = await list_inventory(session, user_id, search=search)
    model = collection_to_model(user_id, entries)

    return CollectionResponse(
        user_id=user_id,
        cards=[
            InventoryEntryResponse(
                card_id=entry.card_id, card_name=entry.card_name, quantity=entry.quantity
            )
            for entry in model.sorted_entries()
        ],
        total_cards=model.total_cards(),
        unique_cards=model.unique_cards(),
    )


@router.get("/{user_id}/cards/{card_id}", response_model=InventoryEntryResponse)
async def get_owned_card(
    user_id: str,
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> InventoryEntryResponse:
    """Copies of one card owned. Unowned cards report quantity 0."""
    entry = await get_inventory_entry(session, user_id, card_id)
    if entry is None:
        return InventoryEntryResponse(card_id=card_id)
    return InventoryEntryResponse(
        card_id=card_id, card_name=entry.card_name, quantity=entry.quantity
    )


@router.put("/{user_id}/cards/{card_id}", response_model=InventoryEntryResponse)
async def set_owned_card(
    user_id: str,
    card_id: str,
    request: SetQuantityRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> InventoryEntryResponse:
    """
    Set how many copies of a card the user owns.

    Lowering the quantity does not touch decks that already use the card.
    """
    entry = await set_quantity(session, user_id, card_id, request.quantity, request.card_name)
    if entry is None:
        return InventoryEntryResponse(card_id=card_id, card_name=request.card_name or "")

    return InventoryEntryResponse(
        card_id=card_id, card_name=entry.card_name, quantity=entry.quantity
    )


@router.post("/{user_id}/cards/{card_id}/adjust", response_model=InventoryEntryResponse)
async def adjust_owned_card(
    user_id: str,
    card_id: str,
    request: AdjustQuantityRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> InventoryEntryResponse:
    """
    Add or remove owned copies of a card.

    Removing more copies than owned leaves zero, which deletes the card.
    """
    if request.delta == 0:
        raise invalid_input("Quantity change cannot be zero", detail=f"card={card_id}")

    quantity = await adjust_quantity(session, user_id, card_id, request.delta, request.card_name)
    entry = await get_inventory_entry(session, user_id, card_id)

    return InventoryEntryResponse(
        card_id=card_id,
        card_name=entry.card_name if entry else request.card_name or "",
        quantity=quantity,
    )
