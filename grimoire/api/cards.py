"""
Card detail endpoints.

Looks up single printings in the catalog, localized when possible.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from grimoire.models.failure import invalid_input
from grimoire.services.card_catalog import SUPPORTED_LANGUAGES, MetadataCache, get_metadata_cache

router = APIRouter(prefix="/cards", tags=["cards"])


class PrintingResponse(BaseModel):
    """A card printing as shown on a detail page."""

    card_id: str
    name: str
    printed_name: str
    lang: str
    type_line: str
    mana_value: float
    set_code: str
    collector_number: str
    text: str
    flavor_text: str | None = None
    image_url: str | None = None


@router.get("/{set_code}/{collector_number}", response_model=PrintingResponse)
async def get_printing(
    set_code: str,
    collector_number: str,
    cache: Annotated[MetadataCache, Depends(get_metadata_cache)],
    lang: Annotated[str, Query()] = "en",
) -> PrintingResponse:
    """
    Get one printing by set and collector number.

    Falls back to English when the printing does not exist in `lang`.
    """
    if lang not in SUPPORTED_LANGUAGES:
        raise invalid_input(
            f"Unsupported language '{lang}'",
            detail=f"Valid: {sorted(SUPPORTED_LANGUAGES)}",
        )

    printing = await cache.catalog.get_printing(set_code, collector_number, lang)
    # Language-independent fields are the same for every printing of the id
    cache.put(printing.card)

    return PrintingResponse(
        card_id=printing.card.card_id,
        name=printing.card.name,
        printed_name=printing.printed_name,
        lang=printing.lang,
        type_line=printing.card.type_line,
        mana_value=printing.card.mana_value,
        set_code=printing.card.set_code,
        collector_number=printing.card.collector_number,
        text=printing.text,
        flavor_text=printing.flavor_text,
        image_url=printing.large_image_url,
    )
