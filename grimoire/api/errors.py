"""
Exception handlers.

Renders KnownError subclasses as FailureDetail bodies with the error's
HTTP status. Catalog failures become 502/404 so that a Scryfall outage
is never reported as a server bug.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from grimoire.models.failure import FailureDetail, FailureKind, KnownError
from grimoire.services.card_catalog import CatalogError, PrintingNotFoundError

logger = logging.getLogger(__name__)


async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_detail().model_dump(mode="json"),
    )


async def catalog_error_handler(_request: Request, exc: CatalogError) -> JSONResponse:
    if isinstance(exc, PrintingNotFoundError):
        detail = FailureDetail(kind=FailureKind.NOT_FOUND, message=str(exc))
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content=detail.model_dump(mode="json")
        )

    logger.warning("Card catalog error: %s", exc)
    detail = FailureDetail(
        kind=FailureKind.EXTERNAL_API_ERROR,
        message="The card catalog is unavailable right now.",
        detail=str(exc),
        suggestion="Try again in a moment.",
    )
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY, content=detail.model_dump(mode="json")
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(KnownError, known_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(CatalogError, catalog_error_handler)  # type: ignore[arg-type]
