"""
Card catalog backed by the Scryfall API.

Provides batch metadata lookup for deck statistics and export, and
single-printing lookup for card detail pages. Lookups may come back
partial: cards Scryfall does not know are simply absent from the result.

Failures are not retried here. HTTP and transport errors are raised as
CatalogError and propagate to the caller.
"""

import asyncio
import logging
from collections.abc import Iterable
from functools import lru_cache
from typing import Any

import httpx

from grimoire.config import SCRYFALL_BATCH_SIZE, SCRYFALL_USER_AGENT, settings
from grimoire.models.card import (
    CardMetadata,
    LocalizedPrinting,
    card_from_scryfall,
    printing_from_scryfall,
)

logger = logging.getLogger(__name__)

# Rate limit: max 10 requests per second, so delay 100ms between requests
_RATE_LIMIT_DELAY = 0.1

SUPPORTED_LANGUAGES = frozenset(
    {"en", "es", "fr", "de", "it", "pt", "ja", "ko", "ru", "zhs", "zht"}
)


class CatalogError(Exception):
    """Raised when the card catalog cannot be reached or answers with an error."""

    pass


class PrintingNotFoundError(CatalogError):
    """Raised when a set/collector-number pair matches no printing."""

    pass


class ScryfallCatalog:
    """
    Read-only card lookups against Scryfall.

    Args:
        base_url: API root. Defaults to settings.scryfall_api_url
        timeout: Request timeout in seconds
        client: Optional shared client; a short-lived client is opened per
                call when omitted
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.scryfall_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.scryfall_timeout
        self._client = client

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        headers = {"User-Agent": SCRYFALL_USER_AGENT, "Accept": "application/json"}
        try:
            if self._client is not None:
                return await self._client.request(method, url, headers=headers, **kwargs)
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                return await client.request(method, url, headers=headers, **kwargs)
        except httpx.RequestError as e:
            logger.warning("Scryfall request to %s failed: %s", path, e)
            raise CatalogError(f"Failed to reach card catalog: {e}") from e

    async def get_many(self, card_ids: Iterable[str]) -> dict[str, CardMetadata]:
        """
        Look up metadata for many cards by Scryfall id.

        Identifiers are sent in batches of at most 75.

        Returns:
            Dict mapping card id to metadata, for the ids Scryfall found

        Raises:
            CatalogError: If any batch request fails
        """
        ids = sorted(set(card_ids))
        found: dict[str, CardMetadata] = {}

        for start in range(0, len(ids), SCRYFALL_BATCH_SIZE):
            if start:
                await asyncio.sleep(_RATE_LIMIT_DELAY)

            batch = ids[start : start + SCRYFALL_BATCH_SIZE]
            response = await self._request(
                "POST",
                "/cards/collection",
                json={"identifiers": [{"id": card_id} for card_id in batch]},
            )
            if response.is_error:
                logger.warning(
                    "Scryfall collection lookup failed: HTTP %d", response.status_code
                )
                raise CatalogError(
                    f"Failed to fetch card metadata: HTTP {response.status_code}"
                )

            data = response.json()
            for payload in data.get("data", []):
                card = card_from_scryfall(payload)
                found[card.card_id] = card

            not_found = data.get("not_found", [])
            if not_found:
                logger.debug("Scryfall did not find %d of %d cards", len(not_found), len(batch))

        return found

    async def get_printing(
        self, set_code: str, collector_number: str, lang: str = "en"
    ) -> LocalizedPrinting:
        """
        Fetch one printing in a language.

        Falls back to the English printing when the localized one does
        not exist.

        Raises:
            PrintingNotFoundError: If no printing exists in either language
            CatalogError: If the request fails
        """
        path = f"/cards/{set_code.lower()}/{collector_number}"
        response = await self._request("GET", f"{path}/{lang}")

        if response.status_code == httpx.codes.NOT_FOUND and lang != "en":
            logger.debug("No %s printing for %s %s, using English", lang, set_code, collector_number)
            response = await self._request("GET", f"{path}/en")

        if response.status_code == httpx.codes.NOT_FOUND:
            raise PrintingNotFoundError(
                f"No printing found for {set_code.upper()} #{collector_number}"
            )
        if response.is_error:
            raise CatalogError(f"Failed to fetch printing: HTTP {response.status_code}")

        return printing_from_scryfall(response.json())


class MetadataCache:
    """
    In-memory card metadata keyed by card id.

    Only ids not seen before are sent to the catalog. Results are
    eventually consistent with the catalog and may be partial.
    """

    def __init__(self, catalog: ScryfallCatalog) -> None:
        self.catalog = catalog
        self._cards: dict[str, CardMetadata] = {}

    def get(self, card_id: str) -> CardMetadata | None:
        return self._cards.get(card_id)

    def put(self, card: CardMetadata) -> None:
        self._cards[card.card_id] = card

    def __len__(self) -> int:
        return len(self._cards)

    async def resolve(self, card_ids: Iterable[str]) -> dict[str, CardMetadata]:
        """
        Return metadata for the requested ids, fetching unknown ones.

        Ids the catalog does not know are absent from the result.
        """
        wanted = set(card_ids)
        missing = wanted - self._cards.keys()

        if missing:
            fetched = await self.catalog.get_many(missing)
            self._cards.update(fetched)

        return {card_id: self._cards[card_id] for card_id in wanted if card_id in self._cards}


@lru_cache(maxsize=1)
def get_metadata_cache() -> MetadataCache:
    """
    Get the process-wide metadata cache.

    Cached after first call.
    """
    return MetadataCache(ScryfallCatalog())
