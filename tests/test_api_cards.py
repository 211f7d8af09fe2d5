"""Tests for card detail endpoints and catalog error handling."""

from collections.abc import Iterable

from conftest import BOLT, GIANT
from httpx import AsyncClient

from grimoire.main import app
from grimoire.models.card import CardMetadata
from grimoire.services.card_catalog import (
    CatalogError,
    MetadataCache,
    ScryfallCatalog,
    get_metadata_cache,
)


class UnavailableCatalog(ScryfallCatalog):
    """Catalog whose every lookup fails."""

    def __init__(self) -> None:
        super().__init__(base_url="https://catalog.invalid")

    async def get_many(self, card_ids: Iterable[str]) -> dict[str, CardMetadata]:
        raise CatalogError("Failed to fetch card metadata: HTTP 503")


class TestGetPrinting:
    async def test_get_printing(self, client: AsyncClient, metadata_cache: MetadataCache) -> None:
        response = await client.get("/cards/M10/146")

        assert response.status_code == 200
        data = response.json()
        assert data["card_id"] == GIANT.card_id
        assert data["name"] == "Hill Giant"
        assert data["set_code"] == "m10"
        assert metadata_cache.get(GIANT.card_id) == GIANT

    async def test_unknown_printing(self, client: AsyncClient) -> None:
        response = await client.get("/cards/zzz/999")

        assert response.status_code == 404
        assert response.json()["kind"] == "not_found"

    async def test_unsupported_language(self, client: AsyncClient) -> None:
        response = await client.get("/cards/leb/163", params={"lang": "xx"})

        assert response.status_code == 400
        assert response.json()["kind"] == "invalid_input"

    async def test_supported_language(self, client: AsyncClient) -> None:
        response = await client.get("/cards/leb/163", params={"lang": "ja"})

        assert response.status_code == 200
        assert response.json()["card_id"] == BOLT.card_id


class TestCatalogOutage:
    async def test_stats_return_502(self, client: AsyncClient) -> None:
        await client.put(f"/collection/alice/cards/{BOLT.card_id}", json={"quantity": 4})
        deck = (await client.post("/decks/alice", json={"name": "Burn"})).json()
        await client.post(f"/decks/alice/{deck['deck_id']}/cards", json={"card_id": BOLT.card_id})
        app.dependency_overrides[get_metadata_cache] = lambda: MetadataCache(UnavailableCatalog())

        response = await client.get(f"/decks/alice/{deck['deck_id']}/stats")

        assert response.status_code == 502
        assert response.json()["kind"] == "external_api_error"

    async def test_placement_does_not_need_catalog(self, client: AsyncClient) -> None:
        app.dependency_overrides[get_metadata_cache] = lambda: MetadataCache(UnavailableCatalog())
        await client.put(f"/collection/alice/cards/{BOLT.card_id}", json={"quantity": 4})
        deck = (await client.post("/decks/alice", json={"name": "Burn"})).json()

        response = await client.post(
            f"/decks/alice/{deck['deck_id']}/cards", json={"card_id": BOLT.card_id}
        )

        assert response.status_code == 200
