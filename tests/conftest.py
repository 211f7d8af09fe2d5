from collections.abc import Iterable

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from grimoire.db.database import get_session
from grimoire.main import app
from grimoire.models.card import CardMetadata, LocalizedPrinting
from grimoire.models.db import Base
from grimoire.services.card_catalog import (
    MetadataCache,
    PrintingNotFoundError,
    ScryfallCatalog,
    get_metadata_cache,
)

BOLT = CardMetadata(
    card_id="bolt-id",
    name="Lightning Bolt",
    mana_value=1.0,
    type_line="Instant",
    set_code="leb",
    collector_number="163",
)
ELVES = CardMetadata(
    card_id="elves-id",
    name="Llanowar Elves",
    mana_value=1.0,
    type_line="Creature — Elf Druid",
    set_code="dom",
    collector_number="168",
)
GIANT = CardMetadata(
    card_id="giant-id",
    name="Hill Giant",
    mana_value=4.0,
    type_line="Creature — Giant",
    set_code="m10",
    collector_number="146",
)
MOUNTAIN = CardMetadata(
    card_id="mountain-id",
    name="Mountain",
    mana_value=0.0,
    type_line="Basic Land — Mountain",
    set_code="neo",
    collector_number="290",
)
ELDRAZI = CardMetadata(
    card_id="eldrazi-id",
    name="Ulamog, the Ceaseless Hunger",
    mana_value=10.0,
    type_line="Legendary Creature — Eldrazi",
    set_code="bfz",
    collector_number="15",
)


class StaticCatalog(ScryfallCatalog):
    """Catalog answering from a fixed set of cards, counting lookups."""

    def __init__(self, cards: Iterable[CardMetadata]) -> None:
        super().__init__(base_url="https://catalog.invalid")
        self.cards = {card.card_id: card for card in cards}
        self.requested: list[set[str]] = []

    async def get_many(self, card_ids: Iterable[str]) -> dict[str, CardMetadata]:
        ids = set(card_ids)
        self.requested.append(ids)
        return {card_id: self.cards[card_id] for card_id in ids if card_id in self.cards}

    async def get_printing(
        self, set_code: str, collector_number: str, lang: str = "en"
    ) -> LocalizedPrinting:
        for card in self.cards.values():
            if card.set_code == set_code.lower() and card.collector_number == collector_number:
                return LocalizedPrinting(card=card, lang="en", printed_name=card.name, text="")
        raise PrintingNotFoundError(f"No printing found for {set_code} #{collector_number}")


@pytest.fixture
def catalog_cards() -> list[CardMetadata]:
    return [BOLT, ELVES, GIANT, MOUNTAIN, ELDRAZI]


@pytest.fixture
def static_catalog(catalog_cards: list[CardMetadata]) -> StaticCatalog:
    return StaticCatalog(catalog_cards)


@pytest.fixture
def metadata_cache(static_catalog: StaticCatalog) -> MetadataCache:
    return MetadataCache(static_catalog)


@pytest.fixture
async def async_engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def session(async_engine) -> AsyncSession:
    """Provide a database session for tests."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
async def client(async_engine, metadata_cache: MetadataCache):
    """Provide an async test client with overridden database session and catalog."""
    async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_metadata_cache] = lambda: metadata_cache

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
