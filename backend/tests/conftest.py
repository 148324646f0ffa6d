"""
Pytest configuration and fixtures.

Provides fixtures for:
- Database sessions on an in-memory SQLite database
- HTTP client wired to the test session
- Card, printing, listing and price factories
"""
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import AsyncGenerator, Optional, Sequence

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from mtg_catalog.core.cache import LatestPriceCache
from mtg_catalog.core.circuit_breaker import clear_all_breakers
from mtg_catalog.db.base import Base
from mtg_catalog.db.session import get_db
from mtg_catalog.main import app
from mtg_catalog.models import Listing, Printing
from mtg_catalog.schemas.catalog import CatalogEntryUpsert, PrintingUpsert
from mtg_catalog.services.catalog import CatalogService
from mtg_catalog.services.prices import PriceService

# Use SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture(scope="function")
async def client(db_session) -> AsyncGenerator[AsyncClient, None]:
    """Create test HTTP client bound to the test session."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def cleanup_breakers():
    """Circuit breakers are process-wide; start every test closed."""
    clear_all_breakers()
    yield
    clear_all_breakers()


# -----------------------------------------------------------------------------
# Factories
# -----------------------------------------------------------------------------

@pytest.fixture
def catalog_service(db_session) -> CatalogService:
    return CatalogService(db_session)


@pytest.fixture
def price_service(db_session) -> PriceService:
    """Price service with caching disabled."""
    return PriceService(db_session, cache=LatestPriceCache(ttl=0))


@pytest.fixture
def make_card(catalog_service):
    """
    Factory creating a catalog entry (if needed) and one printing of it.

    Usage:
        bolt = await make_card("Lightning Bolt", set_code="m10", released_at=date(2009, 7, 17))
    """
    counter = {"n": 0}

    async def _make(
        name: str,
        *,
        identity_key: Optional[str] = None,
        set_code: str = "tst",
        set_name: Optional[str] = None,
        collector_number: Optional[str] = None,
        source_id: Optional[str] = None,
        released_at: Optional[date] = None,
        finishes: Sequence[str] = ("nonfoil",),
        colors: Sequence[str] = (),
        mana_value: Optional[float] = None,
        power: Optional[str] = None,
        toughness: Optional[str] = None,
        oracle_text: Optional[str] = None,
        rarity: str = "common",
        artist: Optional[str] = None,
        **printing_fields,
    ) -> Printing:
        counter["n"] += 1
        key = identity_key or f"oracle-{name.lower().replace(' ', '-')}"
        entry = await catalog_service.upsert_catalog_entry(CatalogEntryUpsert(
            identity_key=key,
            name=name,
            colors=list(colors),
            color_identity=list(colors),
            mana_value=mana_value,
            power=power,
            toughness=toughness,
            oracle_text=oracle_text,
        ))
        return await catalog_service.upsert_printing(PrintingUpsert(
            identity_key=entry.identity_key,
            source_id=source_id or f"src-{counter['n']}",
            set_code=set_code,
            set_name=set_name or set_code.upper(),
            collector_number=collector_number or str(counter["n"]),
            released_at=released_at,
            finishes=list(finishes),
            rarity=rarity,
            artist=artist,
            image_normal=f"https://img.example/{counter['n']}.jpg",
            **printing_fields,
        ))

    return _make


@pytest.fixture
def make_listing(db_session):
    """Factory inserting an active listing for a printing."""

    async def _make(
        printing: Printing,
        price: str,
        *,
        quantity: int = 1,
        condition: str = "NM",
        finish: str = "nonfoil",
        seller_id: int = 1,
        status: str = "active",
    ) -> Listing:
        listing = Listing(
            printing_id=printing.id,
            seller_id=seller_id,
            condition=condition,
            finish=finish,
            quantity=quantity,
            price=Decimal(price),
            status=status,
        )
        db_session.add(listing)
        await db_session.flush()
        return listing

    return _make


@pytest.fixture
def add_price(price_service):
    """Factory appending a price snapshot."""

    async def _add(
        printing: Printing,
        price: str,
        *,
        finish: str = "nonfoil",
        observed_at: Optional[datetime] = None,
    ):
        return await price_service.record_price(
            printing.id,
            finish,
            Decimal(price),
            observed_at or datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

    return _add
