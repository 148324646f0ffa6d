"""Tests for the price snapshot store."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from mtg_catalog.core.cache import MISSING, LatestPriceCache
from mtg_catalog.core.exceptions import NotFoundError, ValidationError
from mtg_catalog.repositories.price_repo import PriceRepository
from mtg_catalog.services.prices import PriceService, normalize_finish

T0 = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


class TestRecordPrice:
    @pytest.mark.asyncio
    async def test_appends_snapshots(self, make_card, price_service, db_session):
        printing = await make_card("Lightning Bolt")

        await price_service.record_price(printing.id, "nonfoil", Decimal("2.00"), T0)
        await price_service.record_price(printing.id, "nonfoil", Decimal("2.50"), T0 + timedelta(days=1))

        assert await PriceRepository(db_session).count_for(printing.id, "nonfoil") == 2

    @pytest.mark.asyncio
    async def test_quantizes_to_cents(self, make_card, price_service):
        printing = await make_card("Lightning Bolt")
        snapshot = await price_service.record_price(printing.id, "nonfoil", "1.5", T0)
        assert snapshot.price == Decimal("1.50")

    @pytest.mark.asyncio
    async def test_rejects_negative_price(self, make_card, price_service):
        printing = await make_card("Lightning Bolt")
        with pytest.raises(ValidationError):
            await price_service.record_price(printing.id, "nonfoil", Decimal("-1"), T0)

    @pytest.mark.asyncio
    async def test_rejects_unparsable_price(self, make_card, price_service):
        printing = await make_card("Lightning Bolt")
        with pytest.raises(ValidationError):
            await price_service.record_price(printing.id, "nonfoil", "abc", T0)

    @pytest.mark.asyncio
    async def test_rejects_unknown_finish(self, make_card, price_service):
        printing = await make_card("Lightning Bolt")
        with pytest.raises(ValidationError):
            await price_service.record_price(printing.id, "shiny", Decimal("1"), T0)

    @pytest.mark.asyncio
    async def test_unknown_printing(self, price_service):
        with pytest.raises(NotFoundError):
            await price_service.record_price(4242, "nonfoil", Decimal("1"), T0)


class TestLatestPrice:
    @pytest.mark.asyncio
    async def test_latest_is_most_recent_observation(self, make_card, price_service):
        printing = await make_card("Lightning Bolt")

        # Recorded out of order; observed_at decides
        await price_service.record_price(printing.id, "nonfoil", Decimal("3.00"), T0 + timedelta(days=2))
        await price_service.record_price(printing.id, "nonfoil", Decimal("1.00"), T0)
        await price_service.record_price(printing.id, "nonfoil", Decimal("2.00"), T0 + timedelta(days=1))

        latest = await price_service.latest_price(printing.id, "nonfoil")
        assert latest.price == Decimal("3.00")
        assert latest.currency == "AUD"

    @pytest.mark.asyncio
    async def test_finishes_are_independent(self, make_card, price_service):
        printing = await make_card("Lightning Bolt", finishes=("nonfoil", "foil"))

        await price_service.record_price(printing.id, "nonfoil", Decimal("2.00"), T0)
        await price_service.record_price(printing.id, "foil", Decimal("9.00"), T0)

        assert (await price_service.latest_price(printing.id, "foil")).price == Decimal("9.00")
        assert (await price_service.latest_price(printing.id, "NONFOIL")).price == Decimal("2.00")

    @pytest.mark.asyncio
    async def test_never_priced_is_none(self, make_card, price_service):
        printing = await make_card("Lightning Bolt")
        assert await price_service.latest_price(printing.id, "nonfoil") is None

    @pytest.mark.asyncio
    async def test_batched_latest(self, make_card, price_service):
        bolt = await make_card("Lightning Bolt")
        helix = await make_card("Lightning Helix")
        await make_card("Counterspell")

        await price_service.record_price(bolt.id, "nonfoil", Decimal("1.00"), T0)
        await price_service.record_price(bolt.id, "nonfoil", Decimal("1.25"), T0 + timedelta(hours=1))
        await price_service.record_price(helix.id, "nonfoil", Decimal("0.50"), T0)

        latest = await price_service.latest_prices_for([bolt.id, helix.id, bolt.id])
        assert latest[bolt.id]["nonfoil"].price == Decimal("1.25")
        assert latest[helix.id]["nonfoil"].price == Decimal("0.50")
        assert len(latest) == 2

    @pytest.mark.asyncio
    async def test_history_newest_first(self, make_card, price_service):
        printing = await make_card("Lightning Bolt")
        for days, price in [(0, "1.00"), (2, "3.00"), (1, "2.00")]:
            await price_service.record_price(printing.id, "nonfoil", Decimal(price), T0 + timedelta(days=days))

        history = await price_service.price_history(printing.id, "nonfoil")
        assert [s.price for s in history] == [Decimal("3.00"), Decimal("2.00"), Decimal("1.00")]


class TestLatestPriceCaching:
    @pytest.mark.asyncio
    async def test_new_snapshot_invalidates_cached_latest(self, make_card, db_session):
        service = PriceService(db_session, cache=LatestPriceCache(max_size=10, ttl=300))
        printing = await make_card("Lightning Bolt")

        await service.record_price(printing.id, "nonfoil", Decimal("1.00"), T0)
        assert (await service.latest_price(printing.id, "nonfoil")).price == Decimal("1.00")

        await service.record_price(printing.id, "nonfoil", Decimal("4.00"), T0 + timedelta(days=1))
        assert (await service.latest_price(printing.id, "nonfoil")).price == Decimal("4.00")

    @pytest.mark.asyncio
    async def test_absent_price_is_cached_until_recorded(self, make_card, db_session):
        cache = LatestPriceCache(max_size=10, ttl=300)
        service = PriceService(db_session, cache=cache)
        printing = await make_card("Lightning Bolt")

        assert await service.latest_price(printing.id, "nonfoil") is None
        assert cache.get((printing.id, "nonfoil")) is None

        await service.record_price(printing.id, "nonfoil", Decimal("1.00"), T0)
        assert cache.get((printing.id, "nonfoil")) is MISSING
        assert (await service.latest_price(printing.id, "nonfoil")).price == Decimal("1.00")


class TestNormalizeFinish:
    def test_valid(self):
        assert normalize_finish(" Foil ") == "foil"

    def test_invalid(self):
        with pytest.raises(ValidationError):
            normalize_finish("")
