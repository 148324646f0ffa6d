"""Tests for printing-aware price recommendations and currency conversion."""
from decimal import Decimal

import pytest

from mtg_catalog.core.constants import Finish, PricingStrategy
from mtg_catalog.core.exceptions import NotFoundError
from mtg_catalog.services.pricing import PricingService, convert_usd_to_aud, resolve_aud_price


class TestRecommendForPrinting:
    @pytest.mark.asyncio
    async def test_uses_latest_snapshot_as_base(self, db_session, make_card, add_price):
        printing = await make_card("Lightning Bolt")
        await add_price(printing, "20.00")

        result = await PricingService(db_session).recommend_for_printing(
            printing.id, strategy=PricingStrategy.COMPETITIVE
        )

        assert result.base_price == Decimal("20.00")
        assert result.base_price_source == "snapshot"
        assert result.recommended_price == Decimal("19.00")

    @pytest.mark.asyncio
    async def test_falls_back_to_default_base(self, db_session, make_card):
        printing = await make_card("Lightning Bolt")

        result = await PricingService(db_session).recommend_for_printing(printing.id)

        assert result.base_price_source == "default"
        assert result.recommended_price == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_undercuts_active_listings_of_same_finish(self, db_session, make_card, make_listing, add_price):
        printing = await make_card("Lightning Bolt", finishes=("nonfoil", "foil"))
        await add_price(printing, "20.00")
        await make_listing(printing, "15.00")
        await make_listing(printing, "18.00", seller_id=2)
        await make_listing(printing, "5.00", finish="foil", seller_id=3)

        result = await PricingService(db_session).recommend_for_printing(
            printing.id, finish=Finish.NONFOIL, strategy=PricingStrategy.UNDERCUT
        )

        assert result.competitor_range.min == Decimal("15.00")
        assert result.competitor_range.max == Decimal("18.00")
        assert result.recommended_price == Decimal("14.99")

    @pytest.mark.asyncio
    async def test_unknown_printing(self, db_session):
        with pytest.raises(NotFoundError):
            await PricingService(db_session).recommend_for_printing(9999)


class TestCurrency:
    def test_convert(self):
        assert convert_usd_to_aud(Decimal("10.00"), Decimal("1.55")) == Decimal("15.50")
        assert convert_usd_to_aud(Decimal("0.33"), Decimal("1.55")) == Decimal("0.51")

    def test_native_aud_preferred(self):
        assert resolve_aud_price("3.10", "1.00", Decimal("1.55")) == Decimal("3.10")

    def test_usd_fallback(self):
        assert resolve_aud_price(None, "2.00", Decimal("1.5")) == Decimal("3.00")

    def test_missing_or_invalid(self):
        assert resolve_aud_price(None, None) is None
        assert resolve_aud_price("", "n/a") is None
