"""
Tests for search, card version and inventory aggregate endpoints.
"""
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient


@pytest_asyncio.fixture
async def bolts(make_card, make_listing):
    lea = await make_card("Lightning Bolt", set_code="lea", released_at=date(1993, 8, 5),
                          colors=["R"], mana_value=1)
    m10 = await make_card("Lightning Bolt", set_code="m10", released_at=date(2009, 7, 17),
                          colors=["R"], mana_value=1, finishes=("nonfoil", "foil"))
    await make_listing(lea, "400.00", quantity=2, seller_id=1)
    await make_listing(lea, "350.00", condition="LP", seller_id=2)
    await make_listing(lea, "999.00", status="sold")
    return {"lea": lea, "m10": m10}


class TestSearchEndpoint:
    @pytest.mark.asyncio
    async def test_in_stock_first(self, client: AsyncClient, bolts):
        response = await client.get("/api/search", params={"q": "bolt"})

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["query"] == "bolt"
        assert data["sort"] == "relevance"
        assert [r["set_code"] for r in data["results"]] == ["lea", "m10"]
        first = data["results"][0]
        assert first["in_stock"] is True
        assert first["aggregate"]["available_quantity"] == 3
        assert Decimal(first["price"]) == Decimal("350.00")

    @pytest.mark.asyncio
    async def test_filters_from_query_string(self, client: AsyncClient, bolts):
        response = await client.get("/api/search", params={
            "q": "bolt",
            "in_stock": "true",
            "conditions": "LP",
            "colors": "r",
            "mana_value": "<=1",
        })

        assert [r["set_code"] for r in response.json()["results"]] == ["lea"]

    @pytest.mark.asyncio
    async def test_pagination(self, client: AsyncClient, bolts):
        response = await client.get("/api/search", params={"q": "bolt", "limit": 1, "page": 2})

        data = response.json()
        assert data["page"] == 2
        assert data["page_size"] == 1
        assert data["has_more"] is False
        assert [r["set_code"] for r in data["results"]] == ["m10"]

    @pytest.mark.asyncio
    async def test_short_query_rejected(self, client: AsyncClient):
        response = await client.get("/api/search", params={"q": "b"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_bad_numeric_filter_rejected(self, client: AsyncClient):
        response = await client.get("/api/search", params={"q": "bolt", "mana_value": "about 3"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_sort_rejected(self, client: AsyncClient):
        response = await client.get("/api/search", params={"q": "bolt", "sort": "random"})
        assert response.status_code == 422


class TestVersionsEndpoint:
    @pytest.mark.asyncio
    async def test_all_versions_include_out_of_stock(self, client: AsyncClient, bolts):
        response = await client.get("/api/cards/lightning bolt/versions")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Lightning Bolt"
        assert data["total"] == 2
        assert [v["set_code"] for v in data["versions"]] == ["lea", "m10"]
        assert data["versions"][1]["in_stock"] is False
        assert data["versions"][1]["finishes"] == ["nonfoil", "foil"]

    @pytest.mark.asyncio
    async def test_unknown_card(self, client: AsyncClient):
        response = await client.get("/api/cards/Nonexistent Card/versions")

        assert response.status_code == 200
        assert response.json() == {"name": "Nonexistent Card", "total": 0, "versions": []}


class TestAggregateEndpoint:
    @pytest.mark.asyncio
    async def test_aggregate(self, client: AsyncClient, bolts, add_price):
        await add_price(bolts["lea"], "380.00")

        response = await client.get(f"/api/inventory/printings/{bolts['lea'].id}/aggregate")

        assert response.status_code == 200
        data = response.json()
        assert data["in_stock"] is True
        assert data["active_listing_count"] == 2
        assert data["seller_count"] == 2
        assert Decimal(data["min_price"]) == Decimal("350.00")
        assert Decimal(data["max_price"]) == Decimal("400.00")
        assert data["conditions"] == ["NM", "LP"]
        assert Decimal(data["latest_prices"]["nonfoil"]["price"]) == Decimal("380.00")

    @pytest.mark.asyncio
    async def test_unknown_printing(self, client: AsyncClient):
        response = await client.get("/api/inventory/printings/999/aggregate")
        assert response.status_code == 404
