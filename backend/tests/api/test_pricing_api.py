"""
Tests for pricing endpoints.
"""
from decimal import Decimal

import pytest
from httpx import AsyncClient

BATCH_ITEMS = [
    {"item_id": "a", "base_price": "10.00", "quantity": 2},
    {"item_id": "b", "base_price": "20.00", "overridden": True, "price": "25.00"},
    {"item_id": "c", "base_price": "4.00", "quantity": 4},
]


class TestRecommend:
    @pytest.mark.asyncio
    async def test_competitive(self, client: AsyncClient):
        response = await client.post("/api/pricing/recommend", json={
            "base_price": "20.00",
            "strategy": "competitive",
        })

        assert response.status_code == 200
        assert Decimal(response.json()["recommended_price"]) == Decimal("19.00")

    @pytest.mark.asyncio
    async def test_custom_without_price(self, client: AsyncClient):
        response = await client.post("/api/pricing/recommend", json={
            "base_price": "20.00",
            "strategy": "custom",
        })
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_bulk_adjustment_out_of_range(self, client: AsyncClient):
        response = await client.post("/api/pricing/recommend", json={
            "base_price": "20.00",
            "bulk_adjustment_percent": "75",
        })
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_strategy(self, client: AsyncClient):
        response = await client.post("/api/pricing/recommend", json={
            "base_price": "20.00",
            "strategy": "yolo",
        })
        assert response.status_code == 422


class TestPrintingRecommend:
    @pytest.mark.asyncio
    async def test_uses_latest_snapshot(self, client: AsyncClient, make_card, add_price):
        bolt = await make_card("Lightning Bolt")
        await add_price(bolt, "20.00")

        response = await client.post(f"/api/pricing/printings/{bolt.id}/recommend", json={
            "strategy": "quick-sale",
        })

        data = response.json()
        assert data["base_price_source"] == "snapshot"
        assert Decimal(data["base_price"]) == Decimal("20.00")
        assert Decimal(data["recommended_price"]) == Decimal("17.00")
        assert data["competitor_range"] is None

    @pytest.mark.asyncio
    async def test_never_priced_uses_default(self, client: AsyncClient, make_card):
        bolt = await make_card("Lightning Bolt")

        response = await client.post(f"/api/pricing/printings/{bolt.id}/recommend", json={})

        data = response.json()
        assert data["base_price_source"] == "default"
        assert Decimal(data["recommended_price"]) == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_unknown_printing(self, client: AsyncClient):
        response = await client.post("/api/pricing/printings/999/recommend", json={})
        assert response.status_code == 404


class TestBatchReprice:
    @pytest.mark.asyncio
    async def test_overridden_items_keep_price(self, client: AsyncClient):
        response = await client.post("/api/pricing/batch", json={
            "items": BATCH_ITEMS,
            "strategy": "market",
        })

        assert response.status_code == 200
        data = response.json()
        prices = {item["item_id"]: Decimal(item["price"]) for item in data["items"]}
        assert prices == {"a": Decimal("10.00"), "b": Decimal("25.00"), "c": Decimal("4.00")}
        assert data["repriced"] == ["a", "c"]
        # 10*2 + 25 + 4*4
        assert Decimal(data["summary"]["total_value"]) == Decimal("61.00")
        assert data["summary"]["total_quantity"] == 7

    @pytest.mark.asyncio
    async def test_selected_override_is_repriced(self, client: AsyncClient):
        response = await client.post("/api/pricing/batch", json={
            "items": BATCH_ITEMS,
            "strategy": "market",
            "item_ids": ["b"],
        })

        data = response.json()
        b = next(item for item in data["items"] if item["item_id"] == "b")
        assert data["repriced"] == ["b"]
        assert Decimal(b["price"]) == Decimal("20.00")
        assert b["overridden"] is False

    @pytest.mark.asyncio
    async def test_duplicate_ids_rejected(self, client: AsyncClient):
        response = await client.post("/api/pricing/batch", json={
            "items": [BATCH_ITEMS[0], BATCH_ITEMS[0]],
            "strategy": "market",
        })
        assert response.status_code == 400
