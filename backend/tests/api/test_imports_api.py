"""
Tests for collection import endpoints.
"""
from datetime import date

import pytest
from httpx import AsyncClient

TAPPEDOUT_CSV = (
    "Name,Qty,Set,Foil\n"
    "Lightning Bolt,4,M10,\n"
    "Mystery Card,1,,\n"
)


def _upload(content: bytes, filename: str = "collection.csv", content_type: str = "text/csv"):
    return {"file": (filename, content, content_type)}


class TestImportUpload:
    @pytest.mark.asyncio
    async def test_import_csv(self, client: AsyncClient, make_card, add_price):
        bolt = await make_card("Lightning Bolt", set_code="m10", released_at=date(2009, 7, 17))
        await add_price(bolt, "2.00")

        response = await client.post("/api/imports", files=_upload(TAPPEDOUT_CSV.encode()))

        assert response.status_code == 200
        data = response.json()
        assert data["schema_name"] == "tappedout"
        assert data["summary"] == {
            "total": 2,
            "matched": 1,
            "needs_review": 1,
            "dropped": 0,
            "pending": 0,
        }
        bolt_row, mystery = data["rows"]
        assert bolt_row["printing_id"] == bolt.id
        assert bolt_row["status"] == "matched"
        assert bolt_row["quantity"] == 4
        assert mystery["status"] == "needs_review"
        assert mystery["match_error"] == "No catalog match"

    @pytest.mark.asyncio
    async def test_byte_order_mark_and_schema_hint(self, client: AsyncClient, make_card):
        await make_card("Shock")
        content = "\ufeffCard,Quantity,Set\nShock,3,\n".encode("utf-8")

        response = await client.post(
            "/api/imports",
            files=_upload(content),
            data={"schema_hint": "mtggoldfish"},
        )

        data = response.json()
        assert data["schema_name"] == "mtggoldfish"
        assert data["rows"][0]["quantity"] == 3
        assert data["rows"][0]["status"] == "matched"

    @pytest.mark.asyncio
    async def test_rejects_non_csv_extension(self, client: AsyncClient):
        response = await client.post("/api/imports", files=_upload(b"Name\nShock\n", filename="cards.xlsx"))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_rejects_content_type(self, client: AsyncClient):
        response = await client.post(
            "/api/imports",
            files=_upload(b"Name\nShock\n", content_type="application/octet-stream"),
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_rejects_binary_disguised_as_csv(self, client: AsyncClient):
        response = await client.post("/api/imports", files=_upload(b"PK\x03\x04rest-of-zip"))

        assert response.status_code == 400
        assert "ZIP" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_rejects_empty_file(self, client: AsyncClient):
        response = await client.post("/api/imports", files=_upload(b""))
        assert response.status_code == 400


class TestTextImport:
    @pytest.mark.asyncio
    async def test_pasted_list(self, client: AsyncClient, make_card):
        await make_card("Shock")

        response = await client.post("/api/imports/text", json={"text": "2x Shock\n# lands\n"})

        data = response.json()
        assert data["schema_name"] == "text"
        assert data["summary"]["total"] == 1
        assert data["rows"][0]["raw"] == {"line": "2x Shock"}

    @pytest.mark.asyncio
    async def test_blank_list(self, client: AsyncClient):
        response = await client.post("/api/imports/text", json={"text": "   \n"})
        assert response.status_code == 400


class TestDetect:
    @pytest.mark.asyncio
    async def test_detect_known_format(self, client: AsyncClient):
        response = await client.post("/api/imports/detect", json={
            "headers": ["Card Name", "Quantity", "Set Name", "Set Code", "Card Number",
                        "Condition", "Language", "Printing", "Card Price"],
        })

        data = response.json()
        assert data["schema_name"] == "dragonshield"
        assert data["scores"][0] == {"name": "dragonshield", "fraction": 1.0, "matched": 9}

    @pytest.mark.asyncio
    async def test_detect_generic(self, client: AsyncClient):
        response = await client.post("/api/imports/detect", json={"headers": ["foo", "bar"]})
        assert response.json()["schema_name"] == "generic"
