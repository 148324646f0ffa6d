"""Tests for Scryfall catalog sync."""
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from mtg_catalog.services.ingestion.sync import (
    CatalogSyncService,
    entry_from_scryfall,
    printing_from_scryfall,
)
from mtg_catalog.services.prices import PriceService


def scryfall_card(**overrides):
    card = {
        "id": "sf-bolt-m10",
        "oracle_id": "oracle-bolt",
        "name": "Lightning Bolt",
        "mana_cost": "{R}",
        "cmc": 1.0,
        "type_line": "Instant",
        "oracle_text": "Lightning Bolt deals 3 damage to any target.",
        "colors": ["R"],
        "color_identity": ["R"],
        "keywords": [],
        "legalities": {"modern": "legal"},
        "set": "m10",
        "set_name": "Magic 2010",
        "collector_number": "146",
        "rarity": "common",
        "artist": "Christopher Moeller",
        "released_at": "2009-07-17",
        "frame": "2003",
        "border_color": "black",
        "finishes": ["nonfoil", "foil"],
        "image_uris": {"small": "s.jpg", "normal": "n.jpg", "large": "l.jpg"},
        "prices": {"usd": "1.00", "usd_foil": "4.00", "aud": None},
    }
    card.update(overrides)
    return card


DFC = {
    "id": "sf-delver",
    "name": "Delver of Secrets // Insectile Aberration",
    "cmc": 1.0,
    "color_identity": ["U"],
    "set": "isd",
    "set_name": "Innistrad",
    "collector_number": "51",
    "finishes": ["nonfoil"],
    "card_faces": [
        {
            "oracle_id": "oracle-delver",
            "name": "Delver of Secrets",
            "mana_cost": "{U}",
            "type_line": "Creature - Human Wizard",
            "oracle_text": "At the beginning of your upkeep, look at the top card.",
            "colors": ["U"],
            "power": "1",
            "toughness": "1",
            "image_uris": {"normal": "front.jpg"},
        },
        {
            "name": "Insectile Aberration",
            "oracle_text": "Flying",
            "image_uris": {"normal": "back.jpg"},
        },
    ],
    "prices": {},
}


class FakeScryfall:
    def __init__(self, cards):
        self.cards = {card["id"]: card for card in cards}

    async def search_cards(self, query):
        for card in self.cards.values():
            yield card

    async def get_card(self, source_id):
        return self.cards.get(source_id)


class TestMapping:
    def test_single_faced_card(self):
        card = scryfall_card()
        entry = entry_from_scryfall(card)
        printing = printing_from_scryfall(card, entry.identity_key)

        assert entry.identity_key == "oracle-bolt"
        assert entry.mana_value == 1.0
        assert entry.colors == ["R"]
        assert printing.source_id == "sf-bolt-m10"
        assert printing.released_at == date(2009, 7, 17)
        assert printing.image_normal == "n.jpg"
        assert printing.frame_version == "2003"
        assert printing.back_image is None

    def test_double_faced_card_uses_faces(self):
        entry = entry_from_scryfall(DFC)
        printing = printing_from_scryfall(DFC, entry.identity_key)

        assert entry.identity_key == "oracle-delver"
        assert entry.power == "1"
        assert entry.colors == ["U"]
        assert "\n//\n" in entry.oracle_text
        assert printing.image_normal == "front.jpg"
        assert printing.back_image == "back.jpg"

    def test_bad_release_date_is_dropped(self):
        printing = printing_from_scryfall(scryfall_card(released_at="soon"), "oracle-bolt")
        assert printing.released_at is None


class TestCatalogSyncService:
    @pytest.mark.asyncio
    async def test_sync_card_records_aud_prices(self, db_session):
        service = CatalogSyncService(db_session, FakeScryfall([]))
        observed = datetime(2024, 5, 1, tzinfo=timezone.utc)

        printing, recorded = await service.sync_card(scryfall_card(), observed_at=observed)

        assert recorded == 2
        prices = PriceService(db_session)
        nonfoil = await prices.latest_price(printing.id, "nonfoil")
        foil = await prices.latest_price(printing.id, "foil")
        assert nonfoil.price == Decimal("1.55")
        assert foil.price == Decimal("6.20")

    @pytest.mark.asyncio
    async def test_native_aud_price_wins(self, db_session):
        service = CatalogSyncService(db_session, FakeScryfall([]))
        card = scryfall_card(finishes=["nonfoil"], prices={"aud": "2.10", "usd": "1.00"})

        printing, recorded = await service.sync_card(card)

        assert recorded == 1
        latest = await PriceService(db_session).latest_price(printing.id, "nonfoil")
        assert latest.price == Decimal("2.10")

    @pytest.mark.asyncio
    async def test_sync_query_counts_and_skips_malformed(self, db_session):
        cards = [scryfall_card(), DFC, scryfall_card(id="sf-broken", oracle_id=None, name="")]
        service = CatalogSyncService(db_session, FakeScryfall(cards))

        stats = await service.sync_query("bolt")

        assert stats.cards == 2
        assert stats.prices == 2
        assert stats.skipped == 1

    @pytest.mark.asyncio
    async def test_refresh_prices_appends_snapshots(self, db_session):
        card = scryfall_card()
        service = CatalogSyncService(db_session, FakeScryfall([card]))
        printing, _ = await service.sync_card(card, observed_at=datetime(2024, 1, 1, tzinfo=timezone.utc))

        card["prices"] = {"usd": "2.00", "usd_foil": None}
        stats = await service.refresh_prices(batch_size=10)

        assert stats.cards == 1
        assert stats.prices == 1
        history = await PriceService(db_session).price_history(printing.id, "nonfoil")
        assert len(history) == 2
        latest = await PriceService(db_session).latest_price(printing.id, "nonfoil")
        assert latest.price == Decimal("3.10")

    @pytest.mark.asyncio
    async def test_refresh_skips_cards_gone_upstream(self, db_session):
        card = scryfall_card()
        fake = FakeScryfall([card])
        service = CatalogSyncService(db_session, fake)
        await service.sync_card(card)
        fake.cards.clear()

        stats = await service.refresh_prices()

        assert stats.skipped == 1
        assert stats.prices == 0
