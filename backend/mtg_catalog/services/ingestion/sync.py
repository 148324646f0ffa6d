"""
Catalog sync from Scryfall card JSON.

Maps each Scryfall card object onto a catalog entry, a printing and one
price snapshot per available finish. Prices are stored in AUD: a native
AUD price when Scryfall carries one, otherwise USD converted at
``settings.aud_per_usd``.
"""
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from mtg_catalog.core.exceptions import ValidationError
from mtg_catalog.models.printing import Printing
from mtg_catalog.repositories.catalog_repo import PrintingRepository
from mtg_catalog.schemas.catalog import CatalogEntryUpsert, PrintingUpsert
from mtg_catalog.services.catalog import CatalogService
from mtg_catalog.services.ingestion.scryfall import ScryfallClient
from mtg_catalog.services.prices import PriceService
from mtg_catalog.services.pricing.currency import resolve_aud_price

logger = structlog.get_logger()

# finish -> (native AUD key, USD key) in Scryfall's "prices" object
PRICE_KEYS: dict[str, tuple[str, str]] = {
    "nonfoil": ("aud", "usd"),
    "foil": ("aud_foil", "usd_foil"),
    "etched": ("aud_etched", "usd_etched"),
}


@dataclass
class SyncStats:
    """Counters for one sync run."""
    cards: int = 0
    prices: int = 0
    skipped: int = 0


def _front_face(card: dict[str, Any]) -> dict[str, Any]:
    faces = card.get("card_faces") or []
    return faces[0] if faces else {}


def _from_card_or_face(card: dict[str, Any], key: str) -> Any:
    value = card.get(key)
    if value is None:
        value = _front_face(card).get(key)
    return value


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def entry_from_scryfall(card: dict[str, Any]) -> CatalogEntryUpsert:
    """Card identity fields of a Scryfall card object."""
    faces = card.get("card_faces") or []
    oracle_text = card.get("oracle_text")
    if oracle_text is None and faces:
        oracle_text = "\n//\n".join(face.get("oracle_text", "") for face in faces)

    return CatalogEntryUpsert(
        identity_key=card.get("oracle_id") or _front_face(card).get("oracle_id") or "",
        name=card.get("name") or "",
        mana_cost=_from_card_or_face(card, "mana_cost"),
        mana_value=card.get("cmc"),
        type_line=_from_card_or_face(card, "type_line"),
        oracle_text=oracle_text,
        power=_from_card_or_face(card, "power"),
        toughness=_from_card_or_face(card, "toughness"),
        colors=_from_card_or_face(card, "colors") or [],
        color_identity=card.get("color_identity") or [],
        keywords=card.get("keywords") or [],
        legalities=card.get("legalities") or {},
        is_reserved=bool(card.get("reserved", False)),
    )


def printing_from_scryfall(card: dict[str, Any], identity_key: str) -> PrintingUpsert:
    """Printing fields of a Scryfall card object."""
    faces = card.get("card_faces") or []
    images = card.get("image_uris") or _front_face(card).get("image_uris") or {}
    back_image = None
    if len(faces) > 1 and not card.get("image_uris"):
        back_image = (faces[1].get("image_uris") or {}).get("normal")

    return PrintingUpsert(
        identity_key=identity_key,
        source_id=card.get("id") or "",
        set_code=card.get("set") or "",
        set_name=card.get("set_name"),
        collector_number=card.get("collector_number") or "",
        rarity=card.get("rarity"),
        artist=card.get("artist"),
        flavor_text=_from_card_or_face(card, "flavor_text"),
        released_at=_parse_date(card.get("released_at")),
        image_small=images.get("small"),
        image_normal=images.get("normal"),
        image_large=images.get("large"),
        image_art_crop=images.get("art_crop"),
        back_image=back_image,
        frame_version=card.get("frame"),
        frame_effects=card.get("frame_effects") or [],
        border_color=card.get("border_color"),
        promo_types=card.get("promo_types") or [],
        security_stamp=card.get("security_stamp"),
        finishes=card.get("finishes") or ["nonfoil"],
        is_oversized=bool(card.get("oversized", False)),
        is_full_art=bool(card.get("full_art", False)),
        is_textless=bool(card.get("textless", False)),
        is_promo=bool(card.get("promo", False)),
    )


class CatalogSyncService:
    """
    Writes Scryfall data into the catalog and price snapshot store.
    """

    def __init__(self, db: AsyncSession, client: ScryfallClient):
        self.db = db
        self.client = client
        self.catalog = CatalogService(db)
        self.prices = PriceService(db)
        self.printings = PrintingRepository(db)

    async def record_prices(
        self,
        printing: Printing,
        card: dict[str, Any],
        observed_at: Optional[datetime] = None,
    ) -> int:
        """Append one AUD snapshot per finish that has a price; returns the count."""
        prices = card.get("prices") or {}
        observed_at = observed_at or datetime.now(timezone.utc)
        recorded = 0
        for finish in sorted(printing.finishes):
            keys = PRICE_KEYS.get(finish)
            if keys is None:
                continue
            amount = resolve_aud_price(prices.get(keys[0]), prices.get(keys[1]))
            if amount is None:
                continue
            await self.prices.record_price(printing.id, finish, amount, observed_at, currency="AUD")
            recorded += 1
        return recorded

    async def sync_card(
        self,
        card: dict[str, Any],
        observed_at: Optional[datetime] = None,
    ) -> tuple[Printing, int]:
        """
        Upsert entry and printing for one card object and record its prices.

        Returns:
            The printing and the number of snapshots recorded

        Raises:
            ValidationError: Card object lacks identity fields
        """
        entry = await self.catalog.upsert_catalog_entry(entry_from_scryfall(card))
        printing = await self.catalog.upsert_printing(
            printing_from_scryfall(card, entry.identity_key)
        )
        recorded = await self.record_prices(printing, card, observed_at)
        return printing, recorded

    async def sync_query(self, query: str) -> SyncStats:
        """Sync every printing matching a Scryfall search query."""
        stats = SyncStats()
        async for card in self.client.search_cards(query):
            try:
                _, recorded = await self.sync_card(card)
            except ValidationError as e:
                stats.skipped += 1
                logger.warning("Skipping malformed card", source_id=card.get("id"), error=e.message)
                continue
            stats.cards += 1
            stats.prices += recorded

        await self.db.commit()
        logger.info(
            "Catalog sync completed",
            query=query,
            cards=stats.cards,
            prices=stats.prices,
            skipped=stats.skipped,
        )
        return stats

    async def refresh_prices(self, batch_size: int = 500) -> SyncStats:
        """
        Re-fetch every known printing and append fresh price snapshots.

        Commits after each batch so a failure late in the run keeps the
        snapshots already recorded.
        """
        stats = SyncStats()
        observed_at = datetime.now(timezone.utc)
        skip = 0
        while True:
            source_ids = await self.printings.list_source_ids(skip=skip, limit=batch_size)
            if not source_ids:
                break

            for source_id in source_ids:
                card = await self.client.get_card(source_id)
                printing = await self.printings.get_by_source_id(source_id)
                if card is None or printing is None:
                    stats.skipped += 1
                    continue
                stats.prices += await self.record_prices(printing, card, observed_at)
                stats.cards += 1

            await self.db.commit()
            skip += batch_size

        logger.info(
            "Price refresh completed",
            cards=stats.cards,
            prices=stats.prices,
            skipped=stats.skipped,
        )
        return stats
