"""
Price snapshot store.

Appends observed market prices and answers "latest price" queries. A
missing price is a normal outcome and is returned as ``None``.
"""
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from mtg_catalog.core.cache import MISSING, LatestPriceCache, get_price_cache
from mtg_catalog.core.constants import Finish
from mtg_catalog.core.exceptions import NotFoundError, ValidationError
from mtg_catalog.models.price_snapshot import PriceSnapshot
from mtg_catalog.repositories.catalog_repo import PrintingRepository
from mtg_catalog.repositories.price_repo import LatestPrice, PriceRepository

logger = structlog.get_logger()

TWO_PLACES = Decimal("0.01")


def normalize_finish(finish: str) -> str:
    """Validate a finish name; raises ValidationError for unknown values."""
    try:
        return Finish((finish or "").strip().lower()).value
    except ValueError:
        raise ValidationError(f"Unknown finish: {finish}", field="finish")


def _to_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


class PriceService:
    """
    Append-only price history per (printing, finish).
    """

    def __init__(self, db: AsyncSession, cache: Optional[LatestPriceCache] = None):
        self.db = db
        self.repo = PriceRepository(db)
        self.printings = PrintingRepository(db)
        self.cache = cache if cache is not None else get_price_cache()

    async def record_price(
        self,
        printing_id: int,
        finish: str,
        price: Decimal | float | str,
        observed_at: Optional[datetime] = None,
        *,
        currency: str = "AUD",
        source: str = "scryfall",
    ) -> PriceSnapshot:
        """
        Append a snapshot; never overwrites earlier ones.

        Args:
            printing_id: Printing the price was observed for
            finish: nonfoil, foil or etched
            price: Non-negative price
            observed_at: Observation time; defaults to now (UTC)

        Raises:
            ValidationError: Unknown finish or negative/unparsable price
            NotFoundError: Unknown printing
        """
        finish = normalize_finish(finish)
        try:
            amount = Decimal(str(price)).quantize(TWO_PLACES)
        except InvalidOperation:
            raise ValidationError(f"Invalid price: {price}", field="price")
        if amount < 0:
            raise ValidationError("Price cannot be negative", field="price")

        if await self.printings.get_by_id(printing_id) is None:
            raise NotFoundError(f"Printing {printing_id} not found", printing_id=printing_id)

        snapshot = await self.repo.insert_snapshot(
            printing_id,
            finish,
            amount,
            _to_utc(observed_at or datetime.now(timezone.utc)),
            currency=currency.upper(),
            source=source,
        )
        self.cache.invalidate((printing_id, finish))
        return snapshot

    async def latest_price(self, printing_id: int, finish: str) -> Optional[LatestPrice]:
        """Most recent snapshot for (printing, finish), or None if never priced."""
        finish = normalize_finish(finish)
        key = (printing_id, finish)

        cached = self.cache.get(key)
        if cached is not MISSING:
            return cached

        latest = await self.repo.get_latest([printing_id], finish=finish)
        result = latest.get(printing_id, {}).get(finish)
        self.cache.set(key, result)
        return result

    async def latest_prices_for(self, printing_ids: Sequence[int]) -> dict[int, dict[str, LatestPrice]]:
        """Batched latest prices: {printing_id: {finish: LatestPrice}}."""
        return await self.repo.get_latest(list(dict.fromkeys(printing_ids)))

    async def price_history(self, printing_id: int, finish: str, limit: int = 100) -> Sequence[PriceSnapshot]:
        finish = normalize_finish(finish)
        return await self.repo.get_history(printing_id, finish, limit=limit)
