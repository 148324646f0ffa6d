"""
Inventory aggregation.

Joins printings with live seller listings and latest price snapshots to
produce per-printing availability. Aggregates are computed per request and
never cached, because listings change outside this engine.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from mtg_catalog.core.constants import CardCondition
from mtg_catalog.repositories.listing_repo import ListingRepository
from mtg_catalog.repositories.price_repo import LatestPrice, PriceRepository

CONDITION_ORDER = [c.value for c in CardCondition]


@dataclass
class FinishAvailability:
    """Active listings for one finish of a printing."""
    count: int = 0
    quantity: int = 0
    min_price: Optional[Decimal] = None


@dataclass(frozen=True)
class PriceRange:
    """Competitor price range over active listings."""
    min: Decimal
    max: Decimal


@dataclass
class VersionAggregate:
    """
    Availability and pricing of one printing.

    ``in_stock`` is true when at least one active listing exists.
    """
    printing_id: int
    active_listing_count: int = 0
    available_quantity: int = 0
    seller_count: int = 0
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    conditions: list[str] = field(default_factory=list)
    finishes: dict[str, FinishAvailability] = field(default_factory=dict)
    latest_prices: dict[str, LatestPrice] = field(default_factory=dict)

    @property
    def in_stock(self) -> bool:
        return self.active_listing_count > 0

    def latest_price_for(self, finishes: Sequence[str]) -> Optional[LatestPrice]:
        """First known latest price among ``finishes`` in the given order."""
        for finish in finishes:
            latest = self.latest_prices.get(finish)
            if latest is not None:
                return latest
        return None


def _min(current: Optional[Decimal], value: Decimal) -> Decimal:
    return value if current is None or value < current else current


def _max(current: Optional[Decimal], value: Decimal) -> Decimal:
    return value if current is None or value > current else current


class InventoryAggregator:
    """
    Builds VersionAggregates from active listings and latest snapshots.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.listings = ListingRepository(db)
        self.prices = PriceRepository(db)

    async def aggregate(self, printing_id: int) -> VersionAggregate:
        aggregates = await self.aggregate_many([printing_id])
        return aggregates[printing_id]

    async def aggregate_many(self, printing_ids: Sequence[int]) -> dict[int, VersionAggregate]:
        """
        Aggregates for many printings using one listing query and one
        latest-price query. Every requested id is present in the result.
        """
        ids = list(dict.fromkeys(printing_ids))
        aggregates = {pid: VersionAggregate(printing_id=pid) for pid in ids}
        if not ids:
            return aggregates

        sellers: dict[int, set[int]] = {pid: set() for pid in ids}
        conditions: dict[int, set[str]] = {pid: set() for pid in ids}

        for listing in await self.listings.get_active_for_printings(ids):
            agg = aggregates[listing.printing_id]
            price = Decimal(listing.price)

            agg.active_listing_count += 1
            agg.available_quantity += listing.quantity
            agg.min_price = _min(agg.min_price, price)
            agg.max_price = _max(agg.max_price, price)
            sellers[listing.printing_id].add(listing.seller_id)
            conditions[listing.printing_id].add(listing.condition)

            finish = agg.finishes.setdefault(listing.finish, FinishAvailability())
            finish.count += 1
            finish.quantity += listing.quantity
            finish.min_price = _min(finish.min_price, price)

        latest = await self.prices.get_latest(ids)

        for pid, agg in aggregates.items():
            agg.seller_count = len(sellers[pid])
            agg.conditions = sorted(
                conditions[pid],
                key=lambda c: CONDITION_ORDER.index(c) if c in CONDITION_ORDER else len(CONDITION_ORDER),
            )
            agg.latest_prices = latest.get(pid, {})

        return aggregates

    async def competitor_range(self, printing_id: int, finish: str) -> Optional[PriceRange]:
        """Min/max active listing price for the same printing and finish."""
        low: Optional[Decimal] = None
        high: Optional[Decimal] = None
        for listing in await self.listings.get_active_for_printings([printing_id]):
            if listing.finish != finish:
                continue
            price = Decimal(listing.price)
            low = _min(low, price)
            high = _max(high, price)

        if low is None:
            return None
        return PriceRange(min=low, max=high)
