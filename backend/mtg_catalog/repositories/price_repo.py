"""
Price repository for append-only price snapshot operations.

Snapshots are only inserted. The latest price for a (printing, finish)
pair is selected with a ROW_NUMBER() window partitioned by that pair and
ordered by ``observed_at`` descending.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mtg_catalog.models.price_snapshot import PriceSnapshot


@dataclass(frozen=True)
class LatestPrice:
    """Most recent observed price for one finish of a printing."""
    price: Decimal
    observed_at: datetime
    currency: str = "AUD"


class PriceRepository:
    """
    Repository for price snapshot operations.

    Handles:
    - Appending snapshots
    - Latest price per (printing, finish), single and batched
    - Price history, newest first
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert_snapshot(
        self,
        printing_id: int,
        finish: str,
        price: Decimal,
        observed_at: datetime,
        *,
        currency: str = "AUD",
        source: str = "scryfall",
    ) -> PriceSnapshot:
        snapshot = PriceSnapshot(
            printing_id=printing_id,
            finish=finish,
            price=price,
            currency=currency,
            source=source,
            observed_at=observed_at,
        )
        self.db.add(snapshot)
        await self.db.flush()
        return snapshot

    async def get_latest(
        self,
        printing_ids: list[int],
        *,
        finish: str | None = None,
    ) -> dict[int, dict[str, LatestPrice]]:
        """
        Latest snapshot per (printing, finish) for the given printings.

        Args:
            printing_ids: Printings to look up
            finish: Restrict to one finish

        Returns:
            {printing_id: {finish: LatestPrice}}; printings with no
            snapshots are absent from the map
        """
        if not printing_ids:
            return {}

        rank = func.row_number().over(
            partition_by=(PriceSnapshot.printing_id, PriceSnapshot.finish),
            order_by=(PriceSnapshot.observed_at.desc(), PriceSnapshot.id.desc()),
        ).label("rank")

        inner = select(
            PriceSnapshot.printing_id,
            PriceSnapshot.finish,
            PriceSnapshot.price,
            PriceSnapshot.currency,
            PriceSnapshot.observed_at,
            rank,
        ).where(PriceSnapshot.printing_id.in_(printing_ids))
        if finish is not None:
            inner = inner.where(PriceSnapshot.finish == finish)
        ranked = inner.subquery()

        result = await self.db.execute(select(ranked).where(ranked.c.rank == 1))

        latest: dict[int, dict[str, LatestPrice]] = {}
        for row in result.all():
            latest.setdefault(row.printing_id, {})[row.finish] = LatestPrice(
                price=Decimal(row.price),
                observed_at=row.observed_at,
                currency=row.currency,
            )
        return latest

    async def get_history(
        self,
        printing_id: int,
        finish: str,
        *,
        limit: int = 100,
    ) -> Sequence[PriceSnapshot]:
        """Snapshots for one (printing, finish), newest first."""
        stmt = (
            select(PriceSnapshot)
            .where(
                PriceSnapshot.printing_id == printing_id,
                PriceSnapshot.finish == finish,
            )
            .order_by(PriceSnapshot.observed_at.desc(), PriceSnapshot.id.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def count_for(self, printing_id: int, finish: str | None = None) -> int:
        stmt = select(func.count()).select_from(PriceSnapshot).where(
            PriceSnapshot.printing_id == printing_id
        )
        if finish is not None:
            stmt = stmt.where(PriceSnapshot.finish == finish)
        result = await self.db.execute(stmt)
        return result.scalar() or 0
