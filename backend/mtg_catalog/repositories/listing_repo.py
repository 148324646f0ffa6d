"""
Listing repository: read-only access to seller inventory.
"""
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mtg_catalog.core.constants import ListingStatus
from mtg_catalog.models.listing import Listing
from mtg_catalog.repositories.base import BaseRepository


class ListingRepository(BaseRepository[Listing]):
    """
    Repository for listing reads.

    Listings are owned by the marketplace listings service; this engine
    never writes them outside of tests and fixtures.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Listing, db)

    async def get_active_for_printings(self, printing_ids: list[int]) -> Sequence[Listing]:
        """All active listings for the given printings, in one query."""
        if not printing_ids:
            return []
        stmt = (
            select(Listing)
            .where(
                Listing.printing_id.in_(printing_ids),
                Listing.status == ListingStatus.ACTIVE.value,
            )
            .order_by(Listing.printing_id, Listing.id)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()
