"""
Catalog repositories for card identities and their printings.
"""
from typing import Sequence

from sqlalchemy import case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from mtg_catalog.models.catalog_entry import CatalogEntry
from mtg_catalog.models.printing import Printing
from mtg_catalog.repositories.base import BaseRepository


def _escape_like(value: str) -> str:
    return value.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _like_term(value: str) -> str:
    """Build a case-insensitive LIKE pattern with wildcards escaped."""
    return f"%{_escape_like(value)}%"


class CatalogRepository(BaseRepository[CatalogEntry]):
    """
    Repository for catalog entry (card identity) operations.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(CatalogEntry, db)

    async def get_by_identity_key(self, identity_key: str) -> CatalogEntry | None:
        return await self.find_one_by(identity_key=identity_key)

    async def find_by_name(self, substring: str, limit: int | None = 50) -> Sequence[CatalogEntry]:
        """
        Entries whose name contains ``substring`` (case-insensitive), by name.
        ``limit=None`` returns every match.
        """
        stmt = (
            select(CatalogEntry)
            .where(func.lower(CatalogEntry.name).like(_like_term(substring), escape="\\"))
            .order_by(CatalogEntry.name, CatalogEntry.id)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def find_search_candidates(
        self, substring: str, limit: int
    ) -> tuple[Sequence[CatalogEntry], bool]:
        """
        Up to ``limit`` entries whose name contains ``substring``, exact
        names first, then prefixes, then word prefixes, then by name.

        Returns:
            (entries, truncated); truncated is True when more entries matched
        """
        lowered = func.lower(CatalogEntry.name)
        escaped = _escape_like(substring)
        tier = case(
            (lowered == substring.lower(), 0),
            (lowered.like(f"{escaped}%", escape="\\"), 1),
            (lowered.like(f"% {escaped}%", escape="\\"), 2),
            else_=3,
        )
        stmt = (
            select(CatalogEntry)
            .where(lowered.like(_like_term(substring), escape="\\"))
            .order_by(tier, CatalogEntry.name, CatalogEntry.id)
            .limit(limit + 1)
        )
        result = await self.db.execute(stmt)
        entries = result.scalars().all()
        return entries[:limit], len(entries) > limit

    async def get_by_exact_name(self, name: str) -> Sequence[CatalogEntry]:
        """Entries whose name equals ``name`` ignoring case."""
        stmt = (
            select(CatalogEntry)
            .where(func.lower(CatalogEntry.name) == name.strip().lower())
            .order_by(CatalogEntry.id)
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_names(self) -> list[tuple[int, str]]:
        """All (id, name) pairs; candidate pool for fuzzy name matching."""
        result = await self.db.execute(
            select(CatalogEntry.id, CatalogEntry.name).order_by(CatalogEntry.id)
        )
        return [(row.id, row.name) for row in result.all()]


class PrintingRepository(BaseRepository[Printing]):
    """
    Repository for printing operations.

    Multi-printing queries order by release date descending (newest first),
    with undated printings last and id as the final tie-break.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Printing, db)

    @staticmethod
    def _newest_first():
        return (Printing.released_at.desc().nulls_last(), Printing.id.desc())

    async def get_by_source_id(self, source_id: str) -> Printing | None:
        stmt = select(Printing).where(Printing.source_id == source_id).order_by(Printing.id).limit(1)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_entry(self, catalog_entry_id: int) -> Sequence[Printing]:
        stmt = (
            select(Printing)
            .where(Printing.catalog_entry_id == catalog_entry_id)
            .order_by(*self._newest_first())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def list_for_entries(self, catalog_entry_ids: list[int]) -> Sequence[Printing]:
        if not catalog_entry_ids:
            return []
        stmt = (
            select(Printing)
            .where(Printing.catalog_entry_id.in_(catalog_entry_ids))
            .order_by(*self._newest_first())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def find_by_set_and_number(self, set_code: str, collector_number: str) -> Printing | None:
        stmt = (
            select(Printing)
            .where(
                func.lower(Printing.set_code) == set_code.strip().lower(),
                func.lower(Printing.collector_number) == collector_number.strip().lower(),
            )
            .order_by(*self._newest_first())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_newest_by_name(
        self,
        name: str,
        *,
        set_code: str | None = None,
        set_name: str | None = None,
    ) -> Printing | None:
        """
        Newest printing of the entry named ``name`` (exact, case-insensitive),
        optionally restricted to a set by code or by name.
        """
        stmt = (
            select(Printing)
            .join(CatalogEntry, Printing.catalog_entry_id == CatalogEntry.id)
            .where(func.lower(CatalogEntry.name) == name.strip().lower())
        )
        scope = []
        if set_code:
            scope.append(func.lower(Printing.set_code) == set_code.strip().lower())
        if set_name:
            scope.append(func.lower(Printing.set_name) == set_name.strip().lower())
        if scope:
            stmt = stmt.where(or_(*scope))

        stmt = stmt.order_by(*self._newest_first()).limit(1)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_source_ids(self, *, skip: int = 0, limit: int = 1000) -> list[str]:
        """Distinct external ids of known printings, for price refresh jobs."""
        stmt = (
            select(Printing.source_id)
            .distinct()
            .order_by(Printing.source_id)
            .offset(skip)
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
