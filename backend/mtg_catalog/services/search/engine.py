"""
Search engine: name query -> ranked, stock-aware, paginated versions.
"""
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from mtg_catalog.core.config import settings
from mtg_catalog.core.constants import SortKey
from mtg_catalog.core.exceptions import ValidationError
from mtg_catalog.repositories.catalog_repo import CatalogRepository, PrintingRepository
from mtg_catalog.services.inventory import InventoryAggregator
from mtg_catalog.services.search.filters import SearchFilters, apply_filters
from mtg_catalog.services.search.ranking import availability_key, rank_versions
from mtg_catalog.services.search.results import SearchPage, VersionResult

logger = structlog.get_logger()


class SearchEngine:
    """
    Answers name searches and "all versions of X" queries.
    """

    def __init__(self, db: AsyncSession, max_candidates: Optional[int] = None):
        self.db = db
        self.max_candidates = (
            settings.search_max_candidates if max_candidates is None else max_candidates
        )
        self.entries = CatalogRepository(db)
        self.printings = PrintingRepository(db)
        self.aggregator = InventoryAggregator(db)

    async def _versions_for(self, entries) -> list[VersionResult]:
        """Printings of ``entries`` with one batched aggregate pass."""
        by_id = {entry.id: entry for entry in entries}
        printings = await self.printings.list_for_entries(list(by_id))
        aggregates = await self.aggregator.aggregate_many([p.id for p in printings])
        return [
            VersionResult(
                entry=by_id[printing.catalog_entry_id],
                printing=printing,
                aggregate=aggregates[printing.id],
            )
            for printing in printings
        ]

    async def search(
        self,
        query: str,
        filters: Optional[SearchFilters] = None,
        sort: SortKey = SortKey.RELEVANCE,
        page: int = 1,
        limit: Optional[int] = None,
        stock_priority: bool = True,
    ) -> SearchPage:
        """
        Search printings by card name.

        Args:
            query: Name substring (case-insensitive)
            filters: Conjunctive constraints
            sort: Secondary sort key
            page: 1-based page number
            limit: Page size; capped at ``settings.search_max_limit``
            stock_priority: In-stock versions first, regardless of ``sort``

        Returns:
            SearchPage; empty when nothing matches. Only the best
            ``max_candidates`` name matches are ranked; ``truncated`` flags
            when more matched.

        Raises:
            ValidationError: Query too short, page or limit below 1, bad filters
        """
        query = (query or "").strip()
        if len(query) < settings.search_min_query_length:
            raise ValidationError(
                f"Query must be at least {settings.search_min_query_length} characters",
                field="query",
            )
        if page < 1:
            raise ValidationError("page must be at least 1", field="page")
        if limit is None:
            limit = settings.search_default_limit
        if limit < 1:
            raise ValidationError("limit must be at least 1", field="limit")
        limit = min(limit, settings.search_max_limit)
        if filters is not None:
            filters.validate()

        entries, truncated = await self.entries.find_search_candidates(query, self.max_candidates)
        if truncated:
            logger.warning("Search candidates truncated", query=query, limit=self.max_candidates)
        versions = await self._versions_for(entries)
        versions = apply_filters(versions, filters)
        ranked = rank_versions(versions, sort=sort, query=query, stock_priority=stock_priority)

        offset = (page - 1) * limit
        logger.debug(
            "Search completed",
            query=query,
            sort=sort.value,
            entries=len(entries),
            total=len(ranked),
            page=page,
        )
        return SearchPage(
            query=query,
            page=page,
            limit=limit,
            total=len(ranked),
            results=ranked[offset:offset + limit],
            truncated=truncated,
        )

    async def all_versions(self, exact_name: str) -> list[VersionResult]:
        """
        Every printing of the card named ``exact_name`` (case-insensitive),
        most available first, then newest. Never filtered by stock.
        """
        if not exact_name or not exact_name.strip():
            return []
        entries = await self.entries.get_by_exact_name(exact_name)
        if not entries:
            return []
        versions = await self._versions_for(entries)
        return sorted(versions, key=availability_key)
