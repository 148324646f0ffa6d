"""
Ranking for search results.

Results are ordered by a composite key:
1. in stock first (when stock priority is on)
2. the requested sort key
3. release date, newest first
4. name, case-insensitive, then printing id
"""
from datetime import date
from decimal import Decimal
from typing import Optional

from rapidfuzz import fuzz

from mtg_catalog.core.constants import SortKey
from mtg_catalog.services.search.results import VersionResult

# Name match tiers for relevance; lower is better
MATCH_EXACT = 0
MATCH_PREFIX = 1
MATCH_WORD_PREFIX = 2
MATCH_SUBSTRING = 3
MATCH_NONE = 4


def name_match_tier(query: str, name: str) -> int:
    """Classify how well ``name`` matches ``query`` (both case-insensitive)."""
    q = query.strip().lower()
    n = name.lower()
    if n == q:
        return MATCH_EXACT
    if n.startswith(q):
        return MATCH_PREFIX
    if any(word.startswith(q) for word in n.replace(",", " ").split()):
        return MATCH_WORD_PREFIX
    if q in n:
        return MATCH_SUBSTRING
    return MATCH_NONE


def relevance_key(query: str, name: str) -> tuple[int, float]:
    return (name_match_tier(query, name), -fuzz.ratio(query.strip().lower(), name.lower()))


def _release_desc(released_at: Optional[date]) -> tuple[bool, int]:
    # Undated printings sort after dated ones
    if released_at is None:
        return (True, 0)
    return (False, -released_at.toordinal())


def _price_key(price: Optional[Decimal], descending: bool) -> tuple[bool, Decimal]:
    # Unknown prices sort last in both directions
    if price is None:
        return (True, Decimal(0))
    return (False, -price if descending else price)


def secondary_key(version: VersionResult, sort: SortKey, query: str) -> tuple:
    if sort == SortKey.PRICE_ASC:
        return _price_key(version.effective_price, descending=False)
    if sort == SortKey.PRICE_DESC:
        return _price_key(version.effective_price, descending=True)
    if sort == SortKey.NAME:
        return (version.entry.name.lower(),)
    if sort == SortKey.NEWEST:
        return _release_desc(version.printing.released_at)
    if sort == SortKey.POPULARITY:
        return (-version.aggregate.active_listing_count,)
    return relevance_key(query, version.entry.name)


def sort_key(version: VersionResult, sort: SortKey, query: str, stock_priority: bool = True) -> tuple:
    """Full composite key; gives a total order so pagination is stable."""
    stock = (0 if version.in_stock else 1) if stock_priority else 0
    return (
        stock,
        secondary_key(version, sort, query),
        _release_desc(version.printing.released_at),
        version.entry.name.lower(),
        version.printing.id,
    )


def rank_versions(
    versions: list[VersionResult],
    sort: SortKey = SortKey.RELEVANCE,
    query: str = "",
    stock_priority: bool = True,
) -> list[VersionResult]:
    return sorted(versions, key=lambda v: sort_key(v, sort, query, stock_priority))


def availability_key(version: VersionResult) -> tuple:
    """Order for "all versions": most active listings, then newest."""
    return (
        -version.aggregate.active_listing_count,
        _release_desc(version.printing.released_at),
        version.printing.id,
    )
