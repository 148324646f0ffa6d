"""
Search API endpoints.

Name search with structured filters, stock-first ranking and pagination.
"""
from decimal import Decimal
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from mtg_catalog.api.deps import get_search_engine
from mtg_catalog.core.constants import ColorMode, SortKey
from mtg_catalog.schemas.search import SearchResponse
from mtg_catalog.services.search import NumericFilter, SearchEngine, SearchFilters

router = APIRouter()


def _split(value: Optional[str]) -> frozenset[str]:
    if not value:
        return frozenset()
    return frozenset(part.strip() for part in value.split(",") if part.strip())


def _numeric(value: Optional[str]) -> Optional[NumericFilter]:
    return NumericFilter.parse(value) if value else None


@router.get("", response_model=SearchResponse)
async def search_cards(
    engine: Annotated[SearchEngine, Depends(get_search_engine)],
    q: str = Query(..., description="Card name query"),
    sort: SortKey = Query(SortKey.RELEVANCE),
    page: int = Query(1),
    limit: Optional[int] = Query(None, description="Page size; capped server-side"),
    stock_priority: bool = Query(True, description="List in-stock versions first"),
    min_price: Optional[Decimal] = Query(None),
    max_price: Optional[Decimal] = Query(None),
    in_stock: bool = Query(False),
    conditions: Optional[str] = Query(None, description="Comma-separated conditions (NM,LP)"),
    rarities: Optional[str] = Query(None, description="Comma-separated rarities"),
    colors: Optional[str] = Query(None, description="Comma-separated colors (W,U,B,R,G,C)"),
    color_mode: ColorMode = Query(ColorMode.ANY),
    mana_value: Optional[str] = Query(None, description="Comparator expression, e.g. <=3"),
    power: Optional[str] = Query(None),
    toughness: Optional[str] = Query(None),
    set_code: Optional[str] = Query(None),
    artist: Optional[str] = Query(None),
    oracle_text: Optional[str] = Query(None),
):
    """
    Search printings by card name.

    In-stock versions rank before out-of-stock ones unless
    ``stock_priority=false``; ``sort`` orders within each group.
    """
    filters = SearchFilters(
        min_price=min_price,
        max_price=max_price,
        in_stock_only=in_stock,
        conditions=_split(conditions),
        rarities=_split(rarities),
        colors=frozenset(c.upper() for c in _split(colors)),
        color_mode=color_mode,
        mana_value=_numeric(mana_value),
        power=_numeric(power),
        toughness=_numeric(toughness),
        set_code=set_code,
        artist=artist,
        oracle_text=oracle_text,
    )
    result = await engine.search(
        q,
        filters=filters,
        sort=sort,
        page=page,
        limit=limit,
        stock_priority=stock_priority,
    )
    return SearchResponse.from_page(result, sort=sort.value)
