"""
Inventory aggregate endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Depends

from mtg_catalog.api.deps import get_catalog_service, get_inventory_aggregator
from mtg_catalog.schemas.inventory import AggregateResponse
from mtg_catalog.services.catalog import CatalogService
from mtg_catalog.services.inventory import InventoryAggregator

router = APIRouter()


@router.get("/printings/{printing_id}/aggregate", response_model=AggregateResponse)
async def printing_aggregate(
    printing_id: int,
    catalog: Annotated[CatalogService, Depends(get_catalog_service)],
    aggregator: Annotated[InventoryAggregator, Depends(get_inventory_aggregator)],
):
    """Active listing counts, quantities and price range for one printing."""
    await catalog.get_printing(printing_id)
    aggregate = await aggregator.aggregate(printing_id)
    return AggregateResponse.from_aggregate(aggregate)
