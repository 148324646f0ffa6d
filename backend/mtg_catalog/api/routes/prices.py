"""
Price snapshot API endpoints.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from mtg_catalog.api.deps import get_price_service
from mtg_catalog.schemas.catalog import LatestPriceResponse, PriceRecord, PriceSnapshotResponse
from mtg_catalog.services.prices import PriceService

router = APIRouter()

Prices = Annotated[PriceService, Depends(get_price_service)]


@router.post("", response_model=PriceSnapshotResponse, status_code=status.HTTP_201_CREATED)
async def record_price(payload: PriceRecord, prices: Prices):
    """Append a price observation. Earlier snapshots are never modified."""
    snapshot = await prices.record_price(
        payload.printing_id,
        payload.finish,
        payload.price,
        payload.observed_at,
        currency=payload.currency,
        source=payload.source,
    )
    return PriceSnapshotResponse.model_validate(snapshot)


@router.get("/{printing_id}/latest", response_model=LatestPriceResponse)
async def latest_price(
    printing_id: int,
    prices: Prices,
    finish: str = Query("nonfoil"),
):
    """
    Latest snapshot for a printing finish.

    A printing that was never priced returns ``price: null`` rather than 404.
    """
    latest = await prices.latest_price(printing_id, finish)
    if latest is None:
        return LatestPriceResponse(printing_id=printing_id, finish=finish.strip().lower())
    return LatestPriceResponse(
        printing_id=printing_id,
        finish=finish.strip().lower(),
        price=latest.price,
        currency=latest.currency,
        observed_at=latest.observed_at,
    )


@router.get("/{printing_id}/history", response_model=list[PriceSnapshotResponse])
async def price_history(
    printing_id: int,
    prices: Prices,
    finish: str = Query("nonfoil"),
    limit: int = Query(100, ge=1, le=1000),
):
    """Snapshots for a printing finish, newest first."""
    history = await prices.price_history(printing_id, finish, limit=limit)
    return [PriceSnapshotResponse.model_validate(s) for s in history]
