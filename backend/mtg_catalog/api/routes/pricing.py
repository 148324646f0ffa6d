"""
Pricing API endpoints.

Single recommendations, printing-aware recommendations and batch repricing.
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends

from mtg_catalog.api.deps import get_pricing_service
from mtg_catalog.schemas.pricing import (
    BatchItemSchema,
    BatchRepriceRequest,
    BatchRepriceResponse,
    BatchSummarySchema,
    PriceRangeSchema,
    PrintingRecommendRequest,
    PrintingRecommendResponse,
    RecommendRequest,
    RecommendResponse,
)
from mtg_catalog.services.inventory import PriceRange
from mtg_catalog.services.pricing import BatchItem, PricingRequest, PricingService, RepricingBatch, recommend

router = APIRouter()


def _to_range(schema: Optional[PriceRangeSchema]) -> Optional[PriceRange]:
    return PriceRange(min=schema.min, max=schema.max) if schema else None


def _from_range(price_range: Optional[PriceRange]) -> Optional[PriceRangeSchema]:
    return PriceRangeSchema(min=price_range.min, max=price_range.max) if price_range else None


@router.post("/recommend", response_model=RecommendResponse)
async def recommend_price(payload: RecommendRequest):
    """Suggested sale price for one unit under a strategy."""
    price = recommend(PricingRequest(
        base_price=payload.base_price,
        condition=payload.condition,
        finish=payload.finish,
        strategy=payload.strategy,
        competitor_range=_to_range(payload.competitor_range),
        bulk_adjustment_percent=payload.bulk_adjustment_percent,
        custom_price=payload.custom_price,
    ))
    return RecommendResponse(strategy=payload.strategy, recommended_price=price)


@router.post("/printings/{printing_id}/recommend", response_model=PrintingRecommendResponse)
async def recommend_for_printing(
    printing_id: int,
    payload: PrintingRecommendRequest,
    pricing: Annotated[PricingService, Depends(get_pricing_service)],
):
    """
    Recommendation using the printing's latest market price as the base
    and its active listings as the competitor range.
    """
    result = await pricing.recommend_for_printing(
        printing_id,
        finish=payload.finish,
        condition=payload.condition,
        strategy=payload.strategy,
        bulk_adjustment_percent=payload.bulk_adjustment_percent,
        custom_price=payload.custom_price,
    )
    return PrintingRecommendResponse(
        printing_id=result.printing_id,
        finish=result.finish,
        condition=result.condition,
        strategy=result.strategy,
        base_price=result.base_price,
        base_price_source=result.base_price_source,
        competitor_range=_from_range(result.competitor_range),
        recommended_price=result.recommended_price,
    )


@router.post("/batch", response_model=BatchRepriceResponse)
async def reprice_batch(payload: BatchRepriceRequest):
    """
    Reprice a batch of cards.

    Items flagged ``overridden`` keep their price unless listed in
    ``item_ids``.
    """
    batch = RepricingBatch(
        BatchItem(
            item_id=item.item_id,
            base_price=item.base_price,
            condition=item.condition,
            finish=item.finish,
            quantity=item.quantity,
            competitor_range=_to_range(item.competitor_range),
            price=item.price,
            overridden=item.overridden,
        )
        for item in payload.items
    )
    repriced = batch.recompute(
        payload.strategy,
        payload.bulk_adjustment_percent,
        item_ids=payload.item_ids,
        custom_price=payload.custom_price,
    )
    summary = batch.summary()
    return BatchRepriceResponse(
        items=[
            BatchItemSchema(
                item_id=item.item_id,
                base_price=item.base_price,
                condition=item.condition,
                finish=item.finish,
                quantity=item.quantity,
                competitor_range=_from_range(item.competitor_range),
                price=item.price,
                overridden=item.overridden,
            )
            for item in batch.items
        ],
        repriced=[item.item_id for item in repriced],
        summary=BatchSummarySchema(
            item_count=summary.item_count,
            total_quantity=summary.total_quantity,
            total_value=summary.total_value,
            marketplace_fee=summary.marketplace_fee,
            net_value=summary.net_value,
        ),
    )
