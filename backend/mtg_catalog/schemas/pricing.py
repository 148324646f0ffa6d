"""Pricing API schemas."""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from mtg_catalog.core.constants import CardCondition, Finish, PricingStrategy


class PriceRangeSchema(BaseModel):
    """Competitor price range."""
    min: Decimal
    max: Decimal


class RecommendRequest(BaseModel):
    """Request for a single price recommendation."""
    base_price: Decimal
    condition: CardCondition = CardCondition.NEAR_MINT
    finish: Finish = Finish.NONFOIL
    strategy: PricingStrategy = PricingStrategy.MARKET
    competitor_range: Optional[PriceRangeSchema] = None
    bulk_adjustment_percent: Decimal = Decimal("0")
    custom_price: Optional[Decimal] = None


class RecommendResponse(BaseModel):
    """Recommended price."""
    strategy: PricingStrategy
    recommended_price: Decimal


class PrintingRecommendRequest(BaseModel):
    """Request for a recommendation based on a catalog printing."""
    finish: Finish = Finish.NONFOIL
    condition: CardCondition = CardCondition.NEAR_MINT
    strategy: PricingStrategy = PricingStrategy.MARKET
    bulk_adjustment_percent: Decimal = Decimal("0")
    custom_price: Optional[Decimal] = None


class PrintingRecommendResponse(BaseModel):
    """Recommendation with the inputs it was computed from."""
    printing_id: int
    finish: Finish
    condition: CardCondition
    strategy: PricingStrategy
    base_price: Decimal
    base_price_source: str
    competitor_range: Optional[PriceRangeSchema] = None
    recommended_price: Decimal


class BatchItemSchema(BaseModel):
    """One card in a repricing request."""
    item_id: str
    base_price: Decimal
    condition: CardCondition = CardCondition.NEAR_MINT
    finish: Finish = Finish.NONFOIL
    quantity: int = Field(1, ge=1)
    competitor_range: Optional[PriceRangeSchema] = None
    price: Optional[Decimal] = None
    overridden: bool = False


class BatchRepriceRequest(BaseModel):
    """Reprice a selection of cards under one strategy."""
    items: list[BatchItemSchema]
    strategy: PricingStrategy
    bulk_adjustment_percent: Decimal = Decimal("0")
    item_ids: Optional[list[str]] = None
    custom_price: Optional[Decimal] = None


class BatchSummarySchema(BaseModel):
    """Totals for a batch."""
    item_count: int
    total_quantity: int
    total_value: Decimal
    marketplace_fee: Decimal
    net_value: Decimal


class BatchRepriceResponse(BaseModel):
    """Items after repricing plus totals."""
    items: list[BatchItemSchema]
    repriced: list[str]
    summary: BatchSummarySchema
