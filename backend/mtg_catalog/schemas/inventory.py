"""Inventory aggregate schemas."""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from mtg_catalog.services.inventory import VersionAggregate


class FinishAvailabilityResponse(BaseModel):
    """Active listings for one finish."""
    count: int
    quantity: int
    min_price: Optional[Decimal] = None


class LatestPriceSummary(BaseModel):
    """Latest snapshot price for one finish."""
    price: Decimal
    currency: str
    observed_at: datetime


class AggregateResponse(BaseModel):
    """Availability and pricing of one printing."""
    printing_id: int
    in_stock: bool
    active_listing_count: int
    available_quantity: int
    seller_count: int
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    conditions: list[str] = []
    finishes: dict[str, FinishAvailabilityResponse] = {}
    latest_prices: dict[str, LatestPriceSummary] = {}

    @classmethod
    def from_aggregate(cls, aggregate: VersionAggregate) -> "AggregateResponse":
        return cls(
            printing_id=aggregate.printing_id,
            in_stock=aggregate.in_stock,
            active_listing_count=aggregate.active_listing_count,
            available_quantity=aggregate.available_quantity,
            seller_count=aggregate.seller_count,
            min_price=aggregate.min_price,
            max_price=aggregate.max_price,
            conditions=list(aggregate.conditions),
            finishes={
                finish: FinishAvailabilityResponse(
                    count=availability.count,
                    quantity=availability.quantity,
                    min_price=availability.min_price,
                )
                for finish, availability in aggregate.finishes.items()
            },
            latest_prices={
                finish: LatestPriceSummary(
                    price=latest.price,
                    currency=latest.currency,
                    observed_at=latest.observed_at,
                )
                for finish, latest in aggregate.latest_prices.items()
            },
        )
