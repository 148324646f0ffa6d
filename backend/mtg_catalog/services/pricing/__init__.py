"""Pricing services: strategies, batch repricing and currency conversion."""
from .batch import BatchItem, BatchSummary, RepricingBatch
from .currency import convert_usd_to_aud, resolve_aud_price
from .service import PricingService, PrintingRecommendation
from .strategy import PricingRequest, recommend

__all__ = [
    "BatchItem",
    "BatchSummary",
    "RepricingBatch",
    "convert_usd_to_aud",
    "resolve_aud_price",
    "PricingService",
    "PrintingRecommendation",
    "PricingRequest",
    "recommend",
]
