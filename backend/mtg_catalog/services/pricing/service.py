"""
Printing-aware price recommendations.

Looks up the market base price and the competitor range for a printing,
then applies the pricing strategy.
"""
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from mtg_catalog.core.config import settings
from mtg_catalog.core.constants import CardCondition, Finish, PricingStrategy
from mtg_catalog.services.catalog import CatalogService
from mtg_catalog.services.inventory import InventoryAggregator, PriceRange
from mtg_catalog.services.prices import PriceService
from mtg_catalog.services.pricing.strategy import PricingRequest, recommend

logger = structlog.get_logger()


@dataclass(frozen=True)
class PrintingRecommendation:
    """A recommendation plus the inputs it was computed from."""
    printing_id: int
    finish: Finish
    condition: CardCondition
    strategy: PricingStrategy
    base_price: Decimal
    base_price_source: str
    competitor_range: Optional[PriceRange]
    recommended_price: Decimal


class PricingService:
    """
    Recommends prices for catalog printings.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.catalog = CatalogService(db)
        self.prices = PriceService(db)
        self.aggregator = InventoryAggregator(db)

    async def recommend_for_printing(
        self,
        printing_id: int,
        finish: Finish = Finish.NONFOIL,
        condition: CardCondition = CardCondition.NEAR_MINT,
        strategy: PricingStrategy = PricingStrategy.MARKET,
        bulk_adjustment_percent: Decimal = Decimal("0"),
        custom_price: Optional[Decimal] = None,
    ) -> PrintingRecommendation:
        """
        Base price is the latest snapshot for the finish, falling back to
        ``settings.pricing_default_base_price`` when the printing was
        never priced.

        Raises:
            NotFoundError: Unknown printing
            ValidationError: Invalid pricing inputs
        """
        await self.catalog.get_printing(printing_id)

        latest = await self.prices.latest_price(printing_id, finish.value)
        if latest is not None:
            base_price, source = latest.price, "snapshot"
        else:
            base_price, source = settings.pricing_default_base_price, "default"

        competitor_range = await self.aggregator.competitor_range(printing_id, finish.value)

        price = recommend(PricingRequest(
            base_price=base_price,
            condition=condition,
            finish=finish,
            strategy=strategy,
            competitor_range=competitor_range,
            bulk_adjustment_percent=bulk_adjustment_percent,
            custom_price=custom_price,
        ))

        logger.debug(
            "Price recommended",
            printing_id=printing_id,
            strategy=strategy.value,
            base_price=str(base_price),
            base_price_source=source,
            recommended=str(price),
        )
        return PrintingRecommendation(
            printing_id=printing_id,
            finish=finish,
            condition=condition,
            strategy=strategy,
            base_price=base_price,
            base_price_source=source,
            competitor_range=competitor_range,
            recommended_price=price,
        )
