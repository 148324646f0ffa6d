"""
Batch repricing.

Re-prices a selection of cards under one strategy while respecting manual
overrides: a card priced by hand keeps its price until a recompute names
it explicitly.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

import structlog

from mtg_catalog.core.config import settings
from mtg_catalog.core.constants import CardCondition, Finish, PricingStrategy
from mtg_catalog.core.exceptions import NotFoundError, ValidationError
from mtg_catalog.services.inventory import PriceRange
from mtg_catalog.services.pricing.strategy import (
    PricingRequest,
    finalize_price,
    marketplace_fee,
    recommend,
)

logger = structlog.get_logger()


@dataclass
class BatchItem:
    """One card in a repricing batch."""
    item_id: str
    base_price: Decimal
    condition: CardCondition = CardCondition.NEAR_MINT
    finish: Finish = Finish.NONFOIL
    quantity: int = 1
    competitor_range: Optional[PriceRange] = None
    price: Optional[Decimal] = None
    overridden: bool = False


@dataclass(frozen=True)
class BatchSummary:
    """Totals for a batch at current prices."""
    item_count: int
    total_quantity: int
    total_value: Decimal
    marketplace_fee: Decimal
    net_value: Decimal


class RepricingBatch:
    """
    Holds items and applies strategies to them independently.

    Usage:
        batch = RepricingBatch(items)
        batch.recompute(PricingStrategy.COMPETITIVE)
        batch.override("a", Decimal("12.00"))
        batch.recompute(PricingStrategy.MARKET)           # "a" keeps 12.00
        batch.recompute(PricingStrategy.MARKET, item_ids=["a"])  # re-priced
    """

    def __init__(self, items: Iterable[BatchItem]):
        self._items: dict[str, BatchItem] = {}
        for item in items:
            if item.item_id in self._items:
                raise ValidationError(f"Duplicate batch item {item.item_id}", field="item_id")
            if item.quantity < 1:
                raise ValidationError("quantity must be at least 1", field="quantity")
            self._items[item.item_id] = item

    @property
    def items(self) -> list[BatchItem]:
        return list(self._items.values())

    def get(self, item_id: str) -> BatchItem:
        try:
            return self._items[item_id]
        except KeyError:
            raise NotFoundError(f"Batch item {item_id} not found", item_id=item_id)

    def recompute(
        self,
        strategy: PricingStrategy,
        bulk_adjustment_percent: Decimal = Decimal("0"),
        item_ids: Optional[Iterable[str]] = None,
        custom_price: Optional[Decimal] = None,
    ) -> list[BatchItem]:
        """
        Re-price items under ``strategy``.

        Args:
            strategy: Strategy applied to each item independently
            bulk_adjustment_percent: Bulk slider value in [-30, 30]
            item_ids: Items to re-price; overrides on these are cleared.
                When omitted, every item without a manual override is re-priced.
            custom_price: Price for the custom strategy

        Returns:
            The items that were re-priced
        """
        if item_ids is None:
            targets = [item for item in self._items.values() if not item.overridden]
        else:
            targets = [self.get(item_id) for item_id in item_ids]

        for item in targets:
            item.price = recommend(PricingRequest(
                base_price=item.base_price,
                condition=item.condition,
                finish=item.finish,
                strategy=strategy,
                competitor_range=item.competitor_range,
                bulk_adjustment_percent=bulk_adjustment_percent,
                custom_price=custom_price,
            ))
            item.overridden = False

        logger.debug(
            "Batch repriced",
            strategy=strategy.value,
            repriced=len(targets),
            skipped=len(self._items) - len(targets),
        )
        return targets

    def override(self, item_id: str, price: Decimal) -> BatchItem:
        """Set a manual price; the last write wins."""
        item = self.get(item_id)
        price = Decimal(str(price))
        if price < 0:
            raise ValidationError("price cannot be negative", field="price")
        item.price = finalize_price(price)
        item.overridden = True
        return item

    def summary(self, fee_percent: Optional[Decimal] = None) -> BatchSummary:
        """Item count, quantity, value and value net of the marketplace fee."""
        fee_percent = settings.marketplace_fee_percent if fee_percent is None else fee_percent
        total_value = sum(
            ((item.price or Decimal("0")) * item.quantity for item in self._items.values()),
            Decimal("0"),
        ).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        fee = marketplace_fee(total_value, fee_percent)
        return BatchSummary(
            item_count=len(self._items),
            total_quantity=sum(item.quantity for item in self._items.values()),
            total_value=total_value,
            marketplace_fee=fee,
            net_value=total_value - fee,
        )
