"""
Pricing strategies.

Computes a suggested sale price for one card unit. Stateless and
deterministic: identical requests always give identical prices. All
arithmetic is Decimal; the result is rounded half-up to cents.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from mtg_catalog.core.config import settings
from mtg_catalog.core.constants import CardCondition, Finish, PricingStrategy
from mtg_catalog.core.exceptions import ValidationError
from mtg_catalog.services.inventory import PriceRange

TWO_PLACES = Decimal("0.01")
BULK_ADJUSTMENT_MIN = Decimal("-30")
BULK_ADJUSTMENT_MAX = Decimal("30")

COMPETITIVE_FACTOR = Decimal("0.95")
QUICK_SALE_FACTOR = Decimal("0.85")
PLAYED_FACTOR = Decimal("0.9")
FOIL_PREMIUM_FACTOR = Decimal("1.05")
UNDERCUT_FALLBACK_FACTOR = Decimal("0.9")
UNDERCUT_STEP = Decimal("0.01")


@dataclass(frozen=True)
class PricingRequest:
    """Inputs for a single price recommendation."""
    base_price: Decimal
    condition: CardCondition = CardCondition.NEAR_MINT
    finish: Finish = Finish.NONFOIL
    strategy: PricingStrategy = PricingStrategy.MARKET
    competitor_range: Optional[PriceRange] = None
    bulk_adjustment_percent: Decimal = Decimal("0")
    custom_price: Optional[Decimal] = None


def validate_bulk_adjustment(percent: Decimal) -> Decimal:
    percent = Decimal(str(percent))
    if not BULK_ADJUSTMENT_MIN <= percent <= BULK_ADJUSTMENT_MAX:
        raise ValidationError(
            "bulk_adjustment_percent must be between -30 and 30",
            field="bulk_adjustment_percent",
        )
    return percent


def apply_strategy(
    strategy: PricingStrategy,
    base_price: Decimal,
    condition: CardCondition,
    finish: Finish,
    competitor_range: Optional[PriceRange],
) -> Decimal:
    """Strategy formula only; no bulk adjustment, floor or rounding."""
    if strategy == PricingStrategy.COMPETITIVE:
        return base_price * COMPETITIVE_FACTOR
    if strategy == PricingStrategy.MARKET:
        return base_price
    if strategy == PricingStrategy.QUICK_SALE:
        return base_price * QUICK_SALE_FACTOR
    if strategy == PricingStrategy.PREMIUM:
        price = base_price if condition == CardCondition.NEAR_MINT else base_price * PLAYED_FACTOR
        if finish == Finish.FOIL:
            price *= FOIL_PREMIUM_FACTOR
        return price
    if strategy == PricingStrategy.UNDERCUT:
        if competitor_range is not None:
            return competitor_range.min - UNDERCUT_STEP
        return base_price * UNDERCUT_FALLBACK_FACTOR
    raise ValidationError(f"Strategy {strategy.value} has no formula", field="strategy")


def finalize_price(price: Decimal, floor: Optional[Decimal] = None) -> Decimal:
    """Clamp to the pricing floor and round half-up to cents."""
    floor = settings.pricing_floor if floor is None else floor
    return max(floor, price).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def recommend(request: PricingRequest) -> Decimal:
    """
    Suggested sale price for one unit.

    Order of operations: strategy formula, then
    ``price *= 1 + bulk_adjustment_percent / 100``, then floor, then rounding.
    The custom strategy uses ``custom_price`` as-is and skips both the
    formula and the bulk adjustment.

    Raises:
        ValidationError: Negative base price, bulk adjustment outside
            [-30, 30], or custom strategy without a custom price
    """
    base_price = Decimal(str(request.base_price))
    if base_price < 0:
        raise ValidationError("base_price cannot be negative", field="base_price")
    bulk = validate_bulk_adjustment(request.bulk_adjustment_percent)

    if request.strategy == PricingStrategy.CUSTOM:
        if request.custom_price is None:
            raise ValidationError("custom strategy requires custom_price", field="custom_price")
        return finalize_price(Decimal(str(request.custom_price)))

    price = apply_strategy(
        request.strategy,
        base_price,
        request.condition,
        request.finish,
        request.competitor_range,
    )
    price *= 1 + bulk / 100
    return finalize_price(price)


def marketplace_fee(amount: Decimal, fee_percent: Optional[Decimal] = None) -> Decimal:
    fee_percent = settings.marketplace_fee_percent if fee_percent is None else fee_percent
    return (amount * fee_percent / 100).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
