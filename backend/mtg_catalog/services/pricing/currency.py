"""
Currency conversion for market prices.

Scryfall reports USD (and sometimes EUR) prices; listings are priced in
AUD. When a native AUD price is missing the USD price is converted with
the configured fixed rate ``settings.aud_per_usd``.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

import structlog

from mtg_catalog.core.config import settings

logger = structlog.get_logger()

TWO_PLACES = Decimal("0.01")


def parse_amount(value: Any) -> Optional[Decimal]:
    """Decimal from a JSON price value; None for null/empty/unparsable."""
    if value is None or value == "":
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        logger.debug("Unparsable price value", value=value)
        return None


def convert_usd_to_aud(usd: Decimal, rate: Optional[Decimal] = None) -> Decimal:
    """
    Convert USD to AUD.

    Args:
        usd: Amount in USD
        rate: AUD per USD; defaults to ``settings.aud_per_usd``

    Returns:
        AUD amount rounded to cents
    """
    rate = settings.aud_per_usd if rate is None else rate
    return (usd * rate).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def resolve_aud_price(
    aud: Any = None,
    usd: Any = None,
    rate: Optional[Decimal] = None,
) -> Optional[Decimal]:
    """Native AUD price when present, else converted USD, else None."""
    native = parse_amount(aud)
    if native is not None:
        return native.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    converted = parse_amount(usd)
    if converted is not None:
        return convert_usd_to_aud(converted, rate)
    return None
