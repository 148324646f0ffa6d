"""
Search filters for versions.

All filters are optional and conjunctive. They run over VersionResults
after aggregation, so stock and price filters see live inventory.
"""
import operator
import re
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Iterable, Optional

from mtg_catalog.core.constants import ColorMode, Comparator
from mtg_catalog.core.exceptions import ValidationError
from mtg_catalog.services.search.results import VersionResult

COLORLESS = "C"

_COMPARATORS: dict[Comparator, Callable[[float, float], bool]] = {
    Comparator.EQ: operator.eq,
    Comparator.NE: operator.ne,
    Comparator.LT: operator.lt,
    Comparator.LE: operator.le,
    Comparator.GT: operator.gt,
    Comparator.GE: operator.ge,
}

_NUMERIC_FILTER_PATTERN = re.compile(r"^\s*(!=|<=|>=|=|<|>)?\s*(-?\d+(?:\.\d+)?)\s*$")


@dataclass(frozen=True)
class NumericFilter:
    """Comparator + value, e.g. ``mana value <= 3``."""
    comparator: Comparator
    value: float

    def matches(self, candidate: Optional[float]) -> bool:
        if candidate is None:
            return False
        return _COMPARATORS[self.comparator](candidate, self.value)

    @classmethod
    def parse(cls, expression: str) -> "NumericFilter":
        """
        Parse ``"<=3"``, ``">= 2"`` or a bare ``"4"`` (equality).

        Raises:
            ValidationError: Expression is not comparator + number
        """
        match = _NUMERIC_FILTER_PATTERN.match(expression or "")
        if not match:
            raise ValidationError(f"Invalid numeric filter: {expression!r}", field="filter")
        comparator = Comparator(match.group(1) or "=")
        return cls(comparator=comparator, value=float(match.group(2)))


@dataclass
class SearchFilters:
    """Structured search constraints."""
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    in_stock_only: bool = False
    conditions: frozenset[str] = field(default_factory=frozenset)
    rarities: frozenset[str] = field(default_factory=frozenset)
    colors: frozenset[str] = field(default_factory=frozenset)
    color_mode: ColorMode = ColorMode.ANY
    mana_value: Optional[NumericFilter] = None
    power: Optional[NumericFilter] = None
    toughness: Optional[NumericFilter] = None
    set_code: Optional[str] = None
    artist: Optional[str] = None
    oracle_text: Optional[str] = None

    def validate(self) -> None:
        if self.min_price is not None and self.min_price < 0:
            raise ValidationError("min_price cannot be negative", field="min_price")
        if (
            self.min_price is not None
            and self.max_price is not None
            and self.min_price > self.max_price
        ):
            raise ValidationError("min_price cannot exceed max_price", field="min_price")


def apply_filters(versions: Iterable[VersionResult], filters: Optional[SearchFilters]) -> list[VersionResult]:
    """
    Keep the versions that satisfy every set filter.

    Args:
        versions: Aggregated versions
        filters: Constraints; None keeps everything

    Returns:
        Filtered list, in input order
    """
    result = list(versions)
    if filters is None:
        return result

    if filters.in_stock_only:
        result = [v for v in result if v.in_stock]

    if filters.min_price is not None or filters.max_price is not None:
        result = _filter_by_price(result, filters.min_price, filters.max_price)

    if filters.conditions:
        wanted = {c.upper() for c in filters.conditions}
        result = [v for v in result if wanted.intersection(v.aggregate.conditions)]

    if filters.rarities:
        wanted = {r.lower() for r in filters.rarities}
        result = [v for v in result if (v.printing.rarity or "").lower() in wanted]

    if filters.colors:
        result = _filter_by_colors(result, filters.colors, filters.color_mode)

    if filters.mana_value is not None:
        result = [v for v in result if filters.mana_value.matches(v.entry.mana_value)]

    if filters.power is not None:
        result = [v for v in result if filters.power.matches(_stat(v.entry.power))]

    if filters.toughness is not None:
        result = [v for v in result if filters.toughness.matches(_stat(v.entry.toughness))]

    if filters.set_code:
        set_code = filters.set_code.strip().lower()
        result = [v for v in result if v.printing.set_code.lower() == set_code]

    if filters.artist:
        result = _filter_by_text(result, filters.artist, lambda v: v.printing.artist)

    if filters.oracle_text:
        result = _filter_by_text(result, filters.oracle_text, lambda v: v.entry.oracle_text)

    return result


def _filter_by_price(
    versions: list[VersionResult],
    min_price: Optional[Decimal],
    max_price: Optional[Decimal],
) -> list[VersionResult]:
    """Versions with a known effective price inside the range."""
    filtered = []
    for version in versions:
        price = version.effective_price
        if price is None:
            continue
        if min_price is not None and price < min_price:
            continue
        if max_price is not None and price > max_price:
            continue
        filtered.append(version)
    return filtered


def _filter_by_colors(
    versions: list[VersionResult],
    colors: frozenset[str],
    mode: ColorMode,
) -> list[VersionResult]:
    """
    Match card colors against the requested set. "C" stands for colorless.
    """
    wanted = frozenset(c.upper() for c in colors)
    filtered = []
    for version in versions:
        card_colors = frozenset(version.entry.colors) or frozenset({COLORLESS})
        if mode == ColorMode.EXACTLY:
            keep = card_colors == wanted
        elif mode == ColorMode.AT_LEAST:
            keep = wanted <= card_colors
        else:
            keep = bool(card_colors & wanted)
        if keep:
            filtered.append(version)
    return filtered


def _filter_by_text(
    versions: list[VersionResult],
    needle: str,
    getter: Callable[[VersionResult], Optional[str]],
) -> list[VersionResult]:
    """Case-insensitive substring match."""
    needle = needle.strip().lower()
    return [v for v in versions if needle in (getter(v) or "").lower()]


def _stat(value: Optional[str]) -> Optional[float]:
    """Numeric power/toughness; variable values like "*" are not comparable."""
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
