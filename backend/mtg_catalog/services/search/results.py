"""Result types shared by the search filters, ranking and engine."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional

from mtg_catalog.core.constants import Finish
from mtg_catalog.models.catalog_entry import CatalogEntry
from mtg_catalog.models.printing import Printing
from mtg_catalog.services.inventory import VersionAggregate

FINISH_ORDER = [f.value for f in Finish]


@dataclass
class VersionResult:
    """One printing with its catalog entry and availability aggregate."""
    entry: CatalogEntry
    printing: Printing
    aggregate: VersionAggregate

    @property
    def in_stock(self) -> bool:
        return self.aggregate.in_stock

    @property
    def available_finishes(self) -> list[str]:
        return [f for f in FINISH_ORDER if f in (self.printing.finishes or ())]

    @property
    def effective_price(self) -> Optional[Decimal]:
        """
        Lowest active listing price, else the latest snapshot of the first
        available finish that has one; None when nothing is known.
        """
        if self.aggregate.min_price is not None:
            return self.aggregate.min_price
        latest = self.aggregate.latest_price_for(self.available_finishes)
        return latest.price if latest else None


@dataclass
class SearchPage:
    """A page of ranked search results."""
    query: str
    page: int
    limit: int
    total: int
    results: list[VersionResult] = field(default_factory=list)
    truncated: bool = False

    @property
    def has_more(self) -> bool:
        return self.page * self.limit < self.total
