"""Search API schemas."""
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel

from mtg_catalog.schemas.catalog import TreatmentResponse
from mtg_catalog.schemas.inventory import AggregateResponse
from mtg_catalog.services.search.results import SearchPage, VersionResult


class VersionResponse(BaseModel):
    """One printing of a card with its availability."""
    printing_id: int
    catalog_entry_id: int
    identity_key: str
    name: str
    set_code: str
    set_name: Optional[str] = None
    collector_number: str
    rarity: Optional[str] = None
    artist: Optional[str] = None
    released_at: Optional[date] = None
    image_url: Optional[str] = None
    finishes: list[str] = []
    treatment: TreatmentResponse
    price: Optional[Decimal] = None
    in_stock: bool
    aggregate: AggregateResponse

    @classmethod
    def from_version(cls, version: VersionResult) -> "VersionResponse":
        printing = version.printing
        return cls(
            printing_id=printing.id,
            catalog_entry_id=version.entry.id,
            identity_key=version.entry.identity_key,
            name=version.entry.name,
            set_code=printing.set_code,
            set_name=printing.set_name,
            collector_number=printing.collector_number,
            rarity=printing.rarity,
            artist=printing.artist,
            released_at=printing.released_at,
            image_url=printing.image_url,
            finishes=version.available_finishes,
            treatment=TreatmentResponse.model_validate(printing),
            price=version.effective_price,
            in_stock=version.in_stock,
            aggregate=AggregateResponse.from_aggregate(version.aggregate),
        )


class SearchResponse(BaseModel):
    """Search response with results and metadata."""
    results: list[VersionResponse]
    total: int
    page: int
    page_size: int
    has_more: bool
    truncated: bool = False
    query: str
    sort: str

    @classmethod
    def from_page(cls, page: SearchPage, sort: str) -> "SearchResponse":
        return cls(
            results=[VersionResponse.from_version(v) for v in page.results],
            total=page.total,
            page=page.page,
            page_size=page.limit,
            has_more=page.has_more,
            truncated=page.truncated,
            query=page.query,
            sort=sort,
        )


class VersionsResponse(BaseModel):
    """Every version of one card."""
    name: str
    total: int
    versions: list[VersionResponse]
