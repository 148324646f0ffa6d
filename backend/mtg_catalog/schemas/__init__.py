"""
Pydantic schemas for API request/response validation.
"""
from mtg_catalog.schemas.catalog import (
    CatalogEntryResponse,
    CatalogEntryUpsert,
    LatestPriceResponse,
    PriceRecord,
    PriceSnapshotResponse,
    PrintingResponse,
    PrintingUpsert,
    TreatmentResponse,
)

__all__ = [
    "CatalogEntryResponse",
    "CatalogEntryUpsert",
    "LatestPriceResponse",
    "PriceRecord",
    "PriceSnapshotResponse",
    "PrintingResponse",
    "PrintingUpsert",
    "TreatmentResponse",
]
