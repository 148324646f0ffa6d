"""
Catalog API endpoints.

Idempotent upserts of card identities and printings, and catalog lookups.
"""
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from mtg_catalog.api.deps import get_catalog_service
from mtg_catalog.schemas.catalog import (
    CatalogEntryResponse,
    CatalogEntryUpsert,
    PrintingResponse,
    PrintingUpsert,
)
from mtg_catalog.services.catalog import CatalogService

router = APIRouter()

Catalog = Annotated[CatalogService, Depends(get_catalog_service)]


@router.put("/entries", response_model=CatalogEntryResponse)
async def upsert_entry(payload: CatalogEntryUpsert, catalog: Catalog):
    """Create or overwrite a card identity by identity key."""
    entry = await catalog.upsert_catalog_entry(payload)
    return CatalogEntryResponse.model_validate(entry)


@router.put("/printings", response_model=PrintingResponse)
async def upsert_printing(payload: PrintingUpsert, catalog: Catalog):
    """
    Create or overwrite a printing by (identity key, source id).

    Treatment flags are derived from the frame data on every write.
    """
    printing = await catalog.upsert_printing(payload)
    return PrintingResponse.from_printing(printing)


@router.get("/entries", response_model=list[CatalogEntryResponse])
async def find_entries(
    catalog: Catalog,
    name: str = Query(..., description="Case-insensitive name substring"),
    limit: int = Query(50, ge=1, le=200),
):
    """Card identities whose name contains ``name``."""
    entries = await catalog.find_by_name(name, limit=limit)
    return [CatalogEntryResponse.model_validate(e) for e in entries]


@router.get("/entries/{identity_key}", response_model=CatalogEntryResponse)
async def get_entry(identity_key: str, catalog: Catalog):
    entry = await catalog.get_entry(identity_key)
    return CatalogEntryResponse.model_validate(entry)


@router.get("/entries/{identity_key}/printings", response_model=list[PrintingResponse])
async def list_printings(identity_key: str, catalog: Catalog):
    """Printings of a card identity, newest first; empty for unknown keys."""
    printings = await catalog.list_printings_for_entry(identity_key)
    return [PrintingResponse.from_printing(p) for p in printings]


@router.get("/printings/{printing_id}", response_model=PrintingResponse)
async def get_printing(printing_id: int, catalog: Catalog):
    printing = await catalog.get_printing(printing_id)
    return PrintingResponse.from_printing(printing)
