"""
Catalog ingestion from Scryfall.
"""
from mtg_catalog.services.ingestion.scryfall import ScryfallClient
from mtg_catalog.services.ingestion.sync import (
    CatalogSyncService,
    SyncStats,
    entry_from_scryfall,
    printing_from_scryfall,
)

__all__ = [
    "ScryfallClient",
    "CatalogSyncService",
    "SyncStats",
    "entry_from_scryfall",
    "printing_from_scryfall",
]
