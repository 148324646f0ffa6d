"""
SQLAlchemy models for the catalog engine.
"""
from mtg_catalog.models.catalog_entry import CatalogEntry
from mtg_catalog.models.printing import Printing
from mtg_catalog.models.price_snapshot import PriceSnapshot
from mtg_catalog.models.listing import Listing

__all__ = [
    "CatalogEntry",
    "Printing",
    "PriceSnapshot",
    "Listing",
]
