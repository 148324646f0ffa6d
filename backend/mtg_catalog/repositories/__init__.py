"""
Repository layer for data access.

Repositories provide a clean abstraction over the database,
hiding the details of SQL queries and ORM operations from
the service layer.
"""
from mtg_catalog.repositories.base import BaseRepository
from mtg_catalog.repositories.catalog_repo import CatalogRepository, PrintingRepository
from mtg_catalog.repositories.listing_repo import ListingRepository
from mtg_catalog.repositories.price_repo import LatestPrice, PriceRepository

__all__ = [
    "BaseRepository",
    "CatalogRepository",
    "PrintingRepository",
    "ListingRepository",
    "LatestPrice",
    "PriceRepository",
]
