"""
API dependencies.

Services are built per request on top of the request's database session.
"""
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mtg_catalog.db.session import get_db
from mtg_catalog.services.catalog import CatalogService
from mtg_catalog.services.imports import ImportService
from mtg_catalog.services.inventory import InventoryAggregator
from mtg_catalog.services.prices import PriceService
from mtg_catalog.services.pricing import PricingService
from mtg_catalog.services.search import SearchEngine

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_catalog_service(db: DbSession) -> CatalogService:
    return CatalogService(db)


def get_price_service(db: DbSession) -> PriceService:
    return PriceService(db)


def get_inventory_aggregator(db: DbSession) -> InventoryAggregator:
    return InventoryAggregator(db)


def get_search_engine(db: DbSession) -> SearchEngine:
    return SearchEngine(db)


def get_pricing_service(db: DbSession) -> PricingService:
    return PricingService(db)


def get_import_service(db: DbSession) -> ImportService:
    return ImportService(db)


__all__ = [
    "DbSession",
    "get_db",
    "get_catalog_service",
    "get_price_service",
    "get_inventory_aggregator",
    "get_search_engine",
    "get_pricing_service",
    "get_import_service",
]
