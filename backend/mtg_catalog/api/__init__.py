"""
API module for FastAPI routes.
"""
from fastapi import APIRouter

from mtg_catalog.api.routes import (
    cards,
    catalog,
    health,
    imports,
    inventory,
    prices,
    pricing,
    search,
)

api_router = APIRouter()

# Include all route modules
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(catalog.router, prefix="/catalog", tags=["Catalog"])
api_router.include_router(prices.router, prefix="/prices", tags=["Prices"])
api_router.include_router(inventory.router, prefix="/inventory", tags=["Inventory"])
api_router.include_router(search.router, prefix="/search", tags=["Search"])
api_router.include_router(cards.router, prefix="/cards", tags=["Cards"])
api_router.include_router(pricing.router, prefix="/pricing", tags=["Pricing"])
api_router.include_router(imports.router, prefix="/imports", tags=["Imports"])
