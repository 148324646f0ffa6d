"""
Celery tasks for background catalog sync.
"""
from mtg_catalog.tasks.celery_app import celery_app
from mtg_catalog.tasks.catalog_sync import refresh_prices, sync_cards

__all__ = [
    "celery_app",
    "refresh_prices",
    "sync_cards",
]
