"""
Catalog sync tasks.

- sync_cards: on-demand sync of every printing matching a Scryfall query
- refresh_prices: daily snapshot refresh for every known printing

Both retry later when Scryfall is unavailable.
"""
from dataclasses import asdict
from typing import Any

import structlog
from celery import shared_task

from mtg_catalog.core.exceptions import UpstreamUnavailable
from mtg_catalog.services.ingestion.scryfall import ScryfallClient
from mtg_catalog.services.ingestion.sync import CatalogSyncService
from mtg_catalog.tasks.utils import create_task_session_maker, run_async

logger = structlog.get_logger()


@shared_task(name="sync_cards", bind=True, max_retries=3, default_retry_delay=300)
def sync_cards(self, query: str) -> dict[str, Any]:
    """
    Sync catalog entries, printings and prices for a Scryfall search query.

    Args:
        query: Scryfall search syntax, e.g. ``set:neo`` or ``!"Lightning Bolt"``

    Returns:
        Sync statistics.
    """
    try:
        return run_async(_sync_cards_async(query))
    except UpstreamUnavailable as e:
        logger.warning("Catalog sync deferred", query=query, error=e.message)
        raise self.retry(exc=e)


async def _sync_cards_async(query: str) -> dict[str, Any]:
    logger.info("Starting catalog sync", query=query)
    session_maker, engine = create_task_session_maker()
    try:
        async with ScryfallClient() as client, session_maker() as db:
            stats = await CatalogSyncService(db, client).sync_query(query)
        return asdict(stats)
    finally:
        await engine.dispose()


@shared_task(name="refresh_prices", bind=True, max_retries=3, default_retry_delay=600)
def refresh_prices(self) -> dict[str, Any]:
    """
    Append fresh price snapshots for every known printing.

    Runs daily via celery beat.

    Returns:
        Refresh statistics.
    """
    try:
        return run_async(_refresh_prices_async())
    except UpstreamUnavailable as e:
        logger.warning("Price refresh deferred", error=e.message)
        raise self.retry(exc=e)


async def _refresh_prices_async() -> dict[str, Any]:
    logger.info("Starting price refresh")
    session_maker, engine = create_task_session_maker()
    try:
        async with ScryfallClient() as client, session_maker() as db:
            stats = await CatalogSyncService(db, client).refresh_prices()
        return asdict(stats)
    finally:
        await engine.dispose()
