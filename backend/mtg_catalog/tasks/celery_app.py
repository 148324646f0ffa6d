"""
Celery application configuration.

Schedule:
- Price refresh: daily at midnight UTC (re-fetch every known printing)
"""
from celery import Celery
from celery.schedules import crontab

from mtg_catalog.core.config import settings

celery_app = Celery(
    "mtg_catalog",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=[
        "mtg_catalog.tasks.catalog_sync",
    ],
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Results expire after 1 hour
    result_expires=3600,

    # Worker settings
    worker_prefetch_multiplier=1,

    beat_schedule={
        "catalog-refresh-prices": {
            "task": "refresh_prices",
            "schedule": crontab(hour=0, minute=0),
        },
    },

    task_routes={
        "sync_cards": {"queue": "ingestion"},
        "refresh_prices": {"queue": "ingestion"},
    },
)
