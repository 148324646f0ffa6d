"""
Core module containing configuration and shared utilities.
"""
from mtg_catalog.core.config import settings
from mtg_catalog.core.constants import (
    CardCondition,
    CardLanguage,
    Finish,
    normalize_condition,
    normalize_language,
    CONDITION_ALIASES,
    LANGUAGE_ALIASES,
)
from mtg_catalog.core.exceptions import (
    CatalogError,
    NotFoundError,
    UpstreamUnavailable,
    ValidationError,
)

__all__ = [
    "settings",
    "CardCondition",
    "CardLanguage",
    "Finish",
    "normalize_condition",
    "normalize_language",
    "CONDITION_ALIASES",
    "LANGUAGE_ALIASES",
    "CatalogError",
    "NotFoundError",
    "UpstreamUnavailable",
    "ValidationError",
]
