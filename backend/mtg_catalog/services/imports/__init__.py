"""Bulk import: format detection, row normalization and catalog reconciliation."""
from mtg_catalog.services.imports.formats import (
    GENERIC_SCHEMA,
    SCHEMA_MATCH_THRESHOLD,
    detect_schema,
    score_schemas,
)
from mtg_catalog.services.imports.parser import ImportRow, normalize_row, parse_text_list
from mtg_catalog.services.imports.queue import RateLimitedWorkQueue
from mtg_catalog.services.imports.service import ImportResult, ImportService

__all__ = [
    "GENERIC_SCHEMA",
    "SCHEMA_MATCH_THRESHOLD",
    "detect_schema",
    "score_schemas",
    "ImportRow",
    "normalize_row",
    "parse_text_list",
    "RateLimitedWorkQueue",
    "ImportResult",
    "ImportService",
]
