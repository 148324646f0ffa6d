"""Search services: filters, ranking and the search engine."""
from mtg_catalog.services.search.engine import SearchEngine
from mtg_catalog.services.search.filters import NumericFilter, SearchFilters, apply_filters
from mtg_catalog.services.search.results import SearchPage, VersionResult

__all__ = [
    "SearchEngine",
    "NumericFilter",
    "SearchFilters",
    "apply_filters",
    "SearchPage",
    "VersionResult",
]
