"""
Error taxonomy for the catalog engine.

API routes translate these into HTTP responses (see ``mtg_catalog.main``).
"No data" outcomes are not errors: lookups return ``None`` or empty lists.
"""


class CatalogError(Exception):
    """Base class for all catalog engine errors."""

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class ValidationError(CatalogError):
    """Malformed or missing input; rejected before anything is written."""
    pass


class NotFoundError(CatalogError):
    """An operation required an entity that does not exist."""
    pass


class UpstreamUnavailable(CatalogError):
    """A lookup or sync dependency is down or timed out."""
    pass
