"""
Database module containing session management and base models.
"""
from mtg_catalog.db.session import get_db, async_session_maker, engine
from mtg_catalog.db.base import Base

__all__ = ["get_db", "async_session_maker", "engine", "Base"]
