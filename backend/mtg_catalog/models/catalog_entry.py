"""
CatalogEntry model: one row per distinct card identity (oracle level).
"""
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mtg_catalog.db.base import Base
from mtg_catalog.db.types import JSONSet

if TYPE_CHECKING:
    from mtg_catalog.models.printing import Printing


class CatalogEntry(Base):
    """
    Represents a Magic: The Gathering card identity.

    Uses the Scryfall oracle id as the identity key. Rows are created and
    overwritten by catalog sync; they are never deleted.
    """

    __tablename__ = "catalog_entries"

    identity_key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    # Card characteristics
    mana_cost: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    mana_value: Mapped[Optional[float]] = mapped_column(nullable=True)
    type_line: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    oracle_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    power: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    toughness: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    colors: Mapped[frozenset[str]] = mapped_column(JSONSet, default=frozenset, nullable=False)
    color_identity: Mapped[frozenset[str]] = mapped_column(JSONSet, default=frozenset, nullable=False)
    keywords: Mapped[frozenset[str]] = mapped_column(JSONSet, default=frozenset, nullable=False)
    legalities: Mapped[dict[str, str]] = mapped_column(JSON, default=dict, nullable=False)
    is_reserved: Mapped[bool] = mapped_column(default=False, nullable=False)

    printings: Mapped[list["Printing"]] = relationship(
        "Printing", back_populates="catalog_entry", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<CatalogEntry {self.name} ({self.identity_key})>"
