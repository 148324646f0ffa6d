"""
Printing model: one row per physical version of a catalog entry.
"""
from datetime import date
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mtg_catalog.db.base import Base
from mtg_catalog.db.types import JSONSet

if TYPE_CHECKING:
    from mtg_catalog.models.catalog_entry import CatalogEntry
    from mtg_catalog.models.listing import Listing
    from mtg_catalog.models.price_snapshot import PriceSnapshot


class Printing(Base):
    """
    A specific printing of a card (set, collector number, frame, finishes).

    The treatment columns (``is_showcase`` through ``special_foil_label``)
    are derived from the frame/border/promo fields and are rewritten on
    every upsert by the catalog service.
    """

    __tablename__ = "printings"

    catalog_entry_id: Mapped[int] = mapped_column(
        ForeignKey("catalog_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    source_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    # Set info
    set_code: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    set_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    collector_number: Mapped[str] = mapped_column(String(20), nullable=False)
    rarity: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    artist: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    flavor_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    released_at: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Media (opaque references, never fetched here)
    image_small: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    image_normal: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    image_large: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    image_art_crop: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    back_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Frame / border / promo metadata
    frame_version: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    frame_effects: Mapped[frozenset[str]] = mapped_column(JSONSet, default=frozenset, nullable=False)
    border_color: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    promo_types: Mapped[frozenset[str]] = mapped_column(JSONSet, default=frozenset, nullable=False)
    security_stamp: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    finishes: Mapped[frozenset[str]] = mapped_column(JSONSet, nullable=False)

    is_oversized: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_full_art: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_textless: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_promo: Mapped[bool] = mapped_column(default=False, nullable=False)

    # Derived treatment
    is_showcase: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_extended_art: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_borderless: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_retro_frame: Mapped[bool] = mapped_column(default=False, nullable=False)
    is_serialized: Mapped[bool] = mapped_column(default=False, nullable=False)
    special_foil_label: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Relationships
    catalog_entry: Mapped["CatalogEntry"] = relationship("CatalogEntry", back_populates="printings")
    price_snapshots: Mapped[list["PriceSnapshot"]] = relationship(
        "PriceSnapshot", back_populates="printing", cascade="all, delete-orphan"
    )
    listings: Mapped[list["Listing"]] = relationship(
        "Listing", back_populates="printing", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("catalog_entry_id", "source_id", name="uq_printings_entry_source"),
        Index("ix_printings_set_collector", "set_code", "collector_number"),
    )

    @property
    def image_url(self) -> Optional[str]:
        """Best available front image."""
        return self.image_normal or self.image_large or self.image_small

    def __repr__(self) -> str:
        return f"<Printing {self.set_code} #{self.collector_number} ({self.source_id})>"
