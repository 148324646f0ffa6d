"""
Listing model representing a seller's copies of a printing for sale.

Listings are written by the marketplace listings service; the catalog
engine only reads them for aggregation.
"""
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mtg_catalog.core.constants import CardCondition, CardLanguage, Finish, ListingStatus
from mtg_catalog.db.base import Base

if TYPE_CHECKING:
    from mtg_catalog.models.printing import Printing


class Listing(Base):
    """
    Represents a seller's listing of one printing in one condition/finish.
    """

    __tablename__ = "listings"

    printing_id: Mapped[int] = mapped_column(
        ForeignKey("printings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    seller_id: Mapped[int] = mapped_column(nullable=False, index=True)

    condition: Mapped[str] = mapped_column(String(3), default=CardCondition.NEAR_MINT.value, nullable=False)
    finish: Mapped[str] = mapped_column(String(10), default=Finish.NONFOIL.value, nullable=False)
    language: Mapped[str] = mapped_column(String(50), default=CardLanguage.ENGLISH.value, nullable=False)

    quantity: Mapped[int] = mapped_column(default=1, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default=ListingStatus.ACTIVE.value, nullable=False)

    printing: Mapped["Printing"] = relationship("Printing", back_populates="listings")

    __table_args__ = (
        Index("ix_listings_printing_status", "printing_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Listing {self.printing_id} x{self.quantity} {self.condition}/{self.finish}: {self.price} ({self.status})>"
