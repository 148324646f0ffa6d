"""
PriceSnapshot model: append-only market price history per printing and finish.
"""
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mtg_catalog.db.base import Base

if TYPE_CHECKING:
    from mtg_catalog.models.printing import Printing


class PriceSnapshot(Base):
    """
    An observed market price for one finish of a printing.

    Rows are only ever inserted. The current price for a (printing, finish)
    pair is the row with the greatest ``observed_at``.
    """

    __tablename__ = "price_snapshots"

    printing_id: Mapped[int] = mapped_column(
        ForeignKey("printings.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    finish: Mapped[str] = mapped_column(String(10), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    currency: Mapped[str] = mapped_column(String(3), default="AUD", nullable=False)
    source: Mapped[str] = mapped_column(String(50), default="scryfall", nullable=False)
    observed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    printing: Mapped["Printing"] = relationship("Printing", back_populates="price_snapshots")

    __table_args__ = (
        Index("ix_price_snapshots_printing_finish_observed", "printing_id", "finish", "observed_at"),
    )

    def __repr__(self) -> str:
        return f"<PriceSnapshot {self.printing_id}/{self.finish}: {self.price} {self.currency} @ {self.observed_at}>"
