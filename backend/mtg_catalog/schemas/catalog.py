"""
Catalog-related Pydantic schemas.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


def _sorted_list(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    return value


class CatalogEntryUpsert(BaseModel):
    """Payload for creating or overwriting a card identity."""
    identity_key: str = Field(..., description="Oracle id of the card")
    name: str
    mana_cost: Optional[str] = None
    mana_value: Optional[float] = None
    type_line: Optional[str] = None
    oracle_text: Optional[str] = None
    power: Optional[str] = None
    toughness: Optional[str] = None
    colors: list[str] = Field(default_factory=list)
    color_identity: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    legalities: dict[str, str] = Field(default_factory=dict)
    is_reserved: bool = False


class PrintingUpsert(BaseModel):
    """Payload for creating or overwriting a printing of a card identity."""
    identity_key: str = Field(..., description="Oracle id of the owning card")
    source_id: str = Field(..., description="Scryfall id of the printing")
    set_code: str
    set_name: Optional[str] = None
    collector_number: str
    rarity: Optional[str] = None
    artist: Optional[str] = None
    flavor_text: Optional[str] = None
    released_at: Optional[date] = None
    image_small: Optional[str] = None
    image_normal: Optional[str] = None
    image_large: Optional[str] = None
    image_art_crop: Optional[str] = None
    back_image: Optional[str] = None
    frame_version: Optional[str] = None
    frame_effects: list[str] = Field(default_factory=list)
    border_color: Optional[str] = None
    promo_types: list[str] = Field(default_factory=list)
    security_stamp: Optional[str] = None
    finishes: list[str] = Field(default_factory=lambda: ["nonfoil"])
    is_oversized: bool = False
    is_full_art: bool = False
    is_textless: bool = False
    is_promo: bool = False


class CatalogEntryResponse(BaseModel):
    """Card identity response schema."""
    id: int
    identity_key: str
    name: str
    mana_cost: Optional[str] = None
    mana_value: Optional[float] = None
    type_line: Optional[str] = None
    oracle_text: Optional[str] = None
    power: Optional[str] = None
    toughness: Optional[str] = None
    colors: list[str] = []
    color_identity: list[str] = []
    keywords: list[str] = []
    legalities: dict[str, str] = {}
    is_reserved: bool = False

    @field_validator("colors", "color_identity", "keywords", mode="before")
    @classmethod
    def sort_sets(cls, v: Any) -> Any:
        return _sorted_list(v)

    class Config:
        from_attributes = True


class TreatmentResponse(BaseModel):
    """Derived treatment flags."""
    is_showcase: bool = False
    is_extended_art: bool = False
    is_borderless: bool = False
    is_retro_frame: bool = False
    is_serialized: bool = False
    special_foil_label: Optional[str] = None

    class Config:
        from_attributes = True


class PrintingResponse(BaseModel):
    """Printing response schema."""
    id: int
    catalog_entry_id: int
    source_id: str
    set_code: str
    set_name: Optional[str] = None
    collector_number: str
    rarity: Optional[str] = None
    artist: Optional[str] = None
    released_at: Optional[date] = None
    image_small: Optional[str] = None
    image_normal: Optional[str] = None
    image_large: Optional[str] = None
    image_art_crop: Optional[str] = None
    back_image: Optional[str] = None
    frame_version: Optional[str] = None
    frame_effects: list[str] = []
    border_color: Optional[str] = None
    promo_types: list[str] = []
    finishes: list[str] = []
    is_oversized: bool = False
    is_full_art: bool = False
    is_textless: bool = False
    is_promo: bool = False
    treatment: TreatmentResponse

    @field_validator("frame_effects", "promo_types", "finishes", mode="before")
    @classmethod
    def sort_sets(cls, v: Any) -> Any:
        return _sorted_list(v)

    @classmethod
    def from_printing(cls, printing: Any) -> "PrintingResponse":
        data = {name: getattr(printing, name) for name in cls.model_fields if name != "treatment"}
        data["treatment"] = TreatmentResponse.model_validate(printing)
        return cls(**data)


class PriceRecord(BaseModel):
    """Payload for appending a price snapshot."""
    printing_id: int
    finish: str = "nonfoil"
    price: Decimal
    currency: str = "AUD"
    source: str = "scryfall"
    observed_at: Optional[datetime] = None


class LatestPriceResponse(BaseModel):
    """Latest known price for a printing finish."""
    printing_id: int
    finish: str
    price: Optional[Decimal] = None
    currency: Optional[str] = None
    observed_at: Optional[datetime] = None


class PriceSnapshotResponse(BaseModel):
    """Stored price snapshot."""
    id: int
    printing_id: int
    finish: str
    price: Decimal
    currency: str
    source: str
    observed_at: datetime

    class Config:
        from_attributes = True
