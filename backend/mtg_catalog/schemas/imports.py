"""Import API schemas."""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from mtg_catalog.services.imports.formats import SchemaScore
from mtg_catalog.services.imports.parser import ImportRow
from mtg_catalog.services.imports.service import ImportResult


class ImportRowResponse(BaseModel):
    """A normalized, resolved import row."""
    row_number: int
    name: str
    quantity: int
    set_name: str
    set_code: Optional[str] = None
    collector_number: Optional[str] = None
    condition: str
    finish: str
    language: str
    user_price: Optional[Decimal] = None
    price: Decimal
    status: str
    catalog_entry_id: Optional[int] = None
    printing_id: Optional[int] = None
    source_id: Optional[str] = None
    image_url: Optional[str] = None
    market_price: Optional[Decimal] = None
    match_confidence: float = 0.0
    match_error: Optional[str] = None
    raw: dict[str, str] = {}

    @classmethod
    def from_row(cls, row: ImportRow) -> "ImportRowResponse":
        return cls(
            row_number=row.row_number,
            name=row.name,
            quantity=row.quantity,
            set_name=row.set_name,
            set_code=row.set_code,
            collector_number=row.collector_number,
            condition=row.condition.value,
            finish=row.finish.value,
            language=row.language.value,
            user_price=row.user_price,
            price=row.price,
            status=row.status.value,
            catalog_entry_id=row.catalog_entry_id,
            printing_id=row.printing_id,
            source_id=row.source_id,
            image_url=row.image_url,
            market_price=row.market_price,
            match_confidence=row.match_confidence,
            match_error=row.match_error,
            raw=row.raw,
        )


class ImportSummary(BaseModel):
    """Batch counters."""
    total: int
    matched: int
    needs_review: int
    dropped: int
    pending: int


class ImportResponse(BaseModel):
    """Outcome of an import batch."""
    schema_name: str
    abandoned: bool
    summary: ImportSummary
    rows: list[ImportRowResponse]

    @classmethod
    def from_result(cls, result: ImportResult) -> "ImportResponse":
        return cls(
            schema_name=result.schema,
            abandoned=result.abandoned,
            summary=ImportSummary(
                total=result.total,
                matched=result.matched,
                needs_review=result.needs_review,
                dropped=result.dropped,
                pending=result.pending,
            ),
            rows=[ImportRowResponse.from_row(row) for row in result.rows],
        )


class TextImportRequest(BaseModel):
    """Pasted card list."""
    text: str = Field(..., min_length=1)


class DetectRequest(BaseModel):
    """Header row to classify."""
    headers: list[str]


class SchemaScoreResponse(BaseModel):
    name: str
    fraction: float
    matched: int

    @classmethod
    def from_score(cls, score: SchemaScore) -> "SchemaScoreResponse":
        return cls(name=score.name, fraction=round(score.fraction, 4), matched=score.matched)


class DetectResponse(BaseModel):
    """Detected schema and the full ranking."""
    schema_name: str
    scores: list[SchemaScoreResponse]
