"""Row normalization for collection import files."""
import csv
import io
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Optional

from mtg_catalog.core.constants import (
    CardCondition,
    CardLanguage,
    Finish,
    MatchStatus,
    normalize_condition,
    normalize_language,
)
from mtg_catalog.core.exceptions import ValidationError
from mtg_catalog.services.imports.formats import resolve_columns

UNKNOWN_SET = "Unknown"
TRUTHY_FOIL_VALUES = frozenset({"yes", "true", "1", "y", "x"})
CURRENCY_MARKERS = ("A$", "AU$", "US$", "AUD", "USD", "$", "€", "£")


@dataclass
class ImportRow:
    """A normalized import row and its catalog resolution."""
    row_number: int
    name: str
    raw: dict[str, str] = field(default_factory=dict)
    quantity: int = 1
    set_name: str = UNKNOWN_SET
    set_code: Optional[str] = None
    collector_number: Optional[str] = None
    condition: CardCondition = CardCondition.NEAR_MINT
    finish: Finish = Finish.NONFOIL
    language: CardLanguage = CardLanguage.ENGLISH
    user_price: Optional[Decimal] = None

    # Resolution (filled by the import service)
    status: MatchStatus = MatchStatus.NEEDS_REVIEW
    catalog_entry_id: Optional[int] = None
    printing_id: Optional[int] = None
    source_id: Optional[str] = None
    image_url: Optional[str] = None
    market_price: Optional[Decimal] = None
    match_confidence: float = 0.0
    match_error: Optional[str] = None

    @property
    def has_known_set(self) -> bool:
        return bool(self.set_name) and self.set_name != UNKNOWN_SET

    @property
    def price(self) -> Decimal:
        """Price to list at: the user's price, else market price, else zero."""
        if self.user_price is not None:
            return self.user_price
        if self.market_price is not None:
            return self.market_price
        return Decimal("0")


def parse_quantity(value: Optional[str]) -> int:
    """Integer quantity; missing, unparsable or below 1 becomes 1."""
    if not value or not value.strip():
        return 1
    try:
        return max(1, int(float(value.strip())))
    except (ValueError, OverflowError):
        return 1


def parse_finish(value: Optional[str]) -> Finish:
    """
    Finish from a foil/finish/printing column.

    "etched" anywhere means etched; "foil" anywhere (but not "non-foil")
    or a truthy flag (yes/true/1/y/x) means foil; everything else is nonfoil.
    """
    if not value:
        return Finish.NONFOIL
    text = value.strip().lower()
    if "etched" in text:
        return Finish.ETCHED
    if "foil" in text and "non" not in text:
        return Finish.FOIL
    if text in TRUTHY_FOIL_VALUES:
        return Finish.FOIL
    return Finish.NONFOIL


def parse_price(value: Optional[str]) -> Optional[Decimal]:
    """Price with currency markers removed; None when missing or invalid."""
    if not value:
        return None
    cleaned = value.strip()
    for marker in CURRENCY_MARKERS:
        cleaned = cleaned.replace(marker, "")
    cleaned = cleaned.replace(",", "").strip()
    if not cleaned:
        return None
    try:
        price = Decimal(cleaned)
    except InvalidOperation:
        return None
    if price < 0 or not price.is_finite():
        return None
    return price.quantize(Decimal("0.01"))


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def normalize_row(
    raw: dict[str, Optional[str]],
    columns: dict[str, str],
    row_number: int,
) -> Optional[ImportRow]:
    """
    Normalize one raw CSV row.

    Args:
        raw: Row as read by csv.DictReader
        columns: Import field -> header, from ``resolve_columns``
        row_number: 1-based line number in the file (header is line 1)

    Returns:
        ImportRow, or None when the row has no usable name and is dropped
    """
    def get(field_name: str) -> Optional[str]:
        column = columns.get(field_name)
        return _clean(raw.get(column)) if column else None

    name = get("name")
    if not name:
        return None

    set_code = get("set_code")
    return ImportRow(
        row_number=row_number,
        name=name,
        raw={k: (v or "") for k, v in raw.items() if k is not None},
        quantity=parse_quantity(get("quantity")),
        set_name=get("set_name") or UNKNOWN_SET,
        set_code=set_code.lower() if set_code else None,
        collector_number=get("collector_number"),
        condition=normalize_condition(get("condition")),
        finish=parse_finish(get("finish")),
        language=normalize_language(get("language")),
        user_price=parse_price(get("price")),
    )


@dataclass
class ParsedFile:
    """Header row and normalized rows of one CSV file."""
    headers: list[str]
    rows: list[ImportRow]
    total_rows: int
    dropped: int


def read_csv(content: str) -> tuple[list[str], list[dict[str, Optional[str]]]]:
    """
    Header row and data rows of a CSV document.

    Raises:
        ValidationError: Empty document or missing header row
    """
    if not content or not content.strip():
        raise ValidationError("Import file is empty", field="file")

    reader = csv.DictReader(io.StringIO(content.lstrip("\ufeff")))
    if not reader.fieldnames:
        raise ValidationError("Import file has no header row", field="file")

    headers = [h.strip() for h in reader.fieldnames if h is not None]
    return headers, list(reader)


def parse_rows(headers: list[str], records: list[dict[str, Optional[str]]], schema: str) -> ParsedFile:
    """Normalize every record under ``schema``, dropping nameless rows."""
    # DictReader keys keep their original spacing
    columns = resolve_columns(records[0].keys() if records else headers, schema)

    rows = []
    dropped = 0
    for row_number, record in enumerate(records, start=2):
        row = normalize_row(record, columns, row_number)
        if row is None:
            dropped += 1
            continue
        rows.append(row)

    return ParsedFile(headers=headers, rows=rows, total_rows=len(records), dropped=dropped)


_TEXT_LINE = re.compile(
    r"^\s*(?:(?P<qty>\d+)\s*x?\s+)?"
    r"(?P<name>.+?)"
    r"(?:\s+\((?P<set>[A-Za-z0-9]{2,6})\)(?:\s+(?P<number>[A-Za-z0-9\-★]+))?)?"
    r"(?:\s+\*(?P<foil>[Ff])\*)?\s*$"
)


def parse_text_list(text: str) -> ParsedFile:
    """
    Parse a pasted card list, one card per line.

    Accepted forms:
        4 Lightning Bolt
        4x Lightning Bolt (M10)
        1 Lightning Bolt (M10) 146 *F*
        Lightning Bolt

    Blank lines and comment lines (``#`` or ``//``) are skipped.

    A leading number is always the quantity, so a card whose name starts
    with a number needs one written out: ``1 1996 World Champion``.
    """
    if not text or not text.strip():
        raise ValidationError("Card list is empty", field="text")

    rows = []
    total = 0
    dropped = 0
    for line_number, line in enumerate(text.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", "//")):
            continue
        total += 1

        match = _TEXT_LINE.match(stripped)
        name = match.group("name").strip() if match else ""
        if not name:
            dropped += 1
            continue

        set_code = match.group("set")
        rows.append(ImportRow(
            row_number=line_number,
            name=name,
            raw={"line": stripped},
            quantity=parse_quantity(match.group("qty")),
            set_code=set_code.lower() if set_code else None,
            collector_number=match.group("number"),
            finish=Finish.FOIL if match.group("foil") else Finish.NONFOIL,
        ))

    return ParsedFile(headers=[], rows=rows, total_rows=total, dropped=dropped)
