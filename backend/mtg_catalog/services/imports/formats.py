"""
Export formats of collection tools and marketplaces, and schema detection.

Each known format has a signature (the columns its exports carry) and a
column map onto import fields. Detection scores every signature against
the actual header row and falls back to the generic synonym mapping when
no signature covers at least ``SCHEMA_MATCH_THRESHOLD`` of its columns.
"""
from dataclasses import dataclass
from typing import Iterable, Optional

SCHEMA_MATCH_THRESHOLD = 0.7
GENERIC_SCHEMA = "generic"

# Import fields a column can map onto
IMPORT_FIELDS = (
    "name",
    "quantity",
    "set_name",
    "set_code",
    "collector_number",
    "condition",
    "language",
    "finish",
    "price",
)


@dataclass(frozen=True)
class SchemaFormat:
    """A known export format."""
    name: str
    columns: dict[str, str]

    @property
    def signature(self) -> tuple[str, ...]:
        return tuple(self.columns.values())


# Table order is the final tie-break in detection
KNOWN_FORMATS: tuple[SchemaFormat, ...] = (
    SchemaFormat("dragonshield", {
        "name": "Card Name",
        "quantity": "Quantity",
        "set_name": "Set Name",
        "set_code": "Set Code",
        "collector_number": "Card Number",
        "condition": "Condition",
        "language": "Language",
        "finish": "Printing",
        "price": "Card Price",
    }),
    SchemaFormat("tcgplayer", {
        "name": "Name",
        "quantity": "Quantity",
        "set_name": "Set",
        "collector_number": "Number",
        "condition": "Condition",
        "language": "Language",
        "finish": "Foil",
        "price": "Market Price",
    }),
    SchemaFormat("deckbox", {
        "name": "Name",
        "quantity": "Count",
        "set_name": "Edition",
        "collector_number": "Card Number",
        "condition": "Condition",
        "language": "Language",
        "finish": "Foil",
        "price": "Price",
    }),
    SchemaFormat("moxfield", {
        "name": "Name",
        "quantity": "Quantity",
        "set_name": "Set",
        "set_code": "Set Code",
        "collector_number": "Collector Number",
        "condition": "Condition",
        "language": "Language",
        "finish": "Foil",
        "price": "Purchase Price",
    }),
    SchemaFormat("archidekt", {
        "name": "Name",
        "quantity": "Quantity",
        "set_name": "Edition",
        "collector_number": "Collector Number",
        "condition": "Condition",
        "finish": "Foil",
    }),
    SchemaFormat("tappedout", {
        "name": "Name",
        "quantity": "Qty",
        "set_name": "Set",
        "finish": "Foil",
    }),
    SchemaFormat("mtggoldfish", {
        "name": "Card",
        "quantity": "Quantity",
        "set_name": "Set",
        "set_code": "Set ID",
        "finish": "Foil",
        "price": "Price",
    }),
    SchemaFormat("cardsphere", {
        "name": "Name",
        "quantity": "Quantity",
        "set_name": "Edition",
        "condition": "Condition",
        "finish": "Foil",
    }),
    SchemaFormat("echomtg", {
        "name": "Name",
        "quantity": "Quantity",
        "set_name": "Set",
        "collector_number": "Number",
        "condition": "Condition",
        "language": "Language",
        "finish": "Foil",
    }),
)

FORMATS_BY_NAME: dict[str, SchemaFormat] = {f.name: f for f in KNOWN_FORMATS}

# Header synonyms for the generic schema, most specific first
GENERIC_SYNONYMS: dict[str, tuple[str, ...]] = {
    "name": ("name", "card name", "cardname", "card"),
    "quantity": ("quantity", "qty", "count", "amount"),
    "set_name": ("set name", "set", "edition", "expansion"),
    "set_code": ("set code", "set_code", "set id"),
    "collector_number": ("collector number", "card number", "number", "#"),
    "condition": ("condition", "cond", "grade"),
    "language": ("language", "lang"),
    "finish": ("foil", "finish", "printing"),
    "price": ("price", "my price", "purchase price", "cost", "value"),
}


@dataclass(frozen=True)
class SchemaScore:
    """How well a header row matches one format."""
    name: str
    fraction: float
    matched: int
    order: int


def _normalize(header: str) -> str:
    return (header or "").strip().lower()


def score_schemas(headers: Iterable[str]) -> list[SchemaScore]:
    """
    Score every known format against ``headers``, best first.

    Ranking is by fraction of signature columns present, then by number
    of matched columns, then by table order.
    """
    present = {_normalize(h) for h in headers if h}
    scores = []
    for order, fmt in enumerate(KNOWN_FORMATS):
        signature = [_normalize(col) for col in fmt.signature]
        matched = sum(1 for col in signature if col in present)
        scores.append(SchemaScore(
            name=fmt.name,
            fraction=matched / len(signature),
            matched=matched,
            order=order,
        ))
    return sorted(scores, key=lambda s: (-s.fraction, -s.matched, s.order))


def detect_schema(headers: Iterable[str]) -> str:
    """
    Name of the best-matching known format, or ``GENERIC_SCHEMA``.

    Examples:
        >>> detect_schema(["Name", "Qty", "Set", "Foil"])
        'tappedout'
        >>> detect_schema(["foo", "bar"])
        'generic'
    """
    scores = score_schemas(headers)
    if scores and scores[0].fraction >= SCHEMA_MATCH_THRESHOLD:
        return scores[0].name
    return GENERIC_SCHEMA


def resolve_columns(headers: Iterable[str], schema: str) -> dict[str, str]:
    """
    Map import fields to the actual header strings for ``schema``.

    Header matching is case-insensitive and whitespace-trimmed. Fields whose
    column is absent are left out.
    """
    actual = {}
    for header in headers:
        if header is not None:
            actual.setdefault(_normalize(header), header)

    fmt: Optional[SchemaFormat] = FORMATS_BY_NAME.get(schema)
    if fmt is not None:
        return {
            field: actual[_normalize(column)]
            for field, column in fmt.columns.items()
            if _normalize(column) in actual
        }

    columns = {}
    for field, synonyms in GENERIC_SYNONYMS.items():
        for synonym in synonyms:
            if synonym in actual and actual[synonym] not in columns.values():
                columns[field] = actual[synonym]
                break
    return columns
