"""Bulk import reconciliation against the catalog."""
import asyncio
from dataclasses import dataclass, field
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mtg_catalog.core.config import settings
from mtg_catalog.core.constants import Finish, MatchStatus
from mtg_catalog.core.exceptions import UpstreamUnavailable
from mtg_catalog.repositories.price_repo import PriceRepository
from mtg_catalog.services.catalog import CatalogService
from mtg_catalog.services.imports.formats import FORMATS_BY_NAME, GENERIC_SCHEMA, detect_schema
from mtg_catalog.services.imports.parser import ImportRow, ParsedFile, parse_rows, parse_text_list, read_csv
from mtg_catalog.services.imports.queue import RateLimitedWorkQueue

logger = structlog.get_logger()


@dataclass
class ImportResult:
    """Outcome of one import batch."""
    schema: str
    rows: list[ImportRow] = field(default_factory=list)
    total: int = 0
    dropped: int = 0
    abandoned: bool = False

    @property
    def matched(self) -> int:
        return sum(1 for row in self.rows if row.status == MatchStatus.MATCHED)

    @property
    def needs_review(self) -> int:
        return sum(1 for row in self.rows if row.status == MatchStatus.NEEDS_REVIEW)

    @property
    def pending(self) -> int:
        """Rows never resolved because the batch was abandoned."""
        return self.total - self.dropped - len(self.rows)


class ImportService:
    """
    Resolves import rows against the catalog.

    Lookups run through a RateLimitedWorkQueue. Each lookup is bounded by
    a timeout; any per-row failure marks that row ``needs_review`` and the
    batch carries on.
    """

    def __init__(
        self,
        db: AsyncSession,
        *,
        lookup_timeout: Optional[float] = None,
        inter_row_delay_ms: Optional[int] = None,
        concurrency: Optional[int] = None,
        fuzzy_threshold: Optional[float] = None,
    ):
        self.db = db
        self.catalog = CatalogService(db)
        self.prices = PriceRepository(db)
        self.lookup_timeout = (
            settings.import_lookup_timeout_seconds if lookup_timeout is None else lookup_timeout
        )
        self.inter_row_delay_ms = (
            settings.import_inter_row_delay_ms if inter_row_delay_ms is None else inter_row_delay_ms
        )
        self.concurrency = settings.import_concurrency if concurrency is None else concurrency
        self.fuzzy_threshold = (
            settings.import_fuzzy_threshold if fuzzy_threshold is None else fuzzy_threshold
        )
        # Lookups share one session, which does not allow concurrent use
        self._db_lock = asyncio.Lock()

    async def _lookup(self, row: ImportRow) -> ImportRow:
        async with self._db_lock:
            printing, confidence = await self.catalog.find_best_match(
                row.name,
                set_code=row.set_code or (row.set_name if row.has_known_set else None),
                set_name=row.set_name if row.has_known_set else None,
                collector_number=row.collector_number,
                fuzzy_threshold=self.fuzzy_threshold,
            )
            if printing is None:
                row.status = MatchStatus.NEEDS_REVIEW
                row.match_error = "No catalog match"
                return row

            latest = await self.prices.get_latest([printing.id])

        prices = latest.get(printing.id, {})
        market = prices.get(row.finish.value) or prices.get(Finish.NONFOIL.value)

        row.status = MatchStatus.MATCHED
        row.catalog_entry_id = printing.catalog_entry_id
        row.printing_id = printing.id
        row.source_id = printing.source_id
        row.image_url = printing.image_url
        row.market_price = market.price if market else None
        row.match_confidence = confidence
        row.match_error = None
        return row

    async def _reset_session(self) -> None:
        """
        Roll back after a failed or cancelled query.

        PostgreSQL refuses every later statement in an aborted transaction,
        and lookups only read, so nothing is lost.
        """
        async with self._db_lock:
            try:
                await self.db.rollback()
            except SQLAlchemyError as e:
                logger.error("Import session rollback failed", error=str(e))

    async def resolve(self, row: ImportRow) -> ImportRow:
        """
        Match one row to a printing; never raises for lookup failures.
        """
        try:
            return await asyncio.wait_for(self._lookup(row), timeout=self.lookup_timeout)
        except asyncio.TimeoutError:
            error = f"Catalog lookup timed out after {self.lookup_timeout}s"
            await self._reset_session()
        except UpstreamUnavailable as e:
            error = f"Catalog unavailable: {e.message}"
        except SQLAlchemyError as e:
            error = f"Catalog lookup failed: {type(e).__name__}"
            await self._reset_session()

        logger.warning("Import row unresolved", row=row.row_number, name=row.name, error=error)
        row.status = MatchStatus.NEEDS_REVIEW
        row.match_error = error
        return row

    async def _resolve_all(
        self,
        parsed: ParsedFile,
        schema: str,
        abandon: Optional[asyncio.Event],
    ) -> ImportResult:
        queue = RateLimitedWorkQueue(
            self.resolve,
            concurrency=self.concurrency,
            delay_seconds=self.inter_row_delay_ms / 1000,
        )
        outcome = await queue.run(parsed.rows, abandon=abandon)

        result = ImportResult(
            schema=schema,
            rows=outcome.results,
            total=parsed.total_rows,
            dropped=parsed.dropped,
            abandoned=outcome.abandoned,
        )
        logger.info(
            "Import batch finished",
            schema=schema,
            total=result.total,
            matched=result.matched,
            needs_review=result.needs_review,
            dropped=result.dropped,
            abandoned=result.abandoned,
        )
        return result

    async def import_batch(
        self,
        content: str,
        schema_hint: Optional[str] = None,
        abandon: Optional[asyncio.Event] = None,
    ) -> ImportResult:
        """
        Parse, normalize and resolve a CSV export.

        Args:
            content: CSV text
            schema_hint: Known format name; ignored unless it names a known
                format or ``"generic"``
            abandon: Set to stop after the current row

        Returns:
            ImportResult with the rows resolved so far

        Raises:
            ValidationError: Empty file or missing header row
        """
        headers, records = read_csv(content)

        hint = (schema_hint or "").strip().lower()
        if hint in FORMATS_BY_NAME or hint == GENERIC_SCHEMA:
            schema = hint
        else:
            if hint:
                logger.warning("Unknown import schema hint", schema_hint=schema_hint)
            schema = detect_schema(headers)

        parsed = parse_rows(headers, records, schema)
        return await self._resolve_all(parsed, schema, abandon)

    async def import_text(
        self,
        text: str,
        abandon: Optional[asyncio.Event] = None,
    ) -> ImportResult:
        """Resolve a pasted card list (``4x Lightning Bolt (M10)``)."""
        parsed = parse_text_list(text)
        return await self._resolve_all(parsed, "text", abandon)
