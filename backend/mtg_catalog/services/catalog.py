"""
Catalog store service.

Idempotent upserts for card identities and printings, plus the catalog
lookups used by search and bulk import. Writes are keyed upserts, so
re-applying the same payload overwrites every field and never creates a
duplicate, and concurrent syncs of one key leave the last write standing.
"""
from typing import Optional, Sequence

import structlog
from rapidfuzz import fuzz, process
from sqlalchemy.ext.asyncio import AsyncSession

from mtg_catalog.core.constants import Finish
from mtg_catalog.core.exceptions import NotFoundError, ValidationError
from mtg_catalog.models.catalog_entry import CatalogEntry
from mtg_catalog.models.printing import Printing
from mtg_catalog.repositories.catalog_repo import CatalogRepository, PrintingRepository
from mtg_catalog.schemas.catalog import CatalogEntryUpsert, PrintingUpsert
from mtg_catalog.services.treatment import classify_treatment

logger = structlog.get_logger()

VALID_FINISHES = frozenset(f.value for f in Finish)


def _require(value: Optional[str], field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value.strip()


def _validate_finishes(finishes: Sequence[str]) -> frozenset[str]:
    normalized = frozenset(f.strip().lower() for f in finishes)
    if not normalized:
        raise ValidationError("At least one finish must be available", field="finishes")
    unknown = normalized - VALID_FINISHES
    if unknown:
        raise ValidationError(
            f"Unknown finish: {', '.join(sorted(unknown))}",
            field="finishes",
        )
    return normalized


class CatalogService:
    """
    Reference catalog of card identities and their printings.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.entries = CatalogRepository(db)
        self.printings = PrintingRepository(db)

    async def upsert_catalog_entry(self, entry: CatalogEntryUpsert) -> CatalogEntry:
        """
        Create or overwrite a card identity keyed by ``identity_key``.

        Raises:
            ValidationError: Missing identity key or name
        """
        identity_key = _require(entry.identity_key, "identity_key")
        name = _require(entry.name, "name")

        values = {
            "identity_key": identity_key,
            "name": name,
            "mana_cost": entry.mana_cost,
            "mana_value": entry.mana_value,
            "type_line": entry.type_line,
            "oracle_text": entry.oracle_text,
            "power": entry.power,
            "toughness": entry.toughness,
            "colors": frozenset(c.upper() for c in entry.colors),
            "color_identity": frozenset(c.upper() for c in entry.color_identity),
            "keywords": frozenset(entry.keywords),
            "legalities": dict(entry.legalities),
            "is_reserved": entry.is_reserved,
        }

        result = await self.entries.upsert(("identity_key",), values)
        logger.debug("Catalog entry upserted", identity_key=identity_key, name=name)
        return result

    async def upsert_printing(self, printing: PrintingUpsert) -> Printing:
        """
        Create or overwrite a printing keyed by (owning entry, source id).

        The treatment columns are recomputed from the payload on every call.

        Raises:
            ValidationError: Missing keys, empty or unknown finishes
            NotFoundError: The owning catalog entry does not exist
        """
        identity_key = _require(printing.identity_key, "identity_key")
        source_id = _require(printing.source_id, "source_id")
        set_code = _require(printing.set_code, "set_code").lower()
        collector_number = _require(printing.collector_number, "collector_number")
        finishes = _validate_finishes(printing.finishes)

        entry = await self.entries.get_by_identity_key(identity_key)
        if entry is None:
            raise NotFoundError(
                f"Catalog entry {identity_key} not found",
                identity_key=identity_key,
            )

        frame_effects = frozenset(printing.frame_effects)
        promo_types = frozenset(printing.promo_types)
        treatment = classify_treatment(
            printing.frame_version,
            frame_effects,
            printing.border_color,
            promo_types,
            set_code,
        )

        values = {
            "catalog_entry_id": entry.id,
            "source_id": source_id,
            "set_code": set_code,
            "set_name": printing.set_name,
            "collector_number": collector_number,
            "rarity": printing.rarity.lower() if printing.rarity else None,
            "artist": printing.artist,
            "flavor_text": printing.flavor_text,
            "released_at": printing.released_at,
            "image_small": printing.image_small,
            "image_normal": printing.image_normal,
            "image_large": printing.image_large,
            "image_art_crop": printing.image_art_crop,
            "back_image": printing.back_image,
            "frame_version": printing.frame_version,
            "frame_effects": frame_effects,
            "border_color": printing.border_color,
            "promo_types": promo_types,
            "security_stamp": printing.security_stamp,
            "finishes": finishes,
            "is_oversized": printing.is_oversized,
            "is_full_art": printing.is_full_art,
            "is_textless": printing.is_textless,
            "is_promo": printing.is_promo,
            **treatment.as_columns(),
        }

        return await self.printings.upsert(("catalog_entry_id", "source_id"), values)

    async def get_entry(self, identity_key: str) -> CatalogEntry:
        entry = await self.entries.get_by_identity_key(identity_key)
        if entry is None:
            raise NotFoundError(f"Catalog entry {identity_key} not found", identity_key=identity_key)
        return entry

    async def find_by_name(self, substring: str, limit: int = 50) -> Sequence[CatalogEntry]:
        """Entries whose name contains ``substring``, ordered by name."""
        if not substring or not substring.strip():
            raise ValidationError("Name query is required", field="name")
        return await self.entries.find_by_name(substring.strip(), limit=limit)

    async def get_printing(self, printing_id: int) -> Printing:
        """
        Raises:
            NotFoundError: Unknown printing id
        """
        printing = await self.printings.get_by_id(printing_id)
        if printing is None:
            raise NotFoundError(f"Printing {printing_id} not found", printing_id=printing_id)
        return printing

    async def get_printing_by_source_id(self, source_id: str) -> Optional[Printing]:
        return await self.printings.get_by_source_id(source_id)

    async def list_printings_for_entry(self, identity_key: str) -> Sequence[Printing]:
        """Printings of an entry, newest release first; empty for unknown keys."""
        entry = await self.entries.get_by_identity_key(identity_key)
        if entry is None:
            return []
        return await self.printings.list_for_entry(entry.id)

    async def find_best_match(
        self,
        name: str,
        *,
        set_code: Optional[str] = None,
        set_name: Optional[str] = None,
        collector_number: Optional[str] = None,
        fuzzy_threshold: Optional[float] = None,
    ) -> tuple[Optional[Printing], float]:
        """
        Resolve an imported card description to a printing.

        Tries, in order:
        1. Set code + collector number (exact printing)
        2. Name scoped to the set (by code or set name), newest first
        3. Exact name, newest printing
        4. Fuzzy name match at or above ``fuzzy_threshold`` (0-100)

        Returns:
            (printing, confidence); confidence is 1.0 for exact matches and
            the fuzzy score scaled to 0-1 otherwise. (None, 0.0) when nothing
            matches.
        """
        if set_code and collector_number:
            printing = await self.printings.find_by_set_and_number(set_code, collector_number)
            if printing:
                return printing, 1.0

        if set_code or set_name:
            printing = await self.printings.find_newest_by_name(
                name, set_code=set_code, set_name=set_name
            )
            if printing:
                return printing, 1.0

        printing = await self.printings.find_newest_by_name(name)
        if printing:
            return printing, 1.0

        if fuzzy_threshold is None:
            return None, 0.0

        candidates = await self.entries.list_names()
        if not candidates:
            return None, 0.0

        best = process.extractOne(
            name,
            {entry_id: entry_name for entry_id, entry_name in candidates},
            scorer=fuzz.WRatio,
            processor=str.lower,
            score_cutoff=fuzzy_threshold,
        )
        if best is None:
            return None, 0.0

        matched_name, score, entry_id = best
        printings = await self.printings.list_for_entry(entry_id)
        if not printings:
            return None, 0.0

        logger.debug("Fuzzy catalog match", query=name, matched=matched_name, score=score)
        return printings[0], round(score / 100, 4)
