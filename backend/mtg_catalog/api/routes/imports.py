"""API routes for bulk collection imports."""
from typing import Annotated, Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from mtg_catalog.api.deps import get_import_service
from mtg_catalog.api.utils.file_validation import ALLOWED_CONTENT_TYPES, decode_import_file
from mtg_catalog.core.config import settings
from mtg_catalog.schemas.imports import (
    DetectRequest,
    DetectResponse,
    ImportResponse,
    SchemaScoreResponse,
    TextImportRequest,
)
from mtg_catalog.services.imports import ImportService
from mtg_catalog.services.imports.formats import detect_schema, score_schemas

router = APIRouter()
logger = structlog.get_logger()

Importer = Annotated[ImportService, Depends(get_import_service)]


@router.post("", response_model=ImportResponse)
async def import_file(
    importer: Importer,
    file: UploadFile = File(...),
    schema_hint: Optional[str] = Form(None),
) -> ImportResponse:
    """
    Import a collection CSV export.

    The export format is detected from the header row unless
    ``schema_hint`` names a known format. Rows that cannot be matched are
    returned with ``needs_review`` status.
    """
    # Validate file extension
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are supported",
        )

    # Validate content type (MIME type)
    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file type. Expected CSV, got {file.content_type}",
        )

    content = await file.read()
    decoded, error = decode_import_file(content, settings.import_max_file_bytes)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    logger.info("Import upload received", filename=file.filename, size=len(content))
    result = await importer.import_batch(decoded, schema_hint=schema_hint)
    return ImportResponse.from_result(result)


@router.post("/text", response_model=ImportResponse)
async def import_text(payload: TextImportRequest, importer: Importer) -> ImportResponse:
    """Import a pasted card list, one card per line (``4x Lightning Bolt (M10)``)."""
    result = await importer.import_text(payload.text)
    return ImportResponse.from_result(result)


@router.post("/detect", response_model=DetectResponse)
async def detect_format(payload: DetectRequest) -> DetectResponse:
    """Classify a header row without importing anything."""
    return DetectResponse(
        schema_name=detect_schema(payload.headers),
        scores=[SchemaScoreResponse.from_score(s) for s in score_schemas(payload.headers)],
    )
