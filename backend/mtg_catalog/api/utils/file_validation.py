"""
File content validation utilities.

Validates uploaded import files beyond just extension/content-type,
including magic byte detection, size and encoding.
"""
import csv
import io
from typing import Tuple

import structlog

logger = structlog.get_logger()

ALLOWED_CONTENT_TYPES = frozenset({
    "text/csv",
    "text/plain",
    "application/csv",
    "application/vnd.ms-excel",
})

# Magic bytes for common file types we want to REJECT
DANGEROUS_MAGIC_BYTES = {
    b"MZ": "Windows executable",
    b"\x7fELF": "Linux executable",
    b"PK\x03\x04": "ZIP archive (could contain executables)",
    b"\x89PNG": "PNG image",
    b"\xff\xd8\xff": "JPEG image",
    b"%PDF": "PDF document",
    b"\x1f\x8b": "GZIP archive",
}


def detect_dangerous_content(content: bytes) -> Tuple[bool, str]:
    """
    Check if content appears to be a binary file type.

    Returns:
        Tuple of (is_dangerous, reason)
    """
    for magic, file_type in DANGEROUS_MAGIC_BYTES.items():
        if content.startswith(magic):
            return True, f"File appears to be {file_type}"
    return False, ""


def validate_csv_header(content: str, max_columns: int = 50) -> Tuple[bool, str]:
    """
    Check that decoded content has a usable CSV header row.

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        header = next(csv.reader(io.StringIO(content)), None)
    except csv.Error as e:
        return False, f"Invalid CSV format: {e}"
    if not header or not any(h.strip() for h in header):
        return False, "CSV file has no header row"
    if len(header) > max_columns:
        return False, f"Too many columns ({len(header)} > {max_columns})"
    return True, ""


def decode_import_file(content: bytes, max_bytes: int) -> Tuple[str, str]:
    """
    Validate and decode an uploaded CSV.

    Checks:
    1. Size limit
    2. Not a binary file type (magic bytes)
    3. Valid UTF-8, with or without a byte order mark
    4. A CSV header row

    Returns:
        Tuple of (decoded_text, error_message); the text is empty on error
    """
    if len(content) > max_bytes:
        return "", f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB"

    is_dangerous, reason = detect_dangerous_content(content)
    if is_dangerous:
        logger.warning("Rejected binary file upload", reason=reason)
        return "", reason

    try:
        decoded = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return "", "File must be UTF-8 encoded"

    is_valid, error = validate_csv_header(decoded)
    if not is_valid:
        return "", error
    return decoded, ""
