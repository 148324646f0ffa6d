"""
Shared utility functions for API routes.
"""
from mtg_catalog.api.utils.file_validation import (
    ALLOWED_CONTENT_TYPES,
    decode_import_file,
    detect_dangerous_content,
)

__all__ = [
    "ALLOWED_CONTENT_TYPES",
    "decode_import_file",
    "detect_dangerous_content",
]
