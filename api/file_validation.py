"""File upload validation utilities.

This module contains async validation logic for file uploads,
including size checks, content type verification, and magic byte detection.
"""

import logging

from fastapi import UploadFile

from core.settings import app_settings
from legalocr.config.constants import ALLOWED_CONTENT_TYPES
from legalocr.core.exceptions import (
    PayloadTooLargeError,
    UnsupportedFileTypeError,
    ValidationError,
)
from legalocr.utils.file_detection import HEADER_SIZE, detect_file_type_from_bytes

logger = logging.getLogger(__name__)


def _validate_file_size(size: int, max_size_mb: int) -> None:
    if size == 0:
        raise ValidationError(
            message="File is empty (0 bytes)",
            field="file",
            details={"file_size": 0},
        )

    if size > max_size_mb * 1024 * 1024:
        raise PayloadTooLargeError(
            max_size_mb=max_size_mb,
            actual_size_mb=size / (1024 * 1024),
        )


async def read_upload_file(file: UploadFile, max_size_mb: int | None = None) -> bytes:
    """Validate an uploaded file and return its bytes.

    Args:
        file: FastAPI UploadFile object
        max_size_mb: Size limit; defaults to MAX_FILE_SIZE_MB

    Raises:
        ValidationError: Content type not allowed or file empty
        PayloadTooLargeError: File exceeds size limit
        UnsupportedFileTypeError: Magic bytes match no supported format
    """
    max_size_mb = max_size_mb or app_settings.MAX_FILE_SIZE_MB

    if file.content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(
            message=f"Invalid content type: {file.content_type}",
            field="file",
            details={"allowed_types": sorted(ALLOWED_CONTENT_TYPES)},
        )

    data = await file.read()
    _validate_file_size(len(data), max_size_mb)

    result = detect_file_type_from_bytes(data[:HEADER_SIZE])
    if result is None:
        raise UnsupportedFileTypeError(
            filename=file.filename, magic_bytes=data[:HEADER_SIZE].hex()
        )

    detected_type, expected_content_type = result

    if file.content_type != expected_content_type:
        logger.warning(
            "Content-Type mismatch: header=%s detected=%s",
            file.content_type,
            expected_content_type,
        )

    logger.info(
        "File validated: type=%s size=%d content_type=%s",
        detected_type,
        len(data),
        file.content_type,
    )
    return data
