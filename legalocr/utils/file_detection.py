"""
Centralized file type detection using magic bytes.

Every entry point (upload validation, text acquisition) detects the input type
here; declared content types and filename extensions are never trusted.

Magic bytes reference:
- PDF:  %PDF
- JPEG: 0xFFD8FF
- PNG:  0x89504E47 (89 P N G)
- TIFF: 0x49492A00 (little-endian) or 0x4D4D002A (big-endian)
- BMP:  BM
- WEBP: RIFF....WEBP
"""

from typing import Final, Literal, Optional

FileType = Literal["pdf", "jpeg", "png", "tiff", "bmp", "webp"]
MimeType = Literal[
    "application/pdf",
    "image/jpeg",
    "image/png",
    "image/tiff",
    "image/bmp",
    "image/webp",
]

HEADER_SIZE: Final = 12

MAGIC_BYTES_MAP: Final[dict[bytes, tuple[FileType, MimeType]]] = {
    b"%PDF": ("pdf", "application/pdf"),
    b"\xff\xd8\xff": ("jpeg", "image/jpeg"),
    b"\x89PNG": ("png", "image/png"),
    b"\x49\x49\x2a\x00": ("tiff", "image/tiff"),
    b"\x4d\x4d\x00\x2a": ("tiff", "image/tiff"),
    b"BM": ("bmp", "image/bmp"),
}


def detect_file_type_from_bytes(
    header: bytes,
) -> Optional[tuple[FileType, MimeType]]:
    """
    Detect file type from magic bytes header.

    Args:
        header: First 12+ bytes of file

    Returns:
        Tuple of (file_type, mime_type) or None if unrecognized

    Example:
        >>> detect_file_type_from_bytes(b'%PDF-1.4')
        ('pdf', 'application/pdf')
    """
    if header[:4] == b"RIFF" and header[8:12] == b"WEBP":
        return ("webp", "image/webp")
    for signature, result in MAGIC_BYTES_MAP.items():
        if header.startswith(signature):
            return result
    return None


def is_pdf(file_type: str) -> bool:
    return file_type == "pdf"
