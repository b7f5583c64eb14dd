"""
PDF page counting and rasterization.

Pages are counted with pypdf and rendered one at a time through pdf2image
(poppler), so only the page being recognized is held in memory.
"""

from __future__ import annotations

import io
import logging

from pdf2image import convert_from_bytes
from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError
from PIL import Image
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from legalocr.config.settings import PDF_BASE_DPI, PDF_RENDER_SCALE
from legalocr.core.exceptions import RenderFailureError

logger = logging.getLogger(__name__)

MIN_RENDER_SCALE = 2.0


class PdfRenderer:
    """
    Rasterizes PDF pages for OCR.

    Args:
      scale: Upscale factor over the PDF's 72 dpi user space (>= 2.0).
    """

    def __init__(self, scale: float = PDF_RENDER_SCALE) -> None:
        if scale < MIN_RENDER_SCALE:
            raise ValueError(f"PDF render scale must be >= {MIN_RENDER_SCALE}, got {scale}")
        self.scale = scale

    @property
    def dpi(self) -> int:
        return int(PDF_BASE_DPI * self.scale)

    def page_count(self, data: bytes) -> int:
        try:
            return len(PdfReader(io.BytesIO(data)).pages)
        except (PdfReadError, ValueError, OSError) as e:
            raise RenderFailureError(None, str(e)) from e

    def render_page(self, data: bytes, page_number: int) -> Image.Image:
        """
        Render one 1-based page.

        Raises:
          RenderFailureError: The page could not be rasterized.
        """
        try:
            images = convert_from_bytes(
                data, dpi=self.dpi, first_page=page_number, last_page=page_number
            )
        except (
            PDFInfoNotInstalledError,
            PDFPageCountError,
            PDFSyntaxError,
            OSError,
            ValueError,
        ) as e:
            logger.error(
                "PDF page render failed: %s", e, extra={"page": page_number}
            )
            raise RenderFailureError(page_number, str(e)) from e

        if not images:
            raise RenderFailureError(page_number, "renderer returned no image")
        return images[0]
