"""
Text acquisition: bytes in, recognized pages out.

The input type is detected from magic bytes. PDFs are rendered and recognized
page by page, strictly in order; images are recognized frame by frame. A quick
sample pass over the first page picks the recognition profile (Arabic or
Latin) used for the whole document.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from PIL import Image

from legalocr.clients.pdf_renderer import PdfRenderer
from legalocr.clients.tesseract_engine import (
    ARABIC_PROFILE,
    LATIN_PROFILE,
    SAMPLE_PROFILE,
    EngineHandle,
    OcrProfile,
)
from legalocr.config.settings import (
    MAX_PDF_PAGES,
    PAGE_MARKER_TEMPLATE,
    SAMPLE_ARABIC_THRESHOLD,
    SAMPLE_MIN_LETTERS,
)
from legalocr.core.exceptions import TooManyPagesError, UnsupportedFileTypeError
from legalocr.models.dto import BoundingBox, RawPage, TextRegion
from legalocr.processors.image_loader import load_frames
from legalocr.processors.script_classifier import line_script
from legalocr.utils.file_detection import (
    HEADER_SIZE,
    detect_file_type_from_bytes,
    is_pdf,
)
from legalocr.utils.text import count_arabic, count_latin

logger = logging.getLogger(__name__)

REGION_LINE_HEIGHT = 30  # placeholder geometry, engine boxes are not carried


@dataclass
class AcquiredDocument:
    file_type: str
    mime_type: str
    profile: str
    pages: list[RawPage] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return len(self.pages)


def join_pages(texts: list[str]) -> str:
    """Join page texts, inserting a marker before every page after the first."""
    parts: list[str] = []
    for index, text in enumerate(texts, start=1):
        if index > 1:
            parts.append(PAGE_MARKER_TEMPLATE.format(page=index))
        parts.append(text)
    return "".join(parts)


def build_text_regions(pages: list[RawPage]) -> list[TextRegion]:
    """One region per non-blank line, tagged with its script and page confidence."""
    regions: list[TextRegion] = []
    for page in pages:
        lines = [line.strip() for line in page.text.splitlines() if line.strip()]
        for line_index, line in enumerate(lines):
            regions.append(
                TextRegion(
                    text=line,
                    confidence=page.confidence,
                    script=line_script(line),
                    page_number=page.page_number,
                    bounding_box=BoundingBox(
                        x=0,
                        y=line_index * REGION_LINE_HEIGHT,
                        width=0,
                        height=REGION_LINE_HEIGHT,
                    ),
                )
            )
    return regions


class TextAcquirer:
    """
    Drives the OCR engine over one document.

    Args:
      engine: Shared engine handle.
      renderer: PDF rasterizer.
      max_pages: PDFs with more pages are rejected.
      sample_min_letters: Samples with fewer letters select the Latin profile.
      sample_arabic_threshold: Sample Arabic ratio above which the Arabic
        profile is selected.
    """

    def __init__(
        self,
        engine: EngineHandle,
        renderer: Optional[PdfRenderer] = None,
        max_pages: int = MAX_PDF_PAGES,
        sample_min_letters: int = SAMPLE_MIN_LETTERS,
        sample_arabic_threshold: float = SAMPLE_ARABIC_THRESHOLD,
    ) -> None:
        self.engine = engine
        self.renderer = renderer or PdfRenderer()
        self.max_pages = max_pages
        self.sample_min_letters = sample_min_letters
        self.sample_arabic_threshold = sample_arabic_threshold

    def choose_profile(self, sample_text: str) -> OcrProfile:
        arabic = count_arabic(sample_text)
        letters = arabic + count_latin(sample_text)
        if letters < self.sample_min_letters:
            return LATIN_PROFILE
        if arabic / letters <= self.sample_arabic_threshold:
            return LATIN_PROFILE
        return ARABIC_PROFILE

    def _sample(self, image: Image.Image) -> OcrProfile:
        sample = self.engine.recognize(image, SAMPLE_PROFILE)
        profile = self.choose_profile(sample.text)
        logger.debug(
            "Sample pass selected %s profile", profile.name, extra={"profile": profile.name}
        )
        return profile

    def _pdf_pages(
        self, data: bytes, page_count: int
    ) -> Iterator[tuple[int, Image.Image]]:
        for page_number in range(1, page_count + 1):
            yield page_number, self.renderer.render_page(data, page_number)

    def extract(self, data: bytes, filename: str) -> AcquiredDocument:
        """
        Recognize every page of ``data``.

        Args:
          data: Raw file bytes (PDF or image).
          filename: Original filename, for diagnostics only.

        Returns:
          AcquiredDocument with one RawPage per page, in page order.

        Raises:
          UnsupportedFileTypeError: Bytes are neither a PDF nor a known image.
          TooManyPagesError: PDF exceeds the page limit.
          EngineUnavailableError: The engine cannot be initialized.
          RenderFailureError: A PDF page could not be rendered.
        """
        detected = detect_file_type_from_bytes(data[:HEADER_SIZE])
        if detected is None:
            raise UnsupportedFileTypeError(
                filename=filename, magic_bytes=data[:HEADER_SIZE].hex()
            )
        file_type, mime_type = detected

        if is_pdf(file_type):
            page_count = self.renderer.page_count(data)
            if page_count > self.max_pages:
                raise TooManyPagesError(page_count, self.max_pages)
            images: Iterator[tuple[int, Image.Image]] = self._pdf_pages(data, page_count)
        else:
            images = enumerate(load_frames(data, filename), start=1)

        # Fail fast on a broken engine before any rendering work
        self.engine.ensure_ready()

        pages: list[RawPage] = []
        profile: Optional[OcrProfile] = None
        for page_number, image in images:
            if profile is None:
                profile = self._sample(image)
            result = self.engine.recognize(image, profile)
            pages.append(
                RawPage(
                    page_number=page_number,
                    text=result.text,
                    confidence=result.confidence,
                )
            )
            logger.debug(
                "Recognized page %d (%d chars)",
                page_number,
                len(result.text),
                extra={"page": page_number, "profile": profile.name},
            )

        profile_name = profile.name if profile else "none"
        logger.info(
            "Acquired %d pages from %s",
            len(pages),
            file_type,
            extra={
                "filename": filename,
                "file_type": file_type,
                "pages": len(pages),
                "profile": profile_name,
            },
        )
        return AcquiredDocument(
            file_type=file_type, mime_type=mime_type, profile=profile_name, pages=pages
        )
