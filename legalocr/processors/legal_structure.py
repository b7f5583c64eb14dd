"""
Entity and structure extraction for Algerian legal texts.

Turns corrected OCR text into a ``StructuredPublication``: document type and
official number, title, date, issuing institution, wilaya, sector,
cross-references, articles and detected entities. Every signal that is not
found falls back to a documented default; nothing here raises on content.

Pattern knowledge lives in ``legalocr.config.patterns``; this module only
decides how the tables are applied (first family wins, collect all hits,
line-by-line scan).
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from functools import lru_cache
from typing import NamedTuple, Optional

from rapidfuzz import fuzz, process, utils

from legalocr.config.constants import (
    ARABIC_GREGORIAN_MONTHS,
    ARABIC_ORDINALS,
    FRENCH_MONTHS,
    HIJRI_MONTHS,
    SECTOR_KEYWORDS,
    WILAYAS,
)
from legalocr.config.patterns import PatternTables, default_pattern_tables
from legalocr.config.settings import (
    AMOUNT_CONFIDENCE,
    AMOUNT_CONTEXT_CHARS,
    DEFAULT_INSTITUTION,
    DEFAULT_TITLE,
    ENTITY_CONTEXT_CHARS,
    PERSON_CONFIDENCE,
    PERSON_CONTEXT_CHARS,
    REFERENCE_CONFIDENCE,
    REFERENCE_CONTEXT_CHARS,
    WILAYA_MATCH_THRESHOLD,
)
from legalocr.models.dto import (
    Article,
    DetectedEntity,
    DocumentType,
    EntityType,
    LegalReference,
    PublicationMetadata,
    ReferenceType,
    StructuredPublication,
)
from legalocr.processors.confidence import score
from legalocr.processors.script_classifier import classify
from legalocr.utils.text import (
    content_lines,
    context_window,
    is_page_marker,
    normalize_digits,
)

logger = logging.getLogger(__name__)

DATE_ENTITY_CONFIDENCE = 0.8
NUMBER_ENTITY_CONFIDENCE = 0.9
INSTITUTION_ENTITY_CONFIDENCE = 0.85
PLACE_ENTITY_CONFIDENCE = 0.7

_MONTHS: dict[str, str] = {
    **FRENCH_MONTHS,
    **ARABIC_GREGORIAN_MONTHS,
    **HIJRI_MONTHS,
}

SECTOR_PATTERNS: list[tuple[str, re.Pattern]] = [
    (
        sector,
        re.compile(
            r"(?<!\w)(?:"
            + "|".join(re.escape(keyword) for keyword in keywords)
            + r")(?!\w)",
            re.IGNORECASE,
        ),
    )
    for sector, keywords in SECTOR_KEYWORDS.items()
]

# Every spelling of a wilaya maps to the official name in the same script
WILAYA_NAMES: dict[str, str] = {}
for _code, _french, _arabic in WILAYAS:
    WILAYA_NAMES[_french] = _french
    WILAYA_NAMES[_arabic] = _arabic


class Hit(NamedTuple):
    value: str
    start: int
    end: int


def normalize_number(raw: str) -> str:
    """ASCII digits, no inner spaces, slash kept: ``"15 - 247"`` -> ``"15-247"``."""
    return re.sub(r"\s+", "", normalize_digits(raw))


def normalize_article_number(raw: str) -> str:
    value = normalize_digits(raw.strip())
    if value in ARABIC_ORDINALS:
        return ARABIC_ORDINALS[value]
    value = re.sub(r"(?i)^(\d+)\s*er\b", r"\1", value)
    return re.sub(r"\s+", " ", value).lower()


def _line_bounds(text: str, position: int) -> tuple[int, int]:
    start = text.rfind("\n", 0, position) + 1
    end = text.find("\n", position)
    return start, len(text) if end == -1 else end


def _at_line_start(text: str, position: int) -> bool:
    line_start, _ = _line_bounds(text, position)
    return not text[line_start:position].strip(" \t-–—•*")


def _overlaps(span: tuple[int, int], taken: list[tuple[int, int]]) -> bool:
    return any(span[0] < end and start < span[1] for start, end in taken)


def canonical_wilaya(name: str) -> str:
    """Snap an OCR'd wilaya name to the official spelling when close enough."""
    match = process.extractOne(
        name,
        WILAYA_NAMES.keys(),
        scorer=fuzz.WRatio,
        processor=utils.default_process,
        score_cutoff=WILAYA_MATCH_THRESHOLD,
    )
    if match is None:
        return name.strip()
    return WILAYA_NAMES[match[0]]


class LegalStructureExtractor:
    """
    Applies the pattern tables to corrected text.

    Instances are stateless apart from the compiled tables and can be shared
    between threads.
    """

    def __init__(self, tables: Optional[PatternTables] = None) -> None:
        self.tables = tables or default_pattern_tables()

    # ------------------------------------------------------------------
    # Document type, number, title
    # ------------------------------------------------------------------

    def detect_document_type(
        self, text: str
    ) -> tuple[DocumentType, Optional[re.Match]]:
        """
        Find the document type, trying heading lines before running text.

        Returns:
          (type, match) where match carries the ``number`` group, or
          (DocumentType.OTHER, None) when no family matches.
        """
        for headings_only in (True, False):
            for tag, patterns in self.tables.document_types:
                for pattern in patterns:
                    for match in pattern.finditer(text):
                        if headings_only and not _at_line_start(text, match.start()):
                            continue
                        return self._document_type(tag), match
        return DocumentType.OTHER, None

    @staticmethod
    def _document_type(tag: str) -> DocumentType:
        try:
            return DocumentType(tag)
        except ValueError:
            return DocumentType.OTHER

    def extract_title(self, text: str, type_match: Optional[re.Match]) -> str:
        """Heading line of the type match; untyped text has no title."""
        if type_match is None:
            return DEFAULT_TITLE
        start, end = _line_bounds(text, type_match.start())
        heading = text[start:end].strip()
        if heading:
            return heading
        lines = content_lines(text)
        return lines[0] if lines else DEFAULT_TITLE

    # ------------------------------------------------------------------
    # Dates
    # ------------------------------------------------------------------

    @staticmethod
    def _normalize_date(kind: str, match: re.Match) -> Optional[str]:
        try:
            day = int(normalize_digits(match.group("day")))
            year = int(normalize_digits(match.group("year")))
            raw_month = normalize_digits(match.group("month"))
        except (IndexError, ValueError):
            return None

        if raw_month.isdigit():
            month = int(raw_month)
        else:
            key = re.sub(r"\s+", " ", raw_month).lower()
            if key not in _MONTHS:
                return None
            month = int(_MONTHS[key])

        if kind == "hijri":
            if 1 <= month <= 12 and 1 <= day <= 30 and 1300 <= year <= 1600:
                return f"{year:04d}-{month:02d}-{day:02d}"
            return None

        if not 1800 <= year <= 2100:
            return None
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            return None

    def find_dates(self, text: str) -> list[Hit]:
        """All valid dates in table order, overlapping hits dropped."""
        hits: list[Hit] = []
        taken: list[tuple[int, int]] = []
        for kind, patterns in self.tables.dates:
            for pattern in patterns:
                for match in pattern.finditer(text):
                    if _overlaps(match.span(), taken):
                        continue
                    iso = self._normalize_date(kind, match)
                    if iso:
                        hits.append(Hit(iso, *match.span()))
                        taken.append(match.span())
        return hits

    def extract_date(self, text: str) -> Optional[Hit]:
        """First valid date by pattern priority (not by position)."""
        for kind, patterns in self.tables.dates:
            for pattern in patterns:
                for match in pattern.finditer(text):
                    iso = self._normalize_date(kind, match)
                    if iso:
                        return Hit(iso, *match.span())
        return None

    def _date_at_start(self, fragment: str) -> Optional[str]:
        stripped = fragment.lstrip()
        for kind, patterns in self.tables.dates:
            for pattern in patterns:
                match = pattern.match(stripped)
                if match:
                    iso = self._normalize_date(kind, match)
                    if iso:
                        return iso
        return None

    # ------------------------------------------------------------------
    # Institution, wilaya, sector
    # ------------------------------------------------------------------

    def extract_institution(self, text: str) -> Optional[Hit]:
        for pattern in self.tables.institutions:
            match = pattern.search(text)
            if match:
                return Hit(match.group(0).strip(" \t,;:"), *match.span())
        return None

    def find_institutions(self, text: str) -> list[Hit]:
        hits: list[Hit] = []
        taken: list[tuple[int, int]] = []
        for pattern in self.tables.institutions:
            for match in pattern.finditer(text):
                if not _overlaps(match.span(), taken):
                    hits.append(Hit(match.group(0).strip(" \t,;:"), *match.span()))
                    taken.append(match.span())
        return hits

    def extract_wilaya(self, text: str) -> Optional[Hit]:
        for pattern in self.tables.wilayas:
            match = pattern.search(text)
            if match:
                return Hit(canonical_wilaya(match.group("name")), *match.span("name"))
        return None

    @staticmethod
    def extract_sector(text: str) -> Optional[str]:
        for sector, pattern in SECTOR_PATTERNS:
            if pattern.search(text):
                return sector
        return None

    # ------------------------------------------------------------------
    # References and articles
    # ------------------------------------------------------------------

    def _reference_type(self, matched: str) -> ReferenceType:
        for tag, patterns in self.tables.reference_types:
            if any(pattern.search(matched) for pattern in patterns):
                try:
                    return ReferenceType(tag)
                except ValueError:
                    return ReferenceType.OTHER
        return ReferenceType.OTHER

    def _reference_date(self, text: str, end: int) -> Optional[str]:
        tail = text[end : end + 120]
        for lead in self.tables.reference_date_leads:
            match = lead.match(tail)
            if match:
                return self._date_at_start(tail[match.end() :])
        return None

    def extract_references(self, text: str) -> list[tuple[Hit, LegalReference]]:
        """
        Collect every reference hit in the text, ordered by position.

        Headings count too, the document's own and article headings included.
        Overlapping hits keep the first pattern's match.
        """
        found: list[tuple[Hit, LegalReference]] = []
        taken: list[tuple[int, int]] = []
        for pattern in self.tables.references:
            for match in pattern.finditer(text):
                if _overlaps(match.span(), taken):
                    continue
                ref_type = self._reference_type(match.group(0))
                if ref_type == ReferenceType.ARTICLE:
                    number = normalize_article_number(match.group("number"))
                else:
                    number = normalize_number(match.group("number"))
                taken.append(match.span())
                reference = LegalReference(
                    type=ref_type,
                    number=number,
                    date=self._reference_date(text, match.end()),
                    context=context_window(
                        text, match.start(), match.end(), REFERENCE_CONTEXT_CHARS
                    ),
                    confidence=REFERENCE_CONFIDENCE,
                )
                found.append((Hit(match.group(0).strip(), *match.span()), reference))
        found.sort(key=lambda item: item[0].start)
        return found

    def _article_head(self, line: str) -> Optional[re.Match]:
        for pattern in self.tables.articles:
            match = pattern.match(line)
            if match:
                return match
        return None

    def extract_articles(self, text: str) -> list[Article]:
        articles: list[Article] = []
        current: Optional[tuple[str, Optional[str]]] = None
        body: list[str] = []

        for line in text.splitlines():
            stripped = line.strip()
            head = self._article_head(stripped)
            if head:
                if current is not None:
                    articles.append(
                        Article(number=current[0], title=current[1], content=" ".join(body))
                    )
                title = (head.group("title") or "").strip() or None
                current = (normalize_article_number(head.group("number")), title)
                body = []
            elif current is not None and stripped and not is_page_marker(stripped):
                body.append(stripped)

        if current is not None:
            articles.append(
                Article(number=current[0], title=current[1], content=" ".join(body))
            )
        return articles

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    @staticmethod
    def _scan(
        text: str,
        patterns: list[re.Pattern],
        entity_type: EntityType,
        confidence: float,
        radius: int,
    ) -> list[DetectedEntity]:
        entities: list[DetectedEntity] = []
        taken: list[tuple[int, int]] = []
        for pattern in patterns:
            for match in pattern.finditer(text):
                if _overlaps(match.span(), taken):
                    continue
                taken.append(match.span())
                entities.append(
                    DetectedEntity(
                        type=entity_type,
                        value=match.group(0).strip(),
                        context=context_window(text, match.start(), match.end(), radius),
                        confidence=confidence,
                        start=match.start(),
                        end=match.end(),
                    )
                )
        return entities

    @staticmethod
    def _entities_from_hits(
        text: str, hits: list[Hit], entity_type: EntityType, confidence: float
    ) -> list[DetectedEntity]:
        return [
            DetectedEntity(
                type=entity_type,
                value=hit.value,
                context=context_window(text, hit.start, hit.end, ENTITY_CONTEXT_CHARS),
                confidence=confidence,
                start=hit.start,
                end=hit.end,
            )
            for hit in hits
        ]

    def detect_entities(self, text: str) -> list[DetectedEntity]:
        """Amounts, person-shaped names and official numbers found by regex."""
        entities = self._scan(
            text, self.tables.amounts, EntityType.AMOUNT, AMOUNT_CONFIDENCE, AMOUNT_CONTEXT_CHARS
        )
        entities += self._scan(
            text, self.tables.persons, EntityType.PERSON, PERSON_CONFIDENCE, PERSON_CONTEXT_CHARS
        )
        entities += self._scan(
            text,
            self.tables.numbers,
            EntityType.NUMBER,
            NUMBER_ENTITY_CONFIDENCE,
            ENTITY_CONTEXT_CHARS,
        )
        return entities

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------

    def structure(
        self, text: str, today: Optional[date] = None
    ) -> StructuredPublication:
        """
        Build the structured view of ``text``.

        Args:
          text: Corrected document text (page markers allowed).
          today: Day used for the date fallback; defaults to date.today().

        Returns:
          An immutable StructuredPublication whose metadata carries the
          confidence score and detected entities.
        """
        text = text or ""
        today = today or date.today()
        classification = classify(text)

        doc_type, type_match = self.detect_document_type(text)
        number = normalize_number(type_match.group("number")) if type_match else ""
        title = self.extract_title(text, type_match)

        date_hit = self.extract_date(text)
        doc_date = date_hit.value if date_hit else today.isoformat()

        institution_hit = self.extract_institution(text)
        institution = institution_hit.value if institution_hit else DEFAULT_INSTITUTION

        wilaya_hit = self.extract_wilaya(text)
        sector = self.extract_sector(text)

        reference_hits = self.extract_references(text)
        references = [reference for _, reference in reference_hits]
        articles = self.extract_articles(text)

        entities = self.detect_entities(text)
        entities += self._entities_from_hits(
            text, self.find_dates(text), EntityType.DATE, DATE_ENTITY_CONFIDENCE
        )
        entities += self._entities_from_hits(
            text,
            self.find_institutions(text),
            EntityType.INSTITUTION,
            INSTITUTION_ENTITY_CONFIDENCE,
        )
        entities += self._entities_from_hits(
            text, [hit for hit, _ in reference_hits], EntityType.REFERENCE, REFERENCE_CONFIDENCE
        )
        if wilaya_hit:
            entities += self._entities_from_hits(
                text, [wilaya_hit], EntityType.PLACE, PLACE_ENTITY_CONFIDENCE
            )
        entities.sort(key=lambda entity: (entity.start, entity.end))

        confidence = score(
            title,
            number,
            doc_date,
            institution,
            references,
            articles,
            today=today,
        )

        logger.debug(
            "Structured document type=%s number=%s date=%s refs=%d articles=%d",
            doc_type.value,
            number,
            doc_date,
            len(references),
            len(articles),
        )

        return StructuredPublication(
            title=title,
            number=number,
            date=doc_date,
            type=doc_type,
            institution=institution,
            wilaya=wilaya_hit.value if wilaya_hit else None,
            sector=sector,
            references=references,
            articles=articles,
            metadata=PublicationMetadata(
                language=classification.dominant,
                arabic_ratio=classification.arabic_ratio,
                word_count=len(text.split()),
                processing_date=datetime.now().isoformat(),
                confidence=confidence,
                entities=entities,
            ),
        )


@lru_cache(maxsize=1)
def _default_extractor() -> LegalStructureExtractor:
    return LegalStructureExtractor()


def structure(text: str, today: Optional[date] = None) -> StructuredPublication:
    """Structure ``text`` with the built-in pattern tables."""
    return _default_extractor().structure(text, today=today)
