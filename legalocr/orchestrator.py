from __future__ import annotations

import functools
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Optional

from legalocr.config.settings import (
    EXTRACTION_RESULT_FILE,
    MAPPING_RESULT_FILE,
    STRUCTURED_RESULT_FILE,
)
from legalocr.core.exceptions import BaseError, EngineUnavailableError
from legalocr.models.dto import (
    EntityType,
    ExtractionMetadata,
    ExtractionResult,
    MappingResult,
    RawPage,
    Script,
    ScriptClassification,
    StructuredPublication,
)
from legalocr.processors.acquisition import (
    AcquiredDocument,
    TextAcquirer,
    build_text_regions,
    join_pages,
)
from legalocr.processors.form_mapper import FormMapper
from legalocr.processors.legal_structure import LegalStructureExtractor
from legalocr.processors.script_classifier import classify, is_mixed_language
from legalocr.processors.script_corrector import correct
from legalocr.utils.io_utils import write_json
from legalocr.utils.timing import StageTimers

logger = logging.getLogger(__name__)

# Entity types exposed in the extraction's entity bag, by bag key
ENTITY_BAG_KEYS: dict[str, EntityType] = {
    "dates": EntityType.DATE,
    "numbers": EntityType.NUMBER,
    "institutions": EntityType.INSTITUTION,
    "references": EntityType.REFERENCE,
}

TEXT_FILE_TYPE = "text"
TEXT_INPUT_CONFIDENCE = 1.0  # text handed in directly was not recognized


def _generate_extraction_id() -> str:
    return str(uuid.uuid4())


@dataclass
class PipelineContext:
    extraction_id: str
    filename: str
    today: date
    user_id: Optional[str] = None
    trace_id: Optional[str] = None
    schema_name: Optional[str] = None
    timers: StageTimers = field(default_factory=StageTimers)

    # populated during run
    acquired: Optional[AcquiredDocument] = None
    classification: Optional[ScriptClassification] = None
    corrected_pages: list[RawPage] = field(default_factory=list)
    extraction: Optional[ExtractionResult] = None
    structured: Optional[StructuredPublication] = None
    mapping: Optional[MappingResult] = None

    @property
    def log_extra(self) -> dict[str, Any]:
        return {
            "trace_id": self.trace_id,
            "extraction_id": self.extraction_id,
            "user_id": self.user_id,
        }


@dataclass
class PipelineOutcome:
    extraction: ExtractionResult
    structured: StructuredPublication
    mapping: Optional[MappingResult] = None
    timings: dict[str, float] = field(default_factory=dict)


def stage(name: str) -> Callable:
    """Time a pipeline stage under ``name`` and log its duration."""

    def deco(
        fn: Callable[..., Any],
    ) -> Callable[..., Any]:
        @functools.wraps(fn)
        def wrapper(self, ctx: PipelineContext, *args: Any) -> Any:
            with ctx.timers.timer(name):
                result = fn(self, ctx, *args)
            logger.debug(
                "Stage %s done",
                name,
                extra={**ctx.log_extra, "duration_ms": round(ctx.timers.stage_ms(name), 2)},
            )
            return result

        return wrapper

    return deco


class PipelineRunner:
    """
    Runs acquisition, classification, correction, structuring and optional
    form mapping for one document.

    Args:
      acquirer: Text acquirer bound to the shared engine handle; only needed
        for file input.
      extractor: Structure extractor (built-in pattern tables by default).
      mapper: Form mapper (built-in schemas by default).
      runs_root: Directory for per-run JSON artifacts.
      save_artifacts: Write extraction/structure/mapping JSON per run.
    """

    def __init__(
        self,
        acquirer: Optional[TextAcquirer] = None,
        extractor: Optional[LegalStructureExtractor] = None,
        mapper: Optional[FormMapper] = None,
        runs_root: Optional[Path] = None,
        save_artifacts: bool = False,
    ) -> None:
        self.acquirer = acquirer
        self.extractor = extractor or LegalStructureExtractor()
        self.mapper = mapper or FormMapper()
        self.runs_root = runs_root
        self.save_artifacts = save_artifacts and runs_root is not None

    @stage("acquisition")
    def _stage_acquire(self, ctx: PipelineContext, data: bytes) -> None:
        if self.acquirer is None:
            raise EngineUnavailableError("no OCR engine configured")
        ctx.acquired = self.acquirer.extract(data, ctx.filename)

    @stage("classification")
    def _stage_classify(self, ctx: PipelineContext) -> None:
        raw_text = join_pages([page.text for page in ctx.acquired.pages])
        ctx.classification = classify(raw_text)

    @stage("correction")
    def _stage_correct(self, ctx: PipelineContext) -> None:
        ctx.corrected_pages = [
            page.model_copy(update={"text": correct(page.text)})
            for page in ctx.acquired.pages
        ]

    @stage("assembly")
    def _stage_assemble(self, ctx: PipelineContext) -> None:
        classification = ctx.classification
        regions = build_text_regions(ctx.corrected_pages)

        if regions:
            average = sum(region.confidence for region in regions) / len(regions)
            distribution = {
                script.value: round(
                    sum(1 for region in regions if region.script == script) / len(regions), 4
                )
                for script in Script
            }
        else:
            average = 0.0
            distribution = {script.value: 0.0 for script in Script}

        metadata = ExtractionMetadata(
            average_confidence=average,
            arabic_char_count=classification.arabic_count,
            latin_char_count=classification.latin_count,
            arabic_ratio=classification.arabic_ratio,
            language_distribution=distribution,
            is_mixed_language=is_mixed_language(
                classification.arabic_count, classification.latin_count
            ),
            processing_date=datetime.now().isoformat(),
            ocr_profile=ctx.acquired.profile,
        )
        ctx.extraction = ExtractionResult(
            id=ctx.extraction_id,
            original_filename=ctx.filename,
            file_type=ctx.acquired.file_type,
            total_pages=ctx.acquired.total_pages,
            extracted_text=join_pages([page.text for page in ctx.corrected_pages]),
            text_regions=regions,
            metadata=metadata,
            confidence_score=average,
            language_detected=classification.dominant,
            user_id=ctx.user_id,
        )

    @stage("structure")
    def _stage_structure(self, ctx: PipelineContext) -> None:
        ctx.structured = self.extractor.structure(ctx.extraction.extracted_text, today=ctx.today)
        enrich_extraction(ctx.extraction, ctx.structured)

    @stage("mapping")
    def _stage_map(self, ctx: PipelineContext) -> None:
        ctx.mapping = self.mapper.map_to_form(
            ctx.extraction, ctx.structured, ctx.schema_name, today=ctx.today
        )

    def _save_artifacts(self, ctx: PipelineContext) -> None:
        base_dir = self.runs_root / ctx.today.isoformat() / ctx.extraction_id
        write_json(base_dir / EXTRACTION_RESULT_FILE, ctx.extraction.model_dump(mode="json"))
        write_json(base_dir / STRUCTURED_RESULT_FILE, ctx.structured.model_dump(mode="json"))
        if ctx.mapping is not None:
            write_json(base_dir / MAPPING_RESULT_FILE, ctx.mapping.model_dump(mode="json"))

    def _execute(self, ctx: PipelineContext, data: Optional[bytes]) -> PipelineOutcome:
        try:
            if data is not None:
                self._stage_acquire(ctx, data)
            self._stage_classify(ctx)
            self._stage_correct(ctx)
            self._stage_assemble(ctx)
            self._stage_structure(ctx)
            if ctx.schema_name:
                self._stage_map(ctx)
        except BaseError as e:
            logger.error(
                "Pipeline failed: %s - %s",
                e.error_code,
                e.message,
                extra={**ctx.log_extra, "error_code": e.error_code},
            )
            raise

        ctx.extraction.metadata.processing_time_ms = round(ctx.timers.elapsed_ms(), 2)
        if self.save_artifacts:
            self._save_artifacts(ctx)

        logger.info(
            "Pipeline completed: %d pages, confidence=%.4f",
            ctx.extraction.total_pages,
            ctx.structured.metadata.confidence,
            extra={
                **ctx.log_extra,
                "pages": ctx.extraction.total_pages,
                "profile": ctx.extraction.metadata.ocr_profile,
                "schema": ctx.schema_name,
                "duration_ms": ctx.extraction.metadata.processing_time_ms,
            },
        )
        return PipelineOutcome(
            extraction=ctx.extraction,
            structured=ctx.structured,
            mapping=ctx.mapping,
            timings=dict(ctx.timers.totals),
        )

    def run(
        self,
        data: bytes,
        filename: str,
        schema_name: Optional[str] = None,
        user_id: Optional[str] = None,
        trace_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> PipelineOutcome:
        """
        Run the full pipeline over an image or PDF.

        Raises:
          UnsupportedFileTypeError, TooManyPagesError, EngineUnavailableError,
          RenderFailureError: acquisition failed; nothing is returned.
          UnknownSchemaError: ``schema_name`` is not registered.
        """
        ctx = PipelineContext(
            extraction_id=_generate_extraction_id(),
            filename=filename,
            today=today or date.today(),
            user_id=user_id,
            trace_id=trace_id,
            schema_name=schema_name,
        )
        return self._execute(ctx, data)

    def run_text(
        self,
        text: str,
        filename: str = TEXT_FILE_TYPE,
        schema_name: Optional[str] = None,
        user_id: Optional[str] = None,
        trace_id: Optional[str] = None,
        today: Optional[date] = None,
    ) -> PipelineOutcome:
        """Run every stage after acquisition over text supplied directly."""
        ctx = PipelineContext(
            extraction_id=_generate_extraction_id(),
            filename=filename,
            today=today or date.today(),
            user_id=user_id,
            trace_id=trace_id,
            schema_name=schema_name,
        )
        ctx.acquired = AcquiredDocument(
            file_type=TEXT_FILE_TYPE,
            mime_type="text/plain",
            profile="none",
            pages=[RawPage(page_number=1, text=text, confidence=TEXT_INPUT_CONFIDENCE)],
        )
        return self._execute(ctx, None)

    def map_extraction(
        self,
        extraction: ExtractionResult,
        schema_name: str,
        today: Optional[date] = None,
    ) -> tuple[StructuredPublication, MappingResult]:
        """Re-structure a stored extraction and map it onto another schema."""
        today = today or date.today()
        structured = self.extractor.structure(extraction.extracted_text, today=today)
        mapping = self.mapper.map_to_form(extraction, structured, schema_name, today=today)
        return structured, mapping


def enrich_extraction(
    extraction: ExtractionResult, structured: StructuredPublication
) -> None:
    """Copy the entity bag and document type onto the extraction metadata."""
    bag: dict[str, list[dict]] = {key: [] for key in ENTITY_BAG_KEYS}
    for key, entity_type in ENTITY_BAG_KEYS.items():
        for entity in structured.metadata.entities:
            if entity.type == entity_type:
                bag[key].append({"value": entity.value, "confidence": entity.confidence})
    extraction.metadata.detected_entities = bag
    extraction.metadata.document_type = structured.type
