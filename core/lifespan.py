from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from core.settings import app_settings, ocr_settings
from legalocr.clients.pdf_renderer import PdfRenderer
from legalocr.clients.tesseract_engine import EngineHandle
from legalocr.config.patterns import load_pattern_tables
from legalocr.config.schemas import load_schema_registry
from legalocr.orchestrator import PipelineRunner
from legalocr.processors.acquisition import TextAcquirer
from legalocr.processors.form_mapper import FormMapper
from legalocr.processors.legal_structure import LegalStructureExtractor
from services.processor import DocumentProcessor
from services.record_store import build_record_store

logger = logging.getLogger(__name__)


def build_processor(engine: EngineHandle) -> tuple[DocumentProcessor, FormMapper]:
    """Wire the pipeline collaborators from settings."""
    tables = load_pattern_tables(app_settings.LEGALOCR_PATTERNS_FILE)
    schemas = load_schema_registry(app_settings.LEGALOCR_SCHEMAS_FILE)
    mapper = FormMapper(
        schemas=schemas, allow_fallback=app_settings.LEGALOCR_SCHEMA_FALLBACK
    )
    acquirer = TextAcquirer(
        engine,
        renderer=PdfRenderer(scale=ocr_settings.PDF_RENDER_SCALE),
        max_pages=ocr_settings.MAX_PDF_PAGES,
        sample_min_letters=ocr_settings.OCR_SAMPLE_MIN_LETTERS,
        sample_arabic_threshold=ocr_settings.OCR_SAMPLE_ARABIC_THRESHOLD,
    )
    runner = PipelineRunner(
        acquirer=acquirer,
        extractor=LegalStructureExtractor(tables),
        mapper=mapper,
        runs_root=app_settings.runs_dir,
        save_artifacts=app_settings.LEGALOCR_SAVE_ARTIFACTS,
    )
    store = build_record_store(app_settings.RECORD_STORE_DIR)
    return DocumentProcessor(runner, store), mapper


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown tasks."""

    # Engine initialization is lazy; nothing is probed until the first request
    engine = EngineHandle(
        languages=ocr_settings.OCR_LANGUAGES,
        required_languages=ocr_settings.required_languages,
        tesseract_cmd=ocr_settings.TESSERACT_CMD,
    )
    app.state.engine = engine

    logger.info("Initializing document processor...")
    try:
        processor, mapper = build_processor(engine)
        app.state.processor = processor
        app.state.schemas = mapper.schemas
        logger.info("Document processor ready")
    except (OSError, ValueError) as e:
        logger.error(f"Document processor initialization failed: {e}", exc_info=True)
        app.state.processor = None
        app.state.schemas = None

    yield

    logger.info("Shutting down")
