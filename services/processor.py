"""Wrapper around the pipeline orchestrator for FastAPI."""

import asyncio
import logging
from typing import Any, Optional

from legalocr.core.exceptions import ResourceNotFoundError
from legalocr.models.dto import ExtractionResult
from legalocr.orchestrator import PipelineOutcome, PipelineRunner
from services.record_store import EXTRACTIONS, MAPPINGS, RecordStore

logger = logging.getLogger(__name__)


class DocumentProcessor:
    """Runs the pipeline off the event loop and persists its results."""

    def __init__(self, runner: PipelineRunner, store: RecordStore):
        self.runner = runner
        self.store = store
        logger.info(
            f"DocumentProcessor initialized. store={type(store).__name__}, "
            f"ocr={'on' if runner.acquirer is not None else 'off'}"
        )

    def _persist(
        self, outcome: PipelineOutcome, user_id: Optional[str]
    ) -> dict[str, Any]:
        extraction = outcome.extraction.model_dump(mode="json")
        structured = outcome.structured.model_dump(mode="json")
        self.store.insert(EXTRACTIONS, {**extraction, "structured": structured})

        mapping = None
        if outcome.mapping is not None:
            mapping = outcome.mapping.model_dump(mode="json")
            self.store.insert(MAPPINGS, {**mapping, "user_id": user_id})

        return {"extraction": extraction, "structured": structured, "mapping": mapping}

    async def process_document(
        self,
        data: bytes,
        filename: str,
        schema_name: Optional[str] = None,
        user_id: Optional[str] = None,
        trace_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Run the pipeline over an uploaded file and store the results.

        Returns:
            dict with extraction, structured and mapping (None when no schema
            was requested)
        """
        logger.info(
            f"Processing upload: {filename} ({len(data)} bytes)",
            extra={"trace_id": trace_id, "user_id": user_id, "filename": filename},
        )
        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(
            None,
            lambda: self.runner.run(
                data,
                filename,
                schema_name=schema_name,
                user_id=user_id,
                trace_id=trace_id,
            ),
        )
        return self._persist(outcome, user_id)

    async def process_text(
        self,
        text: str,
        schema_name: Optional[str] = None,
        user_id: Optional[str] = None,
        trace_id: Optional[str] = None,
    ) -> dict[str, Any]:
        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(
            None,
            lambda: self.runner.run_text(
                text, schema_name=schema_name, user_id=user_id, trace_id=trace_id
            ),
        )
        return self._persist(outcome, user_id)

    def get_extraction(self, extraction_id: str) -> dict[str, Any]:
        record = self.store.get(EXTRACTIONS, extraction_id)
        if record is None:
            raise ResourceNotFoundError("Extraction", extraction_id)
        return record

    def list_extractions(self, user_id: str) -> list[dict[str, Any]]:
        return self.store.list_by_user(EXTRACTIONS, user_id)

    async def create_mapping(
        self,
        extraction_id: str,
        schema_name: str,
        trace_id: Optional[str] = None,
    ) -> dict[str, Any]:
        """Map a stored extraction onto ``schema_name`` and store the mapping."""
        record = self.get_extraction(extraction_id)
        extraction = ExtractionResult.model_validate(record)

        loop = asyncio.get_running_loop()
        _, mapping = await loop.run_in_executor(
            None, lambda: self.runner.map_extraction(extraction, schema_name)
        )
        payload = mapping.model_dump(mode="json")
        self.store.insert(MAPPINGS, {**payload, "user_id": extraction.user_id})
        logger.info(
            f"Mapping stored for extraction {extraction_id}",
            extra={"trace_id": trace_id, "mapping_id": mapping.id, "schema": schema_name},
        )
        return payload

    def get_mapping(self, mapping_id: str) -> dict[str, Any]:
        record = self.store.get(MAPPINGS, mapping_id)
        if record is None:
            raise ResourceNotFoundError("Mapping", mapping_id)
        return record
