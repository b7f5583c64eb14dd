"""Document extraction endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile

from api.file_validation import read_upload_file
from api.schemas import (
    ExtractionListResponse,
    ExtractionResponse,
    ProblemDetail,
    TextExtractionRequest,
)
from core.dependencies import get_processor
from core.middleware import ensure_trace_id
from services.processor import DocumentProcessor

router = APIRouter()
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    404: {"description": "Unknown schema", "model": ProblemDetail},
    413: {"description": "File too large", "model": ProblemDetail},
    415: {"description": "Unsupported file type", "model": ProblemDetail},
    422: {"description": "Validation Error", "model": ProblemDetail},
    503: {"description": "OCR engine unavailable", "model": ProblemDetail},
}


@router.post(
    "/v1/extractions",
    response_model=ExtractionResponse,
    tags=["extractions"],
    responses=ERROR_RESPONSES,
)
async def create_extraction(
    request: Request,
    file: UploadFile = File(..., description="PDF or image file"),
    schema: Optional[str] = Form(None, description="Form schema to map onto"),
    user_id: Optional[str] = Form(None, description="Owning user"),
    processor: DocumentProcessor = Depends(get_processor),
):
    trace_id = ensure_trace_id(request)
    logger.info(
        "[NEW REQUEST] file=%s schema=%s",
        file.filename,
        schema,
        extra={"trace_id": trace_id, "user_id": user_id},
    )

    data = await read_upload_file(file)
    result = await processor.process_document(
        data,
        file.filename or "upload",
        schema_name=schema,
        user_id=user_id,
        trace_id=trace_id,
    )
    return ExtractionResponse(**result, trace_id=trace_id)


@router.post(
    "/v1/extractions/text",
    response_model=ExtractionResponse,
    tags=["extractions"],
    responses=ERROR_RESPONSES,
)
async def create_text_extraction(
    request: Request,
    body: TextExtractionRequest,
    processor: DocumentProcessor = Depends(get_processor),
):
    trace_id = ensure_trace_id(request)
    result = await processor.process_text(
        body.text,
        schema_name=body.schema_name,
        user_id=body.user_id,
        trace_id=trace_id,
    )
    return ExtractionResponse(**result, trace_id=trace_id)


@router.get(
    "/v1/extractions",
    response_model=ExtractionListResponse,
    tags=["extractions"],
)
async def list_extractions(
    user_id: str = Query(..., min_length=1),
    processor: DocumentProcessor = Depends(get_processor),
):
    items = processor.list_extractions(user_id)
    return ExtractionListResponse(user_id=user_id, count=len(items), items=items)


@router.get(
    "/v1/extractions/{extraction_id}",
    tags=["extractions"],
    responses={404: {"description": "Not found", "model": ProblemDetail}},
)
async def get_extraction(
    extraction_id: str,
    processor: DocumentProcessor = Depends(get_processor),
):
    return processor.get_extraction(extraction_id)
