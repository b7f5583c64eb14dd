"""Form mapping and schema endpoints."""

from fastapi import APIRouter, Depends, Request

from api.schemas import (
    MappingRequest,
    ProblemDetail,
    SchemaFieldInfo,
    SchemaInfo,
    SchemaListResponse,
)
from core.dependencies import get_processor, get_schema_registry
from core.middleware import ensure_trace_id
from legalocr.config.schemas import SchemaRegistry
from services.processor import DocumentProcessor

router = APIRouter()


@router.post(
    "/v1/mappings",
    tags=["mappings"],
    responses={404: {"description": "Unknown extraction or schema", "model": ProblemDetail}},
)
async def create_mapping(
    request: Request,
    body: MappingRequest,
    processor: DocumentProcessor = Depends(get_processor),
):
    trace_id = ensure_trace_id(request)
    return await processor.create_mapping(
        body.extraction_id, body.schema_name, trace_id=trace_id
    )


@router.get(
    "/v1/mappings/{mapping_id}",
    tags=["mappings"],
    responses={404: {"description": "Not found", "model": ProblemDetail}},
)
async def get_mapping(
    mapping_id: str,
    processor: DocumentProcessor = Depends(get_processor),
):
    return processor.get_mapping(mapping_id)


@router.get("/v1/schemas", response_model=SchemaListResponse, tags=["mappings"])
async def list_schemas(schemas: SchemaRegistry = Depends(get_schema_registry)):
    return SchemaListResponse(
        schemas=[
            SchemaInfo(
                name=name,
                fields=[
                    SchemaFieldInfo(
                        name=field_name,
                        required=definition.required,
                        type=definition.type.value,
                        values=definition.values,
                        label=definition.label,
                    )
                    for field_name, definition in schemas.get(name).items()
                ],
            )
            for name in schemas.names()
        ]
    )
