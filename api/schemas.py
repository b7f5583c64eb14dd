"""Pydantic request/response schemas for API endpoints."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

TEXT_MAX_LENGTH = 2_000_000


class ProblemDetail(BaseModel):
    """RFC 7807 Problem Details for HTTP APIs.

    See: https://www.rfc-editor.org/rfc/rfc7807
    """

    type: str = Field(..., description="URI reference identifying the problem type")
    title: str = Field(..., description="Short, human-readable summary of the problem")
    status: int = Field(..., description="HTTP status code for this problem")
    detail: Optional[str] = Field(
        None, description="Human-readable explanation specific to this occurrence"
    )
    instance: Optional[str] = Field(
        None,
        description="URI reference identifying this specific occurrence (e.g., request path)",
    )

    # Extension members (allowed by RFC 7807)
    code: str = Field(..., description="Application-specific error code")
    category: str = Field(
        ..., description="Error category (client_error, server_error, validation)"
    )
    retryable: bool = Field(
        default=False, description="Whether the request can be retried"
    )
    trace_id: Optional[str] = Field(
        None, description="Distributed tracing ID for correlation across services"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "type": "/errors/UNKNOWN_SCHEMA",
                "title": "Unknown form schema: permis",
                "status": 404,
                "detail": "Schéma de formulaire inconnu",
                "instance": "/v1/mappings",
                "code": "UNKNOWN_SCHEMA",
                "category": "client_error",
                "retryable": False,
                "trace_id": "a1b2c3d4-e5f6-7890-abcd-ef1234567890",
            }
        }
    )


class TextExtractionRequest(BaseModel):
    """Raw text submitted for structuring (no OCR)."""

    text: str = Field(..., min_length=1, max_length=TEXT_MAX_LENGTH)
    schema_name: Optional[str] = Field(None, alias="schema")
    user_id: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class MappingRequest(BaseModel):
    extraction_id: str = Field(..., min_length=1)
    schema_name: str = Field(..., alias="schema", min_length=1)

    model_config = ConfigDict(populate_by_name=True)


class ExtractionResponse(BaseModel):
    """Pipeline output for one document."""

    extraction: dict[str, Any]
    structured: dict[str, Any]
    mapping: Optional[dict[str, Any]] = None
    trace_id: Optional[str] = None


class ExtractionListResponse(BaseModel):
    user_id: str
    count: int
    items: list[dict[str, Any]]


class SchemaFieldInfo(BaseModel):
    name: str
    required: bool
    type: str
    values: Optional[list[str]] = None
    label: Optional[str] = None


class SchemaInfo(BaseModel):
    name: str
    fields: list[SchemaFieldInfo]


class SchemaListResponse(BaseModel):
    schemas: list[SchemaInfo]


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    engine: dict[str, Any]
