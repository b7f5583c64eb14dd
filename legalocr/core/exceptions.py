"""Custom exception hierarchy for the legal OCR pipeline.

All exceptions inherit from BaseError and provide structured error information
compatible with RFC 7807 Problem Details for HTTP APIs. Pipeline-level fatal
errors (unsupported input, engine, rendering) abort a run and propagate to the
caller unmodified; heuristic stages never raise.
"""

from typing import Any, Optional
from enum import Enum

from legalocr.errors.codes import ErrorCode, message_for


class ErrorCategory(str, Enum):
    """Error categories for classification and monitoring."""

    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"
    VALIDATION = "validation"


class BaseError(Exception):
    """Base exception for all pipeline errors.

    Attributes:
        message: Human-readable error message
        error_code: Application-specific error code
        category: Error category for classification
        http_status: HTTP status code to return
        details: Additional context (dict)
        retryable: Whether the operation can be retried
    """

    def __init__(
        self,
        message: str,
        error_code: str,
        category: ErrorCategory,
        http_status: int,
        details: Optional[dict[str, Any]] = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.category = category
        self.http_status = http_status
        self.details = details or {}
        self.retryable = retryable

    def to_dict(self) -> dict[str, Any]:
        """Convert to RFC 7807 Problem Details format.

        Returns:
            Dict containing standardized error information
        """
        return {
            "type": f"/errors/{self.error_code}",
            "title": self.message,
            "status": self.http_status,
            "code": self.error_code,
            "detail": self.details.get("detail"),
            "category": self.category.value,
            "retryable": self.retryable,
        }


class ClientError(BaseError):
    """Base for client errors (4xx). Not retryable."""

    def __init__(self, message: str, error_code: str, **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.CLIENT_ERROR,
            http_status=kwargs.pop("http_status", 400),
            retryable=False,
            **kwargs,
        )


class ValidationError(ClientError):
    """Input validation failed (422 Unprocessable Entity).

    Args:
        message: Validation error description
        field: Name of the field that failed validation
        details: Additional validation context
    """

    def __init__(self, message: str, field: str, **kwargs):
        additional_details = kwargs.pop("details", {})
        additional_details["field"] = field
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            http_status=422,
            details=additional_details,
            **kwargs,
        )


class ResourceNotFoundError(ClientError):
    """Resource not found (404).

    Args:
        resource_type: Type of resource (e.g., "Extraction", "Mapping")
        resource_id: Identifier of the missing resource
    """

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            message=f"{resource_type} not found",
            error_code="RESOURCE_NOT_FOUND",
            http_status=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class PayloadTooLargeError(ClientError):
    """Uploaded file exceeds the size limit (413)."""

    def __init__(self, max_size_mb: int, actual_size_mb: float):
        super().__init__(
            message=f"File too large: {actual_size_mb:.2f}MB (max: {max_size_mb}MB)",
            error_code="PAYLOAD_TOO_LARGE",
            http_status=413,
            details={"max_size_mb": max_size_mb, "actual_size_mb": actual_size_mb},
        )


class UnsupportedFileTypeError(ClientError):
    """Input is neither an image nor a PDF (415). Fatal, never retried.

    Args:
        filename: Original filename, for diagnostics
        magic_bytes: Hex dump of the leading bytes that failed detection
    """

    def __init__(self, filename: Optional[str] = None, magic_bytes: str = ""):
        super().__init__(
            message="Unsupported file type",
            error_code="UNSUPPORTED_FILE_TYPE",
            http_status=415,
            details={
                "detail": message_for("UNSUPPORTED_FILE_TYPE"),
                "filename": filename,
                "magic_bytes": magic_bytes,
                "expected_types": ["pdf", "jpeg", "png", "tiff", "bmp", "webp"],
            },
        )


class TooManyPagesError(ClientError):
    """PDF exceeds the configured page limit (422)."""

    def __init__(self, pages: int, max_pages: int):
        super().__init__(
            message=f"PDF has {pages} pages (max: {max_pages})",
            error_code=ErrorCode.PDF_TOO_MANY_PAGES.value.code,
            http_status=422,
            details={
                "detail": message_for("PDF_TOO_MANY_PAGES"),
                "pages": pages,
                "max_pages": max_pages,
            },
        )


class UnknownSchemaError(ClientError):
    """Requested form schema is not registered (404).

    Args:
        schema_name: The name that failed lookup
        available: Registered schema names
    """

    def __init__(self, schema_name: str, available: list[str]):
        super().__init__(
            message=f"Unknown form schema: {schema_name}",
            error_code="UNKNOWN_SCHEMA",
            http_status=404,
            details={
                "detail": message_for("UNKNOWN_SCHEMA"),
                "schema": schema_name,
                "available": available,
            },
        )


class ServerError(BaseError):
    """Base for server errors (5xx)."""

    def __init__(self, message: str, error_code: str, **kwargs):
        super().__init__(
            message=message,
            error_code=error_code,
            category=ErrorCategory.SERVER_ERROR,
            http_status=kwargs.pop("http_status", 500),
            retryable=kwargs.pop("retryable", False),
            **kwargs,
        )


class EngineUnavailableError(ServerError):
    """OCR engine failed to initialize (503).

    Fatal for the current extraction. The engine handle remembers the failure
    until it is reset explicitly, so the error is flagged retryable only in
    the sense that the caller may reset and try again.

    Args:
        reason: Short description of the initialization failure
    """

    def __init__(self, reason: str):
        super().__init__(
            message="OCR engine unavailable",
            error_code="ENGINE_UNAVAILABLE",
            http_status=503,
            retryable=True,
            details={"detail": message_for("ENGINE_UNAVAILABLE"), "reason": reason},
        )


class RenderFailureError(ServerError):
    """A PDF page could not be rasterized. Fatal for the whole document.

    Args:
        page: 1-based page number that failed (None if the document could not
            be opened at all)
        reason: Underlying renderer error
    """

    def __init__(self, page: Optional[int], reason: str):
        super().__init__(
            message=(
                f"Failed to render PDF page {page}"
                if page is not None
                else "Failed to open PDF"
            ),
            error_code="RENDER_FAILURE",
            http_status=500,
            details={
                "detail": message_for("RENDER_FAILURE"),
                "page": page,
                "reason": reason,
            },
        )
        self.page = page
