"""Unit tests for exception hierarchy."""

import pytest

from legalocr.core.exceptions import (
    BaseError,
    ClientError,
    EngineUnavailableError,
    ErrorCategory,
    PayloadTooLargeError,
    RenderFailureError,
    ResourceNotFoundError,
    ServerError,
    TooManyPagesError,
    UnknownSchemaError,
    UnsupportedFileTypeError,
    ValidationError,
)
from legalocr.errors.codes import ErrorCode, message_for


class TestBaseError:
    """Tests for BaseError class."""

    def test_base_error_creation(self):
        """Test BaseError can be created with all parameters."""
        error = BaseError(
            message="Test error",
            error_code="TEST_ERROR",
            category=ErrorCategory.CLIENT_ERROR,
            http_status=400,
            details={"detail": "Additional info", "field": "test"},
            retryable=False,
        )

        assert str(error) == "Test error"
        assert error.error_code == "TEST_ERROR"
        assert error.category == ErrorCategory.CLIENT_ERROR
        assert error.http_status == 400
        assert error.details == {"detail": "Additional info", "field": "test"}
        assert error.retryable is False

    def test_base_error_to_dict(self):
        """Test BaseError converts to RFC 7807 format."""
        error = BaseError(
            message="Test error",
            error_code="TEST_ERROR",
            category=ErrorCategory.CLIENT_ERROR,
            http_status=400,
            details={"detail": "Additional context"},
        )

        result = error.to_dict()

        assert result["type"] == "/errors/TEST_ERROR"
        assert result["title"] == "Test error"
        assert result["status"] == 400
        assert result["code"] == "TEST_ERROR"
        assert result["category"] == "client_error"
        assert result["detail"] == "Additional context"
        assert result["retryable"] is False

    def test_base_error_default_details(self):
        """Test BaseError with no details provided."""
        error = BaseError(
            message="Test",
            error_code="TEST",
            category=ErrorCategory.SERVER_ERROR,
            http_status=500,
        )

        assert error.details == {}
        assert error.to_dict()["detail"] is None


class TestClientError:
    """Tests for ClientError and subclasses."""

    def test_client_error_defaults(self):
        """Test ClientError has correct defaults."""
        error = ClientError(message="Client error", error_code="CLIENT_ERROR")

        assert error.http_status == 400
        assert error.category == ErrorCategory.CLIENT_ERROR
        assert error.retryable is False

    def test_validation_error_records_field(self):
        """Test ValidationError includes the field name."""
        error = ValidationError(
            message="Invalid content type",
            field="file",
            details={"content_type": "text/plain"},
        )

        assert error.http_status == 422
        assert error.error_code == "VALIDATION_ERROR"
        assert error.details == {"content_type": "text/plain", "field": "file"}

    def test_resource_not_found(self):
        """Test ResourceNotFoundError names the resource."""
        error = ResourceNotFoundError(resource_type="Extraction", resource_id="abc")

        assert error.http_status == 404
        assert error.message == "Extraction not found"
        assert error.details["resource_id"] == "abc"

    def test_payload_too_large(self):
        """Test PayloadTooLargeError formats sizes."""
        error = PayloadTooLargeError(max_size_mb=50, actual_size_mb=75.5)

        assert error.http_status == 413
        assert "75.50MB" in error.message
        assert error.details["max_size_mb"] == 50

    def test_unsupported_file_type(self):
        """Test UnsupportedFileTypeError is a 415 with the French detail."""
        error = UnsupportedFileTypeError(filename="notes.txt", magic_bytes="68656c6c6f")

        assert error.http_status == 415
        assert error.error_code == "UNSUPPORTED_FILE_TYPE"
        assert error.details["filename"] == "notes.txt"
        assert error.to_dict()["detail"] == message_for("UNSUPPORTED_FILE_TYPE")

    def test_too_many_pages(self):
        """Test TooManyPagesError carries both counts."""
        error = TooManyPagesError(pages=51, max_pages=50)

        assert error.http_status == 422
        assert error.error_code == "PDF_TOO_MANY_PAGES"
        assert error.details["pages"] == 51
        assert error.details["max_pages"] == 50

    def test_unknown_schema_lists_available(self):
        """Test UnknownSchemaError lists the registered schemas."""
        error = UnknownSchemaError("visa", ["legal", "administrative-procedure"])

        assert error.http_status == 404
        assert error.error_code == "UNKNOWN_SCHEMA"
        assert error.details["schema"] == "visa"
        assert error.details["available"] == ["legal", "administrative-procedure"]


class TestServerError:
    """Tests for ServerError and subclasses."""

    def test_server_error_defaults(self):
        """Test ServerError defaults to 500 and not retryable."""
        error = ServerError(message="Boom", error_code="INTERNAL")

        assert error.http_status == 500
        assert error.category == ErrorCategory.SERVER_ERROR
        assert error.retryable is False

    def test_engine_unavailable(self):
        """Test EngineUnavailableError is a retryable 503."""
        error = EngineUnavailableError("missing language packs: ara")

        assert error.http_status == 503
        assert error.retryable is True
        assert error.details["reason"] == "missing language packs: ara"

    def test_render_failure_keeps_page(self):
        """Test RenderFailureError exposes the failing page."""
        error = RenderFailureError(3, "poppler crashed")

        assert error.page == 3
        assert error.http_status == 500
        assert error.message == "Failed to render PDF page 3"

    def test_render_failure_without_page(self):
        """Test RenderFailureError for a document that cannot be opened."""
        error = RenderFailureError(None, "EOF marker not found")

        assert error.page is None
        assert error.message == "Failed to open PDF"


class TestErrorCode:
    """Tests for the error code registry."""

    def test_get_spec(self):
        """Test specs are looked up by code string."""
        spec = ErrorCode.get_spec("ENGINE_UNAVAILABLE")

        assert spec.code == "ENGINE_UNAVAILABLE"
        assert spec.category == "server_error"
        assert spec.retryable is True

    def test_unknown_code_raises(self):
        """Test unknown codes raise KeyError."""
        with pytest.raises(KeyError):
            ErrorCode.get_spec("NOPE")
