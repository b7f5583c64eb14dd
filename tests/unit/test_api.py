"""Unit tests for the HTTP API."""

from contextlib import asynccontextmanager

import pytest
from fastapi.testclient import TestClient

from legalocr.config.schemas import SchemaRegistry
from legalocr.core.exceptions import EngineUnavailableError
from legalocr.orchestrator import PipelineRunner
from legalocr.processors.acquisition import TextAcquirer
from main import create_app
from services.processor import DocumentProcessor
from services.record_store import InMemoryRecordStore

SAMPLE_LINE = "Décret exécutif n° 15-247 du 10 septembre 2015"


def build_client(engine, with_processor=True):
    @asynccontextmanager
    async def test_lifespan(app):
        app.state.engine = engine
        if with_processor:
            runner = PipelineRunner(acquirer=TextAcquirer(engine))
            app.state.processor = DocumentProcessor(runner, InMemoryRecordStore())
            app.state.schemas = SchemaRegistry()
        else:
            app.state.processor = None
            app.state.schemas = None
        yield

    return TestClient(create_app(lifespan_handler=test_lifespan))


@pytest.fixture
def client(fake_engine_cls, french_decree):
    with build_client(fake_engine_cls([SAMPLE_LINE, french_decree])) as test_client:
        yield test_client


class TestTextExtraction:
    """Tests for POST /v1/extractions/text."""

    def test_structured_and_mapped(self, client, french_decree):
        """Test raw text is structured and mapped in one call."""
        response = client.post(
            "/v1/extractions/text",
            json={"text": french_decree, "schema": "legal", "user_id": "u1"},
            headers={"X-Trace-ID": "trace-123"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["structured"]["type"] == "decree"
        assert body["structured"]["number"] == "15-247"
        assert body["mapping"]["form_type"] == "legal"
        assert body["mapping"]["extraction_id"] == body["extraction"]["id"]
        assert body["trace_id"] == "trace-123"
        assert response.headers["X-Trace-ID"] == "trace-123"

    def test_without_schema(self, client, french_decree):
        """Test the mapping is omitted when no schema is named."""
        response = client.post("/v1/extractions/text", json={"text": french_decree})

        assert response.status_code == 200
        assert response.json()["mapping"] is None

    def test_empty_text(self, client):
        """Test empty text is rejected as a validation error."""
        response = client.post("/v1/extractions/text", json={"text": ""})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_unknown_schema(self, client, french_decree):
        """Test an unknown schema returns a 404 problem document."""
        response = client.post(
            "/v1/extractions/text", json={"text": french_decree, "schema": "visa"}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "UNKNOWN_SCHEMA"


class TestStoredExtractions:
    """Tests for reading back stored extractions."""

    def test_get_by_id(self, client, french_decree):
        """Test a stored extraction is returned with its structure."""
        created = client.post(
            "/v1/extractions/text", json={"text": french_decree, "user_id": "u1"}
        ).json()
        extraction_id = created["extraction"]["id"]

        response = client.get(f"/v1/extractions/{extraction_id}")

        assert response.status_code == 200
        assert response.json()["id"] == extraction_id
        assert response.json()["structured"]["number"] == "15-247"

    def test_get_missing(self, client):
        """Test unknown ids return RESOURCE_NOT_FOUND."""
        response = client.get("/v1/extractions/does-not-exist")

        assert response.status_code == 404
        assert response.json()["code"] == "RESOURCE_NOT_FOUND"
        assert response.json()["instance"] == "/v1/extractions/does-not-exist"

    def test_list_by_user(self, client, french_decree):
        """Test listing only returns the user's extractions."""
        client.post("/v1/extractions/text", json={"text": french_decree, "user_id": "u1"})
        client.post("/v1/extractions/text", json={"text": french_decree, "user_id": "u2"})

        response = client.get("/v1/extractions", params={"user_id": "u1"})

        assert response.status_code == 200
        assert response.json()["count"] == 1
        assert response.json()["items"][0]["user_id"] == "u1"


class TestMappings:
    """Tests for the mapping and schema endpoints."""

    @pytest.fixture
    def extraction_id(self, client, french_decree):
        response = client.post("/v1/extractions/text", json={"text": french_decree})
        return response.json()["extraction"]["id"]

    def test_create_and_get(self, client, extraction_id):
        """Test a stored extraction is mapped and the mapping can be fetched."""
        response = client.post(
            "/v1/mappings",
            json={"extraction_id": extraction_id, "schema": "administrative-procedure"},
        )

        assert response.status_code == 200
        mapping = response.json()
        assert mapping["form_type"] == "administrative-procedure"

        fetched = client.get(f"/v1/mappings/{mapping['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["extraction_id"] == extraction_id

    def test_unknown_schema(self, client, extraction_id):
        """Test mapping onto an unknown schema returns UNKNOWN_SCHEMA."""
        response = client.post(
            "/v1/mappings", json={"extraction_id": extraction_id, "schema": "visa"}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "UNKNOWN_SCHEMA"

    def test_unknown_extraction(self, client):
        """Test mapping a missing extraction returns RESOURCE_NOT_FOUND."""
        response = client.post(
            "/v1/mappings", json={"extraction_id": "missing", "schema": "legal"}
        )

        assert response.status_code == 404
        assert response.json()["code"] == "RESOURCE_NOT_FOUND"

    def test_list_schemas(self, client):
        """Test the built-in schemas are listed with their fields."""
        response = client.get("/v1/schemas")

        assert response.status_code == 200
        schemas = {item["name"]: item for item in response.json()["schemas"]}
        assert {"legal", "legal-text", "administrative-procedure"} <= set(schemas)
        field_names = [field["name"] for field in schemas["legal"]["fields"]]
        assert "title" in field_names


class TestFileExtraction:
    """Tests for POST /v1/extractions uploads."""

    def test_png_upload(self, client, png_bytes):
        """Test an image upload runs OCR and structures the recognized text."""
        response = client.post(
            "/v1/extractions",
            files={"file": ("scan.png", png_bytes, "image/png")},
            data={"schema": "legal", "user_id": "u1"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["extraction"]["file_type"] == "png"
        assert body["extraction"]["user_id"] == "u1"
        assert body["structured"]["type"] == "decree"
        assert body["mapping"]["form_type"] == "legal"

    def test_bad_magic_bytes(self, client):
        """Test a file claiming to be a PDF without its signature is rejected."""
        response = client.post(
            "/v1/extractions",
            files={"file": ("fake.pdf", b"not really a pdf", "application/pdf")},
        )

        assert response.status_code == 415
        assert response.json()["code"] == "UNSUPPORTED_FILE_TYPE"

    def test_disallowed_content_type(self, client):
        """Test content types outside the allow-list are rejected."""
        response = client.post(
            "/v1/extractions",
            files={"file": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_empty_file(self, client):
        """Test zero-byte uploads are rejected."""
        response = client.post(
            "/v1/extractions",
            files={"file": ("scan.png", b"", "image/png")},
        )

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_engine_unavailable(self, fake_engine_cls, png_bytes):
        """Test a missing Tesseract install maps to 503."""
        engine = fake_engine_cls([], fail=EngineUnavailableError("tesseract not found"))

        with build_client(engine) as test_client:
            response = test_client.post(
                "/v1/extractions",
                files={"file": ("scan.png", png_bytes, "image/png")},
            )

        assert response.status_code == 503
        assert response.json()["code"] == "ENGINE_UNAVAILABLE"
        assert response.json()["retryable"] is True


class TestHealth:
    """Tests for GET /health."""

    def test_healthy(self, client):
        """Test a ready engine reports healthy."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["engine"]["ready"] is True

    def test_unhealthy(self, fake_engine_cls):
        """Test an unavailable engine reports 503."""
        engine = fake_engine_cls([], fail=EngineUnavailableError("missing language: ara"))

        with build_client(engine) as test_client:
            response = test_client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"


class TestStartupFailure:
    """Tests for routes when the processor failed to initialize."""

    def test_processor_missing(self, fake_engine_cls):
        """Test requests fail with 503 when startup left no processor."""
        with build_client(fake_engine_cls([]), with_processor=False) as test_client:
            response = test_client.post("/v1/extractions/text", json={"text": "x"})

        assert response.status_code == 503
        assert response.json()["code"] == "HTTP_503"
