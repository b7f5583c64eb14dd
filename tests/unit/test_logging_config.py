"""Unit tests for structured logging."""

import json
import logging
import sys

from legalocr.core.logging_config import StructuredFormatter


def make_record(message, **extra):
    record = logging.LogRecord(
        name="legalocr.orchestrator",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Tests for the JSON formatter."""

    def test_context_keys_included(self):
        """Test correlation data from extra is copied into the payload."""
        record = make_record("Pipeline completed", extraction_id="e1", pages=3, trace_id="t1")

        payload = json.loads(StructuredFormatter().format(record))

        assert payload["message"] == "Pipeline completed"
        assert payload["level"] == "INFO"
        assert payload["extraction_id"] == "e1"
        assert payload["pages"] == 3
        assert payload["trace_id"] == "t1"
        assert payload["timestamp"].endswith("Z")

    def test_unknown_extra_ignored(self):
        """Test only known context keys are emitted."""
        record = make_record("x", secret="hidden")

        payload = json.loads(StructuredFormatter().format(record))

        assert "secret" not in payload

    def test_arabic_not_escaped(self):
        """Test Arabic text stays readable in the output."""
        output = StructuredFormatter().format(make_record("مرسوم تنفيذي"))

        assert "مرسوم تنفيذي" in output

    def test_exception_included(self):
        """Test exception type and message are serialized."""
        try:
            raise ValueError("bad page")
        except ValueError:
            record = make_record("failed")
            record.exc_info = sys.exc_info()

        payload = json.loads(StructuredFormatter().format(record))

        assert payload["exception"]["type"] == "ValueError"
        assert payload["exception"]["message"] == "bad page"
