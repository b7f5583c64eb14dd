"""Unit tests for form mapping and validation."""

import logging

import pytest

from legalocr.config.schemas import DEFAULT_SCHEMAS, SchemaRegistry, load_schema_registry
from legalocr.core.exceptions import UnknownSchemaError
from legalocr.models.dto import (
    FieldDefinition,
    FieldType,
    MappedField,
    MappingStatus,
    Provenance,
    Severity,
)
from legalocr.orchestrator import PipelineRunner
from legalocr.processors.field_mappers import FieldMapperRegistry, mapped
from legalocr.processors.form_mapper import FormMapper, overall_confidence, validate_field


@pytest.fixture
def french_outcome(french_decree, today):
    return PipelineRunner().run_text(french_decree, today=today)


def field(name, value, confidence=0.9):
    return MappedField(
        field_name=name,
        mapped_value=value,
        confidence=confidence,
        provenance=Provenance.REGEX,
    )


class TestOverallConfidence:
    """Tests for overall_confidence()."""

    def test_weighted_mean_and_completion(self):
        """Test 0.7 * mean confidence + 0.3 * completion rate."""
        fields = [field("a", "x", 0.9), field("b", "x", 0.8), field("c", "x", 0.7)]

        assert overall_confidence(fields, unmapped_count=1) == pytest.approx(0.785)

    def test_nothing_mapped(self):
        """Test the score is zero when no field was mapped."""
        assert overall_confidence([], unmapped_count=4) == 0.0


class TestValidateField:
    """Tests for the second validation pass."""

    def test_bad_date_format(self):
        """Test non ISO dates are flagged."""
        error = validate_field(field("date", "10/09/2015"), FieldDefinition(type=FieldType.DATE))

        assert error.severity == Severity.MEDIUM
        assert error.suggestion == "Utilisez le format AAAA-MM-JJ"

    def test_enum_value_not_allowed(self):
        """Test values outside the enum are flagged."""
        definition = FieldDefinition(type=FieldType.ENUM, values=["ar"])

        error = validate_field(field("language", "fr"), definition)

        assert error.severity == Severity.MEDIUM
        assert "fr" in error.message

    def test_array_expected(self):
        """Test array fields must hold a list."""
        error = validate_field(field("steps", "un"), FieldDefinition(type=FieldType.ARRAY))

        assert error is not None

    def test_valid_values(self):
        """Test valid values pass."""
        assert validate_field(field("date", "2015-09-10"), FieldDefinition(type=FieldType.DATE)) is None
        assert validate_field(field("steps", ["un"]), FieldDefinition(type=FieldType.ARRAY)) is None


class TestFormMapper:
    """Tests for FormMapper.map_to_form()."""

    def test_legal_schema(self, french_outcome, today):
        """Test a complete decree validates against the legal schema."""
        mapper = FormMapper()

        result = mapper.map_to_form(
            french_outcome.extraction, french_outcome.structured, "legal", today=today
        )

        assert result.form_type == "legal"
        assert result.unmapped_fields == ["wilaya", "status"]
        assert result.validation_errors == []
        assert result.status == MappingStatus.VALIDATED
        assert result.mapped_data["number"] == "15-247"
        assert result.mapped_data["language"] == "fr"
        assert result.extraction_id == french_outcome.extraction.id

    def test_required_field_without_data(self, french_outcome, today):
        """Test a required field with no data yields one high-severity error."""
        schemas = SchemaRegistry({"custom": {"signature_officer": {"required": True}}})
        mapper = FormMapper(schemas=schemas)

        result = mapper.map_to_form(
            french_outcome.extraction, french_outcome.structured, "custom", today=today
        )

        assert result.unmapped_fields == ["signature_officer"]
        assert len(result.validation_errors) == 1
        error = result.validation_errors[0]
        assert error.severity == Severity.HIGH
        assert error.message == "Champ requis non mappé: signature_officer"
        assert result.status == MappingStatus.DRAFT
        assert result.overall_confidence == 0.0

    def test_overall_confidence_on_result(self, french_outcome, today):
        """Test the result carries the weighted confidence."""
        registry = FieldMapperRegistry()
        for name, confidence in (("a", 0.9), ("b", 0.8), ("c", 0.7)):
            registry.register(name)(
                lambda ctx, confidence=confidence: mapped(
                    ctx, "x", confidence, Provenance.MANUAL
                )
            )
        schemas = SchemaRegistry({"custom": {"a": {}, "b": {}, "c": {}, "d": {}}})
        mapper = FormMapper(schemas=schemas, field_mappers=registry)

        result = mapper.map_to_form(
            french_outcome.extraction, french_outcome.structured, "custom", today=today
        )

        assert result.unmapped_fields == ["d"]
        assert result.overall_confidence == pytest.approx(0.785)

    def test_enum_mismatch_keeps_validated(self, french_outcome, today):
        """Test medium-severity errors do not demote the mapping to draft."""
        schemas = SchemaRegistry(
            {"custom": {"language": {"required": True, "type": "enum", "values": ["ar"]}}}
        )
        mapper = FormMapper(schemas=schemas)

        result = mapper.map_to_form(
            french_outcome.extraction, french_outcome.structured, "custom", today=today
        )

        assert [error.severity for error in result.validation_errors] == [Severity.MEDIUM]
        assert result.status == MappingStatus.VALIDATED

    def test_unknown_schema_raises(self, french_outcome):
        """Test unknown schema names are rejected."""
        mapper = FormMapper()

        with pytest.raises(UnknownSchemaError) as exc_info:
            mapper.map_to_form(french_outcome.extraction, french_outcome.structured, "visa")

        assert "legal" in exc_info.value.details["available"]

    def test_unknown_schema_fallback(self, french_outcome, caplog):
        """Test fallback maps onto the first registered schema."""
        mapper = FormMapper(allow_fallback=True)

        with caplog.at_level(logging.WARNING):
            result = mapper.map_to_form(
                french_outcome.extraction, french_outcome.structured, "visa"
            )

        assert result.form_type == "legal"
        assert "falling back" in caplog.text

    def test_failing_strategy_is_unmapped(self, french_outcome, today):
        """Test a strategy that raises is treated as a mapping failure."""
        registry = FieldMapperRegistry()

        @registry.register("broken")
        def map_broken(ctx):
            raise RuntimeError("boom")

        schemas = SchemaRegistry({"custom": {"broken": {"required": True}}})
        mapper = FormMapper(schemas=schemas, field_mappers=registry)

        result = mapper.map_to_form(
            french_outcome.extraction, french_outcome.structured, "custom", today=today
        )

        assert result.unmapped_fields == ["broken"]
        assert result.validation_errors[0].severity == Severity.HIGH


class TestSchemaRegistry:
    """Tests for the form schema registry."""

    def test_builtin_schemas(self):
        """Test the built-in schemas are registered in order."""
        registry = SchemaRegistry()

        assert registry.names() == list(DEFAULT_SCHEMAS)
        assert registry.first() == "legal"
        assert registry.get("administrative-procedure")["steps"].type == FieldType.ARRAY

    def test_load_from_file(self, tmp_path):
        """Test schemas from a JSON file are added to the built-in ones."""
        path = tmp_path / "schemas.json"
        path.write_text(
            '{"permis": {"wilaya": {"required": true, "label": "Wilaya"}}}', encoding="utf-8"
        )

        registry = load_schema_registry(path)

        assert "permis" in registry
        assert "legal" in registry
        assert registry.get("permis")["wilaya"].required is True
