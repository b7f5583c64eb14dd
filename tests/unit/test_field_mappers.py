"""Unit tests for per-field mapping strategies."""

from datetime import date

import pytest

from legalocr.config.settings import DEFAULT_INSTITUTION, DEFAULT_TITLE
from legalocr.models.dto import (
    ExtractionResult,
    FieldDefinition,
    FieldMappingFailure,
    MappedField,
    Provenance,
    PublicationMetadata,
    Script,
    StructuredPublication,
)
from legalocr.processors.field_mappers import (
    DEFAULT_FIELD_MAPPERS,
    FieldMapperRegistry,
    MappingContext,
    map_generic,
    mapped,
)
from legalocr.processors.legal_structure import structure

TODAY = date(2024, 6, 1)

PROCEDURE = (
    "Demande de passeport biométrique\n"
    "1. Déposer le dossier au guichet de la daïra\n"
    "2. Payer le timbre fiscal de 6 000 DA\n"
    "- Retirer le récépissé de dépôt\n"
    "Délai de délivrance : 15 jours\n"
)


def make_context(field_name, text, structured=None, definition=None):
    extraction = ExtractionResult(
        id="ext-1",
        original_filename="doc.pdf",
        file_type="pdf",
        extracted_text=text,
        language_detected=Script.FRENCH,
    )
    return MappingContext(
        field_name=field_name,
        definition=definition or FieldDefinition(),
        extraction=extraction,
        structured=structured or structure(text, today=TODAY),
        today=TODAY,
    )


def bare_publication():
    return StructuredPublication(
        title=DEFAULT_TITLE,
        date=TODAY.isoformat(),
        institution=DEFAULT_INSTITUTION,
        metadata=PublicationMetadata(language=Script.FRENCH),
    )


def run(field_name, text, structured=None):
    ctx = make_context(field_name, text, structured)
    return DEFAULT_FIELD_MAPPERS.get(field_name)(ctx)


class TestMappedHelper:
    """Tests for the mapped() helper."""

    def test_source_text_truncated(self):
        """Test source snippets are capped at 100 characters."""
        ctx = make_context("content", "x")

        field = mapped(ctx, "a" * 150, 1.0, Provenance.EXTRACTION)

        assert len(field.source_text) == 100

    def test_alternatives_exclude_value_and_are_capped(self):
        """Test alternatives drop the chosen value and keep at most three."""
        ctx = make_context("date", "x")

        field = mapped(
            ctx, "v1", 0.8, Provenance.REGEX, alternatives=["v1", "v2", "v3", "v4", "v5"]
        )

        assert field.alternatives == ["v2", "v3", "v4"]


class TestLegalFields:
    """Tests for legal text field strategies."""

    def test_title_from_structure(self, french_decree):
        """Test the structured title is mapped by regex."""
        field = run("title", french_decree)

        assert isinstance(field, MappedField)
        assert field.confidence == 0.9
        assert field.provenance == Provenance.REGEX

    def test_untyped_text_title_from_first_line(self):
        """Test an untyped document's first line is mapped by extraction, not regex."""
        field = run("title", "Rapport annuel sur les activités\nTexte quelconque")

        assert field.mapped_value == "Rapport annuel sur les activités"
        assert field.confidence == 0.6
        assert field.provenance == Provenance.EXTRACTION

    def test_title_falls_back_to_first_long_line(self):
        """Test the first line longer than ten characters is used."""
        text = "court\nUne ligne assez longue\nUne autre ligne longue"

        field = run("title", text, structured=bare_publication())

        assert field.mapped_value == "Une ligne assez longue"
        assert field.confidence == 0.6
        assert field.provenance == Provenance.EXTRACTION
        assert field.alternatives == ["Une autre ligne longue"]

    def test_title_missing(self):
        """Test a failure with a suggestion when no line qualifies."""
        field = run("title", "court", structured=bare_publication())

        assert isinstance(field, FieldMappingFailure)
        assert field.suggestion

    def test_number_loose_pattern(self):
        """Test a loosely written number is found in the raw text."""
        field = run("number", "Note no. 12 / 05 relative", structured=bare_publication())

        assert field.mapped_value == "12/05"
        assert field.confidence == 0.7

    def test_date_fallback_is_not_mapped(self):
        """Test today's fallback date is reported as missing."""
        field = run("date", "Compte rendu", structured=bare_publication())

        assert isinstance(field, FieldMappingFailure)
        assert "AAAA-MM-JJ" in field.suggestion

    def test_date_alternatives(self, french_decree):
        """Test the other dates in the text are offered as alternatives."""
        field = run("date", french_decree)

        assert field.mapped_value == "2015-09-10"
        assert field.alternatives == ["2008-02-25"]

    def test_type(self, french_decree):
        """Test the document type value is mapped."""
        assert run("type", french_decree).mapped_value == "decree"

    def test_type_other_fails(self):
        """Test an unknown type is reported as missing."""
        assert isinstance(run("type", "Compte rendu"), FieldMappingFailure)

    def test_language(self):
        """Test the detected language is mapped."""
        field = run("language", "Compte rendu")

        assert field.mapped_value == "fr"
        assert field.confidence == 0.9

    def test_description_truncated_with_ellipsis(self):
        """Test long text is cut to 200 characters plus an ellipsis."""
        field = run("description", "mot " * 100)

        assert len(field.mapped_value) == 203
        assert field.mapped_value.endswith("...")
        assert field.provenance == Provenance.INFERENCE

    def test_short_description_kept_whole(self):
        """Test short text is used as is."""
        assert run("description", "Texte court").mapped_value == "Texte court"


class TestProcedureFields:
    """Tests for administrative procedure field strategies."""

    def test_steps(self):
        """Test numbered and bulleted lines become steps."""
        field = run("steps", PROCEDURE)

        assert field.mapped_value == [
            "Déposer le dossier au guichet de la daïra",
            "Payer le timbre fiscal de 6 000 DA",
            "Retirer le récépissé de dépôt",
        ]
        assert field.confidence == 0.5

    def test_cost(self):
        """Test the first amount is the cost."""
        assert run("cost", PROCEDURE).mapped_value == "6 000 DA"

    def test_duration(self):
        """Test a delay expressed in days."""
        assert run("duration", PROCEDURE).mapped_value == "15 jours"

    def test_steps_missing(self):
        """Test text without list lines has no steps."""
        field = run("steps", "Compte rendu")

        assert isinstance(field, FieldMappingFailure)
        assert field.suggestion

    def test_tags(self, french_decree):
        """Test tags collect type and sector."""
        assert run("tags", french_decree).mapped_value == ["decree", "finance"]


class TestRegistry:
    """Tests for the field mapper registry."""

    def test_unknown_field_uses_fallback(self):
        """Test unregistered names resolve to the generic strategy."""
        assert DEFAULT_FIELD_MAPPERS.get("signature_officer") is map_generic
        assert "signature_officer" not in DEFAULT_FIELD_MAPPERS

    def test_register(self):
        """Test strategies are registered by decorator."""
        registry = FieldMapperRegistry()

        @registry.register("stamp")
        def map_stamp(ctx):
            return mapped(ctx, "ok", 1.0, Provenance.MANUAL)

        assert registry.get("stamp") is map_stamp
        assert registry.get("other") is None
        assert registry.names() == ["stamp"]

    def test_generic_matches_entity_type(self):
        """Test the generic strategy maps a field named after an entity type."""
        field = map_generic(make_context("amount", PROCEDURE))

        assert field.mapped_value == "6 000 DA"
        assert field.provenance == Provenance.EXTRACTION

    def test_generic_no_match(self):
        """Test the generic strategy fails without a matching entity."""
        field = map_generic(make_context("signature_officer", "Compte rendu"))

        assert isinstance(field, FieldMappingFailure)


@pytest.mark.parametrize("name", ["title", "number", "date", "institution", "steps"])
def test_required_field_strategies_registered(name):
    """Test the strategies behind required schema fields exist."""
    assert name in DEFAULT_FIELD_MAPPERS
