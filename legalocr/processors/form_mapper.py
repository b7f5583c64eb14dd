"""
Bind an extraction and its structured publication to a named form schema.

Every schema field is offered to its mapping strategy; required fields left
unmapped produce high-severity validation errors. A second pass checks the
types of mapped values (date format, enum membership, array shape) and
reports medium-severity errors. Nothing is persisted here.
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import date
from typing import Optional

from legalocr.config.schemas import SchemaRegistry
from legalocr.config.settings import (
    MAPPING_COMPLETION_WEIGHT,
    MAPPING_CONFIDENCE_WEIGHT,
)
from legalocr.core.exceptions import UnknownSchemaError
from legalocr.models.dto import (
    ExtractionResult,
    FieldDefinition,
    FieldMappingFailure,
    FieldType,
    FieldValidationError,
    MappedField,
    MappingResult,
    Severity,
    StructuredPublication,
)
from legalocr.processors.field_mappers import (
    DEFAULT_FIELD_MAPPERS,
    FieldMapperRegistry,
    FieldMapping,
    MappingContext,
)

logger = logging.getLogger(__name__)

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def overall_confidence(mapped: list[MappedField], unmapped_count: int) -> float:
    """0.7 * mean field confidence + 0.3 * completion rate; 0 when nothing mapped."""
    if not mapped:
        return 0.0
    mean = sum(field.confidence for field in mapped) / len(mapped)
    completion = len(mapped) / (len(mapped) + unmapped_count)
    return round(
        MAPPING_CONFIDENCE_WEIGHT * mean + MAPPING_COMPLETION_WEIGHT * completion, 4
    )


def validate_field(
    field: MappedField, definition: FieldDefinition
) -> Optional[FieldValidationError]:
    value = field.mapped_value
    if definition.type == FieldType.DATE:
        if not isinstance(value, str) or not ISO_DATE_RE.match(value):
            return FieldValidationError(
                field=field.field_name,
                message="Format de date invalide",
                severity=Severity.MEDIUM,
                suggestion="Utilisez le format AAAA-MM-JJ",
            )
    elif definition.type == FieldType.ENUM and definition.values:
        if value not in definition.values:
            return FieldValidationError(
                field=field.field_name,
                message=f"Valeur non autorisée: {value}",
                severity=Severity.MEDIUM,
                suggestion="Valeurs possibles: " + ", ".join(definition.values),
            )
    elif definition.type == FieldType.ARRAY:
        if not isinstance(value, list):
            return FieldValidationError(
                field=field.field_name,
                message="Une liste de valeurs est attendue",
                severity=Severity.MEDIUM,
            )
    return None


class FormMapper:
    """
    Maps pipeline output onto form schemas.

    Args:
      schemas: Registry of form schemas (built-in schemas when omitted).
      field_mappers: Registry of field strategies.
      allow_fallback: Map unknown schema names onto the first registered
        schema instead of raising UnknownSchemaError.
    """

    def __init__(
        self,
        schemas: Optional[SchemaRegistry] = None,
        field_mappers: Optional[FieldMapperRegistry] = None,
        allow_fallback: bool = False,
    ) -> None:
        self.schemas = schemas if schemas is not None else SchemaRegistry()
        self.field_mappers = field_mappers or DEFAULT_FIELD_MAPPERS
        self.allow_fallback = allow_fallback

    def resolve_schema(self, schema_name: str) -> tuple[str, dict[str, FieldDefinition]]:
        schema = self.schemas.get(schema_name)
        if schema is not None:
            return schema_name, schema

        fallback = self.schemas.first() if self.allow_fallback else None
        if fallback is None:
            raise UnknownSchemaError(schema_name, self.schemas.names())

        logger.warning(
            "Unknown form schema %r, falling back to %r",
            schema_name,
            fallback,
            extra={"schema": schema_name},
        )
        return fallback, self.schemas.get(fallback)

    def _map_field(self, ctx: MappingContext) -> FieldMapping:
        mapper = self.field_mappers.get(ctx.field_name)
        if mapper is None:
            return FieldMappingFailure(field_name=ctx.field_name)
        try:
            return mapper(ctx)
        except Exception as e:
            logger.error(
                "Field mapper failed for %s: %s",
                ctx.field_name,
                e,
                exc_info=True,
            )
            return FieldMappingFailure(field_name=ctx.field_name)

    def map_to_form(
        self,
        extraction: ExtractionResult,
        structured: StructuredPublication,
        schema_name: str,
        today: Optional[date] = None,
    ) -> MappingResult:
        """
        Map one extraction onto ``schema_name``.

        Args:
          extraction: Enriched extraction result.
          structured: Structured view of the same document.
          schema_name: Registered form schema name.
          today: Reference day for the date fallback check.

        Returns:
          A MappingResult; ``status`` is draft when any high-severity error
          was recorded.

        Raises:
          UnknownSchemaError: The schema is unknown and fallback is disabled.
        """
        form_type, schema = self.resolve_schema(schema_name)
        today = today or date.today()

        mapped_fields: list[MappedField] = []
        unmapped: list[str] = []
        errors: list[FieldValidationError] = []

        for field_name, definition in schema.items():
            ctx = MappingContext(
                field_name=field_name,
                definition=definition,
                extraction=extraction,
                structured=structured,
                today=today,
            )
            outcome = self._map_field(ctx)
            if isinstance(outcome, MappedField):
                mapped_fields.append(outcome)
                continue

            unmapped.append(field_name)
            if definition.required:
                errors.append(
                    FieldValidationError(
                        field=field_name,
                        message=f"Champ requis non mappé: {definition.label or field_name}",
                        severity=Severity.HIGH,
                        suggestion=outcome.suggestion,
                    )
                )

        for field in mapped_fields:
            error = validate_field(field, schema[field.field_name])
            if error is not None:
                errors.append(error)

        result = MappingResult(
            id=str(uuid.uuid4()),
            extraction_id=extraction.id,
            form_type=form_type,
            mapped_fields=mapped_fields,
            unmapped_fields=unmapped,
            validation_errors=errors,
            overall_confidence=overall_confidence(mapped_fields, len(unmapped)),
        )

        logger.info(
            "Mapped %d/%d fields (%d errors), confidence=%.4f",
            len(mapped_fields),
            len(schema),
            len(errors),
            result.overall_confidence,
            extra={
                "extraction_id": extraction.id,
                "mapping_id": result.id,
                "schema": form_type,
            },
        )
        return result
