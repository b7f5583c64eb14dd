"""
Per-field mapping strategies.

Each strategy takes a ``MappingContext`` and returns either a ``MappedField``
or a ``FieldMappingFailure`` carrying an optional suggestion for the user.
Strategies are looked up by field name in a ``FieldMapperRegistry``; fields
without a dedicated strategy go through the registry's generic fallback.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional, Sequence, Union

from legalocr.config.settings import (
    DEFAULT_INSTITUTION,
    DEFAULT_TITLE,
    DESCRIPTION_MAX_CHARS,
    TITLE_MIN_LINE_CHARS,
)
from legalocr.models.dto import (
    DocumentType,
    EntityType,
    ExtractionResult,
    FieldDefinition,
    FieldMappingFailure,
    MappedField,
    Provenance,
    StructuredPublication,
)
from legalocr.utils.text import content_lines

FieldMapping = Union[MappedField, FieldMappingFailure]

SOURCE_SNIPPET_CHARS = 100
MAX_ALTERNATIVES = 3

_LOOSE_NUMBER_RE = re.compile(r"n[°o]?\s*\.?\s*(\d+\s*[-/]\s*\d+)", re.IGNORECASE)
_STEP_LINE_RE = re.compile(r"^\s*(?:\d+\s*[.)\-]|[-•*–])\s+(?P<step>\S.*)$")
_DURATION_RE = re.compile(
    r"\b\d+\s*(?:jours?|semaines?|mois|ans|heures?)\b"
    r"|\d+\s*(?:أيام|يوما|يوم|أسابيع|أشهر|شهر|ساعة)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class MappingContext:
    """Everything a field strategy may look at."""

    field_name: str
    definition: FieldDefinition
    extraction: ExtractionResult
    structured: StructuredPublication
    today: date

    def entities(self, entity_type: EntityType) -> list[str]:
        values: list[str] = []
        for entity in self.structured.metadata.entities:
            if entity.type == entity_type and entity.value not in values:
                values.append(entity.value)
        return values


FieldMapper = Callable[[MappingContext], FieldMapping]


def mapped(
    ctx: MappingContext,
    value: Union[str, list[str]],
    confidence: float,
    provenance: Provenance,
    source_text: Optional[str] = None,
    alternatives: Sequence[str] = (),
) -> MappedField:
    if source_text is None:
        source_text = value if isinstance(value, str) else ", ".join(value)
    return MappedField(
        field_name=ctx.field_name,
        source_text=source_text[:SOURCE_SNIPPET_CHARS],
        mapped_value=value,
        confidence=confidence,
        provenance=provenance,
        alternatives=[alt for alt in alternatives if alt != value][:MAX_ALTERNATIVES],
    )


def failed(ctx: MappingContext, suggestion: Optional[str] = None) -> FieldMappingFailure:
    return FieldMappingFailure(field_name=ctx.field_name, suggestion=suggestion)


class FieldMapperRegistry:
    """
    Field name -> mapping strategy.

    Populated once at import time through the ``register`` decorator; lookups
    for unknown names return the fallback strategy.
    """

    def __init__(self, fallback: Optional[FieldMapper] = None) -> None:
        self._mappers: dict[str, FieldMapper] = {}
        self.fallback = fallback

    def register(self, name: str) -> Callable[[FieldMapper], FieldMapper]:
        def decorator(func: FieldMapper) -> FieldMapper:
            self._mappers[name] = func
            return func

        return decorator

    def get(self, name: str) -> Optional[FieldMapper]:
        return self._mappers.get(name, self.fallback)

    def names(self) -> list[str]:
        return list(self._mappers)

    def __contains__(self, name: object) -> bool:
        return name in self._mappers


def map_generic(ctx: MappingContext) -> FieldMapping:
    """First entity whose type is the field name or whose value mentions it."""
    needle = ctx.field_name.lower()
    for entity in ctx.structured.metadata.entities:
        if entity.type.value == needle or needle in entity.value.lower():
            return mapped(
                ctx,
                entity.value,
                entity.confidence,
                Provenance.EXTRACTION,
                source_text=entity.context or entity.value,
            )
    return failed(ctx)


DEFAULT_FIELD_MAPPERS = FieldMapperRegistry(fallback=map_generic)
register = DEFAULT_FIELD_MAPPERS.register


# =============================================================================
# Legal text fields
# =============================================================================


@register("title")
def map_title(ctx: MappingContext) -> FieldMapping:
    title = ctx.structured.title
    if title and title != DEFAULT_TITLE:
        return mapped(ctx, title, 0.9, Provenance.REGEX)

    lines = [
        line
        for line in content_lines(ctx.extraction.extracted_text)
        if len(line) > TITLE_MIN_LINE_CHARS
    ]
    if lines:
        return mapped(ctx, lines[0], 0.6, Provenance.EXTRACTION, alternatives=lines[1:])
    return failed(ctx, "Titre non détecté. Saisissez l'intitulé officiel du texte.")


@register("number")
def map_number(ctx: MappingContext) -> FieldMapping:
    if ctx.structured.number:
        return mapped(ctx, ctx.structured.number, 0.9, Provenance.REGEX)

    match = _LOOSE_NUMBER_RE.search(ctx.extraction.extracted_text)
    if match:
        number = re.sub(r"\s+", "", match.group(1))
        return mapped(ctx, number, 0.7, Provenance.EXTRACTION, source_text=match.group(0))
    return failed(ctx, "Numéro officiel non détecté (format attendu: 24-01).")


@register("date")
def map_date(ctx: MappingContext) -> FieldMapping:
    doc_date = ctx.structured.date
    if doc_date and doc_date != ctx.today.isoformat():
        return mapped(
            ctx,
            doc_date,
            0.8,
            Provenance.REGEX,
            alternatives=ctx.entities(EntityType.DATE),
        )
    return failed(ctx, "Date non détectée. Format attendu: AAAA-MM-JJ.")


@register("type")
def map_type(ctx: MappingContext) -> FieldMapping:
    if ctx.structured.type != DocumentType.OTHER:
        return mapped(ctx, ctx.structured.type.value, 0.9, Provenance.REGEX)
    return failed(ctx, "Type de texte non reconnu (loi, décret, arrêté...).")


@register("institution")
def map_institution(ctx: MappingContext) -> FieldMapping:
    institution = ctx.structured.institution
    if institution and institution != DEFAULT_INSTITUTION:
        return mapped(
            ctx,
            institution,
            0.8,
            Provenance.REGEX,
            alternatives=ctx.entities(EntityType.INSTITUTION),
        )
    return failed(ctx, "Institution émettrice non identifiée.")


@register("wilaya")
def map_wilaya(ctx: MappingContext) -> FieldMapping:
    if ctx.structured.wilaya:
        return mapped(ctx, ctx.structured.wilaya, 0.7, Provenance.REGEX)
    return failed(ctx)


@register("sector")
def map_sector(ctx: MappingContext) -> FieldMapping:
    if ctx.structured.sector:
        return mapped(ctx, ctx.structured.sector, 0.7, Provenance.REGEX)
    return failed(ctx)


@register("content")
def map_content(ctx: MappingContext) -> FieldMapping:
    text = ctx.extraction.extracted_text
    if text.strip():
        return mapped(ctx, text, 1.0, Provenance.EXTRACTION)
    return failed(ctx, "Aucun texte extrait du document.")


@register("language")
def map_language(ctx: MappingContext) -> FieldMapping:
    return mapped(ctx, ctx.extraction.language_detected.value, 0.9, Provenance.EXTRACTION)


@register("description")
def map_description(ctx: MappingContext) -> FieldMapping:
    text = ctx.extraction.extracted_text.strip()
    if not text:
        return failed(ctx, "Rédigez une courte description du texte.")
    description = text[:DESCRIPTION_MAX_CHARS]
    if len(text) > DESCRIPTION_MAX_CHARS:
        description += "..."
    return mapped(ctx, description, 0.6, Provenance.INFERENCE)


# =============================================================================
# Administrative procedure fields
# =============================================================================


@register("category")
def map_category(ctx: MappingContext) -> FieldMapping:
    if ctx.structured.sector:
        return mapped(ctx, ctx.structured.sector, 0.6, Provenance.INFERENCE)
    return failed(ctx, "Choisissez la catégorie de la procédure.")


@register("tags")
def map_tags(ctx: MappingContext) -> FieldMapping:
    structured = ctx.structured
    tags = []
    if structured.type != DocumentType.OTHER:
        tags.append(structured.type.value)
    for value in (structured.sector, structured.wilaya):
        if value and value not in tags:
            tags.append(value)
    if tags:
        return mapped(ctx, tags, 0.5, Provenance.INFERENCE)
    return failed(ctx)


@register("steps")
def map_steps(ctx: MappingContext) -> FieldMapping:
    steps = []
    for line in ctx.extraction.extracted_text.splitlines():
        match = _STEP_LINE_RE.match(line)
        if match:
            steps.append(match.group("step").strip())
    if steps:
        return mapped(ctx, steps, 0.5, Provenance.INFERENCE)
    return failed(ctx, "Aucune étape numérotée détectée. Listez les étapes de la procédure.")


@register("cost")
def map_cost(ctx: MappingContext) -> FieldMapping:
    amounts = ctx.entities(EntityType.AMOUNT)
    if amounts:
        return mapped(
            ctx, amounts[0], 0.7, Provenance.EXTRACTION, alternatives=amounts[1:]
        )
    return failed(ctx)


@register("duration")
def map_duration(ctx: MappingContext) -> FieldMapping:
    match = _DURATION_RE.search(ctx.extraction.extracted_text)
    if match:
        return mapped(ctx, match.group(0).strip(), 0.6, Provenance.EXTRACTION)
    return failed(ctx)
