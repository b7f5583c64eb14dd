"""
Typed contracts passed between pipeline stages.

Stage outputs are pydantic models so they can be handed to the persistence
collaborator and the HTTP layer as plain JSON via ``model_dump(mode="json")``.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field


class Script(str, Enum):
    ARABIC = "ar"
    FRENCH = "fr"
    MIXED = "mixed"


class DocumentType(str, Enum):
    LAW = "law"
    DECREE = "decree"
    ORDER = "order"  # arrêté / قرار
    ORDINANCE = "ordinance"  # ordonnance / أمر
    INSTRUCTION = "instruction"
    CIRCULAR = "circular"
    DECISION = "decision"
    OTHER = "other"


class ReferenceType(str, Enum):
    LAW = "law"
    DECREE = "decree"
    ORDER = "order"
    ORDINANCE = "ordinance"
    INSTRUCTION = "instruction"
    JORA = "jora"
    ARTICLE = "article"
    OTHER = "other"


class EntityType(str, Enum):
    DATE = "date"
    NUMBER = "number"
    INSTITUTION = "institution"
    REFERENCE = "reference"
    PERSON = "person"
    PLACE = "place"
    AMOUNT = "amount"


class Provenance(str, Enum):
    EXTRACTION = "extraction"
    REGEX = "regex"
    INFERENCE = "inference"
    MANUAL = "manual"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FieldType(str, Enum):
    STRING = "string"
    DATE = "date"
    ENUM = "enum"
    TEXT = "text"
    ARRAY = "array"


class MappingStatus(str, Enum):
    DRAFT = "draft"
    VALIDATED = "validated"


# =============================================================================
# Acquisition
# =============================================================================


class RawPage(BaseModel):
    """One page of engine output, as recognized."""

    model_config = ConfigDict(frozen=True)

    page_number: int = Field(..., ge=1)
    text: str = ""
    confidence: float = Field(0.0, ge=0.0, le=1.0)


class BoundingBox(BaseModel):
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0


class TextRegion(BaseModel):
    text: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    script: Script
    page_number: int = 1
    bounding_box: BoundingBox = Field(default_factory=BoundingBox)


class ScriptClassification(BaseModel):
    """Result of the script classifier."""

    model_config = ConfigDict(frozen=True)

    dominant: Script
    arabic_ratio: float
    arabic_count: int = 0
    latin_count: int = 0


class ExtractionMetadata(BaseModel):
    processing_time_ms: float = 0.0
    average_confidence: float = 0.0
    arabic_char_count: int = 0
    latin_char_count: int = 0
    arabic_ratio: float = 0.0
    language_distribution: dict[str, float] = Field(
        default_factory=lambda: {"ar": 0.0, "fr": 0.0, "mixed": 0.0}
    )
    detected_entities: dict[str, list[dict]] = Field(
        default_factory=lambda: {
            "dates": [],
            "numbers": [],
            "institutions": [],
            "references": [],
        }
    )
    is_mixed_language: bool = False
    document_type: DocumentType = DocumentType.OTHER
    processing_date: str = ""
    ocr_profile: str = "none"


class ExtractionResult(BaseModel):
    """
    Per-document artifact threaded through the pipeline.

    Enriched in place by the orchestrator; treated as read-only by the mapper.
    """

    id: str
    original_filename: str
    file_type: str
    total_pages: int = 0
    extracted_text: str = ""
    text_regions: list[TextRegion] = Field(default_factory=list)
    metadata: ExtractionMetadata = Field(default_factory=ExtractionMetadata)
    confidence_score: float = 0.0
    language_detected: Script = Script.ARABIC
    user_id: Optional[str] = None


# =============================================================================
# Structure
# =============================================================================


class LegalReference(BaseModel):
    type: ReferenceType
    number: str
    date: Optional[str] = None
    context: str = ""
    confidence: float = 0.8


class Article(BaseModel):
    number: str
    title: Optional[str] = None
    content: str = ""


class DetectedEntity(BaseModel):
    type: EntityType
    value: str
    context: str = ""
    confidence: float
    start: int
    end: int


class PublicationMetadata(BaseModel):
    language: Script
    arabic_ratio: float = 0.0
    word_count: int = 0
    processing_date: str = ""
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    entities: list[DetectedEntity] = Field(default_factory=list)


class StructuredPublication(BaseModel):
    """Legally structured view of one extraction. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    title: str
    number: str = ""
    date: str
    type: DocumentType = DocumentType.OTHER
    institution: str
    wilaya: Optional[str] = None
    sector: Optional[str] = None
    references: list[LegalReference] = Field(default_factory=list)
    articles: list[Article] = Field(default_factory=list)
    metadata: PublicationMetadata


# =============================================================================
# Mapping
# =============================================================================


class FieldDefinition(BaseModel):
    required: bool = False
    type: FieldType = FieldType.STRING
    values: Optional[list[str]] = None
    label: Optional[str] = None


class MappedField(BaseModel):
    field_name: str
    source_text: str = ""
    mapped_value: Union[str, list[str]]
    confidence: float = Field(..., ge=0.0, le=1.0)
    provenance: Provenance
    alternatives: list[str] = Field(default_factory=list)


class FieldMappingFailure(BaseModel):
    field_name: str
    suggestion: Optional[str] = None


class FieldValidationError(BaseModel):
    field: str
    message: str
    severity: Severity
    suggestion: Optional[str] = None


class MappingResult(BaseModel):
    """Binding of one extraction/publication pair to a form schema."""

    model_config = ConfigDict(frozen=True)

    id: str
    extraction_id: str
    form_type: str
    mapped_fields: list[MappedField] = Field(default_factory=list)
    unmapped_fields: list[str] = Field(default_factory=list)
    validation_errors: list[FieldValidationError] = Field(default_factory=list)
    overall_confidence: float = 0.0
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())

    @computed_field
    @property
    def mapped_data(self) -> dict[str, Union[str, list[str]]]:
        return {field.field_name: field.mapped_value for field in self.mapped_fields}

    @computed_field
    @property
    def status(self) -> MappingStatus:
        if any(error.severity == Severity.HIGH for error in self.validation_errors):
            return MappingStatus.DRAFT
        return MappingStatus.VALIDATED
