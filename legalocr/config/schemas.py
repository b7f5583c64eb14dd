"""
Form schema registry.

A schema is an ordered mapping of field name to ``FieldDefinition``. The
built-in schemas cover legal texts and administrative procedures; more can be
loaded from a JSON file of the shape
``{"schema-name": {"field": {"required": true, "type": "enum", "values": [...]}}}``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from legalocr.models.dto import DocumentType, FieldDefinition
from legalocr.utils.io_utils import read_json

logger = logging.getLogger(__name__)

DOCUMENT_TYPE_VALUES = [t.value for t in DocumentType if t is not DocumentType.OTHER]

_LEGAL_TEXT_FIELDS: dict[str, dict[str, Any]] = {
    "title": {"required": True, "type": "string", "label": "Titre"},
    "number": {"required": True, "type": "string", "label": "Numéro"},
    "date": {"required": True, "type": "date", "label": "Date"},
    "type": {
        "required": True,
        "type": "enum",
        "values": DOCUMENT_TYPE_VALUES,
        "label": "Type de texte",
    },
    "institution": {"required": True, "type": "string", "label": "Institution"},
    "wilaya": {"required": False, "type": "string", "label": "Wilaya"},
    "sector": {"required": False, "type": "string", "label": "Secteur"},
    "description": {"required": False, "type": "text", "label": "Description"},
    "content": {"required": True, "type": "text", "label": "Contenu"},
    "language": {
        "required": True,
        "type": "enum",
        "values": ["ar", "fr", "mixed"],
        "label": "Langue",
    },
    "status": {
        "required": False,
        "type": "enum",
        "values": ["draft", "published", "archived"],
        "label": "Statut",
    },
}

DEFAULT_SCHEMAS: dict[str, dict[str, dict[str, Any]]] = {
    "legal": _LEGAL_TEXT_FIELDS,
    "legal-text": _LEGAL_TEXT_FIELDS,
    "administrative-procedure": {
        "title": {"required": True, "type": "string", "label": "Intitulé"},
        "description": {"required": True, "type": "text", "label": "Description"},
        "institution": {"required": True, "type": "string", "label": "Institution"},
        "category": {"required": True, "type": "string", "label": "Catégorie"},
        "duration": {"required": False, "type": "string", "label": "Délai"},
        "cost": {"required": False, "type": "string", "label": "Coût"},
        "difficulty": {
            "required": False,
            "type": "enum",
            "values": ["facile", "moyen", "difficile"],
            "label": "Difficulté",
        },
        "required_documents": {
            "required": False,
            "type": "array",
            "label": "Pièces à fournir",
        },
        "steps": {"required": True, "type": "array", "label": "Étapes"},
        "tags": {"required": False, "type": "array", "label": "Mots-clés"},
    },
}


class SchemaRegistry:
    """Named form schemas, kept in registration order."""

    def __init__(
        self, schemas: Optional[dict[str, dict[str, Any]]] = None
    ) -> None:
        self._schemas: dict[str, dict[str, FieldDefinition]] = {}
        for name, fields in (schemas if schemas is not None else DEFAULT_SCHEMAS).items():
            self.register(name, fields)

    def register(self, name: str, fields: dict[str, Any]) -> None:
        self._schemas[name] = {
            field_name: (
                definition
                if isinstance(definition, FieldDefinition)
                else FieldDefinition.model_validate(definition)
            )
            for field_name, definition in fields.items()
        }

    def get(self, name: str) -> Optional[dict[str, FieldDefinition]]:
        return self._schemas.get(name)

    def names(self) -> list[str]:
        return list(self._schemas)

    def first(self) -> Optional[str]:
        return next(iter(self._schemas), None)

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)


def load_schema_registry(path: str | Path | None = None) -> SchemaRegistry:
    """
    Build the registry from the built-in schemas plus an optional JSON file.

    Schemas in the file replace built-in schemas with the same name.

    Args:
      path: Optional JSON file of extra schemas.

    Returns:
      A populated SchemaRegistry.
    """
    registry = SchemaRegistry()
    if path:
        extra = read_json(path)
        for name, fields in extra.items():
            registry.register(name, fields)
        logger.info(
            "Loaded %d form schemas from file", len(extra), extra={"filename": str(path)}
        )
    return registry
