"""
Centralized error code registry with specifications.

Provides single source of truth for pipeline error codes, including the French
messages shown to operators, error categories (client/server), and
retryability flags.
"""

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class ErrorSpec:
    """Specification for a single error type."""

    code: str
    int_code: int
    message_fr: str  # French message for UI
    category: str  # "client_error" or "server_error"
    retryable: bool


class ErrorCode(Enum):
    """Centralized error code registry.

    Usage:
        error_spec = ErrorCode.get_spec("ENGINE_UNAVAILABLE")
        print(error_spec.message_fr, error_spec.category, error_spec.retryable)
    """

    # ========================================
    # CLIENT ERRORS (not retryable)
    # ========================================
    UNSUPPORTED_FILE_TYPE = ErrorSpec(
        "UNSUPPORTED_FILE_TYPE",
        10,
        "Type de fichier non supporté (image ou PDF attendu)",
        "client_error",
        False,
    )
    PDF_TOO_MANY_PAGES = ErrorSpec(
        "PDF_TOO_MANY_PAGES",
        11,
        "Le PDF contient trop de pages",
        "client_error",
        False,
    )
    UNKNOWN_SCHEMA = ErrorSpec(
        "UNKNOWN_SCHEMA",
        12,
        "Schéma de formulaire inconnu",
        "client_error",
        False,
    )

    # ========================================
    # SERVER ERRORS
    # ========================================
    ENGINE_UNAVAILABLE = ErrorSpec(
        "ENGINE_UNAVAILABLE",
        20,
        "Le moteur OCR n'est pas disponible",
        "server_error",
        True,
    )
    RENDER_FAILURE = ErrorSpec(
        "RENDER_FAILURE",
        21,
        "Impossible de convertir une page du PDF en image",
        "server_error",
        False,
    )

    @classmethod
    def get_spec(cls, code: str) -> ErrorSpec:
        """Get error specification by code string.

        Args:
            code: Error code string (e.g., "RENDER_FAILURE")

        Returns:
            ErrorSpec with all error details

        Raises:
            KeyError: If the code is not registered
        """
        return cls[code].value


def message_for(code: str) -> str:
    """Return the French operator message for a registered code."""
    return ErrorCode.get_spec(code).message_fr
