"""
Centralized application settings using Pydantic.

All environment variables are read once at startup and validated.
Use this instead of scattered os.getenv() calls throughout the codebase.
"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class OCRSettings(BaseSettings):
    """Tesseract engine and PDF rendering configuration."""

    TESSERACT_CMD: Optional[str] = None
    OCR_LANGUAGES: str = "ara+fra"
    OCR_REQUIRED_LANGUAGES: str = "ara,fra"
    PDF_RENDER_SCALE: float = 2.0
    MAX_PDF_PAGES: int = 50
    OCR_SAMPLE_MIN_LETTERS: int = 10
    OCR_SAMPLE_ARABIC_THRESHOLD: float = 0.3

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}

    @property
    def required_languages(self) -> tuple[str, ...]:
        return tuple(
            lang.strip() for lang in self.OCR_REQUIRED_LANGUAGES.split(",") if lang.strip()
        )


class AppSettings(BaseSettings):
    """General application settings."""

    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True
    RUNS_DIR: str = "./runs"
    MAX_FILE_SIZE_MB: int = 50
    LEGALOCR_SAVE_ARTIFACTS: bool = False
    LEGALOCR_PATTERNS_FILE: Optional[str] = None
    LEGALOCR_SCHEMAS_FILE: Optional[str] = None
    LEGALOCR_SCHEMA_FALLBACK: bool = False
    RECORD_STORE_DIR: str = ""

    model_config = {"case_sensitive": True, "env_file": ".env", "extra": "ignore"}

    @property
    def runs_dir(self) -> Path:
        """Resolve runs directory path from environment variable."""
        env_runs_dir = self.RUNS_DIR.strip()
        if env_runs_dir:
            return Path(env_runs_dir).resolve()
        return Path(__file__).resolve().parents[1] / "runs"


# Singleton instances - loaded once at module import
ocr_settings = OCRSettings()
app_settings = AppSettings()
