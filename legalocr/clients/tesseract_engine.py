"""
Tesseract engine handle.

One ``EngineHandle`` is built at application start and injected into the
text acquirer. Initialization (binary and language-pack checks) happens on
first use, exactly once, under a lock; the outcome is memoized, and a failure
keeps being reported as ``EngineUnavailableError`` until ``reset()``.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, Optional

import pytesseract
from PIL import Image
from pytesseract import Output

from legalocr.config.constants import ALGERIAN_ARABIC_WHITELIST
from legalocr.core.exceptions import EngineUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGES = "ara+fra"


@dataclass(frozen=True)
class OcrProfile:
    """Recognition parameters handed to Tesseract for one call."""

    name: str
    psm: int = 3
    oem: int = 3
    whitelist: str = ""
    variables: tuple[tuple[str, str], ...] = ()
    languages: Optional[str] = None

    def to_config(self) -> str:
        parts = [f"--oem {self.oem}", f"--psm {self.psm}"]
        if self.whitelist:
            parts.append(f"-c tessedit_char_whitelist={self.whitelist}")
        parts.extend(f"-c {key}={value}" for key, value in self.variables)
        return " ".join(parts)


ARABIC_PROFILE = OcrProfile(
    name="arabic",
    psm=6,  # single uniform block
    oem=1,  # LSTM only
    whitelist=ALGERIAN_ARABIC_WHITELIST,
    variables=(
        ("preserve_interword_spaces", "1"),
        ("textord_arabic_numerals", "1"),
        ("textord_heavy_nr", "1"),
        ("load_system_dawg", "0"),
        ("load_freq_dawg", "0"),
        ("load_unambig_dawg", "0"),
        ("load_punc_dawg", "0"),
        ("load_number_dawg", "0"),
    ),
)

LATIN_PROFILE = OcrProfile(
    name="latin",
    psm=3,
    oem=3,
    variables=(
        ("load_system_dawg", "1"),
        ("load_freq_dawg", "1"),
    ),
)

# Relaxed settings used to guess the dominant script before the real pass
SAMPLE_PROFILE = OcrProfile(name="sample", psm=3, oem=3)


@dataclass(frozen=True)
class RecognitionResult:
    text: str
    confidence: float  # mean word confidence, 0.0-1.0


def _lines_from_data(data: dict[str, list[Any]]) -> RecognitionResult:
    """Group ``image_to_data`` words into lines and average word confidences."""
    lines: dict[tuple[int, int, int], list[str]] = {}
    confidences: list[float] = []

    for index, word in enumerate(data.get("text", [])):
        word = (word or "").strip()
        if not word:
            continue
        try:
            conf = float(data["conf"][index])
        except (KeyError, IndexError, TypeError, ValueError):
            conf = -1.0
        if conf >= 0:
            confidences.append(conf)
        key = (
            int(data["block_num"][index]),
            int(data["par_num"][index]),
            int(data["line_num"][index]),
        )
        lines.setdefault(key, []).append(word)

    text = "\n".join(" ".join(words) for _, words in sorted(lines.items()))
    confidence = sum(confidences) / len(confidences) / 100.0 if confidences else 0.0
    return RecognitionResult(text=text, confidence=round(min(max(confidence, 0.0), 1.0), 4))


class EngineHandle:
    """
    Lazily initialized, shared access to the Tesseract engine.

    Args:
      languages: Tesseract language string used when a profile has none.
      required_languages: Language packs that must be installed.
      tesseract_cmd: Optional path to the tesseract binary.
    """

    def __init__(
        self,
        languages: str = DEFAULT_LANGUAGES,
        required_languages: tuple[str, ...] = ("ara", "fra"),
        tesseract_cmd: Optional[str] = None,
    ) -> None:
        self.languages = languages
        self.required_languages = tuple(required_languages)
        self.tesseract_cmd = tesseract_cmd
        self._init_lock = threading.Lock()
        self._call_lock = threading.Lock()
        self._initialized = False
        self._failure: Optional[str] = None
        self._version: Optional[str] = None
        self._available_languages: list[str] = []

    @property
    def ready(self) -> bool:
        return self._initialized and self._failure is None

    def ensure_ready(self) -> None:
        """
        Initialize the engine on first use.

        Raises:
          EngineUnavailableError: The binary or a required language pack is
            missing, now or on an earlier attempt since the last reset().
        """
        with self._init_lock:
            if not self._initialized:
                self._initialize()
            if self._failure is not None:
                raise EngineUnavailableError(self._failure)

    def _initialize(self) -> None:
        if self.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.tesseract_cmd
        try:
            self._version = str(pytesseract.get_tesseract_version())
            self._available_languages = list(pytesseract.get_languages(config=""))
        except (pytesseract.TesseractNotFoundError, pytesseract.TesseractError, OSError) as e:
            self._failure = f"tesseract not usable: {e}"
        else:
            missing = [
                lang for lang in self.required_languages if lang not in self._available_languages
            ]
            if missing:
                self._failure = "missing language packs: " + ", ".join(missing)
        self._initialized = True

        if self._failure:
            logger.error("OCR engine initialization failed: %s", self._failure)
        else:
            logger.info(
                "OCR engine ready: tesseract %s, languages=%s",
                self._version,
                ",".join(self._available_languages),
            )

    def reset(self) -> None:
        """Forget the memoized initialization outcome."""
        with self._init_lock:
            self._initialized = False
            self._failure = None
            self._version = None
            self._available_languages = []
        logger.info("OCR engine handle reset")

    def status(self) -> dict[str, Any]:
        return {
            "ready": self.ready,
            "initialized": self._initialized,
            "version": self._version,
            "languages": list(self._available_languages),
            "error": self._failure,
        }

    def recognize(self, image: Image.Image, profile: OcrProfile) -> RecognitionResult:
        """
        Recognize one page image with the given profile.

        Calls are serialized through the handle; pages of one document are
        expected to be submitted in order by the caller.
        """
        self.ensure_ready()
        with self._call_lock:
            try:
                data = pytesseract.image_to_data(
                    image,
                    lang=profile.languages or self.languages,
                    config=profile.to_config(),
                    output_type=Output.DICT,
                )
            except (pytesseract.TesseractNotFoundError, OSError) as e:
                raise EngineUnavailableError(str(e)) from e
        return _lines_from_data(data)
