"""
Language and script classification for OCR output.

Counts Arabic-script characters against Latin letters and classifies the text
as Arabic-dominant, French-dominant or mixed. The same counts drive the
acquisition profile choice and the per-line script tags of text regions.
"""

from __future__ import annotations

from legalocr.config.settings import (
    ARABIC_DOMINANT_THRESHOLD,
    MIXED_DOMINANCE_FACTOR,
    MIXED_LOWER_THRESHOLD,
)
from legalocr.models.dto import Script, ScriptClassification
from legalocr.utils.text import count_arabic, count_latin


def arabic_ratio(arabic_count: int, latin_count: int) -> float:
    total = arabic_count + latin_count
    if total == 0:
        return 0.0
    return arabic_count / total


def classify(text: str) -> ScriptClassification:
    """
    Classify the dominant script of ``text``.

    Thresholds: ratio > 0.6 is Arabic, 0.15 < ratio <= 0.6 is mixed, ratio
    <= 0.15 with any Latin letter is French. Text with no Latin signal at all
    (including empty text) defaults to Arabic.

    Args:
      text: Raw or corrected OCR text.

    Returns:
      ScriptClassification with the dominant script, the Arabic ratio and
      the underlying character counts.
    """
    arabic_count = count_arabic(text or "")
    latin_count = count_latin(text or "")
    ratio = arabic_ratio(arabic_count, latin_count)

    if ratio > ARABIC_DOMINANT_THRESHOLD:
        dominant = Script.ARABIC
    elif ratio > MIXED_LOWER_THRESHOLD:
        dominant = Script.MIXED
    elif latin_count > 0:
        dominant = Script.FRENCH
    else:
        dominant = Script.ARABIC

    return ScriptClassification(
        dominant=dominant,
        arabic_ratio=ratio,
        arabic_count=arabic_count,
        latin_count=latin_count,
    )


def is_mixed_language(arabic_count: int, latin_count: int) -> bool:
    """True when both scripts occur and neither outnumbers the other 2:1."""
    if arabic_count == 0 or latin_count == 0:
        return False
    return (
        arabic_count < MIXED_DOMINANCE_FACTOR * latin_count
        and latin_count < MIXED_DOMINANCE_FACTOR * arabic_count
    )


def line_script(text: str) -> Script:
    return classify(text).dominant
