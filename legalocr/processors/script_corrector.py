"""
Deterministic repair of Arabic OCR artifacts.

The corrector is a fixed sequence of regex rewrites applied to recognized
text: spacing, split ligatures, symbol-for-letter confusions, missing spaces
at script boundaries, reversed word order and Algerian official idioms. Text
that is essentially Latin is returned untouched.

Every pass is a total function over ``str``. The sequence is re-applied until
the text stops changing (bounded by ``MAX_CORRECTION_ROUNDS``), which makes
``correct`` idempotent on ordinary input.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from legalocr.config.constants import (
    ARTIFACT_GLYPHS,
    BIDI_CONTROL_CHARS,
    PARASITE_SYMBOLS,
    PRESENTATION_LIGATURES,
    SENTENCE_PUNCTUATION,
)
from legalocr.config.settings import (
    ARABIC_MAJORITY_RATIO,
    CORRECTION_SKIP_RATIO,
    MAX_CORRECTION_ROUNDS,
    WORD_ORDER_LINE_RATIO,
)
from legalocr.utils.text import ARABIC_LETTER_CLASS as AR
from legalocr.utils.text import arabic_block_ratio

logger = logging.getLogger(__name__)

SENT = re.escape(SENTENCE_PUNCTUATION)

_BIDI_TABLE = str.maketrans({char: None for char in BIDI_CONTROL_CHARS})
_LIGATURE_FORMS_RE = re.compile("|".join(map(re.escape, PRESENTATION_LIGATURES)))

# =============================================================================
# Pass 2: ligature repair
# =============================================================================

LIGATURE_REPAIRS: list[tuple[re.Pattern, str]] = [
    # standalone definite article glued back onto the next word
    (re.compile(rf"(?<!\S)ال[ \t]+(?=[{AR}])"), "ال"),
    (re.compile(r"(?<!\S)ل[ \t]+ل[ \t]+ه(?!\S)"), "لله"),
    (re.compile(r"(?<!\S)م[ \t]+ن(?!\S)"), "من"),
    (re.compile(r"(?<!\S)ع[ \t]+ل[ \t]+ى(?!\S)"), "على"),
    (re.compile(r"(?<!\S)ف[ \t]+ي(?!\S)"), "في"),
    (re.compile(r"(?<!\S)إ[ \t]+ل[ \t]+ى(?!\S)"), "إلى"),
    # detached taa marbuta / hamza-on-yeh suffix
    (re.compile(rf"(?<=[{AR}])[ \t]+(?=[ةئ](?!\S))"), ""),
]

# =============================================================================
# Pass 3: artifact cleanup
# =============================================================================

_GLYPH_CLASS = re.escape("".join(ARTIFACT_GLYPHS))
_GLYPH_RUN_RE = re.compile(f"[{_GLYPH_CLASS}]+")
_GLYPH_TABLE = str.maketrans(ARTIFACT_GLYPHS)
# a percent sign right after a digit is a real percentage
_PARASITE_RE = re.compile(rf"(?!(?<=\d)%)[{re.escape(PARASITE_SYMBOLS)}]")
_ARABIC_LETTER_RE = re.compile(f"[{AR}]")

# =============================================================================
# Pass 4: RTL inversion repair
# =============================================================================

_SCRIPT_BOUNDARY_RE = re.compile(rf"(?<=[{AR}])(?=[\dA-Z])|(?<=[\dA-Z])(?=[{AR}])")

# =============================================================================
# Pass 5: word order
# =============================================================================

_TOKEN_SPLIT_RE = re.compile(rf"[ \t]+|(?<=[{SENT}])(?=[{AR}A-Za-z])")
_ENDS_ARABIC_RE = re.compile(f"[{AR}]$")

# =============================================================================
# Pass 6: Algerian idioms
# =============================================================================

IDIOM_RULES: list[tuple[re.Pattern, str]] = [
    # frequent engine misreadings of official vocabulary
    (re.compile(r"الجماورية"), "الجمهورية"),
    (re.compile(r"مرصوم"), "مرسوم"),
    (re.compile(r"تنفيدي"), "تنفيذي"),
    # words the engine glues together
    (re.compile(r"الجمهورية(?=الجزائرية)"), "الجمهورية "),
    (re.compile(r"الجزائرية(?=الديمقراطية)"), "الجزائرية "),
    (re.compile(r"الديمقراطية(?=الشعبية)"), "الديمقراطية "),
    (re.compile(r"الجريدة(?=الرسمية)"), "الجريدة "),
    (re.compile(r"(المادة|الفصل|الباب)(?=\d)"), r"\1 "),
    # hijri date separator
    (re.compile(r"(\d+)[ \t]*هـ[ \t]*(\d+)"), r"\1 هـ \2"),
    (re.compile(r"الجمهورية[ \t]+الجزائرية"), "الجمهورية الجزائرية"),
    (re.compile(r"République[ \t]+Algérienne"), "République Algérienne"),
    (re.compile(r"رقم[ \t]*(\d+)"), r"رقم \1"),
    (re.compile(r"([Nn]°)[ \t]*(\d+)"), r"\1 \2"),
    (re.compile(r"[ \t]+\n"), "\n"),
    (re.compile(r"\n[ \t]+"), "\n"),
    (re.compile(rf"([{SENT}])[ \t]*(?=[{AR}A-Za-z])"), r"\1 "),
]


def _normalize_spaces(text: str) -> str:
    if arabic_block_ratio(text) > ARABIC_MAJORITY_RATIO:
        text = re.sub(r"[ \t]{4,}", "  ", text)
        return re.sub(r"[ \t]{2,3}", " ", text)
    return re.sub(r"[ \t]{2,}", " ", text)


def _repair_ligatures(text: str) -> str:
    for pattern, replacement in LIGATURE_REPAIRS:
        text = pattern.sub(replacement, text)
    return text


def _glyph_run(match: re.Match) -> str:
    source = match.string
    before = source[match.start() - 1] if match.start() > 0 else ""
    after = source[match.end()] if match.end() < len(source) else ""
    if _ARABIC_LETTER_RE.match(before) or _ARABIC_LETTER_RE.match(after):
        return match.group(0).translate(_GLYPH_TABLE)
    return match.group(0)


def _clean_artifacts(text: str) -> str:
    text = _GLYPH_RUN_RE.sub(_glyph_run, text)
    text = _PARASITE_RE.sub("", text)
    text = re.sub(r"[ \t]{2,}", " ", text)
    return re.sub(r"\n[ \t]*\n(?:[ \t]*\n)+", "\n\n", text)


def _repair_rtl_inversions(text: str) -> str:
    return _SCRIPT_BOUNDARY_RE.sub(" ", text)


def _should_reverse(tokens: list[str]) -> bool:
    first, last = tokens[0], tokens[-1]
    if first[0].isdigit() and _ENDS_ARABIC_RE.search(last) and not last[0].isdigit():
        return True
    return (
        first[-1] in SENTENCE_PUNCTUATION
        and last[0] not in SENTENCE_PUNCTUATION
        and last[-1] not in SENTENCE_PUNCTUATION
    )


def _repair_word_order(text: str) -> str:
    lines = text.split("\n")
    for index, line in enumerate(lines):
        if arabic_block_ratio(line) <= WORD_ORDER_LINE_RATIO:
            continue
        tokens = [token for token in _TOKEN_SPLIT_RE.split(line) if token]
        if len(tokens) > 1 and _should_reverse(tokens):
            lines[index] = " ".join(reversed(tokens))
    return "\n".join(lines)


def _normalize_idioms(text: str) -> str:
    for pattern, replacement in IDIOM_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


CORRECTION_PASSES: list[tuple[str, Callable[[str], str]]] = [
    ("spaces", _normalize_spaces),
    ("ligatures", _repair_ligatures),
    ("artifacts", _clean_artifacts),
    ("rtl_inversions", _repair_rtl_inversions),
    ("word_order", _repair_word_order),
    ("idioms", _normalize_idioms),
]


def _normalize_glyphs(text: str) -> str:
    text = text.translate(_BIDI_TABLE)
    return _LIGATURE_FORMS_RE.sub(lambda m: PRESENTATION_LIGATURES[m.group(0)], text)


def _run_passes(text: str) -> str:
    for _name, correction_pass in CORRECTION_PASSES:
        text = correction_pass(text)
    return text


def correct(text: str) -> str:
    """
    Repair Arabic OCR artifacts in ``text``.

    Text whose Arabic share of non-whitespace characters is below 10% is
    returned unchanged. Otherwise bidi control marks are removed, presentation
    form ligatures are decomposed and the correction passes run in order until
    the result is stable.

    Args:
      text: Recognized text, possibly spanning several pages.

    Returns:
      The corrected text (or the input itself when correction is skipped).
    """
    if not isinstance(text, str) or not text:
        return text
    if arabic_block_ratio(text) < CORRECTION_SKIP_RATIO:
        return text

    current = _normalize_glyphs(text)
    for round_number in range(1, MAX_CORRECTION_ROUNDS + 1):
        corrected = _run_passes(current)
        if corrected == current:
            break
        current = corrected
    else:
        logger.debug("Correction did not settle after %d rounds", round_number)
    return current
