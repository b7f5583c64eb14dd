"""
Character-class helpers shared by the classifier, corrector and extractor.
"""

from __future__ import annotations

import re

from legalocr.config.constants import ARABIC_DIGIT_MAP
from legalocr.config.settings import PAGE_MARKER_PATTERN

# Main block, supplement, extended-A and both presentation-form blocks
ARABIC_SCRIPT_RE = re.compile(
    r"[\u0600-\u06FF\u0750-\u077F\u08A0-\u08FF\uFB50-\uFDFF\uFE70-\uFEFF]"
)
# Main block only; used for the correction skip ratio
ARABIC_BLOCK_RE = re.compile(r"[\u0600-\u06FF]")
LATIN_LETTER_RE = re.compile("[A-Za-zÀ-ÿ]")
# Arabic letters proper (hamza through yeh)
ARABIC_LETTER_CLASS = "ء-ي"
PAGE_MARKER_RE = re.compile(PAGE_MARKER_PATTERN)


def count_arabic(text: str) -> int:
    return len(ARABIC_SCRIPT_RE.findall(text))


def count_latin(text: str) -> int:
    return len(LATIN_LETTER_RE.findall(text))


def arabic_block_ratio(text: str) -> float:
    """Share of non-whitespace characters that fall in the main Arabic block."""
    non_space = len(re.sub(r"\s", "", text))
    if non_space == 0:
        return 0.0
    return len(ARABIC_BLOCK_RE.findall(text)) / non_space


def normalize_digits(value: str) -> str:
    """Map Arabic-Indic and Persian digits to ASCII digits."""
    return value.translate(ARABIC_DIGIT_MAP)


def is_page_marker(line: str) -> bool:
    return bool(PAGE_MARKER_RE.match(line.strip()))


def content_lines(text: str) -> list[str]:
    """Non-blank, stripped lines with page markers removed."""
    return [
        line.strip()
        for line in text.splitlines()
        if line.strip() and not is_page_marker(line)
    ]


def context_window(text: str, start: int, end: int, radius: int) -> str:
    """Return up to ``radius`` characters on each side of ``text[start:end]``."""
    return text[max(0, start - radius) : min(len(text), end + radius)].strip()
