"""
Bilingual pattern tables for Algerian legal texts.

The tables are plain data: ordered ``(tag, [regex, ...])`` lists and flat
regex lists, keyed by table name. ``load_pattern_tables`` compiles them and
optionally merges overrides from a JSON file of the same shape, so new
terminology can be added without touching extractor code.

Placeholders ``{french_months}``, ``{arabic_months}``, ``{hijri_months}``,
``{ordinals}``, ``{cap}`` and ``{num}`` are expanded before compilation.
"""

from __future__ import annotations

import copy
import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from legalocr.config.constants import (
    ARABIC_GREGORIAN_MONTHS,
    ARABIC_ORDINALS,
    FRENCH_MONTHS,
    HIJRI_MONTHS,
)
from legalocr.utils.io_utils import read_json

logger = logging.getLogger(__name__)

# Official number such as 15-247 or 08/09
NUM = r"(?P<number>\d+\s*[-/]\s*\d+)"
# Capitalized French word, also matching all-caps headings
CAP = r"(?:[lLdD]['’])?[A-ZÀ-ÖØ-Þ][A-Za-zÀ-ÖØ-öø-ÿ'’-]+"
_JOIN = r"(?:[ \t]*,[ \t]*|[ \t]+(?:(?:et|de|des|du|de[ \t]+la|à|chargée?[ \t]+de[ \t]+la)[ \t]+)?)"
_FR_NAME = rf"{CAP}(?:{_JOIN}{CAP}){{0,3}}"
_FR_OF = r"(?:(?i:de)[ \t]+(?i:la)[ \t]+|(?i:des|du|de)[ \t]+)?"

DEFAULT_PATTERN_TABLES: dict[str, Any] = {
    # Ordered: the first family with a hit decides the document type
    "document_types": [
        (
            "law",
            [
                rf"\bloi\s+(?:organique\s+)?n°?\s*{NUM}",
                rf"(?:ال)?قانون\s+(?:(?:ال)?عضوي\s+)?رقم\s*{NUM}",
            ],
        ),
        (
            "decree",
            [
                rf"\bdécret\s+(?:exécutif\s+|présidentiel\s+|législatif\s+)?n°?\s*{NUM}",
                rf"(?:ال)?مرسوم\s+(?:(?:ال)?(?:تنفيذي|رئاسي|تشريعي)\s+)?رقم\s*{NUM}",
            ],
        ),
        (
            "order",
            [
                rf"\barrêté\s+(?:interministériel\s+|ministériel\s+|du\s+wali\s+)?n°?\s*{NUM}",
                rf"(?:ال)?قرار\s+(?:(?:ال)?(?:وزاري\s+مشترك|وزاري|ولائي)\s+)?رقم\s*{NUM}",
            ],
        ),
        (
            "ordinance",
            [
                rf"\bordonnance\s+n°?\s*{NUM}",
                rf"(?:ال)?أمر\s+رقم\s*{NUM}",
            ],
        ),
        (
            "instruction",
            [
                rf"\binstruction\s+(?:interministérielle\s+|ministérielle\s+)?n°?\s*{NUM}",
                rf"(?:ال)?تعليمة\s+(?:(?:ال)?(?:وزارية\s+مشتركة|وزارية)\s+)?رقم\s*{NUM}",
            ],
        ),
        (
            "circular",
            [
                rf"\bcirculaire\s+(?:interministérielle\s+|ministérielle\s+)?n°?\s*{NUM}",
                rf"(?:ال)?منشور\s+(?:(?:ال)?(?:وزاري\s+مشترك|وزاري)\s+)?رقم\s*{NUM}",
            ],
        ),
        (
            "decision",
            [
                rf"\bdécision\s+n°?\s*{NUM}",
                rf"(?:ال)?مقرر\s+رقم\s*{NUM}",
            ],
        ),
    ],
    # Ordered: Gregorian numeric, French month, Arabic Gregorian month,
    # Hijri month, then the Arabic correspondence phrasings
    "dates": [
        (
            "numeric",
            [r"\b(?P<day>\d{1,2})[-/.](?P<month>\d{1,2})[-/.](?P<year>\d{4})\b"],
        ),
        (
            "gregorian",
            [
                r"\b(?P<day>\d{1,2})(?:er)?\s+(?P<month>{french_months})\s+(?P<year>\d{4})\b",
                r"\b(?P<day>\d{1,2})\s+(?P<month>{arabic_months})\s+(?P<year>\d{4})\b",
            ],
        ),
        (
            "hijri",
            [r"\b(?P<day>\d{1,2})\s+(?P<month>{hijri_months})\s+(?P<year>\d{4})\b"],
        ),
        (
            "numeric",
            [
                r"الموافق\s+(?:ل\s*)?(?P<day>\d{1,2})[-/](?P<month>\d{1,2})[-/](?P<year>\d{4})",
                r"المؤرخ\s+في\s+(?P<day>\d{1,2})[-/](?P<month>\d{1,2})[-/](?P<year>\d{4})",
            ],
        ),
    ],
    # Ordered: the first pattern with a hit names the institution
    "institutions": [
        rf"\b(?i:minist[èe]re|ministre)[ \t]+{_FR_OF}{_FR_NAME}",
        rf"\b(?i:wali|wilaya)[ \t]+(?:(?i:de|du)[ \t]+|(?i:d)['’])?{CAP}(?:[ \t-]+{CAP}){{0,2}}",
        rf"\b(?i:direction|inspection)[ \t]+(?:(?i:générale)[ \t]+)?{_FR_OF}{_FR_NAME}",
        rf"\b(?:APC|(?i:assemblée[ \t]+populaire[ \t]+communale))(?:[ \t]+(?:(?i:de)[ \t]+|(?i:d)['’]){CAP})?",
        rf"\b(?:APW|(?i:assemblée[ \t]+populaire[ \t]+de[ \t]+wilaya))(?:[ \t]+(?:(?i:de)[ \t]+|(?i:d)['’]){CAP})?",
        r"(?:وزارة|وزير)(?:[ \t]+و?ال[ء-ي]+){1,4}",
        r"(?:والي|ولاية)(?:[ \t]+[ء-ي]+){1,2}",
        r"(?:المديرية|مديرية|تفتيش|مفتشية)(?:[ \t]+و?ال[ء-ي]+){1,3}",
        r"(?:المجلس[ \t]+الشعبي[ \t]+البلدي|مجلس[ \t]+شعبي[ \t]+بلدي|بلدية(?:[ \t]+[ء-ي]+)?)",
        r"(?:المجلس[ \t]+الشعبي[ \t]+الولائي|مجلس[ \t]+شعبي[ \t]+ولائي)",
    ],
    "wilayas": [
        rf"\b(?i:wilaya)[ \t]+(?:(?i:de|du)[ \t]+|(?i:d)['’])?(?P<name>{CAP}(?:[ \t-]+{CAP}){{0,2}})",
        r"ولاية[ \t]+(?P<name>[ء-ي]+(?:[ \t]+[ء-ي]+)?)",
    ],
    # All hits are collected; the reference type is re-derived from the hit
    "references": [
        rf"\bloi\s+(?:organique\s+)?n°?\s*{NUM}",
        rf"(?:ال)?قانون\s+(?:(?:ال)?عضوي\s+)?رقم\s*{NUM}",
        rf"\bdécret\s+(?:exécutif\s+|présidentiel\s+|législatif\s+)?n°?\s*{NUM}",
        rf"(?:ال)?مرسوم\s+(?:(?:ال)?(?:تنفيذي|رئاسي|تشريعي)\s+)?رقم\s*{NUM}",
        rf"\barrêté\s+(?:interministériel\s+|ministériel\s+)?n°?\s*{NUM}",
        rf"(?:ال)?قرار\s+(?:(?:ال)?(?:وزاري\s+مشترك|وزاري|ولائي)\s+)?رقم\s*{NUM}",
        rf"\bordonnance\s+n°?\s*{NUM}",
        rf"(?:ال)?أمر\s+رقم\s*{NUM}",
        rf"\binstruction\s+(?:interministérielle\s+|ministérielle\s+)?n°?\s*{NUM}",
        rf"(?:ال)?تعليمة\s+(?:(?:ال)?وزارية\s+)?رقم\s*{NUM}",
        r"\b(?:JORA|journal\s+officiel)\s+n°?\s*(?P<number>\d+)",
        r"(?:ال)?جريدة\s+(?:ال)?رسمية\s+(?:(?:ال)?عدد|رقم)\s*(?P<number>\d+)",
        r"\b(?:article|art\.)\s*(?P<number>\d+(?:\s*er)?(?:\s+(?:bis|ter))?)\b",
        r"(?:ال)?مادة\s+(?P<number>\d+(?:\s*مكرر)?)",
    ],
    # Ordered: reference type derived from the matched text
    "reference_types": [
        ("jora", [r"jora|journal\s+officiel|جريدة"]),
        ("law", [r"\bloi\b|قانون"]),
        ("decree", [r"décret|مرسوم"]),
        ("order", [r"arrêté|قرار"]),
        ("ordinance", [r"ordonnance|أمر"]),
        ("instruction", [r"instruction|تعليمة"]),
        ("article", [r"\bart(?:icle|\.)|مادة"]),
    ],
    # Phrases that introduce the date of a cited instrument
    "reference_date_leads": [
        r"^[ \t]*(?:,[ \t]*)?(?:du|en\s+date\s+du|(?:ال)?مؤرخ(?:ة)?\s+في|(?:ال)?موافق\s+(?:ل\s*)?)",
    ],
    "articles": [
        r"^[ \t]*(?:article|art\.)[ \t]*(?P<number>\d+(?:[ \t]*er)?(?:[ \t]+(?:bis|ter|quater))?)(?:(?:[ \t]*[.:\-–—])+[ \t]*(?P<title>.*))?[ \t]*$",
        r"^[ \t]*(?:ال)?مادة[ \t]*(?P<number>\d+(?:[ \t]*مكرر)?|{ordinals})(?:(?:[ \t]*[.:\-–—])+[ \t]*(?P<title>.*))?[ \t]*$",
        r"^[ \t]*م\.[ \t]*(?P<number>\d+)(?:(?:[ \t]*[.:\-–—])+[ \t]*(?P<title>.*))?[ \t]*$",
    ],
    "amounts": [
        r"\b\d{1,3}(?:[. ]\d{3})+(?:,\d{2})?[ \t]*(?:DA|DZD|dinars?|دج|دينار)(?![A-Za-z])",
        r"\b\d+(?:,\d{2})?[ \t]*(?:DA|DZD|dinars?|دج|دينار)(?![A-Za-z])",
    ],
    "persons": [
        r"\b[A-ZÀ-ÖØ-Þ][a-zß-öø-ÿ]+[ ]+[A-ZÀ-ÖØ-Þ][a-zß-öø-ÿ]+\b",
    ],
    "numbers": [
        r"\bN°[ \t]*\d+[-/]\d+\b",
        r"\b\d{2}-\d{3}\b",
        r"\bDZ\d{8,12}\b",
    ],
}

# Tables whose keywords are case-insensitive as a whole; the others opt in
# per keyword with scoped ``(?i:...)`` groups
_CASE_INSENSITIVE = {
    "document_types",
    "dates",
    "references",
    "reference_types",
    "reference_date_leads",
    "articles",
    "amounts",
}


def _alternation(names) -> str:
    ordered = sorted(names, key=len, reverse=True)
    return "|".join(
        re.escape(name).replace("\\ ", " ").replace(" ", r"\s+") for name in ordered
    )


_PLACEHOLDERS = {
    "{french_months}": _alternation(FRENCH_MONTHS),
    "{arabic_months}": _alternation(ARABIC_GREGORIAN_MONTHS),
    "{hijri_months}": _alternation(HIJRI_MONTHS),
    "{ordinals}": _alternation(ARABIC_ORDINALS),
    "{cap}": CAP,
    "{num}": NUM,
}


def _expand(pattern: str) -> str:
    for placeholder, value in _PLACEHOLDERS.items():
        pattern = pattern.replace(placeholder, value)
    return pattern


def _compile(table: str, pattern: str) -> re.Pattern:
    flags = re.MULTILINE
    if table in _CASE_INSENSITIVE:
        flags |= re.IGNORECASE
    return re.compile(_expand(pattern), flags)


@dataclass(frozen=True)
class PatternTables:
    """Compiled pattern tables consumed by the structure extractor."""

    document_types: list[tuple[str, list[re.Pattern]]]
    dates: list[tuple[str, list[re.Pattern]]]
    institutions: list[re.Pattern]
    wilayas: list[re.Pattern]
    references: list[re.Pattern]
    reference_types: list[tuple[str, list[re.Pattern]]]
    reference_date_leads: list[re.Pattern]
    articles: list[re.Pattern]
    amounts: list[re.Pattern]
    persons: list[re.Pattern]
    numbers: list[re.Pattern]
    source: Optional[str] = field(default=None, compare=False)


def _merge_tagged(base: list, override: Any) -> list:
    """Replace entries with the same tag; append new tags at the end."""
    if isinstance(override, dict):
        override = list(override.items())
    merged = list(base)
    tags = [tag for tag, _ in merged]
    for tag, patterns in override:
        if tag in tags:
            merged[tags.index(tag)] = (tag, patterns)
        else:
            merged.append((tag, patterns))
            tags.append(tag)
    return merged


def compile_pattern_tables(
    raw: dict[str, Any], source: Optional[str] = None
) -> PatternTables:
    compiled: dict[str, Any] = {}
    for name, entries in raw.items():
        if entries and isinstance(entries[0], (tuple, list)):
            compiled[name] = [
                (tag, [_compile(name, p) for p in patterns])
                for tag, patterns in entries
            ]
        else:
            compiled[name] = [_compile(name, p) for p in entries]
    return PatternTables(**compiled, source=source)


def load_pattern_tables(path: str | Path | None = None) -> PatternTables:
    """
    Compile the built-in tables, merged with overrides from a JSON file.

    Tagged tables (``document_types``, ``dates``, ``reference_types``) are
    merged by tag: an override replaces the built-in patterns for that tag
    and keeps its position. Flat tables are replaced as a whole.

    Args:
      path: Optional JSON file with a subset of the table names.

    Returns:
      Compiled PatternTables.

    Raises:
      ValueError: If the override names an unknown table.
    """
    raw = copy.deepcopy(DEFAULT_PATTERN_TABLES)
    if path:
        overrides = read_json(path)
        unknown = set(overrides) - set(raw)
        if unknown:
            raise ValueError(f"Unknown pattern tables: {sorted(unknown)}")
        for name, entries in overrides.items():
            if raw[name] and isinstance(raw[name][0], tuple):
                raw[name] = _merge_tagged(raw[name], entries)
            else:
                raw[name] = list(entries)
        logger.info(
            "Loaded pattern overrides for %s", sorted(overrides), extra={"filename": str(path)}
        )
    return compile_pattern_tables(raw, source=str(path) if path else None)


@lru_cache(maxsize=1)
def default_pattern_tables() -> PatternTables:
    return load_pattern_tables()
