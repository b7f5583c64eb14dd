"""
Extraction-quality score for a structured publication.

Five independent signals add up to at most 1.0:

- title and official number present: 0.3
- a date was found in the text (the fallback is today): 0.2
- an institution was identified: 0.2
- at least one cross-reference: 0.15
- at least one article: 0.15
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from legalocr.config.settings import (
    DEFAULT_INSTITUTION,
    DEFAULT_TITLE,
    SCORE_ARTICLES,
    SCORE_DATE,
    SCORE_INSTITUTION,
    SCORE_REFERENCES,
    SCORE_TITLE_NUMBER,
)


def score(
    title: Optional[str],
    number: Optional[str],
    doc_date: Optional[str],
    institution: Optional[str],
    references: Sequence,
    articles: Sequence,
    today: Optional[date] = None,
) -> float:
    """
    Combine the presence of structural elements into one scalar.

    Args:
      title: Extracted title; the "no title" default counts as absent.
      number: Official number such as "08-09".
      doc_date: Normalized YYYY-MM-DD date; today's date counts as absent
        since it is the extractor's fallback.
      institution: Issuing institution; the "not identified" default counts
        as absent.
      references: Cross-references found in the text.
      articles: Articles found in the text.
      today: Reference day for the date signal (defaults to date.today()).

    Returns:
      Score in [0.0, 1.0], rounded to 4 decimals.
    """
    today_iso = (today or date.today()).isoformat()
    total = 0.0
    if title and title != DEFAULT_TITLE and number:
        total += SCORE_TITLE_NUMBER
    if doc_date and doc_date != today_iso:
        total += SCORE_DATE
    if institution and institution != DEFAULT_INSTITUTION:
        total += SCORE_INSTITUTION
    if references:
        total += SCORE_REFERENCES
    if articles:
        total += SCORE_ARTICLES
    return round(min(total, 1.0), 4)
