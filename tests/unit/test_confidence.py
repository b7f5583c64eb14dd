"""Unit tests for the extraction-quality score."""

from datetime import date

from legalocr.config.settings import DEFAULT_INSTITUTION, DEFAULT_TITLE
from legalocr.models.dto import Article, LegalReference, ReferenceType
from legalocr.processors.confidence import score

TODAY = date(2024, 6, 1)
REFERENCE = LegalReference(type=ReferenceType.LAW, number="90-11")
ARTICLE = Article(number="1", content="Le présent décret a pour objet...")


class TestScore:
    """Tests for score()."""

    def test_all_signals_present(self):
        """Test a fully identified document scores 1.0."""
        result = score(
            "Loi n° 08-09",
            "08-09",
            "2008-02-25",
            "Ministère de la Justice",
            [REFERENCE],
            [ARTICLE],
            today=TODAY,
        )

        assert result == 1.0

    def test_defaults_score_zero(self):
        """Test placeholder values count as absent."""
        result = score(
            DEFAULT_TITLE,
            "",
            TODAY.isoformat(),
            DEFAULT_INSTITUTION,
            [],
            [],
            today=TODAY,
        )

        assert result == 0.0

    def test_title_needs_number(self):
        """Test a title without an official number earns nothing."""
        assert score("Loi sur la monnaie", "", None, None, [], [], today=TODAY) == 0.0

    def test_fallback_date_not_counted(self):
        """Test today's date is treated as the fallback."""
        assert score(None, None, TODAY.isoformat(), None, [], [], today=TODAY) == 0.0
        assert score(None, None, "2015-09-10", None, [], [], today=TODAY) == 0.2

    def test_partial_signals(self):
        """Test signals add up independently."""
        result = score(
            "Décret exécutif n° 15-247",
            "15-247",
            "2015-09-10",
            DEFAULT_INSTITUTION,
            [],
            [ARTICLE],
            today=TODAY,
        )

        assert result == 0.65
