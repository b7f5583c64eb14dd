"""Unit tests for the Tesseract engine handle."""

import threading
import time
from unittest.mock import patch

import pytesseract
import pytest
from PIL import Image

from legalocr.clients.tesseract_engine import (
    ARABIC_PROFILE,
    LATIN_PROFILE,
    EngineHandle,
    OcrProfile,
    _lines_from_data,
)
from legalocr.core.exceptions import EngineUnavailableError

WORD_DATA = {
    "text": ["مرسوم", "رقم", "", "15-247"],
    "conf": ["90", "80", "-1", "70"],
    "block_num": [1, 1, 1, 1],
    "par_num": [1, 1, 1, 1],
    "line_num": [1, 1, 1, 2],
}


class TestOcrProfile:
    """Tests for profile to config conversion."""

    def test_latin_config(self):
        """Test engine and segmentation modes come first."""
        assert LATIN_PROFILE.to_config() == (
            "--oem 3 --psm 3 -c load_system_dawg=1 -c load_freq_dawg=1"
        )

    def test_arabic_profile_uses_whitelist(self):
        """Test the Arabic profile restricts characters and uses the LSTM engine."""
        config = ARABIC_PROFILE.to_config()

        assert config.startswith("--oem 1 --psm 6")
        assert "-c tessedit_char_whitelist=" in config
        assert "-c preserve_interword_spaces=1" in config

    def test_minimal_profile(self):
        """Test a profile without variables."""
        assert OcrProfile(name="x", psm=7, oem=1).to_config() == "--oem 1 --psm 7"


class TestLinesFromData:
    """Tests for grouping engine words into lines."""

    def test_groups_words_by_line(self):
        """Test words are joined per line and blanks are skipped."""
        result = _lines_from_data(WORD_DATA)

        assert result.text == "مرسوم رقم\n15-247"
        assert result.confidence == pytest.approx(0.8)

    def test_empty_output(self):
        """Test no words means empty text and zero confidence."""
        result = _lines_from_data({"text": [], "conf": []})

        assert result.text == ""
        assert result.confidence == 0.0


@patch("pytesseract.get_languages", return_value=["ara", "fra", "eng", "osd"])
@patch("pytesseract.get_tesseract_version", return_value="5.3.0")
class TestEngineHandle:
    """Tests for lazy, memoized engine initialization."""

    def test_not_initialized_until_first_use(self, mock_version, mock_languages):
        """Test construction does not probe the engine."""
        engine = EngineHandle()

        assert engine.ready is False
        mock_version.assert_not_called()

    def test_ready_after_ensure(self, mock_version, mock_languages):
        """Test successful initialization."""
        engine = EngineHandle()

        engine.ensure_ready()

        status = engine.status()
        assert engine.ready is True
        assert status["version"] == "5.3.0"
        assert status["error"] is None

    def test_initializes_once_under_concurrency(self, mock_version, mock_languages):
        """Test concurrent first calls run initialization exactly once."""

        def slow_version():
            time.sleep(0.05)
            return "5.3.0"

        mock_version.side_effect = slow_version
        engine = EngineHandle()
        threads = [threading.Thread(target=engine.ensure_ready) for _ in range(8)]

        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert mock_version.call_count == 1
        assert engine.ready is True

    def test_missing_language_pack(self, mock_version, mock_languages):
        """Test a missing required language pack makes the engine unavailable."""
        mock_languages.return_value = ["fra", "eng"]
        engine = EngineHandle()

        with pytest.raises(EngineUnavailableError) as exc_info:
            engine.ensure_ready()

        assert "ara" in exc_info.value.details["reason"]

    def test_failure_remembered_until_reset(self, mock_version, mock_languages):
        """Test a failed initialization is not retried until reset()."""
        mock_version.side_effect = pytesseract.TesseractNotFoundError()
        engine = EngineHandle()

        with pytest.raises(EngineUnavailableError):
            engine.ensure_ready()
        with pytest.raises(EngineUnavailableError):
            engine.ensure_ready()
        assert mock_version.call_count == 1

        mock_version.side_effect = None
        engine.reset()
        engine.ensure_ready()

        assert engine.ready is True
        assert mock_version.call_count == 2

    def test_recognize(self, mock_version, mock_languages):
        """Test recognition passes the profile config and default languages."""
        engine = EngineHandle(languages="ara+fra")
        image = Image.new("L", (10, 10), 255)

        with patch("pytesseract.image_to_data", return_value=WORD_DATA) as mock_data:
            result = engine.recognize(image, ARABIC_PROFILE)

        kwargs = mock_data.call_args.kwargs
        assert kwargs["lang"] == "ara+fra"
        assert kwargs["config"] == ARABIC_PROFILE.to_config()
        assert result.text == "مرسوم رقم\n15-247"

    def test_recognize_fails_when_unavailable(self, mock_version, mock_languages):
        """Test recognition is refused by a broken engine."""
        mock_languages.return_value = []
        engine = EngineHandle()

        with patch("pytesseract.image_to_data") as mock_data:
            with pytest.raises(EngineUnavailableError):
                engine.recognize(Image.new("L", (10, 10)), LATIN_PROFILE)

        mock_data.assert_not_called()
