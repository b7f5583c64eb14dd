"""Shared fixtures: sample documents and fakes for the OCR collaborators."""

import io
from datetime import date

import pytest
from PIL import Image

from legalocr.clients.tesseract_engine import RecognitionResult
from legalocr.core.exceptions import RenderFailureError

FRENCH_DECREE = (
    "Décret exécutif n° 15-247 du 10 septembre 2015 portant organisation des marchés publics\n"
    "Le Premier ministre,\n"
    "Sur le rapport du Ministère des Finances,\n"
    "Vu la loi n° 08-09 du 25 février 2008 portant code de procédure civile et administrative,\n"
    "Décrète :\n"
    "Article 1er : Objet\n"
    "Le présent décret a pour objet de fixer les règles.\n"
    "Article 2 - Le ministre des finances est chargé de l'exécution du présent décret.\n"
)

ARABIC_DECREE = (
    "الجمهورية الجزائرية الديمقراطية الشعبية\n"
    "مرسوم تنفيذي رقم 15-247 مؤرخ في 10 سبتمبر 2015\n"
    "يتضمن تنظيم الصفقات العمومية\n"
    "المادة الأولى: يهدف هذا المرسوم إلى تحديد القواعد\n"
)


@pytest.fixture
def french_decree():
    return FRENCH_DECREE


@pytest.fixture
def arabic_decree():
    return ARABIC_DECREE


@pytest.fixture
def today():
    return date(2024, 6, 1)


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (20, 20), "white").save(buf, format="PNG")
    return buf.getvalue()


class FakeEngine:
    """Engine handle stand-in returning canned texts in call order."""

    def __init__(self, texts, confidence=0.9, fail=None):
        self.texts = list(texts)
        self.confidence = confidence
        self.fail = fail
        self.profiles = []

    def ensure_ready(self):
        if self.fail is not None:
            raise self.fail

    def recognize(self, image, profile):
        self.ensure_ready()
        self.profiles.append(profile.name)
        text = self.texts.pop(0) if self.texts else ""
        return RecognitionResult(text=text, confidence=self.confidence)

    @property
    def ready(self):
        return self.fail is None

    def status(self):
        return {
            "ready": self.ready,
            "initialized": True,
            "version": "5.3.0",
            "languages": ["ara", "fra"],
            "error": None if self.fail is None else str(self.fail),
        }


class FakeRenderer:
    """PDF renderer stand-in with a fixed page count."""

    def __init__(self, pages, fail_on=None):
        self.pages = pages
        self.fail_on = fail_on
        self.rendered = []

    def page_count(self, data):
        return self.pages

    def render_page(self, data, page_number):
        if page_number == self.fail_on:
            raise RenderFailureError(page_number, "poppler crashed")
        self.rendered.append(page_number)
        return Image.new("L", (10, 10), 255)


@pytest.fixture
def fake_engine_cls():
    return FakeEngine


@pytest.fixture
def fake_renderer_cls():
    return FakeRenderer
