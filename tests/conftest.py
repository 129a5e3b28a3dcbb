"""
Shared fixtures and test doubles.

FakeEngine returns the bytes it is given as text (single-image path) or a
label for rendered pages, so expected reports can be written out literally.
FakePDFProcessor understands documents of the form b"%PDF-fake pages=N".
"""

import io
import re

import fitz
import pytest
from PIL import Image

from localocr.config import OCRConfig
from localocr.exceptions import EngineInitError, RecognitionError, RenderError
from localocr.models import DocumentType, QueuedFile
from localocr.ocr_backends.base import BaseOCREngine, emit
from localocr.pdf_processor import BasePDFProcessor


class FakeEngine(BaseOCREngine):
    def __init__(self, fail_on=(), init_error=None, steps=(0.0, 0.5, 1.0)):
        self.fail_on = set(fail_on)
        self.init_error = init_error
        self.steps = steps
        self.language = None
        self.initialized = []
        self.recognized = []
        self.terminate_count = 0

    def initialize(self, language, progress=None):
        self.initialized.append(language)
        emit(progress, "loading language traineddata", 0.0)
        if self.init_error is not None:
            raise self.init_error
        self.language = language
        emit(progress, "initialized api", 1.0)

    def recognize(self, image, progress=None):
        if self.language is None:
            raise RecognitionError("not initialized")
        label = self._label(image)
        self.recognized.append(label)
        for step in self.steps:
            emit(progress, "recognizing text", step)
        if label in self.fail_on:
            raise RecognitionError(f"cannot read {label}")
        return label if isinstance(image, (bytes, bytearray)) else f"text of {label}"

    def terminate(self):
        self.terminate_count += 1
        self.language = None

    @staticmethod
    def _label(image):
        if isinstance(image, (bytes, bytearray)):
            return bytes(image).decode("utf-8", "replace")
        if isinstance(image, Image.Image):
            return "image %dx%d" % image.size
        return str(image)


class FakeDocument:
    def __init__(self, name, page_count):
        self.name = name
        self.page_count = page_count
        self.closed = False

    def get_page(self, index):
        if not 1 <= index <= self.page_count:
            raise RenderError(f"page {index} out of range")
        return (self.name, index)

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


class FakePDFProcessor(BasePDFProcessor):
    def __init__(self, fail_pages=()):
        self.fail_pages = set(fail_pages)
        self.opened = []
        self.rendered = []
        self.scales = []

    def open(self, data, name="<memory>"):
        m = re.fullmatch(rb"%PDF-fake pages=(\d+)", data or b"")
        if not m:
            raise RenderError(f"not a document, {name}")
        doc = FakeDocument(name, int(m.group(1)))
        self.opened.append(doc)
        return doc

    def render_page(self, page, scale=1.5):
        name, index = page
        self.scales.append(scale)
        if (name, index) in self.fail_pages:
            raise RenderError(f"cannot render page {index} of {name}")
        self.rendered.append((name, index))
        return f"{name}#p{index}"


def fake_pdf(name, pages):
    return QueuedFile(name=name, document_type=DocumentType.PDF, data=b"%%PDF-fake pages=%d" % pages)


def image_file(name, text, doc_type=DocumentType.PNG):
    return QueuedFile(name=name, document_type=doc_type, data=text.encode("utf-8"))


def make_pdf_bytes(pages=2, width=200, height=100):
    doc = fitz.open()
    for i in range(pages):
        page = doc.new_page(width=width, height=height)
        page.insert_text((20, 50), f"Page {i + 1}")
    data = doc.tobytes()
    doc.close()
    return data


def make_image_bytes(fmt="PNG", size=(40, 20)):
    buf = io.BytesIO()
    Image.new("RGB", size, "white").save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def pdf_processor():
    return FakePDFProcessor()


@pytest.fixture
def config():
    return OCRConfig(show_progress_bar=False)


@pytest.fixture
def bad_language_engine():
    return FakeEngine(init_error=EngineInitError("Language 'xyz' is not installed"))
