# src/localocr/pdf_processor.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import fitz  # PyMuPDF
from PIL import Image

from .config import DEFAULT_RENDER_SCALE
from .exceptions import RenderError

logger = logging.getLogger("localocr")


class PDFDocument:
    """
    An opened PDF. Pages are addressed 1-based, matching the page labels in the report.
    Use as a context manager so the underlying document is closed on every path.
    """

    def __init__(self, doc: "fitz.Document", name: str = "<memory>"):
        self._doc = doc
        self.name = name

    @property
    def page_count(self) -> int:
        return self._doc.page_count

    def get_page(self, index: int) -> "fitz.Page":
        if not 1 <= index <= self.page_count:
            raise RenderError(f"Page {index} out of range for {self.name} ({self.page_count} pages)")
        try:
            return self._doc.load_page(index - 1)
        except Exception as e:
            raise RenderError(f"Failed to load page {index} of {self.name}: {e}") from e

    def close(self) -> None:
        if not self._doc.is_closed:
            self._doc.close()

    def __enter__(self) -> "PDFDocument":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


# --- Step 1, interface ---
class BasePDFProcessor(ABC):
    """
    Interface for any PDF rasterizing engine.
    """

    @abstractmethod
    def open(self, data: bytes, name: str = "<memory>") -> Any:
        """Opens a document from bytes, returns a handle exposing page_count and get_page(index)."""
        raise NotImplementedError

    @abstractmethod
    def render_page(self, page: Any, scale: float = DEFAULT_RENDER_SCALE) -> Image.Image:
        """Renders one page handle to an RGB bitmap at the given scale."""
        raise NotImplementedError


# --- Step 2, concrete implementation with PyMuPDF ---
class PyMuPDFProcessor(BasePDFProcessor):
    """PDF processor that uses PyMuPDF."""

    def open(self, data: bytes, name: str = "<memory>") -> PDFDocument:
        if not data:
            raise RenderError(f"Empty document: {name}")
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except Exception as e:
            raise RenderError(f"PyMuPDF failed to open {name}: {e}") from e
        if doc.needs_pass:
            doc.close()
            raise RenderError(f"{name} is password protected")
        logger.debug("Opened %s: %d pages", name, doc.page_count)
        return PDFDocument(doc, name=name)

    def render_page(self, page: "fitz.Page", scale: float = DEFAULT_RENDER_SCALE) -> Image.Image:
        """
        Render one page into a Pillow image.
        The pixmap is released before returning so only one page raster is held at a time.
        """
        pix = None
        try:
            pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
            # frombytes copies the samples, the pixmap itself is dropped below
            return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
        except Exception as e:
            raise RenderError(f"PyMuPDF failed to render page {getattr(page, 'number', '?')}: {e}") from e
        finally:
            del pix


# --- Step 3, factory ---
def get_pdf_processor(engine_name: str = "pymupdf") -> BasePDFProcessor:
    """
    Create a PDF processor by name.
    """
    name = (engine_name or "").lower()
    if name == "pymupdf":
        return PyMuPDFProcessor()
    raise ValueError(f"Unknown PDF engine: '{engine_name}'. Supported engines: ['pymupdf']")
