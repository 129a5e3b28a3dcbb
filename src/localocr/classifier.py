# localocr/classifier.py
from __future__ import annotations

from enum import Enum
from pathlib import PurePath
from typing import Optional

from .exceptions import UnsupportedTypeError
from .models import DocumentType, QueuedFile


class DocumentPath(Enum):
    MULTI_PAGE = "multi_page"
    SINGLE_IMAGE = "single_image"


def detect_document_type(name: str, mime_type: Optional[str] = None) -> DocumentType:
    """
    Resolve the declared type of an input. A declared MIME type is authoritative,
    the file extension is only consulted when no MIME type is given.
    Raises UnsupportedTypeError for anything outside PDF, TIFF, PNG and JPEG.
    """
    if mime_type:
        try:
            return DocumentType(mime_type.strip().lower())
        except ValueError:
            raise UnsupportedTypeError(
                f"Unsupported file type for '{name}' ({mime_type}). Accepted: PDF, TIFF, PNG, JPEG"
            ) from None

    ext = PurePath(name or "").suffix.lower()
    for doc_type in DocumentType:
        if ext and ext in doc_type.extensions:
            return doc_type

    raise UnsupportedTypeError(f"Unsupported file type for '{name}'. Accepted: PDF, TIFF, PNG, JPEG")


def classify(file: QueuedFile) -> DocumentPath:
    """PDFs go through the page pipeline, every other accepted type is recognized directly."""
    if file.document_type is DocumentType.PDF:
        return DocumentPath.MULTI_PAGE
    return DocumentPath.SINGLE_IMAGE
