# localocr/ocr_backends/__init__.py
from __future__ import annotations

import importlib
import logging
from typing import Any

from .base import BaseOCREngine, ProgressCallback

__all__ = ["BaseOCREngine", "ProgressCallback", "load_backend", "normalize_backend_alias"]

logger = logging.getLogger("localocr")

_BACKEND_ALIASES = {
    "tess": "localocr.ocr_backends.tesseract_backend.TesseractOCREngine",
    "tesseract": "localocr.ocr_backends.tesseract_backend.TesseractOCREngine",
    "pytesseract": "localocr.ocr_backends.tesseract_backend.TesseractOCREngine",
}


def normalize_backend_alias(name: str) -> str:
    """
    Allow short aliases (case-insensitive) and the module-only shorthand.
    Returns a fully qualified dotted path 'module.Class'.
    """
    if not name:
        return name
    original = name.strip().strip('"\'')
    alias = original.lower()
    if alias in _BACKEND_ALIASES:
        return _BACKEND_ALIASES[alias]
    if alias.endswith(".tesseract_backend"):
        return _BACKEND_ALIASES["tesseract"]
    return original


def _import_obj(dotted: str):
    mod_path, _, attr = dotted.rpartition(".")
    if not mod_path or not attr:
        raise ImportError(f"Invalid backend path: {dotted}")
    mod = importlib.import_module(mod_path)
    try:
        return getattr(mod, attr)
    except AttributeError as e:
        raise ImportError(f"Backend class not found: {dotted}") from e


def load_backend(backend_path: str, **backend_kwargs: Any) -> BaseOCREngine:
    """Import the backend class by dotted path (or alias) and create an engine instance."""
    dotted = normalize_backend_alias(backend_path)
    logger.debug("Loading OCR backend: %s", dotted)
    EngineCls = _import_obj(dotted)
    return EngineCls(**backend_kwargs)
