"""
pipeline.py

Page pipeline for multi-page documents.

Pages are processed strictly in order: rasterize, recognize, drop the raster,
then move on. A failure on any page fails the whole document; no partial text
is returned.
"""

import logging
from typing import Callable, Iterator, Optional

from .config import DEFAULT_RENDER_SCALE
from .exceptions import RecognitionError
from .models import PageResult, RecognitionJob
from .ocr_backends.base import BaseOCREngine, ProgressCallback
from .pdf_processor import BasePDFProcessor

logger = logging.getLogger("localocr")

PageCallback = Callable[[int, int], None]


def recognize_job(engine: BaseOCREngine, job: RecognitionJob, progress: Optional[ProgressCallback] = None) -> str:
    """Hand one job to the engine. The engine must have been initialized for the job's language."""
    if engine.language is not None and engine.language != job.language:
        raise RecognitionError(
            f"Engine is initialized for '{engine.language}', job requires '{job.language}'"
        )
    return engine.recognize(job.image, progress=progress)


def iter_pages(
    document,
    engine: BaseOCREngine,
    pdf_processor: BasePDFProcessor,
    scale: float = DEFAULT_RENDER_SCALE,
    on_page: Optional[PageCallback] = None,
    progress: Optional[ProgressCallback] = None,
    language: Optional[str] = None,
) -> Iterator[PageResult]:
    """
    Yield a PageResult for pages 1..page_count of an opened document.

    Args:
        document: Handle returned by pdf_processor.open().
        engine: Initialized OCR engine.
        pdf_processor: Rasterizer used to render each page.
        scale: Render scale factor.
        on_page: Called with (page_index, page_count) before each page.
        progress: Forwarded to engine.recognize().
        language: Language of each page job, defaults to the engine's own.
    """
    page_count = document.page_count
    language = language or engine.language
    for page_index in range(1, page_count + 1):
        if on_page is not None:
            on_page(page_index, page_count)
        logger.debug("Processing page %d/%d of %s", page_index, page_count, getattr(document, "name", "?"))

        page = document.get_page(page_index)
        image = pdf_processor.render_page(page, scale)
        try:
            text = recognize_job(engine, RecognitionJob(image=image, language=language), progress=progress)
        finally:
            # Release the raster before the next page is rendered
            del image
            del page

        yield PageResult(page_index=page_index, text=text)


def process_document(
    document,
    engine: BaseOCREngine,
    pdf_processor: BasePDFProcessor,
    scale: float = DEFAULT_RENDER_SCALE,
    on_page: Optional[PageCallback] = None,
    progress: Optional[ProgressCallback] = None,
    language: Optional[str] = None,
) -> str:
    """Recognize every page and return the concatenated 'Page n:' blocks."""
    parts = []
    for result in iter_pages(document, engine, pdf_processor, scale, on_page=on_page, progress=progress, language=language):
        parts.append(result.render())
    return "".join(parts)
