# src/localocr/utils.py
from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from PIL import Image

from .classifier import DocumentPath, classify, detect_document_type
from .exceptions import RenderError, UnsupportedTypeError
from .models import FilePreview, QueuedFile
from .pdf_processor import BasePDFProcessor, get_pdf_processor

logger = logging.getLogger("localocr")

PREVIEW_SIZE: Tuple[int, int] = (256, 256)


# ----------------------------
# Input selection
# ----------------------------

def _expand(paths: Iterable[Union[str, Path]]) -> List[Path]:
    out: List[Path] = []
    for raw in paths:
        p = Path(raw)
        if p.is_dir():
            out.extend(sorted(f for f in p.rglob("*") if f.is_file()))
        else:
            out.append(p)
    return out


def collect_files(paths: Iterable[Union[str, Path]]) -> List[QueuedFile]:
    """
    Build the queue from files and directories, in the order given.
    Directories are walked recursively in sorted order.
    Unsupported or unreadable inputs are skipped with a warning and never enter the queue.
    """
    queue: List[QueuedFile] = []
    for file_path in _expand(paths):
        try:
            detect_document_type(file_path.name)
        except UnsupportedTypeError:
            logger.warning("Skipping unsupported file: %s", file_path)
            continue
        try:
            queue.append(QueuedFile.from_path(file_path))
        except OSError as e:
            logger.warning("Skipping unreadable file %s: %s", file_path, e)
    logger.info("Selected %d files for processing", len(queue))
    return queue


# ----------------------------
# Previews
# ----------------------------

def make_preview(
    file: QueuedFile,
    size: Tuple[int, int] = PREVIEW_SIZE,
    pdf_processor: Optional[BasePDFProcessor] = None,
) -> FilePreview:
    """
    Pair a queued file with a thumbnail. PDFs use their first page.
    The file is left untouched; when no thumbnail can be built, preview is None.
    """
    try:
        if classify(file) is DocumentPath.MULTI_PAGE:
            processor = pdf_processor or get_pdf_processor()
            with processor.open(file.data, name=file.name) as doc:
                if doc.page_count < 1:
                    return FilePreview(file=file, preview=None)
                image = processor.render_page(doc.get_page(1), 0.5)
        else:
            with Image.open(io.BytesIO(file.data)) as im:
                image = im.convert("RGB")
    except (RenderError, OSError) as e:
        logger.debug("No preview for %s: %s", file.name, e)
        return FilePreview(file=file, preview=None)

    image.thumbnail(size)
    return FilePreview(file=file, preview=image)
