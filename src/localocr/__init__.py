"""
localocr

Batch OCR for PDF, TIFF, PNG and JPEG files with one Tesseract engine per run,
page-by-page PDF rasterization and per-file failure isolation.

Public API:
    BatchRunner  - Runs a queue of files and returns a RunOutcome
    run_batch    - One-call wrapper around BatchRunner
    OCRConfig    - Run configuration
    QueuedFile   - A file in the queue
    collect_files - Build a queue from paths
"""

from .config import OCRConfig, SUPPORTED_FILE_TYPES, SUPPORTED_LANGUAGES
from .exceptions import (
    EngineInitError,
    FileProcessingError,
    LocalOCRError,
    RecognitionError,
    RenderError,
    UnsupportedTypeError,
)
from .models import BatchReport, FileResult, PageResult, QueuedFile, RunOutcome, RunPhase, RunState
from .runner import BatchRunner, run_batch
from .utils import collect_files, make_preview

__version__ = "1.0.0"

__all__ = [
    "BatchRunner",
    "run_batch",
    "OCRConfig",
    "SUPPORTED_FILE_TYPES",
    "SUPPORTED_LANGUAGES",
    "QueuedFile",
    "PageResult",
    "FileResult",
    "BatchReport",
    "RunOutcome",
    "RunPhase",
    "RunState",
    "collect_files",
    "make_preview",
    "LocalOCRError",
    "UnsupportedTypeError",
    "FileProcessingError",
    "RenderError",
    "RecognitionError",
    "EngineInitError",
]
