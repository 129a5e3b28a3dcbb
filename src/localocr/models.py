# localocr/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Tuple, Union

from .config import SUPPORTED_FILE_TYPES

FAILURE_MESSAGE = "Error: Unable to process this file. It may be corrupted or in an unsupported format."
RUN_ERROR_MESSAGE = "An error occurred during OCR processing. Please try again with different files."


class DocumentType(Enum):
    """The four accepted input types, valued by MIME type."""
    PDF = "application/pdf"
    TIFF = "image/tiff"
    PNG = "image/png"
    JPEG = "image/jpeg"

    @property
    def mime_type(self) -> str:
        return self.value

    @property
    def extensions(self) -> Tuple[str, ...]:
        return SUPPORTED_FILE_TYPES[self.value]


@dataclass(frozen=True)
class QueuedFile:
    """A single file selected for a run. Immutable for the run."""
    name: str
    document_type: DocumentType
    data: bytes = field(repr=False)

    @classmethod
    def from_bytes(cls, name: str, data: bytes, mime_type: Optional[str] = None) -> "QueuedFile":
        from .classifier import detect_document_type  # local import to avoid import cycles
        return cls(name=name, document_type=detect_document_type(name, mime_type), data=bytes(data))

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "QueuedFile":
        from .classifier import detect_document_type
        p = Path(path)
        doc_type = detect_document_type(p.name)  # reject before touching the disk
        return cls(name=p.name, document_type=doc_type, data=p.read_bytes())


@dataclass(frozen=True)
class FilePreview:
    """A queued file paired with its preview thumbnail."""
    file: QueuedFile
    preview: Any  # PIL.Image.Image, or None when no preview could be built


@dataclass(frozen=True)
class RecognitionJob:
    """One image and the language it is recognized in. Consumed immediately."""
    image: Any
    language: str


@dataclass(frozen=True)
class ProgressEvent:
    """Out-of-band progress emitted by an engine while a call is running."""
    status: str
    progress: float = 0.0


@dataclass(frozen=True)
class PageResult:
    page_index: int  # 1-based
    text: str

    def render(self) -> str:
        return f"Page {self.page_index}:\n{self.text}\n\n"


@dataclass(frozen=True)
class FileResult:
    """Final outcome for one queued file: either text or a failure reason."""
    file_name: str
    text: Optional[str] = None
    reason: Optional[str] = None
    detail: Optional[str] = None

    @classmethod
    def success(cls, file_name: str, text: str) -> "FileResult":
        return cls(file_name=file_name, text=text)

    @classmethod
    def failure(cls, file_name: str, detail: Optional[str] = None, reason: str = FAILURE_MESSAGE) -> "FileResult":
        return cls(file_name=file_name, reason=reason, detail=detail)

    @property
    def succeeded(self) -> bool:
        return self.reason is None

    @property
    def body(self) -> str:
        return self.text if self.succeeded else self.reason

    def render(self) -> str:
        return f"File: {self.file_name}\n\n{self.body}\n\n"


@dataclass(frozen=True)
class BatchReport:
    """File results in exactly the queue's insertion order."""
    results: Tuple[FileResult, ...] = ()

    @property
    def succeeded(self) -> Tuple[FileResult, ...]:
        return tuple(r for r in self.results if r.succeeded)

    @property
    def failed(self) -> Tuple[FileResult, ...]:
        return tuple(r for r in self.results if not r.succeeded)

    def render(self) -> str:
        return "".join(r.render() for r in self.results)

    def __str__(self) -> str:
        return self.render()


class RunPhase(Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    PROCESSING = "processing"
    FINALIZING = "finalizing"
    ABORTED = "aborted"


@dataclass(frozen=True)
class RunState:
    """Snapshot of a run. Each transition produces a new value."""
    language: str
    phase: RunPhase = RunPhase.IDLE
    is_processing: bool = False
    progress_percent: float = 0.0
    last_error: Optional[str] = None
    current_file: Optional[int] = None  # 0-based queue position
    total_files: int = 0


@dataclass(frozen=True)
class RunOutcome:
    """Either a completed report or a single run-level error, never both."""
    state: RunState
    report: Optional[BatchReport] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def text(self) -> str:
        return self.report.render() if self.report is not None else ""
