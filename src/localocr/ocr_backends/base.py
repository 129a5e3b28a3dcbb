# localocr/ocr_backends/base.py
from typing import Any, Callable, Optional
from abc import ABC, abstractmethod

from ..models import ProgressEvent

ProgressCallback = Callable[[ProgressEvent], None]


def emit(progress: Optional[ProgressCallback], status: str, fraction: float) -> None:
    if progress is not None:
        progress(ProgressEvent(status=status, progress=max(0.0, min(1.0, float(fraction)))))


class BaseOCREngine(ABC):
    """
    One language-initialized recognizer, reused for every image of a run.
    A failed recognize() must leave the engine usable for the next call.
    """

    # Language loaded by initialize(), None before and after the engine's lifetime
    language: Optional[str] = None

    @abstractmethod
    def initialize(self, language: str, progress: Optional[ProgressCallback] = None) -> None:
        """Load the language. Raises EngineInitError."""
        pass

    @abstractmethod
    def recognize(self, image: Any, progress: Optional[ProgressCallback] = None) -> str:
        """Return the recognized text. Raises RecognitionError."""
        pass

    @abstractmethod
    def terminate(self) -> None:
        """Release the engine. Safe to call more than once."""
        pass
