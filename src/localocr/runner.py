# localocr/runner.py
from __future__ import annotations

import dataclasses
import json
import logging
import time
from typing import Callable, Iterable, List, Optional

from tqdm import tqdm

from . import logger as _logger  # noqa: F401, registers Logger.progress
from .classifier import DocumentPath, classify
from .config import OCRConfig
from .exceptions import EngineInitError
from .models import (
    RUN_ERROR_MESSAGE,
    BatchReport,
    FileResult,
    ProgressEvent,
    QueuedFile,
    RecognitionJob,
    RunOutcome,
    RunPhase,
    RunState,
)
from .ocr_backends import load_backend
from .ocr_backends.base import BaseOCREngine
from .pdf_processor import BasePDFProcessor, get_pdf_processor
from .pipeline import process_document, recognize_job
from .progress import ProgressAggregator

logger = logging.getLogger("localocr")

EngineFactory = Callable[[], BaseOCREngine]
StateListener = Callable[[RunState], None]


class BatchRunner:
    """
    Runs one batch: one engine per run, files strictly in queue order.

    States: IDLE -> INITIALIZING -> PROCESSING(i)* -> FINALIZING -> IDLE,
    with ABORTED reachable only from INITIALIZING. Any error while a file is
    processed becomes a failure entry for that file; an error while the engine
    is initialized ends the run with a single run-level error.
    """

    def __init__(
        self,
        config: Optional[OCRConfig] = None,
        engine_factory: Optional[EngineFactory] = None,
        pdf_processor: Optional[BasePDFProcessor] = None,
    ):
        self.config = config or OCRConfig()
        self.engine_factory = engine_factory or self._default_engine_factory
        self.pdf_processor = pdf_processor or get_pdf_processor(self.config.pdf_engine)
        self._state = RunState(language=self.config.language)
        self._listener: Optional[StateListener] = None
        self._progress = ProgressAggregator(self.config.progress_mode)

    @property
    def state(self) -> RunState:
        return self._state

    # -----------------------------
    # Config helpers
    # -----------------------------
    def _default_engine_factory(self) -> BaseOCREngine:
        return load_backend(self.config.ocr_backend, **dict(self.config.ocr_backend_kwargs or {}))

    # -----------------------------
    # State helpers
    # -----------------------------
    def _transition(self, **changes) -> RunState:
        self._state = dataclasses.replace(self._state, **changes)
        if self._listener is not None:
            try:
                self._listener(self._state)
            except Exception:
                # subscribers observe the run, they cannot change its outcome
                logger.exception("State listener failed on %s", self._state.phase.name)
        return self._state

    def _on_progress(self, event: ProgressEvent) -> None:
        pct = self._progress.update(event)
        if pct is None:
            logger.debug("Engine status: %s (%.0f%%)", event.status, event.progress * 100)
            return
        self._transition(progress_percent=pct)
        current = self._state.current_file
        logger.progress(
            event.status,
            extra={
                "phase": "recognize",
                "pct": pct,
                "current": None if current is None else current + 1,
                "total": self._state.total_files,
            },
        )

    # -----------------------------
    # Logging helpers
    # -----------------------------
    def _log_error(self, file_name: str, reason: str):
        if not self.config.error_log_path:
            return
        try:
            self.config.error_log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config.error_log_path, "a", encoding="utf-8") as f:
                log_entry = {
                    "timestamp": time.strftime("%Y-%m-%dT%H:%M:%S%z"),
                    "file_name": file_name,
                    "language": self.config.language,
                    "error_reason": reason,
                }
                f.write(json.dumps(log_entry, ensure_ascii=False) + "\n")
        except OSError:
            logger.exception("Failed to write error log")

    # -----------------------------
    # Stage 1. Engine lifecycle
    # -----------------------------
    def _initialize_engine(self, engine: BaseOCREngine) -> None:
        try:
            engine.initialize(self.config.language, progress=self._on_progress)
        except EngineInitError:
            raise
        except Exception as e:
            raise EngineInitError(f"Engine initialization failed for '{self.config.language}': {e}") from e

    def _release_engine(self, engine: BaseOCREngine) -> None:
        try:
            engine.terminate()
            logger.info("OCR engine released")
        except Exception:
            logger.exception("OCR engine failed to terminate cleanly")

    # -----------------------------
    # Stage 2. Per-file processing
    # -----------------------------
    def _recognize_file(self, engine: BaseOCREngine, queued: QueuedFile) -> str:
        path = classify(queued)
        if path is DocumentPath.MULTI_PAGE:
            with self.pdf_processor.open(queued.data, name=queued.name) as document:
                logger.info("%s: %d page(s)", queued.name, document.page_count)
                return process_document(
                    document,
                    engine,
                    self.pdf_processor,
                    self.config.render_scale,
                    on_page=self._progress.begin_page,
                    progress=self._on_progress,
                    language=self.config.language,
                )

        job = RecognitionJob(image=queued.data, language=self.config.language)
        return recognize_job(engine, job, progress=self._on_progress)

    def _process_file(self, engine: BaseOCREngine, queued: QueuedFile) -> FileResult:
        start = time.perf_counter()
        try:
            text = self._recognize_file(engine, queued)
        except Exception as e:
            logger.exception("Error processing file %s", queued.name)
            self._log_error(queued.name, f"{type(e).__name__}: {e}")
            return FileResult.failure(queued.name, detail=f"{type(e).__name__}: {e}")

        logger.info("File %s complete in %.2fs", queued.name, time.perf_counter() - start)
        return FileResult.success(queued.name, text)

    # -----------------------------
    # Public entry point
    # -----------------------------
    def run(self, files: Iterable[QueuedFile], on_update: Optional[StateListener] = None) -> RunOutcome:
        """
        Process the queue and return either the combined report or the single run-level error.
        The given sequence is not modified, so it can be run again after a language change.
        """
        if self._state.is_processing:
            raise RuntimeError("A run is already in progress")

        queue = tuple(files)
        self._listener = on_update
        self._progress.reset()
        self._state = RunState(language=self.config.language, total_files=len(queue))

        logger.info("Run started: %d file(s), language %s", len(queue), self.config.language)
        self._transition(phase=RunPhase.INITIALIZING, is_processing=True)

        engine: Optional[BaseOCREngine] = None
        results: List[FileResult] = []
        fatal: Optional[str] = None
        try:
            try:
                engine = self.engine_factory()
                self._initialize_engine(engine)
            except Exception as e:
                logger.error("OCR Error: %s", e)
                fatal = RUN_ERROR_MESSAGE
                self._transition(phase=RunPhase.ABORTED, last_error=fatal)
            else:
                pbar = tqdm(queue, desc="Processing files", disable=not self.config.show_progress_bar)
                for index, queued in enumerate(pbar):
                    self._progress.begin_file(index, len(queue))
                    self._transition(phase=RunPhase.PROCESSING, current_file=index)
                    results.append(self._process_file(engine, queued))
        finally:
            # Release before any subscriber is called again
            try:
                if engine is not None:
                    self._release_engine(engine)
            finally:
                self._transition(phase=RunPhase.FINALIZING)
                self._transition(
                    phase=RunPhase.IDLE,
                    is_processing=False,
                    progress_percent=0.0,
                    current_file=None,
                )
                self._listener = None

        if fatal is not None:
            logger.info("Run aborted")
            return RunOutcome(state=self._state, error=fatal)

        report = BatchReport(results=tuple(results))
        logger.info(
            "Run finished: %d succeeded, %d failed",
            len(report.succeeded),
            len(report.failed),
        )
        logger.progress("done", extra={"phase": "done", "pct": 100})
        return RunOutcome(state=self._state, report=report)


def run_batch(
    files: Iterable[QueuedFile],
    config: Optional[OCRConfig] = None,
    on_update: Optional[StateListener] = None,
    **kwargs,
) -> RunOutcome:
    """Convenience wrapper, kwargs are passed to BatchRunner."""
    return BatchRunner(config, **kwargs).run(files, on_update=on_update)
