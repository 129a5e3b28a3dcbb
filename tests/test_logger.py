"""
Tests for the logging setup and the PROGRESS event channel.
"""

import logging
from queue import Queue

import pytest

from localocr.logger import PROGRESS, configure_logging, setup_logging
from localocr.models import RunPhase
from localocr.runner import BatchRunner

from conftest import FakeEngine, FakePDFProcessor, image_file


@pytest.fixture
def package_logger():
    logger = logging.getLogger("localocr")
    saved = (logger.level, list(logger.handlers), logger.propagate)
    yield logger
    logger.setLevel(saved[0])
    logger.handlers[:] = saved[1]
    logger.propagate = saved[2]


def _drain(q):
    items = []
    while not q.empty():
        items.append(q.get_nowait())
    return items


def test_progress_level_registered():
    assert logging.getLevelName(PROGRESS) == "PROGRESS"
    assert hasattr(logging.getLogger("localocr"), "progress")


def test_events_and_console_are_split(package_logger, capsys):
    log_queue, event_q = Queue(), Queue()
    configure_logging(log_queue)
    listener = setup_logging(log_queue, event_ui_queue=event_q, console=True)
    listener.start()
    try:
        package_logger.info("hello")
        package_logger.progress("recognizing text", extra={"phase": "recognize", "pct": 40.0, "current": 1, "total": 2})
    finally:
        listener.stop()

    err = capsys.readouterr().err
    assert "INFO: hello" in err
    assert "recognizing text" not in err
    events = _drain(event_q)
    assert events == [
        {"level": "PROGRESS", "msg": "recognizing text", "phase": "recognize", "pct": 40.0, "current": 1, "total": 2}
    ]


def test_file_handler_excludes_progress(package_logger, tmp_path):
    log_queue = Queue()
    log_file = tmp_path / "logs" / "run.log"
    configure_logging(log_queue)
    listener = setup_logging(log_queue, file_path=log_file)
    listener.start()
    try:
        package_logger.warning("kept")
        package_logger.progress("dropped", extra={"pct": 1})
    finally:
        listener.stop()

    content = log_file.read_text(encoding="utf-8")
    assert "kept" in content
    assert "dropped" not in content


def test_runner_publishes_progress_events(package_logger):
    log_queue, event_q = Queue(), Queue()
    configure_logging(log_queue)
    listener = setup_logging(log_queue, event_ui_queue=event_q)
    listener.start()
    try:
        from localocr.config import OCRConfig

        BatchRunner(
            OCRConfig(show_progress_bar=False),
            engine_factory=FakeEngine,
            pdf_processor=FakePDFProcessor(),
        ).run([image_file("a.png", "a"), image_file("b.png", "b")])
    finally:
        listener.stop()

    events = _drain(event_q)
    recognize = [e for e in events if e["phase"] == "recognize"]
    assert [e["pct"] for e in recognize] == [0.0, 50.0, 100.0, 0.0, 50.0, 100.0]
    assert [e["current"] for e in recognize] == [1, 1, 1, 2, 2, 2]
    assert all(e["total"] == 2 for e in recognize)
    assert events[-1]["phase"] == "done"
