"""
Tests for the data model and report rendering.
"""

import dataclasses

import pytest

from localocr.exceptions import UnsupportedTypeError
from localocr.models import (
    FAILURE_MESSAGE,
    BatchReport,
    DocumentType,
    FileResult,
    PageResult,
    QueuedFile,
    RunOutcome,
    RunState,
)


class TestQueuedFile:
    def test_from_path(self, tmp_path):
        p = tmp_path / "scan.JPG"
        p.write_bytes(b"\xff\xd8data")

        f = QueuedFile.from_path(p)

        assert f.name == "scan.JPG"
        assert f.document_type is DocumentType.JPEG
        assert f.data == b"\xff\xd8data"

    def test_from_path_rejects_unsupported(self, tmp_path):
        p = tmp_path / "notes.txt"
        p.write_text("hi")

        with pytest.raises(UnsupportedTypeError):
            QueuedFile.from_path(p)

    def test_from_bytes_with_mime(self):
        f = QueuedFile.from_bytes("blob", bytearray(b"abc"), mime_type="image/tiff")

        assert f.document_type is DocumentType.TIFF
        assert f.data == b"abc"

    def test_is_immutable(self):
        f = QueuedFile("a.png", DocumentType.PNG, b"")
        with pytest.raises(dataclasses.FrozenInstanceError):
            f.name = "b.png"

    def test_repr_hides_data(self):
        assert "data" not in repr(QueuedFile("a.png", DocumentType.PNG, b"secret"))


def test_document_type_extensions():
    assert DocumentType.TIFF.extensions == (".tiff", ".tif")
    assert DocumentType.JPEG.mime_type == "image/jpeg"


def test_page_result_render():
    assert PageResult(3, "hello").render() == "Page 3:\nhello\n\n"


class TestFileResult:
    def test_success(self):
        r = FileResult.success("a.png", "text")

        assert r.succeeded
        assert r.render() == "File: a.png\n\ntext\n\n"

    def test_failure_uses_fixed_message(self):
        r = FileResult.failure("b.pdf", detail="RenderError: broken xref")

        assert not r.succeeded
        assert r.render() == (
            "File: b.pdf\n\nError: Unable to process this file. "
            "It may be corrupted or in an unsupported format.\n\n"
        )
        assert "broken xref" not in r.render()

    def test_empty_text_is_still_success(self):
        r = FileResult.success("blank.png", "")

        assert r.succeeded
        assert r.render() == "File: blank.png\n\n\n\n"


class TestBatchReport:
    def test_render_keeps_order(self):
        report = BatchReport(
            (
                FileResult.success("1.png", "one"),
                FileResult.failure("2.pdf"),
                FileResult.success("3.png", "three"),
            )
        )

        assert str(report) == (
            "File: 1.png\n\none\n\n"
            f"File: 2.pdf\n\n{FAILURE_MESSAGE}\n\n"
            "File: 3.png\n\nthree\n\n"
        )
        assert [r.file_name for r in report.succeeded] == ["1.png", "3.png"]
        assert [r.file_name for r in report.failed] == ["2.pdf"]

    def test_empty(self):
        assert BatchReport().render() == ""


def test_outcome_text_without_report():
    outcome = RunOutcome(state=RunState(language="eng"), error="boom")

    assert not outcome.ok
    assert outcome.text == ""
