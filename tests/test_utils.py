"""
Tests for input collection and previews.
"""

from localocr.models import DocumentType, QueuedFile
from localocr.utils import collect_files, make_preview

from conftest import make_image_bytes, make_pdf_bytes


class TestCollectFiles:
    def test_keeps_argument_order(self, tmp_path):
        b = tmp_path / "b.png"
        a = tmp_path / "a.pdf"
        b.write_bytes(make_image_bytes())
        a.write_bytes(make_pdf_bytes(1))

        files = collect_files([b, a])

        assert [f.name for f in files] == ["b.png", "a.pdf"]
        assert files[1].document_type is DocumentType.PDF

    def test_skips_unsupported(self, tmp_path, caplog):
        (tmp_path / "notes.txt").write_text("hello")
        (tmp_path / "scan.tif").write_bytes(b"II*\x00")

        files = collect_files([tmp_path / "notes.txt", tmp_path / "scan.tif"])

        assert [f.name for f in files] == ["scan.tif"]

    def test_walks_directories_sorted(self, tmp_path):
        sub = tmp_path / "sub"
        sub.mkdir()
        (tmp_path / "z.jpg").write_bytes(b"z")
        (sub / "a.jpeg").write_bytes(b"a")
        (tmp_path / "readme.md").write_text("x")

        files = collect_files([tmp_path])

        assert sorted(f.name for f in files) == ["a.jpeg", "z.jpg"]
        assert len(files) == 2

    def test_missing_file_skipped(self, tmp_path):
        assert collect_files([tmp_path / "gone.png"]) == []


class TestMakePreview:
    def test_image_thumbnail(self):
        f = QueuedFile("big.png", DocumentType.PNG, make_image_bytes("PNG", size=(800, 400)))

        preview = make_preview(f, size=(100, 100))

        assert preview.file is f
        assert preview.preview.size == (100, 50)

    def test_pdf_uses_first_page(self):
        f = QueuedFile("doc.pdf", DocumentType.PDF, make_pdf_bytes(pages=2, width=200, height=100))

        preview = make_preview(f)

        assert preview.preview is not None
        assert preview.preview.size == (100, 50)

    def test_unreadable_file_has_no_preview(self):
        f = QueuedFile("broken.jpg", DocumentType.JPEG, b"not a jpeg")

        preview = make_preview(f)

        assert preview.file is f
        assert preview.preview is None

    def test_broken_pdf_has_no_preview(self):
        f = QueuedFile("broken.pdf", DocumentType.PDF, b"junk")

        assert make_preview(f).preview is None
