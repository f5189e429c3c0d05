"""Tests for document text extraction."""

import pytest
from pypdf import PdfWriter

from docqa.exceptions import IngestionError
from docqa.file_processing import PDFParser, extract_text


@pytest.fixture
def blank_pdf(tmp_path):
    """A valid PDF with one page and no text."""
    path = tmp_path / "blank.pdf"
    writer = PdfWriter()
    writer.add_blank_page(width=200, height=200)
    with open(path, "wb") as f:
        writer.write(f)
    return path


class TestExtractText:
    """Test extraction by file type."""

    def test_text_file(self, tmp_path):
        path = tmp_path / "notes.md"
        path.write_text("# Mở đầu\nNội dung", encoding="utf-8")

        assert extract_text(path) == "# Mở đầu\nNội dung"

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "sheet.xlsx"
        path.write_bytes(b"data")

        with pytest.raises(ValueError):
            extract_text(path)

    def test_missing_text_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            extract_text(tmp_path / "missing.txt")

    def test_blank_pdf_has_no_text(self, blank_pdf):
        assert PDFParser().extract_text(blank_pdf).strip() == ""

    def test_invalid_pdf(self, tmp_path):
        path = tmp_path / "broken.pdf"
        path.write_bytes(b"this is not a pdf")

        with pytest.raises(ValueError):
            PDFParser().extract_text(path)


def test_blank_pdf_aborts_ingestion(manager, blank_pdf, vector_store):
    """No extractable text means nothing is indexed."""
    with pytest.raises(IngestionError):
        manager.ingest_file(blank_pdf)

    assert vector_store.size() == 0
