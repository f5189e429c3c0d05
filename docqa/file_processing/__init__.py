"""Document text extraction for docqa."""

from docqa.file_processing.pdf_parser import PDFParser, extract_text

__all__ = [
    "PDFParser",
    "extract_text",
]
