"""PDF file parser module for docqa.

Handles extraction of text content from PDF files using pypdf.
Pages whose text cannot be extracted are skipped.
"""

import logging
from pathlib import Path
from typing import Optional

from pypdf import PdfReader

logger = logging.getLogger(__name__)


class PDFParser:
    """Parser for PDF documents.

    Attributes:
        max_pages: Maximum pages to extract (None = all pages)
    """

    def __init__(self, max_pages: Optional[int] = None) -> None:
        self.max_pages = max_pages

    def extract_text(self, file_path: Path) -> str:
        """Extract text from PDF file.

        Args:
            file_path: Path to PDF file

        Returns:
            str: Page texts joined by blank lines

        Raises:
            FileNotFoundError: If file doesn't exist
            ValueError: If file is not a valid PDF
        """
        if not file_path.exists():
            raise FileNotFoundError(f"PDF file not found: {file_path}")

        try:
            reader = PdfReader(file_path)
        except Exception as e:
            logger.error(f"Failed to read PDF {file_path}: {e}")
            raise ValueError(f"Invalid PDF file: {e}") from e

        if not reader.pages:
            logger.warning(f"PDF {file_path} has no pages")
            return ""

        pages: list[str] = []
        pages_to_process = min(len(reader.pages), self.max_pages or len(reader.pages))
        for page_num in range(pages_to_process):
            try:
                text = reader.pages[page_num].extract_text()
            except Exception as e:
                logger.warning(f"Failed to extract text from page {page_num + 1}: {e}")
                continue
            if text and text.strip():
                pages.append(text)

        logger.info(f"Extracted {len(pages)} pages from {file_path.name}")
        return "\n\n".join(pages)


def extract_text(file_path: Path) -> str:
    """Extract text from a .pdf or plain-text file.

    Args:
        file_path: Document path

    Returns:
        str: Document text

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If the file type is unsupported or the PDF is invalid
    """
    suffix = file_path.suffix.lower()
    if suffix == ".pdf":
        return PDFParser().extract_text(file_path)
    if suffix in (".txt", ".md"):
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        return file_path.read_text(encoding="utf-8", errors="replace")
    raise ValueError(f"Unsupported file type: {suffix or file_path.name}")
