# extractor.py - Document Text Extraction Functions
# =============================================================================

import os
import pdfplumber
from rich.console import Console

from .errors import ExtractionError
from .models import Document

console = Console()

PLAIN_TEXT_SUFFIXES = (".txt", ".md")


def extract_pages_pdfplumber(pdf_path: str) -> list[tuple[int, str]]:
    """
    Extracts text from a PDF using pdfplumber.

    Args:
        pdf_path: Path to the PDF file

    Returns:
        List of tuples (page_number, page_text)
    """
    pages = []

    with pdfplumber.open(pdf_path) as pdf:
        for i, page in enumerate(pdf.pages, 1):
            text = page.extract_text()
            if text and text.strip():
                pages.append((i, text))

    return pages


def extract_text_from_pdf(pdf_path: str) -> str:
    """Joins the text of every non-empty page, separated by blank lines."""
    return "\n\n".join(text for _, text in extract_pages_pdfplumber(pdf_path))


def extract_document(path: str) -> Document:
    """
    Extracts the full text of a document.

    PDFs go through pdfplumber; .txt and .md files are read as UTF-8.
    Extraction is all-or-nothing.

    Args:
        path: Path to the source file

    Returns:
        Document with non-empty raw_text

    Raises:
        ExtractionError: If the file does not exist, cannot be parsed,
            or contains no text
    """
    if not os.path.exists(path):
        raise ExtractionError(f"File not found: {path}", {"path": path})

    try:
        if path.lower().endswith(PLAIN_TEXT_SUFFIXES):
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        else:
            console.print("[dim]Using extractor: pdfplumber[/dim]")
            text = extract_text_from_pdf(path)
    except Exception as e:
        raise ExtractionError(f"Error extracting text: {e}", {"path": path}) from e

    if not text or not text.strip():
        raise ExtractionError(f"No text extracted from {path}", {"path": path})

    return Document(path=path, raw_text=text)
