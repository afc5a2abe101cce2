"""Unit tests for text extraction."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from docindex.milvus.errors import ExtractionError
from docindex.milvus.extractor import extract_document


def _fake_pdf(*page_texts):
    pdf = MagicMock()
    pdf.pages = [MagicMock(**{"extract_text.return_value": t}) for t in page_texts]
    opener = MagicMock()
    opener.return_value.__enter__.return_value = pdf
    return opener


def test_plain_text_file(tmp_path: Path) -> None:
    path = tmp_path / "notes.md"
    path.write_text("# Title\n\nBody text.", encoding="utf-8")

    doc = extract_document(str(path))

    assert doc.raw_text == "# Title\n\nBody text."
    assert doc.file_name == "notes.md"


def test_pdf_pages_joined(tmp_path: Path) -> None:
    path = tmp_path / "paper.pdf"
    path.write_bytes(b"%PDF-1.4")

    with patch("docindex.milvus.extractor.pdfplumber.open", _fake_pdf("Page one", None, "  ", "Page four")):
        doc = extract_document(str(path))

    assert doc.raw_text == "Page one\n\nPage four"


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ExtractionError, match="File not found"):
        extract_document(str(tmp_path / "nope.pdf"))


def test_unparsable_pdf(tmp_path: Path) -> None:
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"not a pdf")

    with patch("docindex.milvus.extractor.pdfplumber.open", side_effect=ValueError("bad xref")):
        with pytest.raises(ExtractionError, match="bad xref"):
            extract_document(str(path))


def test_pdf_without_text(tmp_path: Path) -> None:
    path = tmp_path / "scan.pdf"
    path.write_bytes(b"%PDF-1.4")

    with patch("docindex.milvus.extractor.pdfplumber.open", _fake_pdf(None, "")):
        with pytest.raises(ExtractionError, match="No text extracted"):
            extract_document(str(path))
