"""
Shared fixtures for the PDF Scanner test suite.
"""

from pathlib import Path

import fitz  # PyMuPDF
import pytest

from pdfscan.tools.text_extractor import ExtractionError


def fake_extract(data: bytes) -> str:
    """Stand-in extractor: documents are plain UTF-8, 'BROKEN' marks a bad one."""
    if data.startswith(b"BROKEN"):
        raise ExtractionError("malformed document")
    return data.decode("utf-8")


@pytest.fixture
def fake_extractor():
    """Extractor that treats document bytes as UTF-8 text."""
    return fake_extract


@pytest.fixture
def make_pdf():
    """Factory that writes a real single-page PDF containing the given text."""
    def _make_pdf(path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        doc = fitz.open()
        page = doc.new_page()
        page.insert_text((72, 72), text)
        doc.save(str(path))
        doc.close()
        return path
    return _make_pdf
