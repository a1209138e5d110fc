"""
Unit tests for the text extractor module.

Tests PDF text extraction through PyMuPDF and the conversion of read and
parse failures into ExtractionError.
"""

import tempfile
import shutil
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from unittest.mock import patch
import pytest

from pdfscan.tools import text_extractor
from pdfscan.tools.text_extractor import (
    ExtractionError,
    extract_file,
    extract_text,
    read_document
)


class TestExtractText:
    """Test cases for extracting text from document bytes."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)

    def teardown_method(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def test_extract_real_pdf(self, make_pdf):
        """Test extracting the text of a generated PDF."""
        pdf_path = make_pdf(self.test_root / "hello.pdf", "hello world")

        text = extract_text(pdf_path.read_bytes())

        assert "hello world" in text

    def test_extract_file(self, make_pdf):
        """Test reading and extracting a document from disk."""
        pdf_path = make_pdf(self.test_root / "greeting.pdf", "good morning")

        assert "good morning" in extract_file(pdf_path)

    def test_garbage_bytes_raise(self):
        """Test that non-PDF bytes raise ExtractionError."""
        with pytest.raises(ExtractionError):
            extract_text(b"this is not a pdf at all")

    def test_empty_bytes_raise(self):
        """Test that an empty document raises ExtractionError."""
        with pytest.raises(ExtractionError, match="empty"):
            extract_text(b"")

    def test_missing_file_raises_with_path(self):
        """Test that an unreadable file reports its path."""
        missing = self.test_root / "missing.pdf"

        with pytest.raises(ExtractionError) as exc_info:
            read_document(missing)

        assert exc_info.value.path == str(missing)
        assert "cannot read file" in exc_info.value.reason

    def test_extractor_error_gets_path(self):
        """Test that extract_file attaches the path to extractor failures."""
        doc = self.test_root / "bad.pdf"
        doc.write_bytes(b"data")

        def failing_extractor(data: bytes) -> str:
            raise ExtractionError("malformed document")

        with pytest.raises(ExtractionError) as exc_info:
            extract_file(doc, failing_extractor)

        assert exc_info.value.path == str(doc)
        assert exc_info.value.reason == "malformed document"
        assert str(doc) in str(exc_info.value)

    def test_custom_extractor(self):
        """Test that any bytes-to-text callable can be used."""
        doc = self.test_root / "plain.pdf"
        doc.write_bytes("plain text".encode("utf-8"))

        assert extract_file(doc, lambda data: data.decode("utf-8").upper()) == "PLAIN TEXT"

    def test_mupdf_runs_under_lock(self):
        """Test that PyMuPDF is only entered while holding the module lock."""
        observed = []

        def fake_open(*args, **kwargs):
            observed.append(text_extractor._MUPDF_LOCK.locked())
            raise RuntimeError("cannot open broken document")

        with patch.object(text_extractor.fitz, "open", side_effect=fake_open):
            with pytest.raises(ExtractionError, match="cannot extract text"):
                extract_text(b"%PDF-1.4")

        assert observed == [True]
        assert not text_extractor._MUPDF_LOCK.locked()

    def test_concurrent_extraction(self, make_pdf):
        """Test extracting many documents from several threads at once."""
        paths = [
            make_pdf(self.test_root / f"root{r}" / f"doc{d}.pdf", f"document {r}-{d}")
            for r in range(6) for d in range(5)
        ]

        with ThreadPoolExecutor(max_workers=6) as executor:
            texts = list(executor.map(extract_file, paths))

        for path, text in zip(paths, texts):
            root, doc = path.parent.name[4:], path.stem[3:]
            assert f"document {root}-{doc}" in text


class TestExtractionError:
    """Test cases for the ExtractionError exception."""

    def test_message_without_path(self):
        """Test the message when no path is known."""
        error = ExtractionError("broken")
        assert str(error) == "broken"
        assert error.path is None

    def test_message_with_path(self):
        """Test the message when a path is known."""
        error = ExtractionError("broken", "/tmp/x.pdf")
        assert str(error) == "/tmp/x.pdf: broken"
