"""
Document text extraction for the PDF Scanner.

Thin boundary around PyMuPDF: turns the raw bytes of a document into plain
text, or raises ExtractionError. Any callable with the signature of
extract_text can be used in its place by the search coordinator.

MuPDF does not support concurrent use from several threads, so all calls
into it go through one module-level lock. Reading files stays parallel.
"""

import threading
from pathlib import Path
from typing import Callable, Optional, Union

import fitz  # PyMuPDF


TextExtractorFunc = Callable[[bytes], str]

_MUPDF_LOCK = threading.Lock()


class ExtractionError(Exception):
    """Raised when a document cannot be read or its text cannot be extracted."""

    def __init__(self, reason: str, path: Optional[Union[str, Path]] = None):
        self.reason = reason
        self.path = str(path) if path is not None else None
        message = f"{self.path}: {reason}" if self.path else reason
        super().__init__(message)


def extract_text(data: bytes) -> str:
    """
    Extract the text of a PDF held in memory.

    Args:
        data: Raw bytes of the document

    Returns:
        Text of all pages joined by newlines

    Raises:
        ExtractionError: If the bytes are not a readable document
    """
    if not data:
        raise ExtractionError("document is empty")

    try:
        with _MUPDF_LOCK, fitz.open(stream=data, filetype="pdf") as doc:
            if doc.needs_pass:
                raise ExtractionError("document is encrypted")
            return "\n".join(page.get_text("text") for page in doc)
    except ExtractionError:
        raise
    except Exception as e:
        # PyMuPDF raises a mix of RuntimeError, ValueError and its own types
        raise ExtractionError(f"cannot extract text: {e}") from e


def read_document(path: Union[str, Path]) -> bytes:
    """
    Read the raw bytes of a document.

    Raises:
        ExtractionError: If the file cannot be read
    """
    try:
        return Path(path).read_bytes()
    except OSError as e:
        raise ExtractionError(f"cannot read file: {e}", path) from e


def extract_file(path: Union[str, Path], extractor: TextExtractorFunc = extract_text) -> str:
    """
    Read a document from disk and extract its text.

    Args:
        path: Path to the document
        extractor: Bytes to text conversion to apply

    Returns:
        Extracted text

    Raises:
        ExtractionError: If the file cannot be read or extracted
    """
    data = read_document(path)
    try:
        return extractor(data)
    except ExtractionError as e:
        if e.path is None:
            raise ExtractionError(e.reason, path) from e
        raise
