"""
Bulk text extraction for the PDF Scanner.

Writes the extracted text of many documents into one UTF-8 text file, each
document preceded by a header line naming its path.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union
import logging

from ..models.config import ScanConfig
from ..tools.fs_walker import walk_paths
from ..tools.text_extractor import ExtractionError, TextExtractorFunc, extract_file, extract_text


logger = logging.getLogger(__name__)


@dataclass
class ExtractSummary:
    """
    Result of a bulk extraction.

    Attributes:
        output_file: File the text was written to
        written: Documents whose text was written
        failed: Documents that could not be extracted
    """
    output_file: Path
    written: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"Extracted {len(self.written)} documents to {self.output_file} ({len(self.failed)} failed)"


def document_header(path: Union[str, Path]) -> str:
    """Header line written before each document's text."""
    return f"==== {path} ===="


def extract_to_file(output_file: Union[str, Path], input_paths: Iterable[Union[str, Path]],
                    scan_config: Optional[ScanConfig] = None,
                    extractor: TextExtractorFunc = extract_text) -> ExtractSummary:
    """
    Extract the text of every input document into a single file.

    Args:
        output_file: Text file to create (overwritten if present)
        input_paths: Documents and directories; directories are walked recursively
        scan_config: Settings holding the document extension rule
        extractor: Converts document bytes to text

    Returns:
        ExtractSummary listing written and failed documents

    Raises:
        OSError: If the output file cannot be written
    """
    scan_config = scan_config or ScanConfig()
    output_file = Path(output_file)
    summary = ExtractSummary(output_file=output_file)

    with open(output_file, 'w', encoding='utf-8') as out:
        for path in walk_paths(input_paths, scan_config):
            try:
                text = extract_file(path, extractor)
            except ExtractionError as e:
                logger.warning(f"Error extracting {path}: {e.reason}")
                summary.failed.append(str(path))
                continue

            out.write(document_header(path))
            out.write("\n")
            out.write(text)
            if not text.endswith("\n"):
                out.write("\n")
            out.write("\n")
            summary.written.append(str(path))

    logger.info(str(summary))
    return summary
