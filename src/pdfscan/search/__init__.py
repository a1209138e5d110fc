"""
Search orchestration for the PDF Scanner.

Fans a search out over its root directories, merges the per-root results and
optionally archives the matched documents.
"""

from .coordinator import SearchCoordinator, SearchOutcome, SearchState, run_search
from .extract import ExtractSummary, extract_to_file

__all__ = [
    'SearchCoordinator',
    'SearchOutcome',
    'SearchState',
    'run_search',
    'ExtractSummary',
    'extract_to_file'
]
