"""
Data models for the PDF Scanner.

This module contains all the core data structures used throughout the system.
"""

from .search_config import SearchConfig
from .search_results import ArchiveResult, FileMatch, MatchSpan, SearchResultSet

__all__ = ['SearchConfig', 'MatchSpan', 'FileMatch', 'SearchResultSet', 'ArchiveResult']
