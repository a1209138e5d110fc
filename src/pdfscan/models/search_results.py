"""
Search results data models for the PDF Scanner.

This module defines the core data structures for representing search results,
including individual phrase matches, per-file matches, the aggregated result
set of one search run and the outcome of archiving the matched files.
"""

import os
from typing import Dict, List, Optional, Any, Sequence, Set
from datetime import datetime
from pathlib import Path
from pydantic import BaseModel, Field, PrivateAttr, field_validator, model_validator

from .search_config import SearchConfig


class MatchSpan(BaseModel):
    """
    A single occurrence of the search phrase with its surrounding text.

    Attributes:
        context_text: Snippet of the extracted text around the match
        start_offset: Index of the match in the original extracted text
        match_length: Number of characters of the original text that matched
        match_start: Position where the match starts inside context_text
        match_end: Position where the match ends inside context_text
    """

    context_text: str = Field(..., description="Text surrounding the match")
    start_offset: int = Field(..., ge=0, description="Match position in the original text")
    match_length: int = Field(0, ge=0, description="Length of the match in the original text")
    match_start: int = Field(0, ge=0, description="Match start inside the context text")
    match_end: int = Field(0, ge=0, description="Match end inside the context text")

    @model_validator(mode='after')
    def validate_span(self):
        """Validate that the match lies within the context text."""
        if self.match_end < self.match_start:
            raise ValueError("Invalid match position")
        if self.match_end > len(self.context_text):
            raise ValueError("Match end position exceeds context length")
        return self

    @classmethod
    def placeholder(cls, path: str) -> 'MatchSpan':
        """Build the single span reported for every file when no phrase is given."""
        return cls(context_text=f"Found occurrence in '{Path(path).name}'", start_offset=0)

    def is_placeholder(self) -> bool:
        """Check if this span stands in for a match-all result."""
        return self.match_length == 0

    def get_highlighted_content(self, highlight_start: str = "**", highlight_end: str = "**") -> str:
        """Get context with the match highlighted using specified markers."""
        if self.match_start == self.match_end:
            return self.context_text

        before = self.context_text[:self.match_start]
        match = self.context_text[self.match_start:self.match_end]
        after = self.context_text[self.match_end:]

        return f"{before}{highlight_start}{match}{highlight_end}{after}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert span to dictionary representation."""
        data = self.model_dump()
        data['highlighted_content'] = self.get_highlighted_content()
        return data


class FileMatch(BaseModel):
    """
    Represents a single document that matched the search.

    Attributes:
        path: Absolute path to the matched document
        matches: Phrase occurrences, ordered left to right by offset
    """

    path: str = Field(..., min_length=1, description="Absolute path to the matched file")
    matches: List[MatchSpan] = Field(..., min_length=1, description="Occurrences of the phrase")

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate and make the path absolute without following symlinks."""
        if not v or not v.strip():
            raise ValueError("File path cannot be empty")
        return os.path.abspath(v)

    def get_filename(self) -> str:
        """Get just the filename without directory path."""
        return Path(self.path).name

    def get_directory(self) -> str:
        """Get the directory containing this file."""
        return str(Path(self.path).parent)

    def get_match_count(self) -> int:
        """Get the number of occurrences in this file."""
        return len(self.matches)

    def get_primary_match(self) -> MatchSpan:
        """Get the first occurrence in the file."""
        return self.matches[0]

    def to_dict(self) -> Dict[str, Any]:
        """Convert file match to dictionary representation."""
        data = self.model_dump()
        data['filename'] = self.get_filename()
        data['directory'] = self.get_directory()
        data['matches'] = [span.to_dict() for span in self.matches]
        data['match_count'] = self.get_match_count()
        return data

    def __str__(self) -> str:
        """String representation of the file match."""
        return f"{self.get_filename()} | Matches: {self.get_match_count()}"


class SearchResultSet(BaseModel):
    """
    Aggregated results of one search run.

    Workers never touch this object while they compute. Each hands its
    complete local list to the coordinator, which merges it here. Once every
    worker has finished the set is frozen and becomes read-only.

    Attributes:
        config: The search configuration that produced these results
        matches: File matches, at most one per distinct path, in no particular order
        total_scanned: Number of candidate documents examined
        execution_time: Time taken to execute the search in seconds
        timestamp: When the search was started
        errors: Files or roots that could not be processed
    """

    config: SearchConfig = Field(..., description="The search configuration")
    matches: Sequence[FileMatch] = Field(default_factory=list, description="List of file matches")
    total_scanned: int = Field(0, ge=0, description="Number of candidate documents examined")
    execution_time: float = Field(0.0, ge=0.0, description="Time taken to execute the search")
    timestamp: datetime = Field(default_factory=datetime.now, description="When the search was started")
    errors: Sequence[str] = Field(default_factory=list, description="Errors encountered during search")

    _index: Dict[str, int] = PrivateAttr(default_factory=dict)
    _frozen: bool = PrivateAttr(default=False)

    def model_post_init(self, __context) -> None:
        """Drop duplicate paths and index the initial matches."""
        initial = self.matches
        self.matches = []
        self.errors = list(self.errors)
        self._index = {}
        for match in initial:
            self._append(match)

    def _append(self, match: FileMatch) -> bool:
        if match.path in self._index:
            return False
        self._index[match.path] = len(self.matches)
        self.matches.append(match)
        return True

    def _check_writable(self) -> None:
        if self._frozen:
            raise RuntimeError("Search results are frozen and can no longer be modified")

    def merge(self, partial: List[FileMatch]) -> int:
        """
        Merge one worker's results into the aggregate.

        Paths already present (from overlapping roots) are skipped.

        Args:
            partial: The complete list of matches produced by one worker

        Returns:
            Number of matches actually added

        Raises:
            RuntimeError: If the result set has been frozen
        """
        self._check_writable()
        return sum(1 for match in partial if self._append(match))

    def freeze(self) -> None:
        """Make the result set read-only; matches and errors become tuples."""
        self.matches = tuple(self.matches)
        self.errors = tuple(self.errors)
        self._frozen = True

    def is_frozen(self) -> bool:
        """Check if the result set has been frozen."""
        return self._frozen

    def get(self, path: str) -> Optional[FileMatch]:
        """Get the match for a path, if that path matched."""
        position = self._index.get(os.path.abspath(path))
        return self.matches[position] if position is not None else None

    def get_paths(self) -> Set[str]:
        """Get the set of matched paths."""
        return set(self._index)

    def get_match_count(self) -> int:
        """Get the number of matched files."""
        return len(self.matches)

    def get_total_span_count(self) -> int:
        """Get the number of phrase occurrences across all files."""
        return sum(match.get_match_count() for match in self.matches)

    def sorted_by_path(self) -> List[FileMatch]:
        """Get the matches ordered by path, for stable display."""
        return sorted(self.matches, key=lambda m: m.path)

    def has_errors(self) -> bool:
        """Check if any errors occurred during search."""
        return len(self.errors) > 0

    def add_error(self, error: str) -> None:
        """Add an error message to the results."""
        self._check_writable()
        self.errors.append(error)

    def to_dict(self) -> Dict[str, Any]:
        """Convert search results to dictionary representation."""
        return {
            'config': self.config.to_dict(),
            'matches': [match.to_dict() for match in self.sorted_by_path()],
            'match_count': self.get_match_count(),
            'span_count': self.get_total_span_count(),
            'total_scanned': self.total_scanned,
            'execution_time': self.execution_time,
            'timestamp': self.timestamp.isoformat(),
            'errors': list(self.errors),
            'has_errors': self.has_errors(),
        }

    def __str__(self) -> str:
        """String representation of search results."""
        parts = [f"Found {self.get_match_count()} matching files"]
        parts.append(f"Scanned {self.total_scanned} files")
        parts.append(f"Took {self.execution_time:.2f}s")

        if self.has_errors():
            parts.append(f"Errors: {len(self.errors)}")

        return " | ".join(parts)


class ArchiveResult(BaseModel):
    """
    Outcome of archiving the matched files of a completed search.

    Attributes:
        success: Whether the archive was written
        archive_path: Path of the written archive (on success)
        failed_path: File that caused the failure (an unreadable input or the archive itself)
        error: Description of the failure
        entry_count: Number of entries written to the archive
    """

    success: bool = Field(..., description="Whether the archive was written")
    archive_path: Optional[str] = Field(None, description="Path of the written archive")
    failed_path: Optional[str] = Field(None, description="File that caused the failure")
    error: Optional[str] = Field(None, description="Description of the failure")
    entry_count: int = Field(0, ge=0, description="Number of archive entries")

    @model_validator(mode='after')
    def validate_outcome(self):
        """Validate that success and failure fields are consistent."""
        if self.success and not self.archive_path:
            raise ValueError("A successful archive result needs an archive path")
        if not self.success and not self.error:
            raise ValueError("A failed archive result needs an error message")
        return self

    @classmethod
    def ok(cls, archive_path: str, entry_count: int) -> 'ArchiveResult':
        """Build a successful outcome."""
        return cls(success=True, archive_path=str(archive_path), entry_count=entry_count)

    @classmethod
    def failed(cls, error: str, failed_path: Optional[str] = None) -> 'ArchiveResult':
        """Build a failed outcome."""
        return cls(success=False, error=error, failed_path=failed_path)

    def to_dict(self) -> Dict[str, Any]:
        """Convert archive result to dictionary representation."""
        return self.model_dump()

    def __str__(self) -> str:
        """String representation of the archive outcome."""
        if self.success:
            return f"Created ZIP file with search results: {self.archive_path}"
        if self.failed_path:
            return f"Error creating ZIP file ({self.failed_path}): {self.error}"
        return f"Error creating ZIP file: {self.error}"
