"""
Search configuration data model for the PDF Scanner.

This module defines the immutable description of one search invocation:
the literal phrase, the case rule, the root directories to walk and whether
the matching files should be archived afterwards.
"""

from typing import Dict, List, Any
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchConfig(BaseModel):
    """
    Represents one search request with all of its parameters.

    A SearchConfig is created once per invocation and never changes while the
    search runs, so workers can share it without copying.

    Attributes:
        phrase: Literal phrase to look for; empty means every document matches
        case_sensitive: Whether matching respects letter case
        roots: Ordered list of root directories to search within
        build_archive: Whether to archive the matched files after the search
    """

    model_config = ConfigDict(frozen=True)

    phrase: str = Field("", description="Literal search phrase")
    case_sensitive: bool = Field(False, description="Whether matching respects letter case")
    roots: List[str] = Field(..., min_length=1, description="List of root directories to search")
    build_archive: bool = Field(False, description="Whether to archive matched files")

    @field_validator('roots')
    @classmethod
    def validate_roots(cls, v: List[str]) -> List[str]:
        """Validate and normalize root directory paths."""
        if not v:
            raise ValueError("At least one root directory must be specified")

        normalized_roots = []
        for root in v:
            if not root or not str(root).strip():
                continue

            root_path = str(Path(root).expanduser().resolve())
            # The same root twice would only produce duplicate work
            if root_path not in normalized_roots:
                normalized_roots.append(root_path)

        if not normalized_roots:
            raise ValueError("No valid root directories provided")

        return normalized_roots

    def is_match_all(self) -> bool:
        """Check if this search reports every candidate document."""
        return self.phrase == ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert the search configuration to a dictionary representation."""
        return self.model_dump()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchConfig':
        """Create a SearchConfig instance from a dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the search configuration."""
        parts = [f"Phrase: '{self.phrase}'" if self.phrase else "Phrase: <match all>"]
        parts.append(f"Roots: {len(self.roots)} directories")
        parts.append(f"Case sensitive: {self.case_sensitive}")

        if self.build_archive:
            parts.append("Archive: enabled")

        return " | ".join(parts)
