"""
Configuration data models for the PDF Scanner.

This module defines the settings that outlive a single search: which files
count as documents, how much context surrounds each match, file size limits,
archive options and logging.
"""

from typing import Dict, List, Optional, Any
from pathlib import Path
import logging
from pydantic import BaseModel, Field, field_validator


class LimitsConfig(BaseModel):
    """
    Configuration for system limits and constraints.

    Attributes:
        max_bytes_per_file: Documents larger than this are not extracted (bytes)
    """

    max_bytes_per_file: int = Field(200_000_000, gt=0, description="Maximum file size to extract (bytes)")

    def get_max_size_human_readable(self) -> str:
        """Get max file size in human-readable format."""
        size = float(self.max_bytes_per_file)
        for unit in ['B', 'KB', 'MB', 'GB']:
            if size < 1024.0:
                return f"{size:.1f} {unit}"
            size /= 1024.0
        return f"{size:.1f} TB"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = self.model_dump()
        data['max_size_human'] = self.get_max_size_human_readable()
        return data


class ArchiveConfig(BaseModel):
    """
    Configuration for the ZIP archive of matched files.

    Attributes:
        directory: Directory the archive is written to
        permissions: Unix permission bits stored for every entry
        compression_level: Deflate level 0-9 (library default if None)
        preserve_paths: Name entries by full path instead of base name
    """

    directory: str = Field(".", description="Directory the archive is written to")
    permissions: int = Field(0o644, ge=0, le=0o777, description="Permission bits stored for every entry")
    compression_level: Optional[int] = Field(None, ge=0, le=9, description="Deflate compression level")
    preserve_paths: bool = Field(False, description="Name entries by full path instead of base name")

    @field_validator('directory')
    @classmethod
    def validate_directory(cls, v: str) -> str:
        """Expand user path but keep relative paths relative."""
        if not v or not v.strip():
            raise ValueError("Archive directory cannot be empty")
        if v.startswith('~'):
            return str(Path(v).expanduser())
        return str(Path(v))

    def get_output_path(self) -> Path:
        """Get the resolved output directory path."""
        return Path(self.directory).resolve()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        data = self.model_dump()
        data['permissions_octal'] = oct(self.permissions)
        return data


class LoggingConfig(BaseModel):
    """
    Configuration for log output.

    Attributes:
        level: Name of the root log level
        format: Format string passed to logging.basicConfig
    """

    level: str = Field("WARNING", description="Root log level")
    format: str = Field("%(asctime)s %(levelname)s %(name)s: %(message)s", description="Log format")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate and normalize the log level name."""
        level = str(v).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid log level: {v}")
        return level

    def get_level(self) -> int:
        """Get the numeric log level."""
        return logging.getLevelName(self.level)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class ScanConfig(BaseModel):
    """
    Main configuration class for the PDF Scanner.

    Attributes:
        document_extension: Extension that identifies candidate documents
        extension_case_sensitive: Whether the extension must match exactly
        context_chars: Characters of context kept on each side of a match
        limits: System limits and constraints
        archive: Archive output configuration
        logging: Log output configuration
    """

    document_extension: str = Field(".pdf", min_length=1, description="Extension of candidate documents")
    extension_case_sensitive: bool = Field(True, description="Whether the extension must match exactly")
    context_chars: int = Field(40, ge=0, description="Characters of context on each side of a match")
    limits: LimitsConfig = Field(default_factory=LimitsConfig, description="System limits and constraints")
    archive: ArchiveConfig = Field(default_factory=ArchiveConfig, description="Archive output configuration")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Log output configuration")

    @field_validator('document_extension')
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Ensure the extension has a leading dot; case is kept as given."""
        v = v.strip()
        if not v or v == '.':
            raise ValueError("Document extension cannot be empty")
        if not v.startswith('.'):
            v = '.' + v
        return v

    def matches_extension(self, path: Path) -> bool:
        """Check if a file name carries the document extension."""
        suffix = path.suffix
        if self.extension_case_sensitive:
            return suffix == self.document_extension
        return suffix.lower() == self.document_extension.lower()

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any warnings."""
        warnings = []

        if not self.extension_case_sensitive and self.document_extension != self.document_extension.lower():
            warnings.append(
                f"Extension '{self.document_extension}' is compared case-insensitively; "
                f"its case has no effect"
            )

        if self.context_chars == 0:
            warnings.append("context_chars is 0: match previews will contain only the phrase")

        output_path = self.archive.get_output_path()
        if output_path.exists() and not output_path.is_dir():
            warnings.append(f"Archive directory is not a directory: {self.archive.directory}")

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        data = self.model_dump()
        data['limits'] = self.limits.to_dict()
        data['archive'] = self.archive.to_dict()
        data['logging'] = self.logging.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScanConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the configuration."""
        parts = [f"Extension: {self.document_extension}"]
        parts.append(f"Context: {self.context_chars} chars")
        parts.append(f"Archive dir: {self.archive.directory}")
        parts.append(f"Log level: {self.logging.level}")

        return " | ".join(parts)
