"""
ZIP archive creation for the PDF Scanner.

Bundles copies of the matched documents of a completed search into a single
deflate-compressed archive named search_results_<UTC timestamp>.zip.
"""

import shutil
import stat
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Union
import logging

from ..models.config import ArchiveConfig
from ..models.search_results import ArchiveResult, SearchResultSet


logger = logging.getLogger(__name__)

ARCHIVE_PREFIX = "search_results_"
TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"
COPY_BUFFER_SIZE = 1024 * 1024


class ArchiveError(Exception):
    """Raised when the archive cannot be created or an input file cannot be read."""

    def __init__(self, reason: str, path: Optional[Union[str, Path]] = None):
        self.reason = reason
        self.path = str(path) if path is not None else None
        message = f"{self.path}: {reason}" if self.path else reason
        super().__init__(message)


class ArchiveBuilder:
    """
    Writes matched documents into a ZIP archive.

    The archive step runs strictly after a search has finished and only reads
    the frozen result set. A failure aborts the archive but leaves the search
    results untouched.
    """

    def __init__(self, config: Optional[ArchiveConfig] = None):
        """
        Initialize the archive builder.

        Args:
            config: Archive settings (output directory, permissions, compression)
        """
        self.config = config or ArchiveConfig()

    def archive_name(self, timestamp: Optional[datetime] = None) -> str:
        """
        Get the archive file name for a point in time.

        Args:
            timestamp: Creation time; now (UTC) if omitted

        Returns:
            File name of the form search_results_YYYYMMDDHHMMSS.zip
        """
        if timestamp is None:
            timestamp = datetime.now(timezone.utc)
        elif timestamp.tzinfo is not None:
            timestamp = timestamp.astimezone(timezone.utc)
        return f"{ARCHIVE_PREFIX}{timestamp.strftime(TIMESTAMP_FORMAT)}.zip"

    def entry_name(self, path: Union[str, Path]) -> str:
        """Get the name a document is stored under inside the archive."""
        path = Path(path)
        if self.config.preserve_paths:
            return path.relative_to(path.anchor).as_posix()
        return path.name

    def build(self, paths: Iterable[Union[str, Path]], timestamp: Optional[datetime] = None) -> Path:
        """
        Create the archive from a list of document paths.

        Args:
            paths: Documents to copy into the archive, in entry order
            timestamp: Creation time used for the archive name

        Returns:
            Path of the written archive

        Raises:
            ArchiveError: If the archive cannot be created or an input cannot be read.
                A partially written archive is removed.
        """
        archive_path = self.config.get_output_path() / self.archive_name(timestamp)

        try:
            archive = zipfile.ZipFile(archive_path, 'w', compression=zipfile.ZIP_DEFLATED)
        except OSError as e:
            raise ArchiveError(f"cannot create archive: {e}", archive_path) from e

        seen_names = set()
        try:
            with archive:
                for path in paths:
                    name = self.entry_name(path)
                    if name in seen_names:
                        logger.warning(f"Duplicate archive entry name '{name}' for {path}")
                    seen_names.add(name)
                    self._add_entry(archive, Path(path), name)
        except ArchiveError:
            self._discard(archive_path)
            raise
        except OSError as e:
            self._discard(archive_path)
            raise ArchiveError(f"cannot write archive: {e}", archive_path) from e

        logger.info(f"Created archive {archive_path} with {len(seen_names)} entries")
        return archive_path

    def _add_entry(self, archive: zipfile.ZipFile, path: Path, name: str) -> None:
        """
        Stream one document into the archive.

        Raises:
            ArchiveError: If the document cannot be opened
        """
        try:
            info = zipfile.ZipInfo.from_file(path, name, strict_timestamps=False)
            src = open(path, 'rb')
        except OSError as e:
            raise ArchiveError(f"cannot read file: {e}", path) from e

        info.compress_type = zipfile.ZIP_DEFLATED
        # open() takes the deflate level from the entry, not from the archive
        info._compresslevel = self.config.compression_level
        info.external_attr = (stat.S_IFREG | self.config.permissions) << 16
        with src, archive.open(info, 'w') as dst:
            shutil.copyfileobj(src, dst, COPY_BUFFER_SIZE)

    def _discard(self, archive_path: Path) -> None:
        try:
            archive_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Cannot remove incomplete archive {archive_path}: {e}")

    def try_build(self, paths: Iterable[Union[str, Path]], timestamp: Optional[datetime] = None) -> ArchiveResult:
        """
        Create the archive and report the outcome as a value.

        Args:
            paths: Documents to copy into the archive
            timestamp: Creation time used for the archive name

        Returns:
            ArchiveResult describing success or the failing input
        """
        paths = list(paths)
        try:
            archive_path = self.build(paths, timestamp)
        except ArchiveError as e:
            logger.error(f"Error creating ZIP file: {e}")
            return ArchiveResult.failed(e.reason, e.path)
        return ArchiveResult.ok(str(archive_path), len(paths))

    def build_from_results(self, results: SearchResultSet,
                           timestamp: Optional[datetime] = None) -> ArchiveResult:
        """
        Archive every matched document of a completed search.

        Args:
            results: Frozen result set of a finished search
            timestamp: Creation time used for the archive name

        Returns:
            ArchiveResult describing the outcome

        Raises:
            RuntimeError: If the search has not finished yet
        """
        if not results.is_frozen():
            raise RuntimeError("Cannot archive the results of a search that is still running")

        paths: List[str] = [match.path for match in results.sorted_by_path()]
        return self.try_build(paths, timestamp)
