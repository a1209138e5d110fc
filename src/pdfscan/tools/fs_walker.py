"""
Filesystem walker for the PDF Scanner.

This module enumerates candidate documents under a root directory. The walk
is lazy and restartable: every iteration over a DirectoryWalker performs a
fresh traversal. Entries that cannot be read are skipped, never fatal.
"""

import os
from pathlib import Path
from typing import Dict, Iterable, Iterator, Union
import logging

from ..models.config import ScanConfig


logger = logging.getLogger(__name__)


class DirectoryWalker:
    """
    Recursive enumerator of candidate documents under one root.

    Candidates are regular files whose extension matches the configured
    document extension. Symlinked directories are not followed. Unreadable
    directories, broken symlinks and files that vanish mid-walk are skipped.
    """

    def __init__(self, root: Union[str, Path], config: ScanConfig):
        """
        Initialize the directory walker.

        Args:
            root: Directory to walk (a single document is also accepted)
            config: Configuration holding the document extension rule
        """
        self.root = Path(root).expanduser()
        self.config = config
        self._stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'files_scanned': 0,
            'candidates': 0,
            'directories_traversed': 0,
            'errors': 0
        }

    def __iter__(self) -> Iterator[Path]:
        return self.walk()

    def walk(self) -> Iterator[Path]:
        """
        Walk the root and yield candidate document paths.

        Yields:
            Paths of candidate documents, depth-first, sorted within each directory
        """
        self.reset_stats()

        if self.root.is_file():
            self._stats['files_scanned'] += 1
            if self.config.matches_extension(self.root):
                self._stats['candidates'] += 1
                yield self.root
            return

        if not self.root.is_dir():
            logger.warning(f"Root directory does not exist or is not a directory: {self.root}")
            self._stats['errors'] += 1
            return

        logger.info(f"Walking directory tree: {self.root}")
        for current_dir, subdirs, files in os.walk(self.root, onerror=self._on_walk_error):
            current_path = Path(current_dir)
            self._stats['directories_traversed'] += 1

            subdirs.sort()
            for filename in sorted(files):
                file_path = current_path / filename
                self._stats['files_scanned'] += 1

                if not self.config.matches_extension(file_path):
                    continue

                if not self._is_readable_file(file_path):
                    continue

                self._stats['candidates'] += 1
                yield file_path

    def _on_walk_error(self, error: OSError) -> None:
        """Record a directory that could not be listed and keep walking."""
        logger.debug(f"Skipping unreadable entry {getattr(error, 'filename', '')}: {error}")
        self._stats['errors'] += 1

    def _is_readable_file(self, file_path: Path) -> bool:
        """
        Check that a directory entry is a regular file that can be stat'ed.

        Broken symlinks and special files are rejected.
        """
        try:
            if file_path.is_file():
                return True
            logger.debug(f"Skipping non-regular entry: {file_path}")
        except OSError as e:
            logger.debug(f"Skipping unreadable entry {file_path}: {e}")
            self._stats['errors'] += 1
        return False

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the most recent walk.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = self._empty_stats()


def walk_paths(paths: Iterable[Union[str, Path]], config: ScanConfig) -> Iterator[Path]:
    """
    Yield candidate documents from a mix of files and directories.

    Args:
        paths: Files and directories to enumerate, in order
        config: Configuration holding the document extension rule

    Yields:
        Candidate document paths
    """
    for path in paths:
        yield from DirectoryWalker(path, config)
