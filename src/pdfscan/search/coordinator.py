"""
Search coordinator for the PDF Scanner.

This module fans a search out to one worker per root directory, lets each
worker walk, extract and match on its own, and merges the finished worker
results into a single SearchResultSet. Workers share nothing mutable: each
accumulates a local list and hands it back as its return value, and only the
coordinator thread writes the aggregate.
"""

import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union
import logging

from ..models.config import ScanConfig
from ..models.search_config import SearchConfig
from ..models.search_results import ArchiveResult, FileMatch, MatchSpan, SearchResultSet
from ..tools.archive_builder import ArchiveBuilder
from ..tools.fs_walker import DirectoryWalker
from ..tools.match_finder import MatchFinder
from ..tools.text_extractor import ExtractionError, TextExtractorFunc, extract_file, extract_text


logger = logging.getLogger(__name__)


class SearchState(Enum):
    """Lifecycle of a coordinator."""
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"


@dataclass
class WorkerOutcome:
    """
    Everything one worker produced for its root.

    Attributes:
        root: Root directory the worker searched
        matches: Matches found under the root
        scanned: Number of candidate documents examined
        errors: Per-file and per-root problems, already logged
    """
    root: str
    matches: List[FileMatch] = field(default_factory=list)
    scanned: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class SearchOutcome:
    """
    Final outcome of a search and its optional archive step.

    Attributes:
        results: Frozen result set of the search
        archive: Archive outcome, or None if no archive was requested or needed
    """
    results: SearchResultSet
    archive: Optional[ArchiveResult] = None


class SearchCoordinator:
    """
    Runs one search over every configured root concurrently.

    A coordinator moves from IDLE to RUNNING when run() is called and to DONE
    once every worker has finished. There is no observable state in between,
    and a started search always runs to completion.
    """

    def __init__(self, search_config: SearchConfig, scan_config: Optional[ScanConfig] = None,
                 extractor: TextExtractorFunc = extract_text):
        """
        Initialize the search coordinator.

        Args:
            search_config: Phrase, case rule and roots of this search
            scan_config: Application settings (document extension, context, limits)
            extractor: Converts document bytes to text, raising ExtractionError on failure
        """
        self.search_config = search_config
        self.scan_config = scan_config or ScanConfig()
        self.extractor = extractor
        self._state = SearchState.IDLE
        self._results: Optional[SearchResultSet] = None

    @property
    def state(self) -> SearchState:
        return self._state

    @property
    def results(self) -> Optional[SearchResultSet]:
        """The frozen result set, once the search is done."""
        return self._results

    def run(self) -> SearchResultSet:
        """
        Execute the search and wait for every worker to finish.

        Returns:
            The frozen, merged result set

        Raises:
            RuntimeError: If this coordinator has already been started
        """
        if self._state is not SearchState.IDLE:
            raise RuntimeError("A search coordinator can only run once")

        self._state = SearchState.RUNNING
        started = time.perf_counter()
        results = SearchResultSet(config=self.search_config)
        roots = self.search_config.roots

        logger.info(f"Starting search: {self.search_config}")

        with ThreadPoolExecutor(max_workers=len(roots), thread_name_prefix="pdfscan-worker") as executor:
            futures = {executor.submit(self._search_root, root): root for root in roots}

            for future in as_completed(futures):
                root = futures[future]
                try:
                    outcome = future.result()
                except Exception as e:
                    logger.error(f"Worker for root {root} failed: {e}")
                    results.add_error(f"{root}: worker failed: {e}")
                    continue

                added = results.merge(outcome.matches)
                results.total_scanned += outcome.scanned
                for error in outcome.errors:
                    results.add_error(error)
                logger.info(f"Worker for root {root} finished: {added} new matches, {outcome.scanned} files")

        results.execution_time = time.perf_counter() - started
        results.freeze()

        self._results = results
        self._state = SearchState.DONE
        logger.info(str(results))
        return results

    def search_document(self, path: Union[str, Path]) -> Optional[FileMatch]:
        """
        Search a single document with this coordinator's phrase and settings.

        Args:
            path: Document to search

        Returns:
            FileMatch if the document matched, None otherwise (including on failure)
        """
        errors: List[str] = []
        return self._search_file(Path(path), self._make_finder(), errors)

    def _make_finder(self) -> Optional[MatchFinder]:
        if self.search_config.is_match_all():
            return None
        return MatchFinder(
            self.search_config.phrase,
            case_sensitive=self.search_config.case_sensitive,
            context_chars=self.scan_config.context_chars
        )

    def _search_root(self, root: str) -> WorkerOutcome:
        """
        Worker body: walk one root and search every candidate document.

        Args:
            root: Root directory to search

        Returns:
            WorkerOutcome holding this worker's local results
        """
        outcome = WorkerOutcome(root=root)
        finder = self._make_finder()
        walker = DirectoryWalker(root, self.scan_config)

        if not Path(root).exists():
            outcome.errors.append(f"Root directory does not exist: {root}")

        for path in walker:
            outcome.scanned += 1
            match = self._search_file(path, finder, outcome.errors)
            if match is not None:
                outcome.matches.append(match)

        return outcome

    def _search_file(self, path: Path, finder: Optional[MatchFinder], errors: List[str]) -> Optional[FileMatch]:
        """
        Search one document inside a failure boundary.

        No phrase means match-all: every candidate is reported with a single
        placeholder span and is not extracted at all. Any failure is logged,
        recorded in errors and turned into a non-match.

        Args:
            path: Candidate document
            finder: Matcher for the phrase, or None for match-all
            errors: Worker-local error list to append to

        Returns:
            FileMatch if the document matched, None otherwise
        """
        if finder is None:
            return FileMatch(path=str(path), matches=[MatchSpan.placeholder(str(path))])

        try:
            size = path.stat().st_size
            if size > self.scan_config.limits.max_bytes_per_file:
                logger.warning(f"Skipping large file: {path} ({size} bytes)")
                errors.append(f"{path}: skipped, larger than {self.scan_config.limits.get_max_size_human_readable()}")
                return None

            text = extract_file(path, self.extractor)
            spans = finder.find(text)
        except ExtractionError as e:
            logger.warning(f"Error processing {path}: {e.reason}")
            errors.append(str(e))
            return None
        except OSError as e:
            logger.warning(f"Error processing {path}: {e}")
            errors.append(f"{path}: {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error processing {path}: {e}")
            errors.append(f"{path}: unexpected error: {e}")
            return None

        if not spans:
            return None

        logger.debug(f"{len(spans)} matches in {path}")
        return FileMatch(path=str(path), matches=spans)


def run_search(search_config: SearchConfig, scan_config: Optional[ScanConfig] = None,
               extractor: TextExtractorFunc = extract_text) -> SearchOutcome:
    """
    Run a search and, if requested, archive its matches afterwards.

    The archive step starts only after the search is done and never changes
    the result set; an archive failure is reported in the outcome alongside
    the still valid results.

    Args:
        search_config: Phrase, case rule, roots and archive flag
        scan_config: Application settings
        extractor: Converts document bytes to text

    Returns:
        SearchOutcome with the frozen results and the archive outcome
    """
    scan_config = scan_config or ScanConfig()
    results = SearchCoordinator(search_config, scan_config, extractor).run()

    if not search_config.build_archive:
        return SearchOutcome(results=results)

    if results.get_match_count() == 0:
        logger.info("No matching files, skipping archive creation")
        return SearchOutcome(results=results)

    archive = ArchiveBuilder(scan_config.archive).build_from_results(results)
    return SearchOutcome(results=results, archive=archive)
