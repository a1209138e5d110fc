"""
Unit tests for the archive builder module.

Tests archive naming, entry contents and attributes, and the all-or-nothing
failure behaviour of the ArchiveBuilder class.
"""

import os
import re
import tempfile
import shutil
import zipfile
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch
import pytest

from pdfscan.tools.archive_builder import ArchiveBuilder, ArchiveError
from pdfscan.models.config import ArchiveConfig
from pdfscan.models.search_config import SearchConfig
from pdfscan.models.search_results import FileMatch, MatchSpan, SearchResultSet


FIXED_TIME = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


class TestArchiveBuilder:
    """Test cases for the ArchiveBuilder class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir).resolve()
        self.output_dir = self.test_root / "out"
        self.output_dir.mkdir()
        self.builder = ArchiveBuilder(ArchiveConfig(directory=str(self.output_dir)))

        self.files = {
            "a.pdf": b"%PDF-1.4 first document",
            "sub/b.pdf": bytes(range(256)) * 10,
            "sub/deeper/c.pdf": b"",
        }
        for name, data in self.files.items():
            path = self.test_root / "docs" / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)

    def teardown_method(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def _doc(self, name: str) -> Path:
        return self.test_root / "docs" / name

    def test_archive_name_format(self):
        """Test the deterministic archive name."""
        assert self.builder.archive_name(FIXED_TIME) == "search_results_20240102030405.zip"

    def test_archive_name_uses_utc(self):
        """Test that aware timestamps are converted to UTC."""
        local = FIXED_TIME.astimezone(timezone(timedelta(hours=5)))
        assert self.builder.archive_name(local) == "search_results_20240102030405.zip"

    def test_archive_name_defaults_to_now(self):
        """Test the archive name without an explicit timestamp."""
        assert re.fullmatch(r"search_results_\d{14}\.zip", self.builder.archive_name())

    def test_build_round_trip(self):
        """Test that archived entries read back byte-identical."""
        paths = [self._doc(name) for name in self.files]

        archive_path = self.builder.build(paths, FIXED_TIME)

        assert archive_path == self.output_dir / "search_results_20240102030405.zip"
        with zipfile.ZipFile(archive_path) as archive:
            assert archive.namelist() == ["a.pdf", "b.pdf", "c.pdf"]
            for name, data in self.files.items():
                assert archive.read(Path(name).name) == data

    def test_entry_attributes(self):
        """Test compression and permission bits of the entries."""
        archive_path = self.builder.build([self._doc("a.pdf")], FIXED_TIME)

        with zipfile.ZipFile(archive_path) as archive:
            info = archive.getinfo("a.pdf")
            assert info.compress_type == zipfile.ZIP_DEFLATED
            assert (info.external_attr >> 16) & 0o777 == 0o644

    def test_custom_permissions_and_level(self):
        """Test configured permissions and compression level."""
        builder = ArchiveBuilder(ArchiveConfig(
            directory=str(self.output_dir), permissions=0o600, compression_level=9
        ))
        archive_path = builder.build([self._doc("sub/b.pdf")], FIXED_TIME)

        with zipfile.ZipFile(archive_path) as archive:
            info = archive.getinfo("b.pdf")
            assert (info.external_attr >> 16) & 0o777 == 0o600
            assert archive.read("b.pdf") == self.files["sub/b.pdf"]

    def test_preserve_paths(self):
        """Test naming entries by full path instead of base name."""
        builder = ArchiveBuilder(ArchiveConfig(directory=str(self.output_dir), preserve_paths=True))
        doc = self._doc("sub/b.pdf")

        archive_path = builder.build([doc], FIXED_TIME)

        with zipfile.ZipFile(archive_path) as archive:
            expected = doc.relative_to(doc.anchor).as_posix()
            assert archive.namelist() == [expected]

    def test_duplicate_base_names_are_kept(self):
        """Test that equal base names from different directories both get stored."""
        first = self.test_root / "x" / "same.pdf"
        second = self.test_root / "y" / "same.pdf"
        for path, data in ((first, b"one"), (second, b"two")):
            path.parent.mkdir()
            path.write_bytes(data)

        with pytest.warns(UserWarning):
            archive_path = self.builder.build([first, second], FIXED_TIME)

        with zipfile.ZipFile(archive_path) as archive:
            assert archive.namelist() == ["same.pdf", "same.pdf"]

    def test_entries_are_streamed(self):
        """Test that documents are copied in chunks rather than read whole."""
        large = self.test_root / "docs" / "large.pdf"
        data = os.urandom(3 * 1024 * 1024 + 17)
        large.write_bytes(data)
        paths = [self._doc("a.pdf"), large]

        with patch("pdfscan.tools.archive_builder.shutil.copyfileobj",
                   wraps=shutil.copyfileobj) as copy:
            archive_path = self.builder.build(paths, FIXED_TIME)

        assert copy.call_count == len(paths)
        with zipfile.ZipFile(archive_path) as archive:
            assert archive.read("large.pdf") == data
            assert archive.read("a.pdf") == self.files["a.pdf"]
            assert archive.testzip() is None

    def test_unreadable_input_fails_whole_archive(self):
        """Test that a missing input aborts and names the offending path."""
        missing = self.test_root / "docs" / "missing.pdf"

        with pytest.raises(ArchiveError) as exc_info:
            self.builder.build([self._doc("a.pdf"), missing], FIXED_TIME)

        assert exc_info.value.path == str(missing)
        assert os.listdir(self.output_dir) == []

    def test_missing_output_directory(self):
        """Test that an archive that cannot be created raises ArchiveError."""
        builder = ArchiveBuilder(ArchiveConfig(directory=str(self.test_root / "nope")))

        with pytest.raises(ArchiveError, match="cannot create archive"):
            builder.build([self._doc("a.pdf")], FIXED_TIME)

    def test_try_build_success(self):
        """Test the value-returning variant on success."""
        result = self.builder.try_build([self._doc("a.pdf")], FIXED_TIME)

        assert result.success is True
        assert result.entry_count == 1
        assert Path(result.archive_path).exists()

    def test_try_build_failure(self):
        """Test the value-returning variant on failure."""
        missing = self.test_root / "missing.pdf"

        result = self.builder.try_build([missing], FIXED_TIME)

        assert result.success is False
        assert result.failed_path == str(missing)
        assert "cannot read file" in result.error

    def test_build_from_results(self):
        """Test archiving the matches of a frozen result set."""
        config = SearchConfig(phrase="x", roots=[str(self.test_root)])
        results = SearchResultSet(config=config)
        results.merge([
            FileMatch(path=str(self._doc("sub/b.pdf")), matches=[MatchSpan.placeholder("b.pdf")]),
            FileMatch(path=str(self._doc("a.pdf")), matches=[MatchSpan.placeholder("a.pdf")]),
        ])
        results.freeze()

        outcome = self.builder.build_from_results(results, FIXED_TIME)

        assert outcome.success is True
        assert outcome.entry_count == 2
        with zipfile.ZipFile(outcome.archive_path) as archive:
            assert sorted(archive.namelist()) == ["a.pdf", "b.pdf"]

    def test_build_from_running_results_rejected(self):
        """Test that an unfrozen result set cannot be archived."""
        config = SearchConfig(phrase="x", roots=[str(self.test_root)])
        results = SearchResultSet(config=config)

        with pytest.raises(RuntimeError, match="still running"):
            self.builder.build_from_results(results)

    def test_default_directory_is_working_directory(self, monkeypatch):
        """Test that archives go to the current directory by default."""
        monkeypatch.chdir(self.output_dir)

        archive_path = ArchiveBuilder().build([self._doc("a.pdf")], FIXED_TIME)

        assert archive_path == self.output_dir / "search_results_20240102030405.zip"
        assert archive_path.exists()
