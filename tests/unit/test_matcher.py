"""
Unit tests for the per-mode keyword matchers.
"""

import os
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch
import pytest

from keyfind.models.config import SearchConfig
from keyfind.models.search_request import SearchMode
from keyfind.tools.fs_walker import Candidate, EntryKind
from keyfind.tools.matcher import (
    ContentMatcher,
    DirectoryNameMatcher,
    FileNameMatcher,
    FileTooLargeError,
    UnreadableEntryError,
    create_matcher,
)


class TestContentMatcher:
    """Test cases for ContentMatcher."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.root = Path(self.temp_dir)
        self.matcher = ContentMatcher(SearchConfig())

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _file(self, name, content, binary=False):
        path = self.root / name
        if binary:
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return Candidate(str(path), EntryKind.FILE, path.suffix or None)

    def test_records_in_keyword_order(self):
        """Test that matching keywords produce records in request order."""
        candidate = self._file("app.log", "Warn: disk\nError: full\n")

        result = self.matcher.match_candidate(candidate, ["Error", "Warn", "Fatal"])

        assert [r.keyword for r in result.records] == ["Error", "Warn"]
        assert all(r.path == candidate.path for r in result.records)
        assert result.skipped is None

    def test_content_match_is_case_sensitive(self):
        """Test that content keywords are compared case-sensitively."""
        candidate = self._file("app.log", "error: lowercase only")

        assert not self.matcher.matches(candidate, "Error")
        assert self.matcher.matches(candidate, "error")

    def test_duplicate_keywords(self):
        """Test that a duplicated keyword yields a record per occurrence."""
        candidate = self._file("notes.txt", "TODO")

        result = self.matcher.match_candidate(candidate, ["TODO", "TODO"])

        assert len(result.records) == 2

    def test_empty_file(self):
        """Test that an empty file matches nothing."""
        candidate = self._file("empty.txt", "")

        assert self.matcher.match_candidate(candidate, ["x"]).records == []

    def test_binary_content_is_decoded_leniently(self):
        """Test that undecodable bytes do not prevent matching."""
        candidate = self._file("blob.bin", b"\xff\xfe\x00MAGIC\x80", binary=True)

        result = self.matcher.match_candidate(candidate, ["MAGIC"])

        assert len(result.records) == 1
        assert result.skipped is None

    def test_strict_decoding_skips_binary_files(self):
        """Test that strict decoding turns undecodable files into skips."""
        matcher = ContentMatcher(SearchConfig(content={'errors': 'strict'}))
        candidate = self._file("blob.bin", b"\xff\xfe\x80", binary=True)

        result = matcher.match_candidate(candidate, ["x"])

        assert result.records == []
        assert "Cannot read file" in result.skipped

    def test_unreadable_file_is_skipped(self):
        """Test that a read failure skips the candidate instead of raising."""
        candidate = self._file("secret.txt", "Error")

        with patch('builtins.open', side_effect=PermissionError("denied")):
            result = self.matcher.match_candidate(candidate, ["Error"])

        assert result.records == []
        assert candidate.path in result.skipped

    def test_missing_file_raises_on_prepare(self):
        """Test that prepare reports unreadable candidates as UnreadableEntryError."""
        candidate = Candidate(str(self.root / "gone.txt"), EntryKind.FILE, ".txt")

        with pytest.raises(UnreadableEntryError):
            self.matcher.prepare(candidate)

    def test_file_size_limit(self):
        """Test that files above the size limit are skipped."""
        matcher = ContentMatcher(SearchConfig(limits={'max_bytes_per_file': 10}))
        small = self._file("small.txt", "Error")
        large = self._file("large.txt", "Error" * 10)

        assert len(matcher.match_candidate(small, ["Error"]).records) == 1

        with pytest.raises(FileTooLargeError):
            matcher.prepare(large)

        result = matcher.match_candidate(large, ["Error"])
        assert result.records == []
        assert "Skipping large file" in result.skipped

    def test_custom_encoding(self):
        """Test that the configured encoding is used to decode files."""
        path = self.root / "latin.txt"
        path.write_bytes("café".encode("latin-1"))
        candidate = Candidate(str(path), EntryKind.FILE, ".txt")
        matcher = ContentMatcher(SearchConfig(content={'encoding': 'latin-1'}))

        assert matcher.matches(candidate, "café")


class TestNameMatchers:
    """Test cases for the file and directory name matchers."""

    def test_file_name_is_case_insensitive(self):
        """Test that file names are compared case-insensitively."""
        matcher = FileNameMatcher()

        assert matcher.matches(Candidate("/d/Report.txt", EntryKind.FILE, ".txt"), "Report")
        assert matcher.matches(Candidate("/d/report_final.csv", EntryKind.FILE, ".csv"), "Report")
        assert not matcher.matches(Candidate("/d/summary.txt", EntryKind.FILE, ".txt"), "Report")

    def test_only_base_name_is_tested(self):
        """Test that parent directories do not count as a name match."""
        matcher = FileNameMatcher()

        assert not matcher.matches(Candidate("/reports/summary.txt", EntryKind.FILE, ".txt"), "report")

    def test_directory_name(self):
        """Test directory name matching."""
        matcher = DirectoryNameMatcher()

        assert matcher.matches(Candidate("/d/Backup2023", EntryKind.DIRECTORY), "Backup")
        assert matcher.matches(Candidate("/d/OldBackup", EntryKind.DIRECTORY), "backup")
        assert not matcher.matches(Candidate("/d/Archive", EntryKind.DIRECTORY), "Backup")

    def test_name_match_records(self):
        """Test that name matching produces one record per matching keyword."""
        matcher = FileNameMatcher()
        candidate = Candidate("/d/2023_report_draft.md", EntryKind.FILE, ".md")

        result = matcher.match_candidate(candidate, ["draft", "final", "REPORT"])

        assert [r.keyword for r in result.records] == ["draft", "REPORT"]
        assert result.records[0].path == "/d/2023_report_draft.md"


class TestCreateMatcher:
    """Test cases for create_matcher."""

    @pytest.mark.parametrize("mode,expected", [
        (SearchMode.CONTENT, ContentMatcher),
        (SearchMode.FILE_NAME, FileNameMatcher),
        (SearchMode.DIRECTORY_NAME, DirectoryNameMatcher),
    ])
    def test_matcher_per_mode(self, mode, expected):
        """Test that each mode gets its matcher."""
        matcher = create_matcher(mode, SearchConfig())

        assert isinstance(matcher, expected)
        assert matcher.mode is mode

    def test_unknown_mode(self):
        """Test that an unknown mode is rejected."""
        with pytest.raises(ValueError, match="Unsupported search mode"):
            create_matcher("regex")
