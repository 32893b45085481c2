"""
Keyword matchers for keyfind.

One matcher class exists per search mode. The engine picks the matcher
once per invocation with :func:`create_matcher` and evaluates every
candidate against every keyword through it.
"""

import os
import stat
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Type

from ..models.config import SearchConfig
from ..models.search_request import SearchMode
from ..models.search_results import MatchRecord
from .fs_walker import Candidate


logger = logging.getLogger(__name__)


class UnreadableEntryError(OSError):
    """Raised when a candidate's content cannot be read for matching."""
    pass


class FileTooLargeError(UnreadableEntryError):
    """Raised when a file exceeds the configured content scan size."""
    pass


@dataclass
class CandidateResult:
    """
    Records produced by one candidate.

    Attributes:
        records: Match records in keyword order
        skipped: Reason the candidate was skipped, if it was
    """
    records: List[MatchRecord] = field(default_factory=list)
    skipped: Optional[str] = None


class Matcher:
    """Base class for per-mode keyword matchers."""

    mode: SearchMode

    def __init__(self, config: Optional[SearchConfig] = None):
        self.config = config or SearchConfig()

    def prepare(self, candidate: Candidate) -> str:
        """
        Load the text keywords are tested against for a candidate.

        Raises:
            UnreadableEntryError: If the candidate cannot be read
        """
        raise NotImplementedError

    def contains(self, haystack: str, keyword: str) -> bool:
        """Substring test between prepared text and a keyword."""
        raise NotImplementedError

    def matches(self, candidate: Candidate, keyword: str) -> bool:
        """
        Decide whether a single keyword matches a candidate.

        Raises:
            UnreadableEntryError: If the candidate cannot be read
        """
        return self.contains(self.prepare(candidate), keyword)

    def match_candidate(self, candidate: Candidate, keywords: Sequence[str]) -> CandidateResult:
        """
        Evaluate every keyword against one candidate.

        The candidate is loaded once. A read failure skips the candidate
        instead of raising, so one bad file never aborts a search.

        Args:
            candidate: Entry to test
            keywords: Keywords in request order; duplicates are evaluated again

        Returns:
            CandidateResult with one record per matching keyword
        """
        try:
            haystack = self.prepare(candidate)
        except FileTooLargeError as e:
            logger.debug(str(e))
            return CandidateResult(skipped=str(e))
        except UnreadableEntryError as e:
            logger.warning(str(e))
            return CandidateResult(skipped=str(e))

        records = [
            MatchRecord(path=candidate.path, keyword=keyword)
            for keyword in keywords
            if self.contains(haystack, keyword)
        ]
        return CandidateResult(records=records)


class ContentMatcher(Matcher):
    """Case-sensitive substring search inside file contents."""

    mode = SearchMode.CONTENT

    def prepare(self, candidate: Candidate) -> str:
        limit = self.config.limits.max_bytes_per_file
        try:
            st = os.stat(candidate.path)
            # FIFOs and device nodes would block on open()
            if not stat.S_ISREG(st.st_mode):
                raise UnreadableEntryError(f"Not a regular file: {candidate.path}")
            if limit is not None and st.st_size > limit:
                raise FileTooLargeError(
                    f"Skipping large file: {candidate.path} ({st.st_size} bytes)"
                )
            with open(candidate.path, 'r',
                      encoding=self.config.content.encoding,
                      errors=self.config.content.errors) as f:
                return f.read()
        except UnreadableEntryError:
            raise
        except (OSError, UnicodeError) as e:
            raise UnreadableEntryError(f"Cannot read file {candidate.path}: {e}") from e

    def contains(self, haystack: str, keyword: str) -> bool:
        return keyword in haystack


class NameMatcher(Matcher):
    """Case-insensitive substring search in an entry's base name."""

    def prepare(self, candidate: Candidate) -> str:
        return candidate.name.casefold()

    def contains(self, haystack: str, keyword: str) -> bool:
        return keyword.casefold() in haystack


class FileNameMatcher(NameMatcher):
    mode = SearchMode.FILE_NAME


class DirectoryNameMatcher(NameMatcher):
    mode = SearchMode.DIRECTORY_NAME


MATCHERS: Dict[SearchMode, Type[Matcher]] = {
    SearchMode.CONTENT: ContentMatcher,
    SearchMode.FILE_NAME: FileNameMatcher,
    SearchMode.DIRECTORY_NAME: DirectoryNameMatcher,
}


def create_matcher(mode: SearchMode, config: Optional[SearchConfig] = None) -> Matcher:
    """
    Create the matcher for a search mode.

    Args:
        mode: Search mode of the invocation
        config: Configuration for content decoding and size limits

    Returns:
        Matcher instance for the mode
    """
    try:
        matcher_class = MATCHERS[mode]
    except KeyError:
        raise ValueError(f"Unsupported search mode: {mode}")
    return matcher_class(config)
