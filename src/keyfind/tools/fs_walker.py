"""
Filesystem walker for keyfind.

This module enumerates the candidates of a search: every file (optionally
filtered by extension) or every directory beneath a validated root. The
walk is eager so the total candidate count is known before matching
starts, and deterministic so the same tree always yields the same order.
"""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple
import logging

from ..models.config import SearchConfig
from ..models.search_request import SearchMode


logger = logging.getLogger(__name__)


class EntryKind(Enum):
    """Kind of filesystem entry a candidate refers to."""
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class Candidate:
    """
    A filesystem entry discovered during traversal.

    Attributes:
        path: Absolute path of the entry
        kind: Whether the entry is a file or a directory
        extension: File suffix including the dot (None for directories
            and files without a suffix)
    """
    path: str
    kind: EntryKind
    extension: Optional[str] = None

    @property
    def name(self) -> str:
        """Base name of the entry."""
        return os.path.basename(self.path)

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE


def normalize_extensions(extensions: Optional[Iterable[str]]) -> Set[str]:
    """
    Normalize extension filters for membership tests.

    A leading dot is added where missing and case is folded only where the
    platform's paths are case-insensitive.
    """
    normalized = set()
    for ext in extensions or []:
        ext = ext.strip()
        if not ext:
            continue
        if not ext.startswith('.'):
            ext = '.' + ext
        normalized.add(os.path.normcase(ext))
    return normalized


class FSWalker:
    """
    Filesystem walker that enumerates search candidates.

    Supports:
    - File enumeration with optional exact-match extension filters
    - Directory enumeration (the root itself is never a candidate)
    - Ignore patterns (gitignore-style) from the configuration
    - Skip-and-continue on unreadable subtrees
    """

    def __init__(self, config: Optional[SearchConfig] = None):
        """
        Initialize the filesystem walker.

        Args:
            config: Configuration with ignore patterns and limits
        """
        self.config = config or SearchConfig()
        self._errors: List[str] = []
        self._stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'directories_traversed': 0,
            'files_scanned': 0,
            'entries_ignored': 0,
            'candidates': 0,
            'errors': 0
        }

    def enumerate_candidates(
        self,
        root: Path,
        mode: SearchMode,
        extensions: Optional[Iterable[str]] = None,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> List[Candidate]:
        """
        Enumerate every candidate for a mode beneath a validated root.

        Args:
            root: Validated absolute root directory
            mode: Search mode deciding whether files or directories are produced
            extensions: Extension filters; ignored in directory mode
            should_stop: Optional callable polled once per directory; when it
                returns True enumeration stops early

        Returns:
            Candidates in traversal order
        """
        self.reset_stats()
        root_path = Path(root)
        if mode.searches_files:
            wanted = normalize_extensions(extensions)
        else:
            if extensions:
                logger.debug("Extension filters are ignored in directory mode")
            wanted = set()

        candidates: List[Candidate] = []
        max_files = self.config.limits.max_files

        logger.info(f"Enumerating {'files' if mode.searches_files else 'directories'} under {root_path}")

        for current_path, subdirs, files in self._walk(root_path):
            if should_stop is not None and should_stop():
                logger.info("Enumeration stopped on request")
                break

            self._stats['directories_traversed'] += 1

            if mode.searches_files:
                for filename in files:
                    self._stats['files_scanned'] += 1
                    file_path = current_path / filename

                    if self._should_ignore(root_path, file_path, is_dir=False):
                        self._stats['entries_ignored'] += 1
                        continue

                    suffix = file_path.suffix or None
                    if wanted and (suffix is None or os.path.normcase(suffix) not in wanted):
                        continue

                    candidates.append(Candidate(str(file_path), EntryKind.FILE, suffix))
                    if max_files is not None and len(candidates) >= max_files:
                        break
            elif current_path != root_path:
                candidates.append(Candidate(str(current_path), EntryKind.DIRECTORY))

            if max_files is not None and len(candidates) >= max_files:
                logger.warning(f"Reached maximum candidate limit: {max_files}")
                break

        self._stats['candidates'] = len(candidates)
        logger.info(f"Enumerated {len(candidates)} candidates under {root_path}")
        return candidates

    def _walk(self, root_path: Path):
        """
        Walk the tree top-down with sorted, ignore-pruned subdirectories.

        Yields:
            (directory path, subdirectory names, file names) tuples
        """
        follow = self.config.follow_symlinks
        visited: Set[Tuple[int, int]] = set()

        for current_dir, subdirs, files in os.walk(root_path, onerror=self._on_walk_error, followlinks=follow):
            current_path = Path(current_dir)

            if follow:
                # Symlink loops would otherwise recurse forever
                try:
                    st = current_path.stat()
                except OSError as e:
                    self._on_walk_error(e)
                    subdirs[:] = []
                    continue
                key = (st.st_dev, st.st_ino)
                if key in visited:
                    logger.debug(f"Skipping already visited directory: {current_path}")
                    subdirs[:] = []
                    continue
                visited.add(key)

            kept = []
            for name in sorted(subdirs):
                if self._should_ignore(root_path, current_path / name, is_dir=True):
                    self._stats['entries_ignored'] += 1
                    continue
                kept.append(name)
            subdirs[:] = kept
            files.sort()

            yield current_path, subdirs, files

    def _should_ignore(self, root_path: Path, entry_path: Path, is_dir: bool) -> bool:
        """Check an entry against the ignore patterns, relative to the root."""
        if not self.config.ignore:
            return False
        try:
            relative = entry_path.relative_to(root_path)
        except ValueError:
            relative = entry_path
        return self.config.should_ignore(str(relative), is_dir=is_dir)

    def _on_walk_error(self, error: OSError) -> None:
        """Record an unreadable subtree and let the walk continue."""
        location = getattr(error, 'filename', None) or '<unknown>'
        message = f"Cannot read directory {location}: {error.strerror or error}"
        logger.warning(message)
        self._errors.append(message)
        self._stats['errors'] += 1

    def get_errors(self) -> List[str]:
        """Get messages for subtrees that could not be read."""
        return list(self._errors)

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the last enumeration.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters and recorded errors."""
        self._stats = self._empty_stats()
        self._errors = []
