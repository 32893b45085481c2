"""
Search tools for keyfind.

This package contains the components a search is assembled from: root
validation, candidate enumeration, per-mode matching and progress reporting.
"""

from .path_validator import PathNotFoundError, validate_root, is_valid_root
from .fs_walker import Candidate, EntryKind, FSWalker
from .matcher import Matcher, UnreadableEntryError, create_matcher
from .progress import (
    ProgressEvent,
    ProgressPhase,
    ProgressReporter,
    NullProgressReporter,
    CallbackProgressReporter,
    RecordingProgressReporter,
    ProgressTracker,
)

__all__ = [
    'PathNotFoundError',
    'validate_root',
    'is_valid_root',
    'Candidate',
    'EntryKind',
    'FSWalker',
    'Matcher',
    'UnreadableEntryError',
    'create_matcher',
    'ProgressEvent',
    'ProgressPhase',
    'ProgressReporter',
    'NullProgressReporter',
    'CallbackProgressReporter',
    'RecordingProgressReporter',
    'ProgressTracker',
]
