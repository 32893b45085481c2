"""
keyfind - Core Package

A recursive filesystem search engine that locates keywords in file
contents, file names or directory names.
"""

__version__ = "0.1.0"
__author__ = "keyfind Team"

from .models import (
    MatchRecord,
    SearchConfig,
    SearchMode,
    SearchOutcome,
    SearchRequest,
    SearchStatus,
)
from .engine import CancellationToken, SearchEngine, search

__all__ = [
    'CancellationToken',
    'MatchRecord',
    'SearchConfig',
    'SearchEngine',
    'SearchMode',
    'SearchOutcome',
    'SearchRequest',
    'SearchStatus',
    'search',
]
