"""
Data models for keyfind.

This module contains all the core data structures used throughout the system.
"""

from .search_request import SearchMode, SearchRequest
from .search_results import MatchRecord, SearchOutcome, SearchStatus
from .config import SearchConfig

__all__ = [
    'SearchMode',
    'SearchRequest',
    'MatchRecord',
    'SearchOutcome',
    'SearchStatus',
    'SearchConfig'
]
