"""
Search results data models for keyfind.

This module defines the structures handed back to callers: individual
match records and the complete outcome of a search invocation.
"""

from typing import Dict, List, Any
from datetime import datetime
from pathlib import Path
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .search_request import SearchRequest


class SearchStatus(Enum):
    """How a search invocation terminated."""
    COMPLETED = "completed"
    PATH_NOT_FOUND = "path_not_found"
    NO_CANDIDATES = "no_candidates"
    CANCELLED = "cancelled"


class MatchRecord(BaseModel):
    """
    A single confirmed match of one keyword against one filesystem entry.

    Attributes:
        path: Absolute path of the matching file or directory
        keyword: The keyword that matched
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Absolute path of the matching entry")
    keyword: str = Field(..., min_length=1, description="Keyword that matched")

    def get_name(self) -> str:
        """Get the base name of the matched entry."""
        return Path(self.path).name

    def to_dict(self) -> Dict[str, Any]:
        """Convert the record to dictionary representation."""
        return self.model_dump()

    def __str__(self) -> str:
        return f"{self.path} [{self.keyword}]"


class SearchOutcome(BaseModel):
    """
    Complete outcome of a search invocation.

    The ``matches`` list is the ordered result sequence: traversal order of
    candidates, and keyword order within a candidate. It is empty for every
    status other than ``COMPLETED`` and ``CANCELLED``; ``status`` tells an
    invalid root apart from a search that simply found nothing.

    Attributes:
        request: The request that produced this outcome
        status: How the search terminated
        matches: Ordered match records
        total_candidates: Number of candidates enumerated for the mode
        skipped: Messages for entries that could not be read
        execution_time: Time taken in seconds
        timestamp: When the search was executed
    """

    request: SearchRequest = Field(..., description="The originating search request")
    status: SearchStatus = Field(SearchStatus.COMPLETED, description="How the search terminated")
    matches: List[MatchRecord] = Field(default_factory=list, description="Ordered match records")
    total_candidates: int = Field(0, ge=0, description="Number of candidates enumerated")
    skipped: List[str] = Field(default_factory=list, description="Entries skipped due to errors")
    execution_time: float = Field(0.0, ge=0.0, description="Time taken in seconds")
    timestamp: datetime = Field(default_factory=datetime.now, description="When the search was executed")

    @field_validator('status', mode='before')
    @classmethod
    def validate_status(cls, v) -> SearchStatus:
        """Ensure status is a SearchStatus enum."""
        if isinstance(v, str):
            try:
                return SearchStatus(v)
            except ValueError:
                raise ValueError(f"Invalid search status: {v}")
        return v

    def get_match_count(self) -> int:
        """Get the total number of match records."""
        return len(self.matches)

    def get_matched_paths(self) -> List[str]:
        """Get matched paths without duplicates, in first-seen order."""
        return list(dict.fromkeys(match.path for match in self.matches))

    def get_matches_by_keyword(self, keyword: str) -> List[MatchRecord]:
        """Get all records produced by a specific keyword."""
        return [match for match in self.matches if match.keyword == keyword]

    def is_success(self) -> bool:
        """Check whether the search ran to completion over a valid root."""
        return self.status in (SearchStatus.COMPLETED, SearchStatus.NO_CANDIDATES)

    def has_errors(self) -> bool:
        """Check if any entries were skipped during the search."""
        return len(self.skipped) > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert the outcome to dictionary representation."""
        return {
            'request': self.request.to_dict(),
            'status': self.status.value,
            'matches': [match.to_dict() for match in self.matches],
            'match_count': self.get_match_count(),
            'total_candidates': self.total_candidates,
            'skipped': list(self.skipped),
            'execution_time': self.execution_time,
            'timestamp': self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        """String representation of the search outcome."""
        parts = [f"Status: {self.status.value}"]
        parts.append(f"Found {self.get_match_count()} matches")
        parts.append(f"Searched {self.total_candidates} candidates")
        parts.append(f"Took {self.execution_time:.2f}s")

        if self.has_errors():
            parts.append(f"Skipped: {len(self.skipped)}")

        return " | ".join(parts)
