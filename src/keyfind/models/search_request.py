"""
Search request data models for keyfind.

This module defines the search modes and the immutable request object that
describes a single search invocation: the root directory, the mode, the
keywords to look for and an optional set of extension filters.
"""

from typing import Dict, List, Any
from enum import Enum
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchMode(Enum):
    """Enumeration of the supported search modes."""
    CONTENT = "content"
    FILE_NAME = "filename"
    DIRECTORY_NAME = "directory"

    @property
    def searches_files(self) -> bool:
        """Whether this mode enumerates files (as opposed to directories)."""
        return self is not SearchMode.DIRECTORY_NAME


class SearchRequest(BaseModel):
    """
    Represents a single search invocation.

    The request is immutable once created; the engine only reads it.

    Attributes:
        path: Root directory to search under
        mode: How candidates are enumerated and matched
        keywords: Substrings to look for, evaluated independently and in order
        extensions: Optional extension filters (ignored in directory mode)
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Root directory to search")
    mode: SearchMode = Field(..., description="Search mode")
    keywords: List[str] = Field(..., min_length=1, description="Keywords to search for")
    extensions: List[str] = Field(default_factory=list, description="Extension filters")

    @field_validator('path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate and expand the root path."""
        if not v or not v.strip():
            raise ValueError("Search path cannot be empty")
        return str(Path(v).expanduser())

    @field_validator('mode', mode='before')
    @classmethod
    def validate_mode(cls, v) -> SearchMode:
        """Ensure mode is a SearchMode enum."""
        if isinstance(v, str):
            try:
                return SearchMode(v.lower())
            except ValueError:
                raise ValueError(f"Invalid search mode: {v}")
        return v

    @field_validator('keywords')
    @classmethod
    def validate_keywords(cls, v: List[str]) -> List[str]:
        """Reject empty keywords; order and duplicates are kept."""
        for keyword in v:
            if not keyword:
                raise ValueError("Keywords cannot be empty strings")
        return list(v)

    @field_validator('extensions', mode='before')
    @classmethod
    def validate_extensions(cls, v) -> List[str]:
        """Normalize extension filters to start with a dot."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple, set, frozenset)):
            raise ValueError("Extensions must be a list of strings")

        normalized = []
        for ext in v:
            if not isinstance(ext, str):
                raise ValueError(f"Extension must be a string, got {type(ext).__name__}")
            ext = ext.strip()
            if not ext:
                continue
            if not ext.startswith('.'):
                ext = '.' + ext
            normalized.append(ext)
        return normalized

    def has_extension_filter(self) -> bool:
        """Check if extension filtering applies to this request."""
        return bool(self.get_extension_filters())

    def get_extension_filters(self) -> List[str]:
        """Get the extension filters that apply to the request's mode."""
        if not self.mode.searches_files:
            return []
        return list(self.extensions)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the search request to a dictionary representation."""
        data = self.model_dump()
        data['mode'] = self.mode.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchRequest':
        """Create a SearchRequest instance from a dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the search request."""
        parts = [f"Mode: {self.mode.value}"]
        parts.append(f"Root: {self.path}")
        parts.append(f"Keywords: {', '.join(repr(k) for k in self.keywords)}")

        if self.has_extension_filter():
            parts.append(f"Extensions: {', '.join(self.extensions)}")

        return " | ".join(parts)
