"""
Configuration data models for keyfind.

This module defines the settings that shape a search beyond the request
itself: ignore patterns, traversal and matching limits, how file contents
are decoded and how often progress is reported.
"""

from typing import Dict, List, Optional, Any
from pathlib import Path
import codecs
import re
from pydantic import BaseModel, Field, field_validator


class LimitsConfig(BaseModel):
    """
    Configuration for traversal and matching limits.

    Attributes:
        max_files: Stop enumerating after this many candidates (None = no limit)
        max_bytes_per_file: Skip content scans of larger files (None = no limit)
        max_workers: Worker threads used for matching (1 = sequential)
    """

    max_files: Optional[int] = Field(None, gt=0, description="Maximum number of candidates to enumerate")
    max_bytes_per_file: Optional[int] = Field(None, gt=0, description="Maximum file size to scan (bytes)")
    max_workers: int = Field(1, gt=0, le=64, description="Worker threads used for matching")

    def is_parallel(self) -> bool:
        """Check if matching runs on more than one thread."""
        return self.max_workers > 1

    def get_max_size_human_readable(self) -> str:
        """Get max file size in human-readable format."""
        if self.max_bytes_per_file is None:
            return "unlimited"
        size = float(self.max_bytes_per_file)
        for unit in ['B', 'KB', 'MB', 'GB']:
            if size < 1024.0:
                return f"{size:.1f} {unit}"
            size /= 1024.0
        return f"{size:.1f} TB"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class ContentConfig(BaseModel):
    """
    Configuration for reading file contents in content mode.

    Attributes:
        encoding: Text encoding used to decode files
        errors: Decoding error handler; binary files are still read as text
    """

    encoding: str = Field("utf-8", description="Text encoding used to decode files")
    errors: str = Field("replace", description="Decoding error handler")

    @field_validator('encoding')
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Validate that the encoding is known to Python."""
        try:
            codecs.lookup(v)
        except LookupError:
            raise ValueError(f"Unknown text encoding: {v}")
        return v

    @field_validator('errors')
    @classmethod
    def validate_errors(cls, v: str) -> str:
        """Validate the decoding error handler."""
        try:
            codecs.lookup_error(v)
        except LookupError:
            raise ValueError(f"Unknown decoding error handler: {v}")
        return v

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class ProgressConfig(BaseModel):
    """
    Configuration for progress reporting.

    Attributes:
        spinner_every: Advance the spinner glyph once per this many candidates
        glyphs: Characters the spinner rotates through
    """

    spinner_every: int = Field(10, gt=0, description="Candidates per spinner step")
    glyphs: str = Field("|/-\\", min_length=1, description="Spinner glyphs")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class SearchConfig(BaseModel):
    """
    Main configuration class for keyfind.

    Attributes:
        ignore: Ignore patterns (gitignore-style) applied during traversal
        follow_symlinks: Whether symlinked directories are descended into
        limits: Traversal and matching limits
        content: File content decoding settings
        progress: Progress reporting settings
    """

    ignore: List[str] = Field(default_factory=list, description="List of ignore patterns (gitignore-style)")
    follow_symlinks: bool = Field(False, description="Whether to descend into symlinked directories")
    limits: LimitsConfig = Field(default_factory=LimitsConfig, description="Traversal and matching limits")
    content: ContentConfig = Field(default_factory=ContentConfig, description="Content decoding settings")
    progress: ProgressConfig = Field(default_factory=ProgressConfig, description="Progress reporting settings")

    def model_post_init(self, __context) -> None:
        """Normalize and compile the ignore patterns."""
        self._normalize_ignore_patterns()
        self._compile_ignore_patterns()

    def _normalize_ignore_patterns(self) -> None:
        """Normalize ignore patterns; single-segment ones match at any depth."""
        normalized_patterns = []
        for pattern in self.ignore:
            pattern = (pattern or '').strip()

            # Skip empty patterns and comments
            if not pattern or pattern.startswith('#'):
                continue

            negated = pattern.startswith('!')
            body = pattern[1:] if negated else pattern
            if not body:
                continue

            if not (body.startswith('**/') or body.startswith('./') or body.startswith('/')):
                # Like gitignore, a slash before the last character anchors to the root
                if '/' in body.rstrip('/'):
                    body = '/' + body
                else:
                    body = '**/' + body

            normalized_patterns.append(('!' if negated else '') + body)

        self.ignore = normalized_patterns

    def _compile_ignore_patterns(self) -> None:
        """Compile ignore patterns for efficient matching."""
        self._compiled_ignore_patterns = []
        for pattern in self.ignore:
            body = pattern[1:] if pattern.startswith('!') else pattern
            directory_only = body.endswith('/')
            try:
                regex = self._gitignore_to_regex(body)
                self._compiled_ignore_patterns.append({
                    'regex': re.compile(regex + r'(?:/.*)?$'),
                    'descendant_regex': re.compile(regex + r'/'),
                    'is_negation': pattern.startswith('!'),
                    'directory_only': directory_only,
                    'original': pattern
                })
            except re.error as e:
                raise ValueError(f"Invalid ignore pattern '{pattern}': {e}")

    @staticmethod
    def _translate_segment(segment: str) -> str:
        """Translate one glob path segment; wildcards never cross '/'."""
        parts = []
        i, n = 0, len(segment)
        while i < n:
            ch = segment[i]
            i += 1
            if ch == '*':
                parts.append('[^/]*')
            elif ch == '?':
                parts.append('[^/]')
            elif ch == '[':
                end = segment.find(']', i + 1 if i < n and segment[i] in '!^' else i)
                if end == -1:
                    parts.append(re.escape(ch))
                    continue
                body = segment[i:end]
                if body[:1] in ('!', '^'):
                    body = '^' + body[1:]
                parts.append('[' + body.replace('\\', '\\\\') + ']')
                i = end + 1
            else:
                parts.append(re.escape(ch))
        return ''.join(parts)

    def _gitignore_to_regex(self, pattern: str) -> str:
        """
        Convert a gitignore-style pattern to a regex prefix.

        Supports ``*`` and ``?`` wildcards, ``**`` directory wildcards,
        directory-only patterns (trailing ``/``), rooted patterns (leading
        ``/`` or ``./``) and character classes such as ``[abc]`` and ``[!abc]``.

        Args:
            pattern: Normalized gitignore-style pattern without negation

        Returns:
            Regex matching the pattern against a POSIX relative path,
            without the trailing anchor
        """
        pattern = pattern.rstrip('/')

        is_rooted = pattern.startswith('/') or pattern.startswith('./')
        if pattern.startswith('./'):
            pattern = pattern[2:]
        pattern = pattern.lstrip('/')

        if not pattern:
            return r'(?!)'

        regex_parts = []
        segments = pattern.split('/')
        for index, segment in enumerate(segments):
            is_last = index == len(segments) - 1
            if segment == '**':
                # Zero or more directories; a trailing ** is everything below
                regex_parts.append('.*' if is_last else '(?:[^/]+/)*')
            else:
                regex_parts.append(self._translate_segment(segment) + ('' if is_last else '/'))

        prefix = '^' if is_rooted else '(?:^|/)'
        return prefix + ''.join(regex_parts)

    def should_ignore(self, path: str, is_dir: bool = False) -> bool:
        """
        Check if a path should be ignored based on ignore patterns.

        Patterns are processed in order, so a later negation pattern
        (``!pattern``) can re-include a path an earlier pattern excluded.
        A pattern that matches a directory also matches everything below it.

        Args:
            path: File or directory path relative to the search root
            is_dir: Whether the path is a directory (for trailing-slash patterns)

        Returns:
            True if path should be ignored, False otherwise
        """
        normalized_path = Path(path).as_posix().lstrip('/')

        ignored = False
        for pattern_info in self._compiled_ignore_patterns:
            if pattern_info['directory_only'] and not is_dir:
                matched = pattern_info['descendant_regex'].search(normalized_path)
            else:
                matched = pattern_info['regex'].search(normalized_path)
            if matched:
                ignored = not pattern_info['is_negation']

        return ignored

    def validate_configuration(self) -> List[str]:
        """Validate the complete configuration and return any warnings."""
        warnings = []

        if self.limits.max_files is not None and self.limits.max_files < 100:
            warnings.append(
                f"Very low max_files limit ({self.limits.max_files}) will truncate most searches"
            )

        if self.limits.max_workers > 16:
            warnings.append(
                f"High max_workers ({self.limits.max_workers}) rarely helps disk-bound scans"
            )

        if self.follow_symlinks:
            warnings.append("Following symlinks may visit the same directory more than once")

        if self.content.errors == 'strict':
            warnings.append("Strict decoding will skip every file that is not valid text")

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        return {
            'ignore': list(self.ignore),
            'follow_symlinks': self.follow_symlinks,
            'limits': self.limits.to_dict(),
            'content': self.content.to_dict(),
            'progress': self.progress.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        """String representation of the configuration."""
        parts = [f"Ignore patterns: {len(self.ignore)}"]
        parts.append(f"Follow symlinks: {self.follow_symlinks}")
        parts.append(f"Workers: {self.limits.max_workers}")
        parts.append(f"Max file size: {self.limits.get_max_size_human_readable()}")

        return " | ".join(parts)


def validate_config_dict(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a configuration dictionary.

    Args:
        config_data: Dictionary containing configuration data

    Returns:
        Validated and normalized configuration dictionary

    Raises:
        ValueError: If configuration is invalid
    """
    known_keys = {'ignore', 'follow_symlinks', 'limits', 'content', 'progress'}
    unknown = sorted(set(config_data) - known_keys)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    ignore = config_data.get('ignore') or []
    if isinstance(ignore, str):
        ignore = [ignore]
    if not isinstance(ignore, list) or not all(isinstance(p, str) for p in ignore):
        raise ValueError("'ignore' must be a list of strings")

    for section in ('limits', 'content', 'progress'):
        value = config_data.get(section)
        if value is not None and not isinstance(value, dict):
            raise ValueError(f"'{section}' must be a mapping, got {type(value).__name__}")

    try:
        cleaned = {key: value for key, value in config_data.items() if value is not None}
        cleaned['ignore'] = ignore
        config = SearchConfig.from_dict(cleaned)
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}") from e

    return config.to_dict()
