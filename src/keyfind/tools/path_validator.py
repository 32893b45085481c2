"""
Search root validation for keyfind.

The root of a search is checked exactly once, before traversal begins.
"""

import os
import logging
from pathlib import Path
from typing import Union


logger = logging.getLogger(__name__)


class PathNotFoundError(FileNotFoundError):
    """Raised when a search root is missing, not a directory, or unreadable."""
    pass


def validate_root(path: Union[str, Path]) -> Path:
    """
    Confirm that a search root exists and can be listed.

    Args:
        path: Root directory to validate

    Returns:
        The resolved absolute root path

    Raises:
        PathNotFoundError: If the root does not exist, is not a directory,
            or cannot be opened for listing
    """
    try:
        root_path = Path(path).expanduser().resolve()
    except (OSError, RuntimeError) as e:
        raise PathNotFoundError(f"Cannot resolve search root {path}: {e}") from e

    if not root_path.exists():
        raise PathNotFoundError(f"Search root does not exist: {root_path}")

    if not root_path.is_dir():
        raise PathNotFoundError(f"Search root is not a directory: {root_path}")

    if not os.access(root_path, os.R_OK | os.X_OK):
        raise PathNotFoundError(f"Search root is not accessible: {root_path}")

    # os.access can be fooled by ACLs and network mounts
    try:
        with os.scandir(root_path):
            pass
    except OSError as e:
        raise PathNotFoundError(f"Cannot list search root {root_path}: {e}") from e

    logger.debug(f"Validated search root: {root_path}")
    return root_path


def is_valid_root(path: Union[str, Path]) -> bool:
    """Check if a path can be used as a search root."""
    try:
        validate_root(path)
    except PathNotFoundError:
        return False
    return True
