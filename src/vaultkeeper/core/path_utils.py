"""
Path normalization utilities for vault access.

Every vault path comparison flows through these functions, so neither
separator style nor letter case affects the containment check. All
functions are pure string operations.
"""

import os
import posixpath
from typing import Optional

# Conservative legacy filesystem path limit
MAX_PATH_LENGTH = 260

SEPARATOR = "/"


def _is_filesystem_root(path: str) -> bool:
    """Check if a normalized path is a root such as '/' or 'C:/'."""
    if path == SEPARATOR:
        return True
    return len(path) == 3 and path[1] == ":" and path[2] == SEPARATOR


def normalize_path(path: str | os.PathLike) -> str:
    """
    Normalize a path for consistent comparison.

    - Backslashes become forward slashes before resolution, so that
      '..' segments written with either separator are collapsed
    - Resolves to an absolute path (lexically, no filesystem access)
    - Strips a trailing separator

    Args:
        path: Path to normalize.

    Returns:
        Absolute path using '/' as the only separator.
    """
    raw = os.fspath(path).replace("\\", SEPARATOR)
    resolved = os.path.abspath(raw).replace("\\", SEPARATOR)
    if resolved.startswith("//") and not resolved.startswith("///"):
        # POSIX keeps a leading double slash; collapse it
        resolved = posixpath.normpath(resolved[1:])
    if resolved.endswith(SEPARATOR) and not _is_filesystem_root(resolved):
        resolved = resolved.rstrip(SEPARATOR) or SEPARATOR
    return resolved


def is_within_root(path: str | os.PathLike, root: str | os.PathLike) -> bool:
    """
    Check if a path is the root itself or lies beneath it.

    Comparison is case-insensitive because the vault lives on a
    case-insensitive filesystem.

    Args:
        path: Candidate path.
        root: Root directory the path must stay within.

    Returns:
        True if the normalized path equals the root or starts with root + '/'.
    """
    normal_path = normalize_path(path).lower()
    normal_root = normalize_path(root).lower()
    if normal_path == normal_root:
        return True
    prefix = normal_root if normal_root.endswith(SEPARATOR) else normal_root + SEPARATOR
    return normal_path.startswith(prefix)


def check_path_length(path: str | os.PathLike) -> Optional[str]:
    """
    Return a warning if a path exceeds the legacy path length limit.

    Advisory only, callers never block on it.
    """
    resolved = normalize_path(path)
    if len(resolved) > MAX_PATH_LENGTH:
        return (
            f"Path exceeds {MAX_PATH_LENGTH} chars ({len(resolved)}): "
            f"{resolved[:80]}..."
        )
    return None


def vault_path(vault_root: str | os.PathLike, *segments: str) -> str:
    """Join segments under the vault root and normalize the result."""
    parts = [os.fspath(vault_root).replace("\\", SEPARATOR)]
    parts.extend(segment.replace("\\", SEPARATOR) for segment in segments)
    return normalize_path(posixpath.join(*parts))


def relative_to_root(path: str, vault_root: str) -> str:
    """Path of a normalized file relative to a normalized vault root."""
    root = normalize_path(vault_root)
    normal = normalize_path(path)
    if normal == root:
        return ""
    prefix = root if root.endswith(SEPARATOR) else root + SEPARATOR
    return normal[len(prefix):]
