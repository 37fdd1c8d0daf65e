"""Exception types and error classification for vault access."""

import errno
from enum import Enum

# Error codes raised while a sync client holds a file open
TRANSIENT_LOCK_ERRNOS: frozenset[int] = frozenset([
    errno.EACCES,
    errno.EBUSY,
    errno.EPERM,
])


class VaultError(Exception):
    """Base exception for vault access errors."""

    pass


class PathTraversalError(VaultError):
    """A requested path resolves outside the vault root."""

    def __init__(self, path: str, root: str):
        super().__init__(f'Path traversal blocked: "{path}" is outside vault root')
        self.path = path
        self.root = root


class VaultNotConfiguredError(VaultError):
    """The vault root is missing from configuration and environment."""

    pass


class ErrorKind(str, Enum):
    """How a caller should react to a failed vault operation."""

    TRANSIENT = "transient"
    PERMANENT = "permanent"
    BLOCKED = "blocked"


def is_transient_lock_error(
    error: BaseException,
    retryable_errnos: frozenset[int] = TRANSIENT_LOCK_ERRNOS,
) -> bool:
    """Check whether an error looks like a short-lived lock held by another process."""
    return isinstance(error, OSError) and error.errno in retryable_errnos


def classify_error(
    error: BaseException,
    retryable_errnos: frozenset[int] = TRANSIENT_LOCK_ERRNOS,
) -> ErrorKind:
    """
    Classify an exception into transient, permanent or blocked.

    Args:
        error: The exception raised by a vault operation
        retryable_errnos: OSError codes treated as lock contention

    Returns:
        BLOCKED for traversal violations, TRANSIENT for lock contention,
        PERMANENT for everything else.
    """
    if isinstance(error, PathTraversalError):
        return ErrorKind.BLOCKED
    if is_transient_lock_error(error, retryable_errnos):
        return ErrorKind.TRANSIENT
    return ErrorKind.PERMANENT
