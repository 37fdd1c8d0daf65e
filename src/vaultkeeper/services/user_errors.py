"""
Map technical errors to plain-language messages with recovery actions.

Callers use the `kind` to tell "try again later" apart from "failed"
and "blocked for safety".
"""

import errno
from dataclasses import dataclass

from vaultkeeper.core.errors import (
    ErrorKind,
    PathTraversalError,
    VaultNotConfiguredError,
    classify_error,
)
from vaultkeeper.infrastructure.safe_write import SafeWriteResult


@dataclass(frozen=True)
class UserError:
    """
    A user-facing description of a failure.

    Attributes:
        message: Short friendly message for the UI
        recovery: What the user can do about it
        technical: Details for logging, not shown to the user
        kind: Transient, permanent or blocked
    """

    message: str
    recovery: str
    technical: str
    kind: ErrorKind


_ERRNO_MESSAGES: dict[int, tuple[str, str]] = {
    errno.EACCES: (
        "File is locked, probably by the sync client or the note editor",
        "Wait 30 seconds and try again. If it persists, close the editor briefly.",
    ),
    errno.EPERM: (
        "File is locked, probably by the sync client or the note editor",
        "Wait 30 seconds and try again. If it persists, close the editor briefly.",
    ),
    errno.EBUSY: (
        "File is being synced",
        "Wait a moment for the upload to finish and try again in 15 seconds.",
    ),
    errno.ENOENT: (
        "File or folder not found",
        "Check that the vault path is correct and the sync client is online.",
    ),
    errno.ENOSPC: (
        "Disk is full",
        "Free up some disk space and try again.",
    ),
}


def to_user_error(error: BaseException) -> UserError:
    """
    Map an exception to a user-friendly error.

    Args:
        error: Exception raised by a vault operation

    Returns:
        UserError with message, recovery action and classification
    """
    kind = classify_error(error)
    technical = f"{type(error).__name__}: {error}"

    if isinstance(error, PathTraversalError):
        return UserError(
            message="That file is outside the vault",
            recovery="Only files inside the vault folder can be changed.",
            technical=technical,
            kind=kind,
        )

    if isinstance(error, VaultNotConfiguredError):
        return UserError(
            message="The vault location is not configured",
            recovery="Set OBSIDIAN_VAULT_PATH to the root folder of your vault and restart.",
            technical=technical,
            kind=kind,
        )

    if isinstance(error, OSError) and error.errno in _ERRNO_MESSAGES:
        message, recovery = _ERRNO_MESSAGES[error.errno]
        return UserError(message=message, recovery=recovery, technical=technical, kind=kind)

    return UserError(
        message="Something went wrong",
        recovery="Try again. If the problem persists, check the logs.",
        technical=technical,
        kind=kind,
    )


def write_result_to_user_error(result: SafeWriteResult) -> UserError | None:
    """Describe a failed SafeWriteResult; None for a successful write."""
    if result.success:
        return None

    kind = result.error_kind or ErrorKind.PERMANENT
    technical = result.error or "unknown error"

    if kind is ErrorKind.BLOCKED:
        return UserError(
            message="That file is outside the vault",
            recovery="Only files inside the vault folder can be changed.",
            technical=technical,
            kind=kind,
        )

    if kind is ErrorKind.TRANSIENT:
        message = "File is locked, probably by the sync client or the note editor"
        recovery = "Wait 30 seconds and try again."
    else:
        message = "The file could not be saved"
        recovery = "Check free disk space and folder permissions, then try again."

    if result.backup_path:
        recovery += f" The previous version is kept at {result.backup_path}."
    return UserError(message=message, recovery=recovery, technical=technical, kind=kind)
