"""
SafeWriter: the durable-write entry point for all vault mutation.

A write leaves the target either holding the new content, or holding
its previous content with an explicit failure result. Content is
staged in '<target>.tmp' in the target's own directory and then
copied over the target. The target is never replaced by rename.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from vaultkeeper.core.config import SafeWriteConfig, load_config
from vaultkeeper.core.errors import ErrorKind, classify_error, is_transient_lock_error
from vaultkeeper.core.path_utils import (
    check_path_length,
    is_within_root,
    normalize_path,
    vault_path,
)

from .backup import BackupRotator
from .file_ops import FileOps
from .retry import RetryConfig, with_retry

logger = logging.getLogger(__name__)

TMP_SUFFIX = ".tmp"


@dataclass
class SafeWriteOptions:
    """Options for a single safe write.

    Attributes:
        vault_root: Root directory that all written paths must stay within.
        backup: Create a backup before overwriting an existing file.
            None uses the writer's configured policy.
        max_backups: Maximum number of backups kept per file.
            None uses the writer's configured policy.
    """

    vault_root: str
    backup: Optional[bool] = None
    max_backups: Optional[int] = None


@dataclass
class SafeWriteResult:
    """Outcome of one write attempt.

    Attributes:
        success: True if the target now holds the new content.
        backup_path: Backup made during this call, if any.
        error: Human-readable failure message.
        error_kind: TRANSIENT, PERMANENT or BLOCKED on failure.
    """

    success: bool
    backup_path: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None


def resolve_target(path: str, vault_root: str) -> str:
    """Resolve a write target, treating relative paths as vault-relative."""
    candidate = os.fspath(path).replace("\\", "/")
    if os.path.isabs(candidate):
        return normalize_path(candidate)
    return vault_path(vault_root, candidate)


class SafeWriter:
    """
    Composes path containment, retrying file operations and backup
    rotation into one write-with-rollback operation.
    """

    def __init__(
        self,
        retry_config: RetryConfig | None = None,
        file_ops: FileOps | None = None,
        rotator: BackupRotator | None = None,
        policy: SafeWriteConfig | None = None,
    ):
        """
        Initialize the writer.

        Args:
            retry_config: Backoff schedule for transient lock errors.
            file_ops: Filesystem steps; replaceable to inject failures.
            rotator: Backup rotation; defaults to one sharing file_ops.
            policy: Backup defaults used when a call leaves them unset.
        """
        self._retry_config = retry_config or RetryConfig()
        self._file_ops = file_ops or FileOps()
        self._rotator = rotator or BackupRotator(self._file_ops)
        self._policy = policy or SafeWriteConfig()

    @property
    def retry_config(self) -> RetryConfig:
        return self._retry_config

    @property
    def policy(self) -> SafeWriteConfig:
        return self._policy

    async def write(
        self,
        path: str,
        content: str,
        *,
        vault_root: str,
        backup: Optional[bool] = None,
        max_backups: Optional[int] = None,
    ) -> SafeWriteResult:
        """
        Write content to a vault file atomically with backup and retry.

        Steps:
        1. Validate the path is within the vault root (before any I/O)
        2. Ensure the containing directory exists
        3. Write content to '<target>.tmp' in the same directory
        4. Rotate backups if the target exists
        5. Copy the tmp file over the target
        6. Delete the tmp file
        On failure, restore the target from the backup made in step 4.

        Args:
            path: Target path, absolute or relative to the vault root
            content: Text to write
            vault_root: Root directory the target must stay within
            backup: Whether to back up an existing target first;
                    defaults to the writer policy
            max_backups: Maximum number of backups to keep;
                         defaults to the writer policy

        Returns:
            SafeWriteResult describing the outcome
        """
        root = normalize_path(vault_root)
        target = resolve_target(path, root)

        # The root itself is never a write target
        if not is_within_root(target, root) or target.lower() == root.lower():
            logger.warning(f"Blocked write outside vault root: {path}")
            return SafeWriteResult(
                success=False,
                error=f'Path traversal blocked: "{path}" is outside vault root',
                error_kind=ErrorKind.BLOCKED,
            )

        warning = check_path_length(target)
        if warning:
            logger.warning(warning)

        if backup is None:
            backup = self._policy.backup
        if max_backups is None:
            max_backups = self._policy.max_backups

        tmp_path = target + TMP_SUFFIX
        backup_path: Optional[str] = None

        try:
            await self._file_ops.makedirs(os.path.dirname(target))
            await self._write_tmp(tmp_path, content)
            if backup:
                backup_path = await self._rotator.backup(target, max_backups)
            await self._copy(tmp_path, target)
            await self._file_ops.remove_quietly(tmp_path)
            return SafeWriteResult(success=True, backup_path=backup_path)
        except Exception as e:
            if backup_path is not None:
                await self._rollback(backup_path, target)
            await self._file_ops.remove_quietly(tmp_path)

            kind = classify_error(e, self._retry_config.retryable_errnos)
            logger.error(f"Write failed for {target} ({kind.value}): {e}")
            return SafeWriteResult(
                success=False,
                backup_path=backup_path,
                error=f"Write failed: {e}",
                error_kind=kind,
            )

    async def _write_tmp(self, tmp_path: str, content: str) -> None:
        await with_retry(
            lambda: self._file_ops.write_text(tmp_path, content),
            self._retry_config,
            self._is_retryable,
        )

    async def _copy(self, src: str, dest: str) -> None:
        await with_retry(
            lambda: self._file_ops.copy_file(src, dest),
            self._retry_config,
            self._is_retryable,
        )

    async def _rollback(self, backup_path: str, target: str) -> None:
        """Restore the target from its backup; the backup stays on disk either way."""
        try:
            await self._copy(backup_path, target)
            logger.info(f"Rolled back {target} from {backup_path}")
        except Exception as e:
            logger.error(f"Rollback failed for {target}, backup kept at {backup_path}: {e}")

    def _is_retryable(self, error: BaseException) -> bool:
        return is_transient_lock_error(error, self._retry_config.retryable_errnos)


_default_writer: Optional[SafeWriter] = None


def get_default_writer() -> SafeWriter:
    """Return the process-wide writer, built from the loaded configuration."""
    global _default_writer
    if _default_writer is None:
        config = load_config()
        _default_writer = SafeWriter(
            retry_config=RetryConfig(delays=config.safe_write.retry_delays),
            policy=config.safe_write,
        )
    return _default_writer


async def safe_write_file(path: str, content: str, options: SafeWriteOptions) -> SafeWriteResult:
    """Write a vault file with the process-wide SafeWriter."""
    return await get_default_writer().write(
        path,
        content,
        vault_root=options.vault_root,
        backup=options.backup,
        max_backups=options.max_backups,
    )
