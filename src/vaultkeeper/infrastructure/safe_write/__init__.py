"""
Safe write module for vaultkeeper.

Provides atomic-style vault writes with numbered backups, rollback and
exponential backoff retry against transient file locks.
"""

from .backup import BackupRotator, backup_path_for
from .file_ops import FileOps
from .retry import RetryConfig, retryable, with_retry
from .writer import (
    SafeWriteOptions,
    SafeWriter,
    SafeWriteResult,
    get_default_writer,
    resolve_target,
    safe_write_file,
)

__all__ = [
    "SafeWriter",
    "SafeWriteOptions",
    "SafeWriteResult",
    "safe_write_file",
    "resolve_target",
    "get_default_writer",
    "BackupRotator",
    "backup_path_for",
    "FileOps",
    "RetryConfig",
    "with_retry",
    "retryable",
]
