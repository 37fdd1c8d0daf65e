"""
Infrastructure Layer - Filesystem-mutating components.
"""

from vaultkeeper.infrastructure.safe_write import (
    BackupRotator,
    FileOps,
    RetryConfig,
    SafeWriteOptions,
    SafeWriter,
    SafeWriteResult,
    retryable,
    safe_write_file,
    with_retry,
)

__all__ = [
    # Safe write
    "SafeWriter",
    "SafeWriteOptions",
    "SafeWriteResult",
    "safe_write_file",
    "BackupRotator",
    "FileOps",
    # Retry
    "RetryConfig",
    "with_retry",
    "retryable",
]
