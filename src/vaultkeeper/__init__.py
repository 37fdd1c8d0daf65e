"""
vaultkeeper - safe access to a large, cloud-synced markdown vault.

Bounded hot-path scanning with a TTL cache, and durable writes with
numbered backups, rollback and retry against transient file locks.
"""

from vaultkeeper.core import (
    check_path_length,
    invalidate_cache,
    is_within_root,
    normalize_path,
    scan_vault,
    vault_path,
)
from vaultkeeper.infrastructure import SafeWriteOptions, SafeWriteResult, safe_write_file

__version__ = "0.1.0"

__all__ = [
    "scan_vault",
    "invalidate_cache",
    "safe_write_file",
    "SafeWriteOptions",
    "SafeWriteResult",
    "normalize_path",
    "is_within_root",
    "check_path_length",
    "vault_path",
]
