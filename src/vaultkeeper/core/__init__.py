"""
Core Layer - Path utilities, configuration, errors and vault scanning.
"""

from vaultkeeper.core.config import (
    HotPathsConfig,
    LoggingConfig,
    RecencyRule,
    SafeWriteConfig,
    ScannerConfig,
    VaultConfig,
    configure_logging,
    get_vault_root,
    load_config,
)
from vaultkeeper.core.env_validation import EnvValidationResult, validate_environment
from vaultkeeper.core.errors import (
    ErrorKind,
    PathTraversalError,
    VaultError,
    VaultNotConfiguredError,
    classify_error,
    is_transient_lock_error,
)
from vaultkeeper.core.path_utils import (
    MAX_PATH_LENGTH,
    check_path_length,
    is_within_root,
    normalize_path,
    vault_path,
)
from vaultkeeper.core.vault_scanner import (
    FileSource,
    HotPathScanner,
    ScanCache,
    ScanResult,
    ScanSkip,
    VaultFile,
    VaultScannerInterface,
    categorize_files,
    invalidate_cache,
    scan_vault,
)

__all__ = [
    # Config
    "VaultConfig",
    "HotPathsConfig",
    "RecencyRule",
    "ScannerConfig",
    "SafeWriteConfig",
    "LoggingConfig",
    "load_config",
    "get_vault_root",
    "configure_logging",
    # Environment
    "EnvValidationResult",
    "validate_environment",
    # Errors
    "VaultError",
    "PathTraversalError",
    "VaultNotConfiguredError",
    "ErrorKind",
    "classify_error",
    "is_transient_lock_error",
    # Paths
    "MAX_PATH_LENGTH",
    "normalize_path",
    "is_within_root",
    "check_path_length",
    "vault_path",
    # Scanner
    "VaultFile",
    "ScanSkip",
    "ScanResult",
    "FileSource",
    "ScanCache",
    "VaultScannerInterface",
    "HotPathScanner",
    "categorize_files",
    "scan_vault",
    "invalidate_cache",
]
