"""
Vault scanner module for vaultkeeper.

Provides bounded hot-path scanning of a vault with recency windowing
and a TTL cache.
"""

from typing import Optional

from vaultkeeper.core.config import load_config

from .cache import ScanCache
from .interfaces import VaultScannerInterface
from .models import (
    VAULT_CATEGORIES,
    FileSource,
    ScanEntry,
    ScanResult,
    ScanSkip,
    VaultFile,
    categorize_files,
)
from .scanner import HotPathScanner

__all__ = [
    # Main classes
    "HotPathScanner",
    "VaultScannerInterface",
    "ScanCache",
    # Models
    "VaultFile",
    "ScanSkip",
    "ScanEntry",
    "ScanResult",
    "FileSource",
    # Categories
    "VAULT_CATEGORIES",
    "categorize_files",
    # Process-wide scanner
    "get_default_scanner",
    "scan_vault",
    "invalidate_cache",
]

_default_scanner: Optional[HotPathScanner] = None


def get_default_scanner() -> HotPathScanner:
    """Return the process-wide scanner, built from the loaded configuration."""
    global _default_scanner
    if _default_scanner is None:
        config = load_config()
        _default_scanner = HotPathScanner(
            hot_paths=config.hot_paths,
            scanner_config=config.scanner,
        )
    return _default_scanner


async def scan_vault(vault_root: str) -> ScanResult:
    """Scan a vault with the process-wide scanner."""
    return await get_default_scanner().scan(vault_root)


def invalidate_cache() -> None:
    """Force the process-wide scanner to rescan on its next call."""
    if _default_scanner is not None:
        _default_scanner.invalidate_cache()
