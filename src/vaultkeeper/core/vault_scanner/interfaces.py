"""
Abstract interfaces for vault scanning operations.
"""

from abc import ABC, abstractmethod

from .models import ScanResult


class VaultScannerInterface(ABC):
    """
    Abstract interface for vault scanning operations.

    Implementations return a bounded snapshot of the relevant part of
    a vault and may serve it from a cache.
    """

    @abstractmethod
    async def scan(self, vault_root: str) -> ScanResult:
        """
        Return a snapshot of the live files under a vault root.

        Args:
            vault_root: Root directory of the vault

        Notes:
            - Missing directories and unreadable files are skipped
            - Never raises for a partially synced vault
        """
        pass

    @abstractmethod
    def invalidate_cache(self) -> None:
        """Force the next scan to walk the filesystem."""
        pass
