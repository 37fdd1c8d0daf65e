"""
Vault read/write service.

Higher-level vault operations (task and email readers, agent tools)
go through this service so that every path is containment-checked,
every write uses SafeWriter, and the scan cache is invalidated after a
successful mutation.
"""

import asyncio
import logging
import os
from typing import Optional

from vaultkeeper.core.config import VaultConfig, get_vault_root, load_config
from vaultkeeper.core.errors import PathTraversalError
from vaultkeeper.core.path_utils import (
    check_path_length,
    is_within_root,
    normalize_path,
)
from vaultkeeper.core.vault_scanner import HotPathScanner, ScanResult
from vaultkeeper.infrastructure.safe_write import (
    RetryConfig,
    SafeWriter,
    SafeWriteResult,
    resolve_target,
)

logger = logging.getLogger(__name__)


def _read_text(path: str) -> str:
    with open(path, encoding="utf-8") as f:
        return f.read()


def _list_markdown(path: str, extension: str) -> list[str]:
    with os.scandir(path) as iterator:
        return sorted(
            f"{path}/{entry.name}"
            for entry in iterator
            if entry.name.endswith(extension) and entry.is_file()
        )


class VaultStore:
    """
    Containment-checked access to one vault.

    Attributes:
        vault_root: Normalized vault root
        scanner: Hot-path scanner whose cache is invalidated on writes
        writer: Durable writer used for all mutations
    """

    def __init__(
        self,
        vault_root: str,
        scanner: HotPathScanner | None = None,
        writer: SafeWriter | None = None,
        config: VaultConfig | None = None,
    ):
        self._config = config or VaultConfig()
        self.vault_root = normalize_path(vault_root)
        self.scanner = scanner or HotPathScanner(
            hot_paths=self._config.hot_paths,
            scanner_config=self._config.scanner,
        )
        self.writer = writer or SafeWriter(
            retry_config=RetryConfig(delays=self._config.safe_write.retry_delays),
            policy=self._config.safe_write,
        )

    def resolve(self, path: str) -> str:
        """
        Resolve a path, treating relative paths as vault-relative.

        Raises:
            PathTraversalError: If the path lies outside the vault root
        """
        resolved = resolve_target(path, self.vault_root)
        if not is_within_root(resolved, self.vault_root):
            raise PathTraversalError(os.fspath(path), self.vault_root)
        return resolved

    async def scan(self) -> ScanResult:
        """Snapshot of the vault hot paths."""
        return await self.scanner.scan(self.vault_root)

    async def read_file(self, path: str) -> str:
        """
        Read a vault file as UTF-8 text.

        Raises:
            PathTraversalError: If the path lies outside the vault root
            FileNotFoundError: If the file does not exist
        """
        resolved = self.resolve(path)
        warning = check_path_length(resolved)
        if warning:
            logger.warning(warning)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, _read_text, resolved)

    async def file_exists(self, path: str) -> bool:
        """
        Check whether a vault file exists.

        Raises:
            PathTraversalError: If the path lies outside the vault root
        """
        resolved = self.resolve(path)
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, os.path.isfile, resolved)

    async def list_dir(self, path: str) -> list[str]:
        """
        List markdown files in a vault directory, non-recursively.

        Returns an empty list when the directory is missing or unreadable.

        Raises:
            PathTraversalError: If the path lies outside the vault root
        """
        resolved = self.resolve(path)
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                None, _list_markdown, resolved, self._config.scanner.extension
            )
        except OSError as e:
            logger.debug(f"Cannot list {resolved}: {e}")
            return []

    async def write_file(
        self,
        path: str,
        content: str,
        backup: Optional[bool] = None,
        max_backups: Optional[int] = None,
    ) -> SafeWriteResult:
        """
        Write a vault file through SafeWriter.

        A successful write invalidates the scan cache so the next scan
        reflects it without waiting out the TTL.
        """
        result = await self.writer.write(
            path,
            content,
            vault_root=self.vault_root,
            backup=backup,
            max_backups=max_backups,
        )
        if result.success:
            self.scanner.invalidate_cache()
        return result


def create_vault_store(config: VaultConfig | None = None) -> VaultStore:
    """
    Create a VaultStore from configuration.

    Raises:
        VaultNotConfiguredError: If no vault root is configured
    """
    config = config or load_config()
    return VaultStore(get_vault_root(config), config=config)
