"""
HotPathScanner implementation.

A full recursive walk of the vault is too slow on a synced drive with
tens of thousands of files. Instead the scanner lists a small whitelist
of directories in full, lists high-volume directories but keeps only
recently modified files, and stats a handful of named system files.
Scan cost grows with the whitelisted directories and the recent files,
never with the total size of the vault.
"""

import asyncio
import logging
import os
import stat
import time
from collections.abc import Callable
from typing import Optional

from vaultkeeper.core.config import HotPathsConfig, ScannerConfig
from vaultkeeper.core.path_utils import (
    check_path_length,
    is_within_root,
    normalize_path,
    relative_to_root,
    vault_path,
)

from .cache import ScanCache
from .interfaces import VaultScannerInterface
from .models import FileSource, ScanEntry, ScanResult, ScanSkip, VaultFile

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


class HotPathScanner(VaultScannerInterface):
    """
    Concrete implementation of VaultScannerInterface.

    Provides bounded vault scanning with:
    - Non-recursive listing of always-scan directories
    - Modification-time windowing for recency directories
    - Literal system files
    - Per-file skips instead of failures for entries mid-sync
    - A TTL cache owned by the scanner instance
    """

    def __init__(
        self,
        hot_paths: HotPathsConfig | None = None,
        scanner_config: ScannerConfig | None = None,
        cache: ScanCache | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the scanner.

        Args:
            hot_paths: Scan scope. If None, uses the configured defaults.
            scanner_config: Cache TTL and file extension. If None, uses defaults.
            cache: Cache to use. If None, a new cache is created with the
                   configured TTL and the same clock.
            clock: Wall-clock source in seconds used for recency cutoffs.
        """
        self._hot_paths = hot_paths or HotPathsConfig()
        self._config = scanner_config or ScannerConfig()
        self._clock = clock
        self._cache = cache or ScanCache(
            ttl_seconds=self._config.cache_ttl_seconds, clock=clock
        )
        self._excluded = {name.lower() for name in self._hot_paths.excluded}

    @property
    def cache(self) -> ScanCache:
        return self._cache

    def invalidate_cache(self) -> None:
        """Force the next scan to walk the filesystem."""
        self._cache.invalidate()

    async def scan(self, vault_root: str) -> ScanResult:
        """
        Scan the vault hot paths, serving a cached snapshot within the TTL.

        Args:
            vault_root: Root directory of the vault

        Returns:
            ScanResult; cached_at is set only when served from cache
        """
        root = normalize_path(vault_root)
        cached = self._cache.get(root)
        if cached is not None:
            return cached

        started = self._clock()
        result = await self._scan_fresh(root, started)
        self._cache.set(root, result, cached_time=started)
        return result

    async def _scan_fresh(self, root: str, now: float) -> ScanResult:
        loop = asyncio.get_running_loop()
        start = time.perf_counter()
        entries: list[ScanEntry] = []

        # 1. Always-scan directories
        for directory in self._hot_paths.always_scan:
            dir_path = self._resolve_scan_dir(root, directory)
            if dir_path is None:
                continue
            entries.extend(
                await loop.run_in_executor(
                    None, self._scan_directory, dir_path, root, FileSource.ALWAYS, None
                )
            )

        # 2. Recency-scan directories, filtered by mtime
        for rule in self._hot_paths.recency_scan:
            dir_path = self._resolve_scan_dir(root, rule.path)
            if dir_path is None:
                continue
            cutoff = now - rule.max_age_days * SECONDS_PER_DAY
            entries.extend(
                await loop.run_in_executor(
                    None, self._scan_directory, dir_path, root, FileSource.RECENCY, cutoff
                )
            )

        # 3. System files
        for relative in self._hot_paths.system_files:
            file_path = vault_path(root, relative)
            if not is_within_root(file_path, root):
                logger.warning(f"Skipping system file outside vault root: {relative}")
                continue
            entry = await loop.run_in_executor(
                None, self._scan_single_file, file_path, root, FileSource.SYSTEM
            )
            if entry is not None:
                entries.append(entry)

        duration_ms = (time.perf_counter() - start) * 1000.0
        result = ScanResult.from_entries(
            entries,
            total_dirs=len(self._hot_paths.always_scan) + len(self._hot_paths.recency_scan),
            scan_duration_ms=duration_ms,
        )
        logger.debug(
            f"Scanned {result.scanned_count} files ({len(result.skipped)} skipped) "
            f"in {duration_ms:.1f}ms"
        )
        return result

    def _resolve_scan_dir(self, root: str, directory: str) -> Optional[str]:
        """Absolute path of a configured directory, or None if it must not be walked."""
        first_segment = directory.replace("\\", "/").strip("/").split("/")[0]
        if first_segment.lower() in self._excluded:
            logger.warning(f"Skipping excluded directory in scan config: {directory}")
            return None

        dir_path = vault_path(root, directory)
        if not is_within_root(dir_path, root):
            logger.warning(f"Skipping scan directory outside vault root: {directory}")
            return None
        return dir_path

    def _is_markdown(self, name: str) -> bool:
        return name.endswith(self._config.extension)

    def _stem(self, name: str) -> str:
        if self._is_markdown(name):
            return name[: -len(self._config.extension)]
        return os.path.splitext(name)[0]

    def _scan_directory(
        self,
        dir_path: str,
        root: str,
        source: FileSource,
        cutoff: Optional[float],
    ) -> list[ScanEntry]:
        """
        List one directory non-recursively.

        Args:
            dir_path: Absolute directory path
            root: Normalized vault root
            source: Provenance tag for files found here
            cutoff: Optional minimum mtime (epoch seconds)

        Returns:
            VaultFile for each kept file and ScanSkip for each unreadable one
        """
        try:
            with os.scandir(dir_path) as iterator:
                dir_entries = list(iterator)
        except (FileNotFoundError, NotADirectoryError):
            # The vault may be mid-sync
            logger.debug(f"Scan directory not present: {dir_path}")
            return []
        except OSError as e:
            logger.warning(f"Error accessing directory: {dir_path} - {e}")
            return [ScanSkip(path=dir_path, reason=str(e))]

        results: list[ScanEntry] = []
        for dir_entry in dir_entries:
            if not self._is_markdown(dir_entry.name):
                continue
            full_path = normalize_path(os.path.join(dir_path, dir_entry.name))
            try:
                if not dir_entry.is_file(follow_symlinks=False):
                    continue
                file_stat = os.stat(full_path)
            except OSError as e:
                # Placeholder files may fail to stat while the sync client hydrates them
                logger.debug(f"Skipping unreadable file: {full_path} - {e}")
                results.append(ScanSkip(path=full_path, reason=str(e)))
                continue

            if cutoff is not None and file_stat.st_mtime < cutoff:
                continue

            results.append(self._build_file(full_path, dir_entry.name, root, file_stat, source))

        return results

    def _scan_single_file(
        self,
        file_path: str,
        root: str,
        source: FileSource,
    ) -> Optional[ScanEntry]:
        """Stat one literal path; None when it does not exist."""
        try:
            file_stat = os.stat(file_path)
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.debug(f"Skipping unreadable system file: {file_path} - {e}")
            return ScanSkip(path=file_path, reason=str(e))

        if not stat.S_ISREG(file_stat.st_mode):
            return None

        name = file_path.rsplit("/", 1)[-1]
        return self._build_file(file_path, name, root, file_stat, source)

    def _build_file(
        self,
        full_path: str,
        file_name: str,
        root: str,
        file_stat: os.stat_result,
        source: FileSource,
    ) -> VaultFile:
        warning = check_path_length(full_path)
        if warning:
            logger.debug(warning)
        return VaultFile(
            path=full_path,
            name=self._stem(file_name),
            relative_path=relative_to_root(full_path, root),
            modified_time=file_stat.st_mtime,
            size_bytes=file_stat.st_size,
            source=source,
        )
