"""
Time-based cache holding the most recent scan snapshot.
"""

import dataclasses
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from .models import ScanResult


@dataclass(frozen=True)
class _CacheEntry:
    vault_root: str
    result: ScanResult
    cached_time: float


class ScanCache:
    """
    Single-slot TTL cache for scan results.

    The slot holds one immutable entry and is always replaced as a whole,
    so readers never observe a partially updated snapshot. Expiry is
    checked lazily on read; nothing refreshes in the background.
    """

    def __init__(
        self,
        ttl_seconds: float = 60.0,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the cache.

        Args:
            ttl_seconds: How long a snapshot is served before a rescan
            clock: Wall-clock source in seconds, replaceable in tests
        """
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: Optional[_CacheEntry] = None

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    def get(self, vault_root: str) -> Optional[ScanResult]:
        """
        Return the cached snapshot for a vault root if it is still fresh.

        The returned copy carries the original cache timestamp in cached_at.
        """
        entry = self._entry
        if entry is None or entry.vault_root != vault_root:
            return None
        if self._clock() - entry.cached_time >= self._ttl_seconds:
            return None
        cached_at = datetime.fromtimestamp(entry.cached_time, tz=timezone.utc)
        return dataclasses.replace(entry.result, cached_at=cached_at)

    def set(
        self,
        vault_root: str,
        result: ScanResult,
        cached_time: Optional[float] = None,
    ) -> None:
        """
        Replace the slot with a new snapshot.

        Args:
            vault_root: Root the snapshot was taken from
            result: The snapshot
            cached_time: When the snapshot was started; defaults to now
        """
        self._entry = _CacheEntry(
            vault_root=vault_root,
            result=result,
            cached_time=self._clock() if cached_time is None else cached_time,
        )

    def invalidate(self) -> None:
        """Empty the slot."""
        self._entry = None
