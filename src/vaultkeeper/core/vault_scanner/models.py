"""
Data models for the hot-path vault scanner.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union


class FileSource(str, Enum):
    """Which scan rule produced a file."""

    ALWAYS = "always"
    RECENCY = "recency"
    SYSTEM = "system"


@dataclass(frozen=True)
class VaultFile:
    """
    A markdown file found by a scan pass.

    Attributes:
        path: Absolute normalized path ('/' separators)
        name: File name without extension
        relative_path: Path relative to the vault root ('/' separators)
        modified_time: File modification timestamp (Unix epoch)
        size_bytes: File size in bytes
        source: Scan rule that produced this record
    """

    path: str
    name: str
    relative_path: str
    modified_time: float
    size_bytes: int
    source: FileSource

    @property
    def modified_at(self) -> datetime:
        """Modification time as an aware UTC datetime."""
        return datetime.fromtimestamp(self.modified_time, tz=timezone.utc)


@dataclass(frozen=True)
class ScanSkip:
    """A file or directory left out of a scan because it could not be read."""

    path: str
    reason: str


# Outcome of visiting one entry during a walk
ScanEntry = Union[VaultFile, ScanSkip]


@dataclass(frozen=True)
class ScanResult:
    """
    Immutable snapshot produced by a scan pass.

    Attributes:
        files: Files found, in scan order
        scanned_count: Number of files found
        total_dirs: Number of configured directories walked
        scan_duration_ms: Wall-clock duration of the scan pass
        cached_at: When the snapshot was cached, set only when served from cache
        skipped: Entries that failed to stat during the walk
    """

    files: tuple[VaultFile, ...]
    scanned_count: int
    total_dirs: int
    scan_duration_ms: float
    cached_at: Optional[datetime] = None
    skipped: tuple[ScanSkip, ...] = field(default_factory=tuple)

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[ScanEntry],
        total_dirs: int,
        scan_duration_ms: float,
    ) -> "ScanResult":
        """Collapse walk outcomes into a result, keeping skips separate."""
        files: list[VaultFile] = []
        skipped: list[ScanSkip] = []
        for entry in entries:
            if isinstance(entry, VaultFile):
                files.append(entry)
            else:
                skipped.append(entry)
        return cls(
            files=tuple(files),
            scanned_count=len(files),
            total_dirs=total_dirs,
            scan_duration_ms=scan_duration_ms,
            cached_at=None,
            skipped=tuple(skipped),
        )

    @property
    def from_cache(self) -> bool:
        return self.cached_at is not None


# Category matchers over vault-relative paths
VAULT_CATEGORIES: dict[str, Callable[[str], bool]] = {
    "emails": lambda relative_path: relative_path.startswith("Emails/"),
    "teams": lambda relative_path: relative_path.startswith("TeamsChats/"),
    "meetings": lambda relative_path: (
        relative_path.startswith("Calendar/") or "Meeting Note" in relative_path
    ),
    "tasks": lambda relative_path: relative_path.startswith("TaskNotes/"),
}


def categorize_files(
    files: Iterable[VaultFile],
    since: Optional[datetime] = None,
) -> dict[str, list[VaultFile]]:
    """
    Group scanned files by category.

    A file may land in several categories. Files matching none of them
    are collected under 'other'.

    Args:
        files: Files from a ScanResult
        since: Optional lower bound on modification time (aware datetime)

    Returns:
        Mapping of category name to files, including an 'other' key.
    """
    selected = list(files)
    if since is not None:
        if since.tzinfo is None:
            since = since.replace(tzinfo=timezone.utc)
        selected = [f for f in selected if f.modified_at >= since]

    categories: dict[str, list[VaultFile]] = {name: [] for name in VAULT_CATEGORIES}
    other: list[VaultFile] = []
    for vault_file in selected:
        matched = False
        for name, matches in VAULT_CATEGORIES.items():
            if matches(vault_file.relative_path):
                categories[name].append(vault_file)
                matched = True
        if not matched:
            other.append(vault_file)
    categories["other"] = other
    return categories
