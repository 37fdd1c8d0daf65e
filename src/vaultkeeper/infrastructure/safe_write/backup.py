"""
Numbered backup rotation.

For a target 'note.md' the chain is 'note.md.bak.1' (most recent) up to
'note.md.bak.N' (oldest), kept in the same directory as the target.
"""

import logging
from typing import Optional

from .file_ops import FileOps

logger = logging.getLogger(__name__)


def backup_path_for(target_path: str, index: int) -> str:
    """Path of backup slot `index` for a target file."""
    return f"{target_path}.bak.{index}"


class BackupRotator:
    """Maintains a bounded ring of numbered backups per target file."""

    def __init__(self, file_ops: FileOps | None = None):
        self._file_ops = file_ops or FileOps()

    async def backup(self, target_path: str, max_backups: int) -> Optional[str]:
        """
        Preserve the current content of a target before it is overwritten.

        Shifts existing backups up one slot (dropping the oldest), then
        copies the target into slot 1. Missing slots in the chain are
        skipped rather than treated as errors, so a gap left by an
        interrupted rotation stays a gap.

        Args:
            target_path: File about to be overwritten
            max_backups: Maximum number of backups to keep (>= 1)

        Returns:
            Path of slot 1, or None if the target does not exist yet.
        """
        if max_backups < 1:
            raise ValueError(f"max_backups must be at least 1, got {max_backups}")

        if not await self._file_ops.exists(target_path):
            return None

        await self._file_ops.remove_quietly(backup_path_for(target_path, max_backups))

        for index in range(max_backups - 1, 0, -1):
            older = backup_path_for(target_path, index)
            newer = backup_path_for(target_path, index + 1)
            try:
                await self._file_ops.rename(older, newer)
            except FileNotFoundError:
                logger.debug(f"Backup slot {index} missing for {target_path}, skipping")

        backup_path = backup_path_for(target_path, 1)
        await self._file_ops.copy_file(target_path, backup_path)
        return backup_path
