"""
Blocking filesystem steps used by the safe writer.

Each step runs in the default executor so a slow synced drive never
stalls the event loop. Steps raise OSError unchanged; retry policy is
applied by the caller.
"""

import asyncio
import logging
import os
import shutil
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)


async def _run(func: Callable[..., Any], *args: Any) -> Any:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


def _write_text(path: str, content: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)


class FileOps:
    """Async wrappers around the filesystem calls a write is composed of."""

    async def write_text(self, path: str, content: str) -> None:
        """Write text to a file, replacing its content."""
        await _run(_write_text, path, content)

    async def copy_file(self, src: str, dest: str) -> None:
        """Copy file content over dest; never a rename."""
        await _run(shutil.copyfile, src, dest)

    async def rename(self, src: str, dest: str) -> None:
        await _run(os.replace, src, dest)

    async def remove(self, path: str) -> None:
        await _run(os.remove, path)

    async def exists(self, path: str) -> bool:
        return await _run(os.path.isfile, path)

    async def makedirs(self, path: str) -> None:
        await _run(lambda: os.makedirs(path, exist_ok=True))

    async def remove_quietly(self, path: str) -> None:
        """Delete a file, ignoring errors if it is missing or locked."""
        try:
            await self.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug(f"Could not delete {path}: {e}")
