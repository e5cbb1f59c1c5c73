"""
CleanupService - removes every staged file of a request, wherever it landed
"""
import asyncio
import logging
import os
from pathlib import Path
from typing import List, Optional, Union

logger = logging.getLogger(__name__)


class CleanupService:
    """
    Recursive sweeper keyed on the request_id prefix

    Matching is on the basename only: a file is deleted when its name starts with
    request_id, whatever directory it sits in. Directories are only descended
    into, never deleted.
    """

    def __init__(self, cache_dir: Union[str, Path] = "cache"):
        self.cache_dir = Path(cache_dir)

    async def sweep(self, request_id: str, root: Optional[Union[str, Path]] = None, log=None) -> int:
        """
        Delete all files under root whose name starts with request_id

        Errors on single entries are logged and the sweep goes on with the rest.

        Args:
            request_id: Prefix to match
            root: Directory to sweep (the cache root by default)
            log: Per-request logger, if the caller has one

        Returns:
            Number of files deleted
        """
        if not request_id:
            raise ValueError("request_id must not be empty")

        log = log or logger
        root = Path(root) if root is not None else self.cache_dir
        log.info(f"[sweeper] Cleaning up files within {root}")
        return await self._sweep_dir(request_id, root, log)

    async def _sweep_dir(self, request_id: str, folder: Path, log) -> int:
        try:
            entries: List[os.DirEntry] = await asyncio.to_thread(_list_dir, folder)
        except FileNotFoundError:
            log.debug(f"[sweeper] {folder} does not exist, nothing to clean")
            return 0
        except OSError as e:
            log.error(f"[sweeper] Error while cleaning {folder}: {e}")
            return 0

        deleted = 0
        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    deleted += await self._sweep_dir(request_id, Path(entry.path), log)
                elif entry.name.startswith(request_id):
                    await asyncio.to_thread(os.unlink, entry.path)
                    deleted += 1
                    log.info(f"[sweeper] Deleted file: {entry.path}")
            except FileNotFoundError:
                # removed by someone else in the meantime
                continue
            except OSError as e:
                log.error(f"[sweeper] Error processing {entry.path}: {e}")
        return deleted


def _list_dir(folder: Path) -> List[os.DirEntry]:
    with os.scandir(folder) as it:
        return list(it)
