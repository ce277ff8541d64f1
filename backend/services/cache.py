"""File-backed cache for the patches payload. No Redis needed for one JSON blob.

The payload is opaque: whatever the upstream returned is written verbatim
(pretty-printed) and read back verbatim. There is no TTL; the file is only
replaced by a cache-miss fetch or by the daily refresh job.

All read/fetch/write sequences on one PatchCache are serialized by an
asyncio.Lock, and writes land via temp file + os.replace, so a reader
never sees a half-written file.
"""

import asyncio
import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable

from errors import CacheParseError, CacheWriteError, FetchError, PatchesProxyError

logger = logging.getLogger(__name__)

Fetcher = Callable[[str | None], Awaitable[Any]]


class PatchCache:
    def __init__(self, path: str | Path, fetcher: Fetcher, enabled: bool = True):
        self.path = Path(path)
        self.enabled = enabled
        self._fetcher = fetcher
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    async def read_or_fetch(self, token: str | None) -> Any:
        """Return the cached payload, fetching and persisting it on a miss."""
        if not self.enabled:
            return await self._fetch(token)

        async with self._get_lock():
            if await asyncio.to_thread(self.path.exists):
                logger.debug("Cache hit: %s", self.path)
                return await asyncio.to_thread(self._read)

            logger.info("Cache miss: %s, fetching from upstream", self.path)
            data = await self._fetch(token)
            await asyncio.to_thread(self._write, data)
            return data

    async def force_refresh(self, token: str | None) -> Any:
        """Fetch from upstream and overwrite the file regardless of what it held."""
        async with self._get_lock():
            data = await self._fetch(token)
            await asyncio.to_thread(self._write, data)
            logger.info("Cache refreshed: %s", self.path)
            return data

    async def status(self) -> dict:
        return await asyncio.to_thread(self._status)

    def _get_lock(self) -> asyncio.Lock:
        # asyncio.Lock binds to one loop; rebuild it if the cache outlives its loop
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    async def _fetch(self, token: str | None) -> Any:
        try:
            return await self._fetcher(token)
        except PatchesProxyError:
            raise
        except Exception as e:
            raise FetchError(f"Upstream fetch failed: {e!r}") from e

    def _status(self) -> dict:
        exists = self.path.exists()
        updated_at = None
        if exists:
            mtime = self.path.stat().st_mtime
            updated_at = datetime.fromtimestamp(mtime, tz=timezone.utc).isoformat()
        return {
            "path": str(self.path),
            "enabled": self.enabled,
            "exists": exists,
            "updated_at": updated_at,
        }

    def _read(self) -> Any:
        try:
            with open(self.path, encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise CacheParseError(f"Corrupt cache file {self.path}: {e}", str(self.path)) from e
        except OSError as e:
            raise CacheParseError(f"Unreadable cache file {self.path}: {e}", str(self.path)) from e

    def _write(self, data: Any) -> None:
        tmp_name = None
        try:
            directory = self.path.parent
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{self.path.name}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise CacheWriteError(f"Failed to write cache file {self.path}: {e}", str(self.path)) from e
