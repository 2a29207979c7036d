"""Download cache — Idempotent check-before-fetch for downloaded artifacts.

Filenames are derived deterministically from ``(source, paper_id)``, so a
repeated download of the same paper finds the existing file and issues no
network call.

Concurrent downloads of the *same* pair are not de-duplicated: two callers
that both miss the cache before either finishes will both fetch, and the
later write wins.  Different pairs never collide.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import uuid
from collections.abc import Awaitable, Callable
from pathlib import Path

import httpx

from paperscout.core.exceptions import DownloadError
from paperscout.models.result import DownloadResult

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_id(value: str) -> str:
    """Replace every character outside ``[A-Za-z0-9._-]`` with ``_``."""
    return _UNSAFE_CHARS.sub("_", value)


def cache_filename(source: str, paper_id: str, suffix: str = ".pdf") -> str:
    return f"{sanitize_id(source)}_{sanitize_id(paper_id)}{suffix}"


class DownloadCache:
    """Implements the caching discipline shared by every adapter's download."""

    def path_for(self, source: str, paper_id: str, directory: str | Path) -> Path:
        """Absolute target path for ``(source, paper_id)`` under ``directory``."""
        return (Path(directory).expanduser() / cache_filename(source, paper_id)).resolve()

    async def fetch(
        self,
        source: str,
        paper_id: str,
        directory: str | Path,
        fetch: Callable[[], Awaitable[bytes]],
    ) -> DownloadResult:
        """Return the cached artifact, or fetch and persist it.

        Args:
            source: Source identifier.
            paper_id: Source-scoped paper identifier.
            directory: Target directory (created on demand).
            fetch: Coroutine factory returning the binary content. Awaited at
                most once, and only on a cache miss.

        Returns:
            DownloadResult with ``cached=True`` on a hit.

        Raises:
            DownloadError: If the fetched content is empty or the source
                answered with a non-retryable error status.
        """
        target = self.path_for(source, paper_id, directory)
        loop = asyncio.get_running_loop()

        size = await loop.run_in_executor(None, _existing_size, target)
        if size is not None:
            logger.debug("Cache hit for %s:%s at %s", source, paper_id, target)
            return DownloadResult(id=paper_id, source=source, path=str(target), size_in_bytes=size, cached=True)

        await loop.run_in_executor(None, _ensure_dir, target.parent)
        try:
            content = await fetch()
        except httpx.HTTPStatusError as e:
            raise DownloadError(
                f"HTTP {e.response.status_code} while downloading {paper_id} from {e.request.url}", source
            ) from e
        if not content:
            raise DownloadError(f"Empty response while downloading {paper_id}", source)

        await loop.run_in_executor(None, _write_atomic, target, content)
        logger.info("Downloaded %s:%s (%d bytes) to %s", source, paper_id, len(content), target)
        return DownloadResult(
            id=paper_id,
            source=source,
            path=str(target),
            size_in_bytes=len(content),
            cached=False,
        )


def _existing_size(path: Path) -> int | None:
    try:
        return path.stat().st_size if path.is_file() else None
    except OSError:
        return None


def _ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def _write_atomic(path: Path, content: bytes) -> None:
    """Write to a sibling temp file, then move it into place.

    A failed write never leaves a partial file under the cached name.
    """
    partial = path.with_name(f".{path.name}.{uuid.uuid4().hex}.part")
    try:
        partial.write_bytes(content)
        os.replace(partial, path)
    except OSError:
        partial.unlink(missing_ok=True)
        raise
