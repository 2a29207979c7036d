"""Tests for the idempotent download cache."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from paperscout.adapters.base.cache import DownloadCache, cache_filename, sanitize_id
from paperscout.core.exceptions import DownloadError


@pytest.fixture
def cache() -> DownloadCache:
    return DownloadCache()


class TestFilenames:
    def test_safe_characters_kept(self) -> None:
        assert sanitize_id("2401.00001v1") == "2401.00001v1"

    def test_unsafe_characters_replaced(self) -> None:
        assert sanitize_id("10.1000/xyz:123 a") == "10.1000_xyz_123_a"

    def test_filename_combines_source_and_id(self) -> None:
        assert cache_filename("biorxiv", "10.1101/2024.01.01.123456") == "biorxiv_10.1101_2024.01.01.123456.pdf"

    def test_distinct_sources_never_collide(self, cache: DownloadCache, tmp_path: Path) -> None:
        assert cache.path_for("arxiv", "1234", tmp_path) != cache.path_for("pmc", "1234", tmp_path)

    def test_path_is_absolute(self, cache: DownloadCache, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        path = cache.path_for("arxiv", "1234", "relative/dir")
        assert path.is_absolute()
        assert path == tmp_path.resolve() / "relative" / "dir" / "arxiv_1234.pdf"


class TestFetch:
    @pytest.mark.asyncio
    async def test_miss_fetches_and_writes(self, cache: DownloadCache, tmp_path: Path) -> None:
        fetch = AsyncMock(return_value=b"%PDF-1.4 content")
        result = await cache.fetch("arxiv", "2401.00001", tmp_path / "new" / "dir", fetch)

        assert result.cached is False
        assert result.size_in_bytes == 16
        assert Path(result.path).read_bytes() == b"%PDF-1.4 content"
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_second_download_is_served_from_disk(self, cache: DownloadCache, tmp_path: Path) -> None:
        fetch = AsyncMock(return_value=b"%PDF-1.4 content")
        first = await cache.fetch("arxiv", "2401.00001", tmp_path, fetch)
        second = await cache.fetch("arxiv", "2401.00001", tmp_path, fetch)

        assert first.path == second.path
        assert second.cached is True
        assert second.size_in_bytes == first.size_in_bytes
        fetch.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_existing_file_is_never_refetched(self, cache: DownloadCache, tmp_path: Path) -> None:
        (tmp_path / "pmc_PMC123.pdf").write_bytes(b"old")
        fetch = AsyncMock(return_value=b"new")
        result = await cache.fetch("pmc", "PMC123", tmp_path, fetch)

        assert result.cached is True
        assert (tmp_path / "pmc_PMC123.pdf").read_bytes() == b"old"
        fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_content_raises(self, cache: DownloadCache, tmp_path: Path) -> None:
        with pytest.raises(DownloadError, match="Empty response"):
            await cache.fetch("arxiv", "2401.00001", tmp_path, AsyncMock(return_value=b""))
        assert not (tmp_path / "arxiv_2401.00001.pdf").exists()

    @pytest.mark.asyncio
    async def test_fetch_errors_propagate(self, cache: DownloadCache, tmp_path: Path) -> None:
        fetch = AsyncMock(side_effect=DownloadError("no pdf", "semantic"))
        with pytest.raises(DownloadError, match="no pdf"):
            await cache.fetch("semantic", "abc", tmp_path, fetch)
        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_error_status_becomes_download_error(self, cache: DownloadCache, tmp_path: Path) -> None:
        request = httpx.Request("GET", "https://arxiv.org/pdf/9999.99999.pdf")
        response = httpx.Response(404, request=request)
        fetch = AsyncMock(side_effect=httpx.HTTPStatusError("HTTP 404", request=request, response=response))

        with pytest.raises(DownloadError, match="HTTP 404") as exc_info:
            await cache.fetch("arxiv", "9999.99999", tmp_path, fetch)
        assert exc_info.value.platform == "arxiv"
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)


# ── Tests: Interrupted writes ──


def _write_half_then_fail(path: Path, data: bytes) -> int:
    with open(path, "wb") as f:
        f.write(data[: len(data) // 2])
    raise OSError(28, "No space left on device")


class TestInterruptedWrite:
    @pytest.mark.asyncio
    async def test_partial_file_is_not_left_behind(self, cache: DownloadCache, tmp_path: Path) -> None:
        fetch = AsyncMock(return_value=b"x" * 1000)
        with (
            patch.object(Path, "write_bytes", autospec=True, side_effect=_write_half_then_fail),
            pytest.raises(OSError),
        ):
            await cache.fetch("arxiv", "2401.00001", tmp_path, fetch)

        assert list(tmp_path.iterdir()) == []

    @pytest.mark.asyncio
    async def test_next_download_fetches_again(self, cache: DownloadCache, tmp_path: Path) -> None:
        fetch = AsyncMock(return_value=b"x" * 1000)
        with (
            patch.object(Path, "write_bytes", autospec=True, side_effect=_write_half_then_fail),
            pytest.raises(OSError),
        ):
            await cache.fetch("arxiv", "2401.00001", tmp_path, fetch)

        result = await cache.fetch("arxiv", "2401.00001", tmp_path, fetch)
        assert result.cached is False
        assert result.size_in_bytes == 1000
        assert Path(result.path).read_bytes() == b"x" * 1000
        assert fetch.await_count == 2
