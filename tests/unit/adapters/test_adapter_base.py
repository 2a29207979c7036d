"""Tests for the base adapter contract: capabilities, read and lookup defaults."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from paperscout.adapters.base.adapter import (
    FULL_TEXT,
    METADATA_ONLY,
    AdapterContext,
    Capability,
    PlatformAdapter,
)
from paperscout.core.exceptions import UnsupportedOperationError
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult


class FullTextAdapter(PlatformAdapter):
    id = "fulltext"

    def __init__(self, context: AdapterContext, content: bytes) -> None:
        super().__init__(context)
        self.content = content
        self.fetches = 0

    async def search(self, query: SearchQuery) -> SearchResult:
        return SearchResult(items=[], source=self.id)

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        async def fetch() -> bytes:
            self.fetches += 1
            return self.content

        return await self.context.cache.fetch(self.id, paper_id, directory, fetch)


class MetadataAdapter(FullTextAdapter):
    id = "metadata"
    capabilities = METADATA_ONLY


def offline(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


class TestCapabilities:
    def test_full_text_default(self, make_context: Callable[..., AdapterContext]) -> None:
        adapter = FullTextAdapter(make_context(offline), b"")
        assert adapter.capabilities == FULL_TEXT
        assert adapter.supports(Capability.READ)
        assert not adapter.supports(Capability.LOOKUP)

    def test_capability_values(self) -> None:
        assert {c.value for c in Capability} == {"search", "download", "read", "lookup"}

    def test_repr(self, make_context: Callable[..., AdapterContext]) -> None:
        assert repr(FullTextAdapter(make_context(offline), b"")) == "FullTextAdapter(id='fulltext')"


class TestRead:
    @pytest.mark.asyncio
    async def test_read_extracts_text_and_statistics(
        self, make_context: Callable[..., AdapterContext], pdf_bytes: bytes, tmp_path: Path
    ) -> None:
        adapter = FullTextAdapter(make_context(offline), pdf_bytes)
        text = await adapter.read("paper-1", tmp_path)

        assert text.id == "paper-1"
        assert text.source == "fulltext"
        assert text.statistics.pages == 1
        assert text.statistics.size_in_bytes == len(pdf_bytes)
        assert text.metadata is not None
        assert text.metadata["Title"] == "Sample Paper"

    @pytest.mark.asyncio
    async def test_read_reuses_download(
        self, make_context: Callable[..., AdapterContext], pdf_bytes: bytes, tmp_path: Path
    ) -> None:
        adapter = FullTextAdapter(make_context(offline), pdf_bytes)
        await adapter.read("paper-1", tmp_path)
        await adapter.read("paper-1", tmp_path)
        assert adapter.fetches == 1

    @pytest.mark.asyncio
    async def test_metadata_only_adapter_cannot_read(
        self, make_context: Callable[..., AdapterContext], tmp_path: Path
    ) -> None:
        adapter = MetadataAdapter(make_context(offline), b"")
        with pytest.raises(UnsupportedOperationError, match="read"):
            await adapter.read("paper-1", tmp_path)
        assert adapter.fetches == 0


class TestLookupDefault:
    @pytest.mark.asyncio
    async def test_lookup_is_unsupported_by_default(self, make_context: Callable[..., AdapterContext]) -> None:
        adapter = FullTextAdapter(make_context(offline), b"")
        with pytest.raises(UnsupportedOperationError) as exc_info:
            await adapter.lookup("x")
        assert exc_info.value.platform == "fulltext"
        assert exc_info.value.operation == "lookup"
