"""Shared test fixtures and configuration."""

from __future__ import annotations

import io
from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock

import httpx
import pytest
from PyPDF2 import PdfWriter

from paperscout.adapters.base.adapter import AdapterContext
from paperscout.adapters.base.cache import DownloadCache
from paperscout.config.settings import Settings
from paperscout.core.http import HttpClient
from paperscout.core.scheduler import RequestScheduler, RetryPolicy
from paperscout.extraction.pdf import PdfTextExtractor

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Create a test Settings instance with defaults and a temp download dir."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        download_dir=tmp_path / "downloads",
    )


@pytest.fixture
def fake_sleep() -> AsyncMock:
    """Stand-in for asyncio.sleep that returns immediately and records delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def scheduler(fake_sleep: AsyncMock) -> RequestScheduler:
    """A scheduler with no start spacing, no jitter and instant backoff."""
    return RequestScheduler(
        max_concurrent=2,
        min_interval_ms=0,
        timeout_ms=5000,
        retry_policy=RetryPolicy(max_attempts=3, base_delay_ms=10, cap_delay_ms=100, jitter_ms=0),
        sleep=fake_sleep,
    )


@pytest.fixture
def make_context(settings: Settings, scheduler: RequestScheduler) -> Callable[..., AdapterContext]:
    """Factory building an AdapterContext whose HTTP calls hit ``handler``."""

    def _make(handler: Handler, settings_override: Settings | None = None) -> AdapterContext:
        active = settings_override or settings
        http = HttpClient(
            scheduler=scheduler,
            user_agent=active.http.user_agent,
            transport=httpx.MockTransport(handler),
        )
        return AdapterContext(http=http, cache=DownloadCache(), extractor=PdfTextExtractor(), settings=active)

    return _make


@pytest.fixture
def pdf_bytes() -> bytes:
    """A valid one-page blank PDF with a title in its metadata."""
    writer = PdfWriter()
    writer.add_blank_page(width=72, height=72)
    writer.add_metadata({"/Title": "Sample Paper"})
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()
