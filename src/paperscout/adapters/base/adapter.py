"""Base platform adapter — Abstract interface for all paper sources.

Every source must implement this interface to integrate with PaperScout.
The adapter is responsible for:
  1. Searching the source and normalizing results to ``Paper``
  2. Downloading the full-text artifact through the shared download cache
  3. Optionally resolving a single record by identifier (``lookup``)

Adapters declare what they support through ``capabilities``; callers check
with :meth:`PlatformAdapter.supports` instead of looking for methods.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from paperscout.core.exceptions import PlatformError, UnsupportedOperationError
from paperscout.models.result import PaperText, TextStatistics
from paperscout.observability.logging import get_logger

if TYPE_CHECKING:
    import structlog

    from paperscout.adapters.base.cache import DownloadCache
    from paperscout.config.settings import Settings
    from paperscout.core.http import HttpClient
    from paperscout.extraction.pdf import PdfTextExtractor
    from paperscout.models.paper import Paper
    from paperscout.models.query import SearchQuery
    from paperscout.models.result import DownloadResult, SearchResult


class Capability(str, enum.Enum):
    """Operations an adapter may support."""

    SEARCH = "search"
    DOWNLOAD = "download"
    READ = "read"
    LOOKUP = "lookup"


FULL_TEXT = frozenset({Capability.SEARCH, Capability.DOWNLOAD, Capability.READ})
METADATA_ONLY = frozenset({Capability.SEARCH})


@dataclass(frozen=True)
class AdapterContext:
    """Shared collaborators handed to every adapter at construction."""

    http: HttpClient
    cache: DownloadCache
    extractor: PdfTextExtractor
    settings: Settings


class PlatformAdapter(ABC):
    """Abstract base class for platform adapters.

    All adapters must implement:
      - search(): Query the source and return normalized papers
      - download(): Persist the paper's PDF locally (via ``context.cache``)

    ``read()`` is provided: it downloads and then extracts text. Adapters
    that can resolve a single record override ``lookup()`` and declare
    ``Capability.LOOKUP``.

    Args:
        context: Shared HTTP client, download cache, extractor and settings.
    """

    id: ClassVar[str]
    capabilities: ClassVar[frozenset[Capability]] = FULL_TEXT

    def __init__(self, context: AdapterContext) -> None:
        self.context = context

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    @property
    def http(self) -> HttpClient:
        return self.context.http

    @property
    def log(self) -> structlog.stdlib.BoundLogger:
        return get_logger(__name__, platform=self.id)

    def unsupported(self, operation: str, reason: str | None = None) -> UnsupportedOperationError:
        """Build the error raised for an operation this source does not offer."""
        return UnsupportedOperationError(self.id, operation, reason)

    def require_credential(self, name: str) -> str:
        """Return ``settings.credentials.<name>``, checked at call time.

        Raises:
            PlatformError: If the credential is not configured.
        """
        value = getattr(self.context.settings.credentials, name, None)
        if not value:
            raise PlatformError(
                f"Platform '{self.id}' requires an API key. Set PAPERSCOUT_CREDENTIALS__{name.upper()}.",
                self.id,
            )
        return value

    @abstractmethod
    async def search(self, query: SearchQuery) -> SearchResult:
        """Search the source.

        Args:
            query: Query text, limit, cursor and source-specific filters.

        Returns:
            SearchResult whose ``items`` are in backend order; empty when
            nothing matches.
        """

    @abstractmethod
    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        """Download the paper's PDF into ``directory``.

        Implementations go through ``self.context.cache.fetch`` so that a
        repeated download is served from disk.

        Raises:
            UnsupportedOperationError: If the source is metadata-only.
            DownloadError: If no PDF can be located.
        """

    async def read(self, paper_id: str, directory: str | Path) -> PaperText:
        """Download (or reuse) the PDF and extract its text."""
        if not self.supports(Capability.READ):
            raise self.unsupported("read", "full text is not available from this source")

        result = await self.download(paper_id, directory)
        extracted = await self.context.extractor.extract(result.path)
        return PaperText(
            id=paper_id,
            source=self.id,
            text=extracted.text,
            statistics=TextStatistics(
                pages=extracted.pages,
                size_in_bytes=result.size_in_bytes or extracted.size_in_bytes,
            ),
            metadata=extracted.metadata or None,
        )

    async def lookup(self, paper_id: str) -> Paper | None:
        """Resolve a single record by identifier; ``None`` if not found."""
        raise self.unsupported("lookup")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"
