"""Request models for the HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from paperscout.models.paper import Paper
from paperscout.models.query import FilterValue, SearchQuery

MAX_SEARCH_LIMIT = 100


class PaperSearchRequest(BaseModel):
    """Body of ``POST /v1/papers/search``."""

    platform: str = Field(min_length=1, description="Source identifier (e.g. 'arxiv')")
    query: str = Field(min_length=1, description="Query text")
    limit: int = Field(default=10, ge=1, le=MAX_SEARCH_LIMIT, description="Maximum results")
    cursor: str | None = Field(default=None, description="Pagination cursor from a previous response")
    year: str | None = Field(default=None, description="Publication year or range")
    filters: dict[str, FilterValue] = Field(default_factory=dict, description="Source-specific filters")

    def to_query(self) -> SearchQuery:
        return SearchQuery(
            text=self.query,
            limit=self.limit,
            cursor=self.cursor,
            year=self.year,
            filters=self.filters,
        )


class PaperRequest(BaseModel):
    """Body of ``POST /v1/papers/download`` and ``POST /v1/papers/read``."""

    platform: str = Field(min_length=1, description="Source identifier")
    id: str = Field(min_length=1, description="Source-scoped paper identifier")
    dir: str | None = Field(default=None, description="Target directory; defaults to settings.download_dir")


class LookupRequest(BaseModel):
    """Body of ``POST /v1/papers/lookup``."""

    platform: str = Field(min_length=1, description="Source identifier")
    id: str = Field(min_length=1, description="Source-scoped paper identifier")


class LookupResponse(BaseModel):
    """Result of a lookup; ``paper`` is null when the source has no such record."""

    platform: str = Field(description="Source identifier")
    id: str = Field(description="Requested identifier")
    paper: Paper | None = Field(default=None, description="The resolved record")
