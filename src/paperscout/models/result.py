"""Result models — Outputs of the adapter operations.

``SearchResult`` preserves backend order: insertion order is relevance or
reverse-chronological order as defined by each backend.  ``PaperText`` is
derived on demand from a downloaded artifact and is never persisted.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from paperscout.models.paper import Paper


class SearchResult(BaseModel):
    """Result of a search against one source."""

    items: list[Paper] = Field(default_factory=list, description="Matching papers, backend order")
    next_cursor: str | None = Field(default=None, description="Cursor for the next page, if any")
    source: str = Field(description="Source identifier")
    meta: dict[str, Any] = Field(default_factory=dict, description="Echoed parameters, counts, etc.")


class DownloadResult(BaseModel):
    """Outcome of a download; ``cached`` is true when no fetch was issued."""

    id: str = Field(description="Paper identifier")
    source: str = Field(description="Source identifier")
    path: str = Field(description="Absolute local path of the artifact")
    size_in_bytes: int | None = Field(default=None, description="Artifact size in bytes")
    cached: bool = Field(description="True if the artifact already existed before this call")


class TextStatistics(BaseModel):
    """Size statistics of an extracted document."""

    pages: int | None = Field(default=None, description="Number of pages")
    size_in_bytes: int | None = Field(default=None, description="Artifact size in bytes")


class PaperText(BaseModel):
    """Text extracted from a downloaded paper."""

    id: str = Field(description="Paper identifier")
    source: str = Field(description="Source identifier")
    text: str = Field(default="", description="Extracted plain text")
    statistics: TextStatistics = Field(default_factory=TextStatistics)
    metadata: dict[str, Any] | None = Field(default=None, description="Document metadata, if any")
