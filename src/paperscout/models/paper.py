"""Paper models — Normalized bibliographic record shared by every adapter.

``Paper`` is the source-independent schema every backend maps its raw
results to.  ``id`` is source-scoped: ``(id, source)`` together identify a
record within the system.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Paper(BaseModel):
    """Normalized metadata of an academic paper."""

    id: str = Field(min_length=1, description="Source-scoped paper identifier")
    title: str = Field(default="", description="Paper title")
    authors: list[str] = Field(default_factory=list, description="Ordered author names")
    abstract: str = Field(default="", description="Paper abstract")
    doi: str | None = Field(default=None, description="DOI without resolver prefix")
    published_at: str | None = Field(default=None, description="ISO-8601 publication timestamp")
    updated_at: str | None = Field(default=None, description="ISO-8601 last-update timestamp")
    pdf_url: str | None = Field(default=None, description="Direct PDF link, if known")
    url: str | None = Field(default=None, description="Landing page URL")
    source: str = Field(description="Source identifier (e.g. 'arxiv', 'crossref')")
    categories: list[str] = Field(default_factory=list, description="Subject categories")
    keywords: list[str] = Field(default_factory=list, description="Author or indexer keywords")
    references: list[str] = Field(default_factory=list, description="Referenced work identifiers")
    citations: int | None = Field(default=None, description="Citation count")
    extra: dict[str, Any] = Field(default_factory=dict, description="Source-specific fields")
