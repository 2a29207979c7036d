"""Query models."""

from __future__ import annotations

from pydantic import BaseModel, Field

FilterValue = str | int | float | bool


class SearchQuery(BaseModel):
    """A search request addressed to a single source."""

    text: str = Field(min_length=1, description="Query text (keywords, DOI, or source-specific syntax)")
    limit: int = Field(default=10, ge=1, description="Maximum number of items to return")
    cursor: str | None = Field(default=None, description="Opaque, source-defined pagination token")
    year: str | None = Field(default=None, description="Publication year or range (e.g. '2020-2023')")
    filters: dict[str, FilterValue] = Field(default_factory=dict, description="Source-specific filters")

    def filter_str(self, name: str) -> str | None:
        """Return a string filter value, or None if absent or not a string."""
        value = self.filters.get(name)
        return value if isinstance(value, str) and value else None

    def filter_number(self, name: str) -> float | None:
        """Return a numeric filter value, or None if absent or not numeric."""
        value = self.filters.get(name)
        if isinstance(value, bool) or not isinstance(value, int | float):
            return None
        return value
