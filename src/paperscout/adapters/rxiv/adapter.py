"""bioRxiv / medRxiv adapter — Recent preprints via the bioRxiv details API.

The details API has no keyword search.  It lists preprints in a date window,
optionally restricted to a category, 100 records per page:

  GET https://api.biorxiv.org/details/<server>/<start>/<end>/<offset>?category=<cat>

The query text is used as the category (lower-cased, spaces to
underscores) and ``filters.days`` sets the window (default 30 days).  Pages
are fetched sequentially until ``limit`` items are collected or the
listing runs out.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from paperscout.adapters.base.adapter import AdapterContext, PlatformAdapter
from paperscout.adapters.base.utils import split_authors, to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

API_URL = "https://api.biorxiv.org/details"
PAGE_SIZE = 100
DEFAULT_WINDOW_DAYS = 30


class RxivAdapter(PlatformAdapter):
    """Search adapter shared by bioRxiv and medRxiv.

    Args:
        context: Shared adapter context.
        server: ``"biorxiv"`` or ``"medrxiv"``; also the adapter id.
        clock: Returns "now"; injectable for tests.
    """

    def __init__(self, context: AdapterContext, server: str, clock: Callable[[], datetime] | None = None) -> None:
        super().__init__(context)
        self.id = server  # type: ignore[misc]
        self.site = f"https://www.{server}.org"
        self._now = clock or (lambda: datetime.now(UTC))

    async def search(self, query: SearchQuery) -> SearchResult:
        days = query.filter_number("days")
        window = int(days) if days and days > 0 else DEFAULT_WINDOW_DAYS
        end = self._now().date()
        start = end - timedelta(days=window)
        category = "_".join(query.text.lower().split())

        items: list[Paper] = []
        offset = 0
        while len(items) < query.limit:
            url = f"{API_URL}/{self.id}/{start.isoformat()}/{end.isoformat()}/{offset}"
            data = await self.http.get_json(url, params={"category": category} if category else None)
            collection = data.get("collection") or []
            items.extend(paper for raw in collection if (paper := self.map_item(raw)))
            if len(collection) < PAGE_SIZE:
                break
            offset += PAGE_SIZE

        return SearchResult(
            items=items[: query.limit],
            source=self.id,
            meta={
                "count": len(items),
                "range": {"start_date": start.isoformat(), "end_date": end.isoformat()},
                "category": category,
            },
        )

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        url = f"{self.site}/content/{paper_id}v1.full.pdf"
        return await self.context.cache.fetch(self.id, paper_id, directory, lambda: self.http.get_bytes(url))

    def map_item(self, item: dict[str, Any]) -> Paper | None:
        doi = item.get("doi")
        if not doi:
            return None
        version = str(item.get("version") or "1")
        published = to_iso(item.get("date"))
        return Paper(
            id=doi,
            title=item.get("title") or "",
            authors=split_authors(item.get("authors"), ";"),
            abstract=item.get("abstract") or "",
            doi=doi,
            published_at=published,
            updated_at=published,
            pdf_url=f"{self.site}/content/{doi}v{version}.full.pdf",
            url=f"{self.site}/content/{doi}v{version}",
            source=self.id,
            categories=[item["category"]] if item.get("category") else [],
            extra={"version": version},
        )
