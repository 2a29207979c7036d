"""Google Scholar adapter — Result pages scraped from scholar.google.com.

Scholar has no API.  Results are read from the HTML page ten at a time
until ``limit`` is reached or a short page signals the end.  Scholar links
out to publishers, so only search is supported.
"""

from __future__ import annotations

import hashlib
import re
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from bs4 import Tag

from paperscout.adapters.base.adapter import METADATA_ONLY, PlatformAdapter
from paperscout.adapters.base.utils import clean_text, node_text, parse_html, split_authors, to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

SEARCH_URL = "https://scholar.google.com/scholar"
PAGE_SIZE = 10

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
}

_FORMAT_TAG = re.compile(r"\[(?:PDF|HTML|BOOK|CITATION|B)\]", re.IGNORECASE)
_YEAR = re.compile(r"\b(\d{4})\b")


def extract_year(info: str) -> int | None:
    """First plausible publication year (1900 to now) in the byline."""
    current = datetime.now(UTC).year
    for match in _YEAR.finditer(info):
        year = int(match.group(1))
        if 1900 <= year <= current:
            return year
    return None


class GoogleScholarAdapter(PlatformAdapter):
    """Search adapter for Google Scholar (metadata only)."""

    id = "google-scholar"
    capabilities = METADATA_ONLY

    async def search(self, query: SearchQuery) -> SearchResult:
        start = int(query.cursor) if query.cursor and query.cursor.isdigit() else 0
        items: list[Paper] = []
        pages = 0
        exhausted = False

        while len(items) < query.limit:
            params: dict[str, Any] = {"q": query.text, "start": start, "hl": "en", "as_sdt": "0,5"}
            html = await self.http.get_text(SEARCH_URL, params=params, headers=BROWSER_HEADERS)
            pages += 1
            entries = parse_html(html).select("div.gs_ri")
            for entry in entries:
                if len(items) >= query.limit:
                    break
                paper = self.map_entry(entry)
                if paper is not None:
                    items.append(paper)
            start += PAGE_SIZE
            if len(entries) < PAGE_SIZE:
                exhausted = True
                break

        self.log.debug("scholar search", pages=pages, count=len(items))
        return SearchResult(
            items=items,
            next_cursor=None if exhausted else str(start),
            source=self.id,
            meta={"count": len(items), "pages": pages},
        )

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        raise self.unsupported("download", "Google Scholar links out to publishers; use the paper's pdf_url")

    def map_entry(self, entry: Tag) -> Paper | None:
        title_node = entry.select_one("h3.gs_rt")
        info_node = entry.select_one("div.gs_a")
        if title_node is None or info_node is None:
            return None

        title = clean_text(_FORMAT_TAG.sub("", node_text(title_node)))
        link = title_node.select_one("a[href]")
        url = str(link["href"]) if link is not None else None
        info = node_text(info_node)

        pdf_url = None
        container = entry.parent if isinstance(entry.parent, Tag) else entry
        pdf_link = container.select_one(".gs_or_ggsm a[href]")
        if pdf_link is not None:
            pdf_url = str(pdf_link["href"])
        elif url and url.lower().endswith(".pdf"):
            pdf_url = url

        year = extract_year(info)
        digest = hashlib.sha1((url or f"{title}-{info}").encode("utf-8")).hexdigest()
        return Paper(
            id=f"gs_{digest}",
            title=title,
            authors=split_authors(info.split("-", 1)[0]),
            abstract=node_text(entry.select_one("div.gs_rs")),
            published_at=to_iso(year) if year else None,
            pdf_url=pdf_url,
            url=url,
            source=self.id,
            extra={"info": info},
        )
