"""IACR ePrint adapter — Cryptology preprints scraped from eprint.iacr.org.

Search results are parsed from the HTML search page.  With
``filters.fetch_details`` (default true) each hit is enriched from its
detail page, which costs one extra scheduled request per result.
"""

from __future__ import annotations

import re
from pathlib import Path

import httpx
from bs4 import BeautifulSoup, Tag

from paperscout.adapters.base.adapter import FULL_TEXT, Capability, PlatformAdapter
from paperscout.adapters.base.utils import node_text, parse_html, split_authors, to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

BASE_URL = "https://eprint.iacr.org"
BROWSER_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0) AppleWebKit/537.36"

_ID_CHARS = re.compile(r"[^0-9/]")


def normalize_eprint_id(value: str) -> str:
    """Keep only ``YYYY/NNNN``; falls back to the input if nothing remains."""
    return _ID_CHARS.sub("", value) or value


class IacrAdapter(PlatformAdapter):
    """Search adapter for the IACR Cryptology ePrint Archive."""

    id = "iacr"
    capabilities = FULL_TEXT | {Capability.LOOKUP}

    headers = {"User-Agent": BROWSER_USER_AGENT}

    async def search(self, query: SearchQuery) -> SearchResult:
        fetch_details = query.filters.get("fetch_details", True) is not False
        html = await self.http.get_text(f"{BASE_URL}/search", params={"q": query.text}, headers=self.headers)
        soup = parse_html(html)

        items: list[Paper] = []
        for container in soup.select("div.mb-4"):
            if len(items) >= query.limit:
                break
            paper = self.map_search_entry(container)
            if paper is None:
                continue
            if fetch_details:
                paper = await self.lookup(paper.id) or paper
            items.append(paper)

        return SearchResult(items=items, source=self.id, meta={"count": len(items)})

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        eprint_id = normalize_eprint_id(paper_id)
        url = f"{BASE_URL}/{eprint_id}.pdf"
        return await self.context.cache.fetch(
            self.id, eprint_id, directory, lambda: self.http.get_bytes(url, headers=self.headers)
        )

    async def lookup(self, paper_id: str) -> Paper | None:
        eprint_id = normalize_eprint_id(paper_id)
        try:
            html = await self.http.get_text(f"{BASE_URL}/{eprint_id}", headers=self.headers)
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise
        return self.map_detail_page(eprint_id, parse_html(html))

    def map_search_entry(self, container: Tag) -> Paper | None:
        link = container.select_one("a.paperlink")
        paper_id = node_text(link)
        if link is None or not paper_id:
            return None

        pdf_link = container.select_one('a[href$="pdf"]')
        info = container.select_one("div.ms-md-4") or container
        category = node_text(info.select_one("small.badge"))
        return Paper(
            id=paper_id,
            title=node_text(info.find("strong")),
            authors=split_authors(node_text(info.select_one("span.fst-italic"))),
            abstract=node_text(info.select_one("p.search-abstract")),
            pdf_url=f"{BASE_URL}{pdf_link['href']}" if pdf_link else None,
            url=f"{BASE_URL}{link.get('href', '')}",
            source=self.id,
            categories=[category] if category else [],
        )

    def map_detail_page(self, eprint_id: str, soup: BeautifulSoup) -> Paper | None:
        title = node_text(soup.select_one("h3.mb-3"))
        if not title:
            return None

        author_text = node_text(soup.select_one("p.fst-italic")).replace(" and ", ", ")
        history: list[str] = []
        publication_info = ""
        for card in soup.select("div.card"):
            text = node_text(card)
            if "History" in text:
                history = [node_text(li) for li in card.find_all("li")]
            elif "Published" in text:
                publication_info = text

        published = to_iso(history[0].split(":")[0]) if history else None
        return Paper(
            id=eprint_id,
            title=title,
            authors=split_authors(author_text),
            abstract=node_text(soup.find("p", style="white-space: pre-wrap;")),
            published_at=published,
            updated_at=published,
            pdf_url=f"{BASE_URL}/{eprint_id}.pdf",
            url=f"{BASE_URL}/{eprint_id}",
            source=self.id,
            keywords=[node_text(k) for k in soup.select("a.badge.keyword")],
            extra={"publication_info": publication_info, "history": "; ".join(history)},
        )
