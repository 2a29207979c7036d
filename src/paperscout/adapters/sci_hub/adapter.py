"""Sci-Hub plugin — Resolves a DOI or URL to a PDF through a Sci-Hub mirror.

The mirror is configured by ``endpoints.sci_hub_base_url``.  The landing
page embeds the PDF in an ``<iframe>``/``<embed>`` or a download button's
``location.href``.
"""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import quote

from bs4 import BeautifulSoup

from paperscout.adapters.base.adapter import FULL_TEXT, Capability, PlatformAdapter
from paperscout.adapters.base.utils import node_text, parse_html, split_authors
from paperscout.adapters.plugins import PluginModule
from paperscout.core.exceptions import DownloadError
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

BROWSER_USER_AGENT = "Mozilla/5.0"

_QUOTED = re.compile(r"'([^']*)'")


class SciHubAdapter(PlatformAdapter):
    """Plugin adapter for Sci-Hub mirrors."""

    id = "sci-hub"
    capabilities = FULL_TEXT | {Capability.LOOKUP}

    headers = {"User-Agent": BROWSER_USER_AGENT}

    @property
    def base_url(self) -> str:
        return self.context.settings.endpoints.sci_hub_base_url

    def absolute_url(self, path: str) -> str:
        if path.startswith("//"):
            return f"https:{path}"
        if path.startswith("http"):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    async def search(self, query: SearchQuery) -> SearchResult:
        identifier = query.text.strip()
        paper = await self.lookup(identifier)
        return SearchResult(items=[paper] if paper else [], source=self.id, meta={"identifier": identifier})

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        async def fetch() -> bytes:
            paper = await self.lookup(paper_id)
            if paper is None or not paper.pdf_url:
                raise DownloadError(f"Sci-Hub returned no PDF link for {paper_id}", self.id)
            return await self.http.get_bytes(paper.pdf_url, headers=self.headers)

        return await self.context.cache.fetch(self.id, paper_id, directory, fetch)

    async def lookup(self, paper_id: str) -> Paper | None:
        html = await self.http.get_text(f"{self.base_url}/{quote(paper_id, safe='/:')}", headers=self.headers)
        return self.map_page(paper_id, parse_html(html))

    def map_page(self, identifier: str, soup: BeautifulSoup) -> Paper | None:
        pdf_url = self.find_pdf_url(soup)
        citation = soup.find(id="citation")
        if pdf_url is None and citation is None:
            return None

        citation_text = node_text(citation)
        title = node_text(citation.find("i")) if citation else ""
        doi = identifier
        if citation is not None:
            clip = citation.find("button", onclick=re.compile("clip"))
            match = _QUOTED.search(clip["onclick"]) if clip else None
            if match:
                doi = match.group(1)

        return Paper(
            id=identifier,
            title=title or node_text(soup.find("title")) or identifier,
            authors=split_authors(citation_text.split(".")[0]) if citation_text else [],
            doi=doi,
            pdf_url=pdf_url,
            url=f"{self.base_url}/{quote(identifier, safe='/:')}",
            source=self.id,
            extra={"citation": citation_text},
        )

    def find_pdf_url(self, soup: BeautifulSoup) -> str | None:
        for tag_name in ("iframe", "embed"):
            node = soup.find(tag_name, src=True)
            if node is not None:
                return self.absolute_url(node["src"])
        button = soup.find("button", onclick=re.compile("location.href"))
        match = _QUOTED.search(button["onclick"]) if button else None
        return self.absolute_url(match.group(1)) if match else None


plugin = PluginModule(id=SciHubAdapter.id, enabled=True, create=SciHubAdapter)
