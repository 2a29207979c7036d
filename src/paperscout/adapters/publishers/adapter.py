"""Publisher plugins — ScienceDirect, Springer Link and IEEE Xplore search pages.

All three scrape a publisher's HTML search page.  ``lookup`` searches for
the identifier and takes the first hit; ``download`` follows that hit's PDF
link.  Most publisher PDFs need an institutional session, so downloads
frequently fail with ``DownloadError``.
"""

from __future__ import annotations

import json
import logging
import re
from abc import abstractmethod
from pathlib import Path
from typing import Any, ClassVar

from bs4 import BeautifulSoup, Tag

from paperscout.adapters.base.adapter import FULL_TEXT, Capability, PlatformAdapter
from paperscout.adapters.base.utils import node_text, parse_html, to_iso
from paperscout.adapters.plugins import PluginModule
from paperscout.core.exceptions import DownloadError
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0) AppleWebKit/537.36"


class PublisherSearchAdapter(PlatformAdapter):
    """Shared flow for publisher search-page scrapers."""

    capabilities = FULL_TEXT | {Capability.LOOKUP}

    site_url: ClassVar[str]
    search_path: ClassVar[str]
    query_param: ClassVar[str]
    extra_params: ClassVar[dict[str, str]] = {}

    headers = {"User-Agent": BROWSER_USER_AGENT}

    def absolute_url(self, href: str | None) -> str | None:
        if not href:
            return None
        return href if href.startswith("http") else f"{self.site_url}{href}"

    async def search(self, query: SearchQuery) -> SearchResult:
        items = (await self._search(query.text))[: query.limit]
        return SearchResult(items=items, source=self.id, meta={"count": len(items)})

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        async def fetch() -> bytes:
            paper = await self.lookup(paper_id)
            if paper is None or not paper.pdf_url:
                raise DownloadError(f"No PDF found for {paper_id}", self.id)
            return await self.http.get_bytes(paper.pdf_url, headers=self.headers)

        return await self.context.cache.fetch(self.id, paper_id, directory, fetch)

    async def lookup(self, paper_id: str) -> Paper | None:
        results = await self._search(paper_id)
        return results[0] if results else None

    async def _search(self, text: str) -> list[Paper]:
        params = {**self.extra_params, self.query_param: text}
        html = await self.http.get_text(f"{self.site_url}{self.search_path}", params=params, headers=self.headers)
        return self.parse_results(parse_html(html))

    @abstractmethod
    def parse_results(self, soup: BeautifulSoup) -> list[Paper]:
        """Extract papers from a search results page, in page order."""

    def _paper(self, url: str | None, doi: str | None, **fields: Any) -> Paper | None:
        paper_id = doi or url
        if not paper_id:
            return None
        return Paper(id=paper_id, doi=doi, url=url, source=self.id, **fields)


class ScienceDirectAdapter(PublisherSearchAdapter):
    """Plugin adapter for Elsevier ScienceDirect."""

    id = "science-direct"
    site_url = "https://www.sciencedirect.com"
    search_path = "/search"
    query_param = "qs"

    _doi = re.compile(r"doi:\s*(10\.\S+)", re.IGNORECASE)

    def parse_results(self, soup: BeautifulSoup) -> list[Paper]:
        papers = []
        for node in soup.select("div.result-item-content"):
            title_link = node.select_one("h2.result-list-title a")
            source_text = node_text(node.select_one("div.Source"))
            match = self._doi.search(source_text)
            paper = self._paper(
                self.absolute_url(title_link.get("href") if title_link else None),
                match.group(1) if match else None,
                title=node_text(title_link),
                authors=[node_text(a) for a in node.select("ol.Authors li.author span.content")],
                abstract=node_text(node.select_one("div.text-break-word")),
                pdf_url=self.absolute_url(_href(node.select_one("a.pdf-download"))),
                extra={"source": source_text},
            )
            if paper is not None:
                papers.append(paper)
        return papers


class SpringerLinkAdapter(PublisherSearchAdapter):
    """Plugin adapter for Springer Link."""

    id = "springer-link"
    site_url = "https://link.springer.com"
    search_path = "/search"
    query_param = "query"

    _doi = re.compile(r"doi\.org/(\S+)", re.IGNORECASE)

    def parse_results(self, soup: BeautifulSoup) -> list[Paper]:
        papers = []
        for node in soup.select("ol#results-list li"):
            title_link = node.select_one("h2 a")
            meta = node_text(node.select_one("p.meta"))
            match = self._doi.search(meta)
            paper = self._paper(
                self.absolute_url(title_link.get("href") if title_link else None),
                match.group(1) if match else None,
                title=node_text(title_link),
                authors=[node_text(a) for a in node.select("span.authors span")],
                abstract=node_text(node.select_one("p.snippet")),
                pdf_url=self.absolute_url(_href(node.select_one('a[data-test="pdf-link"]'))),
                extra={"meta": meta},
            )
            if paper is not None:
                papers.append(paper)
        return papers


class IeeeXploreAdapter(PublisherSearchAdapter):
    """Plugin adapter for IEEE Xplore.

    Prefers the JSON embedded in ``global.document.metadata=...;`` and falls
    back to the rendered result list.
    """

    id = "ieee-xplore"
    site_url = "https://ieeexplore.ieee.org"
    search_path = "/search/searchresult.jsp"
    query_param = "queryText"
    extra_params = {"newsearch": "true"}

    _metadata = re.compile(r"global\.document\.metadata\s*=\s*(\{.*?\});", re.DOTALL)
    _doi = re.compile(r"DOI:\s*(10\.\S+)")

    def parse_results(self, soup: BeautifulSoup) -> list[Paper]:
        for script in soup.find_all("script"):
            match = self._metadata.search(script.get_text())
            if not match:
                continue
            try:
                metadata = json.loads(match.group(1))
            except json.JSONDecodeError:
                logger.debug("Skipping unparseable IEEE metadata block")
                continue
            return [p for record in metadata.get("records") or [] if (p := self.map_record(record))]

        papers = []
        for node in soup.select("div.List-results-items"):
            title_link = node.select_one("h3 a")
            match = self._doi.search(node_text(node))
            paper = self._paper(
                self.absolute_url(title_link.get("href") if title_link else None),
                match.group(1) if match else None,
                title=node_text(title_link),
                authors=[node_text(a) for a in node.select("p.author span")],
                abstract=node_text(node.select_one("div.description")),
                pdf_url=self.absolute_url(_href(node.select_one("a.icon-pdf"))),
            )
            if paper is not None:
                papers.append(paper)
        return papers

    def map_record(self, record: dict[str, Any]) -> Paper | None:
        article_number = record.get("articleNumber")
        url = self.absolute_url(record.get("htmlLink")) or (
            f"{self.site_url}/document/{article_number}" if article_number else None
        )
        doi = record.get("doi") or None
        paper_id = doi or (str(article_number) if article_number else None)
        if not paper_id:
            return None
        return Paper(
            id=paper_id,
            title=record.get("articleTitle") or record.get("title") or "",
            authors=[a["preferredName"] for a in record.get("authors") or [] if a.get("preferredName")],
            abstract=record.get("abstract") or "",
            doi=doi,
            published_at=to_iso(record.get("publicationYear")),
            pdf_url=self.absolute_url(record.get("pdfLink")),
            url=url,
            source=self.id,
            extra={"publication_year": record.get("publicationYear"), "metrics": record.get("metrics")},
        )


def _href(node: Tag | None) -> str | None:
    return node.get("href") if node is not None else None


science_direct_plugin = PluginModule(id=ScienceDirectAdapter.id, enabled=True, create=ScienceDirectAdapter)
springer_link_plugin = PluginModule(id=SpringerLinkAdapter.id, enabled=True, create=SpringerLinkAdapter)
ieee_xplore_plugin = PluginModule(id=IeeeXploreAdapter.id, enabled=True, create=IeeeXploreAdapter)
