"""arXiv adapter — Preprint search via the arXiv Atom API.

API reference:
  GET http://export.arxiv.org/api/query
    ?search_query=<query>
    &start=<offset>
    &max_results=<n>
    &sortBy=submittedDate&sortOrder=descending

PDFs are served from ``https://arxiv.org/pdf/<id>.pdf``.
"""

from __future__ import annotations

from pathlib import Path

from bs4 import Tag

from paperscout.adapters.base.adapter import PlatformAdapter
from paperscout.adapters.base.utils import clean_text, node_text, normalize_doi, parse_xml, to_iso
from paperscout.models.paper import Paper
from paperscout.models.query import SearchQuery
from paperscout.models.result import DownloadResult, SearchResult

API_URL = "http://export.arxiv.org/api/query"
PDF_BASE_URL = "https://arxiv.org/pdf"


class ArxivAdapter(PlatformAdapter):
    """Search adapter for arXiv.

    ``cursor`` is a numeric start offset; ``next_cursor`` is returned when a
    full page came back.
    """

    id = "arxiv"

    async def search(self, query: SearchQuery) -> SearchResult:
        start = int(query.cursor) if query.cursor and query.cursor.isdigit() else 0
        params = {
            "search_query": query.text,
            "start": start,
            "max_results": query.limit,
            "sortBy": "submittedDate",
            "sortOrder": "descending",
        }
        feed = parse_xml(await self.http.get_text(API_URL, params=params))
        items = [paper for entry in feed.find_all("entry") if (paper := self.map_entry(entry))]

        self.log.debug("arxiv search", query=query.text, results=len(items))
        return SearchResult(
            items=items,
            next_cursor=str(start + len(items)) if len(items) >= query.limit else None,
            source=self.id,
            meta={"count": len(items), "start": start},
        )

    async def download(self, paper_id: str, directory: str | Path) -> DownloadResult:
        url = f"{PDF_BASE_URL}/{paper_id}.pdf"
        return await self.context.cache.fetch(self.id, paper_id, directory, lambda: self.http.get_bytes(url))

    def map_entry(self, entry: Tag) -> Paper | None:
        """Map one Atom ``<entry>`` to a Paper; None if it has no id."""
        raw_id = node_text(entry.find("id", recursive=False))
        paper_id = raw_id.rstrip("/").split("/")[-1]
        if not paper_id:
            return None

        pdf_url = None
        for link in entry.find_all("link"):
            if link.get("type") == "application/pdf" and link.get("href"):
                pdf_url = link["href"]
                break

        authors = [node_text(author.find("name")) for author in entry.find_all("author")]
        categories = [c["term"] for c in entry.find_all("category") if c.get("term")]
        comment = entry.find("comment")

        return Paper(
            id=paper_id,
            title=node_text(entry.find("title", recursive=False)),
            authors=[a for a in authors if a],
            abstract=node_text(entry.find("summary")),
            doi=normalize_doi(node_text(entry.find("doi"))),
            published_at=to_iso(node_text(entry.find("published"))),
            updated_at=to_iso(node_text(entry.find("updated"))),
            pdf_url=pdf_url,
            url=raw_id or None,
            source=self.id,
            categories=categories,
            extra={"comment": clean_text(comment.get_text())} if comment else {},
        )
