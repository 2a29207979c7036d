"""Normalization helpers shared by adapters."""

from __future__ import annotations

import contextlib
import re
from datetime import UTC, datetime
from typing import Any

from bs4 import BeautifulSoup, Tag

_WHITESPACE = re.compile(r"\s+")
_DOI_PREFIX = re.compile(r"^(?:https?://(?:dx\.)?doi\.org/|doi:)", re.IGNORECASE)


def clean_text(value: Any) -> str:
    """Collapse whitespace runs; non-strings become ``""``."""
    if not isinstance(value, str):
        return ""
    return _WHITESPACE.sub(" ", value).strip()


def to_iso(value: Any) -> str | None:
    """Normalize a date-ish value to an ISO-8601 UTC timestamp.

    Accepts ISO strings (with or without time or ``Z`` suffix) and bare
    years.  Returns None for anything unparseable.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return datetime(value, 1, 1, tzinfo=UTC).isoformat()
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = None
    with contextlib.suppress(ValueError):
        parsed = datetime.fromisoformat(text)
    if parsed is None:
        for fmt in ("%Y/%m/%d", "%Y %b %d", "%Y %b", "%Y"):
            with contextlib.suppress(ValueError):
                parsed = datetime.strptime(text, fmt)
                break
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC).isoformat()


def date_parts_to_iso(value: Any) -> str | None:
    """Convert a CSL ``{"date-parts": [[y, m, d]]}`` object to ISO-8601."""
    if not isinstance(value, dict):
        return None
    parts = value.get("date-parts") or []
    if not parts or not parts[0] or not isinstance(parts[0][0], int):
        return None
    first = parts[0]
    year = first[0]
    month = first[1] if len(first) > 1 and isinstance(first[1], int) else 1
    day = first[2] if len(first) > 2 and isinstance(first[2], int) else 1
    try:
        return datetime(year, month, day, tzinfo=UTC).isoformat()
    except ValueError:
        return None


def normalize_doi(value: Any) -> str | None:
    """Strip resolver prefixes from a DOI; empty values become None."""
    if not isinstance(value, str):
        return None
    doi = _DOI_PREFIX.sub("", value.strip())
    return doi or None


def split_authors(value: Any, separator: str = ",") -> list[str]:
    if not isinstance(value, str):
        return []
    return [name.strip() for name in value.split(separator) if name.strip()]


def parse_html(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "lxml")


def parse_xml(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "xml")


def node_text(node: Tag | None) -> str:
    """Whitespace-collapsed text of ``node``; ``""`` when missing."""
    if node is None:
        return ""
    return clean_text(node.get_text(" "))
