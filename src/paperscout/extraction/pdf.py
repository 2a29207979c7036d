"""PDF text extraction via PyPDF2.

Extraction is blocking, so it runs in the default executor.  Failures of
the underlying parser propagate as-is.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from PyPDF2 import PdfReader

logger = logging.getLogger(__name__)


@dataclass
class ExtractedText:
    """Plain text and statistics extracted from a document."""

    text: str
    pages: int
    size_in_bytes: int
    metadata: dict[str, Any] = field(default_factory=dict)


class PdfTextExtractor:
    """Extracts plain text from local PDF files."""

    async def extract(self, path: str | Path) -> ExtractedText:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.extract_sync, Path(path))

    def extract_sync(self, path: Path) -> ExtractedText:
        """Synchronous extraction (runs in executor)."""
        reader = PdfReader(str(path))
        chunks = [page.extract_text() or "" for page in reader.pages]
        metadata: dict[str, Any] = {}
        if reader.metadata:
            metadata = {str(k).lstrip("/"): str(v) for k, v in reader.metadata.items()}

        logger.debug("Extracted %d pages from %s", len(reader.pages), path.name)
        return ExtractedText(
            text="\n".join(chunks).strip(),
            pages=len(reader.pages),
            size_in_bytes=path.stat().st_size,
            metadata=metadata,
        )
