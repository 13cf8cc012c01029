"""Ticker-scoped document loader over two roots: raw transcripts and parsed JSON.

Files are matched by case-insensitive filename containment of the ticker
(``<ticker>.txt`` / ``<ticker>-parsed.json``). Missing roots or unreadable
files mean "no documents", never an error.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from callbrief.documents.schemas import DocumentKind, DocumentRef
from callbrief.documents.store import DocumentStore, FilesystemStore
from callbrief.documents.tickers import normalize_ticker

logger = logging.getLogger(__name__)

TRANSCRIPT_SUFFIX = ".txt"
PARSED_SUFFIX = "-parsed.json"
MAX_FILES_PER_TICKER = 4


def _matches_ticker(path: Path, ticker: str) -> bool:
    base = path.name.lower()
    t = ticker.lower()
    return f"{t}{TRANSCRIPT_SUFFIX}" in base or f"{t}{PARSED_SUFFIX}" in base


class DocumentLoader:
    """Resolve tickers to candidate documents and read them."""

    def __init__(
        self,
        transcripts_dir: str | Path,
        parsed_dir: str | Path,
        store: DocumentStore | None = None,
        max_files_per_ticker: int = MAX_FILES_PER_TICKER,
        aliases: Mapping[str, str] | None = None,
    ):
        self.transcripts_dir = Path(transcripts_dir)
        self.parsed_dir = Path(parsed_dir)
        self.store = store or FilesystemStore()
        self.max_files_per_ticker = max_files_per_ticker
        self.aliases = aliases

    def normalize(self, ticker: str) -> str:
        return normalize_ticker(ticker, self.aliases)

    def find_documents(self, ticker: str, max_files: int | None = None) -> list[DocumentRef]:
        """Return structured documents first, then raw transcripts, capped.

        Args:
            ticker: Raw or normalized ticker symbol.
            max_files: Cap on returned documents (defaults to the per-ticker cap).

        Returns:
            Ordered ``DocumentRef`` list, at most ``max_files`` long. A blank
            ticker matches nothing.
        """
        t = self.normalize(ticker)
        if not t:
            return []
        cap = self.max_files_per_ticker if max_files is None else max_files

        json_files = self.store.find(
            self.parsed_dir,
            lambda p: _matches_ticker(p, t) and p.name.endswith(".json"),
            cap,
        )
        txt_files = self.store.find(
            self.transcripts_dir,
            lambda p: _matches_ticker(p, t) and p.name.endswith(TRANSCRIPT_SUFFIX),
            cap,
        )

        refs = [DocumentRef(t, p, DocumentKind.STRUCTURED) for p in json_files]
        refs += [DocumentRef(t, p, DocumentKind.RAW_TEXT) for p in txt_files]
        refs = refs[:cap]

        logger.info(
            "Found %d documents for %s (parsed=%d, transcripts=%d)",
            len(refs), t, len(json_files), len(txt_files),
        )
        return refs

    def find_structured(self, ticker: str) -> DocumentRef | None:
        """First parsed JSON whose name contains ``<ticker>-parsed.json``."""
        t = self.normalize(ticker)
        if not t:
            return None
        needle = f"{t.lower()}{PARSED_SUFFIX}"
        found = self.store.find(
            self.parsed_dir,
            lambda p: needle in p.name.lower() and p.name.endswith(".json"),
            1,
        )
        return DocumentRef(t, found[0], DocumentKind.STRUCTURED) if found else None

    def find_transcript(self, ticker: str) -> DocumentRef | None:
        """The transcript named exactly ``<ticker>.txt`` (case-insensitive)."""
        t = self.normalize(ticker)
        if not t:
            return None
        name = f"{t.lower()}{TRANSCRIPT_SUFFIX}"
        found = self.store.find(
            self.transcripts_dir,
            lambda p: p.name.lower() == name and p.name.endswith(TRANSCRIPT_SUFFIX),
            1,
        )
        return DocumentRef(t, found[0], DocumentKind.RAW_TEXT) if found else None

    def read(self, ref: DocumentRef) -> str:
        return self.store.read_text(ref.path)
