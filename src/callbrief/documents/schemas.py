"""Data models for earnings documents."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class DocumentKind(StrEnum):
    """How a document's content should be interpreted."""

    STRUCTURED = "structured"  # parsed earnings-call JSON
    RAW_TEXT = "raw_text"  # plain transcript


@dataclass(frozen=True)
class DocumentRef:
    """A candidate document for one ticker, resolved per request."""

    ticker: str
    path: Path
    kind: DocumentKind

    @property
    def source_ref(self) -> str:
        return str(self.path)
