"""Data models for vector store operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MatchMetadata:
    """Metadata stored with each earnings-call passage."""

    ticker: str | None = None
    company: str | None = None
    section: str | None = None
    category: str | None = None
    call_date: str | None = None
    source_filename: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "ticker": self.ticker,
            "company": self.company,
            "section": self.section,
            "category": self.category,
            "call_date": self.call_date,
            "source_filename": self.source_filename,
        }

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> MatchMetadata:
        return cls(
            ticker=payload.get("ticker"),
            company=payload.get("company"),
            section=payload.get("section"),
            category=payload.get("category"),
            call_date=payload.get("call_date"),
            source_filename=payload.get("source_filename"),
        )


@dataclass
class VectorRecord:
    """A passage with its embedding, ready for storage."""

    id: str
    text: str
    embedding: list[float]
    metadata: MatchMetadata = field(default_factory=MatchMetadata)


@dataclass(frozen=True)
class SearchResult:
    """A single search result from the vector store."""

    id: str
    text: str
    score: float
    metadata: MatchMetadata = field(default_factory=MatchMetadata)


@dataclass
class MetadataFilter:
    """Filter search results by metadata fields.

    ``tickers`` is an any-of match; all specified fields must match.
    """

    tickers: list[str] = field(default_factory=list)
    section: str | None = None
    category: str | None = None

    def matches(self, meta: MatchMetadata) -> bool:
        """Check if a passage's metadata matches this filter."""
        if self.tickers and meta.ticker not in self.tickers:
            return False
        if self.section and meta.section != self.section:
            return False
        return not (self.category and meta.category != self.category)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a flat dict; list values mean any-of."""
        d: dict[str, Any] = {}
        if self.tickers:
            d["ticker"] = list(self.tickers)
        if self.section:
            d["section"] = self.section
        if self.category:
            d["category"] = self.category
        return d
