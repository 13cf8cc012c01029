"""Data models for retrieval and lexical ranking."""

from __future__ import annotations

from dataclasses import dataclass, field

from callbrief.vectorstore.schemas import MetadataFilter, SearchResult


@dataclass
class RetrievalConfig:
    """Configuration for a retrieval operation.

    Only matches scoring strictly above ``min_score`` are kept, and at most
    ``max_results`` of them, whatever the vector store returns.
    """

    top_k: int = 25
    min_score: float = 0.55
    max_results: int = 12
    metadata_filter: MetadataFilter | None = None


@dataclass(frozen=True)
class RetrievalMatch:
    """A retained vector-search hit with its display metadata."""

    score: float
    ticker: str
    company: str
    section: str
    text: str
    category: str = ""
    call_date: str = ""

    @classmethod
    def from_search_result(cls, result: SearchResult) -> RetrievalMatch:
        meta = result.metadata
        return cls(
            score=result.score,
            ticker=meta.ticker or "Unknown",
            company=meta.company or "Unknown",
            section=meta.section or "earnings",
            text=result.text,
            category=meta.category or "",
            call_date=meta.call_date or "",
        )


@dataclass
class RetrievalResult:
    """Result of a retrieval operation."""

    query: str
    matches: list[RetrievalMatch] = field(default_factory=list)
    total_candidates: int = 0

    @property
    def top_score(self) -> float | None:
        return self.matches[0].score if self.matches else None


@dataclass(frozen=True)
class ScoredLine:
    """A report line with its lexical relevance scores."""

    text: str
    score: int
    focus_hits: int = 0


@dataclass(frozen=True)
class Excerpt:
    """Best sentence of a candidate unit, for excerpt listings."""

    ticker: str
    text: str
    source_ref: str
    score: int
