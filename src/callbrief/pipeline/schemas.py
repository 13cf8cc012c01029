"""Request and response models for the pipelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from callbrief.errors import InvalidRequestError


class DetailLevel(StrEnum):
    BRIEF = "brief"
    DETAILED = "detailed"
    COMPREHENSIVE = "comprehensive"


class AnswerMode(StrEnum):
    """Which path produced a chat answer."""

    GENERATED = "generated"
    RANKED_LINES = "ranked_lines"
    DETERMINISTIC = "deterministic"
    NO_CONTENT = "no_content"


def _tickers_from(body: dict[str, Any]) -> list[str]:
    raw = body.get("tickers")
    if raw is None:
        raw = body.get("selectedSources")
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise InvalidRequestError("'tickers' must be a list of strings")
    return [str(t) for t in raw if t is not None and str(t).strip()]


def _detail_from(body: dict[str, Any]) -> DetailLevel | None:
    raw = body.get("detailLevel", body.get("detail"))
    if raw is None:
        return None
    try:
        return DetailLevel(str(raw).lower())
    except ValueError as exc:
        raise InvalidRequestError(
            f"Unknown detail level '{raw}'. Use one of: {[d.value for d in DetailLevel]}"
        ) from exc


def _top_k_from(body: dict[str, Any]) -> int | None:
    raw = body.get("topK", body.get("top_k"))
    if raw is None:
        return None
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidRequestError("'topK' must be an integer") from exc
    if value <= 0:
        raise InvalidRequestError("'topK' must be positive")
    return value


@dataclass
class ChatQuery:
    """Input to the chat and research pipelines.

    ``tickers`` holds the raw symbols as sent; pipelines normalize them.
    """

    message: str
    tickers: list[str] = field(default_factory=list)
    top_k: int | None = None
    detail_level: DetailLevel | None = None

    @classmethod
    def from_body(cls, body: Any, require_tickers: bool = True) -> ChatQuery:
        """Validate a decoded request body.

        Accepts ``tickers`` or the UI's ``selectedSources`` key.

        Raises:
            InvalidRequestError: Missing message, missing tickers, bad types.
        """
        if not isinstance(body, dict):
            raise InvalidRequestError("Request body must be a JSON object")
        message = str(body.get("message") or "").strip()
        if not message:
            raise InvalidRequestError("Missing message")
        tickers = _tickers_from(body)
        if require_tickers and not tickers:
            raise InvalidRequestError("No sources selected")
        return cls(
            message=message,
            tickers=tickers,
            top_k=_top_k_from(body),
            detail_level=_detail_from(body),
        )


@dataclass
class ChatResponse:
    """Output of the chat pipeline."""

    answer: str
    tickers: list[str] = field(default_factory=list)
    mode: AnswerMode = AnswerMode.DETERMINISTIC
    model: str = ""


@dataclass
class ResearchResponse:
    """Output of the retrieval-augmented research pipeline."""

    answer: str
    sources: list[str] = field(default_factory=list)
    matches: int = 0
    top_score: float | None = None

    def metadata(self) -> dict[str, Any]:
        return {"sources": self.sources, "matches": self.matches, "topScore": self.top_score}


@dataclass
class SuggestionResponse:
    """Output of the question-suggestion pipeline."""

    suggestions: list[str] = field(default_factory=list)
    companies_analyzed: int = 0
    categories_found: list[str] = field(default_factory=list)
    context_chunks: int = 0

    def metadata(self) -> dict[str, Any]:
        return {
            "companiesAnalyzed": self.companies_analyzed,
            "categoriesFound": self.categories_found,
            "contextChunks": self.context_chunks,
        }


@dataclass
class IngestResult:
    """Result of indexing one ticker's documents."""

    ticker: str
    units_found: int
    units_embedded: int
    units_stored: int
    warnings: list[str] = field(default_factory=list)
