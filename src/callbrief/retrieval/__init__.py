"""Retrieval — vector-search oracle adapter and lexical relevance ranking."""

from callbrief.retrieval.ranker import (
    FOCUS_TERMS,
    answer_lines,
    pick_best_sentence,
    rank_context_lines,
    rank_lines,
    score_lines,
    select_excerpts,
)
from callbrief.retrieval.retriever import Retriever
from callbrief.retrieval.schemas import (
    Excerpt,
    RetrievalConfig,
    RetrievalMatch,
    RetrievalResult,
    ScoredLine,
)

__all__ = [
    "FOCUS_TERMS",
    "Excerpt",
    "RetrievalConfig",
    "RetrievalMatch",
    "RetrievalResult",
    "Retriever",
    "ScoredLine",
    "answer_lines",
    "pick_best_sentence",
    "rank_context_lines",
    "rank_lines",
    "score_lines",
    "select_excerpts",
]
