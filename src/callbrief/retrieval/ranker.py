"""Lexical relevance ranking — token overlap with optional focus-term bias.

Replaces embedding retrieval when no oracle is available: report lines and
candidate units are scored against the query with ``score_by_token_overlap``.
When the query names a financial metric (a "focus term"), lines carrying
that metric outrank lines that merely share more words with the query.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from callbrief.extraction.schemas import CandidateUnit
from callbrief.extraction.text import (
    score_by_token_overlap,
    split_into_sentences,
    split_words,
    truncate,
)
from callbrief.retrieval.schemas import Excerpt, ScoredLine
from callbrief.summary.assembler import HEADER_SUFFIX

logger = logging.getLogger(__name__)

FOCUS_TERMS: tuple[str, ...] = (
    "rpo", "crpo", "dbnr", "revenue", "arr", "eps", "margin", "guidance",
    "billings", "fcf", "cash", "customers",
)

SENTENCE_CHAR_LIMIT = 260
TOP_LINES = 6
CONTEXT_LINES = 80


def pick_best_sentence(
    chunk_text: str,
    query_tokens: Sequence[str],
    char_limit: int = SENTENCE_CHAR_LIMIT,
) -> str:
    """Return the sentence with the most query-token substring hits.

    The first sentence wins ties, including the all-zero case. The result
    is truncated to ``char_limit`` with an ellipsis. Text with no sentences
    is returned cut to ``char_limit``.
    """
    sentences = split_into_sentences(chunk_text)
    if not sentences:
        return chunk_text[:char_limit]

    tokens = [t.lower() for t in query_tokens if t]
    best = sentences[0]
    best_score = 0
    for sentence in sentences:
        lc = sentence.lower()
        score = sum(1 for t in tokens if t in lc)
        if score > best_score:
            best_score = score
            best = sentence
    return truncate(best, char_limit)


def focus_terms_in(query: str, focus_terms: Iterable[str] = FOCUS_TERMS) -> list[str]:
    q = query.lower()
    return [t for t in focus_terms if t in q]


def score_lines(
    query: str,
    lines: Iterable[str],
    focus_terms: Iterable[str] = FOCUS_TERMS,
) -> list[ScoredLine]:
    """Score and order lines against the query.

    Lines with zero token overlap are discarded. If the query contains any
    focus term, lines without a focus hit are discarded too and the order
    is (focus hits, overlap) descending; otherwise overlap descending.
    Ordering is stable, so equal scores keep input order.
    """
    active = focus_terms_in(query, focus_terms)
    scored: list[ScoredLine] = []
    for line in lines:
        score = score_by_token_overlap(query, line)
        if score <= 0:
            continue
        lc = line.lower()
        hits = sum(1 for t in active if t in lc)
        scored.append(ScoredLine(text=line, score=score, focus_hits=hits))

    if active:
        scored = [s for s in scored if s.focus_hits > 0]
        scored.sort(key=lambda s: (s.focus_hits, s.score), reverse=True)
    else:
        scored.sort(key=lambda s: s.score, reverse=True)
    return scored


def rank_lines(
    query: str,
    lines: Iterable[str],
    focus_terms: Iterable[str] = FOCUS_TERMS,
    limit: int = TOP_LINES,
) -> list[str]:
    """Top ``limit`` lines by ``score_lines``."""
    return [s.text for s in score_lines(query, lines, focus_terms)[:limit]]


def rank_context_lines(query: str, lines: Iterable[str], limit: int = CONTEXT_LINES) -> list[str]:
    """Overlap-only ranking used to trim LLM context."""
    return rank_lines(query, lines, focus_terms=(), limit=limit)


def answer_lines(report_text: str) -> list[str]:
    """Fact lines of rendered reports: no blanks, titles or ticker headers."""
    out = []
    for raw in report_text.split("\n"):
        line = raw.strip()
        if not line or line.endswith(":") or HEADER_SUFFIX in line:
            continue
        out.append(line)
    return out


def select_excerpts(
    query: str,
    units: Iterable[CandidateUnit],
    extra_tokens: Sequence[str] = (),
    limit: int = 8,
    char_limit: int = SENTENCE_CHAR_LIMIT,
) -> list[Excerpt]:
    """Rank candidate units by overlap and reduce each to its best sentence.

    Args:
        query: The user's message.
        units: Candidate units from any number of documents.
        extra_tokens: Focus keywords added to the query tokens for
            sentence picking.
        limit: Maximum excerpts returned.
        char_limit: Per-excerpt character cap.

    Returns:
        Excerpts ordered by overlap score, highest first.
    """
    ranked = []
    for unit in units:
        score = score_by_token_overlap(query, unit.text)
        if score > 0:
            ranked.append((score, unit))
    ranked.sort(key=lambda pair: pair[0], reverse=True)

    tokens = [*split_words(query), *extra_tokens]
    excerpts = [
        Excerpt(
            ticker=unit.ticker,
            text=pick_best_sentence(unit.text, tokens, char_limit),
            source_ref=unit.source_ref,
            score=score,
        )
        for score, unit in ranked[:limit]
    ]
    logger.info("Selected %d excerpts from %d scored units", len(excerpts), len(ranked))
    return excerpts
