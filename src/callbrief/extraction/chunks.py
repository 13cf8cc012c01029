"""Paragraph and line chunking for raw document text."""

from __future__ import annotations

from collections.abc import Iterable

from callbrief.extraction.schemas import CandidateUnit
from callbrief.extraction.text import unique_push


def split_paragraphs(content: str) -> list[str]:
    """Split on blank lines (lines that are empty or whitespace-only).

    Consecutive blank lines count as one boundary. Paragraphs are trimmed
    and empty ones dropped; line breaks inside a paragraph are kept.
    """
    paragraphs: list[str] = []
    current: list[str] = []
    for line in content.splitlines():
        if line.strip():
            current.append(line)
            continue
        if current:
            paragraphs.append("\n".join(current).strip())
            current = []
    if current:
        paragraphs.append("\n".join(current).strip())
    return [p for p in paragraphs if p]


def split_into_chunks(content: str, ticker: str, source_ref: str) -> list[CandidateUnit]:
    """One unit per paragraph; repeated paragraphs (ignoring case) are kept once."""
    paragraphs: list[str] = []
    for p in split_paragraphs(content):
        unique_push(paragraphs, p)
    return [CandidateUnit(p, ticker, source_ref) for p in paragraphs]


def split_into_line_chunks(
    lines: Iterable[str | None],
    ticker: str,
    source_ref: str,
) -> list[CandidateUnit]:
    """One unit per non-empty line, for line-per-record content."""
    units = []
    for line in lines:
        text = str(line or "").strip()
        if text:
            units.append(CandidateUnit(text, ticker, source_ref))
    return units
