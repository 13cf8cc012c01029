"""Post-processing of generated answers."""

from __future__ import annotations

import re
from collections.abc import Iterable

from callbrief.retrieval.schemas import RetrievalMatch

# (pattern, replacement), applied in order
_MARKDOWN_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"\1"),
    (re.compile(r"__([^_]+)__"), r"\1"),
    (re.compile(r"_([^_]+)_"), r"\1"),
    (re.compile(r"^#{1,6}\s+", re.MULTILINE), ""),
    (re.compile(r"```[\s\S]*?```"), ""),
    (re.compile(r"`([^`]+)`"), r"\1"),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"^\s*[-*+]\s+", re.MULTILINE), "• "),
    (re.compile(r"^\s*\d+\.\s+", re.MULTILINE), ""),
    (re.compile(r"\n{3,}"), "\n\n"),
)


def strip_markdown(text: str) -> str:
    """Reduce model output to plain text with "•" bullets."""
    for pattern, replacement in _MARKDOWN_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def unique_in_order(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out = []
    for value in values:
        if value not in seen:
            seen.add(value)
            out.append(value)
    return out


def with_sources(answer: str, sources: list[str]) -> str:
    if not sources:
        return answer
    return f"{answer}\n\nSources: {', '.join(sources)}"


def format_match(match: RetrievalMatch) -> str:
    header = f"{match.company} ({match.ticker}) - {match.section}"
    date = f" [{match.call_date}]" if match.call_date else ""
    category = f" ({match.category})" if match.category else ""
    return f"{header}{date}{category}:\n{match.text}"


def format_match_context(matches: Iterable[RetrievalMatch]) -> str:
    """Render retrieval matches as prompt context blocks."""
    return "\n\n---\n\n".join(format_match(m) for m in matches)
