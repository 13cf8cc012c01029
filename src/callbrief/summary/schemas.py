"""Data models for category buckets and rendered reports."""

from __future__ import annotations

from dataclasses import dataclass, field

from callbrief.extraction.text import includes_any, unique_push

BULLET = "- "


@dataclass(frozen=True)
class CategorySpec:
    """One row of the ordered category table."""

    title: str
    keywords: tuple[str, ...]
    limit: int

    def matches(self, fact: str) -> bool:
        return bool(self.keywords) and includes_any(fact, self.keywords)


@dataclass
class CategoryBucket:
    """Lines collected for one category, bounded by ``limit``."""

    spec: CategorySpec
    lines: list[str] = field(default_factory=list)

    @property
    def title(self) -> str:
        return self.spec.title

    @property
    def limit(self) -> int:
        return self.spec.limit

    @property
    def full(self) -> bool:
        return len(self.lines) >= self.limit

    def accepts(self, fact: str) -> bool:
        return not self.full and self.spec.matches(fact)

    def add(self, fact: str) -> bool:
        """Add ``fact`` as a bullet line; duplicates (any case) are ignored."""
        if self.full:
            return False
        return unique_push(self.lines, f"{BULLET}{fact}")

    def render(self) -> list[str]:
        if not self.lines:
            return []
        return [f"{self.title}:", *self.lines, ""]


@dataclass(frozen=True)
class SummaryReport:
    """Rendered deterministic report for one ticker."""

    ticker: str
    rendered_text: str
    source_ref: str = ""
    fallback: bool = False
