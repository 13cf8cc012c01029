"""Data models for extracted text units."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CandidateUnit:
    """A paragraph, fact line or flattened KPI string taken from one document.

    ``text`` is always trimmed and non-empty.
    """

    text: str
    ticker: str
    source_ref: str
