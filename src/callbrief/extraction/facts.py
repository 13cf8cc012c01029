"""Fact extraction from parsed earnings-call JSON, with raw-text fallback.

A parsed document may carry any of:

- ``cfo_prepared_remarks.sections[*].facts[*].raw`` and the same under
  ``ceo_prepared_remarks``
- ``key_quotes[*].quote``
- ``ad_tech_kpis`` — a nested KPI object, flattened to ``"key path: value"``

Every string goes through ``unique_push`` against one list, so a fact that
appears in several places is kept once.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from callbrief.documents.schemas import DocumentKind, DocumentRef
from callbrief.extraction.chunks import split_into_chunks, split_into_line_chunks
from callbrief.extraction.schemas import CandidateUnit
from callbrief.extraction.text import unique_push

logger = logging.getLogger(__name__)

PREPARED_REMARKS_KEYS = ("cfo_prepared_remarks", "ceo_prepared_remarks")
KPI_KEY = "ad_tech_kpis"
ARRAY_SEPARATOR = " – "
RAW_FALLBACK_CHARS = 4000


def render_value(value: Any) -> str:
    """Render a JSON scalar the way it reads in the source document."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def iter_section_facts(sections: Any, strings_only: bool = False) -> list[str]:
    """Collect ``facts[*].raw`` values from a prepared-remarks section list.

    With ``strings_only`` set, non-string raws are skipped instead of rendered.
    """
    out: list[str] = []
    if not isinstance(sections, list):
        return out
    for section in sections:
        facts = section.get("facts") if isinstance(section, dict) else None
        if not isinstance(facts, list):
            continue
        for fact in facts:
            if not isinstance(fact, dict) or fact.get("raw") is None:
                continue
            if strings_only and not isinstance(fact["raw"], str):
                continue
            raw = render_value(fact["raw"]).strip()
            if raw:
                out.append(raw)
    return out


def flatten_kpis(obj: Any, out: list[str], prefix: str | None = None) -> list[str]:
    """Flatten a nested KPI object into ``"key path: value"`` lines.

    Nested objects recurse with dot-joined keys; arrays are joined with an
    en dash; underscores in the key path become spaces. ``None`` values and
    empty arrays are skipped.

    Args:
        obj: The KPI object (non-dicts are ignored).
        out: Accumulator; lines are added with ``unique_push``.
        prefix: Key path of ``obj`` within the root object.

    Returns:
        ``out``, for chaining.
    """
    if not isinstance(obj, dict):
        return out
    for key, value in obj.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        label = path.replace("_", " ")
        if isinstance(value, dict):
            if value:
                flatten_kpis(value, out, path)
        elif isinstance(value, list):
            values = [render_value(v) for v in value if v is not None]
            if values:
                unique_push(out, f"{label}: {ARRAY_SEPARATOR.join(values)}")
        elif isinstance(value, (str, int, float)):
            unique_push(out, f"{label}: {render_value(value)}")
    return out


def extract_structured_facts(parsed: Any) -> list[str]:
    """Pull candidate fact strings out of a parsed earnings-call document."""
    extracted: list[str] = []
    if not isinstance(parsed, dict):
        return extracted

    for key in PREPARED_REMARKS_KEYS:
        remarks = parsed.get(key)
        if isinstance(remarks, dict):
            for raw in iter_section_facts(remarks.get("sections")):
                unique_push(extracted, raw)

    quotes = parsed.get("key_quotes")
    if isinstance(quotes, list):
        for item in quotes:
            if isinstance(item, dict) and item.get("quote"):
                unique_push(extracted, render_value(item["quote"]).strip())

    if parsed.get(KPI_KEY):
        flatten_kpis(parsed[KPI_KEY], extracted)

    return extracted


def extract_units(
    ref: DocumentRef,
    content: str,
    raw_fallback_chars: int = RAW_FALLBACK_CHARS,
) -> list[CandidateUnit]:
    """Turn one document into candidate units.

    Structured documents yield one unit per extracted fact. If nothing is
    extracted, or the JSON does not parse, the first ``raw_fallback_chars``
    characters are chunked by paragraph instead. Raw transcripts are
    chunked by paragraph.
    """
    if not content:
        return []

    if ref.kind is DocumentKind.RAW_TEXT:
        return split_into_chunks(content, ref.ticker, ref.source_ref)

    try:
        parsed = json.loads(content)
    except ValueError:
        logger.warning("Invalid JSON in %s, falling back to raw text", ref.path)
        return split_into_chunks(content[:raw_fallback_chars], ref.ticker, ref.source_ref)

    facts = extract_structured_facts(parsed)
    if not facts:
        logger.info("No facts extracted from %s, falling back to raw text", ref.path)
        return split_into_chunks(content[:raw_fallback_chars], ref.ticker, ref.source_ref)

    return split_into_line_chunks(facts, ref.ticker, ref.source_ref)
