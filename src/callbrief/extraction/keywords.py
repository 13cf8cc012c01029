"""Query-driven focus keywords for sentence picking.

Two sources: a fixed boost list for earnings-summary intents, and the
``search_categories`` tables of the instruct-pair JSON files, selected by
which topics the query mentions.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from callbrief.documents.store import DocumentStore, FilesystemStore
from callbrief.extraction.text import includes_any

logger = logging.getLogger(__name__)

INSTRUCT_FILES = ("quotes-quarter.json", "macro-musings.json")

SUMMARY_INTENT_TERMS = ("earnings", "summarize", "summary", "takeaways")

EARNINGS_BOOST_TERMS = (
    "revenue", "growth", "guidance", "eps", "operating margin", "gross margin",
    "arr", "rpo", "crpo", "free cash flow", "fcf", "non gaap",
    "operating income", "net income", "y/y", "q/q", "billings",
)

# (term the query must contain, term the category name must contain)
CATEGORY_TRIGGERS: tuple[tuple[str, str], ...] = (
    ("ai", "ai"),
    ("revenue", "revenue"),
    ("growth", "growth"),
    ("guidance", "outlook"),
)


def _category_terms(payload: object) -> list[str]:
    if not isinstance(payload, dict):
        return []
    terms: list[str] = []
    for field in ("keywords", "metrics"):
        values = payload.get(field)
        if isinstance(values, list):
            terms.extend(str(v) for v in values)
    return terms


def load_focus_keywords(
    query: str,
    instruct_dir: str | Path | None = None,
    store: DocumentStore | None = None,
) -> list[str]:
    """Build the lower-cased focus keyword list for a query.

    Args:
        query: The user's message.
        instruct_dir: Directory holding the instruct-pair JSON files.
        store: Document store used to read them.

    Returns:
        Keywords in discovery order (duplicates possible).
    """
    q = query.lower()
    tokens: list[str] = []
    if includes_any(q, SUMMARY_INTENT_TERMS):
        tokens.extend(EARNINGS_BOOST_TERMS)

    if instruct_dir is None:
        return [t.lower() for t in tokens]

    reader = store or FilesystemStore()
    for name in INSTRUCT_FILES:
        content = reader.read_text(Path(instruct_dir) / name)
        if not content:
            continue
        try:
            data = json.loads(content)
        except ValueError:
            logger.warning("Ignoring invalid instruct file %s", name)
            continue
        categories = data.get("search_categories") if isinstance(data, dict) else None
        if not isinstance(categories, dict):
            continue
        for category_name, payload in categories.items():
            name_lc = str(category_name).lower()
            for query_term, name_term in CATEGORY_TRIGGERS:
                if query_term in q and name_term in name_lc:
                    tokens.extend(_category_terms(payload))

    return [t.lower() for t in tokens]
