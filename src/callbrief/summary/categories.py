"""Ordered category table and the single classification function.

Categories are tested in table order; the first one whose keywords match
and which still has room takes the fact. A fact that matches a full
category falls through to the next matching one.
"""

from __future__ import annotations

from collections.abc import Sequence

from callbrief.summary.schemas import CategoryBucket, CategorySpec

RESULTS = CategorySpec(
    "Results",
    ("revenue", "net income", "operating income", "fcf", "arr"),
    4,
)
KPIS = CategorySpec(
    "KPIs & Customers",
    ("dbnr", "rpo", "crpo", "customers", "$500k", "subscription"),
    4,
)
MARGINS = CategorySpec(
    "Margins & Cash",
    ("margin", "s&m", "r&d", "g&a", "cash", "cash flow"),
    4,
)
GUIDANCE = CategorySpec(
    "Guidance",
    ("q3", "fy26", "fiscal year", "guidance", "eps"),
    4,
)
STRATEGY = CategorySpec(
    "Strategy & AI",
    (
        "offerfit", "ai", "legacy", "replacement", "vendor consolidation",
        "forge", "first-party", "credits", "rcs", "whatsapp",
    ),
    4,
)
# Filled only from the structured risks list, never by keyword.
RISKS = CategorySpec("Risks", (), 3)

DEFAULT_CATEGORIES: tuple[CategorySpec, ...] = (
    RESULTS, KPIS, MARGINS, GUIDANCE, STRATEGY, RISKS,
)


def make_buckets(categories: Sequence[CategorySpec] = DEFAULT_CATEGORIES) -> list[CategoryBucket]:
    return [CategoryBucket(spec) for spec in categories]


def classify(fact: str, buckets: Sequence[CategoryBucket]) -> CategoryBucket | None:
    """Return the first bucket that accepts ``fact``, or ``None``."""
    lc = fact.lower()
    for bucket in buckets:
        if bucket.accepts(lc):
            return bucket
    return None
