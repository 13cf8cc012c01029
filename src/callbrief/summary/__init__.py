"""Summary assembly — category table, bucketing, report rendering."""

from callbrief.summary.assembler import (
    build_fallback_summary,
    build_summary,
    collect_summary_facts,
)
from callbrief.summary.categories import DEFAULT_CATEGORIES, classify, make_buckets
from callbrief.summary.schemas import CategoryBucket, CategorySpec, SummaryReport

__all__ = [
    "CategoryBucket",
    "CategorySpec",
    "DEFAULT_CATEGORIES",
    "SummaryReport",
    "build_fallback_summary",
    "build_summary",
    "classify",
    "collect_summary_facts",
    "make_buckets",
]
