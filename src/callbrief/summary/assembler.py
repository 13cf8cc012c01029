"""Deterministic per-ticker earnings summaries.

Two renderers:

- ``build_summary`` for a parsed earnings-call document: facts are
  collected, bucketed by the category table and rendered as titled
  bullet sections.
- ``build_fallback_summary`` for a raw transcript: numeric or
  finance-flavoured paragraphs, minus operator/Q&A boilerplate.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from callbrief.extraction.chunks import split_paragraphs
from callbrief.extraction.facts import ARRAY_SEPARATOR, iter_section_facts, render_value
from callbrief.extraction.text import contains_digit, includes_any, unique_push
from callbrief.summary.categories import DEFAULT_CATEGORIES, RISKS, classify, make_buckets
from callbrief.summary.schemas import BULLET, CategorySpec, SummaryReport

logger = logging.getLogger(__name__)

HEADER_SUFFIX = " — earnings summary"

SKIP_WORDS = ("forward-looking", "safe harbor", "reconciliation", "sec filing")

# (label, key under ad_tech_kpis)
KPI_LABELS: tuple[tuple[str, str], ...] = (
    ("Customers", "customers_total"),
    ("$500k+ ARR customers", "$500k_plus_customers"),
    ("DBNR (overall)", "dbnr_overall_pct"),
    ("DBNR (large customers)", "dbnr_large_pct"),
    ("RPO", "rpo_usd_m"),
    ("CRPO", "crpo_usd_m"),
    ("Subscription revenue mix", "subscription_revenue_mix_pct"),
)

IGNORE_PHRASES = ("operator", "q&a", "listen-only", "welcome to the")
FINANCE_TERMS = ("revenue", "guidance", "margin", "arr", "rpo", "crpo", "customers")
MAX_FALLBACK_PICKS = 10


def report_header(ticker: str) -> str:
    return f"{ticker}{HEADER_SUFFIX}"


def _kpi_value(value: Any) -> str | None:
    if value is None or isinstance(value, dict):
        return None
    if isinstance(value, list):
        return ARRAY_SEPARATOR.join(render_value(v) for v in value if v is not None) or None
    return render_value(value)


def _roadmap_facts(parsed: dict[str, Any]) -> list[str]:
    roadmap = parsed.get("product_agent_roadmap")
    if not isinstance(roadmap, dict):
        return []
    out: list[str] = []
    features = roadmap.get("ai_features")
    if isinstance(features, list):
        joined = ", ".join(render_value(f) for f in features if f is not None)
        if joined:
            out.append(f"AI roadmap: {joined}")
    if roadmap.get("composable_intelligence"):
        out.append("Composable intelligence & Canvas orchestration advancing")
    offerfit = roadmap.get("offerfit")
    if isinstance(offerfit, dict) and isinstance(offerfit.get("status"), str):
        out.append(f"OfferFit integration status: {offerfit['status']}")
    return out


def collect_summary_facts(
    parsed: dict[str, Any],
    skip_words: Sequence[str] = SKIP_WORDS,
    kpi_labels: Sequence[tuple[str, str]] = KPI_LABELS,
) -> list[str]:
    """Gather the facts a summary is built from, in priority order.

    Prepared-remarks facts (CFO, then CEO) minus legal boilerplate, then
    labelled KPI values, then product roadmap signals.
    """
    facts: list[str] = []
    for key in ("cfo_prepared_remarks", "ceo_prepared_remarks"):
        remarks = parsed.get(key)
        if not isinstance(remarks, dict):
            continue
        for raw in iter_section_facts(remarks.get("sections"), strings_only=True):
            if includes_any(raw, skip_words):
                continue
            unique_push(facts, raw)

    kpis = parsed.get("ad_tech_kpis")
    if isinstance(kpis, dict):
        for label, key in kpi_labels:
            value = _kpi_value(kpis.get(key))
            if value:
                unique_push(facts, f"{label}: {value}")

    for fact in _roadmap_facts(parsed):
        unique_push(facts, fact)
    return facts


def build_summary(
    ticker: str,
    parsed: dict[str, Any],
    categories: Sequence[CategorySpec] = DEFAULT_CATEGORIES,
    source_ref: str = "",
) -> SummaryReport:
    """Render the categorized summary for one parsed document.

    Args:
        ticker: Normalized ticker, used in the header line.
        parsed: The decoded earnings-call JSON object.
        categories: Ordered category table. A category titled like
            ``RISKS`` is filled from the ``risks`` list.
        source_ref: Identifier of the source document.

    Returns:
        A ``SummaryReport`` whose text is the header followed by each
        non-empty category section.
    """
    buckets = make_buckets(categories)
    dropped = 0
    for fact in collect_summary_facts(parsed):
        bucket = classify(fact, buckets)
        if bucket is None:
            dropped += 1
            continue
        bucket.add(fact)

    risks = parsed.get("risks")
    risk_bucket = next((b for b in buckets if b.title == RISKS.title), None)
    if risk_bucket is not None and isinstance(risks, list):
        picked = [str(r).strip() for r in risks if r is not None and str(r).strip()]
        for risk in picked[: risk_bucket.limit]:
            risk_bucket.add(risk)

    out = [report_header(ticker)]
    for bucket in buckets:
        out.extend(bucket.render())

    logger.debug(
        "Summary for %s: %d lines, %d facts uncategorized",
        ticker, sum(len(b.lines) for b in buckets), dropped,
    )
    return SummaryReport(ticker=ticker, rendered_text="\n".join(out).strip(), source_ref=source_ref)


def build_fallback_summary(
    ticker: str,
    content: str,
    ignore: Sequence[str] = IGNORE_PHRASES,
    finance_terms: Sequence[str] = FINANCE_TERMS,
    max_picks: int = MAX_FALLBACK_PICKS,
    source_ref: str = "",
) -> SummaryReport:
    """Bullet the informative paragraphs of a raw transcript."""
    picked: list[str] = []
    for paragraph in split_paragraphs(content):
        if includes_any(paragraph, ignore):
            continue
        if contains_digit(paragraph) or includes_any(paragraph, finance_terms):
            unique_push(picked, paragraph)
        if len(picked) >= max_picks:
            break

    lines = [f"{report_header(ticker)}:", *(f"{BULLET}{p}" for p in picked)]
    return SummaryReport(
        ticker=ticker,
        rendered_text="\n".join(lines),
        source_ref=source_ref,
        fallback=True,
    )
