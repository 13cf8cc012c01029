"""Shared fixtures for tests — synthetic earnings documents, no network calls."""

from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest

from callbrief.documents.loader import DocumentLoader

# ---------------------------------------------------------------------------
# Synthetic document content
# ---------------------------------------------------------------------------


@pytest.fixture
def parsed_call() -> dict:
    """Parsed earnings-call JSON for BRZE."""
    return {
        "company": "Braze",
        "call_date": "2025-09-03",
        "cfo_prepared_remarks": {
            "sections": [
                {
                    "title": "Results",
                    "facts": [
                        {"raw": "Total revenue was $180.1 million, up 24% year over year."},
                        {"raw": "Non-GAAP operating income was $9.6 million."},
                        {"raw": "Gross margin was 69%."},
                        {"raw": "This call contains forward-looking statements."},
                        {"raw": "FY26 outlook raised to $720 million."},
                    ],
                },
            ],
        },
        "ceo_prepared_remarks": {
            "sections": [
                {
                    "facts": [
                        {"raw": "The OfferFit acquisition brings AI decisioning to the platform."},
                        {"raw": "total revenue was $180.1 million, up 24% year over year."},
                    ],
                },
            ],
        },
        "key_quotes": [{"quote": "We are winning vendor consolidation deals."}],
        "ad_tech_kpis": {
            "customers_total": 2422,
            "dbnr_overall_pct": 108,
            "rpo_usd_m": 800.5,
            "regions": ["US", "EMEA"],
            "notes": None,
            "large": {"customer_count": 250},
        },
        "product_agent_roadmap": {"ai_features": ["BrazeAI Decisioning Studio", "Agent Console"]},
        "risks": ["Macro uncertainty", "", "FX headwinds"],
    }


BRZE_SUMMARY = textwrap.dedent("""\
    BRZE — earnings summary
    Results:
    - Total revenue was $180.1 million, up 24% year over year.
    - Non-GAAP operating income was $9.6 million.

    KPIs & Customers:
    - Customers: 2422
    - DBNR (overall): 108
    - RPO: 800.5

    Margins & Cash:
    - Gross margin was 69%.

    Guidance:
    - FY26 outlook raised to $720 million.

    Strategy & AI:
    - The OfferFit acquisition brings AI decisioning to the platform.
    - AI roadmap: BrazeAI Decisioning Studio, Agent Console

    Risks:
    - Macro uncertainty
    - FX headwinds""")


TTD_TRANSCRIPT = textwrap.dedent("""\
    Operator: Welcome to the Trade Desk second quarter call.

    Revenue grew 19% to $694 million in the quarter.

    We continue to invest in Kokai adoption across the platform.

    Our CFO will now discuss margin trends and the outlook.

    Thank you all for joining.
""")

TTD_SUMMARY = (
    "TTD — earnings summary:\n"
    "- Revenue grew 19% to $694 million in the quarter.\n"
    "- Our CFO will now discuss margin trends and the outlook."
)


@pytest.fixture
def brze_summary() -> str:
    return BRZE_SUMMARY


@pytest.fixture
def ttd_summary() -> str:
    return TTD_SUMMARY


@pytest.fixture
def ttd_transcript() -> str:
    return TTD_TRANSCRIPT


# ---------------------------------------------------------------------------
# Directory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def doc_roots(tmp_path: Path, parsed_call: dict) -> tuple[Path, Path]:
    """(transcripts_dir, parsed_dir) holding BRZE parsed JSON and a TTD transcript."""
    transcripts = tmp_path / "software" / "transcripts"
    parsed = tmp_path / "software" / "output"
    transcripts.mkdir(parents=True)
    (parsed / "q2").mkdir(parents=True)

    (parsed / "q2" / "brze-parsed.json").write_text(json.dumps(parsed_call), encoding="utf-8")
    (transcripts / "ttd.txt").write_text(TTD_TRANSCRIPT, encoding="utf-8")
    return transcripts, parsed


@pytest.fixture
def loader(doc_roots: tuple[Path, Path]) -> DocumentLoader:
    transcripts, parsed = doc_roots
    return DocumentLoader(transcripts_dir=transcripts, parsed_dir=parsed)


@pytest.fixture
def instruct_dir(tmp_path: Path) -> Path:
    d = tmp_path / "instruct-pairs"
    d.mkdir()
    (d / "quotes-quarter.json").write_text(json.dumps({
        "search_categories": {
            "AI Strategy": {"keywords": ["Copilot", "agents"], "metrics": ["AI revenue"]},
            "Revenue Quality": {"keywords": ["net retention"], "metrics": ["NRR"]},
        },
    }), encoding="utf-8")
    (d / "macro-musings.json").write_text("{not json", encoding="utf-8")
    return d
