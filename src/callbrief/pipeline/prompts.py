"""Prompt templates for earnings-call answers and question suggestions.

All prompts keep the model grounded in supplied context; none of them ask
for citations.
"""

from __future__ import annotations

from collections.abc import Sequence

from callbrief.pipeline.schemas import DetailLevel

# ---------------------------------------------------------------------------
# Chat (deterministic summaries as grounding)
# ---------------------------------------------------------------------------

CHAT_SYSTEM_PROMPT = (
    "You write accurate, relevant answers grounded in provided context only. "
    "Never fabricate data."
)

SUMMARY_REWRITE_TEMPLATE = """\
You are an expert equity research assistant. Expand and polish the following \
per-ticker earnings summaries. Keep them factual and grounded; do not invent \
numbers. Use 8-15 bullets per ticker covering: results, KPIs, margins, cash, \
geo mix, customer metrics, AI/product themes, go-to-market/competitive \
dynamics, and guidance. No citations.

{summaries}"""

GENERAL_QA_TEMPLATE = """\
You are a precise research assistant. Answer the user's question using ONLY \
the provided context. Include only information directly relevant to the \
question; omit unrelated facts. If multiple tickers are relevant, organize by \
ticker (3–8 concise bullets each). If the answer is not present in the \
context, say: "No explicit information in selected sources." No citations.

Question:
{question}

Context:
{context}"""


def build_chat_prompt(question: str, context: str, summary_intent: bool) -> str:
    """Summary intent rewrites the reports; anything else is answered from them."""
    if summary_intent:
        return SUMMARY_REWRITE_TEMPLATE.format(summaries=context)
    return GENERAL_QA_TEMPLATE.format(question=question, context=context)


# ---------------------------------------------------------------------------
# Research (vector retrieval as grounding)
# ---------------------------------------------------------------------------

_PLAIN_TEXT_RULES = """\
- Use ONLY plain text - NO markdown, NO asterisks, NO bold/italic formatting
- Use simple bullet points with "•" character only
- Use clear paragraph breaks for organization
- Use simple section headers without # symbols
- NO special formatting characters whatsoever"""

RESEARCH_BASE_PROMPT = f"""\
You are an expert financial analyst assistant. Answer the user's question \
using ONLY the provided earnings call context.

CORE ANALYSIS PRINCIPLES:
- Extract and synthesize ALL relevant information from the provided context
- Use specific quotes, metrics, and evidence from the earnings calls
- For strategic questions: approaches, competitive positioning, and implications
- For financial questions: metrics analysis with context and comparisons
- For trend questions: pattern analysis with supporting evidence across companies
- Organize responses with clear structure and supporting detail

FORMATTING REQUIREMENTS:
{_PLAIN_TEXT_RULES}"""

_DETAIL_GUIDELINES: dict[DetailLevel, str] = {
    DetailLevel.BRIEF: """\
BRIEF RESPONSE GUIDELINES:
- Provide concise, high-level summary (3-5 key points)
- Include only the most significant numbers and metrics
- Focus on main business impacts and direct answers
- Adapt structure to the question type naturally""",
    DetailLevel.DETAILED: """\
DETAILED RESPONSE GUIDELINES:
- Provide thorough analysis that goes deep into the subject matter
- Include all relevant numbers, percentages, financial metrics, and specific quotes
- Compare and contrast companies with supporting evidence
- Include forward-looking statements, guidance, and strategic commentary
- Use clear section headings that address the question
- Call out important gaps, red flags, or concerning patterns
- End with actionable insights based on the analysis""",
    DetailLevel.COMPREHENSIVE: f"""\
COMPREHENSIVE RESPONSE GUIDELINES:
- Organize your response to directly address what the question is asking
- Use section headers that match the question's focus
- Include ALL relevant numbers, percentages, financial metrics, and growth rates
- Quote specific management statements for evidence
- Compare companies and identify key differentiators
- Include forward-looking guidance and strategic commentary
- Call out gaps, red flags, or concerning omissions
- End with actionable insights relevant to the specific question asked
{_PLAIN_TEXT_RULES}""",
}

RESEARCH_USER_TEMPLATE = """\
Question: {question}

Context from earnings calls:
{context}"""


def research_system_prompt(detail: DetailLevel | None) -> str:
    """System prompt for a detail level (``detailed`` when unspecified)."""
    level = detail or DetailLevel.DETAILED
    return f"{RESEARCH_BASE_PROMPT}\n\n{_DETAIL_GUIDELINES[level]}"


# ---------------------------------------------------------------------------
# Question suggestions
# ---------------------------------------------------------------------------

SUGGESTION_PROBES: tuple[str, ...] = (
    "artificial intelligence AI revenue growth investment",
    "revenue growth margin guidance outlook",
    "customers customer acquisition retention expansion",
    "product platform new features innovation",
    "competition competitive advantage market share",
    "international global expansion geographic",
    "enterprise business model strategy",
)

DEFAULT_SUGGESTIONS: tuple[str, ...] = (
    "What are the key revenue drivers across selected companies?",
    "How are companies positioning for future growth?",
    "What are the main competitive advantages mentioned?",
)

FALLBACK_SUGGESTIONS: tuple[str, ...] = (
    "What fundamentally different strategic approaches to market positioning emerged across the selected companies, and what do these differences reveal about competitive dynamics?",
    "How are companies positioning themselves differently for future market evolution, and what strategic themes separate early adopters from followers?",
    "What divergent competitive philosophies and strategic moats emerged across earnings discussions?",
    "Which strategic partnership and ecosystem positioning themes emerged across companies, and what do these choices reveal about competitive positioning?",
    "What different approaches to technology integration and innovation emerged across companies, and what strategic themes separate the leaders?",
    "How are product strategy and platform positioning varying across the selected universe?",
    "What emerging competitive threats and market disruption themes were discussed across multiple companies, and how are strategic responses differing?",
    "What management confidence patterns and strategic messaging themes emerged across earnings calls?",
    "Which companies are best positioned for the next phase of industry evolution based on their results and strategic positioning?",
)

# category value in match metadata -> sector theme paragraph
SECTOR_THEMES: tuple[tuple[str, str], ...] = (
    ("security", "CYBERSECURITY THEMES: emerging threat landscapes, AI vs human-driven security approaches, zero trust adoption, compliance strategy, security consolidation, differentiation in threat intelligence."),
    ("ad-tech", "AD TECH THEMES: privacy-first advertising strategies, AI-driven attribution, programmatic marketplace dynamics, brand safety, positioning for a cookieless future."),
    ("financial-software", "FINTECH THEMES: regulatory strategy, embedded finance, AI-driven risk management, payments competition, digital banking differentiation."),
    ("saas", "SAAS THEMES: platform strategy, AI integration approaches, customer success philosophy, ecosystem partnerships, competitive moats in software."),
)

SUGGESTION_SYSTEM_TEMPLATE = """\
You are an expert thematic analyst who generates cross-sectional questions \
that reveal strategic themes, competitive dynamics, and industry insights \
from earnings calls.

Generate 8 thematic analytical questions that focus on:
- Cross-company themes and strategic patterns
- Competitive positioning shifts and market dynamics
- Technology adoption trends and implementation strategies
- Management tone, product strategy, partnerships and ecosystem positioning

AVOID BASIC FINANCIAL METRICS:
- NO questions about revenue growth, ARR, operating margins, or basic KPIs
- NO company-specific questions

Selected Companies: {companies}
Business Categories: {categories}
{sector_themes}
Generate THEMATIC questions that reveal strategic patterns and competitive \
insights across the {sector} sector."""

SUGGESTION_USER_TEMPLATE = """\
Based on this earnings content sample from {company_count} companies, \
generate 8 broad analytical questions:

Sample Content:
{sample}

Questions must work across ALL selected companies and focus on themes and \
strategic insights, not basic financial metrics.

Return only the questions, numbered 1-8."""


def sector_themes_for(categories: Sequence[str]) -> list[str]:
    """Theme paragraphs for the business categories present in the sample."""
    lowered = [c.lower() for c in categories]
    themes = []
    for key, paragraph in SECTOR_THEMES:
        if key == "saas":
            hit = any("saas" in c for c in lowered)
        else:
            hit = key in lowered
        if hit:
            themes.append(paragraph)
    return themes


def build_suggestion_prompts(
    companies: Sequence[str],
    categories: Sequence[str],
    sample: str,
) -> tuple[str, str]:
    """Return ``(system_prompt, user_prompt)`` for question generation."""
    themes = sector_themes_for(categories)
    system = SUGGESTION_SYSTEM_TEMPLATE.format(
        companies=", ".join(companies),
        categories=", ".join(categories),
        sector_themes=("\nSECTOR-SPECIFIC THEMATIC FOCUS:\n" + "\n".join(themes) + "\n") if themes else "",
        sector=categories[0] if categories else "software",
    )
    user = SUGGESTION_USER_TEMPLATE.format(company_count=len(companies), sample=sample)
    return system, user
