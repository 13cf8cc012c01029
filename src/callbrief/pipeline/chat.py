"""Chat pipeline — tickers → per-ticker summaries → optional rewrite → answer.

Reports are built deterministically from local documents. A generation
oracle, when one is configured, may rewrite or answer from them; when it is
absent or fails, the reports themselves (or their most relevant lines) are
the answer.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from callbrief.config import Settings
from callbrief.documents.loader import DocumentLoader
from callbrief.documents.tickers import MAX_TICKERS, normalize_tickers
from callbrief.extraction.facts import RAW_FALLBACK_CHARS, extract_units
from callbrief.extraction.keywords import load_focus_keywords
from callbrief.extraction.schemas import CandidateUnit
from callbrief.extraction.text import includes_any
from callbrief.llm.factory import llm_from_settings
from callbrief.llm.oracle import GenerationOracle
from callbrief.pipeline.prompts import CHAT_SYSTEM_PROMPT, build_chat_prompt
from callbrief.pipeline.schemas import AnswerMode, ChatQuery, ChatResponse
from callbrief.retrieval.ranker import (
    FOCUS_TERMS,
    answer_lines,
    rank_context_lines,
    rank_lines,
    select_excerpts,
)
from callbrief.retrieval.schemas import Excerpt
from callbrief.summary.assembler import build_fallback_summary, build_summary
from callbrief.summary.categories import DEFAULT_CATEGORIES
from callbrief.summary.schemas import BULLET, CategorySpec, SummaryReport

logger = logging.getLogger(__name__)

# A message containing any of these asks for the reports themselves.
REPORT_INTENT_TERMS = ("earnings", "summary", "summarize", "guidance", "results")

MIN_CONTEXT_LINES = 6
MAX_EXCERPTS = 8


def has_report_intent(message: str) -> bool:
    return includes_any(message, REPORT_INTENT_TERMS)


class ChatPipeline:
    """Orchestrates load → extract → summarize → (rewrite | rank)."""

    def __init__(
        self,
        loader: DocumentLoader,
        oracle: GenerationOracle | None = None,
        categories: Sequence[CategorySpec] = DEFAULT_CATEGORIES,
        focus_terms: Sequence[str] = FOCUS_TERMS,
        max_tickers: int = MAX_TICKERS,
        max_workers: int = 8,
        instruct_dir: str | Path | None = None,
        raw_fallback_chars: int = RAW_FALLBACK_CHARS,
        max_tokens: int | None = 1100,
        temperature: float | None = 0.2,
    ):
        self.loader = loader
        self.oracle = oracle or GenerationOracle(None)
        self.categories = tuple(categories)
        self.focus_terms = tuple(focus_terms)
        self.max_tickers = max_tickers
        self.max_workers = max_workers
        self.instruct_dir = instruct_dir
        self.raw_fallback_chars = raw_fallback_chars
        self.max_tokens = max_tokens
        self.temperature = temperature

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        secrets: Mapping[str, str] | None = None,
    ) -> ChatPipeline:
        """Wire a pipeline from settings; the LLM is optional."""
        docs = settings.documents
        loader = DocumentLoader(
            transcripts_dir=docs.transcripts_dir,
            parsed_dir=docs.parsed_dir,
            max_files_per_ticker=docs.max_files_per_ticker,
            aliases=docs.ticker_aliases,
        )
        return cls(
            loader=loader,
            oracle=GenerationOracle(llm_from_settings(settings.llm, secrets)),
            max_tickers=settings.limits.max_tickers,
            max_workers=settings.limits.max_workers,
            instruct_dir=docs.instruct_dir,
            raw_fallback_chars=settings.limits.raw_fallback_chars,
            max_tokens=settings.llm.max_tokens,
            temperature=settings.llm.temperature,
        )

    # ------------------------------------------------------------------
    # Per-ticker work
    # ------------------------------------------------------------------

    def normalize(self, tickers: Sequence[str]) -> list[str]:
        return normalize_tickers(tickers, limit=self.max_tickers, aliases=self.loader.aliases)

    def build_report(self, ticker: str) -> SummaryReport | None:
        """Summarize one ticker from its parsed JSON, else its transcript.

        A parsed file that does not decode falls through to the transcript.
        Returns ``None`` when neither exists.
        """
        ref = self.loader.find_structured(ticker)
        if ref is not None:
            content = self.loader.read(ref)
            try:
                parsed = json.loads(content)
            except ValueError:
                logger.warning("Unparseable JSON for %s in %s, trying transcript", ticker, ref.path)
            else:
                if not isinstance(parsed, dict):
                    parsed = {}
                return build_summary(ticker, parsed, self.categories, source_ref=ref.source_ref)

        ref = self.loader.find_transcript(ticker)
        if ref is None:
            logger.info("No documents for %s", ticker)
            return None
        return build_fallback_summary(ticker, self.loader.read(ref), source_ref=ref.source_ref)

    def _safe_report(self, ticker: str) -> SummaryReport | None:
        try:
            return self.build_report(ticker)
        except Exception:
            logger.exception("Failed to build report for %s", ticker)
            return None

    def collect_reports(self, tickers: Sequence[str]) -> list[SummaryReport]:
        """Build reports concurrently, returned in ``tickers`` order."""
        if not tickers:
            return []
        workers = max(1, min(self.max_workers, len(tickers)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            reports = list(executor.map(self._safe_report, tickers))
        return [r for r in reports if r is not None]

    def _load_units(self, ticker: str) -> list[CandidateUnit]:
        units: list[CandidateUnit] = []
        try:
            for ref in self.loader.find_documents(ticker):
                units.extend(extract_units(ref, self.loader.read(ref), self.raw_fallback_chars))
        except Exception:
            logger.exception("Failed to load candidate units for %s", ticker)
            return []
        return units

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------

    def no_content_hint(self) -> str:
        return (
            "No content found for selected sources. Please select tickers present in "
            f"{self.loader.parsed_dir.as_posix()} or {self.loader.transcripts_dir.as_posix()}."
        )

    def answer(self, query: ChatQuery) -> ChatResponse:
        """Answer a chat query from the selected tickers' documents.

        Args:
            query: Validated query; tickers are normalized and capped here.

        Returns:
            A ``ChatResponse``. ``mode`` records which path produced it.
        """
        tickers = self.normalize(query.tickers)
        reports = self.collect_reports(tickers)

        if not reports:
            logger.info("No content for tickers %s", tickers)
            return ChatResponse(answer=self.no_content_hint(), tickers=tickers, mode=AnswerMode.NO_CONTENT)

        sections = [r.rendered_text for r in reports]
        report_intent = has_report_intent(query.message)

        if self.oracle.available:
            base = "\n\n".join(sections)
            context = base
            if not report_intent:
                lines = [ln.strip() for ln in base.split("\n") if ln.strip()]
                ranked = rank_context_lines(query.message, lines)
                if len(ranked) >= MIN_CONTEXT_LINES:
                    context = "\n".join(ranked)

            result = self.oracle.generate(
                CHAT_SYSTEM_PROMPT,
                build_chat_prompt(query.message, context, summary_intent=report_intent),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
            if result.ok:
                logger.info("Generated answer for %d tickers (%s)", len(reports), self.oracle.model)
                return ChatResponse(
                    answer=result.text,
                    tickers=tickers,
                    mode=AnswerMode.GENERATED,
                    model=self.oracle.model,
                )
            logger.warning("Generation %s (%s), using deterministic answer", result.status, result.detail)

        if not report_intent:
            top = rank_lines(query.message, answer_lines("\n".join(sections)), self.focus_terms)
            if top:
                header = f"{', '.join(tickers)} — answer"
                answer = "\n".join([header, *(f"{BULLET}{line}" for line in top)])
                return ChatResponse(answer=answer, tickers=tickers, mode=AnswerMode.RANKED_LINES)

        return ChatResponse(answer="\n\n".join(sections), tickers=tickers, mode=AnswerMode.DETERMINISTIC)

    def find_excerpts(self, query: ChatQuery, limit: int = MAX_EXCERPTS) -> list[Excerpt]:
        """Best-matching sentences from the tickers' candidate units."""
        tickers = self.normalize(query.tickers)
        if not tickers:
            return []
        workers = max(1, min(self.max_workers, len(tickers)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            per_ticker = list(executor.map(self._load_units, tickers))
        units = [u for batch in per_ticker for u in batch]

        keywords = load_focus_keywords(query.message, self.instruct_dir, self.loader.store)
        return select_excerpts(query.message, units, extra_tokens=keywords, limit=limit)
