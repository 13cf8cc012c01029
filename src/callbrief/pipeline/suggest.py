"""Suggestion pipeline — sample the selected companies, propose questions."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor

from callbrief.config import Settings
from callbrief.documents.tickers import normalize_tickers
from callbrief.embeddings.factory import embedding_from_settings
from callbrief.errors import InvalidRequestError, OracleConfigurationError
from callbrief.llm.factory import llm_from_settings
from callbrief.llm.oracle import GenerationOracle
from callbrief.pipeline.formatting import unique_in_order
from callbrief.pipeline.prompts import (
    DEFAULT_SUGGESTIONS,
    FALLBACK_SUGGESTIONS,
    SUGGESTION_PROBES,
    build_suggestion_prompts,
)
from callbrief.pipeline.schemas import SuggestionResponse
from callbrief.retrieval.retriever import Retriever
from callbrief.retrieval.schemas import RetrievalConfig, RetrievalMatch
from callbrief.vectorstore.factory import vector_store_from_settings
from callbrief.vectorstore.schemas import MetadataFilter

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 8
MIN_GENERATED = 5
SAMPLE_CHARS = 300

_NUMBERED = re.compile(r"^\d+\.")
_NUMBER_PREFIX = re.compile(r"^\d+\.\s*")


def parse_numbered_lines(text: str) -> list[str]:
    """Questions from lines that start with ``<n>.``, numbering removed."""
    out = []
    for line in text.split("\n"):
        if not _NUMBERED.match(line):
            continue
        question = _NUMBER_PREFIX.sub("", line).strip()
        if question:
            out.append(question)
    return out


def pad_suggestions(
    questions: list[str],
    fallback: Sequence[str] = FALLBACK_SUGGESTIONS,
    limit: int = MAX_SUGGESTIONS,
) -> list[str]:
    """Top up a short list from ``fallback``, then cap at ``limit``."""
    out = list(questions)
    if len(out) < MIN_GENERATED:
        out.extend(fallback[: max(limit - len(out), 0)])
    return out[:limit]


class SuggestionPipeline:
    """Probe the index with canned queries and ask for thematic questions."""

    def __init__(
        self,
        retriever: Retriever | None,
        oracle: GenerationOracle,
        top_k: int = 12,
        min_score: float = 0.7,
        probe_count: int = 6,
        max_context: int = 30,
        max_workers: int = 6,
        probes: Sequence[str] = SUGGESTION_PROBES,
    ):
        self.retriever = retriever
        self.oracle = oracle
        self.top_k = top_k
        self.min_score = min_score
        self.probes = tuple(probes)[:probe_count]
        self.max_context = max_context
        self.max_workers = max_workers

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        secrets: Mapping[str, str] | None = None,
    ) -> SuggestionPipeline:
        retriever = None
        try:
            embedder = embedding_from_settings(settings.embedding, secrets)
            store = vector_store_from_settings(settings.vectorstore, settings.embedding.dimension, secrets)
            retriever = Retriever(embedding_provider=embedder, vector_store=store)
        except OracleConfigurationError as exc:
            logger.warning("Retrieval unavailable: %s", exc)

        s = settings.suggest
        return cls(
            retriever=retriever,
            oracle=GenerationOracle(llm_from_settings(settings.llm, secrets)),
            top_k=s.top_k,
            min_score=s.min_score,
            probe_count=s.probe_count,
            max_context=s.max_context,
            max_workers=settings.limits.max_workers,
        )

    def _probe(self, query: str, tickers: list[str]) -> list[RetrievalMatch]:
        config = RetrievalConfig(
            top_k=self.top_k,
            min_score=self.min_score,
            max_results=self.top_k,
            metadata_filter=MetadataFilter(tickers=tickers),
        )
        try:
            return self.retriever.retrieve(query, config).matches
        except Exception as exc:
            logger.warning("Probe '%s' failed: %s", query, exc)
            return []

    def sample(self, tickers: list[str]) -> list[RetrievalMatch]:
        """Run the probe queries concurrently; matches come back in probe order."""
        workers = max(1, min(self.max_workers, len(self.probes)))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            batches = list(executor.map(lambda q: self._probe(q, tickers), self.probes))
        return [m for batch in batches for m in batch]

    def suggest(self, tickers: Sequence[str]) -> SuggestionResponse:
        """Propose up to eight cross-company questions for ``tickers``.

        Raises:
            InvalidRequestError: No ticker survives normalization.
            OracleConfigurationError: Retrieval or generation is not configured.
        """
        normalized = normalize_tickers(tickers)
        if not normalized:
            raise InvalidRequestError("No sources selected")
        if self.retriever is None or not self.oracle.available:
            raise OracleConfigurationError("Missing API keys")

        contexts = self.sample(normalized)
        if not contexts:
            logger.info("No probe matches for %s, returning defaults", normalized)
            return SuggestionResponse(suggestions=list(DEFAULT_SUGGESTIONS))

        companies = unique_in_order(m.company for m in contexts)
        categories = [c for c in unique_in_order(m.category for m in contexts) if c]
        sample = "\n\n".join(
            f"{m.company}: {m.text[:SAMPLE_CHARS]}" for m in contexts[: self.max_context]
        )

        system_prompt, user_prompt = build_suggestion_prompts(companies, categories, sample)
        result = self.oracle.generate(system_prompt, user_prompt, max_tokens=800, temperature=0.3)
        if result.ok:
            questions = parse_numbered_lines(result.text)
        else:
            logger.warning("Suggestion generation %s (%s), using fallback questions", result.status, result.detail)
            questions = []

        return SuggestionResponse(
            suggestions=pad_suggestions(questions),
            companies_analyzed=len(companies),
            categories_found=categories,
            context_chunks=len(contexts),
        )
