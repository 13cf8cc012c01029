"""Research pipeline — question → vector retrieval → grounded answer.

Unlike the chat pipeline there is no deterministic fallback: both oracles
must be configured, and failures surface as ``OracleConfigurationError``
or ``OracleError``. A completion with no text is answered with a fixed
placeholder rather than treated as a failure.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from callbrief.config import Settings
from callbrief.documents.tickers import normalize_tickers
from callbrief.embeddings.factory import embedding_from_settings
from callbrief.errors import OracleConfigurationError, OracleError
from callbrief.llm.factory import llm_from_settings
from callbrief.llm.oracle import GenerationOracle, GenerationStatus
from callbrief.pipeline.formatting import (
    format_match_context,
    strip_markdown,
    unique_in_order,
    with_sources,
)
from callbrief.pipeline.prompts import RESEARCH_USER_TEMPLATE, research_system_prompt
from callbrief.pipeline.schemas import ChatQuery, ResearchResponse
from callbrief.retrieval.retriever import Retriever
from callbrief.retrieval.schemas import RetrievalConfig
from callbrief.vectorstore.factory import vector_store_from_settings
from callbrief.vectorstore.schemas import MetadataFilter

logger = logging.getLogger(__name__)

NO_MATCHES_ANSWER = "No relevant information found in the selected sources."
NO_CONFIDENT_MATCHES_ANSWER = "No high-confidence matches found for your query."
EMPTY_GENERATION_ANSWER = "Unable to generate response."
MISSING_KEYS_MESSAGE = (
    "Missing API keys. Please set OPENAI_API_KEY and configure the vector store "
    "(vectorstore.url or vectorstore.path)."
)


class ResearchPipeline:
    """Orchestrates retrieve → prompt → generate → strip → cite sources."""

    def __init__(
        self,
        retriever: Retriever | None,
        oracle: GenerationOracle,
        config: RetrievalConfig | None = None,
        max_tokens: int = 3000,
        temperature: float = 0.1,
    ):
        self.retriever = retriever
        self.oracle = oracle
        self.config = config or RetrievalConfig()
        self.max_tokens = max_tokens
        self.temperature = temperature

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        secrets: Mapping[str, str] | None = None,
    ) -> ResearchPipeline:
        """Wire a pipeline from settings.

        Missing credentials leave the pipeline unconfigured; ``answer`` then
        raises ``OracleConfigurationError`` on every call.
        """
        retriever = None
        try:
            embedder = embedding_from_settings(settings.embedding, secrets)
            store = vector_store_from_settings(settings.vectorstore, settings.embedding.dimension, secrets)
            retriever = Retriever(embedding_provider=embedder, vector_store=store)
        except OracleConfigurationError as exc:
            logger.warning("Retrieval unavailable: %s", exc)

        r = settings.retrieval
        return cls(
            retriever=retriever,
            oracle=GenerationOracle(llm_from_settings(settings.llm, secrets)),
            config=RetrievalConfig(top_k=r.top_k, min_score=r.min_score, max_results=r.max_results),
        )

    def answer(self, query: ChatQuery) -> ResearchResponse:
        """Answer ``query`` from the passages retrieved for it.

        Raises:
            OracleConfigurationError: Retrieval or generation is not configured.
            OracleError: An oracle call failed.
        """
        if self.retriever is None or not self.oracle.available:
            raise OracleConfigurationError(MISSING_KEYS_MESSAGE)

        tickers = normalize_tickers(query.tickers)
        config = RetrievalConfig(
            top_k=query.top_k or self.config.top_k,
            min_score=self.config.min_score,
            max_results=self.config.max_results,
            metadata_filter=MetadataFilter(tickers=tickers) if tickers else None,
        )

        try:
            result = self.retriever.retrieve(query.message, config)
        except Exception as exc:
            logger.exception("Retrieval failed")
            raise OracleError(str(exc)) from exc

        if result.total_candidates == 0:
            return ResearchResponse(answer=NO_MATCHES_ANSWER)
        if not result.matches:
            return ResearchResponse(answer=NO_CONFIDENT_MATCHES_ANSWER)

        generation = self.oracle.generate(
            research_system_prompt(query.detail_level),
            RESEARCH_USER_TEMPLATE.format(
                question=query.message,
                context=format_match_context(result.matches),
            ),
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )
        if generation.status is GenerationStatus.UNAVAILABLE:
            raise OracleConfigurationError(MISSING_KEYS_MESSAGE)
        if generation.empty:
            answer = EMPTY_GENERATION_ANSWER
        elif generation.ok:
            answer = strip_markdown(generation.text)
        else:
            raise OracleError(generation.detail)

        sources = unique_in_order(m.ticker for m in result.matches)
        logger.info(
            "Research answer: %d matches, sources=%s, top score %.3f",
            len(result.matches), sources, result.top_score,
        )
        return ResearchResponse(
            answer=with_sources(answer, sources),
            sources=sources,
            matches=len(result.matches),
            top_score=result.top_score,
        )
