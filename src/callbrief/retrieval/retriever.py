"""Retriever — embed query, search the vector store, apply our own score floor."""

from __future__ import annotations

import logging

from callbrief.embeddings.base import EmbeddingProvider
from callbrief.retrieval.schemas import RetrievalConfig, RetrievalMatch, RetrievalResult
from callbrief.vectorstore.base import VectorStore

logger = logging.getLogger(__name__)


class Retriever:
    """Orchestrates embedding → search → threshold → cap."""

    def __init__(self, embedding_provider: EmbeddingProvider, vector_store: VectorStore):
        self.embedding_provider = embedding_provider
        self.vector_store = vector_store

    def retrieve(self, query: str, config: RetrievalConfig | None = None) -> RetrievalResult:
        """Run a retrieval for ``query``.

        The store's results are not trusted to be filtered or ordered:
        hits at or below ``min_score`` are dropped, the rest sorted by
        score (highest first) and cut to ``max_results``.

        Args:
            query: The search query.
            config: Retrieval settings (top_k, threshold, cap, filter).

        Returns:
            A ``RetrievalResult``; ``total_candidates`` counts raw hits.
        """
        cfg = config or RetrievalConfig()

        query_embedding = self.embedding_provider.embed_query(query)
        raw_results = self.vector_store.search(
            query_embedding=query_embedding,
            top_k=cfg.top_k,
            metadata_filter=cfg.metadata_filter,
        )

        kept = [r for r in raw_results if r.score is not None and r.score > cfg.min_score]
        kept.sort(key=lambda r: r.score, reverse=True)
        matches = [RetrievalMatch.from_search_result(r) for r in kept[: cfg.max_results]]

        logger.info(
            "Retrieved %d matches (candidates=%d, min_score=%.2f)",
            len(matches), len(raw_results), cfg.min_score,
        )
        return RetrievalResult(query=query, matches=matches, total_candidates=len(raw_results))
