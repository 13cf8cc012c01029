"""Ingestion pipeline — ticker → documents → candidate units → embed → store.

Builds the passage index the research and suggestion pipelines search.
"""

from __future__ import annotations

import json
import logging

from callbrief.documents.loader import DocumentLoader
from callbrief.documents.schemas import DocumentKind, DocumentRef
from callbrief.embeddings.base import EmbeddingProvider
from callbrief.extraction.facts import RAW_FALLBACK_CHARS, extract_units
from callbrief.pipeline.schemas import IngestResult
from callbrief.vectorstore.base import VectorStore
from callbrief.vectorstore.schemas import MatchMetadata, VectorRecord

logger = logging.getLogger(__name__)

SECTION_BY_KIND = {
    DocumentKind.STRUCTURED: "facts",
    DocumentKind.RAW_TEXT: "transcript",
}


def document_metadata(ref: DocumentRef, content: str, category: str | None = None) -> MatchMetadata:
    """Metadata for every passage of one document.

    Parsed documents may name the company and call date at top level.
    """
    company = None
    call_date = None
    if ref.kind is DocumentKind.STRUCTURED:
        try:
            parsed = json.loads(content)
        except ValueError:
            parsed = None
        if isinstance(parsed, dict):
            company = parsed.get("company") or parsed.get("company_name")
            call_date = parsed.get("call_date")

    return MatchMetadata(
        ticker=ref.ticker,
        company=str(company) if company else ref.ticker,
        section=SECTION_BY_KIND[ref.kind],
        category=category,
        call_date=str(call_date) if call_date else None,
        source_filename=ref.path.name,
    )


class IngestPipeline:
    """Orchestrates ingestion: find → extract → embed → store."""

    def __init__(
        self,
        loader: DocumentLoader,
        embedding_provider: EmbeddingProvider,
        vector_store: VectorStore,
        batch_size: int = 32,
        raw_fallback_chars: int = RAW_FALLBACK_CHARS,
    ):
        self.loader = loader
        self.embedding_provider = embedding_provider
        self.vector_store = vector_store
        self.batch_size = batch_size
        self.raw_fallback_chars = raw_fallback_chars

    def ingest_ticker(self, ticker: str, category: str | None = None) -> IngestResult:
        """Index every candidate unit of one ticker's documents.

        Args:
            ticker: Raw ticker symbol; normalized before lookup.
            category: Business category stored with each passage
                (e.g. ``ad-tech``), used by question suggestions.

        Returns:
            An ``IngestResult`` with counts and warnings.
        """
        t = self.loader.normalize(ticker)
        warnings: list[str] = []

        refs = self.loader.find_documents(t)
        if not refs:
            warnings.append(f"No documents found for {t}")
            return IngestResult(ticker=t, units_found=0, units_embedded=0, units_stored=0, warnings=warnings)

        texts: list[str] = []
        metas: list[MatchMetadata] = []
        ids: list[str] = []
        for ref in refs:
            content = self.loader.read(ref)
            units = extract_units(ref, content, self.raw_fallback_chars)
            if not units:
                warnings.append(f"{ref.path.name}: no extractable text")
                continue
            meta = document_metadata(ref, content, category)
            for i, unit in enumerate(units):
                texts.append(unit.text)
                metas.append(meta)
                ids.append(f"{ref.source_ref}#{i}")

        if not texts:
            return IngestResult(ticker=t, units_found=0, units_embedded=0, units_stored=0, warnings=warnings)

        # Embed in batches
        embeddings: list[list[float]] = []
        for i in range(0, len(texts), self.batch_size):
            embeddings.extend(self.embedding_provider.embed_texts(texts[i : i + self.batch_size]))

        records = [
            VectorRecord(id=record_id, text=text, embedding=emb, metadata=meta)
            for record_id, text, emb, meta in zip(ids, texts, embeddings, metas, strict=True)
        ]
        stored = self.vector_store.add(records)

        logger.info(
            "Ingested %s: %d documents, %d units → %d embedded → %d stored",
            t, len(refs), len(texts), len(embeddings), stored,
        )
        return IngestResult(
            ticker=t,
            units_found=len(texts),
            units_embedded=len(embeddings),
            units_stored=stored,
            warnings=warnings,
        )
