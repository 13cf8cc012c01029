"""FAISS vector store — local index over ingested earnings passages.

Inner-product search over L2-normalized vectors (cosine similarity), with a
parallel record dict for metadata filtering.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

import numpy as np

from callbrief.vectorstore.base import VectorStore
from callbrief.vectorstore.schemas import MatchMetadata, MetadataFilter, SearchResult, VectorRecord

logger = logging.getLogger(__name__)

INDEX_FILE = "index.faiss"
RECORDS_FILE = "records.json"


class FAISSStore(VectorStore):
    """FAISS-backed vector store with metadata filtering."""

    def __init__(self, dimension: int = 1536):
        try:
            import faiss
        except ImportError as exc:
            raise ImportError("faiss-cpu required: pip install callbrief[faiss]") from exc

        self._faiss = faiss
        self._dimension = dimension
        self._index = faiss.IndexFlatIP(dimension)
        self._records: list[tuple[str, str, MatchMetadata]] = []  # position -> (id, text, meta)

    def add(self, records: list[VectorRecord]) -> int:
        if not records:
            return 0

        vectors = np.array([r.embedding for r in records], dtype=np.float32)
        self._faiss.normalize_L2(vectors)
        self._index.add(vectors)
        self._records.extend((r.id, r.text, r.metadata) for r in records)

        logger.info("FAISSStore added %d records (total: %d)", len(records), self.count())
        return len(records)

    def search(
        self,
        query_embedding: list[float],
        top_k: int = 10,
        metadata_filter: MetadataFilter | None = None,
    ) -> list[SearchResult]:
        if self._index.ntotal == 0:
            return []

        query_vec = np.array([query_embedding], dtype=np.float32)
        self._faiss.normalize_L2(query_vec)

        # Over-fetch when filtering so enough hits survive the filter
        fetch_k = top_k * 4 if metadata_filter else top_k
        fetch_k = min(fetch_k, self._index.ntotal)
        scores, indices = self._index.search(query_vec, fetch_k)

        results: list[SearchResult] = []
        for score, idx in zip(scores[0], indices[0], strict=True):
            if idx < 0 or idx >= len(self._records):
                continue
            record_id, text, meta = self._records[int(idx)]
            if metadata_filter and not metadata_filter.matches(meta):
                continue
            results.append(SearchResult(id=record_id, text=text, score=float(score), metadata=meta))
            if len(results) >= top_k:
                break
        return results

    def count(self) -> int:
        return self._index.ntotal

    def clear(self) -> None:
        self._index = self._faiss.IndexFlatIP(self._dimension)
        self._records.clear()

    def save(self, path: str) -> None:
        """Write the index and its records to a directory."""
        p = Path(path)
        p.mkdir(parents=True, exist_ok=True)
        self._faiss.write_index(self._index, str(p / INDEX_FILE))

        payload = [
            {"id": record_id, "text": text, "metadata": meta.to_payload()}
            for record_id, text, meta in self._records
        ]
        with open(p / RECORDS_FILE, "w", encoding="utf-8") as fh:
            json.dump(payload, fh)
        logger.info("FAISSStore saved to %s (%d records)", path, self.count())

    def load(self, path: str) -> None:
        """Replace the store contents with a directory written by ``save``."""
        p = Path(path)
        self._index = self._faiss.read_index(str(p / INDEX_FILE))
        with open(p / RECORDS_FILE, encoding="utf-8") as fh:
            payload = json.load(fh)
        self._records = [
            (item["id"], item["text"], MatchMetadata.from_payload(item.get("metadata", {})))
            for item in payload
        ]
        logger.info("FAISSStore loaded from %s (%d records)", path, self.count())
