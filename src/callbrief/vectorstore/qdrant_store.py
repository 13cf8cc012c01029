"""Qdrant vector store — hosted or local index of earnings passages.

Requires the ``qdrant`` extra. Ticker filters map to ``MatchAny`` so a
request over several tickers is one query.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from callbrief.vectorstore.base import VectorStore
from callbrief.vectorstore.schemas import MatchMetadata, MetadataFilter, SearchResult, VectorRecord

logger = logging.getLogger(__name__)


class QdrantStore(VectorStore):
    """Qdrant-backed vector store."""

    def __init__(
        self,
        collection_name: str = "earnings-q2-2025",
        dimension: int = 1536,
        url: str | None = None,
        api_key: str | None = None,
        path: str | None = None,
    ):
        try:
            from qdrant_client import QdrantClient, models
        except ImportError as exc:
            raise ImportError("qdrant-client required: pip install callbrief[qdrant]") from exc

        self._models = models
        self._collection_name = collection_name
        self._dimension = dimension

        if url:
            self._client = QdrantClient(url=url, api_key=api_key)
        elif path:
            self._client = QdrantClient(path=path)
        else:
            self._client = QdrantClient(":memory:")

        if not self._client.collection_exists(collection_name):
            self._create_collection()

    def _create_collection(self) -> None:
        self._client.create_collection(
            collection_name=self._collection_name,
            vectors_config=self._models.VectorParams(
                size=self._dimension,
                distance=self._models.Distance.COSINE,
            ),
        )
        logger.info("Created Qdrant collection '%s' (dim=%d)", self._collection_name, self._dimension)

    def add(self, records: list[VectorRecord]) -> int:
        if not records:
            return 0

        points = []
        for record in records:
            payload = record.metadata.to_payload()
            payload["text"] = record.text
            payload["record_id"] = record.id
            points.append(self._models.PointStruct(
                # Qdrant ids must be ints or UUIDs
                id=str(uuid.uuid5(uuid.NAMESPACE_URL, record.id)),
                vector=record.embedding,
                payload=payload,
            ))

        self._client.upsert(collection_name=self._collection_name, points=points)
        logger.info("QdrantStore added %d records", len(records))
        return len(records)

    def _build_filter(self, metadata_filter: MetadataFilter | None) -> Any:
        if metadata_filter is None:
            return None
        conditions = []
        for key, value in metadata_filter.to_dict().items():
            match = (
                self._models.MatchAny(any=value)
                if isinstance(value, list)
                else self._models.MatchValue(value=value)
            )
            conditions.append(self._models.FieldCondition(key=key, match=match))
        return self._models.Filter(must=conditions) if conditions else None

    def search(
        self,
        query_embedding: list[float],
        top_k: int = 10,
        metadata_filter: MetadataFilter | None = None,
    ) -> list[SearchResult]:
        response = self._client.query_points(
            collection_name=self._collection_name,
            query=query_embedding,
            limit=top_k,
            query_filter=self._build_filter(metadata_filter),
            with_payload=True,
        )

        results: list[SearchResult] = []
        for point in response.points:
            payload = point.payload or {}
            results.append(SearchResult(
                id=str(payload.get("record_id", point.id)),
                text=payload.get("text", ""),
                score=point.score if point.score is not None else 0.0,
                metadata=MatchMetadata.from_payload(payload),
            ))
        return results

    def count(self) -> int:
        return self._client.count(collection_name=self._collection_name).count

    def clear(self) -> None:
        self._client.delete_collection(self._collection_name)
        self._create_collection()
