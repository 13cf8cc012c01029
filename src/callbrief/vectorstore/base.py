"""Vector store interface — the retrieval oracle's search index."""

from __future__ import annotations

from abc import ABC, abstractmethod

from callbrief.vectorstore.schemas import MetadataFilter, SearchResult, VectorRecord


class VectorStore(ABC):
    """Nearest-neighbour index over embedded earnings-call passages."""

    @abstractmethod
    def add(self, records: list[VectorRecord]) -> int:
        """Index passages; returns how many were written."""

    @abstractmethod
    def search(
        self,
        query_embedding: list[float],
        top_k: int = 10,
        metadata_filter: MetadataFilter | None = None,
    ) -> list[SearchResult]:
        """Return up to ``top_k`` passages nearest to ``query_embedding``.

        Backends may return hits of any score and in any order;
        ``Retriever`` applies the threshold and ordering itself.
        """

    @abstractmethod
    def count(self) -> int:
        """Number of indexed passages."""

    @abstractmethod
    def clear(self) -> None:
        """Drop every indexed passage."""

    def save(self, path: str) -> None:
        raise NotImplementedError(f"{self.store_name()} cannot be saved to a directory")

    def load(self, path: str) -> None:
        raise NotImplementedError(f"{self.store_name()} cannot be loaded from a directory")

    @classmethod
    def store_name(cls) -> str:
        return cls.__name__
