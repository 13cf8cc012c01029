"""Vector store backends — FAISS (local) and Qdrant (hosted)."""

from callbrief.vectorstore.base import VectorStore
from callbrief.vectorstore.factory import available_stores, get_vector_store
from callbrief.vectorstore.schemas import MatchMetadata, MetadataFilter, SearchResult, VectorRecord

__all__ = [
    "MatchMetadata",
    "MetadataFilter",
    "SearchResult",
    "VectorRecord",
    "VectorStore",
    "available_stores",
    "get_vector_store",
]
