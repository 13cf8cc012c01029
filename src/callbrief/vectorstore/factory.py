"""Vector store factory and settings-driven construction."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from callbrief.config import PROVIDER_SECRETS, VectorStoreSettings, get_secret
from callbrief.errors import OracleConfigurationError
from callbrief.registry import ProviderRegistry
from callbrief.vectorstore.base import VectorStore

_STORES: ProviderRegistry[VectorStore] = ProviderRegistry(
    "vector store",
    [
        ("faiss", "callbrief.vectorstore.faiss_store", "FAISSStore"),
        ("qdrant", "callbrief.vectorstore.qdrant_store", "QdrantStore"),
    ],
)


def get_vector_store(provider: str = "qdrant", **kwargs) -> VectorStore:
    """Get a vector store by name (``faiss`` or ``qdrant``)."""
    return _STORES.get(provider, **kwargs)


def available_stores() -> list[str]:
    """Return names of registered vector stores."""
    return _STORES.available()


def clear_cache() -> None:
    """Clear singleton cache (for testing)."""
    _STORES.clear_cache()


def vector_store_from_settings(
    settings: VectorStoreSettings,
    dimension: int,
    secrets: Mapping[str, str] | None = None,
) -> VectorStore:
    """Open the configured search index.

    Qdrant needs a ``url`` (with ``QDRANT_API_KEY`` when the server wants
    one) or a local ``path``; FAISS needs the ``path`` of a saved index.

    Raises:
        OracleConfigurationError: If no index location is configured.
    """
    key = settings.backend.lower()
    if key == "faiss":
        if not settings.path or not Path(settings.path).exists():
            raise OracleConfigurationError(
                "FAISS index not found. Run `callbrief ingest --store faiss --save PATH` "
                "and set vectorstore.path."
            )
        store = get_vector_store("faiss", dimension=dimension)
        store.load(settings.path)
        return store

    if not settings.url and not settings.path:
        raise OracleConfigurationError("Vector store not configured. Set vectorstore.url or vectorstore.path.")
    return get_vector_store(
        key,
        collection_name=settings.collection,
        dimension=dimension,
        url=settings.url,
        api_key=get_secret(PROVIDER_SECRETS["qdrant"], secrets),
        path=settings.path,
    )
