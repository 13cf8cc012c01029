"""Embedding providers — OpenAI, Ollama."""

from callbrief.embeddings.base import EmbeddingProvider
from callbrief.embeddings.factory import available_providers, get_embedding_provider

__all__ = ["EmbeddingProvider", "available_providers", "get_embedding_provider"]
