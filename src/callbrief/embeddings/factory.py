"""Embedding provider factory."""

from __future__ import annotations

from collections.abc import Mapping

from callbrief.config import PROVIDER_SECRETS, EmbeddingSettings, get_secret
from callbrief.embeddings.base import EmbeddingProvider
from callbrief.errors import OracleConfigurationError
from callbrief.registry import ProviderRegistry

_PROVIDERS: ProviderRegistry[EmbeddingProvider] = ProviderRegistry(
    "embedding provider",
    [
        ("openai", "callbrief.embeddings.openai_provider", "OpenAIEmbeddingProvider"),
        ("ollama", "callbrief.embeddings.ollama_provider", "OllamaEmbeddingProvider"),
    ],
)


def get_embedding_provider(provider: str = "openai", **kwargs) -> EmbeddingProvider:
    """Get an embedding provider by name (``openai`` or ``ollama``)."""
    return _PROVIDERS.get(provider, **kwargs)


def available_providers() -> list[str]:
    """Return names of registered embedding providers."""
    return _PROVIDERS.available()


def clear_cache() -> None:
    """Clear singleton cache (for testing)."""
    _PROVIDERS.clear_cache()


def embedding_from_settings(
    settings: EmbeddingSettings,
    secrets: Mapping[str, str] | None = None,
) -> EmbeddingProvider:
    """Build the configured embedding provider.

    Raises:
        OracleConfigurationError: If the provider's API key is missing.
    """
    key = settings.provider.lower()
    kwargs: dict = {"model": settings.model}
    if key == "ollama":
        kwargs["dimension"] = settings.dimension

    secret_name = PROVIDER_SECRETS.get(key)
    if secret_name:
        api_key = get_secret(secret_name, secrets)
        if api_key is None:
            raise OracleConfigurationError(f"Missing API key. Please set {secret_name}.")
        kwargs["api_key"] = api_key
    return get_embedding_provider(key, **kwargs)
