"""LLM provider factory and settings-driven construction."""

from __future__ import annotations

import logging
from collections.abc import Mapping

from callbrief.config import PROVIDER_SECRETS, LLMSettings, get_secret
from callbrief.llm.base import LLMProvider
from callbrief.registry import ProviderRegistry

logger = logging.getLogger(__name__)

_PROVIDERS: ProviderRegistry[LLMProvider] = ProviderRegistry(
    "LLM provider",
    [
        ("openai", "callbrief.llm.openai_provider", "OpenAILLMProvider"),
        ("anthropic", "callbrief.llm.anthropic_provider", "AnthropicLLMProvider"),
        ("ollama", "callbrief.llm.ollama_provider", "OllamaLLMProvider"),
    ],
)


def get_llm_provider(provider: str = "openai", **kwargs) -> LLMProvider:
    """Get an LLM provider by name (``openai``, ``anthropic`` or ``ollama``)."""
    return _PROVIDERS.get(provider, **kwargs)


def available_providers() -> list[str]:
    """Return names of registered LLM providers."""
    return _PROVIDERS.available()


def clear_cache() -> None:
    """Clear singleton cache (for testing)."""
    _PROVIDERS.clear_cache()


def llm_from_settings(
    settings: LLMSettings,
    secrets: Mapping[str, str] | None = None,
) -> LLMProvider | None:
    """Build the configured provider, or ``None`` when it cannot be used.

    A missing API key or a missing SDK makes the provider unavailable
    rather than failing; callers fall back to deterministic output.
    """
    key = settings.provider.lower()
    kwargs: dict = {
        "model": settings.model,
        "max_tokens": settings.max_tokens,
        "temperature": settings.temperature,
    }

    secret_name = PROVIDER_SECRETS.get(key)
    if secret_name:
        api_key = get_secret(secret_name, secrets)
        if api_key is None:
            logger.info("LLM provider '%s' unavailable: %s not set", key, secret_name)
            return None
        kwargs["api_key"] = api_key

    try:
        return get_llm_provider(key, **kwargs)
    except ImportError as exc:
        logger.warning("LLM provider '%s' unavailable: %s", key, exc)
        return None
