"""LLM providers — OpenAI, Anthropic, Ollama — and the generation oracle."""

from callbrief.llm.base import LLMProvider
from callbrief.llm.factory import available_providers, get_llm_provider, llm_from_settings
from callbrief.llm.oracle import GenerationOracle, GenerationResult, GenerationStatus

__all__ = [
    "GenerationOracle",
    "GenerationResult",
    "GenerationStatus",
    "LLMProvider",
    "available_providers",
    "get_llm_provider",
    "llm_from_settings",
]
