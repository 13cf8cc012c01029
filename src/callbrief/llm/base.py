"""Abstract base class for LLM providers."""

from __future__ import annotations

from abc import ABC, abstractmethod


class LLMProvider(ABC):
    """Interface for LLM text generation."""

    model: str = "unknown"

    @abstractmethod
    def generate(
        self,
        prompt: str,
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """Generate a completion.

        Args:
            prompt: The user prompt.
            system: Optional system prompt.
            max_tokens: Per-call override of the provider's token cap.
            temperature: Per-call override of the provider's temperature.

        Returns:
            Generated text (may be empty).
        """

    @classmethod
    def provider_name(cls) -> str:
        """Return human-readable provider name."""
        return cls.__name__
