"""Generation oracle — wraps an LLM provider and reports failure as data.

``GenerationOracle.generate`` never raises. Callers inspect the returned
``GenerationResult`` and choose their own fallback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum

from callbrief.llm.base import LLMProvider

logger = logging.getLogger(__name__)

EMPTY_RESPONSE = "empty response"


class GenerationStatus(StrEnum):
    SUCCESS = "success"
    UNAVAILABLE = "unavailable"
    ERROR = "error"


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of one generation call."""

    status: GenerationStatus
    text: str = ""
    detail: str = ""

    @classmethod
    def success(cls, text: str) -> GenerationResult:
        return cls(GenerationStatus.SUCCESS, text=text)

    @classmethod
    def unavailable(cls, detail: str = "no LLM provider configured") -> GenerationResult:
        return cls(GenerationStatus.UNAVAILABLE, detail=detail)

    @classmethod
    def error(cls, detail: str) -> GenerationResult:
        return cls(GenerationStatus.ERROR, detail=detail)

    @property
    def ok(self) -> bool:
        return self.status is GenerationStatus.SUCCESS

    @property
    def empty(self) -> bool:
        """The provider answered, but with no text."""
        return self.status is GenerationStatus.ERROR and self.detail == EMPTY_RESPONSE


class GenerationOracle:
    """Black-box text generation given a system and a user prompt."""

    def __init__(self, provider: LLMProvider | None):
        self.provider = provider

    @property
    def available(self) -> bool:
        return self.provider is not None

    @property
    def model(self) -> str:
        return getattr(self.provider, "model", "none") if self.provider else "none"

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> GenerationResult:
        if self.provider is None:
            return GenerationResult.unavailable()

        try:
            text = self.provider.generate(
                user_prompt,
                system=system_prompt,
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except Exception as exc:  # any provider or transport failure
            logger.warning("Generation failed (%s): %s", self.model, exc)
            return GenerationResult.error(f"{type(exc).__name__}: {exc}")

        if not text or not text.strip():
            logger.warning("Generation returned empty text (%s)", self.model)
            return GenerationResult.error(EMPTY_RESPONSE)
        return GenerationResult.success(text)
