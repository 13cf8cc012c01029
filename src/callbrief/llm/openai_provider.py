"""OpenAI LLM provider — chat completions (gpt-4o-mini by default).

Requires the ``openai`` extra and ``OPENAI_API_KEY``.
"""

from __future__ import annotations

import logging
from typing import Any

from callbrief.llm.base import LLMProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


class OpenAILLMProvider(LLMProvider):
    """Generate responses via the OpenAI Chat API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        base_url: str | None = None,
        max_tokens: int = 1100,
        temperature: float = 0.2,
    ):
        try:
            import openai
        except ImportError as exc:
            raise ImportError("openai package required: pip install callbrief[openai]") from exc

        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

        kwargs: dict[str, Any] = {}
        if api_key:
            kwargs["api_key"] = api_key
        if base_url:
            kwargs["base_url"] = base_url
        self._client: Any = openai.OpenAI(**kwargs)

    def generate(
        self,
        prompt: str,
        system: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        response = self._client.chat.completions.create(
            model=self.model,
            messages=messages,
            max_tokens=max_tokens or self.max_tokens,
            temperature=self.temperature if temperature is None else temperature,
        )
        return response.choices[0].message.content or ""
