"""OpenAI embedding provider.

Requires the ``openai`` extra and an API key, passed explicitly or via
``OPENAI_API_KEY``.
"""

from __future__ import annotations

import logging
from typing import Any

from callbrief.embeddings.base import EmbeddingProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "text-embedding-ada-002"

_DIMENSION_MAP = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}

BATCH_SIZE = 2048


class OpenAIEmbeddingProvider(EmbeddingProvider):
    """Embed text via the OpenAI Embeddings API."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        api_key: str | None = None,
        dimensions: int | None = None,
    ):
        try:
            import openai
        except ImportError as exc:
            raise ImportError("openai package required: pip install callbrief[openai]") from exc

        self.model = model
        self._dimensions = dimensions or _DIMENSION_MAP.get(model, 1536)
        self._client: Any = openai.OpenAI(api_key=api_key)

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []

        vectors: list[list[float]] = []
        for start in range(0, len(texts), BATCH_SIZE):
            resp = self._client.embeddings.create(
                model=self.model,
                input=texts[start : start + BATCH_SIZE],
            )
            vectors.extend(d.embedding for d in sorted(resp.data, key=lambda d: d.index))
        logger.debug("Embedded %d texts with %s", len(texts), self.model)
        return vectors

    def embed_query(self, query: str) -> list[float]:
        resp = self._client.embeddings.create(model=self.model, input=query)
        return resp.data[0].embedding

    @property
    def dimension(self) -> int:
        return self._dimensions
