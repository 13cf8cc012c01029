"""Provider registry — lazy import by key with a singleton cache.

Shared by the LLM, embedding and vector store factories. Backends are only
imported when requested, so optional SDKs stay optional.
"""

from __future__ import annotations

import importlib
import logging
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProviderRegistry(Generic[T]):
    """Registry of ``(key, module_path, class_name)`` backends."""

    def __init__(self, kind: str, entries: list[tuple[str, str, str]]):
        self.kind = kind
        self._entries = entries
        self._cache: dict[str, T] = {}

    def get(self, provider: str, **kwargs) -> T:
        """Instantiate (or reuse) a backend.

        Instances built without kwargs are cached per key; any kwargs
        bypass the cache.

        Raises:
            ValueError: If ``provider`` is not registered.
        """
        key = provider.lower()

        if not kwargs and key in self._cache:
            return self._cache[key]

        for reg_key, module_path, cls_name in self._entries:
            if reg_key == key:
                mod = importlib.import_module(module_path)
                cls = getattr(mod, cls_name)
                instance = cls(**kwargs)
                if not kwargs:
                    self._cache[key] = instance
                logger.debug("Created %s backend '%s'", self.kind, key)
                return instance

        raise ValueError(f"Unknown {self.kind} '{provider}'. Available: {self.available()}")

    def available(self) -> list[str]:
        return [k for k, _, _ in self._entries]

    def clear_cache(self) -> None:
        self._cache.clear()
