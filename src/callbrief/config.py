"""Application settings loaded from YAML with environment variable overrides."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Settings sections
# ---------------------------------------------------------------------------


class DocumentSettings(BaseModel):
    transcripts_dir: str = "software/transcripts"
    parsed_dir: str = "software/output"
    instruct_dir: str = "instruct-pairs"
    max_files_per_ticker: int = 4
    ticker_aliases: dict[str, str] = Field(default_factory=lambda: {"bze": "brze"})


class LimitSettings(BaseModel):
    max_tickers: int = 40
    max_workers: int = 8
    raw_fallback_chars: int = 4000


class LLMSettings(BaseModel):
    provider: str = "openai"
    model: str = "gpt-4o-mini"
    temperature: float = 0.2
    max_tokens: int = 1100


class EmbeddingSettings(BaseModel):
    provider: str = "openai"
    model: str = "text-embedding-ada-002"
    dimension: int = 1536


class VectorStoreSettings(BaseModel):
    backend: str = "qdrant"
    collection: str = "earnings-q2-2025"
    url: str | None = None
    path: str | None = None


class RetrievalSettings(BaseModel):
    top_k: int = 25
    min_score: float = 0.55
    max_results: int = 12


class SuggestSettings(BaseModel):
    top_k: int = 12
    min_score: float = 0.7
    probe_count: int = 6
    max_context: int = 30


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseModel):
    documents: DocumentSettings = Field(default_factory=DocumentSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)
    llm: LLMSettings = Field(default_factory=LLMSettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    vectorstore: VectorStoreSettings = Field(default_factory=VectorStoreSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    suggest: SuggestSettings = Field(default_factory=SuggestSettings)


def _find_settings_file() -> Path | None:
    """Walk up from cwd looking for settings.yaml."""
    profile = os.getenv("CALLBRIEF_PROFILE", "")
    names = [f"settings-{profile}.yaml", "settings.yaml"] if profile else ["settings.yaml"]

    cwd = Path.cwd()
    for parent in [cwd, *cwd.parents]:
        for name in names:
            candidate = parent / name
            if candidate.exists():
                return candidate
    return None


def load_settings() -> Settings:
    """Load settings from YAML file, falling back to defaults.

    ``CALLBRIEF_TRANSCRIPTS_DIR`` and ``CALLBRIEF_PARSED_DIR`` override the
    document roots after the file is read.
    """
    path = _find_settings_file()
    raw: dict = {}
    if path is not None:
        with open(path, encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

    settings = Settings(**raw)

    transcripts = os.getenv("CALLBRIEF_TRANSCRIPTS_DIR")
    if transcripts:
        settings.documents.transcripts_dir = transcripts
    parsed = os.getenv("CALLBRIEF_PARSED_DIR")
    if parsed:
        settings.documents.parsed_dir = parsed
    return settings


# ---------------------------------------------------------------------------
# Secrets
# ---------------------------------------------------------------------------

# Secret names each oracle provider needs before it can be constructed.
PROVIDER_SECRETS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "qdrant": "QDRANT_API_KEY",
}


def get_secret(name: str, source: Mapping[str, str] | None = None) -> str | None:
    """Look up a credential; blank values count as missing.

    Args:
        name: Secret name, e.g. ``OPENAI_API_KEY``.
        source: Key-value secret source. Defaults to the process environment.

    Returns:
        The secret, or ``None`` when absent.
    """
    src = os.environ if source is None else source
    value = src.get(name)
    if value is None or not str(value).strip():
        return None
    return str(value).strip()
