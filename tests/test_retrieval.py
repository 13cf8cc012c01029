"""Tests for the retrieval and generation oracle adapters — no network calls."""

from __future__ import annotations

import hashlib

import numpy as np
import pytest

from callbrief.embeddings.base import EmbeddingProvider
from callbrief.llm.base import LLMProvider
from callbrief.llm.factory import available_providers as llm_providers
from callbrief.llm.oracle import GenerationOracle, GenerationResult, GenerationStatus
from callbrief.retrieval.retriever import Retriever
from callbrief.retrieval.schemas import RetrievalConfig, RetrievalMatch, RetrievalResult
from callbrief.vectorstore.base import VectorStore
from callbrief.vectorstore.faiss_store import FAISSStore
from callbrief.vectorstore.schemas import MatchMetadata, MetadataFilter, SearchResult, VectorRecord

# ---------------------------------------------------------------------------
# Mock providers
# ---------------------------------------------------------------------------

DIM = 64


class MockEmbedder(EmbeddingProvider):
    def __init__(self, dim: int = DIM):
        self._dim = dim

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        return [self._hash_embed(t) for t in texts]

    def embed_query(self, query: str) -> list[float]:
        return self._hash_embed(query)

    @property
    def dimension(self) -> int:
        return self._dim

    def _hash_embed(self, text: str) -> list[float]:
        h = hashlib.sha256(text.encode()).digest()
        vec = np.array([h[i % len(h)] / 255.0 for i in range(self._dim)], dtype=np.float32)
        vec /= np.linalg.norm(vec)
        return vec.tolist()


class ScriptedStore(VectorStore):
    """Returns canned results in the given (unsorted) order."""

    def __init__(self, results: list[SearchResult]):
        self.results = results
        self.calls: list[tuple[int, MetadataFilter | None]] = []

    def add(self, records: list[VectorRecord]) -> int:
        return 0

    def search(self, query_embedding, top_k=10, metadata_filter=None):
        self.calls.append((top_k, metadata_filter))
        return list(self.results)

    def count(self) -> int:
        return len(self.results)

    def clear(self) -> None:
        self.results = []


class MockLLM(LLMProvider):
    def __init__(self, reply: str = "ok", error: Exception | None = None):
        self.model = "mock-llm"
        self.reply = reply
        self.error = error
        self.calls: list[dict] = []

    def generate(self, prompt, system=None, max_tokens=None, temperature=None) -> str:
        self.calls.append({
            "prompt": prompt, "system": system,
            "max_tokens": max_tokens, "temperature": temperature,
        })
        if self.error is not None:
            raise self.error
        return self.reply


def _hit(score: float, ticker: str = "BRZE", text: str = "t") -> SearchResult:
    return SearchResult(id=f"{ticker}-{score}", text=text, score=score, metadata=MatchMetadata(ticker=ticker))


# ---------------------------------------------------------------------------
# Retriever tests
# ---------------------------------------------------------------------------


class TestRetriever:
    def test_threshold_is_strict(self):
        store = ScriptedStore([_hit(0.55), _hit(0.56), _hit(0.2)])
        result = Retriever(MockEmbedder(), store).retrieve("q", RetrievalConfig(min_score=0.55))
        assert [m.score for m in result.matches] == [0.56]
        assert result.total_candidates == 3

    def test_sorted_and_capped(self):
        store = ScriptedStore([_hit(0.6), _hit(0.9), _hit(0.7), _hit(0.8)])
        result = Retriever(MockEmbedder(), store).retrieve("q", RetrievalConfig(min_score=0.5, max_results=2))
        assert [m.score for m in result.matches] == [0.9, 0.8]
        assert result.top_score == 0.9

    def test_passes_top_k_and_filter(self):
        store = ScriptedStore([])
        mf = MetadataFilter(tickers=["BRZE"])
        Retriever(MockEmbedder(), store).retrieve("q", RetrievalConfig(top_k=7, metadata_filter=mf))
        assert store.calls == [(7, mf)]

    def test_empty(self):
        result = Retriever(MockEmbedder(), ScriptedStore([])).retrieve("q")
        assert result.matches == []
        assert result.top_score is None

    def test_with_faiss(self):
        embedder = MockEmbedder()
        store = FAISSStore(dimension=DIM)
        texts = ["Revenue grew 24%", "Customers reached 2422", "Gross margin was 69%"]
        store.add([
            VectorRecord(id=f"doc-{i}", text=t, embedding=embedder.embed_texts([t])[0],
                         metadata=MatchMetadata(ticker="BRZE"))
            for i, t in enumerate(texts)
        ])
        result = Retriever(embedder, store).retrieve("Customers reached 2422", RetrievalConfig(min_score=0.99))
        assert [m.text for m in result.matches] == ["Customers reached 2422"]

    def test_match_defaults(self):
        match = RetrievalMatch.from_search_result(SearchResult(id="x", text="t", score=0.9))
        assert (match.ticker, match.company, match.section) == ("Unknown", "Unknown", "earnings")
        assert match.category == ""


# ---------------------------------------------------------------------------
# Generation oracle tests
# ---------------------------------------------------------------------------


class TestGenerationOracle:
    def test_unavailable(self):
        oracle = GenerationOracle(None)
        result = oracle.generate("sys", "user")
        assert result.status is GenerationStatus.UNAVAILABLE
        assert not oracle.available
        assert oracle.model == "none"

    def test_success_passes_overrides(self):
        llm = MockLLM("Polished")
        result = GenerationOracle(llm).generate("sys", "user", max_tokens=100, temperature=0.3)
        assert result == GenerationResult.success("Polished")
        assert result.ok
        assert llm.calls == [{"prompt": "user", "system": "sys", "max_tokens": 100, "temperature": 0.3}]

    def test_exception_is_error(self):
        result = GenerationOracle(MockLLM(error=RuntimeError("quota"))).generate("s", "u")
        assert result.status is GenerationStatus.ERROR
        assert "quota" in result.detail
        assert not result.empty

    @pytest.mark.parametrize("reply", ["", "   \n"])
    def test_empty_is_error(self, reply: str):
        result = GenerationOracle(MockLLM(reply)).generate("s", "u")
        assert result.status is GenerationStatus.ERROR
        assert result.detail == "empty response"
        assert result.empty


class TestLLMFactory:
    def test_available_providers(self):
        assert llm_providers() == ["openai", "anthropic", "ollama"]

    def test_llm_base_abstract(self):
        with pytest.raises(TypeError):
            LLMProvider()  # type: ignore[abstract]

    def test_provider_name(self):
        assert MockLLM.provider_name() == "MockLLM"


class TestRetrievalSchemas:
    def test_default_config(self):
        config = RetrievalConfig()
        assert (config.top_k, config.min_score, config.max_results) == (25, 0.55, 12)
        assert config.metadata_filter is None

    def test_result_top_score(self):
        assert RetrievalResult(query="q").top_score is None
