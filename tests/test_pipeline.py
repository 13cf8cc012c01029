"""Tests for the chat, research, suggestion and ingest pipelines — fully mocked, no network."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

import numpy as np
import pytest

from callbrief.documents.loader import DocumentLoader
from callbrief.embeddings.base import EmbeddingProvider
from callbrief.errors import InvalidRequestError, OracleConfigurationError, OracleError
from callbrief.llm.base import LLMProvider
from callbrief.llm.oracle import GenerationOracle
from callbrief.pipeline.chat import ChatPipeline, has_report_intent
from callbrief.pipeline.formatting import format_match_context, strip_markdown, with_sources
from callbrief.pipeline.ingest import IngestPipeline
from callbrief.pipeline.prompts import (
    CHAT_SYSTEM_PROMPT,
    DEFAULT_SUGGESTIONS,
    FALLBACK_SUGGESTIONS,
    GENERAL_QA_TEMPLATE,
    SUMMARY_REWRITE_TEMPLATE,
    research_system_prompt,
)
from callbrief.pipeline.research import (
    EMPTY_GENERATION_ANSWER,
    NO_CONFIDENT_MATCHES_ANSWER,
    NO_MATCHES_ANSWER,
    ResearchPipeline,
)
from callbrief.pipeline.schemas import AnswerMode, ChatQuery, DetailLevel
from callbrief.pipeline.suggest import SuggestionPipeline, pad_suggestions, parse_numbered_lines
from callbrief.retrieval.retriever import Retriever
from callbrief.retrieval.schemas import RetrievalMatch
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
        self.batches: list[int] = []

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        self.batches.append(len(texts))
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


class MockLLM(LLMProvider):
    def __init__(self, reply: str = "Generated answer.", error: Exception | None = None):
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


class ScriptedStore(VectorStore):
    def __init__(self, results: list[SearchResult] | None = None, error: Exception | None = None):
        self.results = results or []
        self.error = error
        self.calls: list[tuple[int, MetadataFilter | None]] = []

    def add(self, records: list[VectorRecord]) -> int:
        return 0

    def search(self, query_embedding, top_k=10, metadata_filter=None):
        self.calls.append((top_k, metadata_filter))
        if self.error is not None:
            raise self.error
        return list(self.results)

    def count(self) -> int:
        return len(self.results)

    def clear(self) -> None:
        self.results = []


def _hit(score: float, ticker: str, company: str, text: str, category: str = "saas") -> SearchResult:
    return SearchResult(
        id=f"{ticker}-{score}",
        text=text,
        score=score,
        metadata=MatchMetadata(
            ticker=ticker, company=company, section="facts",
            category=category, call_date="2025-09-03",
        ),
    )


# ---------------------------------------------------------------------------
# Chat pipeline
# ---------------------------------------------------------------------------


class TestChatPipeline:
    def test_alias_and_deterministic_report(self, loader: DocumentLoader, brze_summary: str):
        response = ChatPipeline(loader).answer(ChatQuery("Summarize earnings", ["bze"]))
        assert response.tickers == ["BRZE"]
        assert response.mode is AnswerMode.DETERMINISTIC
        assert response.answer == brze_summary

    def test_reports_in_request_order(self, loader: DocumentLoader, brze_summary: str, ttd_summary: str):
        response = ChatPipeline(loader).answer(ChatQuery("Summarize earnings", ["ttd", "BRZE"]))
        assert response.answer == f"{ttd_summary}\n\n{brze_summary}"

    def test_no_content_hint(self, loader: DocumentLoader, doc_roots: tuple[Path, Path]):
        transcripts, parsed = doc_roots
        response = ChatPipeline(loader).answer(ChatQuery("Summarize", ["zzz"]))
        assert response.mode is AnswerMode.NO_CONTENT
        assert response.answer == (
            "No content found for selected sources. Please select tickers present in "
            f"{parsed.as_posix()} or {transcripts.as_posix()}."
        )

    def test_ticker_without_documents_is_left_out(self, loader: DocumentLoader, brze_summary: str):
        response = ChatPipeline(loader).answer(ChatQuery("Summarize earnings", ["zzz", "BRZE"]))
        assert response.mode is AnswerMode.DETERMINISTIC
        assert response.answer == brze_summary

    def test_ranked_lines_answer(self, loader: DocumentLoader):
        response = ChatPipeline(loader).answer(ChatQuery("What did they say about customers?", ["BRZE"]))
        assert response.mode is AnswerMode.RANKED_LINES
        assert response.answer == "BRZE — answer\n- - Customers: 2422"

    def test_no_overlap_returns_reports(self, loader: DocumentLoader, brze_summary: str):
        response = ChatPipeline(loader).answer(ChatQuery("zebra quokka", ["BRZE"]))
        assert response.mode is AnswerMode.DETERMINISTIC
        assert response.answer == brze_summary

    def test_generated_summary_rewrite(self, loader: DocumentLoader, brze_summary: str):
        llm = MockLLM("Polished summary")
        pipeline = ChatPipeline(loader, oracle=GenerationOracle(llm))
        response = pipeline.answer(ChatQuery("Give me the earnings summary", ["BRZE"]))

        assert response.mode is AnswerMode.GENERATED
        assert response.answer == "Polished summary"
        assert response.model == "mock-llm"
        assert llm.calls == [{
            "prompt": SUMMARY_REWRITE_TEMPLATE.format(summaries=brze_summary),
            "system": CHAT_SYSTEM_PROMPT,
            "max_tokens": 1100,
            "temperature": 0.2,
        }]

    def test_question_uses_full_context_when_few_lines_rank(self, loader: DocumentLoader, brze_summary: str):
        llm = MockLLM()
        question = "What did they say about customers?"
        ChatPipeline(loader, oracle=GenerationOracle(llm)).answer(ChatQuery(question, ["BRZE"]))
        assert llm.calls[0]["prompt"] == GENERAL_QA_TEMPLATE.format(question=question, context=brze_summary)

    def test_question_uses_ranked_context(self, loader: DocumentLoader):
        llm = MockLLM()
        question = "total revenue operating margin customers million year over"
        ChatPipeline(loader, oracle=GenerationOracle(llm)).answer(ChatQuery(question, ["BRZE"]))
        context = "\n".join([
            "- Total revenue was $180.1 million, up 24% year over year.",
            "- Non-GAAP operating income was $9.6 million.",
            "KPIs & Customers:",
            "- Customers: 2422",
            "- Gross margin was 69%.",
            "- FY26 outlook raised to $720 million.",
        ])
        assert llm.calls[0]["prompt"] == GENERAL_QA_TEMPLATE.format(question=question, context=context)

    def test_generation_failure_falls_back(self, loader: DocumentLoader, brze_summary: str):
        oracle = GenerationOracle(MockLLM(error=RuntimeError("rate limited")))
        response = ChatPipeline(loader, oracle=oracle).answer(ChatQuery("Summarize earnings", ["BRZE"]))
        assert response.mode is AnswerMode.DETERMINISTIC
        assert response.answer == brze_summary

    def test_empty_generation_falls_back(self, loader: DocumentLoader):
        oracle = GenerationOracle(MockLLM(reply="  "))
        response = ChatPipeline(loader, oracle=oracle).answer(ChatQuery("What about customers?", ["BRZE"]))
        assert response.mode is AnswerMode.RANKED_LINES

    def test_failing_ticker_is_skipped(self, loader: DocumentLoader, ttd_summary: str, monkeypatch):
        pipeline = ChatPipeline(loader)
        original = pipeline.build_report

        def flaky(ticker: str):
            if ticker == "BRZE":
                raise OSError("disk error")
            return original(ticker)

        monkeypatch.setattr(pipeline, "build_report", flaky)
        response = pipeline.answer(ChatQuery("Summarize earnings", ["BRZE", "TTD"]))
        assert response.answer == ttd_summary

    def test_invalid_json_falls_back_to_transcript(self, tmp_path: Path, ttd_transcript: str):
        transcripts, parsed = tmp_path / "t", tmp_path / "p"
        transcripts.mkdir()
        parsed.mkdir()
        (parsed / "ttd-parsed.json").write_text("{broken", encoding="utf-8")
        (transcripts / "ttd.txt").write_text(ttd_transcript, encoding="utf-8")

        report = ChatPipeline(DocumentLoader(transcripts, parsed)).build_report("TTD")
        assert report.fallback
        assert report.rendered_text.startswith("TTD — earnings summary:")

    def test_non_object_json_renders_header(self, tmp_path: Path):
        parsed = tmp_path / "p"
        parsed.mkdir()
        (parsed / "abc-parsed.json").write_text(json.dumps([1, 2]), encoding="utf-8")
        report = ChatPipeline(DocumentLoader(tmp_path / "t", parsed)).build_report("abc")
        assert report.rendered_text == "ABC — earnings summary"

    def test_ticker_cap(self, loader: DocumentLoader):
        pipeline = ChatPipeline(loader, max_tickers=1)
        response = pipeline.answer(ChatQuery("Summarize earnings", ["TTD", "BRZE"]))
        assert response.tickers == ["TTD"]

    def test_find_excerpts(self, loader: DocumentLoader):
        excerpts = ChatPipeline(loader).find_excerpts(ChatQuery("revenue growth", ["ttd"]))
        assert [e.text for e in excerpts] == ["Revenue grew 19% to $694 million in the quarter."]
        assert excerpts[0].ticker == "TTD"

    def test_find_excerpts_structured(self, loader: DocumentLoader, instruct_dir: Path):
        pipeline = ChatPipeline(loader, instruct_dir=instruct_dir)
        excerpts = pipeline.find_excerpts(ChatQuery("customers revenue", ["BRZE"]), limit=3)
        # "$180.1" ends a sentence
        assert [e.text for e in excerpts] == ["Total revenue was $180.", "customers total: 2422"]

    def test_report_intent(self):
        assert has_report_intent("Key RESULTS please")
        assert not has_report_intent("What about churn?")


# ---------------------------------------------------------------------------
# Research pipeline
# ---------------------------------------------------------------------------


RESEARCH_HITS = [
    _hit(0.9, "BRZE", "Braze", "Revenue grew 24%."),
    _hit(0.3, "MSFT", "Microsoft", "Unrelated."),
    _hit(0.8, "TTD", "The Trade Desk", "Kokai adoption rose.", category="ad-tech"),
    _hit(0.7, "BRZE", "Braze", "Customers reached 2422."),
]


class TestResearchPipeline:
    def _pipeline(self, store: ScriptedStore, llm: MockLLM | None = None) -> ResearchPipeline:
        return ResearchPipeline(
            retriever=Retriever(MockEmbedder(), store),
            oracle=GenerationOracle(llm if llm is not None else MockLLM()),
        )

    def test_answer_plain_text_with_sources(self):
        llm = MockLLM("## Overview\n**Revenue** grew.\n- item one\n1. first")
        response = self._pipeline(ScriptedStore(RESEARCH_HITS), llm).answer(
            ChatQuery("How is growth?", ["BRZE", "TTD"])
        )
        assert response.answer == "Overview\nRevenue grew.\n• item one\nfirst\n\nSources: BRZE, TTD"
        assert response.sources == ["BRZE", "TTD"]
        assert response.matches == 3
        assert response.top_score == 0.9
        assert response.metadata() == {"sources": ["BRZE", "TTD"], "matches": 3, "topScore": 0.9}

    def test_prompt_and_generation_settings(self):
        llm = MockLLM()
        self._pipeline(ScriptedStore(RESEARCH_HITS), llm).answer(
            ChatQuery("How is growth?", ["BRZE"], detail_level=DetailLevel.BRIEF)
        )
        call = llm.calls[0]
        assert call["system"] == research_system_prompt(DetailLevel.BRIEF)
        assert (call["max_tokens"], call["temperature"]) == (3000, 0.1)
        assert call["prompt"].startswith("Question: How is growth?\n\nContext from earnings calls:\n")
        assert "Braze (BRZE) - facts [2025-09-03] (saas):\nRevenue grew 24%." in call["prompt"]
        assert "Unrelated." not in call["prompt"]

    def test_filter_uses_normalized_tickers(self):
        store = ScriptedStore(RESEARCH_HITS)
        self._pipeline(store).answer(ChatQuery("q", ["bze", " ttd "], top_k=5))
        assert store.calls == [(5, MetadataFilter(tickers=["BRZE", "TTD"]))]

    def test_no_tickers_no_filter(self):
        store = ScriptedStore(RESEARCH_HITS)
        self._pipeline(store).answer(ChatQuery("q"))
        assert store.calls == [(25, None)]

    def test_no_candidates(self):
        llm = MockLLM()
        response = self._pipeline(ScriptedStore([]), llm).answer(ChatQuery("q", ["BRZE"]))
        assert response.answer == NO_MATCHES_ANSWER
        assert response.matches == 0
        assert llm.calls == []

    def test_no_confident_matches(self):
        store = ScriptedStore([_hit(0.55, "BRZE", "Braze", "x"), _hit(0.2, "TTD", "TTD", "y")])
        response = self._pipeline(store).answer(ChatQuery("q", ["BRZE"]))
        assert response.answer == NO_CONFIDENT_MATCHES_ANSWER

    def test_unconfigured_raises(self):
        with pytest.raises(OracleConfigurationError, match="Missing API keys"):
            ResearchPipeline(None, GenerationOracle(MockLLM())).answer(ChatQuery("q"))
        unconfigured_llm = ResearchPipeline(
            Retriever(MockEmbedder(), ScriptedStore(RESEARCH_HITS)),
            GenerationOracle(None),
        )
        with pytest.raises(OracleConfigurationError):
            unconfigured_llm.answer(ChatQuery("q"))

    def test_retrieval_failure_raises(self):
        store = ScriptedStore(error=ConnectionError("index down"))
        with pytest.raises(OracleError, match="index down"):
            self._pipeline(store).answer(ChatQuery("q"))

    def test_generation_failure_raises(self):
        llm = MockLLM(error=RuntimeError("quota"))
        with pytest.raises(OracleError, match="quota"):
            self._pipeline(ScriptedStore(RESEARCH_HITS), llm).answer(ChatQuery("q"))

    @pytest.mark.parametrize("reply", ["", "  \n "])
    def test_empty_generation_answers_placeholder(self, reply: str):
        llm = MockLLM(reply)
        response = self._pipeline(ScriptedStore(RESEARCH_HITS), llm).answer(ChatQuery("q", ["BRZE", "TTD"]))
        assert response.answer == f"{EMPTY_GENERATION_ANSWER}\n\nSources: BRZE, TTD"
        assert response.metadata() == {"sources": ["BRZE", "TTD"], "matches": 3, "topScore": 0.9}


class TestFormatting:
    def test_strip_markdown(self):
        text = "# Title\n\n\n\nUse `code` and [link](http://x) and _it_ and __b__.\n* star\n```\nblock\n```"
        assert strip_markdown(text) == "Title\n\nUse code and link and it and b.\n• star"

    def test_with_sources(self):
        assert with_sources("A", []) == "A"
        assert with_sources("A", ["X", "Y"]) == "A\n\nSources: X, Y"

    def test_match_context(self):
        matches = [
            RetrievalMatch(score=0.9, ticker="BRZE", company="Braze", section="facts", text="one"),
            RetrievalMatch(score=0.8, ticker="TTD", company="TTD", section="transcript", text="two",
                           category="ad-tech", call_date="2025-08-07"),
        ]
        assert format_match_context(matches) == (
            "Braze (BRZE) - facts:\none\n\n---\n\nTTD (TTD) - transcript [2025-08-07] (ad-tech):\ntwo"
        )


# ---------------------------------------------------------------------------
# Suggestion pipeline
# ---------------------------------------------------------------------------


SUGGEST_HITS = [
    _hit(0.9, "BRZE", "Braze", "Braze customers adopt AI agents."),
    _hit(0.8, "TTD", "The Trade Desk", "Kokai lifts programmatic spend.", category="ad-tech"),
    _hit(0.6, "MSFT", "Microsoft", "Below threshold."),
]


class TestSuggestionPipeline:
    def _pipeline(self, store: ScriptedStore, llm: MockLLM | None = None) -> SuggestionPipeline:
        return SuggestionPipeline(
            retriever=Retriever(MockEmbedder(), store),
            oracle=GenerationOracle(llm if llm is not None else MockLLM()),
        )

    def test_pads_short_list(self):
        llm = MockLLM("Here you go:\n1. First?\n2. Second?\n3. Third?")
        response = self._pipeline(ScriptedStore(SUGGEST_HITS), llm).suggest(["brze", "ttd"])
        assert response.suggestions[:3] == ["First?", "Second?", "Third?"]
        assert response.suggestions[3:] == list(FALLBACK_SUGGESTIONS[:5])
        assert len(response.suggestions) == 8

    def test_caps_at_eight(self):
        llm = MockLLM("\n".join(f"{i}. Question {i}?" for i in range(1, 11)))
        response = self._pipeline(ScriptedStore(SUGGEST_HITS), llm).suggest(["BRZE"])
        assert response.suggestions == [f"Question {i}?" for i in range(1, 9)]

    def test_probes_and_metadata(self):
        store = ScriptedStore(SUGGEST_HITS)
        llm = MockLLM()
        response = self._pipeline(store, llm).suggest(["bze", "TTD"])

        assert len(store.calls) == 6
        assert all(c == (12, MetadataFilter(tickers=["BRZE", "TTD"])) for c in store.calls)
        assert response.metadata() == {
            "companiesAnalyzed": 2,
            "categoriesFound": ["saas", "ad-tech"],
            "contextChunks": 12,
        }
        call = llm.calls[0]
        assert (call["max_tokens"], call["temperature"]) == (800, 0.3)
        assert "Selected Companies: Braze, The Trade Desk" in call["system"]
        assert "SAAS THEMES" in call["system"]
        assert "AD TECH THEMES" in call["system"]
        assert "from 2 companies" in call["prompt"]
        assert "Braze: Braze customers adopt AI agents." in call["prompt"]
        assert "Below threshold." not in call["prompt"]

    def test_no_context_returns_defaults(self):
        llm = MockLLM()
        response = self._pipeline(ScriptedStore([_hit(0.7, "BRZE", "Braze", "x")]), llm).suggest(["BRZE"])
        assert response.suggestions == list(DEFAULT_SUGGESTIONS)
        assert response.context_chunks == 0
        assert llm.calls == []

    def test_failed_probes_count_as_empty(self):
        response = self._pipeline(ScriptedStore(error=ConnectionError("down"))).suggest(["BRZE"])
        assert response.suggestions == list(DEFAULT_SUGGESTIONS)

    def test_generation_failure_uses_fallback(self):
        llm = MockLLM(error=RuntimeError("quota"))
        response = self._pipeline(ScriptedStore(SUGGEST_HITS), llm).suggest(["BRZE"])
        assert response.suggestions == list(FALLBACK_SUGGESTIONS[:8])
        assert response.context_chunks == 12

    def test_unconfigured_raises(self):
        with pytest.raises(OracleConfigurationError, match="Missing API keys"):
            SuggestionPipeline(None, GenerationOracle(MockLLM())).suggest(["BRZE"])

    @pytest.mark.parametrize("tickers", [[" "], ["", "  "], []])
    def test_blank_tickers_rejected(self, tickers: list[str]):
        store = ScriptedStore(SUGGEST_HITS)
        with pytest.raises(InvalidRequestError, match="No sources selected"):
            self._pipeline(store).suggest(tickers)
        assert store.calls == []

    def test_parse_numbered_lines(self):
        text = "Intro\n1. Alpha?\n 2. indented is skipped\n10.Beta?\n3. \n- Gamma?"
        assert parse_numbered_lines(text) == ["Alpha?", "Beta?"]

    def test_pad_suggestions(self):
        five = [f"q{i}" for i in range(5)]
        assert pad_suggestions(five) == five
        assert pad_suggestions([], fallback=["a", "b"]) == ["a", "b"]


# ---------------------------------------------------------------------------
# Ingest pipeline
# ---------------------------------------------------------------------------


class TestIngestPipeline:
    @pytest.fixture
    def store(self) -> FAISSStore:
        return FAISSStore(dimension=DIM)

    def test_ingest_parsed_document(self, loader: DocumentLoader, store: FAISSStore):
        embedder = MockEmbedder()
        result = IngestPipeline(loader, embedder, store, batch_size=5).ingest_ticker("bze", category="saas")

        assert result.ticker == "BRZE"
        assert (result.units_found, result.units_embedded, result.units_stored) == (12, 12, 12)
        assert result.warnings == []
        assert embedder.batches == [5, 5, 2]
        assert store.count() == 12

        hit = store.search(embedder.embed_query("Gross margin was 69%."), top_k=1)[0]
        assert hit.text == "Gross margin was 69%."
        assert hit.metadata == MatchMetadata(
            ticker="BRZE",
            company="Braze",
            section="facts",
            category="saas",
            call_date="2025-09-03",
            source_filename="brze-parsed.json",
        )
        assert hit.id.endswith("brze-parsed.json#2")

    def test_ingest_transcript(self, loader: DocumentLoader, store: FAISSStore):
        result = IngestPipeline(loader, MockEmbedder(), store).ingest_ticker("TTD")
        assert result.units_stored == 5
        hit = store.search(MockEmbedder().embed_query("Thank you all for joining."), top_k=1)[0]
        assert hit.metadata.section == "transcript"
        assert hit.metadata.company == "TTD"
        assert hit.metadata.category is None

    def test_missing_ticker(self, loader: DocumentLoader, store: FAISSStore):
        result = IngestPipeline(loader, MockEmbedder(), store).ingest_ticker("zzz")
        assert result.units_found == 0
        assert result.warnings == ["No documents found for ZZZ"]
        assert store.count() == 0

    def test_blank_ticker_indexes_nothing(self, loader: DocumentLoader, store: FAISSStore):
        result = IngestPipeline(loader, MockEmbedder(), store).ingest_ticker("  ")
        assert result.units_found == 0
        assert store.count() == 0

    def test_empty_document_warns(self, tmp_path: Path, store: FAISSStore):
        transcripts = tmp_path / "t"
        transcripts.mkdir()
        (transcripts / "abc.txt").write_text("  \n\n", encoding="utf-8")
        loader = DocumentLoader(transcripts, tmp_path / "p")
        result = IngestPipeline(loader, MockEmbedder(), store).ingest_ticker("ABC")
        assert result.warnings == ["abc.txt: no extractable text"]
        assert result.units_stored == 0
