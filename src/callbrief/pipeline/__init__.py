"""Request pipelines — chat summaries, retrieval QA, suggestions, ingest."""

from callbrief.pipeline.chat import ChatPipeline
from callbrief.pipeline.ingest import IngestPipeline
from callbrief.pipeline.research import ResearchPipeline
from callbrief.pipeline.schemas import (
    AnswerMode,
    ChatQuery,
    ChatResponse,
    DetailLevel,
    IngestResult,
    ResearchResponse,
    SuggestionResponse,
)
from callbrief.pipeline.suggest import SuggestionPipeline

__all__ = [
    "AnswerMode",
    "ChatPipeline",
    "ChatQuery",
    "ChatResponse",
    "DetailLevel",
    "IngestPipeline",
    "IngestResult",
    "ResearchPipeline",
    "ResearchResponse",
    "SuggestionPipeline",
    "SuggestionResponse",
]
