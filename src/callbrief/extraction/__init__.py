"""Deterministic extraction — text primitives, chunking, fact extraction."""

from callbrief.extraction.chunks import split_into_chunks, split_into_line_chunks
from callbrief.extraction.facts import extract_structured_facts, extract_units, flatten_kpis
from callbrief.extraction.keywords import load_focus_keywords
from callbrief.extraction.schemas import CandidateUnit
from callbrief.extraction.text import (
    includes_any,
    jaccard,
    score_by_token_overlap,
    split_into_sentences,
    split_words,
    unique_push,
)

__all__ = [
    "CandidateUnit",
    "extract_structured_facts",
    "extract_units",
    "flatten_kpis",
    "includes_any",
    "jaccard",
    "load_focus_keywords",
    "score_by_token_overlap",
    "split_into_chunks",
    "split_into_line_chunks",
    "split_into_sentences",
    "split_words",
    "unique_push",
]
