"""Regex-free text primitives: word and sentence segmentation, overlap scoring.

Everything here is a pure function. Substring containment via
``includes_any`` is the only pattern matching the extraction pipeline uses.
"""

from __future__ import annotations

from collections.abc import Iterable

ELLIPSIS = "…"
MIN_TOKEN_LENGTH = 3
SENTENCE_TERMINATORS = frozenset(".!?")


def _is_ascii_alnum(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ("0" <= ch <= "9")


def split_words(text: str) -> list[str]:
    """Split text into lower-cased ASCII alphanumeric tokens.

    Any other character separates tokens. Tokens shorter than three
    characters are dropped, so "Q2", "AI" and "18" never survive.

    Args:
        text: Arbitrary input text.

    Returns:
        Tokens in order of appearance (duplicates kept).
    """
    out: list[str] = []
    current: list[str] = []
    for ch in text:
        if _is_ascii_alnum(ch):
            current.append(ch)
        elif current:
            out.append("".join(current).lower())
            current = []
    if current:
        out.append("".join(current).lower())
    return [w for w in out if len(w) >= MIN_TOKEN_LENGTH]


def split_into_sentences(text: str) -> list[str]:
    """Split text into sentences at ``.``, ``!`` and ``?``.

    Line breaks become spaces and whitespace runs collapse to one space
    first. There is no abbreviation handling: "Inc." and "U.S." end a
    sentence. A trailing fragment without a terminator is kept.
    """
    cleaned = " ".join(text.replace("\r", " ").replace("\n", " ").split())
    out: list[str] = []
    current: list[str] = []
    for ch in cleaned:
        current.append(ch)
        if ch in SENTENCE_TERMINATORS:
            sentence = "".join(current).strip()
            if sentence:
                out.append(sentence)
            current = []
    rest = "".join(current).strip()
    if rest:
        out.append(rest)
    return out


def jaccard(a: str, b: str) -> float:
    """Jaccard similarity of the whitespace-split, lower-cased word sets."""
    ta = set(a.lower().split())
    tb = set(b.lower().split())
    return len(ta & tb) / max(len(ta | tb), 1)


def score_by_token_overlap(query: str, candidate: str) -> int:
    """Count distinct query tokens that also occur in the candidate."""
    candidate_tokens = set(split_words(candidate))
    return sum(1 for token in set(split_words(query)) if token in candidate_tokens)


def unique_push(lines: list[str], line: str | None) -> bool:
    """Append ``line`` unless an equal entry (ignoring case) is present.

    Returns:
        ``True`` if the line was appended.
    """
    if not line:
        return False
    lowered = line.lower()
    if any(existing.lower() == lowered for existing in lines):
        return False
    lines.append(line)
    return True


def includes_any(haystack: str, needles: Iterable[str]) -> bool:
    """Case-insensitive substring test against any needle."""
    lowered = haystack.lower()
    return any(needle.lower() in lowered for needle in needles)


def contains_digit(text: str) -> bool:
    return any("0" <= ch <= "9" for ch in text)


def truncate(text: str, limit: int) -> str:
    """Cut text to ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}{ELLIPSIS}"
