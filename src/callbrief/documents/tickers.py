"""Ticker normalization — case folding and alias/typo correction."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

# Known typos seen in requests, keyed by lower-cased input.
TICKER_ALIASES: dict[str, str] = {
    "bze": "brze",
}

MAX_TICKERS = 40


def normalize_ticker(raw: str | None, aliases: Mapping[str, str] | None = None) -> str:
    """Lower-case, map through the alias table, then upper-case.

    >>> normalize_ticker("bze")
    'BRZE'
    """
    table = TICKER_ALIASES if aliases is None else aliases
    key = str(raw or "").strip().lower()
    return table.get(key, key).upper()


def normalize_tickers(
    raw: Iterable[str],
    limit: int = MAX_TICKERS,
    aliases: Mapping[str, str] | None = None,
) -> list[str]:
    """Normalize a request's tickers, keeping order and at most ``limit``.

    Blank entries are dropped after normalization.
    """
    out: list[str] = []
    for item in list(raw)[:limit]:
        ticker = normalize_ticker(item, aliases)
        if ticker:
            out.append(ticker)
    return out
