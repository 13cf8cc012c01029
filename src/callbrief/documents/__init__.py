"""Document access — ticker normalization, stores, loader."""

from callbrief.documents.loader import DocumentLoader
from callbrief.documents.schemas import DocumentKind, DocumentRef
from callbrief.documents.store import DocumentStore, FilesystemStore
from callbrief.documents.tickers import TICKER_ALIASES, normalize_ticker, normalize_tickers

__all__ = [
    "DocumentKind",
    "DocumentLoader",
    "DocumentRef",
    "DocumentStore",
    "FilesystemStore",
    "TICKER_ALIASES",
    "normalize_ticker",
    "normalize_tickers",
]
