"""Document store — find files under a root by predicate, read them fail-open."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

logger = logging.getLogger(__name__)

PathPredicate = Callable[[Path], bool]


class DocumentStore(ABC):
    """Interface for the store that holds transcripts and parsed output."""

    @abstractmethod
    def find(self, root: str | Path, predicate: PathPredicate, max_results: int) -> list[Path]:
        """Return up to ``max_results`` documents under ``root`` matching ``predicate``.

        A missing or unreadable root yields an empty list.
        """

    @abstractmethod
    def read_text(self, path: str | Path) -> str:
        """Return the document text, or ``""`` if it cannot be read."""

    @classmethod
    def store_name(cls) -> str:
        """Return human-readable store name."""
        return cls.__name__


class FilesystemStore(DocumentStore):
    """Depth-first directory walk over the local filesystem."""

    def find(self, root: str | Path, predicate: PathPredicate, max_results: int) -> list[Path]:
        results: list[Path] = []
        if max_results <= 0:
            return results
        self._walk(Path(root), predicate, max_results, results)
        return results

    def _walk(
        self,
        directory: Path,
        predicate: PathPredicate,
        max_results: int,
        results: list[Path],
    ) -> None:
        if len(results) >= max_results:
            return
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            logger.debug("Skipping unreadable directory %s: %s", directory, exc)
            return

        for entry in entries:
            if len(results) >= max_results:
                break
            if entry.is_dir():
                self._walk(entry, predicate, max_results, results)
            elif predicate(entry):
                results.append(entry)

    def read_text(self, path: str | Path) -> str:
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return ""
        return data.decode("utf-8", errors="replace")
