"""Abstract search interface for indexing and querying documents.

Defines the minimal surface for full-text backends (e.g., Whoosh), enabling
extensibility and testability via a common contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Protocol


@dataclass(slots=True)
class EngineResult:
    """Ranked output of one engine query."""

    ids: List[int] = field(default_factory=list)
    scores: Dict[int, float] = field(default_factory=dict)
    hits: int = 0
    # Composite timing string, e.g. "3.218 ms"
    execution_time: str = "0 ms"

    def elapsed_ms(self) -> int:
        """First whitespace-delimited token of the timing string, as an integer."""
        parts = (self.execution_time or "").split()
        if not parts:
            return 0
        try:
            return int(float(parts[0]))
        except ValueError:
            return 0

    def to_raw(self) -> Dict[str, Any]:
        return {
            "ids": list(self.ids),
            "hits": self.hits,
            "docScores": {str(k): v for k, v in self.scores.items()},
            "execution_time": self.execution_time,
        }


class Indexable(Protocol):
    """Minimal protocol for indexable items."""

    id: int
    path: str
    title: str
    content: str
    access_owner_id: str


class BaseSearch(ABC):
    """Abstract interface for search index implementations."""

    @abstractmethod
    def open_or_create(self) -> None:
        """Open the named index, creating it when it does not exist."""

    @abstractmethod
    def rebuild(self, items: Iterable[Indexable]) -> None:
        """Replace the whole index content with ``items``."""

    @abstractmethod
    def search(self, query: str, *, limit: int = 10) -> EngineResult:
        """Execute a search query and return ranked results."""
        raise NotImplementedError
