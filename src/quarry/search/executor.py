"""Query execution against the platform's single named index."""

from __future__ import annotations

import logging

from quarry.search.base_search import EngineResult
from quarry.search.indexer import Indexer

logger = logging.getLogger(__name__)


class QueryExecutor:
    """Runs ranked queries; callers pass the over-fetched limit."""

    def __init__(self, indexer: Indexer) -> None:
        self._indexer = indexer

    def execute(self, query: str, limit: int) -> EngineResult:
        handle = self._indexer.ensure_built()
        result = handle.search(query, limit=limit)
        logger.debug(
            "Query %r matched %d document(s), returned %d in %s",
            query,
            result.hits,
            len(result.ids),
            result.execution_time,
        )
        return result
