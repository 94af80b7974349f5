"""Lazily-built full-text index kept in lockstep with the document store."""

from __future__ import annotations

import logging
from typing import Optional

from quarry.search.base_search import BaseSearch
from quarry.storage.document_store import DocumentStore

logger = logging.getLogger(__name__)


class Indexer:
    """Owns the index handle for one platform instance.

    The handle is created on first use and cached; every store mutation is
    followed by a full `rebuild`, trading O(total documents) work per write
    for an index that never drifts from the store.
    """

    def __init__(self, store: DocumentStore, index: BaseSearch) -> None:
        self._store = store
        self._index = index
        self._handle: Optional[BaseSearch] = None

    @property
    def is_built(self) -> bool:
        return self._handle is not None

    def ensure_built(self) -> BaseSearch:
        """Return the cached handle, opening and seeding the index on first call."""
        if self._handle is None:
            self._index.open_or_create()
            self._index.rebuild(self._store.iter_index_rows())
            self._handle = self._index
            logger.info("Full-text index ready")
        return self._handle

    def rebuild(self) -> None:
        """Regenerate the whole index from the current store contents."""
        if self._handle is None:
            # First use seeds from the store, which is already a full rebuild
            self.ensure_built()
            return
        handle = self._handle
        rows = self._store.iter_index_rows()
        handle.rebuild(rows)
        logger.debug("Reindexed %d document(s)", len(rows))
