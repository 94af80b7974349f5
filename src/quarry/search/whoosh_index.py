"""File-backed Whoosh index holding the searchable projection of the store.

The index only carries what ranking needs (title, content) plus the store id
used to resolve hits; the authoritative document stays in the relational store.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Iterable, Optional, Union

from whoosh import scoring, writing
from whoosh.analysis import StemmingAnalyzer
from whoosh.fields import ID, TEXT, Schema
from whoosh.filedb.filestore import FileStorage
from whoosh.index import Index, IndexError as WhooshIndexError, LockError
from whoosh.qparser import MultifieldParser, OrGroup

from quarry.exceptions import EngineError
from quarry.search.base_search import BaseSearch, EngineResult, Indexable

logger = logging.getLogger(__name__)

# Seconds to wait for the index write lock before failing
WRITER_TIMEOUT = 5.0


def _make_schema() -> Schema:
    analyzer = StemmingAnalyzer()
    return Schema(
        id=ID(stored=True, unique=True),
        path=ID(stored=True),
        title=TEXT(analyzer=analyzer, field_boost=1.8),
        content=TEXT(analyzer=analyzer),
        access_owner=ID(stored=True),
    )


class WhooshIndex(BaseSearch):
    """Named Whoosh index stored in ``directory``."""

    def __init__(self, directory: Union[str, Path], name: str) -> None:
        self.directory = Path(directory)
        self.name = name
        self._index: Optional[Index] = None

    def open_or_create(self) -> None:
        try:
            storage = FileStorage(str(self.directory))
            if storage.index_exists(self.name):
                self._index = storage.open_index(indexname=self.name)
            else:
                self._index = storage.create_index(_make_schema(), indexname=self.name)
                logger.info("Created full-text index %s in %s", self.name, self.directory)
        except (WhooshIndexError, OSError) as exc:
            raise EngineError(f"Unable to open index {self.name!r}: {exc}") from exc

    def rebuild(self, items: Iterable[Indexable]) -> None:
        ix = self._require_index()
        count = 0
        try:
            writer = ix.writer(timeout=WRITER_TIMEOUT)
        except LockError as exc:
            raise EngineError(f"Index {self.name!r} is locked by another writer") from exc
        try:
            for item in items:
                writer.add_document(
                    id=str(item.id),
                    path=item.path or "",
                    title=item.title or "",
                    content=item.content or "",
                    access_owner=item.access_owner_id or "",
                )
                count += 1
        except Exception:
            writer.cancel()
            raise
        try:
            # CLEAR drops every existing segment so the index mirrors ``items`` exactly
            writer.commit(mergetype=writing.CLEAR)
        except (WhooshIndexError, OSError) as exc:
            if not writer.is_closed:
                writer.cancel()
            raise EngineError(f"Unable to write index {self.name!r}: {exc}") from exc
        logger.debug("Rebuilt index %s with %d document(s)", self.name, count)

    def search(self, query: str, *, limit: int = 10) -> EngineResult:
        if not query or not str(query).strip():
            return EngineResult()
        ix = self._require_index()

        started = time.perf_counter()
        try:
            with ix.searcher(weighting=scoring.BM25F()) as searcher:
                parser = MultifieldParser(["title", "content"], schema=ix.schema, group=OrGroup)
                try:
                    q = parser.parse(query)
                except Exception:
                    # On parse failure, fall back to raw string as a phrase query
                    q = parser.parse('"' + query.replace('"', " ") + '"')
                results = searcher.search(q, limit=max(1, int(limit)))
                out = EngineResult(hits=len(results))
                for hit in results:
                    doc_id = int(hit["id"])
                    out.ids.append(doc_id)
                    out.scores[doc_id] = float(hit.score or 0.0)
        except (WhooshIndexError, OSError) as exc:
            raise EngineError(f"Query failed on index {self.name!r}: {exc}") from exc
        out.execution_time = f"{(time.perf_counter() - started) * 1000:.3f} ms"
        return out

    def _require_index(self) -> Index:
        if self._index is None:
            raise EngineError(f"Index {self.name!r} has not been opened")
        return self._index
