"""Search platform exposed to the host application.

`Platform` composes the document store, the full-text index, the access
filter and the excerpt generator behind the load/reset/index/search lifecycle
a host drives. The store and the index share one storage directory:

    <data_root>/<index_subdir>/<index_name>.storage   relational store (SQLite)
    <data_root>/<index_subdir>/_<index_name>_*.toc    full-text index (Whoosh)
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.engine import Engine

from quarry.access import AccessContext, is_visible
from quarry.config import Settings, load_settings
from quarry.documents import (
    IndexDocument,
    IndexReference,
    IndexStatus,
    ScoredDocument,
    SearchResult,
)
from quarry.exceptions import (
    ConfigError,
    DocumentNotFoundError,
    EngineError,
    PlatformError,
    StorageError,
)
from quarry.search.excerpts import extract_excerpts
from quarry.search.executor import QueryExecutor
from quarry.search.indexer import Indexer
from quarry.search.whoosh_index import WhooshIndex
from quarry.storage.database import get_engine, init_db, make_session_factory
from quarry.storage.document_store import DocumentStore, StoredDocument

logger = logging.getLogger(__name__)


class PlatformState(str, Enum):
    UNLOADED = "unloaded"
    LOADED = "loaded"
    INDEXED = "indexed"


class Platform:
    """Access-controlled full-text search platform."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or load_settings()
        self.state = PlatformState.UNLOADED
        self._engine: Optional[Engine] = None
        self._store: Optional[DocumentStore] = None
        self._indexer: Optional[Indexer] = None
        self._executor: Optional[QueryExecutor] = None

    # ----- Identity -----

    def get_id(self) -> str:
        return "quarry"

    def get_name(self) -> str:
        return self.settings.app.name

    def get_configuration(self) -> Dict[str, Any]:
        return {}

    @property
    def index_directory(self) -> Path:
        cfg = self.settings.storage
        return Path(cfg.data_root) / cfg.index_subdir

    @property
    def store(self) -> DocumentStore:
        if self._store is None:
            raise PlatformError("Platform is not loaded; call load_platform() first")
        return self._store

    # ----- Lifecycle -----

    def load_platform(self) -> None:
        """Open (or create) the store and configure the index in the storage directory."""
        cfg = self.settings.storage
        directory = self.index_directory
        try:
            directory.mkdir(mode=cfg.directory_mode, parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(f"Cannot create storage directory {directory}: {exc}") from exc

        if self._engine is not None:
            self._engine.dispose()
        self._engine = get_engine(directory / f"{cfg.index_name}.storage", echo=cfg.echo_sql)
        init_db(self._engine)

        self._store = DocumentStore(make_session_factory(self._engine))
        self._indexer = Indexer(self._store, WhooshIndex(directory, cfg.index_name))
        self._executor = QueryExecutor(self._indexer)
        self.state = PlatformState.LOADED
        logger.info("Platform loaded from %s", directory)

    def test_platform(self) -> bool:
        return True

    def initialize_index(self) -> None:
        self._ensure_built()

    def reset_index(self, provider_id: str) -> None:
        """Remove every document of ``provider_id`` and rebuild the index from what remains."""
        removed = self.store.delete_by_provider(provider_id)
        self.load_platform()
        self._ensure_built()
        logger.info("Reset index for provider %s (%d document(s) removed)", provider_id, removed)

    def delete_indexes(self, identifiers: Iterable[Any]) -> None:
        # Individual entries are not removed; the index is only guaranteed to exist.
        identifiers = list(identifiers)
        if identifiers:
            logger.warning("delete_indexes does not remove entries; ignored %d identifier(s)", len(identifiers))
        self._ensure_built()

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
        self._store = None
        self._indexer = None
        self._executor = None
        self.state = PlatformState.UNLOADED

    # ----- Indexing -----

    def index_document(self, document: IndexDocument) -> IndexReference:
        """Store ``document`` (insert or update by path) and rebuild the index.

        Store failures abort this document only and are reported through the
        returned reference; index failures propagate.
        """
        store = self.store
        document.init_hash()
        record = StoredDocument(
            path=document.document_id,
            title=document.title or "",
            content=self._indexable_content(document),
            provider_id=document.provider_id,
            source=document.source or "",
            hash=document.hash or "",
            access_owner_id=document.access.owner_id,
            access_users=list(document.access.users),
            access_groups=list(document.access.groups),
        )
        try:
            store_id = store.upsert(record)
        except StorageError as exc:
            logger.error("Failed to index %s/%s: %s", document.provider_id, document.document_id, exc)
            return IndexReference(
                provider_id=document.provider_id,
                document_id=document.document_id,
                status=IndexStatus.FAILED,
                message=str(exc),
            )

        self._require_indexer().rebuild()
        self.state = PlatformState.INDEXED
        return IndexReference(
            provider_id=document.provider_id,
            document_id=document.document_id,
            status=IndexStatus.INDEXED,
            store_id=store_id,
        )

    def _indexable_content(self, document: IndexDocument) -> str:
        if document.mimetype and document.mimetype not in self.settings.search.indexed_mimetypes:
            return ""
        return document.decoded_content()

    # ----- Search -----

    def search_request(self, result: SearchResult, access: AccessContext) -> None:
        """Run ``result.request`` for ``access`` and fill ``result`` in place.

        Hits the viewer may not see are dropped, so fewer than the requested
        number of documents can come back. The sink is never padded.
        """
        request = result.request
        executor = self._require_executor()
        limit = max(0, int(request.size)) + self.settings.search.overfetch
        try:
            engine_result = executor.execute(request.query, limit)
        except (EngineError, StorageError) as exc:
            logger.error("Search for %r failed: %s", request.query, exc)
            return
        self.state = PlatformState.INDEXED

        result.set_raw_result(engine_result.to_raw())
        result.time = engine_result.elapsed_ms()
        result.total = engine_result.hits

        margin = self.settings.search.excerpt_margin
        for store_id in engine_result.ids:
            try:
                record = self.store.require_by_id(store_id)
            except DocumentNotFoundError:
                logger.warning("Index references missing document id=%s; skipping", store_id)
                continue
            except StorageError as exc:
                logger.error("Lookup of document id=%s failed: %s", store_id, exc)
                continue
            if not is_visible(record, access):
                continue
            document = self._to_scored(record)
            document.score = engine_result.scores.get(store_id, 0.0)
            document.excerpts = extract_excerpts(
                document.content, request.query, document.source, margin=margin
            )
            result.add_document(document)

    def get_document(self, document_id: str) -> ScoredDocument:
        """Return the stored document at path ``document_id``.

        Raises `DocumentNotFoundError` when no such document exists.
        """
        return self._to_scored(self.store.require_by_path(document_id))

    # ----- Helpers -----

    @staticmethod
    def _to_scored(record: StoredDocument) -> ScoredDocument:
        return ScoredDocument(
            document_id=record.path,
            provider_id=record.provider_id,
            title=record.title,
            content=record.content,
            source=record.source,
            hash=record.hash,
        )

    def _ensure_built(self) -> None:
        self._require_indexer().ensure_built()
        self.state = PlatformState.INDEXED

    def _require_indexer(self) -> Indexer:
        if self._indexer is None:
            raise PlatformError("Platform is not loaded; call load_platform() first")
        return self._indexer

    def _require_executor(self) -> QueryExecutor:
        if self._executor is None:
            raise PlatformError("Platform is not loaded; call load_platform() first")
        return self._executor
