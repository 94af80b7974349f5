"""Document store backed by the ``quarry_documents`` table.

Owns upserts keyed by logical path, lookups, provider-scoped deletes and the
projection used to seed the full-text index. Rows leave the store as detached
`StoredDocument` values so callers never hold a live session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from quarry.exceptions import DocumentNotFoundError, StorageError, TransactionError
from quarry.storage.database import session_scope
from quarry.storage.models import DocumentRecord

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class StoredDocument:
    """Detached copy of a stored document row."""

    path: str
    title: str = ""
    content: str = ""
    provider_id: str = ""
    source: str = ""
    hash: str = ""
    access_owner_id: str = ""
    access_users: List[str] = field(default_factory=list)
    access_groups: List[str] = field(default_factory=list)
    id: Optional[int] = None


@dataclass(slots=True)
class IndexRow:
    """Projection of a row fed to the full-text index."""

    id: int
    path: str
    title: str
    content: str
    access_owner_id: str


def _to_stored(row: DocumentRecord) -> StoredDocument:
    return StoredDocument(
        id=row.id,
        path=row.path,
        title=row.title or "",
        content=row.content or "",
        provider_id=row.provider_id or "",
        source=row.source or "",
        hash=row.hash or "",
        access_owner_id=row.access_owner_id or "",
        # Legacy NULLs read back as empty collections
        access_users=[str(u) for u in (row.access_users or [])],
        access_groups=[str(g) for g in (row.access_groups or [])],
    )


class DocumentStore:
    """Persistence for indexed documents."""

    def __init__(self, factory: sessionmaker[Session]) -> None:
        self._factory = factory

    def upsert(self, document: StoredDocument) -> int:
        """Insert or update the row for ``document.path`` and return its id.

        The lookup and the write share one transaction; on failure it is
        rolled back and `TransactionError` is raised.
        """
        try:
            with session_scope(self._factory) as session:
                row = session.scalars(
                    select(DocumentRecord).where(DocumentRecord.path == document.path).limit(1)
                ).first()
                if row is None:
                    row = DocumentRecord(path=document.path)
                    session.add(row)
                    created = True
                else:
                    created = False
                row.title = document.title
                row.content = document.content
                row.provider_id = document.provider_id
                row.source = document.source
                row.hash = document.hash
                row.access_owner_id = document.access_owner_id
                row.access_users = list(document.access_users)
                row.access_groups = list(document.access_groups)
                session.flush()
                store_id = row.id
        except SQLAlchemyError as exc:
            raise TransactionError(f"Failed to store document {document.path!r}") from exc
        logger.debug("%s document %s (id=%s)", "Inserted" if created else "Updated", document.path, store_id)
        return store_id

    def find_by_path(self, path: str) -> Optional[StoredDocument]:
        """Return the document stored under ``path``, or None."""
        return self._find_one(select(DocumentRecord).where(DocumentRecord.path == path))

    def get_by_id(self, store_id: int) -> Optional[StoredDocument]:
        """Return the document with surrogate key ``store_id``, or None."""
        return self._find_one(select(DocumentRecord).where(DocumentRecord.id == store_id))

    def require_by_path(self, path: str) -> StoredDocument:
        doc = self.find_by_path(path)
        if doc is None:
            raise DocumentNotFoundError(path)
        return doc

    def require_by_id(self, store_id: int) -> StoredDocument:
        doc = self.get_by_id(store_id)
        if doc is None:
            raise DocumentNotFoundError(store_id)
        return doc

    def delete_by_provider(self, provider_id: str) -> int:
        """Delete every document of ``provider_id``; returns the number of rows removed."""
        try:
            with session_scope(self._factory) as session:
                result = session.execute(
                    delete(DocumentRecord).where(DocumentRecord.provider_id == provider_id)
                )
                removed = result.rowcount or 0
        except SQLAlchemyError as exc:
            raise TransactionError(f"Failed to delete documents of provider {provider_id!r}") from exc
        logger.info("Deleted %d document(s) of provider %s", removed, provider_id)
        return removed

    def iter_index_rows(self) -> List[IndexRow]:
        """Full projection of the store used to (re)build the index."""
        stmt = select(
            DocumentRecord.id,
            DocumentRecord.path,
            DocumentRecord.title,
            DocumentRecord.content,
            DocumentRecord.access_owner_id.label("access_owner_id"),
        ).order_by(DocumentRecord.id)
        try:
            with session_scope(self._factory) as session:
                return [
                    IndexRow(
                        id=r.id,
                        path=r.path,
                        title=r.title or "",
                        content=r.content or "",
                        access_owner_id=r.access_owner_id or "",
                    )
                    for r in session.execute(stmt)
                ]
        except SQLAlchemyError as exc:
            raise StorageError("Failed to read documents for indexing") from exc

    def count(self) -> int:
        with session_scope(self._factory) as session:
            return int(session.scalar(select(func.count()).select_from(DocumentRecord)) or 0)

    def _find_one(self, stmt) -> Optional[StoredDocument]:
        try:
            with session_scope(self._factory) as session:
                row = session.scalars(stmt.limit(1)).first()
                return _to_stored(row) if row is not None else None
        except SQLAlchemyError as exc:
            raise StorageError("Document lookup failed") from exc
