"""Data structures exchanged between the platform and its host.

`IndexDocument` is what providers submit, `IndexReference` is what they get
back, and `SearchResult` is the sink a search request fills in.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from quarry.access import DocumentAccess
from quarry.search.excerpts import Excerpt


class ContentEncoding(str, Enum):
    """How ``IndexDocument.content`` is encoded in transport."""

    PLAIN = "plain"
    BASE64 = "base64"


class IndexStatus(str, Enum):
    INDEXED = "indexed"
    FAILED = "failed"


@dataclass(slots=True)
class IndexDocument:
    """A document submitted by a provider for indexing.

    Attributes
    ----------
    provider_id: str
        Tag of the producing system, used for provider-scoped resets.
    document_id: str
        Logical path of the document; re-submitting the same id updates it.
    content_encoding: ContentEncoding
        Set to ``BASE64`` when ``content`` carries base64-encoded UTF-8 text.
    mimetype: str | None
        Optional type of the underlying file; types outside the configured
        list are stored without content.
    """

    provider_id: str
    document_id: str
    access: DocumentAccess
    title: str = ""
    content: str = ""
    source: str = ""
    hash: Optional[str] = None
    content_encoding: ContentEncoding = ContentEncoding.PLAIN
    mimetype: Optional[str] = None

    def decoded_content(self) -> str:
        """Return the content as text, decoding transport encoding."""
        if not self.content:
            return ""
        if self.content_encoding is ContentEncoding.BASE64:
            try:
                return base64.b64decode(self.content).decode("utf-8", errors="replace")
            except (binascii.Error, ValueError):
                # Undecodable payloads index as empty rather than as garbage
                return ""
        return self.content

    def init_hash(self) -> Optional[str]:
        """Fill in an MD5 fingerprint of the content when none was supplied."""
        if not self.hash and self.content:
            self.hash = hashlib.md5(self.content.encode("utf-8")).hexdigest()
        return self.hash


@dataclass(slots=True)
class IndexReference:
    """Outcome of indexing one document."""

    provider_id: str
    document_id: str
    status: IndexStatus
    store_id: Optional[int] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is IndexStatus.INDEXED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider_id": self.provider_id,
            "document_id": self.document_id,
            "status": self.status.value,
            "store_id": self.store_id,
            "message": self.message,
        }


@dataclass(slots=True)
class SearchRequest:
    query: str
    size: int = 10


@dataclass(slots=True)
class ScoredDocument:
    """A visible hit, in engine ranking order."""

    document_id: str
    provider_id: str
    title: str
    content: str
    source: str
    hash: str = ""
    score: float = 0.0
    excerpts: List[Excerpt] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "document_id": self.document_id,
            "provider_id": self.provider_id,
            "title": self.title,
            "source": self.source,
            "score": self.score,
            "excerpts": [{"source": e.source, "excerpt": e.text} for e in self.excerpts],
        }


@dataclass(slots=True)
class SearchResult:
    """Mutable sink filled by `Platform.search_request`."""

    request: SearchRequest
    raw_result: str = ""
    time: int = 0
    total: int = 0
    documents: List[ScoredDocument] = field(default_factory=list)

    def set_raw_result(self, raw: Dict[str, Any]) -> None:
        self.raw_result = json.dumps(raw)

    def add_document(self, document: ScoredDocument) -> None:
        self.documents.append(document)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "query": self.request.query,
            "time": self.time,
            "total": self.total,
            "documents": [d.to_dict() for d in self.documents],
        }
