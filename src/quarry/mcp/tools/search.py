"""Indexing and search tools for FastMCP.

Thin wrappers over `quarry.platform.Platform`; the platform is read from the
shared state so tests can substitute their own.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from fastmcp import FastMCP

from quarry.access import AccessContext, DocumentAccess
from quarry.documents import ContentEncoding, IndexDocument, SearchRequest, SearchResult
from quarry.platform import Platform


def register_search_tools(mcp: FastMCP, get_state: Callable[[], Any]) -> None:
    """Register indexing/search tools on the given FastMCP instance.

    Expects ``state.platform`` to be a loaded `Platform`.
    """

    def _platform() -> Platform:
        state = get_state()
        platform = getattr(state, "platform", None)
        if platform is None:
            raise RuntimeError("Search platform is not loaded.")
        return platform

    @mcp.tool
    def index_document(
        provider_id: str,
        document_id: str,
        owner_id: str,
        content: str,
        title: str = "",
        source: str = "",
        users: Optional[List[str]] = None,
        groups: Optional[List[str]] = None,
        content_encoding: str = "plain",
        mimetype: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Index (or re-index) one document.

        Parameters
        ----------
        provider_id: str
            Tag of the system the document comes from.
        document_id: str
            Logical path of the document; indexing the same id again updates it.
        owner_id: str
            Principal that always has access.
        content_encoding: str
            "plain" (default) or "base64".
        """
        try:
            encoding = ContentEncoding(content_encoding.lower())
        except ValueError as exc:
            raise ValueError(f"Unsupported content encoding: {content_encoding!r}") from exc
        doc = IndexDocument(
            provider_id=provider_id,
            document_id=document_id,
            access=DocumentAccess(owner_id=owner_id, users=users or [], groups=groups or []),
            title=title,
            content=content,
            source=source,
            content_encoding=encoding,
            mimetype=mimetype,
        )
        return _platform().index_document(doc).to_dict()

    @mcp.tool
    def search(
        query: str,
        viewer_id: str,
        groups: Optional[List[str]] = None,
        size: int = 10,
    ) -> Dict[str, Any]:
        """Search documents visible to ``viewer_id`` (and its ``groups``)."""
        result = SearchResult(request=SearchRequest(query=query, size=int(size)))
        _platform().search_request(result, AccessContext.for_viewer(viewer_id, groups or []))
        return result.to_dict()

    @mcp.tool
    def reset_index(provider_id: str) -> Dict[str, Any]:
        """Remove every document of a provider and rebuild the index."""
        _platform().reset_index(provider_id)
        return {"ok": True, "provider_id": provider_id}
