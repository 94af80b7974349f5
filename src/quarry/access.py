"""Per-document access evaluation.

A document is visible to a viewer who owns it, is listed among its users, or
belongs to at least one of its groups. Filtering happens after ranking, so it
removes hits without changing the order or scores of the rest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Iterable, List, Protocol


@dataclass(slots=True)
class DocumentAccess:
    """Access lists attached to a document by its provider."""

    owner_id: str
    users: List[str] = field(default_factory=list)
    groups: List[str] = field(default_factory=list)


@dataclass(slots=True)
class AccessContext:
    """The principal a search is performed for."""

    viewer_id: str
    groups: AbstractSet[str] = field(default_factory=frozenset)

    @classmethod
    def for_viewer(cls, viewer_id: str, groups: Iterable[str] = ()) -> "AccessContext":
        return cls(viewer_id=viewer_id, groups=frozenset(groups))


class AccessControlled(Protocol):
    access_owner_id: str
    access_users: List[str]
    access_groups: List[str]


def is_visible(record: AccessControlled, context: AccessContext) -> bool:
    """Return True if ``context`` may see ``record``."""
    if context.viewer_id == record.access_owner_id:
        return True
    if context.viewer_id in record.access_users:
        return True
    allowed_groups = set(record.access_groups)
    return any(group in allowed_groups for group in context.groups)
