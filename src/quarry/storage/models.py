"""SQLAlchemy models for Quarry storage.

A single table holds every indexed document together with its access lists.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import JSON, Integer, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""


class DocumentRecord(Base):
    """A document as persisted by the store, keyed logically by ``path``."""

    __tablename__ = "quarry_documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Natural key for upserts; uniqueness is enforced by read-before-write, not a constraint
    path: Mapped[str] = mapped_column(Text, index=True)
    title: Mapped[Optional[str]] = mapped_column(Text, default="")
    content: Mapped[Optional[str]] = mapped_column(Text, default="")
    provider_id: Mapped[Optional[str]] = mapped_column(Text, default="", index=True)
    source: Mapped[Optional[str]] = mapped_column(Text, default="")
    hash: Mapped[Optional[str]] = mapped_column(Text, default="")

    access_owner_id: Mapped[Optional[str]] = mapped_column("access_ownerId", Text, default="")
    access_users: Mapped[Optional[List[str]]] = mapped_column(JSON, default=list)
    access_groups: Mapped[Optional[List[str]]] = mapped_column(JSON, default=list)
