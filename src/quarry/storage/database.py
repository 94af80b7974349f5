"""Database utilities for SQLAlchemy 2.x.

Provides engine/session factories and a convenient session scope context manager.
The store is an embedded SQLite file living next to the full-text index.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from . import models


def get_engine(path: Union[str, Path], *, echo: bool = False) -> Engine:
    """Create a SQLAlchemy engine for the SQLite file at ``path``.

    Parameters
    ----------
    path:
        Filesystem path of the database file, or ``":memory:"``. The file is
        created on first connection when it does not exist.
    echo:
        If True, SQL statements are logged (useful for debugging).
    """
    path = str(path)
    if path.startswith("sqlite"):
        url = path
    elif path == ":memory:":
        url = "sqlite://"
    else:
        url = f"sqlite:///{path}"
    return create_engine(url, echo=echo)


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Create a sessionmaker bound to the provided engine."""
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations.

    Commits on success, rolls back on error, and always closes the session.
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """Create database tables based on SQLAlchemy models if they do not exist."""
    models.Base.metadata.create_all(bind=engine)
