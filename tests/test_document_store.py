from pathlib import Path
from typing import Any

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from quarry.exceptions import DocumentNotFoundError, TransactionError
from quarry.storage.database import get_engine, init_db, make_session_factory
from quarry.storage.document_store import DocumentStore, StoredDocument

# ---------- Helpers ----------


def make_store(tmp_path: Path) -> DocumentStore:
    engine = get_engine(tmp_path / "docs.storage")
    init_db(engine)
    return DocumentStore(make_session_factory(engine))


def make_doc(path: str = "/a.txt", **overrides: Any) -> StoredDocument:
    fields = {
        "path": path,
        "title": "A",
        "content": "hello world",
        "provider_id": "files",
        "source": "https://example.com/a.txt",
        "hash": "h1",
        "access_owner_id": "u1",
        "access_users": [],
        "access_groups": [],
    }
    fields.update(overrides)
    return StoredDocument(**fields)


def fail_every_flush(store: DocumentStore) -> None:
    def _boom(session: Any, flush_context: Any, instances: Any) -> None:
        raise OperationalError("UPDATE quarry_documents", {}, Exception("disk I/O error"))

    event.listen(store._factory, "before_flush", _boom)


# ---------- Upsert ----------


def test_upsert_inserts_then_updates_in_place(tmp_path: Path) -> None:
    store = make_store(tmp_path)

    first_id = store.upsert(make_doc(content="first version"))
    second_id = store.upsert(make_doc(content="second version", title="A2"))

    assert first_id == second_id
    assert store.count() == 1
    doc = store.require_by_path("/a.txt")
    assert doc.id == first_id
    assert doc.content == "second version"
    assert doc.title == "A2"


def test_upsert_assigns_distinct_ids_per_path(tmp_path: Path) -> None:
    store = make_store(tmp_path)

    a = store.upsert(make_doc("/a.txt"))
    b = store.upsert(make_doc("/b.txt"))

    assert a != b
    assert b > a
    assert store.count() == 2


def test_access_sets_round_trip(tmp_path: Path) -> None:
    store = make_store(tmp_path)
    store.upsert(make_doc(access_users=["alice", "bob"], access_groups=["staff"]))

    doc = store.require_by_path("/a.txt")
    assert set(doc.access_users) == {"alice", "bob"}
    assert doc.access_groups == ["staff"]


def test_empty_access_sets_round_trip_as_empty_lists(tmp_path: Path) -> None:
    store = make_store(tmp_path)
    store.upsert(make_doc(access_users=[], access_groups=[]))

    doc = store.require_by_path("/a.txt")
    assert doc.access_users == []
    assert doc.access_groups == []


def test_failed_insert_rolls_back(tmp_path: Path) -> None:
    store = make_store(tmp_path)
    fail_every_flush(store)

    with pytest.raises(TransactionError) as excinfo:
        store.upsert(make_doc())

    assert isinstance(excinfo.value.__cause__, OperationalError)
    assert store.count() == 0


def test_failed_update_leaves_previous_row_untouched(tmp_path: Path) -> None:
    store = make_store(tmp_path)
    store.upsert(make_doc(content="original"))
    fail_every_flush(store)

    with pytest.raises(TransactionError):
        store.upsert(make_doc(content="replacement"))

    assert store.require_by_path("/a.txt").content == "original"


# ---------- Lookups ----------


def test_find_by_path_returns_none_when_absent(tmp_path: Path) -> None:
    store = make_store(tmp_path)

    assert store.find_by_path("/missing") is None
    assert store.get_by_id(42) is None


def test_require_raises_named_error_when_absent(tmp_path: Path) -> None:
    store = make_store(tmp_path)

    with pytest.raises(DocumentNotFoundError) as excinfo:
        store.require_by_path("/missing")
    assert excinfo.value.key == "/missing"

    with pytest.raises(DocumentNotFoundError):
        store.require_by_id(7)


# ---------- Provider deletes and projection ----------


def test_delete_by_provider_is_scoped(tmp_path: Path) -> None:
    store = make_store(tmp_path)
    store.upsert(make_doc("/a1", provider_id="providerA"))
    store.upsert(make_doc("/a2", provider_id="providerA"))
    store.upsert(make_doc("/b1", provider_id="providerB"))

    removed = store.delete_by_provider("providerA")

    assert removed == 2
    assert store.find_by_path("/a1") is None
    assert store.find_by_path("/b1") is not None


def test_iter_index_rows_projects_every_document(tmp_path: Path) -> None:
    store = make_store(tmp_path)
    store.upsert(make_doc("/a", title="Alpha", content="one"))
    store.upsert(make_doc("/b", title="Beta", content="", access_owner_id="u2"))

    rows = store.iter_index_rows()

    assert [r.path for r in rows] == ["/a", "/b"]
    assert rows[0].title == "Alpha"
    assert rows[1].content == ""
    assert rows[1].access_owner_id == "u2"
