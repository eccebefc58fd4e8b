from __future__ import annotations

import pytest

from web_inspector.core.errors import DocumentDBError, StoreFailed
from web_inspector.core.types import NotFoundRecord, VersionRecord
from web_inspector.db.memory import InMemoryDocumentDB
from web_inspector.store import ResultStore


def make_records() -> tuple[list[VersionRecord], list[NotFoundRecord]]:
    items = [
        VersionRecord(
            domain="svc1",
            kind="nginx",
            title="NGINX Web Server",
            path="/var/www/site",
            version="1.18.0",
            packages_versions="modsecurity=3.0",
        ),
        VersionRecord(
            domain="svc2",
            kind="php",
            title="",
            path="/var/www/app",
            version="8.2.1",
        ),
    ]
    not_found = [NotFoundRecord(domain="svc3", kind="nginx", path="/var/www/gone")]
    return items, not_found


def test_insert_new_document():
    db = InMemoryDocumentDB()
    items, not_found = make_records()

    rev = ResultStore(db=db).upsert("host1", items, not_found)

    assert rev.startswith("1-")
    doc = db.docs["inspector-host1"]
    assert doc["type"] == "inspector"
    assert doc["sub_type"] == "web"
    assert doc["hostname"] == "host1"
    assert doc["items"][0] == {
        "domain": "svc1",
        "type": "nginx",
        "title": "NGINX Web Server",
        "path": "/var/www/site",
        "version": "1.18.0",
        "packages_versions": "modsecurity=3.0",
    }
    assert "packages_versions" not in doc["items"][1]
    assert doc["items_not_found"] == [{"domain": "svc3", "type": "nginx", "path": "/var/www/gone"}]
    assert "_rev" not in db.writes[0][1]


def test_upsert_twice_replaces_same_document():
    db = InMemoryDocumentDB()
    items, not_found = make_records()
    store = ResultStore(db=db)

    first = store.upsert("host1", items, not_found)
    second = store.upsert("host1", items[:1], [])

    assert list(db.docs.keys()) == ["inspector-host1"]
    assert first != second
    assert second.startswith("2-")
    assert db.writes[1][1]["_rev"] == first

    doc = db.docs["inspector-host1"]
    assert doc["_rev"] == second
    assert len(doc["items"]) == 1
    assert doc["items_not_found"] == []


def test_lookup_error_is_fatal():
    class BrokenDB(InMemoryDocumentDB):
        def get_revision(self, doc_id):
            raise DocumentDBError(500, "Internal Server Error", doc_id)

    db = BrokenDB()

    with pytest.raises(StoreFailed):
        ResultStore(db=db).upsert("host1", [], [])

    assert db.writes == []


def test_write_error_is_fatal():
    class ConflictDB(InMemoryDocumentDB):
        def put(self, doc_id, doc):
            raise DocumentDBError(409, "Conflict", doc_id)

    with pytest.raises(StoreFailed):
        ResultStore(db=ConflictDB()).upsert("host1", [], [])
