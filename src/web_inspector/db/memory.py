"""
In memory document database.

This database is used for tests and local simulations.
It behaves like a tiny CouchDB: documents keyed by id, a revision counter per
document, and conflict detection on stale or missing revisions.

Features
- views holds canned rows per design/view pair
- put enforces CouchDB revision rules
- writes records every put for assertions
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from web_inspector.core.errors import DocumentDBError
from web_inspector.db.base import DocumentDB


@dataclass
class InMemoryDocumentDB(DocumentDB):
    """
    In memory DocumentDB.

    views
    Mapping of "design/view" to rows. Rows whose key is outside
    [startkey, endkey] are filtered out.

    docs
    Stored documents by id, each carrying its _rev.

    writes
    Every (doc_id, doc) passed to put, in call order.
    """

    views: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    docs: dict[str, dict[str, Any]] = field(default_factory=dict)
    writes: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def query_view(
        self,
        design: str,
        view: str,
        startkey: Any,
        endkey: Any,
    ) -> list[dict[str, Any]]:
        name = f"{design}/{view}"
        if name not in self.views:
            raise DocumentDBError(404, "missing view", name)

        rows = []
        for row in self.views[name]:
            key = row.get("key")
            if key is None or startkey <= key <= endkey:
                rows.append(copy.deepcopy(row))
        return rows

    def get_revision(self, doc_id: str) -> Optional[str]:
        doc = self.docs.get(doc_id)
        if doc is None:
            return None
        return str(doc["_rev"])

    def put(self, doc_id: str, doc: dict[str, Any]) -> str:
        self.writes.append((doc_id, copy.deepcopy(doc)))

        current = self.docs.get(doc_id)
        given = doc.get("_rev")
        if current is None and given is not None:
            raise DocumentDBError(409, "conflict", doc_id)
        if current is not None and given != current["_rev"]:
            raise DocumentDBError(409, "conflict", doc_id)

        generation = 1 if current is None else int(str(current["_rev"]).split("-", 1)[0]) + 1
        rev = f"{generation}-{uuid.uuid4().hex}"

        stored = copy.deepcopy(doc)
        stored["_id"] = doc_id
        stored["_rev"] = rev
        self.docs[doc_id] = stored
        return rev
