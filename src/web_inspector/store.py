"""
Result store.

One document per host, id inspector-<hostname>.

Upsert
Read the current revision first. If the document exists, write with that
revision so the whole document is replaced. If not, insert without one.
Content is last write wins. Old versions are only kept by CouchDB's own
revision history.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import structlog

from web_inspector.core.errors import DocumentDBError, StoreFailed
from web_inspector.core.serialization import result_document_to_json
from web_inspector.core.types import NotFoundRecord, ResultDocument, VersionRecord, result_document_id
from web_inspector.db.base import DocumentDB

logger = structlog.get_logger()


def build_result_document(
    hostname: str,
    items: Sequence[VersionRecord],
    not_found: Sequence[NotFoundRecord],
    revision: str | None = None,
) -> ResultDocument:
    return ResultDocument(
        hostname=hostname,
        items=list(items),
        not_found=list(not_found),
        revision=revision,
    )


@dataclass(frozen=True)
class ResultStore:
    """Persist ResultDocuments into a DocumentDB."""

    db: DocumentDB

    def upsert(
        self,
        hostname: str,
        items: Sequence[VersionRecord],
        not_found: Sequence[NotFoundRecord],
    ) -> str:
        """Insert or replace the host document and return its new revision."""
        doc_id = result_document_id(hostname)

        try:
            revision = self.db.get_revision(doc_id)
        except DocumentDBError as exc:
            raise StoreFailed(f"cannot read revision of {doc_id}: {exc}") from exc

        doc = build_result_document(hostname, items, not_found, revision=revision)

        try:
            new_revision = self.db.put(doc_id, result_document_to_json(doc))
        except DocumentDBError as exc:
            raise StoreFailed(f"cannot write {doc_id}: {exc}") from exc

        logger.info(
            "result_document_saved",
            doc_id=doc_id,
            rev=new_revision,
            replaced=revision is not None,
            items=len(doc.items),
            items_not_found=len(doc.not_found),
        )
        return new_revision
