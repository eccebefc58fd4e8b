from __future__ import annotations

from dataclasses import asdict
from typing import Any

from web_inspector.core.types import NotFoundRecord, ResultDocument, VersionRecord


def version_record_to_json(rec: VersionRecord) -> dict[str, Any]:
    """
    VersionRecord transport shape.

    packages_versions is omitted when unset, matching documents written by
    earlier inspector releases.
    """
    raw = asdict(rec)
    out: dict[str, Any] = {
        "domain": raw["domain"],
        "type": raw["kind"],
        "title": raw["title"],
        "path": raw["path"],
        "version": raw["version"],
    }
    if raw["packages_versions"]:
        out["packages_versions"] = raw["packages_versions"]
    return out


def not_found_record_to_json(rec: NotFoundRecord) -> dict[str, Any]:
    return {"domain": rec.domain, "type": rec.kind, "path": rec.path}


def result_document_to_json(doc: ResultDocument) -> dict[str, Any]:
    """
    ResultDocument transport shape.

    _rev is only present when replacing an existing document.
    """
    out: dict[str, Any] = {"_id": doc.id}
    if doc.revision:
        out["_rev"] = doc.revision
    out["type"] = doc.doc_type
    out["sub_type"] = doc.doc_sub_type
    out["hostname"] = doc.hostname
    out["items"] = [version_record_to_json(r) for r in doc.items]
    out["items_not_found"] = [not_found_record_to_json(r) for r in doc.not_found]
    return out
