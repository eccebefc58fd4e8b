"""
Core types.

This file defines the shared data structures used across the inspector.

Important design choice
Records are plain dataclasses. The CouchDB wire names (type, sub_type,
items_not_found) live in core.serialization only, so the rest of the code
uses python names.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import List, Optional

DOC_TYPE = "inspector"
DOC_SUB_TYPE = "web"


def result_document_id(hostname: str) -> str:
    """Stable document id for one host."""
    return f"{DOC_TYPE}-{hostname}"


@dataclass(frozen=True)
class ServiceItem:
    """
    One deployed service instance discovered in the inventory source.

    id
      Domain or service identifier, for example svc1 or example.org.

    kind
      Service type from the inventory, usually web.

    sub_kind
      Technology subtype. Selects the version check script.

    path
      Filesystem location the script runs in.
    """

    id: str
    kind: str
    sub_kind: str
    path: str


@dataclass(frozen=True)
class VersionRecord:
    """A successfully probed item."""

    domain: str
    kind: str
    title: str
    path: str
    version: str
    packages_versions: Optional[str] = None


@dataclass(frozen=True)
class NotFoundRecord:
    """An item whose location could not be probed this run."""

    domain: str
    kind: str
    path: str


class ProbeStatus(StrEnum):
    """
    Probe classification.

    found
      Script ran and reported a version.

    not_found
      Directory missing or empty, chdir failed, or the script timed out.

    skipped
      No script exists for the subtype. No record is produced.
    """

    found = "found"
    not_found = "not_found"
    skipped = "skipped"


@dataclass(frozen=True)
class ProbeOutcome:
    """
    Result of probing one item.

    version is set for found, not_found is set for not_found,
    both are None for skipped.
    """

    status: ProbeStatus
    version: Optional[VersionRecord] = None
    not_found: Optional[NotFoundRecord] = None


@dataclass
class ReconcileResult:
    """
    Output of one reconcile pass.

    items and not_found partition the processed items of the run.
    """

    items: List[VersionRecord] = field(default_factory=list)
    not_found: List[NotFoundRecord] = field(default_factory=list)


@dataclass
class ResultDocument:
    """
    Per host inventory document.

    id is always inspector-<hostname>, so a host maps to exactly one document.
    revision is the CouchDB _rev of the document being replaced, if any.
    """

    hostname: str
    items: List[VersionRecord] = field(default_factory=list)
    not_found: List[NotFoundRecord] = field(default_factory=list)
    revision: Optional[str] = None
    doc_type: str = DOC_TYPE
    doc_sub_type: str = DOC_SUB_TYPE

    @property
    def id(self) -> str:
        return result_document_id(self.hostname)
