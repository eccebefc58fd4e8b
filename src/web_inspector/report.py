"""
Reporting modes.

print
Dry run. Write one entry per found version to stdout, persist nothing.

persist
Upsert the host document, print nothing.

There is no combined mode.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import StrEnum
from typing import TextIO

from web_inspector.core.types import ReconcileResult, VersionRecord
from web_inspector.store import ResultStore


class ReportMode(StrEnum):
    print = "print"
    persist = "persist"


def format_version_record(rec: VersionRecord) -> str:
    """Two line human readable entry for one found version."""
    versions = rec.version
    if rec.packages_versions:
        versions = f"{versions}; {rec.packages_versions}"
    return f"- {rec.domain}:{rec.kind} - {rec.title}\n  {versions}"


@dataclass
class Reporter:
    mode: ReportMode
    store: ResultStore | None = None
    out: TextIO = None  # type: ignore

    def __post_init__(self) -> None:
        if self.out is None:
            self.out = sys.stdout
        if self.mode == ReportMode.persist and self.store is None:
            raise ValueError("persist mode needs a result store")

    def report(self, hostname: str, result: ReconcileResult) -> str | None:
        """
        Emit the result.

        Returns the new document revision in persist mode, None otherwise.
        """
        if self.mode == ReportMode.print:
            for rec in result.items:
                print(format_version_record(rec), file=self.out)
            return None

        if self.store is None:
            raise ValueError("persist mode needs a result store")
        return self.store.upsert(hostname, result.items, result.not_found)
