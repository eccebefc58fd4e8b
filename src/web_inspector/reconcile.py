"""
Reconciler.

Turns fetched service items into found and not found records.

Items are processed in fetch order, one at a time. There are no retries and
no deduplication: a service listed twice is probed twice.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Iterable, Mapping, TextIO

from web_inspector.core.types import ProbeStatus, ReconcileResult, ServiceItem
from web_inspector.probe.script import ScriptRunner


@dataclass
class Reconciler:
    """
    Probe items and collect the outcome.

    titles
    Display title per subtype. Missing subtypes get an empty title.

    verbose
    Print a diagnostic line to out for every not found item.
    """

    runner: ScriptRunner
    titles: Mapping[str, str] = field(default_factory=dict)
    verbose: bool = False
    out: TextIO = None  # type: ignore

    def __post_init__(self) -> None:
        if self.out is None:
            self.out = sys.stdout

    def title_for(self, sub_kind: str) -> str:
        return str(self.titles.get(sub_kind, "") or "").strip()

    def reconcile(self, items: Iterable[ServiceItem]) -> ReconcileResult:
        result = ReconcileResult()

        for item in items:
            outcome = self.runner.probe(item, title=self.title_for(item.sub_kind))

            if outcome.status == ProbeStatus.found and outcome.version is not None:
                result.items.append(outcome.version)
            elif outcome.status == ProbeStatus.not_found and outcome.not_found is not None:
                if self.verbose:
                    print(f"!chdir not found:{item.path}", file=self.out)
                result.not_found.append(outcome.not_found)

        return result
