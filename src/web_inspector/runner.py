"""
Inspector runner.

Purpose
Run one inspection pass:
- Fetch service items
- Probe each item with its version script
- Report the result, printed or persisted

This is the composition layer of the system.
It wires the item source, script runner, reconciler, and reporter from
configuration. The parts below it know nothing about configuration files.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TextIO

import structlog

from web_inspector.config import InspectorConfig
from web_inspector.core.types import ReconcileResult
from web_inspector.db.base import DocumentDB
from web_inspector.db.couchdb import CouchDBClient
from web_inspector.inventory.fetcher import CouchViewItemSource, ItemSource
from web_inspector.inventory.static import StaticItemSource
from web_inspector.probe.script import ScriptRunner
from web_inspector.reconcile import Reconciler
from web_inspector.report import Reporter, ReportMode
from web_inspector.store import ResultStore

logger = structlog.get_logger()


@dataclass(frozen=True)
class RunSummary:
    """What one pass did."""

    hostname: str
    result: ReconcileResult
    revision: str | None


class InspectorRunner:
    """
    Top level inspection pass.

    dry_run
    Print found versions and not found diagnostics, never write.
    """

    def __init__(
        self,
        config: InspectorConfig,
        db: DocumentDB | None = None,
        item_source: ItemSource | None = None,
        dry_run: bool = False,
        out: TextIO | None = None,
    ) -> None:
        self._config = config
        self._dry_run = dry_run
        self._out = out or sys.stdout
        self._db = db or CouchDBClient.from_config(config.couchdb)

        if item_source is not None:
            self._item_source = item_source
        elif config.items_file is not None:
            self._item_source = StaticItemSource(path=config.items_file)
        else:
            self._item_source = CouchViewItemSource(
                db=self._db,
                design=config.couchdb.design,
                view=config.couchdb.view,
            )

        self._reconciler = Reconciler(
            runner=ScriptRunner(
                scripts_path=config.scripts_path,
                timeout_seconds=config.script_timeout_seconds,
            ),
            titles=config.titles,
            verbose=dry_run,
            out=self._out,
        )

        if dry_run:
            self._reporter = Reporter(mode=ReportMode.print, out=self._out)
        else:
            self._reporter = Reporter(
                mode=ReportMode.persist,
                store=ResultStore(db=self._db),
                out=self._out,
            )

    def run(self) -> RunSummary:
        """
        Execute one inspection pass.

        Errors propagate. Nothing is written unless every item was probed.
        """
        hostname = self._config.hostname
        log = logger.bind(hostname=hostname, dry_run=self._dry_run)

        items = self._item_source.fetch()
        log.info("inspection_started", items=len(items))

        result = self._reconciler.reconcile(items)
        revision = self._reporter.report(hostname, result)

        log.info(
            "inspection_finished",
            found=len(result.items),
            not_found=len(result.not_found),
        )
        return RunSummary(hostname=hostname, result=result, revision=revision)
