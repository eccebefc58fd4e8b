"""
Version script runner.

Each subtype has one script, <scripts_path>/<subtype>.sh. The script runs
with the service location as working directory and no arguments, and prints
VERSION or VERSION|PACKAGE_INFO on stdout.

Classification
skipped     no script for the subtype
not_found   location missing or empty, chdir failed, or the script timed out
found       script exited 0, stdout parsed into a VersionRecord

Any other failure raises ScriptExecutionFailed.
"""

from __future__ import annotations

import os
import signal
import subprocess
from dataclasses import dataclass
from pathlib import Path

import structlog

from web_inspector.core.errors import ScriptExecutionFailed
from web_inspector.core.types import (
    NotFoundRecord,
    ProbeOutcome,
    ProbeStatus,
    ServiceItem,
    VersionRecord,
)
from web_inspector.probe.directory import is_empty_or_missing
from web_inspector.probe.version import parse_version_output

logger = structlog.get_logger()

SCRIPT_SUFFIX = ".sh"


def _kill_process_group(proc: subprocess.Popen) -> None:
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    proc.wait()


def _not_found(item: ServiceItem) -> ProbeOutcome:
    return ProbeOutcome(
        status=ProbeStatus.not_found,
        not_found=NotFoundRecord(domain=item.id, kind=item.sub_kind, path=item.path),
    )


@dataclass(frozen=True)
class ScriptRunner:
    """
    Locate and execute version scripts.

    scripts_path
    Directory holding the scripts.

    timeout_seconds
    Upper bound for one script run. Expiry is classified as not found.
    """

    scripts_path: Path
    timeout_seconds: float = 60.0

    def script_for(self, sub_kind: str) -> Path:
        return Path(self.scripts_path) / f"{sub_kind}{SCRIPT_SUFFIX}"

    def probe(self, item: ServiceItem, title: str = "") -> ProbeOutcome:
        """Probe one item and classify the result."""
        script = self.script_for(item.sub_kind)
        if not script.exists():
            logger.debug("script_skipped", domain=item.id, script=str(script))
            return ProbeOutcome(status=ProbeStatus.skipped)

        if is_empty_or_missing(item.path):
            logger.info("item_not_found", domain=item.id, path=item.path, reason="empty or missing")
            return _not_found(item)

        try:
            # own session, so a timeout can kill everything the script started
            proc = subprocess.Popen(
                [str(script)],
                cwd=item.path,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                start_new_session=True,
            )
        except OSError as exc:
            # subprocess reports a failed chdir with the working directory as filename
            if exc.filename is not None and str(exc.filename) == str(item.path):
                logger.info("item_not_found", domain=item.id, path=item.path, reason="chdir")
                return _not_found(item)
            raise ScriptExecutionFailed(f"cannot execute {script}: {exc}") from exc

        with proc:
            try:
                stdout, stderr = proc.communicate(timeout=self.timeout_seconds)
            except subprocess.TimeoutExpired:
                _kill_process_group(proc)
                logger.warning(
                    "item_not_found",
                    domain=item.id,
                    path=item.path,
                    reason="timeout",
                    timeout_seconds=self.timeout_seconds,
                )
                return _not_found(item)

        if proc.returncode != 0:
            raise ScriptExecutionFailed(
                f"{script} exited with status {proc.returncode} in {item.path}: {(stderr or '').strip()}"
            )

        version, packages = parse_version_output(stdout or "")
        logger.info("version_found", domain=item.id, kind=item.sub_kind, version=version)
        return ProbeOutcome(
            status=ProbeStatus.found,
            version=VersionRecord(
                domain=item.id,
                kind=item.sub_kind,
                title=title,
                path=item.path,
                version=version,
                packages_versions=packages,
            ),
        )
