"""
Error taxonomy.

We separate error types so callers can react correctly.
Expected per item failures (missing script, missing directory, chdir failure,
timeout) are not errors. They become NotFoundRecord entries or are skipped.

Everything below aborts the run:
ConfigError stops before anything is queried.
ItemFetchFailed stops before any script runs.
ScriptExecutionFailed stops mid run, nothing is persisted.
StoreFailed means the result document was not written.
"""

from __future__ import annotations


class InspectorError(Exception):
    """Base class for all inspector exceptions."""


class ConfigError(InspectorError):
    """Raised when the configuration file is missing or incomplete."""


class DocumentDBError(InspectorError):
    """Raised when the document database answers with an unexpected status."""

    def __init__(self, status: int, reason: str, url: str = "") -> None:
        super().__init__(f"{status} {reason} {url}".strip())
        self.status = status
        self.reason = reason
        self.url = url


class ItemFetchFailed(InspectorError):
    """Raised when service items cannot be fetched from the inventory source."""


class ScriptExecutionFailed(InspectorError):
    """Raised when a version script fails for a reason other than its working directory."""


class StoreFailed(InspectorError):
    """Raised when the result document cannot be read or written."""
