"""
Document database interfaces.

Goal
One data source abstraction for both reading service records and writing
result documents, so the pipeline is not bound to a transport.

We keep the interfaces narrow so they are easy to mock in tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Protocol


@dataclass(frozen=True)
class HttpResponse:
    """
    Raw http response.

    status is always set, including for error statuses. Callers decide which
    statuses are failures.
    """

    status: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    reason: str = ""

    def header(self, name: str) -> Optional[str]:
        """Case insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return None


class HttpClient(Protocol):
    """Simple http client interface for testability."""

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Optional[bytes] = None,
    ) -> HttpResponse:
        """Send a request and return the response, whatever its status."""


class DocumentDB(Protocol):
    """
    Document database interface expected by the fetcher and the result store.

    query_view
    Returns the rows of a view for a key range. Each row is a dict with at
    least a value entry.

    get_revision
    Returns the current revision of a document, or None when it does not exist.

    put
    Writes a document and returns its new revision.
    """

    def query_view(
        self,
        design: str,
        view: str,
        startkey: Any,
        endkey: Any,
    ) -> list[dict[str, Any]]:
        """Query a view and return its rows."""

    def get_revision(self, doc_id: str) -> Optional[str]:
        """Return the current revision for doc_id, or None if absent."""

    def put(self, doc_id: str, doc: dict[str, Any]) -> str:
        """Write doc under doc_id and return the new revision."""
