"""
CouchDB document database.

This is a minimal CouchDB http client with no third party deps.
It covers exactly what the inspector needs:

view query
GET {uri}/{db}/_design/{design}/_view/{view}?startkey=..&endkey=..

revision lookup
HEAD {uri}/{db}/{id}, the revision is the quoted ETag header.

document write
PUT {uri}/{db}/{id} with the json document, _rev included when replacing.

Credentials are sent as basic auth and only come from configuration.
"""

from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from typing import Any, Optional
from urllib.error import HTTPError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

import structlog

from web_inspector.config import CouchDBConfig
from web_inspector.core.errors import DocumentDBError
from web_inspector.db.base import DocumentDB, HttpClient, HttpResponse

logger = structlog.get_logger()


@dataclass
class UrllibHttpClient(HttpClient):
    """Default http client using urllib."""

    timeout_seconds: float = 10.0

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Optional[bytes] = None,
    ) -> HttpResponse:
        req = Request(url, data=body, headers=headers, method=method)
        try:
            with urlopen(req, timeout=self.timeout_seconds) as resp:
                return HttpResponse(
                    status=resp.status,
                    body=resp.read(),
                    headers=dict(resp.headers.items()),
                    reason=resp.reason or "",
                )
        except HTTPError as exc:
            return HttpResponse(
                status=exc.code,
                body=exc.read() if exc.fp is not None else b"",
                headers=dict(exc.headers.items()) if exc.headers else {},
                reason=str(exc.reason),
            )


def _json_param(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"))


def _json_body(resp: HttpResponse, url: str) -> Any:
    try:
        return json.loads(resp.body.decode("utf-8"))
    except ValueError as exc:
        raise DocumentDBError(resp.status, "invalid json body", url) from exc


@dataclass
class CouchDBClient(DocumentDB):
    """
    CouchDB backed DocumentDB.

    base_url is the server uri, db the database name.
    user and password are optional. When both are set, every request carries
    a basic auth header.
    """

    base_url: str
    db: str
    user: Optional[str] = None
    password: Optional[str] = None
    http: HttpClient = None  # type: ignore

    def __post_init__(self) -> None:
        self.base_url = self.base_url.rstrip("/")
        if self.http is None:
            self.http = UrllibHttpClient()

    @classmethod
    def from_config(cls, cfg: CouchDBConfig, http: HttpClient | None = None) -> CouchDBClient:
        return cls(
            base_url=cfg.uri,
            db=cfg.db,
            user=cfg.user,
            password=cfg.password,
            http=http or UrllibHttpClient(timeout_seconds=cfg.timeout_seconds),
        )

    def _db_url(self) -> str:
        return f"{self.base_url}/{quote(self.db, safe='')}"

    def _doc_url(self, doc_id: str) -> str:
        return f"{self._db_url()}/{quote(doc_id, safe='')}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.user and self.password is not None:
            raw = f"{self.user}:{self.password}".encode("utf-8")
            headers["Authorization"] = "Basic " + base64.b64encode(raw).decode("ascii")
        return headers

    def _send(
        self,
        method: str,
        url: str,
        body: Optional[bytes] = None,
    ) -> HttpResponse:
        headers = self._headers()
        if body is not None:
            headers["Content-Type"] = "application/json"
        try:
            return self.http.request(method, url, headers=headers, body=body)
        except OSError as exc:
            raise DocumentDBError(0, str(exc), url) from exc

    def query_view(
        self,
        design: str,
        view: str,
        startkey: Any,
        endkey: Any,
    ) -> list[dict[str, Any]]:
        params = urlencode({"startkey": _json_param(startkey), "endkey": _json_param(endkey)})
        url = (
            f"{self._db_url()}/_design/{quote(design, safe='')}"
            f"/_view/{quote(view, safe='')}?{params}"
        )

        resp = self._send("GET", url)
        if resp.status != 200:
            raise DocumentDBError(resp.status, resp.reason, url)

        data = _json_body(resp, url)
        rows = data.get("rows", []) if isinstance(data, dict) else []
        if not isinstance(rows, list):
            return []

        logger.debug("view_queried", design=design, view=view, rows=len(rows))
        return [r for r in rows if isinstance(r, dict)]

    def get_revision(self, doc_id: str) -> Optional[str]:
        url = self._doc_url(doc_id)
        resp = self._send("HEAD", url)
        if resp.status == 404:
            return None
        if resp.status != 200:
            raise DocumentDBError(resp.status, resp.reason, url)

        etag = resp.header("ETag")
        if not etag:
            raise DocumentDBError(resp.status, "missing ETag", url)
        return etag.strip().strip('"')

    def put(self, doc_id: str, doc: dict[str, Any]) -> str:
        url = self._doc_url(doc_id)
        body = json.dumps(doc).encode("utf-8")
        resp = self._send("PUT", url, body=body)
        if resp.status not in (201, 202):
            raise DocumentDBError(resp.status, resp.reason, url)

        data = _json_body(resp, url)
        if not isinstance(data, dict):
            raise DocumentDBError(resp.status, "unexpected write response", url)
        return str(data.get("rev", ""))
