from __future__ import annotations

import base64
import json
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import parse_qs, urlsplit

import pytest

from web_inspector.config import CouchDBConfig
from web_inspector.core.errors import DocumentDBError, StoreFailed
from web_inspector.db.base import HttpResponse
from web_inspector.db.couchdb import CouchDBClient
from web_inspector.store import ResultStore


@dataclass
class RecordingHttpClient:
    """Returns queued responses and records every request."""

    responses: list[HttpResponse] = field(default_factory=list)
    requests: list[tuple[str, str, dict[str, str], Optional[bytes]]] = field(default_factory=list)

    def request(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Optional[bytes] = None,
    ) -> HttpResponse:
        self.requests.append((method, url, headers, body))
        return self.responses.pop(0)


def make_client(*responses: HttpResponse, **kwargs) -> tuple[CouchDBClient, RecordingHttpClient]:
    http = RecordingHttpClient(responses=list(responses))
    client = CouchDBClient(base_url="http://couch:5984/", db="desk_drawer", http=http, **kwargs)
    return client, http


def test_query_view_encodes_keys_and_returns_rows():
    body = json.dumps({"total_rows": 1, "offset": 0, "rows": [{"id": "a", "key": ["web"], "value": {}}]})
    client, http = make_client(HttpResponse(status=200, body=body.encode("utf-8")))

    rows = client.query_view("desk_drawer", "service_type", startkey=["web"], endkey=["web"])

    assert rows == [{"id": "a", "key": ["web"], "value": {}}]
    method, url, headers, _ = http.requests[0]
    parts = urlsplit(url)
    assert method == "GET"
    assert parts.path == "/desk_drawer/_design/desk_drawer/_view/service_type"
    query = parse_qs(parts.query)
    assert query["startkey"] == ['["web"]']
    assert query["endkey"] == ['["web"]']
    assert "Authorization" not in headers


def test_query_view_error_status_raises():
    client, _ = make_client(HttpResponse(status=401, reason="Unauthorized"))

    with pytest.raises(DocumentDBError) as excinfo:
        client.query_view("desk_drawer", "service_type", startkey=["web"], endkey=["web"])

    assert excinfo.value.status == 401


def test_basic_auth_comes_from_credentials():
    client, http = make_client(
        HttpResponse(status=404, reason="Object Not Found"),
        user="inspector",
        password="s3cret",
    )

    client.get_revision("inspector-host1")

    headers = http.requests[0][2]
    expected = base64.b64encode(b"inspector:s3cret").decode("ascii")
    assert headers["Authorization"] == f"Basic {expected}"


def test_get_revision_reads_etag():
    client, http = make_client(HttpResponse(status=200, headers={"ETag": '"3-abc"'}))

    assert client.get_revision("inspector-host1") == "3-abc"
    method, url, _, _ = http.requests[0]
    assert method == "HEAD"
    assert url == "http://couch:5984/desk_drawer/inspector-host1"


def test_get_revision_missing_document():
    client, _ = make_client(HttpResponse(status=404, reason="Object Not Found"))

    assert client.get_revision("inspector-host1") is None


def test_get_revision_other_error_raises():
    client, _ = make_client(HttpResponse(status=500, reason="Internal Server Error"))

    with pytest.raises(DocumentDBError):
        client.get_revision("inspector-host1")


def test_put_sends_document_and_returns_rev():
    body = json.dumps({"ok": True, "id": "inspector-host1", "rev": "2-def"}).encode("utf-8")
    client, http = make_client(HttpResponse(status=201, body=body))
    doc = {"_id": "inspector-host1", "_rev": "1-abc", "type": "inspector"}

    rev = client.put("inspector-host1", doc)

    assert rev == "2-def"
    method, url, headers, sent = http.requests[0]
    assert method == "PUT"
    assert url.endswith("/desk_drawer/inspector-host1")
    assert headers["Content-Type"] == "application/json"
    assert sent is not None
    assert json.loads(sent.decode("utf-8")) == doc


def test_put_conflict_raises():
    client, _ = make_client(HttpResponse(status=409, reason="Conflict"))

    with pytest.raises(DocumentDBError) as excinfo:
        client.put("inspector-host1", {"_id": "inspector-host1"})

    assert excinfo.value.status == 409


def test_transport_error_becomes_document_db_error():
    class Unreachable:
        def request(self, method, url, headers, body=None):
            raise ConnectionRefusedError("connection refused")

    client = CouchDBClient(base_url="http://couch:5984", db="desk_drawer", http=Unreachable())

    with pytest.raises(DocumentDBError):
        client.get_revision("inspector-host1")


def test_from_config():
    cfg = CouchDBConfig(uri="http://couch:5984", db="desk_drawer", user="u", password="p")

    client = CouchDBClient.from_config(cfg)

    assert client.base_url == "http://couch:5984"
    assert client.db == "desk_drawer"
    assert client.user == "u"


def test_query_view_non_json_body_raises():
    client, _ = make_client(HttpResponse(status=200, body=b"<html>proxy</html>"))

    with pytest.raises(DocumentDBError, match="invalid json body"):
        client.query_view("desk_drawer", "service_type", startkey=["web"], endkey=["web"])


def test_put_non_json_body_raises():
    client, _ = make_client(HttpResponse(status=201, body=b"<html>proxy</html>"))

    with pytest.raises(DocumentDBError, match="invalid json body"):
        client.put("inspector-host1", {"_id": "inspector-host1"})


def test_store_reports_non_json_write_response_as_store_failure():
    client, _ = make_client(
        HttpResponse(status=404, reason="Object Not Found"),
        HttpResponse(status=201, body=b"<html>proxy</html>"),
    )

    with pytest.raises(StoreFailed):
        ResultStore(db=client).upsert("host1", [], [])
