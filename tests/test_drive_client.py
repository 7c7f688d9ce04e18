"""Tests for the Drive v3 client against googleapiclient's HTTP doubles.

Tests cover:
- Request URIs, methods and query parameters built from the discovery document
- Per-request AuthorizedHttp carrying the OAuth bearer token
- Multipart uploads and chunked media downloads
- HttpError passing through into batch outcomes
"""

import json
from urllib.parse import parse_qs, urlparse

import httplib2
import pytest
from google.oauth2.credentials import Credentials
from googleapiclient.errors import HttpError
from googleapiclient.http import HttpMockSequence

from gdrive_mcp.context import HandlerContext
from gdrive_mcp.drive.client import DriveClient
from gdrive_mcp.tools import batch, files


class HttpMockByRoute(HttpMockSequence):
    """HttpMockSequence that answers by (method, path) instead of call order.

    Batch tools issue requests from several threads at once, so the order in
    which they reach the transport is not fixed.
    """

    def __init__(self, routes):
        super().__init__([])
        self._routes = routes

    def request(
        self,
        uri,
        method="GET",
        body=None,
        headers=None,
        redirections=1,
        connection_type=None,
    ):
        self.request_sequence.append((uri, method, body, headers))
        resp, content = self._routes[(method, urlparse(uri).path)]
        return httplib2.Response(resp), content.encode("utf-8")


def _ok(payload=None, status="200"):
    return ({"status": status}, json.dumps(payload) if payload is not None else "")


def _not_found(file_id):
    body = {"error": {"code": 404, "message": f"File not found: {file_id}."}}
    return ({"status": "404"}, json.dumps(body))


def _split(uri):
    parsed = urlparse(uri)
    return parsed.path, {key: values[0] for key, values in parse_qs(parsed.query).items()}


@pytest.fixture
def client():
    return DriveClient(Credentials(token="test-token"))


@pytest.fixture
def transport(monkeypatch):
    """Install an HTTP double behind every AuthorizedHttp the client creates.

    Returns a function taking the responses (a list for HttpMockSequence or
    a route dict for HttpMockByRoute) and returning the double. The double's
    ``created`` attribute counts the transports built.
    """
    def install(responses):
        if isinstance(responses, dict):
            http = HttpMockByRoute(responses)
        else:
            http = HttpMockSequence(responses)
        http.created = 0

        def make_http(*args, **kwargs):
            http.created += 1
            return http

        monkeypatch.setattr("gdrive_mcp.drive.client.httplib2.Http", make_http)
        return http

    return install


@pytest.mark.unit
class TestRequests:
    """Test the requests sent for file operations."""

    @pytest.mark.asyncio
    async def test_get_file(self, client, transport):
        http = transport([_ok({"id": "A", "name": "a.txt"})])

        result = await client.get_file("A", "id, name")

        assert result == {"id": "A", "name": "a.txt"}
        uri, method, _, headers = http.request_sequence[0]
        path, query = _split(uri)
        assert method == "GET"
        assert path == "/drive/v3/files/A"
        assert query["fields"] == "id, name"
        assert query["supportsAllDrives"] == "true"
        assert headers["authorization"] == "Bearer test-token"

    @pytest.mark.asyncio
    async def test_each_request_gets_its_own_transport(self, client, transport):
        http = transport([_ok({"id": "A"}), _ok({"id": "B"})])

        await client.get_file("A", "id")
        await client.get_file("B", "id")

        assert http.created == 2

    @pytest.mark.asyncio
    async def test_list_files_passes_search_parameters(self, client, transport):
        http = transport([_ok({"files": []})])

        await client.list_files(
            q="trashed = false",
            pageSize=10,
            includeItemsFromAllDrives=True,
            fields="files(id, name)",
        )

        path, query = _split(http.request_sequence[0][0])
        assert path == "/drive/v3/files"
        assert query["q"] == "trashed = false"
        assert query["pageSize"] == "10"
        assert query["supportsAllDrives"] == "true"
        assert query["includeItemsFromAllDrives"] == "true"

    @pytest.mark.asyncio
    async def test_move_swaps_parents(self, client, transport):
        http = transport([
            _ok({"parents": ["p1", "p2"]}),
            _ok({"id": "A", "name": "a.txt", "parents": ["p3"]}),
        ])

        result = await files.move_to_folder(client, "A", "p3")

        assert result["parents"] == ["p3"]
        uri, method, _, _ = http.request_sequence[1]
        path, query = _split(uri)
        assert method == "PATCH"
        assert path == "/drive/v3/files/A"
        assert query["addParents"] == "p3"
        assert query["removeParents"] == "p1,p2"
        assert query["fields"] == "id, name, parents"

    @pytest.mark.asyncio
    async def test_create_with_content_is_multipart_upload(self, client, transport):
        http = transport([_ok({"id": "N1", "name": "notes.txt"})])

        await client.create_file(
            {"name": "notes.txt"}, "id, name", data=b"hello drive", mime_type="text/plain"
        )

        uri, method, body, headers = http.request_sequence[0]
        path, query = _split(uri)
        assert method == "POST"
        assert path == "/upload/drive/v3/files"
        assert query["uploadType"] == "multipart"
        assert headers["content-type"].startswith("multipart/related")
        assert b'"name": "notes.txt"' in body
        assert b"hello drive" in body

    @pytest.mark.asyncio
    async def test_list_permissions_wraps_field_mask(self, client, transport):
        http = transport([_ok({"permissions": []})])

        await client.list_permissions("A", "id, role")

        path, query = _split(http.request_sequence[0][0])
        assert path == "/drive/v3/files/A/permissions"
        assert query["fields"] == "permissions(id, role)"

    @pytest.mark.asyncio
    async def test_http_error_propagates(self, client, transport):
        transport([_not_found("Z")])

        with pytest.raises(HttpError) as excinfo:
            await client.get_file("Z", "id")

        assert excinfo.value.resp.status == 404


@pytest.mark.unit
class TestMedia:
    """Test media downloads and exports."""

    @pytest.mark.asyncio
    async def test_download_reads_every_chunk(self, client, transport, monkeypatch):
        monkeypatch.setattr("gdrive_mcp.drive.client.DOWNLOAD_CHUNK_SIZE_BYTES", 4)
        http = transport([
            ({"status": "206", "content-range": "bytes 0-3/6"}, "hell"),
            ({"status": "206", "content-range": "bytes 4-5/6"}, "o!"),
        ])

        data = await client.download_file("A")

        assert data == b"hello!"
        ranges = [headers["range"] for _, _, _, headers in http.request_sequence]
        assert ranges == ["bytes=0-3", "bytes=4-7"]
        path, query = _split(http.request_sequence[0][0])
        assert path == "/drive/v3/files/A"
        assert query["alt"] == "media"
        # one transport serves the whole chunk loop
        assert http.created == 1

    @pytest.mark.asyncio
    async def test_read_file_exports_document(self, client, transport):
        http = transport([
            _ok({"id": "D", "name": "Plan", "mimeType": "application/vnd.google-apps.document"}),
            ({"status": "200"}, "# Plan"),
        ])

        token = HandlerContext.use_drive_client(client)
        try:
            result = await files.read_file(file_id="D")
        finally:
            HandlerContext.reset_drive_client(token)

        assert result["status"] == "success"
        assert result["content"] == "# Plan"
        assert result["encoding"] == "utf-8"
        path, query = _split(http.request_sequence[1][0])
        assert path == "/drive/v3/files/D/export"
        assert query["mimeType"] == "text/markdown"


@pytest.mark.unit
class TestBatchOverHttp:
    """Test batch outcomes built from real API responses."""

    @pytest.mark.asyncio
    async def test_not_found_becomes_failed_outcome(self, client, transport):
        http = transport({
            ("DELETE", "/drive/v3/files/A"): _ok(status="204"),
            ("DELETE", "/drive/v3/files/B"): _not_found("B"),
        })

        token = HandlerContext.use_drive_client(client)
        try:
            result = await batch.batch_delete(file_ids=["A", "B"], permanent=True)
        finally:
            HandlerContext.reset_drive_client(token)

        assert result["summary"] == {"totalOperations": 2, "successful": 1, "failed": 1}
        assert result["results"][0] == {"success": True, "fileId": "A", "operation": "delete"}
        assert result["results"][1] == {
            "success": False,
            "fileId": "B",
            "operation": "delete",
            "error": "File not found: B.",
        }
        assert len(http.request_sequence) == 2
