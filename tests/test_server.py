"""Tests for the MCP server.

Tests cover:
- Server initialization and default configuration
- Configuration precedence through create_server
- Tool registration with FastMCP and the registry
- Tool invocation with the server bound as handler context
- Lazy Drive client creation and missing credentials
- Per-request credentials from the HTTP "config" query parameter
"""

import base64
import json
from types import SimpleNamespace

import pytest

from gdrive_mcp.context import HandlerContext, get_drive_client
from gdrive_mcp.drive.client import DriveClient
from gdrive_mcp.exceptions import CredentialsError
from gdrive_mcp.server import GDriveMCPServer, create_server

from fakes import FakeDriveClient


@pytest.fixture
def server_config():
    return {
        "name": "test-drive-server",
        "transport": {"type": "stdio"},
        "logging": {"level": "DEBUG", "format": "text"},
    }


@pytest.mark.unit
class TestServerInitialization:
    """Test server initialization."""

    def test_defaults(self):
        server = GDriveMCPServer()

        assert server.name == "google-drive-server"
        assert server.transport_type == "http"
        assert server.host == "0.0.0.0"
        assert server.port == 8081
        assert server.batch_max_concurrency == 10
        assert server.mcp is not None

    def test_custom_config(self, server_config):
        server = GDriveMCPServer(server_config)

        assert server.name == "test-drive-server"
        assert server.transport_type == "stdio"
        assert server.log_format == "text"
        # unspecified keys keep their defaults
        assert server.port == 8081

    def test_create_server_reads_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("PORT", "9300")
        monkeypatch.setenv("GDRIVE_BATCH_MAX_CONCURRENCY", "3")

        server = create_server()

        assert server.port == 9300
        assert server.batch_max_concurrency == 3

    def test_null_settings_use_defaults(self):
        server = GDriveMCPServer({
            "transport": {"port": None},
            "batch": {"max_concurrency": None},
        })

        assert server.port == 8081
        assert server.batch_max_concurrency == 10

    def test_zero_concurrency_kept(self):
        server = GDriveMCPServer({"batch": {"max_concurrency": 0}})
        assert server.batch_max_concurrency == 0

    def test_create_server_overrides_environment(self, clean_env, monkeypatch):
        monkeypatch.setenv("PORT", "9300")

        server = create_server({"transport": {"port": 9400}})

        assert server.port == 9400

    def test_capabilities(self, server_config):
        server = GDriveMCPServer(server_config)
        server._register_capabilities()

        capabilities = server.get_capabilities()
        assert capabilities["server"]["name"] == "test-drive-server"
        assert capabilities["capabilities"]["tools"] == {"listChanged": False, "count": 43}


@pytest.mark.unit
class TestToolRegistration:
    """Test tool registration at startup."""

    def test_all_tools_registered_and_frozen(self, server_config):
        server = GDriveMCPServer(server_config)
        server._register_capabilities()

        assert server.tool_registry.count() == 43
        assert server.tool_registry.frozen
        assert server.tool_registry.categories() == {
            "search": 3,
            "read": 3,
            "write": 10,
            "delete": 2,
            "permissions": 6,
            "comments": 6,
            "shared_drives": 6,
            "quota": 2,
            "batch": 5,
        }

    def test_registration_is_idempotent(self, server_config):
        server = GDriveMCPServer(server_config)
        server._register_capabilities()
        server._register_capabilities()

        assert server.tool_registry.count() == 43

    @pytest.mark.asyncio
    async def test_tools_listed_by_fastmcp(self, server_config):
        server = GDriveMCPServer(server_config)
        server._register_capabilities()

        tools = await server.mcp.list_tools()
        names = {tool.name for tool in tools}

        assert len(names) == 43
        assert "gdrive_batch_delete" in names
        batch_delete = next(tool for tool in tools if tool.name == "gdrive_batch_delete")
        assert "file_ids" in batch_delete.inputSchema["properties"]


@pytest.mark.integration
class TestToolInvocation:
    """Test invoking registered tools against an injected client."""

    @pytest.mark.asyncio
    async def test_batch_delete_through_registry(self, server_config):
        fake = FakeDriveClient()
        fake.add_file("A", "alpha.txt")
        server = GDriveMCPServer(server_config, drive_client=fake)
        server._register_capabilities()

        result = await server.tool_registry.invoke(
            "gdrive_batch_delete", {"file_ids": ["A", "B"]}
        )

        assert result["summary"] == {"totalOperations": 2, "successful": 1, "failed": 1}
        # the server binding is scoped to the call
        assert HandlerContext.get() is None

    @pytest.mark.asyncio
    async def test_batch_uses_configured_concurrency(self, server_config, monkeypatch):
        seen = []

        async def fake_run_batch(tool_name, operations, perform, describe, max_concurrency=0):
            seen.append(max_concurrency)
            return {"status": "success", "results": [], "summary": {}}

        monkeypatch.setattr("gdrive_mcp.tools.batch.run_batch", fake_run_batch)
        server_config["batch"] = {"max_concurrency": 2}
        server = GDriveMCPServer(server_config, drive_client=FakeDriveClient())
        server._register_capabilities()

        await server.tool_registry.invoke("gdrive_batch_get_metadata", {"file_ids": ["A"]})

        assert seen == [2]

    @pytest.mark.asyncio
    async def test_search_through_fastmcp(self, server_config):
        fake = FakeDriveClient()
        fake.add_file("A", "quarterly report.txt")
        server = GDriveMCPServer(server_config, drive_client=fake)
        server._register_capabilities()

        await server.mcp.call_tool("gdrive_search", {"query": "report"})

        assert fake.calls_to("list_files")[0]["q"] == (
            "(name contains 'report') and trashed = false"
        )

    @pytest.mark.asyncio
    async def test_missing_credentials_reported(self, clean_env, server_config):
        server = GDriveMCPServer(server_config)
        server._register_capabilities()

        result = await server.tool_registry.invoke("gdrive_get_quota", {})

        assert result["status"] == "error"
        assert result["error_code"] == "CREDENTIALS_MISSING"


@pytest.mark.unit
class TestDriveClientCreation:
    """Test lazy Drive client creation."""

    def test_client_requires_credentials(self):
        server = GDriveMCPServer()
        with pytest.raises(CredentialsError):
            server.get_drive_client()

    def test_client_built_from_credentials(self, monkeypatch):
        built = {}

        def fake_build(service, version, credentials=None, cache_discovery=True):
            built.update(service=service, version=version, credentials=credentials)
            return object()

        monkeypatch.setattr("gdrive_mcp.drive.client.build", fake_build)
        server = GDriveMCPServer({
            "credentials": {
                "client_id": "id",
                "client_secret": "secret",
                "refresh_token": "refresh",
            },
        })

        client = server.get_drive_client()

        assert isinstance(client, DriveClient)
        assert server.get_drive_client() is client
        assert built["service"] == "drive"
        assert built["version"] == "v3"
        assert built["credentials"].refresh_token == "refresh"

    @pytest.mark.asyncio
    async def test_stop_drops_client(self):
        server = GDriveMCPServer(drive_client=FakeDriveClient())
        await server.stop()
        assert server._drive_client is None

    @pytest.mark.asyncio
    async def test_unsupported_transport(self):
        server = GDriveMCPServer({"transport": {"type": "carrier-pigeon"}})
        with pytest.raises(ValueError, match="not supported"):
            await server.start()


def _http_context(config=None):
    """Stand-in for FastMCP's Context during an HTTP request."""
    query_params = {} if config is None else {"config": config}
    request = SimpleNamespace(query_params=query_params)
    return SimpleNamespace(request_context=SimpleNamespace(request=request))


def _credentials(refresh_token):
    return {"CLIENT_ID": "id", "CLIENT_SECRET": "secret", "REFRESH_TOKEN": refresh_token}


async def _current_client():
    return {"client": get_drive_client()}


@pytest.mark.unit
class TestRequestCredentials:
    """Test credentials supplied per HTTP request."""

    @pytest.fixture(autouse=True)
    def no_build(self, monkeypatch):
        monkeypatch.setattr(
            "gdrive_mcp.drive.client.build", lambda *args, **kwargs: object()
        )

    @pytest.mark.asyncio
    async def test_different_credentials_get_different_clients(self, monkeypatch):
        process_client = FakeDriveClient()
        server = GDriveMCPServer(drive_client=process_client)
        bound = server._bind_context(_current_client)
        contexts = iter([
            _http_context(json.dumps(_credentials("alice-token"))),
            _http_context(json.dumps(_credentials("bob-token"))),
        ])
        monkeypatch.setattr(server.mcp, "get_context", lambda: next(contexts))

        alice = (await bound())["client"]
        bob = (await bound())["client"]

        assert isinstance(alice, DriveClient)
        assert isinstance(bob, DriveClient)
        assert alice is not bob
        assert alice._credentials.refresh_token == "alice-token"
        assert bob._credentials.refresh_token == "bob-token"
        # the process-wide client is untouched
        assert server._drive_client is process_client

    @pytest.mark.asyncio
    async def test_base64_config_accepted(self, monkeypatch):
        server = GDriveMCPServer()
        bound = server._bind_context(_current_client)
        encoded = base64.b64encode(json.dumps(_credentials("b64-token")).encode()).decode()
        monkeypatch.setattr(server.mcp, "get_context", lambda: _http_context(encoded))

        client = (await bound())["client"]

        assert client._credentials.refresh_token == "b64-token"

    @pytest.mark.asyncio
    async def test_partial_request_config_completed_from_process(self, monkeypatch):
        server = GDriveMCPServer({
            "credentials": {
                "client_id": "process-id",
                "client_secret": "process-secret",
                "refresh_token": "process-token",
            },
        })
        bound = server._bind_context(_current_client)
        monkeypatch.setattr(
            server.mcp,
            "get_context",
            lambda: _http_context(json.dumps({"REFRESH_TOKEN": "caller-token"})),
        )

        client = (await bound())["client"]

        assert client._credentials.refresh_token == "caller-token"
        assert client._credentials.client_id == "process-id"

    @pytest.mark.asyncio
    async def test_request_without_config_uses_process_client(self, monkeypatch):
        process_client = FakeDriveClient()
        server = GDriveMCPServer(drive_client=process_client)
        bound = server._bind_context(_current_client)
        monkeypatch.setattr(server.mcp, "get_context", lambda: _http_context())

        assert (await bound())["client"] is process_client

    @pytest.mark.asyncio
    async def test_outside_request_uses_process_client(self):
        process_client = FakeDriveClient()
        server = GDriveMCPServer(drive_client=process_client)
        bound = server._bind_context(_current_client)

        assert (await bound())["client"] is process_client

    @pytest.mark.asyncio
    async def test_request_client_scoped_to_call(self, monkeypatch):
        server = GDriveMCPServer(drive_client=FakeDriveClient())
        bound = server._bind_context(_current_client)
        monkeypatch.setattr(
            server.mcp,
            "get_context",
            lambda: _http_context(json.dumps(_credentials("scoped"))),
        )

        await bound()

        assert HandlerContext.get() is None
        with pytest.raises(RuntimeError):
            get_drive_client()
