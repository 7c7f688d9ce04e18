"""Pytest configuration and shared fixtures."""

import os
import sys
from pathlib import Path

import pytest

# Add src to Python path
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))

# Set test environment variables
os.environ.setdefault("TESTING", "true")

from gdrive_mcp.context import HandlerContext  # noqa: E402

from fakes import FakeDriveClient  # noqa: E402


@pytest.fixture
def fake_drive() -> FakeDriveClient:
    """An empty in-memory Drive."""
    return FakeDriveClient()


@pytest.fixture
def call_tool(fake_drive: FakeDriveClient):
    """Run a tool handler with the fake Drive bound as its client.

    The client is bound inside the coroutine so the binding lives in the
    event loop's context rather than the fixture's.
    """
    async def call(handler, **kwargs):
        token = HandlerContext.use_drive_client(fake_drive)
        try:
            return await handler(**kwargs)
        finally:
            HandlerContext.reset_drive_client(token)

    return call


@pytest.fixture
def clean_env(monkeypatch):
    """Remove configuration environment variables for the test.

    Each variable is registered with monkeypatch first, so values a test
    loads from a .env file are removed again afterwards.
    """
    for var in (
        "CLIENT_ID",
        "CLIENT_SECRET",
        "REFRESH_TOKEN",
        "MCP_TRANSPORT",
        "HOST",
        "PORT",
        "LOG_LEVEL",
        "GDRIVE_BATCH_MAX_CONCURRENCY",
    ):
        monkeypatch.setenv(var, "")
        monkeypatch.delenv(var)
