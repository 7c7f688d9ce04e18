"""MCP Server implementation for Google Drive.

This module implements the MCP server with streamable-HTTP and stdio
transports, lifecycle management, and capabilities declaration.
"""

import json
import logging
import sys
import time
from functools import wraps
from typing import Any, Awaitable, Callable, Optional

from mcp.server.fastmcp import FastMCP

from .config import (
    DEFAULT_BATCH_CONCURRENCY,
    DEFAULT_CONFIG,
    DEFAULT_PORT,
    credentials_configured,
    deep_merge,
    load_config,
    parse_request_config,
)
from .context import HandlerContext
from .drive.client import DriveClient
from .tools.handlers import TOOL_HANDLERS
from .tools.registry import ToolRegistry
from .tools.schemas import TOOL_SCHEMAS

logger = logging.getLogger(__name__)

SUPPORTED_TRANSPORTS = ("http", "stdio", "sse")


def _int_setting(value: Any, default: int) -> int:
    """Integer config value; an unset (None) value means ``default``."""
    return default if value is None else int(value)


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data)


class GDriveMCPServer:
    """MCP Server exposing Google Drive as tools.

    The Drive client is created lazily from the configured credentials, or
    injected directly (e.g. a test double).
    """

    def __init__(
        self,
        config: Optional[dict[str, Any]] = None,
        drive_client: Optional[DriveClient] = None,
    ):
        """Initialize the server.

        Args:
            config: Server configuration dictionary, merged over defaults:
                - name, version, description
                - transport: {type, host, port}
                - logging: {level, format, file}
                - credentials: {client_id, client_secret, refresh_token, token_uri}
                - batch: {max_concurrency}
            drive_client: Pre-built Drive client (skips credential loading)
        """
        self.config = deep_merge(DEFAULT_CONFIG, config or {})
        self.name = self.config["name"]
        self.version = self.config["version"]
        self.description = self.config["description"]

        transport_config = self.config["transport"]
        self.transport_type = transport_config.get("type", "http")
        self.host = transport_config.get("host", "0.0.0.0")
        self.port = _int_setting(transport_config.get("port"), DEFAULT_PORT)

        logging_config = self.config["logging"]
        self.log_level = logging_config.get("level", "INFO")
        self.log_format = logging_config.get("format", "json")
        self.log_file = logging_config.get("file")

        self.batch_max_concurrency = _int_setting(
            self.config["batch"].get("max_concurrency"), DEFAULT_BATCH_CONCURRENCY
        )

        self._drive_client = drive_client
        self.tool_registry = ToolRegistry()

        self._setup_logging()

        self.mcp = FastMCP(
            name=self.name,
            host=self.host,
            port=self.port,
            json_response=True,
            stateless_http=True,
        )

        logger.info(f"Initialized {self.name} MCP Server v{self.version}")
        logger.info(f"Transport: {self.transport_type} ({self.host}:{self.port})")
        logger.info(f"Batch concurrency cap: {self.batch_max_concurrency or 'unbounded'}")

    def _setup_logging(self) -> None:
        """Setup structured logging for the server."""
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, str(self.log_level).upper(), logging.INFO))
        root_logger.handlers.clear()

        if self.log_format == "json":
            formatter: logging.Formatter = JSONFormatter()
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )

        # stdout carries the protocol on stdio transport, so logs go to stderr
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if self.log_file:
            file_handler = logging.FileHandler(self.log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            logger.info(f"Logging to file: {self.log_file}")

        # googleapiclient logs every discovery lookup at INFO
        logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)

    def get_drive_client(self) -> DriveClient:
        """Get or initialize the Drive client (lazy initialization).

        Raises:
            CredentialsError: If credentials are not configured
        """
        if self._drive_client is None:
            logger.info("Initializing Drive client...")
            self._drive_client = DriveClient.from_config(self.config)
            logger.info("✓ Drive client initialized")
        return self._drive_client

    def _request_drive_client(self) -> Optional[DriveClient]:
        """Build a Drive client from credentials sent with the current request.

        HTTP callers may pass ``CLIENT_ID``, ``CLIENT_SECRET`` and
        ``REFRESH_TOKEN`` in a ``config`` query parameter. Values given there
        replace the process configuration for this call only; missing ones
        are taken from it. Returns None when the request carries no
        credentials (always the case on stdio).
        """
        try:
            request = self.mcp.get_context().request_context.request
        except (LookupError, ValueError):
            return None

        query_params = getattr(request, "query_params", None)
        raw = query_params.get("config") if query_params is not None else None
        if not raw:
            return None

        request_config = parse_request_config(raw)
        if not request_config:
            return None

        config = deep_merge(self.config, request_config)
        if not credentials_configured(config):
            return None
        logger.debug("Using credentials from request config")
        return DriveClient.from_config(config)

    def _bind_context(
        self, handler: Callable[..., Awaitable[dict[str, Any]]]
    ) -> Callable[..., Awaitable[dict[str, Any]]]:
        """Run ``handler`` with this server bound as the handler context.

        A request that carries its own credentials also gets its own Drive
        client for the duration of the call.
        """
        @wraps(handler)
        async def bound(*args: Any, **kwargs: Any) -> dict[str, Any]:
            request_client = self._request_drive_client()
            token = HandlerContext.set(self)
            client_token = (
                HandlerContext.use_drive_client(request_client)
                if request_client is not None
                else None
            )
            try:
                return await handler(*args, **kwargs)
            finally:
                if client_token is not None:
                    HandlerContext.reset_drive_client(client_token)
                HandlerContext.reset(token)

        return bound

    def _register_capabilities(self) -> None:
        """Register every tool with FastMCP and the tool registry, then freeze."""
        if self.tool_registry.frozen:
            return

        logger.info("Registering server capabilities...")

        for tool_name, handler in TOOL_HANDLERS.items():
            if tool_name not in TOOL_SCHEMAS:
                logger.warning(f"Tool '{tool_name}' not found in schemas, skipping")
                continue

            schema = TOOL_SCHEMAS[tool_name]
            bound = self._bind_context(handler)

            self.mcp.tool(name=tool_name, description=schema.get("description", ""))(bound)
            self.tool_registry.register(
                name=tool_name,
                handler=bound,
                schema=schema,
                version=self.version,
            )

        self.tool_registry.freeze()
        summary = ", ".join(
            f"{category}={count}"
            for category, count in sorted(self.tool_registry.categories().items())
        )
        logger.info(f"✓ Registered {self.tool_registry.count()} tools ({summary})")

    async def start(self) -> None:
        """Start the MCP server on the configured transport."""
        logger.info("Starting MCP server...")

        if self.transport_type not in SUPPORTED_TRANSPORTS:
            raise ValueError(
                f"Transport type '{self.transport_type}' not supported. "
                f"Supported types: {', '.join(SUPPORTED_TRANSPORTS)}"
            )

        self._register_capabilities()

        try:
            if self.transport_type == "stdio":
                logger.info("Server ready on stdio. Waiting for requests...")
                await self.mcp.run_stdio_async()
            elif self.transport_type == "sse":
                logger.info(f"MCP server running on port {self.port} (SSE)")
                await self.mcp.run_sse_async()
            else:
                logger.info(f"MCP server running on port {self.port}")
                await self.mcp.run_streamable_http_async()
        except KeyboardInterrupt:
            logger.info("Received interrupt signal. Shutting down...")
        except Exception as e:
            logger.error(f"Server error: {e}", exc_info=True)
            raise
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Stop the MCP server gracefully."""
        logger.info("Stopping MCP server...")
        self._drive_client = None
        logger.info("MCP server stopped")

    def get_capabilities(self) -> dict[str, Any]:
        """Get server capabilities declaration."""
        return {
            "server": {
                "name": self.name,
                "version": self.version,
                "description": self.description,
            },
            "transport": {
                "type": self.transport_type,
                "host": self.host,
                "port": self.port,
            },
            "capabilities": {
                "tools": {
                    "listChanged": False,  # registry is frozen after startup
                    "count": self.tool_registry.count(),
                },
            },
        }


def create_server(
    config: Optional[dict[str, Any]] = None,
    drive_client: Optional[DriveClient] = None,
) -> GDriveMCPServer:
    """Factory function to create a server instance.

    ``config`` is treated as per-invocation configuration and layered over
    environment variables, ``.env`` and ``config/server.yaml``.

    Args:
        config: Per-invocation configuration dictionary
        drive_client: Pre-built Drive client (optional)

    Returns:
        GDriveMCPServer instance
    """
    return GDriveMCPServer(load_config(overrides=config), drive_client=drive_client)

