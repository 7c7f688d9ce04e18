"""Context management for MCP Server handlers.

This module provides async-safe context management using contextvars,
so handlers reach the Drive client without a module-level singleton.
"""

import logging
from contextvars import ContextVar, Token
from typing import TYPE_CHECKING, Optional

from .config import DEFAULT_BATCH_CONCURRENCY
from .constants import ErrorMessage

if TYPE_CHECKING:
    from .drive.client import DriveClient
    from .server import GDriveMCPServer

logger = logging.getLogger(__name__)

_server_context: ContextVar[Optional["GDriveMCPServer"]] = ContextVar(
    "server_context", default=None
)
_client_context: ContextVar[Optional["DriveClient"]] = ContextVar(
    "drive_client_context", default=None
)


class HandlerContext:
    """Context manager for handler functions.

    Provides access to server dependencies without global state.
    """

    @staticmethod
    def set(server: "GDriveMCPServer") -> Token:
        """Set the server instance in context.

        Args:
            server: GDriveMCPServer instance
        """
        token = _server_context.set(server)
        logger.debug("Server context set")
        return token

    @staticmethod
    def reset(token: Token) -> None:
        """Restore the server context that was active before ``set``."""
        _server_context.reset(token)

    @staticmethod
    def get() -> Optional["GDriveMCPServer"]:
        """Get the server instance from context."""
        return _server_context.get()

    @staticmethod
    def use_drive_client(client: "DriveClient") -> Token:
        """Bind a Drive client directly, bypassing the server.

        Returns:
            Token that can be passed to ``reset_drive_client``
        """
        return _client_context.set(client)

    @staticmethod
    def reset_drive_client(token: Token) -> None:
        _client_context.reset(token)

    @staticmethod
    def get_drive_client() -> "DriveClient":
        """Get the Drive client bound to the current context.

        Raises:
            RuntimeError: If neither a client nor a server is in context
            CredentialsError: If the server cannot build a client
        """
        client = _client_context.get()
        if client is not None:
            return client

        server = _server_context.get()
        if server is None:
            raise RuntimeError(
                f"{ErrorMessage.SERVER_CONTEXT_NOT_SET}. Cannot access Drive client."
            )
        return server.get_drive_client()


def get_server() -> Optional["GDriveMCPServer"]:
    """Get server instance from context (convenience function)."""
    return HandlerContext.get()


def get_drive_client() -> "DriveClient":
    """Get Drive client from context (convenience function)."""
    return HandlerContext.get_drive_client()


def get_batch_concurrency() -> int:
    """Configured cap on concurrent batch operations (0 means unbounded)."""
    server = _server_context.get()
    if server is None:
        return DEFAULT_BATCH_CONCURRENCY
    return server.batch_max_concurrency
