"""Google Drive MCP Server."""

from .server import GDriveMCPServer, create_server
from .context import HandlerContext, get_server, get_drive_client
from .decorators import handle_errors
from .constants import ResponseStatus, ErrorCode, ErrorMessage
from .exceptions import ConflictError, CredentialsError

__all__ = [
    "GDriveMCPServer",
    "create_server",
    "HandlerContext",
    "get_server",
    "get_drive_client",
    "handle_errors",
    "ResponseStatus",
    "ErrorCode",
    "ErrorMessage",
    "ConflictError",
    "CredentialsError",
]
