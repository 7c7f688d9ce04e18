"""Constants for the Google Drive MCP Server.

This module defines all constants, enums, and error messages used throughout
the server to avoid magic strings and improve maintainability.
"""

from enum import Enum


class ResponseStatus(str, Enum):
    """Response status values."""

    SUCCESS = "success"
    ERROR = "error"


class ErrorCode(str, Enum):
    """Error code identifiers for error categorization."""

    # Input validation errors
    INVALID_INPUT = "INVALID_INPUT"

    # Drive errors
    DRIVE_API_ERROR = "DRIVE_API_ERROR"
    CONFLICT = "CONFLICT"
    CREDENTIALS_MISSING = "CREDENTIALS_MISSING"

    # Generic errors
    RUNTIME_ERROR = "RUNTIME_ERROR"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class ErrorMessage:
    """Error message templates."""

    # Input validation
    FILE_ID_EMPTY = "file_id cannot be empty"
    NAME_EMPTY = "name cannot be empty"
    INVALID_ROLE = "Invalid role '{role}'. Must be one of: {allowed}"
    INVALID_PERMISSION_TYPE = "Invalid permission type '{type}'. Must be one of: {allowed}"
    EMAIL_REQUIRED = "email_address is required for permission type '{type}'"
    DOMAIN_REQUIRED = "domain is required for permission type 'domain'"
    INVALID_ENCODING = "Invalid encoding '{encoding}'. Must be 'text' or 'base64'"
    INVALID_COMMENT_ACTION = "Invalid action '{action}'. Must be 'resolve' or 'reopen'"
    BATCH_NOT_A_LIST = "{field} must be a list"
    BATCH_ITEM_MISSING = "{field}[{index}] is missing required key '{key}'"
    BINARY_APPEND = "Cannot append text to binary file of type '{mime_type}'"

    # Drive errors
    APPEND_CONFLICT = (
        "File {file_id} changed while appending (version {expected} -> {actual})"
    )
    CREDENTIALS_MISSING = (
        "Google Drive credentials not configured. "
        "Set CLIENT_ID, CLIENT_SECRET and REFRESH_TOKEN"
    )

    # Context errors
    SERVER_CONTEXT_NOT_SET = "Server context not set"

    # Generic
    UNEXPECTED_ERROR = "Unexpected error occurred"


# Permission roles accepted by the Drive permissions API
PERMISSION_ROLES = ("reader", "commenter", "writer", "organizer", "owner")

# Roles allowed for domain-wide and "anyone with the link" grants
LINK_SHARING_ROLES = ("reader", "commenter", "writer")

PERMISSION_TYPES = ("user", "group", "domain", "anyone")

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

# Default field masks
FILE_LIST_FIELDS = "nextPageToken, files(id, name, mimeType, modifiedTime, size)"
FILE_METADATA_FIELDS = (
    "id, name, mimeType, size, createdTime, modifiedTime, parents, owners, "
    "webViewLink, starred, trashed, version, description"
)
PERMISSION_FIELDS = "id, type, role, emailAddress, domain, displayName, allowFileDiscovery"
COMMENT_FIELDS = (
    "id, content, author(displayName, emailAddress), createdTime, modifiedTime, "
    "resolved, deleted, quotedFileContent, replies(id, content, action, "
    "author(displayName), createdTime)"
)
REPLY_FIELDS = "id, content, action, author(displayName, emailAddress), createdTime, deleted"
DRIVE_FIELDS = "id, name, createdTime, hidden, restrictions, capabilities"
