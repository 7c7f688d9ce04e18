"""Tool schema definitions for the Google Drive MCP Server.

This module defines JSON Schema schemas for all MCP tools.
"""

from typing import Any

from ..constants import LINK_SHARING_ROLES, PERMISSION_ROLES, PERMISSION_TYPES

# Reusable property fragments
FILE_ID = {"type": "string", "description": "ID of the file"}
PAGE_TOKEN = {"type": "string", "description": "Token for the next page of results"}
COMMENT_ID = {"type": "string", "description": "ID of the comment"}
DRIVE_ID = {"type": "string", "description": "ID of the shared drive"}


def page_size(default: int, maximum: int) -> dict[str, Any]:
    return {
        "type": "integer",
        "description": f"Number of results per page (max {maximum})",
        "default": default,
        "minimum": 1,
        "maximum": maximum,
    }


def _tool(
    name: str,
    description: str,
    category: str,
    properties: dict[str, Any] | None = None,
    required: list[str] | None = None,
) -> dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "category": category,
        "inputSchema": {
            "type": "object",
            "properties": properties or {},
            "required": required or [],
        },
    }


_SCHEMA_LIST: list[dict[str, Any]] = [
    # Search / list
    _tool(
        "gdrive_search",
        "Search for files in Google Drive by name. An empty query lists all non-trashed files.",
        "search",
        {
            "query": {"type": "string", "description": "Name of the file to be searched for"},
            "page_token": PAGE_TOKEN,
            "page_size": page_size(10, 100),
        },
        ["query"],
    ),
    _tool(
        "gdrive_list_folder",
        "List the files and folders inside a folder.",
        "search",
        {
            "folder_id": {
                "type": "string",
                "description": "ID of the folder ('root' for My Drive)",
                "default": "root",
            },
            "page_token": PAGE_TOKEN,
            "page_size": page_size(50, 1000),
        },
    ),
    _tool(
        "gdrive_list_changes",
        "List changes to files since a page token. Without a token, returns a start token.",
        "search",
        {
            "page_token": {
                "type": "string",
                "description": "Change page token from a previous call (optional)",
            },
            "page_size": page_size(100, 1000),
        },
    ),
    # Read
    _tool(
        "gdrive_get_metadata",
        "Get metadata for a file.",
        "read",
        {
            "file_id": FILE_ID,
            "fields": {"type": "string", "description": "Drive field mask (optional)"},
        },
        ["file_id"],
    ),
    _tool(
        "gdrive_read_file",
        "Read contents of a file from Google Drive. Google Docs are exported as "
        "Markdown, Sheets as CSV, Slides as text and Drawings as PNG.",
        "read",
        {"file_id": {"type": "string", "description": "ID of the file to read"}},
        ["file_id"],
    ),
    _tool(
        "gdrive_list_revisions",
        "List the revisions of a file.",
        "read",
        {"file_id": FILE_ID, "page_size": page_size(100, 1000)},
        ["file_id"],
    ),
    # Write
    _tool(
        "gdrive_create_file",
        "Create a new file with text content.",
        "write",
        {
            "name": {"type": "string", "description": "File name"},
            "content": {"type": "string", "description": "Initial content", "default": ""},
            "mime_type": {"type": "string", "description": "MIME type", "default": "text/plain"},
            "parent_id": {"type": "string", "description": "Parent folder ID (optional)"},
        },
        ["name"],
    ),
    _tool(
        "gdrive_create_folder",
        "Create a new folder.",
        "write",
        {
            "name": {"type": "string", "description": "Folder name"},
            "parent_id": {"type": "string", "description": "Parent folder ID (optional)"},
        },
        ["name"],
    ),
    _tool(
        "gdrive_upload_file",
        "Upload text or base64-encoded content as a new file.",
        "write",
        {
            "name": {"type": "string", "description": "File name"},
            "content": {"type": "string", "description": "File content"},
            "mime_type": {
                "type": "string",
                "description": "MIME type of the content",
                "default": "application/octet-stream",
            },
            "parent_id": {"type": "string", "description": "Parent folder ID (optional)"},
            "encoding": {
                "type": "string",
                "enum": ["text", "base64"],
                "description": "How content is encoded",
                "default": "text",
            },
            "convert_to": {
                "type": "string",
                "description": "Google MIME type to convert into, e.g. "
                "application/vnd.google-apps.document (optional)",
            },
        },
        ["name", "content"],
    ),
    _tool(
        "gdrive_append_text",
        "Append text to the end of a text file or Google Doc.",
        "write",
        {
            "file_id": FILE_ID,
            "text": {"type": "string", "description": "Text to append"},
            "separator": {
                "type": "string",
                "description": "Inserted between existing content and the new text",
                "default": "",
            },
        },
        ["file_id", "text"],
    ),
    _tool(
        "gdrive_rename_file",
        "Rename a file or folder.",
        "write",
        {"file_id": FILE_ID, "new_name": {"type": "string", "description": "New name"}},
        ["file_id", "new_name"],
    ),
    _tool(
        "gdrive_copy_file",
        "Copy a file.",
        "write",
        {
            "file_id": FILE_ID,
            "name": {"type": "string", "description": "Name of the copy (optional)"},
            "parent_id": {"type": "string", "description": "Destination folder ID (optional)"},
        },
        ["file_id"],
    ),
    _tool(
        "gdrive_move_file",
        "Move a file to another folder.",
        "write",
        {
            "file_id": FILE_ID,
            "new_parent_id": {"type": "string", "description": "Destination folder ID"},
        },
        ["file_id", "new_parent_id"],
    ),
    _tool(
        "gdrive_star_file",
        "Star or unstar a file.",
        "write",
        {"file_id": FILE_ID, "starred": {"type": "boolean", "default": True}},
        ["file_id"],
    ),
    _tool(
        "gdrive_restore_file",
        "Restore a file from the trash.",
        "write",
        {"file_id": FILE_ID},
        ["file_id"],
    ),
    _tool(
        "gdrive_lock_file",
        "Lock or unlock a file's content (read-only content restriction).",
        "write",
        {
            "file_id": FILE_ID,
            "locked": {"type": "boolean", "default": True},
            "reason": {"type": "string", "description": "Reason shown to editors (optional)"},
        },
        ["file_id"],
    ),
    # Delete
    _tool(
        "gdrive_delete_file",
        "Move a file to the trash, or delete it permanently.",
        "delete",
        {
            "file_id": FILE_ID,
            "permanent": {
                "type": "boolean",
                "description": "Delete permanently instead of trashing",
                "default": False,
            },
        },
        ["file_id"],
    ),
    _tool("gdrive_empty_trash", "Permanently delete all trashed files.", "delete"),
    # Permissions
    _tool(
        "gdrive_share_file",
        "Share a file with a user, group, domain or anyone.",
        "permissions",
        {
            "file_id": FILE_ID,
            "role": {"type": "string", "enum": list(PERMISSION_ROLES)},
            "permission_type": {
                "type": "string",
                "enum": list(PERMISSION_TYPES),
                "default": "user",
            },
            "email_address": {"type": "string", "description": "Recipient email (user/group)"},
            "domain": {"type": "string", "description": "Domain (domain shares)"},
            "send_notification": {"type": "boolean", "default": True},
            "email_message": {"type": "string", "description": "Notification text (optional)"},
        },
        ["file_id", "role"],
    ),
    _tool(
        "gdrive_list_permissions",
        "List the permissions of a file.",
        "permissions",
        {"file_id": FILE_ID},
        ["file_id"],
    ),
    _tool(
        "gdrive_update_permission",
        "Change the role of an existing permission.",
        "permissions",
        {
            "file_id": FILE_ID,
            "permission_id": {"type": "string", "description": "ID of the permission"},
            "role": {"type": "string", "enum": list(PERMISSION_ROLES)},
        },
        ["file_id", "permission_id", "role"],
    ),
    _tool(
        "gdrive_delete_permission",
        "Remove a permission from a file.",
        "permissions",
        {
            "file_id": FILE_ID,
            "permission_id": {"type": "string", "description": "ID of the permission"},
        },
        ["file_id", "permission_id"],
    ),
    _tool(
        "gdrive_add_domain_access",
        "Grant everyone in a domain access to a file.",
        "permissions",
        {
            "file_id": FILE_ID,
            "domain": {"type": "string", "description": "Domain, e.g. example.com"},
            "role": {"type": "string", "enum": list(LINK_SHARING_ROLES), "default": "reader"},
        },
        ["file_id", "domain"],
    ),
    _tool(
        "gdrive_add_public_access",
        "Make a file available to anyone with the link.",
        "permissions",
        {
            "file_id": FILE_ID,
            "role": {"type": "string", "enum": list(LINK_SHARING_ROLES), "default": "reader"},
            "allow_discovery": {
                "type": "boolean",
                "description": "Allow the file to appear in search results",
                "default": False,
            },
        },
        ["file_id"],
    ),
    # Comments
    _tool(
        "gdrive_add_comment",
        "Add a comment to a file.",
        "comments",
        {
            "file_id": FILE_ID,
            "content": {"type": "string", "description": "Comment text"},
            "quoted_text": {"type": "string", "description": "Quoted file content (optional)"},
        },
        ["file_id", "content"],
    ),
    _tool(
        "gdrive_list_comments",
        "List the comments on a file.",
        "comments",
        {
            "file_id": FILE_ID,
            "page_token": PAGE_TOKEN,
            "page_size": page_size(20, 100),
            "include_deleted": {"type": "boolean", "default": False},
        },
        ["file_id"],
    ),
    _tool(
        "gdrive_delete_comment",
        "Delete a comment.",
        "comments",
        {"file_id": FILE_ID, "comment_id": COMMENT_ID},
        ["file_id", "comment_id"],
    ),
    _tool(
        "gdrive_reply_to_comment",
        "Reply to a comment, optionally resolving or reopening it.",
        "comments",
        {
            "file_id": FILE_ID,
            "comment_id": COMMENT_ID,
            "content": {"type": "string", "description": "Reply text"},
            "action": {"type": "string", "enum": ["resolve", "reopen"]},
        },
        ["file_id", "comment_id", "content"],
    ),
    _tool(
        "gdrive_list_replies",
        "List the replies to a comment.",
        "comments",
        {
            "file_id": FILE_ID,
            "comment_id": COMMENT_ID,
            "page_token": PAGE_TOKEN,
            "page_size": page_size(20, 100),
        },
        ["file_id", "comment_id"],
    ),
    _tool(
        "gdrive_delete_reply",
        "Delete a reply.",
        "comments",
        {
            "file_id": FILE_ID,
            "comment_id": COMMENT_ID,
            "reply_id": {"type": "string", "description": "ID of the reply"},
        },
        ["file_id", "comment_id", "reply_id"],
    ),
    # Shared drives
    _tool(
        "gdrive_list_shared_drives",
        "List shared drives.",
        "shared_drives",
        {
            "page_token": PAGE_TOKEN,
            "page_size": page_size(10, 100),
            "query": {"type": "string", "description": "Drive search query (optional)"},
        },
    ),
    _tool(
        "gdrive_get_shared_drive",
        "Get a shared drive's metadata.",
        "shared_drives",
        {"drive_id": DRIVE_ID},
        ["drive_id"],
    ),
    _tool(
        "gdrive_create_shared_drive",
        "Create a shared drive.",
        "shared_drives",
        {
            "name": {"type": "string", "description": "Shared drive name"},
            "request_id": {
                "type": "string",
                "description": "Idempotency key; repeating a call with the same value "
                "does not create a second drive (optional, random when omitted)",
            },
        },
        ["name"],
    ),
    _tool(
        "gdrive_update_shared_drive",
        "Rename a shared drive or change its restrictions.",
        "shared_drives",
        {
            "drive_id": DRIVE_ID,
            "name": {"type": "string", "description": "New name (optional)"},
            "restrictions": {
                "type": "object",
                "description": "Restriction flags, e.g. {\"domainUsersOnly\": true}",
                "additionalProperties": {"type": "boolean"},
            },
        },
        ["drive_id"],
    ),
    _tool(
        "gdrive_delete_shared_drive",
        "Delete an empty shared drive.",
        "shared_drives",
        {"drive_id": DRIVE_ID},
        ["drive_id"],
    ),
    _tool(
        "gdrive_list_shared_drive_files",
        "List the files in a shared drive.",
        "shared_drives",
        {"drive_id": DRIVE_ID, "page_token": PAGE_TOKEN, "page_size": page_size(50, 1000)},
        ["drive_id"],
    ),
    # Quota
    _tool("gdrive_get_quota", "Get storage quota and usage.", "quota"),
    _tool(
        "gdrive_get_usage_breakdown",
        "Break storage usage down by content type.",
        "quota",
        {
            "max_files": {
                "type": "integer",
                "description": "Maximum number of files to inspect",
                "default": 1000,
                "minimum": 1,
            }
        },
    ),
    # Batch
    _tool(
        "gdrive_batch_get_metadata",
        "Get metadata for several files. Failures are reported per file.",
        "batch",
        {
            "file_ids": {"type": "array", "items": {"type": "string"}},
            "fields": {"type": "string", "description": "Drive field mask (optional)"},
        },
        ["file_ids"],
    ),
    _tool(
        "gdrive_batch_update_permissions",
        "Create or update permissions on several files. Failures are reported per item.",
        "batch",
        {
            "operations": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "fileId": {"type": "string"},
                        "role": {"type": "string", "enum": list(PERMISSION_ROLES)},
                        "permissionId": {"type": "string"},
                        "type": {"type": "string", "enum": list(PERMISSION_TYPES)},
                        "emailAddress": {"type": "string"},
                        "domain": {"type": "string"},
                    },
                    "required": ["fileId", "role"],
                },
            }
        },
        ["operations"],
    ),
    _tool(
        "gdrive_batch_delete",
        "Trash or permanently delete several files. Failures are reported per file.",
        "batch",
        {
            "file_ids": {"type": "array", "items": {"type": "string"}},
            "permanent": {"type": "boolean", "default": False},
        },
        ["file_ids"],
    ),
    _tool(
        "gdrive_batch_copy",
        "Copy several files. Failures are reported per file.",
        "batch",
        {
            "operations": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "fileId": {"type": "string"},
                        "name": {"type": "string"},
                        "parentId": {"type": "string"},
                    },
                    "required": ["fileId"],
                },
            }
        },
        ["operations"],
    ),
    _tool(
        "gdrive_batch_move",
        "Move several files to new folders. Failures are reported per file.",
        "batch",
        {
            "operations": {
                "type": "array",
                "items": {
                    "type": "object",
                    "properties": {
                        "fileId": {"type": "string"},
                        "newParentId": {"type": "string"},
                    },
                    "required": ["fileId", "newParentId"],
                },
            }
        },
        ["operations"],
    ),
]

TOOL_SCHEMAS: dict[str, dict[str, Any]] = {schema["name"]: schema for schema in _SCHEMA_LIST}


class ToolSchema:
    """Tool schema wrapper for easier access."""

    def __init__(self, name: str, schema: dict[str, Any]):
        self.name = name
        self.schema = schema
        self.description = schema.get("description", "")
        self.category = schema.get("category", "")
        self.input_schema = schema.get("inputSchema", {})

    def get_required_params(self) -> list[str]:
        return self.input_schema.get("required", [])

    def get_properties(self) -> dict[str, Any]:
        return self.input_schema.get("properties", {})

    def validate_required(self, params: dict[str, Any]) -> tuple[bool, list[str]]:
        """Validate that all required parameters are present.

        Args:
            params: Parameters dictionary

        Returns:
            Tuple of (is_valid, missing_params)
        """
        required = self.get_required_params()
        missing = [param for param in required if params.get(param) is None]
        return len(missing) == 0, missing

    def unknown_params(self, params: dict[str, Any]) -> list[str]:
        properties = self.get_properties()
        return [param for param in params if param not in properties]


def get_tool_schema(name: str) -> ToolSchema | None:
    """Get tool schema by name.

    Args:
        name: Tool name

    Returns:
        ToolSchema instance if found, None otherwise
    """
    if name not in TOOL_SCHEMAS:
        return None
    return ToolSchema(name, TOOL_SCHEMAS[name])


def get_tool_schemas() -> dict[str, ToolSchema]:
    return {
        name: ToolSchema(name, schema)
        for name, schema in TOOL_SCHEMAS.items()
    }
