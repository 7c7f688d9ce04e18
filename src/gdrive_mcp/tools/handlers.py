"""Tool handler table for the Google Drive MCP Server.

Maps every public tool name to its handler. The server registers each
entry with FastMCP and with the tool registry at startup.
"""

from typing import Any, Awaitable, Callable

from . import batch, comments, files, permissions, quota, shared_drives

TOOL_HANDLERS: dict[str, Callable[..., Awaitable[dict[str, Any]]]] = {
    # Search / list
    "gdrive_search": files.search_files,
    "gdrive_list_folder": files.list_folder,
    "gdrive_list_changes": files.list_changes,
    # Read
    "gdrive_get_metadata": files.get_metadata,
    "gdrive_read_file": files.read_file,
    "gdrive_list_revisions": files.list_revisions,
    # Write
    "gdrive_create_file": files.create_file,
    "gdrive_create_folder": files.create_folder,
    "gdrive_upload_file": files.upload_file,
    "gdrive_append_text": files.append_text,
    "gdrive_rename_file": files.rename_file,
    "gdrive_copy_file": files.copy_file,
    "gdrive_move_file": files.move_file,
    "gdrive_star_file": files.star_file,
    "gdrive_restore_file": files.restore_file,
    "gdrive_lock_file": files.lock_file,
    # Delete
    "gdrive_delete_file": files.delete_file,
    "gdrive_empty_trash": files.empty_trash,
    # Permissions
    "gdrive_share_file": permissions.share_file,
    "gdrive_list_permissions": permissions.list_permissions,
    "gdrive_update_permission": permissions.update_permission,
    "gdrive_delete_permission": permissions.delete_permission,
    "gdrive_add_domain_access": permissions.add_domain_access,
    "gdrive_add_public_access": permissions.add_public_access,
    # Comments
    "gdrive_add_comment": comments.add_comment,
    "gdrive_list_comments": comments.list_comments,
    "gdrive_delete_comment": comments.delete_comment,
    "gdrive_reply_to_comment": comments.reply_to_comment,
    "gdrive_list_replies": comments.list_replies,
    "gdrive_delete_reply": comments.delete_reply,
    # Shared drives
    "gdrive_list_shared_drives": shared_drives.list_shared_drives,
    "gdrive_get_shared_drive": shared_drives.get_shared_drive,
    "gdrive_create_shared_drive": shared_drives.create_shared_drive,
    "gdrive_update_shared_drive": shared_drives.update_shared_drive,
    "gdrive_delete_shared_drive": shared_drives.delete_shared_drive,
    "gdrive_list_shared_drive_files": shared_drives.list_shared_drive_files,
    # Quota
    "gdrive_get_quota": quota.get_quota,
    "gdrive_get_usage_breakdown": quota.get_usage_breakdown,
    # Batch
    "gdrive_batch_get_metadata": batch.batch_get_metadata,
    "gdrive_batch_update_permissions": batch.batch_update_permissions,
    "gdrive_batch_delete": batch.batch_delete,
    "gdrive_batch_copy": batch.batch_copy,
    "gdrive_batch_move": batch.batch_move,
}
