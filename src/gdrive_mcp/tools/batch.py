"""Batch tool handlers.

Each tool validates the shape of its input list up front, then hands the
items to the batch executor. Remote failures end up on the individual
outcomes; only malformed input is rejected as a whole.
"""

import logging
from typing import Any, Dict

from ..constants import FILE_METADATA_FIELDS, PERMISSION_FIELDS
from ..context import get_batch_concurrency, get_drive_client
from ..decorators import handle_errors
from .executor import require_keys, require_list, run_batch
from .files import copy_to, move_to_folder, trash_or_delete
from .permissions import build_permission, update_role

logger = logging.getLogger(__name__)


def _require_file_ids(file_ids: Any) -> list[str]:
    ids = require_list(file_ids, "file_ids")
    for index, file_id in enumerate(ids):
        if not isinstance(file_id, str) or not file_id.strip():
            raise ValueError(f"file_ids[{index}] must be a non-empty string")
    return ids


@handle_errors
async def batch_get_metadata(
    file_ids: list[str],
    fields: str | None = None,
) -> Dict[str, Any]:
    """Get metadata for several files at once.

    Args:
        file_ids: IDs of the files
        fields: Field mask applied to every file (optional)

    Returns:
        Dictionary with per-file ``results`` and a ``summary``
    """
    ids = _require_file_ids(file_ids)
    logger.info(f"batch_get_metadata called ({len(ids)} files)")
    client = get_drive_client()
    field_mask = fields or FILE_METADATA_FIELDS

    return await run_batch(
        "batch_get_metadata",
        ids,
        perform=lambda file_id: client.get_file(file_id, field_mask),
        describe=lambda file_id: {"fileId": file_id},
        max_concurrency=get_batch_concurrency(),
    )


@handle_errors
async def batch_update_permissions(operations: list[dict[str, Any]]) -> Dict[str, Any]:
    """Create or update permissions on several files.

    Each operation is ``{fileId, role}`` plus either ``permissionId`` (to
    change an existing permission's role) or ``type`` with
    ``emailAddress``/``domain`` (to create a new permission).
    """
    items = require_list(operations, "operations")
    logger.info(f"batch_update_permissions called ({len(items)} operations)")
    require_keys(items, "operations", ("fileId", "role"))
    client = get_drive_client()

    async def perform(op: Dict[str, Any]) -> Dict[str, Any]:
        if op.get("permissionId"):
            return await update_role(client, op["fileId"], op["permissionId"], op["role"])
        body, params = build_permission(
            op["role"],
            op.get("type", "user"),
            email_address=op.get("emailAddress"),
            domain=op.get("domain"),
        )
        return await client.create_permission(
            op["fileId"], body, fields=PERMISSION_FIELDS, **params
        )

    def describe(op: Dict[str, Any]) -> Dict[str, Any]:
        echo = {
            "fileId": op["fileId"],
            "operation": "update" if op.get("permissionId") else "create",
        }
        if op.get("permissionId"):
            echo["permissionId"] = op["permissionId"]
        return echo

    return await run_batch(
        "batch_update_permissions",
        items,
        perform=perform,
        describe=describe,
        max_concurrency=get_batch_concurrency(),
    )


@handle_errors
async def batch_delete(file_ids: list[str], permanent: bool = False) -> Dict[str, Any]:
    """Trash, or permanently delete, several files."""
    ids = _require_file_ids(file_ids)
    logger.info(f"batch_delete called ({len(ids)} files, permanent={permanent})")
    client = get_drive_client()
    operation = "delete" if permanent else "trash"

    async def perform(file_id: str) -> None:
        await trash_or_delete(client, file_id, permanent)

    return await run_batch(
        "batch_delete",
        ids,
        perform=perform,
        describe=lambda file_id: {"fileId": file_id, "operation": operation},
        max_concurrency=get_batch_concurrency(),
    )


@handle_errors
async def batch_copy(operations: list[dict[str, Any]]) -> Dict[str, Any]:
    """Copy several files; each operation is ``{fileId, name?, parentId?}``."""
    items = require_list(operations, "operations")
    logger.info(f"batch_copy called ({len(items)} operations)")
    require_keys(items, "operations", ("fileId",))
    client = get_drive_client()

    return await run_batch(
        "batch_copy",
        items,
        perform=lambda op: copy_to(client, op["fileId"], op.get("name"), op.get("parentId")),
        describe=lambda op: {"fileId": op["fileId"]},
        max_concurrency=get_batch_concurrency(),
    )


@handle_errors
async def batch_move(operations: list[dict[str, Any]]) -> Dict[str, Any]:
    """Move several files; each operation is ``{fileId, newParentId}``.

    Every move reads the file's current parents before re-parenting it, so
    a failed read only fails that one operation.
    """
    items = require_list(operations, "operations")
    logger.info(f"batch_move called ({len(items)} operations)")
    require_keys(items, "operations", ("fileId", "newParentId"))
    client = get_drive_client()

    return await run_batch(
        "batch_move",
        items,
        perform=lambda op: move_to_folder(client, op["fileId"], op["newParentId"]),
        describe=lambda op: {"fileId": op["fileId"], "newParentId": op["newParentId"]},
        max_concurrency=get_batch_concurrency(),
    )
