"""Shared drive administration handlers."""

import logging
import uuid
from typing import Any, Dict

from ..constants import DRIVE_FIELDS, FILE_LIST_FIELDS
from ..context import get_drive_client
from ..decorators import handle_errors
from .common import clamp_page_size, require_text, success

logger = logging.getLogger(__name__)


@handle_errors
async def list_shared_drives(
    page_token: str | None = None,
    page_size: int | None = None,
    query: str | None = None,
) -> Dict[str, Any]:
    """List shared drives visible to the user.

    Args:
        page_token: Token for the next page of results
        page_size: Number of drives per page (max 100)
        query: Drive search expression, e.g. ``name contains 'eng'`` (optional)

    Returns:
        Dictionary with drives and ``next_page_token``
    """
    logger.info(f"list_shared_drives called (query={query})")
    client = get_drive_client()

    params: Dict[str, Any] = {
        "pageSize": clamp_page_size(page_size, default=10, maximum=100),
        "pageToken": page_token,
        "fields": f"nextPageToken, drives({DRIVE_FIELDS})",
    }
    if query:
        params["q"] = query

    response = await client.list_drives(**params)
    drives = response.get("drives", [])
    return success(
        drives=drives,
        count=len(drives),
        next_page_token=response.get("nextPageToken"),
    )


@handle_errors
async def get_shared_drive(drive_id: str) -> Dict[str, Any]:
    logger.info(f"get_shared_drive called (drive_id={drive_id})")
    client = get_drive_client()
    drive = await client.get_drive(require_text(drive_id, "drive_id"), DRIVE_FIELDS)
    return success(drive=drive)


@handle_errors
async def create_shared_drive(name: str, request_id: str | None = None) -> Dict[str, Any]:
    """Create a shared drive.

    Drive treats ``request_id`` as an idempotency key: repeating a call with
    the same ID does not create a second drive, Drive answers 409 instead.
    Without one, a new UUID is generated, so every call creates a new drive.
    """
    logger.info(f"create_shared_drive called (name={name})")
    client = get_drive_client()
    drive = await client.create_drive(
        request_id or str(uuid.uuid4()),
        {"name": require_text(name, "name")},
        DRIVE_FIELDS,
    )
    return success(drive=drive)


@handle_errors
async def update_shared_drive(
    drive_id: str,
    name: str | None = None,
    restrictions: dict[str, bool] | None = None,
) -> Dict[str, Any]:
    logger.info(f"update_shared_drive called (drive_id={drive_id})")
    client = get_drive_client()

    body: Dict[str, Any] = {}
    if name:
        body["name"] = name
    if restrictions:
        body["restrictions"] = restrictions
    if not body:
        raise ValueError("Nothing to update: provide name or restrictions")

    drive = await client.update_drive(require_text(drive_id, "drive_id"), body, DRIVE_FIELDS)
    return success(drive=drive)


@handle_errors
async def delete_shared_drive(drive_id: str) -> Dict[str, Any]:
    """Delete an empty shared drive."""
    logger.info(f"delete_shared_drive called (drive_id={drive_id})")
    client = get_drive_client()
    await client.delete_drive(require_text(drive_id, "drive_id"))
    return success(drive_id=drive_id, deleted=True)


@handle_errors
async def list_shared_drive_files(
    drive_id: str,
    page_token: str | None = None,
    page_size: int | None = None,
) -> Dict[str, Any]:
    logger.info(f"list_shared_drive_files called (drive_id={drive_id})")
    client = get_drive_client()
    drive_id = require_text(drive_id, "drive_id")

    response = await client.list_files(
        q="trashed = false",
        corpora="drive",
        driveId=drive_id,
        includeItemsFromAllDrives=True,
        pageSize=clamp_page_size(page_size, default=50, maximum=1000),
        pageToken=page_token,
        fields=FILE_LIST_FIELDS,
    )
    files = response.get("files", [])
    return success(
        drive_id=drive_id,
        files=files,
        count=len(files),
        next_page_token=response.get("nextPageToken"),
    )
