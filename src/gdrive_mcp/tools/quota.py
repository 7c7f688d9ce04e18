"""Storage quota handlers."""

import logging
from typing import Any, Dict, Optional

from ..constants import FOLDER_MIME_TYPE
from ..context import get_drive_client
from ..decorators import handle_errors
from ..drive.mime import content_category
from .common import success

logger = logging.getLogger(__name__)

_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def format_bytes(value: Optional[int]) -> Optional[str]:
    """Render a byte count like ``1.50 GB``; ``None`` stays ``None``."""
    if value is None:
        return None
    size = float(value)
    for unit in _UNITS[:-1]:
        if size < 1024:
            return f"{int(size)} B" if unit == "B" else f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} {_UNITS[-1]}"


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    return int(value)


@handle_errors
async def get_quota() -> Dict[str, Any]:
    """Report the account's storage quota.

    ``limit`` is absent for accounts with unlimited storage.
    """
    logger.info("get_quota called")
    client = get_drive_client()
    about = await client.get_about("storageQuota, user(displayName, emailAddress)")

    quota = about.get("storageQuota", {})
    limit = _as_int(quota.get("limit"))
    usage = _as_int(quota.get("usage")) or 0

    result = {
        "limit": limit,
        "usage": usage,
        "usage_in_drive": _as_int(quota.get("usageInDrive")),
        "usage_in_drive_trash": _as_int(quota.get("usageInDriveTrash")),
    }
    readable = {key: format_bytes(value) for key, value in result.items()}
    percent_used = round(usage * 100 / limit, 2) if limit else None

    return success(
        user=about.get("user", {}),
        quota=result,
        readable=readable,
        percent_used=percent_used,
        unlimited=limit is None,
    )


@handle_errors
async def get_usage_breakdown(max_files: int = 1000) -> Dict[str, Any]:
    """Break storage usage down by content type.

    Pages through owned, non-folder files and sums ``quotaBytesUsed`` per
    category. Stops after ``max_files`` files and reports whether the
    result is truncated.

    Args:
        max_files: Upper bound on files inspected

    Returns:
        Dictionary mapping categories to file counts and bytes
    """
    logger.info(f"get_usage_breakdown called (max_files={max_files})")
    if max_files < 1:
        raise ValueError("max_files must be at least 1")
    client = get_drive_client()

    breakdown: Dict[str, Dict[str, Any]] = {}
    inspected = 0
    page_token: Optional[str] = None
    truncated = False

    while True:
        response = await client.list_files(
            q=f"'me' in owners and mimeType != '{FOLDER_MIME_TYPE}'",
            pageSize=min(1000, max_files - inspected),
            pageToken=page_token,
            fields="nextPageToken, files(mimeType, quotaBytesUsed)",
        )
        for item in response.get("files", []):
            category = content_category(item.get("mimeType"))
            bucket = breakdown.setdefault(category, {"files": 0, "bytes": 0})
            bucket["files"] += 1
            bucket["bytes"] += int(item.get("quotaBytesUsed") or 0)
            inspected += 1

        page_token = response.get("nextPageToken")
        if not page_token:
            break
        if inspected >= max_files:
            truncated = True
            break

    for bucket in breakdown.values():
        bucket["readable"] = format_bytes(bucket["bytes"])

    total_bytes = sum(bucket["bytes"] for bucket in breakdown.values())
    return success(
        breakdown=breakdown,
        files_inspected=inspected,
        total_bytes=total_bytes,
        total_readable=format_bytes(total_bytes),
        truncated=truncated,
    )
