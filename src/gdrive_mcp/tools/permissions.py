"""Permission tool handlers."""

import logging
from typing import Any, Dict, Optional

from ..constants import (
    ErrorMessage,
    LINK_SHARING_ROLES,
    PERMISSION_FIELDS,
    PERMISSION_ROLES,
    PERMISSION_TYPES,
)
from ..context import get_drive_client
from ..decorators import handle_errors
from ..drive.client import DriveClient
from .common import require_file_id, require_text, success, validate_choice

logger = logging.getLogger(__name__)


def build_permission(
    role: str,
    permission_type: str = "user",
    email_address: Optional[str] = None,
    domain: Optional[str] = None,
    allow_discovery: Optional[bool] = None,
) -> tuple[Dict[str, Any], Dict[str, Any]]:
    """Assemble a permission body and the extra request parameters it needs.

    Returns:
        Tuple of (request body, extra query parameters)

    Raises:
        ValueError: If the role/type combination is incomplete or unknown
    """
    validate_choice(role, PERMISSION_ROLES, ErrorMessage.INVALID_ROLE, role=role)
    validate_choice(
        permission_type,
        PERMISSION_TYPES,
        ErrorMessage.INVALID_PERMISSION_TYPE,
        type=permission_type,
    )

    body: Dict[str, Any] = {"role": role, "type": permission_type}
    params: Dict[str, Any] = {}

    if permission_type in ("user", "group"):
        if not email_address:
            raise ValueError(ErrorMessage.EMAIL_REQUIRED.format(type=permission_type))
        body["emailAddress"] = email_address
    elif permission_type == "domain":
        if not domain:
            raise ValueError(ErrorMessage.DOMAIN_REQUIRED)
        body["domain"] = domain

    if permission_type in ("domain", "anyone"):
        validate_choice(role, LINK_SHARING_ROLES, ErrorMessage.INVALID_ROLE, role=role)
        if allow_discovery is not None:
            body["allowFileDiscovery"] = allow_discovery

    if role == "owner":
        params["transferOwnership"] = True

    return body, params


async def update_role(
    client: DriveClient, file_id: str, permission_id: str, role: str
) -> Dict[str, Any]:
    validate_choice(role, PERMISSION_ROLES, ErrorMessage.INVALID_ROLE, role=role)
    params = {"transferOwnership": True} if role == "owner" else {}
    return await client.update_permission(
        file_id, permission_id, {"role": role}, fields=PERMISSION_FIELDS, **params
    )


@handle_errors
async def share_file(
    file_id: str,
    role: str,
    permission_type: str = "user",
    email_address: str | None = None,
    domain: str | None = None,
    send_notification: bool = True,
    email_message: str | None = None,
) -> Dict[str, Any]:
    """Share a file with a user, group, domain or anyone.

    Args:
        file_id: ID of the file or folder to share
        role: reader, commenter, writer, organizer or owner
        permission_type: user, group, domain or anyone
        email_address: Recipient for user/group shares
        domain: Domain for domain shares
        send_notification: Email the recipient about the share
        email_message: Custom text for the notification email

    Returns:
        Dictionary with the created permission
    """
    logger.info(f"share_file called (file_id={file_id}, role={role}, type={permission_type})")
    client = get_drive_client()
    file_id = require_file_id(file_id)

    body, params = build_permission(role, permission_type, email_address, domain)
    if permission_type in ("user", "group"):
        params["sendNotificationEmail"] = send_notification
        if send_notification and email_message:
            params["emailMessage"] = email_message

    permission = await client.create_permission(
        file_id, body, fields=PERMISSION_FIELDS, **params
    )
    return success(file_id=file_id, permission=permission)


@handle_errors
async def list_permissions(file_id: str) -> Dict[str, Any]:
    logger.info(f"list_permissions called (file_id={file_id})")
    client = get_drive_client()
    response = await client.list_permissions(require_file_id(file_id), PERMISSION_FIELDS)
    permissions = response.get("permissions", [])
    return success(file_id=file_id, permissions=permissions, count=len(permissions))


@handle_errors
async def update_permission(file_id: str, permission_id: str, role: str) -> Dict[str, Any]:
    """Change the role of an existing permission."""
    logger.info(
        f"update_permission called (file_id={file_id}, permission_id={permission_id}, role={role})"
    )
    client = get_drive_client()
    permission = await update_role(
        client,
        require_file_id(file_id),
        require_text(permission_id, "permission_id"),
        role,
    )
    return success(file_id=file_id, permission=permission)


@handle_errors
async def delete_permission(file_id: str, permission_id: str) -> Dict[str, Any]:
    logger.info(f"delete_permission called (file_id={file_id}, permission_id={permission_id})")
    client = get_drive_client()
    await client.delete_permission(
        require_file_id(file_id), require_text(permission_id, "permission_id")
    )
    return success(file_id=file_id, permission_id=permission_id, deleted=True)


@handle_errors
async def add_domain_access(file_id: str, domain: str, role: str = "reader") -> Dict[str, Any]:
    """Grant everyone in a Google Workspace domain access to a file."""
    logger.info(f"add_domain_access called (file_id={file_id}, domain={domain}, role={role})")
    client = get_drive_client()
    body, params = build_permission(role, "domain", domain=require_text(domain, "domain"))
    permission = await client.create_permission(
        require_file_id(file_id), body, fields=PERMISSION_FIELDS, **params
    )
    return success(file_id=file_id, permission=permission)


@handle_errors
async def add_public_access(
    file_id: str,
    role: str = "reader",
    allow_discovery: bool = False,
) -> Dict[str, Any]:
    """Make a file available to anyone with the link."""
    logger.info(f"add_public_access called (file_id={file_id}, role={role})")
    client = get_drive_client()
    file_id = require_file_id(file_id)

    body, params = build_permission(role, "anyone", allow_discovery=allow_discovery)
    permission = await client.create_permission(
        file_id, body, fields=PERMISSION_FIELDS, **params
    )
    link = await client.get_file(file_id, "webViewLink")
    return success(
        file_id=file_id,
        permission=permission,
        web_view_link=link.get("webViewLink"),
    )
