"""Comment and reply tool handlers."""

import logging
from typing import Any, Dict

from ..constants import COMMENT_FIELDS, ErrorMessage, REPLY_FIELDS
from ..context import get_drive_client
from ..decorators import handle_errors
from .common import clamp_page_size, require_file_id, require_text, success

logger = logging.getLogger(__name__)

REPLY_ACTIONS = ("resolve", "reopen")


@handle_errors
async def add_comment(
    file_id: str,
    content: str,
    quoted_text: str | None = None,
) -> Dict[str, Any]:
    """Add a comment to a file.

    Args:
        file_id: ID of the file
        content: Comment text
        quoted_text: Text the comment refers to (optional)

    Returns:
        Dictionary with the created comment
    """
    logger.info(f"add_comment called (file_id={file_id})")
    client = get_drive_client()

    body: Dict[str, Any] = {"content": require_text(content, "content")}
    if quoted_text:
        body["quotedFileContent"] = {"mimeType": "text/plain", "value": quoted_text}

    comment = await client.create_comment(require_file_id(file_id), body, COMMENT_FIELDS)
    return success(file_id=file_id, comment=comment)


@handle_errors
async def list_comments(
    file_id: str,
    page_token: str | None = None,
    page_size: int | None = None,
    include_deleted: bool = False,
) -> Dict[str, Any]:
    logger.info(f"list_comments called (file_id={file_id})")
    client = get_drive_client()
    response = await client.list_comments(
        require_file_id(file_id),
        COMMENT_FIELDS,
        pageToken=page_token,
        pageSize=clamp_page_size(page_size, default=20, maximum=100),
        includeDeleted=include_deleted,
    )
    comments = response.get("comments", [])
    return success(
        file_id=file_id,
        comments=comments,
        count=len(comments),
        next_page_token=response.get("nextPageToken"),
    )


@handle_errors
async def delete_comment(file_id: str, comment_id: str) -> Dict[str, Any]:
    logger.info(f"delete_comment called (file_id={file_id}, comment_id={comment_id})")
    client = get_drive_client()
    await client.delete_comment(
        require_file_id(file_id), require_text(comment_id, "comment_id")
    )
    return success(file_id=file_id, comment_id=comment_id, deleted=True)


@handle_errors
async def reply_to_comment(
    file_id: str,
    comment_id: str,
    content: str,
    action: str | None = None,
) -> Dict[str, Any]:
    """Reply to a comment, optionally resolving or reopening it."""
    logger.info(
        f"reply_to_comment called (file_id={file_id}, comment_id={comment_id}, action={action})"
    )
    client = get_drive_client()

    body: Dict[str, Any] = {"content": require_text(content, "content")}
    if action:
        if action not in REPLY_ACTIONS:
            raise ValueError(ErrorMessage.INVALID_COMMENT_ACTION.format(action=action))
        body["action"] = action

    reply = await client.create_reply(
        require_file_id(file_id),
        require_text(comment_id, "comment_id"),
        body,
        REPLY_FIELDS,
    )
    return success(file_id=file_id, comment_id=comment_id, reply=reply)


@handle_errors
async def list_replies(
    file_id: str,
    comment_id: str,
    page_token: str | None = None,
    page_size: int | None = None,
) -> Dict[str, Any]:
    logger.info(f"list_replies called (file_id={file_id}, comment_id={comment_id})")
    client = get_drive_client()
    response = await client.list_replies(
        require_file_id(file_id),
        require_text(comment_id, "comment_id"),
        REPLY_FIELDS,
        pageToken=page_token,
        pageSize=clamp_page_size(page_size, default=20, maximum=100),
    )
    replies = response.get("replies", [])
    return success(
        file_id=file_id,
        comment_id=comment_id,
        replies=replies,
        next_page_token=response.get("nextPageToken"),
    )


@handle_errors
async def delete_reply(file_id: str, comment_id: str, reply_id: str) -> Dict[str, Any]:
    logger.info(
        f"delete_reply called (file_id={file_id}, comment_id={comment_id}, reply_id={reply_id})"
    )
    client = get_drive_client()
    await client.delete_reply(
        require_file_id(file_id),
        require_text(comment_id, "comment_id"),
        require_text(reply_id, "reply_id"),
    )
    return success(file_id=file_id, comment_id=comment_id, reply_id=reply_id, deleted=True)
