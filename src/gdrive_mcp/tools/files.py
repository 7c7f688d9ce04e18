"""File tool handlers: search, read, write and delete.

Each handler validates its input, issues one or more sequential Drive
calls through the context-bound client and reshapes the result.
"""

import base64
import binascii
import logging
from typing import Any, Dict, Optional

from ..constants import (
    ErrorMessage,
    FILE_LIST_FIELDS,
    FILE_METADATA_FIELDS,
    FOLDER_MIME_TYPE,
)
from ..context import get_drive_client
from ..decorators import handle_errors
from ..drive.client import DriveClient
from ..drive.mime import (
    encode_payload,
    export_mime_type_for,
    is_google_native,
    is_textual,
)
from ..exceptions import ConflictError
from .common import clamp_page_size, require_file_id, require_text, success

logger = logging.getLogger(__name__)

SPREADSHEET_MIME_TYPE = "application/vnd.google-apps.spreadsheet"
WRITE_FIELDS = "id, name, mimeType, parents, modifiedTime, version"


def escape_query_value(value: str) -> str:
    """Escape a literal for use inside a quoted Drive query string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def build_search_query(query: str) -> str:
    """Translate a free-text search into a Drive ``q`` expression.

    An empty query lists every non-trashed file. Otherwise the name is
    matched, and a mention of "sheet" also matches spreadsheets by type.
    """
    user_query = (query or "").strip()
    if not user_query:
        return "trashed = false"

    conditions = [f"name contains '{escape_query_value(user_query)}'"]
    if "sheet" in user_query.lower():
        conditions.append(f"mimeType = '{SPREADSHEET_MIME_TYPE}'")

    return f"({' or '.join(conditions)}) and trashed = false"


def format_file_listing(files: list[Dict[str, Any]]) -> str:
    lines = "\n".join(
        f"{f.get('id')} {f.get('name')} ({f.get('mimeType')})" for f in files
    )
    return f"Found {len(files)} files:\n{lines}"


async def fetch_content(
    client: DriveClient, file_id: str, mime_type: Optional[str]
) -> tuple[bytes, str]:
    """Download or export a file's bytes.

    Returns:
        Tuple of (raw bytes, MIME type of those bytes)
    """
    if is_google_native(mime_type):
        export_type = export_mime_type_for(mime_type)
        logger.debug(f"Exporting {file_id} ({mime_type}) as {export_type}")
        return await client.export_file(file_id, export_type), export_type

    return await client.download_file(file_id), mime_type or "application/octet-stream"


async def move_to_folder(
    client: DriveClient, file_id: str, new_parent_id: str
) -> Dict[str, Any]:
    """Re-parent a file: read its current parents, then swap them out."""
    current = await client.get_file(file_id, "parents")
    previous_parents = ",".join(
        parent for parent in current.get("parents", []) if parent != new_parent_id
    )
    return await client.update_file(
        file_id,
        fields="id, name, parents",
        addParents=new_parent_id,
        removeParents=previous_parents,
    )


async def trash_or_delete(client: DriveClient, file_id: str, permanent: bool) -> str:
    """Trash a file, or delete it outright when ``permanent`` is set.

    Returns:
        The operation performed, ``"delete"`` or ``"trash"``
    """
    if permanent:
        await client.delete_file(file_id)
        return "delete"
    await client.update_file(file_id, fields="id", metadata={"trashed": True})
    return "trash"


async def copy_to(
    client: DriveClient,
    file_id: str,
    name: Optional[str] = None,
    parent_id: Optional[str] = None,
) -> Dict[str, Any]:
    metadata: Dict[str, Any] = {}
    if name:
        metadata["name"] = name
    if parent_id:
        metadata["parents"] = [parent_id]
    return await client.copy_file(file_id, metadata, fields="id, name, mimeType, parents")


# -- search / list ----------------------------------------------------------


@handle_errors
async def search_files(
    query: str,
    page_token: str | None = None,
    page_size: int | None = None,
) -> Dict[str, Any]:
    """Search for files in Google Drive by name.

    Args:
        query: Name (or part of it) to search for; empty lists everything
        page_token: Token for the next page of results
        page_size: Number of results per page (max 100)

    Returns:
        Dictionary with files, a text listing and ``next_page_token``
    """
    logger.info(f"search_files called (query={query!r}, page_token={page_token})")
    client = get_drive_client()

    response = await client.list_files(
        q=build_search_query(query),
        pageSize=clamp_page_size(page_size, default=10, maximum=100),
        pageToken=page_token,
        orderBy="modifiedTime desc",
        fields=FILE_LIST_FIELDS,
        includeItemsFromAllDrives=True,
    )
    files = response.get("files", [])
    text = format_file_listing(files)
    next_token = response.get("nextPageToken")
    if next_token:
        text += f"\n\nMore results available. Use pageToken: {next_token}"

    return success(files=files, text=text, next_page_token=next_token)


@handle_errors
async def list_folder(
    folder_id: str = "root",
    page_token: str | None = None,
    page_size: int | None = None,
) -> Dict[str, Any]:
    """List the non-trashed children of a folder."""
    logger.info(f"list_folder called (folder_id={folder_id})")
    client = get_drive_client()
    folder_id = require_file_id(folder_id)

    response = await client.list_files(
        q=f"'{escape_query_value(folder_id)}' in parents and trashed = false",
        pageSize=clamp_page_size(page_size, default=50, maximum=1000),
        pageToken=page_token,
        orderBy="folder, name",
        fields=FILE_LIST_FIELDS,
        includeItemsFromAllDrives=True,
    )
    files = response.get("files", [])
    return success(
        folder_id=folder_id,
        files=files,
        count=len(files),
        next_page_token=response.get("nextPageToken"),
    )


@handle_errors
async def list_changes(
    page_token: str | None = None,
    page_size: int | None = None,
) -> Dict[str, Any]:
    """List changes since ``page_token``.

    Without a token, returns the current start token so the caller can
    poll from now on.
    """
    logger.info(f"list_changes called (page_token={page_token})")
    client = get_drive_client()

    if not page_token:
        start_token = await client.get_start_page_token()
        return success(changes=[], next_page_token=None, new_start_page_token=start_token)

    response = await client.list_changes(
        page_token, clamp_page_size(page_size, default=100, maximum=1000)
    )
    return success(
        changes=response.get("changes", []),
        next_page_token=response.get("nextPageToken"),
        new_start_page_token=response.get("newStartPageToken"),
    )


# -- read -------------------------------------------------------------------


@handle_errors
async def get_metadata(file_id: str, fields: str | None = None) -> Dict[str, Any]:
    """Get a file's metadata."""
    logger.info(f"get_metadata called (file_id={file_id})")
    client = get_drive_client()
    metadata = await client.get_file(require_file_id(file_id), fields or FILE_METADATA_FIELDS)
    return success(file=metadata)


@handle_errors
async def read_file(file_id: str) -> Dict[str, Any]:
    """Read the contents of a file.

    Native Google files are exported (documents to Markdown, spreadsheets
    to CSV, presentations to plain text, drawings to PNG); other files are
    downloaded. Textual content comes back as UTF-8, everything else as
    base64.

    Args:
        file_id: ID of the file to read

    Returns:
        Dictionary with name, source and content MIME types, encoding and content
    """
    logger.info(f"read_file called (file_id={file_id})")
    client = get_drive_client()
    file_id = require_file_id(file_id)

    metadata = await client.get_file(file_id, "id, name, mimeType")
    mime_type = metadata.get("mimeType")
    data, content_mime = await fetch_content(client, file_id, mime_type)
    content, encoding = encode_payload(data, content_mime)
    logger.debug(f"Read {len(data)} bytes from {file_id} ({content_mime})")

    return success(
        file_id=file_id,
        name=metadata.get("name") or file_id,
        mime_type=mime_type,
        content_mime_type=content_mime,
        encoding=encoding,
        content=content,
    )


@handle_errors
async def list_revisions(file_id: str, page_size: int | None = None) -> Dict[str, Any]:
    logger.info(f"list_revisions called (file_id={file_id})")
    client = get_drive_client()
    response = await client.list_revisions(
        require_file_id(file_id), clamp_page_size(page_size, default=100, maximum=1000)
    )
    return success(file_id=file_id, revisions=response.get("revisions", []))


# -- write ------------------------------------------------------------------


@handle_errors
async def create_file(
    name: str,
    content: str = "",
    mime_type: str = "text/plain",
    parent_id: str | None = None,
) -> Dict[str, Any]:
    """Create a file with text content."""
    logger.info(f"create_file called (name={name}, mime_type={mime_type})")
    client = get_drive_client()

    metadata: Dict[str, Any] = {"name": require_text(name, "name"), "mimeType": mime_type}
    if parent_id:
        metadata["parents"] = [parent_id]

    created = await client.create_file(
        metadata,
        fields=WRITE_FIELDS,
        data=content.encode("utf-8"),
        mime_type=mime_type,
    )
    return success(file=created)


@handle_errors
async def create_folder(name: str, parent_id: str | None = None) -> Dict[str, Any]:
    logger.info(f"create_folder called (name={name}, parent_id={parent_id})")
    client = get_drive_client()

    metadata: Dict[str, Any] = {
        "name": require_text(name, "name"),
        "mimeType": FOLDER_MIME_TYPE,
    }
    if parent_id:
        metadata["parents"] = [parent_id]

    created = await client.create_file(metadata, fields=WRITE_FIELDS)
    return success(folder=created)


@handle_errors
async def upload_file(
    name: str,
    content: str,
    mime_type: str = "application/octet-stream",
    parent_id: str | None = None,
    encoding: str = "text",
    convert_to: str | None = None,
) -> Dict[str, Any]:
    """Upload content as a new file.

    Args:
        name: File name
        content: File content, plain text or base64 per ``encoding``
        mime_type: MIME type of the uploaded content
        parent_id: Destination folder ID (optional)
        encoding: ``text`` or ``base64``
        convert_to: Native Google MIME type to convert into (optional)

    Returns:
        Dictionary with the created file's metadata and uploaded size
    """
    logger.info(
        f"upload_file called (name={name}, mime_type={mime_type}, encoding={encoding})"
    )
    client = get_drive_client()

    if encoding == "text":
        data = content.encode("utf-8")
    elif encoding == "base64":
        try:
            data = base64.b64decode(content, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"content is not valid base64: {e}") from e
    else:
        raise ValueError(ErrorMessage.INVALID_ENCODING.format(encoding=encoding))

    metadata: Dict[str, Any] = {"name": require_text(name, "name")}
    if convert_to:
        metadata["mimeType"] = convert_to
    if parent_id:
        metadata["parents"] = [parent_id]

    created = await client.create_file(
        metadata, fields=WRITE_FIELDS, data=data, mime_type=mime_type
    )
    logger.debug(f"Uploaded {len(data)} bytes as {created.get('id')}")
    return success(file=created, size=len(data))


@handle_errors
async def append_text(file_id: str, text: str, separator: str = "") -> Dict[str, Any]:
    """Append text to the end of a textual file.

    Reads the current content, appends, and writes the whole file back.
    The write is refused with a conflict when the file's version moved
    between the read and the write.

    Args:
        file_id: ID of the file to append to
        text: Text to append
        separator: Inserted between the existing content and ``text``

    Returns:
        Dictionary with the updated file's metadata and new length
    """
    logger.info(f"append_text called (file_id={file_id}, length={len(text)})")
    client = get_drive_client()
    file_id = require_file_id(file_id)

    metadata = await client.get_file(file_id, "id, name, mimeType, version")
    data, content_mime = await fetch_content(client, file_id, metadata.get("mimeType"))
    if not is_textual(content_mime):
        raise ValueError(ErrorMessage.BINARY_APPEND.format(mime_type=content_mime))

    existing = data.decode("utf-8", errors="replace")
    joiner = separator if existing else ""
    updated_text = f"{existing}{joiner}{text}"

    latest = await client.get_file(file_id, "version")
    if latest.get("version") != metadata.get("version"):
        raise ConflictError(file_id, metadata.get("version"), latest.get("version"))

    updated = await client.update_file(
        file_id,
        fields=WRITE_FIELDS,
        data=updated_text.encode("utf-8"),
        mime_type=content_mime,
    )
    return success(file=updated, length=len(updated_text))


@handle_errors
async def rename_file(file_id: str, new_name: str) -> Dict[str, Any]:
    logger.info(f"rename_file called (file_id={file_id}, new_name={new_name})")
    client = get_drive_client()
    updated = await client.update_file(
        require_file_id(file_id),
        fields="id, name",
        metadata={"name": require_text(new_name, "new_name")},
    )
    return success(file=updated)


@handle_errors
async def copy_file(
    file_id: str,
    name: str | None = None,
    parent_id: str | None = None,
) -> Dict[str, Any]:
    logger.info(f"copy_file called (file_id={file_id}, name={name})")
    client = get_drive_client()
    copied = await copy_to(client, require_file_id(file_id), name, parent_id)
    return success(file=copied)


@handle_errors
async def move_file(file_id: str, new_parent_id: str) -> Dict[str, Any]:
    """Move a file into another folder, replacing all its current parents."""
    logger.info(f"move_file called (file_id={file_id}, new_parent_id={new_parent_id})")
    client = get_drive_client()
    moved = await move_to_folder(
        client, require_file_id(file_id), require_text(new_parent_id, "new_parent_id")
    )
    return success(file=moved)


@handle_errors
async def star_file(file_id: str, starred: bool = True) -> Dict[str, Any]:
    logger.info(f"star_file called (file_id={file_id}, starred={starred})")
    client = get_drive_client()
    updated = await client.update_file(
        require_file_id(file_id), fields="id, name, starred", metadata={"starred": starred}
    )
    return success(file=updated)


@handle_errors
async def restore_file(file_id: str) -> Dict[str, Any]:
    """Restore a file from the trash."""
    logger.info(f"restore_file called (file_id={file_id})")
    client = get_drive_client()
    updated = await client.update_file(
        require_file_id(file_id), fields="id, name, trashed", metadata={"trashed": False}
    )
    return success(file=updated)


@handle_errors
async def lock_file(
    file_id: str,
    locked: bool = True,
    reason: str | None = None,
) -> Dict[str, Any]:
    """Lock or unlock a file's content with a read-only content restriction."""
    logger.info(f"lock_file called (file_id={file_id}, locked={locked})")
    client = get_drive_client()

    restriction: Dict[str, Any] = {"readOnly": locked}
    if locked and reason:
        restriction["reason"] = reason

    updated = await client.update_file(
        require_file_id(file_id),
        fields="id, name, contentRestrictions",
        metadata={"contentRestrictions": [restriction]},
    )
    return success(file=updated, locked=locked)


# -- delete -----------------------------------------------------------------


@handle_errors
async def delete_file(file_id: str, permanent: bool = False) -> Dict[str, Any]:
    """Move a file to the trash, or delete it permanently.

    Args:
        file_id: ID of the file
        permanent: Skip the trash and delete immediately

    Returns:
        Dictionary naming the operation performed
    """
    logger.info(f"delete_file called (file_id={file_id}, permanent={permanent})")
    client = get_drive_client()
    file_id = require_file_id(file_id)
    operation = await trash_or_delete(client, file_id, permanent)
    return success(file_id=file_id, operation=operation)


@handle_errors
async def empty_trash() -> Dict[str, Any]:
    logger.info("empty_trash called")
    client = get_drive_client()
    await client.empty_trash()
    return success(message="Trash emptied")
