"""Async Google Drive v3 client.

Wraps the synchronous discovery client from ``google-api-python-client``.
Each request runs in a worker thread with its own ``AuthorizedHttp``;
the ``Credentials`` object is shared by all requests and never mutated
after construction, apart from the token refresh google-auth performs.
"""

import asyncio
import io
import logging
from typing import Any, Optional

import httplib2
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.http import HttpRequest, MediaIoBaseDownload, MediaIoBaseUpload

from ..config import DEFAULT_TOKEN_URI, credentials_configured
from ..exceptions import CredentialsError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/drive"]

DOWNLOAD_CHUNK_SIZE_BYTES = 1024 * 1024  # 1 MB


class DriveClient:
    """Async facade over the Drive v3 ``files``, ``permissions``, ``comments``,
    ``replies``, ``revisions``, ``drives``, ``changes`` and ``about`` resources.
    """

    def __init__(self, credentials: Credentials, service: Any = None):
        self._credentials = credentials
        self._service = service or build(
            "drive", "v3", credentials=credentials, cache_discovery=False
        )

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> "DriveClient":
        """Create a client from the ``credentials`` section of server config.

        Raises:
            CredentialsError: If client id, secret or refresh token is missing
        """
        if not credentials_configured(config):
            raise CredentialsError()

        creds = config["credentials"]
        credentials = Credentials(
            token=None,
            refresh_token=creds["refresh_token"],
            client_id=creds["client_id"],
            client_secret=creds["client_secret"],
            token_uri=creds.get("token_uri") or DEFAULT_TOKEN_URI,
            scopes=SCOPES,
        )
        logger.info("Drive client created from refresh-token credentials")
        return cls(credentials)

    # -- plumbing ---------------------------------------------------------

    def _authorized_http(self) -> AuthorizedHttp:
        # httplib2.Http is not thread-safe, so every request gets its own
        return AuthorizedHttp(self._credentials, http=httplib2.Http())

    async def _execute(self, request: HttpRequest) -> Any:
        return await asyncio.to_thread(request.execute, http=self._authorized_http())

    def _download_sync(self, request: HttpRequest) -> bytes:
        request.http = self._authorized_http()
        buffer = io.BytesIO()
        downloader = MediaIoBaseDownload(
            buffer, request, chunksize=DOWNLOAD_CHUNK_SIZE_BYTES
        )
        done = False
        while not done:
            _, done = downloader.next_chunk()
        return buffer.getvalue()

    async def _download(self, request: HttpRequest) -> bytes:
        return await asyncio.to_thread(self._download_sync, request)

    @staticmethod
    def _media(data: bytes, mime_type: str) -> MediaIoBaseUpload:
        return MediaIoBaseUpload(io.BytesIO(data), mimetype=mime_type, resumable=False)

    # -- files ------------------------------------------------------------

    async def list_files(self, **params: Any) -> dict[str, Any]:
        params.setdefault("supportsAllDrives", True)
        return await self._execute(self._service.files().list(**params))

    async def get_file(self, file_id: str, fields: str) -> dict[str, Any]:
        return await self._execute(
            self._service.files().get(
                fileId=file_id, fields=fields, supportsAllDrives=True
            )
        )

    async def export_file(self, file_id: str, mime_type: str) -> bytes:
        return await self._download(
            self._service.files().export_media(fileId=file_id, mimeType=mime_type)
        )

    async def download_file(self, file_id: str) -> bytes:
        return await self._download(
            self._service.files().get_media(fileId=file_id, supportsAllDrives=True)
        )

    async def create_file(
        self,
        metadata: dict[str, Any],
        fields: str,
        data: Optional[bytes] = None,
        mime_type: Optional[str] = None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "body": metadata,
            "fields": fields,
            "supportsAllDrives": True,
        }
        if data is not None:
            kwargs["media_body"] = self._media(data, mime_type or "application/octet-stream")
        return await self._execute(self._service.files().create(**kwargs))

    async def update_file(
        self,
        file_id: str,
        fields: str,
        metadata: Optional[dict[str, Any]] = None,
        data: Optional[bytes] = None,
        mime_type: Optional[str] = None,
        **params: Any,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "fileId": file_id,
            "fields": fields,
            "supportsAllDrives": True,
            **params,
        }
        if metadata is not None:
            kwargs["body"] = metadata
        if data is not None:
            kwargs["media_body"] = self._media(data, mime_type or "application/octet-stream")
        return await self._execute(self._service.files().update(**kwargs))

    async def copy_file(
        self, file_id: str, metadata: dict[str, Any], fields: str
    ) -> dict[str, Any]:
        return await self._execute(
            self._service.files().copy(
                fileId=file_id, body=metadata, fields=fields, supportsAllDrives=True
            )
        )

    async def delete_file(self, file_id: str) -> None:
        await self._execute(
            self._service.files().delete(fileId=file_id, supportsAllDrives=True)
        )

    async def empty_trash(self) -> None:
        await self._execute(self._service.files().emptyTrash())

    # -- changes ----------------------------------------------------------

    async def get_start_page_token(self) -> str:
        response = await self._execute(
            self._service.changes().getStartPageToken(supportsAllDrives=True)
        )
        return response["startPageToken"]

    async def list_changes(self, page_token: str, page_size: int) -> dict[str, Any]:
        return await self._execute(
            self._service.changes().list(
                pageToken=page_token,
                pageSize=page_size,
                supportsAllDrives=True,
                includeItemsFromAllDrives=True,
                fields=(
                    "nextPageToken, newStartPageToken, changes(changeType, time, "
                    "removed, fileId, file(id, name, mimeType, trashed))"
                ),
            )
        )

    # -- revisions --------------------------------------------------------

    async def list_revisions(self, file_id: str, page_size: int) -> dict[str, Any]:
        return await self._execute(
            self._service.revisions().list(
                fileId=file_id,
                pageSize=page_size,
                fields="revisions(id, mimeType, modifiedTime, size, keepForever, "
                "lastModifyingUser(displayName))",
            )
        )

    # -- permissions ------------------------------------------------------

    async def list_permissions(self, file_id: str, fields: str) -> dict[str, Any]:
        return await self._execute(
            self._service.permissions().list(
                fileId=file_id,
                fields=f"permissions({fields})",
                supportsAllDrives=True,
            )
        )

    async def create_permission(
        self, file_id: str, body: dict[str, Any], fields: str, **params: Any
    ) -> dict[str, Any]:
        return await self._execute(
            self._service.permissions().create(
                fileId=file_id,
                body=body,
                fields=fields,
                supportsAllDrives=True,
                **params,
            )
        )

    async def update_permission(
        self, file_id: str, permission_id: str, body: dict[str, Any], fields: str, **params: Any
    ) -> dict[str, Any]:
        return await self._execute(
            self._service.permissions().update(
                fileId=file_id,
                permissionId=permission_id,
                body=body,
                fields=fields,
                supportsAllDrives=True,
                **params,
            )
        )

    async def delete_permission(self, file_id: str, permission_id: str) -> None:
        await self._execute(
            self._service.permissions().delete(
                fileId=file_id, permissionId=permission_id, supportsAllDrives=True
            )
        )

    # -- comments & replies ----------------------------------------------

    async def list_comments(self, file_id: str, fields: str, **params: Any) -> dict[str, Any]:
        return await self._execute(
            self._service.comments().list(
                fileId=file_id,
                fields=f"nextPageToken, comments({fields})",
                **params,
            )
        )

    async def create_comment(
        self, file_id: str, body: dict[str, Any], fields: str
    ) -> dict[str, Any]:
        return await self._execute(
            self._service.comments().create(fileId=file_id, body=body, fields=fields)
        )

    async def delete_comment(self, file_id: str, comment_id: str) -> None:
        await self._execute(
            self._service.comments().delete(fileId=file_id, commentId=comment_id)
        )

    async def list_replies(
        self, file_id: str, comment_id: str, fields: str, **params: Any
    ) -> dict[str, Any]:
        return await self._execute(
            self._service.replies().list(
                fileId=file_id,
                commentId=comment_id,
                fields=f"nextPageToken, replies({fields})",
                **params,
            )
        )

    async def create_reply(
        self, file_id: str, comment_id: str, body: dict[str, Any], fields: str
    ) -> dict[str, Any]:
        return await self._execute(
            self._service.replies().create(
                fileId=file_id, commentId=comment_id, body=body, fields=fields
            )
        )

    async def delete_reply(self, file_id: str, comment_id: str, reply_id: str) -> None:
        await self._execute(
            self._service.replies().delete(
                fileId=file_id, commentId=comment_id, replyId=reply_id
            )
        )

    # -- shared drives ----------------------------------------------------

    async def list_drives(self, **params: Any) -> dict[str, Any]:
        return await self._execute(self._service.drives().list(**params))

    async def get_drive(self, drive_id: str, fields: str) -> dict[str, Any]:
        return await self._execute(
            self._service.drives().get(driveId=drive_id, fields=fields)
        )

    async def create_drive(
        self, request_id: str, body: dict[str, Any], fields: str
    ) -> dict[str, Any]:
        return await self._execute(
            self._service.drives().create(requestId=request_id, body=body, fields=fields)
        )

    async def update_drive(
        self, drive_id: str, body: dict[str, Any], fields: str
    ) -> dict[str, Any]:
        return await self._execute(
            self._service.drives().update(driveId=drive_id, body=body, fields=fields)
        )

    async def delete_drive(self, drive_id: str) -> None:
        await self._execute(self._service.drives().delete(driveId=drive_id))

    # -- about ------------------------------------------------------------

    async def get_about(self, fields: str) -> dict[str, Any]:
        return await self._execute(self._service.about().get(fields=fields))
