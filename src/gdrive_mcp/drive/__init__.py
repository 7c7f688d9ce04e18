"""Google Drive client layer."""

from .client import DriveClient, SCOPES
from .mime import (
    NativeType,
    encode_payload,
    export_mime_type_for,
    is_google_native,
    is_textual,
)

__all__ = [
    "DriveClient",
    "SCOPES",
    "NativeType",
    "encode_payload",
    "export_mime_type_for",
    "is_google_native",
    "is_textual",
]
