"""MIME type dispatch for Drive content.

Native Google formats cannot be downloaded; they have to be exported to a
concrete representation. The recognised native sub-types are an ``Enum``
with an explicit default for anything Google adds later.
"""

import base64
from enum import Enum
from typing import Optional

GOOGLE_APPS_PREFIX = "application/vnd.google-apps."

DEFAULT_EXPORT_MIME_TYPE = "text/plain"

TEXTUAL_APPLICATION_TYPES = frozenset({
    "application/json",
    "application/xml",
    "application/javascript",
    "application/x-yaml",
    "application/csv",
})


class NativeType(str, Enum):
    """Google-native document types and the format each exports to."""

    DOCUMENT = "application/vnd.google-apps.document"
    SPREADSHEET = "application/vnd.google-apps.spreadsheet"
    PRESENTATION = "application/vnd.google-apps.presentation"
    DRAWING = "application/vnd.google-apps.drawing"

    @property
    def export_mime_type(self) -> str:
        return _EXPORT_TARGETS[self]

    @classmethod
    def parse(cls, mime_type: Optional[str]) -> Optional["NativeType"]:
        try:
            return cls(mime_type)
        except ValueError:
            return None


_EXPORT_TARGETS = {
    NativeType.DOCUMENT: "text/markdown",
    NativeType.SPREADSHEET: "text/csv",
    NativeType.PRESENTATION: "text/plain",
    NativeType.DRAWING: "image/png",
}


def is_google_native(mime_type: Optional[str]) -> bool:
    return bool(mime_type) and mime_type.startswith(GOOGLE_APPS_PREFIX)


def export_mime_type_for(mime_type: str) -> str:
    """Pick the export target for a native Google MIME type."""
    native = NativeType.parse(mime_type)
    if native is None:
        return DEFAULT_EXPORT_MIME_TYPE
    return native.export_mime_type


def is_textual(mime_type: Optional[str]) -> bool:
    """Single textual-content predicate used by every tool."""
    if not mime_type:
        return False
    base = mime_type.split(";", 1)[0].strip().lower()
    return base.startswith("text/") or base in TEXTUAL_APPLICATION_TYPES


def encode_payload(data: bytes, mime_type: Optional[str]) -> tuple[str, str]:
    """Render bytes as ``(content, encoding)`` for a JSON response."""
    if is_textual(mime_type):
        return data.decode("utf-8", errors="replace"), "utf-8"
    return base64.b64encode(data).decode("ascii"), "base64"


CONTENT_CATEGORIES = (
    ("documents", (NativeType.DOCUMENT.value, "application/msword",
                   "application/vnd.openxmlformats-officedocument.wordprocessingml")),
    ("spreadsheets", (NativeType.SPREADSHEET.value, "application/vnd.ms-excel",
                      "application/vnd.openxmlformats-officedocument.spreadsheetml",
                      "text/csv")),
    ("presentations", (NativeType.PRESENTATION.value, "application/vnd.ms-powerpoint",
                       "application/vnd.openxmlformats-officedocument.presentationml")),
    ("pdf", ("application/pdf",)),
    ("images", ("image/", NativeType.DRAWING.value)),
    ("videos", ("video/",)),
    ("audio", ("audio/",)),
)


def content_category(mime_type: Optional[str]) -> str:
    """Bucket a MIME type for the usage breakdown."""
    if mime_type:
        for category, prefixes in CONTENT_CATEGORIES:
            if mime_type.startswith(prefixes):
                return category
    return "other"
