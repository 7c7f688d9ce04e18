"""Shared helpers for Drive tool handlers."""

from typing import Any, Optional

from ..constants import ErrorMessage, ResponseStatus


def success(**fields: Any) -> dict[str, Any]:
    """Build a success response."""
    return {"status": ResponseStatus.SUCCESS.value, **fields}


def require_text(value: Optional[str], field_name: str) -> str:
    """Return ``value`` stripped, or raise ValueError if it is blank."""
    if value is None or not str(value).strip():
        raise ValueError(f"{field_name} cannot be empty")
    return str(value).strip()


def require_file_id(file_id: Optional[str]) -> str:
    if file_id is None or not file_id.strip():
        raise ValueError(ErrorMessage.FILE_ID_EMPTY)
    return file_id.strip()


def clamp_page_size(page_size: Optional[int], default: int, maximum: int) -> int:
    """Keep a page-size hint within what the API accepts."""
    if not page_size or page_size < 1:
        return default
    return min(page_size, maximum)


def validate_choice(value: str, allowed: tuple[str, ...], template: str, **fmt: Any) -> str:
    if value not in allowed:
        raise ValueError(template.format(allowed=", ".join(allowed), **fmt))
    return value
