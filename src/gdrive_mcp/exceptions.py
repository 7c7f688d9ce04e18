"""Exceptions raised by Drive tool handlers."""

from .constants import ErrorMessage


class ConflictError(RuntimeError):
    """A file changed between the read and the write of a read-modify-write."""

    def __init__(self, file_id: str, expected: str | None, actual: str | None):
        self.file_id = file_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            ErrorMessage.APPEND_CONFLICT.format(
                file_id=file_id, expected=expected, actual=actual
            )
        )


class CredentialsError(RuntimeError):
    """Drive credentials are missing or incomplete."""

    def __init__(self, message: str = ErrorMessage.CREDENTIALS_MISSING):
        super().__init__(message)
