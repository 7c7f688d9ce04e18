"""Decorators for MCP Server handlers.

This module provides decorators for common handler patterns like error handling.
"""

import logging
from functools import wraps
from typing import Any, Callable, TypeVar, ParamSpec

from googleapiclient.errors import HttpError

from .constants import ResponseStatus, ErrorCode, ErrorMessage
from .exceptions import ConflictError, CredentialsError

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def error_message(exc: BaseException) -> str:
    """Return the provider's message for an exception.

    Drive API errors carry the server's explanation in ``reason``
    (e.g. "File not found: abc."); everything else falls back to ``str``.
    """
    if isinstance(exc, HttpError):
        reason = getattr(exc, "reason", None)
        if reason:
            return str(reason)
    return str(exc)


def _error_response(func_name: str, message: str, code: ErrorCode) -> dict[str, Any]:
    return {
        "status": ResponseStatus.ERROR.value,
        "error": message,
        "error_code": code.value,
        "function": func_name,
    }


def handle_errors(func: Callable[P, T]) -> Callable[P, dict[str, Any]]:
    """Decorator to handle errors in async tool handlers.

    Automatically catches exceptions and returns a consistent error response
    format. Single-item tools are not retried; the provider's error text is
    passed through unchanged.

    Args:
        func: Async handler function to wrap

    Returns:
        Wrapped function that returns dict with status and error info on exception
    """
    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> dict[str, Any]:
        try:
            result = await func(*args, **kwargs)
            if not isinstance(result, dict):
                logger.warning(
                    f"Handler {func.__name__} returned non-dict result: {type(result)}"
                )
                return {
                    "status": ResponseStatus.SUCCESS.value,
                    "result": result,
                }
            return result
        except ValueError as e:
            logger.error(f"Invalid input in {func.__name__}: {e}", exc_info=False)
            return _error_response(func.__name__, str(e), ErrorCode.INVALID_INPUT)
        except HttpError as e:
            message = error_message(e)
            logger.error(f"Drive API error in {func.__name__}: {message}")
            response = _error_response(func.__name__, message, ErrorCode.DRIVE_API_ERROR)
            response["http_status"] = e.resp.status
            return response
        except ConflictError as e:
            logger.warning(f"Conflict in {func.__name__}: {e}")
            return _error_response(func.__name__, str(e), ErrorCode.CONFLICT)
        except CredentialsError as e:
            logger.error(f"Credentials unavailable in {func.__name__}: {e}")
            return _error_response(func.__name__, str(e), ErrorCode.CREDENTIALS_MISSING)
        except RuntimeError as e:
            logger.error(f"Runtime error in {func.__name__}: {e}", exc_info=False)
            return _error_response(func.__name__, str(e), ErrorCode.RUNTIME_ERROR)
        except Exception as e:
            logger.error(
                f"Unexpected error in {func.__name__}: {e}",
                exc_info=True
            )
            return _error_response(
                func.__name__,
                f"{ErrorMessage.UNEXPECTED_ERROR}: {e}",
                ErrorCode.UNEXPECTED_ERROR,
            )

    return wrapper
