"""Tool registration system for the Google Drive MCP Server.

This module provides the tool registry, schemas, handler table and the
batch executor shared by multi-item tools.
"""

from .executor import BatchSummary, Outcome, execute_batch, run_batch
from .handlers import TOOL_HANDLERS
from .registry import ToolMetadata, ToolRegistry
from .schemas import (
    ToolSchema,
    get_tool_schema,
    get_tool_schemas,
    TOOL_SCHEMAS,
)

__all__ = [
    "BatchSummary",
    "Outcome",
    "execute_batch",
    "run_batch",
    "TOOL_HANDLERS",
    "ToolMetadata",
    "ToolRegistry",
    "ToolSchema",
    "get_tool_schema",
    "get_tool_schemas",
    "TOOL_SCHEMAS",
]
