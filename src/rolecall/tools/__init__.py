"""
Remote tool catalog for Rolecall.
"""

from rolecall.tools.catalog import (
    DEFAULT_TOOLS,
    ToolCatalog,
    ToolNotFoundError,
    get_tool_catalog,
    translate_legacy_tool,
)
from rolecall.tools.models import ToolAction, ToolDefinition, ToolParameter

__all__ = [
    "DEFAULT_TOOLS",
    "ToolAction",
    "ToolCatalog",
    "ToolDefinition",
    "ToolNotFoundError",
    "ToolParameter",
    "get_tool_catalog",
    "translate_legacy_tool",
]
