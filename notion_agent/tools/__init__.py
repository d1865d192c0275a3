"""
Notion tools: the catalog of callable operations, the registry used to
validate plans against it, and the HTTP executor that invokes them.
"""

from notion_agent.tools.registry import (
    DEFAULT_REGISTRY,
    ToolRegistry,
    ToolSchema,
)
from notion_agent.tools.executor import NotionToolExecutor, ToolExecutor

__all__ = [
    "DEFAULT_REGISTRY",
    "ToolRegistry",
    "ToolSchema",
    "NotionToolExecutor",
    "ToolExecutor",
]
