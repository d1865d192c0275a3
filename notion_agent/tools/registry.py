"""
Tool registry.

Read-only lookup of callable tools by name. Used to validate plan steps
and to describe the available operations to the planner.
"""

from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field

from notion_agent.tools.catalog import ALL_TOOLS, CATEGORIES


class ToolSchema(BaseModel):
    """A named external operation with a JSON-schema argument shape."""

    name: str = Field(description="Tool name used in plans")
    description: str = Field(description="Human-readable description")
    parameters: Dict[str, Any] = Field(
        default_factory=dict, description="JSON schema of the arguments"
    )


class ToolRegistry:
    """Mapping from tool name to ToolSchema."""

    def __init__(
        self,
        tools: Iterable[ToolSchema],
        categories: Optional[Dict[str, List[str]]] = None,
    ):
        self._tools: Dict[str, ToolSchema] = {t.name: t for t in tools}
        self._categories = categories or {}

    @classmethod
    def from_dicts(
        cls,
        tools: Iterable[Dict[str, Any]],
        categories: Optional[Dict[str, List[str]]] = None,
    ) -> "ToolRegistry":
        return cls([ToolSchema.model_validate(t) for t in tools], categories)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: str) -> Optional[ToolSchema]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def by_category(self, category: str) -> List[ToolSchema]:
        names = self._categories.get(category, [])
        return [self._tools[n] for n in names if n in self._tools]

    def describe(self) -> List[Dict[str, Any]]:
        """Serializable catalog for planner prompts."""
        return [t.model_dump() for t in self._tools.values()]


DEFAULT_REGISTRY = ToolRegistry.from_dicts(ALL_TOOLS, CATEGORIES)
