"""Contracts exchanged between the orchestrator, planner and tool executor."""

from notion_agent.shared.contracts.plan import Plan, Step, validate_plan
from notion_agent.shared.contracts.tool_call import (
    CompletedStepResponse,
    ReplanRequest,
    ToolCallError,
    ToolCallRequest,
    ToolResult,
)

__all__ = [
    "Plan",
    "Step",
    "validate_plan",
    "CompletedStepResponse",
    "ReplanRequest",
    "ToolCallError",
    "ToolCallRequest",
    "ToolResult",
]
