"""
Tool call contracts.

Shapes exchanged between the orchestrator, the planner and the tool
executor for a single step: the queued request, the tagged result of an
invocation, per-attempt errors, and the snapshot sent when re-planning.
"""

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from notion_agent.shared.contracts.plan import Plan


class ToolCallRequest(BaseModel):
    """A queued step awaiting execution."""

    id: str = Field(description="Step id this request executes")
    tool_name: str = Field(description="Registered tool to invoke")
    guidance: str = Field(default="", description="Step input guidance")
    args: Dict[str, Any] = Field(
        default_factory=dict,
        description="Generated arguments, filled immediately before invocation",
    )


class ToolCallError(BaseModel):
    """One failed attempt of the step currently executing."""

    error: str = Field(description="Error message reported for the attempt")
    failing_args: str = Field(description="JSON of the arguments that failed")


class ToolResult(BaseModel):
    """
    Tagged outcome of a tool invocation.

    `failed` is the tag: a success carries the API response as `payload`,
    a failure carries a human-readable error message.
    """

    failed: bool = Field(default=False, description="True if the call was rejected")
    payload: Any = Field(default=None, description="API response or error message")

    @classmethod
    def success(cls, payload: Any) -> "ToolResult":
        return cls(failed=False, payload=payload)

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        return cls(failed=True, payload=message)

    @property
    def message(self) -> str:
        """Payload rendered as text (the error message for failures)."""
        if isinstance(self.payload, str):
            return self.payload
        return json.dumps(self.payload, default=str)


class CompletedStepResponse(BaseModel):
    """Successful step response kept for the re-planner."""

    step_id: str
    tool_name: str
    payload: Any = None


class ReplanRequest(BaseModel):
    """Everything the planner sees when asked to revise a failing plan."""

    request: str = Field(description="Original user request")
    stale_plan: Plan = Field(description="Plan that failed")
    history: Dict[str, List[str]] = Field(
        default_factory=dict, description="Per-step results so far"
    )
    failed_step_id: str = Field(description="Step that exhausted its retries")
    pending_errors: List[ToolCallError] = Field(
        default_factory=list, description="Errors of every attempt of the failed step"
    )
    completed_responses: List[CompletedStepResponse] = Field(
        default_factory=list, description="Responses of steps that succeeded"
    )
