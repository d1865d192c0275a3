"""
Action plan contract.

Defines the structured plan the planner produces (and revises) for a
user request, plus the validation applied before a plan is executed.
"""

from typing import List, Optional, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from notion_agent.shared.errors import InvalidPlanError, UnknownToolError

if TYPE_CHECKING:
    from notion_agent.tools.registry import ToolRegistry


class Step(BaseModel):
    """A single tool invocation within an action plan."""

    id: str = Field(description="Short step id, unique within the plan (e.g. 's1')")
    tool: str = Field(description="Name of a registered tool")
    purpose: str = Field(description="What this step accomplishes")
    input_guidance: str = Field(
        description="Hints for generating this step's tool arguments"
    )
    depends_on: List[str] = Field(
        default_factory=list,
        description="Ids of earlier steps whose results this step needs",
    )
    group: int = Field(
        default=0,
        ge=0,
        description="Grouping hint; steps sharing a group could run together",
    )


class Plan(BaseModel):
    """
    Contract for an action plan.

    A successful plan carries a non-empty ordered list of steps. An
    unsuccessful plan carries no steps and a failure reason explaining why
    the request cannot be served with the available tools.
    """

    success: bool = Field(description="False if the task cannot be done with the tools")
    failure_reason: Optional[str] = Field(
        default=None, description="Why the plan failed; null on success"
    )
    steps: Optional[List[Step]] = Field(
        default=None, description="Ordered steps; null on failure"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "failure_reason": None,
                "steps": [
                    {
                        "id": "s1",
                        "tool": "search",
                        "purpose": "Find the meeting notes page",
                        "input_guidance": "Search for 'Meeting notes', pages only",
                        "depends_on": [],
                        "group": 0,
                    },
                    {
                        "id": "s2",
                        "tool": "append_block_children",
                        "purpose": "Add today's agenda to the page",
                        "input_guidance": "Use the page id found in s1",
                        "depends_on": ["s1"],
                        "group": 1,
                    },
                ],
            }
        }
    )

    def get_step(self, step_id: str) -> Optional[Step]:
        """Return the step with the given id, or None."""
        return next((s for s in self.steps or [] if s.id == step_id), None)

    @property
    def step_ids(self) -> List[str]:
        return [s.id for s in self.steps or []]


def validate_plan(plan: Plan, registry: "ToolRegistry") -> Plan:
    """
    Check a plan's structural invariants before it is executed.

    Args:
        plan: Plan received from the planner
        registry: Tool registry every step's tool must resolve in

    Returns:
        The same plan, for chaining

    Raises:
        InvalidPlanError: If the success/steps/failure_reason invariant is
            broken, step ids repeat, or a dependency is not an earlier step
        UnknownToolError: If a step names a tool missing from the registry
    """
    if not plan.success:
        if plan.steps is not None:
            raise InvalidPlanError("Unsuccessful plan must not carry steps")
        if not plan.failure_reason:
            raise InvalidPlanError("Unsuccessful plan must carry a failure reason")
        return plan

    if not plan.steps:
        raise InvalidPlanError("Successful plan has no steps")

    seen: List[str] = []
    for step in plan.steps:
        if step.id in seen:
            raise InvalidPlanError(f"Duplicate step id {step.id}")
        if step.tool not in registry:
            raise UnknownToolError(step.tool)
        missing = [dep for dep in step.depends_on if dep not in seen]
        if missing:
            raise InvalidPlanError(
                f"Step {step.id} depends on unknown or later steps: {missing}"
            )
        seen.append(step.id)

    return plan
