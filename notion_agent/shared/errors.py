"""
Orchestration error taxonomy.

Every exception here is fatal for a run: it propagates out of the graph
and aborts it. Recoverable failures (a rejected tool call, an exhausted
step) never raise; they are absorbed into the state history instead.
"""

from typing import Optional


class OrchestrationError(Exception):
    """Base exception for unrecoverable orchestration failures."""

    pass


class PlanGenerationError(OrchestrationError):
    """Raised when the planner produced no plan (initial or revised)."""

    pass


class PlanRejectedError(OrchestrationError):
    """
    Raised when the planner declares the request impossible.

    Attributes:
        reason: The planner's failure reason
    """

    def __init__(self, reason: Optional[str]) -> None:
        self.reason = reason or "No reason given"
        super().__init__(f"Planner rejected the request: {self.reason}")


class InvalidPlanError(OrchestrationError):
    """Raised when a plan violates its structural invariants."""

    pass


class UnknownToolError(OrchestrationError):
    """Raised when a tool name does not resolve in the registry."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")


class StepNotFoundError(OrchestrationError):
    """Raised when a queued request references a step missing from the plan."""

    def __init__(self, step_id: str) -> None:
        self.step_id = step_id
        super().__init__(f"Step {step_id} not found")


class ArgumentGenerationError(OrchestrationError):
    """Raised when the planner produced no arguments for a step's first attempt."""

    pass


class ReplanLimitExceededError(OrchestrationError):
    """Raised when a run asks for more re-plans than the configured ceiling."""

    def __init__(self, limit: int, failed_step_id: str) -> None:
        self.limit = limit
        self.failed_step_id = failed_step_id
        super().__init__(
            f"Re-plan limit of {limit} reached (last failure at step {failed_step_id})"
        )


class SummaryGenerationError(OrchestrationError):
    """Raised when the planner produced no summary for a finished run."""

    pass


class StepLimitExceededError(OrchestrationError):
    """Raised when a run exceeds the graph's total step ceiling."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Run exceeded the limit of {limit} graph steps")
