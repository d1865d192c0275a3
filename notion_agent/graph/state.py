"""
Orchestrator state schema.

Defines the single state record that flows through the orchestrator
graph for one run: the plan, per-step history, the in-flight queue and
the bookkeeping needed for retries, re-planning and the final summary.
"""

from typing import Any, Dict, List, Optional, TypedDict

from notion_agent.shared.contracts import (
    Plan,
    ToolCallRequest,
    ToolCallError,
    ToolResult,
    CompletedStepResponse,
)


class OrchestratorState(TypedDict):
    """
    State schema for the orchestrator graph.

    Nodes never mutate this in place; they return dicts of updates that
    replace the named fields.
    """

    # Run input
    request: str

    # Current plan (replaced on every re-plan)
    plan: Optional[Plan]

    # Step id -> result entries, in plan order
    history: Dict[str, List[str]]

    # Errors of every attempt of the executing step
    pending_errors: List[ToolCallError]

    # FIFO of steps still to run; head is next
    queue: List[ToolCallRequest]

    current_step_id: str

    # Reentrancy guard. LangGraph merges a node's updates only after it
    # returns, so inside one graph this is always False; it is honored for
    # states handed in from outside, which then run no step.
    busy: bool

    # Bookkeeping
    completed_responses: List[CompletedStepResponse]
    last_result: Optional[ToolResult]
    step_exhausted: bool
    replan_count: int
    summary: Optional[str]

    # Session tracking
    session_id: Optional[str]


def create_initial_state(
    request: str,
    session_id: Optional[str] = None,
) -> OrchestratorState:
    """
    Build the empty state a run starts from.

    Args:
        request: The user's request
        session_id: Optional session id for log correlation

    Returns:
        OrchestratorState with no plan and empty collections
    """
    return OrchestratorState(
        request=request,
        plan=None,
        history={},
        pending_errors=[],
        queue=[],
        current_step_id="",
        busy=False,
        completed_responses=[],
        last_result=None,
        step_exhausted=False,
        replan_count=0,
        summary=None,
        session_id=session_id,
    )


def seed_queue_and_history(plan: Plan) -> Dict[str, Any]:
    """
    Build a fresh queue and empty history slots for a plan, in plan order.

    Args:
        plan: A validated, successful plan

    Returns:
        Dict with 'queue' and 'history' updates
    """
    steps = plan.steps or []
    return {
        "queue": [
            ToolCallRequest(id=s.id, tool_name=s.tool, guidance=s.input_guidance)
            for s in steps
        ],
        "history": {s.id: [] for s in steps},
    }
