"""
Planning node.

Requests the initial plan for the run, validates it and seeds the queue
and history in plan order.
"""

import logging
from typing import Any, Dict

from notion_agent.graph.context import RunContext
from notion_agent.graph.state import OrchestratorState, seed_queue_and_history
from notion_agent.shared.contracts import validate_plan
from notion_agent.shared.errors import PlanGenerationError, PlanRejectedError
from notion_agent.shared.logging.activity_log import EventKind
from notion_agent.shared.logging.config import log_state_transition


logger = logging.getLogger(__name__)


def plan_node(state: OrchestratorState, ctx: RunContext) -> Dict[str, Any]:
    """
    Produce and validate the initial plan.

    Args:
        state: Initial orchestrator state
        ctx: Run collaborators

    Returns:
        State updates with the plan, queue and empty history slots

    Raises:
        PlanGenerationError: If the planner produced no plan
        InvalidPlanError: If the plan breaks its structural invariants
        UnknownToolError: If a step names an unregistered tool
        PlanRejectedError: If the planner declared the request impossible
    """
    session_id = state.get("session_id") or "unknown"
    _log = f"[session={session_id}] [graph=orchestrator] [node=make_plan] "

    logger.info(f"{_log}Entering node | request_length={len(state['request'])}")
    ctx.activity.record(EventKind.THINKING.value, "Planning how to handle your request")

    plan = ctx.planner.make_plan(state["request"])
    if plan is None:
        raise PlanGenerationError("Failed to generate an action plan")

    validate_plan(plan, ctx.registry)
    if not plan.success:
        logger.info(f"{_log}Planner rejected the request: {plan.failure_reason}")
        raise PlanRejectedError(plan.failure_reason)

    updates: Dict[str, Any] = {
        "plan": plan,
        **seed_queue_and_history(plan),
        "pending_errors": [],
        "current_step_id": "",
        "busy": False,
    }

    logger.info(f"{_log}Plan ready | steps={plan.step_ids}")
    ctx.activity.record(EventKind.DECIDING.value, f"Plan ready with {len(plan.step_ids)} steps")
    log_state_transition("plan_ready", {**state, **updates})
    return updates
