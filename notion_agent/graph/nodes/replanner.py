"""
Re-planner node.

Runs when a step has exhausted its retries: sends the planner the stale
plan with everything learned so far and restarts execution from the
revised plan.
"""

import logging
from typing import Any, Dict

from notion_agent.graph.context import RunContext
from notion_agent.graph.state import OrchestratorState, seed_queue_and_history
from notion_agent.shared.contracts import ReplanRequest, validate_plan
from notion_agent.shared.errors import (
    PlanGenerationError,
    PlanRejectedError,
    ReplanLimitExceededError,
)
from notion_agent.shared.logging.activity_log import EventKind
from notion_agent.shared.logging.config import log_state_transition


logger = logging.getLogger(__name__)


def replan(state: OrchestratorState, ctx: RunContext) -> Dict[str, Any]:
    """
    Replace the current plan with a revised one.

    The planner decides whether the revised plan repeats the remaining
    steps or takes a different route; the result is applied as-is.

    Args:
        state: State right after a step was exhausted
        ctx: Run collaborators

    Returns:
        State updates with the new plan and freshly seeded queue and history

    Raises:
        ReplanLimitExceededError: If the run already used every re-plan
        PlanGenerationError: If the planner produced no plan
        InvalidPlanError: If the revised plan breaks its invariants
        UnknownToolError: If a revised step names an unregistered tool
        PlanRejectedError: If the planner gave up on the request
    """
    session_id = state.get("session_id") or "unknown"
    _log = f"[session={session_id}] [graph=orchestrator] [node=replan] "

    failed_step_id = state.get("current_step_id", "")
    replan_count = state.get("replan_count", 0)
    if replan_count >= ctx.config.max_replans:
        logger.error(f"{_log}Re-plan limit reached | replans={replan_count}")
        raise ReplanLimitExceededError(ctx.config.max_replans, failed_step_id)

    logger.info(
        f"{_log}Entering node | failed_step={failed_step_id}, "
        f"errors={len(state.get('pending_errors') or [])}, replans={replan_count}"
    )
    ctx.activity.record(EventKind.THINKING.value, "Revising the plan after a failed step")

    replan_request = ReplanRequest(
        request=state["request"],
        stale_plan=state["plan"],
        history=state.get("history") or {},
        failed_step_id=failed_step_id,
        pending_errors=state.get("pending_errors") or [],
        completed_responses=state.get("completed_responses") or [],
    )

    plan = ctx.planner.replan(replan_request)
    if plan is None:
        raise PlanGenerationError("Failed to generate a revised action plan")

    validate_plan(plan, ctx.registry)
    if not plan.success:
        logger.info(f"{_log}Planner gave up: {plan.failure_reason}")
        raise PlanRejectedError(plan.failure_reason)

    updates: Dict[str, Any] = {
        "plan": plan,
        **seed_queue_and_history(plan),
        "pending_errors": [],
        "completed_responses": [],
        "current_step_id": "",
        "busy": False,
        "last_result": None,
        "step_exhausted": False,
        "replan_count": replan_count + 1,
    }

    logger.info(f"{_log}Plan revised | steps={plan.step_ids}, replans={replan_count + 1}")
    log_state_transition("replanned", {**state, **updates})
    return updates
