"""
Step executor node.

Pops the head of the queue, asks the planner for arguments, invokes the
tool and records the outcome. Failed invocations go through the retry
controller; an exhausted step is flagged for re-planning.
"""

import json
import logging
from typing import Any, Dict, List

from notion_agent.graph.context import RunContext
from notion_agent.graph.nodes.retry import invoke_tool, retry_step
from notion_agent.graph.state import OrchestratorState
from notion_agent.shared.contracts import (
    CompletedStepResponse,
    Step,
    ToolCallError,
)
from notion_agent.shared.errors import (
    ArgumentGenerationError,
    StepNotFoundError,
    UnknownToolError,
)
from notion_agent.shared.logging.activity_log import EventKind


logger = logging.getLogger(__name__)


def build_dependency_history(step: Step, history: Dict[str, List[str]]) -> str:
    """
    Collect the history of a step's dependencies.

    Each dependency's entries are joined by newlines and dependencies are
    joined by blank lines, in depends_on order. Dependencies without
    history are skipped.
    """
    return "\n\n".join(
        "\n".join(history[dep]) for dep in step.depends_on if history.get(dep)
    )


def execute_next_step(state: OrchestratorState, ctx: RunContext) -> Dict[str, Any]:
    """
    Execute the step at the head of the queue.

    Args:
        state: Current orchestrator state
        ctx: Run collaborators

    A state marked busy runs nothing. Nodes never leave `busy` set, so only
    a caller-supplied state can carry it.

    Returns:
        State updates, or an empty dict when the queue is empty or busy

    Raises:
        StepNotFoundError: If the head's id is not in the plan
        UnknownToolError: If the head's tool is not registered
        ArgumentGenerationError: If the planner produced no arguments
    """
    session_id = state.get("session_id") or "unknown"
    _log = f"[session={session_id}] [graph=orchestrator] [node=execute_step] "

    queue = state.get("queue") or []
    if not queue or state.get("busy"):
        logger.info(
            f"{_log}Nothing to execute | queue={len(queue)}, busy={state.get('busy')}"
        )
        return {}

    plan = state["plan"]
    request = queue[0]
    step = plan.get_step(request.id) if plan is not None else None
    if step is None:
        raise StepNotFoundError(request.id)
    if request.tool_name not in ctx.registry:
        raise UnknownToolError(request.tool_name)

    logger.info(
        f"{_log}Entering node | step={step.id}, tool={step.tool}, "
        f"depends_on={step.depends_on}, queue={len(queue)}"
    )

    history = {k: list(v) for k, v in (state.get("history") or {}).items()}
    dependency_history = build_dependency_history(step, history)

    args = ctx.planner.generate_args(plan, step, dependency_history, request.guidance)
    if args is None:
        raise ArgumentGenerationError(f"No arguments generated for step {step.id}")

    ctx.activity.record(EventKind.PROCESSING.value, step.purpose)
    result = invoke_tool(ctx, step.id, request.tool_name, args)

    errors: List[ToolCallError] = []
    if result.failed:
        logger.warning(f"{_log}Step {step.id} rejected: {result.message}")
        errors.append(
            ToolCallError(error=result.message, failing_args=json.dumps(args, default=str))
        )
        result, errors = retry_step(
            plan, step, dependency_history, request.guidance, errors, ctx, session_id
        )

    entries = history.setdefault(step.id, [])
    completed = list(state.get("completed_responses") or [])
    exhausted = result is None

    if exhausted:
        entries.append(f"Result of step {step.id}: No result")
        ctx.activity.record(EventKind.ERROR.value, f"Could not complete: {step.purpose}")
        logger.warning(
            f"{_log}Step {step.id} exhausted after {len(errors)} failed attempts "
            f"-> re-planning"
        )
    else:
        entries.append(
            f"Result of step {step.id}: {json.dumps(result.payload, default=str)}"
        )
        completed.append(
            CompletedStepResponse(
                step_id=step.id, tool_name=step.tool, payload=result.payload
            )
        )
        ctx.activity.record(EventKind.SUCCESS.value, f"Done: {step.purpose}")
        logger.info(f"{_log}Step {step.id} succeeded | remaining={len(queue) - 1}")

    return {
        "queue": queue[1:],
        "history": history,
        "pending_errors": errors,
        "current_step_id": step.id,
        "busy": False,
        "last_result": result,
        "step_exhausted": exhausted,
        "completed_responses": completed,
    }
