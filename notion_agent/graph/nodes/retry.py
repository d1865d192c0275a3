"""
Retry controller.

Re-attempts a failed step with regenerated arguments, up to the
configured bound. Each attempt sees every earlier failure of the step.
"""

import json
import logging
import time
from typing import List, Optional, Tuple, TYPE_CHECKING

from notion_agent.shared.contracts import Plan, Step, ToolCallError, ToolResult
from notion_agent.shared.errors import OrchestrationError

if TYPE_CHECKING:
    from notion_agent.graph.context import RunContext


logger = logging.getLogger(__name__)


NO_DATA_ERROR = ToolCallError(error="Failed to retry tool", failing_args="No data was produced")


def invoke_tool(
    ctx: "RunContext",
    step_id: str,
    tool_name: str,
    args: dict,
) -> ToolResult:
    """
    Invoke a tool through the run's executor, recording the call in the
    debug log when one is attached.
    """
    start_time = time.perf_counter()
    result = ctx.executor.execute(tool_name, args)
    duration_ms = (time.perf_counter() - start_time) * 1000

    if ctx.debug_logger:
        ctx.debug_logger.log_tool_call(
            step_id=step_id,
            tool_name=tool_name,
            duration_ms=duration_ms,
            success=not result.failed,
            error=result.message if result.failed else None,
        )
    return result


def retry_step(
    plan: Plan,
    step: Step,
    dependency_history: str,
    guidance: str,
    errors: List[ToolCallError],
    ctx: "RunContext",
    session_id: Optional[str] = None,
) -> Tuple[Optional[ToolResult], List[ToolCallError]]:
    """
    Retry a failed step until it succeeds or the retry bound is reached.

    Attempts are strictly sequential. Every failed attempt appends one
    error; regeneration always receives a snapshot of all errors so far.

    Args:
        plan: Current plan
        step: The failing step
        dependency_history: History of the steps this one depends on
        guidance: The step's input guidance
        errors: Errors accumulated so far (not mutated)
        ctx: Run collaborators
        session_id: Session id for log correlation

    Returns:
        Tuple of (successful result or None when exhausted, all errors)

    Raises:
        OrchestrationError: Fatal errors from the executor propagate
    """
    _log = f"[session={session_id or 'unknown'}] [graph=orchestrator] [node=retry] "
    errors = list(errors)
    max_retries = ctx.config.max_retries

    for attempt in range(1, max_retries + 1):
        logger.info(
            f"{_log}Retrying step {step.id} | attempt={attempt}/{max_retries}, "
            f"errors_so_far={len(errors)}"
        )
        try:
            args = ctx.planner.regenerate_args(
                plan, step, list(errors), dependency_history, guidance
            )
            if args is None:
                logger.warning(f"{_log}No regenerated arguments for step {step.id}")
                errors.append(NO_DATA_ERROR.model_copy())
                continue

            result = invoke_tool(ctx, step.id, step.tool, args)
        except OrchestrationError:
            raise
        except Exception as e:
            logger.warning(f"{_log}Retry attempt {attempt} for step {step.id} raised: {e}")
            errors.append(NO_DATA_ERROR.model_copy())
            continue

        if result.failed:
            logger.warning(f"{_log}Retry attempt {attempt} rejected: {result.message}")
            errors.append(
                ToolCallError(error=result.message, failing_args=json.dumps(args, default=str))
            )
            continue

        logger.info(f"{_log}Step {step.id} succeeded on retry {attempt}")
        return result, errors

    logger.warning(f"{_log}Retries exhausted for step {step.id} | errors={len(errors)}")
    return None, errors
