"""
Routing logic for the orchestrator graph.

Determines whether to execute another step, re-plan or summarize based
on the queue and the outcome of the last step.
"""

import logging
from typing import Literal

from notion_agent.graph.state import OrchestratorState


logger = logging.getLogger(__name__)


def route_after_plan(
    state: OrchestratorState,
) -> Literal["execute_step", "summarize"]:
    """
    Route after planning or re-planning.

    Args:
        state: Current orchestrator state

    Returns:
        "execute_step" if the queue has work, otherwise "summarize"
    """
    session_id = state.get("session_id", "unknown")
    queue_length = len(state.get("queue") or [])
    _log = f"[session={session_id}] [graph=orchestrator] [router=route_after_plan] "

    if queue_length and not state.get("busy"):
        logger.info(f"{_log}Routing to 'execute_step' | queue={queue_length}")
        return "execute_step"

    logger.info(f"{_log}Routing to 'summarize' | queue={queue_length}")
    return "summarize"


def route_after_step(
    state: OrchestratorState,
) -> Literal["execute_step", "replan", "summarize"]:
    """
    Route after a step has been executed.

    Routing logic:
    1. If the last step exhausted its retries -> replan
    2. If the queue still has work and the state is not busy -> execute_step
    3. Otherwise -> summarize

    Args:
        state: Current orchestrator state

    Returns:
        Name of the next node to execute
    """
    session_id = state.get("session_id", "unknown")
    queue_length = len(state.get("queue") or [])
    exhausted = state.get("step_exhausted", False)
    _log = f"[session={session_id}] [graph=orchestrator] [router=route_after_step] "

    if exhausted:
        logger.info(
            f"{_log}Routing to 'replan' | failed_step={state.get('current_step_id')}"
        )
        return "replan"

    if queue_length and not state.get("busy"):
        logger.info(f"{_log}Routing to 'execute_step' | queue={queue_length}")
        return "execute_step"

    logger.info(f"{_log}Routing to 'summarize' | queue={queue_length}")
    return "summarize"
