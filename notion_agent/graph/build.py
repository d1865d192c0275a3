"""
Orchestrator graph construction.

Builds the graph that drives one run:
make_plan -> execute_step (loops) -> replan -> execute_step ... -> summarize.
Nodes receive the run's collaborators through closures over a RunContext.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from langgraph.errors import GraphRecursionError
from langgraph.graph import StateGraph, END

from notion_agent.graph.context import RunContext
from notion_agent.graph.nodes import plan_node, execute_next_step, replan, summarize
from notion_agent.graph.router import route_after_plan, route_after_step
from notion_agent.graph.state import OrchestratorState, create_initial_state
from notion_agent.shared.errors import OrchestrationError, StepLimitExceededError


logger = logging.getLogger(__name__)


def create_orchestrator_graph(ctx: RunContext):
    """
    Create and compile the orchestrator graph.

    The graph structure is:
        Entry -> make_plan -> route_after_plan
          -> "execute_step" -> execute_step -> route_after_step
                -> "execute_step" (next step)
                -> "replan" -> replan -> route_after_plan
                -> "summarize"
          -> "summarize" -> summarize -> END

    Args:
        ctx: Collaborators for the run

    Returns:
        Compiled LangGraph application ready for execution.
    """

    def _plan(state: OrchestratorState) -> Dict[str, Any]:
        return plan_node(state, ctx)

    def _execute_step(state: OrchestratorState) -> Dict[str, Any]:
        return execute_next_step(state, ctx)

    def _replan(state: OrchestratorState) -> Dict[str, Any]:
        return replan(state, ctx)

    def _summarize(state: OrchestratorState) -> Dict[str, Any]:
        return summarize(state, ctx)

    graph = StateGraph(OrchestratorState)

    # Add nodes
    graph.add_node("make_plan", _plan)
    graph.add_node("execute_step", _execute_step)
    graph.add_node("replan", _replan)
    graph.add_node("summarize", _summarize)

    graph.set_entry_point("make_plan")

    graph.add_conditional_edges(
        "make_plan",
        route_after_plan,
        {
            "execute_step": "execute_step",
            "summarize": "summarize",
        },
    )

    graph.add_conditional_edges(
        "execute_step",
        route_after_step,
        {
            "execute_step": "execute_step",
            "replan": "replan",
            "summarize": "summarize",
        },
    )

    graph.add_conditional_edges(
        "replan",
        route_after_plan,
        {
            "execute_step": "execute_step",
            "summarize": "summarize",
        },
    )

    # Summarize -> END
    graph.add_edge("summarize", END)

    app = graph.compile()

    return app


def run_orchestrator(
    request: str,
    ctx: RunContext,
    session_id: Optional[str] = None,
) -> str:
    """
    Run one request end to end and return the summary.

    Args:
        request: The user's request
        ctx: Collaborators for the run
        session_id: Optional session id (generated if not provided)

    Returns:
        The planner's summary of the run

    Raises:
        OrchestrationError: Any fatal error raised by a node
        StepLimitExceededError: If the run outgrows config.recursion_limit
    """
    session_id = session_id or str(uuid.uuid4())
    _log = f"[session={session_id}] [graph=orchestrator] [run] "

    app = create_orchestrator_graph(ctx)
    initial_state = create_initial_state(request, session_id)

    logger.info(
        f"{_log}Invoking orchestrator graph | max_retries={ctx.config.max_retries}, "
        f"max_replans={ctx.config.max_replans}, recursion_limit={ctx.config.recursion_limit}"
    )

    status = "error"
    replan_count = 0
    try:
        try:
            final_state = app.invoke(
                initial_state,
                {"recursion_limit": ctx.config.recursion_limit},
            )
        except GraphRecursionError as e:
            raise StepLimitExceededError(ctx.config.recursion_limit) from e
        status = "complete"
        replan_count = final_state.get("replan_count", 0)
    except OrchestrationError as e:
        logger.error(f"{_log}Run failed: {e}")
        raise
    finally:
        if ctx.debug_logger:
            ctx.debug_logger.log_run_summary(status=status, replan_count=replan_count)

    logger.info(f"{_log}Run finished | replans={replan_count}")
    return final_state["summary"]
