"""
Summarizer node.

Asks the planner for a natural-language account of the finished run.
"""

import logging
from typing import Any, Dict

from notion_agent.graph.context import RunContext
from notion_agent.graph.state import OrchestratorState
from notion_agent.shared.errors import SummaryGenerationError
from notion_agent.shared.logging.activity_log import EventKind
from notion_agent.shared.logging.config import log_state_transition


logger = logging.getLogger(__name__)


def summarize(state: OrchestratorState, ctx: RunContext) -> Dict[str, Any]:
    session_id = state.get("session_id") or "unknown"
    _log = f"[session={session_id}] [graph=orchestrator] [node=summarize] "

    history = state.get("history") or {}
    logger.info(f"{_log}Entering node | steps_with_history={len(history)}")

    summary = ctx.planner.summarize(state["plan"], history, state["request"])
    if not summary:
        raise SummaryGenerationError("Failed to generate a summary")

    ctx.activity.record(EventKind.SUCCESS.value, "Task complete")
    logger.info(f"{_log}Summary ready | length={len(summary)} -> END")
    log_state_transition("run_complete", {**state, "summary": summary})
    return {"summary": summary}
