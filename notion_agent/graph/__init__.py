"""Orchestrator graph: state, nodes, routing and construction."""

from notion_agent.graph.build import create_orchestrator_graph, run_orchestrator
from notion_agent.graph.config import OrchestratorConfig, DEFAULT_CONFIG, get_config
from notion_agent.graph.context import RunContext
from notion_agent.graph.state import (
    OrchestratorState,
    create_initial_state,
    seed_queue_and_history,
)

__all__ = [
    "create_orchestrator_graph",
    "run_orchestrator",
    "OrchestratorConfig",
    "DEFAULT_CONFIG",
    "get_config",
    "RunContext",
    "OrchestratorState",
    "create_initial_state",
    "seed_queue_and_history",
]
