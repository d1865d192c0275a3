"""
Notion agent: plans and executes multi-step Notion workspace tasks.

This package contains:
- shared/: Common infrastructure (LLM client, logging, contracts, errors)
- tools/: Notion tool catalog, registry and HTTP executor
- planner/: LLM planner (plans, tool arguments, re-plans, summaries)
- graph/: Orchestrator graph (plan -> execute -> retry/replan -> summarize)
"""

from notion_agent.graph.build import create_orchestrator_graph, run_orchestrator

__all__ = ["create_orchestrator_graph", "run_orchestrator"]
