"""Orchestrator graph nodes."""

from notion_agent.graph.nodes.planning import plan_node
from notion_agent.graph.nodes.executor import execute_next_step, build_dependency_history
from notion_agent.graph.nodes.retry import retry_step, invoke_tool
from notion_agent.graph.nodes.replanner import replan
from notion_agent.graph.nodes.summarizer import summarize

__all__ = [
    "plan_node",
    "execute_next_step",
    "build_dependency_history",
    "retry_step",
    "invoke_tool",
    "replan",
    "summarize",
]
