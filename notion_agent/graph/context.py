"""
Run context.

Bundles the collaborators the orchestrator nodes depend on. Nodes take
it alongside the state; the graph builder closes over one instance per
run.
"""

from dataclasses import dataclass, field
from typing import Optional

from notion_agent.graph.config import DEFAULT_CONFIG, OrchestratorConfig
from notion_agent.planner.service import Planner
from notion_agent.shared.logging.activity_log import ActivityLogger
from notion_agent.shared.logging.debug_logger import DebugLogger
from notion_agent.tools.executor import ToolExecutor
from notion_agent.tools.registry import DEFAULT_REGISTRY, ToolRegistry


@dataclass
class RunContext:
    """
    Collaborators for a single orchestrator run.

    Attributes:
        planner: Plan/argument/summary generator
        executor: Tool invocation transport
        registry: Tool registry used for validation
        activity: Best-effort activity event sink
        config: Orchestrator limits and settings
        debug_logger: Optional per-session debug logger
    """

    planner: Planner
    executor: ToolExecutor
    registry: ToolRegistry = DEFAULT_REGISTRY
    activity: ActivityLogger = field(default_factory=ActivityLogger)
    config: OrchestratorConfig = DEFAULT_CONFIG
    debug_logger: Optional[DebugLogger] = None
