"""
Graph configuration for the orchestrator.

Centralizes configuration options for the orchestrator LangGraph workflow.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class OrchestratorConfig:
    """
    Configuration for the orchestrator graph.

    Attributes:
        max_retries: Regeneration attempts per failed step
        max_replans: Re-plans allowed per run
        recursion_limit: Maximum number of graph steps per run; one per
            executed step, so it only needs to exceed plan length times
            (max_replans + 1)
        model: LLM model used by the planner
        llm_timeout: LLM call timeout in seconds
        activity_message_limit: Maximum length of an activity event message
        debug_logs_dir: Directory for per-session debug logs (disabled if None)
    """

    max_retries: int = 3
    max_replans: int = 3
    recursion_limit: int = 10_000
    model: str = "gpt-4.1-mini"
    llm_timeout: int = 60
    activity_message_limit: int = 100
    debug_logs_dir: Optional[str] = os.environ.get("DEBUG_LOGS_DIR") or None


# Default configuration instance
DEFAULT_CONFIG = OrchestratorConfig()


def get_config(**overrides) -> OrchestratorConfig:
    """
    Build a configuration from the defaults with selected fields overridden.

    Args:
        **overrides: Field values to replace

    Returns:
        New OrchestratorConfig instance
    """
    return replace(DEFAULT_CONFIG, **overrides)
