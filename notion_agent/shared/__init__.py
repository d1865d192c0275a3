"""
Shared infrastructure for the orchestrator.

Modules:
- llm: OpenAI client with retry logic
- logging: Structured logging, activity events, per-session debug logs
- contracts: Plan and tool call contracts
- errors: Fatal orchestration errors
"""

from notion_agent.shared.llm.client import get_cached_client
from notion_agent.shared.logging.config import setup_logging, log_state_transition

__all__ = [
    "get_cached_client",
    "setup_logging",
    "log_state_transition",
]
