"""Logging configuration and utilities."""

from notion_agent.shared.logging.config import (
    setup_logging,
    log_state_transition,
    StructuredFormatter,
)
from notion_agent.shared.logging.activity_log import (
    ActivityLogger,
    EventKind,
    EVENT_EMOJIS,
)
from notion_agent.shared.logging.debug_logger import (
    DebugLogger,
    get_or_create_logger,
    remove_logger,
    calculate_cost,
)

__all__ = [
    "setup_logging",
    "log_state_transition",
    "StructuredFormatter",
    "ActivityLogger",
    "EventKind",
    "EVENT_EMOJIS",
    "DebugLogger",
    "get_or_create_logger",
    "remove_logger",
    "calculate_cost",
]
