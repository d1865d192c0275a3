"""
Structured logging for orchestrator runs.

Module loggers write messages with a `[session=...] [graph=...] [node=...]`
prefix. The JSON formatter lifts those tags, and the state-transition
fields attached by `log_state_transition`, into top-level keys so a run can
be filtered by session, node or event.
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple


# Leading "[key=value]" or "[key]" tags of an orchestrator log message
_TAG_RE = re.compile(r"\[(\w+)(?:=([^\]]*))?\]\s*")

# Record attributes set by log_state_transition
TRANSITION_FIELDS = ("event", "state_summary", "details")


def split_log_prefix(message: str) -> Tuple[Dict[str, str], str]:
    """
    Split the leading bracket tags off a log message.

    "[session=abc] [node=replan] Entering node" gives
    ({"session": "abc", "node": "replan"}, "Entering node"). A bare tag such
    as "[run]" maps to {"scope": "run"}.
    """
    tags: Dict[str, str] = {}
    pos = 0
    while True:
        match = _TAG_RE.match(message, pos)
        if not match:
            break
        key, value = match.groups()
        if value is None:
            tags["scope"] = key
        else:
            tags[key] = value
        pos = match.end()
    return tags, message[pos:]


class StructuredFormatter(logging.Formatter):
    """Formats records as JSON lines keyed by session, node and event."""

    def format(self, record: logging.LogRecord) -> str:
        tags, message = split_log_prefix(record.getMessage())
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            **tags,
            "message": message,
        }

        for field in TRANSITION_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    logger_name: str = "notion_agent",
) -> logging.Logger:
    """
    Send the package's logs through the JSON formatter.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional file receiving the same JSON lines as stdout
        logger_name: Logger to configure; its children inherit the handlers

    Returns:
        The configured logger
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.propagate = False

    formatter = StructuredFormatter()
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logger.handlers = []
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def summarize_state(state: Dict[str, Any]) -> Dict[str, Any]:
    """Reduce orchestrator state to the fields worth logging."""
    plan = state.get("plan")
    return {
        "session_id": state.get("session_id"),
        "plan_steps": len(plan.steps or []) if plan is not None else 0,
        "queue_length": len(state.get("queue") or []),
        "current_step_id": state.get("current_step_id"),
        "pending_errors": len(state.get("pending_errors") or []),
        "replan_count": state.get("replan_count", 0),
    }


def log_state_transition(
    event: str,
    state: Dict[str, Any],
    details: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log an orchestrator state transition event.

    Args:
        event: Name of the event ("plan_ready", "replanned", "run_complete")
        state: Orchestrator state after the transition
        details: Additional context to include in the log
        logger: Logger instance to use. If not provided, uses default.
    """
    if logger is None:
        logger = logging.getLogger("notion_agent")

    summary = summarize_state(state)
    logger.info(
        f"[session={summary['session_id'] or 'unknown'}] [graph=orchestrator] "
        f"State transition: {event}",
        extra={"event": event, "state_summary": summary, "details": details},
    )
