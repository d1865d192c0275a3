"""
Activity log for user-facing progress events.

Emits short "what the agent is doing" messages (thinking, processing,
success, ...) to the local logger and, when configured, to a remote
activity endpoint. Delivery is best effort: a failure here is logged
and never reaches the orchestrator.
"""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional

import httpx


logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Fixed set of activity event kinds."""

    THINKING = "thinking"
    SEARCHING = "searching"
    PROCESSING = "processing"
    MEMORY = "memory"
    TOOL = "tool"
    DECIDING = "deciding"
    ERROR = "error"
    SUCCESS = "success"


EVENT_EMOJIS: Dict[EventKind, str] = {
    EventKind.THINKING: "💭",
    EventKind.SEARCHING: "🔍",
    EventKind.PROCESSING: "🔄",
    EventKind.MEMORY: "🧠",
    EventKind.TOOL: "🔧",
    EventKind.DECIDING: "🤔",
    EventKind.ERROR: "❌",
    EventKind.SUCCESS: "✅",
}

DEFAULT_MESSAGE_LIMIT = 100


class ActivityLogger:
    """
    Best-effort activity event sink.

    Without a base URL events only go to the local logger. With one,
    each event is also POSTed as {message, type, metadata} to
    <base_url>/chat/agent/logs.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        session_token: Optional[str] = None,
        message_limit: int = DEFAULT_MESSAGE_LIMIT,
        timeout: float = 5.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.message_limit = message_limit
        self._client: Optional[httpx.Client] = None
        if base_url:
            headers = {"Content-Type": "application/json"}
            if api_key:
                headers["x-api-key"] = api_key
            if session_token:
                headers["x-session-token"] = session_token
            self._client = httpx.Client(
                base_url=base_url,
                timeout=timeout,
                headers=headers,
                transport=transport,
            )

    @classmethod
    def from_env(
        cls,
        session_token: Optional[str] = None,
        message_limit: int = DEFAULT_MESSAGE_LIMIT,
    ) -> "ActivityLogger":
        """Build a logger from ACTIVITY_LOG_URL / ACTIVITY_LOG_API_KEY."""
        return cls(
            base_url=os.environ.get("ACTIVITY_LOG_URL"),
            api_key=os.environ.get("ACTIVITY_LOG_API_KEY"),
            session_token=session_token,
            message_limit=message_limit,
        )

    @property
    def remote_enabled(self) -> bool:
        return self._client is not None

    def close(self) -> None:
        if self._client is not None:
            self._client.close()

    def _truncate(self, message: str) -> str:
        return message.strip()[: self.message_limit]

    def record(
        self,
        event: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Record one activity event. Never raises.

        Args:
            event: One of the EventKind values
            message: Human-readable message (truncated to message_limit)
            metadata: Optional extra payload for the remote endpoint
        """
        try:
            kind = EventKind(event)
            text = self._truncate(message)
            logger.info(f"{EVENT_EMOJIS[kind]} {kind.value}: {text}")

            if self._client is not None:
                response = self._client.post(
                    "/chat/agent/logs",
                    json={"message": text, "type": kind.value, "metadata": metadata},
                )
                response.raise_for_status()
        except Exception as e:
            logger.warning(f"Activity logging failed: {e}")
