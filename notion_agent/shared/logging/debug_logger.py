"""
Debug logger for tracking planner LLM calls, tool calls, timing and costs.

Writes per-session JSON Lines log files to the logs/ directory.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


# Token pricing per 1M tokens
MODEL_COSTS = {
    "gpt-4.1": {"input": 2.00, "output": 8.00},
    "gpt-4.1-mini": {"input": 0.40, "output": 1.60},
    "gpt-5-mini": {"input": 0.25, "output": 2.00},
}

# Session-based logger registry to ensure same instance is reused
_logger_registry: Dict[str, "DebugLogger"] = {}


def get_or_create_logger(session_id: str, logs_dir: str = "logs") -> "DebugLogger":
    """
    Get an existing logger for the session or create a new one.

    Ensures the planner and the graph nodes of one run accumulate token
    counts and costs on the same instance.

    Args:
        session_id: Unique session identifier
        logs_dir: Directory to store log files (default: "logs")

    Returns:
        DebugLogger instance for this session
    """
    if session_id not in _logger_registry:
        _logger_registry[session_id] = DebugLogger(session_id, logs_dir)
    return _logger_registry[session_id]


def remove_logger(session_id: str) -> None:
    """Remove a logger from the registry (e.g., after the run ends)."""
    _logger_registry.pop(session_id, None)


def calculate_cost(model: str, input_tokens: int, output_tokens: int) -> float:
    """
    Calculate the cost of an LLM call based on token usage.

    Args:
        model: Model identifier (e.g., "gpt-4.1-mini")
        input_tokens: Number of input/prompt tokens
        output_tokens: Number of output/completion tokens

    Returns:
        Cost in USD (0.0 for unknown models)
    """
    costs = MODEL_COSTS.get(model, {"input": 0.0, "output": 0.0})
    input_cost = (input_tokens / 1_000_000) * costs["input"]
    output_cost = (output_tokens / 1_000_000) * costs["output"]
    return input_cost + output_cost


class DebugLogger:
    """
    Debug logger that writes per-session JSON log files.

    Log files are written in JSON Lines format (one JSON object per line)
    under <logs_dir>/<session_id>/session_logs.json.
    """

    def __init__(self, session_id: str, logs_dir: str = "logs"):
        self.session_id = session_id
        self.session_dir = Path(logs_dir) / session_id
        self.log_file = self.session_dir / "session_logs.json"

        self.session_dir.mkdir(parents=True, exist_ok=True)

        # Session accumulators for summary
        self._total_input_tokens = 0
        self._total_output_tokens = 0
        self._total_cost = 0.0
        self._total_llm_duration_ms = 0.0
        self._total_tool_duration_ms = 0.0
        self._llm_call_count = 0
        self._tool_call_count = 0
        self._failed_tool_calls = 0

    def _get_timestamp(self) -> str:
        return datetime.now(timezone.utc).isoformat()

    def _append_to_log(self, entry: Dict[str, Any]) -> None:
        with open(self.log_file, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")

    def log_llm_call(
        self,
        phase: str,
        system_prompt: str,
        user_prompt: str,
        response: str,
        duration_ms: float,
        input_tokens: int,
        output_tokens: int,
        model: str,
        step_id: Optional[str] = None,
    ) -> None:
        """
        Log a planner LLM call with prompts, response, timing, and token usage.

        Args:
            phase: Planner operation ("plan", "generate_args", "regenerate_args",
                "replan", "summarize")
            system_prompt: System prompt sent to the model
            user_prompt: User prompt sent to the model
            response: Model's response
            duration_ms: Time taken for the LLM call in milliseconds
            input_tokens: Number of input tokens
            output_tokens: Number of output tokens
            model: Model identifier
            step_id: Step the call was made for, if any
        """
        cost = calculate_cost(model, input_tokens, output_tokens)

        self._total_input_tokens += input_tokens
        self._total_output_tokens += output_tokens
        self._total_cost += cost
        self._total_llm_duration_ms += duration_ms
        self._llm_call_count += 1

        entry = {
            "type": "llm_call",
            "timestamp": self._get_timestamp(),
            "session_id": self.session_id,
            "phase": phase,
            "model": model,
            "system_prompt": system_prompt,
            "user_prompt": user_prompt,
            "response": response,
            "duration_ms": round(duration_ms, 2),
            "input_tokens": input_tokens,
            "output_tokens": output_tokens,
            "total_tokens": input_tokens + output_tokens,
            "cost_usd": round(cost, 6),
        }
        if step_id is not None:
            entry["step_id"] = step_id

        self._append_to_log(entry)

    def log_tool_call(
        self,
        step_id: str,
        tool_name: str,
        duration_ms: float,
        success: bool = True,
        error: Optional[str] = None,
    ) -> None:
        """
        Log one tool invocation.

        Args:
            step_id: Step the invocation belongs to
            tool_name: Tool that was invoked
            duration_ms: Time taken in milliseconds
            success: Whether the API accepted the call
            error: Error message if it was rejected
        """
        self._total_tool_duration_ms += duration_ms
        self._tool_call_count += 1
        if not success:
            self._failed_tool_calls += 1

        entry = {
            "type": "tool_call",
            "timestamp": self._get_timestamp(),
            "session_id": self.session_id,
            "step_id": step_id,
            "tool": tool_name,
            "duration_ms": round(duration_ms, 2),
            "success": success,
        }
        if error:
            entry["error"] = error

        self._append_to_log(entry)

    def log_run_summary(self, status: str, replan_count: int) -> Dict[str, Any]:
        """
        Log and return a run summary with totals.

        Args:
            status: Final run status ("complete" or "error")
            replan_count: Number of re-plans performed

        Returns:
            Summary dictionary with all totals
        """
        summary = {
            "type": "run_summary",
            "timestamp": self._get_timestamp(),
            "session_id": self.session_id,
            "status": status,
            "replan_count": replan_count,
            **self.get_accumulated_stats(),
        }

        self._append_to_log(summary)
        return summary

    def get_accumulated_stats(self) -> Dict[str, Any]:
        """Current accumulated statistics, without logging."""
        return {
            "total_input_tokens": self._total_input_tokens,
            "total_output_tokens": self._total_output_tokens,
            "total_tokens": self._total_input_tokens + self._total_output_tokens,
            "total_cost_usd": round(self._total_cost, 6),
            "total_llm_duration_ms": round(self._total_llm_duration_ms, 2),
            "total_tool_duration_ms": round(self._total_tool_duration_ms, 2),
            "llm_call_count": self._llm_call_count,
            "tool_call_count": self._tool_call_count,
            "failed_tool_calls": self._failed_tool_calls,
        }
