"""LLM client utilities."""

from notion_agent.shared.llm.client import (
    get_cached_client,
    call_llm_with_usage,
    call_llm_json_with_usage,
)

__all__ = [
    "get_cached_client",
    "call_llm_with_usage",
    "call_llm_json_with_usage",
]
