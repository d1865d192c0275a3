"""Prompt templates and builders for the planner."""

from notion_agent.planner.prompts.templates import PLAN_RESPONSE_SCHEMA
from notion_agent.planner.prompts.builders import (
    build_tools_text,
    build_history_text,
    build_attempts_text,
    build_plan_messages,
    build_args_messages,
    build_regenerate_messages,
    build_replan_messages,
    build_summary_messages,
)

__all__ = [
    "PLAN_RESPONSE_SCHEMA",
    "build_tools_text",
    "build_history_text",
    "build_attempts_text",
    "build_plan_messages",
    "build_args_messages",
    "build_regenerate_messages",
    "build_replan_messages",
    "build_summary_messages",
]
