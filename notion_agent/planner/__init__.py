"""
Planner: LLM-backed plan generation, argument generation, re-planning
and run summaries.
"""

from notion_agent.planner.service import Planner, OpenAIPlanner
from notion_agent.planner.response_parser import (
    ParseError,
    extract_json_from_response,
    parse_plan,
    parse_arguments,
)

__all__ = [
    "Planner",
    "OpenAIPlanner",
    "ParseError",
    "extract_json_from_response",
    "parse_plan",
    "parse_arguments",
]
