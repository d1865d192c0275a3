"""
Response parser for the planner.

Handles parsing of LLM responses, including JSON extraction from
various formats (raw JSON, markdown code blocks, etc.), and validation
into plan and argument shapes.
"""

import json
import re
from typing import Any, Dict

from pydantic import ValidationError

from notion_agent.shared.contracts import Plan


class ParseError(Exception):
    """Raised when response parsing fails."""

    pass


def extract_json_from_response(raw_response: str) -> str:
    """
    Extract JSON content from LLM response.

    Handles multiple formats:
    - Raw JSON
    - JSON in markdown code blocks (```json ... ```)
    - JSON with leading/trailing whitespace or trailing prose

    Args:
        raw_response: Raw LLM response string

    Returns:
        Cleaned JSON string ready for parsing
    """
    content = raw_response.strip()

    # Try to extract from markdown code block
    match = re.search(r"```(?:json)?\s*([\s\S]*?)```", content)
    if match:
        content = match.group(1).strip()

    if content[:1] in ("{", "["):
        opener = content[0]
        closer = "}" if opener == "{" else "]"
        depth = 0
        in_string = False
        escaped = False
        for i, char in enumerate(content):
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == opener:
                depth += 1
            elif char == closer:
                depth -= 1
                if depth == 0:
                    return content[: i + 1]

    # If we can't find clear boundaries, return as-is and let JSON parser handle it
    return content


def _load_object(raw_response: str, what: str) -> Dict[str, Any]:
    json_str = extract_json_from_response(raw_response)
    try:
        data = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse {what} JSON: {e}\nContent: {json_str}")
    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object for {what}, got {type(data).__name__}")
    return data


def parse_plan(raw_response: str) -> Plan:
    """
    Parse a plan response from the LLM.

    Args:
        raw_response: Raw LLM response string

    Returns:
        Validated Plan model (structural invariants are checked separately)

    Raises:
        ParseError: If JSON parsing or model validation fails
    """
    data = _load_object(raw_response, "plan")
    try:
        return Plan.model_validate(data)
    except ValidationError as e:
        raise ParseError(f"Plan response does not match the plan shape: {e}")


def parse_arguments(raw_response: str) -> Dict[str, Any]:
    """
    Parse generated tool arguments from the LLM.

    Args:
        raw_response: Raw LLM response string

    Returns:
        Arguments dictionary

    Raises:
        ParseError: If the response is not a JSON object
    """
    return _load_object(raw_response, "arguments")
