"""
Prompt builders for the planner.

These functions turn plans, steps, errors and history into the chat
messages sent to the LLM.
"""

import json
from typing import Dict, List, TYPE_CHECKING

from notion_agent.planner.prompts.templates import (
    PLAN_SYSTEM_PROMPT,
    ARGS_SYSTEM_PROMPT,
    ARGS_USER_PROMPT,
    REGENERATE_SYSTEM_PROMPT,
    REGENERATE_USER_PROMPT,
    REPLAN_SYSTEM_PROMPT,
    REPLAN_USER_PROMPT,
    SUMMARY_SYSTEM_PROMPT,
    SUMMARY_USER_PROMPT,
)
from notion_agent.shared.contracts import Plan, Step, ToolCallError, ReplanRequest

if TYPE_CHECKING:
    from notion_agent.tools.registry import ToolRegistry, ToolSchema


Messages = List[Dict[str, str]]


def build_tools_text(registry: "ToolRegistry") -> str:
    """Render the tool catalog as JSON for embedding in a system prompt."""
    return json.dumps(registry.describe(), indent=2)


def build_plan_text(plan: Plan) -> str:
    return plan.model_dump_json(indent=2)


def build_history_text(history: Dict[str, List[str]]) -> str:
    """
    Flatten per-step history into one block, in plan order.

    Args:
        history: Step id to list of result entries

    Returns:
        All entries joined by newlines, or "None" when there are none
    """
    entries = [entry for step_entries in history.values() for entry in step_entries]
    return "\n".join(entries) if entries else "None"


def build_attempts_text(errors: List[ToolCallError]) -> str:
    """
    Render every failed attempt as an error line followed by its arguments.

    Args:
        errors: Accumulated errors of the current step, oldest first

    Returns:
        Numbered attempts separated by blank lines
    """
    if not errors:
        return "None"
    return "\n\n".join(
        f"Attempt {i}:\nError: {e.error}\nArguments: {e.failing_args}"
        for i, e in enumerate(errors, start=1)
    )


def build_plan_messages(request: str, registry: "ToolRegistry") -> Messages:
    return [
        {
            "role": "system",
            "content": PLAN_SYSTEM_PROMPT.format(tools=build_tools_text(registry)),
        },
        {"role": "user", "content": request},
    ]


def build_args_messages(
    request: str,
    plan: Plan,
    step: Step,
    tool: "ToolSchema",
    dependency_history: str,
    guidance: str,
) -> Messages:
    """
    Build messages for first-attempt argument generation.

    The tool's parameter schema is enforced through the response format,
    so only its name and description go into the prompt.
    """
    system = ARGS_SYSTEM_PROMPT.format(
        tool_name=tool.name,
        tool_description=tool.description,
    )
    user = ARGS_USER_PROMPT.format(
        request=request,
        plan=build_plan_text(plan),
        dependency_history=dependency_history or "None",
        guidance=guidance,
        step_id=step.id,
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


def build_regenerate_messages(
    request: str,
    plan: Plan,
    step: Step,
    tool: "ToolSchema",
    errors: List[ToolCallError],
    dependency_history: str,
    guidance: str,
) -> Messages:
    """
    Build messages for regenerating arguments after rejected attempts.

    Regeneration runs in plain JSON mode, so the parameter schema is
    embedded in the system prompt instead.
    """
    system = REGENERATE_SYSTEM_PROMPT.format(
        tool_name=tool.name,
        tool_description=tool.description,
        tool_parameters=json.dumps(tool.parameters, indent=2),
    )
    user = REGENERATE_USER_PROMPT.format(
        request=request,
        plan=build_plan_text(plan),
        attempts=build_attempts_text(errors),
        dependency_history=dependency_history or "None",
        guidance=guidance,
        step_id=step.id,
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


def build_replan_messages(
    replan_request: ReplanRequest,
    registry: "ToolRegistry",
) -> Messages:
    system = REPLAN_SYSTEM_PROMPT.format(
        failed_step_id=replan_request.failed_step_id,
        tools=build_tools_text(registry),
    )
    user = REPLAN_USER_PROMPT.format(
        request=replan_request.request,
        plan=build_plan_text(replan_request.stale_plan),
        history=build_history_text(replan_request.history),
        errors=json.dumps(
            [e.model_dump() for e in replan_request.pending_errors], indent=2
        ),
        completed=json.dumps(
            [r.model_dump() for r in replan_request.completed_responses],
            indent=2,
            default=str,
        ),
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


def build_summary_messages(
    plan: Plan,
    history: Dict[str, List[str]],
    request: str,
) -> Messages:
    user = SUMMARY_USER_PROMPT.format(
        request=request,
        plan=build_plan_text(plan),
        history=build_history_text(history),
    )
    return [
        {"role": "system", "content": SUMMARY_SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]
