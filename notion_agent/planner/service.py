"""
Planner service.

The planner is the external reasoning collaborator of the orchestrator:
it produces and repairs action plans, generates tool arguments and writes
the final summary. Every operation returns structured data or None on
failure; it never raises into the orchestrator.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

from openai import OpenAI

from notion_agent.planner.prompts import (
    PLAN_RESPONSE_SCHEMA,
    build_plan_messages,
    build_args_messages,
    build_regenerate_messages,
    build_replan_messages,
    build_summary_messages,
)
from notion_agent.planner.response_parser import (
    ParseError,
    parse_plan,
    parse_arguments,
)
from notion_agent.shared.contracts import Plan, Step, ToolCallError, ReplanRequest
from notion_agent.shared.llm.client import (
    DEFAULT_MODEL,
    get_cached_client,
    call_llm_with_usage,
    call_llm_json_with_usage,
)
from notion_agent.shared.logging.debug_logger import DebugLogger
from notion_agent.tools.registry import DEFAULT_REGISTRY, ToolRegistry


logger = logging.getLogger(__name__)


class Planner(Protocol):
    """Planning/generation interface consumed by the orchestrator."""

    def make_plan(self, request: str) -> Optional[Plan]:
        ...

    def generate_args(
        self,
        plan: Plan,
        step: Step,
        dependency_history: str,
        guidance: str,
    ) -> Optional[Dict[str, Any]]:
        ...

    def regenerate_args(
        self,
        plan: Plan,
        step: Step,
        errors: List[ToolCallError],
        dependency_history: str,
        guidance: str,
    ) -> Optional[Dict[str, Any]]:
        ...

    def replan(self, replan_request: ReplanRequest) -> Optional[Plan]:
        ...

    def summarize(
        self,
        plan: Plan,
        history: Dict[str, List[str]],
        request: str,
    ) -> Optional[str]:
        ...


class OpenAIPlanner:
    """
    Planner backed by OpenAI chat completions.

    One instance serves one run: the request passed to make_plan is kept
    and reused as context for argument generation.

    Args:
        registry: Tool registry describing the callable operations
        model: Model identifier
        timeout: Per-request timeout in seconds for the cached client
        client: Optional OpenAI client (defaults to the cached client)
        debug_logger: Optional per-session debug logger
        session_id: Session id used in log prefixes
    """

    def __init__(
        self,
        registry: ToolRegistry = DEFAULT_REGISTRY,
        model: str = DEFAULT_MODEL,
        timeout: float = 60.0,
        client: Optional[OpenAI] = None,
        debug_logger: Optional[DebugLogger] = None,
        session_id: Optional[str] = None,
    ):
        self.registry = registry
        self.model = model
        self.timeout = timeout
        self.debug_logger = debug_logger
        self.request = ""
        self._client = client
        self._log = f"[session={session_id or 'unknown'}] [graph=orchestrator] [node=planner] "

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = get_cached_client().with_options(timeout=self.timeout)
        return self._client

    def _call(
        self,
        phase: str,
        messages: List[Dict[str, str]],
        llm_fn: Callable[..., Tuple[str, Dict[str, int]]],
        step_id: Optional[str] = None,
        **kwargs: Any,
    ) -> str:
        logger.info(f"{self._log}Calling LLM | phase={phase}, model={self.model}")
        start_time = time.perf_counter()
        content, usage = llm_fn(messages, model=self.model, client=self.client, **kwargs)
        duration_ms = (time.perf_counter() - start_time) * 1000

        if self.debug_logger:
            self.debug_logger.log_llm_call(
                phase=phase,
                system_prompt=messages[0]["content"],
                user_prompt=messages[-1]["content"],
                response=content,
                duration_ms=duration_ms,
                input_tokens=usage["input_tokens"],
                output_tokens=usage["output_tokens"],
                model=self.model,
                step_id=step_id,
            )

        logger.info(
            f"{self._log}LLM responded | phase={phase}, duration={duration_ms:.0f}ms, "
            f"tokens={usage['input_tokens']}+{usage['output_tokens']}"
        )
        return content

    def make_plan(self, request: str) -> Optional[Plan]:
        self.request = request
        try:
            content = self._call(
                "plan",
                build_plan_messages(request, self.registry),
                call_llm_json_with_usage,
                schema=PLAN_RESPONSE_SCHEMA,
                schema_name="action_plan",
                strict=True,
            )
            return parse_plan(content)
        except ParseError as e:
            logger.error(f"{self._log}Plan parse error: {e}")
        except Exception as e:
            logger.exception(f"{self._log}Plan generation failed: {e}")
        return None

    def generate_args(
        self,
        plan: Plan,
        step: Step,
        dependency_history: str,
        guidance: str,
    ) -> Optional[Dict[str, Any]]:
        tool = self.registry.get(step.tool)
        if tool is None:
            logger.error(f"{self._log}No schema for tool {step.tool}")
            return None
        try:
            content = self._call(
                "generate_args",
                build_args_messages(
                    self.request, plan, step, tool, dependency_history, guidance
                ),
                call_llm_json_with_usage,
                step_id=step.id,
                schema=tool.parameters,
                schema_name=tool.name,
                strict=False,
            )
            return parse_arguments(content)
        except ParseError as e:
            logger.error(f"{self._log}Argument parse error for step {step.id}: {e}")
        except Exception as e:
            logger.exception(f"{self._log}Argument generation failed for step {step.id}: {e}")
        return None

    def regenerate_args(
        self,
        plan: Plan,
        step: Step,
        errors: List[ToolCallError],
        dependency_history: str,
        guidance: str,
    ) -> Optional[Dict[str, Any]]:
        tool = self.registry.get(step.tool)
        if tool is None:
            logger.error(f"{self._log}No schema for tool {step.tool}")
            return None
        try:
            content = self._call(
                "regenerate_args",
                build_regenerate_messages(
                    self.request, plan, step, tool, errors, dependency_history, guidance
                ),
                call_llm_json_with_usage,
                step_id=step.id,
            )
            return parse_arguments(content)
        except ParseError as e:
            logger.error(f"{self._log}Regenerated argument parse error for step {step.id}: {e}")
        except Exception as e:
            logger.exception(f"{self._log}Argument regeneration failed for step {step.id}: {e}")
        return None

    def replan(self, replan_request: ReplanRequest) -> Optional[Plan]:
        try:
            content = self._call(
                "replan",
                build_replan_messages(replan_request, self.registry),
                call_llm_json_with_usage,
                step_id=replan_request.failed_step_id,
                schema=PLAN_RESPONSE_SCHEMA,
                schema_name="action_plan",
                strict=True,
            )
            return parse_plan(content)
        except ParseError as e:
            logger.error(f"{self._log}Revised plan parse error: {e}")
        except Exception as e:
            logger.exception(f"{self._log}Re-planning failed: {e}")
        return None

    def summarize(
        self,
        plan: Plan,
        history: Dict[str, List[str]],
        request: str,
    ) -> Optional[str]:
        try:
            content = self._call(
                "summarize",
                build_summary_messages(plan, history, request),
                call_llm_with_usage,
            )
            return content or None
        except Exception as e:
            logger.exception(f"{self._log}Summary generation failed: {e}")
        return None
