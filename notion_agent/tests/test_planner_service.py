"""
Tests for the OpenAI-backed planner.

Uses a fake OpenAI client that records the chat completion requests and
returns canned content.
"""

import json
from types import SimpleNamespace

import pytest

from notion_agent.planner import service
from notion_agent.planner.service import OpenAIPlanner
from notion_agent.shared.contracts import (
    Plan,
    ReplanRequest,
    Step,
    ToolCallError,
)
from notion_agent.shared.logging.debug_logger import DebugLogger


# ============================================================================
# Test Fixtures
# ============================================================================


class FakeCompletions:
    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def create(self, **kwargs):
        self.requests.append(kwargs)
        content = self.responses.pop(0)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
            usage=SimpleNamespace(prompt_tokens=100, completion_tokens=20, total_tokens=120),
        )


class FakeOpenAI:
    """Minimal stand-in for openai.OpenAI."""

    def __init__(self, *responses):
        self.completions = FakeCompletions(responses)
        self.chat = SimpleNamespace(completions=self.completions)

    @property
    def requests(self):
        return self.completions.requests


STEP = Step(
    id="s2",
    tool="create_page",
    purpose="Create the roadmap page",
    input_guidance="Parent is the page found in s1",
    depends_on=["s1"],
)
PLAN = Plan(
    success=True,
    steps=[
        Step(id="s1", tool="search", purpose="Find parent", input_guidance="Search 'Projects'"),
        STEP,
    ],
)
PLAN_JSON = json.dumps(PLAN.model_dump())


def _make_planner(*responses, **kwargs):
    client = FakeOpenAI(*responses)
    return OpenAIPlanner(client=client, session_id="test-session", **kwargs), client


# ============================================================================
# TestMakePlan
# ============================================================================


class TestMakePlan:
    """Tests for plan generation."""

    def test_parses_plan(self):
        planner, _ = _make_planner(PLAN_JSON)

        plan = planner.make_plan("Create a roadmap page")

        assert plan.step_ids == ["s1", "s2"]
        assert planner.request == "Create a roadmap page"

    def test_uses_strict_plan_schema(self):
        planner, client = _make_planner(PLAN_JSON)

        planner.make_plan("Create a roadmap page")

        response_format = client.requests[0]["response_format"]
        assert response_format["type"] == "json_schema"
        assert response_format["json_schema"]["strict"] is True
        assert response_format["json_schema"]["schema"]["required"] == [
            "success",
            "failure_reason",
            "steps",
        ]

    def test_prompt_lists_tools(self):
        planner, client = _make_planner(PLAN_JSON)

        planner.make_plan("Create a roadmap page")

        messages = client.requests[0]["messages"]
        assert "append_block_children" in messages[0]["content"]
        assert messages[1] == {"role": "user", "content": "Create a roadmap page"}

    def test_model_is_configurable(self):
        planner, client = _make_planner(PLAN_JSON, model="gpt-4.1")

        planner.make_plan("x")

        assert client.requests[0]["model"] == "gpt-4.1"

    def test_unparseable_returns_none(self):
        planner, _ = _make_planner("I cannot help with that")

        assert planner.make_plan("x") is None

    def test_llm_failure_returns_none(self, monkeypatch):
        def failing_call(*args, **kwargs):
            raise RuntimeError("API unavailable")

        monkeypatch.setattr(service, "call_llm_json_with_usage", failing_call)
        planner, _ = _make_planner()

        assert planner.make_plan("x") is None


# ============================================================================
# TestArguments
# ============================================================================


class TestArguments:
    """Tests for argument generation and regeneration."""

    def test_generate_uses_tool_schema(self):
        planner, client = _make_planner('{"parent": {"page_id": "p1"}}')
        planner.request = "Create a roadmap page"

        args = planner.generate_args(PLAN, STEP, 'Result of step s1: {"id": "p1"}', STEP.input_guidance)

        assert args == {"parent": {"page_id": "p1"}}
        response_format = client.requests[0]["response_format"]
        assert response_format["json_schema"]["name"] == "create_page"
        assert response_format["json_schema"]["strict"] is False
        user_prompt = client.requests[0]["messages"][1]["content"]
        assert "Create a roadmap page" in user_prompt
        assert 'Result of step s1: {"id": "p1"}' in user_prompt
        assert "Parent is the page found in s1" in user_prompt

    def test_generate_unknown_tool_returns_none(self):
        planner, client = _make_planner()
        step = STEP.model_copy(update={"tool": "send_email"})

        assert planner.generate_args(PLAN, step, "", "") is None
        assert client.requests == []

    def test_regenerate_uses_json_mode_and_all_errors(self):
        planner, client = _make_planner('{"parent": {"page_id": "p1"}, "properties": {}}')
        errors = [
            ToolCallError(error="Failed to create page: parent missing", failing_args="{}"),
            ToolCallError(error="Failed to retry tool", failing_args="No data was produced"),
        ]

        args = planner.regenerate_args(PLAN, STEP, errors, "", STEP.input_guidance)

        assert args == {"parent": {"page_id": "p1"}, "properties": {}}
        assert client.requests[0]["response_format"] == {"type": "json_object"}
        user_prompt = client.requests[0]["messages"][1]["content"]
        assert "Failed to create page: parent missing" in user_prompt
        assert "No data was produced" in user_prompt

    def test_regenerate_bad_json_returns_none(self):
        planner, _ = _make_planner("{not json")

        assert planner.regenerate_args(PLAN, STEP, [], "", "") is None


# ============================================================================
# TestReplanAndSummary
# ============================================================================


class TestReplanAndSummary:
    """Tests for re-planning and summaries."""

    def test_replan_prompt_has_failure_context(self):
        planner, client = _make_planner(PLAN_JSON)
        request = ReplanRequest(
            request="Create a roadmap page",
            stale_plan=PLAN,
            history={"s1": ['Result of step s1: {"id": "p1"}'], "s2": ["Result of step s2: No result"]},
            failed_step_id="s2",
            pending_errors=[ToolCallError(error="validation_error", failing_args="{}")],
        )

        plan = planner.replan(request)

        assert plan.step_ids == ["s1", "s2"]
        system_prompt = client.requests[0]["messages"][0]["content"]
        user_prompt = client.requests[0]["messages"][1]["content"]
        assert "failed at step s2" in system_prompt
        assert "validation_error" in user_prompt
        assert "Result of step s2: No result" in user_prompt

    def test_summarize_returns_text(self):
        planner, client = _make_planner("Created **Roadmap** under Projects.")

        summary = planner.summarize(PLAN, {"s1": ["Result of step s1: {}"]}, "Create a roadmap page")

        assert summary == "Created **Roadmap** under Projects."
        assert "response_format" not in client.requests[0]
        assert "Result of step s1: {}" in client.requests[0]["messages"][1]["content"]

    def test_empty_summary_returns_none(self):
        planner, _ = _make_planner("")

        assert planner.summarize(PLAN, {}, "x") is None


# ============================================================================
# TestDebugLogging
# ============================================================================


class TestDebugLogging:
    """Tests for planner calls written to the debug log."""

    def test_llm_call_logged_with_phase(self, tmp_path):
        debug_logger = DebugLogger("test-session", str(tmp_path))
        planner, _ = _make_planner(PLAN_JSON, debug_logger=debug_logger)

        planner.make_plan("Create a roadmap page")

        with open(debug_logger.log_file, encoding="utf-8") as f:
            entry = json.loads(f.readline())
        assert entry["type"] == "llm_call"
        assert entry["phase"] == "plan"
        assert entry["input_tokens"] == 100
        assert entry["output_tokens"] == 20
        assert debug_logger.get_accumulated_stats()["llm_call_count"] == 1
