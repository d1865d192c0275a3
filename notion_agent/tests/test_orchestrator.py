"""
Tests for the orchestrator run loop.

Runs the full graph (plan -> execute -> retry/replan -> summarize) over a
scripted planner and tool executor.
"""

import json
from dataclasses import replace

import pytest

from notion_agent.graph.build import create_orchestrator_graph, run_orchestrator
from notion_agent.graph.config import get_config
from notion_agent.graph.state import create_initial_state
from notion_agent.shared.contracts import Plan, Step, ToolResult
from notion_agent.shared.errors import (
    ArgumentGenerationError,
    InvalidPlanError,
    PlanGenerationError,
    PlanRejectedError,
    ReplanLimitExceededError,
    StepLimitExceededError,
    SummaryGenerationError,
    UnknownToolError,
)
from notion_agent.shared.logging.debug_logger import DebugLogger


REQUEST = "Add today's agenda to my meeting notes. The root ID is root-123"


# ============================================================================
# Test Fixtures
# ============================================================================


def _make_step(step_id, tool, depends_on=None):
    """Create a step with generated purpose and guidance."""
    return Step(
        id=step_id,
        tool=tool,
        purpose=f"Run {tool} for {step_id}",
        input_guidance=f"Guidance for {step_id}",
        depends_on=depends_on or [],
    )


def _make_plan(*steps):
    """Create a successful plan from steps."""
    return Plan(success=True, steps=list(steps))


def _search_then_append():
    """Two-step plan where s2 needs s1's result."""
    return _make_plan(
        _make_step("s1", "search"),
        _make_step("s2", "append_block_children", depends_on=["s1"]),
    )


# ============================================================================
# TestSuccessfulRun
# ============================================================================


class TestSuccessfulRun:
    """Tests for runs where every step succeeds."""

    def test_returns_summary(self, ctx, planner):
        """A clean run should return the planner's summary."""
        planner.plan = _search_then_append()

        assert run_orchestrator(REQUEST, ctx, session_id="test-session") == "All done."

    def test_request_reaches_planner(self, ctx, planner):
        """The planner should see the request for planning and summary."""
        planner.plan = _search_then_append()

        run_orchestrator(REQUEST, ctx)

        assert planner.calls_to("make_plan")[0]["request"] == REQUEST
        assert planner.calls_to("summarize")[0]["request"] == REQUEST

    def test_one_history_entry_per_step(self, ctx, planner):
        """Each step should have exactly one history entry after it is dequeued."""
        planner.plan = _search_then_append()
        app = create_orchestrator_graph(ctx)

        final = app.invoke(
            create_initial_state(REQUEST, "test-session"), {"recursion_limit": 50}
        )

        assert final["queue"] == []
        assert final["busy"] is False
        assert final["history"] == {
            "s1": ['Result of step s1: {"object": "ok", "tool": "search"}'],
            "s2": [
                'Result of step s2: {"object": "ok", "tool": "append_block_children"}'
            ],
        }
        assert final["summary"] == "All done."
        assert [r.step_id for r in final["completed_responses"]] == ["s1", "s2"]

    def test_dependency_history_passed_to_dependent_step(self, ctx, planner, executor, events):
        """s2's argument generation should see s1's result, after s1 ran."""
        planner.plan = _search_then_append()
        executor.script("search", ToolResult.success({"results": [{"id": "page-1"}]}))

        run_orchestrator(REQUEST, ctx)

        first, second = planner.calls_to("generate_args")
        assert first["dependency_history"] == ""
        assert second["step_id"] == "s2"
        assert (
            second["dependency_history"]
            == 'Result of step s1: {"results": [{"id": "page-1"}]}'
        )
        assert events.index("execute:search") < events.index("generate_args:s2")

    def test_steps_run_in_plan_order(self, ctx, planner, executor):
        """Steps should execute strictly in plan order."""
        planner.plan = _make_plan(
            _make_step("s1", "get_self"),
            _make_step("s2", "search"),
            _make_step("s3", "create_page", depends_on=["s1", "s2"]),
        )

        run_orchestrator(REQUEST, ctx)

        assert [name for name, _ in executor.calls] == ["get_self", "search", "create_page"]

    def test_summary_sees_full_history(self, ctx, planner):
        """Summarize should receive every step's history and the plan."""
        planner.plan = _search_then_append()

        run_orchestrator(REQUEST, ctx)

        call = planner.calls_to("summarize")[0]
        assert set(call["history"]) == {"s1", "s2"}
        assert call["plan"].step_ids == ["s1", "s2"]

    def test_activity_events_recorded(self, ctx, planner, activity):
        """The run should report thinking, processing and success events."""
        planner.plan = _search_then_append()

        run_orchestrator(REQUEST, ctx)

        kinds = [kind for kind, _ in activity.events]
        assert kinds[0] == "thinking"
        assert kinds.count("processing") == 2
        assert kinds[-1] == "success"

    def test_long_plan_completes_with_default_config(self, ctx, planner, executor):
        """Plan length alone should never end a run early."""
        planner.plan = _make_plan(*[_make_step(f"s{i}", "search") for i in range(1, 251)])

        assert run_orchestrator(REQUEST, ctx) == "All done."

        assert len(executor.calls) == 250
        assert len(planner.calls_to("summarize")[0]["history"]) == 250


# ============================================================================
# TestRetries
# ============================================================================


class TestRetries:
    """Tests for failed steps that recover through regeneration."""

    def test_fails_twice_then_succeeds(self, ctx, planner, executor):
        """A step succeeding on its third attempt should be recorded as a success."""
        planner.plan = _make_plan(_make_step("s1", "create_page"))
        executor.script(
            "create_page",
            ToolResult.failure("Failed to create page: body.parent is invalid"),
            ToolResult.failure("Failed to create page: title is missing"),
            ToolResult.success({"id": "page-9"}),
        )

        app = create_orchestrator_graph(ctx)
        final = app.invoke(create_initial_state(REQUEST), {"recursion_limit": 50})

        assert len(executor.calls_to("create_page")) == 3
        assert final["history"]["s1"] == ['Result of step s1: {"id": "page-9"}']
        assert final["replan_count"] == 0
        assert planner.calls_to("replan") == []

    def test_regeneration_sees_accumulated_errors(self, ctx, planner, executor):
        """Every regeneration should receive all earlier failures of the step."""
        planner.plan = _make_plan(_make_step("s1", "create_page"))
        executor.script(
            "create_page",
            ToolResult.failure("first"),
            ToolResult.failure("second"),
            ToolResult.success({"id": "page-9"}),
        )

        run_orchestrator(REQUEST, ctx)

        regen = planner.calls_to("regenerate_args")
        assert [len(c["errors"]) for c in regen] == [1, 2]
        assert [e.error for e in regen[1]["errors"]] == ["first", "second"]
        assert regen[0]["errors"][0].failing_args == json.dumps({"step": "s1"})


# ============================================================================
# TestReplanning
# ============================================================================


class TestReplanning:
    """Tests for steps that exhaust their retries."""

    def _always_fail(self, planner, executor):
        planner.plan = _make_plan(_make_step("s1", "create_page"))
        executor.always["create_page"] = ToolResult.failure(
            "Failed to create page: validation error"
        )

    def test_always_failing_step_invokes_tool_one_plus_max_retries(self, ctx, planner, executor):
        """An always-failing step should be invoked exactly 1 + max_retries times."""
        self._always_fail(planner, executor)
        planner.replans = [_make_plan(_make_step("r1", "search"))]

        run_orchestrator(REQUEST, ctx)

        assert len(executor.calls_to("create_page")) == 1 + ctx.config.max_retries

    def test_replanner_invoked_once_then_loop_continues(self, ctx, planner, executor, events):
        """Exhaustion should trigger exactly one re-plan, then the new plan runs."""
        self._always_fail(planner, executor)
        planner.replans = [_make_plan(_make_step("r1", "search"))]

        summary = run_orchestrator(REQUEST, ctx)

        assert summary == "All done."
        assert len(planner.calls_to("replan")) == 1
        assert events.index("replan") < events.index("execute:search")
        assert events.index("replan") > max(
            i for i, e in enumerate(events) if e == "execute:create_page"
        )

    def test_replan_request_contents(self, ctx, planner, executor):
        """The re-planner should send the stale plan, history and every error."""
        self._always_fail(planner, executor)
        planner.replans = [_make_plan(_make_step("r1", "search"))]

        run_orchestrator(REQUEST, ctx)

        replan_request = planner.calls_to("replan")[0]["request"]
        assert replan_request.request == REQUEST
        assert replan_request.failed_step_id == "s1"
        assert replan_request.stale_plan.step_ids == ["s1"]
        assert replan_request.history == {"s1": ["Result of step s1: No result"]}
        assert len(replan_request.pending_errors) == 1 + ctx.config.max_retries

    def test_history_keyed_by_new_plan_only(self, ctx, planner, executor):
        """After re-planning only the new plan's steps should have history."""
        self._always_fail(planner, executor)
        planner.replans = [_make_plan(_make_step("r1", "search"))]

        app = create_orchestrator_graph(ctx)
        final = app.invoke(create_initial_state(REQUEST), {"recursion_limit": 50})

        assert set(final["history"]) == {"r1"}
        assert final["replan_count"] == 1
        assert planner.calls_to("summarize")[0]["history"] == final["history"]

    def test_replan_limit_exceeded(self, ctx, planner, executor):
        """A run that keeps failing should stop at the re-plan ceiling."""
        self._always_fail(planner, executor)
        planner.replans = [_make_plan(_make_step("s1", "create_page")) for _ in range(3)]
        ctx = replace(ctx, config=get_config(max_retries=1, max_replans=1, debug_logs_dir=None))

        with pytest.raises(ReplanLimitExceededError):
            run_orchestrator(REQUEST, ctx)

        assert len(planner.calls_to("replan")) == 1

    def test_replan_ceiling_reached_before_step_ceiling(self, ctx, planner, executor):
        """A long plan failing on its last step should hit max_replans, not the step limit."""
        steps = [_make_step(f"s{i}", "search") for i in range(1, 60)]
        steps.append(_make_step("s60", "create_page"))
        planner.plan = _make_plan(*steps)
        planner.replans = [_make_plan(*steps) for _ in range(4)]
        executor.always["create_page"] = ToolResult.failure(
            "Failed to create page: validation error"
        )

        with pytest.raises(ReplanLimitExceededError):
            run_orchestrator(REQUEST, ctx)

        assert len(planner.calls_to("replan")) == ctx.config.max_replans
        assert len(executor.calls_to("search")) == 59 * (ctx.config.max_replans + 1)

    def test_missing_revised_plan_is_fatal(self, ctx, planner, executor):
        """A re-plan that returns nothing should abort the run."""
        self._always_fail(planner, executor)

        with pytest.raises(PlanGenerationError):
            run_orchestrator(REQUEST, ctx)


# ============================================================================
# TestFatalErrors
# ============================================================================


class TestFatalErrors:
    """Tests for errors that abort a run."""

    def test_rejected_plan_executes_nothing(self, ctx, planner, executor):
        """A plan with success=false should stop the run before any step."""
        planner.plan = Plan(
            success=False, failure_reason="Sending email is not supported"
        )

        with pytest.raises(PlanRejectedError) as exc_info:
            run_orchestrator(REQUEST, ctx)

        assert "Sending email is not supported" in str(exc_info.value)
        assert executor.calls == []
        assert planner.calls_to("generate_args") == []

    def test_missing_plan(self, ctx, planner):
        """No plan from the planner should be fatal."""
        planner.plan = None

        with pytest.raises(PlanGenerationError):
            run_orchestrator(REQUEST, ctx)

    def test_unknown_tool_in_plan(self, ctx, planner, executor):
        """A plan naming an unregistered tool should be rejected."""
        planner.plan = _make_plan(_make_step("s1", "send_email"))

        with pytest.raises(UnknownToolError):
            run_orchestrator(REQUEST, ctx)

        assert executor.calls == []

    def test_duplicate_step_ids(self, ctx, planner):
        """Step ids must be unique within a plan."""
        planner.plan = _make_plan(_make_step("s1", "search"), _make_step("s1", "get_self"))

        with pytest.raises(InvalidPlanError):
            run_orchestrator(REQUEST, ctx)

    def test_missing_arguments(self, ctx, planner, executor):
        """No arguments for a first attempt should be fatal."""
        planner.plan = _make_plan(_make_step("s1", "search"))
        planner.args["s1"] = None

        with pytest.raises(ArgumentGenerationError):
            run_orchestrator(REQUEST, ctx)

        assert executor.calls == []

    def test_missing_summary(self, ctx, planner):
        """No summary should be fatal even when every step succeeded."""
        planner.plan = _search_then_append()
        planner.summary = None

        with pytest.raises(SummaryGenerationError):
            run_orchestrator(REQUEST, ctx)

    def test_step_limit_is_a_hard_ceiling(self, ctx, planner):
        """A run outgrowing the step ceiling should fail as an orchestration error."""
        planner.plan = _make_plan(*[_make_step(f"s{i}", "search") for i in range(1, 6)])
        ctx = replace(ctx, config=get_config(recursion_limit=3, debug_logs_dir=None))

        with pytest.raises(StepLimitExceededError):
            run_orchestrator(REQUEST, ctx)


# ============================================================================
# TestDebugLog
# ============================================================================


class TestDebugLog:
    """Tests for the per-session debug log of a run."""

    def _read_entries(self, debug_logger):
        with open(debug_logger.log_file, encoding="utf-8") as f:
            return [json.loads(line) for line in f]

    def test_tool_calls_and_summary_logged(self, ctx, planner, tmp_path):
        """Tool calls and a completed run summary should be written."""
        planner.plan = _search_then_append()
        debug_logger = DebugLogger("test-session", str(tmp_path))
        ctx = replace(ctx, debug_logger=debug_logger)

        run_orchestrator(REQUEST, ctx, session_id="test-session")

        entries = self._read_entries(debug_logger)
        assert [e["type"] for e in entries] == ["tool_call", "tool_call", "run_summary"]
        assert entries[-1]["status"] == "complete"
        assert entries[-1]["tool_call_count"] == 2

    def test_failed_run_logged_as_error(self, ctx, planner, tmp_path):
        """A fatal error should still write a run summary with status error."""
        planner.plan = None
        debug_logger = DebugLogger("test-session", str(tmp_path))
        ctx = replace(ctx, debug_logger=debug_logger)

        with pytest.raises(PlanGenerationError):
            run_orchestrator(REQUEST, ctx, session_id="test-session")

        entries = self._read_entries(debug_logger)
        assert entries[-1]["type"] == "run_summary"
        assert entries[-1]["status"] == "error"
