"""
Tests for the retry controller.
"""

from dataclasses import replace

import pytest

from notion_agent.graph.config import get_config
from notion_agent.graph.nodes.retry import retry_step
from notion_agent.shared.contracts import Plan, Step, ToolCallError, ToolResult
from notion_agent.shared.errors import UnknownToolError


# ============================================================================
# Test Fixtures
# ============================================================================


STEP = Step(
    id="s1",
    tool="create_page",
    purpose="Create the project page",
    input_guidance="Parent is the root page",
)
PLAN = Plan(success=True, steps=[STEP])


def _first_error():
    return ToolCallError(error="Failed to create page: bad parent", failing_args="{}")


def _retry(ctx, errors=None):
    return retry_step(PLAN, STEP, "", STEP.input_guidance, errors or [_first_error()], ctx)


class RaisingExecutor:
    """Executor that fails fatally on every call."""

    def execute(self, tool_name, args):
        raise UnknownToolError(tool_name)


# ============================================================================
# TestRetryStep
# ============================================================================


class TestRetryStep:
    """Tests for retry_step."""

    def test_returns_on_first_success(self, ctx, planner, executor):
        """The first successful attempt should end the loop."""
        result, errors = _retry(ctx)

        assert result.payload == {"object": "ok", "tool": "create_page"}
        assert len(errors) == 1
        assert len(planner.calls_to("regenerate_args")) == 1
        assert len(executor.calls) == 1

    def test_exhaustion_returns_none(self, ctx, executor):
        """Reaching the bound should return no result and every error."""
        executor.always["create_page"] = ToolResult.failure("Failed to create page: nope")

        result, errors = _retry(ctx)

        assert result is None
        assert len(errors) == 1 + ctx.config.max_retries
        assert len(executor.calls) == ctx.config.max_retries

    def test_bound_follows_config(self, ctx, executor):
        """The number of attempts should follow max_retries."""
        executor.always["create_page"] = ToolResult.failure("nope")
        ctx = replace(ctx, config=get_config(max_retries=5, debug_logs_dir=None))

        result, errors = _retry(ctx)

        assert result is None
        assert len(executor.calls) == 5

    def test_snapshots_grow_monotonically(self, ctx, planner, executor):
        """Each regeneration should see every earlier failure."""
        executor.always["create_page"] = ToolResult.failure("nope")

        _retry(ctx)

        sizes = [len(c["errors"]) for c in planner.calls_to("regenerate_args")]
        assert sizes == [1, 2, 3]

    def test_rejected_attempt_records_real_error(self, ctx, planner, executor):
        """A rejected retry should record the tool's message and the args."""
        planner.regenerated["s1"] = [{"parent": {"page_id": "root"}}]
        executor.script(
            "create_page",
            ToolResult.failure("Failed to create page: title missing"),
        )

        _, errors = _retry(ctx)

        assert errors[1].error == "Failed to create page: title missing"
        assert errors[1].failing_args == '{"parent": {"page_id": "root"}}'

    def test_no_data_recorded(self, ctx, planner, executor):
        """Regeneration returning nothing should record a no-data error."""
        planner.regenerated["s1"] = [None]

        result, errors = _retry(ctx)

        assert result is not None
        assert errors[1].error == "Failed to retry tool"
        assert errors[1].failing_args == "No data was produced"
        assert len(executor.calls) == 1

    def test_regeneration_exception_recorded(self, ctx, planner):
        """A raising regeneration should count as a no-data attempt."""
        planner.regenerated["s1"] = [RuntimeError("model timeout")]

        result, errors = _retry(ctx)

        assert result is not None
        assert errors[1].error == "Failed to retry tool"

    def test_input_errors_not_mutated(self, ctx, executor):
        """The caller's error list should be left untouched."""
        executor.always["create_page"] = ToolResult.failure("nope")
        errors = [_first_error()]

        _retry(ctx, errors)

        assert len(errors) == 1

    def test_fatal_executor_error_propagates(self, ctx):
        """Orchestration errors from the executor should not be swallowed."""
        ctx = replace(ctx, executor=RaisingExecutor())

        with pytest.raises(UnknownToolError):
            _retry(ctx)
