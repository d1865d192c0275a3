"""
Shared fakes and fixtures for the orchestrator tests.

The planner and the tool executor are replaced by scripted fakes that
record every call, so tests can assert on exactly what the orchestrator
asked for and in which order.
"""

from typing import Any, Dict, List, Optional

import pytest

from notion_agent.graph.config import get_config
from notion_agent.graph.context import RunContext
from notion_agent.shared.contracts import Plan, ToolResult
from notion_agent.shared.logging.activity_log import ActivityLogger
from notion_agent.tools.registry import DEFAULT_REGISTRY


class FakePlanner:
    """
    Scripted planner.

    Attributes:
        plan: Returned by make_plan
        replans: Plans returned by successive replan calls (None when empty)
        args: Step id -> arguments returned by generate_args
        regenerated: Step id -> items consumed by successive regenerate_args
            calls; an Exception item is raised instead of returned
        summary: Returned by summarize
        calls: (operation, details) for every call, in order
    """

    def __init__(self, events: List[str]):
        self.plan: Optional[Plan] = None
        self.replans: List[Optional[Plan]] = []
        self.args: Dict[str, Optional[Dict[str, Any]]] = {}
        self.regenerated: Dict[str, List[Any]] = {}
        self.summary: Optional[str] = "All done."
        self.calls: List[tuple] = []
        self._events = events

    def calls_to(self, operation: str) -> List[Dict[str, Any]]:
        return [details for name, details in self.calls if name == operation]

    def make_plan(self, request):
        self.calls.append(("make_plan", {"request": request}))
        self._events.append("make_plan")
        return self.plan

    def generate_args(self, plan, step, dependency_history, guidance):
        self.calls.append(
            (
                "generate_args",
                {
                    "step_id": step.id,
                    "dependency_history": dependency_history,
                    "guidance": guidance,
                },
            )
        )
        self._events.append(f"generate_args:{step.id}")
        if step.id in self.args:
            return self.args[step.id]
        return {"step": step.id}

    def regenerate_args(self, plan, step, errors, dependency_history, guidance):
        self.calls.append(
            (
                "regenerate_args",
                {
                    "step_id": step.id,
                    "errors": list(errors),
                    "dependency_history": dependency_history,
                },
            )
        )
        self._events.append(f"regenerate_args:{step.id}")
        script = self.regenerated.get(step.id)
        if script:
            item = script.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return {"step": step.id, "attempt": len(errors)}

    def replan(self, replan_request):
        self.calls.append(("replan", {"request": replan_request}))
        self._events.append("replan")
        return self.replans.pop(0) if self.replans else None

    def summarize(self, plan, history, request):
        self.calls.append(
            (
                "summarize",
                {
                    "plan": plan,
                    "history": {k: list(v) for k, v in history.items()},
                    "request": request,
                },
            )
        )
        self._events.append("summarize")
        return self.summary


class ScriptedExecutor:
    """
    Scripted tool executor.

    Results queued with script() are returned first, in order; after that
    a tool returns its entry in `always`, or a generic success.
    """

    def __init__(self, events: List[str]):
        self.scripts: Dict[str, List[ToolResult]] = {}
        self.always: Dict[str, ToolResult] = {}
        self.calls: List[tuple] = []
        self._events = events

    def script(self, tool_name: str, *results: ToolResult) -> None:
        self.scripts.setdefault(tool_name, []).extend(results)

    def calls_to(self, tool_name: str) -> List[Dict[str, Any]]:
        return [args for name, args in self.calls if name == tool_name]

    def execute(self, tool_name, args):
        self.calls.append((tool_name, dict(args)))
        self._events.append(f"execute:{tool_name}")
        queued = self.scripts.get(tool_name)
        if queued:
            return queued.pop(0)
        return self.always.get(
            tool_name, ToolResult.success({"object": "ok", "tool": tool_name})
        )

    def close(self):
        pass


class RecordingActivityLogger(ActivityLogger):
    """Local-only activity logger that keeps every recorded event."""

    def __init__(self):
        super().__init__()
        self.events: List[tuple] = []

    def record(self, event, message, metadata=None):
        self.events.append((event, message))
        super().record(event, message, metadata)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def events() -> List[str]:
    """Shared, ordered log of planner and executor calls."""
    return []


@pytest.fixture
def planner(events) -> FakePlanner:
    return FakePlanner(events)


@pytest.fixture
def executor(events) -> ScriptedExecutor:
    return ScriptedExecutor(events)


@pytest.fixture
def activity() -> RecordingActivityLogger:
    return RecordingActivityLogger()


@pytest.fixture
def ctx(planner, executor, activity) -> RunContext:
    """Run context over the fakes with the default limits."""
    return RunContext(
        planner=planner,
        executor=executor,
        registry=DEFAULT_REGISTRY,
        activity=activity,
        config=get_config(max_retries=3, max_replans=3, debug_logs_dir=None),
    )
