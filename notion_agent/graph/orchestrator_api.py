"""
FastAPI endpoints for the orchestrator.

Provides the chat API that turns a Notion request into an executed
action plan and returns the run summary.
"""

import logging
import os
import uuid
from typing import Optional

from fastapi import APIRouter, Header, HTTPException
from pydantic import BaseModel, Field

from notion_agent.graph.build import run_orchestrator
from notion_agent.graph.config import DEFAULT_CONFIG, OrchestratorConfig
from notion_agent.graph.context import RunContext
from notion_agent.planner.service import OpenAIPlanner
from notion_agent.shared.errors import OrchestrationError
from notion_agent.shared.logging.activity_log import ActivityLogger
from notion_agent.shared.logging.debug_logger import get_or_create_logger, remove_logger
from notion_agent.tools.executor import DEFAULT_NOTION_VERSION, NotionToolExecutor
from notion_agent.tools.registry import DEFAULT_REGISTRY


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["orchestrator"])


# ============================================================================
# Request/Response Models
# ============================================================================


class ChatRequest(BaseModel):
    """Request to run the agent on a Notion workspace."""

    prompt: str = Field(min_length=1, description="What the user wants done")
    root_page_id: str = Field(min_length=1, description="Root Notion page id")
    notion_api_key: Optional[str] = Field(
        default=None,
        description="Notion integration token (falls back to NOTION_API_KEY)",
    )


class ChatResponse(BaseModel):
    """Response from a finished run."""

    session_id: str = Field(description="Run session identifier")
    success: bool = Field(description="True when the run produced a summary")
    response: str = Field(description="Markdown summary of what was done")


# ============================================================================
# Helpers
# ============================================================================


def build_request_text(prompt: str, root_page_id: str) -> str:
    """Append the root page id so the planner can always reach it."""
    return f"{prompt}. The root ID is {root_page_id}"


def build_run_context(
    notion_api_key: str,
    session_id: str,
    session_token: Optional[str] = None,
    config: OrchestratorConfig = DEFAULT_CONFIG,
) -> RunContext:
    """
    Wire the production collaborators for one run.

    Args:
        notion_api_key: Notion integration token
        session_id: Run session identifier
        session_token: Optional caller token forwarded to the activity log
        config: Orchestrator configuration

    Returns:
        RunContext with an OpenAI planner, Notion executor and activity logger
    """
    debug_logger = (
        get_or_create_logger(session_id, config.debug_logs_dir)
        if config.debug_logs_dir
        else None
    )
    planner = OpenAIPlanner(
        registry=DEFAULT_REGISTRY,
        model=config.model,
        timeout=config.llm_timeout,
        debug_logger=debug_logger,
        session_id=session_id,
    )
    executor = NotionToolExecutor(
        api_key=notion_api_key,
        notion_version=os.environ.get("NOTION_VERSION", DEFAULT_NOTION_VERSION),
    )
    activity = ActivityLogger.from_env(
        session_token=session_token,
        message_limit=config.activity_message_limit,
    )
    return RunContext(
        planner=planner,
        executor=executor,
        registry=DEFAULT_REGISTRY,
        activity=activity,
        config=config,
        debug_logger=debug_logger,
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/chat", response_model=ChatResponse)
def chat(
    request: ChatRequest,
    x_session_token: Optional[str] = Header(default=None),
):
    """
    Run the agent on one request.

    Plans the request, executes every step against Notion (retrying and
    re-planning as needed) and returns the summary.
    """
    session_id = str(uuid.uuid4())
    _log = f"[session={session_id}] [graph=orchestrator] [api=chat] "

    notion_api_key = request.notion_api_key or os.environ.get("NOTION_API_KEY")
    if not notion_api_key:
        logger.warning(f"{_log}Rejected request without a Notion API key")
        raise HTTPException(status_code=400, detail="Notion API key is required")

    logger.info(
        f"{_log}Run starting | prompt_length={len(request.prompt)}, "
        f"root_page_id={request.root_page_id}"
    )

    ctx = build_run_context(notion_api_key, session_id, x_session_token)
    try:
        summary = run_orchestrator(
            build_request_text(request.prompt, request.root_page_id),
            ctx,
            session_id=session_id,
        )
    except OrchestrationError as e:
        logger.error(f"{_log}Agent failed: {e}")
        raise HTTPException(status_code=500, detail=f"Agent failed: {e}")
    except Exception as e:
        logger.exception(f"{_log}Agent failed unexpectedly: {e}")
        raise HTTPException(status_code=500, detail=f"Agent failed: {e}")
    finally:
        ctx.executor.close()
        ctx.activity.close()
        remove_logger(session_id)

    logger.info(f"{_log}Run finished | summary_length={len(summary)}")
    return ChatResponse(session_id=session_id, success=True, response=summary)
