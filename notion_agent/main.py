"""
FastAPI application entry point.

Assembles the FastAPI app with the orchestrator router.
"""

import logging
import os
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from notion_agent.graph.orchestrator_api import router as orchestrator_router
from notion_agent.shared.logging.config import setup_logging


# ============================================================================
# Logging configuration (single source of truth for the service)
# ============================================================================
LOG_FORMAT = (
    "%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s"
)

if os.environ.get("LOG_JSON"):
    setup_logging(level=logging.INFO, log_file=os.environ.get("LOG_FILE"))
else:
    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,  # Override any prior basicConfig calls
    )

# Quiet noisy third-party loggers
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)


# Create FastAPI app
app = FastAPI(
    title="Notion Agent",
    description="Plans and executes Notion workspace tasks with LangGraph",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(orchestrator_router)


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Notion Agent",
        "version": "0.1.0",
        "endpoints": {
            "chat": "/api/chat",
            "health": "/health",
        },
    }


@app.get("/health")
async def health():
    """Global health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
