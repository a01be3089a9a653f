# ============================================================================
# API MODULE
# ============================================================================
# STATUS: Core - FastAPI application factory
# PURPOSE: Assemble the HTTP layer around the lifecycle orchestrator
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Module

The HTTP layer only calls into the core for the health query; startup
and shutdown are driven by the orchestrator through its hooks.
"""

from typing import Optional, Sequence

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from __version__ import API_NAME, __version__
from health.router import health_router, set_orchestrator
from lifecycle.orchestrator import LifecycleOrchestrator
from .routes import router, not_found_handler


def create_app(
    orchestrator: Optional[LifecycleOrchestrator],
    cors_origins: Sequence[str] = (),
) -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=API_NAME,
        description="Hybrid relational + document store API",
        version=__version__,
    )

    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(cors_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    set_orchestrator(orchestrator)
    app.state.orchestrator = orchestrator

    app.include_router(health_router)
    app.include_router(router)
    app.add_exception_handler(404, not_found_handler)

    return app


__all__ = ["create_app"]
