# ============================================================================
# API ROUTES
# ============================================================================
# STATUS: Core - Informational endpoints
# PURPOSE: Static API description and the unmatched-route fallback
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Routes

Neither endpoint touches orchestrator state:
- GET /api/info       static description of the API: the endpoints served
                      here and the resource route groups served elsewhere
- unmatched routes    404 document listing the known entry points
"""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from __version__ import API_NAME, __version__
from .schemas import ApiInfo, InfoResponse, NotFoundResponse, RouteGroup

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Info"])

API_INFO = InfoResponse(
    data=ApiInfo(
        name=API_NAME,
        version=__version__,
        description="Hybrid music management API over a relational and a document store",
        systems={
            "original": RouteGroup(
                description="Original resource routes, served by the resource services",
                base_path="/api/",
                technologies=["PostgreSQL", "MongoDB"],
                routes={
                    "auth": "/api/auth",
                    "users": "/api/users",
                    "music": "/api/music",
                    "albums": "/api/albums",
                    "groups": "/api/groups",
                    "events": "/api/events",
                },
            ),
            "hybrid": RouteGroup(
                description="Hybrid routes spanning both stores, served by the resource services",
                base_path="/api/v2/",
                technologies=["psycopg", "pymongo", "hybrid transactions"],
                routes={"catalogs": "/api/v2/catalogos"},
            ),
        },
        endpoints={
            "info": "/api/info",
            "health": "/api/health",
            "liveness": "/livez",
            "readiness": "/readyz",
            "docs": "/docs",
        },
    )
)

KNOWN_ROUTES = {
    "info": "GET /api/info",
    "docs": "GET /docs",
    "health": "GET /api/health",
    "liveness": "GET /livez",
    "readiness": "GET /readyz",
}


@router.get("/api/info", response_model=InfoResponse)
async def api_info():
    """Static description of the API."""
    return API_INFO


async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback document for routes that do not exist."""
    logger.debug(f"Route not found: {request.method} {request.url.path}")
    return JSONResponse(
        status_code=404,
        content=NotFoundResponse(available_routes=KNOWN_ROUTES).model_dump(),
    )


__all__ = [
    "router",
    "API_INFO",
    "KNOWN_ROUTES",
    "not_found_handler",
]
