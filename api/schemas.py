# ============================================================================
# API SCHEMAS
# ============================================================================
# STATUS: Core - Response models
# PURPOSE: Pydantic models for the informational endpoints
# CREATED: 19 OCT 2026
# ============================================================================
"""
API Schemas

Response models for the static informational documents.
"""

from typing import Dict, List

from pydantic import BaseModel, Field


class RouteGroup(BaseModel):
    """
    A family of resource routes under one base path.

    The resource routers are mounted by the resource services; this
    process only serves the informational and health endpoints.
    """
    description: str
    base_path: str
    technologies: List[str] = Field(default_factory=list)
    served_here: bool = False
    routes: Dict[str, str] = Field(default_factory=dict)


class ApiInfo(BaseModel):
    name: str
    version: str
    description: str
    documentation: str = "/docs"
    systems: Dict[str, RouteGroup]
    # Routes this process answers
    endpoints: Dict[str, str]


class InfoResponse(BaseModel):
    """GET /api/info"""
    success: bool = True
    data: ApiInfo


class NotFoundResponse(BaseModel):
    """Fallback for unmatched routes."""
    success: bool = False
    message: str = "Route not found"
    available_routes: Dict[str, str]


__all__ = [
    "RouteGroup",
    "ApiInfo",
    "InfoResponse",
    "NotFoundResponse",
]
