# ============================================================================
# HEALTH CHECK ROUTER
# ============================================================================
# STATUS: Infrastructure - FastAPI health endpoints
# PURPOSE: Probes and the aggregated store health query
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Check Router

Endpoints:
    GET /livez       - Liveness probe (is the process alive?)
    GET /readyz      - Readiness probe (has startup reached SERVING?)
    GET /api/health  - Aggregated store health

Response Codes (/api/health):
    200 - Both stores connected
    503 - At least one store unreachable
    500 - The health query itself failed
"""

import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from __version__ import API_NAME, BUILD_DATE, __version__
from core.contracts import StoreKind
from lifecycle.orchestrator import LifecycleOrchestrator

logger = logging.getLogger(__name__)

health_router = APIRouter(tags=["Health"])

_orchestrator: Optional[LifecycleOrchestrator] = None


def set_orchestrator(orchestrator: Optional[LifecycleOrchestrator]) -> None:
    """Wire the orchestrator the health endpoints query."""
    global _orchestrator
    _orchestrator = orchestrator


def _get_orchestrator() -> LifecycleOrchestrator:
    if _orchestrator is None:
        raise RuntimeError("Lifecycle orchestrator not initialized")
    return _orchestrator


# ============================================================================
# PROBES
# ============================================================================

@health_router.get("/livez")
async def liveness_probe():
    """
    Liveness probe.

    No external checks - just confirms the process is responsive.
    """
    return {"status": "alive", "version": __version__, "build_date": BUILD_DATE}


@health_router.get("/readyz")
async def readiness_probe():
    """Ready once startup has reached SERVING and until shutdown begins."""
    orchestrator = _orchestrator
    phase = orchestrator.phase.value if orchestrator else "uninitialized"

    if orchestrator is None or not orchestrator.is_serving:
        return JSONResponse(status_code=503, content={"status": "not_ready", "phase": phase})
    return {"status": "ready", "phase": phase}


# ============================================================================
# AGGREGATED HEALTH
# ============================================================================

@health_router.get("/api/health")
async def api_health():
    """
    Store health.

    Never raises: a failing health query is turned into a 500 document.
    """
    try:
        orchestrator = _get_orchestrator()
        report = await orchestrator.health()
    except Exception as e:
        logger.error(f"Health query failed: {e}")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Health check failed",
                "error": str(e),
            },
        )

    relational = StoreKind.RELATIONAL.value
    document = StoreKind.DOCUMENT.value
    ok = report.overall_ok

    body = {
        "success": ok,
        "message": (
            f"{API_NAME} running"
            if ok else f"{API_NAME} degraded: {', '.join(report.disconnected)} unreachable"
        ),
        "version": __version__,
        "timestamp": report.timestamp.isoformat(),
        "phase": orchestrator.phase.value,
        "database": {
            relational: {
                "connected": report.is_connected(relational),
                "tables": report.reference_table_count,
            },
            document: {
                "connected": report.is_connected(document),
            },
        },
        "stores": {name: s.to_dict() for name, s in report.store_statuses.items()},
    }

    return JSONResponse(status_code=200 if ok else 503, content=body)


__all__ = [
    "health_router",
    "set_orchestrator",
]
