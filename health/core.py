# ============================================================================
# HEALTH REPORT TYPES
# ============================================================================
# STATUS: Infrastructure - Health result types
# PURPOSE: Per-store connectivity and the aggregated report
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Report Types

A HealthReport is built fresh for every query and never cached:

- store_statuses: store name -> StoreHealth(connected, detail)
- reference_table_count: tables in the relational schema
- overall_ok: both stores connected
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class HealthStatus(str, Enum):
    """Health check status values."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class StoreHealth:
    """Connectivity of one store."""
    connected: bool
    detail: str = ""
    state: Optional[str] = None
    duration_ms: float = 0.0

    @classmethod
    def ok(cls, detail: str = "reachable", **kwargs) -> "StoreHealth":
        return cls(connected=True, detail=detail, **kwargs)

    @classmethod
    def down(cls, detail: str, **kwargs) -> "StoreHealth":
        return cls(connected=False, detail=detail, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "connected": self.connected,
            "detail": self.detail,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.state:
            result["state"] = self.state
        return result


@dataclass
class HealthReport:
    """Aggregated health of both stores."""
    store_statuses: Dict[str, StoreHealth]
    reference_table_count: int = 0
    table_count_error: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def overall_ok(self) -> bool:
        return bool(self.store_statuses) and all(
            s.connected for s in self.store_statuses.values()
        )

    @property
    def status(self) -> HealthStatus:
        if self.overall_ok:
            if self.reference_table_count == 0:
                return HealthStatus.DEGRADED
            return HealthStatus.HEALTHY
        return HealthStatus.UNHEALTHY

    @property
    def disconnected(self) -> List[str]:
        return [name for name, s in self.store_statuses.items() if not s.connected]

    def is_connected(self, store: str) -> bool:
        status = self.store_statuses.get(store)
        return status.connected if status else False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON response."""
        result: Dict[str, Any] = {
            "status": self.status.value,
            "overall_ok": self.overall_ok,
            "timestamp": self.timestamp.isoformat(),
            "reference_table_count": self.reference_table_count,
            "stores": {name: s.to_dict() for name, s in self.store_statuses.items()},
        }
        if self.table_count_error:
            result["table_count_error"] = self.table_count_error
        return result


__all__ = [
    "HealthStatus",
    "StoreHealth",
    "HealthReport",
]
