# ============================================================================
# HEALTH MODULE
# ============================================================================
# STATUS: Infrastructure - Store health aggregation
# PURPOSE: Aggregated health report and HTTP probes
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Module

- HealthAggregator: probes both stores independently, never raises
- HealthReport / StoreHealth: fresh-per-query result types

The FastAPI router lives in health.router; import it from there so this
package stays importable without the lifecycle layer.
"""

from health.core import HealthReport, HealthStatus, StoreHealth
from health.aggregator import HealthAggregator

__all__ = [
    "HealthReport",
    "HealthStatus",
    "StoreHealth",
    "HealthAggregator",
]
