# ============================================================================
# HEALTH AGGREGATOR
# ============================================================================
# STATUS: Infrastructure - Store health aggregation
# PURPOSE: Query both stores independently and build a HealthReport
# CREATED: 19 OCT 2026
# ============================================================================
"""
Health Aggregator

Builds a HealthReport from:
1. status() + ping() of the relational store
2. status() + ping() of the document store
3. the relational table count

The three probes run concurrently, each bounded by its own timeout, so
an unreachable store can neither block nor fail the other checks.
report() never raises.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional, Tuple

from health.core import HealthReport, StoreHealth
from stores.base import StoreHandle
from stores.relational import RelationalStore

logger = logging.getLogger(__name__)


class HealthAggregator:
    """
    Aggregates store connectivity into a HealthReport.

    Args:
        relational: Relational store handle (also provides the table count)
        document: Document store handle
        probe_timeout: Max seconds for each probe
    """

    def __init__(
        self,
        relational: RelationalStore,
        document: StoreHandle,
        probe_timeout: float = 5.0,
    ):
        self.relational = relational
        self.document = document
        self.probe_timeout = probe_timeout

    async def report(self) -> HealthReport:
        """Query both stores and the table count. Never raises."""
        relational, document, (tables, tables_error) = await asyncio.gather(
            self._probe_store(self.relational),
            self._probe_store(self.document),
            self._count_tables(),
        )

        report = HealthReport(
            store_statuses={
                self.relational.name: relational,
                self.document.name: document,
            },
            reference_table_count=tables,
            table_count_error=tables_error,
        )

        if not report.overall_ok:
            logger.warning(f"Health: stores unreachable: {', '.join(report.disconnected)}")
        return report

    async def _probe_store(self, handle: StoreHandle) -> StoreHealth:
        """Snapshot the handle, then ping it if it claims to be connected."""
        start_time = time.monotonic()
        status = handle.status()

        if not status.connected:
            detail = f"store is {status.state.value}"
            if status.last_error:
                detail += f": {status.last_error.message}"
            return StoreHealth.down(detail, state=status.state.value)

        error = await self._bounded(handle.ping, f"{handle.name} ping")
        duration_ms = (time.monotonic() - start_time) * 1000
        if error:
            return StoreHealth.down(error, state=status.state.value, duration_ms=duration_ms)
        return StoreHealth.ok(state=status.state.value, duration_ms=duration_ms)

    async def _count_tables(self) -> Tuple[int, Optional[str]]:
        if not self.relational.is_connected:
            return 0, f"{self.relational.name} store not connected"

        count = 0

        async def count() -> None:
            nonlocal count
            count = await self.relational.count_tables()

        error = await self._bounded(count, "table count")
        return count, error

    async def _bounded(self, probe: Callable[[], Awaitable[object]], label: str) -> Optional[str]:
        """Run a probe under the timeout; return an error string or None."""
        try:
            await asyncio.wait_for(probe(), timeout=self.probe_timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Health {label} timed out after {self.probe_timeout}s")
            return f"timeout after {self.probe_timeout}s"
        except Exception as e:
            logger.warning(f"Health {label} failed: {e}")
            return f"{type(e).__name__}: {e}"
        return None


__all__ = ["HealthAggregator"]
