# ============================================================================
# STARTUP REPORTER
# ============================================================================
# STATUS: Core - Human-readable lifecycle output
# PURPOSE: Banners and log lines for orchestrator state transitions
# CREATED: 19 OCT 2026
# ============================================================================
"""
Startup Reporter

Formats banners and one-line summaries from orchestrator transitions.
The render_* methods return lines (pure, easy to test); the on_* hooks
emit them through the logger.
"""

import logging
from typing import Dict, List, Optional

from __version__ import API_NAME, CODENAME, __version__
from core.config import ServerConfig
from core.contracts import LifecyclePhase
from health.core import HealthReport

logger = logging.getLogger("lifecycle.reporter")

RULE = "=" * 40

_PHASE_MESSAGES = {
    LifecyclePhase.PREPARING_FILESYSTEM: "Preparing upload directory...",
    LifecyclePhase.CONNECTING_STORES: "Connecting to databases...",
    LifecyclePhase.SEEDING: "Checking reference data...",
    LifecyclePhase.VERIFYING: "Verifying system integrity...",
    LifecyclePhase.SERVING: "Accepting connections",
    LifecyclePhase.SHUTTING_DOWN: "Shutting down, closing stores...",
    LifecyclePhase.STOPPED: "Stopped",
}


class StartupReporter:
    """Formats lifecycle output for operators."""

    def __init__(self, server: ServerConfig, log: Optional[logging.Logger] = None):
        self.server = server
        self.log = log or logger

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render_startup_banner(self) -> List[str]:
        return [
            RULE,
            f"{API_NAME} v{__version__} - {CODENAME}",
            "Starting services...",
            RULE,
        ]

    def render_phase(self, phase: LifecyclePhase) -> str:
        return f"[{phase.value}] {_PHASE_MESSAGES.get(phase, phase.value)}"

    def render_success_banner(self, report: Optional[HealthReport]) -> List[str]:
        def store_line(label: str, store: str, extra: str = "") -> str:
            if report is None:
                return f"{label}: unknown"
            state = "connected" if report.is_connected(store) else "UNREACHABLE"
            return f"{label}: {state}{extra}"

        tables = f" ({report.reference_table_count} tables)" if report else ""
        return [
            RULE,
            f"{API_NAME} v{__version__}",
            RULE,
            f"URL: {self.server.public_url}",
            f"API: {self.server.public_url}/api",
            "Status: running",
            store_line("Relational store", "relational", tables),
            store_line("Document store", "document"),
            f"Mode: {self.server.environment}",
            RULE,
        ]

    def render_shutdown_summary(
        self,
        outcomes: Dict[str, Optional[str]],
        exit_code: int,
    ) -> List[str]:
        lines = []
        for store, error in outcomes.items():
            if error is None:
                lines.append(f"{store} store closed")
            else:
                lines.append(f"{store} store failed to close: {error}")
        if exit_code == 0:
            lines.append("Server closed cleanly")
        else:
            lines.append(f"Server closed with errors (exit code {exit_code})")
        return lines

    # ------------------------------------------------------------------
    # Emission hooks (called by the orchestrator)
    # ------------------------------------------------------------------

    def _emit(self, lines: List[str], level: int = logging.INFO) -> None:
        for line in lines:
            self.log.log(level, line)

    def on_starting(self) -> None:
        self._emit(self.render_startup_banner())

    def on_phase(self, phase: LifecyclePhase) -> None:
        self.log.info(self.render_phase(phase))

    def on_serving(self, report: Optional[HealthReport]) -> None:
        self.log.info(f"{API_NAME} listening on port {self.server.port}")
        self._emit(self.render_success_banner(report))

    def on_startup_failed(self, error: BaseException) -> None:
        self.log.error(f"Error starting server: {error}")

    def on_stopped(self, outcomes: Dict[str, Optional[str]], exit_code: int) -> None:
        level = logging.INFO if exit_code == 0 else logging.ERROR
        self._emit(self.render_shutdown_summary(outcomes, exit_code), level)


__all__ = ["StartupReporter"]
