# ============================================================================
# LIFECYCLE MODULE
# ============================================================================
# STATUS: Core - Process lifecycle
# PURPOSE: Orchestrator, shutdown guard, process hooks and reporter
# CREATED: 19 OCT 2026
# ============================================================================
"""
Lifecycle Module

- LifecycleOrchestrator: startup phases and guarded shutdown
- ShutdownState: process-wide exactly-once shutdown flag
- ProcessHooks: signals and error channels as stop events
- StartupReporter: banners and transition log lines
"""

from lifecycle.shutdown import ShutdownState, get_shutdown_state, reset_shutdown_state
from lifecycle.reporter import StartupReporter
from lifecycle.orchestrator import LifecycleOrchestrator
from lifecycle.hooks import ProcessHooks

__all__ = [
    "ShutdownState",
    "get_shutdown_state",
    "reset_shutdown_state",
    "StartupReporter",
    "LifecycleOrchestrator",
    "ProcessHooks",
]
