# ============================================================================
# PROCESS HOOKS
# ============================================================================
# STATUS: Core - Signal and error channels into the orchestrator
# PURPOSE: Turn SIGTERM/SIGINT and uncaught errors into StopTrigger events
# CREATED: 19 OCT 2026
# ============================================================================
"""
Process Hooks

Installs the four external triggers and routes each one to
LifecycleOrchestrator.request_stop():

- SIGTERM, SIGINT               -> StopTrigger.SIGTERM / SIGINT
- sys.excepthook,
  threading.excepthook,
  event loop exceptions          -> StopTrigger.UNCAUGHT_EXCEPTION
- "Task exception was never
  retrieved" (unobserved task)   -> StopTrigger.UNHANDLED_REJECTION

Usage:
    hooks = ProcessHooks(orchestrator, asyncio.get_running_loop())
    hooks.install()
    ...
    hooks.uninstall()
"""

import asyncio
import logging
import signal
import sys
import threading
from typing import Any, Dict, List, Optional

from core.contracts import StopTrigger
from lifecycle.orchestrator import LifecycleOrchestrator

logger = logging.getLogger(__name__)

SIGNALS = {
    signal.SIGTERM: StopTrigger.SIGTERM,
    signal.SIGINT: StopTrigger.SIGINT,
}


def classify_loop_exception(context: Dict[str, Any]) -> StopTrigger:
    """Map an event loop exception context to a trigger."""
    message = context.get("message", "")
    if "never retrieved" in message:
        return StopTrigger.UNHANDLED_REJECTION
    return StopTrigger.UNCAUGHT_EXCEPTION


class ProcessHooks:
    """Installs and removes the orchestrator's process-level hooks."""

    def __init__(self, orchestrator: LifecycleOrchestrator, loop: asyncio.AbstractEventLoop):
        self.orchestrator = orchestrator
        self.loop = loop
        self._installed_signals: List[signal.Signals] = []
        self._fallback_handlers: Dict[signal.Signals, Any] = {}
        self._previous_excepthook = None
        self._previous_threading_excepthook = None
        self._previous_loop_handler = None
        self._installed = False

    def install(self) -> None:
        if self._installed:
            return

        for signum, trigger in SIGNALS.items():
            try:
                self.loop.add_signal_handler(signum, self.on_signal, trigger)
                self._installed_signals.append(signum)
            except (NotImplementedError, RuntimeError, ValueError) as e:
                # add_signal_handler is unavailable on Windows event loops
                logger.debug(f"Falling back to signal.signal for {signum.name}: {e}")
                try:
                    self._fallback_handlers[signum] = signal.signal(
                        signum, lambda s, f, t=trigger: self.on_signal(t)
                    )
                except (ValueError, OSError) as e:
                    logger.debug(f"Could not register {signum.name} handler: {e}")

        self._previous_excepthook = sys.excepthook
        sys.excepthook = self.on_uncaught_exception
        self._previous_threading_excepthook = threading.excepthook
        threading.excepthook = self.on_thread_exception
        self._previous_loop_handler = self.loop.get_exception_handler()
        self.loop.set_exception_handler(self.on_loop_exception)

        self._installed = True
        logger.debug("Process hooks installed")

    def uninstall(self) -> None:
        if not self._installed:
            return

        for signum in self._installed_signals:
            if not self.loop.is_closed():
                self.loop.remove_signal_handler(signum)
        for signum, previous in self._fallback_handlers.items():
            try:
                signal.signal(signum, previous)
            except (ValueError, OSError):
                logger.debug(f"Could not restore {signum.name} handler")
        self._installed_signals.clear()
        self._fallback_handlers.clear()

        sys.excepthook = self._previous_excepthook
        threading.excepthook = self._previous_threading_excepthook
        if not self.loop.is_closed():
            self.loop.set_exception_handler(self._previous_loop_handler)

        self._installed = False

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------

    def on_signal(self, trigger: StopTrigger) -> None:
        logger.info(f"{trigger.value} received, closing server...")
        self.orchestrator.request_stop(trigger)

    def on_uncaught_exception(self, exc_type, exc_value, exc_tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            self.orchestrator.request_stop(StopTrigger.SIGINT)
            return
        self.orchestrator.request_stop(StopTrigger.UNCAUGHT_EXCEPTION, exc_value)

    def on_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        thread_name = args.thread.name if args.thread else "unknown"
        logger.error(f"Uncaught exception in thread {thread_name}")
        self.orchestrator.request_stop(StopTrigger.UNCAUGHT_EXCEPTION, args.exc_value)

    def on_loop_exception(
        self,
        loop: asyncio.AbstractEventLoop,
        context: Dict[str, Any],
    ) -> None:
        trigger = classify_loop_exception(context)
        error: Optional[BaseException] = context.get("exception")
        if error is None:
            logger.error(f"{trigger.value}: {context.get('message', 'unknown error')}")
        self.orchestrator.request_stop(trigger, error)


__all__ = [
    "ProcessHooks",
    "classify_loop_exception",
]
