# ============================================================================
# LIFECYCLE ORCHESTRATOR
# ============================================================================
# STATUS: Core - Startup and shutdown sequencing
# PURPOSE: Drive both stores through startup phases and a guarded shutdown
# CREATED: 19 OCT 2026
# ============================================================================
"""
Lifecycle Orchestrator

Startup (strictly sequential):
1. PREPARING_FILESYSTEM - ensure the upload directory       (fatal)
2. CONNECTING_STORES    - connect both stores, joined        (fatal)
3. SEEDING              - SeedCatalog.populate()             (non-fatal)
4. VERIFYING            - HealthAggregator.report()          (non-fatal)
5. SERVING              - invoke the start-accepting callback

Shutdown:
- stop() is guarded by ShutdownState: the first trigger wins, every other
  trigger returns immediately.
- Both stores are closed concurrently and joined; one store's failure
  never prevents the other's close.
- Exit code 0 when both closed cleanly, 1 otherwise.

Signals, uncaught errors and unobserved task failures are explicit
StopTrigger events handed to request_stop() (see lifecycle/hooks.py), so
they all enter through the same guarded path.

Usage:
    orchestrator = LifecycleOrchestrator(relational, document, catalog, health,
                                         upload_dir="./uploads")
    await orchestrator.start()
    exit_code = await orchestrator.wait_stopped()
"""

import asyncio
import inspect
import logging
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Union

from core.contracts import LifecyclePhase, StopTrigger, StoreKind
from core.errors import (
    FilesystemError,
    LifecycleError,
    SeedError,
    StoreConnectionError,
    VerificationWarning,
)
from core.logging import log_checkpoint, log_context
from health.aggregator import HealthAggregator
from health.core import HealthReport
from lifecycle.reporter import StartupReporter
from lifecycle.shutdown import ShutdownState, get_shutdown_state
from seeding.catalog import SeedCatalog, SeedResult
from stores.base import StoreHandle
from stores.relational import RelationalStore

logger = logging.getLogger(__name__)

Hook = Callable[[], Union[None, Awaitable[None]]]


async def _call_hook(hook: Optional[Hook]) -> None:
    if hook is None:
        return
    result = hook()
    if inspect.isawaitable(result):
        await result


class LifecycleOrchestrator:
    """
    Owns both store handles and the process lifecycle.

    Args:
        relational: Relational store handle
        document: Document store handle
        catalog: Reference data seed catalog
        health: Health aggregator over both handles
        upload_dir: Directory ensured before connecting
        reporter: Banner / transition output (optional)
        shutdown_state: Shutdown guard (defaults to the process-wide one)
        on_serving: Called once startup reaches SERVING (start accepting)
        on_stopping: Called first on shutdown (stop accepting)
        on_exit: Called with the exit code once STOPPED

    Raises:
        ValueError: handles are not one relational and one document store
        with distinct names
    """

    def __init__(
        self,
        relational: RelationalStore,
        document: StoreHandle,
        catalog: SeedCatalog,
        health: HealthAggregator,
        upload_dir: Union[str, Path] = "./uploads",
        reporter: Optional[StartupReporter] = None,
        shutdown_state: Optional[ShutdownState] = None,
        on_serving: Optional[Hook] = None,
        on_stopping: Optional[Hook] = None,
        on_exit: Optional[Callable[[int], None]] = None,
    ):
        if relational.kind is not StoreKind.RELATIONAL:
            raise ValueError(f"Expected a relational store, got {relational.kind.value}")
        if document.kind is not StoreKind.DOCUMENT:
            raise ValueError(f"Expected a document store, got {document.kind.value}")
        if relational.name == document.name:
            raise ValueError(f"Store names must be distinct, both are {relational.name!r}")

        self.relational = relational
        self.document = document
        self.catalog = catalog
        self.health_aggregator = health
        self.upload_dir = Path(upload_dir)
        self.reporter = reporter
        self.on_serving = on_serving
        self.on_stopping = on_stopping
        self.on_exit = on_exit

        self._shutdown = shutdown_state or get_shutdown_state()
        self._phase = LifecyclePhase.IDLE
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stopped = asyncio.Event()
        self._stop_task: Optional[asyncio.Task] = None

        # Outcomes
        self.exit_code: Optional[int] = None
        self.seed_result: Optional[SeedResult] = None
        self.startup_report: Optional[HealthReport] = None
        self.close_outcomes: Dict[str, Optional[str]] = {}

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def phase(self) -> LifecyclePhase:
        return self._phase

    @property
    def stores(self) -> List[StoreHandle]:
        return [self.relational, self.document]

    @property
    def is_serving(self) -> bool:
        return self._phase is LifecyclePhase.SERVING

    @property
    def shutdown_state(self) -> ShutdownState:
        return self._shutdown

    def _transition(self, phase: LifecyclePhase) -> None:
        if not self._phase.can_transition_to(phase):
            raise RuntimeError(f"Invalid lifecycle transition {self._phase.value} -> {phase.value}")
        logger.debug(f"Lifecycle {self._phase.value} -> {phase.value}")
        self._phase = phase
        log_checkpoint(f"phase_{phase.value}")
        if self.reporter:
            self.reporter.on_phase(phase)

    def _advance(self, phase: LifecyclePhase) -> bool:
        """Enter the next startup phase unless shutdown already took over."""
        if self._shutdown.in_progress:
            logger.info(f"Shutdown in progress, not entering {phase.value}")
            return False
        self._transition(phase)
        return True

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> Optional[HealthReport]:
        """
        Run the startup phases.

        Returns:
            The verification report, or None if shutdown interrupted startup

        Raises:
            FilesystemError: upload directory could not be created
            StoreConnectionError: a store could not be connected
            RuntimeError: start() called twice
        """
        if self._phase is not LifecyclePhase.IDLE:
            raise RuntimeError(f"start() called in phase {self._phase.value}")

        self._loop = asyncio.get_running_loop()
        if self.reporter:
            self.reporter.on_starting()

        try:
            if not self._advance(LifecyclePhase.PREPARING_FILESYSTEM):
                return None
            with log_context(phase=self._phase.value):
                self._prepare_filesystem()

            if not self._advance(LifecyclePhase.CONNECTING_STORES):
                return None
            with log_context(phase=self._phase.value):
                await self._connect_stores()
        except LifecycleError as e:
            if self._shutdown.in_progress:
                logger.info(f"Startup interrupted by shutdown: {e}")
                return None
            await self._abort(e)
            raise

        if not self._advance(LifecyclePhase.SEEDING):
            return None
        with log_context(phase=self._phase.value):
            self.seed_result = await self._seed()

        if not self._advance(LifecyclePhase.VERIFYING):
            return None
        with log_context(phase=self._phase.value):
            self.startup_report = await self._verify()

        if not self._advance(LifecyclePhase.SERVING):
            return None
        try:
            await _call_hook(self.on_serving)
        except Exception as e:
            await self._abort(e)
            raise

        if self.reporter:
            self.reporter.on_serving(self.startup_report)
        return self.startup_report

    def _prepare_filesystem(self) -> None:
        """Create the upload directory unless it already exists."""
        path = self.upload_dir
        if path.is_dir():
            logger.info(f"Upload directory verified: {path}")
            return
        if path.exists():
            raise FilesystemError(f"Upload path exists but is not a directory: {path}")
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(f"Could not create upload directory {path}: {e}") from e
        logger.info(f"Upload directory created: {path}")

    async def _connect_stores(self) -> None:
        """Connect both stores concurrently; wait for both to settle."""
        results = await asyncio.gather(
            *(store.connect() for store in self.stores),
            return_exceptions=True,
        )

        failures = [
            (store, result)
            for store, result in zip(self.stores, results)
            if isinstance(result, BaseException)
        ]
        for store, error in failures:
            logger.error(f"Could not connect {store.name} store: {error}")

        if failures:
            names = ", ".join(store.name for store, _ in failures)
            raise StoreConnectionError(
                f"Store connection failed: {names}",
                store=failures[0][0].name if len(failures) == 1 else None,
            ) from failures[0][1]

        logger.info("All stores connected")

    async def _seed(self) -> Optional[SeedResult]:
        try:
            result = await self.catalog.populate()
        except Exception as e:
            error = e if isinstance(e, SeedError) else SeedError(str(e))
            logger.error(f"Reference data seeding failed, continuing: {error.message}")
            return None
        if not result.success:
            logger.warning(f"Reference data seeding failed, continuing: {'; '.join(result.errors)}")
        return result

    async def _verify(self) -> HealthReport:
        report = await self.health_aggregator.report()
        logger.info(f"Relational store contains {report.reference_table_count} tables")

        if report.reference_table_count == 0:
            warning = VerificationWarning("No tables found in the relational store")
            logger.warning(f"{type(warning).__name__}: {warning}")
        if not report.overall_ok:
            logger.warning(f"Stores not healthy after startup: {', '.join(report.disconnected)}")
        else:
            logger.info("System verified")
        return report

    async def _abort(self, error: BaseException) -> None:
        """Fatal startup failure: release whatever connected, stop with exit code 1."""
        if self.reporter:
            self.reporter.on_startup_failed(error)
        if not self._shutdown.try_begin(StopTrigger.STARTUP_FAILURE.value):
            return
        with log_context(trigger=StopTrigger.STARTUP_FAILURE.value):
            await self._close_stores()
            self._finish(1)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self, trigger: StopTrigger = StopTrigger.REQUESTED) -> Optional[int]:
        """
        Graceful shutdown. Idempotent.

        Returns:
            The exit code, or None if another trigger already owns shutdown
        """
        if not self._shutdown.try_begin(trigger.value):
            logger.debug(f"Shutdown already in progress, ignoring {trigger.value}")
            return None

        with log_context(trigger=trigger.value):
            level = logging.ERROR if trigger.is_error else logging.INFO
            logger.log(level, f"{trigger.value} received, shutting down")
            self._transition(LifecyclePhase.SHUTTING_DOWN)

            try:
                await _call_hook(self.on_stopping)
            except Exception as e:
                logger.error(f"Error stopping listener: {e}")

            clean = await self._close_stores()
            self._finish(0 if clean else 1)

        return self.exit_code

    async def _close_stores(self) -> bool:
        """Close both stores concurrently; log each outcome on its own."""
        results = await asyncio.gather(
            *(store.close() for store in self.stores),
            return_exceptions=True,
        )

        clean = True
        for store, result in zip(self.stores, results):
            if isinstance(result, BaseException):
                clean = False
                self.close_outcomes[store.name] = str(result)
                logger.error(f"Error closing {store.name} store: {result}")
            else:
                self.close_outcomes[store.name] = None
                logger.info(f"{store.name} store connection closed")
        return clean

    def _finish(self, exit_code: int) -> None:
        self._transition(LifecyclePhase.STOPPED)
        self.exit_code = exit_code
        self._shutdown.mark_completed()
        if self.reporter:
            self.reporter.on_stopped(self.close_outcomes, exit_code)
        self._stopped.set()
        if self.on_exit:
            self.on_exit(exit_code)

    def request_stop(self, trigger: StopTrigger, error: Optional[BaseException] = None) -> None:
        """
        Feed a stop event from a signal or error hook.

        Safe to call from any thread or from a signal handler: the actual
        stop() is scheduled on the orchestrator's event loop.
        """
        if error is not None:
            logger.error(f"{trigger.value}: {error!r}", exc_info=error)

        if self._shutdown.in_progress:
            logger.debug(f"Shutdown already in progress, ignoring {trigger.value}")
            return

        loop = self._loop
        if loop is None or loop.is_closed():
            logger.warning(f"No running event loop to handle {trigger.value}")
            return

        loop.call_soon_threadsafe(self._spawn_stop, trigger)

    def _spawn_stop(self, trigger: StopTrigger) -> None:
        if self._shutdown.in_progress:
            return
        self._stop_task = asyncio.ensure_future(self.stop(trigger))

    async def wait_stopped(self) -> int:
        """Block until the orchestrator reaches STOPPED; return the exit code."""
        await self._stopped.wait()
        return self.exit_code if self.exit_code is not None else 1

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def health(self) -> HealthReport:
        """Fresh health report. Never raises."""
        return await self.health_aggregator.report()


__all__ = ["LifecycleOrchestrator"]
