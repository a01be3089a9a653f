# ============================================================================
# INDIEC API - MAIN APPLICATION
# ============================================================================
# STATUS: Core - Process entry point
# PURPOSE: Wire config, stores, seeding and the HTTP server into one lifecycle
# CREATED: 19 OCT 2026
# ============================================================================
"""
INDIEC API Main Application

The lifecycle orchestrator owns the process:
1. Ensures the upload directory
2. Connects the relational and document stores
3. Seeds reference data
4. Verifies and starts the HTTP listener
5. On SIGTERM / SIGINT / uncaught errors: stops the listener, closes both
   stores, and exits with 0 (clean) or 1 (any failure)

Uvicorn's own signal handling is disabled; signals reach the orchestrator
through ProcessHooks so every trigger enters the same guarded shutdown.

Usage:
    python main.py
    indiec
"""

import asyncio
import contextlib
import sys
from typing import Optional

import uvicorn

from __version__ import __version__, BUILD_DATE, CODENAME
from api import create_app
from core.config import AppConfig, get_config
from core.contracts import StopTrigger
from core.errors import LifecycleError
from core.logging import ComponentType, configure_logging, get_logger
from health.aggregator import HealthAggregator
from lifecycle import LifecycleOrchestrator, ProcessHooks, StartupReporter
from seeding import SeedCatalog, default_seed_sets
from stores import DocumentStore, RelationalStore

logger = get_logger(__name__, ComponentType.LIFECYCLE)

SERVER_POLL_INTERVAL = 0.05


class ManagedServer(uvicorn.Server):
    """Uvicorn server that leaves signal handling to the orchestrator."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


def build_orchestrator(config: AppConfig) -> LifecycleOrchestrator:
    """Assemble stores, catalog, health aggregator and reporter."""
    relational = RelationalStore(config.relational)
    document = DocumentStore(config.document)

    catalog = SeedCatalog(relational, default_seed_sets(), gate=config.seeding.gate)
    health = HealthAggregator(
        relational,
        document,
        probe_timeout=config.health.probe_timeout_seconds,
    )

    return LifecycleOrchestrator(
        relational,
        document,
        catalog,
        health,
        upload_dir=config.server.upload_dir,
        reporter=StartupReporter(config.server),
    )


async def _run_server(server: uvicorn.Server) -> None:
    # uvicorn calls sys.exit(1) when it cannot bind
    try:
        await server.serve()
    except SystemExit as e:
        raise RuntimeError(f"HTTP server exited with code {e.code}") from e


async def serve(config: AppConfig) -> int:
    """
    Run the full lifecycle.

    Returns:
        Process exit code
    """
    orchestrator = build_orchestrator(config)
    app = create_app(orchestrator, config.server.cors_origins)

    server = ManagedServer(
        uvicorn.Config(
            app,
            host=config.server.host,
            port=config.server.port,
            lifespan="off",
            log_config=None,
        )
    )
    server_task: Optional[asyncio.Task] = None

    def on_server_done(task: asyncio.Task) -> None:
        if orchestrator.shutdown_state.in_progress:
            return
        error = None if task.cancelled() else task.exception()
        logger.warning("HTTP server stopped outside of shutdown")
        trigger = StopTrigger.UNCAUGHT_EXCEPTION if error else StopTrigger.REQUESTED
        orchestrator.request_stop(trigger, error)

    async def start_accepting() -> None:
        nonlocal server_task
        server_task = asyncio.create_task(_run_server(server))
        while not server.started:
            if server_task.done():
                server_task.result()
                # stop() already asked the listener to exit
                if orchestrator.shutdown_state.in_progress:
                    return
                raise RuntimeError("HTTP server stopped before accepting connections")
            await asyncio.sleep(SERVER_POLL_INTERVAL)
        server_task.add_done_callback(on_server_done)

    async def stop_accepting() -> None:
        server.should_exit = True
        if server_task is not None and not server_task.done():
            await server_task

    orchestrator.on_serving = start_accepting
    orchestrator.on_stopping = stop_accepting

    hooks = ProcessHooks(orchestrator, asyncio.get_running_loop())
    hooks.install()
    try:
        try:
            await orchestrator.start()
        except LifecycleError as e:
            logger.error(f"Startup failed: {e}")
            return orchestrator.exit_code or 1
        except Exception as e:
            logger.error(f"Could not start accepting connections: {e}")
            return orchestrator.exit_code or 1

        return await orchestrator.wait_stopped()
    finally:
        hooks.uninstall()


def main() -> None:
    config = get_config()
    configure_logging(level=config.log_level, json_output=config.log_json)
    logger.info(f"INDIEC API v{__version__} ({CODENAME}, Build {BUILD_DATE})")
    sys.exit(asyncio.run(serve(config)))


# ============================================================================
# MAIN ENTRY POINT
# ============================================================================

if __name__ == "__main__":
    main()
