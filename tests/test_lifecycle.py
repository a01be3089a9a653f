# ============================================================================
# LIFECYCLE ORCHESTRATOR TESTS
# ============================================================================
# STATUS: Tests - Startup phases and guarded shutdown
# PURPOSE: Verify phase ordering, fatal vs non-fatal failures, stop guard
# CREATED: 19 OCT 2026
# ============================================================================
"""
Lifecycle Orchestrator Tests

Drives LifecycleOrchestrator with fake stores and an in-memory reference
repository. Every test injects its own ShutdownState so the process-wide
guard is never touched.

Run with:
    pytest tests/test_lifecycle.py -v
"""

import asyncio
import logging
import pytest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from core.contracts import LifecyclePhase, StopTrigger, StoreState
from core.errors import FilesystemError, StoreConnectionError
from health import HealthAggregator
from lifecycle import LifecycleOrchestrator, ShutdownState
from seeding import SeedCatalog, default_seed_sets

from fakes import FakeReferenceDB, FakeRelationalStore, FakeStore


# ============================================================================
# HELPERS
# ============================================================================

def _make_orchestrator(
    tmp_path,
    relational=None,
    document=None,
    upload_dir=None,
    **kwargs,
):
    relational = relational or FakeRelationalStore()
    document = document or FakeStore()
    catalog = SeedCatalog(relational, default_seed_sets())
    health = HealthAggregator(relational, document, probe_timeout=1.0)
    kwargs.setdefault("shutdown_state", ShutdownState())
    return LifecycleOrchestrator(
        relational,
        document,
        catalog,
        health,
        upload_dir=upload_dir or tmp_path / "uploads",
        **kwargs,
    )


def _phase_recorder():
    reporter = MagicMock()
    phases = []
    reporter.on_phase.side_effect = phases.append
    return reporter, phases


# ============================================================================
# CONSTRUCTION
# ============================================================================

class TestConstruction:

    def test_rejects_two_relational_stores(self, tmp_path):
        with pytest.raises(ValueError, match="document store"):
            _make_orchestrator(tmp_path, document=FakeRelationalStore(name="second"))

    def test_rejects_swapped_kinds(self, tmp_path):
        with pytest.raises(ValueError, match="relational store"):
            _make_orchestrator(tmp_path, relational=FakeStore(name="mongo"))

    def test_rejects_duplicate_names(self, tmp_path):
        with pytest.raises(ValueError, match="distinct"):
            _make_orchestrator(tmp_path, document=FakeStore(name="relational"))


# ============================================================================
# STARTUP
# ============================================================================

class TestStartup:

    def test_happy_path_reaches_serving(self, tmp_path):
        on_serving = MagicMock(return_value=None)
        orchestrator = _make_orchestrator(tmp_path, on_serving=on_serving)

        report = asyncio.run(orchestrator.start())

        assert orchestrator.phase == LifecyclePhase.SERVING
        assert orchestrator.is_serving
        on_serving.assert_called_once()
        assert report.overall_ok
        assert orchestrator.seed_result.success
        assert (tmp_path / "uploads").is_dir()

    def test_phases_in_order(self, tmp_path):
        reporter, phases = _phase_recorder()
        orchestrator = _make_orchestrator(tmp_path, reporter=reporter)

        asyncio.run(orchestrator.start())

        assert phases == [
            LifecyclePhase.PREPARING_FILESYSTEM,
            LifecyclePhase.CONNECTING_STORES,
            LifecyclePhase.SEEDING,
            LifecyclePhase.VERIFYING,
            LifecyclePhase.SERVING,
        ]
        reporter.on_starting.assert_called_once()
        reporter.on_serving.assert_called_once()

    def test_async_on_serving_awaited(self, tmp_path):
        on_serving = AsyncMock()
        orchestrator = _make_orchestrator(tmp_path, on_serving=on_serving)

        asyncio.run(orchestrator.start())

        on_serving.assert_awaited_once()

    def test_start_twice_rejected(self, tmp_path):
        orchestrator = _make_orchestrator(tmp_path)

        async def run():
            await orchestrator.start()
            await orchestrator.start()

        with pytest.raises(RuntimeError):
            asyncio.run(run())

    def test_seeds_reference_data_once(self, tmp_path):
        db = FakeReferenceDB()
        first = _make_orchestrator(tmp_path, relational=FakeRelationalStore(db=db))
        asyncio.run(first.start())

        second = _make_orchestrator(tmp_path, relational=FakeRelationalStore(db=db))
        asyncio.run(second.start())

        assert db.count("statuses") == 5
        assert db.count("countries") == 10
        assert second.seed_result.already_populated


# ============================================================================
# FILESYSTEM
# ============================================================================

class TestFilesystem:

    def test_existing_directory_not_recreated(self, tmp_path):
        upload_dir = tmp_path / "uploads"
        upload_dir.mkdir()
        orchestrator = _make_orchestrator(tmp_path, upload_dir=upload_dir)

        with patch.object(Path, "mkdir") as mkdir:
            asyncio.run(orchestrator.start())

        mkdir.assert_not_called()
        assert orchestrator.is_serving

    def test_nested_directory_created(self, tmp_path):
        upload_dir = tmp_path / "data" / "uploads"
        orchestrator = _make_orchestrator(tmp_path, upload_dir=upload_dir)

        asyncio.run(orchestrator.start())

        assert upload_dir.is_dir()

    def test_file_in_the_way_is_fatal(self, tmp_path):
        blocker = tmp_path / "uploads"
        blocker.write_text("not a directory")
        relational, document = FakeRelationalStore(), FakeStore()
        orchestrator = _make_orchestrator(
            tmp_path, relational=relational, document=document, upload_dir=blocker,
        )

        with pytest.raises(FilesystemError):
            asyncio.run(orchestrator.start())

        assert orchestrator.phase == LifecyclePhase.STOPPED
        assert orchestrator.exit_code == 1
        assert relational.open_calls == 0
        assert document.open_calls == 0

    def test_mkdir_failure_is_fatal(self, tmp_path):
        orchestrator = _make_orchestrator(tmp_path)

        with patch.object(Path, "mkdir", side_effect=PermissionError("read-only")):
            with pytest.raises(FilesystemError):
                asyncio.run(orchestrator.start())

        assert orchestrator.exit_code == 1


# ============================================================================
# CONNECTION FAILURES
# ============================================================================

class TestConnectionFailures:

    def test_connect_failure_aborts_startup(self, tmp_path):
        on_serving = MagicMock(return_value=None)
        relational = FakeRelationalStore()
        document = FakeStore(fail_open=OSError("server selection timeout"))
        orchestrator = _make_orchestrator(
            tmp_path, relational=relational, document=document, on_serving=on_serving,
        )

        with pytest.raises(StoreConnectionError) as exc_info:
            asyncio.run(orchestrator.start())

        assert exc_info.value.store == "document"
        assert orchestrator.phase == LifecyclePhase.STOPPED
        assert orchestrator.exit_code == 1
        on_serving.assert_not_called()
        assert relational.db.insert_statements == []

    def test_connected_store_released_on_abort(self, tmp_path):
        relational = FakeRelationalStore()
        document = FakeStore(fail_open=OSError("refused"))
        orchestrator = _make_orchestrator(tmp_path, relational=relational, document=document)

        with pytest.raises(StoreConnectionError):
            asyncio.run(orchestrator.start())

        assert relational.state == StoreState.CLOSED
        assert relational.close_calls == 1

    def test_both_connects_attempted(self, tmp_path):
        relational = FakeRelationalStore(fail_open=OSError("refused"))
        document = FakeStore(fail_open=OSError("refused"))
        orchestrator = _make_orchestrator(tmp_path, relational=relational, document=document)

        with pytest.raises(StoreConnectionError) as exc_info:
            asyncio.run(orchestrator.start())

        assert relational.open_calls == 1
        assert document.open_calls == 1
        assert exc_info.value.store is None

    def test_abort_trigger_recorded(self, tmp_path):
        state = ShutdownState()
        orchestrator = _make_orchestrator(
            tmp_path,
            document=FakeStore(fail_open=OSError("refused")),
            shutdown_state=state,
        )

        with pytest.raises(StoreConnectionError):
            asyncio.run(orchestrator.start())

        assert state.trigger == StopTrigger.STARTUP_FAILURE.value
        assert state.completed

    def test_on_serving_failure_aborts(self, tmp_path):
        on_serving = MagicMock(side_effect=OSError("address already in use"))
        orchestrator = _make_orchestrator(tmp_path, on_serving=on_serving)

        with pytest.raises(OSError):
            asyncio.run(orchestrator.start())

        assert orchestrator.phase == LifecyclePhase.STOPPED
        assert orchestrator.exit_code == 1


# ============================================================================
# NON-FATAL PHASES
# ============================================================================

class TestNonFatalPhases:

    def test_seed_failure_still_serves(self, tmp_path):
        db = FakeReferenceDB(fail_on={"genres"})
        on_serving = MagicMock(return_value=None)
        orchestrator = _make_orchestrator(
            tmp_path, relational=FakeRelationalStore(db=db), on_serving=on_serving,
        )

        asyncio.run(orchestrator.start())

        assert orchestrator.is_serving
        on_serving.assert_called_once()
        assert not orchestrator.seed_result.success
        assert db.count("statuses") == 0

    def test_zero_tables_still_serves(self, tmp_path):
        orchestrator = _make_orchestrator(tmp_path, relational=FakeRelationalStore(table_count=0))

        report = asyncio.run(orchestrator.start())

        assert orchestrator.is_serving
        assert report.reference_table_count == 0

    def test_unhealthy_verification_still_serves(self, tmp_path):
        document = FakeStore(fail_ping=OSError("stepdown"))
        orchestrator = _make_orchestrator(tmp_path, document=document)

        report = asyncio.run(orchestrator.start())

        assert orchestrator.is_serving
        assert not report.overall_ok


# ============================================================================
# SHUTDOWN
# ============================================================================

class TestShutdown:

    def test_clean_stop_exit_code_zero(self, tmp_path):
        relational, document = FakeRelationalStore(), FakeStore()
        on_stopping = AsyncMock()
        on_exit = MagicMock(return_value=None)
        orchestrator = _make_orchestrator(
            tmp_path, relational=relational, document=document,
            on_stopping=on_stopping, on_exit=on_exit,
        )

        async def run():
            await orchestrator.start()
            return await orchestrator.stop(StopTrigger.SIGTERM)

        assert asyncio.run(run()) == 0
        assert orchestrator.phase == LifecyclePhase.STOPPED
        assert relational.state == StoreState.CLOSED
        assert document.state == StoreState.CLOSED
        on_stopping.assert_awaited_once()
        on_exit.assert_called_once_with(0)
        assert orchestrator.close_outcomes == {"relational": None, "document": None}

    def test_concurrent_stops_close_each_store_once(self, tmp_path):
        relational, document = FakeRelationalStore(), FakeStore()
        on_stopping = MagicMock(return_value=None)
        orchestrator = _make_orchestrator(
            tmp_path, relational=relational, document=document, on_stopping=on_stopping,
        )

        async def run():
            await orchestrator.start()
            return await asyncio.gather(
                orchestrator.stop(StopTrigger.SIGTERM),
                orchestrator.stop(StopTrigger.SIGINT),
                orchestrator.stop(StopTrigger.UNCAUGHT_EXCEPTION),
            )

        results = asyncio.run(run())

        assert results[0] == 0
        assert results[1:] == [None, None]
        assert relational.close_calls == 1
        assert document.close_calls == 1
        on_stopping.assert_called_once()
        assert orchestrator.shutdown_state.trigger == "SIGTERM"

    def test_close_failure_exit_code_one(self, tmp_path):
        relational = FakeRelationalStore(fail_close=RuntimeError("pool worker stuck"))
        document = FakeStore()
        orchestrator = _make_orchestrator(tmp_path, relational=relational, document=document)

        async def run():
            await orchestrator.start()
            return await orchestrator.stop()

        assert asyncio.run(run()) == 1
        assert document.close_calls == 1
        assert document.state == StoreState.CLOSED
        assert relational.state == StoreState.CLOSED
        assert "pool worker stuck" in orchestrator.close_outcomes["relational"]
        assert orchestrator.close_outcomes["document"] is None

    def test_on_stopping_failure_still_closes_stores(self, tmp_path):
        relational, document = FakeRelationalStore(), FakeStore()
        orchestrator = _make_orchestrator(
            tmp_path, relational=relational, document=document,
            on_stopping=MagicMock(side_effect=RuntimeError("listener gone")),
        )

        async def run():
            await orchestrator.start()
            return await orchestrator.stop()

        assert asyncio.run(run()) == 0
        assert relational.close_calls == 1
        assert document.close_calls == 1

    def test_wait_stopped_returns_exit_code(self, tmp_path):
        orchestrator = _make_orchestrator(tmp_path)

        async def run():
            await orchestrator.start()
            waiter = asyncio.create_task(orchestrator.wait_stopped())
            await asyncio.sleep(0)
            assert not waiter.done()
            await orchestrator.stop()
            return await waiter

        assert asyncio.run(run()) == 0

    def test_stop_before_start(self, tmp_path):
        relational, document = FakeRelationalStore(), FakeStore()
        orchestrator = _make_orchestrator(tmp_path, relational=relational, document=document)

        assert asyncio.run(orchestrator.stop()) == 0
        assert orchestrator.phase == LifecyclePhase.STOPPED
        assert relational.close_calls == 0


# ============================================================================
# TRIGGERS
# ============================================================================

class TestRequestStop:

    def test_request_stop_runs_shutdown(self, tmp_path):
        orchestrator = _make_orchestrator(tmp_path)

        async def run():
            await orchestrator.start()
            orchestrator.request_stop(StopTrigger.SIGTERM)
            return await asyncio.wait_for(orchestrator.wait_stopped(), timeout=5)

        assert asyncio.run(run()) == 0
        assert orchestrator.shutdown_state.trigger == "SIGTERM"

    def test_request_stop_with_error_keeps_clean_exit_when_stores_close(self, tmp_path):
        orchestrator = _make_orchestrator(tmp_path)

        async def run():
            await orchestrator.start()
            orchestrator.request_stop(StopTrigger.UNCAUGHT_EXCEPTION, ValueError("boom"))
            return await asyncio.wait_for(orchestrator.wait_stopped(), timeout=5)

        assert asyncio.run(run()) == 0
        assert orchestrator.shutdown_state.trigger == "uncaught_exception"

    def test_repeated_requests_stop_once(self, tmp_path):
        relational, document = FakeRelationalStore(), FakeStore()
        orchestrator = _make_orchestrator(tmp_path, relational=relational, document=document)

        async def run():
            await orchestrator.start()
            orchestrator.request_stop(StopTrigger.SIGTERM)
            orchestrator.request_stop(StopTrigger.SIGINT)
            orchestrator.request_stop(StopTrigger.SIGTERM)
            return await asyncio.wait_for(orchestrator.wait_stopped(), timeout=5)

        asyncio.run(run())
        assert relational.close_calls == 1
        assert document.close_calls == 1

    def test_request_stop_before_start_ignored(self, tmp_path):
        orchestrator = _make_orchestrator(tmp_path)

        orchestrator.request_stop(StopTrigger.SIGTERM)

        assert orchestrator.phase == LifecyclePhase.IDLE
        assert not orchestrator.shutdown_state.in_progress

    def test_stop_during_connect_interrupts_startup(self, tmp_path):
        relational = FakeRelationalStore(open_delay=0.2)
        on_serving = MagicMock(return_value=None)
        orchestrator = _make_orchestrator(tmp_path, relational=relational, on_serving=on_serving)

        async def run():
            start = asyncio.create_task(orchestrator.start())
            await asyncio.sleep(0.05)
            await orchestrator.stop(StopTrigger.SIGINT)
            return await start

        assert asyncio.run(run()) is None
        on_serving.assert_not_called()
        assert orchestrator.phase == LifecyclePhase.STOPPED


# ============================================================================
# STOP LOGGING
# ============================================================================

class TestStopLogging:

    def _stop_records(self, tmp_path, caplog, trigger):
        orchestrator = _make_orchestrator(tmp_path)

        async def run():
            await orchestrator.start()
            return await orchestrator.stop(trigger)

        with caplog.at_level(logging.INFO, logger="lifecycle.orchestrator"):
            assert asyncio.run(run()) == 0
        return [r for r in caplog.records if "received, shutting down" in r.getMessage()]

    @pytest.mark.parametrize(
        "trigger", [StopTrigger.UNCAUGHT_EXCEPTION, StopTrigger.UNHANDLED_REJECTION]
    )
    def test_error_trigger_logs_error(self, tmp_path, caplog, trigger):
        records = self._stop_records(tmp_path, caplog, trigger)

        assert [r.levelno for r in records] == [logging.ERROR]

    @pytest.mark.parametrize("trigger", [StopTrigger.SIGTERM, StopTrigger.REQUESTED])
    def test_signal_trigger_logs_info(self, tmp_path, caplog, trigger):
        records = self._stop_records(tmp_path, caplog, trigger)

        assert [r.levelno for r in records] == [logging.INFO]
