"""Tests for runtime wiring, CLI workflow execution and logging setup."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pytest
import structlog
from structlog.testing import capture_logs

from oracle_relay.adapters import SubmissionEmitError
from oracle_relay.bootstrap import bootstrap_create_application, bootstrap_create_cache_store, bootstrap_create_runtime
from oracle_relay.cache import InMemoryCacheStore, NullCacheStore
from oracle_relay.config import AppSettings
from oracle_relay.db import NoDatabaseHealthService, SQLAlchemyCacheStore, SQLAlchemyDatabaseHealthService
from oracle_relay.jobs import OracleWorkflowConfig, WorkflowExecutionResult
from oracle_relay.main import MAIN_DEFAULT_LISTEN_SECONDS, main_build_argument_parser, main_run_workflow
from oracle_relay.observability import observability_configure_logging


def _build_settings(**overrides: object) -> AppSettings:
    values: dict[str, object] = {
        "ledger_network": "local",
        "ledger_private_key": "0x" + "11" * 32,
        "ledger_contract_address": "0x" + "22" * 20,
    }
    values.update(overrides)
    return AppSettings(_env_file=None, **values)


class _ScriptedOrchestrator:
    """Orchestrator double returning a fixed result or raising a fixed error."""

    def __init__(self, status: str = "success", error: Exception | None = None):
        self.config = OracleWorkflowConfig(source_uri="https://api.example.com/data", request_id=1)
        self._status = status
        self._error = error
        self.calls: list[tuple[str, int]] = []

    async def job_execute_for(self, source_uri: str, request_id: int) -> WorkflowExecutionResult:
        self.calls.append((source_uri, request_id))
        if self._error is not None:
            raise self._error
        return WorkflowExecutionResult(job_name="oracle_workflow", status=self._status)


class _RuntimeDouble:
    def __init__(self, orchestrator: _ScriptedOrchestrator):
        self.workflow_orchestrator = orchestrator
        self.closed = False

    async def runtime_close(self) -> None:
        self.closed = True


@pytest.mark.parametrize(
    ("cache_backend", "cache_type"),
    [("none", NullCacheStore), ("memory", InMemoryCacheStore)],
)
def test_bootstrap_selects_in_process_cache_store(cache_backend: str, cache_type: type) -> None:
    """Select in-process cache stores without a database health target.

    Args:
        cache_backend: Configured backend name.
        cache_type: Expected store type.

    Returns:
        None: Assertions validate selected collaborators.

    Raises:
        AssertionError: Raised when selection differs.
    """

    cache_store, db_health_service = bootstrap_create_cache_store(_build_settings(cache_backend=cache_backend))

    assert isinstance(cache_store, cache_type)
    assert isinstance(db_health_service, NoDatabaseHealthService)
    assert db_health_service.db_check_health().status == "disabled"


def test_bootstrap_selects_database_cache_store(tmp_path: Path) -> None:
    """Create the SQL cache schema for sqlite and return a usable store."""

    settings = _build_settings(cache_backend="database", database_url=f"sqlite:///{tmp_path / 'cache.db'}")

    cache_store, db_health_service = bootstrap_create_cache_store(settings)
    cache_store.cache_set("https://api.example.com/data", {"value": 1})

    assert isinstance(cache_store, SQLAlchemyCacheStore)
    assert isinstance(db_health_service, SQLAlchemyDatabaseHealthService)
    assert cache_store.cache_get("https://api.example.com/data") == {"value": 1}


def test_bootstrap_wires_runtime_from_settings() -> None:
    """Propagate settings into fetch options, submitter and ledger label."""

    settings = _build_settings(
        fetch_max_retries=5,
        fetch_retry_delay_ms=250,
        fetch_use_cache=True,
        request_id=8,
        source_uri_allowlist="https://prices.example.com/eth",
    )

    runtime = bootstrap_create_runtime(settings=settings)

    assert runtime.ledger.ledger_network_label() == "local:31337"
    assert runtime.workflow_orchestrator.config.request_id == 8
    assert runtime.workflow_orchestrator.config.fetch_options.max_retries == 5
    assert runtime.workflow_orchestrator.config.fetch_options.retry_delay_ms == 250
    assert runtime.workflow_orchestrator.config.fetch_options.use_cache is True
    assert runtime.workflow_orchestrator.job_source_allowed("https://prices.example.com/eth")
    assert not runtime.workflow_orchestrator.job_source_allowed("http://127.0.0.1:8545")
    assert bootstrap_create_application(runtime=runtime).title == "Oracle Relay"


@pytest.mark.asyncio
async def test_main_run_workflow_returns_zero_on_success() -> None:
    """Return exit code 0 and close the runtime after a successful run."""

    orchestrator = _ScriptedOrchestrator()
    runtime = _RuntimeDouble(orchestrator)

    exit_code = await main_run_workflow(runtime=runtime, source_uri=None, request_id=4)

    assert exit_code == 0
    assert orchestrator.calls == [("https://api.example.com/data", 4)]
    assert runtime.closed


@pytest.mark.asyncio
async def test_main_run_workflow_returns_one_without_data() -> None:
    """Return exit code 1 when no data was fetched."""

    runtime = _RuntimeDouble(_ScriptedOrchestrator(status="no_data"))

    assert await main_run_workflow(runtime=runtime) == 1
    assert runtime.closed


@pytest.mark.asyncio
async def test_main_run_workflow_logs_submission_failure() -> None:
    """Log the failure with its type and return exit code 1."""

    runtime = _RuntimeDouble(
        _ScriptedOrchestrator(error=SubmissionEmitError("nonce too low", operation_handle=None))
    )

    with capture_logs() as captured_logs:
        exit_code = await main_run_workflow(runtime=runtime, source_uri="https://prices.example.com/eth")

    assert exit_code == 1
    assert runtime.closed
    failure_entries = [entry for entry in captured_logs if entry["event"] == "workflow submission failed"]
    assert failure_entries[0]["error_type"] == "SubmissionEmitError"
    assert runtime.workflow_orchestrator.calls == [("https://prices.example.com/eth", 1)]


def test_main_argument_parser_keeps_listener_alive_by_default() -> None:
    """Default `workflow-run` to a positive listening window and accept zero to exit at once."""

    argument_parser = main_build_argument_parser()

    default_arguments = argument_parser.parse_args(["workflow-run"])
    immediate_arguments = argument_parser.parse_args(["workflow-run", "--listen-seconds", "0"])

    assert MAIN_DEFAULT_LISTEN_SECONDS > 0
    assert default_arguments.listen_seconds == MAIN_DEFAULT_LISTEN_SECONDS
    assert immediate_arguments.listen_seconds == 0.0
    assert "--listen-seconds" in argument_parser.format_help()


@pytest.mark.asyncio
async def test_main_run_workflow_listens_before_closing_runtime(monkeypatch: pytest.MonkeyPatch) -> None:
    """Wait for the listening window after success and only then close the runtime."""

    runtime = _RuntimeDouble(_ScriptedOrchestrator())
    observed_sleeps: list[tuple[float, bool]] = []

    async def _record_sleep(seconds: float) -> None:
        observed_sleeps.append((seconds, runtime.closed))

    monkeypatch.setattr("oracle_relay.main.asyncio.sleep", _record_sleep)

    exit_code = await main_run_workflow(runtime=runtime, listen_seconds=MAIN_DEFAULT_LISTEN_SECONDS)

    assert exit_code == 0
    assert observed_sleeps == [(MAIN_DEFAULT_LISTEN_SECONDS, False)]
    assert runtime.closed


@pytest.mark.asyncio
async def test_main_run_workflow_skips_listening_without_data(monkeypatch: pytest.MonkeyPatch) -> None:
    """Close immediately when the workflow produced no submission."""

    runtime = _RuntimeDouble(_ScriptedOrchestrator(status="no_data"))
    observed_sleeps: list[float] = []

    async def _record_sleep(seconds: float) -> None:
        observed_sleeps.append(seconds)

    monkeypatch.setattr("oracle_relay.main.asyncio.sleep", _record_sleep)

    assert await main_run_workflow(runtime=runtime, listen_seconds=5.0) == 1
    assert observed_sleeps == []
    assert runtime.closed


def test_observability_configure_logging_rejects_unknown_format() -> None:
    """Reject renderer names other than pretty and json."""

    with pytest.raises(ValueError, match="fmt"):
        observability_configure_logging(fmt="xml")


def test_observability_configure_logging_enables_structlog() -> None:
    """Configure structlog globally for the json renderer."""

    root_logger = logging.getLogger()
    original_handlers = list(root_logger.handlers)
    original_level = root_logger.level
    try:
        observability_configure_logging(level="DEBUG", fmt="json")
        assert structlog.is_configured()
        assert root_logger.level == logging.DEBUG
        processors: list[Any] = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
    finally:
        structlog.reset_defaults()
        root_logger.handlers[:] = original_handlers
        root_logger.setLevel(original_level)

