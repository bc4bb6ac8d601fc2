"""Tests for the fetch-then-submit workflow orchestrator."""

from __future__ import annotations

from typing import Any, Sequence

import pytest

from oracle_relay.adapters import SubmissionEmitError, TransientFetchError
from oracle_relay.domain import FetchOptions, LedgerFinality
from oracle_relay.jobs import DataFetcher, OracleSubmitter, OracleWorkflowConfig, OracleWorkflowOrchestrator


class _StaticDataSource:
    """Data source double returning a fixed payload or raising a fixed error."""

    def __init__(self, payload: Any = None, error: Exception | None = None):
        self._payload = payload
        self._error = error
        self.calls = 0

    async def source_fetch(self, source_uri: str) -> Any:
        _ = source_uri
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self._payload


class _RecordingLedger:
    """Ledger double recording submissions."""

    def __init__(self, emit_error: Exception | None = None):
        self._emit_error = emit_error
        self.submit_calls: list[tuple[str, list[Any]]] = []

    def ledger_network_label(self) -> str:
        return "test:1"

    async def ledger_submit(self, operation_name: str, args: Sequence[Any]) -> str:
        self.submit_calls.append((operation_name, list(args)))
        if self._emit_error is not None:
            raise self._emit_error
        return "0xfeed"

    async def ledger_await_finality(self, operation_handle: str) -> LedgerFinality:
        _ = operation_handle
        return LedgerFinality(finality_marker="0xfinal", block_number=12)

    async def ledger_subscribe(self, channel_name: str, callback: Any, from_block: int | None = None) -> Any:
        raise NotImplementedError("subscriptions are not exercised here")

    async def ledger_read_resource(self, account_address: str, resource_type: str) -> Any:
        raise NotImplementedError


async def _no_sleep(_seconds: float) -> None:
    return None


def _build_orchestrator(data_source: _StaticDataSource, ledger: _RecordingLedger) -> OracleWorkflowOrchestrator:
    return OracleWorkflowOrchestrator(
        fetcher=DataFetcher(data_source=data_source, sleep_provider=_no_sleep),
        submitter=OracleSubmitter(ledger=ledger),
        config=OracleWorkflowConfig(
            source_uri="https://api.example.com/data",
            request_id=1,
            fetch_options=FetchOptions(max_retries=2, retry_delay_ms=1),
        ),
    )


@pytest.mark.asyncio
async def test_jobs_workflow_submits_fetched_payload_once() -> None:
    """Submit the fetched payload exactly once with the configured request id."""

    ledger = _RecordingLedger()
    orchestrator = _build_orchestrator(_StaticDataSource(payload={"value": 42}), ledger)

    result = await orchestrator.job_execute(job_name="oracle_workflow")

    assert result.status == "success"
    assert result.receipt is not None
    assert result.receipt.operation_handle == "0xfeed"
    assert result.receipt.finality_marker == "0xfinal"
    assert ledger.submit_calls == [("submitData", [1, {"value": 42}])]
    assert result.stage_timeline[0]["stage"] == "run"
    assert result.stage_timeline[-1]["details"] == {"status": "success"}


@pytest.mark.asyncio
async def test_jobs_workflow_skips_submission_without_data() -> None:
    """Return `no_data` and never submit when the fetcher yields the absence marker."""

    ledger = _RecordingLedger()
    data_source = _StaticDataSource(error=TransientFetchError("down"))
    orchestrator = _build_orchestrator(data_source, ledger)

    result = await orchestrator.job_execute(job_name="oracle_workflow")

    assert result.status == "no_data"
    assert result.receipt is None
    assert data_source.calls == 3
    assert ledger.submit_calls == []


@pytest.mark.asyncio
async def test_jobs_workflow_propagates_emit_failure_without_retry() -> None:
    """Propagate submission errors to the caller after a single submit call."""

    ledger = _RecordingLedger(emit_error=SubmissionEmitError("rejected by node"))
    data_source = _StaticDataSource(payload={"value": 42})
    orchestrator = _build_orchestrator(data_source, ledger)

    with pytest.raises(SubmissionEmitError):
        await orchestrator.job_execute_for(source_uri="https://api.example.com/other", request_id=5)

    assert data_source.calls == 1
    assert ledger.submit_calls == [("submitData", [5, {"value": 42}])]


@pytest.mark.asyncio
async def test_jobs_workflow_rejects_unknown_job_name() -> None:
    """Reject job names other than the oracle workflow."""

    orchestrator = _build_orchestrator(_StaticDataSource(payload=1), _RecordingLedger())

    assert orchestrator.job_supported_names() == ("oracle_workflow",)
    with pytest.raises(ValueError, match="unsupported job_name"):
        await orchestrator.job_execute(job_name="ingestion_run")
