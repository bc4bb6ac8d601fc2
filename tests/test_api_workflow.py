"""Tests for workflow and ledger API endpoints."""

from __future__ import annotations

from typing import Any, Sequence

from fastapi.testclient import TestClient

from oracle_relay.adapters import (
    FinalityTimeoutError,
    LedgerReadError,
    SubmissionEmitError,
    TransientFetchError,
)
from oracle_relay.api.application import create_api_application
from oracle_relay.config import AppSettings
from oracle_relay.db import NoDatabaseHealthService
from oracle_relay.domain import CompletionEvent, FetchOptions, LedgerFinality
from oracle_relay.jobs import (
    CompletionEventLog,
    DataFetcher,
    OracleSubmitter,
    OracleWorkflowConfig,
    OracleWorkflowOrchestrator,
)

ACCOUNT_ADDRESS = "0x" + "33" * 20


class _Subscription:
    def __init__(self) -> None:
        self.active = True

    def subscription_is_active(self) -> bool:
        return self.active

    async def unsubscribe(self) -> None:
        self.active = False


class _ApiLedger:
    """Ledger double with configurable failures for API tests."""

    def __init__(
        self,
        emit_error: Exception | None = None,
        finality_error: Exception | None = None,
        read_error: Exception | None = None,
    ):
        self._emit_error = emit_error
        self._finality_error = finality_error
        self._read_error = read_error
        self.submit_calls: list[list[Any]] = []

    def ledger_network_label(self) -> str:
        return "local:31337"

    async def ledger_submit(self, operation_name: str, args: Sequence[Any]) -> str:
        _ = operation_name
        self.submit_calls.append(list(args))
        if self._emit_error is not None:
            raise self._emit_error
        return "0xfeed"

    async def ledger_await_finality(self, operation_handle: str) -> LedgerFinality:
        if self._finality_error is not None:
            raise self._finality_error
        _ = operation_handle
        return LedgerFinality(finality_marker="0xfinal", block_number=55)

    async def ledger_subscribe(self, channel_name: str, callback: Any, from_block: int | None = None) -> _Subscription:
        _ = (channel_name, callback, from_block)
        return _Subscription()

    async def ledger_read_resource(self, account_address: str, resource_type: str) -> Any:
        if self._read_error is not None:
            raise self._read_error
        return [1, "https://api.example.com/data", "{}", account_address == ACCOUNT_ADDRESS and resource_type == "dataRequest"]


class _ApiDataSource:
    def __init__(self, payload: Any = None, error: Exception | None = None):
        self._payload = payload
        self._error = error
        self.calls: list[str] = []

    async def source_fetch(self, source_uri: str) -> Any:
        self.calls.append(source_uri)
        if self._error is not None:
            raise self._error
        return self._payload


async def _no_sleep(_seconds: float) -> None:
    return None


def _build_client(
    ledger: _ApiLedger,
    data_source: _ApiDataSource,
    event_log: CompletionEventLog | None = None,
) -> TestClient:
    settings = AppSettings(
        _env_file=None,
        environment_name="test",
        ledger_rpc_url="http://localhost:8545",
        ledger_private_key="0x" + "11" * 32,
        ledger_contract_address="0x" + "22" * 20,
    )
    orchestrator = OracleWorkflowOrchestrator(
        fetcher=DataFetcher(data_source=data_source, sleep_provider=_no_sleep),
        submitter=OracleSubmitter(ledger=ledger),
        config=OracleWorkflowConfig(
            source_uri="https://api.example.com/data",
            request_id=1,
            fetch_options=FetchOptions(max_retries=1, retry_delay_ms=0),
            allowed_source_uris=("https://prices.example.com/eth",),
        ),
    )
    application = create_api_application(
        settings,
        NoDatabaseHealthService(),
        orchestrator,
        ledger,
        event_log or CompletionEventLog(),
    )
    return TestClient(application)


def test_api_workflow_run_returns_receipt() -> None:
    """Run the workflow and return a listening receipt with its timeline."""

    ledger = _ApiLedger()
    client = _build_client(ledger, _ApiDataSource(payload={"value": 42}))

    response = client.post("/workflow/run")

    assert response.status_code == 200
    body = response.json()
    assert body["job_name"] == "oracle_workflow"
    assert body["status"] == "success"
    assert body["receipt"] == {
        "request_id": 1,
        "operation_handle": "0xfeed",
        "finality_marker": "0xfinal",
        "block_number": 55,
        "state": "listening",
        "listening": True,
    }
    assert [stage_event["stage"] for stage_event in body["stage_timeline"]][:3] == ["run", "fetch", "fetch"]
    assert ledger.submit_calls == [[1, {"value": 42}]]


def test_api_workflow_run_applies_query_overrides() -> None:
    """Use source and request id overrides from the query string."""

    ledger = _ApiLedger()
    data_source = _ApiDataSource(payload="42.17")
    client = _build_client(ledger, data_source)

    response = client.post("/workflow/run", params={"source_uri": "https://prices.example.com/eth", "request_id": 9})

    assert response.status_code == 200
    assert data_source.calls == ["https://prices.example.com/eth"]
    assert ledger.submit_calls == [[9, "42.17"]]


def test_api_workflow_run_rejects_source_outside_allowlist() -> None:
    """Return 403 for unlisted source overrides without fetching or submitting."""

    ledger = _ApiLedger()
    data_source = _ApiDataSource(payload={"value": 42})
    client = _build_client(ledger, data_source)

    response = client.post("/workflow/run", params={"source_uri": "http://169.254.169.254/latest/meta-data/"})

    assert response.status_code == 403
    assert response.json() == {
        "status": "error",
        "message": "source_uri is not allowed",
        "source_uri": "http://169.254.169.254/latest/meta-data/",
    }
    assert data_source.calls == []
    assert ledger.submit_calls == []


def test_api_data_preview_rejects_source_outside_allowlist() -> None:
    """Refuse to preview internal addresses that are not configured sources."""

    data_source = _ApiDataSource(payload={"value": 42})
    client = _build_client(_ApiLedger(), data_source)

    response = client.get("/data", params={"source_uri": "http://localhost:8545"})

    assert response.status_code == 403
    assert response.json()["source_uri"] == "http://localhost:8545"
    assert data_source.calls == []


def test_api_workflow_run_reports_no_data() -> None:
    """Return `no_data` without a receipt when the source never answers."""

    ledger = _ApiLedger()
    client = _build_client(ledger, _ApiDataSource(error=TransientFetchError("down")))

    response = client.post("/workflow/run")

    assert response.status_code == 200
    assert response.json()["status"] == "no_data"
    assert response.json()["receipt"] is None
    assert ledger.submit_calls == []


def test_api_workflow_run_maps_emit_failure_to_bad_gateway() -> None:
    """Return 502 when the operation cannot be submitted."""

    client = _build_client(
        _ApiLedger(emit_error=SubmissionEmitError("insufficient funds")),
        _ApiDataSource(payload={"value": 42}),
    )

    response = client.post("/workflow/run")

    assert response.status_code == 502
    assert response.json()["status"] == "error"
    assert "insufficient funds" in response.json()["message"]


def test_api_workflow_run_maps_finality_timeout_to_gateway_timeout() -> None:
    """Return 504 with the operation handle when finality times out."""

    client = _build_client(
        _ApiLedger(finality_error=FinalityTimeoutError("finality timed out", operation_handle="0xfeed")),
        _ApiDataSource(payload={"value": 42}),
    )

    response = client.post("/workflow/run")

    assert response.status_code == 504
    assert response.json()["operation_handle"] == "0xfeed"


def test_api_workflow_run_rejects_negative_request_id() -> None:
    """Reject negative request id overrides with a validation error."""

    client = _build_client(_ApiLedger(), _ApiDataSource(payload=1))

    response = client.post("/workflow/run", params={"request_id": -1})

    assert response.status_code == 422


def test_api_data_preview_returns_payload_without_submitting() -> None:
    """Fetch and return source data without touching the ledger."""

    ledger = _ApiLedger()
    client = _build_client(ledger, _ApiDataSource(payload={"value": 42}))

    response = client.get("/data")

    assert response.status_code == 200
    assert response.json() == {"source_uri": "https://api.example.com/data", "data": {"value": 42}}
    assert ledger.submit_calls == []


def test_api_data_preview_returns_not_found_without_data() -> None:
    """Return 404 when the fetcher yields no data."""

    client = _build_client(_ApiLedger(), _ApiDataSource(error=TransientFetchError("down")))

    response = client.get("/data")

    assert response.status_code == 404
    assert response.json()["message"] == "no data available"


def test_api_ledger_reads_resource() -> None:
    """Return the decoded resource value for an account."""

    client = _build_client(_ApiLedger(), _ApiDataSource(payload=1))

    response = client.get(f"/ledger/resources/{ACCOUNT_ADDRESS}/dataRequest")

    assert response.status_code == 200
    assert response.json() == {
        "account_address": ACCOUNT_ADDRESS,
        "resource_type": "dataRequest",
        "data": [1, "https://api.example.com/data", "{}", True],
    }


def test_api_ledger_maps_read_failure_to_bad_gateway() -> None:
    """Return 502 when the resource cannot be read."""

    client = _build_client(_ApiLedger(read_error=LedgerReadError("bad address")), _ApiDataSource(payload=1))

    response = client.get("/ledger/resources/not-an-address/dataRequest")

    assert response.status_code == 502
    assert response.json()["message"] == "bad address"


def test_api_ledger_lists_recent_events_newest_first() -> None:
    """List recorded completion events newest first, bounded by limit."""

    event_log = CompletionEventLog()
    for request_id in (1, 2, 3):
        event_log.completion_record(
            CompletionEvent(
                channel_name="DataSubmitted",
                request_id=request_id,
                operation_handle=f"0x{request_id:02x}",
                block_number=100 + request_id,
                payload={"requestId": request_id},
            )
        )
    client = _build_client(_ApiLedger(), _ApiDataSource(payload=1), event_log=event_log)

    response = client.get("/ledger/events", params={"limit": 2})

    assert response.status_code == 200
    assert response.json()["count"] == 2
    assert [item["request_id"] for item in response.json()["items"]] == [3, 2]
