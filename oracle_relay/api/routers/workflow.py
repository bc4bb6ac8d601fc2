"""Workflow API router composition for trigger and data preview endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from oracle_relay.adapters import FinalityTimeoutError, OracleRelayError
from oracle_relay.jobs import OracleWorkflowOrchestrator


def api_create_workflow_router(workflow_orchestrator: OracleWorkflowOrchestrator) -> APIRouter:
    """Create workflow router with trigger and source preview endpoints.

    Args:
        workflow_orchestrator: Job orchestrator for the fetch-then-submit workflow.

    Returns:
        APIRouter: Router exposing workflow APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if workflow_orchestrator is None:
        raise ValueError("workflow_orchestrator must not be None")

    router = APIRouter(tags=["workflow"])

    @router.post("/workflow/run")
    async def api_workflow_run_trigger(
        source_uri: str | None = Query(default=None),
        request_id: int | None = Query(default=None, ge=0),
    ) -> JSONResponse:
        """Trigger one workflow run, optionally overriding source and request id.

        Returns:
            JSONResponse: Run status with receipt summary. Overrides outside the
                allowlist are rejected with 403 before any fetch.

        Raises:
            RuntimeError: Raised when execution fails unexpectedly.
        """

        target_source_uri = (source_uri or "").strip() or workflow_orchestrator.config.source_uri
        if not workflow_orchestrator.job_source_allowed(target_source_uri):
            return _api_source_not_allowed_response(target_source_uri)
        target_request_id = request_id if request_id is not None else workflow_orchestrator.config.request_id

        try:
            execution_result = await workflow_orchestrator.job_execute_for(
                source_uri=target_source_uri,
                request_id=target_request_id,
            )
        except FinalityTimeoutError as error:
            payload = {
                "status": "error",
                "message": str(error),
                "operation_handle": error.operation_handle,
            }
            return JSONResponse(content=payload, status_code=status.HTTP_504_GATEWAY_TIMEOUT)
        except OracleRelayError as error:
            payload = {
                "status": "error",
                "message": str(error),
                "operation_handle": error.operation_handle,
            }
            return JSONResponse(content=payload, status_code=status.HTTP_502_BAD_GATEWAY)

        payload = {
            "job_name": execution_result.job_name,
            "status": execution_result.status,
            "receipt": execution_result.receipt.receipt_to_dict() if execution_result.receipt else None,
            "stage_timeline": execution_result.stage_timeline,
        }
        return JSONResponse(content=jsonable_encoder(payload), status_code=status.HTTP_200_OK)

    @router.get("/data")
    async def api_workflow_data_preview(source_uri: str | None = Query(default=None)) -> JSONResponse:
        """Fetch the configured source without submitting it.

        Returns:
            JSONResponse: Fetched payload, or 404 when no data is available.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        target_source_uri = (source_uri or "").strip() or workflow_orchestrator.config.source_uri
        if not workflow_orchestrator.job_source_allowed(target_source_uri):
            return _api_source_not_allowed_response(target_source_uri)
        fetched_payload = await workflow_orchestrator.fetcher.fetch(
            source_uri=target_source_uri,
            options=workflow_orchestrator.config.fetch_options,
        )
        if fetched_payload is None:
            payload = {"status": "error", "message": "no data available", "source_uri": target_source_uri}
            return JSONResponse(content=payload, status_code=status.HTTP_404_NOT_FOUND)

        payload = {"source_uri": target_source_uri, "data": fetched_payload}
        return JSONResponse(content=jsonable_encoder(payload), status_code=status.HTTP_200_OK)

    return router


def _api_source_not_allowed_response(source_uri: str) -> JSONResponse:
    payload = {"status": "error", "message": "source_uri is not allowed", "source_uri": source_uri}
    return JSONResponse(content=payload, status_code=status.HTTP_403_FORBIDDEN)
