"""Ledger API router composition for resource reads and observed events."""

from __future__ import annotations

from fastapi import APIRouter, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from oracle_relay.adapters import LedgerPort, LedgerReadError
from oracle_relay.jobs import CompletionEventLog


def api_create_ledger_router(ledger: LedgerPort, event_log: CompletionEventLog) -> APIRouter:
    """Create ledger router for presentation-layer reads.

    Args:
        ledger: Ledger port used for resource reads.
        event_log: Log of correlated completion events.

    Returns:
        APIRouter: Router exposing ledger APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if ledger is None:
        raise ValueError("ledger must not be None")
    if event_log is None:
        raise ValueError("event_log must not be None")

    router = APIRouter(prefix="/ledger", tags=["ledger"])

    @router.get("/resources/{account_address}/{resource_type}")
    async def api_ledger_read_resource(account_address: str, resource_type: str) -> JSONResponse:
        """Read one ledger resource for an account.

        Returns:
            JSONResponse: Resource payload, or 502 when the read fails.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        try:
            resource_data = await ledger.ledger_read_resource(
                account_address=account_address,
                resource_type=resource_type,
            )
        except LedgerReadError as error:
            payload = {"status": "error", "message": str(error)}
            return JSONResponse(content=payload, status_code=status.HTTP_502_BAD_GATEWAY)

        payload = {
            "account_address": account_address,
            "resource_type": resource_type,
            "data": resource_data,
        }
        return JSONResponse(content=jsonable_encoder(payload), status_code=status.HTTP_200_OK)

    @router.get("/events")
    def api_ledger_list_events(limit: int = Query(default=50, ge=1, le=500)) -> JSONResponse:
        """List recently observed completion events, newest first.

        Returns:
            JSONResponse: Event list payload.

        Raises:
            RuntimeError: This handler does not raise runtime errors.
        """

        events = [event.event_to_dict() for event in event_log.completion_list(limit=limit)]
        return JSONResponse(content=jsonable_encoder({"items": events, "count": len(events)}))

    return router
