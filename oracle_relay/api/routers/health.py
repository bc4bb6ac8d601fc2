"""Health endpoint router composition for app, database and ledger checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from oracle_relay.adapters import LedgerPort
from oracle_relay.db import DatabaseHealthPort


def api_create_health_router(db_health_service: DatabaseHealthPort, ledger: LedgerPort) -> APIRouter:
    """Create health-check router with app and cache database status.

    Args:
        db_health_service: DB-layer health service interface.
        ledger: Ledger port used for the network label.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if db_health_service is None:
        raise ValueError("db_health_service must not be None")
    if ledger is None:
        raise ValueError("ledger must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    def api_health_status() -> JSONResponse:
        """Return application, cache database and ledger network state.

        Returns:
            JSONResponse: Deterministic health payload for operational checks.

        Raises:
            ConnectionError: Raised when database health check fails.
        """

        try:
            db_health = db_health_service.db_check_health()
            payload = {
                "status": "ok",
                "app": "up",
                "database": db_health.status,
                "detail": db_health.detail,
                "target": db_health_service.db_connection_label(),
                "ledger_network": ledger.ledger_network_label(),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_200_OK)
        except ConnectionError as error:
            payload = {
                "status": "degraded",
                "app": "up",
                "database": "down",
                "detail": str(error),
                "target": db_health_service.db_connection_label(),
                "ledger_network": ledger.ledger_network_label(),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    return router
