"""FastAPI application factory for the oracle relay service.

This module defines API application composition and the shutdown path for
long-lived completion listeners.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Sequence

from fastapi import FastAPI

from oracle_relay.adapters import LedgerPort
from oracle_relay.config import AppSettings
from oracle_relay.db import DatabaseHealthPort
from oracle_relay.jobs import CompletionEventLog, OracleWorkflowOrchestrator

from .routers import api_create_health_router, api_create_ledger_router, api_create_workflow_router

ShutdownHook = Callable[[], Awaitable[None]]


def create_api_application(
    settings: AppSettings,
    db_health_service: DatabaseHealthPort,
    workflow_orchestrator: OracleWorkflowOrchestrator,
    ledger: LedgerPort,
    event_log: CompletionEventLog,
    shutdown_hooks: Sequence[ShutdownHook] = (),
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for runtime metadata.
        db_health_service: Database health service used by health endpoints.
        workflow_orchestrator: Job orchestrator for workflow trigger execution.
        ledger: Ledger port for resource reads and health labels.
        event_log: Log of correlated completion events.
        shutdown_hooks: Async callables run on application shutdown.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        RuntimeError: Raised if application initialization fails.
    """

    @asynccontextmanager
    async def _application_lifespan(_application: FastAPI) -> AsyncIterator[None]:
        yield
        for shutdown_hook in shutdown_hooks:
            await shutdown_hook()

    application = FastAPI(title="Oracle Relay", lifespan=_application_lifespan)

    @application.get("/", tags=["foundation"])
    def foundation_index() -> dict[str, str]:
        return {
            "service": "oracle-relay",
            "status": "ready",
            "environment": settings.environment_name,
            "ledger_network": ledger.ledger_network_label(),
        }

    application.include_router(api_create_health_router(db_health_service=db_health_service, ledger=ledger))
    application.include_router(api_create_workflow_router(workflow_orchestrator=workflow_orchestrator))
    application.include_router(api_create_ledger_router(ledger=ledger, event_log=event_log))

    return application
