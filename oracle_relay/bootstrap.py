"""Application bootstrap wiring for startup validation and dependency assembly.

Every collaborator is constructed once per process here and injected
downstream; no module holds a global SDK client.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import FastAPI

from oracle_relay.adapters import HttpDataSourceAdapter, Web3LedgerAdapter, adapter_load_contract_abi
from oracle_relay.api import create_api_application
from oracle_relay.cache import CacheStorePort, InMemoryCacheStore, NullCacheStore
from oracle_relay.config import AppSettings, config_load_settings
from oracle_relay.db import (
    DatabaseHealthPort,
    NoDatabaseHealthService,
    SQLAlchemyCacheStore,
    SQLAlchemyDatabaseHealthService,
    db_create_engine,
)
from oracle_relay.domain import FetchOptions
from oracle_relay.jobs import (
    CompletionEventLog,
    DataFetcher,
    OracleSubmitter,
    OracleWorkflowConfig,
    OracleWorkflowOrchestrator,
)


@dataclass(frozen=True)
class RuntimeComponents:
    """Process-wide collaborators assembled from validated settings.

    Attributes:
        settings: Validated runtime settings.
        data_source: HTTP data source adapter.
        ledger: Web3 ledger adapter.
        cache_store: Selected cache store backend.
        db_health_service: Cache database health service.
        event_log: Log of correlated completion events.
        submitter: Oracle submitter owning completion listeners.
        workflow_orchestrator: Fetch-then-submit orchestrator.
    """

    settings: AppSettings
    data_source: HttpDataSourceAdapter
    ledger: Web3LedgerAdapter
    cache_store: CacheStorePort
    db_health_service: DatabaseHealthPort
    event_log: CompletionEventLog
    submitter: OracleSubmitter
    workflow_orchestrator: OracleWorkflowOrchestrator

    async def runtime_close(self) -> None:
        """Stop completion listeners and release HTTP resources."""

        await self.submitter.submitter_close()
        await self.data_source.aclose()


def bootstrap_create_cache_store(settings: AppSettings) -> tuple[CacheStorePort, DatabaseHealthPort]:
    """Build the configured cache store and its health service.

    Args:
        settings: Validated runtime settings.

    Returns:
        tuple[CacheStorePort, DatabaseHealthPort]: Cache store and matching health service.

    Raises:
        RuntimeError: Raised when the database schema cannot be prepared.
    """

    if settings.cache_backend == "none":
        return NullCacheStore(), NoDatabaseHealthService()
    if settings.cache_backend == "memory":
        return InMemoryCacheStore(), NoDatabaseHealthService()

    engine = db_create_engine(database_url=settings.database_url)
    cache_store = SQLAlchemyCacheStore(engine=engine)
    if engine.dialect.name == "sqlite":
        cache_store.db_cache_create_schema()
    return cache_store, SQLAlchemyDatabaseHealthService(engine=engine)


def bootstrap_create_runtime(settings: AppSettings | None = None) -> RuntimeComponents:
    """Assemble runtime collaborators after validating startup configuration.

    Args:
        settings: Optional pre-loaded settings; loaded from environment when omitted.

    Returns:
        RuntimeComponents: Fully wired runtime collaborators.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
        ValueError: Raised when ledger configuration is invalid.
    """

    runtime_settings = settings or config_load_settings()
    data_source = HttpDataSourceAdapter(request_timeout_seconds=runtime_settings.fetch_timeout_seconds)
    ledger = Web3LedgerAdapter(
        endpoint_url=runtime_settings.settings_ledger_endpoint(),
        chain_id=runtime_settings.ledger_chain_id,
        private_key=runtime_settings.ledger_private_key,
        contract_address=runtime_settings.ledger_contract_address,
        contract_abi=adapter_load_contract_abi(runtime_settings.ledger_abi_path),
        network_name=runtime_settings.ledger_network,
        confirmations=runtime_settings.ledger_confirmations,
        poll_interval_seconds=runtime_settings.ledger_poll_interval_seconds,
    )
    cache_store, db_health_service = bootstrap_create_cache_store(runtime_settings)
    event_log = CompletionEventLog()
    fetcher = DataFetcher(data_source=data_source, cache_store=cache_store)
    submitter = OracleSubmitter(
        ledger=ledger,
        operation_name=runtime_settings.oracle_operation_name,
        completion_channel=runtime_settings.oracle_completion_channel,
        finality_timeout_seconds=runtime_settings.settings_finality_timeout(),
        event_log=event_log,
    )
    workflow_orchestrator = OracleWorkflowOrchestrator(
        fetcher=fetcher,
        submitter=submitter,
        config=OracleWorkflowConfig(
            source_uri=runtime_settings.source_uri,
            request_id=runtime_settings.request_id,
            allowed_source_uris=runtime_settings.settings_source_uri_allowlist(),
            fetch_options=FetchOptions(
                max_retries=runtime_settings.fetch_max_retries,
                retry_delay_ms=runtime_settings.fetch_retry_delay_ms,
                use_cache=runtime_settings.fetch_use_cache,
            ),
        ),
    )
    return RuntimeComponents(
        settings=runtime_settings,
        data_source=data_source,
        ledger=ledger,
        cache_store=cache_store,
        db_health_service=db_health_service,
        event_log=event_log,
        submitter=submitter,
        workflow_orchestrator=workflow_orchestrator,
    )


def bootstrap_create_application(runtime: RuntimeComponents | None = None) -> FastAPI:
    """Assemble the API application from runtime collaborators.

    Args:
        runtime: Optional pre-built runtime collaborators.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    application_runtime = runtime or bootstrap_create_runtime()
    return create_api_application(
        settings=application_runtime.settings,
        db_health_service=application_runtime.db_health_service,
        workflow_orchestrator=application_runtime.workflow_orchestrator,
        ledger=application_runtime.ledger,
        event_log=application_runtime.event_log,
        shutdown_hooks=(application_runtime.runtime_close,),
    )
