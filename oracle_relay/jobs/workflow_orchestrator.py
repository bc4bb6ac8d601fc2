"""Job-layer orchestrator running one fetch followed by one submission."""

from __future__ import annotations

from dataclasses import dataclass, field

import structlog

from oracle_relay.domain import FetchOptions, domain_build_stage_event

from .fetcher import DataFetcher
from .interfaces import JobOrchestratorPort, WorkflowExecutionResult
from .submitter import OracleSubmitter

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class OracleWorkflowConfig:
    """Configuration values for oracle workflow execution.

    Attributes:
        source_uri: Default data source URI.
        request_id: Default oracle request identifier.
        fetch_options: Retry and caching options for the fetch stage.
        allowed_source_uris: Extra URIs accepted as per-call overrides; the default
            `source_uri` is always accepted.
    """

    source_uri: str
    request_id: int
    fetch_options: FetchOptions = field(default_factory=FetchOptions)
    allowed_source_uris: tuple[str, ...] = ()


class OracleWorkflowOrchestrator(JobOrchestratorPort):
    """Concrete job orchestrator for the fetch-then-submit oracle workflow."""

    _WORKFLOW_JOB_NAME = "oracle_workflow"

    def __init__(
        self,
        fetcher: DataFetcher,
        submitter: OracleSubmitter,
        config: OracleWorkflowConfig,
    ):
        """Initialize workflow orchestrator dependencies.

        Args:
            fetcher: Data fetcher for the source stage.
            submitter: Oracle submitter for the ledger stage.
            config: Workflow execution configuration.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if fetcher is None:
            raise ValueError("fetcher must not be None")
        if submitter is None:
            raise ValueError("submitter must not be None")
        if not config.source_uri.strip():
            raise ValueError("config.source_uri must not be blank")
        if config.request_id < 0:
            raise ValueError("config.request_id must be >= 0")

        self._fetcher = fetcher
        self._submitter = submitter
        self._config = config

    @property
    def fetcher(self) -> DataFetcher:
        return self._fetcher

    @property
    def config(self) -> OracleWorkflowConfig:
        return self._config

    def job_source_allowed(self, source_uri: str) -> bool:
        """Return whether a caller-supplied source URI may be fetched.

        Args:
            source_uri: Requested data source URI.

        Returns:
            bool: True for the configured URI or an allowlisted one.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        normalized_uri = source_uri.strip()
        return normalized_uri == self._config.source_uri.strip() or normalized_uri in {
            allowed_uri.strip() for allowed_uri in self._config.allowed_source_uris
        }

    def job_supported_names(self) -> tuple[str, ...]:
        return (self._WORKFLOW_JOB_NAME,)

    async def job_execute(self, job_name: str) -> WorkflowExecutionResult:
        """Execute the configured workflow.

        Args:
            job_name: Name of job to execute.

        Returns:
            WorkflowExecutionResult: Final execution status payload.

        Raises:
            ValueError: Raised when job name is unsupported.
            OracleRelayError: Raised when submission fails.
        """

        normalized_job_name = job_name.strip()
        if normalized_job_name != self._WORKFLOW_JOB_NAME:
            raise ValueError(f"unsupported job_name={normalized_job_name}")

        return await self.job_execute_for(source_uri=self._config.source_uri, request_id=self._config.request_id)

    async def job_execute_for(self, source_uri: str, request_id: int) -> WorkflowExecutionResult:
        """Execute the workflow for an explicit source and request id.

        The payload is submitted at most once; fetch retries happen before
        submission and submission is never retried.

        Args:
            source_uri: Data source URI.
            request_id: Oracle request identifier.

        Returns:
            WorkflowExecutionResult: `success` with receipt, or `no_data` when the
                fetch produced no payload.

        Raises:
            ValueError: Raised when request id is negative.
            SubmissionEmitError: Raised when the operation cannot be submitted.
            FinalityError: Raised when the operation is not confirmed.
        """

        if request_id < 0:
            raise ValueError("request_id must be >= 0")

        timeline: list[dict[str, object]] = [
            domain_build_stage_event(stage="run", status="started", details={"source_uri": source_uri})
        ]

        timeline.append(domain_build_stage_event(stage="fetch", status="started"))
        payload = await self._fetcher.fetch(source_uri=source_uri, options=self._config.fetch_options)
        if payload is None:
            timeline.append(domain_build_stage_event(stage="fetch", status="no_data"))
            timeline.append(domain_build_stage_event(stage="run", status="completed", details={"status": "no_data"}))
            logger.warning("workflow skipped submission without data", source_uri=source_uri, request_id=request_id)
            return WorkflowExecutionResult(
                job_name=self._WORKFLOW_JOB_NAME,
                status="no_data",
                receipt=None,
                stage_timeline=timeline,
            )
        timeline.append(domain_build_stage_event(stage="fetch", status="completed"))

        receipt = await self._submitter.submit(request_id=request_id, payload=payload)
        timeline.extend(receipt.stage_timeline)
        timeline.append(domain_build_stage_event(stage="run", status="completed", details={"status": "success"}))

        logger.info(
            "workflow completed",
            source_uri=source_uri,
            request_id=request_id,
            operation_handle=receipt.operation_handle,
            finality_marker=receipt.finality_marker,
        )
        return WorkflowExecutionResult(
            job_name=self._WORKFLOW_JOB_NAME,
            status="success",
            receipt=receipt,
            stage_timeline=timeline,
        )
