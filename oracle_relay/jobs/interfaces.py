"""Typed interfaces for job-layer orchestration responsibilities."""

from dataclasses import dataclass, field
from typing import Protocol

from oracle_relay.domain import SubmissionReceipt


@dataclass(frozen=True)
class WorkflowExecutionResult:
    """Result contract for one fetch-then-submit workflow execution.

    Attributes:
        job_name: Job identifier.
        status: Final execution state (`success` or `no_data`).
        receipt: Submission receipt when a payload was submitted.
        stage_timeline: Structured stage events captured during execution.
    """

    job_name: str
    status: str
    receipt: SubmissionReceipt | None = None
    stage_timeline: list[dict[str, object]] = field(default_factory=list)


class JobOrchestratorPort(Protocol):
    """Port definition for orchestrating oracle workflow jobs."""

    def job_supported_names(self) -> tuple[str, ...]:
        """Return the set of workflow names this orchestrator can execute.

        Returns:
            tuple[str, ...]: Deterministic list of supported job names.

        Raises:
            RuntimeError: Raised when supported job metadata is unavailable.
        """

    async def job_execute(self, job_name: str) -> WorkflowExecutionResult:
        """Execute one named workflow in the job layer.

        Args:
            job_name: Workflow name.

        Returns:
            WorkflowExecutionResult: Final execution status payload.

        Raises:
            OracleRelayError: Raised when submission fails.
        """
