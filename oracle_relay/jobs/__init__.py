"""Job layer package for oracle workflow orchestration boundaries."""

from .completion_events import CompletionEventLog
from .fetcher import DataFetcher
from .interfaces import JobOrchestratorPort, WorkflowExecutionResult
from .submitter import OracleSubmitter, submitter_event_matches
from .workflow_orchestrator import OracleWorkflowConfig, OracleWorkflowOrchestrator

__all__ = [
	"CompletionEventLog",
	"DataFetcher",
	"JobOrchestratorPort",
	"OracleSubmitter",
	"OracleWorkflowConfig",
	"OracleWorkflowOrchestrator",
	"WorkflowExecutionResult",
	"submitter_event_matches",
]
