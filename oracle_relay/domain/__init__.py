"""Domain models used across application layer boundaries."""

from .models import (
	CompletionEvent,
	FetchOptions,
	FetchRequest,
	HealthStatus,
	LedgerFinality,
	SubmissionReceipt,
	SubmissionRequest,
	SubmissionState,
)
from .timeline import domain_build_stage_event

__all__ = [
	"CompletionEvent",
	"FetchOptions",
	"FetchRequest",
	"HealthStatus",
	"LedgerFinality",
	"SubmissionReceipt",
	"SubmissionRequest",
	"SubmissionState",
	"domain_build_stage_event",
]
