"""Typed domain models shared across runtime layers.

This module provides immutable data contracts for the fetch-then-submit oracle
workflow and for operational surfaces such as health checks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str


@dataclass(frozen=True)
class FetchOptions:
    """Retry and caching options for one fetch request.

    Attributes:
        max_retries: Number of retries after the first attempt.
        retry_delay_ms: Linear backoff unit in milliseconds.
        use_cache: Whether cache lookup and store are enabled.
    """

    max_retries: int = 3
    retry_delay_ms: int = 1000
    use_cache: bool = False

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.retry_delay_ms < 0:
            raise ValueError("retry_delay_ms must be >= 0")


@dataclass(frozen=True)
class FetchRequest:
    """Immutable fetch request issued to the data fetcher.

    Attributes:
        source_uri: Remote source URI.
        options: Retry and caching options.
    """

    source_uri: str
    options: FetchOptions = field(default_factory=FetchOptions)


@dataclass(frozen=True)
class SubmissionRequest:
    """Ledger-mutating operation built from one successful fetch result.

    Attributes:
        request_id: Oracle request identifier.
        payload: Opaque fetched payload.
        operation_name: Target contract operation name.
    """

    request_id: int
    payload: Any
    operation_name: str

    def submission_arguments(self) -> list[Any]:
        """Return positional operation arguments in contract order.

        Returns:
            list[Any]: `[request_id, payload]` argument list.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return [self.request_id, self.payload]


class SubmissionState(str, Enum):
    """Lifecycle state of one submission."""

    CREATED = "created"
    EMITTED = "emitted"
    CONFIRMED = "confirmed"
    LISTENING = "listening"


@dataclass(frozen=True)
class LedgerFinality:
    """Finality information reported by the ledger port.

    Attributes:
        finality_marker: Identifier of the confirmed state (block hash).
        block_number: Block number that includes the operation.
    """

    finality_marker: str
    block_number: int | None = None


@dataclass(frozen=True)
class CompletionEvent:
    """Asynchronous completion notification observed on a ledger channel.

    Attributes:
        channel_name: Notification channel name.
        request_id: Oracle request identifier decoded from the event, if any.
        operation_handle: Handle of the operation that emitted the event, if known.
        block_number: Block number carrying the event, if known.
        payload: Decoded event arguments.
    """

    channel_name: str
    request_id: int | None
    operation_handle: str | None
    block_number: int | None
    payload: dict[str, Any]

    def event_to_dict(self) -> dict[str, Any]:
        """Return JSON-serializable event representation.

        Returns:
            dict[str, Any]: Event fields.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {
            "channel_name": self.channel_name,
            "request_id": self.request_id,
            "operation_handle": self.operation_handle,
            "block_number": self.block_number,
            "payload": self.payload,
        }


@dataclass(frozen=True)
class SubmissionReceipt:
    """Receipt for one confirmed submission.

    Attributes:
        request_id: Oracle request identifier.
        operation_handle: Handle returned when the operation was accepted.
        finality_marker: Identifier of the confirmed state.
        block_number: Block number that includes the operation.
        state: Final submission lifecycle state.
        stage_timeline: Structured stage events captured during submission.
        listener: Completion listener subscription, when one was started.
    """

    request_id: int
    operation_handle: str
    finality_marker: str
    block_number: int | None
    state: SubmissionState
    stage_timeline: list[dict[str, object]]
    listener: Any = None

    def receipt_to_dict(self) -> dict[str, Any]:
        """Return JSON-serializable receipt summary.

        Returns:
            dict[str, Any]: Receipt fields without the listener object.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        return {
            "request_id": self.request_id,
            "operation_handle": self.operation_handle,
            "finality_marker": self.finality_marker,
            "block_number": self.block_number,
            "state": self.state.value,
            "listening": self.listener is not None,
        }
