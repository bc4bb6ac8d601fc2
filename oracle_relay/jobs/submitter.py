"""Oracle submitter: emit, await finality, then observe completion events."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog

from oracle_relay.adapters import (
    FinalityError,
    FinalityTimeoutError,
    LedgerPort,
    SubmissionEmitError,
    SubscriptionHandlePort,
)
from oracle_relay.domain import (
    CompletionEvent,
    LedgerFinality,
    SubmissionReceipt,
    SubmissionRequest,
    SubmissionState,
    domain_build_stage_event,
)

from .completion_events import CompletionEventLog

logger = structlog.get_logger(__name__)


class OracleSubmitter:
    """Submit fetched payloads to the oracle contract through the ledger port.

    One `submit` call moves through `created -> emitted -> confirmed ->
    listening`. Emit and finality failures propagate and never reach the
    listening state. The completion listener outlives the call; it is stopped
    through the receipt's listener handle or `submitter_close`.
    """

    def __init__(
        self,
        ledger: LedgerPort,
        operation_name: str = "submitData",
        completion_channel: str = "DataSubmitted",
        finality_timeout_seconds: float | None = None,
        event_log: CompletionEventLog | None = None,
    ):
        """Initialize submitter dependencies.

        Args:
            ledger: Ledger port used for submit, finality and subscribe calls.
            operation_name: Contract operation invoked for each submission.
            completion_channel: Event channel observed after finality.
            finality_timeout_seconds: Optional finality wait budget; None waits indefinitely.
            event_log: Optional sink for correlated completion events.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if ledger is None:
            raise ValueError("ledger must not be None")
        if not operation_name.strip():
            raise ValueError("operation_name must not be blank")
        if not completion_channel.strip():
            raise ValueError("completion_channel must not be blank")
        if finality_timeout_seconds is not None and finality_timeout_seconds <= 0:
            raise ValueError("finality_timeout_seconds must be > 0 when provided")

        self._ledger = ledger
        self._operation_name = operation_name.strip()
        self._completion_channel = completion_channel.strip()
        self._finality_timeout_seconds = finality_timeout_seconds
        self._event_log = event_log
        self._listeners: list[SubscriptionHandlePort] = []

    async def submit(self, request_id: int, payload: Any) -> SubmissionReceipt:
        """Submit one payload and wait for its confirmation.

        Args:
            request_id: Oracle request identifier.
            payload: Fetched payload.

        Returns:
            SubmissionReceipt: Receipt with operation handle and finality marker.

        Raises:
            SubmissionEmitError: Raised when the operation cannot be submitted.
            FinalityTimeoutError: Raised when the finality budget is exceeded.
            FinalityError: Raised when the ledger rejects the operation or cannot report it.
        """

        submission_request = SubmissionRequest(
            request_id=request_id,
            payload=payload,
            operation_name=self._operation_name,
        )
        stage_timeline: list[dict[str, object]] = []
        state = SubmissionState.CREATED

        operation_handle = await self._submitter_emit(submission_request, stage_timeline)
        state = SubmissionState.EMITTED

        finality = await self._submitter_await_finality(operation_handle, stage_timeline)
        state = SubmissionState.CONFIRMED

        listener = await self._submitter_observe(
            request_id=request_id,
            operation_handle=operation_handle,
            finality=finality,
            stage_timeline=stage_timeline,
        )
        if listener is not None:
            state = SubmissionState.LISTENING

        return SubmissionReceipt(
            request_id=request_id,
            operation_handle=operation_handle,
            finality_marker=finality.finality_marker,
            block_number=finality.block_number,
            state=state,
            stage_timeline=stage_timeline,
            listener=listener,
        )

    def submitter_active_listeners(self) -> int:
        """Return number of listeners still delivering events, dropping stopped ones."""

        self._submitter_prune_listeners()
        return len(self._listeners)

    async def submitter_close(self) -> None:
        """Unsubscribe every completion listener started by this submitter.

        Returns:
            None: Stops listeners as side effect.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        listeners, self._listeners = self._listeners, []
        for listener in listeners:
            try:
                await listener.unsubscribe()
            except Exception:  # noqa: BLE001 - shutdown continues for remaining listeners
                logger.exception("completion listener unsubscribe failed")

    async def _submitter_emit(
        self,
        submission_request: SubmissionRequest,
        stage_timeline: list[dict[str, object]],
    ) -> str:
        stage_timeline.append(domain_build_stage_event(stage="emit", status="started"))
        try:
            operation_handle = await self._ledger.ledger_submit(
                submission_request.operation_name,
                submission_request.submission_arguments(),
            )
        except SubmissionEmitError:
            raise
        except Exception as error:
            raise SubmissionEmitError(f"failed to emit {submission_request.operation_name}: {error}") from error

        logger.info(
            "operation emitted",
            request_id=submission_request.request_id,
            operation=submission_request.operation_name,
            operation_handle=operation_handle,
        )
        stage_timeline.append(
            domain_build_stage_event(
                stage="emit",
                status="completed",
                details={"operation_handle": operation_handle},
            )
        )
        return operation_handle

    async def _submitter_await_finality(
        self,
        operation_handle: str,
        stage_timeline: list[dict[str, object]],
    ) -> LedgerFinality:
        stage_timeline.append(domain_build_stage_event(stage="finality", status="started"))
        try:
            # on timeout the wait is cancelled; the emitted operation is not revoked
            finality = await asyncio.wait_for(
                self._ledger.ledger_await_finality(operation_handle),
                timeout=self._finality_timeout_seconds,
            )
        except FinalityError:
            raise
        except asyncio.TimeoutError as error:
            raise FinalityTimeoutError(
                f"operation {operation_handle} not final after {self._finality_timeout_seconds}s",
                operation_handle=operation_handle,
            ) from error
        except Exception as error:
            raise FinalityError(
                f"finality wait for {operation_handle} failed: {error}",
                operation_handle=operation_handle,
            ) from error

        logger.info(
            "operation confirmed",
            operation_handle=operation_handle,
            finality_marker=finality.finality_marker,
            block_number=finality.block_number,
        )
        stage_timeline.append(
            domain_build_stage_event(
                stage="finality",
                status="completed",
                details={"finality_marker": finality.finality_marker, "block_number": finality.block_number},
            )
        )
        return finality

    async def _submitter_observe(
        self,
        request_id: int,
        operation_handle: str,
        finality: LedgerFinality,
        stage_timeline: list[dict[str, object]],
    ) -> SubscriptionHandlePort | None:
        def _on_completion_event(event: CompletionEvent) -> None:
            if not submitter_event_matches(event, request_id=request_id, operation_handle=operation_handle):
                logger.debug(
                    "completion event ignored",
                    channel=event.channel_name,
                    event_request_id=event.request_id,
                    event_operation_handle=event.operation_handle,
                )
                return
            logger.info(
                "completion event received",
                channel=event.channel_name,
                request_id=request_id,
                operation_handle=operation_handle,
                block_number=event.block_number,
                payload=event.payload,
            )
            if self._event_log is not None:
                self._event_log.completion_record(event)

        try:
            listener = await self._ledger.ledger_subscribe(
                self._completion_channel,
                _on_completion_event,
                from_block=finality.block_number,
            )
        except Exception as error:  # noqa: BLE001 - observing is best-effort
            logger.warning(
                "completion listener not started",
                channel=self._completion_channel,
                operation_handle=operation_handle,
                error=str(error),
            )
            stage_timeline.append(
                domain_build_stage_event(stage="observe", status="failed", details={"error": str(error)})
            )
            return None

        self._submitter_prune_listeners()
        self._listeners.append(listener)
        stage_timeline.append(
            domain_build_stage_event(stage="observe", status="listening", details={"channel": self._completion_channel})
        )
        return listener

    def _submitter_prune_listeners(self) -> None:
        """Forget listeners that were unsubscribed or stopped polling."""

        self._listeners = [listener for listener in self._listeners if listener.subscription_is_active()]


def submitter_event_matches(event: CompletionEvent, request_id: int, operation_handle: str) -> bool:
    """Return whether a completion event belongs to one submission.

    Events carrying an operation handle are matched on it; others fall back to
    the request id.

    Args:
        event: Observed completion event.
        request_id: Submission request identifier.
        operation_handle: Submission operation handle.

    Returns:
        bool: True when the event is correlated to the submission.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    if event.operation_handle is not None:
        return event.operation_handle.lower() == operation_handle.lower()
    return event.request_id == request_id
