"""Bounded in-process log of observed completion events."""

from __future__ import annotations

from collections import deque
import threading

from oracle_relay.domain import CompletionEvent


class CompletionEventLog:
    """Keep the most recent completion events for observability surfaces."""

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self._events: deque[CompletionEvent] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    def completion_record(self, event: CompletionEvent) -> None:
        with self._lock:
            self._events.append(event)

    def completion_list(self, limit: int | None = None) -> list[CompletionEvent]:
        """Return recorded events, newest first.

        Args:
            limit: Optional maximum number of events.

        Returns:
            list[CompletionEvent]: Recorded events in reverse arrival order.

        Raises:
            ValueError: Raised when limit is negative.
        """

        if limit is not None and limit < 0:
            raise ValueError("limit must be >= 0")
        with self._lock:
            events = list(reversed(self._events))
        return events if limit is None else events[:limit]
