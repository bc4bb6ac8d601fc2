"""Typed interfaces for adapter-layer responsibilities."""

from typing import Any, Awaitable, Callable, Protocol, Sequence

from oracle_relay.domain import CompletionEvent, LedgerFinality

CompletionCallback = Callable[[CompletionEvent], Awaitable[None] | None]


class DataSourcePort(Protocol):
    """Port definition for one request/response fetch from a remote source."""

    async def source_fetch(self, source_uri: str) -> Any:
        """Fetch and decode one response payload.

        Args:
            source_uri: Remote source URI.

        Returns:
            Any: Decoded response payload.

        Raises:
            TransientFetchError: Raised when the single attempt fails.
        """


class SubscriptionHandlePort(Protocol):
    """Port definition for a long-lived completion-event subscription."""

    def subscription_is_active(self) -> bool:
        """Return whether the subscription is still delivering events.

        Returns:
            bool: True until unsubscribed or stopped.

        Raises:
            RuntimeError: Raised when subscription state is unavailable.
        """

    async def unsubscribe(self) -> None:
        """Stop event delivery and release background resources.

        Returns:
            None: Cancels the subscription as side effect.

        Raises:
            RuntimeError: Raised when cancellation fails unexpectedly.
        """


class LedgerPort(Protocol):
    """Port definition for the external ledger SDK."""

    def ledger_network_label(self) -> str:
        """Return network label for diagnostics.

        Returns:
            str: Human-readable network identifier.

        Raises:
            RuntimeError: Raised when network metadata is unavailable.
        """

    async def ledger_submit(self, operation_name: str, args: Sequence[Any]) -> str:
        """Sign and submit one ledger-mutating operation.

        Args:
            operation_name: Contract operation name.
            args: Positional operation arguments.

        Returns:
            str: Operation handle accepted for asynchronous processing.

        Raises:
            SubmissionEmitError: Raised when signing or submission fails.
        """

    async def ledger_await_finality(self, operation_handle: str) -> LedgerFinality:
        """Wait until the operation reaches a confirmed terminal state.

        Args:
            operation_handle: Handle returned by `ledger_submit`.

        Returns:
            LedgerFinality: Finality marker and block number.

        Raises:
            FinalityRejectedError: Raised when the ledger rejects the operation.
            FinalityTimeoutError: Raised when the ledger gives up waiting.
        """

    async def ledger_subscribe(
        self,
        channel_name: str,
        callback: CompletionCallback,
        from_block: int | None = None,
    ) -> SubscriptionHandlePort:
        """Start delivering events of one channel to a callback.

        Args:
            channel_name: Notification channel (contract event) name.
            callback: Sync or async callable invoked per event.
            from_block: Optional first block to scan, defaults to the latest block.

        Returns:
            SubscriptionHandlePort: Handle with an explicit unsubscribe path.

        Raises:
            ListenerError: Raised when the subscription cannot be established.
        """

    async def ledger_read_resource(self, account_address: str, resource_type: str) -> Any:
        """Read one structured resource stored for an account.

        Args:
            account_address: Account address.
            resource_type: Resource (view function) name.

        Returns:
            Any: Decoded resource data.

        Raises:
            LedgerReadError: Raised when the read fails.
        """
