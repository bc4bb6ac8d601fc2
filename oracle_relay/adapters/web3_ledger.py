"""Web3 ledger adapter implementation for oracle contract interaction."""

from __future__ import annotations

import asyncio
import inspect
import json
from typing import Any, Awaitable, Callable, Final, Mapping, Sequence

import structlog
from eth_account import Account
from web3 import AsyncWeb3, Web3
from web3.exceptions import TransactionNotFound

from oracle_relay.domain import CompletionEvent, LedgerFinality

from .errors import FinalityError, FinalityRejectedError, LedgerReadError, ListenerError, SubmissionEmitError
from .interfaces import CompletionCallback, LedgerPort, SubscriptionHandlePort

logger = structlog.get_logger(__name__)

SleepProvider = Callable[[float], Awaitable[None]]


class Web3EventSubscription(SubscriptionHandlePort):
    """Polling subscription delivering decoded contract events to a callback.

    The subscription runs as a background task whose lifetime is independent of
    the call that created it; `unsubscribe` is the only way to stop it besides
    repeated polling failures.
    """

    _MAX_CONSECUTIVE_FAILURES: Final[int] = 10

    def __init__(
        self,
        web3_client: Any,
        contract_event: Any,
        channel_name: str,
        callback: CompletionCallback,
        from_block: int,
        poll_interval_seconds: float,
        sleep_provider: SleepProvider,
    ):
        self._web3 = web3_client
        self._contract_event = contract_event
        self._channel_name = channel_name
        self._callback = callback
        self._next_block = from_block
        self._poll_interval_seconds = poll_interval_seconds
        self._sleep = sleep_provider
        self._task: asyncio.Task[None] | None = None

    @property
    def channel_name(self) -> str:
        return self._channel_name

    def subscription_start(self) -> None:
        """Schedule the background polling task on the running loop.

        Returns:
            None: Starts the background task as side effect.

        Raises:
            RuntimeError: Raised when no event loop is running.
        """

        if self._task is None:
            self._task = asyncio.create_task(
                self._subscription_run(),
                name=f"completion-listener:{self._channel_name}",
            )

    def subscription_is_active(self) -> bool:
        return self._task is not None and not self._task.done()

    async def unsubscribe(self) -> None:
        """Cancel the polling task and wait for it to finish.

        Returns:
            None: Stops event delivery as side effect.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        if self._task is None or self._task.done():
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        logger.info("completion listener unsubscribed", channel=self._channel_name)

    async def subscription_poll_once(self) -> int:
        """Scan new blocks once and deliver decoded events.

        Returns:
            int: Number of events delivered.

        Raises:
            Exception: Propagates node and decoding errors to the polling loop.
        """

        latest_block = int(await self._web3.eth.get_block_number())
        if latest_block < self._next_block:
            return 0

        log_entries = await self._contract_event.get_logs(from_block=self._next_block, to_block=latest_block)
        self._next_block = latest_block + 1

        for log_entry in log_entries:
            await self._subscription_deliver(self._subscription_decode(log_entry))
        return len(log_entries)

    async def _subscription_run(self) -> None:
        consecutive_failures = 0
        while True:
            try:
                await self.subscription_poll_once()
                consecutive_failures = 0
            except asyncio.CancelledError:
                raise
            except Exception as error:  # noqa: BLE001 - listener is best-effort
                consecutive_failures += 1
                logger.warning(
                    "completion listener poll failed",
                    channel=self._channel_name,
                    consecutive_failures=consecutive_failures,
                    error=str(error),
                )
                if consecutive_failures >= self._MAX_CONSECUTIVE_FAILURES:
                    logger.error(
                        "completion listener stopped",
                        channel=self._channel_name,
                        consecutive_failures=consecutive_failures,
                    )
                    return
            await self._sleep(self._poll_interval_seconds)

    async def _subscription_deliver(self, event: CompletionEvent) -> None:
        try:
            outcome = self._callback(event)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:  # noqa: BLE001 - a failing callback must not stop the listener
            logger.exception("completion callback failed", channel=self._channel_name)

    def _subscription_decode(self, log_entry: Any) -> CompletionEvent:
        event_arguments = dict(log_entry.get("args") or {})
        raw_request_id = event_arguments.get("requestId")
        transaction_hash = log_entry.get("transactionHash")
        block_number = log_entry.get("blockNumber")
        return CompletionEvent(
            channel_name=self._channel_name,
            request_id=int(raw_request_id) if raw_request_id is not None else None,
            operation_handle=Web3.to_hex(transaction_hash) if transaction_hash is not None else None,
            block_number=int(block_number) if block_number is not None else None,
            payload={key: _adapter_json_safe(value) for key, value in event_arguments.items()},
        )


class Web3LedgerAdapter(LedgerPort):
    """Adapter implementing the ledger port with web3.py against an oracle contract."""

    def __init__(
        self,
        endpoint_url: str,
        chain_id: int,
        private_key: str,
        contract_address: str,
        contract_abi: list[dict[str, Any]],
        network_name: str = "custom",
        confirmations: int = 1,
        poll_interval_seconds: float = 2.0,
        web3_client: Any | None = None,
        sleep_provider: SleepProvider | None = None,
    ):
        """Initialize web3 ledger adapter.

        Args:
            endpoint_url: Node JSON-RPC endpoint.
            chain_id: Chain id used when building transactions.
            private_key: Signing key of the submitter account.
            contract_address: Oracle contract address.
            contract_abi: Oracle contract ABI.
            network_name: Network label for diagnostics.
            confirmations: Confirmation depth required for finality.
            poll_interval_seconds: Receipt and event polling interval.
            web3_client: Optional pre-built async web3 client, mainly for tests.
            sleep_provider: Optional async sleep callable, defaults to `asyncio.sleep`.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when required config values are invalid.
        """

        normalized_endpoint_url = endpoint_url.strip()
        if not normalized_endpoint_url:
            raise ValueError("endpoint_url must not be blank")
        if chain_id < 1:
            raise ValueError("chain_id must be >= 1")
        if not private_key.strip():
            raise ValueError("private_key must not be blank")
        if not contract_address.strip():
            raise ValueError("contract_address must not be blank")
        if not contract_abi:
            raise ValueError("contract_abi must not be empty")
        if confirmations < 1:
            raise ValueError("confirmations must be >= 1")
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be > 0")

        self._endpoint_url = normalized_endpoint_url
        self._network_name = network_name
        self._chain_id = chain_id
        self._account = Account.from_key(private_key.strip())
        self._confirmations = confirmations
        self._poll_interval_seconds = poll_interval_seconds
        self._sleep = sleep_provider or asyncio.sleep
        self._web3 = web3_client or AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(normalized_endpoint_url))
        self._contract_abi = contract_abi
        self._contract = self._web3.eth.contract(
            address=Web3.to_checksum_address(contract_address.strip()),
            abi=contract_abi,
        )

    @property
    def account_address(self) -> str:
        return self._account.address

    def ledger_network_label(self) -> str:
        return f"{self._network_name}:{self._chain_id}"

    async def ledger_submit(self, operation_name: str, args: Sequence[Any]) -> str:
        """Build, sign and broadcast one contract transaction.

        Args:
            operation_name: Contract function name.
            args: Positional function arguments, encoded against the ABI input types.

        Returns:
            str: Hex transaction hash used as operation handle.

        Raises:
            SubmissionEmitError: Raised when building, signing or broadcasting fails.
        """

        encoded_arguments = adapter_encode_arguments(self._contract_abi, operation_name, args)
        try:
            contract_function = self._contract.get_function_by_name(operation_name)(*encoded_arguments)
            nonce = await self._web3.eth.get_transaction_count(self._account.address, "pending")
            transaction = await contract_function.build_transaction(
                {"from": self._account.address, "nonce": nonce, "chainId": self._chain_id}
            )
            signed_transaction = self._account.sign_transaction(transaction)
            transaction_hash = await self._web3.eth.send_raw_transaction(signed_transaction.raw_transaction)
        except Exception as error:
            raise SubmissionEmitError(f"failed to submit {operation_name}: {error}") from error

        return Web3.to_hex(transaction_hash)

    async def ledger_await_finality(self, operation_handle: str) -> LedgerFinality:
        """Poll for the transaction receipt until it is confirmed.

        The wait itself is unbounded; callers bound it with a timeout.

        Args:
            operation_handle: Hex transaction hash.

        Returns:
            LedgerFinality: Block hash marker and block number.

        Raises:
            FinalityRejectedError: Raised when the transaction reverted.
            FinalityError: Raised when the node cannot be queried.
        """

        poll_cycles = 0
        while True:
            poll_cycles += 1
            try:
                receipt = await self._web3.eth.get_transaction_receipt(operation_handle)
            except TransactionNotFound:
                await self._sleep(self._poll_interval_seconds)
                continue
            except Exception as error:
                raise FinalityError(
                    f"failed to query receipt for {operation_handle}: {error}",
                    operation_handle=operation_handle,
                ) from error

            if int(receipt["status"]) == 0:
                raise FinalityRejectedError(
                    f"operation {operation_handle} was reverted",
                    operation_handle=operation_handle,
                )

            block_number = int(receipt["blockNumber"])
            if self._confirmations > 1:
                latest_block = int(await self._web3.eth.get_block_number())
                if latest_block - block_number + 1 < self._confirmations:
                    await self._sleep(self._poll_interval_seconds)
                    continue

            logger.debug("receipt confirmed", operation_handle=operation_handle, poll_cycles=poll_cycles)
            return LedgerFinality(
                finality_marker=Web3.to_hex(receipt["blockHash"]),
                block_number=block_number,
            )

    async def ledger_subscribe(
        self,
        channel_name: str,
        callback: CompletionCallback,
        from_block: int | None = None,
    ) -> Web3EventSubscription:
        """Start a polling subscription on one contract event.

        Args:
            channel_name: Contract event name.
            callback: Sync or async callable invoked per decoded event.
            from_block: Optional first block to scan, defaults to the latest block.

        Returns:
            Web3EventSubscription: Started subscription handle.

        Raises:
            ListenerError: Raised when the event is unknown or the start block cannot be read.
        """

        try:
            contract_event = getattr(self._contract.events, channel_name)
        except Exception as error:
            raise ListenerError(f"contract has no event named {channel_name}") from error

        if from_block is None:
            try:
                from_block = int(await self._web3.eth.get_block_number())
            except Exception as error:
                raise ListenerError(f"failed to resolve start block for {channel_name}: {error}") from error

        subscription = Web3EventSubscription(
            web3_client=self._web3,
            contract_event=contract_event,
            channel_name=channel_name,
            callback=callback,
            from_block=from_block,
            poll_interval_seconds=self._poll_interval_seconds,
            sleep_provider=self._sleep,
        )
        try:
            subscription.subscription_start()
        except RuntimeError as error:
            raise ListenerError(f"failed to start listener on {channel_name}: {error}") from error
        return subscription

    async def ledger_read_resource(self, account_address: str, resource_type: str) -> Any:
        """Call one contract view function for an account.

        Args:
            account_address: Account address passed as the only argument.
            resource_type: View function name.

        Returns:
            Any: JSON-safe decoded return value.

        Raises:
            LedgerReadError: Raised when the address is invalid or the call fails.
        """

        try:
            checksum_address = Web3.to_checksum_address(account_address.strip())
            resource_function = self._contract.get_function_by_name(resource_type)(checksum_address)
            resource_value = await resource_function.call()
        except Exception as error:
            raise LedgerReadError(f"failed to read {resource_type} for {account_address}: {error}") from error

        return _adapter_json_safe(resource_value)


def adapter_encode_arguments(
    contract_abi: Sequence[Mapping[str, Any]],
    operation_name: str,
    args: Sequence[Any],
) -> list[Any]:
    """Encode positional arguments for one contract function by ABI input type.

    Values bound to `string` inputs are JSON-encoded unless already text, so
    scalar payloads such as `42` or `true` reach the contract as `"42"` and
    `"true"`. Other input types are passed through for web3 to validate.

    Args:
        contract_abi: Contract ABI entries.
        operation_name: Contract function name.
        args: Positional function arguments.

    Returns:
        list[Any]: Arguments ready for ABI binding.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    input_types = _adapter_function_input_types(contract_abi, operation_name, len(args))
    if input_types is None:
        return list(args)
    return [_adapter_encode_for_type(input_type, value) for input_type, value in zip(input_types, args)]


def _adapter_function_input_types(
    contract_abi: Sequence[Mapping[str, Any]],
    operation_name: str,
    argument_count: int,
) -> list[str] | None:
    for abi_entry in contract_abi:
        if abi_entry.get("type") != "function" or abi_entry.get("name") != operation_name:
            continue
        abi_inputs = abi_entry.get("inputs") or []
        if len(abi_inputs) == argument_count:
            return [str(abi_input.get("type", "")) for abi_input in abi_inputs]
    return None


def _adapter_encode_for_type(input_type: str, value: Any) -> Any:
    if input_type != "string" or isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(bytes(value))
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)


def _adapter_json_safe(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(bytes(value))
    if isinstance(value, (list, tuple)):
        return [_adapter_json_safe(item) for item in value]
    if isinstance(value, dict) or hasattr(value, "items"):
        return {str(key): _adapter_json_safe(item) for key, item in value.items()}
    return value
