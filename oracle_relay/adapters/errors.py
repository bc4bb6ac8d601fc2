"""Project-native typed exceptions for data source and ledger failures."""

from __future__ import annotations


class OracleRelayError(Exception):
    """Base exception for oracle workflow failures.

    Attributes:
        operation_handle: Optional ledger operation handle tied to the failure.
    """

    def __init__(self, message: str, operation_handle: str | None = None):
        super().__init__(message)
        self.operation_handle = operation_handle


class TransientFetchError(OracleRelayError, ConnectionError):
    """Failure of one fetch attempt (network, timeout, non-2xx, undecodable body)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class FetchExhaustedError(OracleRelayError, RuntimeError):
    """All fetch attempts were consumed without success."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class SubmissionEmitError(OracleRelayError, RuntimeError):
    """Signing or submitting the ledger operation failed."""


class FinalityError(OracleRelayError, RuntimeError):
    """Ledger did not confirm the submitted operation."""


class FinalityTimeoutError(FinalityError, TimeoutError):
    """Finality wait exceeded its configured budget."""


class FinalityRejectedError(FinalityError):
    """Ledger reported the operation as failed or reverted."""


class ListenerError(OracleRelayError, RuntimeError):
    """Completion-event subscription could not be established or maintained."""


class LedgerReadError(OracleRelayError, RuntimeError):
    """Reading a ledger resource failed."""
