"""Adapter layer package for data source and ledger integration boundaries."""

from .errors import (
	FetchExhaustedError,
	FinalityError,
	FinalityRejectedError,
	FinalityTimeoutError,
	LedgerReadError,
	ListenerError,
	OracleRelayError,
	SubmissionEmitError,
	TransientFetchError,
)
from .http_source import HttpDataSourceAdapter
from .interfaces import CompletionCallback, DataSourcePort, LedgerPort, SubscriptionHandlePort
from .oracle_abi import ORACLE_CONTRACT_ABI, adapter_load_contract_abi
from .web3_ledger import Web3EventSubscription, Web3LedgerAdapter, adapter_encode_arguments

__all__ = [
	"CompletionCallback",
	"DataSourcePort",
	"FetchExhaustedError",
	"FinalityError",
	"FinalityRejectedError",
	"FinalityTimeoutError",
	"HttpDataSourceAdapter",
	"LedgerPort",
	"LedgerReadError",
	"ListenerError",
	"ORACLE_CONTRACT_ABI",
	"OracleRelayError",
	"SubmissionEmitError",
	"SubscriptionHandlePort",
	"TransientFetchError",
	"Web3EventSubscription",
	"Web3LedgerAdapter",
	"adapter_encode_arguments",
	"adapter_load_contract_abi",
]
