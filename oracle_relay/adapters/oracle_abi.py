"""Default oracle contract ABI and ABI loading helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Final

ORACLE_CONTRACT_ABI: Final[list[dict[str, Any]]] = [
    {
        "type": "function",
        "name": "submitData",
        "stateMutability": "nonpayable",
        "inputs": [
            {"internalType": "uint256", "name": "requestId", "type": "uint256"},
            {"internalType": "string", "name": "data", "type": "string"},
        ],
        "outputs": [],
    },
    {
        "type": "function",
        "name": "requestData",
        "stateMutability": "nonpayable",
        "inputs": [{"internalType": "string", "name": "dataType", "type": "string"}],
        "outputs": [{"internalType": "uint256", "name": "requestId", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "dataRequest",
        "stateMutability": "view",
        "inputs": [{"internalType": "address", "name": "account", "type": "address"}],
        "outputs": [
            {"internalType": "uint256", "name": "requestId", "type": "uint256"},
            {"internalType": "string", "name": "dataType", "type": "string"},
            {"internalType": "string", "name": "data", "type": "string"},
            {"internalType": "bool", "name": "fulfilled", "type": "bool"},
        ],
    },
    {
        "type": "event",
        "name": "DataSubmitted",
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "uint256", "name": "requestId", "type": "uint256"},
            {"indexed": False, "internalType": "address", "name": "submitter", "type": "address"},
            {"indexed": False, "internalType": "string", "name": "data", "type": "string"},
        ],
    },
]


def adapter_load_contract_abi(abi_path: str | None) -> list[dict[str, Any]]:
    """Load contract ABI from a JSON file or return the bundled oracle ABI.

    Both plain ABI arrays and build artifacts with an `abi` key are accepted.

    Args:
        abi_path: Optional ABI file path.

    Returns:
        list[dict[str, Any]]: Contract ABI entries.

    Raises:
        ValueError: Raised when the file does not contain an ABI array.
        OSError: Raised when the file cannot be read.
    """

    if abi_path is None or not abi_path.strip():
        return list(ORACLE_CONTRACT_ABI)

    document = json.loads(Path(abi_path.strip()).read_text(encoding="utf-8"))
    if isinstance(document, dict):
        document = document.get("abi")
    if not isinstance(document, list):
        raise ValueError(f"ABI file {abi_path} does not contain an ABI array")
    return document
