"""Ledger-facing models and client.

The pool never signs or encodes CBOR itself. It describes each round as a
TransactionRequest and hands it to a LedgerClient:
- models: outputs, owner/block records, proof reports, requests
- networks: validator identity per network and protocol constants
- client: LedgerClient protocol and its HTTP implementation
"""

from .models import (
    AccountOutput,
    BlockState,
    OutputRef,
    OwnerRecord,
    ProofReport,
    TransactionRequest,
    Utxo,
)
from .networks import NetworkParams, get_network

__all__ = [
    "AccountOutput",
    "BlockState",
    "NetworkParams",
    "OutputRef",
    "OwnerRecord",
    "ProofReport",
    "TransactionRequest",
    "Utxo",
    "get_network",
]
