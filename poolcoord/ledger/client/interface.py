"""LedgerClient protocol - pluggable ledger access interface.

Implementations: HTTPLedgerClient (ledger gateway sidecar). Tests use
AsyncMock stand-ins.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from poolcoord.ledger.models import OutputRef, TransactionRequest, Utxo


class LedgerClientError(Exception):
    """The ledger client could not complete a request."""


@runtime_checkable
class LedgerClient(Protocol):
    """What the pool core needs from the ledger."""

    async def utxos_at(self, address: str) -> list[Utxo]:
        """List unspent outputs currently at an address."""
        ...

    async def utxos_by_ref(self, refs: list[OutputRef]) -> list[Utxo]:
        """Fetch specific outputs. Missing ones are omitted."""
        ...

    async def datum_of(self, utxo: Utxo) -> dict[str, Any] | None:
        """Decoded datum attached to an output, or None if it has none."""
        ...

    async def payment_credential_of(self, address: str) -> str:
        """Hex hash of an address's payment credential."""
        ...

    async def submit(self, request: TransactionRequest) -> str | None:
        """Build, sign and submit. Returns the transaction id."""
        ...


__all__ = ["LedgerClient", "LedgerClientError"]
