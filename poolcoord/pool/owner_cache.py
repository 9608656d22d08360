"""Owner datum cache for pool account outputs.

Maps an output reference (``tx_hash#index``) to the owner record attached
to it. Ledger outputs are immutable, so entries are only ever added, and a
reference that fails to decode is simply not stored: the next hydration
tries it again.

Runs on a single event loop. Writes are single dict assignments keyed by
immutable references, so concurrent hydration and submissions need no lock.
"""

from __future__ import annotations

import asyncio

import bittensor as bt

from poolcoord.ledger.client.interface import LedgerClient
from poolcoord.ledger.models import OwnerRecord, Utxo


class OwnerDatumCache:
    """Append-only ``output ref -> OwnerRecord`` store."""

    def __init__(self, client: LedgerClient, pool_address: str):
        self.client = client
        self.pool_address = pool_address
        self._store: dict[str, OwnerRecord] = {}

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, ref: str) -> bool:
        return ref in self._store

    def get(self, ref: str) -> OwnerRecord | None:
        """Cached record for a reference, without touching the ledger."""
        return self._store.get(ref)

    async def resolve(self, utxo: Utxo) -> OwnerRecord | None:
        """Return the owner record for an output, decoding it on first sight."""
        ref = utxo.ref
        cached = self._store.get(ref)
        if cached is not None:
            return cached

        try:
            datum = await self.client.datum_of(utxo)
            if datum is None:
                return None
            record = OwnerRecord.from_datum(datum)
        except Exception as e:
            bt.logging.debug({"owner_cache": {"ref": ref, "decode_error": str(e)}})
            return None

        self._store[ref] = record
        return record

    async def hydrate(self) -> int:
        """Resolve every output at the pool address.

        Returns:
            Number of references newly added to the cache.
        """
        utxos = await self.client.utxos_at(self.pool_address)
        before = len(self._store)
        await asyncio.gather(*(self.resolve(u) for u in utxos))
        added = len(self._store) - before

        if added:
            bt.logging.info({"owner_cache": {"hydrated": added, "total": len(self._store), "outputs": len(utxos)}})
        return added


__all__ = ["OwnerDatumCache"]
