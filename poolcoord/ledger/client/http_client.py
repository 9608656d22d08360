"""HTTP-based LedgerClient talking to the ledger gateway sidecar.

The gateway owns the wallet, CBOR encoding and transaction building; this
client only moves JSON. Reads are retried on transport errors, submissions
are not (the orchestrator decides about retries).
"""

from __future__ import annotations

import asyncio
from typing import Any
from urllib.parse import quote

import bittensor as bt
import httpx

from poolcoord.ledger.client.interface import LedgerClientError
from poolcoord.ledger.models import OutputRef, TransactionRequest, Utxo


class HTTPLedgerClient:
    """Pool-side client for the ledger gateway."""

    def __init__(
        self,
        gateway_url: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.gateway_url = gateway_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._max_retries = max_retries

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: dict[str, str] | None = None) -> httpx.Response:
        """GET with retry on transport errors."""
        for attempt in range(self._max_retries):
            try:
                return await self._client.get(f"{self.gateway_url}{path}", params=params)
            except httpx.TransportError as e:
                if attempt == self._max_retries - 1:
                    raise LedgerClientError(f"gateway unreachable: {e}") from e
                wait = 2 ** attempt
                bt.logging.warning({"ledger_http_client": {"retry": attempt, "wait": wait, "error": str(e)}})
                await asyncio.sleep(wait)
        raise LedgerClientError("Max retries exceeded")

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        if resp.status_code >= 400:
            raise LedgerClientError(f"gateway returned {resp.status_code}: {resp.text}")
        return resp.json()

    # -- LedgerClient interface --

    async def utxos_at(self, address: str) -> list[Utxo]:
        resp = await self._get(f"/addresses/{quote(address)}/utxos")
        return [Utxo(**u) for u in self._json(resp)]

    async def utxos_by_ref(self, refs: list[OutputRef]) -> list[Utxo]:
        if not refs:
            return []
        resp = await self._get("/utxos", params={"refs": ",".join(r.ref for r in refs)})
        return [Utxo(**u) for u in self._json(resp)]

    async def datum_of(self, utxo: Utxo) -> dict[str, Any] | None:
        if utxo.datum is not None:
            return utxo.datum
        if not utxo.datum_hash:
            return None

        resp = await self._get(f"/datums/{utxo.datum_hash}")
        if resp.status_code == 404:
            return None
        return self._json(resp).get("datum")

    async def payment_credential_of(self, address: str) -> str:
        resp = await self._get(f"/addresses/{quote(address)}/credential")
        data = self._json(resp)
        try:
            return data["payment_credential"]["hash"]
        except (KeyError, TypeError):
            raise LedgerClientError(f"no payment credential for {address}") from None

    async def submit(self, request: TransactionRequest) -> str | None:
        try:
            resp = await self._client.post(
                f"{self.gateway_url}/transactions",
                json=request.model_dump(mode="json"),
            )
        except httpx.TransportError as e:
            raise LedgerClientError(f"submit failed: {e}") from e
        return self._json(resp).get("tx_hash")


__all__ = ["HTTPLedgerClient"]
