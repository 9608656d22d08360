"""Tests for the owner datum cache."""

from unittest.mock import AsyncMock

import pytest

from poolcoord.ledger.client import LedgerClientError
from poolcoord.ledger.models import Utxo, constr, p_bytes, p_int
from poolcoord.pool.owner_cache import OwnerDatumCache

POOL = "addr_test1pool"


def _utxo(tx_hash: str, index: int = 0) -> Utxo:
    return Utxo(tx_hash=tx_hash, output_index=index, address=POOL)


def _owner(vkh: str) -> dict:
    return constr(0, [p_bytes(vkh)])


@pytest.fixture
def mock_client():
    client = AsyncMock()
    client.utxos_at = AsyncMock(return_value=[])
    client.datum_of = AsyncMock(return_value=None)
    return client


@pytest.mark.asyncio
class TestOwnerDatumCache:

    async def test_resolve_caches_record(self, mock_client):
        mock_client.datum_of.return_value = _owner("beef")
        cache = OwnerDatumCache(mock_client, POOL)

        first = await cache.resolve(_utxo("aa"))
        second = await cache.resolve(_utxo("aa"))

        assert first.owner_vkh == "beef"
        assert second is first
        assert mock_client.datum_of.await_count == 1
        assert "aa#0" in cache
        assert cache.get("aa#0") is first

    async def test_missing_datum_not_cached(self, mock_client):
        cache = OwnerDatumCache(mock_client, POOL)
        assert await cache.resolve(_utxo("aa")) is None
        assert await cache.resolve(_utxo("aa")) is None
        assert "aa#0" not in cache
        assert mock_client.datum_of.await_count == 2

    async def test_malformed_datum_not_cached(self, mock_client):
        mock_client.datum_of.return_value = constr(0, [p_int(12)])
        cache = OwnerDatumCache(mock_client, POOL)
        assert await cache.resolve(_utxo("aa")) is None
        assert len(cache) == 0

    async def test_client_error_not_cached(self, mock_client):
        mock_client.datum_of.side_effect = LedgerClientError("gateway down")
        cache = OwnerDatumCache(mock_client, POOL)
        assert await cache.resolve(_utxo("aa")) is None
        assert cache.get("aa#0") is None

    async def test_failed_entry_recovers_later(self, mock_client):
        mock_client.datum_of.side_effect = [LedgerClientError("flaky"), _owner("beef")]
        cache = OwnerDatumCache(mock_client, POOL)
        assert await cache.resolve(_utxo("aa")) is None
        record = await cache.resolve(_utxo("aa"))
        assert record.owner_vkh == "beef"

    async def test_output_index_is_part_of_key(self, mock_client):
        mock_client.datum_of.side_effect = [_owner("beef"), _owner("cafe")]
        cache = OwnerDatumCache(mock_client, POOL)
        await cache.resolve(_utxo("aa", 0))
        await cache.resolve(_utxo("aa", 1))
        assert cache.get("aa#0").owner_vkh == "beef"
        assert cache.get("aa#1").owner_vkh == "cafe"

    async def test_hydrate(self, mock_client):
        datums = {"aa#0": _owner("beef"), "bb#0": None, "cc#0": _owner("cafe")}
        mock_client.utxos_at.return_value = [_utxo("aa"), _utxo("bb"), _utxo("cc")]
        mock_client.datum_of.side_effect = lambda utxo: datums[utxo.ref]
        cache = OwnerDatumCache(mock_client, POOL)

        added = await cache.hydrate()

        mock_client.utxos_at.assert_awaited_with(POOL)
        assert added == 2
        assert len(cache) == 2
        assert "bb#0" not in cache

    async def test_hydrate_is_append_only(self, mock_client):
        mock_client.utxos_at.return_value = [_utxo("aa")]
        mock_client.datum_of.return_value = _owner("beef")
        cache = OwnerDatumCache(mock_client, POOL)

        assert await cache.hydrate() == 1
        # The output was spent; its entry stays
        mock_client.utxos_at.return_value = []
        assert await cache.hydrate() == 0
        assert cache.get("aa#0").owner_vkh == "beef"
        assert mock_client.datum_of.await_count == 1
