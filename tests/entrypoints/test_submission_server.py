"""Tests for submission server boot checks."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from poolcoord.base.config import load_settings
from poolcoord.entrypoints import submission_server
from poolcoord.entrypoints.submission_server import check_script_reference
from poolcoord.ledger.client import LedgerClientError
from poolcoord.ledger.models import OutputRef, Utxo
from poolcoord.pool.errors import PoolConfigurationError


@pytest.fixture
def settings():
    return load_settings(env={
        "NETWORK": "Preview",
        "LEDGER_GATEWAY_URL": "http://localhost:8080",
        "POOL_CONTRACT_ADDRESS": "addr_test1pool",
        "POOL_SCRIPT_HASH": "abcdef",
        "POOL_OUTPUT_REFERENCE": "5c5c#0",
    })


@pytest.mark.asyncio
class TestCheckScriptReference:

    async def test_present(self, settings):
        client = AsyncMock()
        client.utxos_by_ref = AsyncMock(return_value=[Utxo(tx_hash="5c5c", output_index=0)])

        await check_script_reference(client, settings)

        client.utxos_by_ref.assert_awaited_once_with([OutputRef(tx_hash="5c5c", output_index=0)])

    async def test_missing_is_fatal(self, settings):
        client = AsyncMock()
        client.utxos_by_ref = AsyncMock(return_value=[])

        with pytest.raises(PoolConfigurationError):
            await check_script_reference(client, settings)


class TestRun:

    @pytest.mark.parametrize("error", [
        LedgerClientError("gateway unreachable"),
        PoolConfigurationError("script reference missing"),
    ])
    def test_boot_failure_exits_nonzero(self, settings, monkeypatch, error):
        async def _fail(settings, stop_event):
            raise error

        monkeypatch.setattr(submission_server, "serve", _fail)
        loop = asyncio.new_event_loop()

        assert submission_server.run(settings, loop, asyncio.Event()) == 1
        assert loop.is_closed()

    def test_clean_shutdown_exits_zero(self, settings, monkeypatch):
        served = AsyncMock()
        monkeypatch.setattr(submission_server, "serve", served)
        loop = asyncio.new_event_loop()

        assert submission_server.run(settings, loop, asyncio.Event()) == 0
        served.assert_awaited_once()
        assert loop.is_closed()
