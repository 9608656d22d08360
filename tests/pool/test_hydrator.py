"""Tests for the background cache hydrator."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from poolcoord.pool.hydrator import OwnerCacheHydrator


@pytest.fixture
def mock_cache():
    cache = MagicMock()
    cache.hydrate = AsyncMock(return_value=0)
    return cache


@pytest.mark.asyncio
class TestOwnerCacheHydrator:

    async def test_runs_until_stopped(self, mock_cache):
        hydrator = OwnerCacheHydrator(mock_cache, interval=0.01)
        task = asyncio.create_task(hydrator.run())

        await asyncio.sleep(0.1)
        assert hydrator.running
        hydrator.stop()
        await asyncio.wait_for(task, timeout=1.0)

        assert not hydrator.running
        assert mock_cache.hydrate.await_count >= 2

    async def test_errors_do_not_stop_loop(self, mock_cache):
        calls = 0

        async def _flaky():
            nonlocal calls
            calls += 1
            if calls == 1:
                raise RuntimeError("gateway down")
            return 0

        mock_cache.hydrate.side_effect = _flaky
        hydrator = OwnerCacheHydrator(mock_cache, interval=0.01)
        task = asyncio.create_task(hydrator.run())

        await asyncio.sleep(0.1)
        hydrator.stop()
        await asyncio.wait_for(task, timeout=1.0)

        assert calls >= 2

    async def test_cancel(self, mock_cache):
        hydrator = OwnerCacheHydrator(mock_cache, interval=10.0)
        task = asyncio.create_task(hydrator.run())
        await asyncio.sleep(0.05)

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)

        assert not hydrator.running
        assert mock_cache.hydrate.await_count == 1
