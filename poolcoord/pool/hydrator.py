"""Background refresh of the owner datum cache."""

from __future__ import annotations

import asyncio

import bittensor as bt

from .owner_cache import OwnerDatumCache

DEFAULT_HYDRATION_INTERVAL = 5.0


class OwnerCacheHydrator:
    """Calls ``cache.hydrate()`` on a fixed interval until stopped.

    New outputs at the pool contract are rare, so a hydration that finds
    nothing new costs one listing request.
    """

    def __init__(self, cache: OwnerDatumCache, interval: float = DEFAULT_HYDRATION_INTERVAL):
        self.cache = cache
        self.interval = interval
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    async def run(self) -> None:
        """Hydration loop. Runs until stopped or cancelled."""
        self._running = True
        bt.logging.info({"owner_cache_hydrator": {"status": "starting", "interval": self.interval}})

        while self._running:
            try:
                await self.cache.hydrate()
            except asyncio.CancelledError:
                break
            except Exception as e:
                bt.logging.warning({"owner_cache_hydrator": {"error": str(e)}})

            try:
                await asyncio.sleep(self.interval)
            except asyncio.CancelledError:
                break

        self._running = False
        bt.logging.info({"owner_cache_hydrator": "stopped"})

    def stop(self) -> None:
        """Signal the loop to exit after the current cycle."""
        self._running = False


__all__ = ["DEFAULT_HYDRATION_INTERVAL", "OwnerCacheHydrator"]
