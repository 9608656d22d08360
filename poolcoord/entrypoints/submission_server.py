"""Submission server entrypoint.

Boots the ledger client, verifies the pool script reference exists,
hydrates the owner datum cache, then serves POST /submit while the cache
refreshes in the background.
"""

import asyncio
import os
import signal
import sys

import bittensor as bt
from dotenv import load_dotenv

from poolcoord.base.config import ConfigError, PoolSettings, add_args, load_settings
from poolcoord.ledger.client import HTTPLedgerClient, LedgerClient, LedgerClientError
from poolcoord.pool.errors import PoolConfigurationError


async def check_script_reference(client: LedgerClient, settings: PoolSettings) -> None:
    """Fail boot when the pool script reference output is not visible."""
    found = await client.utxos_by_ref([settings.pool_output_reference])
    if not found:
        raise PoolConfigurationError(
            "Could not boot because the reference input for the pool script could not be found. "
            "Either POOL_OUTPUT_REFERENCE is misconfigured, or the ledger gateway does not have "
            "this data available to it."
        )


async def serve(settings: PoolSettings, stop_event: asyncio.Event) -> None:
    """Run the coordinator until ``stop_event`` is set."""
    from poolcoord.pool.http_server import SubmissionHTTPServer
    from poolcoord.pool.hydrator import OwnerCacheHydrator
    from poolcoord.pool.owner_cache import OwnerDatumCache
    from poolcoord.pool.submission import SubmissionOrchestrator

    client = HTTPLedgerClient(gateway_url=settings.ledger_gateway_url)
    try:
        await check_script_reference(client, settings)

        cache = OwnerDatumCache(client, settings.pool_contract_address)
        await cache.hydrate()
        bt.logging.info({"submission_server": "owner_cache_hydrated", "entries": len(cache)})

        orchestrator = SubmissionOrchestrator(
            client=client,
            cache=cache,
            network=settings.network_params,
            pool_address=settings.pool_contract_address,
            pool_script_hash=settings.pool_script_hash,
            script_reference=settings.pool_output_reference,
            submit_timeout=settings.submit_timeout,
        )
        hydrator = OwnerCacheHydrator(cache, interval=settings.cache_hydration_interval)
        server = SubmissionHTTPServer(orchestrator, host=settings.host, port=settings.port)

        hydrator_task = asyncio.create_task(hydrator.run())
        await server.start()
        try:
            await stop_event.wait()
        finally:
            hydrator.stop()
            hydrator_task.cancel()
            await asyncio.gather(hydrator_task, return_exceptions=True)
            await server.stop()
    finally:
        await client.close()


def run(settings: PoolSettings, loop: asyncio.AbstractEventLoop, stop_event: asyncio.Event) -> int:
    """Serve on ``loop`` until stopped. Returns the process exit code."""
    try:
        loop.run_until_complete(serve(settings, stop_event))
    except (PoolConfigurationError, LedgerClientError) as e:
        bt.logging.error({"submission_server": {"boot_error": str(e)}})
        return 1
    except KeyboardInterrupt:
        bt.logging.info({"submission_server": "keyboard_interrupt"})
    finally:
        loop.close()
        bt.logging.info({"submission_server": "stopped"})
    return 0


def main() -> None:
    # Load .env if not in test mode
    if os.environ.get("POOLCOORD_TEST_MODE") != "true":
        load_dotenv()

    import argparse
    parser = argparse.ArgumentParser(description="Mining pool submission server")
    bt.logging.add_args(parser)
    add_args(parser)
    args = parser.parse_args()

    try:
        settings = load_settings(args=args)
    except ConfigError as e:
        bt.logging.error({"submission_server": {"config_error": str(e)}})
        sys.exit(1)

    bt.logging.info({
        "submission_server_config": {
            "network": settings.network,
            "gateway": settings.ledger_gateway_url,
            "pool_address": settings.pool_contract_address,
            "port": settings.port,
            "hydration_interval": settings.cache_hydration_interval,
        }
    })

    loop = asyncio.new_event_loop()
    stop_event = asyncio.Event()

    def _signal_handler(sig, frame):
        bt.logging.info({"submission_server": "shutdown_signal_received"})
        loop.call_soon_threadsafe(stop_event.set)

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    exit_code = run(settings, loop, stop_event)
    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
