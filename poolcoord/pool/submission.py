"""Proof report -> ledger state transition.

One report runs through: recompute target state, locate the validator
output, reconcile payouts, hand a TransactionRequest to the ledger client,
and wait a bounded time for a transaction id. A timeout reruns the whole
pipeline against fresh chain state exactly once; any other failure ends
the report immediately.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Callable

import bittensor as bt

from poolcoord.ledger.client.interface import LedgerClient
from poolcoord.ledger.models import (
    AccountOutput,
    BlockState,
    OutputRef,
    ProofReport,
    TransactionRequest,
    Utxo,
    constr,
    p_bytes,
)
from poolcoord.ledger.networks import (
    POOL_TOKEN_NAME,
    REWARD_PER_BLOCK,
    VALIDITY_WINDOW,
    NetworkParams,
    asset_unit,
)

from .errors import PoolConfigurationError, SubmissionTimeout
from .owner_cache import OwnerDatumCache
from .reconcile import reconcile_payouts
from .target_state import next_block_state

DEFAULT_SUBMIT_TIMEOUT = 2.0
MAX_ATTEMPTS = 2


@dataclass
class SubmissionResult:
    """Outcome of one report. ``tx_hash`` is set only on success."""

    ok: bool
    message: str
    tx_hash: str | None = None
    attempts: int = 0

    @property
    def status(self) -> int:
        return 200 if self.ok else 500

    def to_json(self) -> dict[str, str]:
        data = {"message": self.message}
        if self.tx_hash:
            data["tx_hash"] = self.tx_hash
        return data


class SubmissionOrchestrator:
    """Turns proof reports into submitted pool transactions."""

    def __init__(
        self,
        client: LedgerClient,
        cache: OwnerDatumCache,
        network: NetworkParams,
        pool_address: str,
        pool_script_hash: str,
        script_reference: OutputRef,
        submit_timeout: float = DEFAULT_SUBMIT_TIMEOUT,
        clock: Callable[[], float] = time.time,
    ):
        self.client = client
        self.cache = cache
        self.network = network
        self.pool_address = pool_address
        self.pool_master_token = asset_unit(pool_script_hash, POOL_TOKEN_NAME)
        self.script_reference = script_reference
        self.submit_timeout = submit_timeout
        self.clock = clock

    async def submit(self, report: ProofReport) -> SubmissionResult:
        """Run the pipeline for one report, retrying once on timeout."""
        attempt = 0
        while attempt < MAX_ATTEMPTS:
            attempt += 1
            try:
                tx_hash = await self._attempt(report)
            except SubmissionTimeout:
                bt.logging.warning({"submission": {"sha": report.sha, "timeout": True, "attempt": attempt}})
                continue
            except PoolConfigurationError as e:
                bt.logging.error({"submission": {"sha": report.sha, "configuration_error": str(e)}})
                break
            except Exception as e:
                bt.logging.error({"submission": {"sha": report.sha, "failed": True, "error": repr(e)}})
                break

            bt.logging.info({"submission": {"sha": report.sha, "tx_hash": tx_hash, "attempt": attempt}})
            return SubmissionResult(
                ok=True,
                message=f"Successful submission with hash {report.sha}",
                tx_hash=tx_hash,
                attempts=attempt,
            )
        else:
            bt.logging.warning({"submission": {"sha": report.sha, "gave_up": True, "attempts": attempt}})

        return SubmissionResult(
            ok=False, message=f"Could not submit hash {report.sha}", attempts=attempt,
        )

    async def _attempt(self, report: ProofReport) -> str:
        target = next_block_state(report, self.clock())
        validator_utxo = await self._find_validator_utxo()
        self._check_stale(report, validator_utxo)

        pool_utxos = await self.client.utxos_at(self.pool_address)
        reconciliation = await reconcile_payouts(
            self.client, self.cache, pool_utxos,
            report.miner_payments, self.network.reward_token,
        )

        request = self._build_request(
            report, target.block, target.now_ms, validator_utxo,
            reconciliation.inputs, reconciliation.outputs,
        )
        bt.logging.debug({
            "submission_request": {
                "sha": report.sha,
                "block": target.block.block_number,
                "account_inputs": len(request.account_inputs),
                "account_outputs": len(request.account_outputs),
                "new_accounts": reconciliation.new_accounts,
                "retargeted": target.retargeted,
            }
        })

        try:
            tx_hash = await asyncio.wait_for(self.client.submit(request), self.submit_timeout)
        except asyncio.TimeoutError:
            raise SubmissionTimeout(report.sha) from None
        if not tx_hash:
            raise SubmissionTimeout(report.sha)
        return tx_hash

    async def _find_validator_utxo(self) -> Utxo:
        utxos = await self.client.utxos_at(self.network.validator_address)
        for utxo in utxos:
            if utxo.assets.get(self.network.master_token):
                return utxo
        raise PoolConfigurationError(
            f"no output holding the master token at {self.network.validator_address}; "
            "either the validator address is wrong or the ledger view is stale"
        )

    def _check_stale(self, report: ProofReport, validator_utxo: Utxo) -> None:
        """Warn when the chain tip has moved past the reported block."""
        if validator_utxo.datum is None:
            return
        try:
            on_chain = BlockState.from_datum(validator_utxo.datum)
        except ValueError:
            return
        if on_chain.block_number != report.current_block.block_number:
            bt.logging.warning({
                "submission": {
                    "sha": report.sha,
                    "stale_report": True,
                    "reported_block": report.current_block.block_number,
                    "chain_block": on_chain.block_number,
                }
            })

    def _build_request(
        self,
        report: ProofReport,
        block: BlockState,
        now_ms: int,
        validator_utxo: Utxo,
        account_inputs: list[Utxo],
        account_outputs: list[AccountOutput],
    ) -> TransactionRequest:
        return TransactionRequest(
            validator_input=validator_utxo.out_ref(),
            validator_redeemer=constr(1, [p_bytes(report.nonce)]),
            account_inputs=[u.out_ref() for u in account_inputs],
            account_redeemer=constr(1, [constr(0)]),
            validator_address=self.network.validator_address,
            validator_datum=block.to_datum(),
            validator_assets={self.network.master_token: 1},
            pool_address=self.pool_address,
            account_outputs=account_outputs,
            mint={self.network.reward_token: REWARD_PER_BLOCK},
            mint_redeemer=constr(0),
            pool_master_token=self.pool_master_token,
            script_reference=self.script_reference,
            valid_from=now_ms,
            valid_to=now_ms + VALIDITY_WINDOW,
        )


__all__ = ["DEFAULT_SUBMIT_TIMEOUT", "MAX_ATTEMPTS", "SubmissionOrchestrator", "SubmissionResult"]
