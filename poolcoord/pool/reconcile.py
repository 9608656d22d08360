"""Merge one round's payouts into miners' pool account outputs."""

from __future__ import annotations

from dataclasses import dataclass, field

from poolcoord.ledger.client.interface import LedgerClient
from poolcoord.ledger.models import AccountOutput, OwnerRecord, Utxo

from .owner_cache import OwnerDatumCache


@dataclass
class Reconciliation:
    """Inputs to spend and outputs to create for a payout round."""

    inputs: list[Utxo] = field(default_factory=list)
    outputs: list[AccountOutput] = field(default_factory=list)

    @property
    def new_accounts(self) -> int:
        return sum(1 for o in self.outputs if o.replaces is None)


async def reconcile_payouts(
    client: LedgerClient,
    cache: OwnerDatumCache,
    pool_utxos: list[Utxo],
    payouts: dict[str, int],
    reward_unit: str,
) -> Reconciliation:
    """Match each paid address to its existing account output, if any.

    Only outputs owned by an address in ``payouts`` are spent. A miner with
    an existing account keeps its owner record and gets ``balance + amount``;
    a miner without one gets a fresh account holding ``amount``.

    Each output is claimed by at most one address. Addresses sharing a
    payment credential take that credential's outputs in payout order, and
    any left without one get a fresh account.
    """
    owned: dict[str, Utxo] = {}
    vkh_by_address: dict[str, str] = {}
    spent_refs: set[str] = set()

    for address in payouts:
        vkh = await client.payment_credential_of(address)
        vkh_by_address[address] = vkh
        for utxo in pool_utxos:
            if utxo.ref in spent_refs:
                continue
            record = await cache.resolve(utxo)
            if record is not None and record.owner_vkh == vkh:
                owned[address] = utxo
                spent_refs.add(utxo.ref)
                break

    result = Reconciliation(inputs=[u for u in pool_utxos if u.ref in spent_refs])

    for address, amount in payouts.items():
        existing = owned.get(address)
        if existing is not None:
            record = await cache.resolve(existing)
            assets = dict(existing.assets)
            assets[reward_unit] = assets.get(reward_unit, 0) + amount
            result.outputs.append(AccountOutput(
                address=address, owner=record, assets=assets,
                replaces=existing.out_ref(),
            ))
        else:
            result.outputs.append(AccountOutput(
                address=address,
                owner=OwnerRecord(owner_vkh=vkh_by_address[address]),
                assets={reward_unit: amount},
            ))

    return result


__all__ = ["Reconciliation", "reconcile_payouts"]
