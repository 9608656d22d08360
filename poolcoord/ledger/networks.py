"""Network-specific validator identifiers and protocol constants.

These are pinned to the deployed validator contract version; changing any
of them means targeting a different contract.
"""

from __future__ import annotations

from dataclasses import dataclass

# Blocks per difficulty epoch
EPOCH_NUMBER = 2016
# Expected duration of one epoch, in milliseconds (two weeks)
EPOCH_TARGET = 1_209_600_000
# Added to "now" when stamping a block's current_time
BLOCK_TIME_BUDGET = 90_000
# Subtracted from wall-clock time to tolerate ledger clock drift
CLOCK_SKEW = 60_000
# Length of the transaction validity interval
VALIDITY_WINDOW = 180_000
# Reward tokens minted per accepted block
REWARD_PER_BLOCK = 5_000_000_000

MASTER_TOKEN_NAME = "lord tuna"
REWARD_TOKEN_NAME = "TUNA"
POOL_TOKEN_NAME = "POOL"


def asset_unit(policy_id: str, asset_name: str) -> str:
    """Concatenate a policy id with the hex of a human-readable asset name."""
    return policy_id + asset_name.encode().hex()


@dataclass(frozen=True)
class NetworkParams:
    """Validator identity on one network."""

    name: str
    validator_hash: str
    validator_address: str

    @property
    def master_token(self) -> str:
        return asset_unit(self.validator_hash, MASTER_TOKEN_NAME)

    @property
    def reward_token(self) -> str:
        return asset_unit(self.validator_hash, REWARD_TOKEN_NAME)


MAINNET = NetworkParams(
    name="Mainnet",
    validator_hash="279f842c33eed9054b9e3c70cd6a3b32298259c24b78b895cb41d91a",
    validator_address="addr1wynelppvx0hdjp2tnc78pnt28veznqjecf9h3wy4edqajxsg7hwsc",
)

PREVIEW = NetworkParams(
    name="Preview",
    validator_hash="502fbfbdafc7ddada9c335bd1440781e5445d08bada77dc2032866a6",
    validator_address="addr_test1wpgzl0aa4lramtdfcv6m69zq0q09g3ws3wk6wlwzqv5xdfsdcf2qa",
)

NETWORKS: dict[str, NetworkParams] = {n.name: n for n in (MAINNET, PREVIEW)}


def get_network(name: str) -> NetworkParams:
    """Look up a network by name."""
    try:
        return NETWORKS[name]
    except KeyError:
        raise ValueError(
            f"unknown network {name!r}, expected one of {sorted(NETWORKS)}"
        ) from None


__all__ = [
    "BLOCK_TIME_BUDGET",
    "CLOCK_SKEW",
    "EPOCH_NUMBER",
    "EPOCH_TARGET",
    "MAINNET",
    "NETWORKS",
    "NetworkParams",
    "PREVIEW",
    "REWARD_PER_BLOCK",
    "VALIDITY_WINDOW",
    "asset_unit",
    "get_network",
]
