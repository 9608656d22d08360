"""Pool submission pipeline.

Turns a found-block report into a ledger transaction that advances the
validator state and credits each paid miner's pool account:
- owner_cache / hydrator: who owns which pool account output
- target_state: next block state (interlink, epoch time, retarget)
- reconcile: merge payouts into existing account balances
- submission: the bounded-retry pipeline
- http_server: POST /submit front door
"""

from .errors import PoolConfigurationError, SubmissionTimeout
from .hydrator import OwnerCacheHydrator
from .owner_cache import OwnerDatumCache
from .reconcile import Reconciliation, reconcile_payouts
from .submission import SubmissionOrchestrator, SubmissionResult
from .target_state import TargetState, next_block_state

__all__ = [
    "OwnerCacheHydrator",
    "OwnerDatumCache",
    "PoolConfigurationError",
    "Reconciliation",
    "SubmissionOrchestrator",
    "SubmissionResult",
    "SubmissionTimeout",
    "TargetState",
    "next_block_state",
    "reconcile_payouts",
]
