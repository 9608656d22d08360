"""Proof-of-work mining pool coordinator.

Decodes and retargets difficulty, maintains the interlink checkpoint
chain, and submits found blocks with their payouts to the ledger.
"""

__version__ = "0.1.0"
