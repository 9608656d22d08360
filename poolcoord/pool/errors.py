"""Submission pipeline failures."""

from __future__ import annotations


class PoolConfigurationError(Exception):
    """An expected ledger fixture (validator output, script reference) is missing.

    Signals misconfiguration or a stale view of chain state, never retried.
    """


class SubmissionTimeout(Exception):
    """The ledger client returned no transaction id within the wait window."""


__all__ = ["PoolConfigurationError", "SubmissionTimeout"]
