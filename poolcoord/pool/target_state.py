"""Next validator state for a found block."""

from __future__ import annotations

from dataclasses import dataclass

import bittensor as bt

from poolcoord.difficulty import (
    calculate_difficulty_number,
    calculate_interlink,
    get_difficulty,
    get_difficulty_adjustment,
    meets_target,
)
from poolcoord.ledger.models import BlockState, ProofReport
from poolcoord.ledger.networks import (
    BLOCK_TIME_BUDGET,
    CLOCK_SKEW,
    EPOCH_NUMBER,
    EPOCH_TARGET,
)


@dataclass
class TargetState:
    """A computed next block plus the time anchor it was stamped with."""

    block: BlockState
    now_ms: int
    retargeted: bool = False


def ledger_now_ms(now_seconds: float) -> int:
    """Wall-clock time rounded to the second, in ms, minus clock skew."""
    return int(now_seconds + 0.5) * 1000 - CLOCK_SKEW


def next_block_state(report: ProofReport, now_seconds: float) -> TargetState:
    """Compute the validator state that follows ``report.current_block``.

    Difficulty and accumulated epoch time carry forward unchanged, except
    when the new block number lands on an epoch boundary: then difficulty
    is retargeted from the epoch's total time and epoch time resets.
    """
    prior = report.current_block
    now_ms = ledger_now_ms(now_seconds)
    current_time = now_ms + BLOCK_TIME_BUDGET

    achieved = get_difficulty(report.sha)
    if (achieved.leading_zeros, achieved.difficulty_number) != (report.new_zeroes, report.new_difficulty):
        bt.logging.warning({
            "target_state": {
                "claimed_difficulty_mismatch": True,
                "sha": report.sha,
                "claimed": [report.new_zeroes, report.new_difficulty],
                "decoded": [achieved.leading_zeros, achieved.difficulty_number],
            }
        })
    if not meets_target(achieved, prior.difficulty):
        bt.logging.warning({"target_state": {"below_target": True, "sha": report.sha, "block": prior.block_number}})

    interlink = calculate_interlink(report.sha, achieved, prior.difficulty, prior.interlink)

    block_number = prior.block_number + 1
    epoch_time = prior.epoch_time + current_time - prior.current_time
    difficulty = prior.difficulty
    retargeted = False

    if block_number % EPOCH_NUMBER == 0:
        numerator, denominator = get_difficulty_adjustment(epoch_time, EPOCH_TARGET)
        difficulty = calculate_difficulty_number(prior.difficulty, numerator, denominator)
        bt.logging.info({
            "target_state": {
                "retarget": True,
                "block": block_number,
                "epoch_time": epoch_time,
                "ratio": [numerator, denominator],
                "leading_zeroes": difficulty.leading_zeros,
                "difficulty_number": difficulty.difficulty_number,
            }
        })
        epoch_time = 0
        retargeted = True

    block = BlockState(
        block_number=block_number,
        current_hash=report.sha,
        leading_zeroes=difficulty.leading_zeros,
        difficulty_number=difficulty.difficulty_number,
        epoch_time=epoch_time,
        current_time=current_time,
        extra=0,
        interlink=interlink,
    )
    return TargetState(block=block, now_ms=now_ms, retargeted=retargeted)


__all__ = ["TargetState", "ledger_now_ms", "next_block_state"]
