"""Epoch-boundary difficulty retargeting.

Every arithmetic step here is integer-exact: the validator script runs the
same computation on chain and rejects any datum that differs by one unit.
"""

from __future__ import annotations

from .codec import MANTISSA_CEILING, MANTISSA_FLOOR, DifficultyValue

MIN_LEADING_ZEROS = 2
MAX_LEADING_ZEROS = 62

# Clamp on how far a single epoch may move the target
MAX_ADJUSTMENT_FACTOR = 4


def get_difficulty_adjustment(total_epoch_time: int, epoch_target: int) -> tuple[int, int]:
    """Return the (numerator, denominator) ratio applied at an epoch boundary.

    The ratio is ``total_epoch_time / epoch_target`` left unreduced, clamped
    to [1/4, 4/1].
    """
    if total_epoch_time <= 0 or epoch_target <= 0:
        raise ValueError(
            f"epoch times must be positive, got total={total_epoch_time} target={epoch_target}"
        )

    if (
        epoch_target // total_epoch_time >= MAX_ADJUSTMENT_FACTOR
        and epoch_target % total_epoch_time > 0
    ):
        return 1, MAX_ADJUSTMENT_FACTOR
    if (
        total_epoch_time // epoch_target >= MAX_ADJUSTMENT_FACTOR
        and total_epoch_time % epoch_target > 0
    ):
        return MAX_ADJUSTMENT_FACTOR, 1
    return total_epoch_time, epoch_target


def calculate_difficulty_number(
    a: DifficultyValue, numerator: int, denominator: int,
) -> DifficultyValue:
    """Scale ``a`` by numerator/denominator and renormalize.

    The mantissa is padded by one nibble before dividing so a value that
    drops below the window keeps its sub-nibble precision.
    """
    new_padded_difficulty = a.difficulty_number * 16 * numerator // denominator
    new_difficulty = new_padded_difficulty // 16

    if new_padded_difficulty // MANTISSA_CEILING == 0:
        if a.leading_zeros >= MAX_LEADING_ZEROS:
            return DifficultyValue(
                leading_zeros=MAX_LEADING_ZEROS, difficulty_number=MANTISSA_FLOOR,
            )
        return DifficultyValue(
            leading_zeros=a.leading_zeros + 1,
            difficulty_number=new_padded_difficulty,
        )

    if new_difficulty // MANTISSA_CEILING > 0:
        if a.leading_zeros <= MIN_LEADING_ZEROS:
            return DifficultyValue(
                leading_zeros=MIN_LEADING_ZEROS,
                difficulty_number=MANTISSA_CEILING - 1,
            )
        return DifficultyValue(
            leading_zeros=a.leading_zeros - 1,
            difficulty_number=new_difficulty // 16,
        )

    return DifficultyValue(leading_zeros=a.leading_zeros, difficulty_number=new_difficulty)


__all__ = [
    "MAX_ADJUSTMENT_FACTOR",
    "MAX_LEADING_ZEROS",
    "MIN_LEADING_ZEROS",
    "calculate_difficulty_number",
    "get_difficulty_adjustment",
]
