"""Hash -> difficulty decoding.

A difficulty is a (leading_zeros, difficulty_number) pair. leading_zeros
counts zero nibbles at the start of a hash and acts as the exponent;
difficulty_number is the next four significant nibbles and acts as the
mantissa, kept inside [4096, 65536) after renormalization.
"""

from __future__ import annotations

from dataclasses import dataclass

MANTISSA_FLOOR = 4096
MANTISSA_CEILING = 65536

# Returned for an all-zero hash
SATURATED_LEADING_ZEROS = 32


class DifficultyError(ValueError):
    """Raised when a hash is too short to decode."""


@dataclass(frozen=True)
class DifficultyValue:
    """A nibble-granular target threshold."""

    leading_zeros: int
    difficulty_number: int


def is_easier(a: DifficultyValue, b: DifficultyValue) -> bool:
    """True when ``a`` is a strictly less strict target than ``b``."""
    return a.leading_zeros < b.leading_zeros or (
        a.leading_zeros == b.leading_zeros
        and a.difficulty_number > b.difficulty_number
    )


def meets_target(achieved: DifficultyValue, target: DifficultyValue) -> bool:
    """True when a hash with ``achieved`` difficulty beats ``target``."""
    return achieved.leading_zeros > target.leading_zeros or (
        achieved.leading_zeros == target.leading_zeros
        and achieved.difficulty_number < target.difficulty_number
    )


def _as_bytes(hash_: bytes | bytearray | str) -> bytes:
    if isinstance(hash_, str):
        try:
            return bytes.fromhex(hash_)
        except ValueError as e:
            raise DifficultyError(f"hash is not valid hex: {e}") from e
    return bytes(hash_)


def get_difficulty(hash_: bytes | bytearray | str) -> DifficultyValue:
    """Decode a hash into its difficulty value.

    Args:
        hash_: Raw hash bytes or their hex encoding.

    Raises:
        DifficultyError: If the hash ends before the mantissa is complete.
    """
    data = _as_bytes(hash_)
    leading_zeros = 0

    for i, chr_ in enumerate(data):
        if chr_ == 0:
            leading_zeros += 2
            continue

        try:
            if chr_ < 16:
                # High nibble is zero: one more leading zero, mantissa spans 2.5 bytes
                return DifficultyValue(
                    leading_zeros=leading_zeros + 1,
                    difficulty_number=chr_ * 4096 + data[i + 1] * 16 + data[i + 2] // 16,
                )
            return DifficultyValue(
                leading_zeros=leading_zeros,
                difficulty_number=chr_ * 256 + data[i + 1],
            )
        except IndexError:
            raise DifficultyError(
                f"hash of {len(data)} bytes is too short to read a mantissa at byte {i}"
            ) from None

    return DifficultyValue(leading_zeros=SATURATED_LEADING_ZEROS, difficulty_number=0)


def half_difficulty_number(a: DifficultyValue) -> DifficultyValue:
    """Return the target that is twice as hard as ``a``."""
    new_number = a.difficulty_number // 2
    if new_number < MANTISSA_FLOOR:
        return DifficultyValue(
            leading_zeros=a.leading_zeros + 1,
            difficulty_number=new_number * 16,
        )
    return DifficultyValue(leading_zeros=a.leading_zeros, difficulty_number=new_number)


__all__ = [
    "DifficultyError",
    "DifficultyValue",
    "MANTISSA_CEILING",
    "MANTISSA_FLOOR",
    "get_difficulty",
    "half_difficulty_number",
    "is_easier",
    "meets_target",
]
