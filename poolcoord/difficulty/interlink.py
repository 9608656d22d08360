"""Interlink (checkpoint chain) maintenance.

Level ``i`` of the interlink holds the most recent hash that beat the
prior block's target halved ``i + 1`` times. A verifier can walk it to
prove cumulative work without replaying every block.
"""

from __future__ import annotations

from .codec import DifficultyValue, half_difficulty_number, is_easier


def calculate_interlink(
    current_hash: str,
    new_difficulty: DifficultyValue,
    prior_difficulty: DifficultyValue,
    current_interlink: list[str],
) -> list[str]:
    """Record ``current_hash`` at every level its difficulty qualifies for.

    Returns a new list; ``current_interlink`` is left untouched.
    """
    interlink = list(current_interlink)
    level_half = half_difficulty_number(prior_difficulty)
    index = 0

    while is_easier(level_half, new_difficulty):
        if index < len(interlink):
            interlink[index] = current_hash
        else:
            interlink.append(current_hash)

        level_half = half_difficulty_number(level_half)
        index += 1

    return interlink


__all__ = ["calculate_interlink"]
