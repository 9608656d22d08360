"""Difficulty and checkpoint engine.

Pure integer functions shared with the on-chain validator:
- codec: hash -> (leading_zeros, difficulty_number), halving
- retarget: epoch adjustment ratio and its application
- interlink: checkpoint chain extension
"""

from .codec import (
    DifficultyError,
    DifficultyValue,
    get_difficulty,
    half_difficulty_number,
    is_easier,
    meets_target,
)
from .interlink import calculate_interlink
from .retarget import calculate_difficulty_number, get_difficulty_adjustment

__all__ = [
    "DifficultyError",
    "DifficultyValue",
    "calculate_difficulty_number",
    "calculate_interlink",
    "get_difficulty",
    "get_difficulty_adjustment",
    "half_difficulty_number",
    "is_easier",
    "meets_target",
]
