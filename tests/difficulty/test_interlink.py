"""Tests for interlink maintenance."""

from poolcoord.difficulty.codec import DifficultyValue
from poolcoord.difficulty.interlink import calculate_interlink

NEW_HASH = "00000000ab" + "11" * 27


def test_easier_hash_leaves_chain_unchanged():
    chain = ["aa", "bb"]
    result = calculate_interlink(NEW_HASH, DifficultyValue(5, 5000), DifficultyValue(10, 5000), chain)
    assert result == ["aa", "bb"]


def test_hash_at_exactly_half_is_not_recorded():
    # half of {5, 10000} is {5, 5000}, which is not easier than itself
    result = calculate_interlink(NEW_HASH, DifficultyValue(5, 5000), DifficultyValue(5, 10000), [])
    assert result == []


def test_much_harder_hash_fills_and_extends_levels():
    # Levels from {4, 40000}: {4,20000} {4,10000} {4,5000} {5,40000}
    # {5,20000} {5,10000} {5,5000} {6,40000}, then {6,20000} stops
    chain = ["aa", "bb"]
    result = calculate_interlink(NEW_HASH, DifficultyValue(6, 20000), DifficultyValue(4, 40000), chain)
    assert result == [NEW_HASH] * 8


def test_deeper_levels_are_preserved():
    chain = [f"{i:02x}" for i in range(10)]
    result = calculate_interlink(NEW_HASH, DifficultyValue(6, 20000), DifficultyValue(4, 40000), chain)
    assert result[:8] == [NEW_HASH] * 8
    assert result[8:] == ["08", "09"]


def test_input_chain_is_not_mutated():
    chain = ["aa"]
    calculate_interlink(NEW_HASH, DifficultyValue(9, 41394), DifficultyValue(8, 20000), chain)
    assert chain == ["aa"]


def test_two_levels_for_one_nibble_jump():
    # {8,20000} halves to {8,10000} and {8,5000}; {9,40000} is harder than {9,41394}
    result = calculate_interlink(NEW_HASH, DifficultyValue(9, 41394), DifficultyValue(8, 20000), ["aa"])
    assert result == [NEW_HASH, NEW_HASH]
