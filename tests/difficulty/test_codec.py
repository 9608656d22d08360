"""Tests for hash -> difficulty decoding and halving."""

import pytest

from poolcoord.difficulty.codec import (
    DifficultyError,
    DifficultyValue,
    get_difficulty,
    half_difficulty_number,
    is_easier,
    meets_target,
)


def _hash(prefix: str) -> bytes:
    """Pad a hex prefix out to a 32-byte hash."""
    return bytes.fromhex(prefix.ljust(64, "f"))


class TestGetDifficulty:

    def test_odd_nibble_count(self):
        # 0x00 0x0A 0x1B 0x2C: one zero byte plus a zero high nibble
        d = get_difficulty(_hash("000a1b2c"))
        assert d.leading_zeros == 3
        assert d.difficulty_number == 0x0A * 4096 + 0x1B * 16 + 0x2C // 16
        assert d.difficulty_number == 41394

    def test_even_nibble_count(self):
        d = get_difficulty(_hash("0000abcd"))
        assert d == DifficultyValue(leading_zeros=4, difficulty_number=0xABCD)

    def test_no_leading_zeros(self):
        d = get_difficulty(_hash("ff01"))
        assert d == DifficultyValue(leading_zeros=0, difficulty_number=0xFF01)

    def test_all_zero_hash_saturates(self):
        assert get_difficulty(bytes(32)) == DifficultyValue(leading_zeros=32, difficulty_number=0)

    def test_hex_and_bytes_agree(self):
        raw = _hash("00000a1b2c3d")
        assert get_difficulty(raw.hex()) == get_difficulty(raw)

    def test_short_hash_raises(self):
        with pytest.raises(DifficultyError):
            get_difficulty(bytes([0x00, 0x0A, 0x1B]))
        with pytest.raises(DifficultyError):
            get_difficulty(bytes([0xAB]))

    def test_invalid_hex_raises(self):
        with pytest.raises(DifficultyError):
            get_difficulty("zz")

    def test_mantissa_monotonic_within_zero_count(self):
        """Larger hashes with the same zero count decode to larger mantissas."""
        hashes = sorted(_hash(p) for p in ("0010", "001f00", "00a0", "00a001", "00ff"))
        numbers = [get_difficulty(h) for h in hashes]
        odd = [d.difficulty_number for d in numbers if d.leading_zeros == 2]
        assert odd == sorted(odd)

        nibble = sorted(_hash(p) for p in ("000100", "000123", "000abc", "000fff"))
        values = [get_difficulty(h) for h in nibble]
        assert all(v.leading_zeros == 3 for v in values)
        assert [v.difficulty_number for v in values] == sorted(v.difficulty_number for v in values)

    def test_normalized_window(self):
        for prefix in ("01", "10", "0001", "00ff", "000001"):
            d = get_difficulty(_hash(prefix))
            assert 4096 <= d.difficulty_number < 65536


class TestHalfDifficultyNumber:

    def test_stays_in_window(self):
        assert half_difficulty_number(DifficultyValue(5, 10000)) == DifficultyValue(5, 5000)

    def test_renormalizes_below_window(self):
        assert half_difficulty_number(DifficultyValue(5, 8000)) == DifficultyValue(6, 64000)

    def test_repeated_halving_is_monotonic(self):
        d = DifficultyValue(2, 65535)
        for _ in range(300):
            nxt = half_difficulty_number(d)
            assert nxt.leading_zeros >= d.leading_zeros
            assert 0 <= nxt.difficulty_number < 65536
            d = nxt


class TestOrdering:

    def test_is_easier(self):
        assert is_easier(DifficultyValue(4, 5000), DifficultyValue(5, 60000))
        assert is_easier(DifficultyValue(5, 6000), DifficultyValue(5, 5000))
        assert not is_easier(DifficultyValue(5, 5000), DifficultyValue(5, 5000))
        assert not is_easier(DifficultyValue(6, 60000), DifficultyValue(5, 4096))

    def test_meets_target(self):
        target = DifficultyValue(8, 20000)
        assert meets_target(DifficultyValue(9, 60000), target)
        assert meets_target(DifficultyValue(8, 19999), target)
        assert not meets_target(DifficultyValue(8, 20000), target)
        assert not meets_target(DifficultyValue(7, 4096), target)
