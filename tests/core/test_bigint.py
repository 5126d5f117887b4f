"""Tests for primeguard/core/bigint.py."""

from __future__ import annotations

import random

import pytest

from primeguard.core.bigint import (
    BigIntOperations,
    MAX_SAFE_INTEGER,
    bit_length,
    count_leading_zeros,
    count_set_bits,
    count_trailing_zeros,
    create_bigint_operations,
    exactly_equals,
    from_byte_array,
    get_bit,
    get_random_bigint,
    is_power_of_two,
    is_probable_prime,
    is_safe_integer,
    mod_pow,
    set_bit,
    sign,
    to_byte_array,
    to_number,
)
from primeguard.core.config import BigIntOptions
from primeguard.core.errors import (
    ArithmeticOverflowError,
    BitSizeExceededError,
    InvalidArgumentError,
)


def _trial_division_is_prime(n: int) -> bool:
    if n < 2:
        return False
    d = 2
    while d * d <= n:
        if n % d == 0:
            return False
        d += 1
    return True


# ---------------------------------------------------------------------------
# bit_length
# ---------------------------------------------------------------------------

class TestBitLength:
    @pytest.mark.parametrize(
        "v,expected",
        [(0, 1), (1, 1), (255, 8), (256, 9), (65535, 16), (2**53 - 1, 53), (2**53, 54)],
    )
    def test_values(self, v, expected):
        assert bit_length(v) == expected

    def test_negative_uses_magnitude(self):
        assert bit_length(-255) == 8
        assert bit_length(-256) == 9

    def test_float_truncates(self):
        assert bit_length(255.9) == 8
        assert bit_length(-0.5) == 1

    def test_non_finite_float_rejected(self):
        with pytest.raises(InvalidArgumentError):
            bit_length(float("inf"))

    def test_bool_rejected(self):
        with pytest.raises(InvalidArgumentError):
            bit_length(True)


# ---------------------------------------------------------------------------
# exactly_equals
# ---------------------------------------------------------------------------

class TestExactlyEquals:
    def test_int_int(self):
        assert exactly_equals(42, 42) is True
        assert exactly_equals(42, 43) is False

    def test_int_float(self):
        assert exactly_equals(42, 42.0) is True
        assert exactly_equals(42.0, 42) is True
        assert exactly_equals(42, 42.5) is False

    def test_float_float(self):
        assert exactly_equals(1.5, 1.5) is True

    def test_large_int_not_rounded(self):
        assert exactly_equals(2**60 + 1, float(2**60)) is False
        assert exactly_equals(2**60, float(2**60)) is True

    def test_non_numbers(self):
        assert exactly_equals(True, 1) is False
        assert exactly_equals("1", 1) is False
        assert exactly_equals(float("nan"), 0) is False


# ---------------------------------------------------------------------------
# Byte codec
# ---------------------------------------------------------------------------

class TestByteArray:
    @pytest.mark.parametrize(
        "v,encoded",
        [
            (0, b"\x00"),
            (42, b"\x2a"),
            (256, b"\x00\x01"),
            (65536, b"\x00\x00\x01"),
            (-42, b"\x2a\xff"),
            (255, b"\xff\x00"),
            (-255, b"\xff\xff"),
            (0xFF00, b"\x00\xff\x00"),
        ],
    )
    def test_encoding(self, v, encoded):
        assert to_byte_array(v) == encoded
        assert from_byte_array(encoded) == v

    def test_empty_decodes_to_zero(self):
        assert from_byte_array(b"") == 0

    def test_single_ff_byte_is_positive(self):
        assert from_byte_array(b"\xff") == 255

    def test_accepts_int_list(self):
        assert from_byte_array([42, 255]) == -42

    @pytest.mark.parametrize(
        "v", [1, -1, MAX_SAFE_INTEGER, -MAX_SAFE_INTEGER, 2**64, -(2**64) + 1, 3**100]
    )
    def test_round_trip(self, v):
        assert from_byte_array(to_byte_array(v)) == v

    def test_rejects_non_int(self):
        with pytest.raises(InvalidArgumentError):
            to_byte_array(1.0)


# ---------------------------------------------------------------------------
# Random generation
# ---------------------------------------------------------------------------

class TestRandom:
    def test_within_requested_bits(self):
        for bits in (1, 8, 64, 200):
            for _ in range(20):
                v = get_random_bigint(bits)
                assert 0 <= v < 2**bits

    def test_seeded_rng_is_reproducible(self):
        a = get_random_bigint(128, random.Random(7))
        b = get_random_bigint(128, random.Random(7))
        assert a == b

    @pytest.mark.parametrize("bits", [0, -1])
    def test_non_positive_bits_rejected(self, bits):
        with pytest.raises(InvalidArgumentError):
            get_random_bigint(bits)


# ---------------------------------------------------------------------------
# Miller-Rabin
# ---------------------------------------------------------------------------

class TestIsProbablePrime:
    def test_matches_trial_division_below_10000(self):
        for n in range(0, 10_001):
            assert is_probable_prime(n) == _trial_division_is_prime(n), n

    def test_edge_values(self):
        assert [is_probable_prime(n) for n in (0, 1, 2, 3, 4)] == [False, False, True, True, False]
        assert is_probable_prime(-7) is False

    def test_strong_pseudoprimes(self):
        # Carmichael number and a strong pseudoprime to bases 2, 3, 5, 7.
        assert is_probable_prime(561) is False
        assert is_probable_prime(3_215_031_751) is False

    def test_large_known_primes(self):
        assert is_probable_prime(2**61 - 1) is True
        assert is_probable_prime(2**89 - 1, rng=random.Random(1)) is True

    def test_large_composites(self):
        assert is_probable_prime(2**61 + 1) is False
        assert is_probable_prime((2**61 - 1) * (2**31 - 1), rng=random.Random(1)) is False

    def test_iterations_must_be_positive(self):
        with pytest.raises(InvalidArgumentError):
            is_probable_prime(97, iterations=0)


# ---------------------------------------------------------------------------
# Zero counts and bits
# ---------------------------------------------------------------------------

class TestBitOps:
    @pytest.mark.parametrize("v,expected", [(0, 64), (1, 63), (255, 56), (256, 55), (2**63, 0)])
    def test_count_leading_zeros(self, v, expected):
        assert count_leading_zeros(v) == expected

    @pytest.mark.parametrize("v,expected", [(0, 64), (1, 0), (128, 7), (2**63, 63)])
    def test_count_trailing_zeros(self, v, expected):
        assert count_trailing_zeros(v) == expected

    def test_wide_values_use_low_word(self):
        assert count_leading_zeros((1 << 64) | 1) == 63
        assert count_trailing_zeros(1 << 64) == 64

    def test_zero_counts_reject_negative(self):
        with pytest.raises(InvalidArgumentError):
            count_leading_zeros(-1)
        with pytest.raises(InvalidArgumentError):
            count_trailing_zeros(-1)

    def test_get_bit(self):
        assert get_bit(5, 0) == 1
        assert get_bit(5, 1) == 0
        assert get_bit(1 << 100, 100) == 1

    def test_set_bit(self):
        assert set_bit(7, 1, 0) == 5
        assert set_bit(42, 1, 0) == 40
        assert set_bit(0, 100, 1) == 1 << 100
        assert set_bit(5, 0, 1) == 5

    def test_negative_position_rejected(self):
        with pytest.raises(InvalidArgumentError):
            get_bit(5, -1)
        with pytest.raises(InvalidArgumentError):
            set_bit(5, -1, 1)

    def test_bit_must_be_zero_or_one(self):
        with pytest.raises(InvalidArgumentError):
            set_bit(5, 0, 2)


# ---------------------------------------------------------------------------
# mod_pow
# ---------------------------------------------------------------------------

class TestModPow:
    @pytest.mark.parametrize(
        "base,exp,m,expected",
        [(2, 10, 1000, 24), (3, 7, 13, 3), (9, 13, 100, 29), (2, 10, 1, 0), (2, 0, 100, 1), (-2, 3, 10, 2)],
    )
    def test_values(self, base, exp, m, expected):
        assert mod_pow(base, exp, m) == expected

    def test_large_exponent(self):
        assert mod_pow(3, 200, 10**6) == pow(3, 200, 10**6)

    def test_negative_exponent_rejected(self):
        with pytest.raises(InvalidArgumentError):
            mod_pow(2, -1, 7)

    def test_non_positive_modulus_rejected(self):
        with pytest.raises(InvalidArgumentError):
            mod_pow(2, 3, 0)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class TestHelpers:
    def test_is_safe_integer(self):
        assert is_safe_integer(MAX_SAFE_INTEGER) is True
        assert is_safe_integer(MAX_SAFE_INTEGER + 1) is False
        assert is_safe_integer(1.0) is True
        assert is_safe_integer(1.5) is False
        assert is_safe_integer(True) is False

    def test_sign(self):
        assert [sign(-9), sign(0), sign(9)] == [-1, 0, 1]

    def test_is_power_of_two(self):
        assert [is_power_of_two(v) for v in (0, 1, 2, 3, 64, 65)] == [False, True, True, False, True, False]

    def test_count_set_bits(self):
        assert count_set_bits(255) == 8
        assert count_set_bits(0) == 0
        with pytest.raises(InvalidArgumentError):
            count_set_bits(-1)

    def test_to_number(self):
        assert to_number(5) == 5.0
        with pytest.raises(ArithmeticOverflowError):
            to_number(MAX_SAFE_INTEGER + 1)


# ---------------------------------------------------------------------------
# BigIntOperations
# ---------------------------------------------------------------------------

class TestBigIntOperations:
    def test_bit_length_is_memoized(self):
        ops = create_bigint_operations()
        assert ops.bit_length(12345) == 14
        assert ops.bit_length(12345) == 14
        stats = ops.cache_stats()["bit_length"]
        assert stats.hits == 1
        assert stats.misses == 1

    def test_is_probable_prime_is_memoized(self):
        ops = BigIntOperations()
        assert ops.is_probable_prime(7919) is True
        assert ops.is_probable_prime(7919) is True
        assert ops.cache_stats()["is_probable_prime"].hits == 1

    def test_clear_cache(self):
        ops = BigIntOperations()
        ops.bit_length(99)
        ops.clear_cache()
        assert ops.cache_stats()["bit_length"].size == 0

    def test_cache_disabled(self):
        ops = BigIntOperations(BigIntOptions(enable_cache=False))
        ops.bit_length(99)
        assert ops.cache_stats()["bit_length"].size == 0

    def test_strict_rejects_wide_operands(self):
        ops = BigIntOperations(BigIntOptions(strict=True, max_bits=8))
        assert ops.bit_length(255) == 8
        with pytest.raises(BitSizeExceededError) as exc:
            ops.bit_length(256)
        assert exc.value.max_bits == 8
        assert exc.value.actual_bits == 9
        with pytest.raises(BitSizeExceededError):
            ops.mod_pow(2, 3, 1 << 20)

    def test_non_strict_allows_wide_operands(self):
        ops = BigIntOperations(BigIntOptions(max_bits=8))
        assert ops.bit_length(1 << 20) == 21

    def test_delegates(self):
        ops = BigIntOperations()
        assert ops.to_byte_array(-42) == b"\x2a\xff"
        assert ops.from_byte_array(b"\x2a\xff") == -42
        assert ops.set_bit(7, 1, 0) == 5
        assert ops.get_bit(5, 2) == 1
        assert ops.count_leading_zeros(1) == 63
        assert ops.count_trailing_zeros(8) == 3
        assert ops.exactly_equals(3, 3.0) is True
        assert ops.mod_pow(2, 10, 1000) == 24
