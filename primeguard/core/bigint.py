"""
Arbitrary-precision integer primitives.

Python ints are already unbounded, so this module is about *exact* semantics at
the edges: cross-type equality, a signed byte codec, 64-bit zero counts, and a
Miller-Rabin test that is deterministic below 2**64.

Algorithm Design:
- Primality: Miller-Rabin with the first twelve primes as witnesses below 2**64
  (exact in that range), random witnesses above it
- Byte codec: little-endian magnitude, trailing 0xFF marks a negative value
- Modular exponentiation: builtin three-argument ``pow`` after Euclidean
  reduction of the base
"""

from __future__ import annotations

import math
import random
import secrets
from typing import Any, Optional

from .cache import CacheStats, LRUCache
from .config import BigIntOptions
from .errors import (
    ArithmeticOverflowError,
    BitSizeExceededError,
    InvalidArgumentError,
)


MAX_SAFE_INTEGER = 2**53 - 1
MIN_SAFE_INTEGER = -MAX_SAFE_INTEGER

WORD_BITS = 64
_WORD_MASK = (1 << WORD_BITS) - 1

# Deterministic for every n < 3.3 * 10**24, so certainly below 2**64.
DETERMINISTIC_WITNESSES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)
DETERMINISTIC_LIMIT = 2**64

_NEGATIVE_SIGN = 0xFF
_POSITIVE_PAD = 0x00


def _require_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise InvalidArgumentError(f"{name} must be an int, got {type(v).__name__}")
    return v


def bit_length(v: int | float) -> int:
    """
    Number of bits needed to write ``|v|`` in binary; 1 for zero.

    Floats are truncated toward zero first.
    """
    if isinstance(v, bool):
        raise InvalidArgumentError("bit_length does not accept bool")
    if isinstance(v, float):
        if not math.isfinite(v):
            raise InvalidArgumentError(f"bit_length requires a finite value: {v}")
        v = int(abs(v))
    elif not isinstance(v, int):
        raise InvalidArgumentError(f"bit_length requires a number, got {type(v).__name__}")
    if v == 0:
        return 1
    return abs(v).bit_length()


def exactly_equals(a: Any, b: Any) -> bool:
    """
    True iff ``a`` and ``b`` denote the same exact integer value.

    Mixed int/float comparisons only succeed for integral, finite floats, and
    the int side is compared exactly (no float rounding of large ints).
    """
    if isinstance(a, bool) or isinstance(b, bool):
        return False
    if isinstance(a, int) and isinstance(b, int):
        return a == b
    if isinstance(a, float) and isinstance(b, float):
        return a == b
    if isinstance(a, float) and isinstance(b, int):
        a, b = b, a
    if isinstance(a, int) and isinstance(b, float):
        if not math.isfinite(b) or not b.is_integer():
            return False
        return a == int(b)
    return False


def to_byte_array(v: int) -> bytes:
    """
    Encode ``v`` as little-endian magnitude bytes.

    Negative values get a trailing 0xFF sign byte. A non-negative value whose
    top magnitude byte is 0xFF gets a trailing 0x00 so it decodes as positive.
    """
    _require_int("v", v)
    if v == 0:
        return b"\x00"
    magnitude = abs(v)
    out = bytearray(magnitude.to_bytes((magnitude.bit_length() + 7) // 8, "little"))
    if v < 0:
        out.append(_NEGATIVE_SIGN)
    elif out[-1] == _NEGATIVE_SIGN:
        out.append(_POSITIVE_PAD)
    return bytes(out)


def from_byte_array(data: bytes | bytearray | list[int]) -> int:
    """Inverse of :func:`to_byte_array`. An empty buffer decodes to 0."""
    buf = bytes(data)
    if not buf:
        return 0
    if len(buf) >= 2 and buf[-1] == _NEGATIVE_SIGN:
        return -int.from_bytes(buf[:-1], "little")
    return int.from_bytes(buf, "little")


def get_random_bigint(bits: int, rng: Optional[random.Random] = None) -> int:
    """
    Uniform random non-negative int below ``2**bits``.

    Uses the ``secrets`` CSPRNG unless an explicit ``rng`` is supplied.
    """
    _require_int("bits", bits)
    if bits <= 0:
        raise InvalidArgumentError(f"bits must be positive: {bits}")
    if rng is not None:
        return rng.getrandbits(bits)
    return secrets.randbits(bits)


def _random_witness(n: int, rng: Optional[random.Random]) -> int:
    # Uniform enough in [2, n - 2] for a probabilistic test.
    return 2 + get_random_bigint(n.bit_length() + 8, rng) % (n - 3)


def _miller_rabin_round(n: int, d: int, s: int, a: int) -> bool:
    x = pow(a, d, n)
    if x == 1 or x == n - 1:
        return True
    for _ in range(s - 1):
        x = x * x % n
        if x == n - 1:
            return True
    return False


def is_probable_prime(v: int, iterations: int = 10, rng: Optional[random.Random] = None) -> bool:
    """
    Miller-Rabin primality test.

    Exact below 2**64. Above it a composite survives with probability at most
    ``4 ** -iterations``.
    """
    _require_int("v", v)
    _require_int("iterations", iterations)
    if iterations < 1:
        raise InvalidArgumentError(f"iterations must be positive: {iterations}")
    if v < 2:
        return False
    for p in DETERMINISTIC_WITNESSES:
        if v == p:
            return True
        if v % p == 0:
            return False

    d = v - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1

    if v < DETERMINISTIC_LIMIT:
        witnesses = DETERMINISTIC_WITNESSES
    else:
        witnesses = tuple(_random_witness(v, rng) for _ in range(iterations))
    return all(_miller_rabin_round(v, d, s, a) for a in witnesses)


def _require_non_negative_word(v: int) -> int:
    _require_int("v", v)
    if v < 0:
        raise InvalidArgumentError(f"value must be non-negative: {v}")
    return v & _WORD_MASK


def count_leading_zeros(v: int) -> int:
    """Leading zero bits of ``v`` in a 64-bit word (64 for zero)."""
    w = _require_non_negative_word(v)
    return WORD_BITS - w.bit_length()


def count_trailing_zeros(v: int) -> int:
    """Trailing zero bits of ``v`` in a 64-bit word (64 for zero)."""
    w = _require_non_negative_word(v)
    if w == 0:
        return WORD_BITS
    return (w & -w).bit_length() - 1


def get_bit(v: int, position: int) -> int:
    _require_int("v", v)
    _require_int("position", position)
    if position < 0:
        raise InvalidArgumentError(f"bit position must be non-negative: {position}")
    return (v >> position) & 1


def set_bit(v: int, position: int, bit: int) -> int:
    """Return ``v`` with bit ``position`` forced to ``bit`` (0 or 1)."""
    _require_int("v", v)
    _require_int("position", position)
    if position < 0:
        raise InvalidArgumentError(f"bit position must be non-negative: {position}")
    if bit not in (0, 1) or isinstance(bit, bool):
        raise InvalidArgumentError(f"bit must be 0 or 1: {bit!r}")
    if bit:
        return v | (1 << position)
    return v & ~(1 << position)


def mod_pow(base: int, exponent: int, modulus: int) -> int:
    """``base ** exponent mod modulus`` for ``exponent >= 0`` and ``modulus > 0``."""
    _require_int("base", base)
    _require_int("exponent", exponent)
    _require_int("modulus", modulus)
    if exponent < 0:
        raise InvalidArgumentError(f"exponent must be non-negative: {exponent}")
    if modulus <= 0:
        raise InvalidArgumentError(f"modulus must be positive: {modulus}")
    if modulus == 1:
        return 0
    return pow(base % modulus, exponent, modulus)


def is_safe_integer(v: Any) -> bool:
    """True iff ``v`` is an integer exactly representable as an IEEE double."""
    if isinstance(v, bool):
        return False
    if isinstance(v, float):
        if not math.isfinite(v) or not v.is_integer():
            return False
        v = int(v)
    if not isinstance(v, int):
        return False
    return MIN_SAFE_INTEGER <= v <= MAX_SAFE_INTEGER


def sign(v: int) -> int:
    _require_int("v", v)
    return (v > 0) - (v < 0)


def is_power_of_two(v: int) -> bool:
    _require_int("v", v)
    return v > 0 and v & (v - 1) == 0


def count_set_bits(v: int) -> int:
    """Population count of a non-negative int."""
    _require_int("v", v)
    if v < 0:
        raise InvalidArgumentError(f"value must be non-negative: {v}")
    return bin(v).count("1")


def to_number(v: int) -> float:
    """Convert to float, refusing values a double cannot hold exactly."""
    _require_int("v", v)
    if not MIN_SAFE_INTEGER <= v <= MAX_SAFE_INTEGER:
        raise ArithmeticOverflowError(f"{v} is outside the safe float range")
    return float(v)


class BigIntOperations:
    """
    Configured facade over the primitives.

    With ``enable_cache`` the results of ``bit_length`` and ``is_probable_prime``
    are memoized in an LRU of ``cache_size`` entries. ``is_probable_prime`` is
    only cached below 2**64, where it is deterministic. With ``strict``, any
    operand wider than ``max_bits`` raises ``BitSizeExceededError``.
    """

    def __init__(self, options: Optional[BigIntOptions] = None) -> None:
        self.options = options if options is not None else BigIntOptions()
        self._bit_length_cache: LRUCache[int, int] = LRUCache(self.options.cache_size)
        self._prime_cache: LRUCache[tuple[int, int], bool] = LRUCache(self.options.cache_size)

    def _check(self, operation: str, *values: int) -> None:
        if not self.options.strict:
            return
        for v in values:
            if isinstance(v, int) and not isinstance(v, bool):
                bits = bit_length(v)
                if bits > self.options.max_bits:
                    raise BitSizeExceededError(operation, self.options.max_bits, bits)

    def bit_length(self, v: int | float) -> int:
        if not self.options.enable_cache or not isinstance(v, int) or isinstance(v, bool):
            result = bit_length(v)
            self._check("bit_length", v)
            return result
        cached = self._bit_length_cache.get(v)
        if cached is not None:
            return cached
        self._check("bit_length", v)
        result = bit_length(v)
        self._bit_length_cache.set(v, result)
        return result

    def exactly_equals(self, a: Any, b: Any) -> bool:
        return exactly_equals(a, b)

    def to_byte_array(self, v: int) -> bytes:
        self._check("to_byte_array", v)
        return to_byte_array(v)

    def from_byte_array(self, data: bytes | bytearray | list[int]) -> int:
        v = from_byte_array(data)
        self._check("from_byte_array", v)
        return v

    def get_random_bigint(self, bits: int, rng: Optional[random.Random] = None) -> int:
        if self.options.strict and isinstance(bits, int) and bits > self.options.max_bits:
            raise BitSizeExceededError("get_random_bigint", self.options.max_bits, bits)
        return get_random_bigint(bits, rng)

    def is_probable_prime(self, v: int, iterations: int = 10) -> bool:
        self._check("is_probable_prime", v)
        cacheable = (
            self.options.enable_cache
            and isinstance(v, int)
            and not isinstance(v, bool)
            and v < DETERMINISTIC_LIMIT
        )
        if not cacheable:
            return is_probable_prime(v, iterations)
        key = (v, iterations)
        cached = self._prime_cache.get(key)
        if cached is not None:
            return cached
        result = is_probable_prime(v, iterations)
        self._prime_cache.set(key, result)
        return result

    def count_leading_zeros(self, v: int) -> int:
        return count_leading_zeros(v)

    def count_trailing_zeros(self, v: int) -> int:
        return count_trailing_zeros(v)

    def get_bit(self, v: int, position: int) -> int:
        self._check("get_bit", v)
        return get_bit(v, position)

    def set_bit(self, v: int, position: int, bit: int) -> int:
        self._check("set_bit", v)
        return set_bit(v, position, bit)

    def mod_pow(self, base: int, exponent: int, modulus: int) -> int:
        self._check("mod_pow", base, modulus)
        return mod_pow(base, exponent, modulus)

    def clear_cache(self) -> None:
        self._bit_length_cache.clear()
        self._prime_cache.clear()

    def cache_stats(self) -> dict[str, CacheStats]:
        return {
            "bit_length": self._bit_length_cache.stats(),
            "is_probable_prime": self._prime_cache.stats(),
        }


def create_bigint_operations(options: Optional[BigIntOptions] = None) -> BigIntOperations:
    return BigIntOperations(options)
