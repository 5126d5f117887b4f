"""
Modular arithmetic over arbitrary-size integers.

Every reduction goes through :func:`mod`, which returns the Euclidean
remainder in ``[0, |m|)`` regardless of the operands' signs.

Strict mode (``strict=True``) refuses operands wider than
``MAX_SUPPORTED_BITS`` and, for ``mod_pow``, exponents wider than
``MAX_EXPONENT_BITS``.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Callable, Hashable, Optional, Tuple

from .bigint import is_probable_prime
from .cache import CacheStats, LRUCache
from .config import ModularOptions
from .errors import BitSizeExceededError, InvalidArgumentError, NoInverseError
from .gcd import binary_gcd, check_bits, extended_gcd, gcd, lcm


logger = logging.getLogger(__name__)

MAX_EXPONENT_BITS = 10_000


def _require_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise InvalidArgumentError(f"{name} must be an int, got {type(v).__name__}")
    return v


def mod(a: int, m: int, *, strict: bool = False) -> int:
    """Euclidean remainder of ``a`` by ``|m|``."""
    _require_int("a", a)
    _require_int("m", m)
    if m == 0:
        raise InvalidArgumentError("modulus must be non-zero")
    if strict:
        check_bits("mod", a, m)
    return a % abs(m)


def mod_add(a: int, b: int, m: int, *, strict: bool = False) -> int:
    _require_int("a", a)
    _require_int("b", b)
    if strict:
        check_bits("mod_add", a, b, m)
    return mod(a + b, m)


def mod_sub(a: int, b: int, m: int, *, strict: bool = False) -> int:
    _require_int("a", a)
    _require_int("b", b)
    if strict:
        check_bits("mod_sub", a, b, m)
    return mod(a - b, m)


def mod_mul(a: int, b: int, m: int, *, strict: bool = False) -> int:
    _require_int("a", a)
    _require_int("b", b)
    if strict:
        check_bits("mod_mul", a, b, m)
    return mod(a * b, m)


def mod_inverse(a: int, m: int, *, strict: bool = False) -> int:
    """
    Multiplicative inverse of ``a`` modulo ``|m|``.

    Raises ``NoInverseError`` when ``a`` is congruent to 0 or shares a factor
    with ``m``.
    """
    _require_int("a", a)
    _require_int("m", m)
    if m == 0:
        raise InvalidArgumentError("modulus must be non-zero")
    if strict:
        check_bits("mod_inverse", a, m)
    m = abs(m)
    reduced = a % m
    if reduced == 0:
        raise NoInverseError(a, m, m)
    g, x, _ = extended_gcd(reduced, m)
    if g != 1:
        raise NoInverseError(a, m, g)
    return x % m


def mod_pow(base: int, exponent: int, m: int, *, strict: bool = False) -> int:
    """
    ``base ** exponent`` modulo ``|m|`` by right-to-left square-and-multiply.

    A negative exponent inverts the base first.
    """
    _require_int("base", base)
    _require_int("exponent", exponent)
    _require_int("m", m)
    if m == 0:
        raise InvalidArgumentError("modulus must be non-zero")
    if strict:
        check_bits("mod_pow", base, m)
        exp_bits = abs(exponent).bit_length()
        if exp_bits > MAX_EXPONENT_BITS:
            raise BitSizeExceededError("mod_pow exponent", MAX_EXPONENT_BITS, exp_bits)
    m = abs(m)
    if m == 1:
        return 0
    if exponent < 0:
        base = mod_inverse(base, m)
        exponent = -exponent

    result = 1
    b = base % m
    e = exponent
    while e > 0:
        if e & 1:
            result = result * b % m
        b = b * b % m
        e >>= 1
    return result


def integer_sqrt(n: int, *, strict: bool = False) -> int:
    """Floor square root of a non-negative int."""
    _require_int("n", n)
    if n < 0:
        raise InvalidArgumentError(f"square root of negative number: {n}")
    if strict:
        check_bits("integer_sqrt", n)
    return math.isqrt(n)


def is_perfect_square(n: int, *, strict: bool = False) -> bool:
    _require_int("n", n)
    if n < 0:
        return False
    r = integer_sqrt(n, strict=strict)
    return r * r == n


def _distinct_prime_factors(n: int) -> list[int]:
    out: list[int] = []
    d = 2
    while d * d <= n:
        if n % d == 0:
            out.append(d)
            while n % d == 0:
                n //= d
        d += 1 if d == 2 else 2
    if n > 1:
        out.append(n)
    return out


def primitive_root(p: int, *, strict: bool = False) -> int:
    """
    Smallest generator of the multiplicative group modulo prime ``p``.

    ``g`` generates the group iff ``g ** ((p - 1) / q) != 1 (mod p)`` for each
    prime ``q`` dividing ``p - 1``.
    """
    _require_int("p", p)
    if strict:
        check_bits("primitive_root", p)
    if not is_probable_prime(p):
        raise InvalidArgumentError(f"primitive_root requires a prime modulus: {p}")
    if p == 2:
        return 1
    phi = p - 1
    qs = _distinct_prime_factors(phi)
    for g in range(2, p):
        if all(pow(g, phi // q, p) != 1 for q in qs):
            return g
    raise AssertionError(f"no primitive root found for prime {p}")


def _unordered(a: int, b: int) -> frozenset:
    return frozenset((a, b))


class ModularOperations:
    """
    Memoizing facade over the modular functions.

    Each operation owns an LRU of ``cache_size`` entries. The gcd, lcm and
    binary gcd caches key on the unordered operand pair since those results
    are symmetric; ``extended_gcd`` is not and keys on the ordered pair.
    """

    def __init__(self, options: Optional[ModularOptions] = None) -> None:
        self.options = options if options is not None else ModularOptions()
        size = self.options.cache_size
        self._caches: dict[str, LRUCache[Hashable, Any]] = {
            name: LRUCache(size)
            for name in ("mod_inverse", "gcd", "lcm", "extended_gcd", "binary_gcd", "mod_pow")
        }

    def _cached(self, name: str, key: Hashable, compute: Callable[[], Any]) -> Any:
        if not self.options.enable_cache:
            return compute()
        cache = self._caches[name]
        hit = cache.get(key)
        if hit is not None:
            return hit
        result = compute()
        cache.set(key, result)
        return result

    @property
    def strict(self) -> bool:
        return self.options.strict

    def mod(self, a: int, m: int) -> int:
        return mod(a, m, strict=self.strict)

    def mod_add(self, a: int, b: int, m: int) -> int:
        return mod_add(a, b, m, strict=self.strict)

    def mod_sub(self, a: int, b: int, m: int) -> int:
        return mod_sub(a, b, m, strict=self.strict)

    def mod_mul(self, a: int, b: int, m: int) -> int:
        return mod_mul(a, b, m, strict=self.strict)

    def mod_inverse(self, a: int, m: int) -> int:
        return self._cached("mod_inverse", (a, m), lambda: mod_inverse(a, m, strict=self.strict))

    def mod_pow(self, base: int, exponent: int, m: int) -> int:
        return self._cached(
            "mod_pow", (base, exponent, m), lambda: mod_pow(base, exponent, m, strict=self.strict)
        )

    def gcd(self, a: int, b: int) -> int:
        return self._cached("gcd", _unordered(a, b), lambda: gcd(a, b, strict=self.strict))

    def lcm(self, a: int, b: int) -> int:
        return self._cached("lcm", _unordered(a, b), lambda: lcm(a, b, strict=self.strict))

    def extended_gcd(self, a: int, b: int) -> Tuple[int, int, int]:
        return self._cached("extended_gcd", (a, b), lambda: extended_gcd(a, b, strict=self.strict))

    def binary_gcd(self, a: int, b: int) -> int:
        return self._cached(
            "binary_gcd", _unordered(a, b), lambda: binary_gcd(a, b, strict=self.strict)
        )

    def integer_sqrt(self, n: int) -> int:
        return integer_sqrt(n, strict=self.strict)

    def is_perfect_square(self, n: int) -> bool:
        return is_perfect_square(n, strict=self.strict)

    def primitive_root(self, p: int) -> int:
        return primitive_root(p, strict=self.strict)

    def clear_cache(self) -> None:
        for cache in self._caches.values():
            cache.clear()
        logger.debug("modular operation caches cleared")

    def cache_stats(self) -> dict[str, CacheStats]:
        return {name: cache.stats() for name, cache in self._caches.items()}


def create_modular_operations(options: Optional[ModularOptions] = None) -> ModularOperations:
    return ModularOperations(options)
