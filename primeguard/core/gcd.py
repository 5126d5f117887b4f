"""
Greatest common divisor family.

All functions take Python ints of any size. ``strict=True`` enforces the
``MAX_SUPPORTED_BITS`` operand limit; ``lcm`` additionally refuses products
whose bit length could exceed that limit.
"""

from __future__ import annotations

from typing import Any, Tuple

from .config import MAX_SUPPORTED_BITS
from .errors import ArithmeticOverflowError, BitSizeExceededError, InvalidArgumentError


def _require_int(name: str, v: Any) -> int:
    if not isinstance(v, int) or isinstance(v, bool):
        raise InvalidArgumentError(f"{name} must be an int, got {type(v).__name__}")
    return v


def check_bits(operation: str, *values: int, max_bits: int = MAX_SUPPORTED_BITS) -> None:
    """Raise ``BitSizeExceededError`` if any operand is wider than ``max_bits``."""
    for v in values:
        bits = abs(v).bit_length()
        if bits > max_bits:
            raise BitSizeExceededError(operation, max_bits, bits)


def gcd(a: int, b: int, *, strict: bool = False) -> int:
    """Non-negative gcd; ``gcd(0, 0) == 0``."""
    _require_int("a", a)
    _require_int("b", b)
    if strict:
        check_bits("gcd", a, b)
    a, b = abs(a), abs(b)
    while b:
        a, b = b, a % b
    return a


def extended_gcd(a: int, b: int, *, strict: bool = False) -> Tuple[int, int, int]:
    """
    Return ``(g, x, y)`` with ``a*x + b*y == g`` and ``g >= 0``.

    Iterative form of the extended Euclidean algorithm.
    """
    _require_int("a", a)
    _require_int("b", b)
    if strict:
        check_bits("extended_gcd", a, b)
    old_r, r = a, b
    old_x, x = 1, 0
    old_y, y = 0, 1
    while r:
        q = old_r // r
        old_r, r = r, old_r - q * r
        old_x, x = x, old_x - q * x
        old_y, y = y, old_y - q * y
    if old_r < 0:
        old_r, old_x, old_y = -old_r, -old_x, -old_y
    return old_r, old_x, old_y


def lcm(a: int, b: int, *, strict: bool = False) -> int:
    """Non-negative least common multiple; 0 if either operand is 0."""
    _require_int("a", a)
    _require_int("b", b)
    if strict:
        check_bits("lcm", a, b)
        combined = abs(a).bit_length() + abs(b).bit_length()
        if combined > MAX_SUPPORTED_BITS:
            raise ArithmeticOverflowError(
                f"lcm of {abs(a).bit_length()}-bit and {abs(b).bit_length()}-bit operands "
                f"may exceed {MAX_SUPPORTED_BITS} bits"
            )
    if a == 0 or b == 0:
        return 0
    g = gcd(a, b)
    return (abs(a) // g) * abs(b)


def binary_gcd(a: int, b: int, *, strict: bool = False) -> int:
    """Stein's algorithm: shifts and subtractions only."""
    _require_int("a", a)
    _require_int("b", b)
    if strict:
        check_bits("binary_gcd", a, b)
    a, b = abs(a), abs(b)
    if a == 0:
        return b
    if b == 0:
        return a
    shift = ((a | b) & -(a | b)).bit_length() - 1
    a >>= (a & -a).bit_length() - 1
    while b:
        b >>= (b & -b).bit_length() - 1
        if a > b:
            a, b = b, a
        b -= a
    return a << shift


def is_coprime(a: int, b: int) -> bool:
    return gcd(a, b) == 1
